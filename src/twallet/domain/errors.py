"""Domain-specific exceptions."""

from __future__ import annotations

from typing import Any, Optional


class WalletClientError(Exception):
    """Base class for every error raised by the wallet issuer client."""


class PayloadEncodingError(WalletClientError):
    """Raised when a request payload cannot be serialized to JSON."""


class TransportError(WalletClientError):
    """Raised when the HTTP exchange itself fails (connect, DNS, timeout)."""


class MalformedResponseError(WalletClientError):
    """Raised when a response body cannot be decoded into the expected shape."""


class UnexpectedStatusError(WalletClientError):
    """Raised when the service answers with a status code other than the expected one.

    ``detail`` is the service's own ``detail`` message when present, otherwise
    the whole decoded envelope.
    """

    def __init__(
        self,
        status_code: int,
        detail: Any,
        envelope: Optional[dict[str, Any]] = None,
    ) -> None:
        self.status_code = status_code
        self.detail = detail
        self.envelope = envelope or {}
        super().__init__(f"unexpected response code: {detail}")
