from __future__ import annotations

import logging
from typing import Any, Optional, Sequence, Type, TYPE_CHECKING
from types import TracebackType

import httpx

from ...application.cover import encode_cover
from ...application.dtos import (
    CreateInstanceRequestDTO,
    InstanceFieldValueDTO,
    InstanceRecordDTO,
    InstanceStatusDTO,
    TemplateSpecDTO,
)
from ...application.polling import (
    ActivationCallback,
    ActivationPoller,
    AsyncActivationCallback,
    AsyncActivationPoller,
    PollingConfig,
)
from ...domain.cards import TEMPLATE_CATEGORY
from ...domain.errors import UnexpectedStatusError
from ..http.http_client import AsyncHttpClient, HttpClient
from .envelope import decode_envelope, decode_typed, encode_payload, extract_detail

if TYPE_CHECKING:
    from ...envs.client_env import Settings

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://issuer-sandbox.wallet.gov.tw/api"

TEMPLATES_PATH = "/vc-items"
INSTANCES_PATH = "/vc-item-data"

ACCEPT_HEADER = "application/json, text/plain, */*"


def build_template_payload(spec: TemplateSpecDTO) -> dict[str, Any]:
    """Request body for template creation; field order is preserved."""
    payload: dict[str, Any] = {
        "serialNo": spec.serial_no,
        "name": spec.name,
        "category": TEMPLATE_CATEGORY,
        "expose": spec.expose,
        "lengthExpire": spec.expire_num,
        "unitTypeExpire": spec.expire_unit.value,
        "vcItemFieldDTOList": [
            field.model_dump(by_alias=True, mode="json") for field in spec.fields
        ],
    }
    cover = encode_cover(spec.cover)
    if cover is not None:
        payload["cover"] = cover
    return payload


def build_instance_payload(
    template_id: int, fields: Sequence[InstanceFieldValueDTO]
) -> dict[str, Any]:
    dto = CreateInstanceRequestDTO(vc_id=template_id, fields=list(fields))
    return dto.model_dump(by_alias=True, mode="json")


def _headers(access_token: str, with_body: bool) -> dict[str, str]:
    headers = {"accept": ACCEPT_HEADER, "access-token": access_token}
    if with_body:
        headers["content-type"] = "application/json"
    return headers


def _check_status(
    operation: str, status_code: int, expected: int, envelope: dict[str, Any]
) -> None:
    if status_code != expected:
        logger.error(
            "%s: unexpected status %d, response body: %s",
            operation,
            status_code,
            envelope,
            extra={"status": status_code},
        )
        raise UnexpectedStatusError(status_code, extract_detail(envelope), envelope)
    logger.debug("%s: response %s", operation, envelope)


def _status_path(instance_id: int) -> str:
    return f"{INSTANCES_PATH}/{instance_id}"


def _prune_finished(pollers: dict[int, list[Any]]) -> None:
    """Drop sessions that reached a terminal state from a poller registry."""
    for instance_id in list(pollers):
        running = [poller for poller in pollers[instance_id] if not poller.done]
        if running:
            pollers[instance_id] = running
        else:
            del pollers[instance_id]


class WalletIssuerClient:
    """Synchronous client for the digital wallet issuer API.

    Every request carries the issuer's access token. Activation pollers
    started by ``create_instance`` are tracked in ``pollers``, one list per
    instance id in start order, and cancelled by ``close()``. Finished
    sessions are dropped from ``pollers`` whenever a new one is started.
    """

    def __init__(
        self,
        access_token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        polling: Optional[PollingConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._access_token = access_token
        self._http = HttpClient(base_url, timeout=timeout, transport=transport)
        self._polling = polling or PollingConfig()
        self.pollers: dict[int, list[ActivationPoller]] = {}

    @classmethod
    def from_settings(
        cls, settings: "Settings", transport: Optional[httpx.BaseTransport] = None
    ) -> "WalletIssuerClient":
        return cls(
            settings.access_token,
            base_url=settings.base_url,
            timeout=settings.http_timeout,
            polling=settings.polling_config(),
            transport=transport,
        )

    def _exchange(
        self, method: str, path: str, payload: Optional[dict[str, Any]] = None
    ) -> tuple[int, dict[str, Any], bytes]:
        body = encode_payload(payload) if payload is not None else None
        status_code, content = self._http.request(
            method,
            path,
            headers=_headers(self._access_token, body is not None),
            content=body,
        )
        return status_code, decode_envelope(content), content

    def create_template(self, spec: TemplateSpecDTO) -> dict[str, Any]:
        """Register a card template. Success is HTTP 201 only."""
        status_code, envelope, _ = self._exchange(
            "POST", TEMPLATES_PATH, build_template_payload(spec)
        )
        _check_status("create_template", status_code, httpx.codes.CREATED, envelope)
        return envelope

    def create_instance(
        self,
        template_id: int,
        fields: Sequence[InstanceFieldValueDTO],
        on_activated: Optional[ActivationCallback] = None,
    ) -> InstanceRecordDTO:
        """Create a card instance; optionally watch for its activation.

        Returns as soon as the instance exists. If ``on_activated`` is given a
        background poller calls it with the activation id once the holder has
        scanned the card.
        """
        status_code, envelope, content = self._exchange(
            "POST", INSTANCES_PATH, build_instance_payload(template_id, fields)
        )
        _check_status("create_instance", status_code, httpx.codes.CREATED, envelope)
        record = decode_typed(content, InstanceRecordDTO)
        if on_activated is not None:
            self.watch_activation(record.id, on_activated)
        return record

    def fetch_status(self, instance_id: int) -> Optional[str]:
        """Return the activation id (vcCid) of an instance, None if not activated yet."""
        status_code, envelope, content = self._exchange(
            "GET", _status_path(instance_id)
        )
        _check_status("fetch_status", status_code, httpx.codes.OK, envelope)
        return decode_typed(content, InstanceStatusDTO).vc_cid or None

    def watch_activation(
        self,
        instance_id: int,
        on_activated: ActivationCallback,
        config: Optional[PollingConfig] = None,
    ) -> ActivationPoller:
        """Start polling an existing instance for activation."""
        poller = ActivationPoller(
            lambda: self.fetch_status(instance_id),
            on_activated,
            config or self._polling,
            name=f"activation-poller-{instance_id}",
        )
        _prune_finished(self.pollers)
        self.pollers.setdefault(instance_id, []).append(poller)
        return poller.start()

    def close(self) -> None:
        for sessions in self.pollers.values():
            for poller in sessions:
                poller.cancel()
        self.pollers.clear()
        self._http.close()

    def __enter__(self) -> "WalletIssuerClient":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.close()


class AsyncWalletIssuerClient:
    """Asynchronous client for the digital wallet issuer API.

    Mirrors ``WalletIssuerClient``; activation pollers run as asyncio tasks.
    """

    def __init__(
        self,
        access_token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        polling: Optional[PollingConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._access_token = access_token
        self._http = AsyncHttpClient(base_url, timeout=timeout, transport=transport)
        self._polling = polling or PollingConfig()
        self.pollers: dict[int, list[AsyncActivationPoller]] = {}

    @classmethod
    def from_settings(
        cls,
        settings: "Settings",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "AsyncWalletIssuerClient":
        return cls(
            settings.access_token,
            base_url=settings.base_url,
            timeout=settings.http_timeout,
            polling=settings.polling_config(),
            transport=transport,
        )

    async def _exchange(
        self, method: str, path: str, payload: Optional[dict[str, Any]] = None
    ) -> tuple[int, dict[str, Any], bytes]:
        body = encode_payload(payload) if payload is not None else None
        status_code, content = await self._http.request(
            method,
            path,
            headers=_headers(self._access_token, body is not None),
            content=body,
        )
        return status_code, decode_envelope(content), content

    async def create_template(self, spec: TemplateSpecDTO) -> dict[str, Any]:
        status_code, envelope, _ = await self._exchange(
            "POST", TEMPLATES_PATH, build_template_payload(spec)
        )
        _check_status("create_template", status_code, httpx.codes.CREATED, envelope)
        return envelope

    async def create_instance(
        self,
        template_id: int,
        fields: Sequence[InstanceFieldValueDTO],
        on_activated: Optional[AsyncActivationCallback] = None,
    ) -> InstanceRecordDTO:
        status_code, envelope, content = await self._exchange(
            "POST", INSTANCES_PATH, build_instance_payload(template_id, fields)
        )
        _check_status("create_instance", status_code, httpx.codes.CREATED, envelope)
        record = decode_typed(content, InstanceRecordDTO)
        if on_activated is not None:
            self.watch_activation(record.id, on_activated)
        return record

    async def fetch_status(self, instance_id: int) -> Optional[str]:
        status_code, envelope, content = await self._exchange(
            "GET", _status_path(instance_id)
        )
        _check_status("fetch_status", status_code, httpx.codes.OK, envelope)
        return decode_typed(content, InstanceStatusDTO).vc_cid or None

    def watch_activation(
        self,
        instance_id: int,
        on_activated: AsyncActivationCallback,
        config: Optional[PollingConfig] = None,
    ) -> AsyncActivationPoller:
        poller = AsyncActivationPoller(
            lambda: self.fetch_status(instance_id),
            on_activated,
            config or self._polling,
            name=f"activation-poller-{instance_id}",
        )
        _prune_finished(self.pollers)
        self.pollers.setdefault(instance_id, []).append(poller)
        return poller.start()

    async def aclose(self) -> None:
        sessions = [poller for pollers in self.pollers.values() for poller in pollers]
        self.pollers.clear()
        for poller in sessions:
            poller.cancel()
        for poller in sessions:
            await poller.wait()
        await self._http.aclose()

    async def __aenter__(self) -> "AsyncWalletIssuerClient":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        await self.aclose()
