"""JSON envelope codec for the issuance service.

A response body is decoded twice: once permissively into a plain dict, used
for status checks and error messages, and once strictly into a pydantic model
on the success path only.
"""

from __future__ import annotations

import json
from typing import Any, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ...domain.errors import MalformedResponseError, PayloadEncodingError

ModelT = TypeVar("ModelT", bound=BaseModel)


def encode_payload(value: Any) -> bytes:
    """Serialize a request payload to JSON bytes."""
    try:
        return json.dumps(value, ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise PayloadEncodingError(f"failed to marshal request payload: {e}") from e


def decode_envelope(body: bytes) -> dict[str, Any]:
    """Decode a response body into an untyped dict."""
    if not body.strip():
        return {}
    try:
        envelope = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedResponseError(f"failed to decode response body: {e}") from e
    if not isinstance(envelope, dict):
        raise MalformedResponseError(
            "failed to decode response body: expected a JSON object, "
            f"got {type(envelope).__name__}"
        )
    return envelope


def decode_typed(body: bytes, model: Type[ModelT]) -> ModelT:
    """Decode a response body strictly into ``model``."""
    try:
        return model.model_validate_json(body)
    except ValidationError as e:
        raise MalformedResponseError(f"failed to unmarshal response body: {e}") from e


def extract_detail(envelope: dict[str, Any]) -> Any:
    """Best-effort human readable error message from a decoded envelope."""
    if "detail" in envelope:
        return envelope["detail"]
    return envelope
