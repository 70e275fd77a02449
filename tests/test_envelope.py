"""Tests for the JSON envelope codec."""

from __future__ import annotations

import pytest

from twallet.application.dtos import InstanceStatusDTO
from twallet.domain.errors import MalformedResponseError, PayloadEncodingError
from twallet.infrastructure.wallet.envelope import (
    decode_envelope,
    decode_typed,
    encode_payload,
    extract_detail,
)


def test_encode_payload_keeps_non_ascii() -> None:
    assert encode_payload({"name": "會員卡"}) == '{"name": "會員卡"}'.encode("utf-8")


def test_encode_payload_rejects_unserializable_values() -> None:
    with pytest.raises(PayloadEncodingError):
        encode_payload({"cover": b"raw bytes"})


def test_decode_envelope_returns_dict() -> None:
    assert decode_envelope(b'{"detail": "bad token"}') == {"detail": "bad token"}


def test_decode_envelope_empty_body() -> None:
    assert decode_envelope(b"") == {}


@pytest.mark.parametrize("body", [b"<html>502</html>", b"[1, 2]", b"\xff\xfe"])
def test_decode_envelope_rejects_non_objects(body: bytes) -> None:
    with pytest.raises(MalformedResponseError):
        decode_envelope(body)


def test_decode_typed_reports_shape_errors() -> None:
    with pytest.raises(MalformedResponseError) as exc_info:
        decode_typed(b'{"vcCid": 12}', InstanceStatusDTO)
    assert "failed to unmarshal" in str(exc_info.value)


def test_decode_typed_and_envelope_are_separate_objects() -> None:
    body = b'{"vcCid": "cid-1", "other": true}'
    envelope = decode_envelope(body)
    status = decode_typed(body, InstanceStatusDTO)
    assert envelope["vcCid"] == status.vc_cid == "cid-1"
    assert not isinstance(status, dict)


def test_extract_detail_prefers_detail_field() -> None:
    assert extract_detail({"detail": "serialNo exists", "status": 400}) == (
        "serialNo exists"
    )


def test_extract_detail_falls_back_to_envelope() -> None:
    envelope = {"title": "Bad Request", "status": 400}
    assert extract_detail(envelope) == envelope
