"""Test fixtures for in-memory fakes and canned data."""

from .fake_wallet_service import FakeWalletService, ScriptedStatus
from .wallet_data import (
    ACCESS_TOKEN,
    BASE_URL,
    FAST_POLLING,
    INSTANCES,
    TEMPLATES,
    instance_record,
    status_path,
)

__all__ = [
    "ACCESS_TOKEN",
    "BASE_URL",
    "FAST_POLLING",
    "INSTANCES",
    "TEMPLATES",
    "FakeWalletService",
    "ScriptedStatus",
    "instance_record",
    "status_path",
]
