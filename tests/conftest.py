"""Shared pytest fixtures for wallet issuer client tests."""

from __future__ import annotations

from typing import AsyncGenerator, Generator

import pytest

from twallet.application.dtos import FieldSpecDTO, TemplateSpecDTO
from twallet.domain.cards import ExpireUnit
from twallet.infrastructure.wallet.issuer_client import (
    AsyncWalletIssuerClient,
    WalletIssuerClient,
)
from tests.fixtures import ACCESS_TOKEN, BASE_URL, FAST_POLLING, FakeWalletService


@pytest.fixture
def fake_service() -> FakeWalletService:
    return FakeWalletService()


@pytest.fixture
def client(
    fake_service: FakeWalletService,
) -> Generator[WalletIssuerClient, None, None]:
    with WalletIssuerClient(
        ACCESS_TOKEN,
        base_url=BASE_URL,
        polling=FAST_POLLING,
        transport=fake_service.transport(),
    ) as c:
        yield c


@pytest.fixture
async def async_client(
    fake_service: FakeWalletService,
) -> AsyncGenerator[AsyncWalletIssuerClient, None]:
    async with AsyncWalletIssuerClient(
        ACCESS_TOKEN,
        base_url=BASE_URL,
        polling=FAST_POLLING,
        transport=fake_service.transport(),
    ) as c:
        yield c


@pytest.fixture
def member_card() -> TemplateSpecDTO:
    """Template used by the end-to-end scenario."""
    return TemplateSpecDTO(
        serial_no="t_1700000000",
        name="Member Card",
        expire_num="1",
        expire_unit=ExpireUnit.MONTH,
        expose=False,
        fields=[
            FieldSpecDTO(
                type="BASIC",
                cname="Name",
                ename="name",
                regular_expression_id=9,
                card_cover_data=1,
            )
        ],
    )
