from __future__ import annotations

import logging
import os
import time
from typing import Callable, Optional

from twallet.application.dtos import (
    FieldSpecDTO,
    InstanceFieldValueDTO,
    InstanceRecordDTO,
    TemplateSpecDTO,
)
from twallet.domain.cards import ExpireUnit, RegularExpression
from twallet.domain.shared import IssuanceClientProtocol
from twallet.envs.client_env import get_settings
from twallet.infrastructure.wallet.issuer_client import WalletIssuerClient


def member_card_template(serial_no: str) -> TemplateSpecDTO:
    # The first field is shown in the bottom-left corner of the card.
    return TemplateSpecDTO(
        serial_no=serial_no,
        name="Member Card",
        expire_num="1",
        expire_unit=ExpireUnit.MONTH,
        expose=False,
        fields=[
            FieldSpecDTO(
                type="BASIC",
                cname="Name",
                ename="name",
                regular_expression_id=RegularExpression.CJK_ALPHANUMERIC_UNDERSCORE,
                card_cover_data=1,
            )
        ],
    )


def issue_member_card(
    client: IssuanceClientProtocol,
    template_id: int,
    holder_name: str,
    on_activated: Optional[Callable[[str], None]] = None,
) -> InstanceRecordDTO:
    return client.create_instance(
        template_id,
        [InstanceFieldValueDTO(ename="name", content=holder_name)],
        on_activated=on_activated,
    )


def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    template_id = os.getenv("TWALLET_TEMPLATE_ID")
    holder_name = os.getenv("TWALLET_HOLDER_NAME")

    with WalletIssuerClient.from_settings(settings) as client:
        serial_no = f"t_{int(time.time())}"
        client.create_template(member_card_template(serial_no))
        print(f"Template {serial_no} created")

        if not (template_id and holder_name):
            return

        record = issue_member_card(
            client,
            int(template_id),
            holder_name,
            on_activated=lambda vc_cid: print(f"Card activated, vcCid={vc_cid}"),
        )
        print(f"Card {record.id} issued")
        print(f"QR code: {record.qr_code}")
        print(f"Deep link: {record.deep_link}")

        poller = client.pollers[record.id][-1]
        poller.join()
        print(f"Activation polling finished: {poller.state.value}")


if __name__ == "__main__":
    main()
