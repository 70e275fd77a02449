"""Data Transfer Objects for the card issuance application layer.

Field names follow Python conventions; the wire names used by the issuance
service are camelCase aliases. Dump with ``by_alias=True`` when building
request payloads.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..domain.cards import BASIC_FIELD_TYPE, ExpireUnit, RegularExpression


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FieldSpecDTO(_WireModel):
    """One field of a card template.

    The first field of a template is rendered as the caption on the card face,
    so the order of ``TemplateSpecDTO.fields`` is significant.
    """

    type: str = BASIC_FIELD_TYPE
    cname: str = Field(..., min_length=1)
    ename: str = Field(..., min_length=1)
    regular_expression_id: RegularExpression
    card_cover_data: int = 0


class TemplateSpecDTO(_WireModel):
    """Everything needed to register a card template."""

    serial_no: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    expire_num: str = Field(..., alias="lengthExpire", pattern=r"^\d{1,4}$")
    expire_unit: ExpireUnit = Field(..., alias="unitTypeExpire")
    expose: bool = False
    fields: list[FieldSpecDTO] = Field(
        default_factory=list, alias="vcItemFieldDTOList"
    )
    # Raw image bytes; turned into a data URI only if the type is supported.
    cover: Optional[bytes] = Field(default=None, exclude=True)


class InstanceFieldValueDTO(_WireModel):
    """Content for one field of a card instance."""

    ename: str = Field(..., min_length=1)
    content: str


class CreateInstanceRequestDTO(_WireModel):
    """Request body for creating a card instance from a template."""

    vc_id: int
    fields: list[InstanceFieldValueDTO]


class InstanceRecordDTO(_WireModel):
    """Card instance as returned by the service after creation."""

    id: int
    business_id: Optional[str] = None
    content: Optional[str] = None
    cr_datetime: Optional[str] = None
    cr_user: Optional[int] = None
    deep_link: Optional[str] = None
    expired: Optional[str] = None
    pure_content: Optional[str] = None
    qr_code: Optional[str] = None
    schedule_revoke_message: Optional[str] = None
    transaction_id: Optional[str] = None
    valid: Optional[int] = None
    vc_cid: Optional[str] = None
    vc_item_name: Optional[str] = None


class InstanceStatusDTO(_WireModel):
    """Status of a card instance; ``vc_cid`` is set once the holder activated it."""

    model_config = ConfigDict(extra="allow")

    vc_cid: Optional[str] = None
