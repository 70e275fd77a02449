"""Card domain constants: expiry units, validation policies and template category."""

from __future__ import annotations

from enum import Enum, IntEnum

# Category identifier the service expects for issuer-defined templates.
TEMPLATE_CATEGORY = 4

# Field type used for plain text fields.
BASIC_FIELD_TYPE = "BASIC"


class ExpireUnit(str, Enum):
    """Unit of a template's validity period."""

    DAY = "DAY"
    MONTH = "MONTH"
    YEAR = "YEAR"


class RegularExpression(IntEnum):
    """Server-defined validation policies a template field can be bound to."""

    ENGLISH_ONLY = 4
    ALPHANUMERIC = 5
    EMAIL = 6
    TW_MOBILE_PHONE = 7
    NO_SPECIAL_SYMBOLS = 8
    CJK_ALPHANUMERIC_UNDERSCORE = 9
    ALPHANUMERIC_UNDERSCORE = 10
    TW_NATIONAL_ID = 11
    ROC_BIRTH_DATE = 12
    RESIDENT_CERTIFICATE_NO = 14
    FOREIGNER_UNIFORM_ID = 15
    GENDER = 16
    NATIONALITY = 17
    BIRTH_DATE = 18
    POSTAL_CODE = 19
    PASSPORT_NO = 20
    CHINESE_ONLY = 22
    THREE_DIGITS = 23
    URL = 101
