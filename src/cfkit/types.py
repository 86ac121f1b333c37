from __future__ import annotations

"""
Cloudflare Types and Enums
"""

import typing as t
from enum import Enum

from pydantic_core import core_schema


class ExtensibleEnum(str):
    """
    A string enum that tolerates values it does not know about.

    Known values are declared as class attributes and normalized to the
    declared spelling. Unknown wire values are preserved verbatim, so
    they round-trip unchanged, and ``is_known`` reports which case
    applies. Comparison ignores case.

    >>> R2Jurisdiction('EU') == R2Jurisdiction.EU
    True
    >>> R2Jurisdiction('mars').is_known
    False
    """

    __known__: t.ClassVar[t.Dict[str, str]] = {}

    def __new__(cls, value: str) -> 'ExtensibleEnum':
        return super().__new__(cls, cls.__known__.get(str(value).lower(), value))

    def __init_subclass__(cls, **kwargs: t.Any) -> None:
        super().__init_subclass__(**kwargs)
        known: t.Dict[str, str] = {}
        for name, value in list(vars(cls).items()):
            if name.isupper() and isinstance(value, str):
                setattr(cls, name, cls(value))
                known[value.lower()] = value
        cls.__known__ = known

    @property
    def is_known(self) -> bool:
        return self.lower() in self.__known__

    @property
    def value(self) -> str:
        """The wire value"""
        return str.__str__(self)

    @classmethod
    def known_values(cls) -> t.List[str]:
        return sorted(cls.__known__.values())

    def __eq__(self, other: object) -> bool:
        if isinstance(other, str):
            return self.lower() == other.lower()
        return NotImplemented

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        return result if result is NotImplemented else not result

    def __hash__(self) -> int:
        return hash(self.lower())

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}({str.__repr__(self)})'

    def __str__(self) -> str:
        return str.__str__(self)

    @classmethod
    def __get_pydantic_core_schema__(cls, source: t.Any, handler: t.Any) -> core_schema.CoreSchema:
        return core_schema.no_info_after_validator_function(
            cls,
            core_schema.str_schema(),
            serialization = core_schema.plain_serializer_function_ser_schema(str.__str__),
        )


class R2Jurisdiction(ExtensibleEnum):
    """The jurisdiction an R2 bucket's data is bound to"""
    DEFAULT = "default"
    EU = "eu"
    FEDRAMP = "fedramp"


class R2LocationHint(ExtensibleEnum):
    """Hint for the region an R2 bucket is created in"""
    APAC = "apac"
    EEUR = "eeur"
    ENAM = "enam"
    WEUR = "weur"
    WNAM = "wnam"
    OC = "oc"


class R2StorageClass(ExtensibleEnum):
    STANDARD = "Standard"
    INFREQUENT_ACCESS = "InfrequentAccess"


class RecordType(str, Enum):
    """DNS record types supported by Cloudflare"""
    A = "A"
    AAAA = "AAAA"
    CNAME = "CNAME"
    MX = "MX"
    TXT = "TXT"
    NS = "NS"
    SRV = "SRV"
    CAA = "CAA"
    PTR = "PTR"
    HTTPS = "HTTPS"
    SVCB = "SVCB"


class ZoneStatus(ExtensibleEnum):
    """Zone status values; statuses Cloudflare adds later are preserved"""
    ACTIVE = "active"
    PENDING = "pending"
    INITIALIZING = "initializing"
    MOVED = "moved"
    DELETED = "deleted"
    DEACTIVATED = "deactivated"
    READ_ONLY = "read only"


class ZoneType(ExtensibleEnum):
    FULL = "full"
    PARTIAL = "partial"
    SECONDARY = "secondary"


class CustomHostnameStatus(ExtensibleEnum):
    """Custom hostname status values; Cloudflare adds new ones over time"""
    ACTIVE = "active"
    PENDING = "pending"
    ACTIVE_REDEPLOYING = "active_redeploying"
    MOVED = "moved"
    PENDING_DELETION = "pending_deletion"
    DELETED = "deleted"
    PENDING_BLOCKED = "pending_blocked"
    PENDING_MIGRATION = "pending_migration"
    PENDING_PROVISIONED = "pending_provisioned"
    TEST_PENDING = "test_pending"
    TEST_ACTIVE = "test_active"
    TEST_BLOCKED = "test_blocked"
    TEST_FAILED = "test_failed"
    BLOCKED = "blocked"


class SSLMethod(ExtensibleEnum):
    HTTP = "http"
    TXT = "txt"
    EMAIL = "email"


class SSLType(ExtensibleEnum):
    DV = "dv"


class ListDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class MatchMode(str, Enum):
    ALL = "all"
    ANY = "any"


RecordTypeT = t.Union[RecordType, str]
