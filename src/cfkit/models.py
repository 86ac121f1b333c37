from __future__ import annotations

"""
Cloudflare Pydantic Models
"""

from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, Dict, Any, List, Union, Literal, Generic, TypeVar

from .types import (
    RecordType,
    ZoneStatus,
    ZoneType,
    CustomHostnameStatus,
    SSLMethod,
    SSLType,
    R2Jurisdiction,
    R2LocationHint,
    R2StorageClass,
)

T = TypeVar('T')


# ============================================================================
# Response Envelope
# ============================================================================

class ApiError(BaseModel):
    """An error entry from the envelope's ``errors`` array"""
    code: int = 0
    message: str = ""
    documentation_url: Optional[str] = None
    error_chain: Optional[List['ApiError']] = None

    model_config = {"extra": "allow"}

    def __str__(self) -> str:
        return f'[{self.code}] {self.message}'


class ApiMessage(BaseModel):
    code: Optional[int] = None
    message: str = ""

    model_config = {"extra": "allow"}

    @classmethod
    def coerce(cls, value: Any) -> 'ApiMessage':
        return cls(message = value) if isinstance(value, str) else cls.model_validate(value)


class PageInfo(BaseModel):
    """Page-based pagination metadata"""
    page: int = 1
    per_page: int = 0
    count: int = 0
    total_count: int = 0
    total_pages: int = 0

    model_config = {"extra": "allow"}


class CursorInfo(BaseModel):
    """Cursor-based pagination metadata; an empty cursor means no more pages"""
    count: int = 0
    per_page: Optional[int] = None
    cursor: Optional[str] = None

    model_config = {"extra": "allow"}

    @property
    def has_more(self) -> bool:
        return bool(self.cursor)


class ResultInfo(BaseModel):
    """
    The raw ``result_info`` block. Cloudflare puts page metadata here
    for page-based endpoints and the continuation cursor here for
    cursor-based ones, so every field is optional.
    """
    page: Optional[int] = None
    per_page: Optional[int] = None
    count: Optional[int] = None
    total_count: Optional[int] = None
    total_pages: Optional[int] = None
    cursor: Optional[str] = None
    cursors: Optional[Dict[str, Any]] = None

    model_config = {"extra": "allow"}

    @property
    def page_info(self) -> PageInfo:
        return PageInfo(
            page = self.page or 1,
            per_page = self.per_page or 0,
            count = self.count or 0,
            total_count = self.total_count or 0,
            total_pages = self.total_pages or 0,
        )

    @property
    def cursor_info(self) -> CursorInfo:
        cursor = self.cursor
        if cursor is None and self.cursors:
            cursor = self.cursors.get('after')
        return CursorInfo(count = self.count or 0, per_page = self.per_page, cursor = cursor)


class Envelope(BaseModel):
    """
    The standard Cloudflare response wrapper. ``result`` is kept raw so
    that it can be decoded into the caller's type separately.
    """
    success: bool
    errors: List[ApiError] = Field(default_factory = list)
    messages: List[ApiMessage] = Field(default_factory = list)
    result: Optional[Any] = None
    result_info: Optional[ResultInfo] = None

    model_config = {"extra": "allow"}

    @field_validator("errors", "messages", mode = "before")
    @classmethod
    def coerce_null_list(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("messages", mode = "before")
    @classmethod
    def coerce_messages(cls, v: Any) -> Any:
        return [ApiMessage.coerce(m) for m in v] if isinstance(v, list) else v


class PagePaginatedResult(BaseModel, Generic[T]):
    """One page of a page-based listing"""
    items: List[T] = Field(default_factory = list)
    page_info: Optional[PageInfo] = None

    model_config = ConfigDict(arbitrary_types_allowed = True)

    @property
    def has_more(self) -> bool:
        return self.page_info is not None and self.page_info.page < self.page_info.total_pages


class CursorPaginatedResult(BaseModel, Generic[T]):
    """One page of a cursor-based listing"""
    items: List[T] = Field(default_factory = list)
    cursor_info: Optional[CursorInfo] = None

    model_config = ConfigDict(arbitrary_types_allowed = True)

    @property
    def next_cursor(self) -> Optional[str]:
        return self.cursor_info.cursor if self.cursor_info and self.cursor_info.cursor else None


# ============================================================================
# Zones
# ============================================================================

class AccountInfo(BaseModel):
    """Account information from zone"""
    id: str
    name: Optional[str] = None

    model_config = {"extra": "allow"}


class Zone(BaseModel):
    """Cloudflare Zone model"""
    id: str
    name: str
    status: Optional[ZoneStatus] = None
    paused: Optional[bool] = None
    type: Optional[ZoneType] = None
    development_mode: Optional[int] = None
    name_servers: Optional[List[str]] = None
    original_name_servers: Optional[List[str]] = None
    modified_on: Optional[datetime] = None
    created_on: Optional[datetime] = None
    activated_on: Optional[datetime] = None
    account: Optional[AccountInfo] = None

    model_config = {"extra": "allow"}


class ZoneCreate(BaseModel):
    name: str
    account: AccountInfo
    type: Optional[ZoneType] = None
    jump_start: Optional[bool] = None


# ============================================================================
# DNS
# ============================================================================

class DNSRecordMeta(BaseModel):
    auto_added: Optional[bool] = None
    source: Optional[str] = None

    model_config = {"extra": "allow"}


class DNSRecord(BaseModel):
    """Cloudflare DNS Record model"""
    id: str
    zone_id: Optional[str] = None
    zone_name: Optional[str] = None
    name: str
    type: str
    content: Optional[str] = None
    proxiable: Optional[bool] = None
    proxied: Optional[bool] = None
    ttl: Optional[int] = None
    priority: Optional[int] = None
    comment: Optional[str] = None
    tags: Optional[List[str]] = None
    created_on: Optional[datetime] = None
    modified_on: Optional[datetime] = None
    meta: Optional[DNSRecordMeta] = None

    model_config = {"extra": "allow"}

    def matches(self, other: "DNSRecord") -> bool:
        """Check if two records match (same name, type, content)"""
        return (
            self.name == other.name
            and self.type == other.type
            and self.content == other.content
        )


class DNSRecordCreate(BaseModel):
    """
    The body for creating or replacing a DNS record.

    ``ttl`` accepts ``"auto"``, which is sent as ``1``.
    """
    type: Union[RecordType, str]
    name: str
    content: Optional[str] = None
    ttl: Optional[Union[int, Literal["auto"]]] = None
    proxied: Optional[bool] = None
    priority: Optional[int] = None
    comment: Optional[str] = None
    tags: Optional[List[str]] = None
    data: Optional[Dict[str, Any]] = None

    model_config = {"extra": "allow"}

    @field_validator("type", mode = "before")
    @classmethod
    def normalize_record_type(cls, v: Any) -> Any:
        if isinstance(v, str) and not isinstance(v, RecordType):
            v = v.upper()
            try:
                return RecordType(v)
            except ValueError:
                return v
        return v

    @field_validator("ttl", mode = "after")
    @classmethod
    def normalize_ttl(cls, v: Any) -> Any:
        return 1 if v == "auto" else v


class DNSRecordPatch(BaseModel):
    """A partial DNS record update; unset fields are left untouched"""
    type: Optional[Union[RecordType, str]] = None
    name: Optional[str] = None
    content: Optional[str] = None
    ttl: Optional[Union[int, Literal["auto"]]] = None
    proxied: Optional[bool] = None
    priority: Optional[int] = None
    comment: Optional[str] = None
    tags: Optional[List[str]] = None

    model_config = {"extra": "allow"}

    @field_validator("ttl", mode = "after")
    @classmethod
    def normalize_ttl(cls, v: Any) -> Any:
        return 1 if v == "auto" else v


class DNSBatchRequest(BaseModel):
    """A DNS batch; Cloudflare applies deletes, patches, puts, then posts"""
    deletes: Optional[List[Dict[str, str]]] = None
    patches: Optional[List[Dict[str, Any]]] = None
    puts: Optional[List[Dict[str, Any]]] = None
    posts: Optional[List[DNSRecordCreate]] = None


class DNSBatchResult(BaseModel):
    deletes: List[DNSRecord] = Field(default_factory = list)
    patches: List[DNSRecord] = Field(default_factory = list)
    puts: List[DNSRecord] = Field(default_factory = list)
    posts: List[DNSRecord] = Field(default_factory = list)

    model_config = {"extra": "allow"}

    @field_validator("deletes", "patches", "puts", "posts", mode = "before")
    @classmethod
    def coerce_null_list(cls, v: Any) -> Any:
        return [] if v is None else v


# ============================================================================
# Custom Hostnames
# ============================================================================

class CustomHostnameSSL(BaseModel):
    id: Optional[str] = None
    status: Optional[str] = None
    method: Optional[SSLMethod] = None
    type: Optional[SSLType] = None
    validation_errors: Optional[List[Dict[str, Any]]] = None

    model_config = {"extra": "allow"}


class CustomHostname(BaseModel):
    id: str
    hostname: str
    status: Optional[CustomHostnameStatus] = None
    ssl: Optional[CustomHostnameSSL] = None
    custom_origin_server: Optional[str] = None
    custom_metadata: Optional[Dict[str, Any]] = None
    verification_errors: Optional[List[str]] = None
    created_at: Optional[datetime] = None

    model_config = {"extra": "allow"}


class CustomHostnameSSLOptions(BaseModel):
    method: SSLMethod = SSLMethod.HTTP
    type: SSLType = SSLType.DV
    settings: Optional[Dict[str, Any]] = None
    wildcard: Optional[bool] = None


class CustomHostnameCreate(BaseModel):
    hostname: str
    ssl: Optional[CustomHostnameSSLOptions] = None
    custom_origin_server: Optional[str] = None
    custom_metadata: Optional[Dict[str, Any]] = None


class CustomHostnamePatch(BaseModel):
    ssl: Optional[CustomHostnameSSLOptions] = None
    custom_origin_server: Optional[str] = None
    custom_metadata: Optional[Dict[str, Any]] = None


# ============================================================================
# R2
# ============================================================================

class R2Bucket(BaseModel):
    name: str
    creation_date: Optional[datetime] = None
    location: Optional[R2LocationHint] = None
    jurisdiction: Optional[R2Jurisdiction] = None
    storage_class: Optional[R2StorageClass] = None

    model_config = {"extra": "allow"}


class R2BucketCreate(BaseModel):
    name: str
    location_hint: Optional[R2LocationHint] = Field(None, serialization_alias = "locationHint")
    storage_class: Optional[R2StorageClass] = Field(None, serialization_alias = "storageClass")


# ============================================================================
# Workers KV
# ============================================================================

class KVNamespace(BaseModel):
    id: str
    title: str
    supports_url_encoding: Optional[bool] = None

    model_config = {"extra": "allow"}


class KVKey(BaseModel):
    name: str
    expiration: Optional[int] = None
    metadata: Optional[Any] = None

    model_config = {"extra": "allow"}


class KVBulkGetRequest(BaseModel):
    """Sent camelCased: ``withMetadata``"""
    keys: List[str]
    type: Optional[Literal["text", "json"]] = None
    with_metadata: Optional[bool] = None


class KVBulkGetResult(BaseModel):
    """
    Keys map to their value, or to ``{"value": ..., "metadata": ...}``
    when metadata was requested
    """
    values: Dict[str, Any] = Field(default_factory = dict)

    model_config = {"extra": "allow"}
