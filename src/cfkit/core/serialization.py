from __future__ import annotations

"""
Wire serialization for request bodies, query strings and path segments
"""

import functools
from collections import abc
import typing as t
from enum import Enum
from urllib.parse import quote

from pydantic import BaseModel, TypeAdapter
from pydantic.alias_generators import to_camel
from pydantic_core import to_jsonable_python

from ..types import ExtensibleEnum

Casing = t.Literal['snake', 'camel']

__all__ = [
    "Casing",
    "serialize_body",
    "build_params",
    "quote_segment",
    "get_type_adapter",
    "is_sequence_type",
    "strip_none",
]


def strip_none(value: t.Any) -> t.Any:
    """Recursively drops ``None`` values from mappings"""
    if isinstance(value, dict):
        return {k: strip_none(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [strip_none(v) for v in value]
    return value


def _camelize(value: t.Any) -> t.Any:
    if isinstance(value, dict):
        return {to_camel(k) if isinstance(k, str) else k: _camelize(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_camelize(v) for v in value]
    return value


def serialize_body(body: t.Any, casing: Casing = 'snake') -> t.Any:
    """
    Converts a request body to JSON-ready data.

    Models are dumped by alias with unset optionals omitted; mappings
    have their ``None`` values dropped. Enums become their wire value.
    ``casing='camel'`` re-keys the result for the few endpoints that
    expect camelCase.
    """
    if body is None:
        return None
    if isinstance(body, BaseModel):
        data = body.model_dump(mode = 'json', by_alias = True, exclude_none = True)
    else:
        data = strip_none(to_jsonable_python(body, by_alias = True, exclude_none = True))
    if casing == 'camel':
        data = _camelize(data)
    return data


def _param_value(value: t.Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, ExtensibleEnum):
        return value.value
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (list, tuple, set, frozenset)):
        return ','.join(_param_value(v) for v in value)
    return str(value)


def build_params(params: t.Optional[t.Mapping[str, t.Any]]) -> t.Dict[str, str]:
    """Renders query parameters, dropping unset ones"""
    if not params:
        return {}
    return {k: _param_value(v) for k, v in params.items() if v is not None}


def quote_segment(value: t.Any) -> str:
    """Percent-encodes a single path segment"""
    return quote(_param_value(value), safe = '')


@functools.lru_cache(maxsize = 512)
def get_type_adapter(tp: t.Any) -> TypeAdapter:
    return TypeAdapter(tp)


def is_sequence_type(tp: t.Any) -> bool:
    """True for ``List[X]``, ``Sequence[X]`` and friends"""
    origin = t.get_origin(tp) or tp
    if not isinstance(origin, type) or origin in (str, bytes, bytearray):
        return False
    return issubclass(origin, (abc.Sequence, abc.Set))
