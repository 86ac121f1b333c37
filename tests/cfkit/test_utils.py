import email.utils
import time

import pytest

from cfkit.core.executor import ApiRequest, parse_retry_after
from cfkit.core.serialization import build_params, quote_segment, serialize_body
from cfkit.utils.logs import _patch_record, set_module_name
from cfkit.utils.proxy import ProxyObject
from cfkit.types import R2Jurisdiction, ZoneStatus


def test_parse_retry_after_seconds_and_dates():
    assert parse_retry_after("3") == 3.0
    assert parse_retry_after(None) is None
    assert parse_retry_after("soon") is None

    future = email.utils.formatdate(time.time() + 60, usegmt = True)
    assert 55 <= parse_retry_after(future) <= 60


def test_build_params_renders_wire_values():
    params = build_params({
        "status": ZoneStatus.READ_ONLY,
        "jurisdiction": R2Jurisdiction("EU"),
        "proxied": True,
        "tags": ["a", "b"],
        "name": None,
    })
    assert params == {"status": "read only", "jurisdiction": "eu", "proxied": "true", "tags": "a,b"}


def test_quote_segment_escapes_slashes():
    assert quote_segment("a/b c") == "a%2Fb%20c"


def test_serialize_body_passes_lists_through():
    assert serialize_body([{"id": "a", "x": None}]) == [{"id": "a"}]
    assert serialize_body(None) is None


def test_request_idempotency():
    assert ApiRequest("get", "zones").is_idempotent
    assert ApiRequest("DELETE", "zones/z").is_idempotent
    assert not ApiRequest("post", "zones").is_idempotent
    assert not ApiRequest("PATCH", "zones/z").is_idempotent


def test_module_names_are_patched_into_records():
    set_module_name("cfkit_test.module", "friendly")
    record = {"name": "cfkit_test.module", "extra": {}}
    _patch_record(record)
    assert record["extra"]["module_name"] == "friendly"

    set_module_name("cfkit_test.pkg", "pkg", is_relative = True)
    record = {"name": "cfkit_test.pkg.sub", "extra": {}}
    _patch_record(record)
    assert record["extra"]["module_name"] == "pkg.sub"


def test_relative_module_names_match_whole_segments_and_prefer_longest():
    set_module_name("cfkit_demo", "demo", is_relative = True)
    set_module_name("cfkit_demo.inner", "inner", is_relative = True)

    record = {"name": "cfkit_demo.inner.leaf", "extra": {}}
    _patch_record(record)
    assert record["extra"]["module_name"] == "inner.leaf"

    record = {"name": "cfkit_demo.other", "extra": {}}
    _patch_record(record)
    assert record["extra"]["module_name"] == "demo.other"

    record = {"name": "cfkit_demonstration.mod", "extra": {}}
    _patch_record(record)
    assert "module_name" not in record["extra"]


def test_proxy_object_builds_lazily():
    calls = []

    def build():
        calls.append(1)
        return {"value": 1}

    proxy = ProxyObject(obj_getter = build)
    assert calls == []
    assert not proxy.is_initialized
    assert proxy.get("value") == 1
    assert proxy.get("value") == 1
    assert calls == [1]
