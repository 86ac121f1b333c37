import asyncio
import json
import typing as t

import httpx
import pytest

from cfkit import ApiLogicError, ApiRequest, ClientError, DecodeError, DNSRecord, TransportError, Zone
from cfkit.models import ZoneCreate, AccountInfo
from cfkit.types import ZoneStatus


def test_get_decodes_result_into_model(make_client, envelope):
    client, recorder = make_client(lambda request: httpx.Response(200, json = envelope({"id": "z1", "name": "example.com", "status": "read only"})))

    zone = client.api.get("zones/z1", Zone)

    assert isinstance(zone, Zone)
    assert zone.status == ZoneStatus.READ_ONLY
    assert zone.status.is_known
    assert recorder.count == 1
    assert recorder.requests[0].url.path == "/client/v4/zones/z1"
    assert recorder.requests[0].headers["authorization"] == "Bearer test-token"


def test_not_found_is_not_retried_and_keeps_error_details(make_client, envelope):
    body = envelope(success = False, errors = [{"code": 7003, "message": "Could not route"}])
    client, recorder = make_client(lambda request: httpx.Response(404, json = body))

    with pytest.raises(ClientError) as exc_info:
        client.api.get("zones/missing", Zone)

    err = exc_info.value
    assert recorder.count == 1
    assert err.status_code == 404
    assert json.loads(err.raw_body) == body
    assert [e.code for e in err.errors] == [7003]


def test_success_false_on_2xx_raises_logic_error_verbatim(make_client, envelope):
    errors = [{"code": 1004, "message": "DNS Validation Error"}, {"code": 9005, "message": "Content for A record is invalid"}]
    client, recorder = make_client(lambda request: httpx.Response(200, json = envelope(success = False, errors = errors)))

    with pytest.raises(ApiLogicError) as exc_info:
        client.api.post("zones/z1/dns_records", DNSRecord, body = {"type": "A"})

    err = exc_info.value
    assert recorder.count == 1
    assert [(e.code, e.message) for e in err.errors] == [(1004, "DNS Validation Error"), (9005, "Content for A record is invalid")]
    assert "[1004] DNS Validation Error" in str(err)


def test_malformed_body_raises_decode_error_with_raw_body(make_client):
    client, recorder = make_client(lambda request: httpx.Response(200, text = "<html>oops</html>"))

    with pytest.raises(DecodeError) as exc_info:
        client.api.get("zones", t.List[Zone])

    assert exc_info.value.raw_body == "<html>oops</html>"
    assert recorder.count == 1


def test_result_that_does_not_match_type_raises_decode_error(make_client, envelope):
    client, _ = make_client(lambda request: httpx.Response(200, json = envelope({"unexpected": True})))

    with pytest.raises(DecodeError):
        client.api.get("zones/z1", Zone)


def test_absent_list_result_decodes_to_empty_list(make_client, envelope):
    client, _ = make_client(lambda request: httpx.Response(200, json = envelope(None)))

    assert client.api.get("zones", t.List[Zone]) == []
    assert client.api.get("zones/z1", Zone) is None


def test_request_body_is_snake_case_without_nulls(make_client, envelope):
    client, recorder = make_client(lambda request: httpx.Response(200, json = envelope({"id": "z9", "name": "example.org"})))

    client.api.post("zones", Zone, body = ZoneCreate(name = "example.org", account = AccountInfo(id = "acc-1"), jump_start = False))

    sent = json.loads(recorder.requests[0].content)
    assert sent == {"name": "example.org", "account": {"id": "acc-1"}, "jump_start": False}


def test_mapping_body_drops_nulls_and_renders_enums(make_client, envelope):
    client, recorder = make_client(lambda request: httpx.Response(200, json = envelope({})))

    client.api.patch("zones/z1", body = {"status": ZoneStatus.READ_ONLY, "plan": None, "meta": {"a": None, "b": 1}})

    assert json.loads(recorder.requests[0].content) == {"status": "read only", "meta": {"b": 1}}


def test_camel_casing_rekeys_body(make_client, envelope):
    client, recorder = make_client(lambda request: httpx.Response(200, json = envelope({"values": {}})))

    client.api.post("bulk", body = {"keys": ["a"], "with_metadata": True}, casing = "camel")

    assert json.loads(recorder.requests[0].content) == {"keys": ["a"], "withMetadata": True}


def test_query_params_render_enums_and_booleans(make_client, envelope):
    client, recorder = make_client(lambda request: httpx.Response(200, json = envelope([])))

    client.api.get("zones", t.List[Zone], params = {"status": ZoneStatus.ACTIVE, "paused": False, "name": None})

    params = recorder.requests[0].url.params
    assert params["status"] == "active"
    assert params["paused"] == "false"
    assert "name" not in params


def test_async_get_decodes_result(make_client, envelope):
    client, recorder = make_client(lambda request: httpx.Response(200, json = envelope([{"id": "z1", "name": "a.com"}])))

    async def runner():
        async with client:
            return await client.api.aget("zones", t.List[Zone])

    zones = asyncio.run(runner())
    assert [z.name for z in zones] == ["a.com"]
    assert recorder.count == 1


def test_pre_read_responses_decode_without_timing(make_client, envelope):
    client, recorder = make_client(lambda request: httpx.Response(200, json = envelope({"id": "z1", "name": "example.com"})))

    response = client.executor.execute(ApiRequest("GET", "zones/z1"))

    assert response.status_code == 200
    assert response.elapsed >= 0.0
    assert response.envelope.result["id"] == "z1"


def test_redirect_is_fatal_transport_error(make_client):
    client, recorder = make_client(lambda request: httpx.Response(302, headers = {"location": "https://example.com"}))

    with pytest.raises(TransportError) as exc_info:
        client.api.get("zones/z1", Zone)

    assert not isinstance(exc_info.value, ClientError)
    assert exc_info.value.status_code == 302
    assert recorder.count == 1
