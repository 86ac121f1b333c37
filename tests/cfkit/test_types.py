import pytest
from pydantic import BaseModel, ValidationError

from cfkit import CloudflareSettings, ResilienceSettings
from cfkit.models import Envelope, R2Bucket
from cfkit.types import R2Jurisdiction, R2StorageClass, RecordType, ZoneStatus


def test_extensible_enum_known_values_compare_case_insensitively():
    assert R2Jurisdiction("EU") == R2Jurisdiction.EU
    assert R2Jurisdiction("EU").value == "eu"
    assert R2Jurisdiction("FedRAMP").is_known
    assert hash(R2Jurisdiction("EU")) == hash(R2Jurisdiction.EU)
    assert R2StorageClass("infrequentaccess") == R2StorageClass.INFREQUENT_ACCESS


def test_extensible_enum_preserves_unknown_values():
    value = R2Jurisdiction("Mars-1")
    assert not value.is_known
    assert value.value == "Mars-1"
    assert value != R2Jurisdiction.EU


def test_extensible_enum_round_trips_through_models():
    bucket = R2Bucket.model_validate({"name": "b", "jurisdiction": "Mars-1"})
    assert isinstance(bucket.jurisdiction, R2Jurisdiction)
    assert bucket.model_dump(mode = "json", exclude_none = True) == {"name": "b", "jurisdiction": "Mars-1"}


def test_zone_status_serializes_wire_value():
    class Body(BaseModel):
        status: ZoneStatus
        type: RecordType

    body = Body(status = ZoneStatus.READ_ONLY, type = "CNAME")
    assert body.model_dump(mode = "json") == {"status": "read only", "type": "CNAME"}
    assert Body.model_validate({"status": "Read Only", "type": "A"}).status.value == "read only"


def test_envelope_tolerates_null_lists_and_string_messages():
    envelope = Envelope.model_validate({"success": True, "errors": None, "messages": ["hello"], "result": None})
    assert envelope.errors == []
    assert envelope.messages[0].message == "hello"


def test_result_info_exposes_page_and_cursor_views():
    envelope = Envelope.model_validate({
        "success": True,
        "result": [],
        "result_info": {"page": 2, "per_page": 10, "count": 10, "total_count": 35, "total_pages": 4, "cursor": "abc"},
    })
    assert envelope.result_info.page_info.total_pages == 4
    assert envelope.result_info.cursor_info.cursor == "abc"


def test_resilience_defaults():
    settings = ResilienceSettings()
    assert settings.max_retries == 3
    assert settings.circuit_failure_threshold == 5


@pytest.mark.parametrize("field, value", [("max_retries", -1), ("permit_limit", 0), ("timeout", 0), ("jitter", -0.5)])
def test_resilience_settings_are_validated(field, value):
    with pytest.raises(ValidationError):
        ResilienceSettings(**{field: value})


def test_settings_load_from_environment(monkeypatch):
    monkeypatch.setenv("CLOUDFLARE_API_TOKEN", "env-token")
    monkeypatch.setenv("CLOUDFLARE_ACCOUNT_ID", "acc-env")
    monkeypatch.setenv("CLOUDFLARE_RESILIENCE__MAX_RETRIES", "5")

    settings = CloudflareSettings()

    assert settings.api_token == "env-token"
    assert settings.account_id == "acc-env"
    assert settings.resilience.max_retries == 5
    assert settings.auth_headers == {"Authorization": "Bearer env-token"}
