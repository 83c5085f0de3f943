from starlette.requests import Request

from formproof.api.rate_limit import caller_or_address
from formproof.logging_config import add_service_context
from formproof.settings import settings


def make_request(headers=None, client=("203.0.113.9", 5000)):
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/api/v1/verifyProof",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


def test_service_context_added():
    event = add_service_context(None, "info", {"event": "proof_recorded"})
    assert event["service"] == settings.app_name
    assert event["env"] == settings.env


def test_service_context_keeps_explicit_values():
    event = add_service_context(None, "info", {"event": "x", "service": "worker"})
    assert event["service"] == "worker"


def test_rate_limit_key_prefers_bearer_token():
    request = make_request({"Authorization": "Bearer abc.def.signature"})
    assert caller_or_address(request) == "token:abc.def.signature"


def test_rate_limit_key_falls_back_to_address():
    assert caller_or_address(make_request()) == "203.0.113.9"
    assert caller_or_address(make_request({"Authorization": "Basic xyz"})) == "203.0.113.9"
