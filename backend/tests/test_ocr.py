import asyncio
import json

import httpx
import pytest

from conftest import ocr_response
from formproof.errors import FailedPrecondition, Internal
from formproof.ocr.client import ClarifaiOCRClient, build_request_body, resolve_clarifai_pat
from formproof.ocr.text import extract_ocr_text
from formproof.settings import Settings

OCR_URL = "https://api.clarifai.com/v2/models/ocr-scene-english/outputs"


def _run_recognize(handler, image_url="https://img.example/proof.png"):
    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            client = ClarifaiOCRClient("secret-pat", url=OCR_URL, client=http)
            return await client.recognize(image_url)

    return asyncio.run(go())


# ==================== TEXT EXTRACTION ====================


def test_extract_joins_and_lowercases():
    response = ocr_response("Google", "FORMS", "Thanks!")
    assert extract_ocr_text(response) == "google forms thanks!"


def test_extract_across_outputs_and_skips_empty():
    response = {
        "outputs": [
            {"data": {"regions": [{"data": {"text": {"raw": "A"}}}, {"data": {"text": {}}}]}},
            {"data": {}},
            {},
            {"data": {"regions": [{"data": {"text": {"raw": ""}}}, {"data": {"text": {"raw": "B"}}}]}},
        ]
    }
    assert extract_ocr_text(response) == "a b"


@pytest.mark.parametrize("response", [None, {}, {"outputs": None}, {"outputs": []}])
def test_extract_empty(response):
    assert extract_ocr_text(response) == ""


# ==================== PAT RESOLUTION ====================


def test_pat_from_settings(monkeypatch):
    monkeypatch.delenv("CLARIFAI_PAT", raising=False)
    assert resolve_clarifai_pat(Settings(clarifai_pat="from-env")) == "from-env"


def test_pat_env_wins_over_deploy_config(monkeypatch, tmp_path):
    config = tmp_path / "deploy.json"
    config.write_text(json.dumps({"clarifai": {"pat": "from-config"}}))
    monkeypatch.setenv("CLARIFAI_PAT", "from-env")

    settings = Settings(deploy_config_path=str(config))

    assert resolve_clarifai_pat(settings) == "from-env"


def test_pat_falls_back_to_deploy_config(monkeypatch, tmp_path):
    config = tmp_path / "deploy.json"
    config.write_text(json.dumps({"clarifai": {"pat": "from-config"}}))
    monkeypatch.delenv("CLARIFAI_PAT", raising=False)

    settings = Settings(clarifai_pat=None, deploy_config_path=str(config))

    assert resolve_clarifai_pat(settings) == "from-config"


@pytest.mark.parametrize("content", [None, "not json", json.dumps({"other": 1}), json.dumps({"clarifai": {}})])
def test_pat_missing(monkeypatch, tmp_path, content):
    monkeypatch.delenv("CLARIFAI_PAT", raising=False)
    path = tmp_path / "deploy.json"
    if content is not None:
        path.write_text(content)

    with pytest.raises(FailedPrecondition) as exc:
        resolve_clarifai_pat(Settings(clarifai_pat=None, deploy_config_path=str(path)))
    assert exc.value.message == "Clarifai PAT not configured."


# ==================== CLIENT ====================


def test_recognize_sends_request():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=ocr_response("forms.gle/x"))

    result = _run_recognize(handler)

    assert extract_ocr_text(result) == "forms.gle/x"
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == OCR_URL
    assert request.headers["Authorization"] == "Key secret-pat"
    assert json.loads(request.content) == build_request_body("https://img.example/proof.png")
    assert json.loads(request.content) == {"inputs": [{"data": {"image": {"url": "https://img.example/proof.png"}}}]}


def test_recognize_surfaces_provider_description():
    def handler(request):
        return httpx.Response(401, json={"status": {"code": 11102, "description": "Invalid API key"}})

    with pytest.raises(Internal) as exc:
        _run_recognize(handler)
    assert exc.value.message == "Invalid API key"


def test_recognize_generic_failure_message():
    def handler(request):
        return httpx.Response(502, text="Bad Gateway")

    with pytest.raises(Internal) as exc:
        _run_recognize(handler)
    assert exc.value.message == "Clarifai OCR failed."


def test_recognize_is_not_retried():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(503, json={"status": {"description": "Unavailable"}})

    with pytest.raises(Internal):
        _run_recognize(handler)
    assert len(calls) == 1


def test_recognize_transport_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(Internal) as exc:
        _run_recognize(handler)
    assert exc.value.message == "Clarifai OCR failed."
