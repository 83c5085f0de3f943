import pytest
from fastapi.testclient import TestClient

from formproof.api.main import create_app
from formproof.ledger.service import LedgerService
from formproof.referral.service import ReferralService
from formproof.settings import Settings
from formproof.storage.db import Database

UID = "user-12345678"
REF_CODE = "user-123"
EMAIL = "delegate@example.com"


class FakeOCRClient:
    """Stands in for ClarifaiOCRClient; returns a canned response."""

    def __init__(self, response=None, error=None):
        self.response = response if response is not None else {"outputs": []}
        self.error = error
        self.pats = []
        self.urls = []

    def __call__(self, pat):
        self.pats.append(pat)
        return self

    async def recognize(self, image_url):
        self.urls.append(image_url)
        if self.error is not None:
            raise self.error
        return self.response

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return None


def ocr_response(*texts):
    """Build a Clarifai-shaped response with one region per text."""
    return {
        "status": {"code": 10000, "description": "Ok"},
        "outputs": [
            {"data": {"regions": [{"data": {"text": {"raw": text}}} for text in texts]}}
        ],
    }


@pytest.fixture
def database(tmp_path):
    db = Database(f"sqlite:///{tmp_path / 'formproof_test.db'}", max_attempts=3)
    db.create_tables()
    yield db
    db.drop_tables()
    db.dispose()


@pytest.fixture
def ledger(database):
    return LedgerService(database)


@pytest.fixture
def referrals(database):
    return ReferralService(database)


@pytest.fixture
def visited(referrals):
    """Give the default test user one referral visit."""
    referrals.record_visit(REF_CODE)
    return REF_CODE


@pytest.fixture
def test_settings():
    return Settings(
        clarifai_pat="test-pat",
        deploy_config_path=None,
        jwt_secret_key="test-secret-key-for-formproof-tests",
    )


@pytest.fixture
def fake_ocr():
    return FakeOCRClient(ocr_response("Your response has been recorded", "docs.google.com/forms/d/e/abc"))


@pytest.fixture
def app(database, test_settings, fake_ocr):
    return create_app(database=database, settings=test_settings, ocr_client_factory=fake_ocr)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_headers(app):
    token = app.state.tokens.create_access_token(UID, email=EMAIL)
    return {"Authorization": f"Bearer {token}"}
