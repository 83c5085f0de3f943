import pytest

from formproof.verification.evidence import has_google_forms_evidence


@pytest.mark.parametrize(
    "text",
    [
        "forms.gle/abc123",
        "Open FORMS.GLE/xyz to continue",
        "https://docs.google.com/forms/d/e/1FAIpQL/formResponse",
        "DOCS.GOOGLE.COM/FORMS",
    ],
)
def test_form_urls_are_evidence(text):
    assert has_google_forms_evidence(text) is True


def test_google_and_forms_anywhere():
    assert has_google_forms_evidence("google your response has been recorded forms")
    assert has_google_forms_evidence("Google Forms")
    # Not adjacent, from different regions
    assert has_google_forms_evidence("powered by google ... never submit passwords through forms")


@pytest.mark.parametrize(
    "text",
    [
        "",
        None,
        "google",
        "forms",
        "microsoft forms",
        "your response has been recorded",
        "forms gle",
    ],
)
def test_no_evidence(text):
    assert has_google_forms_evidence(text) is False
