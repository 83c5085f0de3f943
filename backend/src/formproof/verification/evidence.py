"""Heuristics deciding whether recognized text shows a submitted Google Form."""

# Any one of these marks a Google Forms screenshot
FORMS_URL_MARKERS = ("forms.gle", "docs.google.com/forms")


def has_google_forms_evidence(text: str | None) -> bool:
    """Test recognized text for signs of a Google Forms submission.

    True if the text contains a Google Forms URL, or contains both "google"
    and "forms" anywhere (not necessarily adjacent or in the same region).
    """
    if not text:
        return False

    text = text.casefold()
    if any(marker in text for marker in FORMS_URL_MARKERS):
        return True
    return "google" in text and "forms" in text
