"""Extraction of recognized text from OCR responses."""

from typing import Any


def _get(obj: Any, key: str) -> Any:
    return obj.get(key) if isinstance(obj, dict) else None


def iter_region_texts(response: dict[str, Any] | None):
    """Yield every non-empty ``outputs[].data.regions[].data.text.raw``."""
    for output in _get(response, "outputs") or []:
        for region in _get(_get(output, "data"), "regions") or []:
            raw = _get(_get(_get(region, "data"), "text"), "raw")
            if raw and isinstance(raw, str):
                yield raw


def extract_ocr_text(response: dict[str, Any] | None) -> str:
    """Join all recognized regions with spaces, lower-cased.

    Missing levels anywhere in the response are treated as empty.
    """
    return " ".join(iter_region_texts(response)).lower()
