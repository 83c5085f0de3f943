"""OCR provider access."""

from formproof.ocr.client import ClarifaiOCRClient, resolve_clarifai_pat
from formproof.ocr.text import extract_ocr_text

__all__ = ["ClarifaiOCRClient", "extract_ocr_text", "resolve_clarifai_pat"]
