"""Proof verification module."""

from formproof.verification.evidence import has_google_forms_evidence
from formproof.verification.service import VerificationService

__all__ = ["VerificationService", "has_google_forms_evidence"]
