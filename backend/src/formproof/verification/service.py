"""Proof verification: validate, OCR, classify, then update the ledger."""

from typing import Any, Callable

from starlette.concurrency import run_in_threadpool

from formproof.forms import Caller, validate_proof_request
from formproof.ledger.models import SubmissionResult
from formproof.ledger.service import LedgerService
from formproof.logging_config import get_logger
from formproof.ocr.client import ClarifaiOCRClient, resolve_clarifai_pat
from formproof.ocr.text import extract_ocr_text
from formproof.settings import Settings, settings as default_settings
from formproof.verification.evidence import has_google_forms_evidence

logger = get_logger(__name__)


class VerificationService:
    """Handler behind the verifyProof call."""

    def __init__(
        self,
        ledger: LedgerService,
        settings: Settings | None = None,
        ocr_client_factory: Callable[[str], ClarifaiOCRClient] | None = None,
    ):
        """Initialize verification service.

        Args:
            ledger: Ledger receiving the outcome
            settings: Settings used to resolve OCR credentials
            ocr_client_factory: Builds an OCR client from a token
        """
        self.ledger = ledger
        self.settings = settings or default_settings
        self.ocr_client_factory = ocr_client_factory or self._default_client
        self.logger = get_logger(__name__)

    def _default_client(self, pat: str) -> ClarifaiOCRClient:
        return ClarifaiOCRClient(
            pat,
            url=self.settings.clarifai_ocr_url,
            timeout=self.settings.request_timeout_seconds,
        )

    async def verify_proof(self, caller: Caller | None, payload: dict[str, Any] | None) -> SubmissionResult:
        """Verify a proof image and award points if it qualifies.

        The OCR call runs before, and outside of, the ledger transaction.

        Args:
            caller: Verified caller identity, None if anonymous
            payload: ``{"formId": ..., "proofUrl": ...}``

        Returns:
            Submission result with status and points total
        """
        request = validate_proof_request(caller, payload)
        pat = resolve_clarifai_pat(self.settings)

        async with self.ocr_client_factory(pat) as ocr:
            response = await ocr.recognize(request.proof_url)

        ocr_text = extract_ocr_text(response)
        verified = has_google_forms_evidence(ocr_text)

        self.logger.info(
            "proof_classified",
            uid=request.caller.uid,
            form_id=request.form_id,
            verified=verified,
        )

        return await run_in_threadpool(
            self.ledger.record_submission,
            uid=request.caller.uid,
            form_id=request.form_id,
            proof_url=request.proof_url,
            ocr_text=ocr_text,
            verified=verified,
            email=request.caller.email,
        )
