"""Proof verification API v1 endpoints."""

from typing import Any

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel

from formproof.api.deps import get_ledger_service, get_verification_service
from formproof.auth.middleware import get_caller, require_caller
from formproof.forms import Caller, known_forms
from formproof.ledger.service import LedgerService
from formproof.logging_config import get_logger
from formproof.verification.service import VerificationService

logger = get_logger(__name__)

router = APIRouter(tags=["proofs"])


# ==================== MODELS ====================


class VerifyProofResult(BaseModel):
    """Outcome of a proof submission."""
    status: str
    points: int


class VerifyProofResponse(BaseModel):
    """Callable response envelope."""
    result: VerifyProofResult


class FormsResponse(BaseModel):
    """Known forms and the points each is worth."""
    forms: dict[str, int]


# ==================== ENDPOINTS ====================


def _unwrap(body: Any) -> dict[str, Any] | None:
    """Accept both ``{"data": {...}}`` and a bare payload."""
    if not isinstance(body, dict):
        return None
    data = body.get("data", body)
    return data if isinstance(data, dict) else None


@router.post("/verifyProof", response_model=VerifyProofResponse)
async def verify_proof(
    body: Any = Body(default=None),
    caller: Caller | None = Depends(get_caller),
    service: VerificationService = Depends(get_verification_service),
):
    """Verify a proof-of-completion image and award the form's points.

    Request: ``{"data": {"formId": "...", "proofUrl": "..."}}``
    """
    result = await service.verify_proof(caller, _unwrap(body))
    return {"result": result.to_dict()}


@router.get("/forms", response_model=FormsResponse)
async def list_forms():
    """List the forms that can be verified."""
    return FormsResponse(forms=known_forms())


@router.get("/me")
def get_me(
    caller: Caller = Depends(require_caller),
    ledger: LedgerService = Depends(get_ledger_service),
):
    """Get points, completions and proofs of the current user."""
    return ledger.get_summary(caller.uid).to_dict()
