"""Referral API v1 endpoints."""

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from formproof.api.deps import get_referral_service
from formproof.api.rate_limit import limiter
from formproof.auth.middleware import require_caller
from formproof.forms import Caller
from formproof.logging_config import get_logger
from formproof.referral.service import ReferralService
from formproof.settings import settings

logger = get_logger(__name__)

router = APIRouter(prefix="/referral", tags=["referral"])


class RecordVisitRequest(BaseModel):
    """Request to record a referral link visit."""
    code: str


class ReferralVisitsResponse(BaseModel):
    """Visit counter of a referral code."""
    code: str
    visit_count: int


@router.post("/visit", response_model=ReferralVisitsResponse)
@limiter.limit(settings.referral_visit_rate_limit)
def record_referral_visit(
    request: Request,
    body: RecordVisitRequest,
    referrals: ReferralService = Depends(get_referral_service),
):
    """Record a visit of a referral link.

    Called when someone opens a shared link carrying the code.
    """
    visit_count = referrals.record_visit(body.code)
    return ReferralVisitsResponse(code=body.code.strip(), visit_count=visit_count)


@router.get("/code", response_model=ReferralVisitsResponse)
def get_referral_code(
    caller: Caller = Depends(require_caller),
    referrals: ReferralService = Depends(get_referral_service),
):
    """Get the current user's referral code and its visits."""
    code = referrals.code_for(caller.uid)
    return ReferralVisitsResponse(code=code, visit_count=referrals.get_visit_count(code))
