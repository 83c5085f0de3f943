"""Service lookups for route handlers."""

from fastapi import Request

from formproof.ledger.service import LedgerService
from formproof.referral.service import ReferralService
from formproof.verification.service import VerificationService


def get_verification_service(request: Request) -> VerificationService:
    return request.app.state.verification


def get_ledger_service(request: Request) -> LedgerService:
    return request.app.state.ledger


def get_referral_service(request: Request) -> ReferralService:
    return request.app.state.referrals
