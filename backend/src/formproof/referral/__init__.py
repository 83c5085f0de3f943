"""Referral module.

A user may only earn points once their referral link has been visited.
"""

from formproof.referral.models import Referral, ReferralSnapshot, derive_code
from formproof.referral.service import ReferralService

__all__ = ["Referral", "ReferralService", "ReferralSnapshot", "derive_code"]
