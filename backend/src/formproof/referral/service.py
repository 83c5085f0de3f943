"""Referral service for tracking visits of referral links."""

from sqlalchemy import select
from sqlalchemy.orm import Session

from formproof.errors import InvalidArgument
from formproof.ledger.models import UserRecord
from formproof.logging_config import get_logger
from formproof.referral.models import Referral, ReferralSnapshot, derive_code
from formproof.storage.db import Database

logger = get_logger(__name__)


def _normalize(code: str | None) -> str:
    code = (code or "").strip()
    if not code:
        raise InvalidArgument("Missing referral code.")
    return code


class ReferralService:
    """Service for referral codes and their visit counters."""

    def __init__(self, database: Database):
        """Initialize referral service.

        Args:
            database: Datastore holding referral records
        """
        self.db = database
        self.logger = get_logger(__name__)

    def code_for(self, uid: str) -> str:
        """Get the referral code of a user.

        Args:
            uid: User identity

        Returns:
            Stored code, or the code derived from the identity
        """
        with self.db.session() as session:
            stored = session.execute(
                select(UserRecord.ref_code).where(UserRecord.uid == uid)
            ).scalar_one_or_none()
        return stored or derive_code(uid)

    def get_visit_count(self, code: str) -> int:
        """Get recorded visits for a code (0 if never visited)."""
        code = _normalize(code)
        with self.db.session() as session:
            return ReferralSnapshot.from_row(code, session.get(Referral, code)).visit_count

    def record_visit(self, code: str) -> int:
        """Record one visit of a referral link.

        Args:
            code: Referral code from the visited link

        Returns:
            Visit count after this visit
        """
        code = _normalize(code)

        def apply(session: Session) -> int:
            referral = session.execute(
                select(Referral).where(Referral.code == code).with_for_update()
            ).scalar_one_or_none()
            if referral is None:
                referral = Referral(code=code, visit_count=0)
                session.add(referral)
            referral.visit_count = (referral.visit_count or 0) + 1
            return referral.visit_count

        visit_count = self.db.run_transaction(apply)
        self.logger.info("referral_visit_recorded", code=code, visit_count=visit_count)
        return visit_count
