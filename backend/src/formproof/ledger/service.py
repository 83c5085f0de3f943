"""Points ledger: conditional, exactly-once awards per user and form."""

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from formproof.errors import MSG_REFERRAL_REQUIRED, FailedPrecondition
from formproof.forms import points_for
from formproof.ledger.models import (
    OCR_SNIPPET_LENGTH,
    FormCompletion,
    PointsLedgerEntry,
    Proof,
    ProofStatus,
    SubmissionResult,
    SubmissionStatus,
    UserRecord,
    UserSnapshot,
    UserSummary,
)
from formproof.logging_config import get_logger
from formproof.referral.models import Referral, ReferralSnapshot, derive_code
from formproof.storage.db import Database

logger = get_logger(__name__)


def _load_user(session: Session, uid: str, lock: bool = False) -> UserRecord | None:
    stmt = (
        select(UserRecord)
        .where(UserRecord.uid == uid)
        .options(selectinload(UserRecord.completions), selectinload(UserRecord.proofs))
    )
    if lock:
        stmt = stmt.with_for_update()
    return session.execute(stmt).scalar_one_or_none()


class LedgerService:
    """Service applying proof outcomes to user points.

    Operations:
    - Record a submission (proof upsert + conditional award)
    - Read an account summary
    """

    def __init__(self, database: Database):
        """Initialize ledger service.

        Args:
            database: Datastore the ledger transacts against
        """
        self.db = database
        self.logger = get_logger(__name__)

    def record_submission(
        self,
        uid: str,
        form_id: str,
        proof_url: str,
        ocr_text: str,
        verified: bool,
        email: str = "",
    ) -> SubmissionResult:
        """Store a proof and award points for it at most once.

        Args:
            uid: Caller identity
            form_id: Known form identifier
            proof_url: URL of the submitted image
            ocr_text: Recognized text of the image
            verified: Whether the text shows evidence of a submitted form
            email: Caller email, stored if the user has none yet

        Returns:
            Submission status and the user's points afterwards

        Raises:
            FailedPrecondition: If the user's referral code has no visits
        """
        award = points_for(form_id)
        proof_status = ProofStatus.VERIFIED if verified else ProofStatus.REJECTED

        def apply(session: Session) -> SubmissionResult:
            row = _load_user(session, uid, lock=True)
            user = UserSnapshot.from_row(uid, row)

            code = user.ref_code or derive_code(uid)
            referral = ReferralSnapshot.from_row(code, session.get(Referral, code))

            if referral.visit_count < 1:
                self.logger.info("referral_required", uid=uid, form_id=form_id, ref_code=code)
                raise FailedPrecondition(MSG_REFERRAL_REQUIRED)

            if user.is_completed(form_id):
                self.logger.info("proof_already_completed", uid=uid, form_id=form_id)
                return SubmissionResult(status=SubmissionStatus.ALREADY, points=user.points)

            if row is None:
                row = UserRecord(uid=uid, email=email or "", points=0)
                session.add(row)
                session.flush()
            elif not row.email:
                row.email = email or ""

            proof = next((p for p in row.proofs if p.form_id == form_id), None)
            if proof is None:
                proof = Proof(uid=uid, form_id=form_id)
                row.proofs.append(proof)
            proof.url = proof_url
            proof.status = proof_status.value
            proof.submitted_at = func.now()
            proof.ocr_snippet = ocr_text[:OCR_SNIPPET_LENGTH]

            points = user.points
            if verified:
                points = user.points + award
                row.points = points
                row.completions.append(FormCompletion(uid=uid, form_id=form_id))
                session.add(
                    PointsLedgerEntry(uid=uid, form_id=form_id, points=award, balance_after=points)
                )
            else:
                # Touch the row so concurrent writers conflict on version
                row.updated_at = func.now()

            status = SubmissionStatus.VERIFIED if verified else SubmissionStatus.REJECTED
            return SubmissionResult(status=status, points=points)

        result = self.db.run_transaction(apply)

        self.logger.info(
            "proof_recorded",
            uid=uid,
            form_id=form_id,
            status=result.status.value,
            points=result.points,
        )
        return result

    def get_summary(self, uid: str) -> UserSummary:
        """Get points, completions and proofs for a user.

        Args:
            uid: User identity

        Returns:
            Account summary (empty for unknown users)
        """
        with self.db.session() as session:
            user = UserSnapshot.from_row(uid, _load_user(session, uid))

        return UserSummary(
            uid=uid,
            points=user.points,
            ref_code=user.ref_code or derive_code(uid),
            completions=user.completions,
            proofs=user.proofs,
        )

    def get_user(self, uid: str) -> UserSnapshot:
        """Read a user snapshot outside of any write."""
        with self.db.session() as session:
            return UserSnapshot.from_row(uid, _load_user(session, uid))
