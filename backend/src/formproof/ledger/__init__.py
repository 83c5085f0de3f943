"""Points ledger module.

Each verified form is worth a fixed number of points, awarded once per user.
"""

from formproof.ledger.models import (
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
from formproof.ledger.service import LedgerService

__all__ = [
    "FormCompletion",
    "LedgerService",
    "PointsLedgerEntry",
    "Proof",
    "ProofStatus",
    "SubmissionResult",
    "SubmissionStatus",
    "UserRecord",
    "UserSnapshot",
    "UserSummary",
]
