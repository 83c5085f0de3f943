"""Points ledger database models and read snapshots."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from formproof.storage.models import Base

# Maximum stored length of recognized text per proof
OCR_SNIPPET_LENGTH = 200


class ProofStatus(str, Enum):
    """Outcome of evaluating a proof image."""
    VERIFIED = "verified"
    REJECTED = "rejected"


class SubmissionStatus(str, Enum):
    """Outcome reported to the caller."""
    ALREADY = "already"
    VERIFIED = "verified"
    REJECTED = "rejected"


class UserRecord(Base):
    """Points account of a user, keyed by the caller identity."""

    __tablename__ = "users"

    uid: Mapped[str] = mapped_column(String(128), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    points: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    ref_code: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)

    # Bumped on every update; concurrent writers fail with StaleDataError
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now(), nullable=False
    )

    completions: Mapped[list["FormCompletion"]] = relationship(
        "FormCompletion", back_populates="user", cascade="all, delete-orphan"
    )
    proofs: Mapped[list["Proof"]] = relationship(
        "Proof", back_populates="user", cascade="all, delete-orphan"
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<UserRecord(uid={self.uid}, points={self.points})>"


class FormCompletion(Base):
    """A form the user has been awarded points for. Set once."""

    __tablename__ = "form_completions"
    __table_args__ = (UniqueConstraint("uid", "form_id", name="uq_form_completions_uid_form"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uid: Mapped[str] = mapped_column(String(128), ForeignKey("users.uid"), nullable=False, index=True)
    form_id: Mapped[str] = mapped_column(String(64), nullable=False)
    completed_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)

    user: Mapped[UserRecord] = relationship("UserRecord", back_populates="completions")


class Proof(Base):
    """Latest proof submitted by a user for a form."""

    __tablename__ = "proofs"
    __table_args__ = (UniqueConstraint("uid", "form_id", name="uq_proofs_uid_form"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uid: Mapped[str] = mapped_column(String(128), ForeignKey("users.uid"), nullable=False, index=True)
    form_id: Mapped[str] = mapped_column(String(64), nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    submitted_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    ocr_snippet: Mapped[str] = mapped_column(String(OCR_SNIPPET_LENGTH), default="", nullable=False)

    user: Mapped[UserRecord] = relationship("UserRecord", back_populates="proofs")


class PointsLedgerEntry(Base):
    """Append-only record of each points award."""

    __tablename__ = "points_ledger"
    __table_args__ = (UniqueConstraint("uid", "form_id", name="uq_points_ledger_uid_form"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uid: Mapped[str] = mapped_column(String(128), ForeignKey("users.uid"), nullable=False, index=True)
    form_id: Mapped[str] = mapped_column(String(64), nullable=False)
    points: Mapped[int] = mapped_column(Integer, nullable=False)
    balance_after: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)


# ==================== SNAPSHOTS ====================


@dataclass(frozen=True)
class ProofSnapshot:
    url: str
    status: str
    submitted_at: datetime | None
    ocr_snippet: str

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "status": self.status,
            "submittedAt": self.submitted_at.isoformat() if self.submitted_at else None,
            "ocrSnippet": self.ocr_snippet,
        }


@dataclass(frozen=True)
class UserSnapshot:
    """Read view of a user record with explicit zero-values.

    A missing row and a row with ``points = 0`` behave the same.
    """
    uid: str
    exists: bool = False
    email: str = ""
    points: int = 0
    ref_code: str | None = None
    completions: dict[str, bool] = field(default_factory=dict)
    proofs: dict[str, ProofSnapshot] = field(default_factory=dict)

    @classmethod
    def from_row(cls, uid: str, row: UserRecord | None) -> "UserSnapshot":
        if row is None:
            return cls(uid=uid)
        return cls(
            uid=uid,
            exists=True,
            email=row.email or "",
            points=row.points or 0,
            ref_code=row.ref_code or None,
            completions={c.form_id: True for c in row.completions},
            proofs={
                p.form_id: ProofSnapshot(
                    url=p.url,
                    status=p.status,
                    submitted_at=p.submitted_at,
                    ocr_snippet=p.ocr_snippet,
                )
                for p in row.proofs
            },
        )

    def is_completed(self, form_id: str) -> bool:
        return self.completions.get(form_id, False)


@dataclass(frozen=True)
class SubmissionResult:
    """Response of a proof submission."""
    status: SubmissionStatus
    points: int

    def to_dict(self) -> dict:
        return {"status": self.status.value, "points": self.points}


@dataclass(frozen=True)
class UserSummary:
    """Account overview returned to the owner."""
    uid: str
    points: int
    ref_code: str
    completions: dict[str, bool]
    proofs: dict[str, ProofSnapshot]

    def to_dict(self) -> dict:
        return {
            "uid": self.uid,
            "points": self.points,
            "refCode": self.ref_code,
            "completions": dict(self.completions),
            "proofs": {form_id: proof.to_dict() for form_id, proof in self.proofs.items()},
        }
