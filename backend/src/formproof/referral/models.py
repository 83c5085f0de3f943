"""Referral database models."""

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from formproof.storage.models import Base

# Length of the referral code derived from a user's identity
DERIVED_CODE_LENGTH = 8


class Referral(Base):
    """Visit counter for a referral code.

    Rows are created lazily the first time a visit is recorded.
    """
    __tablename__ = "referrals"

    code: Mapped[str] = mapped_column(String(64), primary_key=True)
    visit_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"<Referral(code={self.code}, visits={self.visit_count})>"


@dataclass(frozen=True)
class ReferralSnapshot:
    """Read view of a referral record; absent rows read as zero visits."""
    code: str
    visit_count: int = 0

    @classmethod
    def from_row(cls, code: str, row: Referral | None) -> "ReferralSnapshot":
        if row is None:
            return cls(code=code)
        return cls(code=code, visit_count=row.visit_count or 0)


def derive_code(uid: str) -> str:
    """Referral code used when a user has none stored."""
    return uid[:DERIVED_CODE_LENGTH]
