import pytest
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm.exc import StaleDataError

from formproof.errors import FailedPrecondition
from formproof.referral.models import Referral
from formproof.storage.db import is_write_conflict


def test_run_transaction_commits(database):
    def apply(session):
        session.add(Referral(code="COMMIT01", visit_count=3))
        return "done"

    assert database.run_transaction(apply) == "done"
    with database.session() as session:
        assert session.get(Referral, "COMMIT01").visit_count == 3


def test_run_transaction_retries_conflicts(database):
    attempts = []

    def apply(session):
        attempts.append(1)
        session.add(Referral(code=f"TRY{len(attempts)}", visit_count=1))
        if len(attempts) == 1:
            raise StaleDataError("row changed underneath")
        return len(attempts)

    assert database.run_transaction(apply) == 2

    # The failed attempt was rolled back
    with database.session() as session:
        assert session.get(Referral, "TRY1") is None
        assert session.get(Referral, "TRY2") is not None


def test_run_transaction_gives_up_after_max_attempts(database):
    attempts = []

    def apply(session):
        attempts.append(1)
        raise IntegrityError("INSERT", {}, Exception("duplicate"))

    with pytest.raises(IntegrityError):
        database.run_transaction(apply)
    assert len(attempts) == database.max_attempts


def test_domain_errors_are_not_retried(database):
    attempts = []

    def apply(session):
        attempts.append(1)
        session.add(Referral(code="ABORTED", visit_count=1))
        raise FailedPrecondition("referral-required")

    with pytest.raises(FailedPrecondition):
        database.run_transaction(apply)

    assert len(attempts) == 1
    with database.session() as session:
        assert session.get(Referral, "ABORTED") is None


def test_lock_errors_are_retried(database):
    attempts = []

    def apply(session):
        attempts.append(1)
        if len(attempts) == 1:
            raise OperationalError("UPDATE users", {}, Exception("database is locked"))
        return len(attempts)

    assert database.run_transaction(apply) == 2


def test_schema_errors_are_not_retried(database):
    attempts = []

    def apply(session):
        attempts.append(1)
        raise OperationalError("SELECT", {}, Exception("no such table: users"))

    with pytest.raises(OperationalError):
        database.run_transaction(apply)
    assert len(attempts) == 1


def test_is_write_conflict():
    class DriverError(Exception):
        pgcode = "40001"

    assert is_write_conflict(StaleDataError("row changed"))
    assert is_write_conflict(OperationalError("UPDATE", {}, DriverError("serialization failure")))
    assert not is_write_conflict(OperationalError("SELECT", {}, Exception("unable to open database file")))
    assert not is_write_conflict(ValueError("nope"))
