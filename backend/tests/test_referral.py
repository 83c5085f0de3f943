import pytest

from formproof.errors import InvalidArgument
from formproof.ledger.models import UserRecord
from formproof.referral.models import derive_code


def test_derive_code_uses_first_eight_chars():
    assert derive_code("abcdefghijklmnop") == "abcdefgh"
    assert derive_code("short") == "short"


def test_record_visit_creates_and_increments(referrals):
    assert referrals.get_visit_count("ABCD1234") == 0
    assert referrals.record_visit("ABCD1234") == 1
    assert referrals.record_visit(" ABCD1234 ") == 2
    assert referrals.get_visit_count("ABCD1234") == 2


def test_codes_are_independent(referrals):
    referrals.record_visit("one")
    assert referrals.get_visit_count("two") == 0


@pytest.mark.parametrize("code", ["", "   ", None])
def test_record_visit_requires_code(referrals, code):
    with pytest.raises(InvalidArgument):
        referrals.record_visit(code)


def test_code_for_derived_and_stored(referrals, database):
    assert referrals.code_for("uid-without-record") == "uid-with"

    with database.session() as session:
        session.add(UserRecord(uid="stored-user-1", email="", points=0, ref_code="MYCODE"))

    assert referrals.code_for("stored-user-1") == "MYCODE"
