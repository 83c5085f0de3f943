"""Known forms, their point values and request validation."""

from dataclasses import dataclass
from typing import Any

from formproof.errors import MSG_MISSING_PROOF, MSG_SIGN_IN, InvalidArgument, Unauthenticated

# Points awarded per verified form. Not user-extensible.
FORM_POINTS: dict[str, int] = {
    "fwc-preferences": 20,
    "feedback-form": 10,
    "delegate-school": 15,
    "delegate-independent": 15,
    "advisor-signup": 10,
    "chair-applications": 25,
}


@dataclass(frozen=True)
class Caller:
    """Verified identity of the user making a call."""
    uid: str
    email: str = ""


@dataclass(frozen=True)
class ProofRequest:
    """A validated proof submission."""
    caller: Caller
    form_id: str
    proof_url: str

    @property
    def points(self) -> int:
        return FORM_POINTS[self.form_id]


def known_forms() -> dict[str, int]:
    """Return a copy of the points table."""
    return dict(FORM_POINTS)


def points_for(form_id: str) -> int:
    """Point value of a form.

    Raises:
        InvalidArgument: If the form is unknown
    """
    if form_id not in FORM_POINTS:
        raise InvalidArgument(MSG_MISSING_PROOF)
    return FORM_POINTS[form_id]


def validate_proof_request(caller: Caller | None, payload: dict[str, Any] | None) -> ProofRequest:
    """Check identity and required fields of a proof submission.

    Args:
        caller: Verified caller, or None for anonymous calls
        payload: Request body with ``formId`` and ``proofUrl``

    Returns:
        Validated request

    Raises:
        Unauthenticated: If there is no caller
        InvalidArgument: If formId is missing/unknown or proofUrl is missing
    """
    if caller is None:
        raise Unauthenticated(MSG_SIGN_IN)

    payload = payload or {}
    form_id = payload.get("formId")
    proof_url = payload.get("proofUrl")

    if not isinstance(form_id, str) or form_id not in FORM_POINTS:
        raise InvalidArgument(MSG_MISSING_PROOF)
    if not isinstance(proof_url, str) or not proof_url:
        raise InvalidArgument(MSG_MISSING_PROOF)

    return ProofRequest(caller=caller, form_id=form_id, proof_url=proof_url)
