"""Typed errors surfaced to RPC callers."""

from enum import Enum

from fastapi import status


class ErrorCode(str, Enum):
    """Error kinds understood by callable clients."""
    UNAUTHENTICATED = "UNAUTHENTICATED"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    FAILED_PRECONDITION = "FAILED_PRECONDITION"
    INTERNAL = "INTERNAL"

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self]


_HTTP_STATUS = {
    ErrorCode.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.INVALID_ARGUMENT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.FAILED_PRECONDITION: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class ProofError(Exception):
    """Base error carrying a wire code and a caller-facing message."""

    code: ErrorCode = ErrorCode.INTERNAL

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, str]:
        return {"status": self.code.value, "message": self.message}


class Unauthenticated(ProofError):
    """Raised when the call carries no verified identity."""
    code = ErrorCode.UNAUTHENTICATED


class InvalidArgument(ProofError):
    """Raised for missing or unknown request fields."""
    code = ErrorCode.INVALID_ARGUMENT


class FailedPrecondition(ProofError):
    """Raised when the system is not in a state that allows the call."""
    code = ErrorCode.FAILED_PRECONDITION


class Internal(ProofError):
    """Raised when an upstream dependency fails."""
    code = ErrorCode.INTERNAL


# Messages shared between raise sites and tests
MSG_SIGN_IN = "Sign in to submit proof."
MSG_MISSING_PROOF = "Missing proof data."
MSG_PAT_MISSING = "Clarifai PAT not configured."
MSG_REFERRAL_REQUIRED = "referral-required"
MSG_OCR_FAILED = "Clarifai OCR failed."
