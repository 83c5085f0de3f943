"""Authentication dependencies for FastAPI."""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from formproof.errors import Unauthenticated
from formproof.forms import Caller
from formproof.logging_config import get_logger

logger = get_logger(__name__)

# Security scheme
security = HTTPBearer(auto_error=False)


async def get_caller(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> Caller | None:
    """Get the verified caller, or None for anonymous calls.

    Args:
        request: FastAPI request
        credentials: Bearer token

    Returns:
        Caller identity or None if not authenticated
    """
    if not credentials:
        return None

    caller = request.app.state.tokens.get_caller(credentials.credentials)
    if caller:
        # Store caller in request state for later use
        request.state.caller = caller
    return caller


def require_caller(caller: Caller | None = Depends(get_caller)) -> Caller:
    """Require authentication.

    Raises:
        Unauthenticated: If the call carries no valid token
    """
    if not caller:
        raise Unauthenticated("Not authenticated.")
    return caller
