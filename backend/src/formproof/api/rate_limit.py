"""Rate limiting for the formproof API."""

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from formproof.settings import settings


def caller_or_address(request: Request) -> str:
    """Key requests by bearer token when one is sent, else by client address.

    Callers behind one NAT then get separate buckets for proof submissions.
    """
    auth = request.headers.get("authorization", "")
    scheme, _, token = auth.partition(" ")
    if scheme.lower() == "bearer" and token:
        return f"token:{token[-32:]}"
    return get_remote_address(request)


# Shared limiter; only enforced in production
limiter = Limiter(
    key_func=caller_or_address,
    default_limits=[settings.rate_limit_default],
    storage_uri="memory://",
    enabled=settings.env == "production",
)
