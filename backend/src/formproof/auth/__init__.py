"""Caller authentication."""

from formproof.auth.middleware import get_caller, require_caller
from formproof.auth.tokens import TokenService

__all__ = ["TokenService", "get_caller", "require_caller"]
