"""
Authentication Package

Login, registration, logout and session refresh on top of the API client
and the token manager.
"""

from moneyapp.services.auth.service import (
    AuthError,
    AuthErrorKind,
    AuthService,
)

__all__ = [
    "AuthError",
    "AuthErrorKind",
    "AuthService",
]
