"""
Core module - AuthSystem orchestration and public errors
"""

from .auth_system import AuthSystem, AuthConfig
from .errors import (
    AuthError,
    InvalidInputError,
    EmptySecretError,
    UserAlreadyExistsError,
    InvalidCredentialsError,
    InvalidTokenError,
)

__all__ = [
    "AuthSystem",
    "AuthConfig",
    "AuthError",
    "InvalidInputError",
    "EmptySecretError",
    "UserAlreadyExistsError",
    "InvalidCredentialsError",
    "InvalidTokenError",
]
