"""
Public error taxonomy

Module: core.errors
Date: 2026-10-19
Version: 0.1.0

These are the only exceptions AuthSystem lets reach its callers.
Messages never contain secrets, credential hashes or signing keys, and
authentication/token failures are deliberately uninformative.
"""


class AuthError(Exception):
    """Base authentication error"""
    pass


class InvalidInputError(AuthError):
    """Caller supplied an unusable identifier or secret"""
    pass


class EmptySecretError(InvalidInputError):
    """Secret is empty"""
    pass


class UserAlreadyExistsError(AuthError):
    """Identifier is already registered"""
    pass


class InvalidCredentialsError(AuthError):
    """Unknown identifier or wrong secret"""

    def __init__(self, message: str = "Invalid identifier or secret"):
        super().__init__(message)


class InvalidTokenError(AuthError):
    """Token is malformed, badly signed or expired"""

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message)
