"""Custom exceptions for PasteForge"""

from typing import Optional


class PasteForgeError(Exception):
    """Base exception for PasteForge"""

    status_code = 500

    def __init__(self, message: str = ""):
        self.message = message
        super().__init__(message)


class ValidationError(PasteForgeError):
    """Missing, empty or too-short input"""

    status_code = 400


class AuthenticationRequired(PasteForgeError):
    """No session, or the session token did not verify"""

    status_code = 401


class InvalidCredentials(PasteForgeError):
    """Username/password pair did not match any user"""

    status_code = 401


class AuthorizationDenied(PasteForgeError):
    """Valid session, but not the owner of the target"""

    status_code = 403


class NotFoundError(PasteForgeError):
    """Unknown paste id or username"""

    status_code = 404


class ConflictError(PasteForgeError):
    """Username already taken"""

    status_code = 409


class StoreError(PasteForgeError):
    """Document store unreachable or returned a non-success status"""

    def __init__(self, message: str, http_status: Optional[int] = None):
        self.http_status = http_status
        super().__init__(message)


class ConfigError(PasteForgeError):
    """Configuration error"""
    pass
