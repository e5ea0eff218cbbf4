"""
Domain errors. Each carries a stable machine-readable kind and the HTTP status
the API layer renders it with.
"""

from typing import Any


class WeathercraftError(Exception):
    """Base class for errors surfaced to API callers as {"error", "message"}."""

    kind = "error"
    status_code = 500
    default_message = "Internal server error"

    def __init__(
        self,
        message: str | None = None,
        status_code: int | None = None,
        detail: Any = None,
    ) -> None:
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.detail = detail
        super().__init__(self.message)

    def to_dict(self) -> dict[str, str]:
        return {"error": self.kind, "message": self.message}


class ValidationError(WeathercraftError):
    kind = "validation_error"
    status_code = 400
    default_message = "Invalid request"


class ExternalLookupFailed(WeathercraftError):
    """Name directory did not recognize the name (400) or could not be reached (502)."""

    kind = "external_lookup_failed"
    status_code = 502
    default_message = "Could not resolve player name"


class AccountNotFound(WeathercraftError):
    kind = "account_not_found"
    status_code = 404
    default_message = "Account not found"


class CodeNotFound(WeathercraftError):
    kind = "code_not_found"
    status_code = 404
    default_message = "Invalid code"


class CodeExpired(WeathercraftError):
    kind = "code_expired"
    status_code = 400
    default_message = "Code expired"


class IdentityMismatch(WeathercraftError):
    kind = "identity_mismatch"
    status_code = 403
    default_message = "Identity mismatch"


class Unauthorized(WeathercraftError):
    kind = "unauthorized"
    status_code = 401
    default_message = "Unauthorized"


class StorageError(WeathercraftError):
    kind = "storage_error"
    status_code = 500
    default_message = "Storage failure"


class DuplicateCodeError(StorageError):
    """Raised by stores when a generated code is already live on another account."""

    default_message = "Verification code already in use"
