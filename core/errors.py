"""
core/errors.py -- Domain error taxonomy shared by auth/, catalog/, and api/.

Every failure the core can report is an AppError subclass carrying the HTTP
status it maps to and a stable machine-readable code. Stores and services
raise these; api/main.py renders any AppError into the standard
{"error": {"code", "message", "detail"}} envelope with one exception handler,
so route handlers do not translate errors by hand.

Five families, one per client-visible status:
  ValidationError      400  malformed or missing input, unknown or repeated stack names
  AuthError            401  missing/invalid/expired token, bad credentials
  NotFoundOrForbidden  404  missing record or someone else's record
  ConflictError        409  duplicate stack name or username
  DependencyError      500  persistence timeout or failure (opaque to clients)

Layer rule: no imports from api/, auth/, or catalog/.
"""

from __future__ import annotations


class AppError(Exception):
    status_code: int = 500
    code: str = "internal_error"
    message: str = "An unexpected error occurred."

    def __init__(self, message: str | None = None, detail: str | None = None) -> None:
        self.message = message or self.message
        self.detail = detail
        super().__init__(self.message)


# ---------------------------------------------------------------------------
# 400
# ---------------------------------------------------------------------------


class ValidationError(AppError):
    status_code = 400
    code = "invalid_request"
    message = "Invalid request."


class InvalidStack(ValidationError):
    code = "invalid_stack"
    message = "Stack name and color must not be empty."


class PartialResolution(ValidationError):
    """One or more requested stack names are not registered.

    The whole batch is rejected; missing holds the unknown names so the
    client can see which ones to register first.
    """

    code = "unknown_stacks"
    message = "One or more stacks not found."

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(detail=", ".join(missing))


class DuplicateStackNames(ValidationError):
    """The same stack name appears more than once in one request."""

    code = "duplicate_stacks"
    message = "Each stack may be listed only once."

    def __init__(self, repeated: list[str]) -> None:
        self.repeated = repeated
        super().__init__(detail=", ".join(repeated))


# ---------------------------------------------------------------------------
# 401
# ---------------------------------------------------------------------------


class AuthError(AppError):
    status_code = 401
    code = "unauthorized"
    message = "Authentication required."


class UserNotFound(AuthError):
    code = "bad_credentials"
    message = "Invalid username or password."


class InvalidCredential(AuthError):
    code = "bad_credentials"
    message = "Invalid username or password."


class MalformedToken(AuthError):
    code = "malformed_token"
    message = "Session token is malformed."


class InvalidSignature(AuthError):
    code = "invalid_token"
    message = "Session token signature is invalid."


class TokenExpired(AuthError):
    code = "token_expired"
    message = "Session token has expired."


# ---------------------------------------------------------------------------
# 404
# ---------------------------------------------------------------------------


class NotFoundOrForbidden(AppError):
    """Record is missing or owned by someone else.

    The two cases share one status and one message so a caller cannot probe
    for the existence of other users' records.
    """

    status_code = 404
    code = "not_found"
    message = "Content not found or unauthorized."


class StackNotFound(NotFoundOrForbidden):
    message = "Stack not found."


# ---------------------------------------------------------------------------
# 409
# ---------------------------------------------------------------------------


class ConflictError(AppError):
    status_code = 409
    code = "conflict"
    message = "Resource already exists."


class StackConflict(ConflictError):
    message = "Stack with the same name already exists."


class DuplicateIdentity(ConflictError):
    message = "A user with that username already exists."


# ---------------------------------------------------------------------------
# 500
# ---------------------------------------------------------------------------


class DependencyError(AppError):
    status_code = 500
    code = "dependency_error"
    message = "The data store is unavailable. Try again later."
