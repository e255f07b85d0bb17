"""
API request and response models for the CMS REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
catalog/models.py, which own the internal domain representation. Route
handlers map between the two.

Wire names follow the existing client contract: content carries "imgUrl" and
"stack", and owner ids are exposed as "user_id".
"""

from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

from auth.passwords import MAX_PASSWORD_BYTES
from catalog.models import Content, ContentDraft, Stack

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+$"

# Identifiers are trimmed; passwords are taken byte-for-byte as sent.
Username = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
Email = Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=255, pattern=EMAIL_PATTERN)]


def _check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes when UTF-8 encoded")
    return value


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /register.

    The password is hashed exactly as sent. bcrypt only covers 72 bytes, so
    anything longer is refused rather than silently cut.
    """

    username: Username
    email: Email
    password: str = Field(min_length=1)

    @field_validator("password")
    @classmethod
    def password_within_bcrypt_limit(cls, value: str) -> str:
        return _check_password_bytes(value)


class LoginRequest(BaseModel):
    """Request body for POST /login."""

    username: Username
    password: str = Field(min_length=1)

    @field_validator("password")
    @classmethod
    def password_within_bcrypt_limit(cls, value: str) -> str:
        return _check_password_bytes(value)


class StackRequest(BaseModel):
    """Request body for POST /stacks and PUT /stacks/{id}. Both fields required."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=100)
    color: str = Field(min_length=1, max_length=50)


class ContentRequest(BaseModel):
    """Request body for POST /content and PUT /content/{id}.

    stack lists stack *names*; the server resolves them to full records and
    embeds copies. Any unknown name rejects the whole request with 400.
    """

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    name: str = Field(min_length=1, max_length=255)
    description: str = Field(default="", max_length=5000)
    url: str = Field(default="", max_length=2048)
    img_url: str = Field(default="", max_length=2048, alias="imgUrl")
    stack: list[str] = Field(default_factory=list, max_length=50)

    @field_validator("stack", mode="before")
    @classmethod
    def strip_stack_names(cls, values: list) -> list:
        """Strip whitespace around each name. Repeats are kept; resolution rejects them."""
        if not isinstance(values, list):
            return values
        return [v.strip() if isinstance(v, str) else v for v in values]

    def to_draft(self) -> ContentDraft:
        return ContentDraft(
            name=self.name,
            description=self.description,
            url=self.url,
            img_url=self.img_url,
            stack_names=list(self.stack),
        )


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


class StackResponse(BaseModel):
    """A stack as returned by /stacks and embedded in content."""

    model_config = ConfigDict(frozen=True)

    id: Optional[int]
    name: str
    color: str

    @classmethod
    def from_domain(cls, stack: Stack) -> "StackResponse":
        return cls(id=stack.id, name=stack.name, color=stack.color)


class ContentResponse(BaseModel):
    """A content item with its embedded stack snapshots."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    user_id: int
    name: str
    description: str
    url: str
    img_url: str = Field(alias="imgUrl")
    stack: list[StackResponse]

    @classmethod
    def from_domain(cls, content: Content) -> "ContentResponse":
        """Build a ContentResponse from a catalog Content instance.

        The mapping lives here, colocated with the output model, rather than
        scattered across route handlers.
        """
        return cls(
            id=content.id,
            user_id=content.user_id,
            name=content.name,
            description=content.description,
            url=content.url,
            img_url=content.img_url,
            stack=[StackResponse.from_domain(s) for s in content.stack],
        )


class MeResponse(BaseModel):
    """Identity of the caller, taken from the verified session token."""

    model_config = ConfigDict(frozen=True)

    user_id: int
    username: str


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]
