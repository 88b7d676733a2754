from enum import StrEnum

from pydantic import BaseModel, Field

from sessionledger.core.modules.user.models import UserView


class AuthFailure(StrEnum):
    """Why an authentication attempt was refused."""

    INVALID_TOKEN = "invalid_token"
    METHOD_DISABLED = "method_disabled"
    INVALID_PROOF = "invalid_proof"


class PasswordMethod(BaseModel):
    token: str = Field(..., description="Login token to present back with the password")


class AuthMethods(BaseModel):
    """Auth methods enabled for a user (API representation)."""

    user: UserView
    password: PasswordMethod | None = Field(default=None, description="Present when password login is enabled")
