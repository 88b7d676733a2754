from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from sessionledger.core.db import MongoModel
from sessionledger.utils import now


class User(MongoModel):
    """Verified identity with credentials.

    Indexed on name - unique, login_token - unique.
    """

    name: str
    password_hash: str | None = None  # bcrypt hash; None disables password auth
    login_token: str  # returned by the strategies lookup, presented back with the password
    session_id: UUID | None = None  # most recently associated session
    disabled: bool = False
    created_at: datetime = Field(default_factory=now)


class UserView(BaseModel):
    """Public user details (API representation)."""

    id: UUID = Field(..., description="User ID")
    name: str = Field(..., description="Public user name")

    @classmethod
    def from_domain(cls, user: User) -> "UserView":
        """Create view model from domain model."""
        return cls(id=user.id, name=user.name)
