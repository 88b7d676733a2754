from dataclasses import dataclass

from pydantic import BaseModel, Field

from sessionledger.core.modules.session.models import Session
from sessionledger.core.modules.user.models import UserView


class SessionView(BaseModel):
    name: str = Field(..., description="Public display name of the session")


class MeFlags(BaseModel):
    is_new_session: bool = Field(default=False, description="A session was created by this request")
    is_new_tracker: bool = Field(default=False, description="The tracker was rotated by this request")


class MeSettings(BaseModel):
    secure_tracker_only: bool = Field(default=False, description="Tracker must only travel over secure transport")
    cookies: bool = Field(default=False, description="Cookie policy accepted")


class MeView(BaseModel):
    """Authoritative description of the current session (API representation)."""

    session: SessionView
    user: UserView | None = Field(default=None, description="Associated user, if any")
    authorized: bool = Field(..., description="Session is currently associated with a user")
    tracker: str = Field(..., description="Tracker to present on subsequent requests")
    flags: MeFlags = Field(default_factory=MeFlags)
    settings: MeSettings = Field(default_factory=MeSettings)
    credential: str | None = Field(default=None, description="Session credential, only set when the session was created")


@dataclass
class RestoreResult:
    session: Session
    me: MeView
