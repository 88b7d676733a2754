"""Session management models."""

from datetime import datetime
from typing import NewType
from uuid import UUID

from pydantic import BaseModel, Field

from sessionledger.core.db import MongoModel
from sessionledger.utils import now

Credential = NewType("Credential", str)  # long-lived sid, bearer secret
Tracker = NewType("Tracker", str)  # short-lived eid, rotated on evidence change

EvidenceValue = str | int | float | bool


class Evidence(BaseModel):
    """Snapshot of client-reported attributes, keyed by the tracker issued with it."""

    ts: datetime = Field(default_factory=now)
    eid: str
    fields: dict[str, EvidenceValue] = Field(default_factory=dict)


class Login(BaseModel):
    """Association event. A record without user_id is a logout."""

    ts: datetime = Field(default_factory=now)
    eid: str | None = None
    user_id: UUID | None = None

    @property
    def is_logout(self) -> bool:
        return self.user_id is None


class SessionSettings(BaseModel):
    """Client settings kept with the session."""

    cookies: bool = Field(default=False, description="Cookie policy accepted")


class Session(MongoModel):
    """Anonymous session tied to a client.

    Indexed on credential_hash - unique. The plaintext credential is never stored.
    """

    name: str
    credential_hash: str
    evidence: list[Evidence] = Field(default_factory=list)
    logins: list[Login] = Field(default_factory=list)
    user_id: UUID | None = None
    settings: SessionSettings = Field(default_factory=SessionSettings)
    disabled: bool = False
    created_at: datetime = Field(default_factory=now)

    @property
    def last_evidence(self) -> Evidence:
        return self.evidence[-1]
