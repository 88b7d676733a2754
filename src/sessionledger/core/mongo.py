from typing import Any
from urllib.parse import urlparse
from uuid import UUID

import structlog
from pymongo import AsyncMongoClient

from sessionledger.core.modules.session.models import Evidence, Login, Session, SessionSettings
from sessionledger.core.modules.user.models import User
from sessionledger.core.repository import Repository

logger = structlog.get_logger(__name__)


class MongoRepository(Repository):
    """Repository backed by MongoDB through the async pymongo client."""

    def __init__(self, database_url: str) -> None:
        self.client: AsyncMongoClient[dict[str, Any]] = AsyncMongoClient(
            database_url, uuidRepresentation="standard", tz_aware=True
        )
        self.database = self.client.get_database(urlparse(database_url).path[1:])
        self._sessions = self.database.get_collection("sessions")
        self._users = self.database.get_collection("users")

    async def on_start(self) -> None:
        """Create indexes on startup."""
        # Unique index for credential_hash (session resolution)
        await self._sessions.create_index([("credential_hash", 1)], unique=True)
        await self._sessions.create_index([("user_id", 1)])
        await self._users.create_index([("name", 1)], unique=True)
        await self._users.create_index([("login_token", 1)], unique=True)
        logger.debug("mongo_repository_started", database=self.database.name)

    async def on_stop(self) -> None:
        await self.client.aclose()

    async def find_session_by_credential(self, credential_hash: str) -> Session | None:
        return Session.from_mongo(await self._sessions.find_one({"credential_hash": credential_hash}))

    async def append_session(self, session: Session) -> None:
        await self._sessions.insert_one(session.to_mongo())

    async def append_evidence(self, session_id: UUID, evidence: Evidence) -> None:
        await self._sessions.update_one({"_id": session_id}, {"$push": {"evidence": evidence.model_dump()}})

    async def append_login(self, session_id: UUID, login: Login) -> None:
        await self._sessions.update_one({"_id": session_id}, {"$push": {"logins": login.model_dump()}})

    async def set_session_user(self, session_id: UUID, user_id: UUID | None) -> None:
        await self._sessions.update_one({"_id": session_id}, {"$set": {"user_id": user_id}})

    async def set_session_settings(self, session_id: UUID, settings: SessionSettings) -> None:
        await self._sessions.update_one({"_id": session_id}, {"$set": {"settings": settings.model_dump()}})

    async def find_user_by_id(self, user_id: UUID) -> User | None:
        return User.from_mongo(await self._users.find_one({"_id": user_id}))

    async def find_user_by_login_token(self, login_token: str) -> User | None:
        return User.from_mongo(await self._users.find_one({"login_token": login_token}))

    async def find_user_by_name(self, name: str) -> User | None:
        return User.from_mongo(await self._users.find_one({"name": name}))

    async def append_user(self, user: User) -> None:
        await self._users.insert_one(user.to_mongo())

    async def set_user_session(self, user_id: UUID, session_id: UUID | None) -> None:
        await self._users.update_one({"_id": user_id}, {"$set": {"session_id": session_id}})
