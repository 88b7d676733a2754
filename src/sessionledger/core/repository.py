"""Storage seam consumed by the core services."""

from abc import ABC, abstractmethod
from uuid import UUID

from sessionledger.core.modules.session.models import Evidence, Login, Session, SessionSettings
from sessionledger.core.modules.user.models import User


class Repository(ABC):
    """Session and user storage.

    Writes are visible to the next read as soon as the awaited call returns.
    """

    async def on_start(self) -> None:
        """Prepare storage on application startup."""

    async def on_stop(self) -> None:
        """Release storage resources on application shutdown."""

    # === Sessions ===
    @abstractmethod
    async def find_session_by_credential(self, credential_hash: str) -> Session | None: ...

    @abstractmethod
    async def append_session(self, session: Session) -> None: ...

    @abstractmethod
    async def append_evidence(self, session_id: UUID, evidence: Evidence) -> None: ...

    @abstractmethod
    async def append_login(self, session_id: UUID, login: Login) -> None: ...

    @abstractmethod
    async def set_session_user(self, session_id: UUID, user_id: UUID | None) -> None: ...

    @abstractmethod
    async def set_session_settings(self, session_id: UUID, settings: SessionSettings) -> None: ...

    # === Users ===
    @abstractmethod
    async def find_user_by_id(self, user_id: UUID) -> User | None: ...

    @abstractmethod
    async def find_user_by_login_token(self, login_token: str) -> User | None: ...

    @abstractmethod
    async def find_user_by_name(self, name: str) -> User | None: ...

    @abstractmethod
    async def append_user(self, user: User) -> None: ...

    @abstractmethod
    async def set_user_session(self, user_id: UUID, session_id: UUID | None) -> None: ...


def create_repository(database_url: str) -> Repository:
    """Pick the repository implementation from the database URL scheme."""
    if database_url.startswith("memory://"):
        from sessionledger.core.memory import MemoryRepository  # noqa: PLC0415

        return MemoryRepository()

    from sessionledger.core.mongo import MongoRepository  # noqa: PLC0415

    return MongoRepository(database_url)
