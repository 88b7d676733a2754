from uuid import UUID

from sessionledger.core.modules.session.models import Evidence, Login, Session, SessionSettings
from sessionledger.core.modules.user.models import User
from sessionledger.core.repository import Repository


class MemoryRepository(Repository):
    """Process-local repository.

    Records are copied on the way in and out, so callers never share state with the store.
    """

    def __init__(self) -> None:
        self._sessions: dict[UUID, Session] = {}
        self._sessions_by_credential: dict[str, UUID] = {}
        self._users: dict[UUID, User] = {}

    def _session(self, session_id: UUID) -> Session:
        return self._sessions[session_id]

    def _user(self, user_id: UUID) -> User:
        return self._users[user_id]

    async def find_session_by_credential(self, credential_hash: str) -> Session | None:
        session_id = self._sessions_by_credential.get(credential_hash)
        if session_id is None:
            return None
        return self._session(session_id).model_copy(deep=True)

    async def append_session(self, session: Session) -> None:
        self._sessions[session.id] = session.model_copy(deep=True)
        self._sessions_by_credential[session.credential_hash] = session.id

    async def append_evidence(self, session_id: UUID, evidence: Evidence) -> None:
        self._session(session_id).evidence.append(evidence.model_copy(deep=True))

    async def append_login(self, session_id: UUID, login: Login) -> None:
        self._session(session_id).logins.append(login.model_copy())

    async def set_session_user(self, session_id: UUID, user_id: UUID | None) -> None:
        self._session(session_id).user_id = user_id

    async def set_session_settings(self, session_id: UUID, settings: SessionSettings) -> None:
        self._session(session_id).settings = settings.model_copy()

    async def find_user_by_id(self, user_id: UUID) -> User | None:
        user = self._users.get(user_id)
        return user.model_copy() if user else None

    async def find_user_by_login_token(self, login_token: str) -> User | None:
        user = next((u for u in self._users.values() if u.login_token == login_token), None)
        return user.model_copy() if user else None

    async def find_user_by_name(self, name: str) -> User | None:
        user = next((u for u in self._users.values() if u.name == name), None)
        return user.model_copy() if user else None

    async def append_user(self, user: User) -> None:
        self._users[user.id] = user.model_copy()

    async def set_user_session(self, user_id: UUID, session_id: UUID | None) -> None:
        self._user(user_id).session_id = session_id
