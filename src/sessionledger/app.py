from collections.abc import AsyncGenerator, Mapping
from contextlib import asynccontextmanager
from typing import Any
from uuid import UUID

from sessionledger.config import Config
from sessionledger.core.core import Core
from sessionledger.core.modules.association.models import AuthFailure, AuthMethods
from sessionledger.core.modules.lifecycle.models import MeView, RestoreResult
from sessionledger.core.modules.session.models import Credential, Session, SessionSettings, Tracker
from sessionledger.core.repository import Repository
from sessionledger.core.tokens import TokenProvider
from sessionledger.errors import AuthenticationError, NotFoundError


class App:
    """Facade for all application operations, turns expected refusals into user errors before they reach the transport."""

    def __init__(self, config: Config, repository: Repository | None = None, tokens: TokenProvider | None = None) -> None:
        self._core = Core(config, repository, tokens)

    @property
    def config(self) -> Config:
        return self._core.config

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    async def resolve_session(self, credential: Credential | None) -> Session | None:
        """Find the session for a credential, None when it does not resolve."""
        return await self._core.services.session.resolve(credential)

    async def restore(
        self, credential: Credential | None, tracker: Tracker | None, evidence: Mapping[str, Any], secure: bool
    ) -> RestoreResult:
        """Restore the presented session or create a new one, reconciling evidence."""
        return await self._core.services.lifecycle.restore_or_create(credential, tracker, evidence, secure)

    async def get_me(self, session: Session, secure: bool = False) -> MeView:
        """Describe the current session without touching its evidence."""
        return await self._core.services.lifecycle.describe(session, secure)

    async def save_settings(self, session: Session, settings: SessionSettings) -> None:
        await self._core.services.session.save_settings(session, settings)

    async def login_password(self, session: Session, login_token: str, password: str) -> None:
        """Associate a user with the session by login token and password."""
        result = await self._core.services.association.authenticate(session, login_token, password)
        if isinstance(result, AuthFailure):
            raise AuthenticationError

    async def register(self, session: Session, name: str, password: str) -> MeView:
        """Create a user and associate it with the session."""
        await self._core.services.association.register(session, name, password)
        return await self._core.services.lifecycle.describe(session)

    async def logout(self, session: Session) -> None:
        """Drop the session's user association."""
        await self._core.services.association.disassociate(session)

    async def get_auth_methods(self, session: Session, user_id: UUID | None) -> AuthMethods:
        """Auth methods for a user; defaults to the user associated with the session."""
        user_id = user_id or session.user_id
        if user_id is None:
            raise NotFoundError("User not found")
        methods = await self._core.services.association.list_auth_methods(user_id)
        if methods is None:
            raise NotFoundError(f"User '{user_id}' not found")
        return methods
