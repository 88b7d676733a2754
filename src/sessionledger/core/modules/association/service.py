from uuid import UUID

import structlog

from sessionledger.core.core import Service
from sessionledger.core.modules.association.models import AuthFailure, AuthMethods, PasswordMethod
from sessionledger.core.modules.session.models import Login, Session
from sessionledger.core.modules.user.models import User, UserView
from sessionledger.errors import InvariantViolationError

logger = structlog.get_logger(__name__)


class AssociationService(Service):
    """Binds verified users to resolved sessions and unbinds them."""

    async def authenticate(self, session: Session, login_token: str, password: str) -> Session | AuthFailure:
        """Associate the token's user with the session if the password checks out.

        On failure the session and user are left untouched.
        """
        users = self.core.services.user
        user = await users.find_user_by_login_token(login_token)
        if user is None:
            logger.info("authentication_failed", reason=AuthFailure.INVALID_TOKEN)
            return AuthFailure.INVALID_TOKEN
        if user.password_hash is None:
            logger.info("authentication_failed", reason=AuthFailure.METHOD_DISABLED, user_id=str(user.id))
            return AuthFailure.METHOD_DISABLED
        if not users.verify_password(user, password):
            logger.info("authentication_failed", reason=AuthFailure.INVALID_PROOF, user_id=str(user.id))
            return AuthFailure.INVALID_PROOF

        return await self._associate(session, user)

    async def register(self, session: Session, name: str, password: str) -> Session:
        """Create a user and associate it with the session."""
        user = await self.core.services.user.create_user(name, password)
        return await self._associate(session, user)

    async def disassociate(self, session: Session) -> Session:
        """Drop the session's association. No-op when nothing is associated."""
        if session.user_id is None:
            return session

        user = await self._require_user(session, session.user_id)
        logout = Login()
        await self.repository.append_login(session.id, logout)
        session.logins.append(logout)
        await self.repository.set_session_user(session.id, None)
        session.user_id = None
        if user.session_id == session.id:
            await self.repository.set_user_session(user.id, None)

        logger.info("user_disassociated", user_id=str(user.id))
        return session

    async def list_auth_methods(self, user_id: UUID) -> AuthMethods | None:
        """Auth methods enabled for a user, or None for an unknown user."""
        user = await self.core.services.user.find_user(user_id)
        if user is None or user.disabled:
            return None
        password = PasswordMethod(token=user.login_token) if user.password_hash is not None else None
        return AuthMethods(user=UserView.from_domain(user), password=password)

    async def _associate(self, session: Session, user: User) -> Session:
        # Another user's pointer at this session goes stale once the session switches users
        if session.user_id is not None and session.user_id != user.id:
            previous = await self._require_user(session, session.user_id)
            if previous.session_id == session.id:
                await self.repository.set_user_session(previous.id, None)

        login = Login(eid=session.last_evidence.eid, user_id=user.id)
        await self.repository.append_login(session.id, login)
        session.logins.append(login)
        await self.repository.set_session_user(session.id, user.id)
        session.user_id = user.id
        # Last writer wins; the user's previous session keeps its own association
        await self.repository.set_user_session(user.id, session.id)
        user.session_id = session.id

        logger.info("user_associated", user_id=str(user.id))
        return session

    async def _require_user(self, session: Session, user_id: UUID) -> User:
        user = await self.core.services.user.find_user(user_id)
        if user is None:
            raise InvariantViolationError(f"Session '{session.name}' references missing user '{user_id}'")
        return user
