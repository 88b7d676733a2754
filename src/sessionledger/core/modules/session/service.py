import structlog

from sessionledger.core.core import Service
from sessionledger.core.modules.session.models import Credential, Session, SessionSettings
from sessionledger.utils import hash_credential

logger = structlog.get_logger(__name__)


class SessionService(Service):
    """Resolves presented credentials to sessions."""

    async def resolve(self, credential: Credential | None) -> Session | None:
        """Find the session bound to a credential.

        Returns None for a missing or unknown credential and for disabled sessions.
        """
        if not credential:
            return None
        session = await self.repository.find_session_by_credential(hash_credential(credential))
        if session is None or session.disabled:
            return None
        return session

    async def create_session(self, session: Session) -> None:
        await self.repository.append_session(session)
        logger.info("session_created", session=session.name)

    async def save_settings(self, session: Session, settings: SessionSettings) -> Session:
        """Replace the client settings kept with the session."""
        await self.repository.set_session_settings(session.id, settings)
        session.settings = settings
        logger.debug("session_settings_saved", cookies=settings.cookies)
        return session
