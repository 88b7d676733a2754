import structlog

from sessionledger.core.core import Service
from sessionledger.core.modules.session.models import Evidence, Session
from sessionledger.errors import InvariantViolationError

logger = structlog.get_logger(__name__)


class EvidenceService(Service):
    """Appends snapshots to a session's evidence ledger."""

    async def append(self, session: Session, snapshot: Evidence) -> None:
        """Append a snapshot; prior snapshots are never rewritten."""
        if session.evidence and snapshot.ts < session.last_evidence.ts:
            raise InvariantViolationError(f"Evidence for session '{session.name}' would go back in time")
        await self.repository.append_evidence(session.id, snapshot)
        session.evidence.append(snapshot)
        logger.debug("evidence_appended", count=len(session.evidence), fields=sorted(snapshot.fields))
