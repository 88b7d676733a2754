from collections.abc import Mapping
from typing import Any

import structlog

from sessionledger.core.core import Service
from sessionledger.core.modules.evidence import ledger
from sessionledger.core.modules.evidence.validators import validate_evidence_fields
from sessionledger.core.modules.lifecycle.models import MeFlags, MeSettings, MeView, RestoreResult, SessionView
from sessionledger.core.modules.session.models import Credential, Session, Tracker
from sessionledger.core.modules.user.models import UserView
from sessionledger.errors import InvariantViolationError
from sessionledger.utils import hash_credential

logger = structlog.get_logger(__name__)


class LifecycleService(Service):
    """Creates or restores sessions and rotates trackers on evidence change."""

    async def restore_or_create(
        self,
        credential: Credential | None,
        tracker: Tracker | None,
        fields: Mapping[str, Any],
        secure: bool = False,
    ) -> RestoreResult:
        """Resolve the presented credential to a session, creating one on miss.

        Every create issues a distinct session; callers must not retry it blindly.
        """
        fields = validate_evidence_fields(fields)
        session = await self.core.services.session.resolve(credential)
        if session is None:
            return await self._create(fields, secure)
        return await self._reconcile(session, tracker, fields, secure)

    async def describe(self, session: Session, secure: bool = False, flags: MeFlags | None = None) -> MeView:
        """Assemble the response payload for a session."""
        user = None
        if session.user_id is not None:
            found = await self.core.services.user.find_user(session.user_id)
            if found is None:
                raise InvariantViolationError(f"Session '{session.name}' references missing user '{session.user_id}'")
            user = UserView.from_domain(found)

        return MeView(
            session=SessionView(name=session.name),
            user=user,
            authorized=user is not None,
            tracker=session.last_evidence.eid,
            flags=flags or MeFlags(),
            settings=MeSettings(secure_tracker_only=secure, cookies=session.settings.cookies),
        )

    async def _create(self, fields: dict[str, Any], secure: bool) -> RestoreResult:
        tokens = self.core.tokens
        credential = tokens.credential()
        session = Session(
            name=tokens.session_name(),
            credential_hash=hash_credential(credential),
            evidence=[ledger.seed(fields, tokens.tracker())],
        )
        await self.core.services.session.create_session(session)

        me = await self.describe(session, secure, MeFlags(is_new_session=True, is_new_tracker=True))
        me.credential = credential
        return RestoreResult(session=session, me=me)

    async def _reconcile(self, session: Session, tracker: Tracker | None, fields: dict[str, Any], secure: bool) -> RestoreResult:
        status = ledger.tracker_status(session.evidence, tracker)
        incoming = {**fields, ledger.TRACKER_FIELD: tracker or ledger.MISSING_TRACKER}

        # A missing or stale tracker alone does not rotate; the last issued tracker is echoed back.
        snapshot = ledger.diff(session.evidence, incoming, self.core.tokens.tracker)
        if snapshot is not None:
            await self.core.services.evidence.append(session, snapshot)
            logger.info("evidence_rotated", session=session.name, tracker_status=status, evidence_count=len(session.evidence))
        elif status != ledger.TrackerStatus.MATCHED:
            logger.info("tracker_reissued", session=session.name, tracker_status=status)

        me = await self.describe(session, secure, MeFlags(is_new_tracker=snapshot is not None))
        return RestoreResult(session=session, me=me)
