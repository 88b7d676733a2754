"""Tests for appending to the evidence ledger."""

import asyncio
from datetime import timedelta

import pytest

from sessionledger.core.modules.session.models import Evidence
from sessionledger.errors import InvariantViolationError


def test_append_persists_and_keeps_prior_snapshots(core, repository, new_session):
    session, credential = new_session()
    first = session.evidence[0]
    snapshot = Evidence(ts=first.ts, eid="eid-next", fields={"device": "phone-xyz"})

    asyncio.run(core.services.evidence.append(session, snapshot))

    assert [e.eid for e in session.evidence] == [first.eid, "eid-next"]
    stored = asyncio.run(core.services.session.resolve(credential))
    assert stored.evidence == session.evidence


def test_append_rejects_snapshot_older_than_last(core, new_session):
    session, credential = new_session()
    stale = Evidence(ts=session.last_evidence.ts - timedelta(seconds=1), eid="eid-old")

    with pytest.raises(InvariantViolationError):
        asyncio.run(core.services.evidence.append(session, stale))

    stored = asyncio.run(core.services.session.resolve(credential))
    assert len(stored.evidence) == 1
