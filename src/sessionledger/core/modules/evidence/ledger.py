"""Evidence comparison and merge rules.

A session's evidence is an append-only list of snapshots. Each snapshot carries
the tracker (eid) issued with it and the client-reported fields in effect at
that time. Incoming fields are compared key by key against the last snapshot:

- a key whose value differs from (or is missing in) the last snapshot is a change
- a key sent with value None that the last snapshot has is a change, and drops the key
- a key not sent at all is not a change, and keeps its prior value

The tracker key takes no part in the comparison. A changed snapshot is the
prior fields overridden by the changed keys, issued with a fresh tracker.
"""

from collections.abc import Callable, Mapping
from enum import StrEnum
from typing import Any

from sessionledger.core.modules.session.models import Evidence, EvidenceValue
from sessionledger.utils import now

TRACKER_FIELD = "eid"
MISSING_TRACKER = "+"  # stands in for an absent tracker cookie; never issued as a token


class TrackerStatus(StrEnum):
    MATCHED = "matched"
    MISSING = "missing"
    STALE = "stale"


def tracker_status(evidence: list[Evidence], presented: str | None) -> TrackerStatus:
    """Classify the presented tracker against the last issued one."""
    presented = presented or MISSING_TRACKER
    if presented == MISSING_TRACKER:
        return TrackerStatus.MISSING
    if presented == evidence[-1].eid:
        return TrackerStatus.MATCHED
    return TrackerStatus.STALE


def changed_fields(previous: Mapping[str, EvidenceValue], incoming: Mapping[str, Any]) -> dict[str, Any]:
    """Return the incoming keys whose values differ from the previous snapshot."""
    changes: dict[str, Any] = {}
    for key, value in incoming.items():
        if key == TRACKER_FIELD:
            continue
        if value is None:
            if key in previous:
                changes[key] = None
        elif key not in previous or not _same(previous[key], value):
            changes[key] = value
    return changes


def merge_fields(previous: Mapping[str, EvidenceValue], changes: Mapping[str, Any]) -> dict[str, EvidenceValue]:
    """Override previous fields with changes; a None change removes the key."""
    merged = dict(previous)
    for key, value in changes.items():
        if value is None:
            merged.pop(key, None)
        else:
            merged[key] = value
    return merged


def diff(evidence: list[Evidence], incoming: Mapping[str, Any], issue_tracker: Callable[[], str]) -> Evidence | None:
    """Return the snapshot to append when incoming fields differ from the last one, else None."""
    last = evidence[-1]
    changes = changed_fields(last.fields, incoming)
    if not changes:
        return None
    return Evidence(ts=max(now(), last.ts), eid=issue_tracker(), fields=merge_fields(last.fields, changes))


def seed(incoming: Mapping[str, Any], tracker: str) -> Evidence:
    """Build the first snapshot of a new session."""
    fields = {key: value for key, value in incoming.items() if key != TRACKER_FIELD and value is not None}
    return Evidence(eid=tracker, fields=fields)


def _same(a: EvidenceValue, b: Any) -> bool:
    # True == 1 in Python; a bool switching to an int is still a change
    return type(a) is type(b) and a == b
