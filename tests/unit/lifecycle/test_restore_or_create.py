"""Tests for session creation, restore and tracker rotation."""

import asyncio

import pytest

from sessionledger.core.modules.session.models import Credential, Tracker
from sessionledger.core.modules.user.models import User
from sessionledger.errors import InvariantViolationError, ValidationError


def restore(core, credential=None, tracker=None, evidence=None, secure=False):
    return asyncio.run(core.services.lifecycle.restore_or_create(credential, tracker, evidence or {}, secure))


class TestCreate:
    """Tests for the create branch."""

    def test_new_client_gets_new_session(self, core):
        result = restore(core, evidence={"device": "phone-abc"})

        assert result.me.flags.is_new_session is True
        assert result.me.flags.is_new_tracker is True
        assert len(result.session.evidence) == 1
        assert result.session.evidence[0].fields == {"device": "phone-abc"}
        assert result.me.tracker == result.session.evidence[0].eid
        assert result.me.session.name == result.session.name
        assert result.me.credential is not None
        assert result.me.user is None
        assert result.me.authorized is False

    def test_unknown_credential_creates_session(self, core):
        result = restore(core, credential=Credential("sid-unknown"), tracker=Tracker("eid-unknown"))

        assert result.me.flags.is_new_session is True
        assert result.session.evidence[0].fields == {}

    def test_each_create_is_a_distinct_session(self, core):
        first = restore(core)
        second = restore(core)

        assert first.session.id != second.session.id
        assert first.me.credential != second.me.credential

    def test_secure_hint_is_echoed(self, core):
        assert restore(core, secure=True).me.settings.secure_tracker_only is True
        assert restore(core).me.settings.secure_tracker_only is False

    def test_invalid_evidence_is_rejected(self, core):
        with pytest.raises(ValidationError):
            restore(core, evidence={"screen": {"w": 390}})


class TestReconcile:
    """Tests for the restore branch."""

    @pytest.fixture(autouse=True)
    def setup(self, core, new_session):
        self.core = core
        self.session, self.credential = new_session({"device": "phone-abc", "locale": "en"})
        self.tracker = Tracker(self.session.last_evidence.eid)

    def test_same_fields_keep_tracker(self):
        result = restore(self.core, self.credential, self.tracker, {"device": "phone-abc", "locale": "en"})

        assert result.me.flags.is_new_session is False
        assert result.me.flags.is_new_tracker is False
        assert result.me.tracker == self.tracker
        assert result.me.credential is None
        assert len(result.session.evidence) == 1

    def test_changed_field_rotates_tracker(self):
        result = restore(self.core, self.credential, self.tracker, {"device": "phone-xyz"})

        assert result.me.flags.is_new_tracker is True
        assert result.me.tracker != self.tracker
        assert len(result.session.evidence) == 2
        assert result.session.last_evidence.fields == {"device": "phone-xyz", "locale": "en"}
        assert result.session.last_evidence.ts >= result.session.evidence[0].ts

    def test_rotation_is_persisted(self):
        rotated = restore(self.core, self.credential, self.tracker, {"device": "phone-xyz"})
        again = restore(self.core, self.credential, Tracker(rotated.me.tracker), {"device": "phone-xyz"})

        assert again.me.flags.is_new_tracker is False
        assert again.me.tracker == rotated.me.tracker
        assert len(again.session.evidence) == 2

    def test_missing_tracker_alone_does_not_rotate(self):
        result = restore(self.core, self.credential, None, {"device": "phone-abc"})

        assert result.me.flags.is_new_tracker is False
        assert result.me.tracker == self.tracker
        assert len(result.session.evidence) == 1

    def test_stale_tracker_alone_does_not_rotate(self):
        result = restore(self.core, self.credential, Tracker("eid-stale"), {})

        assert result.me.flags.is_new_tracker is False
        assert result.me.tracker == self.tracker

    def test_forged_tracker_field_in_evidence_is_ignored(self):
        result = restore(self.core, self.credential, self.tracker, {"eid": "forged", "device": "phone-abc"})

        assert result.me.flags.is_new_tracker is False
        assert "eid" not in result.session.last_evidence.fields

    def test_timestamps_are_non_decreasing(self):
        tracker = self.tracker
        for device in ("a", "b", "c", "d"):
            tracker = Tracker(restore(self.core, self.credential, tracker, {"device": device}).me.tracker)

        session = asyncio.run(self.core.services.session.resolve(self.credential))
        assert len(session.evidence) == 5
        assert all(prev.ts <= nxt.ts for prev, nxt in zip(session.evidence, session.evidence[1:], strict=False))


class TestDescribe:
    """Tests for the response payload."""

    def test_associated_user_is_described(self, core, new_session, create_user):
        session, credential = new_session()
        user = create_user("alice", "secret")
        asyncio.run(core.services.association.authenticate(session, user.login_token, "secret"))

        me = restore(core, credential, Tracker(session.last_evidence.eid)).me

        assert me.user is not None
        assert me.user.id == user.id
        assert me.user.name == "alice"
        assert me.authorized is True

    def test_dangling_user_reference_is_fatal(self, core, repository, new_session):
        session, credential = new_session()
        ghost = User(name="ghost", login_token="login-ghost")
        asyncio.run(repository.set_session_user(session.id, ghost.id))

        with pytest.raises(InvariantViolationError):
            restore(core, credential)


class TestRejectedEvidence:
    """Tests for evidence that would never compare equal or cannot be stored."""

    def test_nan_is_rejected_before_touching_the_ledger(self, core, new_session):
        session, credential = new_session()
        tracker = Tracker(session.last_evidence.eid)

        for _ in range(3):
            with pytest.raises(ValidationError):
                restore(core, credential, tracker, {"score": float("nan")})

        stored = asyncio.run(core.services.session.resolve(credential))
        assert len(stored.evidence) == 1
        assert stored.last_evidence.eid == tracker

    def test_finite_float_repeated_keeps_tracker(self, core):
        created = restore(core, evidence={"score": 0.5})
        credential = Credential(created.me.credential)
        tracker = Tracker(created.me.tracker)

        for _ in range(3):
            result = restore(core, credential, tracker, {"score": 0.5})
            assert result.me.flags.is_new_tracker is False
            assert len(result.session.evidence) == 1

    def test_oversized_int_is_rejected(self, core):
        with pytest.raises(ValidationError):
            restore(core, evidence={"n": 2**64})
