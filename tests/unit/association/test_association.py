"""Tests for associating users with sessions."""

import asyncio

import pytest

from sessionledger.core.modules.association.models import AuthFailure
from sessionledger.core.modules.user.models import User
from sessionledger.errors import InvariantViolationError, ValidationError


@pytest.fixture
def association(core):
    return core.services.association


def run(coro):
    return asyncio.run(coro)


class TestAuthenticate:
    """Tests for password authentication."""

    @pytest.fixture(autouse=True)
    def setup(self, core, repository, association, new_session, create_user):
        self.core = core
        self.repository = repository
        self.association = association
        self.session, self.credential = new_session()
        self.user = create_user("alice", "secret")

    def stored_session(self):
        return run(self.core.services.session.resolve(self.credential))

    def stored_user(self, user_id=None):
        return run(self.repository.find_user_by_id(user_id or self.user.id))

    def test_success_sets_both_pointers(self):
        result = run(self.association.authenticate(self.session, self.user.login_token, "secret"))

        assert result is self.session
        assert self.session.user_id == self.user.id
        assert self.stored_session().user_id == self.user.id
        assert self.stored_user().session_id == self.session.id

    def test_success_appends_exactly_one_login(self):
        run(self.association.authenticate(self.session, self.user.login_token, "secret"))

        logins = self.stored_session().logins
        assert len(logins) == 1
        assert logins[0].user_id == self.user.id
        assert logins[0].eid == self.session.last_evidence.eid

    def test_wrong_password_leaves_state_unchanged(self):
        result = run(self.association.authenticate(self.session, self.user.login_token, "wrong"))

        assert result == AuthFailure.INVALID_PROOF
        assert self.session.user_id is None
        assert self.stored_session().logins == []
        assert self.stored_session().user_id is None
        assert self.stored_user().session_id is None

    def test_unknown_token(self):
        result = run(self.association.authenticate(self.session, "login-unknown", "secret"))

        assert result == AuthFailure.INVALID_TOKEN
        assert self.stored_session().logins == []

    def test_user_id_is_not_a_login_token(self):
        result = run(self.association.authenticate(self.session, str(self.user.id), "secret"))

        assert result == AuthFailure.INVALID_TOKEN

    def test_disabled_user(self):
        disabled = User(name="bob", login_token="login-bob", password_hash=self.user.password_hash, disabled=True)
        run(self.repository.append_user(disabled))

        assert run(self.association.authenticate(self.session, "login-bob", "secret")) == AuthFailure.INVALID_TOKEN

    def test_user_without_password(self):
        run(self.repository.append_user(User(name="carol", login_token="login-carol")))

        assert run(self.association.authenticate(self.session, "login-carol", "x")) == AuthFailure.METHOD_DISABLED

    def test_last_writer_wins_across_sessions(self, new_session):
        other, _ = new_session()
        run(self.association.authenticate(self.session, self.user.login_token, "secret"))
        run(self.association.authenticate(other, self.user.login_token, "secret"))

        assert self.stored_user().session_id == other.id
        # the earlier session keeps its association
        assert self.stored_session().user_id == self.user.id

    def test_switching_user_releases_previous_pointer(self, create_user):
        bob = create_user("bob", "hunter2")
        run(self.association.authenticate(self.session, self.user.login_token, "secret"))
        run(self.association.authenticate(self.session, bob.login_token, "hunter2"))

        assert self.stored_session().user_id == bob.id
        assert self.stored_user().session_id is None
        assert self.stored_user(bob.id).session_id == self.session.id


class TestDisassociate:
    """Tests for logout."""

    @pytest.fixture(autouse=True)
    def setup(self, core, repository, association, new_session, create_user):
        self.core = core
        self.repository = repository
        self.association = association
        self.session, self.credential = new_session()
        self.user = create_user("alice", "secret")

    def test_logout_clears_both_pointers(self):
        run(self.association.authenticate(self.session, self.user.login_token, "secret"))
        run(self.association.disassociate(self.session))

        stored = run(self.core.services.session.resolve(self.credential))
        assert stored.user_id is None
        assert stored.logins[-1].is_logout
        assert len(stored.logins) == 2
        assert run(self.repository.find_user_by_id(self.user.id)).session_id is None

    def test_logout_without_user_is_noop(self):
        run(self.association.disassociate(self.session))

        stored = run(self.core.services.session.resolve(self.credential))
        assert stored.logins == []

    def test_repeated_logout_appends_once(self):
        run(self.association.authenticate(self.session, self.user.login_token, "secret"))
        run(self.association.disassociate(self.session))
        run(self.association.disassociate(self.session))

        stored = run(self.core.services.session.resolve(self.credential))
        assert [login.is_logout for login in stored.logins] == [False, True]

    def test_logout_keeps_pointer_owned_by_other_session(self, new_session):
        other, _ = new_session()
        run(self.association.authenticate(self.session, self.user.login_token, "secret"))
        run(self.association.authenticate(other, self.user.login_token, "secret"))
        run(self.association.disassociate(self.session))

        assert run(self.repository.find_user_by_id(self.user.id)).session_id == other.id

    def test_missing_user_is_fatal(self):
        ghost = User(name="ghost", login_token="login-ghost")
        run(self.repository.set_session_user(self.session.id, ghost.id))
        self.session.user_id = ghost.id

        with pytest.raises(InvariantViolationError):
            run(self.association.disassociate(self.session))

        stored = run(self.core.services.session.resolve(self.credential))
        assert stored.logins == []


class TestAuthMethodsAndRegister:
    """Tests for auth method listing and user creation."""

    def test_list_auth_methods(self, association, create_user):
        user = create_user("alice", "secret")

        methods = run(association.list_auth_methods(user.id))

        assert methods.user.id == user.id
        assert methods.user.name == "alice"
        assert methods.password.token == user.login_token

    def test_list_auth_methods_without_password(self, association, repository):
        user = User(name="carol", login_token="login-carol")
        run(repository.append_user(user))

        methods = run(association.list_auth_methods(user.id))

        assert methods.password is None

    def test_list_auth_methods_unknown_user(self, association):
        assert run(association.list_auth_methods(User(name="x", login_token="y").id)) is None

    def test_register_associates_new_user(self, core, association, new_session):
        session, credential = new_session()

        run(association.register(session, "dave", "secret"))

        stored = run(core.services.session.resolve(credential))
        user = run(core.repository.find_user_by_id(stored.user_id))
        assert user.name == "dave"
        assert user.session_id == session.id
        assert len(stored.logins) == 1

    def test_register_rejects_taken_name(self, association, new_session, create_user):
        create_user("alice", "secret")
        session, _ = new_session()

        with pytest.raises(ValidationError, match="already exists"):
            run(association.register(session, "alice", "other"))
