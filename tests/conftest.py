"""Shared pytest fixtures."""

import asyncio
import itertools

import pytest

from sessionledger.config import Config
from sessionledger.core.core import Core
from sessionledger.core.memory import MemoryRepository
from sessionledger.core.modules.session.models import Credential, Tracker
from sessionledger.core.tokens import TokenProvider


class SequentialTokens(TokenProvider):
    """Predictable tokens for assertions."""

    def __init__(self) -> None:
        self._counter = itertools.count(1)

    def credential(self) -> Credential:
        return Credential(f"sid-{next(self._counter)}")

    def tracker(self) -> Tracker:
        return Tracker(f"eid-{next(self._counter)}")

    def login_token(self) -> str:
        return f"login-{next(self._counter)}"

    def session_name(self) -> str:
        return f"s-{next(self._counter):05d}"


@pytest.fixture
def config():
    """Memory-backed config with cheap bcrypt rounds."""
    return Config(database_url="memory://", bcrypt_rounds=4)


@pytest.fixture
def repository():
    return MemoryRepository()


@pytest.fixture
def core(config, repository):
    """Core wired to the memory repository and sequential tokens."""
    return Core(config, repository, SequentialTokens())


@pytest.fixture
def create_user(core):
    """Create a user through the user service."""

    def _create(name="alice", password="secret"):
        return asyncio.run(core.services.user.create_user(name, password))

    return _create


@pytest.fixture
def new_session(core):
    """Create a fresh session, returning (session, credential)."""

    def _create(evidence=None):
        result = asyncio.run(core.services.lifecycle.restore_or_create(None, None, evidence or {"device": "phone-abc"}))
        return result.session, Credential(result.me.credential)

    return _create
