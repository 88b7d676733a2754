import secrets
import string

from sessionledger.core.modules.session.models import Credential, Tracker

NAME_ALPHABET = string.ascii_lowercase + string.digits
NAME_LENGTH = 5
TOKEN_BYTES = 24


class TokenProvider:
    """Source of cryptographically unpredictable opaque tokens."""

    def credential(self) -> Credential:
        return Credential(secrets.token_urlsafe(TOKEN_BYTES))

    def tracker(self) -> Tracker:
        return Tracker(secrets.token_urlsafe(TOKEN_BYTES))

    def login_token(self) -> str:
        return secrets.token_urlsafe(TOKEN_BYTES)

    def session_name(self) -> str:
        """Short public label; collisions are tolerated."""
        return "s-" + "".join(secrets.choice(NAME_ALPHABET) for _ in range(NAME_LENGTH))
