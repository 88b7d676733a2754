import hashlib
from datetime import UTC, datetime


def now() -> datetime:
    return datetime.now(UTC)


def hash_credential(credential: str) -> str:
    """Digest under which a session credential is stored and looked up."""
    return hashlib.sha256(credential.encode("utf-8")).hexdigest()
