import hmac
from uuid import UUID

import bcrypt
import structlog

from sessionledger.core.core import Service
from sessionledger.core.modules.user.models import User
from sessionledger.core.modules.user.validators import MAX_PASSWORD_BYTES, validate_password, validate_user_name
from sessionledger.errors import ValidationError

logger = structlog.get_logger(__name__)


class UserService(Service):
    """User lookups, creation and password checks."""

    async def find_user(self, user_id: UUID) -> User | None:
        return await self.repository.find_user_by_id(user_id)

    async def find_user_by_login_token(self, login_token: str) -> User | None:
        """Find an enabled user by login token."""
        user = await self.repository.find_user_by_login_token(login_token)
        if user is None or user.disabled:
            return None
        return user

    async def create_user(self, name: str, password: str) -> User:
        """Create user with hashed password."""
        validate_user_name(name)
        if await self.repository.find_user_by_name(name) is not None:
            raise ValidationError(f"User '{name}' already exists")

        validate_password(password)
        user = User(name=name, password_hash=self.hash_password(password), login_token=self.core.tokens.login_token())
        await self.repository.append_user(user)
        logger.info("user_created", user_id=str(user.id))
        return user

    def hash_password(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.core.config.bcrypt_rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify_password(self, user: User, password: str) -> bool:
        """Verify password against stored hash using a constant-time comparison."""
        if user.password_hash is None:
            return False
        candidate = password.encode("utf-8")
        if len(candidate) > MAX_PASSWORD_BYTES:
            return False
        stored = user.password_hash.encode("utf-8")
        try:
            computed = bcrypt.hashpw(candidate, stored)
        except ValueError:
            logger.warning("user_password_hash_malformed", user_id=str(user.id))
            return False
        return hmac.compare_digest(computed, stored)
