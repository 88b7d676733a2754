import re

from sessionledger.errors import ValidationError

NAME_RE = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9_.-]{1,31}$")
MAX_PASSWORD_BYTES = 72  # bcrypt input limit


def validate_password(password: str) -> None:
    """Validate password meets requirements.

    Requirements:
    - No whitespace characters
    - Minimum length of 2 characters
    - At most 72 bytes when UTF-8 encoded

    Raises:
        ValidationError: If password doesn't meet requirements
    """
    if len(password) < 2:
        raise ValidationError("Password must be at least 2 characters long")

    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password cannot be longer than {MAX_PASSWORD_BYTES} bytes")

    if any(char.isspace() for char in password):
        raise ValidationError("Password cannot contain whitespace characters")


def validate_user_name(name: str) -> None:
    """Public user names: 2-32 characters, letters, digits, '.', '_' or '-', starting alphanumeric."""
    if not NAME_RE.fullmatch(name):
        raise ValidationError(
            "User name must be 2-32 characters of letters, digits, '.', '_' or '-', starting with a letter or digit"
        )
