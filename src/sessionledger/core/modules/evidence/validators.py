import math
from collections.abc import Mapping
from typing import Any

from sessionledger.core.modules.evidence.ledger import TRACKER_FIELD
from sessionledger.errors import ValidationError

MAX_FIELDS = 32
MAX_KEY_LENGTH = 64
MAX_VALUE_LENGTH = 512
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def validate_evidence_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Validate client-reported evidence and return it without the tracker key.

    Requirements:
    - At most 32 fields
    - Keys between 1 and 64 characters
    - Values are strings (at most 512 characters), 64-bit integers, finite floats, booleans or null

    Raises:
        ValidationError: If evidence doesn't meet requirements
    """
    cleaned = {key: value for key, value in fields.items() if key != TRACKER_FIELD}

    if len(cleaned) > MAX_FIELDS:
        raise ValidationError(f"Evidence cannot have more than {MAX_FIELDS} fields")

    for key, value in cleaned.items():
        if not key or len(key) > MAX_KEY_LENGTH:
            raise ValidationError(f"Evidence field names must be 1 to {MAX_KEY_LENGTH} characters long")
        if value is not None and not isinstance(value, str | int | float | bool):
            raise ValidationError(f"Evidence field '{key}' must be a scalar value")
        if isinstance(value, str) and len(value) > MAX_VALUE_LENGTH:
            raise ValidationError(f"Evidence field '{key}' cannot exceed {MAX_VALUE_LENGTH} characters")
        # NaN never equals itself, so it would register as changed on every request
        if isinstance(value, float) and not math.isfinite(value):
            raise ValidationError(f"Evidence field '{key}' must be a finite number")
        if isinstance(value, int) and not isinstance(value, bool) and not INT64_MIN <= value <= INT64_MAX:
            raise ValidationError(f"Evidence field '{key}' is out of the 64-bit integer range")

    return cleaned
