# core/utils.py

import uuid


def is_valid_uuid(value) -> bool:
    """Check if a value is a valid UUID string (ids in every table are uuid)."""
    if not value:
        return False
    try:
        uuid.UUID(str(value))
        return True
    except (ValueError, AttributeError, TypeError):
        return False
