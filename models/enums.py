from enum import Enum


class BaseStrEnum(str, Enum):
    """
    Base enum that serializes cleanly to a string
    and provides a .list() method for UI dropdowns.
    """

    def __str__(self):
        return str(self.value)

    @classmethod
    def list(cls):
        return [item.value for item in cls]


# -----------------------------------------------------
# PERMISSION AUDIT ACTION
# -----------------------------------------------------
class AuditAction(BaseStrEnum):
    """Recorded on every permission_audit_logs row."""

    granted = "granted"
    revoked = "revoked"
