# core/errors.py

from typing import Any, Dict, List, Optional, Union


def extract_supabase_error(error: Exception) -> str:
    """
    Safely extract readable details from Supabase Python client errors.
    Handles:
      • PostgREST errors
      • GoTrue (Auth) errors
      • Generic Python exceptions
    """

    # Case 1: Supabase Auth / GoTrue / PostgREST APIError
    message = getattr(error, "message", None)
    if message:
        return str(message)

    # Case 2: errors with args (common)
    if getattr(error, "args", None):
        return str(error.args[0])

    # Case 3: Plain string fallback, or the class name for empty errors
    return str(error) or type(error).__name__


# ============================================================
# ACCESS ERRORS
# ============================================================
class AccessError(Exception):
    """
    Base class for authorization-layer failures.

    Each subclass carries the HTTP status the API answers with and a
    JSON payload that main.py returns without further transformation.
    """

    status_code: int = 500
    message: str = "Access check failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.message
        super().__init__(self.message)

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.message}


class Unauthenticated(AccessError):
    status_code = 401
    message = "Authentication required"


class BuildingContextMissing(AccessError):
    status_code = 400
    message = "Building context required"


class InvalidBuildingId(AccessError):
    status_code = 400
    message = "Invalid building id"


class Forbidden(AccessError):
    status_code = 403
    message = "Insufficient permissions"

    def __init__(
        self,
        required: Optional[Union[str, List[str]]] = None,
        message: Optional[str] = None,
    ):
        super().__init__(message)
        self.required = required

    def to_payload(self) -> Dict[str, Any]:
        payload = super().to_payload()
        if self.required is not None:
            payload["required"] = self.required
        return payload


class PermissionNotFound(AccessError):
    status_code = 404
    message = "Permission grant not found"


class StorageUnavailable(AccessError):
    """
    The backing store could not answer.

    Never interpreted as a denial; callers decide whether to retry.
    """

    status_code = 500
    message = "Storage unavailable"

    def __init__(self, operation: str, detail: Optional[str] = None):
        super().__init__(f"{operation} failed")
        self.operation = operation
        self.detail = detail
