# core/superusers.py

"""
Superuser email allowlist.

Superusers implicitly hold every permission in every building. The list
comes from SUPER_USER_EMAILS, is loaded once at startup and handed to
each PermissionEvaluator as a snapshot, and can be re-read at runtime
through ``reload_from_env`` (exposed as an admin endpoint).
"""

from threading import Lock
from typing import FrozenSet, Iterable, Optional

from core.config import Settings, settings, split_csv
from core.logging_config import logger


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


class SuperuserAllowlist:
    """
    Thread-safe holder for the allowlist.

    Readers take an immutable snapshot, so a reload never changes the
    answer halfway through a request.
    """

    def __init__(self, emails: Iterable[str] = ()):
        self._lock = Lock()
        self._emails: FrozenSet[str] = self._normalize(emails)

    @staticmethod
    def _normalize(emails: Iterable[str]) -> FrozenSet[str]:
        return frozenset(e for e in (normalize_email(x) for x in emails) if e)

    def snapshot(self) -> FrozenSet[str]:
        with self._lock:
            return self._emails

    def contains(self, email: Optional[str]) -> bool:
        return normalize_email(email) in self.snapshot()

    def reload(self, emails: Iterable[str]) -> FrozenSet[str]:
        """Replace the allowlist; returns the new snapshot."""
        new_emails = self._normalize(emails)
        with self._lock:
            self._emails = new_emails
        logger.info(f"Superuser allowlist reloaded ({len(new_emails)} entries)")
        return new_emails

    def reload_from_env(self) -> FrozenSet[str]:
        """Re-read SUPER_USER_EMAILS from the process environment."""
        return self.reload(split_csv(Settings().SUPER_USER_EMAILS))


# Global allowlist instance
_allowlist = SuperuserAllowlist(split_csv(settings.SUPER_USER_EMAILS))


def get_superuser_allowlist() -> SuperuserAllowlist:
    """Get the global allowlist instance."""
    return _allowlist
