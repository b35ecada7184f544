# core/authorization.py

from typing import Dict, FrozenSet, Iterable, Optional, Set, Tuple

from core.permissions import Permission, all_permissions, parse_permission
from core.superusers import normalize_email


class PermissionEvaluator:
    """
    Answers "may this user do X in this building?".

    Superusers (email allowlist, injected at construction) hold every
    permission and never cause a store lookup. Everyone else holds exactly
    the store's active grants. Active sets are memoised per instance, and
    one instance is built per request.

    A missing grant is a plain False. Storage errors propagate.
    """

    def __init__(self, store, superuser_emails: Iterable[str] = ()):
        self._store = store
        self._superusers: FrozenSet[str] = frozenset(
            normalize_email(e) for e in superuser_emails if normalize_email(e)
        )
        self._active: Dict[Tuple[str, str], Set[Permission]] = {}

    # -----------------------------------------------------
    # Superuser
    # -----------------------------------------------------
    def is_superuser(self, user) -> bool:
        return normalize_email(getattr(user, "email", None)) in self._superusers

    # -----------------------------------------------------
    # Active grants (memoised)
    # -----------------------------------------------------
    async def _active_permissions(self, user, building_id: str) -> Set[Permission]:
        key = (str(user.id), str(building_id))
        if key not in self._active:
            self._active[key] = await self._store.list_active(key[0], key[1])
        return self._active[key]

    def forget(self, user_id: Optional[str] = None, building_id: Optional[str] = None):
        """Drop memoised grants, e.g. after this request changed them."""
        for key in list(self._active):
            if user_id is not None and key[0] != str(user_id):
                continue
            if building_id is not None and key[1] != str(building_id):
                continue
            del self._active[key]

    # -----------------------------------------------------
    # Checks
    # -----------------------------------------------------
    async def has_permission(self, user, building_id: str, permission) -> bool:
        if self.is_superuser(user):
            return True
        permission = parse_permission(permission)
        return permission in await self._active_permissions(user, building_id)

    async def has_any(self, user, building_id: str, permissions: Iterable) -> bool:
        for permission in permissions:
            if await self.has_permission(user, building_id, permission):
                return True
        return False

    async def has_all(self, user, building_id: str, permissions: Iterable) -> bool:
        for permission in permissions:
            if not await self.has_permission(user, building_id, permission):
                return False
        return True

    async def list_permissions(self, user, building_id: str) -> Set[Permission]:
        if self.is_superuser(user):
            return set(all_permissions())
        return set(await self._active_permissions(user, building_id))
