# core/building_context.py

"""
Works out which building a request is about.

Resolution order, first match wins:
    1. ``building_id`` (or legacy ``buildingId``) query parameter
    2. a path that addresses an issue or unit: that row's building
    3. for writes, a ``building_id`` / ``buildingId`` field in a JSON body
    4. the caller's own membership: first building role, else first
       current tenancy

An addressed resource that does not exist, or whose id is not a UUID,
falls through to the next step instead of failing, so responses never
reveal whether an id exists in another building. A building id supplied
by the caller (query or body) that is not a UUID raises InvalidBuildingId.
"""

import json
from typing import Optional

from starlette.requests import Request

from core.errors import InvalidBuildingId
from core.logging_config import logger
from core.storage import execute
from core.utils import is_valid_uuid

BUILDING_PARAM_NAMES = ("building_id", "buildingId")

# path segment → table holding a building_id column
RESOURCE_TABLES = {
    "issues": "issues",
    "units": "units",
}

WRITE_METHODS = {"POST", "PUT", "PATCH"}


def _clean(value) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _supplied_building_id(value) -> Optional[str]:
    value = _clean(value)
    if value and not is_valid_uuid(value):
        raise InvalidBuildingId()
    return value


def addressed_resource(path: str):
    """
    Return (table, id) for the first ``/issues/{id}`` or ``/units/{id}``
    found in the path, or None.
    """
    segments = [s for s in path.split("/") if s]
    for i, segment in enumerate(segments[:-1]):
        table = RESOURCE_TABLES.get(segment)
        if table:
            return table, segments[i + 1]
    return None


class BuildingContextResolver:
    def __init__(self, client, timeout: Optional[float] = None):
        self._client = client
        self._timeout = timeout

    async def resolve(self, request: Request, user) -> Optional[str]:
        building_id = self.from_query(request)
        if building_id:
            return building_id

        building_id = await self.from_path(request.url.path)
        if building_id:
            return building_id

        if request.method in WRITE_METHODS:
            building_id = await self.from_body(request)
            if building_id:
                return building_id

        if user is None:
            return None
        return await self.from_membership(str(user.id))

    # -----------------------------------------------------
    # 1. Query string
    # -----------------------------------------------------
    @staticmethod
    def from_query(request: Request) -> Optional[str]:
        for name in BUILDING_PARAM_NAMES:
            value = _supplied_building_id(request.query_params.get(name))
            if value:
                return value
        return None

    # -----------------------------------------------------
    # 2. Addressed resource
    # -----------------------------------------------------
    async def from_path(self, path: str) -> Optional[str]:
        resource = addressed_resource(path)
        if resource is None:
            return None

        table, resource_id = resource
        if not is_valid_uuid(resource_id):
            # e.g. /issues/heatmap
            return None

        res = await execute(
            self._client.table(table).select("building_id").eq("id", resource_id).limit(1),
            f"Resolve building for {table}",
            self._timeout,
        )
        if not res.data:
            logger.debug(f"No {table} row {resource_id}; continuing building lookup")
            return None
        return _clean(res.data[0].get("building_id"))

    # -----------------------------------------------------
    # 3. JSON body
    # -----------------------------------------------------
    @staticmethod
    async def from_body(request: Request) -> Optional[str]:
        raw = await request.body()
        if not raw:
            return None
        try:
            body = json.loads(raw)
        except ValueError:
            # Not JSON (multipart upload etc.)
            return None
        if not isinstance(body, dict):
            return None
        for name in BUILDING_PARAM_NAMES:
            value = _supplied_building_id(body.get(name))
            if value:
                return value
        return None

    # -----------------------------------------------------
    # 4. Caller's own membership
    # -----------------------------------------------------
    async def from_membership(self, user_id: str) -> Optional[str]:
        roles = await execute(
            self._client.table("building_roles")
            .select("building_id")
            .eq("user_id", user_id)
            .order("created_at")
            .limit(1),
            "Resolve building from roles",
            self._timeout,
        )
        if roles.data:
            return _clean(roles.data[0].get("building_id"))

        tenancies = await execute(
            self._client.table("tenancies")
            .select("unit_id, units(building_id)")
            .eq("user_id", user_id)
            .eq("is_current", True)
            .order("start_date")
            .limit(1),
            "Resolve building from tenancy",
            self._timeout,
        )
        if tenancies.data:
            unit = tenancies.data[0].get("units") or {}
            return _clean(unit.get("building_id"))

        return None
