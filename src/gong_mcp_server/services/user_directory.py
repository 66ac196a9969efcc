"""User directory cache.

Holds a time-bounded snapshot of the full Gong user directory and answers
id, name, and email lookups against it.
"""

import time
from typing import Callable

from cachetools import TTLCache

from gong_mcp_server.models.gong import User
from gong_mcp_server.tools.gong_api import GongAPIClient
from gong_mcp_server.utils.logging_config import ContextLogger

DEFAULT_TTL_SECONDS = 3600

# The cache holds a single entry: the whole directory keyed by user id
SNAPSHOT_KEY = "users"


class UserDirectory:
    """In-memory, TTL-bounded cache of the Gong user directory.

    The snapshot is replaced wholesale on refresh, never patched. Two
    overlapping refreshes both fetch; the last one to finish wins.
    """

    def __init__(
        self,
        api_client: GongAPIClient,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        logger: ContextLogger | None = None,
        timer: Callable[[], float] = time.monotonic,
    ):
        """Initialize the directory cache.

        Args:
            api_client: Gong API accessor
            ttl_seconds: Snapshot lifetime in seconds
            logger: Context logger for structured logging
            timer: Clock used for expiry, injectable for tests
        """
        self.api_client = api_client
        self.ttl_seconds = ttl_seconds
        self.logger = logger or ContextLogger("gong_mcp_server.user_directory")
        self._timer = timer
        self._cache: TTLCache[str, dict[str, User]] = TTLCache(
            maxsize=1, ttl=ttl_seconds, timer=timer
        )
        self.last_refresh: float | None = None

    async def _load_snapshot(self, force_refresh: bool = False) -> dict[str, User]:
        if not force_refresh:
            snapshot = self._cache.get(SNAPSHOT_KEY)
            if snapshot is not None:
                self.logger.debug(
                    "Using cached user directory", extra={"users": len(snapshot)}
                )
                return snapshot

        self.logger.info(
            "Fetching user directory", extra={"force_refresh": force_refresh}
        )
        raw_users = await self.api_client.list_users_paginated()

        snapshot = {}
        skipped = 0
        for raw in raw_users:
            if not raw.get("id"):
                skipped += 1
                continue
            user = User.from_api(raw)
            snapshot[user.id] = user

        self._cache[SNAPSHOT_KEY] = snapshot
        self.last_refresh = self._timer()

        self.logger.info(
            "User directory refreshed",
            extra={"users": len(snapshot), "skipped_without_id": skipped},
        )
        return snapshot

    async def get_all_users(self, force_refresh: bool = False) -> list[User]:
        """Return every user, fetching the directory if the snapshot is stale.

        Args:
            force_refresh: Ignore any cached snapshot

        Returns:
            All users in the directory

        Raises:
            MCPServerError: If the directory fetch fails
        """
        snapshot = await self._load_snapshot(force_refresh)
        return list(snapshot.values())

    def get_cached_user(self, user_id: str) -> User | None:
        """Look up a user in the current snapshot without fetching."""
        snapshot = self._cache.get(SNAPSHOT_KEY)
        if snapshot is None:
            return None
        return snapshot.get(user_id)

    async def find_users(
        self,
        name: str | None = None,
        email: str | None = None,
        user_id: str | None = None,
    ) -> list[User]:
        """Find users matching any of the supplied criteria.

        A user matches if its id equals ``user_id``, if ``name`` is a
        case-insensitive substring of "first last", if any word of ``name``
        appears in the first or last name, or if ``email`` is a
        case-insensitive substring of the email address. A ``user_id`` that
        is in the directory short-circuits to that single user.

        Args:
            name: Full or partial name
            email: Full or partial email
            user_id: Exact user id

        Returns:
            Matching users, empty if none match
        """
        snapshot = await self._load_snapshot()

        if user_id and user_id in snapshot:
            return [snapshot[user_id]]

        search_name = (name or "").strip().lower()
        name_parts = search_name.split()
        search_email = (email or "").strip().lower()

        results = []
        for user in snapshot.values():
            if user_id and user.id == user_id:
                results.append(user)
                continue

            if search_name:
                first = user.first_name.lower()
                last = user.last_name.lower()
                if search_name in f"{first} {last}":
                    results.append(user)
                    continue
                if any(part in first or part in last for part in name_parts):
                    results.append(user)
                    continue

            if search_email and search_email in user.email_address.lower():
                results.append(user)

        self.logger.info(
            f"Found {len(results)} matching users",
            extra={
                "has_name": bool(name),
                "has_email": bool(email),
                "has_id": bool(user_id),
            },
        )
        return results
