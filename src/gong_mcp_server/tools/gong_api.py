"""Gong API integration for the Gong MCP server.

This module provides read access to Gong calls, users, and transcripts using
HTTP Basic authentication with an access key pair, plus cursor pagination.
"""

import asyncio
import logging
from typing import Any, cast
from urllib.parse import quote

import httpx

from gong_mcp_server.models.gong import TranscriptSegment
from gong_mcp_server.utils.config import GongSettings, get_settings
from gong_mcp_server.utils.errors import (
    ErrorCode,
    MCPServerError,
    error_code_for_status,
    retry_on_error,
)

logger = logging.getLogger(__name__)

CALLS_ENDPOINT = "/v2/calls"
USERS_ENDPOINT = "/v2/users"
TRANSCRIPTS_ENDPOINT = "/v2/calls/transcript"


def _next_cursor(response: dict[str, Any]) -> str | None:
    """Extract the next-page cursor from a paginated Gong response."""
    records = response.get("records") or response.get("pagination") or {}
    return (
        records.get("cursor")
        or records.get("nextPageToken")
        or records.get("nextCursor")
        or None
    )


def extract_transcript_segments(response: dict[str, Any]) -> list[TranscriptSegment]:
    """Pull the first call's segments out of a transcript response.

    Args:
        response: Body returned by ``POST /v2/calls/transcript``

    Returns:
        Segments in source order, empty if the call has no transcript
    """
    call_transcripts = response.get("callTranscripts") or []
    if not call_transcripts:
        return []

    raw_segments = call_transcripts[0].get("transcript") or []
    return [TranscriptSegment.model_validate(segment) for segment in raw_segments]


class GongAPIClient:
    """Async client for the subset of the Gong API this server reads."""

    def __init__(
        self,
        settings: GongSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the Gong API client.

        Args:
            settings: Gong settings, defaults to the process-wide settings
            transport: Optional httpx transport (used by tests)
        """
        self.settings = settings or get_settings().gong
        self._transport = transport
        logger.info(
            "GongAPIClient initialized", extra={"base_url": self.settings.base_url}
        )

    def _ensure_configured(self) -> None:
        if not self.settings.is_configured:
            raise MCPServerError(
                error_code=ErrorCode.GONG_NOT_CONFIGURED,
                message="Gong API credentials not configured. Set GONG_ACCESS_KEY and GONG_ACCESS_KEY_SECRET.",
                details={
                    "has_access_key": bool(self.settings.access_key),
                    "has_access_key_secret": bool(self.settings.access_key_secret),
                },
            )

    @retry_on_error(max_retries=3, delay=1.0, backoff=2.0)
    async def api_request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        json_data: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Make an authenticated API request to Gong.

        Args:
            method: HTTP method (GET, POST)
            endpoint: API endpoint path (e.g., "/v2/calls")
            params: URL query parameters
            json_data: JSON request body

        Returns:
            JSON response from API

        Raises:
            MCPServerError: If the request fails
        """
        self._ensure_configured()

        url = f"{self.settings.base_url}{endpoint}"

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.request(
                    method=method,
                    url=url,
                    params=params,
                    json=json_data,
                    auth=(self.settings.access_key, self.settings.access_key_secret),
                    headers={"Content-Type": "application/json"},
                    timeout=self.settings.api_timeout,
                )
                response.raise_for_status()
                return cast("dict[str, Any]", response.json())

        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            error_details: dict[str, Any] = {
                "endpoint": endpoint,
                "status_code": status_code,
                "response": e.response.text,
            }
            retry_after = e.response.headers.get("Retry-After")
            if retry_after is not None:
                error_details["retry_after"] = retry_after

            error_message = f"Gong API error {status_code}"
            try:
                error_json = e.response.json()
                gong_errors = error_json.get("errors") or []
                request_id = error_json.get("requestId")
                if request_id:
                    error_details["request_id"] = request_id
                if gong_errors:
                    error_message += f": {'; '.join(str(err) for err in gong_errors)}"
            except (ValueError, AttributeError):
                # Body is not a JSON object; keep the status-only message
                pass

            logger.error(
                error_message,
                extra={"status_code": status_code, "endpoint": endpoint},
            )

            raise MCPServerError(
                error_code=error_code_for_status(status_code),
                message=error_message,
                details=error_details,
            ) from e

        except httpx.TimeoutException as e:
            logger.error("Gong API request timed out", extra={"endpoint": endpoint})
            raise MCPServerError(
                error_code=ErrorCode.TIMEOUT,
                message=f"Gong API request timed out: {endpoint}",
                details={"endpoint": endpoint, "timeout": self.settings.api_timeout},
            ) from e

        except httpx.HTTPError as e:
            logger.error(f"Gong API request failed: {e}")
            raise MCPServerError(
                error_code=ErrorCode.GONG_API_ERROR,
                message=f"Gong API request failed: {str(e)}",
                details={
                    "endpoint": endpoint,
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
            ) from e

    async def get_all_paginated(
        self,
        endpoint: str,
        data_key: str,
        params: dict[str, Any] | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Fetch every page of a cursor-paginated collection.

        Args:
            endpoint: API endpoint path
            data_key: Key holding the records in each page
            params: Query parameters sent with every page
            limit: Stop once this many records have been collected

        Returns:
            Records from all pages, in order
        """
        results: list[dict[str, Any]] = []
        cursor: str | None = None
        page_count = 0
        page_size = self.settings.page_size
        if limit:
            page_size = min(page_size, limit)

        while True:
            page_count += 1
            page_params = {**(params or {}), "limit": page_size}
            if cursor:
                page_params["cursor"] = cursor

            logger.debug(
                f"Fetching page {page_count} from {endpoint}",
                extra={"endpoint": endpoint, "has_cursor": cursor is not None},
            )

            response = await self.api_request("GET", endpoint, params=page_params)
            results.extend(response.get(data_key) or [])

            if limit and len(results) >= limit:
                results = results[:limit]
                break

            cursor = _next_cursor(response)
            if not cursor:
                break

            # Small pause between pages to stay under Gong's rate limit
            await asyncio.sleep(self.settings.page_delay_seconds)

        logger.info(
            f"Fetched {len(results)} records across {page_count} pages from {endpoint}",
            extra={"endpoint": endpoint, "count": len(results), "pages": page_count},
        )
        return results

    async def get_call(self, call_id: str) -> dict[str, Any]:
        """Get a single call. Returns ``{"call": {...}}``."""
        return await self.api_request(
            "GET", f"{CALLS_ENDPOINT}/{quote(str(call_id), safe='')}"
        )

    async def list_calls_paginated(
        self, params: dict[str, Any] | None = None, limit: int | None = None
    ) -> list[dict[str, Any]]:
        """List calls across all pages.

        Args:
            params: Filters such as ``fromDateTime`` and ``toDateTime``
            limit: Maximum number of calls to collect

        Returns:
            Raw call records
        """
        filters = {k: v for k, v in (params or {}).items() if v is not None}
        return await self.get_all_paginated(
            CALLS_ENDPOINT, "calls", params=filters, limit=limit
        )

    async def list_users_paginated(self) -> list[dict[str, Any]]:
        """List every user in the Gong directory."""
        return await self.get_all_paginated(USERS_ENDPOINT, "users")

    async def get_transcripts(self, call_ids: list[str]) -> dict[str, Any]:
        """Get transcripts for calls. Returns ``{"callTranscripts": [...]}``."""
        return await self.api_request(
            "POST",
            TRANSCRIPTS_ENDPOINT,
            json_data={"filter": {"callIds": list(call_ids)}},
        )
