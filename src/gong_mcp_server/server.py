"""MCP Server for the Gong call-recording platform.

This module exposes Gong calls, transcripts, and users to MCP clients as
three tools:
- list_calls: List calls in an optional date range
- get_call_details: Fetch a call, optionally with a formatted transcript
- find_users: Search the user directory by name, email, or id
"""

import json
import sys
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from gong_mcp_server.services.call_catalog import CallCatalog
from gong_mcp_server.services.speaker_resolver import SpeakerResolver
from gong_mcp_server.services.transcript_formatter import (
    TRANSCRIPT_FORMATS,
    TranscriptFormatter,
)
from gong_mcp_server.services.user_directory import UserDirectory
from gong_mcp_server.tools.gong_api import GongAPIClient
from gong_mcp_server.utils.config import Settings, get_settings
from gong_mcp_server.utils.errors import ErrorCode, MCPServerError
from gong_mcp_server.utils.logging_config import ContextLogger


def _json_text(payload: dict[str, Any]) -> list[TextContent]:
    return [TextContent(type="text", text=json.dumps(payload, indent=2))]


def _stripped(value: Any) -> str | None:
    """Trim a string argument; blank or missing becomes None."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _non_negative_int(arguments: dict[str, Any], name: str) -> int:
    """Read an optional non-negative integer argument (missing means 0)."""
    value = arguments.get(name)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise MCPServerError(
            error_code=ErrorCode.INVALID_INPUT,
            message=f"{name} must be a non-negative integer",
            details={name: value},
        )
    return value


class GongMCPServer:
    """MCP Server exposing Gong calls, transcripts, and users."""

    def __init__(
        self,
        settings: Settings | None = None,
        api_client: GongAPIClient | None = None,
    ) -> None:
        """Initialize the MCP server and wire up its services.

        Args:
            settings: Application settings, defaults to the process-wide settings
            api_client: Gong API accessor, built from settings if omitted
        """
        self.settings = settings or get_settings()
        self.server = Server(self.settings.server.server_name)
        self.logger = ContextLogger("gong_mcp_server.server")

        self.api_client = api_client or GongAPIClient(self.settings.gong)
        self.user_directory = UserDirectory(
            self.api_client,
            ttl_seconds=self.settings.gong.user_cache_ttl_seconds,
        )
        self.speaker_resolver = SpeakerResolver(self.api_client, self.user_directory)
        self.transcript_formatter = TranscriptFormatter(
            self.api_client, self.speaker_resolver
        )
        self.call_catalog = CallCatalog(self.api_client, self.transcript_formatter)

        self._register_handlers()

        self.logger.info(
            "Gong MCP Server initialized",
            extra={
                "base_url": self.settings.gong.base_url,
                "gong_configured": self.settings.is_gong_configured,
            },
        )

    def _register_handlers(self) -> None:
        """Register MCP tool handlers."""
        self.server.list_tools()(self._list_tools)
        self.server.call_tool()(self._call_tool)

        self.logger.info("MCP handlers registered")

    # ==================== Tools Primitive ====================

    async def _list_tools(self) -> list[Tool]:
        """List available tools.

        Returns:
            List of available tools
        """
        return [
            Tool(
                name="list_calls",
                description="List Gong calls, optionally within a date range. Returns call metadata (title, start time, duration, participants) and whether a transcript is available.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "fromDateTime": {
                            "type": "string",
                            "description": "Start date/time in ISO format (e.g. 2024-03-01T00:00:00Z)",
                        },
                        "toDateTime": {
                            "type": "string",
                            "description": "End date/time in ISO format (e.g. 2024-03-31T23:59:59Z)",
                        },
                        "limit": {
                            "type": "integer",
                            "minimum": 1,
                            "description": "Maximum number of calls to return",
                        },
                    },
                },
            ),
            Tool(
                name="get_call_details",
                description="Get details for a specific Gong call by ID, optionally including its transcript with speakers resolved to names. Transcripts are grouped by topic unless the raw format is requested.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "callId": {
                            "type": "string",
                            "description": "ID of the call to retrieve (obtain from list_calls)",
                        },
                        "includeTranscript": {
                            "type": "boolean",
                            "description": "Whether to include the transcript in the response",
                            "default": False,
                        },
                        "transcriptFormat": {
                            "type": "string",
                            "enum": list(TRANSCRIPT_FORMATS),
                            "description": "Format of the transcript (concise, full, or raw)",
                            "default": "concise",
                        },
                        "maxSegments": {
                            "type": "integer",
                            "minimum": 0,
                            "description": "Maximum number of transcript segments to include (0 for all)",
                        },
                        "maxSentences": {
                            "type": "integer",
                            "minimum": 0,
                            "description": "Maximum number of sentences per segment (0 for all)",
                        },
                    },
                    "required": ["callId"],
                },
            ),
            Tool(
                name="find_users",
                description="Find Gong users by name, email, or ID. Name and email match partially and case-insensitively; a user matching any given criterion is returned. At least one criterion is required.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "name": {
                            "type": "string",
                            "description": "Name to search for (can be partial)",
                        },
                        "email": {
                            "type": "string",
                            "description": "Email to search for (can be partial)",
                        },
                        "id": {
                            "type": "string",
                            "description": "Exact user ID to find",
                        },
                    },
                },
            ),
        ]

    async def _call_tool(
        self, name: str, arguments: dict[str, Any] | None
    ) -> list[TextContent]:
        """Execute a tool.

        Any failure is raised as MCPServerError; the MCP server turns it into
        an error result carrying the message instead of crashing.

        Args:
            name: Tool name
            arguments: Tool arguments

        Returns:
            Tool execution results
        """
        arguments = arguments or {}

        if name == "list_calls":
            handler = self._list_calls
        elif name == "get_call_details":
            handler = self._get_call_details
        elif name == "find_users":
            handler = self._find_users
        else:
            raise MCPServerError(
                error_code=ErrorCode.INVALID_INPUT,
                message=f"Unknown tool: {name}",
                details={"tool_name": name},
            )

        try:
            return await handler(arguments)
        except MCPServerError as e:
            self.logger.error(
                f"Tool {name} failed: {e.message}",
                extra={"tool": name, "error_code": e.error_code.value},
            )
            raise
        except Exception as e:
            self.logger.error(
                f"Tool {name} failed: {e}",
                extra={"tool": name, "error_type": type(e).__name__},
                exc_info=True,
            )
            raise MCPServerError(
                error_code=ErrorCode.INTERNAL_ERROR,
                message=str(e),
                details={"tool": name, "error_type": type(e).__name__},
            ) from e

    async def _list_calls(self, arguments: dict[str, Any]) -> list[TextContent]:
        """List calls in an optional date range.

        Args:
            arguments: fromDateTime, toDateTime, limit (all optional)

        Returns:
            Message and normalized calls as JSON
        """
        from_date_time = arguments.get("fromDateTime")
        to_date_time = arguments.get("toDateTime")
        limit = arguments.get("limit")

        if limit is not None and (
            isinstance(limit, bool) or not isinstance(limit, int) or limit < 1
        ):
            raise MCPServerError(
                error_code=ErrorCode.INVALID_INPUT,
                message="limit must be a positive integer",
                details={"limit": limit},
            )

        self.logger.info(
            "Listing calls",
            extra={
                "from_date_time": from_date_time,
                "to_date_time": to_date_time,
                "limit": limit,
            },
        )

        calls = await self.call_catalog.list_calls(
            from_date_time=from_date_time, to_date_time=to_date_time, limit=limit
        )

        message = f"Found {len(calls)} calls"
        if from_date_time:
            message += f" from {from_date_time}"
        if to_date_time:
            message += f" to {to_date_time}"

        return _json_text(
            {"message": message, "calls": [call.to_payload() for call in calls]}
        )

    async def _get_call_details(self, arguments: dict[str, Any]) -> list[TextContent]:
        """Fetch one call, optionally with its transcript.

        Args:
            arguments: callId (required), includeTranscript, transcriptFormat,
                maxSegments, maxSentences

        Returns:
            Call and optional transcript as JSON
        """
        call_id = arguments.get("callId")
        if not call_id:
            raise MCPServerError(
                error_code=ErrorCode.INVALID_INPUT,
                message="callId is required",
                details={"provided_args": list(arguments.keys())},
            )

        transcript_format = arguments.get("transcriptFormat") or "concise"
        if transcript_format not in TRANSCRIPT_FORMATS:
            raise MCPServerError(
                error_code=ErrorCode.INVALID_INPUT,
                message=f"Invalid transcriptFormat: {transcript_format}",
                details={"valid_formats": list(TRANSCRIPT_FORMATS)},
            )

        include_transcript = bool(arguments.get("includeTranscript", False))
        max_segments = _non_negative_int(arguments, "maxSegments")
        max_sentences = _non_negative_int(arguments, "maxSentences")

        self.logger.info(
            "Getting call details",
            extra={
                "call_id": call_id,
                "include_transcript": include_transcript,
                "format": transcript_format,
            },
        )

        details = await self.call_catalog.get_call(
            str(call_id),
            include_transcript=include_transcript,
            transcript_format=transcript_format,
            max_segments=max_segments,
            max_sentences=max_sentences,
        )

        return _json_text(details.to_payload())

    async def _find_users(self, arguments: dict[str, Any]) -> list[TextContent]:
        """Search the user directory.

        Args:
            arguments: name, email, id (at least one required)

        Returns:
            Message and matching users as JSON
        """
        name = _stripped(arguments.get("name"))
        email = _stripped(arguments.get("email"))
        user_id = _stripped(arguments.get("id"))

        if not name and not email and not user_id:
            raise MCPServerError(
                error_code=ErrorCode.INVALID_INPUT,
                message="At least one of name, email, or id must be provided",
                details={"provided_args": list(arguments.keys())},
            )

        users = await self.user_directory.find_users(
            name=name, email=email, user_id=user_id
        )

        return _json_text(
            {
                "message": f"Found {len(users)} users matching the criteria",
                "users": [user.to_payload() for user in users],
            }
        )

    # ==================== Server Lifecycle ====================

    async def run(self) -> None:
        """Run the MCP server using stdio transport."""
        self.logger.info("Starting Gong MCP Server")

        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options(),
            )


async def async_main() -> None:
    """Async main function for the MCP server."""
    server = GongMCPServer()
    await server.run()


def main() -> None:
    """Synchronous entry point for the MCP server (called by script entry point)."""
    import asyncio

    from gong_mcp_server.utils.logging_config import setup_logging

    settings = get_settings()
    setup_logging(
        level=settings.server.log_level,
        structured=settings.server.structured_logging,
    )

    try:
        settings.validate()
    except ValueError as e:
        ContextLogger("gong_mcp_server").error(f"Configuration error: {e}")
        sys.exit(1)

    asyncio.run(async_main())


if __name__ == "__main__":
    main()
