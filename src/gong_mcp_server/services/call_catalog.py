"""Call catalog: listing calls and fetching a call with its transcript."""

from gong_mcp_server.models.gong import Call, Participant
from gong_mcp_server.models.transcript import CallDetails, FormattedTranscript
from gong_mcp_server.services.transcript_formatter import TranscriptFormatter
from gong_mcp_server.tools.gong_api import GongAPIClient
from gong_mcp_server.utils.logging_config import ContextLogger


class CallCatalog:
    """Normalizes call records and composes call + transcript reads."""

    def __init__(
        self,
        api_client: GongAPIClient,
        transcript_formatter: TranscriptFormatter,
        logger: ContextLogger | None = None,
    ):
        """Initialize the catalog.

        Args:
            api_client: Gong API accessor
            transcript_formatter: Formatter used for the optional transcript
            logger: Context logger for structured logging
        """
        self.api_client = api_client
        self.transcript_formatter = transcript_formatter
        self.logger = logger or ContextLogger("gong_mcp_server.call_catalog")

    async def list_calls(
        self,
        from_date_time: str | None = None,
        to_date_time: str | None = None,
        limit: int | None = None,
    ) -> list[Call]:
        """List calls, optionally within a date range.

        Args:
            from_date_time: ISO-8601 lower bound on call start
            to_date_time: ISO-8601 upper bound on call start
            limit: Maximum number of calls to return

        Returns:
            Normalized calls

        Raises:
            MCPServerError: If the Gong fetch fails
        """
        raw_calls = await self.api_client.list_calls_paginated(
            {"fromDateTime": from_date_time, "toDateTime": to_date_time},
            limit=limit,
        )
        calls = [Call.from_api(raw) for raw in raw_calls]

        self.logger.info(
            f"Listed {len(calls)} calls",
            extra={
                "from_date_time": from_date_time,
                "to_date_time": to_date_time,
                "limit": limit,
            },
        )
        return calls

    async def get_call(
        self,
        call_id: str,
        include_transcript: bool = False,
        transcript_format: str = "concise",
        max_segments: int = 0,
        max_sentences: int = 0,
    ) -> CallDetails:
        """Fetch a call and, optionally, its formatted transcript.

        A failed transcript fetch does not fail the call: the result simply
        has no transcript. A successful one marks the call as having a
        transcript, since the call record can under-report availability.

        Raises:
            MCPServerError: If the call itself cannot be fetched
        """
        response = await self.api_client.get_call(call_id)
        call = Call.from_api(response.get("call") or {"id": call_id})

        if not include_transcript:
            return CallDetails(call=call)

        try:
            transcript = await self.transcript_formatter.get_formatted_transcript(
                call_id,
                transcript_format,
                max_segments,
                max_sentences,
            )
        except Exception as e:
            self.logger.warning(
                f"Transcript unavailable, returning call without it: {e}",
                extra={"call_id": call_id, "error_type": type(e).__name__},
            )
            return CallDetails(call=call)

        call.has_transcript = True
        if (
            isinstance(transcript, FormattedTranscript)
            and transcript.call.participants is not None
        ):
            call.participants = [
                Participant(name=p.name, company=p.company, role=p.role)
                for p in transcript.call.participants
            ]

        return CallDetails(call=call, transcript=transcript)
