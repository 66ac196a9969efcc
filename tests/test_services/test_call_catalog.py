"""Tests for the call catalog."""

from unittest.mock import AsyncMock, Mock

import httpx
import pytest

from gong_mcp_server.models import (
    FormattedTranscript,
    RawTranscript,
    TranscriptCallInfo,
    TranscriptParticipant,
)
from gong_mcp_server.services.call_catalog import CallCatalog
from gong_mcp_server.tools.gong_api import GongAPIClient
from gong_mcp_server.utils.config import GongSettings
from gong_mcp_server.utils.errors import ErrorCode, MCPServerError


@pytest.fixture
def transcript_formatter() -> Mock:
    formatter = Mock()
    formatter.get_formatted_transcript = AsyncMock(
        return_value=FormattedTranscript(
            call=TranscriptCallInfo(
                id="C1",
                participants=[
                    TranscriptParticipant(name="Alice", company="Acme", role="Champion"),
                    TranscriptParticipant(name="Bob Lee"),
                ],
            )
        )
    )
    return formatter


@pytest.fixture
def catalog(mock_api_client: Mock, transcript_formatter: Mock) -> CallCatalog:
    return CallCatalog(mock_api_client, transcript_formatter)


@pytest.mark.unit
class TestListCalls:
    """Tests for listing calls."""

    @pytest.mark.asyncio
    async def test_normalizes_records(
        self, catalog: CallCatalog, mock_api_client: Mock
    ) -> None:
        mock_api_client.list_calls_paginated.return_value = [
            {"id": "C1", "title": "Discovery", "started": "2024-03-01T15:00:00Z"},
            {"id": "C2", "startTime": "2024-03-02T09:00:00Z", "transcript": {"x": 1}},
        ]

        calls = await catalog.list_calls()

        assert [c.id for c in calls] == ["C1", "C2"]
        assert calls[1].title == "Untitled Call"
        assert calls[1].started == "2024-03-02T09:00:00Z"
        assert calls[1].has_transcript is True
        assert calls[0].participants == []

    @pytest.mark.asyncio
    async def test_filters_and_limit_forwarded(
        self, catalog: CallCatalog, mock_api_client: Mock
    ) -> None:
        await catalog.list_calls(
            from_date_time="2024-03-01T00:00:00Z",
            to_date_time="2024-03-31T00:00:00Z",
            limit=5,
        )

        mock_api_client.list_calls_paginated.assert_awaited_once_with(
            {
                "fromDateTime": "2024-03-01T00:00:00Z",
                "toDateTime": "2024-03-31T00:00:00Z",
            },
            limit=5,
        )

    @pytest.mark.asyncio
    async def test_errors_propagate(
        self, catalog: CallCatalog, mock_api_client: Mock
    ) -> None:
        mock_api_client.list_calls_paginated.side_effect = MCPServerError(
            "Gong API error 401", ErrorCode.GONG_AUTH_ERROR
        )

        with pytest.raises(MCPServerError):
            await catalog.list_calls()


@pytest.mark.unit
class TestGetCall:
    """Tests for fetching a single call."""

    @pytest.mark.asyncio
    async def test_without_transcript(
        self, catalog: CallCatalog, transcript_formatter: Mock
    ) -> None:
        details = await catalog.get_call("C1")

        assert details.call.id == "C1"
        assert details.call.duration == 1865
        assert details.transcript is None
        transcript_formatter.get_formatted_transcript.assert_not_awaited()
        assert "transcript" not in details.to_payload()

    @pytest.mark.asyncio
    async def test_with_transcript(
        self, catalog: CallCatalog, transcript_formatter: Mock
    ) -> None:
        details = await catalog.get_call(
            "C1",
            include_transcript=True,
            transcript_format="full",
            max_segments=10,
            max_sentences=2,
        )

        transcript_formatter.get_formatted_transcript.assert_awaited_once_with(
            "C1", "full", 10, 2
        )
        assert details.call.has_transcript is True
        assert isinstance(details.transcript, FormattedTranscript)

    @pytest.mark.asyncio
    async def test_participants_replaced_from_transcript(
        self, catalog: CallCatalog
    ) -> None:
        details = await catalog.get_call("C1", include_transcript=True)

        participants = details.call.participants
        assert [p.name for p in participants] == ["Alice", "Bob Lee"]
        assert participants[1].company == "Unknown"
        assert participants[0].id is None

    @pytest.mark.asyncio
    async def test_raw_transcript_keeps_participants(
        self, catalog: CallCatalog, transcript_formatter: Mock
    ) -> None:
        transcript_formatter.get_formatted_transcript.return_value = RawTranscript(
            call=TranscriptCallInfo(id="C1")
        )

        details = await catalog.get_call("C1", include_transcript=True)

        assert [p.id for p in details.call.participants] == ["p1"]
        assert details.call.has_transcript is True

    @pytest.mark.asyncio
    async def test_transcript_failure_isolated(
        self, catalog: CallCatalog, transcript_formatter: Mock
    ) -> None:
        """A failed transcript fetch still returns the call."""
        transcript_formatter.get_formatted_transcript.side_effect = MCPServerError(
            "Gong API error 404", ErrorCode.RESOURCE_NOT_FOUND
        )

        details = await catalog.get_call("C1", include_transcript=True)

        assert details.call.id == "C1"
        assert details.transcript is None
        assert details.call.has_transcript is False

    @pytest.mark.asyncio
    async def test_call_fetch_error_propagates(
        self, catalog: CallCatalog, mock_api_client: Mock
    ) -> None:
        mock_api_client.get_call.side_effect = MCPServerError(
            "Gong API error 404", ErrorCode.RESOURCE_NOT_FOUND
        )

        with pytest.raises(MCPServerError) as exc_info:
            await catalog.get_call("missing", include_transcript=True)

        assert exc_info.value.error_code == ErrorCode.RESOURCE_NOT_FOUND

    @pytest.mark.asyncio
    async def test_empty_response_falls_back_to_id(
        self, catalog: CallCatalog, mock_api_client: Mock
    ) -> None:
        mock_api_client.get_call.return_value = {}

        details = await catalog.get_call("C7")

        assert details.call.id == "C7"
        assert details.call.title == "Untitled Call"


@pytest.mark.unit
class TestListCallsOverHttp:
    """Tests for the catalog driving the real client over paged responses."""

    @pytest.mark.asyncio
    async def test_limit_over_paged_catalog(self) -> None:
        """Twelve calls served in pages of five; a limit of five returns five."""
        calls = [
            {"id": f"c{i}", **({"transcript": {"url": "t"}} if i % 2 else {})}
            for i in range(12)
        ]
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            offset = int(request.url.params.get("cursor", "0"))
            page = calls[offset : offset + 5]
            records: dict[str, object] = {"totalRecords": 12}
            if offset + 5 < 12:
                records["cursor"] = str(offset + 5)
            return httpx.Response(200, json={"records": records, "calls": page})

        client = GongAPIClient(
            settings=GongSettings(
                access_key="key",
                access_key_secret="secret",
                page_size=5,
                page_delay_seconds=0,
            ),
            transport=httpx.MockTransport(handler),
        )
        catalog = CallCatalog(client, Mock())

        result = await catalog.list_calls(limit=5)

        assert [c.id for c in result] == ["c0", "c1", "c2", "c3", "c4"]
        assert [c.has_transcript for c in result] == [False, True, False, True, False]
        assert len(requests) == 1
