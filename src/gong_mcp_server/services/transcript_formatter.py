"""Transcript formatting.

Turns Gong's flat, chronological list of transcript segments into either a
raw segment-by-segment view or topic-grouped sections of speaker exchanges.
"""

from typing import Any

from gong_mcp_server.models.gong import SpeakerMap, TranscriptSegment
from gong_mcp_server.models.transcript import (
    Exchange,
    ExchangeSpeaker,
    FormattedTranscript,
    RawSegment,
    RawSentence,
    RawTranscript,
    Section,
    TranscriptCallInfo,
    TranscriptParticipant,
)
from gong_mcp_server.services.speaker_resolver import SpeakerResolver, participants_from
from gong_mcp_server.tools.gong_api import GongAPIClient, extract_transcript_segments
from gong_mcp_server.tools.time_utils import format_call_date, format_duration, format_ms
from gong_mcp_server.utils.errors import ErrorCode, MCPServerError
from gong_mcp_server.utils.logging_config import ContextLogger

TRANSCRIPT_FORMATS = ("concise", "full", "raw")

UNTITLED_TOPIC = "Untitled Topic"


def exchange_speaker(speaker_id: str, speaker_map: SpeakerMap) -> ExchangeSpeaker:
    """Look up the display identity for a segment's speaker.

    Ids missing from the map only occur when speaker resolution failed, in
    which case a generic label is used.
    """
    speaker = speaker_map.get(speaker_id)
    if speaker is None:
        return ExchangeSpeaker(
            name=f"Speaker {speaker_id[:8]}" if speaker_id else "Unknown Speaker",
            company="Unknown",
            role="Unknown",
        )
    return ExchangeSpeaker(name=speaker.name, company=speaker.company, role=speaker.role)


def group_by_topic(
    segments: list[TranscriptSegment],
) -> dict[str, list[TranscriptSegment]]:
    """Group segments by topic, keeping topics in first-seen order."""
    groups: dict[str, list[TranscriptSegment]] = {}
    for segment in segments:
        groups.setdefault(segment.topic or UNTITLED_TOPIC, []).append(segment)
    return groups


def topic_time_range(segments: list[TranscriptSegment]) -> str:
    """Span from the earliest to the latest sentence start across segments."""
    starts = [sentence.start for segment in segments for sentence in segment.sentences]
    if not starts:
        return f"{format_ms(0)} - {format_ms(0)}"
    return f"{format_ms(min(starts))} - {format_ms(max(starts))}"


def build_exchange(
    segment: TranscriptSegment, speaker_map: SpeakerMap, max_sentences: int = 0
) -> Exchange:
    """Collapse one segment into a single exchange."""
    sentences = segment.sentences
    if max_sentences > 0:
        sentences = sentences[:max_sentences]

    return Exchange(
        speaker=exchange_speaker(segment.speaker_id, speaker_map),
        text=" ".join(sentence.text for sentence in sentences),
        timestamp=format_ms(sentences[0].start) if sentences else None,
    )


def _section_sort_key(section: Section) -> str:
    # "/" is the code point just below "0"
    return section.time_range.split(" - ")[0].replace(":", "/")


def build_sections(
    segments: list[TranscriptSegment],
    speaker_map: SpeakerMap,
    max_segments: int = 0,
    max_sentences: int = 0,
) -> list[Section]:
    """Group segments into topic sections ordered by time-range start.

    The ordering compares the ``m:ss`` start strings as text, not their
    numeric value, so "10:00" sorts before "2:00". The colon ranks below
    every digit, so "1:30" still sorts before "10:00".

    Args:
        segments: Segments in chronological order
        speaker_map: Resolved speakers for the call
        max_segments: Keep only the first N segments (0 keeps all)
        max_sentences: Keep only the first N sentences per segment (0 keeps all)

    Returns:
        One section per distinct topic
    """
    if max_segments > 0:
        segments = segments[:max_segments]

    sections = [
        Section(
            topic=topic,
            time_range=topic_time_range(topic_segments),
            exchanges=[
                build_exchange(segment, speaker_map, max_sentences)
                for segment in topic_segments
            ],
        )
        for topic, topic_segments in group_by_topic(segments).items()
    ]

    sections.sort(key=_section_sort_key)
    return sections


def build_raw_segment(segment: TranscriptSegment, speaker_map: SpeakerMap) -> RawSegment:
    """Attach the resolved speaker and per-sentence timestamps to a segment."""
    return RawSegment(
        speaker_id=segment.speaker_id,
        speaker=exchange_speaker(segment.speaker_id, speaker_map),
        topic=segment.topic or "",
        sentences=[
            RawSentence(
                start=sentence.start,
                text=sentence.text,
                timestamp=format_ms(sentence.start),
            )
            for sentence in segment.sentences
        ],
    )


def _call_start(call: dict[str, Any]) -> str | None:
    # Gong call records carry the actual start as "started"
    return call.get("started") or call.get("startTime") or call.get("scheduled")


class TranscriptFormatter:
    """Fetches a call's transcript and renders it in one of three formats."""

    def __init__(
        self,
        api_client: GongAPIClient,
        speaker_resolver: SpeakerResolver,
        logger: ContextLogger | None = None,
    ):
        self.api_client = api_client
        self.speaker_resolver = speaker_resolver
        self.logger = logger or ContextLogger("gong_mcp_server.transcript_formatter")

    async def get_raw_segments(self, call_id: str) -> list[TranscriptSegment]:
        """Fetch the transcript segments of a call in source order."""
        response = await self.api_client.get_transcripts([call_id])
        return extract_transcript_segments(response)

    async def get_formatted_transcript(
        self,
        call_id: str,
        transcript_format: str = "concise",
        max_segments: int = 0,
        max_sentences: int = 0,
    ) -> FormattedTranscript | RawTranscript:
        """Fetch and format the transcript of a call.

        ``concise`` and ``full`` currently share the same topic-grouped
        layout. ``raw`` returns one entry per segment with sentences intact.

        Args:
            call_id: Gong call ID
            transcript_format: One of "concise", "full", "raw"
            max_segments: Keep only the first N segments (0 keeps all)
            max_sentences: Keep only the first N sentences per segment (0 keeps all)

        Returns:
            Formatted or raw transcript

        Raises:
            MCPServerError: If the format is unknown or a Gong fetch fails
        """
        if transcript_format not in TRANSCRIPT_FORMATS:
            raise MCPServerError(
                error_code=ErrorCode.INVALID_INPUT,
                message=f"Invalid transcript format: {transcript_format}",
                details={
                    "format": transcript_format,
                    "valid_formats": list(TRANSCRIPT_FORMATS),
                },
            )

        self.logger.info(
            "Formatting transcript",
            extra={
                "call_id": call_id,
                "format": transcript_format,
                "max_segments": max_segments,
                "max_sentences": max_sentences,
            },
        )

        call_response = await self.api_client.get_call(call_id)
        call = call_response.get("call") or {}
        segments = await self.get_raw_segments(call_id)

        speaker_map = await self.speaker_resolver.get_speaker_map(
            call_id, call, segments=segments
        )

        if transcript_format == "raw":
            return RawTranscript(
                call=TranscriptCallInfo(
                    id=str(call.get("id") or call_id),
                    title=call.get("title"),
                    date=format_call_date(_call_start(call), date_only=False),
                    duration=format_ms((call.get("duration") or 0) * 1000),
                ),
                transcript=[
                    build_raw_segment(segment, speaker_map) for segment in segments
                ],
            )

        participants = [
            TranscriptParticipant(
                name=participant.display_name or "Unknown",
                company=participant.company or "Unknown",
                role=participant.role or "Unknown",
            )
            for participant in participants_from(call)
        ]

        formatted = FormattedTranscript(
            call=TranscriptCallInfo(
                id=str(call.get("id") or call_id),
                title=call.get("title"),
                date=format_call_date(_call_start(call)),
                duration=format_duration(call.get("duration")),
                participants=participants,
            ),
            sections=build_sections(segments, speaker_map, max_segments, max_sentences),
        )

        self.logger.info(
            "Transcript formatted",
            extra={
                "call_id": call_id,
                "segments": len(segments),
                "sections": len(formatted.sections),
                "exchanges": formatted.exchange_count,
            },
        )
        return formatted
