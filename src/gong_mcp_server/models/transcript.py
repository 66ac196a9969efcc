"""Formatted transcript models returned to MCP clients."""

from __future__ import annotations

from pydantic import Field

from gong_mcp_server.models.base import GongBaseModel
from gong_mcp_server.models.gong import Call


class ExchangeSpeaker(GongBaseModel):
    """Speaker identity as shown alongside transcript text."""

    name: str = Field(..., min_length=1, description="Speaker name")
    company: str | None = Field(None, description="Speaker company")
    role: str | None = Field(None, description="Speaker role")


class Exchange(GongBaseModel):
    """One speaker's text for one transcript segment."""

    speaker: ExchangeSpeaker
    text: str = Field(..., description="Sentences joined with single spaces")
    timestamp: str | None = Field(None, description="First sentence time (m:ss)")


class Section(GongBaseModel):
    """Exchanges grouped under one topic."""

    topic: str = Field(..., description="Topic label")
    time_range: str = Field(..., description="'m:ss - m:ss' span of the topic")
    exchanges: list[Exchange] = Field(default_factory=list)


class TranscriptParticipant(GongBaseModel):
    """Participant summary in a formatted transcript header."""

    name: str = Field(..., description="Participant name")
    company: str = Field("Unknown", description="Participant company")
    role: str = Field("Unknown", description="Participant role")


class TranscriptCallInfo(GongBaseModel):
    """Call header attached to a transcript."""

    id: str = Field(..., description="Call ID")
    title: str | None = Field(None, description="Call title")
    date: str | None = Field(None, description="Call date")
    duration: str | None = Field(None, description="Human-readable duration")
    participants: list[TranscriptParticipant] | None = Field(
        None, description="Participants reported on the call record"
    )


class FormattedTranscript(GongBaseModel):
    """Topic-grouped transcript (``concise`` and ``full`` formats)."""

    call: TranscriptCallInfo
    sections: list[Section] = Field(default_factory=list)

    @property
    def exchange_count(self) -> int:
        """Total exchanges across all sections."""
        return sum(len(section.exchanges) for section in self.sections)


class RawSentence(GongBaseModel):
    """Sentence with its human-readable timestamp."""

    start: int = Field(..., ge=0, description="Offset in milliseconds")
    text: str = Field(..., description="Sentence text")
    timestamp: str = Field(..., description="Offset as m:ss")


class RawSegment(GongBaseModel):
    """A transcript segment with its speaker resolved."""

    speaker_id: str = Field(..., description="Speaker ID")
    speaker: ExchangeSpeaker
    topic: str = Field("", description="Topic label, empty when absent")
    sentences: list[RawSentence] = Field(default_factory=list)


class RawTranscript(GongBaseModel):
    """Segment-by-segment transcript (``raw`` format)."""

    call: TranscriptCallInfo
    transcript: list[RawSegment] = Field(default_factory=list)


class CallDetails(GongBaseModel):
    """A call with its optional transcript."""

    call: Call
    transcript: FormattedTranscript | RawTranscript | None = None
