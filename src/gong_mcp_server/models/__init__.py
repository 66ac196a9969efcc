"""Pydantic models for gong-mcp-server."""

from gong_mcp_server.models.base import GongBaseModel
from gong_mcp_server.models.gong import (
    Call,
    GongAPIModel,
    Participant,
    Sentence,
    Speaker,
    SpeakerMap,
    TranscriptSegment,
    User,
    placeholder_name,
)
from gong_mcp_server.models.transcript import (
    CallDetails,
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

__all__ = [
    "Call",
    "CallDetails",
    "Exchange",
    "ExchangeSpeaker",
    "FormattedTranscript",
    "GongAPIModel",
    "GongBaseModel",
    "Participant",
    "RawSegment",
    "RawSentence",
    "RawTranscript",
    "Section",
    "Sentence",
    "Speaker",
    "SpeakerMap",
    "TranscriptCallInfo",
    "TranscriptParticipant",
    "TranscriptSegment",
    "User",
    "placeholder_name",
]
