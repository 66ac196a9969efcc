"""Gong API entity models.

Upstream records are loosely shaped; every default and fallback is applied
here, once, when a raw record enters the system.
"""

from __future__ import annotations

from typing import Any

from pydantic import ConfigDict, Field

from gong_mcp_server.models.base import GongBaseModel


def placeholder_name(speaker_id: str, prefix: str = "Person") -> str:
    """Synthesize a display name from the first four characters of an id."""
    return f"{prefix} {speaker_id[:4]}"


class GongAPIModel(GongBaseModel):
    """Base model for Gong API records.

    Ignores extra fields since Gong returns far more than we model, and
    accepts numeric ids where a string is expected.
    """

    model_config = ConfigDict(
        extra="ignore",
        coerce_numbers_to_str=True,
    )


class User(GongAPIModel):
    """A user from the Gong directory."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Platform-assigned user ID")
    first_name: str = Field("", description="First name")
    last_name: str = Field("", description="Last name")
    email_address: str = Field("", description="Email address")
    title: str = Field("", description="Job title")
    active: bool = Field(True, description="Whether the user is active")
    created: str = Field("", description="Creation timestamp")

    @property
    def full_name(self) -> str:
        """First and last name, trimmed (may be empty)."""
        return f"{self.first_name} {self.last_name}".strip()

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> User:
        """Normalize a raw directory record."""
        return cls(
            id=raw["id"],
            first_name=raw.get("firstName") or "",
            last_name=raw.get("lastName") or "",
            email_address=raw.get("emailAddress") or raw.get("email") or "",
            title=raw.get("title") or raw.get("role") or "",
            active=raw.get("active") is not False,
            created=raw.get("created") or "",
        )


class Participant(GongAPIModel):
    """A call participant as reported on the call record.

    ``id`` may or may not match a transcript speaker id or a directory
    user id; correlation is best-effort.
    """

    id: str | None = Field(None, description="Participant/speaker ID")
    name: str | None = Field(None, description="Display name")
    first_name: str | None = Field(None, description="First name")
    last_name: str | None = Field(None, description="Last name")
    email: str | None = Field(None, description="Email address")
    role: str | None = Field(None, description="Role on the call")
    company: str | None = Field(None, description="Company")

    @property
    def display_name(self) -> str:
        """``name``, else first/last name, else empty string."""
        if self.name:
            return self.name
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


class Speaker(GongBaseModel):
    """A resolved speaker identity for one call."""

    id: str = Field(..., description="Speaker ID as used in transcript segments")
    name: str = Field(..., min_length=1, description="Display name, never empty")
    email: str | None = Field(None, description="Email address")
    role: str | None = Field(None, description="Role or job title")
    company: str | None = Field(None, description="Company")

    @classmethod
    def from_participant(cls, participant: Participant) -> Speaker:
        """Build a speaker from a participant; callers skip participants without an id."""
        return cls(
            id=participant.id,
            name=participant.display_name or placeholder_name(participant.id),
            email=participant.email,
            role=participant.role,
            company=participant.company,
        )

    @classmethod
    def from_user(cls, user: User) -> Speaker:
        """Build a speaker from a directory user (the directory has no company)."""
        return cls(
            id=user.id,
            name=user.full_name
            or user.email_address
            or placeholder_name(user.id, prefix="User"),
            email=user.email_address,
            role=user.title,
            company="Unknown",
        )

    @classmethod
    def placeholder(cls, speaker_id: str) -> Speaker:
        """Synthesize a speaker for an id no source could resolve."""
        return cls(id=speaker_id, name=placeholder_name(speaker_id), company="Unknown")


# Per-call mapping of transcript speaker id to resolved speaker
SpeakerMap = dict[str, Speaker]


class Sentence(GongAPIModel):
    """One transcribed sentence."""

    start: int = Field(0, ge=0, description="Offset from call start in milliseconds")
    text: str = Field("", description="Sentence text")


class TranscriptSegment(GongAPIModel):
    """A contiguous block of sentences attributed to one speaker."""

    speaker_id: str = Field("", description="Speaker ID")
    topic: str | None = Field(None, description="Topic label assigned by Gong")
    sentences: list[Sentence] = Field(default_factory=list, description="Sentences")


class Call(GongAPIModel):
    """A normalized Gong call record."""

    id: str = Field(..., description="Call ID")
    title: str = Field("Untitled Call", description="Call title")
    scheduled: str | None = Field(None, description="Scheduled start time")
    started: str | None = Field(None, description="Actual start time")
    duration: int = Field(0, ge=0, description="Duration in seconds")
    direction: str | None = Field(None, description="Inbound/Outbound/Conference")
    system: str | None = Field(None, description="Conferencing system")
    scope: str | None = Field(None, description="Internal/External")
    media: str | None = Field(None, description="Audio/Video")
    language: str | None = Field(None, description="Detected language")
    url: str | None = Field(None, description="Link to the call in Gong")
    has_transcript: bool = Field(False, description="Whether a transcript exists")
    participants: list[Participant] = Field(
        default_factory=list, description="Call participants"
    )

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> Call:
        """Normalize a raw call record."""
        return cls(
            id=raw["id"],
            title=raw.get("title") or "Untitled Call",
            scheduled=raw.get("scheduled"),
            started=raw.get("started") or raw.get("startTime"),
            duration=int(raw.get("duration") or 0),
            direction=raw.get("direction"),
            system=raw.get("system"),
            scope=raw.get("scope"),
            media=raw.get("media"),
            language=raw.get("language"),
            url=raw.get("url"),
            has_transcript=bool(raw.get("transcript")),
            participants=raw.get("participants") or [],
        )
