"""Speaker resolution for a single call.

Merges three identity sources into one speaker map:

1. Call participants (call-scoped, most accurate, often incomplete)
2. The user directory (recovers internal employees missing from participants)
3. Synthesized placeholders for anything still unresolved

Participant, directory, and transcript speaker ids are assumed to share one
id space. Gong does not guarantee this, so the merge is best-effort: earlier
sources win and later sources only fill gaps.
"""

from typing import Any

from gong_mcp_server.models.gong import (
    Call,
    Participant,
    Speaker,
    SpeakerMap,
    TranscriptSegment,
)
from gong_mcp_server.services.user_directory import UserDirectory
from gong_mcp_server.tools.gong_api import GongAPIClient, extract_transcript_segments
from gong_mcp_server.utils.logging_config import ContextLogger


def participants_from(call_details: Call | dict[str, Any] | None) -> list[Participant]:
    """Read participants from a normalized call or a raw call record."""
    if call_details is None:
        return []
    if isinstance(call_details, Call):
        return list(call_details.participants)
    return [
        Participant.model_validate(raw)
        for raw in call_details.get("participants") or []
    ]


def seed_from_participants(participants: list[Participant]) -> SpeakerMap:
    """Build the initial speaker map from participants that carry an id."""
    return {
        participant.id: Speaker.from_participant(participant)
        for participant in participants
        if participant.id
    }


def distinct_speaker_ids(segments: list[TranscriptSegment]) -> list[str]:
    """Speaker ids in order of first appearance."""
    return list(
        dict.fromkeys(segment.speaker_id for segment in segments if segment.speaker_id)
    )


class SpeakerResolver:
    """Builds per-call speaker maps. Never raises."""

    def __init__(
        self,
        api_client: GongAPIClient,
        user_directory: UserDirectory,
        logger: ContextLogger | None = None,
    ):
        """Initialize the resolver.

        Args:
            api_client: Gong API accessor
            user_directory: Directory cache used for enrichment
            logger: Context logger for structured logging
        """
        self.api_client = api_client
        self.user_directory = user_directory
        self.logger = logger or ContextLogger("gong_mcp_server.speaker_resolver")

    async def get_speaker_map(
        self,
        call_id: str,
        call_details: Call | dict[str, Any] | None = None,
        segments: list[TranscriptSegment] | None = None,
    ) -> SpeakerMap:
        """Resolve every transcript speaker id of a call to a speaker.

        The result has an entry for every speaker id found in the
        transcript. Any failure yields an empty map; callers fall back to
        placeholder names.

        Args:
            call_id: Gong call ID
            call_details: Call record, fetched if not supplied
            segments: Transcript segments, fetched if not supplied

        Returns:
            Mapping of speaker id to resolved speaker
        """
        logger = self.logger.bind(call_id=call_id)

        try:
            return await self._resolve(call_id, call_details, segments, logger)
        except Exception as e:
            logger.error(
                f"Failed to build speaker map: {e}",
                extra={"error_type": type(e).__name__},
                exc_info=True,
            )
            return {}

    async def _resolve(
        self,
        call_id: str,
        call_details: Call | dict[str, Any] | None,
        segments: list[TranscriptSegment] | None,
        logger: ContextLogger,
    ) -> SpeakerMap:
        if call_details is None:
            logger.debug("Fetching call details for speaker map")
            response = await self.api_client.get_call(call_id)
            call_details = response.get("call") or {}

        participants = participants_from(call_details)
        speaker_map = seed_from_participants(participants)

        if segments is None:
            response = await self.api_client.get_transcripts([call_id])
            segments = extract_transcript_segments(response)
        speaker_ids = distinct_speaker_ids(segments)

        users = await self.user_directory.get_all_users()
        directory_speakers = {user.id: Speaker.from_user(user) for user in users}

        from_directory = 0
        synthesized = 0
        for speaker_id in speaker_ids:
            if speaker_id in speaker_map:
                continue
            if speaker_id in directory_speakers:
                speaker_map[speaker_id] = directory_speakers[speaker_id]
                from_directory += 1
            else:
                speaker_map[speaker_id] = Speaker.placeholder(speaker_id)
                synthesized += 1

        logger.info(
            "Speaker map built",
            extra={
                "participants": len(participants),
                "transcript_speakers": len(speaker_ids),
                "from_directory": from_directory,
                "synthesized": synthesized,
            },
        )
        return speaker_map
