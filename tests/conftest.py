"""Pytest configuration and shared fixtures."""

import copy
from typing import Any
from unittest.mock import AsyncMock, Mock

import pytest

RAW_CALL: dict[str, Any] = {
    "id": "C1",
    "title": "Acme discovery call",
    "scheduled": "2024-03-01T14:55:00Z",
    "started": "2024-03-01T15:00:00Z",
    "duration": 1865,
    "direction": "Conference",
    "system": "Zoom",
    "scope": "External",
    "media": "Video",
    "language": "eng",
    "url": "https://app.gong.io/call?id=C1",
    "participants": [
        {"id": "p1", "name": "Alice", "company": "Acme", "role": "Champion"},
    ],
}

RAW_TRANSCRIPT_SEGMENTS: list[dict[str, Any]] = [
    {
        "speakerId": "p1",
        "topic": "Introduction",
        "sentences": [
            {"start": 0, "end": 3500, "text": "Hi all."},
            {"start": 4000, "end": 8000, "text": "Thanks for joining."},
        ],
    },
    {
        "speakerId": "p2",
        "topic": "Introduction",
        "sentences": [{"start": 9000, "end": 11000, "text": "Glad to be here."}],
    },
    {
        "speakerId": "zz9",
        "topic": "Pricing",
        "sentences": [{"start": 65000, "end": 69000, "text": "What does it cost?"}],
    },
    {
        "speakerId": "p2",
        "topic": "Pricing",
        "sentences": [
            {"start": 70500, "end": 71500, "text": "It depends."},
            {"start": 72000, "end": 75000, "text": "Let me explain."},
        ],
    },
]

RAW_USERS: list[dict[str, Any]] = [
    {
        "id": "p2",
        "firstName": "Bob",
        "lastName": "Lee",
        "emailAddress": "bob.lee@example.com",
        "title": "Account Executive",
        "active": True,
        "created": "2021-06-01T00:00:00Z",
    },
    {
        "id": "u3",
        "firstName": "Carol",
        "lastName": "Nguyen",
        "email": "carol.nguyen@example.com",
        "active": False,
    },
    {"id": "u4", "emailAddress": "ops@example.com"},
]


@pytest.fixture
def raw_call() -> dict[str, Any]:
    """Raw Gong call record for call C1."""
    return copy.deepcopy(RAW_CALL)


@pytest.fixture
def raw_segments() -> list[dict[str, Any]]:
    """Raw transcript segments for call C1."""
    return copy.deepcopy(RAW_TRANSCRIPT_SEGMENTS)


@pytest.fixture
def transcript_response(raw_segments: list[dict[str, Any]]) -> dict[str, Any]:
    """Body of POST /v2/calls/transcript for call C1."""
    return {"callTranscripts": [{"callId": "C1", "transcript": raw_segments}]}


@pytest.fixture
def raw_users() -> list[dict[str, Any]]:
    """Raw Gong directory records."""
    return copy.deepcopy(RAW_USERS)


@pytest.fixture
def mock_api_client(
    raw_call: dict[str, Any],
    transcript_response: dict[str, Any],
    raw_users: list[dict[str, Any]],
) -> Mock:
    """Mock Gong API accessor serving call C1, its transcript, and the directory.

    Returns:
        Mock with async accessor methods
    """
    client = Mock()
    client.get_call = AsyncMock(return_value={"call": raw_call})
    client.get_transcripts = AsyncMock(return_value=transcript_response)
    client.list_users_paginated = AsyncMock(return_value=raw_users)
    client.list_calls_paginated = AsyncMock(return_value=[raw_call])
    return client


@pytest.fixture
def gong_env_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set up Gong credentials in the environment.

    Args:
        monkeypatch: pytest monkeypatch fixture
    """
    monkeypatch.setenv("GONG_ACCESS_KEY", "test-access-key")
    monkeypatch.setenv("GONG_ACCESS_KEY_SECRET", "test-access-secret")
    monkeypatch.setenv("MCP_LOG_LEVEL", "DEBUG")
