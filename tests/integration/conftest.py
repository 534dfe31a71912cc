"""Integration-test fixtures for deterministic provider and credential behavior."""

from __future__ import annotations

import pytest

from pdfnarrator.tts.openai_client import OpenAISpeechClient
from tests.fixture_builders import InMemoryCredentialStore, silent_wav_bytes


@pytest.fixture(autouse=True)
def _mock_openai_speech_calls(monkeypatch: pytest.MonkeyPatch) -> None:
    """Mock OpenAI speech calls in integration tests to avoid network/key requirements."""

    def _mock_synthesize_speech(self, **kwargs: object) -> bytes:
        """Return deterministic audio bytes in the requested response format."""

        _ = self
        if kwargs.get("response_format") == "wav":
            return silent_wav_bytes()
        return f"mp3:{kwargs.get('text')}|".encode("utf-8")

    monkeypatch.setattr(OpenAISpeechClient, "synthesize_speech", _mock_synthesize_speech)


@pytest.fixture(autouse=True)
def credential_store(monkeypatch: pytest.MonkeyPatch) -> InMemoryCredentialStore:
    """Replace the keyring-backed store used by CLI commands."""

    store = InMemoryCredentialStore()
    monkeypatch.setattr("pdfnarrator.cli.create_credential_store", lambda: store)
    for env_key in (
        "OPENAI_API_KEY",
        "PDFNARRATOR_PROVIDER",
        "PDFNARRATOR_TTS_MODEL",
        "PDFNARRATOR_TTS_VOICE",
    ):
        monkeypatch.delenv(env_key, raising=False)
    return store
