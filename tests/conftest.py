"""
Test configuration and shared fixtures.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
import yaml

from scribeview.models import TranscribeResponse, Transcription
from scribeview.pipeline import TranscriptionPipeline
from scribeview.store import DocumentStore, add_transcription


class ServiceFakes:
    """Mocked speech-to-text, formatter and title generator.

    ``calls`` records the order in which the stages were reached.
    """

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.speech_to_text = MagicMock()
        self.formatter = MagicMock()
        self.title_generator = MagicMock()

        self.speech_to_text.transcribe = AsyncMock(
            side_effect=self._record("transcribe", TranscribeResponse(transcription="raw text"))
        )
        self.formatter.format_text = AsyncMock(
            side_effect=self._record("format", "# Formatted\n\nBody text")
        )
        self.title_generator.generate_title = AsyncMock(
            side_effect=self._record("title", "A Title")
        )

    def _record(self, stage: str, value):
        def side_effect(*args, **kwargs):
            self.calls.append(stage)
            if isinstance(value, Exception):
                raise value
            return value

        return side_effect

    def set_transcribe(self, value) -> None:
        self.speech_to_text.transcribe.side_effect = self._record("transcribe", value)

    def set_format(self, value) -> None:
        self.formatter.format_text.side_effect = self._record("format", value)

    def set_title(self, value) -> None:
        self.title_generator.generate_title.side_effect = self._record("title", value)


@pytest.fixture
def user_id() -> str:
    return "user_abc"


@pytest.fixture
def store(tmp_path: Path) -> DocumentStore:
    return DocumentStore(tmp_path / "store.json")


@pytest.fixture
def transcription() -> Transcription:
    return Transcription(id="transcription_001", audio_url="https://cdn.example.com/a.mp3")


@pytest.fixture
def stored_transcription(
    store: DocumentStore, user_id: str, transcription: Transcription
) -> Transcription:
    """The empty transcription, registered under the user's key path."""
    add_transcription(store, user_id, transcription)
    return transcription


@pytest.fixture
def fakes() -> ServiceFakes:
    return ServiceFakes()


@pytest.fixture
def pipeline(fakes: ServiceFakes, store: DocumentStore, user_id: str) -> TranscriptionPipeline:
    return TranscriptionPipeline(
        fakes.speech_to_text,
        fakes.formatter,
        fakes.title_generator,
        store=store,
        user_id=user_id,
    )


@pytest.fixture
def tmp_workspace(tmp_path: Path) -> Path:
    """Create a workspace directory with config and one pending transcription."""
    workspace = tmp_path / "workspace"
    workspace.mkdir()

    config = {"user_id": "local", "store_path": "scribeview.json"}
    with open(workspace / "scribeview.yaml", "w") as f:
        yaml.dump(config, f)

    store = DocumentStore(workspace / "scribeview.json")
    add_transcription(
        store,
        "local",
        Transcription(id="transcription_001", audio_url="https://cdn.example.com/a.mp3"),
    )
    return workspace


@pytest.fixture
def sample_markup() -> str:
    return (
        "# Weekly sync\n"
        "\n"
        "## Decisions\n"
        "* Ship the beta\n"
        "* Freeze the API\n"
        "We agreed to **ship** on *Friday*.\n"
        "### Notes\n"
        "Plain closing line"
    )
