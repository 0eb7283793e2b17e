"""
scribeview.models - Records and payloads exchanged by the pipeline.

Wire payloads use the camelCase keys of the backing services; Python code
uses the snake_case attribute names.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from scribeview.language import AUTO


class WireModel(BaseModel):
    """Base for models serialized with camelCase aliases."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class Transcription(BaseModel):
    """A stored transcription record. Only title and transcript are mutable."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    audio_url: str = Field(alias="audioURL")
    title: str = ""
    transcript: str = ""

    @property
    def needs_transcription(self) -> bool:
        return not self.transcript


class PipelineRequest(WireModel):
    audio_url: str = Field(alias="audioURL")
    language: str = AUTO


class TranscribeResponse(WireModel):
    transcription: str
    detected_language: str | None = Field(default=None, alias="detectedLanguage")


class FormatRequest(WireModel):
    text: str
    rephrase: bool = False
    language: str = AUTO


class FormatResponse(WireModel):
    formatted_text: str = Field(alias="formattedText")


class TitleRequest(WireModel):
    text: str
    language: str = AUTO


class TitleResponse(WireModel):
    title: str


class StageFailure(BaseModel):
    """Which stage failed and the upstream error message."""

    stage: str
    message: str


class PipelineResult(BaseModel):
    """Outcome of one pipeline run.

    ``formatted_text`` is set once formatting succeeded, even when the
    title stage later fails; ``title`` only once title generation succeeded.
    """

    detected_language: str | None = None
    working_language: str = AUTO
    formatted_text: str = ""
    title: str = ""
    persisted: bool = False
    failure: StageFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None and self.persisted

    @property
    def formatted(self) -> bool:
        return self.failure is None or self.failure.stage in {"title", "persist"}

    @property
    def titled(self) -> bool:
        return self.failure is None or self.failure.stage == "persist"
