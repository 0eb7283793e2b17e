"""
scribeview.pipeline - Transcript pipeline orchestrator.

Runs the dependent stages of one transcription strictly in order:

1. transcribe   - speech-to-text on the audio URL
2. resolve      - adopt the detected language when the hint is "auto"
3. format       - clean the raw text into markup
4. title        - generate a title for the formatted text
5. persist      - write {title, transcript} back to the store

Each stage is gated on the previous one succeeding. Stage errors are caught
at the run boundary and reported in the result; ``run`` never raises.
"""

from __future__ import annotations

from scribeview.config import DEFAULT_MODEL
from scribeview.exceptions import (
    FormatFailed,
    PersistenceFailed,
    PipelineBusy,
    ServiceError,
    StageError,
    StoreError,
    TitleGenerationFailed,
    TranscribeFailed,
)
from scribeview.language import AUTO
from scribeview.logging import get_logger
from scribeview.models import PipelineResult, StageFailure, Transcription
from scribeview.services import SpeechToText, TextFormatter, TitleGenerator
from scribeview.store import DocumentStore, transcription_path

logger = get_logger(__name__)


def resolve_language(language_hint: str, detected_language: str | None) -> str:
    """Working language for the stages after speech-to-text."""
    if language_hint == AUTO and detected_language:
        return detected_language
    return language_hint


class TranscriptionPipeline:
    """Orchestrates speech-to-text, formatting, titling and persistence.

    The caller identity and store are injected; the instance owns a
    single-flight flag so two runs never interleave.
    """

    def __init__(
        self,
        speech_to_text: SpeechToText,
        formatter: TextFormatter,
        title_generator: TitleGenerator,
        store: DocumentStore,
        user_id: str,
    ) -> None:
        self.speech_to_text = speech_to_text
        self.formatter = formatter
        self.title_generator = title_generator
        self.store = store
        self.user_id = user_id
        self._busy = False
        self._stage = "idle"

    @property
    def busy(self) -> bool:
        """True while a run is outstanding."""
        return self._busy

    async def run(
        self,
        transcription: Transcription,
        language_hint: str = AUTO,
        model_id: str = DEFAULT_MODEL,
    ) -> PipelineResult:
        """Convert the transcription's audio into a persisted transcript.

        Args:
            transcription: Record whose audio is transcribed
            language_hint: "auto" or a language code
            model_id: Model selector for the formatter and title generator

        Returns:
            PipelineResult; ``failure`` names the stage that stopped the run
        """
        result = PipelineResult(working_language=language_hint)

        if self._busy:
            logger.warning("Pipeline already running for %s; request ignored", transcription.id)
            result.failure = _failure(PipelineBusy("A transcription run is already in progress"))
            return result

        self._busy = True
        self._stage = "transcribe"
        try:
            await self._run_stages(transcription, language_hint, model_id, result)
        except StageError as e:
            logger.error("%s stage failed for %s: %s", e.stage, transcription.id, e.message)
            result.failure = _failure(e)
        except Exception as e:
            logger.exception("Unexpected error in %s stage for %s", self._stage, transcription.id)
            result.failure = StageFailure(stage=self._stage, message=str(e))
        finally:
            self._busy = False
            self._stage = "idle"

        return result

    async def regenerate(
        self,
        transcription: Transcription,
        language_hint: str = AUTO,
        model_id: str = DEFAULT_MODEL,
    ) -> PipelineResult:
        """Restart the whole chain from speech-to-text."""
        return await self.run(transcription, language_hint, model_id)

    async def _run_stages(
        self,
        transcription: Transcription,
        language_hint: str,
        model_id: str,
        result: PipelineResult,
    ) -> None:
        logger.info("Transcribing %s (language: %s)", transcription.id, language_hint)
        try:
            transcribed = await self.speech_to_text.transcribe(
                transcription.audio_url, language_hint
            )
        except ServiceError as e:
            raise TranscribeFailed(e.message) from e

        if language_hint == AUTO and transcribed.detected_language:
            result.detected_language = transcribed.detected_language
        language = resolve_language(language_hint, transcribed.detected_language)
        result.working_language = language
        self._stage = "format"
        logger.debug("Working language for %s: %s", transcription.id, language)

        try:
            formatted = await self.formatter.format_text(
                transcribed.transcription, language=language, model=model_id, rephrase=False
            )
        except ServiceError as e:
            raise FormatFailed(e.message) from e
        result.formatted_text = formatted

        self._stage = "title"

        try:
            title = await self.title_generator.generate_title(
                formatted, language=language, model=model_id
            )
        except ServiceError as e:
            raise TitleGenerationFailed(e.message) from e
        result.title = title

        self._stage = "persist"

        try:
            self.store.update(
                transcription_path(self.user_id, transcription.id),
                {"title": title, "transcript": formatted},
            )
        except StoreError as e:
            raise PersistenceFailed(str(e)) from e
        result.persisted = True
        logger.info("Saved transcript for %s: %s", transcription.id, title)


def _failure(error: StageError) -> StageFailure:
    return StageFailure(stage=error.stage, message=error.message)
