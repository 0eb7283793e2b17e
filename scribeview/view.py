"""
scribeview.view - Transcription view state and user actions.

Composition root for one opened transcription: checks ownership, runs the
pipeline once when the transcript is still empty, and wires regenerate,
save, edit, tab, model, language and audio actions to shared state.
"""

from __future__ import annotations

from dataclasses import dataclass

from scribeview.config import DEFAULT_MODEL, validate_model
from scribeview.exceptions import OwnershipDenied, StoreError
from scribeview.language import LanguageSelection
from scribeview.logging import get_logger
from scribeview.markup import Block, render_markup
from scribeview.models import PipelineResult, Transcription
from scribeview.pipeline import TranscriptionPipeline
from scribeview.store import DocumentStore, transcription_path

logger = get_logger(__name__)

VIEW_TAB = "view"
EDIT_TAB = "edit"

DENIED_MESSAGE = "You do not have access to this transcription."
OWNERSHIP_ERROR_MESSAGE = "An error occurred while checking ownership."

STAGE_MESSAGES = {
    "transcribe": "Error transcribing audio",
    "format": "Error formatting text",
    "title": "Error generating title",
    "persist": "Error saving transcript",
    "busy": "A transcription is already in progress",
}


@dataclass(frozen=True)
class Notice:
    """User-visible, non-blocking notification."""

    level: str
    message: str


class AudioPosition:
    """Progress/seek arithmetic for the audio element. Playback itself is external."""

    def __init__(self) -> None:
        self.is_playing = False
        self.progress = 0.0

    def toggle(self) -> bool:
        self.is_playing = not self.is_playing
        return self.is_playing

    def update(self, current_time: float, duration: float) -> float:
        """Record playback progress as a percentage of ``duration``."""
        if duration <= 0:
            self.progress = 0.0
        else:
            self.progress = min(100.0, max(0.0, current_time / duration * 100))
        return self.progress

    def seek(self, percent: float, duration: float) -> float:
        """Move to ``percent`` of the track. Returns the target time in seconds."""
        percent = min(100.0, max(0.0, float(percent)))
        self.progress = percent
        if duration <= 0:
            return 0.0
        return duration / 100 * percent


class TranscriptionView:
    """State and actions of the transcription page."""

    def __init__(
        self,
        transcription: Transcription,
        pipeline: TranscriptionPipeline,
        store: DocumentStore,
        user_id: str,
        model: str | None = None,
        language: str = "auto",
    ) -> None:
        if user_id != pipeline.user_id:
            raise ValueError(
                f"view user '{user_id}' does not match pipeline user '{pipeline.user_id}'"
            )
        self.transcription = transcription
        self.pipeline = pipeline
        self.store = store
        self.user_id = user_id

        self.transcript = transcription.transcript
        self.title = transcription.title
        self.active_tab = VIEW_TAB
        self.model = validate_model(model or DEFAULT_MODEL)
        self.language = LanguageSelection(language)
        self.audio = AudioPosition()

        self.is_saving = False
        self.denied = False
        self.redirect_to: str | None = None
        self.notices: list[Notice] = []

        self._is_loading = False
        self._auto_run_started = False
        self._ownership_verified = False

    @property
    def path(self) -> str:
        return transcription_path(self.user_id, self.transcription.id)

    @property
    def is_loading(self) -> bool:
        return self._is_loading or self.pipeline.busy

    @property
    def can_regenerate(self) -> bool:
        return self._ownership_verified and not self.is_loading and not self.denied

    def notify(self, level: str, message: str) -> None:
        self.notices.append(Notice(level, message))

    def check_ownership(self) -> None:
        """Raise OwnershipDenied if the record is not under the user's key path."""
        if not self.store.exists(self.path):
            raise OwnershipDenied(self.user_id, self.transcription.id)

    async def mount(self) -> PipelineResult | None:
        """Open the view. Runs the pipeline at most once per instance.

        Returns:
            The automatic run's result, or None when no run happened
        """
        try:
            self.check_ownership()
        except OwnershipDenied as e:
            logger.warning("%s", e)
            self.denied = True
            self.redirect_to = "/transcriptions"
            self.notify("error", DENIED_MESSAGE)
            return None
        except StoreError as e:
            logger.error("Error checking ownership: %s", e)
            self.notify("error", OWNERSHIP_ERROR_MESSAGE)
            return None
        self._ownership_verified = True

        if not self.transcription.needs_transcription or self._auto_run_started:
            return None

        self._auto_run_started = True
        return await self._transcribe()

    async def regenerate(self) -> PipelineResult | None:
        """Re-run the full pipeline with the current language and model.

        Only allowed after ``mount`` has verified ownership.
        """
        if self.is_loading:
            logger.debug("Regenerate ignored while a run is in progress")
            self.notify("warning", STAGE_MESSAGES["busy"])
            return None
        if not self._ownership_verified or self.denied:
            logger.warning("Regenerate refused for %s: ownership not verified", self.path)
            return None
        return await self._transcribe()

    async def _transcribe(self) -> PipelineResult:
        self._is_loading = True
        try:
            result = await self.pipeline.run(self.transcription, self.language.code, self.model)
        finally:
            self._is_loading = False
        self._apply(result)
        return result

    def _apply(self, result: PipelineResult) -> None:
        if result.detected_language and not self.language.apply_detected(result.detected_language):
            logger.info("Detected language %r is not selectable", result.detected_language)
        if result.formatted:
            self.transcript = result.formatted_text
        if result.titled:
            self.title = result.title
        if result.failure is not None:
            prefix = STAGE_MESSAGES.get(result.failure.stage, "Error transcribing audio")
            self.notify("error", f"{prefix}: {result.failure.message}")

    def edit(self, text: str) -> None:
        self.transcript = text

    def set_title(self, title: str) -> None:
        self.title = title

    def select_tab(self, tab: str) -> None:
        if tab not in (VIEW_TAB, EDIT_TAB):
            raise ValueError(f"tab must be '{VIEW_TAB}' or '{EDIT_TAB}'")
        self.active_tab = tab

    def select_model(self, model: str) -> None:
        self.model = validate_model(model)

    def select_language(self, code: str) -> None:
        self.language.select(code)

    def save(self) -> bool:
        """Persist the current title and transcript.

        Writes exactly the in-memory values at the time of the call. Saving
        is refused while a pipeline run is outstanding.
        """
        fields = {"title": self.title, "transcript": self.transcript}
        if self.is_loading:
            self.notify("warning", "Wait for the transcription to finish before saving.")
            return False
        if self.denied:
            self.notify("error", DENIED_MESSAGE)
            return False

        self.is_saving = True
        try:
            self.store.update(self.path, fields)
        except StoreError as e:
            logger.error("Error saving transcript: %s", e)
            self.notify("error", f"Error saving transcript: {e}")
            return False
        finally:
            self.is_saving = False

        self.notify("success", "Transcript saved.")
        return True

    def render(self) -> tuple[Block, ...] | str:
        """Blocks for the view tab, raw markup for the edit tab."""
        if self.active_tab == EDIT_TAB:
            return self.transcript
        return render_markup(self.transcript)
