"""
scribeview.services - Contracts for the three backing AI services.

Stage 1: speech-to-text, Stage 2: text formatting, Stage 3: title
generation. Implementations raise ServiceError on any non-success answer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from scribeview.models import TranscribeResponse

if TYPE_CHECKING:
    from scribeview.config import ScribeviewConfig


class SpeechToText(ABC):
    """Turns an audio URL into raw text, optionally detecting the language."""

    @abstractmethod
    async def transcribe(self, audio_url: str, language: str) -> TranscribeResponse: ...


class TextFormatter(ABC):
    """Cleans raw text into transcript markup."""

    @abstractmethod
    async def format_text(
        self, text: str, language: str, model: str, rephrase: bool = False
    ) -> str: ...


class TitleGenerator(ABC):
    """Produces a short title for a formatted transcript."""

    @abstractmethod
    async def generate_title(self, text: str, language: str, model: str) -> str: ...


@dataclass
class ServiceBundle:
    speech_to_text: SpeechToText
    formatter: TextFormatter
    title_generator: TitleGenerator


def build_services(config: ScribeviewConfig) -> ServiceBundle:
    """Create the service implementations selected by the config."""
    from scribeview.services.http import HttpSpeechToText, HttpTextFormatter, HttpTitleGenerator

    speech_to_text = HttpSpeechToText(config.stt_url, timeout=config.request_timeout)

    if config.formatter_backend == "llm":
        from scribeview.llm.client import LLMClient
        from scribeview.services.llm import LLMTextFormatter, LLMTitleGenerator

        client = LLMClient(provider=config.llm_provider, timeout=config.request_timeout)
        return ServiceBundle(
            speech_to_text=speech_to_text,
            formatter=LLMTextFormatter(client),
            title_generator=LLMTitleGenerator(client),
        )

    return ServiceBundle(
        speech_to_text=speech_to_text,
        formatter=HttpTextFormatter(config.format_url, timeout=config.request_timeout),
        title_generator=HttpTitleGenerator(config.title_url, timeout=config.request_timeout),
    )
