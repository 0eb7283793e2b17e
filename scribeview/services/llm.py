"""
scribeview.services.llm - Formatter and title generator backed by litellm.

Errors from the LLM layer are reported as ServiceError so the pipeline
treats both backends the same way.
"""

from __future__ import annotations

from scribeview.exceptions import LLMError, ServiceError
from scribeview.llm.client import LLMClient
from scribeview.llm.templates import (
    PromptTemplateManager,
    clean_title,
    language_name,
    strip_code_fences,
)
from scribeview.services import TextFormatter, TitleGenerator


class _LLMService:
    service_name = "llm"
    template_name = ""

    def __init__(self, client: LLMClient, templates: PromptTemplateManager | None = None) -> None:
        self.client = client
        self.templates = templates or PromptTemplateManager()

    async def _ask(self, model: str, **variables: object) -> str:
        try:
            prompt = self.templates.render(self.template_name, variables)
            return await self.client.complete(prompt, model=model)
        except (LLMError, FileNotFoundError) as e:
            raise ServiceError(self.service_name, str(e)) from e


class LLMTextFormatter(_LLMService, TextFormatter):
    service_name = "text-formatter"
    template_name = "format_text.txt"

    async def format_text(
        self, text: str, language: str, model: str, rephrase: bool = False
    ) -> str:
        response = await self._ask(
            model, text=text, rephrase=rephrase, language=language_name(language)
        )
        formatted = strip_code_fences(response)
        if not formatted:
            raise ServiceError(self.service_name, "Model returned an empty transcript")
        return formatted


class LLMTitleGenerator(_LLMService, TitleGenerator):
    service_name = "title-generator"
    template_name = "generate_title.txt"

    async def generate_title(self, text: str, language: str, model: str) -> str:
        response = await self._ask(model, text=text, language=language_name(language))
        title = clean_title(response)
        if not title:
            raise ServiceError(self.service_name, "Model returned an empty title")
        return title
