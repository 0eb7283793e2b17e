"""
scribeview.services.http - JSON-over-HTTP service clients.

Each service is a single POST endpoint. Success is any 2xx status with the
documented JSON body; failures carry ``{"error": "..."}``.
"""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from scribeview.exceptions import ServiceError
from scribeview.logging import get_logger
from scribeview.models import (
    FormatRequest,
    FormatResponse,
    PipelineRequest,
    TitleRequest,
    TitleResponse,
    TranscribeResponse,
)
from scribeview.services import SpeechToText, TextFormatter, TitleGenerator

logger = get_logger(__name__)


def _error_message(response: httpx.Response) -> str:
    """Pull the ``error`` field out of a failed response."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return f"HTTP {response.status_code} {response.reason_phrase}".strip()


class JsonServiceClient:
    """Posts JSON to one endpoint and validates the reply."""

    service_name = "service"

    def __init__(
        self,
        url: str,
        timeout: float = 300.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._client = client

    async def _send(self, payload: dict[str, Any], headers: dict[str, str]) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(self.url, json=payload, headers=headers)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(self.url, json=payload, headers=headers)

    async def post(
        self,
        payload: dict[str, Any],
        response_model: type[BaseModel],
        model: str | None = None,
    ) -> Any:
        """POST ``payload`` and parse the reply into ``response_model``.

        Raises:
            ServiceError: On transport errors, non-2xx status or bad body
        """
        headers = {"Content-Type": "application/json"}
        if model:
            headers["model"] = model

        logger.debug("POST %s (%s)", self.url, self.service_name)
        try:
            response = await self._send(payload, headers)
        except httpx.HTTPError as e:
            raise ServiceError(self.service_name, f"Request failed: {e}") from e

        if not response.is_success:
            raise ServiceError(
                self.service_name, _error_message(response), status_code=response.status_code
            )

        try:
            return response_model.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise ServiceError(
                self.service_name,
                f"Unexpected response body: {e}",
                status_code=response.status_code,
            ) from e


class HttpSpeechToText(JsonServiceClient, SpeechToText):
    service_name = "speech-to-text"

    async def transcribe(self, audio_url: str, language: str) -> TranscribeResponse:
        request = PipelineRequest(audio_url=audio_url, language=language)
        return await self.post(request.to_wire(), TranscribeResponse)


class HttpTextFormatter(JsonServiceClient, TextFormatter):
    service_name = "text-formatter"

    async def format_text(
        self, text: str, language: str, model: str, rephrase: bool = False
    ) -> str:
        request = FormatRequest(text=text, rephrase=rephrase, language=language)
        response: FormatResponse = await self.post(request.to_wire(), FormatResponse, model=model)
        return response.formatted_text


class HttpTitleGenerator(JsonServiceClient, TitleGenerator):
    service_name = "title-generator"

    async def generate_title(self, text: str, language: str, model: str) -> str:
        request = TitleRequest(text=text, language=language)
        response: TitleResponse = await self.post(request.to_wire(), TitleResponse, model=model)
        return response.title
