"""Tests for scribeview.services HTTP and LLM implementations."""

from __future__ import annotations

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from scribeview.config import ScribeviewConfig
from scribeview.exceptions import LLMError, ServiceError
from scribeview.services import build_services
from scribeview.services.http import HttpSpeechToText, HttpTextFormatter, HttpTitleGenerator
from scribeview.services.llm import LLMTextFormatter, LLMTitleGenerator


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class Recorder:
    """MockTransport handler that records requests and returns a canned reply."""

    def __init__(self, status: int, body) -> None:
        self.status = status
        self.body = body
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.body, str):
            return httpx.Response(self.status, text=self.body)
        return httpx.Response(self.status, json=self.body)

    @property
    def payload(self) -> dict:
        return json.loads(self.requests[-1].content)


class TestHttpSpeechToText:
    def test_success_with_detected_language(self) -> None:
        handler = Recorder(200, {"transcription": "hola mundo", "detectedLanguage": "es"})
        service = HttpSpeechToText("http://svc/stt", client=_client(handler))

        response = asyncio.run(service.transcribe("https://x/a.mp3", "auto"))

        assert response.transcription == "hola mundo"
        assert response.detected_language == "es"
        assert handler.payload == {"audioURL": "https://x/a.mp3", "language": "auto"}
        assert handler.requests[0].method == "POST"
        assert "model" not in handler.requests[0].headers

    def test_success_without_detected_language(self) -> None:
        handler = Recorder(200, {"transcription": "hello"})
        service = HttpSpeechToText("http://svc/stt", client=_client(handler))

        response = asyncio.run(service.transcribe("https://x/a.mp3", "en"))

        assert response.detected_language is None

    def test_error_body_is_surfaced(self) -> None:
        handler = Recorder(500, {"error": "Failed to fetch audio"})
        service = HttpSpeechToText("http://svc/stt", client=_client(handler))

        with pytest.raises(ServiceError) as excinfo:
            asyncio.run(service.transcribe("https://x/a.mp3", "auto"))

        assert excinfo.value.message == "Failed to fetch audio"
        assert excinfo.value.status_code == 500
        assert excinfo.value.service == "speech-to-text"

    def test_error_without_json_body(self) -> None:
        handler = Recorder(502, "Bad Gateway")
        service = HttpSpeechToText("http://svc/stt", client=_client(handler))

        with pytest.raises(ServiceError) as excinfo:
            asyncio.run(service.transcribe("https://x/a.mp3", "auto"))

        assert "502" in excinfo.value.message

    def test_malformed_success_body(self) -> None:
        handler = Recorder(200, {"text": "wrong key"})
        service = HttpSpeechToText("http://svc/stt", client=_client(handler))

        with pytest.raises(ServiceError):
            asyncio.run(service.transcribe("https://x/a.mp3", "auto"))

    def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        service = HttpSpeechToText("http://svc/stt", client=_client(handler))

        with pytest.raises(ServiceError) as excinfo:
            asyncio.run(service.transcribe("https://x/a.mp3", "auto"))

        assert "connection refused" in excinfo.value.message


class TestHttpFormatterAndTitle:
    def test_formatter_sends_model_header(self) -> None:
        handler = Recorder(200, {"formattedText": "# Clean"})
        service = HttpTextFormatter("http://svc/format", client=_client(handler))

        text = asyncio.run(service.format_text("raw", language="es", model="llama3-8b-8192"))

        assert text == "# Clean"
        assert handler.payload == {"text": "raw", "rephrase": False, "language": "es"}
        assert handler.requests[0].headers["model"] == "llama3-8b-8192"
        assert handler.requests[0].headers["content-type"] == "application/json"

    def test_title_generator(self) -> None:
        handler = Recorder(200, {"title": "Saludo"})
        service = HttpTitleGenerator("http://svc/title", client=_client(handler))

        title = asyncio.run(service.generate_title("Hola", language="es", model="gemma-7b-it"))

        assert title == "Saludo"
        assert handler.payload == {"text": "Hola", "language": "es"}
        assert handler.requests[0].headers["model"] == "gemma-7b-it"

    def test_title_error(self) -> None:
        handler = Recorder(429, {"error": "Rate limit"})
        service = HttpTitleGenerator("http://svc/title", client=_client(handler))

        with pytest.raises(ServiceError) as excinfo:
            asyncio.run(service.generate_title("Hola", language="es", model="gemma-7b-it"))

        assert excinfo.value.message == "Rate limit"


def _llm_client(response: str | Exception) -> MagicMock:
    client = MagicMock()
    if isinstance(response, Exception):
        client.complete = AsyncMock(side_effect=response)
    else:
        client.complete = AsyncMock(return_value=response)
    return client


class TestLLMServices:
    def test_formatter_renders_prompt_and_strips_fences(self) -> None:
        client = _llm_client("```markdown\n# Hola\n\nMundo\n```")
        service = LLMTextFormatter(client)

        text = asyncio.run(
            service.format_text("hola mundo", language="es", model="llama3-70b-8192")
        )

        assert text == "# Hola\n\nMundo"
        prompt = client.complete.await_args.args[0]
        assert "hola mundo" in prompt
        assert "Spanish" in prompt
        assert "Do not rephrase" in prompt
        assert client.complete.await_args.kwargs["model"] == "llama3-70b-8192"

    def test_formatter_auto_language_omits_language_line(self) -> None:
        client = _llm_client("Text")
        service = LLMTextFormatter(client)

        asyncio.run(service.format_text("text", language="auto", model="llama3-70b-8192"))

        assert "The transcript is in" not in client.complete.await_args.args[0]

    def test_formatter_empty_reply_is_error(self) -> None:
        service = LLMTextFormatter(_llm_client("   "))

        with pytest.raises(ServiceError):
            asyncio.run(service.format_text("text", language="en", model="llama3-70b-8192"))

    def test_title_is_cleaned(self) -> None:
        service = LLMTitleGenerator(_llm_client('Title: "Weekly Sync Notes."\n'))

        title = asyncio.run(service.generate_title("# Notes", language="en", model="gemma-7b-it"))

        assert title == "Weekly Sync Notes"

    def test_llm_error_becomes_service_error(self) -> None:
        service = LLMTitleGenerator(_llm_client(LLMError("retries exhausted")))

        with pytest.raises(ServiceError) as excinfo:
            asyncio.run(service.generate_title("x", language="en", model="gemma-7b-it"))

        assert excinfo.value.service == "title-generator"
        assert "retries exhausted" in excinfo.value.message


class TestBuildServices:
    def test_http_backend(self) -> None:
        bundle = build_services(ScribeviewConfig(stt_url="http://a", format_url="http://b"))
        assert isinstance(bundle.speech_to_text, HttpSpeechToText)
        assert isinstance(bundle.formatter, HttpTextFormatter)
        assert bundle.formatter.url == "http://b"
        assert isinstance(bundle.title_generator, HttpTitleGenerator)

    def test_llm_backend(self) -> None:
        bundle = build_services(ScribeviewConfig(formatter_backend="llm"))
        assert isinstance(bundle.speech_to_text, HttpSpeechToText)
        assert isinstance(bundle.formatter, LLMTextFormatter)
        assert isinstance(bundle.title_generator, LLMTitleGenerator)
        assert bundle.formatter.client.provider == "groq"
