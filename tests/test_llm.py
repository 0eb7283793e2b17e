"""Tests for scribeview.llm modules."""

from __future__ import annotations

import asyncio
import sys
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest

from scribeview.exceptions import LLMError, LLMResponseError
from scribeview.llm.client import LLMClient
from scribeview.llm.templates import (
    PromptTemplateManager,
    clean_title,
    language_name,
    strip_code_fences,
)


def _response(content: str | None) -> SimpleNamespace:
    message = SimpleNamespace(content=content)
    usage = SimpleNamespace(prompt_tokens=10, completion_tokens=5, total_tokens=15)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)], usage=usage)


def _fake_litellm(acompletion: AsyncMock) -> SimpleNamespace:
    return SimpleNamespace(acompletion=acompletion, telemetry=True)


class TestLLMClient:
    def test_model_string_adds_provider(self) -> None:
        assert LLMClient().model_string("llama3-70b-8192") == "groq/llama3-70b-8192"

    def test_model_string_keeps_qualified_names(self) -> None:
        assert LLMClient().model_string("ollama/llama3") == "ollama/llama3"

    def test_model_string_without_provider(self) -> None:
        assert LLMClient(provider="").model_string("gpt-4o") == "gpt-4o"

    def test_complete_returns_content_and_counts_tokens(self) -> None:
        acompletion = AsyncMock(return_value=_response("Hello"))
        client = LLMClient()

        with patch.dict(sys.modules, {"litellm": _fake_litellm(acompletion)}):
            content = asyncio.run(client.complete("prompt", model="gemma-7b-it"))

        assert content == "Hello"
        assert acompletion.await_args.kwargs["model"] == "groq/gemma-7b-it"
        assert acompletion.await_args.kwargs["messages"] == [
            {"role": "user", "content": "prompt"}
        ]
        assert client.get_token_usage()["total_tokens"] == 15

    def test_complete_retries_connection_errors(self) -> None:
        acompletion = AsyncMock(side_effect=[Exception("connection refused"), _response("ok")])
        client = LLMClient(retry_delay=0)

        with patch.dict(sys.modules, {"litellm": _fake_litellm(acompletion)}):
            content = asyncio.run(client.complete("prompt", model="gemma-7b-it"))

        assert content == "ok"
        assert acompletion.await_count == 2

    def test_complete_gives_up_after_max_retries(self) -> None:
        acompletion = AsyncMock(side_effect=Exception("timeout"))
        client = LLMClient(max_retries=2, retry_delay=0)

        with patch.dict(sys.modules, {"litellm": _fake_litellm(acompletion)}):
            with pytest.raises(LLMError):
                asyncio.run(client.complete("prompt", model="gemma-7b-it"))

        assert acompletion.await_count == 2

    def test_missing_content_is_not_retried(self) -> None:
        acompletion = AsyncMock(return_value=_response(None))
        client = LLMClient(retry_delay=0)

        with patch.dict(sys.modules, {"litellm": _fake_litellm(acompletion)}):
            with pytest.raises(LLMResponseError):
                asyncio.run(client.complete("prompt", model="gemma-7b-it"))

        assert acompletion.await_count == 1


class TestPromptTemplates:
    def test_shipped_templates_render(self) -> None:
        manager = PromptTemplateManager()
        prompt = manager.render(
            "format_text.txt", {"text": "abc", "rephrase": True, "language": "French"}
        )
        assert "abc" in prompt
        assert "French" in prompt
        assert "Rephrase awkward sentences" in prompt

    def test_title_template(self) -> None:
        prompt = PromptTemplateManager().render(
            "generate_title.txt", {"text": "abc", "language": None}
        )
        assert "abc" in prompt
        assert "Write the title in" not in prompt

    def test_missing_template_raises(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            PromptTemplateManager(tmp_path).get_template("nope.txt")


class TestOutputCleanup:
    def test_language_name(self) -> None:
        assert language_name("it") == "Italian"
        assert language_name("auto") is None
        assert language_name("pt") == "pt"

    def test_strip_code_fences(self) -> None:
        assert strip_code_fences("```\nbody\n```") == "body"
        assert strip_code_fences("  plain  ") == "plain"

    def test_clean_title_variants(self) -> None:
        assert clean_title("# A Heading Title") == "A Heading Title"
        assert clean_title("\n\n'Quoted'\nsecond line") == "Quoted"
        assert clean_title("**Bold Title**") == "Bold Title"
        assert clean_title("") == ""
