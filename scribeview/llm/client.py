"""
scribeview.llm.client - LLM backend abstraction using litellm.

Provides a single async completion call with retry logic for transient
connection and rate-limit errors.
"""

from __future__ import annotations

import asyncio
from typing import Any

from scribeview.logging import get_logger

logger = get_logger(__name__)


class LLMClient:
    """Async litellm wrapper with retry logic."""

    def __init__(
        self,
        provider: str = "groq",
        timeout: float = 300,
        max_retries: int = 3,
        retry_delay: float = 2.0,
    ) -> None:
        self.provider = provider
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._token_usage = {"prompt_tokens": 0, "completion_tokens": 0, "total_tokens": 0}

    def model_string(self, model: str) -> str:
        """Get the litellm model string for a model identifier."""
        if not self.provider or "/" in model:
            return model
        return f"{self.provider}/{model}"

    async def complete(
        self,
        prompt: str,
        model: str,
        max_tokens: int = 4096,
        temperature: float = 0.3,
    ) -> str:
        """Send prompt to the LLM and get completion with retry logic.

        Args:
            prompt: The prompt string
            model: Model identifier (e.g. "llama3-70b-8192")
            max_tokens: Maximum tokens in response
            temperature: Sampling temperature

        Returns:
            LLM response text

        Raises:
            LLMError: If LLM request fails after all retries
            LLMResponseError: If the response has no content
        """
        from scribeview.exceptions import LLMError, LLMResponseError

        try:
            import litellm
        except ImportError as e:
            raise LLMError("litellm not installed. Install with: pip install litellm") from e

        litellm.telemetry = False

        model_name = self.model_string(model)
        last_error: Exception | None = None

        for attempt in range(self.max_retries):
            if attempt > 0:
                logger.info("Retry %d/%d for %s", attempt + 1, self.max_retries, model_name)

            try:
                response = await litellm.acompletion(
                    model=model_name,
                    messages=[{"role": "user", "content": prompt}],
                    max_tokens=max_tokens,
                    temperature=temperature,
                    timeout=self.timeout,
                )
                self._record_usage(response)
                return _extract_content(response)

            except LLMResponseError:
                raise
            except Exception as e:
                last_error = e
                error_str = str(e).lower()

                if "rate limit" in error_str:
                    logger.warning("Rate limited, waiting...")
                    await asyncio.sleep(self.retry_delay * 2)
                    continue
                if "connection" in error_str or "refused" in error_str:
                    logger.warning("Connection error: %s", e)
                elif "timeout" in error_str:
                    logger.warning("Timeout, retrying...")

                if attempt < self.max_retries - 1:
                    await asyncio.sleep(self.retry_delay)
                else:
                    raise LLMError(
                        f"LLM request failed after {self.max_retries} retries: {last_error}"
                    ) from last_error

        raise LLMError(f"LLM request failed: {last_error}")

    def _record_usage(self, response: Any) -> None:
        usage = getattr(response, "usage", None)
        if usage:
            self._token_usage["prompt_tokens"] += getattr(usage, "prompt_tokens", 0) or 0
            self._token_usage["completion_tokens"] += getattr(usage, "completion_tokens", 0) or 0
            self._token_usage["total_tokens"] += getattr(usage, "total_tokens", 0) or 0

    def get_token_usage(self) -> dict[str, int]:
        """Get cumulative token usage."""
        return self._token_usage.copy()


def _extract_content(response: Any) -> str:
    from scribeview.exceptions import LLMResponseError

    choices = getattr(response, "choices", [])
    if not choices:
        raise LLMResponseError("Empty response from LLM")

    message = getattr(choices[0], "message", None)
    if message is None:
        raise LLMResponseError("No message in LLM response")

    content = getattr(message, "content", None)
    if content is None:
        raise LLMResponseError("No content in LLM message")

    return content
