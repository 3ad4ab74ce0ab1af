# campaign_service/services/content_generator.py
"""
Structured content generation with Anthropic Claude.

`generate_json` sends a system and user prompt and returns the parsed JSON
payload of the reply. Transient API failures are retried with exponential
backoff; authentication and bad-request errors are not.
"""

import json
import logging
from typing import Any, Optional

import anthropic
from anthropic import AsyncAnthropic
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from campaign_service.core.config import settings
from campaign_service.core.exceptions import GenerationFailure, GeneratorUnavailableError

logger = logging.getLogger(__name__)

NON_RETRYABLE_ERRORS = (
    anthropic.AuthenticationError,
    anthropic.PermissionDeniedError,
    anthropic.BadRequestError,
)


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, NON_RETRYABLE_ERRORS):
        return False
    return isinstance(exc, (anthropic.APIError, GenerationFailure))


def extract_json(text: str) -> Any:
    """Parse the JSON body of a model reply, unwrapping a fenced block."""
    json_str = text
    if "```json" in text:
        json_str = text.split("```json", 1)[1].split("```", 1)[0]
    elif "```" in text:
        json_str = text.split("```", 1)[1].split("```", 1)[0]

    try:
        return json.loads(json_str.strip())
    except json.JSONDecodeError as e:
        raise GenerationFailure(
            "Failed to parse generator response as JSON", details={"reason": str(e)}
        ) from e


class AIContentGenerator:
    """Thin async wrapper around the Anthropic Messages API."""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        self.api_key = api_key or settings.ANTHROPIC_API_KEY
        self.model = model or settings.ANTHROPIC_MODEL
        if not self.api_key:
            logger.warning("ANTHROPIC_API_KEY not configured. Campaign generation will be disabled.")
            self.client = None
        else:
            self.client = AsyncAnthropic(api_key=self.api_key)

    def is_available(self) -> bool:
        return self.client is not None

    async def _complete(
        self, system_prompt: str, user_prompt: str, max_tokens: int, temperature: float
    ) -> Any:
        response = await self.client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            temperature=temperature,
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
        )
        text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        return extract_json(text)

    async def generate_json(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int = 2048,
        temperature: float = 0.7,
        max_retries: Optional[int] = None,
    ) -> Any:
        """
        Run one generation call and return its parsed JSON.

        Raises:
            GeneratorUnavailableError: no API key configured
            GenerationFailure: retries exhausted or a non-retryable error
        """
        if not self.is_available():
            raise GeneratorUnavailableError()

        retries = settings.GENERATION_MAX_RETRIES if max_retries is None else max_retries
        retrying = AsyncRetrying(
            stop=stop_after_attempt(retries + 1),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception(_is_retryable),
            reraise=False,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    return await self._complete(system_prompt, user_prompt, max_tokens, temperature)
        except RetryError as e:
            last = e.last_attempt.exception()
            logger.error("Generation failed after %d attempts: %s", retries + 1, last)
            raise GenerationFailure(
                f"Generation failed after {retries + 1} attempts",
                details={"reason": str(last)},
            ) from last
        except NON_RETRYABLE_ERRORS as e:
            logger.error("Generation rejected by the API: %s", e)
            raise GenerationFailure("Generation request rejected", details={"reason": str(e)}) from e


_generator: Optional[AIContentGenerator] = None


def get_content_generator() -> AIContentGenerator:
    global _generator
    if _generator is None:
        _generator = AIContentGenerator()
    return _generator
