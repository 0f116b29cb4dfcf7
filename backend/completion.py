"""
Text-completion adapter: one prompt in, raw model text out.

Callers own all structure and fallbacks; this module only translates SDK
failures into TransportError / QuotaError and bounds each call with a timeout.
"""
import asyncio
import logging
from typing import Optional, Protocol

import anthropic

from config import (
    ANTHROPIC_API_KEY,
    ANTHROPIC_MODEL,
    COMPLETION_MAX_TOKENS,
    COMPLETION_TIMEOUT_S,
)

logger = logging.getLogger(__name__)


class TransportError(Exception):
    """The completion endpoint could not be reached or gave no usable answer."""


class QuotaError(TransportError):
    """The completion endpoint refused the call because of rate limits or quota."""


class Completer(Protocol):
    async def complete(self, prompt: str) -> str: ...


class TextCompletionClient:
    def __init__(
        self,
        client: Optional[anthropic.AsyncAnthropic] = None,
        api_key: str = ANTHROPIC_API_KEY,
        model: str = ANTHROPIC_MODEL,
        max_tokens: int = COMPLETION_MAX_TOKENS,
        timeout_s: float = COMPLETION_TIMEOUT_S,
    ):
        self._client = client
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.timeout_s = timeout_s

    def _get_client(self) -> anthropic.AsyncAnthropic:
        if self._client is None:
            if not self.api_key or self.api_key == "your-api-key-here":
                raise TransportError("API key not configured")
            self._client = anthropic.AsyncAnthropic(api_key=self.api_key)
        return self._client

    async def complete(self, prompt: str) -> str:
        client = self._get_client()
        try:
            response = await asyncio.wait_for(
                client.messages.create(
                    model=self.model,
                    max_tokens=self.max_tokens,
                    messages=[{"role": "user", "content": prompt}],
                ),
                timeout=self.timeout_s,
            )
        except asyncio.TimeoutError as e:
            raise TransportError(f"completion timed out after {self.timeout_s}s") from e
        except anthropic.RateLimitError as e:
            raise QuotaError(f"rate limited: {e}") from e
        except anthropic.APIError as e:
            raise TransportError(f"API error: {e}") from e

        if not response.content:
            raise TransportError("empty completion")
        text = response.content[0].text
        logger.debug("Completion response: %s", text)
        return text
