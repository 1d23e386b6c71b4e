"""Reasoning provider for the Smaug bookmark archiver.

The pipeline only depends on the ReasoningPort protocol: text in, raw text
out, bounded by a timeout. OpenRouterReasoner implements it against the
OpenRouter chat completions API over httpx.

All failures surface as ProcessorError subclasses (ReasoningTimeoutError,
TransportError) so the pipeline can fall back to default metadata.
"""

import logging
from typing import Any, Optional, Protocol, runtime_checkable

import httpx

from smaug.core.config import DEFAULT_BASE_URL, DEFAULT_MODEL, DEFAULT_REASONING_TIMEOUT
from smaug.core.exceptions import ConfigurationError, ReasoningTimeoutError, TransportError
from smaug.core.prompts import SYSTEM_PROMPT

logger = logging.getLogger(__name__)

# Identifies the archiver to OpenRouter
APP_REFERER = "https://github.com/alexknowshtml/smaug"
APP_TITLE = "Smaug Bookmark Archiver"

DEFAULT_TEMPERATURE = 0.2
DEFAULT_MAX_TOKENS = 1000


@runtime_checkable
class ReasoningPort(Protocol):
    """Anything that can turn a prompt into raw reasoning text."""

    async def reason(self, prompt: str, *, timeout: float) -> str: ...


def _error_message(response: httpx.Response) -> str:
    """Best-effort error message from an OpenRouter error response."""
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return response.reason_phrase or f"HTTP {response.status_code}"


class OpenRouterReasoner:
    """Reasoning provider backed by OpenRouter.

    The system prompt is fixed for the lifetime of the instance. The
    underlying httpx client may be injected (tests pass one built on
    httpx.MockTransport); otherwise one is created per call.
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        *,
        system_prompt: str = SYSTEM_PROMPT,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the reasoner.

        Raises:
            ConfigurationError: If api_key is empty.
        """
        if not api_key:
            raise ConfigurationError("OPENROUTER_API_KEY not configured")

        self._api_key = api_key
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._system_prompt = system_prompt
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._http_client = http_client

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
            "HTTP-Referer": APP_REFERER,
            "X-Title": APP_TITLE,
        }

    def _payload(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self._model,
            "messages": [
                {"role": "system", "content": self._system_prompt},
                {"role": "user", "content": prompt},
            ],
            "temperature": self._temperature,
            "max_tokens": self._max_tokens,
            "response_format": {"type": "json_object"},
        }

    async def _post(self, client: httpx.AsyncClient, prompt: str, timeout: float) -> httpx.Response:
        return await client.post(
            f"{self._base_url}/chat/completions",
            headers=self._headers(),
            json=self._payload(prompt),
            timeout=httpx.Timeout(timeout),
        )

    async def reason(self, prompt: str, *, timeout: float = DEFAULT_REASONING_TIMEOUT) -> str:
        """Send the prompt and return the model's raw message content.

        Args:
            prompt: Per-bookmark user prompt.
            timeout: Seconds allowed for the whole request.

        Returns:
            Raw assistant message text (not yet parsed).

        Raises:
            ReasoningTimeoutError: If the request timed out.
            TransportError: On connection errors, non-2xx status, or a
                response without message content.
        """
        try:
            if self._http_client is not None:
                response = await self._post(self._http_client, prompt, timeout)
            else:
                async with httpx.AsyncClient() as client:
                    response = await self._post(client, prompt, timeout)
        except httpx.TimeoutException:
            raise ReasoningTimeoutError(f"OpenRouter timeout after {timeout:g}s")
        except httpx.HTTPError as e:
            raise TransportError(f"Failed to connect to OpenRouter: {e}")

        if not response.is_success:
            raise TransportError(
                f"OpenRouter API error: {response.status_code} - {_error_message(response)}",
                retryable=response.status_code == 429 or response.status_code >= 500,
            )

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise TransportError(f"OpenRouter returned an unexpected response: {e}")

        if not isinstance(content, str) or not content:
            raise TransportError("OpenRouter returned empty response")

        logger.debug("OpenRouter (%s) returned %d chars", self._model, len(content))
        return content
