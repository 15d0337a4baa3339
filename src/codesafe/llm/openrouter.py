"""OpenRouter chat-completions provider."""

import logging
from typing import Any

import httpx

from .base import EnhancementError, LLMProvider

logger = logging.getLogger(__name__)


class OpenRouterProvider(LLMProvider):
    """Calls an OpenAI-compatible chat-completions endpoint on OpenRouter.

    The API key stays on the server that constructs this provider; callers
    of the HTTP service never see it.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str = "https://openrouter.ai/api/v1",
        timeout: float = 60.0,
        referer: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the provider.

        Args:
            api_key: OpenRouter API key.
            model: Model identifier, e.g. "openai/gpt-4".
            base_url: API root; "/chat/completions" is appended.
            timeout: Request timeout in seconds.
            referer: Optional value for the HTTP-Referer header.
            transport: Custom httpx transport, used by tests.
        """
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.referer = referer
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Authorization": f"Bearer {self.api_key}"}
        if self.referer:
            headers["HTTP-Referer"] = self.referer
        return headers

    async def complete(self, system: str, prompt: str) -> str:
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
        }

        logger.info(f"Calling OpenRouter model: {self.model}")

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    "/chat/completions", json=payload, headers=self._headers()
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            detail = e.response.text[:400]
            raise EnhancementError(
                f"OpenRouter returned HTTP {e.response.status_code}: {detail}"
            ) from e
        except httpx.HTTPError as e:
            raise EnhancementError(f"OpenRouter request failed: {e}") from e
        except ValueError as e:
            raise EnhancementError(f"OpenRouter returned invalid JSON: {e}") from e

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise EnhancementError("OpenRouter response has no message content") from e

        if not isinstance(content, str):
            raise EnhancementError("OpenRouter response has no message content")
        return content
