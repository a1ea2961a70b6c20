"""Async OpenAI chat-completions client used for optional report enrichment."""

from __future__ import annotations

import httpx

from aggregator.errors import EnrichmentUnavailable

SYSTEM_PROMPT = "You are a professional stock market analyst."


class OpenAIClient:
    """Minimal async client for ``/v1/chat/completions``.

    Single attempt per call, bounded by ``timeout``. Every failure surfaces as
    ``EnrichmentUnavailable`` with a readable reason.
    """

    BASE_URL = "https://api.openai.com"
    DEFAULT_MODEL = "gpt-3.5-turbo"
    TIMEOUT = 15.0

    def __init__(
        self,
        api_key: str,
        *,
        model: str | None = None,
        timeout: float | None = None,
        temperature: float = 0.7,
        max_tokens: int = 500,
    ):
        if not api_key:
            raise EnrichmentUnavailable("OpenAI API key not configured")
        self.api_key = api_key
        self.model = model or self.DEFAULT_MODEL
        self.timeout = timeout or self.TIMEOUT
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.BASE_URL,
                timeout=self.timeout,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def complete(self, prompt: str, *, system: str = SYSTEM_PROMPT) -> str:
        """Return the assistant message for ``prompt``.

        Raises:
            EnrichmentUnavailable: On HTTP errors, transport failures, or unusable responses
        """
        try:
            resp = await self._get_client().post(
                "/v1/chat/completions",
                json={
                    "model": self.model,
                    "messages": [
                        {"role": "system", "content": system},
                        {"role": "user", "content": prompt},
                    ],
                    "temperature": self.temperature,
                    "max_tokens": self.max_tokens,
                },
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise EnrichmentUnavailable(
                f"OpenAI API error {e.response.status_code}: {e.response.text[:200]}"
            ) from e
        except httpx.RequestError as e:
            raise EnrichmentUnavailable(f"Request failed: {e!r}") from e

        try:
            content = resp.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise EnrichmentUnavailable("Malformed completion response") from e

        if not isinstance(content, str) or not content.strip():
            raise EnrichmentUnavailable("Empty completion response")
        return content.strip()
