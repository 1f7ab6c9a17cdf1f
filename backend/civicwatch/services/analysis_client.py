from __future__ import annotations

import logging
from typing import Protocol

import httpx

from civicwatch.config.settings import Settings
from civicwatch.errors import AnalysisUnavailable

logger = logging.getLogger(__name__)


class TextAnalysisClient(Protocol):
    def complete_json(self, system_prompt: str, user_prompt: str) -> str:
        ...


class ChatCompletionClient:
    """JSON-mode chat completion against an OpenAI-compatible endpoint.

    One call is one HTTP request; retries are the caller's decision.
    """

    def __init__(
        self,
        *,
        api_url: str,
        api_key: str | None,
        model: str,
        timeout: float = 60.0,
        max_tokens: int = 3000,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_url = api_url
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.max_tokens = max_tokens
        self.transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "ChatCompletionClient":
        return cls(
            api_url=settings.analysis_api_url,
            api_key=settings.analysis_api_key,
            model=settings.analysis_model,
            timeout=settings.analysis_timeout,
        )

    def complete_json(self, system_prompt: str, user_prompt: str) -> str:
        if not self.api_key:
            raise AnalysisUnavailable("no analysis API key configured")
        payload = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": 0.2,
            "response_format": {"type": "json_object"},
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(self.api_url, json=payload, headers=headers)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as exc:
            raise AnalysisUnavailable(f"analysis request failed: {exc}") from exc
        except ValueError as exc:
            raise AnalysisUnavailable(f"analysis response is not JSON: {exc}") from exc

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise AnalysisUnavailable("analysis response without message content") from exc
        if data["choices"][0].get("finish_reason") == "length":
            logger.warning("analysis response hit max_tokens=%d", self.max_tokens)
        return content or ""
