"""Chat-completion client for an OpenAI-compatible API.

The client only moves text: a system instruction and one user message go out, the raw completion
text comes back. Locating JSON in that text is the caller's job (see `src.intent.extract`).
There is no retry, caching or cancellation; one call is one HTTP request.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Protocol
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from src.config.settings import Settings

logger = logging.getLogger(__name__)


class CompletionError(RuntimeError):
    """Raised when the completion call itself fails (network, auth, quota, bad envelope)."""


@dataclass(frozen=True)
class LLMConfig:
    """Configuration for the OpenAI-style Chat Completions API call."""

    api_key: str
    model: str = "gpt-4o-mini"
    api_base: str = "https://api.openai.com/v1"
    timeout_s: float = 30.0


@dataclass(frozen=True)
class CompletionRequest:
    """One system instruction plus one user message, with sampling bounds."""

    system: str
    user: str
    temperature: float
    max_tokens: int


class CompletionClient(Protocol):
    """Anything that turns a `CompletionRequest` into completion text.

    Implementations must raise `CompletionError` for every transport-level failure.
    """

    def complete(self, request: CompletionRequest) -> str: ...


def _chat_completions_url(api_base: str) -> str:
    return api_base.rstrip("/") + "/chat/completions"


class ChatCompletionsClient:
    """`CompletionClient` backed by `/v1/chat/completions`."""

    def __init__(self, config: LLMConfig) -> None:
        self._config = config

    def complete(self, request: CompletionRequest) -> str:
        """Return the first choice's message content (`""` when the model sent none)."""

        config = self._config
        payload = {
            "model": config.model,
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
            "messages": [
                {"role": "system", "content": request.system},
                {"role": "user", "content": request.user},
            ],
        }

        req = Request(
            _chat_completions_url(config.api_base),
            method="POST",
            headers={
                "Authorization": f"Bearer {config.api_key}",
                "Content-Type": "application/json",
            },
            data=json.dumps(payload).encode(),
        )

        try:
            with urlopen(req, timeout=config.timeout_s) as resp:  # noqa: S310 (fixed, configured API base)
                body = resp.read()
        except HTTPError as exc:
            raise CompletionError(f"LLM HTTP error: {exc.code}") from exc
        except URLError as exc:
            raise CompletionError("LLM connection error") from exc
        except OSError as exc:
            raise CompletionError("LLM request timed out or failed") from exc

        try:
            decoded = json.loads(body)
            choices = decoded["choices"]
            content = (choices[0].get("message") or {}).get("content") if choices else None
        except Exception as exc:  # noqa: BLE001
            raise CompletionError("Unexpected LLM response format") from exc

        return content if isinstance(content, str) else ""


def llm_config_from_settings(settings: Settings) -> LLMConfig:
    """Build the completion client config from validated settings."""

    return LLMConfig(
        api_key=settings.llm_api_key,
        model=settings.llm_model,
        api_base=settings.llm_api_base,
        timeout_s=settings.llm_timeout_s,
    )
