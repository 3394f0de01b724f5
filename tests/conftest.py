"""Pytest configuration.

The repository uses a flat `src/` layout without an installed package. This conftest ensures tests
can import from the `src.*` namespace when running `pytest` locally, and provides a scripted
completion client so no test touches the network.
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path

import pytest

# Ensure `import src...` works when running pytest without installing the package.
REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

from src.config.settings import Settings  # noqa: E402
from src.intent.llm_client import CompletionRequest  # noqa: E402


class FakeCompletionClient:
    """Replays scripted completions; an `Exception` entry is raised instead of returned."""

    def __init__(self, *responses: str | Exception) -> None:
        self._responses = list(responses)
        self.requests: list[CompletionRequest] = []

    def complete(self, request: CompletionRequest) -> str:
        self.requests.append(request)
        if not self._responses:
            raise AssertionError("unexpected completion call")
        response = self._responses.pop(0) if len(self._responses) > 1 else self._responses[0]
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def fake_completions() -> Callable[..., FakeCompletionClient]:
    return FakeCompletionClient


@pytest.fixture
def settings() -> Settings:
    return Settings(LLM_API_KEY="test-key", _env_file=None)
