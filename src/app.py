"""Application composition root.

This module wires together configuration, the completion client, the two translators and the
bridge relay. Everything is built once at startup and shared by reference; nothing here is
mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass

from src.bridge.lifi import LiFiClient, lifi_config_from_settings
from src.config.settings import Settings
from src.intent.agent import PaymentAgent
from src.intent.llm_client import ChatCompletionsClient, CompletionClient, llm_config_from_settings
from src.intent.parser import PaymentIntentParser
from src.intent.prompts import agent_prompt, intent_prompt


@dataclass(frozen=True)
class App:
    """Shared application dependencies for HTTP routes and bot handlers."""

    settings: Settings
    parser: PaymentIntentParser
    agent: PaymentAgent
    bridge: LiFiClient


def create_app(
        settings: Settings,
        *,
        completions: CompletionClient | None = None,
        bridge: LiFiClient | None = None,
) -> App:
    """Create the application container.

    `completions` and `bridge` default to the real network clients; tests pass fakes.

    Raises:
        src.intent.prompts.PromptNotFoundError: If `settings.prompt_version` has no templates.
    """

    client = completions or ChatCompletionsClient(llm_config_from_settings(settings))
    version = settings.prompt_version
    check = settings.agent_recipient_check

    return App(
        settings=settings,
        parser=PaymentIntentParser(client, prompt=intent_prompt(version)),
        agent=PaymentAgent(
            client,
            recipient_check=check,
            prompt=agent_prompt(version, recipient_check=check),
        ),
        bridge=bridge or LiFiClient(lifi_config_from_settings(settings)),
    )
