"""Versioned system prompts for the intent parser and the agent.

Prompt bodies live in `prompt_<name>_<version>.md` next to this module and are rendered with
`string.Template` placeholders. The agent's few-shot examples are plain data (action type ->
example payload) so tests and mock completions can reuse them.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from string import Template
from typing import Any

from src.config.settings import RecipientCheck
from src.intent.llm_client import CompletionRequest
from src.intent.schema import INTERVAL_LABELS, SUPPORTED_CHAINS, Interval

_PROMPT_DIR = Path(__file__).resolve().parent

EXAMPLE_ADDRESS = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"


class PromptNotFoundError(LookupError):
    """Raised when no template exists for a prompt name/version."""


@dataclass(frozen=True)
class PromptTemplate:
    """A rendered system instruction plus the sampling bounds it was tuned for."""

    name: str
    version: str
    system: str
    temperature: float
    max_tokens: int

    def request(self, user_text: str) -> CompletionRequest:
        return CompletionRequest(
            system=self.system,
            user=user_text,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )


@dataclass(frozen=True)
class ActionExample:
    """One few-shot example: what the agent says and which action it attaches."""

    title: str
    message: str
    action: dict[str, Any] | None

    def to_json(self) -> str:
        return json.dumps({"message": self.message, "action": self.action}, ensure_ascii=False)


# Low temperature keeps the formatting deterministic; the parser output is tiny.
_SAMPLING: dict[str, tuple[float, int]] = {
    "intent": (0.1, 200),
    "agent": (0.3, 500),
}

AGENT_EXAMPLES: dict[str, dict[str, ActionExample]] = {
    "v1": {
        "create_rule": ActionExample(
            title="Create a payment rule",
            message=f"I'll set up a weekly payment of 50 USDC to {EXAMPLE_ADDRESS} for you.",
            action={
                "type": "create_rule",
                "recipient": EXAMPLE_ADDRESS,
                "amount": 50,
                "token": "USDC",
                "interval": int(Interval.weekly),
                "description": "Weekly payment",
            },
        ),
        "check_balance": ActionExample(
            title="Check balance",
            message="Let me check your vault balance.",
            action={"type": "check_balance"},
        ),
        "list_rules": ActionExample(
            title="List rules",
            message="Here are your active payment rules.",
            action={"type": "list_rules"},
        ),
        "cross_chain_quote": ActionExample(
            title="Cross-chain quote",
            message="I'll get you a quote to bridge from Arbitrum.",
            action={"type": "cross_chain_quote", "fromChain": "arbitrum", "amount": 100},
        ),
        "conversation": ActionExample(
            title="Just conversation (no action needed)",
            message=(
                "PayPilot is your AI-powered payment assistant! I can help you set up automatic "
                "payments, check balances, and bridge funds from other chains."
            ),
            action=None,
        ),
        "help": ActionExample(
            title="Help",
            message=(
                "Here's what I can do for you:\n\n"
                f"• Create payments: 'Pay {EXAMPLE_ADDRESS} 100 USDC weekly'\n"
                "• Check balance: 'What's my balance?'\n"
                "• List rules: 'Show my payment rules'\n"
                "• Bridge funds: 'Bridge 50 USDC from Arbitrum'\n\n"
                "Just tell me what you need!"
            ),
            action={"type": "help"},
        ),
    },
}

_RECIPIENT_RULES: dict[RecipientCheck, str] = {
    RecipientCheck.strict: (
        "For payment rules the recipient must be a full Ethereum address (0x followed by 40 hex "
        "characters). If the user only gives a name, ask for the full address and set action to "
        "null."
    ),
    RecipientCheck.lenient: (
        "For payment rules the recipient may be an Ethereum address or an ENS name such as "
        "alice.eth."
    ),
}


def interval_table() -> str:
    """Render the canonical interval table (`- weekly = 604800`)."""

    return "\n".join(f"- {label} = {int(interval)}" for interval, label in INTERVAL_LABELS.items())


def render_action_examples(version: str) -> str:
    try:
        examples = AGENT_EXAMPLES[version]
    except KeyError as exc:
        raise PromptNotFoundError(f"no agent examples for version {version!r}") from exc

    return "\n\n".join(
        f"{i}. {example.title}:\n{example.to_json()}"
        for i, example in enumerate(examples.values(), start=1)
    )


def _load_template(name: str, version: str) -> Template:
    path = _PROMPT_DIR / f"prompt_{name}_{version}.md"
    try:
        return Template(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise PromptNotFoundError(f"no prompt {name!r} for version {version!r}") from exc


def _build(name: str, version: str, **values: str) -> PromptTemplate:
    temperature, max_tokens = _SAMPLING[name]
    system = _load_template(name, version).substitute(**values).strip()
    return PromptTemplate(
        name=name,
        version=version,
        system=system,
        temperature=temperature,
        max_tokens=max_tokens,
    )


def intent_prompt(version: str = "v1") -> PromptTemplate:
    """System prompt for the single-intent parser."""

    return _build("intent", version, interval_table=interval_table())


def agent_prompt(
        version: str = "v1",
        *,
        recipient_check: RecipientCheck = RecipientCheck.strict,
) -> PromptTemplate:
    """System prompt for the conversational agent.

    The recipient wording follows `recipient_check` so strict deployments do not teach the model
    to emit ENS names that would be rejected afterwards.
    """

    return _build(
        "agent",
        version,
        recipient_rule=_RECIPIENT_RULES[recipient_check],
        interval_table=interval_table(),
        chain_names=", ".join(SUPPORTED_CHAINS),
        action_examples=render_action_examples(version),
    )
