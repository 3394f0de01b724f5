"""aiogram message handlers.

Every text message is answered by the conversational agent; `/parse <text>` runs the single
intent parser instead and replies with the form fields it would pre-fill. Each incoming message
produces exactly one reply. On an internal error the reply is a generic apology and the details
are logged, never sent.
"""

from __future__ import annotations

import asyncio
import logging
from time import monotonic

from aiogram.types import Message
from pydantic import ValidationError

from src.app import App
from src.intent.agent import SERVICE_ERROR_MESSAGE
from src.intent.schema import (
    AgentResponse,
    CreateRuleAction,
    ParseError,
    PaymentIntent,
    describe_interval,
)

logger = logging.getLogger(__name__)

PARSE_COMMAND = "/parse"
UNPARSED_REPLY = "Could not understand. Please specify recipient and amount."
USAGE_REPLY = (
    "Hi, I'm PayPilot. Tell me what you need, for example:\n"
    "• Pay 0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045 50 USDC weekly\n"
    "• What's my balance?\n"
    "• Bridge 100 USDC from Arbitrum\n\n"
    "Use /parse <text> to preview a payment rule without the assistant."
)


def _split_command(text: str) -> tuple[str, str]:
    """Return `(command, rest)`; bot mentions like `/parse@paypilot_bot` are stripped."""

    head, _, rest = text.strip().partition(" ")
    return head.split("@", 1)[0].lower(), rest.strip()


def format_rule_summary(action: CreateRuleAction | PaymentIntent) -> str:
    """One-line rule summary, e.g. `50 USDC -> 0xabc... (weekly)`."""

    return (
        f"{action.amount:g} {action.token} -> {action.recipient} "
        f"({describe_interval(action.interval)})"
    )


def format_agent_reply(response: AgentResponse) -> str:
    if isinstance(response.action, CreateRuleAction):
        return f"{response.message}\n\nRule: {format_rule_summary(response.action)}"
    return response.message


def format_parse_reply(result: dict[str, object] | ParseError) -> str:
    if isinstance(result, ParseError):
        return result.message

    try:
        intent = PaymentIntent.model_validate(result)
    except ValidationError:
        # Covers the model's own `{"error": ...}` objects as well as incomplete ones.
        error = result.get("error")
        return error if isinstance(error, str) and error else UNPARSED_REPLY

    lines = [f"Rule: {format_rule_summary(intent)}"]
    if intent.description:
        lines.append(f"Description: {intent.description}")
    lines.append(f"Confidence: {intent.confidence:.0%}")
    return "\n".join(lines)


async def handle_message(message: Message, app: App) -> None:
    """Handle any incoming Telegram message with exactly one text reply."""

    started = monotonic()
    reply = SERVICE_ERROR_MESSAGE

    # noinspection PyBroadException
    try:
        raw_text = (message.text or message.caption or "").strip()
        command, rest = _split_command(raw_text) if raw_text.startswith("/") else ("", raw_text)

        if not raw_text or command in {"/start", "/help"}:
            reply = USAGE_REPLY
        elif command == PARSE_COMMAND:
            if not rest:
                reply = USAGE_REPLY
            else:
                result = await asyncio.to_thread(app.parser.parse, rest)
                reply = format_parse_reply(result)
        elif command:
            reply = USAGE_REPLY
        else:
            response = await asyncio.to_thread(app.agent.converse, rest)
            reply = format_agent_reply(response)
            logger.info(
                "handled action=%s latency_ms=%d",
                response.action.type if response.action is not None else None,
                int((monotonic() - started) * 1000),
            )
    except Exception:
        # Handler boundary: reply with the generic apology without leaking details.
        logger.exception("handler failed")

    await message.answer(reply)
