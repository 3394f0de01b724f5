"""Tests for the conversational agent contract.

The agent must never raise and must never surface an action when the completion could not be
decoded. In strict mode a `create_rule` action needs a full 0x address.
"""

from __future__ import annotations

import json

import pytest

from src.config.settings import RecipientCheck
from src.intent.agent import (
    ADDRESS_REQUIRED_MESSAGE,
    DEFAULT_MESSAGE,
    FALLBACK_MESSAGE,
    SERVICE_ERROR_MESSAGE,
    PaymentAgent,
)
from src.intent.llm_client import CompletionError
from src.intent.schema import CheckBalanceAction, CreateRuleAction, CrossChainQuoteAction, HelpAction

ADDRESS = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"

WEEKLY_RULE_COMPLETION = (
    'Sure! {"message":"I\'ll set up a weekly payment of 50 USDC to '
    f'{ADDRESS}","action":{{"type":"create_rule","recipient":"{ADDRESS}",'
    '"amount":50,"token":"USDC","interval":604800,"description":"Weekly payment"}}'
)


def _completion(message: str, action: dict[str, object] | None) -> str:
    return json.dumps({"message": message, "action": action})


def test_weekly_rule_end_to_end(fake_completions) -> None:
    agent = PaymentAgent(fake_completions(WEEKLY_RULE_COMPLETION))
    response = agent.converse("pay vitalik 50 USDC weekly")

    assert isinstance(response.action, CreateRuleAction)
    assert response.action.type == "create_rule"
    assert response.action.interval == 604800
    assert response.action.recipient == ADDRESS
    assert response.action.amount == 50
    assert response.message.startswith("I'll set up a weekly payment")


def test_strict_mode_rejects_name_recipient(fake_completions) -> None:
    completion = _completion(
        "ok",
        {
            "type": "create_rule",
            "recipient": "alice.eth",
            "amount": 50,
            "token": "USDC",
            "interval": 604800,
            "description": "Weekly payment to Alice",
        },
    )
    response = PaymentAgent(fake_completions(completion)).converse("pay alice 50 weekly")

    assert response.action is None
    assert response.message == ADDRESS_REQUIRED_MESSAGE


@pytest.mark.parametrize(
    "action",
    [
        {"type": "create_rule", "recipient": "alice.eth", "amount": 0},
        {"type": "create_rule", "recipient": "alice.eth"},
        {"type": "create_rule", "amount": 50},
    ],
)
def test_strict_address_check_wins_over_other_field_errors(fake_completions, action) -> None:
    response = PaymentAgent(fake_completions(_completion("ok", action))).converse("pay alice")

    assert response.action is None
    assert response.message == ADDRESS_REQUIRED_MESSAGE


def test_lenient_mode_drops_incomplete_rule_and_keeps_message(fake_completions) -> None:
    completion = _completion("ok", {"type": "create_rule", "recipient": "alice.eth", "amount": 0})
    agent = PaymentAgent(fake_completions(completion), recipient_check=RecipientCheck.lenient)
    response = agent.converse("pay alice")

    assert response.action is None
    assert response.message == "ok"


def test_lenient_mode_accepts_name_recipient(fake_completions) -> None:
    completion = _completion(
        "ok",
        {"type": "create_rule", "recipient": "alice.eth", "amount": 50},
    )
    agent = PaymentAgent(fake_completions(completion), recipient_check=RecipientCheck.lenient)
    response = agent.converse("pay alice 50")

    assert isinstance(response.action, CreateRuleAction)
    assert response.action.recipient == "alice.eth"
    assert response.action.token == "USDC"
    assert response.action.interval == 0
    assert response.message == "ok"


@pytest.mark.parametrize(
    ("action", "expected_type"),
    [
        ({"type": "check_balance"}, CheckBalanceAction),
        ({"type": "help"}, HelpAction),
        ({"type": "cross_chain_quote", "fromChain": "arbitrum", "amount": 100}, CrossChainQuoteAction),
    ],
)
def test_non_rule_actions_pass_through(fake_completions, action, expected_type) -> None:
    response = PaymentAgent(fake_completions(_completion("On it.", action))).converse("do it")
    assert isinstance(response.action, expected_type)
    assert response.message == "On it."


def test_plain_conversation_has_no_action(fake_completions) -> None:
    response = PaymentAgent(fake_completions(_completion("Hello!", None))).converse("hi")
    assert response.message == "Hello!"
    assert response.action is None


def test_unknown_action_type_is_dropped(fake_completions) -> None:
    completion = _completion("Let's chat.", {"type": "conversation", "message": "hi"})
    response = PaymentAgent(fake_completions(completion)).converse("hi")
    assert response.message == "Let's chat."
    assert response.action is None


def test_missing_message_gets_default(fake_completions) -> None:
    response = PaymentAgent(fake_completions('{"action": {"type": "list_rules"}}')).converse("rules")
    assert response.message == DEFAULT_MESSAGE
    assert response.action is not None
    assert response.action.type == "list_rules"


@pytest.mark.parametrize("completion", ["I am not sure what you mean.", '{"message": "ok", action}'])
def test_undecodable_completion_falls_back(fake_completions, completion: str) -> None:
    response = PaymentAgent(fake_completions(completion)).converse("???")
    assert response.message == FALLBACK_MESSAGE
    assert response.action is None


def test_transport_error_never_raises(fake_completions) -> None:
    agent = PaymentAgent(fake_completions(CompletionError("LLM HTTP error: 401")))
    response = agent.converse("pay bob")
    assert response.message == SERVICE_ERROR_MESSAGE
    assert response.action is None


def test_agent_uses_its_sampling_bounds(fake_completions) -> None:
    client = fake_completions(_completion("hi", None))
    PaymentAgent(client).converse("hello")

    (request,) = client.requests
    assert request.user == "hello"
    assert (request.temperature, request.max_tokens) == (0.3, 500)
    assert "full Ethereum address" in request.system


def test_same_completion_gives_same_response(fake_completions) -> None:
    agent = PaymentAgent(fake_completions(WEEKLY_RULE_COMPLETION))
    assert agent.converse("a") == agent.converse("a")
