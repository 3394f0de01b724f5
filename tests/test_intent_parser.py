"""Tests for the single payment intent parser (scripted completions, no network)."""

from __future__ import annotations

from src.intent.llm_client import CompletionError
from src.intent.parser import PARSE_ERROR_MESSAGES, PaymentIntentParser
from src.intent.schema import ErrorKind, ParseError


def test_parse_returns_decoded_object(fake_completions) -> None:
    client = fake_completions(
        '{"recipient": "alice.eth", "amount": 100, "token": "USDC", "interval": 604800, '
        '"description": "Weekly payment to Alice", "confidence": 0.95}'
    )
    result = PaymentIntentParser(client).parse("pay alice.eth 100 USDC every week")

    assert result == {
        "recipient": "alice.eth",
        "amount": 100,
        "token": "USDC",
        "interval": 604800,
        "description": "Weekly payment to Alice",
        "confidence": 0.95,
    }


def test_parse_sends_system_prompt_and_sampling(fake_completions) -> None:
    client = fake_completions('{"amount": 1}')
    parser = PaymentIntentParser(client)
    parser.parse("send 1 USDC to bob")

    (request,) = client.requests
    assert request.user == "send 1 USDC to bob"
    assert request.system == parser.prompt.system
    assert request.temperature == 0.1
    assert request.max_tokens == 200


def test_model_error_object_is_passed_through(fake_completions) -> None:
    client = fake_completions(
        '{"error": "Could not understand. Please specify recipient and amount.", "confidence": 0}'
    )
    result = PaymentIntentParser(client).parse("hello")

    assert result == {
        "error": "Could not understand. Please specify recipient and amount.",
        "confidence": 0,
    }


def test_incomplete_object_is_not_normalized(fake_completions) -> None:
    client = fake_completions('Here you go: {"recipient": "bob.eth"}')
    assert PaymentIntentParser(client).parse("pay bob") == {"recipient": "bob.eth"}


def test_no_json_maps_to_parse_error(fake_completions) -> None:
    result = PaymentIntentParser(fake_completions("I cannot help with that.")).parse("hi")
    assert isinstance(result, ParseError)
    assert result.kind == ErrorKind.no_json_found
    assert result.message == PARSE_ERROR_MESSAGES[ErrorKind.no_json_found]


def test_malformed_json_maps_to_parse_error(fake_completions) -> None:
    result = PaymentIntentParser(fake_completions('{"recipient": alice}')).parse("hi")
    assert isinstance(result, ParseError)
    assert result.kind == ErrorKind.malformed_json


def test_transport_failure_maps_to_parse_error(fake_completions) -> None:
    result = PaymentIntentParser(fake_completions(CompletionError("LLM HTTP error: 429"))).parse("hi")
    assert isinstance(result, ParseError)
    assert result.kind == ErrorKind.transport_error
    assert result.message == "AI service error. Please try again in a moment."


def test_error_messages_are_distinct() -> None:
    assert len(set(PARSE_ERROR_MESSAGES.values())) == len(PARSE_ERROR_MESSAGES)


def test_failure_does_not_poison_later_calls(fake_completions) -> None:
    client = fake_completions(CompletionError("LLM connection error"), '{"amount": 3}')
    parser = PaymentIntentParser(client)

    assert isinstance(parser.parse("first"), ParseError)
    assert parser.parse("second") == {"amount": 3}
