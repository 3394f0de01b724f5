"""Single payment intent parser.

Turns one user message into the JSON object the model produced, used to pre-fill a manual
rule-creation form. The object is returned as decoded: there is no field normalization, and an
object carrying only an `error` key is passed through like any other.
"""

from __future__ import annotations

import logging
from typing import Any

from src.intent.extract import ExtractionError, extract_json_object
from src.intent.llm_client import CompletionClient, CompletionError
from src.intent.prompts import PromptTemplate, intent_prompt
from src.intent.schema import ErrorKind, ParseError

logger = logging.getLogger(__name__)

PARSE_ERROR_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.transport_error: "AI service error. Please try again in a moment.",
    ErrorKind.no_json_found: "Failed to parse the AI response",
    ErrorKind.malformed_json: "The AI response was not valid JSON",
}


def _parse_error(kind: ErrorKind) -> ParseError:
    return ParseError(kind=kind, message=PARSE_ERROR_MESSAGES[kind])


class PaymentIntentParser:
    """Parse a message into a payment-intent-shaped object or a `ParseError`."""

    def __init__(self, client: CompletionClient, *, prompt: PromptTemplate | None = None) -> None:
        self._client = client
        self._prompt = prompt or intent_prompt()

    @property
    def prompt(self) -> PromptTemplate:
        return self._prompt

    def parse(self, message: str) -> dict[str, Any] | ParseError:
        """Run one completion and decode it.

        Never raises for model or transport failures; each maps to a `ParseError` kind.
        """

        try:
            content = self._client.complete(self._prompt.request(message))
        except CompletionError as exc:
            logger.warning("intent completion failed reason=%s", exc)
            return _parse_error(ErrorKind.transport_error)

        logger.info("intent completion raw=%r", content)

        extracted = extract_json_object(content)
        if isinstance(extracted, ExtractionError):
            logger.info("intent unparsed kind=%s detail=%s", extracted.kind, extracted.detail)
            return _parse_error(extracted.kind)

        logger.info("intent parsed result=%r", extracted)
        return extracted
