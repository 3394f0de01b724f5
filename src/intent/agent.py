"""Conversational payment agent.

Each call turns one user message into an `AgentResponse`: a message to show plus at most one
action from the closed action set. Calls are independent; no conversation history is kept.

Hard contract: `converse` never raises for model or transport failures and never lets an action
through when the completion could not be decoded.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from src.config.settings import RecipientCheck
from src.intent.extract import ExtractionError, extract_json_object
from src.intent.llm_client import CompletionClient, CompletionError
from src.intent.prompts import PromptTemplate, agent_prompt
from src.intent.schema import (
    AgentAction,
    AgentResponse,
    ErrorKind,
    agent_action_from_obj,
    is_evm_address,
)

logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = "I didn't quite understand that. Could you rephrase?"
SERVICE_ERROR_MESSAGE = "Sorry, I encountered an error. Please try again."
DEFAULT_MESSAGE = "I'm here to help!"
ADDRESS_REQUIRED_MESSAGE = (
    "I need the recipient's full wallet address to set that up. "
    "Please send it as 0x followed by 40 hexadecimal characters."
)


class PaymentAgent:
    """Stateless message -> (message, action) translator."""

    def __init__(
            self,
            client: CompletionClient,
            *,
            recipient_check: RecipientCheck = RecipientCheck.strict,
            prompt: PromptTemplate | None = None,
    ) -> None:
        self._client = client
        self._recipient_check = recipient_check
        self._prompt = prompt or agent_prompt(recipient_check=recipient_check)

    def converse(self, message: str) -> AgentResponse:
        """Answer one user message."""

        try:
            content = self._client.complete(self._prompt.request(message))
        except CompletionError as exc:
            logger.warning("agent completion failed kind=%s reason=%s", ErrorKind.transport_error, exc)
            return AgentResponse(message=SERVICE_ERROR_MESSAGE, action=None)

        logger.info("agent completion raw=%r", content)

        extracted = extract_json_object(content)
        if isinstance(extracted, ExtractionError):
            logger.info("agent unparsed kind=%s detail=%s", extracted.kind, extracted.detail)
            return AgentResponse(message=FALLBACK_MESSAGE, action=None)

        return self._to_response(extracted)

    def _to_response(self, obj: dict[str, Any]) -> AgentResponse:
        text = obj.get("message")
        if not isinstance(text, str) or not text.strip():
            text = DEFAULT_MESSAGE

        raw_action = obj.get("action")
        if not raw_action:
            return AgentResponse(message=text, action=None)

        # The address check runs on the raw object so it wins over any other field error.
        if (
                self._recipient_check == RecipientCheck.strict
                and isinstance(raw_action, dict)
                and raw_action.get("type") == "create_rule"
                and not is_evm_address(raw_action.get("recipient"))
        ):
            logger.info(
                "agent action dropped kind=%s recipient=%r",
                ErrorKind.validation_failed,
                raw_action.get("recipient"),
            )
            return AgentResponse(message=ADDRESS_REQUIRED_MESSAGE, action=None)

        try:
            action: AgentAction = agent_action_from_obj(raw_action)
        except ValidationError as exc:
            logger.info(
                "agent action dropped kind=%s errors=%d",
                ErrorKind.validation_failed,
                exc.error_count(),
            )
            return AgentResponse(message=text, action=None)

        return AgentResponse(message=text, action=action)
