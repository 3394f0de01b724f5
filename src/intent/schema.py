"""Payment intent and agent action schema (Pydantic models).

This schema is the contract between the model-backed translators (intent parser and agent) and
the callers that pre-fill rule forms or execute vault operations. The translators never persist
these objects; each one is created per call.
"""

from __future__ import annotations

import re
from enum import IntEnum, StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

_EVM_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")

DEFAULT_TOKEN = "USDC"

# Source chains the agent may name in `cross_chain_quote` actions.
SUPPORTED_CHAINS: tuple[str, ...] = ("arbitrum", "base", "optimism", "polygon", "bsc", "avalanche")


class ErrorKind(StrEnum):
    """Why a translation produced a fallback instead of a result."""

    transport_error = "transport_error"
    no_json_found = "no_json_found"
    malformed_json = "malformed_json"
    validation_failed = "validation_failed"


class Interval(IntEnum):
    """Canonical payment intervals in seconds (0 means one-time)."""

    one_time = 0
    every_minute = 60
    hourly = 3600
    daily = 86400
    weekly = 604800
    monthly = 2592000


INTERVAL_LABELS: dict[Interval, str] = {
    Interval.one_time: "one-time",
    Interval.every_minute: "every minute",
    Interval.hourly: "hourly",
    Interval.daily: "daily",
    Interval.weekly: "weekly",
    Interval.monthly: "monthly",
}


def describe_interval(seconds: int) -> str:
    """Human label for an interval; non-canonical values are described in seconds."""

    try:
        return INTERVAL_LABELS[Interval(seconds)]
    except ValueError:
        return f"every {seconds} seconds"


def is_evm_address(value: Any) -> bool:
    """Whether `value` is a full `0x`-prefixed 40-hex-digit address (checksum not verified)."""

    return isinstance(value, str) and _EVM_ADDRESS_RE.fullmatch(value) is not None


class PaymentIntent(BaseModel):
    """One parsed payment instruction.

    The intent parser hands back the decoded JSON object untouched. This model is the typed view
    callers use when they need guaranteed field types (e.g. to pre-fill a rule form).
    """

    model_config = ConfigDict(frozen=True, extra="ignore", str_strip_whitespace=True)

    recipient: str = Field(min_length=1)
    amount: float = Field(gt=0, allow_inf_nan=False)
    token: str = DEFAULT_TOKEN
    # Non-canonical intervals are tolerated; only non-negativity is enforced.
    interval: int = Field(default=0, ge=0)
    description: str = ""
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)


class ParseError(BaseModel):
    """Failure to extract a usable payment intent."""

    model_config = ConfigDict(frozen=True)

    kind: ErrorKind
    message: str

    def as_payload(self) -> dict[str, str]:
        """Wire shape returned by the HTTP boundary (`error` is what front ends read)."""

        return {"error": self.message, "reason": self.kind.value}


class _Action(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


class CreateRuleAction(_Action):
    """Create a one-time or recurring payment rule in the vault."""

    type: Literal["create_rule"] = "create_rule"
    recipient: str = Field(min_length=1)
    amount: float = Field(gt=0, allow_inf_nan=False)
    token: str = DEFAULT_TOKEN
    interval: int = Field(default=0, ge=0)
    description: str = ""


class CheckBalanceAction(_Action):
    type: Literal["check_balance"] = "check_balance"


class ListRulesAction(_Action):
    type: Literal["list_rules"] = "list_rules"


class CrossChainQuoteAction(_Action):
    """Quote a bridge deposit from another chain into the vault."""

    type: Literal["cross_chain_quote"] = "cross_chain_quote"
    from_chain: str = Field(alias="fromChain", min_length=1)
    amount: float = Field(gt=0, allow_inf_nan=False)


class HelpAction(_Action):
    type: Literal["help"] = "help"


AgentAction = Annotated[
    CreateRuleAction | CheckBalanceAction | ListRulesAction | CrossChainQuoteAction | HelpAction,
    Field(discriminator="type"),
]

ACTION_TYPES: tuple[str, ...] = (
    "create_rule",
    "check_balance",
    "list_rules",
    "cross_chain_quote",
    "help",
)

_AGENT_ACTION_ADAPTER: TypeAdapter[AgentAction] = TypeAdapter(AgentAction)


def agent_action_from_obj(obj: Any) -> AgentAction:
    """Validate an arbitrary decoded JSON object as one of the closed action types.

    Raises:
        pydantic.ValidationError: unknown `type` tag or missing/invalid fields.
    """

    return _AGENT_ACTION_ADAPTER.validate_python(obj)


class AgentResponse(BaseModel):
    """One agent turn: the text shown to the user plus an optional action to execute."""

    model_config = ConfigDict(frozen=True)

    message: str
    action: AgentAction | None = None

    def as_payload(self) -> dict[str, Any]:
        """Wire shape (`fromChain` stays camelCase for front ends)."""

        return self.model_dump(mode="json", by_alias=True)
