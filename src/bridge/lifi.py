"""LI.FI cross-chain quote relay.

Quotes always target the vault's home chain (Sepolia) and token (Sepolia USDC). The relay is used
by the HTTP layer only; the intent parser and the agent merely describe a desired quote.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.config.settings import Settings
from src.intent.schema import is_evm_address

logger = logging.getLogger(__name__)

SEPOLIA_CHAIN_ID = 11155111
SEPOLIA_USDC = "0x1c7D4B196Cb0C7B01d743Fbc6116a902379C7238"

CHAIN_IDS: dict[str, int] = {
    "arbitrum": 42161,
    "base": 8453,
    "optimism": 10,
    "polygon": 137,
    "bsc": 56,
    "avalanche": 43114,
}


class BridgeError(RuntimeError):
    """Raised when the routing service cannot be reached or returns an unusable body."""


def resolve_chain_id(chain: int | str) -> int:
    """Map a chain name from the agent vocabulary (or a numeric id) to a chain id."""

    if isinstance(chain, int):
        return chain
    value = chain.strip().lower()
    if value.isdigit():
        return int(value)
    try:
        return CHAIN_IDS[value]
    except KeyError as exc:
        raise ValueError(f"unsupported chain: {chain!r}") from exc


class QuoteRequest(BaseModel):
    """A deposit quote request as sent by the front end."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, str_strip_whitespace=True)

    from_chain: int = Field(alias="fromChain")
    from_token_address: str = Field(alias="fromTokenAddress")
    from_amount: str = Field(alias="fromAmount", pattern=r"^\d+$")
    from_address: str = Field(alias="fromAddress")

    @field_validator("from_chain", mode="before")
    @classmethod
    def validate_from_chain(cls, value: Any) -> int:
        """Accept chain names (`arbitrum`) as well as numeric ids."""

        if isinstance(value, bool) or not isinstance(value, int | str):
            raise ValueError("fromChain must be a chain name or id")
        return resolve_chain_id(value)

    @field_validator("from_token_address", "from_address")
    @classmethod
    def validate_address(cls, value: str) -> str:
        if not is_evm_address(value):
            raise ValueError("must be a 0x-prefixed 40-hex-digit address")
        return value


@dataclass(frozen=True)
class LiFiConfig:
    api_base: str = "https://li.quest/v1"
    integrator: str = "paypilot"
    api_key: str | None = None
    timeout_s: float = 30.0


class LiFiClient:
    """Minimal read-only LI.FI REST client (`/quote` and `/chains`)."""

    def __init__(self, config: LiFiConfig) -> None:
        self._config = config

    def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        config = self._config
        url = config.api_base.rstrip("/") + path
        if params:
            url += "?" + urlencode(params)

        headers = {"Accept": "application/json"}
        if config.api_key:
            headers["x-lifi-api-key"] = config.api_key

        req = Request(url, method="GET", headers=headers)
        try:
            with urlopen(req, timeout=config.timeout_s) as resp:  # noqa: S310 (fixed, configured API base)
                body = resp.read()
        except HTTPError as exc:
            raise BridgeError(f"LI.FI HTTP error: {exc.code}") from exc
        except URLError as exc:
            raise BridgeError("LI.FI connection error") from exc
        except OSError as exc:
            raise BridgeError("LI.FI request timed out or failed") from exc

        try:
            return json.loads(body)
        except ValueError as exc:
            raise BridgeError("LI.FI returned invalid JSON") from exc

    def get_quote(self, request: QuoteRequest) -> dict[str, Any]:
        """Quote a bridge from `request.from_chain` into Sepolia USDC.

        Returns the subset of the quote the front end renders: the estimate, the bridge tool and
        the step type.
        """

        logger.info(
            "lifi quote from_chain=%s from_amount=%s", request.from_chain, request.from_amount
        )
        quote = self._get_json(
            "/quote",
            {
                "fromChain": request.from_chain,
                "toChain": SEPOLIA_CHAIN_ID,
                "fromToken": request.from_token_address,
                "toToken": SEPOLIA_USDC,
                "fromAmount": request.from_amount,
                "fromAddress": request.from_address,
                "integrator": self._config.integrator,
            },
        )

        try:
            estimate = quote["estimate"]
            return {
                "estimate": {
                    "fromAmount": estimate["fromAmount"],
                    "toAmount": estimate["toAmount"],
                    "gasCosts": estimate.get("gasCosts", []),
                    "executionDuration": estimate.get("executionDuration"),
                },
                "tool": quote.get("tool"),
                "type": quote.get("type"),
            }
        except (KeyError, TypeError, AttributeError) as exc:
            raise BridgeError("Unexpected LI.FI quote format") from exc

    def list_chains(self) -> list[dict[str, Any]]:
        """Return `[{id, name, nativeToken}]` for every chain LI.FI supports."""

        body = self._get_json("/chains")
        try:
            chains = body["chains"]
            return [
                {
                    "id": chain["id"],
                    "name": chain["name"],
                    "nativeToken": (chain.get("nativeToken") or {}).get("symbol"),
                }
                for chain in chains
            ]
        except (KeyError, TypeError, AttributeError) as exc:
            raise BridgeError("Unexpected LI.FI chains format") from exc


def lifi_config_from_settings(settings: Settings) -> LiFiConfig:
    return LiFiConfig(
        api_base=settings.lifi_api_base,
        integrator=settings.lifi_integrator,
        api_key=settings.lifi_api_key,
        timeout_s=settings.lifi_timeout_s,
    )
