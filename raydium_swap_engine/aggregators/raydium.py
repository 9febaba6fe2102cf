from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

import requests
from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from raydium_swap_engine.config import SwapConfig
from raydium_swap_engine.errors import DecodeError, ProtocolError, TransportError


class FeeTiers(BaseModel):
    # micro-lamports per compute unit
    vh: int = Field(ge=0)
    h: int = Field(ge=0)
    m: int = Field(ge=0)

    def select(self, name: str) -> int:
        return int(getattr(self, name))


class _FeeDefaults(BaseModel):
    default: FeeTiers


class _FeeResponse(BaseModel):
    data: _FeeDefaults


class _SwapTx(BaseModel):
    transaction: str


class _SwapTxResponse(BaseModel):
    success: bool = True
    msg: str | None = None
    data: list[_SwapTx] = []


@dataclass(frozen=True)
class SwapQuote:
    raw: str  # response body, forwarded verbatim to the build call
    document: dict[str, Any]


def _send(method: str, url: str, stage: str, **kwargs) -> requests.Response:
    try:
        if method == "GET":
            r = requests.get(url, **kwargs)
        else:
            r = requests.post(url, **kwargs)
    except requests.RequestException as e:
        raise TransportError(f"{method} {url} failed: {e}", stage=stage) from e
    if not r.ok:
        raise ProtocolError(
            f"{url} returned HTTP {r.status_code}: {(r.text or '')[:200]}",
            stage=stage,
            status_code=r.status_code,
        )
    return r


def get_fee_tiers(fee_url: str, timeout: float = 15) -> FeeTiers:
    logger.info("Calling priority-fee at: {}", fee_url)
    r = _send("GET", fee_url, "fee", timeout=timeout)
    try:
        return _FeeResponse.model_validate_json(r.text).data.default
    except ValidationError as e:
        raise DecodeError(f"unexpected priority-fee payload: {e}", stage="fee") from e


def get_quote(base_url: str, swap: SwapConfig, timeout: float = 15) -> SwapQuote:
    url = f"{base_url}/compute/swap-base-in"
    params = {
        "inputMint": swap.input_asset,
        "outputMint": swap.output_asset,
        "amount": str(swap.amount),
        "slippageBps": str(swap.slippage_bps),
        "txVersion": swap.tx_version,
    }
    logger.info("Fetching swap quote from: {} {}", url, params)
    r = _send("GET", url, "quote", params=params, timeout=timeout)
    raw = r.text
    try:
        doc = json.loads(raw)
    except ValueError as e:
        raise DecodeError(f"swap quote is not JSON: {e}", stage="quote") from e
    if not isinstance(doc, dict):
        raise DecodeError("swap quote must be a JSON object", stage="quote")
    return SwapQuote(raw=raw, document=doc)


def extract_pool_ids(quote: SwapQuote) -> list[str | None]:
    """Pool address chosen for each routing leg, for logging only."""
    route = quote.document.get("route")
    if not isinstance(route, list):
        return []
    pools: list[str | None] = []
    for i, step in enumerate(route, start=1):
        market_keys = step.get("marketKeys") if isinstance(step, dict) else None
        if isinstance(market_keys, dict):
            logger.debug("Leg {} marketKeys:\n{}", i, json.dumps(market_keys, indent=2))
            pool = market_keys.get("swapPool")
            pools.append(str(pool) if pool is not None else None)
        else:
            pools.append(None)
    return pools


def build_swap_body(
    quote: SwapQuote,
    fee: int,
    wallet: str,
    tx_version: str,
    wrap_sol: bool,
    unwrap_sol: bool,
) -> str:
    # swapResponse is spliced in as the exact bytes the quote service returned
    head = json.dumps({"computeUnitPriceMicroLamports": str(fee)})[:-1]
    tail = json.dumps(
        {"txVersion": tx_version, "wallet": wallet, "wrapSol": wrap_sol, "unwrapSol": unwrap_sol}
    )[1:]
    return f'{head}, "swapResponse": {quote.raw.strip()}, {tail}'


def get_swap_transactions(
    base_url: str,
    quote: SwapQuote,
    fee: int,
    wallet: str,
    tx_version: str,
    wrap_sol: bool = True,
    unwrap_sol: bool = False,
    timeout: float = 20,
) -> list[str]:
    url = f"{base_url}/transaction/swap-base-in"
    body = build_swap_body(quote, fee, wallet, tx_version, wrap_sol, unwrap_sol)
    logger.info("Building swap transaction via: {}", url)
    r = _send(
        "POST",
        url,
        "build",
        data=body.encode(),
        headers={"Content-Type": "application/json"},
        timeout=timeout,
    )
    logger.debug("Raw /transaction/swap-base-in response:\n{}", r.text)
    try:
        resp = _SwapTxResponse.model_validate_json(r.text)
    except ValidationError as e:
        raise DecodeError(f"unexpected swap transaction payload: {e}", stage="build") from e
    if not resp.success or not resp.data:
        reason = resp.msg or "no transactions returned"
        raise DecodeError(f"swap transaction response has no legs: {reason}", stage="build")
    return [item.transaction for item in resp.data]
