from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from loguru import logger
from solana.rpc.api import Client
from solders.keypair import Keypair

from raydium_swap_engine.aggregators import raydium
from raydium_swap_engine.chains.solana import load_wallet, make_client
from raydium_swap_engine.config import AppSettings, SwapConfig
from raydium_swap_engine.errors import ConfirmationError, SwapError
from raydium_swap_engine.execution.codec import decode_legs
from raydium_swap_engine.execution.ledger import await_confirmation, submit_leg
from raydium_swap_engine.execution.legs import LegResult, LegStatus, SwapReport
from raydium_swap_engine.execution.signer import sign_leg


class SwapState(str, Enum):
    INIT = "init"
    FEE_FETCHED = "fee_fetched"
    QUOTED = "quoted"
    BUILT = "built"
    DECODED = "decoded"
    SIGNING = "signing"
    BROADCASTING = "broadcasting"
    CONFIRMING = "confirming"
    DONE = "done"
    ABORTED = "aborted"


@dataclass
class SwapExecutor:
    """
    Runs one swap end to end: fee -> quote -> build -> decode, then
    sign/broadcast/confirm each leg in order. A leg is only signed once the
    previous one is finalized. Any failure aborts the run; nothing is retried.
    """

    settings: AppSettings
    swap: SwapConfig
    client: Client
    keypair: Keypair
    state: SwapState = SwapState.INIT
    report: SwapReport = field(default_factory=SwapReport)

    @classmethod
    def create(cls, settings: AppSettings) -> SwapExecutor:
        swap = settings.swap_config()
        keypair = load_wallet(settings)
        client = make_client(settings)
        return cls(settings=settings, swap=swap, client=client, keypair=keypair)

    def _enter(self, state: SwapState, leg: int | None = None) -> None:
        if leg is None:
            logger.debug("State {} -> {}", self.state.value, state.value)
        else:
            logger.debug("State {} -> {}({})", self.state.value, state.value, leg)
        self.state = state

    def run(self) -> SwapReport:
        try:
            self._run()
        except SwapError as e:
            self._enter(SwapState.ABORTED)
            logger.error("Swap aborted: {}", e)
            raise
        except Exception:
            self._enter(SwapState.ABORTED)
            logger.exception("Swap aborted on unexpected error in state {}", self.state.value)
            raise
        self._enter(SwapState.DONE)
        return self.report

    def _run(self) -> None:
        s = self.settings
        swap = self.swap
        wallet = str(self.keypair.pubkey())

        tiers = raydium.get_fee_tiers(s.priority_fee_url, timeout=s.http_timeout_sec)
        fee = tiers.select(swap.fee_tier_name)
        self.report.fee_micro_lamports = fee
        logger.info("Using '{}' fee tier = {} micro-lamports", swap.fee_tier_name, fee)
        self._enter(SwapState.FEE_FETCHED)

        quote = raydium.get_quote(s.swap_base_url, swap, timeout=s.http_timeout_sec)
        self.report.pool_ids = raydium.extract_pool_ids(quote)
        for i, pool in enumerate(self.report.pool_ids, start=1):
            logger.info("Route leg {} pool: {}", i, pool or "<unknown>")
        self._enter(SwapState.QUOTED)

        encoded = raydium.get_swap_transactions(
            s.swap_base_url,
            quote,
            fee=fee,
            wallet=wallet,
            tx_version=swap.tx_version,
            wrap_sol=swap.wrap,
            unwrap_sol=swap.unwrap,
            timeout=s.http_timeout_sec,
        )
        self._enter(SwapState.BUILT)

        legs = decode_legs(encoded)
        logger.info("total {} transactions", len(legs))
        self._enter(SwapState.DECODED)

        for leg in legs:
            self._enter(SwapState.SIGNING, leg.index)
            signed = sign_leg(leg, self.keypair)
            if s.dry_run:
                logger.info("Leg {} signed (dry run, not sent)", leg.index)
                self.report.legs.append(LegResult(leg.index, None, LegStatus.SKIPPED))
                continue

            self._enter(SwapState.BROADCASTING, leg.index)
            logger.info("{} transaction sending...", leg.index)
            sig = submit_leg(self.client, signed)

            self._enter(SwapState.CONFIRMING, leg.index)
            try:
                status = await_confirmation(self.client, sig, leg=leg.index)
            except ConfirmationError as e:
                self.report.legs.append(LegResult(leg.index, str(sig), LegStatus(e.status)))
                raise
            self.report.legs.append(LegResult(leg.index, str(sig), status))
            logger.info("{} transaction confirmed, txId: {}", leg.index, sig)
            logger.info("Explorer: {}{}", s.explorer_url, sig)
