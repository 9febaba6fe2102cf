from __future__ import annotations

from loguru import logger
from solana.rpc.api import Client
from solana.rpc.commitment import Commitment, Finalized
from solana.rpc.core import UnconfirmedTxError
from solana.rpc.types import TxOpts
from solders.signature import Signature

from raydium_swap_engine.errors import ConfirmationError, SubmissionError
from raydium_swap_engine.execution.legs import LegStatus, SignedLeg


def submit_leg(client: Client, signed: SignedLeg) -> Signature:
    # Preflight simulation is skipped; an invalid transaction only shows up at confirmation.
    try:
        resp = client.send_raw_transaction(
            signed.serialize(), opts=TxOpts(skip_preflight=True, skip_confirmation=True)
        )
    except Exception as e:
        raise SubmissionError(f"node rejected transaction: {e}", stage="submit", leg=signed.index) from e
    sig = getattr(resp, "value", None)
    if sig is None:
        raise SubmissionError(f"no signature in send response: {resp}", stage="submit", leg=signed.index)
    return sig


def await_confirmation(
    client: Client,
    signature: Signature,
    leg: int,
    commitment: Commitment = Finalized,
) -> LegStatus:
    """Blocks until `signature` reaches `commitment`. Raises ConfirmationError otherwise."""
    try:
        resp = client.confirm_transaction(signature, commitment=commitment)
    except UnconfirmedTxError as e:
        raise ConfirmationError(
            f"transaction {signature} not {commitment} in time: {e}",
            stage="confirm",
            leg=leg,
            status=LegStatus.TIMED_OUT.value,
            signature=str(signature),
        ) from e
    except Exception as e:
        raise ConfirmationError(
            f"failed to confirm transaction {signature}: {e}",
            stage="confirm",
            leg=leg,
            signature=str(signature),
        ) from e
    statuses = getattr(resp, "value", None) or []
    status = statuses[0] if statuses else None
    if status is None:
        raise ConfirmationError(
            f"no status reported for {signature}",
            stage="confirm",
            leg=leg,
            status=LegStatus.TIMED_OUT.value,
            signature=str(signature),
        )
    if status.err is not None:
        raise ConfirmationError(
            f"transaction {signature} failed on-chain: {status.err}",
            stage="confirm",
            leg=leg,
            signature=str(signature),
        )
    logger.debug("Leg {} reached {}", leg, commitment)
    return LegStatus.FINALIZED
