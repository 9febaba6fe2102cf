from __future__ import annotations

import base64
import binascii

from solders.transaction import VersionedTransaction

from raydium_swap_engine.errors import DecodeError
from raydium_swap_engine.execution.legs import UnsignedLeg


def decode_leg(encoded: str, index: int) -> UnsignedLeg:
    """base64 text -> bincode-serialized VersionedTransaction (legacy or v0 message)."""
    try:
        raw = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError, TypeError) as e:
        raise DecodeError(f"failed to base64-decode transaction: {e}", stage="decode", leg=index) from e
    try:
        tx = VersionedTransaction.from_bytes(raw)
    except Exception as e:
        raise DecodeError(
            f"failed to deserialize VersionedTransaction: {e}", stage="decode", leg=index
        ) from e
    return UnsignedLeg(index=index, encoded=encoded, transaction=tx)


def decode_legs(encoded: list[str]) -> list[UnsignedLeg]:
    return [decode_leg(tx, i) for i, tx in enumerate(encoded, start=1)]


def encode_leg(tx: VersionedTransaction) -> str:
    return base64.b64encode(bytes(tx)).decode()
