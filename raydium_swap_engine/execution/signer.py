from __future__ import annotations

from solders.keypair import Keypair
from solders.message import to_bytes_versioned
from solders.signature import Signature
from solders.transaction import VersionedTransaction

from raydium_swap_engine.errors import SigningError
from raydium_swap_engine.execution.legs import SignedLeg, UnsignedLeg


def sign_leg(leg: UnsignedLeg, keypair: Keypair) -> SignedLeg:
    """
    Signs one leg with the wallet.

    Single-signer legs are rebuilt from the message with the wallet as the
    only signer; whatever signatures the builder attached are dropped.
    Legs that need more than one signer keep the co-signatures already on
    the transaction and only fill in the wallet's slot.
    """
    message = leg.message
    try:
        required = message.header.num_required_signatures
        if required <= 1:
            signed = VersionedTransaction(message, [keypair])
        else:
            signed = _merge_signature(leg, keypair, required)
    except SigningError:
        raise
    except Exception as e:
        raise SigningError(f"failed to sign transaction: {e}", stage="sign", leg=leg.index) from e
    return SignedLeg(leg=leg, transaction=signed)


def _merge_signature(leg: UnsignedLeg, keypair: Keypair, required: int) -> VersionedTransaction:
    message = leg.message
    signers = list(message.account_keys[:required])
    wallet = keypair.pubkey()
    if wallet not in signers:
        raise SigningError(
            f"wallet {wallet} is not a required signer of this transaction",
            stage="sign",
            leg=leg.index,
        )
    signatures = list(leg.transaction.signatures)
    if len(signatures) != required:
        signatures = (signatures + [Signature.default()] * required)[:required]
    slot = signers.index(wallet)
    signatures[slot] = keypair.sign_message(to_bytes_versioned(message))
    missing = [str(signers[i]) for i, s in enumerate(signatures) if s == Signature.default()]
    if missing:
        raise SigningError(
            f"transaction needs co-signatures that were not provided: {', '.join(missing)}",
            stage="sign",
            leg=leg.index,
        )
    return VersionedTransaction.populate(message, signatures)
