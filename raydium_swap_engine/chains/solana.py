from __future__ import annotations

import json
from pathlib import Path

import base58
from loguru import logger
from solana.rpc.api import Client
from solana.rpc.commitment import Commitment
from solders.keypair import Keypair

from raydium_swap_engine.config import AppSettings
from raydium_swap_engine.errors import ConfigurationError

KEYPAIR_LEN = 64


def make_client(settings: AppSettings) -> Client:
    return Client(settings.rpc_url, commitment=Commitment(settings.rpc_commitment))


def read_keypair_file(path: str | Path) -> Keypair:
    """
    Loads a Solana CLI keypair file: a JSON array of 64 byte values
    (32-byte secret followed by the 32-byte public key).
    """
    p = Path(path).expanduser()
    if not p.exists():
        raise ConfigurationError(f"keypair file not found: {p}", stage="wallet")
    try:
        raw = json.loads(p.read_text())
    except ValueError as e:
        raise ConfigurationError(f"keypair file is not valid JSON: {p}", stage="wallet") from e
    if not isinstance(raw, list) or not all(isinstance(b, int) and 0 <= b <= 255 for b in raw):
        raise ConfigurationError(f"keypair file must hold a JSON array of bytes: {p}", stage="wallet")
    if len(raw) != KEYPAIR_LEN:
        raise ConfigurationError(
            f"keypair must be {KEYPAIR_LEN} bytes, got {len(raw)}: {p}", stage="wallet"
        )
    return _keypair_from_bytes(bytes(raw))


def keypair_from_base58(secret: str) -> Keypair:
    try:
        raw = base58.b58decode(secret.strip())
    except ValueError as e:
        raise ConfigurationError("private key is not valid base58", stage="wallet") from e
    if len(raw) != KEYPAIR_LEN:
        raise ConfigurationError(
            f"private key must decode to {KEYPAIR_LEN} bytes, got {len(raw)}", stage="wallet"
        )
    return _keypair_from_bytes(raw)


def _keypair_from_bytes(raw: bytes) -> Keypair:
    try:
        return Keypair.from_bytes(raw)
    except Exception as e:
        raise ConfigurationError(f"invalid keypair bytes: {e}", stage="wallet") from e


def load_wallet(settings: AppSettings) -> Keypair:
    if settings.key_source:
        kp = read_keypair_file(settings.key_source)
    elif settings.private_key:
        kp = keypair_from_base58(settings.private_key)
    else:
        raise ConfigurationError(
            "no wallet configured: set RSE_KEY_SOURCE or RSE_PRIVATE_KEY", stage="wallet"
        )
    logger.info("Wallet loaded: {}", kp.pubkey())
    return kp
