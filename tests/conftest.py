from __future__ import annotations

import json
from types import SimpleNamespace
from typing import Any

import pytest
from solders.hash import Hash
from solders.keypair import Keypair
from solders.message import MessageV0
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.system_program import TransferParams, transfer
from solders.transaction import VersionedTransaction

FEE_URL = "https://fees.test/auto-fee"
SWAP_URL = "https://swap.test"


class FakeResp:
    def __init__(self, payload: Any = None, status_code: int = 200, text: str | None = None):
        self.status_code = status_code
        self.ok = 200 <= status_code < 300
        self.text = text if text is not None else json.dumps(payload)

    def json(self):
        return json.loads(self.text)


def make_unsigned_tx(payer: Pubkey, lamports: int = 1000, cosigner: Pubkey | None = None):
    ixs = [transfer(TransferParams(from_pubkey=payer, to_pubkey=Pubkey.new_unique(), lamports=lamports))]
    if cosigner is not None:
        ixs.append(transfer(TransferParams(from_pubkey=cosigner, to_pubkey=payer, lamports=1)))
    msg = MessageV0.try_compile(payer, ixs, [], Hash.default())
    n = msg.header.num_required_signatures
    return VersionedTransaction.populate(msg, [Signature.default()] * n)


class FakeLedger:
    """Stands in for solana.rpc.api.Client; records every call in order."""

    def __init__(self, signatures=None, events=None, fail_confirm_at=None, timeout_at=None):
        self.signatures = list(signatures or [])
        self.events = events if events is not None else []
        self.sent: list[bytes] = []
        self.opts = []
        self.fail_confirm_at = fail_confirm_at
        self.timeout_at = timeout_at

    def send_raw_transaction(self, txn, opts=None):
        self.sent.append(txn)
        self.opts.append(opts)
        n = len(self.sent)
        sig = self.signatures[n - 1] if n <= len(self.signatures) else f"sig{n}"
        self.events.append(("send", n))
        return SimpleNamespace(value=sig)

    def confirm_transaction(self, tx_sig, commitment=None, **kwargs):
        n = len(self.sent)
        self.events.append(("confirm", n, commitment))
        if self.timeout_at == n:
            from solana.rpc.core import UnconfirmedTxError

            raise UnconfirmedTxError(f"Unable to confirm transaction {tx_sig}")
        err = {"InstructionError": [0, "Custom"]} if self.fail_confirm_at == n else None
        return SimpleNamespace(value=[SimpleNamespace(err=err)])


class FakeApi:
    """Routes requests.get / requests.post to canned fee, quote and build responses."""

    def __init__(self, fee=None, quote=None, build=None, quote_text=None):
        self.calls: list[tuple[str, str, dict]] = []
        self.fee = fee if fee is not None else FakeResp({"data": {"default": {"vh": 900, "h": 500, "m": 100}}})
        self.quote = quote if quote is not None else FakeResp({"id": "q1", "success": True}, text=quote_text)
        self.build = build

    def get(self, url, params=None, timeout=None, **kwargs):
        self.calls.append(("GET", url, {"params": params}))
        if url == FEE_URL:
            return self.fee
        return self.quote

    def post(self, url, data=None, json=None, headers=None, timeout=None, **kwargs):
        self.calls.append(("POST", url, {"data": data, "headers": headers}))
        return self.build

    def install(self, monkeypatch):
        monkeypatch.setattr("requests.get", self.get)
        monkeypatch.setattr("requests.post", self.post)
        return self


@pytest.fixture
def wallet() -> Keypair:
    return Keypair()


@pytest.fixture
def settings(monkeypatch):
    from raydium_swap_engine.config import AppSettings

    return AppSettings(
        priority_fee_url=FEE_URL,
        swap_base_url=SWAP_URL,
        amount=1_000_000,
        slippage_bps=50,
        key_source=None,
        private_key=None,
    )
