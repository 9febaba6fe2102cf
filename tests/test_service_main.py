from __future__ import annotations

import json

from conftest import FEE_URL, SWAP_URL, FakeApi, FakeLedger, FakeResp, make_unsigned_tx
from solders.keypair import Keypair

from raydium_swap_engine.execution.codec import encode_leg


def _env(monkeypatch, key_path):
    monkeypatch.setenv("RSE_PRIORITY_FEE_URL", FEE_URL)
    monkeypatch.setenv("RSE_SWAP_BASE_URL", SWAP_URL)
    monkeypatch.setenv("RSE_AMOUNT", "1000")
    monkeypatch.setenv("RSE_KEY_SOURCE", str(key_path))
    monkeypatch.setenv("RSE_DRY_RUN", "false")


def test_main_success_exit_code(tmp_path, monkeypatch):
    from services.swap import main as svc

    kp = Keypair()
    key_path = tmp_path / "id.json"
    key_path.write_text(json.dumps(list(bytes(kp))))
    _env(monkeypatch, key_path)
    tx = make_unsigned_tx(kp.pubkey())
    FakeApi(build=FakeResp({"data": [{"transaction": encode_leg(tx)}]})).install(monkeypatch)
    ledger = FakeLedger(signatures=["sig123"])
    monkeypatch.setattr("raydium_swap_engine.execution.swap_executor.make_client", lambda s: ledger)

    assert svc.main() == 0
    assert len(ledger.sent) == 1


def test_main_missing_key_file_fails(tmp_path, monkeypatch, capsys):
    from services.swap import main as svc

    _env(monkeypatch, tmp_path / "missing.json")

    assert svc.main() == 1
    assert "keypair file not found" in capsys.readouterr().err


def test_main_fee_failure_fails(tmp_path, monkeypatch, capsys):
    from services.swap import main as svc

    kp = Keypair()
    key_path = tmp_path / "id.json"
    key_path.write_text(json.dumps(list(bytes(kp))))
    _env(monkeypatch, key_path)
    FakeApi(fee=FakeResp({}, status_code=500)).install(monkeypatch)
    monkeypatch.setattr("raydium_swap_engine.execution.swap_executor.make_client", lambda s: FakeLedger())

    assert svc.main() == 1
    assert "HTTP 500" in capsys.readouterr().err


def test_main_malformed_setting_fails_cleanly(tmp_path, monkeypatch, capsys):
    from services.swap import main as svc

    _env(monkeypatch, tmp_path / "id.json")
    monkeypatch.setenv("RSE_AMOUNT", "ten")

    assert svc.main() == 1
    err = capsys.readouterr().err
    assert "invalid settings" in err
    assert "amount" in err
