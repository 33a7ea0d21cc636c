from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from drng.cli import EXIT_BAD_INPUT, EXIT_INVALID, EXIT_OK, app
from drng.utils.hash import keccak256

runner = CliRunner()

SEED = bytes(range(32))
COMMITMENT_HEX = "0x" + keccak256(SEED).hex()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in ("DRNG_NODES", "DRNG_THRESHOLD", "DRNG_VDF_PROFILE", "DRNG_VDF_ITERATIONS"):
        monkeypatch.delenv(key, raising=False)


def _prove(*extra: str) -> dict:
    result = runner.invoke(app, ["prove", "--commitment", COMMITMENT_HEX, "-T", "64", *extra])
    assert result.exit_code == EXIT_OK, result.output
    return json.loads(result.stdout)


def test_params():
    result = runner.invoke(app, ["params"])
    assert result.exit_code == 0
    out = json.loads(result.stdout)
    assert out["config"]["nodes"] == 5
    assert out["vdf"]["profile"] == "demo"
    assert out["vdf"]["productionSafe"] is False


def test_params_from_config_file(tmp_path):
    cfg = tmp_path / "c.yaml"
    cfg.write_text("nodes: 9\nthreshold: 5\nvdf:\n  iterations: 32\n", encoding="utf-8")
    result = runner.invoke(app, ["params", "--config", str(cfg)])
    assert result.exit_code == 0
    out = json.loads(result.stdout)
    assert out["config"]["threshold"] == 5
    assert out["vdf"]["proofLength"] == 5


def test_session():
    result = runner.invoke(app, ["session", "-s", "3", "-T", "64", "-r", "1,3,5"])
    assert result.exit_code == EXIT_OK, result.output
    rec = json.loads(result.stdout)
    assert rec["sessionId"] == 3
    assert rec["iterations"] == 64
    assert len(rec["vdfProof"]) == 6
    assert keccak256(bytes.fromhex(rec["seed"][2:])).hex() == rec["commitment"][2:]


def test_session_insufficient_reconstruction():
    result = runner.invoke(app, ["session", "-T", "64", "-r", "1,2"])
    assert result.exit_code == EXIT_INVALID


def test_session_bad_arguments():
    assert runner.invoke(app, ["session", "-t", "9"]).exit_code == EXIT_BAD_INPUT
    assert runner.invoke(app, ["session", "-r", "a,b"]).exit_code == EXIT_BAD_INPUT
    assert runner.invoke(app, ["session", "-T", "100"]).exit_code == EXIT_BAD_INPUT


def test_prove_then_verify(tmp_path):
    proof = _prove()
    assert proof["iterations"] == 64
    assert len(proof["proof"]) == 6
    path = tmp_path / "proof.json"
    path.write_text(json.dumps(proof), encoding="utf-8")

    result = runner.invoke(app, ["verify", str(path)])
    assert result.exit_code == EXIT_OK, result.output
    assert json.loads(result.stdout)["valid"] is True


def test_verify_from_stdin_with_input_only():
    proof = _prove()
    del proof["commitment"]
    result = runner.invoke(app, ["verify", "-"], input=json.dumps(proof))
    assert result.exit_code == EXIT_OK


def test_tampered_proof_fails(tmp_path):
    proof = _prove()
    proof["proof"][0] = hex(int(proof["proof"][0], 16) + 1)
    path = tmp_path / "bad.json"
    path.write_text(json.dumps(proof), encoding="utf-8")
    result = runner.invoke(app, ["verify", str(path)])
    assert result.exit_code == EXIT_INVALID
    assert json.loads(result.stdout)["valid"] is False


def test_input_commitment_disagreement_is_bad_input():
    proof = _prove()
    proof["input"] = "0x05"
    result = runner.invoke(app, ["verify", "-"], input=json.dumps(proof))
    assert result.exit_code == EXIT_BAD_INPUT


@pytest.mark.parametrize(
    "payload",
    [
        "not json",
        "[1, 2]",
        json.dumps({"modulus": "0x0f", "iterations": 64}),
        json.dumps({"modulus": "0x0f", "iterations": 48, "y": "0x1", "proof": [], "input": "0x2"}),
        json.dumps({"modulus": "0x0f", "iterations": 64, "y": "0x1", "proof": "x", "input": "0x2"}),
    ],
)
def test_verify_bad_input(payload):
    result = runner.invoke(app, ["verify", "-"], input=payload)
    assert result.exit_code == EXIT_BAD_INPUT


def test_verify_missing_file(tmp_path):
    result = runner.invoke(app, ["verify", str(tmp_path / "nope.json")])
    assert result.exit_code == EXIT_BAD_INPUT


def test_finalize():
    y_hex = "0x" + "ab" * 129
    result = runner.invoke(
        app, ["finalize", "-y", y_hex, "--seed", "0x" + SEED.hex(), "--commitment", COMMITMENT_HEX]
    )
    assert result.exit_code == EXIT_OK, result.output
    expected = keccak256(bytes.fromhex("ab" * 129) + SEED).hex()
    assert json.loads(result.stdout)["finalRandomness"] == "0x" + expected


def test_finalize_commitment_mismatch():
    result = runner.invoke(
        app, ["finalize", "-y", "0x01", "--seed", "0x" + "00" * 32, "--commitment", COMMITMENT_HEX]
    )
    assert result.exit_code == EXIT_INVALID


def test_finalize_bad_hex():
    result = runner.invoke(app, ["finalize", "-y", "0xzz", "--seed", "0x00"])
    assert result.exit_code == EXIT_BAD_INPUT
