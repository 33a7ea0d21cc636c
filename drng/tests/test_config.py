from __future__ import annotations

import json

import pytest

from drng.config import DEFAULT, DrngConfig, VDFConfig
from drng.constants import MERSENNE_521, SECP256K1_ORDER
from drng.errors import InvalidParameterError


def test_defaults_validate():
    DEFAULT.validate()
    assert DEFAULT.field_prime == MERSENNE_521
    assert (DEFAULT.nodes, DEFAULT.threshold) == (5, 3)
    assert DEFAULT.vdf.profile == "demo"


def test_json_round_trip():
    cfg = DrngConfig(nodes=7, threshold=4, vdf=VDFConfig(iterations=16))
    again = DrngConfig.from_dict(json.loads(cfg.to_json()))
    assert again == cfg


def test_from_env(monkeypatch):
    monkeypatch.setenv("DRNG_NODES", "7")
    monkeypatch.setenv("DRNG_THRESHOLD", "4")
    monkeypatch.setenv("DRNG_HASH", "sha3_256")
    monkeypatch.setenv("DRNG_PHASE_TIMEOUT_S", "2.5")
    monkeypatch.setenv("DRNG_VDF_PROFILE", "rsa2048")
    monkeypatch.setenv("DRNG_VDF_ITERATIONS", "1024")
    monkeypatch.setenv("DRNG_REQUIRE_PRODUCTION_MODULUS", "yes")
    cfg = DrngConfig.from_env()
    assert (cfg.nodes, cfg.threshold, cfg.hash_fn) == (7, 4, "sha3_256")
    assert cfg.phase_timeout_s == 2.5
    assert cfg.require_production_modulus
    assert cfg.vdf.profile == "rsa2048" and cfg.vdf.iterations == 1024


def test_from_env_custom_prefix(monkeypatch):
    monkeypatch.setenv("X_NODES", "3")
    monkeypatch.setenv("X_THRESHOLD", "3")
    assert DrngConfig.from_env(prefix="X_").nodes == 3


def test_from_env_bad_value(monkeypatch):
    monkeypatch.setenv("DRNG_NODES", "five")
    with pytest.raises(InvalidParameterError):
        DrngConfig.from_env()


def test_from_yaml_file(tmp_path):
    path = tmp_path / "drng.yaml"
    path.write_text(
        "nodes: 7\n"
        "threshold: 4\n"
        "vdf:\n"
        "  profile: demo\n"
        "  iterations: 256\n",
        encoding="utf-8",
    )
    cfg = DrngConfig.from_file(str(path))
    assert (cfg.nodes, cfg.threshold, cfg.vdf.iterations) == (7, 4, 256)


def test_from_json_file(tmp_path):
    path = tmp_path / "drng.json"
    path.write_text(json.dumps({"threshold": 2, "vdf": {"challenge_bits": 64}}), encoding="utf-8")
    cfg = DrngConfig.from_file(str(path))
    assert cfg.threshold == 2 and cfg.vdf.challenge_bits == 64


def test_non_mapping_file_rejected(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(InvalidParameterError):
        DrngConfig.from_file(str(path))


def test_unknown_keys_rejected():
    with pytest.raises(InvalidParameterError) as ei:
        DrngConfig.from_dict({"nodez": 5, "vdf": {"profle": "demo"}})
    assert "nodez" in str(ei.value) and "vdf.profle" in str(ei.value)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"threshold": 6},
        {"threshold": 0},
        {"seed_bytes": 0},
        {"hash_fn": "md5"},
        {"field_prime_hex": "xyz"},
        {"field_prime_hex": hex(SECP256K1_ORDER)},
        {"phase_timeout_s": 0},
        {"require_production_modulus": True},
        {"vdf": VDFConfig(profile="rsa4096")},
        {"vdf": VDFConfig(iterations=1000)},
        {"vdf": VDFConfig(profile="custom")},
        {"vdf": VDFConfig(profile="custom", modulus_hex="10")},
        {"vdf": VDFConfig(challenge_bits=512)},
    ],
)
def test_invalid_values(kwargs):
    with pytest.raises(InvalidParameterError):
        DrngConfig(**kwargs).validate()


def test_production_with_rsa2048():
    DrngConfig(require_production_modulus=True, vdf=VDFConfig(profile="rsa2048")).validate()
