"""
drng.cli
--------

Offline command line for the randomness core. Nothing here talks to a network;
every command is a pure local computation.

Commands:
  - params    : Show the resolved configuration and VDF parameters.
  - session   : Run a complete local session and print the ledger record.
  - prove     : Evaluate the VDF for a commitment and print output + proof.
  - verify    : Verify a proof JSON (file or '-' for stdin).
  - finalize  : Recompute final randomness from hex inputs.

Exit codes: 0 success, 1 verification failure, 2 bad input.

Configuration is read from ``--config`` (JSON/YAML) when given, otherwise from
``DRNG_*`` environment variables (see :meth:`drng.config.DrngConfig.from_env`).

Example:
  python -m drng.cli session --nodes 5 --threshold 3 --iterations 1024
  python -m drng.cli prove --commitment 0x5f... > proof.json
  python -m drng.cli verify proof.json
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import replace
from typing import Any, Dict, List, Optional

import typer

from ..beacon.finalize import final_randomness
from ..beacon.pipeline import DrngSession
from ..config import DrngConfig
from ..constants import DEFAULT_HASH
from ..errors import DrngError, InvalidParameterError
from ..types.core import SessionId, VDFProof
from ..utils.bytes import consteq, from_hex, int_to_fixed, to_hex
from ..utils.hash import get_hasher
from ..vdf.input_builder import proof_digest, vdf_input_from_commitment
from ..vdf.params import VDFParams, get_params, params_from_config
from ..vdf.pietrzak import PietrzakVDF

__all__ = ["app", "main"]

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_BAD_INPUT = 2

app = typer.Typer(
    name="drng",
    help="Threshold MPC seed + Pietrzak VDF randomness (offline tools).",
    no_args_is_help=True,
    add_completion=False,
)


# -----------------------
# Helpers
# -----------------------

def _fail_input(msg: str) -> typer.Exit:
    typer.echo(f"error: {msg}", err=True)
    return typer.Exit(code=EXIT_BAD_INPUT)


def _load_config(path: Optional[str]) -> DrngConfig:
    try:
        return DrngConfig.from_file(path) if path else DrngConfig.from_env()
    except OSError as e:
        raise _fail_input(f"cannot read config: {e}")
    except InvalidParameterError as e:
        raise _fail_input(str(e))


def _int_of(h: Any) -> int:
    """Accept an int, a 0x-hex string or a decimal string."""
    if isinstance(h, bool):
        raise ValueError("expected int or 0x-hex string")
    if isinstance(h, int):
        return h
    if not isinstance(h, str):
        raise ValueError("expected int or 0x-hex string")
    s = h.strip().lower()
    if s.startswith("0x"):
        return int(s, 16)
    return int(s, 10)


def _bytes_of(h: str, name: str) -> bytes:
    try:
        return from_hex(h)
    except (TypeError, ValueError) as e:
        raise _fail_input(f"{name}: {e}")


def _read_json(path: str) -> Dict[str, Any]:
    try:
        if path == "-":
            txt = sys.stdin.read()
        else:
            with open(path, "r", encoding="utf-8") as f:
                txt = f.read()
    except OSError as e:
        raise _fail_input(f"cannot read {path!r}: {e}")
    try:
        obj = json.loads(txt)
    except json.JSONDecodeError as e:
        raise _fail_input(f"invalid JSON: {e}")
    if not isinstance(obj, dict):
        raise _fail_input("top-level JSON must be an object")
    return obj


def _params_json(p: VDFParams) -> Dict[str, Any]:
    return {
        "profile": p.name,
        "iterations": p.iterations,
        "challengeBits": p.challenge_bits,
        "modulusBits": p.modulus_bits,
        "proofLength": p.proof_length,
        "productionSafe": p.is_production_safe,
    }


def _emit(obj: Any) -> None:
    typer.echo(json.dumps(obj, indent=2))


# -----------------------
# Commands
# -----------------------

@app.command("params")
def cmd_params(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="JSON/YAML config file."),
) -> None:
    """Show the resolved configuration and VDF parameters."""
    cfg = _load_config(config)
    try:
        params = params_from_config(cfg.vdf, require_production=cfg.require_production_modulus)
    except InvalidParameterError as e:
        raise _fail_input(str(e))
    _emit({"config": cfg.to_dict(), "vdf": _params_json(params)})


@app.command("session")
def cmd_session(
    session_id: int = typer.Option(0, "--session-id", "-s", min=0, help="Session identifier."),
    nodes: Optional[int] = typer.Option(None, "--nodes", "-n", help="Override node count."),
    threshold: Optional[int] = typer.Option(None, "--threshold", "-t", help="Override threshold."),
    iterations: Optional[int] = typer.Option(None, "--iterations", "-T", help="Override VDF time parameter."),
    reconstruct: Optional[str] = typer.Option(
        None, "--reconstruct", "-r", help="Comma separated node ids used for reconstruction."
    ),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="JSON/YAML config file."),
) -> None:
    """Run a complete local session and print the ledger record as JSON."""
    cfg = _load_config(config)
    cfg = replace(
        cfg,
        nodes=cfg.nodes if nodes is None else nodes,
        threshold=cfg.threshold if threshold is None else threshold,
        vdf=replace(cfg.vdf, iterations=cfg.vdf.iterations if iterations is None else iterations),
    )
    ids: Optional[List[int]] = None
    if reconstruct:
        try:
            ids = [int(part) for part in reconstruct.split(",") if part.strip()]
        except ValueError:
            raise _fail_input("--reconstruct must be a comma separated list of integers")

    try:
        with DrngSession(cfg, session_id=SessionId(session_id)) as session:
            out = session.run(ids)
    except InvalidParameterError as e:
        raise _fail_input(str(e))
    except DrngError as e:
        typer.echo(f"session failed: {e}", err=True)
        raise typer.Exit(code=EXIT_INVALID)
    _emit(out.as_ledger_dict())


@app.command("prove")
def cmd_prove(
    commitment: str = typer.Option(..., "--commitment", help="0x-hex 32-byte session commitment."),
    profile: str = typer.Option("demo", "--profile", "-p", help="demo | rsa2048 | custom"),
    modulus_hex: Optional[str] = typer.Option(None, "--modulus", help="Hex modulus for the custom profile."),
    iterations: Optional[int] = typer.Option(None, "--iterations", "-T", help="VDF time parameter."),
    hash_fn: str = typer.Option(DEFAULT_HASH, "--hash", help="Hash for the proof digest."),
) -> None:
    """Evaluate the VDF on int(commitment) mod N and print output + proof."""
    c = _bytes_of(commitment, "commitment")
    try:
        params = get_params(profile, iterations=iterations, modulus_hex=modulus_hex)
        x = vdf_input_from_commitment(c, params.modulus)
        get_hasher(hash_fn)
    except InvalidParameterError as e:
        raise _fail_input(str(e))

    res = PietrzakVDF(params).run(x)
    width = params.modulus_bytes
    _emit({
        "profile": params.name,
        "modulus": hex(params.modulus),
        "iterations": params.iterations,
        "challengeBits": params.challenge_bits,
        "commitment": to_hex(c),
        "input": to_hex(int_to_fixed(res.x, width)),
        "y": to_hex(int_to_fixed(res.y, width)),
        "proof": res.proof.to_hex_list(params.modulus),
        "proofDigest": to_hex(proof_digest(res.proof, hash_fn)),
    })


@app.command("verify")
def cmd_verify(
    proof_file: str = typer.Argument(..., help="Path to proof JSON (or '-' for stdin)."),
) -> None:
    """
    Verify a proof JSON with fields modulus, iterations, y, proof and either
    input or commitment (challengeBits optional). Exits 0 if valid, 1 if not.
    """
    obj = _read_json(proof_file)
    missing = [k for k in ("modulus", "iterations", "y", "proof") if k not in obj]
    if "input" not in obj and "commitment" not in obj:
        missing.append("input|commitment")
    if missing:
        raise _fail_input(f"proof JSON missing required fields: {', '.join(missing)}")

    try:
        N = _int_of(obj["modulus"])
        T = int(obj["iterations"])
        bits = int(obj.get("challengeBits", 128))
        params = VDFParams(name="custom", modulus=N, iterations=T, challenge_bits=bits)
        if "commitment" in obj:
            x = vdf_input_from_commitment(from_hex(obj["commitment"]), N)
            if "input" in obj and _int_of(obj["input"]) != x:
                raise ValueError("input does not match int(commitment) mod N")
        else:
            x = _int_of(obj["input"])
        y = _int_of(obj["y"])
        if not isinstance(obj["proof"], list):
            raise ValueError("proof must be a list")
        proof = [_int_of(p) for p in obj["proof"]]
    except (TypeError, ValueError) as e:
        raise _fail_input(f"failed to parse proof fields: {e}")

    ok = PietrzakVDF(params).verify(x, y, proof)
    _emit({"valid": ok, "iterations": T, "modulusBits": N.bit_length(), "proofLength": len(proof)})
    raise typer.Exit(code=EXIT_OK if ok else EXIT_INVALID)


@app.command("finalize")
def cmd_finalize(
    vdf_output: str = typer.Option(..., "--vdf-output", "-y", help="0x-hex Y (modulus width)."),
    seed: str = typer.Option(..., "--seed", help="0x-hex reconstructed seed."),
    commitment: Optional[str] = typer.Option(
        None, "--commitment", help="If given, check hash(seed) == commitment first."
    ),
    hash_fn: str = typer.Option(DEFAULT_HASH, "--hash", help="keccak256 | sha3_256"),
) -> None:
    """Recompute final randomness = hash(Y || seed)."""
    y_b = _bytes_of(vdf_output, "vdf-output")
    seed_b = _bytes_of(seed, "seed")
    try:
        hasher = get_hasher(hash_fn)
    except InvalidParameterError as e:
        raise _fail_input(str(e))

    if commitment is not None:
        c = _bytes_of(commitment, "commitment")
        if not consteq(hasher(seed_b), c):
            typer.echo("error: seed does not hash to commitment", err=True)
            raise typer.Exit(code=EXIT_INVALID)

    _emit({"finalRandomness": to_hex(final_randomness(y_b, seed_b, hash_fn))})


def main() -> None:  # pragma: no cover - thin wrapper
    """Entry-point for the ``drng`` console script and ``python -m drng.cli``."""
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    try:
        app(prog_name="drng")
    except KeyboardInterrupt:
        typer.echo("", err=True)
        sys.exit(130)
