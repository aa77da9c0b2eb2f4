"""
CLI commands for darkpool.

Commands:
    darkpool execute --input <file>        Run the order program, no artifact
    darkpool prove --input <file>          Produce and check an artifact
    darkpool tree --leaves <file> ...      Build a balance tree and print a proof
    darkpool demo --execute|--prove        Built-in example order
    darkpool serve                         Start the HTTP proof service
"""

from __future__ import annotations

import json
import sys
from typing import Any, Dict, List, Optional

from darkpool.core.hashing import sha256
from darkpool.core.merkle import MerkleAccumulator, verify_balance_proof
from darkpool.core.types import BalanceLeaf, MarketConditions, OrderRecord
from darkpool.core.validator import validate_order
from darkpool.program.order_program import ProgramInputs, build_program_inputs
from darkpool.protocol.codec import bytes_to_hex, hex_to_bytes20
from darkpool.protocol.errors import DarkPoolError, ValidationError


def cmd_execute(args) -> None:
    """Run the order program and print the committed values."""
    from darkpool.core.settings import get_settings
    from darkpool.prover.backend import create_backend

    inputs = _load_inputs(args.input)
    backend = create_backend(get_settings().prover)
    report = backend.execute(inputs)
    _print_execution(inputs, report, getattr(args, "output", "table"))


def cmd_prove(args) -> None:
    """Generate an artifact, verify it, and optionally write it to disk."""
    from darkpool.core.settings import get_settings
    from darkpool.prover.backend import create_backend

    inputs = _load_inputs(args.input)
    backend = create_backend(get_settings().prover)
    _prove(backend, inputs, getattr(args, "out", None), getattr(args, "output", "table"))


def cmd_tree(args) -> None:
    """Build the balance accumulator and print the proof for one wallet."""
    leaves = _load_leaves(args.leaves)

    try:
        acc = MerkleAccumulator.from_balances(leaves)
        wallet = hex_to_bytes20(args.wallet, "wallet")
        token = hex_to_bytes20(args.token, "token") if getattr(args, "token", None) else None
        proof = acc.generate_proof(wallet, args.balance, token)
    except DarkPoolError as e:
        print(f"Tree error: {e}", file=sys.stderr)
        sys.exit(1)

    data = {
        "leaf_count": acc.leaf_count,
        **proof.to_dict(),
        "verified": verify_balance_proof(wallet, args.balance, proof.siblings, proof.indices, proof.root, token),
    }
    _print_output(data, getattr(args, "output", "table"))


def cmd_demo(args) -> None:
    """
    Example order: alice sells 5 ETH for at least 10,000 USDC at $2,000
    while holding only 1 ETH, so the program commits is_valid=false.
    """
    from darkpool.prover.backend import LocalAttestationBackend
    from darkpool.prover.signing import AttestationSigner

    if args.execute == args.prove:
        print("Error: You must specify either --execute or --prove", file=sys.stderr)
        sys.exit(1)

    inputs = demo_inputs()
    backend = LocalAttestationBackend(AttestationSigner.generate())
    output_format = getattr(args, "output", "table")

    if args.execute:
        _print_execution(inputs, backend.execute(inputs), output_format)
    else:
        _prove(backend, inputs, None, output_format)


def cmd_serve(args) -> None:
    from darkpool.core.settings import get_settings
    from darkpool.server.app import run

    run(serve_settings(get_settings(), getattr(args, "host", None), getattr(args, "port", None)))


# ----------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------


def serve_settings(settings, host: Optional[str] = None, port: Optional[int] = None):
    """Copy of settings with CLI overrides; the cached settings are left alone."""
    overrides: Dict[str, Any] = {}
    if host is not None:
        overrides["host"] = host
    if port is not None:
        overrides["port"] = port
    if not overrides:
        return settings
    server = settings.server.model_copy(update=overrides)
    return settings.model_copy(update={"server": server})


def demo_inputs() -> ProgramInputs:
    alice_wallet = bytes([1]) * 20
    eth_token = bytes([2]) * 20
    usdc_token = bytes([3]) * 20
    user_balance = 1_000_000_000_000_000_000  # 1 ETH in wei

    order = OrderRecord(
        wallet=alice_wallet,
        token_in=eth_token,
        token_out=usdc_token,
        amount_in=5_000_000_000_000_000_000,  # 5 ETH in wei
        min_amount_out=10_000_000_000,  # 10,000 USDC (6 decimals)
        target_price=2_000_000_000,  # $2,000 per ETH
        deadline=1_735_689_600,
    )
    market = MarketConditions(current_price=2_050_000_000, block_timestamp=1_735_600_000)

    return build_program_inputs(
        order=order,
        secret=sha256(b"darkpool-demo-secret"),
        balances=[BalanceLeaf(wallet=alice_wallet, balance=user_balance)],
        market=market,
    )


def _load_json(path: str) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Cannot read {path}: {e}", file=sys.stderr)
        sys.exit(1)


def _load_inputs(path: str) -> ProgramInputs:
    try:
        return ProgramInputs.from_dict(_load_json(path))
    except ValidationError as e:
        print(f"Invalid input ({e.code.value}): {e}", file=sys.stderr)
        sys.exit(1)


def _load_leaves(path: str) -> List[BalanceLeaf]:
    data = _load_json(path)
    if not isinstance(data, list):
        print("Leaves file must contain a JSON array", file=sys.stderr)
        sys.exit(1)
    try:
        return [BalanceLeaf.from_dict(entry) for entry in data]
    except ValidationError as e:
        print(f"Invalid leaf: {e}", file=sys.stderr)
        sys.exit(1)


def _prove(backend, inputs: ProgramInputs, out_path, output_format: str) -> None:
    artifact = backend.prove(inputs)
    artifact_bytes = artifact.to_bytes()

    # Fail loudly if the freshly produced artifact does not verify.
    outputs = backend.verify(artifact_bytes)

    if out_path:
        with open(out_path, "wb") as f:
            f.write(artifact_bytes)

    data = {
        "proof_verified": True,
        "key_id": artifact.key_id,
        "program_id": bytes_to_hex(artifact.program_id),
        "public_values": outputs.to_dict(),
        "artifact_path": out_path,
    }
    _print_output(data, output_format)


def _print_execution(inputs: ProgramInputs, report, output_format: str) -> None:
    priv, pub = inputs.private, inputs.public
    # Host-side breakdown; only meaningful to the owner of the private inputs.
    data: Dict[str, Any] = {
        "public_values": report.outputs.to_dict(),
        "order_valid": validate_order(priv.order, pub.market, pub.expected_hash),
        "merkle_valid": verify_balance_proof(
            priv.order.wallet, priv.balance, priv.siblings, priv.indices,
            pub.merkle_root, priv.balance_token,
        ),
        "user_balance": priv.balance,
        "merkle_root": bytes_to_hex(pub.merkle_root),
        "merkle_siblings": [bytes_to_hex(s) for s in priv.siblings],
        "merkle_indices": list(priv.indices),
        "cycles": report.cycles,
    }
    _print_output(data, output_format)


def _print_output(data: Dict[str, Any], fmt: str) -> None:
    """Print output in requested format."""
    if fmt == "json":
        print(json.dumps(data, indent=2))
    elif fmt == "jsonl":
        print(json.dumps(data))
    else:
        for k, v in data.items():
            if isinstance(v, dict):
                print(f"{k}:")
                for sk, sv in v.items():
                    print(f"  {sk:<20} {sv}")
            elif isinstance(v, list):
                print(f"{k}: [{len(v)}]")
                for item in v:
                    print(f"  {item}")
            else:
                print(f"{k:<22} {v}")
