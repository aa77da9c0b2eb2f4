"""
darkpool command line entry point.
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from darkpool.utils.logging import configure_logging

from .commands import cmd_demo, cmd_execute, cmd_prove, cmd_serve, cmd_tree

OUTPUT_FORMATS = ["table", "json", "jsonl"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="darkpool",
        description="Private order validity proofs",
    )
    parser.add_argument("--log-level", default=None, help="Override DARKPOOL_LOG_LEVEL")
    sub = parser.add_subparsers(dest="command")

    p_exec = sub.add_parser("execute", help="Run the order program without an artifact")
    p_exec.add_argument("--input", required=True, help="Program inputs JSON file")
    p_exec.add_argument("--output", choices=OUTPUT_FORMATS, default="table")
    p_exec.set_defaults(func=cmd_execute)

    p_prove = sub.add_parser("prove", help="Produce and verify an artifact")
    p_prove.add_argument("--input", required=True, help="Program inputs JSON file")
    p_prove.add_argument("--out", default=None, help="Write the artifact to this path")
    p_prove.add_argument("--output", choices=OUTPUT_FORMATS, default="table")
    p_prove.set_defaults(func=cmd_prove)

    p_tree = sub.add_parser("tree", help="Build a balance tree and print an inclusion proof")
    p_tree.add_argument("--leaves", required=True, help="JSON array of {wallet, balance, token?}")
    p_tree.add_argument("--wallet", required=True, help="Wallet address (hex)")
    p_tree.add_argument("--balance", required=True, type=int, help="Wallet balance")
    p_tree.add_argument("--token", default=None, help="Token address for token-scoped leaves")
    p_tree.add_argument("--output", choices=OUTPUT_FORMATS, default="table")
    p_tree.set_defaults(func=cmd_tree)

    p_demo = sub.add_parser("demo", help="Run the built-in example order")
    p_demo.add_argument("--execute", action="store_true")
    p_demo.add_argument("--prove", action="store_true")
    p_demo.add_argument("--output", choices=OUTPUT_FORMATS, default="table")
    p_demo.set_defaults(func=cmd_demo)

    p_serve = sub.add_parser("serve", help="Start the HTTP proof service")
    p_serve.add_argument("--host", default=None)
    p_serve.add_argument("--port", type=int, default=None)
    p_serve.set_defaults(func=cmd_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    configure_logging(args.log_level)
    args.func(args)


if __name__ == "__main__":
    main()
