"""Command-line interface for mdmblock.

This module provides the CLI for checking records against a block list
from the command line.

Usage:
    mdmblock evaluate --blocklist <path-or-json> --record <path-or-json> [options]
    mdmblock validate --blocklist <path-or-json>

Commands:
    evaluate    Decide whether MDM matching is blocked for a record.
    validate    Load a block list and summarize its rules.

Exit codes:
    0: Matching is not blocked (or the block list is valid)
    1: The block list or record could not be loaded
    2: Unknown command
    3: Matching is blocked
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections import Counter
from decimal import Decimal
from pathlib import Path
from typing import Any

from .engine import BlockRuleEvaluator
from .errors import BlockListLoadError
from .loader import load_block_list
from .providers import StaticRuleProvider


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _load_record(source: str) -> Any:
    # Decimals keep their written precision: 1.50 stays "1.50".
    if source.strip().startswith("{"):
        return json.loads(source, parse_float=Decimal)
    return json.loads(Path(source).read_text(encoding="utf-8"), parse_float=Decimal)


def _cmd_evaluate(argv: list[str]) -> int:
    """Execute the 'evaluate' command.

    Args:
        argv: Command-line arguments after 'evaluate'.

    Returns:
        int: Exit code (0 if not blocked, 3 if blocked, 1 on load errors).
    """
    p = argparse.ArgumentParser(prog="mdmblock evaluate")
    p.add_argument("--blocklist", required=True, help="Block list JSON file path or inline JSON")
    p.add_argument("--record", required=True, help="Record JSON file path or inline JSON")
    p.add_argument("--explain", action="store_true")
    p.add_argument("--log-level", default="WARNING")
    args = p.parse_args(argv)
    _configure_logging(args.log_level)

    try:
        block_list = load_block_list(args.blocklist)
        record = _load_record(args.record)
    except (BlockListLoadError, json.JSONDecodeError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    evaluator = BlockRuleEvaluator(StaticRuleProvider(block_list))
    if args.explain:
        decision = evaluator.explain(record)
        print(json.dumps(decision.explanation, indent=2, sort_keys=True))
        blocked = decision.blocked
    else:
        blocked = evaluator.is_mdm_matching_blocked(record)
        print("blocked" if blocked else "not-blocked")

    return 3 if blocked else 0


def _cmd_validate(argv: list[str]) -> int:
    """Execute the 'validate' command.

    Args:
        argv: Command-line arguments after 'validate'.

    Returns:
        int: Exit code (0 if the block list is valid, 1 otherwise).
    """
    p = argparse.ArgumentParser(prog="mdmblock validate")
    p.add_argument("--blocklist", required=True, help="Block list JSON file path or inline JSON")
    p.add_argument("--log-level", default="WARNING")
    args = p.parse_args(argv)
    _configure_logging(args.log_level)

    try:
        block_list = load_block_list(args.blocklist)
    except BlockListLoadError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    counts = Counter(rule.resource_type for rule in block_list.rules)
    summary = ", ".join(f"{kind}={n}" for kind, n in sorted(counts.items()))
    print(f"{len(block_list.rules)} rule(s)" + (f": {summary}" if summary else ""))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the mdmblock CLI.

    Args:
        argv: Command-line arguments. If None, uses sys.argv[1:].

    Returns:
        int: Exit code.
            - 0: Not blocked, valid block list, or help shown
            - 1: Load error
            - 2: Unknown command
            - 3: Matching is blocked
    """
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv or argv[0] in {"-h", "--help"}:
        print("Usage: mdmblock <command> [args]\n\nCommands:\n  evaluate\n  validate")
        return 0

    cmd, rest = argv[0], argv[1:]
    if cmd == "evaluate":
        return _cmd_evaluate(rest)
    if cmd == "validate":
        return _cmd_validate(rest)

    print(f"Unknown command: {cmd}", file=sys.stderr)
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
