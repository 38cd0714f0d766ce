"""
factorkb/cli.py
===============
Solve a knowledge base from the command line.

Usage:
    factorkb assertions.json
    factorkb assertions.json --given rain --query wet '["not", "dry"]'
    factorkb assertions.json --strict --verbose

Expressions passed to --given / --query use the loader syntax; a bare
word that is not valid JSON is read as a symbol name.
Exit status is 1 when the knowledge base is inconsistent.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, List, Optional

from factorkb.core.config import SolverConfig
from factorkb.core.exceptions import FactorKBError
from factorkb.symbolic.knowledge_base import KnowledgeBase
from factorkb.symbolic.loader import AssertionLoader
from factorkb.version import FRAMEWORK_DESCRIPTION, FRAMEWORK_NAME, __version__

logger = logging.getLogger(__name__)


def parse_expression_arg(text: str) -> Any:
    """JSON expression, or a bare symbol name."""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text.strip()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=FRAMEWORK_NAME, description=FRAMEWORK_DESCRIPTION)
    parser.add_argument("assertions", help="Path to an assertions JSON file")
    parser.add_argument("--given", nargs="+", default=[],
                        help="Temporary assertions for --query, e.g. rain '[\"not\", \"cold\"]'")
    parser.add_argument("--query", nargs="+", default=[],
                        help="Factors to evaluate, e.g. wet")
    parser.add_argument("--solved-only", action="store_true",
                        help="Only print solved symbols and assertions")
    parser.add_argument("--strict", action="store_true",
                        help="Fail on unsupported arithmetic instead of leaving values unsolved")
    parser.add_argument("--verbose", "-v", action="store_true")
    parser.add_argument("--version", action="version", version=f"{FRAMEWORK_NAME} {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.given and not args.query:
        parser.error("--given needs at least one --query factor")
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = SolverConfig.strict() if args.strict else SolverConfig()
    kb = KnowledgeBase(config=config)

    try:
        assertions = AssertionLoader.from_json(kb, args.assertions)
        kb.add(*assertions)
        print(f"Loaded {len(assertions)} assertions")

        kb.solve()
        print(kb.render(solved_only=args.solved_only))
        conflict = kb.has_conflict()
        if conflict is not None:
            print(f"CONFLICT: {conflict.message}")

        if args.query:
            given = [AssertionLoader.parse(kb, parse_expression_arg(text)) for text in args.given]
            queries = [AssertionLoader.parse(kb, parse_expression_arg(text)) for text in args.query]
            for factor in kb.given(*given).query(*queries):
                answer = factor.solution_text() if factor.solved else "unknown"
                print(f"? {factor} => {answer}")
    except (FactorKBError, OSError) as exc:
        logger.error("%s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 2

    return 1 if conflict is not None else 0


if __name__ == "__main__":
    sys.exit(main())
