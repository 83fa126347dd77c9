#!/usr/bin/env python3
"""
Lint equivalence case tables.

Loads every ``*.yaml``/``*.yml`` case table under the given paths, validates
it against the bundled schema and prints a summary per table.

Usage:
    python scripts/lint_case_tables.py tests/resources
    python scripts/lint_case_tables.py tables/csr.yaml --require-origin
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from validation_parity.exceptions import FixtureError
from validation_parity.fixtures.case_table import CaseTable, load_case_table
from validation_parity.matching.matcher import structural_matcher

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

ORIGIN_CHECK = structural_matcher().require_origin_when_invalid()


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Lint declarative validation case tables.")
    parser.add_argument("paths", nargs="+", help="Case table files or directories to scan")
    parser.add_argument(
        "--require-origin",
        action="store_true",
        help="Fail when an expected Invalid error does not name an origin",
    )
    return parser.parse_args(argv)


def discover(paths: Iterable[str]) -> List[Path]:
    found: List[Path] = []
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            found.extend(sorted(p for p in path.rglob("*") if p.suffix in (".yaml", ".yml")))
        else:
            found.append(path)
    return found


def origin_problems(table: CaseTable) -> List[str]:
    """Expected Invalid errors without an origin, as reported by the matcher."""
    problems = []
    for case in table.all_cases():
        for problem in ORIGIN_CHECK.compare(case.expected_errors, []).problems:
            problems.append(f"{case.name}: {problem}")
    return problems


def print_table_summary(path: Path, table: CaseTable) -> None:
    print(f"\n{path}")
    print(f"  API group:    {table.api_group or 'core'}")
    print(f"  API versions: {', '.join(table.api_versions) or '-'}")
    print(f"  Create cases: {len(table.create_cases)}")
    print(f"  Update cases: {len(table.update_cases)}")
    clean = sum(1 for case in table.all_cases() if not case.expected_errors)
    print(f"  Clean inputs: {clean}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    files = discover(args.paths)
    if not files:
        logger.error("No case tables found")
        return 1

    failures = 0
    for path in files:
        try:
            table = load_case_table(path)
        except FixtureError as e:
            failures += 1
            print(f"\n✗ {e}")
            continue

        print_table_summary(path, table)
        if args.require_origin:
            problems = origin_problems(table)
            for problem in problems:
                print(f"  ✗ {problem}")
            if problems:
                failures += 1

    print("\n" + "=" * 80)
    if failures:
        print(f"✗ {failures} of {len(files)} case table(s) failed lint")
    else:
        print(f"✓ {len(files)} case table(s) passed lint")
    print("=" * 80)
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
