"""
Main Entry Point for chainlint CLI.

This module handles argument parsing and dispatches to specific command
handlers defined in `chainlint.cli.handlers`.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from chainlint.cli import handlers
from chainlint import __version__


def _add_rule_options(cmd: argparse.ArgumentParser) -> None:
  cmd.add_argument("path", type=Path, help="Input source file or directory")
  cmd.add_argument(
    "--min-occurrences",
    type=int,
    default=None,
    help="Reads of the same chain in one scope before it is reported (default: from toml, else 3)",
  )
  cmd.add_argument(
    "--allow-indexed",
    action="store_true",
    default=None,
    help="Track literal subscripts such as items[0].name (Overrides config)",
  )


def main(argv: Optional[List[str]] = None) -> int:
  """
  Main CLI entry point.

  Parses arguments via argparse and calls the appropriate handler function.

  Args:
      argv: Optional list of command line arguments (defaults to sys.argv).

  Returns:
      int: Exit code (0 for success, non-zero for failure or findings).
  """
  parser = argparse.ArgumentParser(description="chainlint: Repeated member chain extraction")
  parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

  subparsers = parser.add_subparsers(dest="command", required=True)

  # --- Command: CHECK ---
  cmd_check = subparsers.add_parser("check", help="Report repeated member chains")
  _add_rule_options(cmd_check)
  cmd_check.add_argument("--json", action="store_true", help="Print findings as JSON instead of a table")

  # --- Command: FIX ---
  cmd_fix = subparsers.add_parser("fix", help="Extract repeated member chains into local variables")
  _add_rule_options(cmd_fix)
  cmd_fix.add_argument(
    "--dry-run",
    action="store_true",
    help="Print a unified diff without writing to disk",
  )

  args = parser.parse_args(argv)

  if args.command == "check":
    return handlers.handle_check(args.path, args.min_occurrences, args.allow_indexed, args.json)

  elif args.command == "fix":
    return handlers.handle_fix(args.path, args.min_occurrences, args.allow_indexed, args.dry_run)

  return 0


if __name__ == "__main__":
  sys.exit(main())
