"""
Fix Command Handler.

Implements `chainlint fix`: runs the engine's fixpoint loop on each file and
either writes the result back in place or prints a unified diff (`--dry-run`).
"""

import difflib
import sys
from pathlib import Path
from typing import Dict, Optional

from rich.table import Table
from rich.text import Text

from chainlint.cli.handlers.check import _collect_files, _read_source
from chainlint.config import LintConfig
from chainlint.core.engine import LintEngine
from chainlint.core.result import LintResult
from chainlint.utils.console import (
  console,
  log_error,
  log_info,
  log_success,
  log_warning,
)


def handle_fix(
  input_path: Path,
  min_occurrences: Optional[int],
  allow_indexed: Optional[bool],
  dry_run: bool = False,
) -> int:
  """
  Handles the 'fix' command execution.

  Args:
      input_path: Path to the source file or directory to rewrite.
      min_occurrences: Override for the occurrence threshold.
      allow_indexed: Override for indexed chain tracking.
      dry_run: If True, prints diffs and leaves files untouched.

  Returns:
      int: Exit code (0 for success, 1 if any file failed).
  """
  if not input_path.exists():
    log_error(f"Input not found: {input_path}")
    return 1

  try:
    config = LintConfig.load(
      min_occurrences=min_occurrences,
      allow_indexed_chains=allow_indexed,
      search_path=input_path if input_path.is_dir() else input_path.parent,
    )
  except ValueError as e:
    log_error(str(e))
    return 1

  files = _collect_files(input_path)
  if not files:
    log_warning(f"No .py files found in {input_path}")
    return 0

  if len(files) > 1:
    log_info(f"Processing {len(files)} files from {input_path}...")

  engine = LintEngine(config)
  results: Dict[str, LintResult] = {}
  for src_file in files:
    results[str(src_file)] = _fix_single_file(src_file, engine, dry_run)

  _print_fix_summary(results)
  return 0 if all(r.success for r in results.values()) else 1


def _fix_single_file(input_path: Path, engine: LintEngine, dry_run: bool) -> LintResult:
  """
  Helper to execute the fix loop on a single file.

  Args:
      input_path: Source file path.
      engine: Configured engine.
      dry_run: Print a diff instead of writing.

  Returns:
      LintResult: Result object holding the rewritten code.
  """
  try:
    original = _read_source(input_path)
  except (OSError, UnicodeDecodeError) as e:
    log_error(f"Failed to read {input_path}: {e}")
    return LintResult(success=False, errors=[str(e)])

  result = engine.fix(original)
  if not result.success:
    log_error(f"Failed to fix [path]{input_path}[/path]: {'; '.join(result.errors)}")
    return result

  if result.code == original:
    return result

  if dry_run:
    diff = difflib.unified_diff(
      original.splitlines(keepends=True),
      result.code.splitlines(keepends=True),
      fromfile=f"a/{input_path}",
      tofile=f"b/{input_path}",
    )
    sys.stdout.writelines(diff)
    return result

  try:
    with open(input_path, "wt", encoding="utf-8", newline="") as f:
      f.write(result.code)
  except OSError as e:
    log_error(f"Failed to write {input_path}: {e}")
    return LintResult(code=result.code, success=False, errors=[str(e)])

  log_success(f"Fixed: [path]{input_path}[/path] ({result.fix_passes} pass(es))")
  return result


def _print_fix_summary(results: Dict[str, LintResult]) -> None:
  """
  Lists the chains that could not be fixed automatically.

  Args:
      results: Dictionary mapping filenames to fix results.
  """
  leftovers = {name: r for name, r in results.items() if not r.success or r.has_diagnostics}
  if not leftovers:
    return

  table = Table(title="Remaining Findings")
  table.add_column("File", style="cyan")
  table.add_column("Status", justify="center")
  table.add_column("Chains", style="chain")

  for filename, res in leftovers.items():
    if not res.success:
      table.add_row(filename, "Failed", Text("; ".join(res.errors), style="error"))
    else:
      table.add_row(filename, "Manual", Text(", ".join(d.chain for d in res.diagnostics)))

  console.print(table)
