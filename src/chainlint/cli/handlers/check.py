"""
Check Command Handler.

This module implements the logic for the `chainlint check` command.
It orchestrates:
1. Configuration loading (`[tool.chainlint]` plus CLI overrides).
2. File discovery (single file or recursive directory scan).
3. Detection via the Lint Engine.
4. Reporting as a rich table or as JSON.
"""

import json
from pathlib import Path
from typing import Dict, List, Optional

from rich.table import Table
from rich.text import Text

from chainlint.config import LintConfig
from chainlint.core.engine import LintEngine
from chainlint.core.result import LintResult
from chainlint.utils.console import (
  console,
  log_error,
  log_success,
  log_warning,
)


def handle_check(
  input_path: Path,
  min_occurrences: Optional[int],
  allow_indexed: Optional[bool],
  as_json: bool = False,
) -> int:
  """
  Handles the 'check' command execution.

  Args:
      input_path: Path to the source file or directory to analyse.
      min_occurrences: Override for the occurrence threshold.
      allow_indexed: Override for indexed chain tracking.
      as_json: If True, prints machine-readable findings instead of a table.

  Returns:
      int: Exit code (0 if clean, 1 if findings or failures).
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

  engine = LintEngine(config)
  results: Dict[str, LintResult] = {}
  for src_file in files:
    label = str(src_file.relative_to(input_path)) if input_path.is_dir() else str(src_file)
    results[label] = _check_single_file(src_file, engine)

  if as_json:
    payload = {name: res.model_dump(include={"diagnostics", "errors", "success"}) for name, res in results.items()}
    print(json.dumps(payload, indent=2))
  else:
    _print_report(results)

  dirty = any(not r.success or r.has_diagnostics for r in results.values())
  return 1 if dirty else 0


def _collect_files(input_path: Path) -> List[Path]:
  """
  Resolves the Python files to process.

  Args:
      input_path: A file or a directory.

  Returns:
      List[Path]: The file itself, or every ``*.py`` below the directory, sorted.
  """
  if input_path.is_file():
    return [input_path]
  return sorted(input_path.rglob("*.py"))


def _read_source(path: Path) -> str:
  # newline="" keeps CRLF files intact through a fix round-trip
  with open(path, "rt", encoding="utf-8", newline="") as f:
    return f.read()


def _check_single_file(input_path: Path, engine: LintEngine) -> LintResult:
  """
  Helper to execute detection on a single file.

  Args:
      input_path: Source file path.
      engine: Configured engine.

  Returns:
      LintResult: Result object containing status and diagnostics.
  """
  try:
    code = _read_source(input_path)
  except (OSError, UnicodeDecodeError) as e:
    log_error(f"Failed to read {input_path}: {e}")
    return LintResult(success=False, errors=[str(e)])

  result = engine.run(code)
  if not result.success:
    log_error(f"Failed to analyse [path]{input_path}[/path]: {'; '.join(result.errors)}")
  return result


def _print_report(results: Dict[str, LintResult]) -> None:
  """
  Renders the findings of a batch as a table.

  Args:
      results: Dictionary mapping filenames to lint results.
  """
  total = len(results)
  findings = sum(len(r.diagnostics) for r in results.values())
  failures = sum(1 for r in results.values() if not r.success)

  if findings == 0 and failures == 0:
    log_success(f"No repeated member chains in {total} file(s).")
    return

  table = Table(title="Repeated Member Chains")
  table.add_column("File", style="cyan")
  table.add_column("Location", justify="right")
  table.add_column("Chain", style="chain")
  table.add_column("Reads", justify="right")

  for filename, res in results.items():
    if not res.success:
      table.add_row(filename, "-", Text("; ".join(res.errors), style="error"), "-")
      continue
    for finding in res.diagnostics:
      table.add_row(filename, f"{finding.line}:{finding.column}", Text(finding.chain), str(finding.count))

  console.print(table)
  console.print(f"\n[bold]Summary:[/bold] {findings} finding(s) in {total} file(s), {failures} failed to parse.")
