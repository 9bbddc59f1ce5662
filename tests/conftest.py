"""
Pytest Configuration and Fixtures.

Includes:
- Syspath patching for local imports.
- Console isolation so CLI tests that swap the rich backend do not leak.
- A helper fixture writing Python sources into a temporary project.
"""

import sys
import textwrap
from pathlib import Path
from typing import Callable

import pytest

# Add src to path so we can import 'chainlint' without installing it
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from chainlint.utils.console import reset_console  # noqa: E402


@pytest.fixture(autouse=True)
def isolate_console():
  """Ensures the console (and the logging handler bound to it) is reset after every test."""
  yield
  reset_console()


@pytest.fixture
def write_source(tmp_path: Path) -> Callable[[str, str], Path]:
  """
  Returns a function writing dedented code to ``tmp_path / name``.
  """

  def _write(name: str, code: str) -> Path:
    path = tmp_path / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(code), encoding="utf-8")
    return path

  return _write
