"""
Tests for CLI argument parsing and dispatch.
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from chainlint import __version__
from chainlint.cli.__main__ import main


def test_check_dispatch():
  with patch("chainlint.cli.handlers.handle_check", return_value=0) as mock_check:
    code = main(["check", "src", "--min-occurrences", "2", "--json"])

  assert code == 0
  mock_check.assert_called_once_with(Path("src"), 2, None, True)


def test_fix_dispatch():
  with patch("chainlint.cli.handlers.handle_fix", return_value=1) as mock_fix:
    code = main(["fix", "a.py", "--allow-indexed", "--dry-run"])

  assert code == 1
  mock_fix.assert_called_once_with(Path("a.py"), None, True, True)


def test_command_required():
  with pytest.raises(SystemExit):
    main([])


def test_version(capsys):
  with pytest.raises(SystemExit) as exc:
    main(["--version"])
  assert exc.value.code == 0
  assert __version__ in capsys.readouterr().out
