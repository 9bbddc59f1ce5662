"""
Tests for Config Loading (TOML).

Verifies that:
1. LintConfig defaults match the rule defaults.
2. LintConfig.load() picks up [tool.chainlint] from pyproject.toml.
3. CLI arguments override TOML settings.
4. File traversal finds toml in parent directories.
"""

import pytest
from pydantic import ValidationError

from chainlint.config import LintConfig
from chainlint.enums import BindingKind


@pytest.fixture
def toml_file(tmp_path):
  """Creates a pyproject.toml with a chainlint section in the temp dir."""
  fpath = tmp_path / "pyproject.toml"
  content = """
[tool.chainlint]
min_occurrences = 4
allow_indexed_chains = true
excluded_bindings = ["Import"]
"""
  fpath.write_text(content, encoding="utf-8")
  return fpath


def test_defaults():
  config = LintConfig()
  assert config.min_occurrences == 3
  assert config.allow_indexed_chains is False
  assert config.excludes(BindingKind.IMPORT)
  assert config.excludes(BindingKind.ENUM_MEMBER)
  assert not config.excludes(BindingKind.MUTABLE)


def test_threshold_below_two_rejected():
  with pytest.raises(ValidationError):
    LintConfig(min_occurrences=1)


def test_load_defaults_from_toml(tmp_path, toml_file):
  config = LintConfig.load(search_path=tmp_path)

  assert config.min_occurrences == 4
  assert config.allow_indexed_chains is True
  assert config.excluded_bindings == [BindingKind.IMPORT]


def test_cli_overrides_toml(tmp_path, toml_file):
  config = LintConfig.load(min_occurrences=2, allow_indexed_chains=False, search_path=tmp_path)

  assert config.min_occurrences == 2  # CLI wins
  assert config.allow_indexed_chains is False
  assert config.excluded_bindings == [BindingKind.IMPORT]  # TOML fallback


def test_toml_found_in_parent_directory(tmp_path, toml_file):
  nested = tmp_path / "pkg" / "sub"
  nested.mkdir(parents=True)

  assert LintConfig.load(search_path=nested).min_occurrences == 4


def test_missing_section_uses_defaults(tmp_path):
  (tmp_path / "pyproject.toml").write_text("[tool.other]\nx = 1\n", encoding="utf-8")
  assert LintConfig.load(search_path=tmp_path) == LintConfig()


def test_malformed_toml_is_ignored(tmp_path):
  (tmp_path / "pyproject.toml").write_text("[tool.chainlint\n", encoding="utf-8")
  assert LintConfig.load(search_path=tmp_path).min_occurrences == 3


def test_invalid_value_raises_value_error(tmp_path):
  (tmp_path / "pyproject.toml").write_text("[tool.chainlint]\nmin_occurrences = 1\n", encoding="utf-8")
  with pytest.raises(ValueError, match="Invalid chainlint configuration"):
    LintConfig.load(search_path=tmp_path)
