"""
Runtime Configuration Store.

Holds the tunables of the member-chain extraction rule and resolves them from
`[tool.chainlint]` in the nearest `pyproject.toml`, with CLI overrides on top.
"""

import tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError, field_validator

from chainlint.enums import BindingKind

DEFAULT_MIN_OCCURRENCES = 3
DEFAULT_EXCLUDED_BINDINGS = [BindingKind.IMPORT, BindingKind.ENUM_MEMBER]


class LintConfig(BaseModel):
  """
  Configuration container for the lint engine.
  """

  min_occurrences: int = Field(
    DEFAULT_MIN_OCCURRENCES,
    ge=2,
    description="Number of reads of the same chain in one scope before extraction is suggested.",
  )
  allow_indexed_chains: bool = Field(
    False,
    description="If True, literal subscripts (e.g. `data[0].x`) are tracked as chain segments.",
  )
  excluded_bindings: List[BindingKind] = Field(
    default_factory=lambda: list(DEFAULT_EXCLUDED_BINDINGS),
    description="Root binding kinds whose chains are never tracked.",
  )
  max_fix_passes: int = Field(10, ge=1, description="Upper bound on fix rounds when iterating to a fixpoint.")

  @field_validator("excluded_bindings", mode="before")
  @classmethod
  def normalize_bindings(cls, v: Any) -> Any:
    """
    Accepts binding kinds as raw strings (from TOML) in any case.

    Args:
        v: Raw value from the caller.

    Returns:
        The value with string entries lower-cased.
    """
    if isinstance(v, (list, tuple)):
      return [item.lower().strip() if isinstance(item, str) else item for item in v]
    return v

  def excludes(self, kind: BindingKind) -> bool:
    """Returns True if chains rooted at bindings of `kind` are ignored."""
    return kind in self.excluded_bindings

  @classmethod
  def load(
    cls,
    min_occurrences: Optional[int] = None,
    allow_indexed_chains: Optional[bool] = None,
    search_path: Optional[Path] = None,
  ) -> "LintConfig":
    """
    Loads configuration from pyproject.toml and overrides with CLI arguments.

    Args:
        min_occurrences (Optional[int]): Override for the occurrence threshold.
        allow_indexed_chains (Optional[bool]): Override for indexed chain tracking.
        search_path (Optional[Path]): Directory to start searching for TOML config.

    Returns:
        LintConfig: The fully resolved configuration object.

    Raises:
        ValueError: If the merged settings fail validation.
    """
    start_dir = search_path or Path.cwd()
    toml_config, _ = _load_toml_settings(start_dir)

    settings: Dict[str, Any] = dict(toml_config)
    if min_occurrences is not None:
      settings["min_occurrences"] = min_occurrences
    if allow_indexed_chains is not None:
      settings["allow_indexed_chains"] = allow_indexed_chains

    try:
      return cls.model_validate(settings)
    except ValidationError as e:
      raise ValueError(f"Invalid chainlint configuration: {e}")


def _load_toml_settings(start_path: Path) -> Tuple[Dict[str, Any], Optional[Path]]:
  """
  Recursively searches parents for 'pyproject.toml' and extracts config.

  Args:
      start_path (Path): Directory to start search from.

  Returns:
      Tuple[Dict, Optional[Path]]: The config dict and the directory definition was found in.
  """
  current = start_path.resolve()

  for parent in [current, *current.parents]:
    toml_path = parent / "pyproject.toml"
    if toml_path.exists() and toml_path.is_file():
      try:
        with open(toml_path, "rb") as f:
          data = tomllib.load(f)
      except (OSError, tomllib.TOMLDecodeError):
        return {}, None

      tool_section = data.get("tool", {})
      return tool_section.get("chainlint", {}), parent

  return {}, None
