"""
Data structures representing the output of a lint run.

This module defines the `LintResult` Pydantic model, which encapsulates the
(possibly fixed) source code, the reported diagnostics, any errors encountered,
and the execution trace logs.
"""

from typing import Any, Dict, List

from pydantic import BaseModel, Field

from chainlint.analysis.selector import Diagnostic


class Finding(BaseModel):
  """
  Serializable view of a single diagnostic.
  """

  chain: str = Field(description="Canonical text of the repeated chain.")
  count: int = Field(description="Reads observed when the chain was reported.")
  line: int = Field(description="1-based line of the first occurrence.")
  column: int = Field(description="0-based column of the first occurrence.")
  message: str

  @classmethod
  def from_diagnostic(cls, diagnostic: Diagnostic) -> "Finding":
    return cls(
      chain=diagnostic.chain,
      count=diagnostic.count,
      line=diagnostic.line,
      column=diagnostic.column,
      message=diagnostic.message,
    )


class LintResult(BaseModel):
  """
  Container for the results of a check or fix job.
  """

  code: str = Field(default="", description="The analysed (or rewritten) source code.")
  diagnostics: List[Finding] = Field(default_factory=list, description="Findings in report order.")
  errors: List[str] = Field(default_factory=list, description="List of error messages encountered.")
  success: bool = Field(
    default=True,
    description="True if the source could be parsed and analysed.",
  )
  fix_passes: int = Field(default=0, description="Number of rounds that applied at least one fix.")
  trace_events: List[Dict[str, Any]] = Field(default_factory=list, description="Execution trace log data.")

  @property
  def has_errors(self) -> bool:
    """
    Check if the result contains any error messages.

    Returns:
        True if one or more errors are present.
    """
    return len(self.errors) > 0

  @property
  def has_diagnostics(self) -> bool:
    return len(self.diagnostics) > 0
