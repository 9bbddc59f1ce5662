"""
Chain Selection and Diagnostics.

After every recorded occurrence, the selector looks for the longest prefix of
the occurrence's hierarchy that has reached the threshold, is unmodified and
has not been reported yet. At most one diagnostic is emitted per
``(scope, chain)``. Once a chain is reported, its shorter prefixes in the same
scope are suppressed so the same opportunity is not described at several depths.
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence

import libcst as cst

from chainlint.analysis.occurrences import ChainRecord, OccurrenceTable

MESSAGE_TEMPLATE = "Member chain '{chain}' accessed {count} times. Extract to variable."


@dataclass(frozen=True)
class Diagnostic:
  """
  An immutable extraction opportunity.
  """

  scope_id: int
  chain: str
  count: int
  line: int
  column: int
  anchor: cst.CSTNode = field(compare=False, repr=False)
  """First recorded occurrence of the chain."""

  @property
  def message(self) -> str:
    return MESSAGE_TEMPLATE.format(chain=self.chain, count=self.count)


class ChainSelector:
  """
  Picks the chain to report for a freshly recorded occurrence.
  """

  def __init__(self, min_occurrences: int) -> None:
    """
    Args:
        min_occurrences: Threshold (>= 2) a chain's read count must reach.
    """
    if min_occurrences < 2:
      raise ValueError(f"min_occurrences must be at least 2, got {min_occurrences}")
    self.min_occurrences = min_occurrences

  def select(self, hierarchy: Sequence[ChainRecord]) -> Optional[ChainRecord]:
    """
    Finds the longest qualifying prefix.

    Args:
        hierarchy: Records of the occurrence's prefixes, shortest first.

    Returns:
        Optional[ChainRecord]: The record to report, or None.
    """
    for record in reversed(hierarchy):
      if record.is_candidate(self.min_occurrences):
        return record
    return None

  def claim(self, table: OccurrenceTable, record: ChainRecord) -> None:
    """
    Marks ``record`` as reported and suppresses its shorter prefixes.

    Args:
        table: The owning scope's table.
        record: The chosen chain.
    """
    record.reported = True
    for path in record.path.prefixes(min_length=2)[:-1]:
      ancestor = table.get(path.text)
      if ancestor is not None:
        ancestor.suppressed = True
