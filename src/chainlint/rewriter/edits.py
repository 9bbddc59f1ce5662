"""
Text Edits.

Fixes are expressed as plain text operations against the analysed source
rather than CST mutations, so that several independent fixes can be merged,
re-validated against drifted text, and deferred to a later round when they
collide.

Application rules (mirroring a multipass lint fixer):
1.  Edits are considered in order. An edit whose ranges overlap an already
    accepted edit is skipped as a whole and left for the next round.
2.  Each replacement re-checks that the current text still spells the chain;
    stale replacements are dropped silently. An edit left with no replacement
    is skipped.
3.  Accepted operations are applied back to front so offsets stay valid.
"""

import bisect
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from libcst.metadata import CodeRange

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


@dataclass(frozen=True)
class TextInsertion:
  """Zero-width insertion at ``offset``."""

  offset: int
  text: str


@dataclass(frozen=True)
class TextReplacement:
  """Replacement of ``[start, end)`` guarded by the text expected there."""

  start: int
  end: int
  text: str
  expected: str

  def matches(self, code: str) -> bool:
    """
    Re-checks the target text before editing.

    Args:
        code: The current source.

    Returns:
        bool: True if the range still spells ``expected``.
    """
    return normalize_chain_text(code[self.start : self.end]) == self.expected


@dataclass
class Edit:
  """
  A materialized fix: an optional declaration plus occurrence replacements.
  """

  chain: str
  binding: str
  insertion: Optional[TextInsertion] = None
  replacements: List[TextReplacement] = field(default_factory=list)

  @property
  def is_empty(self) -> bool:
    return not self.replacements

  def ranges(self) -> List[Tuple[int, int]]:
    """Spans touched by this edit; insertions are zero-width."""
    spans = [(r.start, r.end) for r in self.replacements]
    if self.insertion is not None:
      spans.append((self.insertion.offset, self.insertion.offset))
    return spans


@dataclass
class ApplyOutcome:
  code: str
  applied: List[Edit] = field(default_factory=list)
  skipped: List[Edit] = field(default_factory=list)


def normalize_chain_text(text: str) -> str:
  """
  Strips surrounding whitespace and redundant outer parentheses.

  Args:
      text: Raw source slice.

  Returns:
      str: ``(a.b)`` -> ``a.b``.
  """
  text = text.strip()
  while text.startswith("(") and text.endswith(")") and _balanced(text[1:-1]):
    text = text[1:-1].strip()
  return text


def _balanced(text: str) -> bool:
  depth = 0
  for ch in text:
    if ch == "(":
      depth += 1
    elif ch == ")":
      depth -= 1
      if depth < 0:
        return False
  return depth == 0


def _overlaps(a: Tuple[int, int], b: Tuple[int, int]) -> bool:
  a_start, a_end = a
  b_start, b_end = b
  if a_start == a_end:
    return b_start < a_start < b_end
  if b_start == b_end:
    return a_start < b_start < a_end
  return a_start < b_end and b_start < a_end


class SourceText:
  """
  Maps LibCST ``CodeRange`` positions (1-based lines, 0-based columns) onto
  offsets of the source string.
  """

  def __init__(self, code: str) -> None:
    self.code = code
    self._line_starts = [0] + [m.end() for m in _LINE_BREAK.finditer(code)]

  def offset(self, line: int, column: int) -> int:
    return self._line_starts[line - 1] + column

  def span(self, code_range: CodeRange) -> Tuple[int, int]:
    """
    Converts a position range into ``(start, end)`` offsets.

    Args:
        code_range: Range from ``PositionProvider``.
    """
    start = self.offset(code_range.start.line, code_range.start.column)
    end = self.offset(code_range.end.line, code_range.end.column)
    return start, end

  def text(self, code_range: CodeRange) -> str:
    start, end = self.span(code_range)
    return self.code[start:end]

  def line_start(self, offset: int) -> int:
    """Offset of the first character of the line containing ``offset``."""
    index = bisect.bisect_right(self._line_starts, offset) - 1
    return self._line_starts[index]

  def indentation(self, offset: int) -> str:
    """Leading whitespace of the line containing ``offset``."""
    start = self.line_start(offset)
    line = self.code[start:]
    return line[: len(line) - len(line.lstrip(" \t"))]


def apply_edits(code: str, edits: List[Edit]) -> ApplyOutcome:
  """
  Applies one round of non-conflicting edits.

  Args:
      code: The source the edits were computed against.
      edits: Candidate edits in report order.

  Returns:
      ApplyOutcome: New source plus the accepted and deferred edits.
  """
  outcome = ApplyOutcome(code=code)
  accepted: List[Tuple[int, int]] = []
  # (start, end, priority, order, text); replacements sort after insertions at equal start
  operations: List[Tuple[int, int, int, int, str]] = []

  for order, edit in enumerate(edits):
    live = [r for r in edit.replacements if r.matches(code)]
    if not live:
      outcome.skipped.append(edit)
      continue

    candidate = Edit(chain=edit.chain, binding=edit.binding, insertion=edit.insertion, replacements=live)
    spans = candidate.ranges()
    if any(_overlaps(span, taken) for span in spans for taken in accepted):
      outcome.skipped.append(edit)
      continue

    accepted.extend(spans)
    outcome.applied.append(candidate)
    if candidate.insertion is not None:
      operations.append((candidate.insertion.offset, candidate.insertion.offset, 0, order, candidate.insertion.text))
    for rep in live:
      operations.append((rep.start, rep.end, 1, order, rep.text))

  new_code = code
  for start, end, _, _, text in sorted(operations, reverse=True):
    new_code = new_code[:start] + text + new_code[end:]

  outcome.code = new_code
  return outcome
