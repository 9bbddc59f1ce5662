"""
Scope Occurrence Tables.

Each counting scope owns one :class:`OccurrenceTable` mapping a chain's text to
its :class:`ChainRecord`. Scopes live in a :class:`ScopeArena` and refer to their
parent by arena index. Counts never cross scopes; the parent link exists for
mutation propagation and debugging only.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

import libcst as cst

from chainlint.analysis.chain import CanonicalChain, ChainPath
from chainlint.enums import ScopeKind


@dataclass
class Occurrence:
  """
  A single read of a chain prefix.
  """

  node: cst.BaseExpression
  """The sub-expression whose value is the prefix (replaced by a fix)."""

  access: cst.BaseExpression
  """The outermost access the prefix was read through."""


@dataclass
class ChainRecord:
  """
  Per-scope statistics for one chain.

  ``modified`` is monotonic: once set it is never cleared for the lifetime of
  the owning scope.
  """

  path: ChainPath
  count: int = 0
  modified: bool = False
  reported: bool = False
  suppressed: bool = False
  occurrences: List[Occurrence] = field(default_factory=list)

  @property
  def text(self) -> str:
    return self.path.text

  def mark_modified(self) -> None:
    self.modified = True

  def is_candidate(self, min_occurrences: int) -> bool:
    """
    True if the chain may be offered for extraction.

    Args:
        min_occurrences: The configured threshold.
    """
    return self.count >= min_occurrences and not (self.modified or self.reported or self.suppressed)


class OccurrenceTable:
  """
  Hierarchical occurrence counts for a single scope.
  """

  def __init__(self) -> None:
    self._records: Dict[str, ChainRecord] = {}

  def __contains__(self, text: str) -> bool:
    return text in self._records

  def __iter__(self) -> Iterator[ChainRecord]:
    return iter(self._records.values())

  def __len__(self) -> int:
    return len(self._records)

  def get(self, text: str) -> Optional[ChainRecord]:
    return self._records.get(text)

  def ensure(self, path: ChainPath) -> ChainRecord:
    """
    Returns the record for ``path``, creating an empty one if needed.

    Args:
        path: The chain.

    Returns:
        ChainRecord: The existing or new record.
    """
    record = self._records.get(path.text)
    if record is None:
      record = ChainRecord(path=path)
      self._records[path.text] = record
    return record

  def record(self, chain: CanonicalChain) -> List[ChainRecord]:
    """
    Registers one read of ``chain`` and of every trackable prefix.

    Modified prefixes are left untouched: they stop accumulating.

    Args:
        chain: The canonicalized outermost access.

    Returns:
        List[ChainRecord]: The hierarchy's records, shortest prefix first.
    """
    touched = []
    for path, node in chain.hierarchy():
      rec = self.ensure(path)
      if not rec.modified:
        rec.count += 1
        rec.occurrences.append(Occurrence(node=node, access=chain.node))
      touched.append(rec)
    return touched

  def descendants(self, path: ChainPath) -> List[ChainRecord]:
    """
    Already-recorded chains that extend ``path``.

    Args:
        path: The ancestor chain.

    Returns:
        List[ChainRecord]: Records whose text starts with ``path.`` or ``path[``.
    """
    dotted = path.text + "."
    indexed = path.text + "["
    return [rec for key, rec in self._records.items() if key.startswith(dotted) or key.startswith(indexed)]


@dataclass
class ChainScope:
  """
  A lexical region with its own occurrence statistics.
  """

  id: int
  kind: ScopeKind
  node: cst.CSTNode
  parent_id: Optional[int] = None
  deferred: bool = False
  """True for function and lambda bodies, which do not run as part of the enclosing flow."""
  table: OccurrenceTable = field(default_factory=OccurrenceTable)


class ScopeArena:
  """
  Append-only store of the scopes seen during one traversal.
  """

  def __init__(self) -> None:
    self._scopes: List[ChainScope] = []

  def __getitem__(self, scope_id: int) -> ChainScope:
    return self._scopes[scope_id]

  def get(self, scope_id: int) -> ChainScope:
    return self._scopes[scope_id]

  def __iter__(self) -> Iterator[ChainScope]:
    return iter(self._scopes)

  def __len__(self) -> int:
    return len(self._scopes)

  def push(
    self, kind: ScopeKind, node: cst.CSTNode, parent_id: Optional[int] = None, deferred: bool = False
  ) -> ChainScope:
    """
    Allocates a new scope.

    Args:
        kind: Category of the scope.
        node: The LibCST node owning the statement body (Module, IndentedBlock, ...).
        parent_id: Arena index of the enclosing scope.
        deferred: Whether the body runs later than its definition.

    Returns:
        ChainScope: The new scope; its ``id`` is its arena index.
    """
    scope = ChainScope(id=len(self._scopes), kind=kind, node=node, parent_id=parent_id, deferred=deferred)
    self._scopes.append(scope)
    return scope

  def ancestors(self, scope_id: int, include_self: bool = True) -> Iterator[ChainScope]:
    """
    Walks parent links up to the module scope.

    Args:
        scope_id: Starting scope.
        include_self: Whether to yield the starting scope first.

    Yields:
        ChainScope: Innermost first.
    """
    current: Optional[int] = scope_id if include_self else self._scopes[scope_id].parent_id
    while current is not None:
      scope = self._scopes[current]
      yield scope
      current = scope.parent_id
