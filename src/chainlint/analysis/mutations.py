"""
Mutation Tracking.

Observes write-like operations and marks the affected chains as modified:

1.  **Assignment**: ``a.b = x``, ``a.b: T = x``, ``for a.b in ...``, ``with f() as a.b``.
2.  **Update**: augmented assignment ``a.b += 1``.
3.  **Deletion**: ``del a.b``.
4.  **Call**: ``a.b.update()`` marks the receiver ``a.b``.

The exact chain is marked (created pre-modified if it was never read) together
with every already-recorded descendant (``a.b.c``, ``a.b[0]``). Invalidation is
never reverted for the rest of the scope.

A write inside a nested block also runs as part of the enclosing block, so the
same marking is applied to ancestor scopes in the arena. Propagation stops:

-   after a function or lambda body, which runs later than the surrounding code;
-   where the written root is a different binding in the parent, e.g. a name
    assigned in a class body or a comprehension target.
"""

import logging
from typing import Iterator, List, Optional

from libcst.metadata import Scope

from chainlint.analysis.bindings import BindingTable
from chainlint.analysis.chain import ChainPath
from chainlint.analysis.occurrences import ChainRecord, ChainScope, ScopeArena
from chainlint.core.tracer import TraceLogger
from chainlint.enums import MutationKind

logger = logging.getLogger(__name__)


class MutationTracker:
  """
  Marks chains as modified across a scope and the ancestors the write reaches.
  """

  def __init__(
    self,
    arena: ScopeArena,
    tracer: Optional[TraceLogger] = None,
    bindings: Optional[BindingTable] = None,
  ) -> None:
    """
    Args:
        arena: The scope store shared with the occurrence tables.
        tracer: Optional trace sink.
        bindings: Resolves which binding a root refers to in each scope.
    """
    self.arena = arena
    self.tracer = tracer
    self.bindings = bindings

  def affected_scopes(self, scope_id: int, root: str) -> Iterator[ChainScope]:
    """
    Yields the scopes a write in ``scope_id`` is visible to, innermost first.

    Args:
        scope_id: Arena index of the scope containing the write.
        root: The written root identifier.
    """
    origin = self._resolve(root, self.arena[scope_id])
    previous: Optional[ChainScope] = None
    for scope in self.arena.ancestors(scope_id):
      if previous is not None:
        if previous.deferred:
          return
        if self._resolve(root, scope) is not origin:
          # shadowed: the parent sees another binding of the root
          return
      yield scope
      previous = scope

  def _resolve(self, root: str, scope: ChainScope) -> Optional[Scope]:
    if self.bindings is None:
      return None
    return self.bindings.binding_scope(root, scope.node)

  def mark(self, scope_id: int, path: ChainPath, kind: MutationKind) -> List[ChainRecord]:
    """
    Records a mutation of ``path`` observed in ``scope_id``.

    Args:
        scope_id: Arena index of the scope containing the write.
        path: The written chain (a bare root is allowed).
        kind: The event shape.

    Returns:
        List[ChainRecord]: Every record that is modified after the call.
    """
    marked: List[ChainRecord] = []
    for scope in self.affected_scopes(scope_id, path.root):
      table = scope.table
      exact = table.ensure(path)
      exact.mark_modified()
      marked.append(exact)
      for record in table.descendants(path):
        record.mark_modified()
        marked.append(record)

    logger.debug("%s of '%s' invalidated %d record(s)", kind.value, path.text, len(marked))
    if self.tracer:
      self.tracer.log_mutation(path.text, kind.value, scope_id, len(marked))
    return marked
