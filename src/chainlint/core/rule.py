"""
Repeated Member Access Rule.

The rule is the synchronous, single-pass core of the engine. It exposes one
callback per node kind, which the tree-walking driver invokes in document
order:

- ``on_access``: an outermost member access was read.
- ``on_assignment_target``: a chain is the target of an assignment or ``del``.
- ``on_update``: a chain is the target of an augmented assignment.
- ``on_call``: a chain is the receiver of a method call.

State lives in scope-owned occurrence tables (see
:mod:`chainlint.analysis.occurrences`); diagnostics are appended to an
immutable stream and never revisited during the pass.
"""

import logging
from typing import Callable, List, Optional, Tuple

import libcst as cst

from chainlint.analysis.bindings import BindingTable
from chainlint.analysis.chain import CanonicalChain
from chainlint.analysis.mutations import MutationTracker
from chainlint.analysis.occurrences import ChainScope, ScopeArena
from chainlint.analysis.selector import ChainSelector, Diagnostic
from chainlint.config import LintConfig
from chainlint.core.tracer import TraceLogger
from chainlint.enums import MutationKind, ScopeKind

logger = logging.getLogger(__name__)

Locator = Callable[[cst.CSTNode], Tuple[int, int]]


class ChainExtractionRule:
  """
  Detects repeated reads of the same member chain within one scope.
  """

  def __init__(
    self,
    config: LintConfig,
    bindings: BindingTable,
    locate: Locator,
    tracer: Optional[TraceLogger] = None,
  ) -> None:
    """
    Initializes the rule.

    Args:
        config: Threshold and tracking policy.
        bindings: Binding-kind queries for chain roots.
        locate: Returns the (line, column) of a node for diagnostics.
        tracer: Optional trace sink.
    """
    self.config = config
    self.bindings = bindings
    self.locate = locate
    self.tracer = tracer
    self.arena = ScopeArena()
    self.tracker = MutationTracker(self.arena, tracer, bindings)
    self.selector = ChainSelector(config.min_occurrences)
    self.diagnostics: List[Diagnostic] = []

  @property
  def allow_indexed(self) -> bool:
    return self.config.allow_indexed_chains

  # --- Scopes ---

  def open_scope(
    self, kind: ScopeKind, node: cst.CSTNode, parent_id: Optional[int], deferred: bool = False
  ) -> ChainScope:
    """
    Registers a new counting scope.

    Args:
        kind: Scope category.
        node: Node owning the body.
        parent_id: Enclosing scope, if any.
        deferred: True for function and lambda bodies.

    Returns:
        ChainScope: The arena entry.
    """
    scope = self.arena.push(kind, node, parent_id, deferred)
    if self.tracer:
      self.tracer.log_scope(scope.id, kind.value, parent_id)
    return scope

  # --- Callbacks ---

  def on_access(self, scope_id: int, chain: CanonicalChain) -> Optional[Diagnostic]:
    """
    Records a read of ``chain`` and reports it if a prefix now qualifies.

    Args:
        scope_id: Scope containing the access.
        chain: The canonicalized outermost access.

    Returns:
        Optional[Diagnostic]: The diagnostic emitted by this occurrence, if any.
    """
    if len(chain.path) < 2:
      return None
    if self.config.excludes(self.bindings.kind_of(chain.root_node)):
      return None

    scope = self.arena[scope_id]
    hierarchy = scope.table.record(chain)
    if self.tracer:
      self.tracer.log_occurrence(chain.text, scope_id, hierarchy[-1].count)

    chosen = self.selector.select(hierarchy)
    if chosen is None:
      return None

    self.selector.claim(scope.table, chosen)
    anchor = chosen.occurrences[0].node
    line, column = self.locate(anchor)
    diagnostic = Diagnostic(
      scope_id=scope_id,
      chain=chosen.text,
      count=chosen.count,
      line=line,
      column=column,
      anchor=anchor,
    )
    self.diagnostics.append(diagnostic)
    logger.debug("Reported '%s' (%d reads) at %d:%d", chosen.text, chosen.count, line, column)
    if self.tracer:
      self.tracer.log_diagnostic(chosen.text, scope_id, chosen.count)
    return diagnostic

  def on_assignment_target(
    self, scope_id: int, chain: CanonicalChain, kind: MutationKind = MutationKind.ASSIGNMENT
  ) -> None:
    self.tracker.mark(scope_id, chain.path, kind)

  def on_update(self, scope_id: int, chain: CanonicalChain) -> None:
    self.tracker.mark(scope_id, chain.path, MutationKind.UPDATE)

  def on_call(self, scope_id: int, receiver: CanonicalChain) -> None:
    """
    A method call may mutate its receiver: ``data.update()`` invalidates ``data``.

    Args:
        scope_id: Scope containing the call.
        receiver: The canonicalized ``func.value`` of the call.
    """
    self.tracker.mark(scope_id, receiver.path, MutationKind.CALL)
