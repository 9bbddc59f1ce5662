"""
Tree-Walking Driver.

``MemberAccessVisitor`` walks a LibCST module in document order, maintains the
stack of counting scopes and forwards the relevant nodes to the rule callbacks.

Counting scopes are statement bodies (``Module``, ``IndentedBlock``,
``SimpleStatementSuite``) plus lambdas and comprehensions. Only the outermost
access of a member chain is forwarded; its nested sub-accesses are skipped,
whether the outer access was canonicalized or rejected.

Regions whose accesses cannot be replaced by a local name are not tracked:
import statements, annotations and ``match`` patterns. Names bound there
(import aliases, capture patterns) still count as writes of their root.
"""

from typing import Iterator, List, Set

import libcst as cst
import libcst.matchers as m
from libcst.metadata import ParentNodeProvider, PositionProvider, ScopeProvider

from chainlint.analysis.chain import canonicalize, is_access, spine
from chainlint.core.rule import ChainExtractionRule
from chainlint.enums import MutationKind, ScopeKind


def flatten_targets(node: cst.BaseExpression) -> Iterator[cst.BaseExpression]:
  """
  Expands tuple/list unpacking targets.

  Args:
      node: An assignment target, e.g. ``a.b, (c, *d.e)``.

  Yields:
      cst.BaseExpression: ``a.b``, ``c``, ``d.e``.
  """
  if isinstance(node, (cst.Tuple, cst.List)):
    for element in node.elements:
      yield from flatten_targets(element.value)
  elif isinstance(node, cst.StarredElement):
    yield from flatten_targets(node.value)
  else:
    yield node


def bound_name(alias: cst.ImportAlias) -> cst.BaseExpression:
  """
  The name an import alias binds: ``x`` for ``import a.b as x``, ``a`` for ``import a.b``.
  """
  if alias.asname is not None:
    return alias.asname.name
  name = alias.name
  while isinstance(name, cst.Attribute):
    name = name.value
  return name


class MemberAccessVisitor(cst.CSTVisitor):
  """
  Feeds occurrences and mutations to a :class:`ChainExtractionRule`.

  The metadata is consumed by the rule (positions, bindings) and by the
  rewrite generator, which share the wrapper this visitor runs on.
  """

  METADATA_DEPENDENCIES = (PositionProvider, ScopeProvider, ParentNodeProvider)

  def __init__(self, rule: ChainExtractionRule) -> None:
    """
    Args:
        rule: The rule receiving the callbacks.
    """
    self.rule = rule
    self._scopes: List[int] = []
    self._covered: Set[cst.CSTNode] = set()
    self._write_targets: Set[cst.CSTNode] = set()

  @property
  def scope_id(self) -> int:
    return self._scopes[-1]

  def _enter(self, kind: ScopeKind, node: cst.CSTNode, deferred: bool = False) -> None:
    parent = self._scopes[-1] if self._scopes else None
    scope = self.rule.open_scope(kind, node, parent, deferred)
    self._scopes.append(scope.id)

  def _leave(self) -> None:
    self._scopes.pop()

  def _is_function_body(self, node: cst.BaseSuite) -> bool:
    return isinstance(self.get_metadata(ParentNodeProvider, node, None), cst.FunctionDef)

  # --- Scoping ---

  def visit_Module(self, node: cst.Module) -> None:
    self._enter(ScopeKind.MODULE, node)

  def leave_Module(self, original_node: cst.Module) -> None:
    self._leave()

  def visit_IndentedBlock(self, node: cst.IndentedBlock) -> None:
    self._enter(ScopeKind.BLOCK, node, self._is_function_body(node))

  def leave_IndentedBlock(self, original_node: cst.IndentedBlock) -> None:
    self._leave()

  def visit_SimpleStatementSuite(self, node: cst.SimpleStatementSuite) -> None:
    self._enter(ScopeKind.SUITE, node, self._is_function_body(node))

  def leave_SimpleStatementSuite(self, original_node: cst.SimpleStatementSuite) -> None:
    self._leave()

  def visit_Lambda(self, node: cst.Lambda) -> None:
    self._enter(ScopeKind.LAMBDA, node, deferred=True)

  def leave_Lambda(self, original_node: cst.Lambda) -> None:
    self._leave()

  def visit_ListComp(self, node: cst.ListComp) -> None:
    self._enter(ScopeKind.COMPREHENSION, node)

  def leave_ListComp(self, original_node: cst.ListComp) -> None:
    self._leave()

  def visit_SetComp(self, node: cst.SetComp) -> None:
    self._enter(ScopeKind.COMPREHENSION, node)

  def leave_SetComp(self, original_node: cst.SetComp) -> None:
    self._leave()

  def visit_DictComp(self, node: cst.DictComp) -> None:
    self._enter(ScopeKind.COMPREHENSION, node)

  def leave_DictComp(self, original_node: cst.DictComp) -> None:
    self._leave()

  def visit_GeneratorExp(self, node: cst.GeneratorExp) -> None:
    self._enter(ScopeKind.COMPREHENSION, node)

  def leave_GeneratorExp(self, original_node: cst.GeneratorExp) -> None:
    self._leave()

  # --- Untracked regions ---

  def visit_Import(self, node: cst.Import) -> bool:
    for alias in node.names:
      self._write(bound_name(alias), MutationKind.ASSIGNMENT)
    return False

  def visit_ImportFrom(self, node: cst.ImportFrom) -> bool:
    if not isinstance(node.names, cst.ImportStar):
      for alias in node.names:
        self._write(bound_name(alias), MutationKind.ASSIGNMENT)
    return False

  def visit_Annotation(self, node: cst.Annotation) -> bool:
    return False

  def visit_MatchCase(self, node: cst.MatchCase) -> None:
    """Value patterns must stay dotted names; a local binding would turn them into captures."""
    for access in m.findall(node.pattern, m.Attribute() | m.Subscript()):
      self._covered.add(access)

  # --- Mutations ---

  def visit_Assign(self, node: cst.Assign) -> None:
    for target in node.targets:
      self._write(target.target, MutationKind.ASSIGNMENT)

  def visit_AnnAssign(self, node: cst.AnnAssign) -> None:
    if node.value is None:
      # Bare declaration: nothing is written, but the target is not a read either
      for expr in flatten_targets(node.target):
        if is_access(expr):
          self._write_targets.add(expr)
      return
    self._write(node.target, MutationKind.ASSIGNMENT)

  def visit_AugAssign(self, node: cst.AugAssign) -> None:
    self._write(node.target, MutationKind.UPDATE)

  def visit_Del(self, node: cst.Del) -> None:
    self._write(node.target, MutationKind.DELETION)

  def visit_For(self, node: cst.For) -> None:
    self._write(node.target, MutationKind.ASSIGNMENT)

  def visit_CompFor(self, node: cst.CompFor) -> None:
    self._write(node.target, MutationKind.ASSIGNMENT)

  def visit_WithItem(self, node: cst.WithItem) -> None:
    if node.asname is not None:
      self._write(node.asname.name, MutationKind.ASSIGNMENT)

  def visit_NamedExpr(self, node: cst.NamedExpr) -> None:
    self._write(node.target, MutationKind.ASSIGNMENT)

  def visit_ExceptHandler(self, node: cst.ExceptHandler) -> None:
    if node.name is not None:
      self._write(node.name.name, MutationKind.ASSIGNMENT)

  def visit_ExceptStarHandler(self, node: cst.ExceptStarHandler) -> None:
    if node.name is not None:
      self._write(node.name.name, MutationKind.ASSIGNMENT)

  def visit_FunctionDef(self, node: cst.FunctionDef) -> None:
    self._write(node.name, MutationKind.ASSIGNMENT)

  def visit_ClassDef(self, node: cst.ClassDef) -> None:
    self._write(node.name, MutationKind.ASSIGNMENT)

  # Capture patterns bind names; value patterns are covered in visit_MatchCase

  def visit_MatchAs(self, node: cst.MatchAs) -> None:
    if node.name is not None:
      self._write(node.name, MutationKind.ASSIGNMENT)

  def visit_MatchStar(self, node: cst.MatchStar) -> None:
    if node.name is not None:
      self._write(node.name, MutationKind.ASSIGNMENT)

  def visit_MatchMapping(self, node: cst.MatchMapping) -> None:
    if node.rest is not None:
      self._write(node.rest, MutationKind.ASSIGNMENT)

  def visit_Call(self, node: cst.Call) -> None:
    if not isinstance(node.func, cst.Attribute):
      return
    receiver = canonicalize(node.func.value, self.rule.allow_indexed)
    if receiver is not None:
      self.rule.on_call(self.scope_id, receiver)

  def _write(self, target: cst.BaseExpression, kind: MutationKind) -> None:
    for expr in flatten_targets(target):
      if is_access(expr):
        self._write_targets.add(expr)
      chain = canonicalize(expr, self.rule.allow_indexed)
      if chain is None:
        continue
      if kind == MutationKind.UPDATE:
        self.rule.on_update(self.scope_id, chain)
      else:
        self.rule.on_assignment_target(self.scope_id, chain, kind)

  # --- Occurrences ---

  def visit_Attribute(self, node: cst.Attribute) -> None:
    self._visit_access(node)

  def visit_Subscript(self, node: cst.Subscript) -> None:
    self._visit_access(node)

  def _visit_access(self, node: cst.BaseExpression) -> None:
    if node in self._covered:
      return
    if node in self._write_targets:
      # The written member is not read; its object (node.value) is, and is visited next
      return

    self._covered.update(spine(node))
    chain = canonicalize(node, self.rule.allow_indexed)
    if chain is not None:
      self.rule.on_access(self.scope_id, chain)
