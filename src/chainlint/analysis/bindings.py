"""
Binding Resolution.

Classifies the binding a chain root refers to using LibCST's ``ScopeProvider``
rather than the shape of the name. Chains rooted at namespace-like constants
(imports, builtins, ``Enum`` classes) are excluded from tracking by default.
"""

from typing import Mapping, Optional, Protocol, Set

import libcst as cst
from libcst.metadata import (
  Assignment,
  BaseAssignment,
  BuiltinAssignment,
  ClassScope,
  ImportAssignment,
  Scope,
)

from chainlint.enums import BindingKind

ENUM_BASES: Set[str] = {"Enum", "IntEnum", "StrEnum", "Flag", "IntFlag", "ReprEnum"}

# Strongest classification wins when a name has several bindings.
_PRIORITY = (
  BindingKind.IMPORT,
  BindingKind.ENUM_MEMBER,
  BindingKind.MUTABLE,
  BindingKind.CONST,
)


class BindingTable(Protocol):
  """
  Binding queries the rule needs from the tree provider.
  """

  def kind_of(self, node: cst.Name) -> BindingKind: ...

  def is_taken(self, name: str, at: cst.CSTNode) -> bool: ...

  def binding_scope(self, name: str, at: cst.CSTNode) -> Optional[Scope]: ...


def is_enum_class(node: cst.ClassDef) -> bool:
  """
  Checks whether a class derives directly from an ``enum`` base.

  Args:
      node: The class definition.

  Returns:
      bool: True for ``class Color(Enum)`` or ``class Color(enum.IntEnum)``.
  """
  for arg in node.bases:
    base = arg.value
    if isinstance(base, cst.Name) and base.value in ENUM_BASES:
      return True
    if isinstance(base, cst.Attribute) and base.attr.value in ENUM_BASES:
      return True
  return False


def classify_assignment(assignment: BaseAssignment) -> BindingKind:
  """
  Maps a LibCST assignment to a :class:`BindingKind`.

  Args:
      assignment: One binding of the name.

  Returns:
      BindingKind: The classification.
  """
  if isinstance(assignment, (ImportAssignment, BuiltinAssignment)):
    return BindingKind.IMPORT
  if isinstance(assignment, Assignment):
    if isinstance(assignment.node, cst.ClassDef):
      return BindingKind.ENUM_MEMBER if is_enum_class(assignment.node) else BindingKind.CONST
    if isinstance(assignment.node, cst.FunctionDef):
      return BindingKind.CONST
  return BindingKind.MUTABLE


class ScopeBindingTable:
  """
  :class:`BindingTable` backed by a resolved ``ScopeProvider`` mapping.
  """

  def __init__(self, scopes: Mapping[cst.CSTNode, Optional[Scope]]) -> None:
    """
    Args:
        scopes: Result of ``MetadataWrapper.resolve(ScopeProvider)``.
    """
    self._scopes = scopes

  def scope_of(self, node: cst.CSTNode) -> Optional[Scope]:
    return self._scopes.get(node)

  def kind_of(self, node: cst.Name) -> BindingKind:
    """
    Resolves the binding kind of an identifier reference.

    Args:
        node: The chain root.

    Returns:
        BindingKind: ``UNKNOWN`` if the name is not bound anywhere visible.
    """
    scope = self.scope_of(node)
    if scope is None:
      return BindingKind.UNKNOWN

    assignments = scope[node.value]
    if not assignments:
      return BindingKind.UNKNOWN

    kinds = {classify_assignment(a) for a in assignments}
    for kind in _PRIORITY:
      if kind in kinds:
        return kind
    return BindingKind.UNKNOWN

  def is_taken(self, name: str, at: cst.CSTNode) -> bool:
    """
    True if ``name`` is bound in (or visible from) the scope of ``at``, or read
    anywhere in that scope.

    Args:
        name: Candidate identifier.
        at: A node inside the scope the name would be introduced in.
    """
    scope = self.scope_of(at)
    if scope is None:
      return False
    if name in scope:
      return True
    return len(scope.accesses[name]) > 0

  def binding_count(self, name: str, at: cst.CSTNode) -> int:
    """Number of bindings of ``name`` in the scope of ``at`` (own scope only)."""
    scope = self.scope_of(at)
    if scope is None:
      return 0
    return len(scope.assignments[name])

  def lexical_scope(self, node: cst.CSTNode) -> Optional[Scope]:
    """
    The scope code inside ``node`` runs in.

    Lambdas and comprehensions are recorded against the scope that contains
    them, and class bodies are not recorded at all, so the code inside is
    consulted instead.

    Args:
        node: A scope-owning node (Module, IndentedBlock, Lambda, ListComp, ...).
    """
    if isinstance(node, cst.BaseSuite) and node.body:
      node = node.body[0]
    elif isinstance(node, cst.Lambda):
      node = node.body
    elif isinstance(node, cst.DictComp):
      node = node.key
    elif isinstance(node, (cst.ListComp, cst.SetComp, cst.GeneratorExp)):
      node = node.elt
    return self.scope_of(node)

  def binding_scope(self, name: str, at: cst.CSTNode) -> Optional[Scope]:
    """
    Finds the scope that owns the binding ``name`` resolves to from ``at``.

    Class bodies are skipped on the way out, as Python does for nested
    functions.

    Args:
        name: The identifier.
        at: The reference site, or a scope-owning node.

    Returns:
        Optional[Scope]: None if the name is not bound anywhere visible.
    """
    start = self.lexical_scope(at)
    scope = start
    while scope is not None:
      if (scope is start or not isinstance(scope, ClassScope)) and name in scope.assignments:
        return scope
      if scope.parent is scope:
        return None
      scope = scope.parent
    return None
