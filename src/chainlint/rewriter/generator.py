"""
Rewrite Generation.

Materializes the fix of a :class:`Diagnostic` lazily, once the owning scope has
been fully traversed and the complete occurrence list of the chain is known.

Steps:
1.  **Naming**: ``_`` + the chain text with every run of non-identifier
    characters replaced by ``_`` (``ctx.data`` -> ``_ctx_data``). A numeric
    suffix is appended while the name is bound or read in the target scope,
    or already claimed by another fix of the same run.
2.  **Anchor**: the statement containing the first occurrence that is a direct
    child of the scope's body. The declaration ``<name> = <chain>`` goes
    immediately before it (before the first decorator of a decorated
    definition). One-line suites (``if x: ...``) get ``<name> = <chain>; ``.
3.  **Reuse**: a statement up to and including the anchor that already reads
    ``<name> = <chain>``, with ``<name>`` bound once, is reused: nothing is
    inserted and its own read of the chain is left as is.
4.  **Replacements**: each occurrence sub-expression whose current text still
    spells the chain is replaced by the name; trailing members are untouched.

Scopes without a statement body (lambdas, comprehensions) and class bodies
produce no fix: a class-level binding would become a class attribute (or a new
member of an ``Enum``).
"""

import logging
import re
from typing import Dict, Mapping, Optional, Set

import libcst as cst
from libcst.metadata import CodeRange

from chainlint.analysis.bindings import ScopeBindingTable
from chainlint.analysis.occurrences import ChainRecord, ChainScope
from chainlint.enums import ScopeKind
from chainlint.rewriter.edits import Edit, SourceText, TextInsertion, TextReplacement, normalize_chain_text

logger = logging.getLogger(__name__)

_NON_IDENTIFIER = re.compile(r"[^0-9A-Za-z_]+")


def binding_name(chain: str) -> str:
  """
  Derives the base local name for a chain.

  Args:
      chain: Canonical chain text, e.g. ``self.cfg[0].db``.

  Returns:
      str: A valid identifier, e.g. ``_self_cfg_0_db``.
  """
  return "_" + _NON_IDENTIFIER.sub("_", chain).strip("_")


class RewriteGenerator:
  """
  Builds :class:`Edit` objects from scope-owned occurrence records.
  """

  def __init__(
    self,
    source: SourceText,
    positions: Mapping[cst.CSTNode, CodeRange],
    parents: Mapping[cst.CSTNode, cst.CSTNode],
    bindings: ScopeBindingTable,
    newline: str = "\n",
  ) -> None:
    """
    Args:
        source: Text services for the analysed code.
        positions: ``PositionProvider`` mapping.
        parents: ``ParentNodeProvider`` mapping.
        bindings: Binding queries for name collision checks.
        newline: Line terminator used for inserted declarations.
    """
    self.source = source
    self.positions = positions
    self.parents = parents
    self.bindings = bindings
    self.newline = newline
    self._claimed: Dict[int, Set[str]] = {}

  def generate(self, scope: ChainScope, record: ChainRecord) -> Optional[Edit]:
    """
    Produces the fix for ``record`` in ``scope``.

    Args:
        scope: The scope the diagnostic was reported in.
        record: The chosen chain's record (complete occurrence list).

    Returns:
        Optional[Edit]: None if no safe rewrite exists.
    """
    if not scope.kind.has_body or self._is_class_body(scope) or not record.occurrences:
      return None

    anchor = self._anchor_statement(record.occurrences[0].node, scope.node)
    if anchor is None:
      logger.debug("No anchor statement for '%s' in scope %d", record.text, scope.id)
      return None

    chain_text = record.text
    base = binding_name(chain_text)
    reused = self._existing_declaration(scope, anchor, base, chain_text)
    name = base if reused is not None else self._unique_name(base, anchor)

    replacements = []
    for occ in record.occurrences:
      if reused is not None and occ.node is reused.value:
        continue
      start, end = self.source.span(self.positions[occ.node])
      if normalize_chain_text(self.source.code[start:end]) != chain_text:
        continue
      replacements.append(TextReplacement(start=start, end=end, text=name, expected=chain_text))

    if not replacements:
      return None

    insertion = None
    if reused is None:
      insertion = self._declaration(scope, anchor, record.occurrences[0].node, name, chain_text)
    return Edit(chain=chain_text, binding=name, insertion=insertion, replacements=replacements)

  def _is_class_body(self, scope: ChainScope) -> bool:
    return scope.kind == ScopeKind.BLOCK and isinstance(self.parents.get(scope.node), cst.ClassDef)

  def _anchor_statement(self, node: cst.CSTNode, body_owner: cst.CSTNode) -> Optional[cst.CSTNode]:
    """
    Climbs from ``node`` to the statement that is a direct child of ``body_owner``.
    """
    current = node
    while True:
      parent = self.parents.get(current)
      if parent is None:
        return None
      if parent is body_owner:
        return current
      current = parent

  def _statement_offset(self, statement: cst.CSTNode) -> int:
    if isinstance(statement, (cst.FunctionDef, cst.ClassDef)) and statement.decorators:
      statement = statement.decorators[0]
    start, _ = self.source.span(self.positions[statement])
    return start

  def _declaration(
    self, scope: ChainScope, anchor: cst.CSTNode, first: cst.CSTNode, name: str, chain_text: str
  ) -> TextInsertion:
    offset = self._statement_offset(anchor)
    if scope.kind == ScopeKind.SUITE:
      return TextInsertion(offset=offset, text=f"{name} = {chain_text}; ")

    # `x = load(); y = x.a.b` must bind after the small statement that assigns x
    if isinstance(anchor, cst.SimpleStatementLine) and len(anchor.body) > 1:
      small = self._anchor_statement(first, anchor)
      if small is not None and small is not anchor.body[0]:
        return TextInsertion(offset=self._statement_offset(small), text=f"{name} = {chain_text}; ")

    line_start = self.source.line_start(offset)
    indent = self.source.indentation(offset)
    return TextInsertion(offset=line_start, text=f"{indent}{name} = {chain_text}{self.newline}")

  def _unique_name(self, base: str, anchor: cst.CSTNode) -> str:
    claimed = self._claimed.setdefault(id(self.bindings.scope_of(anchor)), set())
    candidate = base
    suffix = 1
    while candidate in claimed or self.bindings.is_taken(candidate, anchor):
      candidate = f"{base}_{suffix}"
      suffix += 1
    claimed.add(candidate)
    return candidate

  def _existing_declaration(
    self, scope: ChainScope, anchor: cst.CSTNode, name: str, chain_text: str
  ) -> Optional[cst.Assign]:
    """
    Finds a sibling statement, up to the anchor, that already is ``name = chain``.
    """
    if self.bindings.binding_count(name, anchor) != 1:
      return None

    body = getattr(scope.node, "body", ())
    for stmt in body:
      small = stmt.body if isinstance(stmt, cst.SimpleStatementLine) else [stmt]
      for item in small:
        if self._is_declaration(item, name, chain_text):
          return item
      if stmt is anchor:
        break
    return None

  def _is_declaration(self, node: cst.CSTNode, name: str, chain_text: str) -> bool:
    if not isinstance(node, cst.Assign) or len(node.targets) != 1:
      return False
    target = node.targets[0].target
    if not isinstance(target, cst.Name) or target.value != name:
      return False
    return normalize_chain_text(self.source.text(self.positions[node.value])) == chain_text
