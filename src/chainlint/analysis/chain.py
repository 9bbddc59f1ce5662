"""
Member Chain Canonicalization.

Converts a LibCST access expression (``a.b.c``, ``self.cfg.db``) into an
ordered :class:`ChainPath` of static segments, or rejects it.

Rules:
1.  ``Attribute`` appends a ``.name`` segment.
2.  ``Subscript`` is rejected by default. When indexed chains are enabled,
    a single ``Integer`` / ``SimpleString`` key appends a ``[literal]`` segment;
    any other key (slices, names, calls, negative numbers) rejects the chain.
3.  The root must be a plain ``Name`` (``self`` included). Any other root
    (a call result, a literal, an arithmetic expression) rejects the chain.

Parentheses are stored on the nodes themselves by LibCST and are therefore
transparent to the walk. A rejected access is rejected as a whole; it is never
truncated to its canonicalizable part.
"""

from dataclasses import dataclass
from functools import cached_property
from typing import Iterator, List, Optional, Tuple

import libcst as cst

from chainlint.enums import SegmentKind


@dataclass(frozen=True)
class Segment:
  """
  One static step of a chain.
  """

  kind: SegmentKind
  value: str
  """Attribute/identifier name, or the literal source text of an index key."""

  def render(self, leading: bool = False) -> str:
    """
    Formats the segment as source text.

    Args:
        leading: True for the root segment (no dot prefix).

    Returns:
        str: ``name``, ``.name`` or ``[key]``.
    """
    if self.kind == SegmentKind.INDEX:
      return f"[{self.value}]"
    if leading:
      return self.value
    return f".{self.value}"


@dataclass(frozen=True)
class ChainPath:
  """
  Ordered sequence of static segments rooted at an identifier.
  """

  segments: Tuple[Segment, ...]

  @cached_property
  def text(self) -> str:
    """Canonical source form, e.g. ``ctx.data[0].value``."""
    return "".join(seg.render(leading=(i == 0)) for i, seg in enumerate(self.segments))

  @property
  def root(self) -> str:
    """The root identifier name."""
    return self.segments[0].value

  def __len__(self) -> int:
    return len(self.segments)

  def __str__(self) -> str:
    return self.text

  def prefix(self, length: int) -> "ChainPath":
    """Returns the leading ``length`` segments as a new path."""
    return ChainPath(self.segments[:length])

  def prefixes(self, min_length: int = 1) -> List["ChainPath"]:
    """
    All leading sub-paths from ``min_length`` up to and including self.

    Args:
        min_length: Shortest prefix to include.

    Returns:
        List[ChainPath]: Shortest first.
    """
    return [self.prefix(n) for n in range(min_length, len(self.segments) + 1)]

  def is_strict_descendant_of(self, other: "ChainPath") -> bool:
    """
    True if ``other`` is a proper leading part of this path.

    Args:
        other: The candidate ancestor chain.
    """
    return len(self.segments) > len(other.segments) and self.segments[: len(other.segments)] == other.segments


@dataclass(frozen=True, eq=False)
class CanonicalChain:
  """
  A canonicalized access together with the nodes that produce each prefix.

  ``nodes[i]`` is the sub-expression whose evaluation yields the prefix of
  length ``i + 1``: ``nodes[0]`` is the root ``Name`` and ``nodes[-1]`` the
  outermost access itself.
  """

  path: ChainPath
  nodes: Tuple[cst.BaseExpression, ...]

  @property
  def root_node(self) -> cst.Name:
    """The identifier the chain is rooted at."""
    return self.nodes[0]  # type: ignore[return-value]

  @property
  def node(self) -> cst.BaseExpression:
    """The outermost access node."""
    return self.nodes[-1]

  @property
  def text(self) -> str:
    return self.path.text

  def hierarchy(self) -> List[Tuple[ChainPath, cst.BaseExpression]]:
    """
    Trackable prefixes (two segments or more, full chain included) paired with
    the sub-expression producing each, shortest first.

    Returns:
        List[Tuple[ChainPath, cst.BaseExpression]]: Empty for a bare identifier.
    """
    return [(self.path.prefix(n), self.nodes[n - 1]) for n in range(2, len(self.path) + 1)]


def literal_index_key(node: cst.Subscript) -> Optional[str]:
  """
  Extracts a static literal key from a single-element subscript.

  Args:
      node: The subscript expression.

  Returns:
      Optional[str]: Source text of the key (``0``, ``'name'``) or None if the key is dynamic.
  """
  if len(node.slice) != 1:
    return None
  element = node.slice[0].slice
  if not isinstance(element, cst.Index) or element.star is not None:
    return None
  key = element.value
  if key.lpar or key.rpar:
    return None
  if isinstance(key, (cst.Integer, cst.SimpleString)):
    return key.value
  return None


def canonicalize(node: cst.BaseExpression, allow_indexed: bool = False) -> Optional[CanonicalChain]:
  """
  Walks an access expression from the outermost access inward to its root.

  A bare ``Name`` canonicalizes to a one-segment chain; this form is used for
  mutation targets (``data = ...``, ``data.update()``) and never counted as
  an occurrence.

  Args:
      node: The expression to canonicalize.
      allow_indexed: If True, literal subscripts become ``[key]`` segments.

  Returns:
      Optional[CanonicalChain]: The chain, or None if it is not canonicalizable.
  """
  segments: List[Segment] = []
  nodes: List[cst.BaseExpression] = []
  current = node

  while True:
    if isinstance(current, cst.Attribute):
      segments.append(Segment(SegmentKind.NAME, current.attr.value))
      nodes.append(current)
      current = current.value
    elif isinstance(current, cst.Subscript):
      key = literal_index_key(current) if allow_indexed else None
      if key is None:
        return None
      segments.append(Segment(SegmentKind.INDEX, key))
      nodes.append(current)
      current = current.value
    elif isinstance(current, cst.Name):
      segments.append(Segment(SegmentKind.NAME, current.value))
      nodes.append(current)
      break
    else:
      # Call results, literals, operators: not a stable identifier
      return None

  segments.reverse()
  nodes.reverse()
  return CanonicalChain(path=ChainPath(tuple(segments)), nodes=tuple(nodes))


def is_access(node: cst.CSTNode) -> bool:
  """True for member (``a.b``) and subscript (``a[0]``) expressions."""
  return isinstance(node, (cst.Attribute, cst.Subscript))


def spine(node: cst.BaseExpression) -> Iterator[cst.BaseExpression]:
  """
  Yields the access itself and every nested access along its ``value`` spine.

  Used by the driver to skip the sub-accesses of an outermost access that has
  already been canonicalized (or rejected).

  Args:
      node: The outermost access.

  Yields:
      cst.BaseExpression: ``a.b.c``, then ``a.b``. Stops at the first non-access.
  """
  current = node
  while is_access(current):
    yield current
    current = current.value  # type: ignore[union-attr]
