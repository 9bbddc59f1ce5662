"""
Tests for Member Chain Canonicalization.

Verifies:
1.  Attribute chains produce dotted canonical text and per-prefix nodes.
2.  Subscripts reject the whole chain unless indexed chains are enabled,
    and even then only literal keys are accepted.
3.  Calls and non-identifier roots reject the chain.
4.  Parentheses are transparent.
"""

import libcst as cst
import pytest

from chainlint.analysis.chain import (
  ChainPath,
  Segment,
  canonicalize,
  is_access,
  literal_index_key,
  spine,
)
from chainlint.enums import SegmentKind


def expr(code: str) -> cst.BaseExpression:
  return cst.parse_expression(code)


def test_attribute_chain_text_and_root():
  chain = canonicalize(expr("self.ctx.data"))
  assert chain is not None
  assert chain.text == "self.ctx.data"
  assert chain.path.root == "self"
  assert len(chain.path) == 3


def test_bare_name_is_single_segment():
  chain = canonicalize(expr("data"))
  assert chain is not None
  assert chain.text == "data"
  assert chain.hierarchy() == []


def test_hierarchy_shortest_first_with_nodes():
  node = expr("a.b.c.d")
  chain = canonicalize(node)
  hierarchy = chain.hierarchy()

  assert [path.text for path, _ in hierarchy] == ["a.b", "a.b.c", "a.b.c.d"]
  # The last prefix is produced by the outermost node itself
  assert hierarchy[-1][1] is node
  assert isinstance(hierarchy[0][1], cst.Attribute)
  assert hierarchy[0][1].attr.value == "b"


def test_subscript_rejected_by_default():
  assert canonicalize(expr("data[0].value")) is None
  assert canonicalize(expr("obj.items[0].config")) is None


@pytest.mark.parametrize(
  "code, expected",
  [
    ("data[0].value", "data[0].value"),
    ("obj['key'].x", "obj['key'].x"),
    ('obj["key"][1]', 'obj["key"][1]'),
  ],
)
def test_literal_subscripts_allowed_when_enabled(code, expected):
  chain = canonicalize(expr(code), allow_indexed=True)
  assert chain is not None
  assert chain.text == expected


@pytest.mark.parametrize(
  "code",
  [
    "ctx[method()].value",
    "ctx[key].value",
    "ctx[1:2].value",
    "ctx[-1].value",
    "ctx[0, 1].value",
  ],
)
def test_dynamic_subscripts_rejected_even_when_enabled(code):
  assert canonicalize(expr(code), allow_indexed=True) is None


@pytest.mark.parametrize("code", ["a.getB().c", "load().x.y", "(a + b).c", "'text'.upper"])
def test_non_identifier_root_or_call_in_path_rejected(code):
  assert canonicalize(expr(code)) is None


def test_parentheses_are_transparent():
  chain = canonicalize(expr("((a.b)).c"))
  assert chain is not None
  assert chain.text == "a.b.c"


def test_literal_index_key_extraction():
  sub = expr("x[42]")
  assert literal_index_key(sub) == "42"
  assert literal_index_key(expr("x[name]")) is None


def test_segment_rendering():
  assert Segment(SegmentKind.NAME, "a").render(leading=True) == "a"
  assert Segment(SegmentKind.NAME, "b").render() == ".b"
  assert Segment(SegmentKind.INDEX, "0").render() == "[0]"


def test_path_prefixes_and_descendants():
  path = canonicalize(expr("a.b.c")).path
  short = path.prefix(2)

  assert short.text == "a.b"
  assert [p.text for p in path.prefixes(min_length=2)] == ["a.b", "a.b.c"]
  assert path.is_strict_descendant_of(short)
  assert not short.is_strict_descendant_of(path)
  assert not path.is_strict_descendant_of(path)


def test_paths_compare_by_segments():
  one = canonicalize(expr("a.b")).path
  two = canonicalize(expr("(a).b")).path
  assert one == two
  assert hash(one) == hash(two)
  assert isinstance(one, ChainPath)


def test_spine_walks_nested_accesses():
  node = expr("a.b[0].c")
  nodes = list(spine(node))
  assert len(nodes) == 3
  assert all(is_access(n) for n in nodes)
  assert not is_access(expr("a"))
