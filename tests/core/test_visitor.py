"""
Tests for the tree-walking driver: target expansion and scope boundaries.
"""

import libcst as cst

from chainlint.config import LintConfig
from chainlint.core.engine import LintEngine
from chainlint.core.visitor import flatten_targets


def test_flatten_targets_expands_nested_unpacking():
  target = cst.parse_expression("a.b, (c, *d.e)")
  names = [cst.Module([]).code_for_node(t) for t in flatten_targets(target)]
  assert names == ["a.b", "c", "d.e"]


def test_comprehension_is_its_own_scope():
  session = LintEngine().analyze("vals = [ctx.data.a + ctx.data.b + ctx.data.c for _ in rows]\n")
  (diag,) = session.diagnostics
  assert diag.chain == "ctx.data"
  # no statement body to host a declaration
  assert session.fix_for(diag) is None


def test_reads_in_lambda_do_not_count_for_enclosing_body():
  code = "a = ctx.data.x\nf = lambda: ctx.data.y\nb = ctx.data.z\n"
  result = LintEngine().run(code)
  assert result.diagnostics == []


def test_method_call_results_are_not_chained():
  # each `cfg.items()` call invalidates what was recorded under `cfg`
  code = "a = cfg.items().x\nb = cfg.items().y\nc = cfg.items().z\n"
  result = LintEngine(LintConfig(min_occurrences=2)).run(code)
  assert [d.chain for d in result.diagnostics] == []


def test_walrus_target_rebinds_root():
  code = "a = (ctx := load()).data\nb = ctx.data.x\nc = ctx.data.y\nd = ctx.data.z\n"
  result = LintEngine().run(code)
  assert [d.chain for d in result.diagnostics] == ["ctx.data"]
