"""
Property tests for the occurrence threshold.

A chain read `k` times with distinct leaves is reported exactly when `k`
reaches the configured threshold.
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from chainlint.config import LintConfig
from chainlint.core.engine import LintEngine


@settings(max_examples=50, deadline=None)
@given(threshold=st.integers(min_value=2, max_value=6), reads=st.integers(min_value=0, max_value=8))
def test_reported_iff_threshold_reached(threshold, reads):
  code = "".join(f"v{i} = obj.attr.leaf{i}\n" for i in range(reads))
  result = LintEngine(LintConfig(min_occurrences=threshold)).run(code)

  assert result.success
  expected = ["obj.attr"] if reads >= threshold else []
  assert [d.chain for d in result.diagnostics] == expected


@settings(max_examples=30, deadline=None)
@given(depth=st.integers(min_value=2, max_value=5))
def test_identical_reads_report_full_chain(depth):
  chain = ".".join(f"p{i}" for i in range(depth))
  code = f"a = {chain}\nb = {chain}\nc = {chain}\n"
  result = LintEngine().run(code)

  assert [d.chain for d in result.diagnostics] == [chain]
