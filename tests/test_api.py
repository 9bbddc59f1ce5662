"""
Tests for the package-level convenience API.
"""

import pytest

import chainlint

CODE = "print(ctx.data.a)\nprint(ctx.data.b)\nprint(ctx.data.c)\n"


def test_check_returns_findings():
  (finding,) = chainlint.check(CODE)
  assert finding.chain == "ctx.data"
  assert finding.line == 1
  assert finding.message == "Member chain 'ctx.data' accessed 3 times. Extract to variable."


def test_check_threshold():
  assert chainlint.check(CODE, min_occurrences=4) == []


def test_fix_rewrites_code():
  assert chainlint.fix(CODE) == (
    "_ctx_data = ctx.data\nprint(_ctx_data.a)\nprint(_ctx_data.b)\nprint(_ctx_data.c)\n"
  )


def test_syntax_error_raises():
  with pytest.raises(ValueError, match="Analysis failed"):
    chainlint.check("def broken(:\n")
  with pytest.raises(ValueError, match="Fix failed"):
    chainlint.fix("def broken(:\n")


def test_threshold_below_two_raises():
  # pydantic's ValidationError is a ValueError
  with pytest.raises(ValueError):
    chainlint.check(CODE, min_occurrences=1)
