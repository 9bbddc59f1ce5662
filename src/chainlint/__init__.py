"""
chainlint Package.

A static analyzer that finds member-access chains (``self.ctx.data``) read
repeatedly within one lexical scope and rewrites them to use a local variable.

Usage
-----

Checking a String
^^^^^^^^^^^^^^^^^

.. code-block:: python

    import chainlint
    code = "print(ctx.data.a)\\nprint(ctx.data.b)\\nprint(ctx.data.c)\\n"
    for finding in chainlint.check(code):
        print(finding.line, finding.message)
    # 1 Member chain 'ctx.data' accessed 3 times. Extract to variable.

Fixing a String
^^^^^^^^^^^^^^^

.. code-block:: python

    print(chainlint.fix(code))
    # _ctx_data = ctx.data
    # print(_ctx_data.a)
    # ...

Advanced Usage (Lint Engine)
^^^^^^^^^^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    from chainlint import LintConfig, LintEngine

    engine = LintEngine(LintConfig(min_occurrences=2, allow_indexed_chains=True))
    res = engine.run(code)

    if res.success:
        print(res.diagnostics)
    else:
        print(f"Errors: {res.errors}")
"""

from typing import List

from chainlint.config import LintConfig
from chainlint.core.engine import LintEngine
from chainlint.core.result import Finding, LintResult

__version__ = "0.1.0"


def _engine(min_occurrences: int, allow_indexed: bool) -> LintEngine:
  # pydantic's ge=2 constraint rejects a threshold below 2 with a ValueError
  config = LintConfig(min_occurrences=min_occurrences, allow_indexed_chains=allow_indexed)
  return LintEngine(config)


def check(code: str, min_occurrences: int = 3, allow_indexed: bool = False) -> List[Finding]:
  """
  Reports repeated member chains in a string of Python code.

  Args:
      code (str): The source code to analyse.
      min_occurrences (int): Reads within one scope before a chain is reported.
      allow_indexed (bool): If True, literal subscripts (``items[0].name``) are tracked.

  Returns:
      List[Finding]: The findings in report order.

  Raises:
      ValueError: If the code cannot be parsed or the threshold is below 2.
  """
  result = _engine(min_occurrences, allow_indexed).run(code)
  if not result.success:
    raise ValueError("Analysis failed:\n" + "\n".join(result.errors))
  return result.diagnostics


def fix(code: str, min_occurrences: int = 3, allow_indexed: bool = False) -> str:
  """
  Rewrites repeated member chains to use local variables.

  Args:
      code (str): The source code to rewrite.
      min_occurrences (int): Reads within one scope before a chain is extracted.
      allow_indexed (bool): If True, literal subscripts are tracked.

  Returns:
      str: The rewritten source code.

  Raises:
      ValueError: If the code cannot be parsed or the threshold is below 2.
  """
  result = _engine(min_occurrences, allow_indexed).fix(code)
  if not result.success:
    raise ValueError("Fix failed:\n" + "\n".join(result.errors))
  return result.code


__all__ = [
  "Finding",
  "LintConfig",
  "LintEngine",
  "LintResult",
  "check",
  "fix",
  "__version__",
]
