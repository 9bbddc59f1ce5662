"""
Orchestration Engine for Member Chain Extraction.

This module provides the `LintEngine`, the primary driver of a lint run. The
pipeline consists of:

1.  **Ingestion**: parses Python source into a LibCST tree and resolves the
    position, scope and parent metadata.
2.  **Detection** (stage one): a single synchronous traversal by
    :class:`MemberAccessVisitor` feeding :class:`ChainExtractionRule`, which
    emits an immutable stream of diagnostics.
3.  **Fix materialization** (stage two): once the traversal is over, each
    diagnostic's fix is built lazily by the :class:`RewriteGenerator` from the
    complete occurrence list of its scope.
4.  **Application**: non-overlapping edits are applied in rounds; each round
    re-analyses the text produced by the previous one until no fix applies or
    ``max_fix_passes`` is reached.
"""

import logging
from typing import Dict, List, Optional, Tuple

import libcst as cst
from libcst.metadata import MetadataWrapper, ParentNodeProvider, PositionProvider, ScopeProvider

from chainlint.analysis.bindings import ScopeBindingTable
from chainlint.analysis.selector import Diagnostic
from chainlint.config import LintConfig
from chainlint.core.result import Finding, LintResult
from chainlint.core.rule import ChainExtractionRule
from chainlint.core.tracer import TraceLogger
from chainlint.core.visitor import MemberAccessVisitor
from chainlint.rewriter.edits import Edit, SourceText, apply_edits
from chainlint.rewriter.generator import RewriteGenerator

logger = logging.getLogger(__name__)


class AnalysisSession:
  """
  The state left behind by one detection pass over a source string.
  """

  def __init__(self, code: str, module: cst.Module, rule: ChainExtractionRule, generator: RewriteGenerator) -> None:
    self.code = code
    self.module = module
    self.rule = rule
    self.generator = generator
    self._fixes: Dict[Diagnostic, Optional[Edit]] = {}

  @property
  def diagnostics(self) -> List[Diagnostic]:
    return self.rule.diagnostics

  def fix_for(self, diagnostic: Diagnostic) -> Optional[Edit]:
    """
    Materializes (once) the fix of a diagnostic.

    Args:
        diagnostic: A diagnostic emitted by this session.

    Returns:
        Optional[Edit]: None if the scope offers no safe rewrite.
    """
    if diagnostic not in self._fixes:
      scope = self.rule.arena[diagnostic.scope_id]
      record = scope.table.get(diagnostic.chain)
      self._fixes[diagnostic] = None if record is None else self.generator.generate(scope, record)
    return self._fixes[diagnostic]

  def fixes(self) -> List[Edit]:
    """All available fixes, in report order."""
    edits = []
    for diagnostic in self.diagnostics:
      edit = self.fix_for(diagnostic)
      if edit is not None:
        edits.append(edit)
    return edits


class LintEngine:
  """
  The main analysis unit.

  Each call works on a fresh tree; the engine itself only holds configuration.
  """

  def __init__(self, config: Optional[LintConfig] = None) -> None:
    """
    Initializes the Engine.

    Args:
        config (LintConfig, optional): Rule settings. Defaults are used if None.
    """
    self.config = config or LintConfig()

  def parse(self, code: str) -> cst.Module:
    """
    Parses source string into a LibCST Module.

    Args:
        code (str): Python source code.

    Returns:
        cst.Module: The parsed Concrete Syntax Tree.

    Raises:
        libcst.ParserSyntaxError: If the input code is invalid Python.
    """
    return cst.parse_module(code)

  def analyze(self, code: str, tracer: Optional[TraceLogger] = None) -> AnalysisSession:
    """
    Runs the detection pass.

    Args:
        code (str): Python source code.
        tracer (TraceLogger, optional): Sink for trace events.

    Returns:
        AnalysisSession: Diagnostics plus the state needed to build fixes.

    Raises:
        libcst.ParserSyntaxError: If the input code is invalid Python.
    """
    wrapper = MetadataWrapper(self.parse(code))
    positions = wrapper.resolve(PositionProvider)
    parents = wrapper.resolve(ParentNodeProvider)
    bindings = ScopeBindingTable(wrapper.resolve(ScopeProvider))

    def locate(node: cst.CSTNode) -> Tuple[int, int]:
      start = positions[node].start
      return start.line, start.column

    rule = ChainExtractionRule(self.config, bindings, locate, tracer=tracer)
    wrapper.visit(MemberAccessVisitor(rule))

    generator = RewriteGenerator(
      SourceText(code),
      positions,
      parents,
      bindings,
      newline=wrapper.module.default_newline,
    )
    logger.debug("Analysis found %d diagnostic(s) in %d scope(s)", len(rule.diagnostics), len(rule.arena))
    return AnalysisSession(code, wrapper.module, rule, generator)

  def run(self, code: str) -> LintResult:
    """
    Reports repeated member chains without modifying the source.

    Args:
        code (str): Python source code.

    Returns:
        LintResult: Diagnostics, or ``success=False`` on a syntax error.
    """
    tracer = TraceLogger()
    try:
      session = self.analyze(code, tracer)
    except cst.ParserSyntaxError as e:
      return self._syntax_failure(code, e, tracer)

    return LintResult(
      code=code,
      diagnostics=[Finding.from_diagnostic(d) for d in session.diagnostics],
      trace_events=tracer.export(),
    )

  def fix(self, code: str) -> LintResult:
    """
    Applies fixes until a fixpoint (or the pass limit) is reached.

    Overlapping fixes (e.g. extractions in nested scopes that touch the same
    text) are deferred to a later round and recomputed against the new text.

    Args:
        code (str): Python source code.

    Returns:
        LintResult: The rewritten code and the diagnostics still present in it.
    """
    tracer = TraceLogger()
    current = code
    passes = 0

    try:
      for _ in range(self.config.max_fix_passes):
        edits = self.analyze(current, tracer).fixes()
        if not edits:
          break

        outcome = apply_edits(current, edits)
        for edit in outcome.applied:
          tracer.log_fix(edit.chain, applied=True)
        for edit in outcome.skipped:
          tracer.log_fix(edit.chain, applied=False, reason="overlapping or stale")

        if not outcome.applied or outcome.code == current:
          break
        current = outcome.code
        passes += 1
        logger.debug("Fix pass %d applied %d edit(s)", passes, len(outcome.applied))

      remaining = self.analyze(current, tracer)
    except cst.ParserSyntaxError as e:
      return self._syntax_failure(code, e, tracer)

    return LintResult(
      code=current,
      diagnostics=[Finding.from_diagnostic(d) for d in remaining.diagnostics],
      fix_passes=passes,
      trace_events=tracer.export(),
    )

  def _syntax_failure(self, code: str, error: cst.ParserSyntaxError, tracer: TraceLogger) -> LintResult:
    message = f"Syntax error at {error.raw_line}:{error.raw_column}: {error.message}"
    logger.debug(message)
    return LintResult(code=code, errors=[message], success=False, trace_events=tracer.export())
