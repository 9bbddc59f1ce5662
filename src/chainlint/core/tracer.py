"""
Analysis Trace Logger.

This module provides the infrastructure to record the step-by-step execution
of a lint run. It captures:
1. Scope lifecycle (a counting scope was opened).
2. Occurrences and mutations observed by the rule.
3. Diagnostics emitted and fixes applied or deferred.

The output is a structured list of Event Log dictionaries suitable for JSON serialization.
"""

import time
import uuid
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class TraceEventType(str, Enum):
  SCOPE_ENTER = "scope_enter"
  OCCURRENCE = "occurrence"
  MUTATION = "mutation"
  DIAGNOSTIC = "diagnostic"
  FIX_APPLIED = "fix_applied"
  FIX_SKIPPED = "fix_skipped"


@dataclass
class TraceEvent:
  id: str
  type: TraceEventType
  timestamp: float
  description: str
  metadata: Dict[str, Any] = field(default_factory=dict)


class TraceLogger:
  """
  Records lint events for debugging and `--json` export.
  Injected into the rule, the mutation tracker and the fixer.
  """

  def __init__(self) -> None:
    self._events: List[TraceEvent] = []

  def log_scope(self, scope_id: int, kind: str, parent_id: Optional[int]) -> None:
    self._log_simple(
      TraceEventType.SCOPE_ENTER, f"Scope {scope_id} ({kind})", {"scope": scope_id, "parent": parent_id}
    )

  def log_occurrence(self, chain: str, scope_id: int, count: int) -> None:
    self._log_simple(TraceEventType.OCCURRENCE, f"Read '{chain}'", {"scope": scope_id, "count": count})

  def log_mutation(self, chain: str, kind: str, scope_id: int, invalidated: int) -> None:
    """Logs a write-like event and how many records it invalidated."""
    self._log_simple(
      TraceEventType.MUTATION,
      f"{kind.capitalize()} of '{chain}'",
      {"scope": scope_id, "kind": kind, "invalidated": invalidated},
    )

  def log_diagnostic(self, chain: str, scope_id: int, count: int) -> None:
    self._log_simple(TraceEventType.DIAGNOSTIC, f"Reported '{chain}'", {"scope": scope_id, "count": count})

  def log_fix(self, chain: str, applied: bool, reason: str = "") -> None:
    """Logs the outcome of applying a fix."""
    evt_type = TraceEventType.FIX_APPLIED if applied else TraceEventType.FIX_SKIPPED
    self._log_simple(evt_type, f"Fix for '{chain}'", {"reason": reason})

  def _log_simple(self, evt_type: TraceEventType, desc: str, meta: Dict[str, Any]) -> None:
    self._events.append(
      TraceEvent(
        id=str(uuid.uuid4()),
        type=evt_type,
        timestamp=time.time(),
        description=desc,
        metadata=meta,
      )
    )

  def events_of(self, evt_type: TraceEventType) -> List[TraceEvent]:
    return [e for e in self._events if e.type == evt_type]

  def export(self) -> List[Dict[str, Any]]:
    """Returns list of dicts for JSON serialization."""
    return [asdict(e) for e in self._events]
