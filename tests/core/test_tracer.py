"""
Tests for the Tracing System.
"""

from chainlint.core.tracer import TraceEventType, TraceLogger


def test_events_recorded_in_order():
  logger = TraceLogger()
  logger.log_scope(0, "module", None)
  logger.log_occurrence("ctx.data", 0, 1)
  logger.log_mutation("ctx.data", "assign", 0, 2)
  logger.log_diagnostic("ctx.data", 0, 3)

  events = logger.export()
  assert [e["type"] for e in events] == [
    TraceEventType.SCOPE_ENTER,
    TraceEventType.OCCURRENCE,
    TraceEventType.MUTATION,
    TraceEventType.DIAGNOSTIC,
  ]
  assert events[0]["metadata"] == {"scope": 0, "parent": None}
  assert events[2]["description"] == "Assign of 'ctx.data'"
  assert events[2]["metadata"]["invalidated"] == 2


def test_fix_outcomes():
  logger = TraceLogger()
  logger.log_fix("a.b", applied=True)
  logger.log_fix("a.b.c", applied=False, reason="overlapping or stale")

  assert len(logger.events_of(TraceEventType.FIX_APPLIED)) == 1
  (skipped,) = logger.events_of(TraceEventType.FIX_SKIPPED)
  assert skipped.metadata["reason"] == "overlapping or stale"


def test_export_is_json_friendly():
  import json

  logger = TraceLogger()
  logger.log_occurrence("x.y", 1, 2)
  payload = json.dumps(logger.export())

  # str-based enum serializes as its value
  assert '"occurrence"' in payload
