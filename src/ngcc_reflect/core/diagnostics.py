"""
Structured Diagnostic Sink.

This module records what the reflection pipeline saw and decided, as a flat list
of events that can be logged, collected for a JSON trace, or inspected by tests.
It captures:
1. Lifecycle Phases (Parsing, Analysis, Transform) with nesting.
2. Decisions (class scanned, annotation matched, lookalike rejected).
3. Failures, reported with their code, location and identifying context right
   before the corresponding exception is raised.

Components receive a sink explicitly; `get_sink()` offers a process-wide default
for callers that do not care.
"""

import logging
import time
import uuid
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from ngcc_reflect.enums import DiagnosticCode, Severity
from ngcc_reflect.errors import ReflectionError

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
  Severity.DEBUG: logging.DEBUG,
  Severity.INFO: logging.DEBUG,
  Severity.WARNING: logging.WARNING,
  Severity.ERROR: logging.ERROR,
}


@dataclass
class Diagnostic:
  id: str
  severity: Severity
  code: DiagnosticCode
  message: str
  timestamp: float
  location: Optional[str] = None
  parent_id: Optional[str] = None
  context: Dict[str, Any] = field(default_factory=dict)


class DiagnosticSink:
  """
  Collects diagnostics for one or more reflection passes.
  """

  def __init__(self):
    self._events: List[Diagnostic] = []
    self._active_phases: List[str] = []  # Stack of phase IDs

  def start_phase(self, name: str, detail: str = "") -> str:
    """Starts a nested phase (e.g. 'Analyze injectables'). Returns the phase ID."""
    phase_id = str(uuid.uuid4())
    parent = self._active_phases[-1] if self._active_phases else None
    self._events.append(
      Diagnostic(
        id=phase_id,
        severity=Severity.DEBUG,
        code=DiagnosticCode.PHASE_START,
        message=name,
        timestamp=time.time(),
        parent_id=parent,
        context={"detail": detail} if detail else {},
      )
    )
    self._active_phases.append(phase_id)
    return phase_id

  def end_phase(self) -> None:
    """Ends the current active phase."""
    if not self._active_phases:
      return
    phase_id = self._active_phases.pop()
    self._events.append(
      Diagnostic(
        id=str(uuid.uuid4()),
        severity=Severity.DEBUG,
        code=DiagnosticCode.PHASE_END,
        message="End Phase",
        timestamp=time.time(),
        parent_id=phase_id,
      )
    )

  def report(
    self,
    severity: Severity,
    code: DiagnosticCode,
    message: str,
    location: Optional[str] = None,
    **context: Any,
  ) -> Diagnostic:
    """
    Records a single diagnostic inside the current phase.

    Args:
        severity: How serious the event is.
        code: Machine readable identifier.
        message: Human readable description.
        location: ``path:line`` of the node the event is about, if known.
        **context: Free-form identifying values.

    Returns:
        Diagnostic: The recorded event.
    """
    event = Diagnostic(
      id=str(uuid.uuid4()),
      severity=severity,
      code=code,
      message=message,
      timestamp=time.time(),
      location=location,
      parent_id=self._active_phases[-1] if self._active_phases else None,
      context=context,
    )
    self._events.append(event)
    suffix = f" ({location})" if location else ""
    logger.log(_LOG_LEVELS[severity], f"{message}{suffix}")
    return event

  def fail(self, error: ReflectionError, location: Optional[str] = None) -> ReflectionError:
    """
    Records ``error`` as an ERROR diagnostic and hands it back for raising.

    Usage: ``raise sink.fail(StructuralParseError(...), module.location(node))``.
    """
    error.location = location
    self.report(Severity.ERROR, error.code, error.message, location=location, **error.context)
    return error

  @property
  def diagnostics(self) -> List[Diagnostic]:
    return list(self._events)

  def by_code(self, code: DiagnosticCode) -> List[Diagnostic]:
    return [e for e in self._events if e.code == code]

  @property
  def has_errors(self) -> bool:
    return any(e.severity == Severity.ERROR for e in self._events)

  def export(self) -> List[Dict[str, Any]]:
    """Returns list of dicts for JSON serialization."""
    return [asdict(e) for e in self._events]


_GLOBAL_SINK = DiagnosticSink()


def get_sink() -> DiagnosticSink:
  return _GLOBAL_SINK


def reset_sink() -> None:
  global _GLOBAL_SINK
  _GLOBAL_SINK = DiagnosticSink()
