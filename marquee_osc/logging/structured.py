"""
Structured JSON Logger
======================

Bounded Context: Observability Infrastructure

One JSON object per log record, written to stderr by a dedicated handler on
the "marquee.<component>" logger.

Design:
- Typed events (LogEvent) instead of free-form strings
- Bound context (service_id, endpoint, ...) merged into every record
- Thread name recorded: the idle timer thread and the frame thread share
  loggers, and ordering questions are answered from the logs

Example:
    >>> logger = create_logger("tracker").bind(service_id="stage_01")
    >>> logger.info(
    ...     event=LogEvent.ZONE_ENTERED,
    ...     message="Position: 2",
    ...     metadata={'zone_id': 2, 'previous_zone': 0}
    ... )

Output:
    {"timestamp": "2026-10-18T15:30:45.123456+00:00", "level": "INFO",
     "component": "tracker", "thread": "MainThread", "event": "zone.entered",
     "message": "Position: 2", "context": {"service_id": "stage_01"},
     "metadata": {"zone_id": 2, "previous_zone": 0}}
"""

import json
import logging
import threading
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from .events import LogEvent


class JSONFormatter(logging.Formatter):
    """Records are rendered to JSON by StructuredLogger; emit them as-is."""

    def format(self, record: logging.LogRecord) -> str:
        return record.getMessage()


class StructuredLogger:
    """
    Event-typed JSON logger.

    Attributes:
        component: Component name (e.g., "tracker", "broadcaster")
        level: Threshold of this instance
        context: Fields attached to every record
        logger: Underlying stdlib logger ("marquee.<component>")

    The stdlib logger is shared by every instance of a component (one per
    service in a multi-stage process), so the threshold lives on the
    instance and the shared logger stays at DEBUG.
    """

    def __init__(
        self,
        component: str,
        level: int = logging.INFO,
        context: Optional[Dict[str, Any]] = None
    ):
        self.component = component
        self.level = level
        self.context = dict(context or {})
        self.logger = logging.getLogger(f"marquee.{component}")

        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(JSONFormatter())
            self.logger.addHandler(handler)
            self.logger.setLevel(logging.DEBUG)

    def bind(self, **context: Any) -> "StructuredLogger":
        """Return a logger for the same component with extra context."""
        return StructuredLogger(
            component=self.component,
            level=self.level,
            context={**self.context, **context}
        )

    def _log(
        self,
        level: int,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        exc_info: Optional[BaseException] = None
    ) -> None:
        if level < self.level:
            return

        record = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': logging.getLevelName(level),
            'component': self.component,
            'thread': threading.current_thread().name,
            'event': event.value,
            'message': message,
        }
        if self.context:
            record['context'] = self.context
        if metadata:
            record['metadata'] = metadata
        if exc_info is not None:
            record['exception'] = {
                'type': type(exc_info).__name__,
                'message': str(exc_info)
            }

        self.logger.log(level, json.dumps(record, default=str))

    def debug(self, event: LogEvent, message: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        self._log(logging.DEBUG, event, message, metadata)

    def info(self, event: LogEvent, message: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        self._log(logging.INFO, event, message, metadata)

    def warning(self, event: LogEvent, message: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        self._log(logging.WARNING, event, message, metadata)

    def error(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        exc_info: Optional[BaseException] = None
    ) -> None:
        """
        Log an ERROR record.

        The exception (if any) is summarized as {"type", "message"} inside the
        JSON record; tracebacks are not emitted, one record stays one line.

        Example:
            >>> try:
            ...     sock.sendto(dgram, endpoint)
            ... except OSError as e:
            ...     logger.error(
            ...         event=LogEvent.OSC_SEND_ERROR,
            ...         message="Socket error",
            ...         exc_info=e,
            ...     )
        """
        self._log(logging.ERROR, event, message, metadata, exc_info)


def create_logger(
    component: str,
    level: int = logging.INFO,
    **context: Any
) -> StructuredLogger:
    """
    Build a StructuredLogger for a component.

    Args:
        component: Component identifier ("tracker", "broadcaster", ...)
        level: Logging level (default: INFO)
        **context: Fields attached to every record

    Example:
        >>> logger = create_logger("tracker", level=logging.DEBUG, service_id="stage_01")
    """
    return StructuredLogger(component=component, level=level, context=context)
