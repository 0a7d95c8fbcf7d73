from dataclasses import dataclass, field
from datetime import datetime, timezone
import json
import logging
from typing import Any, Callable, Mapping

# ==================================================
# Observability Types
# ==================================================

QueryObserveHook = Callable[["QueryObservation"], None]
EventObserveHook = Callable[["ExecutionEvent"], None]


@dataclass(frozen=True)
class ObservabilitySettings:
    """
    Optional hooks notified about every statement and connection an executor runs.
    """

    query_observer: QueryObserveHook | None = None
    event_observer: EventObserveHook | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class QueryObservation:
    """
    Structured statement execution observation payload.
    """

    database: str
    operation: str
    sql: str
    param_count: int
    duration_ms: float
    succeeded: bool
    in_session: bool
    metadata: Mapping[str, Any] = field(default_factory=dict)
    error_type: str | None = None
    error_message: str | None = None


@dataclass(frozen=True)
class ExecutionEvent:
    """
    Structured executor lifecycle event payload.
    """

    timestamp: str
    event: str
    database: str
    executor: str
    success: bool
    metadata: Mapping[str, Any] = field(default_factory=dict)
    operation: str | None = None
    query_id: str | None = None
    session_id: str | None = None
    connection_id: str | None = None
    duration_ms: float | None = None
    error_type: str | None = None
    error_message: str | None = None


def now_iso_utc() -> str:
    return datetime.now(timezone.utc).isoformat()


def execution_event_to_dict(event: ExecutionEvent) -> dict[str, Any]:
    """
    Converts an ExecutionEvent dataclass into a JSON-safe dictionary.
    """

    return {
        "timestamp": event.timestamp,
        "event": event.event,
        "database": event.database,
        "executor": event.executor,
        "success": event.success,
        "metadata": dict(event.metadata),
        "operation": event.operation,
        "query_id": event.query_id,
        "session_id": event.session_id,
        "connection_id": event.connection_id,
        "duration_ms": event.duration_ms,
        "error_type": event.error_type,
        "error_message": event.error_message,
    }


def make_json_event_logger(
    *,
    logger: logging.Logger,
    level: int = logging.INFO,
) -> EventObserveHook:
    """
    Builds an EventObserveHook that emits one JSON log line per ExecutionEvent.
    """

    def _log_event(event: ExecutionEvent) -> None:
        if not logger.isEnabledFor(level):
            return
        payload = execution_event_to_dict(event)
        logger.log(level, json.dumps(payload, separators=(",", ":"), sort_keys=True, default=str))

    return _log_event


def compose_event_observers(*observers: EventObserveHook) -> EventObserveHook:
    """
    Composes multiple event observers into a single observer.
    """

    def _composed(event: ExecutionEvent) -> None:
        for observer in observers:
            observer(event)

    return _composed
