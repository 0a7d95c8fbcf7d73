from studentdb.execution.base import Executor
from studentdb.execution.sqlite import SqliteExecutor
from studentdb.execution.reader import ResultColumn, ResultReader
from studentdb.execution.connection import DEFAULT_COMMAND_TIMEOUT_SECONDS, ConnectionSettings
from studentdb.execution.observability import (
    ExecutionEvent,
    ObservabilitySettings,
    QueryObservation,
    compose_event_observers,
    execution_event_to_dict,
    make_json_event_logger,
)

__all__ = [
    "Executor",
    "SqliteExecutor",
    "ResultColumn",
    "ResultReader",
    "ConnectionSettings",
    "DEFAULT_COMMAND_TIMEOUT_SECONDS",
    "ObservabilitySettings",
    "QueryObservation",
    "ExecutionEvent",
    "compose_event_observers",
    "execution_event_to_dict",
    "make_json_event_logger",
]
