from abc import ABC, abstractmethod
from contextlib import contextmanager
import time
from typing import Any, Callable, Iterator, Mapping, TypeVar
from uuid import uuid4

from studentdb.command.command import Command
from studentdb.execution.observability import (
    ExecutionEvent,
    ObservabilitySettings,
    QueryObservation,
    now_iso_utc,
)
from studentdb.execution.reader import ResultReader

T = TypeVar("T")

# ==================================================
# Base Executor
# ==================================================


class Executor(ABC):
    """
    Abstract base class for running commands against a database file.

    Outside a session, every call acquires its own connection and releases it
    before returning. Inside session(), calls share one connection that is
    released when the session block exits.
    """

    observability_settings: ObservabilitySettings

    @abstractmethod
    def execute(self, command: Command) -> int:
        """
        Executes a command that returns no rows and reports rows affected.
        """
        pass

    @abstractmethod
    def execute_reader(self, command: Command) -> ResultReader:
        """
        Executes a command and returns a forward-only reader over its rows.
        The reader owns its connection until it is closed.
        """
        pass

    @abstractmethod
    def begin(self) -> None:
        """
        Opens a session connection and starts an explicit transaction on it.
        """
        pass

    @abstractmethod
    def commit(self) -> None:
        """
        Commits the session transaction and releases the session connection.
        """
        pass

    @abstractmethod
    def rollback(self) -> None:
        """
        Rolls back the session transaction and releases the session connection.
        """
        pass

    @abstractmethod
    def _has_active_session(self) -> bool:
        pass

    @contextmanager
    def session(self) -> Iterator["Executor"]:
        """
        Shares one connection across the calls made inside the block.
        Commits on a clean exit, rolls back when the block raises.
        """
        self.begin()
        try:
            yield self
        except BaseException:
            self.rollback()
            raise
        self.commit()

    # ==================================================
    # Observability Helpers
    # ==================================================

    def _next_query_id(self) -> str:
        return uuid4().hex

    def _metadata(self, override: Mapping[str, Any] | None = None) -> dict[str, Any]:
        settings = getattr(self, "observability_settings", None)
        base = dict(settings.metadata) if isinstance(settings, ObservabilitySettings) else {}
        if override:
            base.update(override)
        return base

    def _database_name(self) -> str:
        return "unknown"

    def _emit_event(self, event: str, *, success: bool, **kwargs: Any) -> None:
        settings = getattr(self, "observability_settings", None)
        if not isinstance(settings, ObservabilitySettings) or settings.event_observer is None:
            return

        payload = ExecutionEvent(
            timestamp=now_iso_utc(),
            event=event,
            database=self._database_name(),
            executor=self.__class__.__name__,
            success=success,
            metadata=self._metadata(),
            **kwargs,
        )
        settings.event_observer(payload)

    def _observe_query(
        self,
        *,
        operation: str,
        command: Command,
        run: Callable[[], T],
    ) -> T:
        settings = getattr(self, "observability_settings", None)
        if not isinstance(settings, ObservabilitySettings):
            return run()

        query_id = self._next_query_id()
        self._emit_event(
            "query.start",
            success=True,
            operation=operation,
            query_id=query_id,
        )

        started = time.perf_counter()
        error: Exception | None = None
        try:
            return run()
        except Exception as exc:
            error = exc
            raise
        finally:
            duration_ms = (time.perf_counter() - started) * 1000
            if settings.query_observer is not None:
                settings.query_observer(
                    QueryObservation(
                        database=self._database_name(),
                        operation=operation,
                        sql=command.sql,
                        param_count=len(command.parameters),
                        duration_ms=duration_ms,
                        succeeded=error is None,
                        in_session=self._has_active_session(),
                        metadata=self._metadata(),
                        error_type=type(error).__name__ if error is not None else None,
                        error_message=str(error) if error is not None else None,
                    )
                )
            self._emit_event(
                "query.end",
                success=error is None,
                operation=operation,
                query_id=query_id,
                duration_ms=duration_ms,
                error_type=type(error).__name__ if error is not None else None,
                error_message=str(error) if error is not None else None,
            )

    # ==================================================
    # Lifecycle Controls
    # ==================================================

    def close(self) -> None:
        """
        Releases executor-owned resources.
        Subclasses should override when they hold lifecycle state.
        """
        return None

    def __enter__(self) -> "Executor":
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        _ = exc_type
        _ = exc
        _ = tb
        self.close()
