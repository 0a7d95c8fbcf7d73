from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from pathlib import Path
import sqlite3
import time
from typing import Iterator
from uuid import uuid4

from studentdb.command.command import Command
from studentdb.errors import ResourceClosedError
from studentdb.execution.base import Executor
from studentdb.execution.connection import ConnectionSettings
from studentdb.execution.observability import ObservabilitySettings
from studentdb.execution.reader import ResultReader

# ==================================================
# Declared-Type Converters
# ==================================================


def _convert_decimal(value: bytes) -> Decimal:
    return Decimal(value.decode("utf-8"))


def _convert_datetime(value: bytes) -> datetime:
    return datetime.fromisoformat(value.decode("utf-8"))


# sqlite3 matches converters on the first word of the declared column type,
# so DECIMAL(15,4) resolves to DECIMAL. The registry is process-wide: importing
# this module applies these converters to every PARSE_DECLTYPES connection in
# the process, not only the ones opened here.
sqlite3.register_converter("DECIMAL", _convert_decimal)
sqlite3.register_converter("DATETIME", _convert_datetime)


class _CommandTimer:
    """
    Progress handler that interrupts a statement once its timeout elapses.

    Only time spent while running counts toward the timeout. A reader pauses
    the timer between row fetches so a slow consumer is not charged for it.
    """

    def __init__(self, timeout_seconds: float) -> None:
        self.timeout_seconds = timeout_seconds
        self._elapsed = 0.0
        self._started_at: float | None = time.monotonic()

    def pause(self) -> None:
        if self._started_at is not None:
            self._elapsed += time.monotonic() - self._started_at
            self._started_at = None

    def resume(self) -> None:
        if self._started_at is None:
            self._started_at = time.monotonic()

    def __call__(self) -> int:
        if self.timeout_seconds <= 0 or self._started_at is None:
            return 0
        if self._elapsed + time.monotonic() - self._started_at > self.timeout_seconds:
            return 1
        return 0


# ==================================================
# SQLite Executor
# ==================================================


class SqliteExecutor(Executor):
    """
    An executor for a single SQLite database file using the standard library 'sqlite3' module.
    """

    def __init__(
        self,
        database_path: str | Path,
        connection_settings: ConnectionSettings | None = None,
        observability_settings: ObservabilitySettings | None = None,
    ) -> None:
        self.database_path = Path(database_path)
        self.connection_settings = connection_settings or ConnectionSettings()
        self.observability_settings = observability_settings or ObservabilitySettings()
        self._closed = False
        self._session_connection: sqlite3.Connection | None = None
        self._session_id: str | None = None
        self._session_started_at: float | None = None

    def _database_name(self) -> str:
        return str(self.database_path)

    def _ensure_open(self) -> None:
        if self._closed:
            raise ResourceClosedError("Executor is closed.")

    def _connect(self) -> sqlite3.Connection:
        self._emit_event("connection.acquire.start", success=True)
        timeout = self.connection_settings.connect_timeout_seconds
        if timeout is None:
            conn = sqlite3.connect(str(self.database_path), detect_types=sqlite3.PARSE_DECLTYPES)
        else:
            conn = sqlite3.connect(
                str(self.database_path),
                timeout=timeout,
                detect_types=sqlite3.PARSE_DECLTYPES,
            )
        self._emit_event(
            "connection.acquire.end",
            success=True,
            connection_id=str(id(conn)),
        )
        return conn

    def _has_active_session(self) -> bool:
        return self._session_connection is not None

    def _get_connection_for_command(self) -> tuple[sqlite3.Connection, bool]:
        """
        Returns the connection to run on and whether the caller owns it.
        """
        self._ensure_open()
        if self._session_connection is not None:
            return self._session_connection, False
        return self._connect(), True

    def _release_connection(self, conn: sqlite3.Connection, owned: bool) -> None:
        if not owned:
            return
        self._emit_event("connection.close", success=True, connection_id=str(id(conn)))
        conn.close()

    def _install_timer(self, conn: sqlite3.Connection, command: Command) -> _CommandTimer:
        timeout = command.timeout_seconds
        if timeout is None:
            timeout = self.connection_settings.command_timeout_seconds
        timer = _CommandTimer(timeout)
        conn.set_progress_handler(timer, self.connection_settings.progress_interval)
        return timer

    def _remove_timer(self, conn: sqlite3.Connection) -> None:
        conn.set_progress_handler(None, self.connection_settings.progress_interval)

    @contextmanager
    def _command_timeout(self, conn: sqlite3.Connection, command: Command) -> Iterator[None]:
        self._install_timer(conn, command)
        try:
            yield
        finally:
            self._remove_timer(conn)

    def execute(self, command: Command) -> int:
        """
        Runs a statement that returns no rows.
        Returns the affected row count, or -1 where sqlite3 reports none (DDL).
        """
        return self._observe_query(
            operation="execute",
            command=command,
            run=lambda: self._execute_observed(command),
        )

    def _execute_observed(self, command: Command) -> int:
        parameters = command.bound_parameters()
        conn, owned = self._get_connection_for_command()
        try:
            with self._command_timeout(conn, command):
                cur = conn.execute(command.sql, parameters)
            try:
                row_count = cur.rowcount
            finally:
                cur.close()
            if owned:
                conn.commit()
            return row_count
        finally:
            self._release_connection(conn, owned)

    def execute_reader(self, command: Command) -> ResultReader:
        return self._observe_query(
            operation="execute_reader",
            command=command,
            run=lambda: self._execute_reader_observed(command),
        )

    def _execute_reader_observed(self, command: Command) -> ResultReader:
        parameters = command.bound_parameters()
        conn, owned = self._get_connection_for_command()
        # The timer stays installed until the reader closes; it runs only while
        # the statement executes or a row is being fetched.
        try:
            timer = self._install_timer(conn, command)
            cur = conn.execute(command.sql, parameters)
            reader = ResultReader(
                cur,
                on_close=lambda: self._close_reader_connection(conn, owned),
                fetch_timer=timer,
            )
        except BaseException:
            self._close_reader_connection(conn, owned)
            raise
        return reader

    def _close_reader_connection(self, conn: sqlite3.Connection, owned: bool) -> None:
        try:
            self._remove_timer(conn)
        finally:
            self._release_connection(conn, owned)

    def begin(self) -> None:
        self._ensure_open()
        if self._has_active_session():
            raise RuntimeError("Session already active.")

        conn = self._connect()
        try:
            conn.execute("BEGIN")
        except BaseException:
            self._release_connection(conn, True)
            raise
        self._session_connection = conn
        self._session_id = uuid4().hex
        self._session_started_at = time.perf_counter()
        self._emit_event(
            "session.begin",
            success=True,
            session_id=self._session_id,
        )

    def _require_active_session_connection(self) -> sqlite3.Connection:
        self._ensure_open()
        if self._session_connection is None:
            raise RuntimeError("No active session. Call begin() first.")
        return self._session_connection

    def _finalize_session(self) -> None:
        conn = self._session_connection
        if conn is None:
            return
        self._session_connection = None
        self._session_id = None
        self._session_started_at = None
        self._release_connection(conn, True)

    def _session_duration_ms(self) -> float | None:
        started_at = self._session_started_at
        return None if started_at is None else (time.perf_counter() - started_at) * 1000

    def commit(self) -> None:
        conn = self._require_active_session_connection()
        session_id = self._session_id
        try:
            conn.commit()
            self._emit_event(
                "session.commit",
                success=True,
                session_id=session_id,
                duration_ms=self._session_duration_ms(),
            )
        finally:
            self._finalize_session()

    def rollback(self) -> None:
        conn = self._require_active_session_connection()
        session_id = self._session_id
        try:
            conn.rollback()
            self._emit_event(
                "session.rollback",
                success=True,
                session_id=session_id,
                duration_ms=self._session_duration_ms(),
            )
        finally:
            self._finalize_session()

    def close(self) -> None:
        if self._closed:
            return
        try:
            if self._session_connection is not None:
                self.rollback()
        finally:
            self._closed = True
