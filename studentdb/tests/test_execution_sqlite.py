import sqlite3
from datetime import datetime
from decimal import Decimal
from pathlib import Path
import time
from uuid import uuid4

import pytest

from studentdb.command import Command, DbType, add_command_parameter
from studentdb.errors import ResourceClosedError
from studentdb.execution.connection import ConnectionSettings
from studentdb.execution.observability import ExecutionEvent, ObservabilitySettings
from studentdb.execution.sqlite import SqliteExecutor

ENDLESS_QUERY = "WITH RECURSIVE c(x) AS (SELECT 1 UNION ALL SELECT x + 1 FROM c) SELECT count(*) FROM c"
STREAMED_QUERY = "WITH RECURSIVE c(x) AS (SELECT 1 UNION ALL SELECT x + 1 FROM c WHERE x < 3000000) SELECT x FROM c"


def _test_db_path(prefix: str) -> Path:
    base = Path("static") / "test-sqlite"
    base.mkdir(parents=True, exist_ok=True)
    return base / f"{prefix}_{uuid4().hex}.sqlite"


def _create_table(executor: SqliteExecutor) -> None:
    executor.execute(Command(sql="CREATE TABLE t (id INTEGER PRIMARY KEY, value TEXT, amount DECIMAL(15,4), at DATETIME)"))


def test_execute_and_read_back_with_declared_type_conversion():
    db_path = _test_db_path("exec")
    try:
        executor = SqliteExecutor(db_path)
        _create_table(executor)

        insert = Command(sql="INSERT INTO t (value, amount, at) VALUES (@Value, @Amount, @At)")
        add_command_parameter(insert, DbType.STRING, "@Value", "a")
        add_command_parameter(insert, DbType.DECIMAL, "Amount", Decimal("3.125"))
        add_command_parameter(insert, DbType.DATETIME, "At", datetime(1999, 12, 31))
        assert executor.execute(insert) == 1

        with executor.execute_reader(Command(sql="SELECT id, value, amount, at FROM t")) as reader:
            rows = list(reader)

        assert rows == [(1, "a", Decimal("3.125"), datetime(1999, 12, 31))]
    finally:
        if db_path.exists():
            db_path.unlink()


def test_reader_reports_column_names_and_runtime_types():
    db_path = _test_db_path("columns")
    try:
        executor = SqliteExecutor(db_path)
        _create_table(executor)
        executor.execute(Command(sql="INSERT INTO t (value, amount, at) VALUES ('v', '1.5', '2000-01-02 00:00:00')"))

        with executor.execute_reader(Command(sql="SELECT * FROM t")) as reader:
            assert [column.name for column in reader.columns] == ["id", "value", "amount", "at"]
            assert [column.type_name for column in reader.columns] == ["int", "str", "Decimal", "datetime"]
            assert reader.field_count == 4
    finally:
        if db_path.exists():
            db_path.unlink()


def test_reader_on_empty_result_has_columns_and_no_rows():
    db_path = _test_db_path("empty")
    try:
        executor = SqliteExecutor(db_path)
        _create_table(executor)

        with executor.execute_reader(Command(sql="SELECT id, value FROM t")) as reader:
            assert [column.type_name for column in reader.columns] == ["object", "object"]
            assert list(reader) == []
    finally:
        if db_path.exists():
            db_path.unlink()


def test_reader_is_single_pass():
    db_path = _test_db_path("single_pass")
    try:
        executor = SqliteExecutor(db_path)
        _create_table(executor)
        for value in ("a", "b", "c"):
            executor.execute(Command(sql=f"INSERT INTO t (value) VALUES ('{value}')"))

        with executor.execute_reader(Command(sql="SELECT value FROM t ORDER BY id")) as reader:
            first = next(reader)
            remaining = list(reader)
            again = list(reader)

        assert first == ("a",)
        assert remaining == [("b",), ("c",)]
        assert again == []
        assert reader.rows_read == 3
    finally:
        if db_path.exists():
            db_path.unlink()


def test_reader_raises_after_close_with_rows_left():
    db_path = _test_db_path("closed_reader")
    try:
        executor = SqliteExecutor(db_path)
        _create_table(executor)
        executor.execute(Command(sql="INSERT INTO t (value) VALUES ('a')"))
        executor.execute(Command(sql="INSERT INTO t (value) VALUES ('b')"))

        reader = executor.execute_reader(Command(sql="SELECT value FROM t"))
        reader.close()
        assert reader.closed is True
        with pytest.raises(ResourceClosedError):
            next(reader)
    finally:
        if db_path.exists():
            db_path.unlink()


def test_reader_releases_connection_on_close_and_on_error():
    db_path = _test_db_path("release")
    events: list[ExecutionEvent] = []
    try:
        executor = SqliteExecutor(
            db_path,
            observability_settings=ObservabilitySettings(event_observer=events.append),
        )
        _create_table(executor)
        events.clear()

        with pytest.raises(KeyError):
            with executor.execute_reader(Command(sql="SELECT id FROM t")):
                raise KeyError("boom")

        names = [event.event for event in events]
        assert names.count("connection.acquire.end") == 1
        assert names.count("connection.close") == 1
        assert names[-1] == "connection.close"
    finally:
        if db_path.exists():
            db_path.unlink()


def test_failed_statement_releases_connection_and_propagates_driver_error():
    db_path = _test_db_path("driver_error")
    events: list[ExecutionEvent] = []
    try:
        executor = SqliteExecutor(
            db_path,
            observability_settings=ObservabilitySettings(event_observer=events.append),
        )
        with pytest.raises(sqlite3.OperationalError):
            executor.execute_reader(Command(sql="SELECT * FROM missing"))

        names = [event.event for event in events]
        assert "connection.close" in names
    finally:
        if db_path.exists():
            db_path.unlink()


def test_command_timeout_interrupts_long_statement():
    db_path = _test_db_path("timeout")
    try:
        executor = SqliteExecutor(db_path, connection_settings=ConnectionSettings(command_timeout_seconds=0.05))
        with pytest.raises(sqlite3.OperationalError, match="interrupted"):
            executor.execute_reader(Command(sql=ENDLESS_QUERY))
    finally:
        if db_path.exists():
            db_path.unlink()


def test_command_level_timeout_overrides_settings():
    db_path = _test_db_path("timeout_override")
    try:
        executor = SqliteExecutor(db_path)
        with pytest.raises(sqlite3.OperationalError, match="interrupted"):
            executor.execute_reader(Command(sql=ENDLESS_QUERY, timeout_seconds=0.05))
    finally:
        if db_path.exists():
            db_path.unlink()


def test_command_timeout_covers_rows_fetched_after_the_first():
    db_path = _test_db_path("timeout_stream")
    try:
        executor = SqliteExecutor(db_path, connection_settings=ConnectionSettings(command_timeout_seconds=0.05))
        with executor.execute_reader(Command(sql=STREAMED_QUERY)) as reader:
            assert next(iter(reader)) == (1,)
            with pytest.raises(sqlite3.OperationalError, match="interrupted"):
                for _ in reader:
                    pass
    finally:
        if db_path.exists():
            db_path.unlink()


def test_command_timeout_ignores_time_spent_between_fetches():
    db_path = _test_db_path("timeout_consumer")
    try:
        executor = SqliteExecutor(db_path, connection_settings=ConnectionSettings(command_timeout_seconds=0.2))
        query = "WITH RECURSIVE c(x) AS (SELECT 1 UNION ALL SELECT x + 1 FROM c WHERE x < 5) SELECT x FROM c"
        with executor.execute_reader(Command(sql=query)) as reader:
            rows = [next(reader)]
            time.sleep(0.3)
            rows.extend(reader)
        assert rows == [(1,), (2,), (3,), (4,), (5,)]
    finally:
        if db_path.exists():
            db_path.unlink()


def test_session_commits_on_clean_exit():
    db_path = _test_db_path("session_commit")
    try:
        executor = SqliteExecutor(db_path)
        _create_table(executor)
        with executor.session():
            executor.execute(Command(sql="INSERT INTO t (value) VALUES ('kept')"))

        verify = sqlite3.connect(str(db_path))
        try:
            rows = verify.execute("SELECT value FROM t").fetchall()
        finally:
            verify.close()
        assert rows == [("kept",)]
    finally:
        if db_path.exists():
            db_path.unlink()


def test_session_rolls_back_when_block_raises():
    db_path = _test_db_path("session_rollback")
    try:
        executor = SqliteExecutor(db_path)
        _create_table(executor)
        with pytest.raises(sqlite3.IntegrityError):
            with executor.session():
                executor.execute(Command(sql="INSERT INTO t (id, value) VALUES (1, 'x')"))
                executor.execute(Command(sql="INSERT INTO t (id, value) VALUES (1, 'y')"))

        with executor.execute_reader(Command(sql="SELECT count(*) FROM t")) as reader:
            assert list(reader) == [(0,)]
    finally:
        if db_path.exists():
            db_path.unlink()


def test_session_errors():
    db_path = _test_db_path("session_errors")
    try:
        executor = SqliteExecutor(db_path)
        with pytest.raises(RuntimeError):
            executor.commit()
        with pytest.raises(RuntimeError):
            executor.rollback()

        executor.begin()
        with pytest.raises(RuntimeError):
            executor.begin()
        executor.rollback()
    finally:
        if db_path.exists():
            db_path.unlink()


def test_closed_executor_rejects_commands():
    db_path = _test_db_path("closed")
    try:
        with SqliteExecutor(db_path) as executor:
            _create_table(executor)

        with pytest.raises(ResourceClosedError):
            executor.execute(Command(sql="SELECT 1"))
    finally:
        if db_path.exists():
            db_path.unlink()


def test_connection_settings_validation():
    with pytest.raises(ValueError):
        ConnectionSettings(command_timeout_seconds=-1)
    with pytest.raises(ValueError):
        ConnectionSettings(connect_timeout_seconds=-0.5)
    with pytest.raises(ValueError):
        ConnectionSettings(progress_interval=0)


def test_declared_type_converters_apply_to_any_connection():
    db_path = _test_db_path("converters")
    try:
        conn = sqlite3.connect(str(db_path), detect_types=sqlite3.PARSE_DECLTYPES)
        try:
            conn.execute("CREATE TABLE other (amount DECIMAL(15,4), at DATETIME)")
            conn.execute("INSERT INTO other VALUES ('2.5', '2001-02-03 04:05:06')")
            assert conn.execute("SELECT amount, at FROM other").fetchone() == (
                Decimal("2.5"),
                datetime(2001, 2, 3, 4, 5, 6),
            )
        finally:
            conn.close()
    finally:
        if db_path.exists():
            db_path.unlink()
