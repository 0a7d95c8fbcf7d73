import logging
import os
from typing import Any, Callable, Sequence

from studentdb.command import Command
from studentdb.errors import DatabaseFileNotFoundError
from studentdb.execution.connection import ConnectionSettings
from studentdb.execution.observability import ObservabilitySettings
from studentdb.execution.reader import ResultColumn, ResultReader
from studentdb.execution.sqlite import SqliteExecutor
from studentdb.lifecycle import resolve_database_path

logger = logging.getLogger(__name__)

GREEN = "\033[32m"
RESET = "\033[0m"

# ==================================================
# Value Formatting
# ==================================================


def format_value(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def format_header(columns: Sequence[ResultColumn], *, color: bool = False) -> str:
    """
    Renders columns as {Name_type} entries separated by commas.
    """
    start, end = (GREEN, RESET) if color else ("", "")
    return ",".join(
        f"{{{start}{column.name}{end}_{start}{column.type_name}{end}}}"
        for column in columns
    )


def format_row(row: Sequence[Any]) -> str:
    return ",".join(format_value(value) for value in row)


# ==================================================
# Query Execution
# ==================================================


def open_query(
    query_text: str,
    name: str,
    directory: str | os.PathLike[str] = "",
    *,
    connection_settings: ConnectionSettings | None = None,
    observability_settings: ObservabilitySettings | None = None,
) -> ResultReader:
    """
    Runs query_text verbatim against an existing database and returns a lazy
    reader over its rows. The reader owns the connection; close it, or use it
    as a context manager.
    """
    path = resolve_database_path(name, directory)
    if not path.exists():
        raise DatabaseFileNotFoundError(path, "run a query against it")

    logger.debug("Running query against %s", path)
    executor = SqliteExecutor(
        path,
        connection_settings=connection_settings,
        observability_settings=observability_settings,
    )
    return executor.execute_reader(Command(sql=query_text))


def run_query(
    query_text: str,
    name: str,
    directory: str | os.PathLike[str] = "",
    *,
    write: Callable[[str], Any] = print,
    color: bool = False,
    connection_settings: ConnectionSettings | None = None,
    observability_settings: ObservabilitySettings | None = None,
) -> int:
    """
    Runs query_text and writes the column count, the column header line, and
    one comma-separated line per row. Returns the number of rows written.
    """
    with open_query(
        query_text,
        name,
        directory,
        connection_settings=connection_settings,
        observability_settings=observability_settings,
    ) as reader:
        write(f"Returned # of columns: {reader.field_count:,}")
        write(format_header(reader.columns, color=color))
        for row in reader:
            write(format_row(row))
        row_count = reader.rows_read

    logger.debug("Query returned %d rows", row_count)
    return row_count
