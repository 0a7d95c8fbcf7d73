from studentdb.command import Command, CommandParameter, DbType, add_command_parameter
from studentdb.errors import (
    DatabaseFileNotFoundError,
    ParameterBindingError,
    QueryResourceNotFoundError,
    ResourceClosedError,
    StudentDbError,
)
from studentdb.execution import (
    ConnectionSettings,
    ObservabilitySettings,
    ResultColumn,
    ResultReader,
    SqliteExecutor,
)
from studentdb.lifecycle import (
    delete_database,
    generate_student,
    initialize_database,
    resolve_database_path,
)
from studentdb.models import Student
from studentdb.queries import read_query
from studentdb.query_runner import format_header, format_row, format_value, open_query, run_query

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "Command",
    "CommandParameter",
    "DbType",
    "add_command_parameter",
    "StudentDbError",
    "DatabaseFileNotFoundError",
    "ParameterBindingError",
    "QueryResourceNotFoundError",
    "ResourceClosedError",
    "ConnectionSettings",
    "ObservabilitySettings",
    "ResultColumn",
    "ResultReader",
    "SqliteExecutor",
    "Student",
    "initialize_database",
    "delete_database",
    "generate_student",
    "resolve_database_path",
    "read_query",
    "open_query",
    "run_query",
    "format_header",
    "format_row",
    "format_value",
]
