from studentdb.command.command import (
    Command,
    CommandParameter,
    DbType,
    add_command_parameter,
    normalize_parameter_name,
)

__all__ = [
    "Command",
    "CommandParameter",
    "DbType",
    "add_command_parameter",
    "normalize_parameter_name",
]
