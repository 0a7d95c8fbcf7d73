from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from studentdb.errors import ParameterBindingError

_NAME_PREFIXES = ("@", ":", "$")

# ==================================================
# Parameter Types
# ==================================================


class DbType(Enum):
    """
    Declared type of a command parameter.
    """

    STRING = "string"
    INT32 = "int32"
    INT64 = "int64"
    DOUBLE = "double"
    DECIMAL = "decimal"
    DATETIME = "datetime"
    DATE = "date"
    BOOLEAN = "boolean"
    BINARY = "binary"


def normalize_parameter_name(name: str) -> str:
    stripped = name.strip()
    if stripped[:1] in _NAME_PREFIXES:
        stripped = stripped[1:]
    return stripped


def _to_decimal_text(name: str, value: Any) -> str:
    if isinstance(value, float):
        value = repr(value)
    try:
        number = Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ParameterBindingError(name, f"cannot bind {value!r} as DECIMAL") from exc
    if not number.is_finite():
        raise ParameterBindingError(name, f"cannot bind non-finite {value!r} as DECIMAL")
    return str(number)


def _to_datetime_text(name: str, value: Any) -> str:
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day).isoformat(sep=" ")
    raise ParameterBindingError(name, f"cannot bind {type(value).__name__} as DATETIME")


def _to_date_text(name: str, value: Any) -> str:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    raise ParameterBindingError(name, f"cannot bind {type(value).__name__} as DATE")


def _to_integer(name: str, value: Any, bits: int) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, str, Decimal)):
        raise ParameterBindingError(name, f"cannot bind {value!r} as INT{bits}")
    if isinstance(value, Decimal) and (not value.is_finite() or value != value.to_integral_value()):
        raise ParameterBindingError(name, f"{value!r} is not a whole number")
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ParameterBindingError(name, f"cannot bind {value!r} as INT{bits}") from exc
    limit = 2 ** (bits - 1)
    if not -limit <= number < limit:
        raise ParameterBindingError(name, f"{number} is out of range for INT{bits}")
    return number


@dataclass
class CommandParameter:
    """
    A typed, named value attached to a pending command.
    """

    db_type: DbType
    name: str
    value: Any

    @property
    def normalized_name(self) -> str:
        return normalize_parameter_name(self.name)

    def to_storage(self) -> Any:
        """
        Converts the value to what sqlite3 binds for the declared type.
        """
        name = self.normalized_name
        value = self.value
        if value is None:
            return None

        if self.db_type is DbType.STRING:
            return str(value)
        if self.db_type is DbType.INT32:
            return _to_integer(name, value, 32)
        if self.db_type is DbType.INT64:
            return _to_integer(name, value, 64)
        if self.db_type is DbType.DOUBLE:
            try:
                return float(value)
            except (TypeError, ValueError) as exc:
                raise ParameterBindingError(name, f"cannot bind {value!r} as DOUBLE") from exc
        if self.db_type is DbType.DECIMAL:
            return _to_decimal_text(name, value)
        if self.db_type is DbType.DATETIME:
            return _to_datetime_text(name, value)
        if self.db_type is DbType.DATE:
            return _to_date_text(name, value)
        if self.db_type is DbType.BOOLEAN:
            return 1 if value else 0
        if self.db_type is DbType.BINARY:
            if isinstance(value, (bytes, bytearray, memoryview)):
                return bytes(value)
            raise ParameterBindingError(name, f"cannot bind {type(value).__name__} as BINARY")
        raise ParameterBindingError(name, f"unsupported type {self.db_type!r}")


# ==================================================
# Pending Command
# ==================================================


@dataclass
class Command:
    """
    SQL text plus the typed parameters bound to it before execution.
    timeout_seconds overrides the executor's command timeout; 0 disables it.
    """

    sql: str
    parameters: list[CommandParameter] = field(default_factory=list)
    timeout_seconds: float | None = None

    def clear_parameters(self) -> None:
        self.parameters.clear()

    def bound_parameters(self) -> dict[str, Any]:
        """
        Returns the storage values keyed by normalized parameter name.
        """
        bound: dict[str, Any] = {}
        for parameter in self.parameters:
            name = parameter.normalized_name
            if not name:
                raise ParameterBindingError(parameter.name, "name must not be empty")
            if name in bound:
                raise ParameterBindingError(name, "bound more than once")
            bound[name] = parameter.to_storage()
        return bound


def add_command_parameter(command: Command, db_type: DbType, name: str, value: Any) -> CommandParameter:
    """
    Constructs a typed parameter and attaches it to the command's parameter set.
    """
    parameter = CommandParameter(db_type=db_type, name=name, value=value)
    command.parameters.append(parameter)
    return parameter
