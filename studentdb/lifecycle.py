from datetime import datetime
from decimal import Decimal
import logging
import os
from pathlib import Path
import random

from studentdb.command import Command, DbType, add_command_parameter
from studentdb.errors import DatabaseFileNotFoundError
from studentdb.execution.connection import ConnectionSettings
from studentdb.execution.observability import ObservabilitySettings
from studentdb.execution.sqlite import SqliteExecutor
from studentdb.models import CREATE_STUDENTS_TABLE_SQL, INSERT_STUDENT_SQL, Student

logger = logging.getLogger(__name__)

DATABASE_FILE_EXTENSION = ".sqlite"
DEFAULT_STUDENT_COUNT = 100

BIRTH_YEAR_RANGE = (1980, 2006)
BIRTH_DAY_MAX = 28
GPA_THOUSANDTHS_RANGE = (1000, 4000)

# ==================================================
# Path Resolution
# ==================================================


def resolve_database_path(name: str, directory: str | os.PathLike[str] = "") -> Path:
    """
    Joins directory and name and forces the database file extension,
    replacing any suffix the name already carries. A trailing dot counts as
    an empty suffix, so "TestDB." resolves to "TestDB.sqlite".
    """
    if not name:
        raise ValueError("Database name must not be empty.")
    path = Path(directory) / name
    if path.name.endswith("."):
        path = path.with_name(path.name[:-1])
    return path.with_suffix(DATABASE_FILE_EXTENSION)


# ==================================================
# Seed Data
# ==================================================


def generate_student(index: int, rng: random.Random) -> Student:
    """
    Builds the synthetic student for a seed row index.
    GPA is drawn from [1.000, 4.000] and the birth date's day is capped at 28
    so every year/month combination is valid.
    """
    padded = str(index).zfill(3)
    gpa = Decimal(rng.randint(*GPA_THOUSANDTHS_RANGE)) / Decimal(1000)
    birth_date = datetime(
        rng.randint(*BIRTH_YEAR_RANGE),
        rng.randint(1, 12),
        rng.randint(1, BIRTH_DAY_MAX),
    )
    return Student(
        name=f"Student{index}",
        address=f"6{padded} Some Road Some City Some State Some Zip Some Country",
        phone_number=f"+1-801-800-9{padded}",
        gpa=gpa,
        birth_date=birth_date,
    )


def bind_student(command: Command, student: Student) -> None:
    """
    Replaces the command's parameters with the five typed values of one student.
    """
    command.clear_parameters()
    add_command_parameter(command, DbType.STRING, "@NameParameter", student.name)
    add_command_parameter(command, DbType.STRING, "AddressParameter", student.address)
    add_command_parameter(command, DbType.STRING, "PhoneNumberParameter", student.phone_number)
    add_command_parameter(command, DbType.DECIMAL, "GPAParameter", student.gpa)
    add_command_parameter(command, DbType.DATETIME, "BirthDateParameter", student.birth_date)


# ==================================================
# Database Lifecycle
# ==================================================


def initialize_database(
    name: str,
    directory: str | os.PathLike[str] = "",
    *,
    rng: random.Random | None = None,
    row_count: int = DEFAULT_STUDENT_COUNT,
    connection_settings: ConnectionSettings | None = None,
    observability_settings: ObservabilitySettings | None = None,
) -> Path:
    """
    Creates the database file, the Students table, and row_count seed rows.

    An existing file at the resolved path is deleted first, so calling this
    twice leaves a fresh database. Any failure while creating the file, the
    table, or a row propagates unchanged; a failed insert aborts the rest.

    The inserts share one transaction, so a failed insert also rolls back the
    rows written before it and the file is left with an empty Students table.
    Rows are never committed one at a time.
    """
    if row_count < 0:
        raise ValueError("row_count must be >= 0")

    path = resolve_database_path(name, directory)
    logger.info("Initializing database file %s", path)

    if path.exists():
        logger.info("Database file %s already exists; deleting it", path)
        delete_database(name, directory)

    path.touch(exist_ok=False)
    logger.debug("Created empty database file %s", path)

    generator = rng or random.Random()

    with SqliteExecutor(
        path,
        connection_settings=connection_settings,
        observability_settings=observability_settings,
    ) as executor:
        executor.execute(Command(sql=CREATE_STUDENTS_TABLE_SQL))
        logger.debug("Created Students table in %s", path)

        insert = Command(sql=INSERT_STUDENT_SQL)
        with executor.session():
            for index in range(row_count):
                bind_student(insert, generate_student(index, generator))
                executor.execute(insert)

    logger.info("Inserted %d students into %s", row_count, path)
    return path


def delete_database(name: str, directory: str | os.PathLike[str] = "") -> Path:
    """
    Deletes the database file. A missing file is an error, not a no-op.
    """
    path = resolve_database_path(name, directory)
    logger.info("Deleting database file %s", path)
    if not path.exists():
        raise DatabaseFileNotFoundError(path, "delete it")
    path.unlink()
    return path
