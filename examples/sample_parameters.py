"""
Parameter binding example: one reused command, parameters cleared per row.

Run:
    python examples/sample_parameters.py
"""

from datetime import datetime
from decimal import Decimal

from studentdb.command import Command, DbType, add_command_parameter
from studentdb.execution.sqlite import SqliteExecutor
from studentdb.lifecycle import delete_database, resolve_database_path

DATABASE_NAME = "sample-parameters"


def main() -> None:
    try:
        with SqliteExecutor(resolve_database_path(DATABASE_NAME)) as executor:
            executor.execute(Command(sql="DROP TABLE IF EXISTS grades"))
            executor.execute(Command(sql="CREATE TABLE grades (name VARCHAR(50), gpa DECIMAL(15,4), taken DATETIME)"))

            insert = Command(sql="INSERT INTO grades (name, gpa, taken) VALUES (@Name, @Gpa, @Taken)")
            with executor.session():
                for name, gpa in [("Ada", "3.900"), ("Grace", "3.750"), ("Linus", "2.125")]:
                    insert.clear_parameters()
                    add_command_parameter(insert, DbType.STRING, "@Name", name)
                    add_command_parameter(insert, DbType.DECIMAL, "@Gpa", Decimal(gpa))
                    add_command_parameter(insert, DbType.DATETIME, "@Taken", datetime(2024, 6, 1))
                    executor.execute(insert)

            query = Command(sql="SELECT name, gpa, taken FROM grades ORDER BY gpa DESC")
            with executor.execute_reader(query) as reader:
                print([f"{column.name}:{column.type_name}" for column in reader.columns])
                for row in reader:
                    print(row)
    finally:
        if resolve_database_path(DATABASE_NAME).exists():
            delete_database(DATABASE_NAME)


if __name__ == "__main__":
    main()
