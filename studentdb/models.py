from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

# ==================================================
# Student Table
# ==================================================

STUDENTS_TABLE = "Students"

CREATE_STUDENTS_TABLE_SQL = """
CREATE TABLE Students
(
  ID INTEGER PRIMARY KEY,
  Name VARCHAR(50),
  Address VARCHAR(300),
  PhoneNumber VARCHAR(12),
  GPA DECIMAL(15,4),
  BirthDate DATETIME
)"""

INSERT_STUDENT_SQL = """
INSERT INTO Students
(Name, Address, PhoneNumber, GPA, BirthDate)
VALUES
(@NameParameter, @AddressParameter, @PhoneNumberParameter, @GPAParameter, @BirthDateParameter)"""


@dataclass(frozen=True)
class Student:
    """
    One row of the Students table. ID is assigned by the database on insert.
    """

    name: str
    address: str
    phone_number: str
    gpa: Decimal
    birth_date: datetime
    id: int | None = None
