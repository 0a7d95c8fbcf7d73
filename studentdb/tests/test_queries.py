import pytest

from studentdb.errors import QueryResourceNotFoundError
from studentdb.queries import (
    SELECT_ALL_STUDENTS,
    SELECT_HONOR_ROLL_BY_GPA,
    SELECT_OLDEST_TEN_BY_BIRTH_DATE,
    list_queries,
    read_query,
)


def test_bundled_queries_are_listed():
    assert list_queries() == [
        SELECT_ALL_STUDENTS,
        SELECT_HONOR_ROLL_BY_GPA,
        SELECT_OLDEST_TEN_BY_BIRTH_DATE,
    ]


def test_read_query_returns_sql_text():
    assert read_query(SELECT_ALL_STUDENTS).strip() == "SELECT * FROM Students;"
    honor_roll = read_query(SELECT_HONOR_ROLL_BY_GPA)
    assert "GPA >= 3.0" in honor_roll
    assert "ORDER BY GPA DESC" in honor_roll
    oldest = read_query(SELECT_OLDEST_TEN_BY_BIRTH_DATE)
    assert "ORDER BY BirthDate ASC" in oldest
    assert "LIMIT 10" in oldest


@pytest.mark.parametrize("name", ["missing.sql", "", "../__init__.py"])
def test_read_query_unknown_resource(name):
    with pytest.raises(QueryResourceNotFoundError):
        read_query(name)
