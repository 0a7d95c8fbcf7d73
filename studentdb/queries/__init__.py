from importlib import resources
import logging

from studentdb.errors import QueryResourceNotFoundError

logger = logging.getLogger(__name__)

SELECT_ALL_STUDENTS = "001SelectStarFromStudentsSimple.sql"
SELECT_HONOR_ROLL_BY_GPA = "002SelectNameGPAFromStudentsWhereGPASortByGPA.sql"
SELECT_OLDEST_TEN_BY_BIRTH_DATE = "003SelectNameBirthdayFromStudentsWhereLimit10GPAASC.sql"


def read_query(resource_name: str) -> str:
    """
    Returns the text of a bundled .sql resource.
    """
    logger.debug("Reading query resource %s", resource_name)
    if not resource_name or "/" in resource_name or "\\" in resource_name:
        raise QueryResourceNotFoundError(resource_name)
    resource = resources.files(__name__).joinpath("sql").joinpath(resource_name)
    if not resource.is_file():
        raise QueryResourceNotFoundError(resource_name)
    return resource.read_text(encoding="utf-8")


def list_queries() -> list[str]:
    return sorted(
        entry.name
        for entry in resources.files(__name__).joinpath("sql").iterdir()
        if entry.name.endswith(".sql")
    )
