import os
import random
from pathlib import Path
from uuid import uuid4

import pytest

from studentdb.lifecycle import initialize_database, resolve_database_path

# Override via environment variables to place test databases elsewhere or change the seed.
SQLITE_TEST_DIR = os.getenv("STUDENTDB_TEST_DIR", os.path.join("static", "test-sqlite"))
STUDENT_SEED = int(os.getenv("STUDENTDB_TEST_SEED", "3520"))


@pytest.fixture(scope="session")
def sqlite_test_dir() -> Path:
    """
    Directory that holds every database file created by the integration tests.
    """
    path = Path(SQLITE_TEST_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


@pytest.fixture(scope="session")
def student_seed() -> int:
    return STUDENT_SEED


@pytest.fixture(scope="function")
def database_name(sqlite_test_dir):
    """
    Yields a unique database name.
    Any file left behind under that name is removed after the test.
    """
    name = f"TestDB_{uuid4().hex}"
    yield name
    path = resolve_database_path(name, sqlite_test_dir)
    if path.exists():
        path.unlink()


@pytest.fixture(scope="function")
def seeded_database(database_name, sqlite_test_dir, student_seed):
    """
    Initializes a 100-row student database with a fixed seed and returns its name.
    """
    initialize_database(database_name, sqlite_test_dir, rng=random.Random(student_seed))
    return database_name
