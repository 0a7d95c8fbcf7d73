import logging
import random
from typing import Any, Callable

from studentdb.config import DemoConfig
from studentdb.execution.connection import ConnectionSettings
from studentdb.execution.observability import ObservabilitySettings, make_json_event_logger
from studentdb.lifecycle import delete_database, initialize_database, resolve_database_path
from studentdb.queries import (
    SELECT_ALL_STUDENTS,
    SELECT_HONOR_ROLL_BY_GPA,
    SELECT_OLDEST_TEN_BY_BIRTH_DATE,
    read_query,
)
from studentdb.query_runner import run_query

BLUE = "\033[34m"
RESET = "\033[0m"

QUERY_STEPS = [
    ("Running Query 1 - Select all data, no filter, no sort.", SELECT_ALL_STUDENTS),
    ("Running Query 2 - Select name, gpa, where GPA >= 3.0, sorted by GPA DESC.", SELECT_HONOR_ROLL_BY_GPA),
    ("Running Query 3 - Select name, BirthDate, LIMIT 10, sorted by BirthDate ASC.", SELECT_OLDEST_TEN_BY_BIRTH_DATE),
]


def _configure_logging(config: DemoConfig) -> ObservabilitySettings:
    logging.basicConfig(level=config.log_level, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    events_logger = logging.getLogger("studentdb.events")
    return ObservabilitySettings(
        event_observer=make_json_event_logger(logger=events_logger, level=logging.DEBUG),
        metadata={"app": "studentdb-demo"},
    )


def run_demo(
    config: DemoConfig,
    *,
    write: Callable[[str], Any] = print,
    wait: Callable[[str], Any] = input,
    color: bool = True,
    observability_settings: ObservabilitySettings | None = None,
) -> None:
    """
    Initializes the database, runs the three bundled queries, and deletes it.
    Every error ends the run.
    """

    def pause(prompt: str) -> None:
        if config.pause:
            wait(prompt)
        else:
            write(prompt)

    def end_step() -> None:
        pause("Done. Press Enter to run next step.")
        write("")
        write("")

    connection_settings = ConnectionSettings(command_timeout_seconds=config.command_timeout_seconds)
    rng = random.Random(config.seed) if config.seed is not None else None

    write("InitializeDB")
    write(f"DB File Name: {resolve_database_path(config.database_name, config.directory)}")
    initialize_database(
        config.database_name,
        config.directory,
        rng=rng,
        connection_settings=connection_settings,
        observability_settings=observability_settings,
    )
    end_step()

    for title, resource_name in QUERY_STEPS:
        write(title)
        write(f"Reading Resource: {resource_name}")
        query_text = read_query(resource_name)
        write("Executing Query:")
        write("")
        write(f"{BLUE}{query_text}{RESET}" if color else query_text)
        pause("Press Enter to print results:")
        write("")
        run_query(
            query_text,
            config.database_name,
            config.directory,
            write=write,
            color=color,
            connection_settings=connection_settings,
            observability_settings=observability_settings,
        )
        end_step()

    write("DeleteDB")
    write(f"DB File Name: {delete_database(config.database_name, config.directory)}")
    write("")
    pause("Press Enter to terminate.")


def main() -> None:
    config = DemoConfig.from_env()
    observability_settings = _configure_logging(config)
    run_demo(config, observability_settings=observability_settings)


if __name__ == "__main__":
    main()
