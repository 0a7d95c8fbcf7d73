from dataclasses import dataclass
import logging
import os

from dotenv import find_dotenv, load_dotenv

from studentdb.execution.connection import DEFAULT_COMMAND_TIMEOUT_SECONDS

# ==================================================
# Demo Configuration
# ==================================================

_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_float(key: str, raw: str) -> float:
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{key} must be a number, got {raw!r}") from exc


def _parse_int(key: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from exc


def _parse_log_level(raw: str) -> int:
    level = logging.getLevelName(raw.strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"STUDENTDB_LOG_LEVEL must be a logging level name, got {raw!r}")
    return level


@dataclass(frozen=True)
class DemoConfig:
    """
    Settings for the console walk-through. The library functions never read these.
    """

    database_name: str = "TestStudentDB"
    directory: str = ""
    command_timeout_seconds: float = DEFAULT_COMMAND_TIMEOUT_SECONDS
    seed: int | None = None
    pause: bool = True
    log_level: int = logging.WARNING

    @classmethod
    def from_env(cls, *, load_env_file: bool = True) -> "DemoConfig":
        """
        Reads STUDENTDB_* variables, after loading the nearest .env file at or above the
        working directory. Variables already set in the environment win.
        """
        if load_env_file:
            load_dotenv(find_dotenv(usecwd=True))

        timeout_raw = os.getenv("STUDENTDB_COMMAND_TIMEOUT")
        seed_raw = os.getenv("STUDENTDB_SEED")
        pause_raw = os.getenv("STUDENTDB_PAUSE")
        level_raw = os.getenv("STUDENTDB_LOG_LEVEL")

        return cls(
            database_name=os.getenv("STUDENTDB_NAME", cls.database_name) or cls.database_name,
            directory=os.getenv("STUDENTDB_DIRECTORY", cls.directory),
            command_timeout_seconds=(
                _parse_float("STUDENTDB_COMMAND_TIMEOUT", timeout_raw)
                if timeout_raw
                else cls.command_timeout_seconds
            ),
            seed=_parse_int("STUDENTDB_SEED", seed_raw) if seed_raw else None,
            pause=pause_raw.strip().lower() not in _FALSE_VALUES if pause_raw else cls.pause,
            log_level=_parse_log_level(level_raw) if level_raw else cls.log_level,
        )
