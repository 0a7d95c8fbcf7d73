from dataclasses import dataclass

DEFAULT_COMMAND_TIMEOUT_SECONDS = 60.0

# ==================================================
# Connection Settings
# ==================================================


@dataclass(frozen=True)
class ConnectionSettings:
    """
    Settings applied to every connection an executor opens.

    connect_timeout_seconds is sqlite3's busy timeout: how long a statement
    waits on a locked database file before failing. command_timeout_seconds
    bounds how long a single statement may run before it is interrupted;
    0 disables it.
    """

    connect_timeout_seconds: float | None = None
    command_timeout_seconds: float = DEFAULT_COMMAND_TIMEOUT_SECONDS
    progress_interval: int = 1000

    def __post_init__(self) -> None:
        if self.connect_timeout_seconds is not None and self.connect_timeout_seconds < 0:
            raise ValueError("connect_timeout_seconds must be >= 0")
        if self.command_timeout_seconds < 0:
            raise ValueError("command_timeout_seconds must be >= 0")
        if self.progress_interval < 1:
            raise ValueError("progress_interval must be >= 1")
