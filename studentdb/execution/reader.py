from dataclasses import dataclass
from typing import Any, Callable, Iterator, Sequence

from studentdb.errors import ResourceClosedError

EMPTY_RESULT_TYPE_NAME = "object"

# ==================================================
# Result Reader
# ==================================================


@dataclass(frozen=True)
class ResultColumn:
    """
    Name and runtime value type of one result column.
    """

    name: str
    type_name: str


class ResultReader:
    """
    Forward-only, single-pass reader over the rows of one executed statement.

    The first row is fetched eagerly so column value types are known before
    iteration starts; every other row is fetched on demand. Once exhausted the
    reader yields nothing more. close() releases the underlying cursor and
    calls the release hook exactly once.

    When a fetch_timer is given it is resumed around each row fetch and paused
    otherwise, so only time spent inside the driver counts against it.
    """

    def __init__(
        self,
        cursor: Any,
        on_close: Callable[[], None] | None = None,
        fetch_timer: Any = None,
    ) -> None:
        self._cursor = cursor
        self._on_close = on_close
        self._fetch_timer = fetch_timer
        self._closed = False
        self._exhausted = False
        self._rows_read = 0
        description = cursor.description or ()
        self._names = tuple(entry[0] for entry in description)
        self._pending: Sequence[Any] | None = self._fetch() if self._names else None
        if not self._names:
            self._exhausted = True
        self.columns = tuple(
            ResultColumn(name=name, type_name=self._type_name(index))
            for index, name in enumerate(self._names)
        )

    def _fetch(self) -> Sequence[Any] | None:
        if self._fetch_timer is not None:
            self._fetch_timer.resume()
        try:
            row = self._cursor.fetchone()
        finally:
            if self._fetch_timer is not None:
                self._fetch_timer.pause()
        if row is None:
            self._exhausted = True
        return row

    def _type_name(self, index: int) -> str:
        if self._pending is None:
            return EMPTY_RESULT_TYPE_NAME
        return type(self._pending[index]).__name__

    @property
    def field_count(self) -> int:
        return len(self.columns)

    @property
    def rows_read(self) -> int:
        return self._rows_read

    @property
    def closed(self) -> bool:
        return self._closed

    def __iter__(self) -> Iterator[Sequence[Any]]:
        return self

    def __next__(self) -> Sequence[Any]:
        if self._closed and not self._exhausted:
            raise ResourceClosedError("Result reader is closed.")
        if self._pending is not None:
            row = self._pending
            self._pending = None
        else:
            if self._exhausted:
                raise StopIteration
            row = self._fetch()
            if row is None:
                raise StopIteration
        self._rows_read += 1
        return row

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._pending = None
        try:
            self._cursor.close()
        finally:
            if self._on_close is not None:
                self._on_close()

    def __enter__(self) -> "ResultReader":
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        _ = exc_type
        _ = exc
        _ = tb
        self.close()
