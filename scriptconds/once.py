"""Single-computation gate for conditions evaluated at most once."""

import logging
import threading
from collections.abc import Callable
from types import TracebackType
from typing import Any

logger = logging.getLogger(__name__)


class OnceCell:
    """Runs a computation at most once and replays its outcome.

    The first caller of get() runs the function while holding the lock;
    callers arriving during that computation block until it finishes and
    then observe the same result. If the function raised, the stored
    exception instance is re-raised on every later call, with the traceback
    and context of the original failure, and the function is not run again.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._done = False
        self._value: Any = None
        self._error: BaseException | None = None
        self._traceback: TracebackType | None = None
        self._context: BaseException | None = None

    @property
    def done(self) -> bool:
        """Whether the computation has completed (successfully or not)."""
        return self._done

    def get(self, func: Callable[[], Any]) -> Any:
        if not self._done:
            with self._lock:
                if not self._done:
                    try:
                        self._value = func()
                    except Exception as e:
                        self._error = e
                        self._traceback = e.__traceback__
                        self._context = e.__context__
                    self._done = True
                    logger.debug(
                        "once cell filled by %s (error=%s)",
                        getattr(func, "__qualname__", func),
                        type(self._error).__name__ if self._error else None,
                    )
        if self._error is not None:
            self._replay()
        return self._value

    def _replay(self) -> None:
        # Raising attaches the current frames and handled exception to the
        # shared instance; put back what the first failure recorded.
        error = self._error
        try:
            raise error.with_traceback(self._traceback)
        finally:
            error.__context__ = self._context


class OnceMap:
    """A OnceCell per key, created on first use of the key."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._cells: dict[Any, OnceCell] = {}

    def get(self, key: Any, func: Callable[[], Any]) -> Any:
        with self._lock:
            cell = self._cells.get(key)
            if cell is None:
                cell = self._cells[key] = OnceCell()
        return cell.get(func)

    def __len__(self) -> int:
        return len(self._cells)
