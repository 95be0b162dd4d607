"""Optional fan-out of per-column work within one channel and timestamp."""

from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from types import TracebackType

from .stats import MissingProcessingStats

ColumnTask = Callable[[int], MissingProcessingStats]


class ColumnExecutor:
    """Runs column tasks either in a bounded thread pool or inline.

    Use as a context manager so the pool is shut down when the fill phase
    ends. Results are returned in column order whichever path was taken, and
    an exception raised by a task propagates to the caller.
    """

    def __init__(self, max_workers: int = 4, *, parallel: bool = False) -> None:
        if max_workers <= 0:
            raise ValueError(f"max_workers must be positive, got {max_workers}")
        self.max_workers = max_workers
        self.parallel = parallel
        self._pool: ThreadPoolExecutor | None = None

    def __enter__(self) -> "ColumnExecutor":
        if self.parallel and self._pool is None:
            self._pool = ThreadPoolExecutor(
                max_workers=self.max_workers, thread_name_prefix="gapfill-column",
            )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.shutdown()

    def shutdown(self) -> None:
        if self._pool is not None:
            self._pool.shutdown(wait=True)
            self._pool = None

    @property
    def is_parallel(self) -> bool:
        return self._pool is not None

    def run(self, columns: Sequence[int], task: ColumnTask) -> list[MissingProcessingStats]:
        """Apply ``task`` to every column and collect the per-column stats."""
        if self._pool is None or len(columns) <= 1:
            return [task(column) for column in columns]
        futures = [self._pool.submit(task, column) for column in columns]
        return [future.result() for future in futures]
