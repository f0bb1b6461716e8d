"""Rich progress bars driven from the main thread between subprocess polls."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)


class ProgressTask:
    """Handle on one bar of a running Progress."""

    def __init__(self, progress: Progress, task_id):
        self._progress = progress
        self._task_id = task_id

    def advance(self, amount: int = 1) -> None:
        self._progress.advance(self._task_id, amount)

    def update(self, completed: int) -> None:
        self._progress.update(self._task_id, completed=completed)

    def directory_counter(self, directory: Path, pattern: str = "*") -> Callable[[], None]:
        """A poll-tick callback that sets progress to the file count in ``directory``."""

        def tick() -> None:
            self.update(sum(1 for _ in Path(directory).glob(pattern)))

        return tick


@contextmanager
def track_progress(description: str, total: int | None) -> Iterator[ProgressTask]:
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=Console(stderr=True),
        transient=True,
    ) as progress:
        task_id = progress.add_task(description, total=total)
        yield ProgressTask(progress, task_id)
