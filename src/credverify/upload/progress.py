"""Advisory upload progress: the client-side estimator and its Rich display.

The backend reports nothing while it receives and analyses a file, so the
percentage shown during ``uploading`` is an estimate that only ever moves
forward and stops short of 100.  It is discarded the moment the real
outcome arrives.  A transport that can report true progress could feed the
same ``on_tick`` callback without changing the workflow contract.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable

from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from credverify.models import UploadPhase, WorkflowSnapshot

logger = logging.getLogger(__name__)


class ProgressEstimator:
    """Ticks a fake percentage upward on a fixed interval.

    Usage::

        estimator = ProgressEstimator(on_tick=lambda pct: ..., step=10, cap=90)
        estimator.start()
        try:
            await do_transfer()
        finally:
            await estimator.stop()
    """

    def __init__(
        self,
        on_tick: Callable[[int], None],
        interval: float = 0.1,
        step: int = 10,
        cap: int = 90,
    ) -> None:
        if not 0 <= cap < 100:
            raise ValueError(f"cap must be below 100, got {cap}")
        self._on_tick = on_tick
        self._interval = interval
        self._step = max(1, step)
        self._cap = cap
        self._percent = 0
        self._task: asyncio.Task[None] | None = None

    @property
    def percent(self) -> int:
        return self._percent

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the ticking task on the running loop."""
        if self._task is None:
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop ticking and let the task unwind.  Safe to call more than once."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task

    async def _run(self) -> None:
        while self._percent < self._cap:
            await asyncio.sleep(self._interval)
            self._percent = min(self._percent + self._step, self._cap)
            try:
                self._on_tick(self._percent)
            except Exception:
                logger.exception(
                    "Progress callback failed at %d%%; estimate stopped", self._percent
                )
                return
        logger.debug("Progress estimate reached cap (%d%%)", self._cap)


class UploadProgressDisplay:
    """Rich progress bar driven by workflow snapshots.

    Register :meth:`update` with ``UploadWorkflow.subscribe`` and wrap the
    submission in the display's context manager::

        with UploadProgressDisplay(console) as display:
            unsubscribe = workflow.subscribe(display.update)
            await workflow.submit()
            unsubscribe()
    """

    def __init__(self, console: Console | None = None) -> None:
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            TimeElapsedColumn(),
            TextColumn("{task.fields[status]}", style="dim"),
            console=console,
            transient=True,
        )
        self._task: TaskID | None = None

    def __enter__(self) -> UploadProgressDisplay:
        self._progress.start()
        self._task = self._progress.add_task("[green]Upload", total=100, status="waiting")
        return self

    def __exit__(
        self,
        exc_type: type | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self._progress.stop()

    def update(self, snapshot: WorkflowSnapshot) -> None:
        """Render *snapshot*'s progress."""
        if self._task is None:
            return
        progress = snapshot.progress
        name = escape(snapshot.selected_file.name) if snapshot.selected_file else ""
        if progress.phase is UploadPhase.ERROR:
            status = f"[red]FAIL[/red] {name}"
        elif progress.phase is UploadPhase.COMPLETED:
            status = f"[green]done[/green] {name}"
        else:
            status = progress.message or f"{progress.phase.value} {name}".strip()
        self._progress.update(self._task, completed=progress.percent, status=status)

