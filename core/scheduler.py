"""
Scheduler - Recurring maintenance jobs on cron calendars.

SchedulerHandle is an explicit registry owned by whoever builds the
orchestrator (the Flask app factory, or run.py). There is no module-level
scheduler state.

Cron expressions are parsed with croniter and evaluated in server local time.
A background daemon thread calls run_pending() every poll_seconds once
start() has been called; tests drive run_pending(now) directly.

Duplicate policy: a task registered with a ``key`` that is already scheduled
replaces the earlier task, so running automation twice for the same shop
leaves one set of jobs. Tasks without a key accumulate.
"""

import threading
import traceback
from datetime import datetime
from typing import Any, Callable, List, Optional

from croniter import croniter


class ScheduledTask:
    """One registered job. Returned by SchedulerHandle.schedule() as a cancel handle."""

    def __init__(
        self,
        name: str,
        cron_expr: str,
        action: Callable[[], Any],
        key: Optional[str],
        start: datetime,
    ):
        self.name = name
        self.cron_expr = cron_expr
        self.action = action
        self.key = key
        self.cancelled = False
        self.runs = 0
        self.failures = 0
        self.last_error: Optional[str] = None
        self.next_run = croniter(cron_expr, start).get_next(datetime)

    def cancel(self):
        self.cancelled = True

    def is_due(self, now: datetime) -> bool:
        return not self.cancelled and now >= self.next_run

    def advance(self, now: datetime):
        self.next_run = croniter(self.cron_expr, now).get_next(datetime)

    def __repr__(self) -> str:
        return f"ScheduledTask({self.name!r}, {self.cron_expr!r}, next_run={self.next_run})"


class SchedulerHandle:
    """Process-lifetime registry of recurring tasks."""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None, debug: bool = False):
        self._clock = clock or datetime.now
        self.debug = debug
        self._tasks: List[ScheduledTask] = []
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def schedule(
        self,
        cron_expr: str,
        action: Callable[[], Any],
        name: Optional[str] = None,
        key: Optional[str] = None,
    ) -> ScheduledTask:
        """Register a recurring task.

        Args:
            cron_expr: Five-field cron expression, evaluated in local time.
            action: Zero-argument callable run when the task is due.
            name: Label for output (defaults to the function name).
            key: Dedup key. A task already registered under it is cancelled
                and replaced.

        Returns:
            The ScheduledTask, which doubles as its cancel handle.

        Raises:
            ValueError: cron_expr is not a valid cron expression.
        """
        if not croniter.is_valid(cron_expr):
            raise ValueError(f"Invalid cron expression: {cron_expr!r}")

        task = ScheduledTask(
            name or getattr(action, "__name__", "task"),
            cron_expr, action, key, self._clock(),
        )

        with self._lock:
            if key is not None:
                for existing in self._tasks:
                    if existing.key == key:
                        existing.cancel()
                        if self.debug:
                            print(f"  Replacing scheduled task {existing.name} ({key})")
                self._tasks = [t for t in self._tasks if not t.cancelled]
            self._tasks.append(task)

        print(f"  Scheduled {task.name} ({cron_expr}), next run {task.next_run:%Y-%m-%d %H:%M}")
        return task

    @property
    def tasks(self) -> List[ScheduledTask]:
        with self._lock:
            return [t for t in self._tasks if not t.cancelled]

    def get(self, key: str) -> Optional[ScheduledTask]:
        for task in self.tasks:
            if task.key == key:
                return task
        return None

    def run_pending(self, now: Optional[datetime] = None) -> List[str]:
        """Run every due task once and advance it. Returns the names that ran."""
        now = now or self._clock()
        ran = []

        for task in self.tasks:
            if not task.is_due(now):
                continue

            print(f"Running scheduled task: {task.name}")
            try:
                task.action()
            except Exception as e:
                task.failures += 1
                task.last_error = str(e)
                print(f"  WARNING: scheduled task {task.name} failed: {e}")
                if self.debug:
                    traceback.print_exc()
            task.runs += 1
            task.advance(now)
            ran.append(task.name)

        return ran

    def start(self, poll_seconds: float = 30):
        """Run run_pending() every poll_seconds on a daemon thread. No-op if running."""
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._loop, args=(poll_seconds,), name="store-builder-scheduler", daemon=True
        )
        self._thread.start()

    def _loop(self, poll_seconds: float):
        while not self._stop.wait(poll_seconds):
            self.run_pending()

    @property
    def running(self) -> bool:
        return bool(self._thread and self._thread.is_alive())

    def shutdown(self):
        """Stop the background thread and cancel every task."""
        self._stop.set()
        if self._thread:
            self._thread.join(timeout=5)
            self._thread = None
        with self._lock:
            for task in self._tasks:
                task.cancel()
            self._tasks = []
