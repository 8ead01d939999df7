"""
FILE: taskflow/core/scheduler.py
PURPOSE: Recurrence scheduler: spawns successors of completed recurring tasks
EXPORTS:
  - is_due_for_recurrence(task, now) -> bool
  - next_due_date(task, now) -> datetime
  - build_successor(task, new_id, now) -> Task
  - RecurrenceScheduler (class)
DEPENDENCIES:
  - threading (background ticking)
  - logging (stdlib)
  - taskflow.core.service (TaskStore)
  - taskflow.core.dates (day math)
NOTES:
  - tick() runs one pass on demand (tests, CLI `tick`)
  - start()/stop() run ticks every interval_seconds on a daemon thread (REPL)
  - A pass holds the store lock from the first read to the last write, so a
    user edit can't land between "read status" and "write lastRecurredAt"
  - The original's lastRecurredAt update is the only guard against spawning
    again on the next tick; it goes through update_task's no-op semantics
  - A failing tick is logged and the loop keeps going
"""

import dataclasses
import logging
import threading
from datetime import datetime, timedelta
from typing import List, Optional

from .constants import (
    MONTHLY_OFFSET_DAYS,
    RECUR_DAILY,
    RECUR_MONTHLY,
    RECUR_WEEKLY,
    RECURRENCE_THRESHOLD_DAYS,
    RECURRING_ID_SUFFIX,
    STATUS_DONE,
    STATUS_TODO,
    DEFAULT_RECURRENCE_INTERVAL,
)
from .dates import next_weekday, parse_timestamp, to_iso, whole_days_between
from .models import Task
from .service import TaskStore

logger = logging.getLogger(__name__)


def is_due_for_recurrence(task: Task, now: datetime) -> bool:
    """
    A done recurring task is due once enough whole days have passed since it
    last recurred (or since it was created, if it never has).
    """
    if not task.recurring or task.status != STATUS_DONE:
        return False
    threshold = RECURRENCE_THRESHOLD_DAYS.get(task.recurring)
    if threshold is None:
        return False

    last = parse_timestamp(task.last_recurred_at or task.created_at)
    if last is None:
        return False
    return whole_days_between(now, last) >= threshold


def next_due_date(task: Task, now: datetime) -> datetime:
    """
    Due date for the successor of a recurring task.

    daily: +1 day. weekly: next occurrence of recurring_day (never today),
    or +7 days without one. monthly: fixed +30 days.
    """
    if task.recurring == RECUR_DAILY:
        return now + timedelta(days=1)
    if task.recurring == RECUR_WEEKLY:
        if task.recurring_day is not None:
            return next_weekday(now, task.recurring_day)
        return now + timedelta(days=7)
    if task.recurring == RECUR_MONTHLY:
        return now + timedelta(days=MONTHLY_OFFSET_DAYS)
    raise ValueError(f"Task {task.id} has unknown recurrence '{task.recurring}'")


def build_successor(task: Task, new_id: str, now: datetime) -> Task:
    """Copy of task with fresh id, reset status and new timestamps."""
    now_iso = to_iso(now)
    return dataclasses.replace(
        task,
        id=new_id,
        status=STATUS_TODO,
        created_at=now_iso,
        last_recurred_at=now_iso,
        due_date=to_iso(next_due_date(task, now)),
        dependencies=list(task.dependencies),
    )


class RecurrenceScheduler:
    """
    Periodic scan of the task store for recurring tasks to re-spawn.

    Args:
        store: Task store to read and mutate
        interval_seconds: Seconds between ticks when running in the background
    """

    def __init__(self, store: TaskStore, interval_seconds: float = DEFAULT_RECURRENCE_INTERVAL):
        self.store = store
        self.interval_seconds = max(0.01, float(interval_seconds))
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def tick(self) -> List[Task]:
        """
        Run one recurrence pass.

        Returns:
            Successor tasks spawned during this pass
        """
        spawned: List[Task] = []
        with self.store.batch() as store:
            now = store.now()
            for project in store.projects:
                for task in project.tasks:
                    try:
                        due = is_due_for_recurrence(task, now)
                    except (ValueError, TypeError) as e:
                        logger.warning("Skipping task %s with bad timestamp: %s", task.id, e)
                        continue
                    if not due:
                        continue

                    successor = build_successor(
                        task, store.new_id(RECURRING_ID_SUFFIX), now
                    )
                    if store.insert_task(project.id, successor) is None:
                        continue
                    store.update_task(project.id, task.id, last_recurred_at=to_iso(now))
                    spawned.append(successor)
                    logger.info(
                        "Spawned %s successor %s of task %s in project %s",
                        task.recurring, successor.id, task.id, project.id,
                    )
        return spawned

    # --- Background loop ---

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Tick every interval_seconds on a daemon thread until stop()."""
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, name="taskflow-recurrence", daemon=True
        )
        self._thread.start()
        logger.debug("Recurrence scheduler started (every %.1fs)", self.interval_seconds)

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.debug("Recurrence scheduler stopped")

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval_seconds):
            try:
                self.tick()
            except Exception:
                logger.exception("Recurrence tick failed")
