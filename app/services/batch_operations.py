"""Sequential bulk actions over a grid selection."""

from __future__ import annotations

import enum
import inspect
import logging
from collections.abc import Awaitable, Callable, Hashable, Sequence
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

ItemOperation = Callable[[Hashable], Awaitable[Any]]
Callback = Callable[[], Any]


class BatchState(enum.Enum):
    idle = "idle"
    running = "running"


class NotificationSeverity(enum.Enum):
    success = "success"
    warning = "warning"


class BatchInProgressError(Exception):
    """Raised when a batch is started while another one is still running."""


@dataclass(frozen=True)
class BatchResult:
    success_count: int
    fail_count: int

    @property
    def total(self) -> int:
        return self.success_count + self.fail_count


@dataclass(frozen=True)
class BatchNotification:
    message: str
    severity: NotificationSeverity


def build_notification(result: BatchResult, verb: str, noun: str) -> BatchNotification:
    """Summarise a finished batch, e.g. "Deleted 2 user(s). 1 failed."."""
    if result.fail_count == 0:
        return BatchNotification(
            message=f"Successfully {verb.lower()} {result.success_count} {noun}.",
            severity=NotificationSeverity.success,
        )
    return BatchNotification(
        message=(
            f"{verb.capitalize()} {result.success_count} {noun}. "
            f"{result.fail_count} failed."
        ),
        severity=NotificationSeverity.warning,
    )


async def _call(callback: Callable[..., Any], *args: Any) -> Any:
    outcome = callback(*args)
    if inspect.isawaitable(outcome):
        return await outcome
    return outcome


class BatchOperationExecutor:
    """Run one async operation per selected id, one at a time.

    A failing item is logged and counted; the remaining ids are still
    processed. Once the loop finishes the selection is cleared, the data is
    reloaded once and a summary notification is emitted. Successful items are
    never rolled back.
    """

    def __init__(
        self,
        *,
        verb: str = "processed",
        noun: str = "item(s)",
        clear_selection: Callback | None = None,
        reload: Callback | None = None,
        notify: Callable[[BatchNotification], Any] | None = None,
    ):
        self.verb = verb
        self.noun = noun
        self.clear_selection = clear_selection
        self.reload = reload
        self.notify = notify
        self._state = BatchState.idle
        self.last_notification: BatchNotification | None = None

    @property
    def state(self) -> BatchState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state == BatchState.running

    async def run(
        self,
        ids: Sequence[Hashable],
        operation: ItemOperation,
        *,
        verb: str | None = None,
        noun: str | None = None,
    ) -> BatchResult:
        if self.is_running:
            raise BatchInProgressError("A batch operation is already running")

        self._state = BatchState.running
        success_count = 0
        fail_count = 0
        try:
            for item_id in list(ids):
                try:
                    await operation(item_id)
                    success_count += 1
                except Exception as exc:
                    fail_count += 1
                    logger.warning("Batch item %s failed: %s", item_id, exc)

            result = BatchResult(success_count=success_count, fail_count=fail_count)
            notification = build_notification(result, verb or self.verb, noun or self.noun)
            self.last_notification = notification

            if self.clear_selection is not None:
                await _call(self.clear_selection)
            if self.reload is not None:
                await _call(self.reload)
            if self.notify is not None:
                await _call(self.notify, notification)
        finally:
            self._state = BatchState.idle

        logger.info(
            "Batch %s finished: %d succeeded, %d failed",
            verb or self.verb,
            result.success_count,
            result.fail_count,
        )
        return result
