# Copyright 2026 icecake0141
# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# This file was created or modified with the assistance of an AI (Large Language Model).
# Review required for correctness, security, and licensing.

"""
Scheduler module for PingBar.

This module provides a Scheduler that keeps one repeating timer per enabled
host entry. Any change to the set of monitored hosts rebuilds the whole timer
set from the current registry snapshot rather than patching individual timers.
"""

import logging
import threading
import time
from typing import Any, Callable, Dict, Iterable, List, Optional

from pingbar.models import HostEntry

logger = logging.getLogger(__name__)


class RepeatingTimer(threading.Thread):
    """
    Daemon thread that calls a function every ``interval`` seconds until cancelled.

    Ticks are anchored to a monotonic schedule so that the time spent in the
    callback does not accumulate as drift. The first call happens one interval
    after start().
    """

    def __init__(
        self,
        interval: float,
        function: Callable[..., Any],
        args: Optional[Iterable[Any]] = None,
        name: Optional[str] = None,
    ) -> None:
        super().__init__(name=name, daemon=True)
        self.interval = interval
        self.function = function
        self.args = tuple(args or ())
        self._cancelled = threading.Event()

    def run(self) -> None:
        next_tick = time.monotonic() + self.interval
        while not self._cancelled.wait(max(0.0, next_tick - time.monotonic())):
            try:
                self.function(*self.args)
            except Exception:  # pylint: disable=broad-exception-caught
                logger.exception("Timer %s callback failed", self.name)
            next_tick += self.interval
            # After a long stall (e.g. system sleep), resume from now instead of
            # firing a burst of missed ticks.
            now = time.monotonic()
            if next_tick < now:
                next_tick = now + self.interval

    def cancel(self) -> None:
        """Stop the timer. Does not wait for the thread to exit."""
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()


TimerFactory = Callable[..., Any]


class Scheduler:
    """
    One repeating timer per enabled host entry.

    Timers carry only the entry identifier, never the entry itself; the fire
    callback must look the entry up again when it runs.

    The scheduler is not thread-safe by itself. rebuild(), cancel_all() and
    is_current() are expected to run under the coordinator's lock, which the
    fire callback also takes before calling is_current().
    """

    def __init__(
        self,
        on_fire: Callable[[str, int], None],
        timer_factory: TimerFactory = RepeatingTimer,
    ) -> None:
        """
        Initialize the Scheduler.

        Args:
            on_fire: Called from the timer thread as on_fire(entry_id, generation)
            timer_factory: Builds a timer as timer_factory(interval, function, args=..., name=...);
                           the result needs start() and cancel()
        """
        self._on_fire = on_fire
        self._timer_factory = timer_factory
        self._timers: Dict[str, Any] = {}
        # Bumped whenever the timer set is torn down, so that a tick already in
        # progress on a cancelled timer can be recognized as stale.
        self.generation = 0

    def rebuild(self, entries: Iterable[HostEntry]) -> None:
        """
        Replace every active timer with a fresh set built from entries.

        All existing timers are cancelled unconditionally. Each enabled entry
        then gets a new repeating timer firing every entry.interval seconds.
        Disabled entries get no timer.
        """
        self.cancel_all()
        for entry in entries:
            if not entry.enabled:
                continue
            timer = self._timer_factory(
                entry.interval,
                self._fire,
                args=(entry.id, self.generation),
                name=f"pingbar-timer-{entry.host}",
            )
            self._timers[entry.id] = timer
            timer.start()
            logger.debug("Scheduled %s every %gs (id=%s)", entry.host, entry.interval, entry.id)

    def cancel_all(self) -> None:
        """Cancel and forget every active timer."""
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        self.generation += 1

    def is_current(self, entry_id: str, generation: int) -> bool:
        """Return True if a fire from (entry_id, generation) belongs to the live timer set."""
        return generation == self.generation and entry_id in self._timers

    def _fire(self, entry_id: str, generation: int) -> None:
        self._on_fire(entry_id, generation)

    def get_scheduled_ids(self) -> List[str]:
        return list(self._timers)

    def get_timer(self, entry_id: str) -> Optional[Any]:
        return self._timers.get(entry_id)

    def get_timer_count(self) -> int:
        return len(self._timers)
