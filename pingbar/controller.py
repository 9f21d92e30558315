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
# Review for correctness and security.

"""
On-demand measurement for PingBar.

A user-submitted host is measured once, off the schedule. The controller is
either idle or pinging; submissions while pinging are accepted, and whichever
measurement completes last becomes the current result.
"""

import logging
import queue
import threading
from concurrent.futures import Executor, Future
from typing import Any, Dict, List, Optional

from pingbar.aggregator import MeasurementAggregator
from pingbar.history import RecentHistory
from pingbar.models import Measurement
from pingbar.monitor import log_future_failure
from pingbar.store import HistoryStore

logger = logging.getLogger(__name__)

IDLE = "idle"
PINGING = "pinging"


class OnDemandController:
    """Drives ad-hoc measurements and keeps the recent host history."""

    def __init__(
        self,
        aggregator: MeasurementAggregator,
        executor: Executor,
        history_store: Optional[HistoryStore] = None,
        lock: Optional[Any] = None,
        event_queue: "Optional[queue.Queue[Dict[str, Any]]]" = None,
        count: int = 1,
    ) -> None:
        self._aggregator = aggregator
        self._executor = executor
        self._history_store = history_store
        self._lock = lock if lock is not None else threading.RLock()
        self._event_queue = event_queue
        self.count = count
        self._history = RecentHistory(history_store.load() if history_store is not None else ())
        self._current_result: Optional[Measurement] = None
        self._pending = 0

    @property
    def state(self) -> str:
        with self._lock:
            return PINGING if self._pending > 0 else IDLE

    @property
    def is_pinging(self) -> bool:
        return self.state == PINGING

    @property
    def current_result(self) -> Optional[Measurement]:
        with self._lock:
            return self._current_result

    @property
    def history(self) -> List[str]:
        with self._lock:
            return self._history.items()

    def submit(self, host: Optional[str]) -> "Optional[Future[Measurement]]":
        """
        Start measuring a host.

        Empty or blank input is ignored: no state change, no history update.

        Returns:
            Future resolving to the Measurement, or None if the input was ignored

        Raises:
            RuntimeError: If the worker pool has been shut down
        """
        if not isinstance(host, str) or not host.strip():
            logger.debug("Ignoring empty on-demand submission")
            return None
        host = host.strip()

        with self._lock:
            self._history.push(host)
            if self._history_store is not None:
                self._history_store.save(self._history.items())
            self._pending += 1
            logger.info("Pinging %s on demand", host)
            self._publish({"event": "ping_started", "host": host})
            try:
                future = self._executor.submit(self._run, host)
            except RuntimeError:
                self._pending -= 1
                raise
        future.add_done_callback(log_future_failure)
        future.add_done_callback(self._release_cancelled)
        return future

    def _release_cancelled(self, future: Future) -> None:
        # A cancelled submission never reached _run, so its count is released here.
        if future.cancelled():
            with self._lock:
                self._pending -= 1
            logger.debug("On-demand ping cancelled before it started")

    def _run(self, host: str) -> Measurement:
        measurement: Optional[Measurement] = None
        try:
            measurement = self._aggregator.measure(host, count=self.count)
            return measurement
        finally:
            with self._lock:
                self._pending -= 1
                if measurement is not None:
                    self._current_result = measurement
                    logger.debug(
                        "On-demand ping of %s finished: reachable=%s latency=%s",
                        host,
                        measurement.reachable,
                        measurement.latency,
                    )
                    self._publish({"event": "ping_finished", "host": host, "measurement": measurement})

    def _publish(self, event: Dict[str, Any]) -> None:
        if self._event_queue is not None:
            self._event_queue.put(event)
