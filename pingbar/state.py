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
Application state facade for PingBar.

AppState is what a presentation layer talks to: it exposes the published state
(monitored hosts, current on-demand result, pinging flag, recent history) and
the user entry points. Scheduled monitoring and on-demand pinging share one
coordination lock and one worker pool.
"""

import logging
import queue
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any, Dict, List, Optional

from pingbar.aggregator import MeasurementAggregator
from pingbar.controller import OnDemandController
from pingbar.models import HostEntry, Measurement
from pingbar.monitor import HostMonitor
from pingbar.scheduler import RepeatingTimer, TimerFactory
from pingbar.store import HistoryStore, HostStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8


class AppState:
    """Published state and entry points of the monitoring core."""

    def __init__(
        self,
        aggregator: MeasurementAggregator,
        host_store: Optional[HostStore] = None,
        history_store: Optional[HistoryStore] = None,
        event_queue: "Optional[queue.Queue[Dict[str, Any]]]" = None,
        executor: Optional[Executor] = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
        timer_factory: TimerFactory = RepeatingTimer,
        on_demand_count: int = 1,
    ) -> None:
        """
        Args:
            aggregator: Measurement service shared by both flows
            host_store: Persistence collaborator for monitored hosts
            history_store: Persistence collaborator for recent history
            event_queue: Optional queue receiving state-change events
            executor: Worker pool; a private ThreadPoolExecutor when None
            max_workers: Size of the private worker pool
            timer_factory: Timer constructor for scheduled monitoring
            on_demand_count: Probes per on-demand measurement
        """
        self._lock = threading.RLock()
        self._owns_executor = executor is None
        self._executor: Executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="pingbar-probe"
        )
        self.event_queue = event_queue
        self.monitor = HostMonitor(
            aggregator,
            self._executor,
            host_store=host_store,
            lock=self._lock,
            event_queue=event_queue,
            timer_factory=timer_factory,
        )
        self.controller = OnDemandController(
            aggregator,
            self._executor,
            history_store=history_store,
            lock=self._lock,
            event_queue=event_queue,
            count=on_demand_count,
        )

    def start(self) -> None:
        """Begin scheduled monitoring of every enabled host."""
        self.monitor.start()

    def close(self, wait: bool = False) -> None:
        """Stop all timers and, if the pool is private, shut it down."""
        self.monitor.stop()
        if self._owns_executor:
            # Cancel callbacks take the shared lock; holding it first keeps one lock order with submit.
            with self._lock:
                self._executor.shutdown(wait=False, cancel_futures=True)
            if wait:
                self._executor.shutdown(wait=True)

    def __enter__(self) -> "AppState":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # Published state

    @property
    def monitored_hosts(self) -> List[HostEntry]:
        return self.monitor.monitored_hosts

    @property
    def current_result(self) -> Optional[Measurement]:
        return self.controller.current_result

    @property
    def is_pinging(self) -> bool:
        return self.controller.is_pinging

    @property
    def history(self) -> List[str]:
        return self.controller.history

    # Entry points

    def add_monitored_host(self, host: Any, interval: Any, enabled: bool = True) -> HostEntry:
        return self.monitor.add_monitored_host(host, interval, enabled=enabled)

    def remove_monitored_host(self, entry_id: str) -> bool:
        return self.monitor.remove_monitored_host(entry_id)

    def update_monitored_host(self, entry: HostEntry) -> bool:
        return self.monitor.update_monitored_host(entry)

    def submit(self, host: Optional[str]) -> "Optional[Future[Measurement]]":
        return self.controller.submit(host)
