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
Scheduled host monitoring for PingBar.

HostMonitor ties the registry, the scheduler and the measurement aggregator
together. Registry state and the timer set are only touched while holding one
lock, so a structural change and the reschedule it causes form a single step
that no timer fire can observe halfway.

Scheduled work flows as: timer fire -> lookup by identifier -> measure on a
worker thread -> write back under the lock. Work items carry the entry
identifier only; each step re-reads the registry.
"""

import logging
import queue
import threading
from concurrent.futures import Executor, Future
from typing import Any, Dict, List, Optional, Set

from pingbar.aggregator import MeasurementAggregator
from pingbar.models import HostEntry, Measurement
from pingbar.registry import HostRegistry
from pingbar.scheduler import RepeatingTimer, Scheduler, TimerFactory
from pingbar.store import HostStore

logger = logging.getLogger(__name__)

SCHEDULED_PROBE_COUNT = 1


def log_future_failure(future: Future) -> None:
    """Done-callback that reports an unexpected worker exception."""
    if future.cancelled():
        return
    error = future.exception()
    if error is not None:
        logger.error("Probe task failed: %s", error, exc_info=error)


class HostMonitor:
    """
    Coordinator for the monitored host set and its timers.

    Overlapping fires for one host are not allowed: while a probe for an entry
    is in flight, further fires for that entry are skipped.
    """

    def __init__(
        self,
        aggregator: MeasurementAggregator,
        executor: Executor,
        host_store: Optional[HostStore] = None,
        lock: Optional[Any] = None,
        event_queue: "Optional[queue.Queue[Dict[str, Any]]]" = None,
        timer_factory: TimerFactory = RepeatingTimer,
    ) -> None:
        """
        Args:
            aggregator: Service used to measure a host
            executor: Worker pool for probe work
            host_store: Persistence collaborator for the host list
            lock: Shared reentrant coordination lock (a new RLock when None)
            event_queue: Optional queue receiving state-change events
            timer_factory: Timer constructor handed to the Scheduler
        """
        self._aggregator = aggregator
        self._executor = executor
        self._host_store = host_store
        self._lock = lock if lock is not None else threading.RLock()
        self._event_queue = event_queue
        self._registry = HostRegistry(host_store.load() if host_store is not None else ())
        self._scheduler = Scheduler(self._on_timer_fire, timer_factory=timer_factory)
        self._in_flight: Set[str] = set()
        self._running = False

    # -- lifecycle --------------------------------------------------------

    def start(self) -> None:
        """Schedule every enabled entry."""
        with self._lock:
            self._running = True
            self._scheduler.rebuild(self._registry.entries())
            logger.debug("Monitoring started with %d timer(s)", self._scheduler.get_timer_count())

    def stop(self) -> None:
        """Cancel all timers. In-flight probes finish and write back nothing new."""
        with self._lock:
            self._running = False
            self._scheduler.cancel_all()

    @property
    def running(self) -> bool:
        with self._lock:
            return self._running

    # -- queries ----------------------------------------------------------

    @property
    def monitored_hosts(self) -> List[HostEntry]:
        with self._lock:
            return self._registry.entries()

    def get_host(self, entry_id: str) -> Optional[HostEntry]:
        with self._lock:
            return self._registry.get(entry_id)

    @property
    def scheduled_ids(self) -> List[str]:
        with self._lock:
            return self._scheduler.get_scheduled_ids()

    def is_in_flight(self, entry_id: str) -> bool:
        with self._lock:
            return entry_id in self._in_flight

    # -- structural mutations -------------------------------------------

    def add_monitored_host(self, host: Any, interval: Any, enabled: bool = True) -> HostEntry:
        """
        Add a host to monitor.

        Raises:
            ValidationError: If host is empty or interval is below one second;
                             the registry is left unchanged
        """
        with self._lock:
            entry = self._registry.add(host, interval, enabled=enabled)
            self._structural_change()
            return entry

    def remove_monitored_host(self, entry_id: str) -> bool:
        """Stop monitoring a host. Returns False if the identifier is unknown."""
        with self._lock:
            if not self._registry.remove(entry_id):
                return False
            self._structural_change()
            return True

    def update_monitored_host(self, entry: HostEntry) -> bool:
        """
        Replace an entry's configuration. Unknown identifiers are a no-op.

        Raises:
            ValidationError: If the new host or interval is invalid
        """
        with self._lock:
            if not self._registry.update(entry):
                return False
            self._structural_change()
            return True

    def _structural_change(self) -> None:
        # Caller holds the lock.
        entries = self._registry.entries()
        if self._host_store is not None:
            self._host_store.save(entries)
        if self._running:
            self._scheduler.rebuild(entries)
        self._publish({"event": "hosts_changed", "count": len(entries)})

    # -- scheduled work ---------------------------------------------------

    def _on_timer_fire(self, entry_id: str, generation: int) -> None:
        with self._lock:
            if not self._running or not self._scheduler.is_current(entry_id, generation):
                logger.debug("Ignoring stale timer fire for id=%s", entry_id)
                return
            self._dispatch(entry_id)

    def check_now(self, entry_id: str) -> "Optional[Future[Optional[Measurement]]]":
        """
        Dispatch one measurement for an entry to the worker pool, outside its schedule.

        Returns:
            Future resolving to the Measurement written back (None if nothing
            was written), or None if a probe for this entry is already in flight
            or the worker pool is shut down
        """
        with self._lock:
            return self._dispatch(entry_id)

    def _dispatch(self, entry_id: str) -> "Optional[Future[Optional[Measurement]]]":
        # Caller holds the lock.
        if entry_id in self._in_flight:
            logger.debug("Skipping fire for id=%s: previous probe still in flight", entry_id)
            return None
        self._in_flight.add(entry_id)
        try:
            future = self._executor.submit(self._run_scheduled_probe, entry_id)
        except RuntimeError as e:
            self._in_flight.discard(entry_id)
            logger.debug("Could not dispatch probe for id=%s: %s", entry_id, e)
            return None
        future.add_done_callback(log_future_failure)
        future.add_done_callback(lambda done: self._release_cancelled(entry_id, done))
        return future

    def _release_cancelled(self, entry_id: str, future: Future) -> None:
        # A cancelled probe never reached _run_scheduled_probe; free the slot here.
        if future.cancelled():
            with self._lock:
                self._in_flight.discard(entry_id)
            logger.debug("Probe for id=%s cancelled before it started", entry_id)

    def _run_scheduled_probe(self, entry_id: str) -> Optional[Measurement]:
        try:
            with self._lock:
                entry = self._registry.get(entry_id)
            if entry is None:
                logger.debug("Entry id=%s removed before its probe ran", entry_id)
                return None

            measurement = self._aggregator.measure(entry.host, count=SCHEDULED_PROBE_COUNT)

            with self._lock:
                current = self._registry.get(entry_id)
                if current is None:
                    logger.debug("Entry id=%s removed while probing %s; result dropped", entry_id, entry.host)
                    return None
                if current.host != entry.host:
                    logger.debug("Entry id=%s changed host while probing %s; result dropped", entry_id, entry.host)
                    return None
                self._registry.set_last_result(entry_id, measurement)
                self._publish(
                    {
                        "event": "result",
                        "host_id": entry_id,
                        "host": measurement.host,
                        "reachable": measurement.reachable,
                        "latency": measurement.latency,
                        "measurement": measurement,
                    }
                )
            return measurement
        finally:
            with self._lock:
                self._in_flight.discard(entry_id)

    def _publish(self, event: Dict[str, Any]) -> None:
        if self._event_queue is not None:
            self._event_queue.put(event)
