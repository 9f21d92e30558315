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
Multi-probe measurement for PingBar.

The aggregator resolves a host once, runs a number of sequential probes against
the address and folds them into a single Measurement whose latency is the mean
of the successful round-trip times.
"""

import logging
import time
from typing import Callable, List, Optional

from pingbar.errors import ResolutionFailure, ValidationError
from pingbar.models import Measurement
from pingbar.prober import Prober
from pingbar.resolver import resolve

logger = logging.getLogger(__name__)

INTER_PROBE_DELAY_SECONDS = 0.5


class MeasurementAggregator:
    """
    Resolve, probe and summarize.

    An explicitly constructed service: callers pass it to the components that
    need it instead of reaching for a shared instance.
    """

    def __init__(
        self,
        prober: Prober,
        resolver: Callable[[str], str] = resolve,
        probe_timeout: Optional[float] = None,
        inter_probe_delay: float = INTER_PROBE_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Args:
            prober: Transport used for each probe
            resolver: Maps a host string to an IPv4 address or raises ResolutionFailure
            probe_timeout: Per-probe timeout in seconds (prober default when None)
            inter_probe_delay: Pause between consecutive probes when count > 1
            sleep: Sleep function, replaceable in tests
        """
        self.prober = prober
        self.resolver = resolver
        self.probe_timeout = probe_timeout
        self.inter_probe_delay = inter_probe_delay
        self._sleep = sleep

    def measure(self, host: str, count: int = 1) -> Measurement:
        """
        Measure reachability and mean latency of a host.

        Args:
            host: IP literal or DNS name
            count: Number of sequential probes (>= 1)

        Returns:
            Measurement; resolution and probe failures yield an unreachable one

        Raises:
            ValidationError: If count is less than 1
        """
        if count < 1:
            raise ValidationError(f"count must be at least 1, got {count}.")

        try:
            address = self.resolver(host)
        except ResolutionFailure as e:
            logger.info("%s", e)
            return Measurement.unreachable(host)

        latencies: List[float] = []
        for attempt in range(count):
            outcome = self.prober.probe(address, self.probe_timeout)
            if outcome.success and outcome.rtt_ms is not None:
                latencies.append(outcome.rtt_ms)
            if attempt < count - 1:
                self._sleep(self.inter_probe_delay)

        if not latencies:
            logger.debug("%s (%s) unreachable after %d probe(s)", host, address, count)
            return Measurement.unreachable(host)

        average = sum(latencies) / len(latencies)
        logger.debug("%s (%s) reachable: %d/%d replies, avg %.3fms", host, address, len(latencies), count, average)
        return Measurement.success(host, average)
