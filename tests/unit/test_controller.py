#!/usr/bin/env python3
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
Unit tests for pingbar.controller.
"""

import os
import queue
import sys
import unittest
from unittest.mock import MagicMock

# Add parent directory to path to import pingbar
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "../..")))
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from executors import DeferredExecutor, ImmediateExecutor  # noqa: E402
from pingbar.controller import IDLE, PINGING, OnDemandController  # noqa: E402
from pingbar.models import Measurement  # noqa: E402
from pingbar.store import MemoryHistoryStore  # noqa: E402


class TestOnDemandController(unittest.TestCase):
    """Test on-demand submission, state and history"""

    def setUp(self):
        self.aggregator = MagicMock()
        self.aggregator.measure.side_effect = lambda host, count=1: Measurement.success(host, 20.0)
        self.history_store = MemoryHistoryStore()
        self.events = queue.Queue()

    def _controller(self, executor, **kwargs):
        return OnDemandController(
            self.aggregator,
            executor,
            history_store=self.history_store,
            event_queue=self.events,
            **kwargs,
        )

    def test_submit_measures_and_publishes_result(self):
        controller = self._controller(ImmediateExecutor())

        future = controller.submit("  example.com ")

        self.assertEqual(future.result().host, "example.com")
        self.assertEqual(controller.current_result.latency, 20.0)
        self.assertEqual(controller.state, IDLE)
        self.assertFalse(controller.is_pinging)
        self.aggregator.measure.assert_called_once_with("example.com", count=1)
        kinds = [self.events.get_nowait()["event"] for _ in range(2)]
        self.assertEqual(kinds, ["ping_started", "ping_finished"])

    def test_pinging_while_pending(self):
        executor = DeferredExecutor()
        controller = self._controller(executor)

        controller.submit("a")

        self.assertEqual(controller.state, PINGING)
        self.assertTrue(controller.is_pinging)
        self.assertIsNone(controller.current_result)
        executor.run_all()
        self.assertEqual(controller.state, IDLE)

    def test_blank_submission_ignored(self):
        controller = self._controller(ImmediateExecutor())

        for value in ("", "   ", None):
            self.assertIsNone(controller.submit(value))

        self.assertEqual(controller.history, [])
        self.assertEqual(self.history_store.save_count, 0)
        self.aggregator.measure.assert_not_called()
        self.assertTrue(self.events.empty())

    def test_history_updated_and_saved(self):
        controller = self._controller(ImmediateExecutor())

        for host in ("a", "b", "c", "b", "d"):
            controller.submit(host)

        self.assertEqual(controller.history, ["d", "b", "c"])
        self.assertEqual(self.history_store.load(), ["d", "b", "c"])
        self.assertEqual(self.history_store.save_count, 5)

    def test_history_loaded_from_store(self):
        self.history_store = MemoryHistoryStore(["x", "y"])
        controller = self._controller(ImmediateExecutor())
        self.assertEqual(controller.history, ["x", "y"])

    def test_concurrent_submissions_last_completion_wins(self):
        executor = DeferredExecutor()
        controller = self._controller(executor)

        controller.submit("first")
        controller.submit("second")
        self.assertTrue(controller.is_pinging)

        # Complete in reverse order: "first" finishes last.
        second = executor.pending.pop()
        first = executor.pending.pop()
        for future, fn, args, kwargs in (second, first):
            future.set_result(fn(*args, **kwargs))

        self.assertEqual(controller.current_result.host, "first")
        self.assertFalse(controller.is_pinging)

    def test_unreachable_result_becomes_current(self):
        self.aggregator.measure.side_effect = lambda host, count=1: Measurement.unreachable(host)
        controller = self._controller(ImmediateExecutor())

        controller.submit("invalid.host.that.does.not.exist.test")

        self.assertFalse(controller.current_result.reachable)

    def test_count_passed_to_aggregator(self):
        controller = self._controller(ImmediateExecutor(), count=3)
        controller.submit("a")
        self.aggregator.measure.assert_called_once_with("a", count=3)

    def test_submit_after_shutdown_raises_and_stays_idle(self):
        executor = ImmediateExecutor()
        executor.shutdown()
        controller = self._controller(executor)

        with self.assertRaises(RuntimeError):
            controller.submit("a")
        self.assertEqual(controller.state, IDLE)

    def test_failed_measurement_returns_to_idle(self):
        self.aggregator.measure.side_effect = RuntimeError("unexpected")
        controller = self._controller(ImmediateExecutor())

        with self.assertLogs("pingbar.monitor", level="ERROR"):
            future = controller.submit("a")

        self.assertIsInstance(future.exception(), RuntimeError)
        self.assertEqual(controller.state, IDLE)
        self.assertIsNone(controller.current_result)

    def test_cancelled_submissions_return_to_idle(self):
        executor = DeferredExecutor()
        controller = self._controller(executor)
        first = controller.submit("a")
        second = controller.submit("b")

        executor.shutdown(wait=False, cancel_futures=True)

        self.assertTrue(first.cancelled())
        self.assertTrue(second.cancelled())
        self.assertEqual(controller.state, IDLE)
        self.assertFalse(controller.is_pinging)
        self.assertIsNone(controller.current_result)
        self.aggregator.measure.assert_not_called()


if __name__ == "__main__":
    unittest.main()
