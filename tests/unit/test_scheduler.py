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
Unit tests for pingbar.scheduler.

Scheduler tests use a fake timer factory so no threads are started; the
RepeatingTimer tests use short real intervals.
"""

import os
import sys
import threading
import time
import unittest

# Add parent directory to path to import pingbar
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "../..")))

from pingbar.models import HostEntry  # noqa: E402
from pingbar.scheduler import RepeatingTimer, Scheduler  # noqa: E402


class FakeTimer:
    """Timer stand-in that records its lifecycle and fires on demand."""

    def __init__(self, interval, function, args=None, name=None):
        self.interval = interval
        self.function = function
        self.args = tuple(args or ())
        self.name = name
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.function(*self.args)


class TestScheduler(unittest.TestCase):
    """Test timer set rebuilding"""

    def setUp(self):
        self.fires = []
        self.timers = []

        def factory(*args, **kwargs):
            timer = FakeTimer(*args, **kwargs)
            self.timers.append(timer)
            return timer

        self.scheduler = Scheduler(lambda entry_id, generation: self.fires.append((entry_id, generation)), factory)

    def test_one_timer_per_enabled_entry(self):
        a = HostEntry.create("a", 10)
        b = HostEntry.create("b", 20, enabled=False)
        c = HostEntry.create("c", 30)

        self.scheduler.rebuild([a, b, c])

        self.assertEqual(self.scheduler.get_scheduled_ids(), [a.id, c.id])
        self.assertEqual([t.interval for t in self.timers], [10.0, 30.0])
        self.assertTrue(all(t.started for t in self.timers))
        self.assertIsNone(self.scheduler.get_timer(b.id))

    def test_rebuild_cancels_every_previous_timer(self):
        a = HostEntry.create("a", 10)
        self.scheduler.rebuild([a])
        first = self.scheduler.get_timer(a.id)

        self.scheduler.rebuild([a])

        self.assertTrue(first.cancelled)
        self.assertIsNot(self.scheduler.get_timer(a.id), first)
        self.assertEqual(self.scheduler.get_timer_count(), 1)

    def test_timer_carries_identifier_and_generation(self):
        a = HostEntry.create("a", 10)
        self.scheduler.rebuild([a])
        timer = self.scheduler.get_timer(a.id)

        timer.fire()

        self.assertEqual(self.fires, [(a.id, self.scheduler.generation)])
        self.assertTrue(self.scheduler.is_current(a.id, self.scheduler.generation))

    def test_fire_from_cancelled_timer_is_stale(self):
        a = HostEntry.create("a", 10)
        self.scheduler.rebuild([a])
        old_timer = self.scheduler.get_timer(a.id)
        self.scheduler.rebuild([a])

        old_timer.fire()

        entry_id, generation = self.fires[-1]
        self.assertFalse(self.scheduler.is_current(entry_id, generation))

    def test_cancel_all(self):
        a = HostEntry.create("a", 10)
        self.scheduler.rebuild([a])
        generation = self.scheduler.generation

        self.scheduler.cancel_all()

        self.assertEqual(self.scheduler.get_timer_count(), 0)
        self.assertTrue(self.timers[0].cancelled)
        self.assertFalse(self.scheduler.is_current(a.id, generation))

    def test_rebuild_with_no_entries(self):
        self.scheduler.rebuild([])
        self.assertEqual(self.scheduler.get_timer_count(), 0)


class TestRepeatingTimer(unittest.TestCase):
    """Test the daemon timer thread"""

    def test_fires_repeatedly_until_cancelled(self):
        calls = []
        done = threading.Event()

        def tick(value):
            calls.append(value)
            if len(calls) >= 3:
                done.set()

        timer = RepeatingTimer(0.05, tick, args=("x",), name="test-timer")
        timer.start()
        self.assertTrue(done.wait(2.0))
        timer.cancel()
        timer.join(1.0)

        self.assertFalse(timer.is_alive())
        self.assertTrue(timer.cancelled)
        self.assertTrue(timer.daemon)
        self.assertEqual(calls[:3], ["x", "x", "x"])

    def test_cancel_before_first_tick(self):
        calls = []
        timer = RepeatingTimer(10.0, calls.append, args=(1,))
        timer.start()
        timer.cancel()
        timer.join(1.0)
        self.assertFalse(timer.is_alive())
        self.assertEqual(calls, [])

    def test_callback_exception_does_not_stop_timer(self):
        calls = []
        done = threading.Event()

        def tick():
            calls.append(time.monotonic())
            if len(calls) >= 2:
                done.set()
            raise RuntimeError("boom")

        timer = RepeatingTimer(0.05, tick)
        with self.assertLogs("pingbar.scheduler", level="ERROR"):
            timer.start()
            self.assertTrue(done.wait(2.0))
            timer.cancel()
            timer.join(1.0)
        self.assertGreaterEqual(len(calls), 2)


if __name__ == "__main__":
    unittest.main()
