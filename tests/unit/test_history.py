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
Unit tests for pingbar.history.
"""

import os
import sys
import unittest

# Add parent directory to path to import pingbar
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "../..")))

from pingbar.history import HISTORY_CAPACITY, RecentHistory  # noqa: E402


class TestRecentHistory(unittest.TestCase):
    """Test most-recent-first bounded history"""

    def test_push_puts_newest_first(self):
        history = RecentHistory()
        history.push("a")
        history.push("b")
        self.assertEqual(history.items(), ["b", "a"])

    def test_duplicate_moves_to_front(self):
        history = RecentHistory()
        for host in ("a", "b", "c", "a"):
            history.push(host)
        self.assertEqual(history.items(), ["a", "c", "b"])
        self.assertEqual(len(history), 3)

    def test_capacity_drops_oldest(self):
        history = RecentHistory()
        for host in ("a", "b", "c", "d"):
            history.push(host)
        self.assertEqual(HISTORY_CAPACITY, 3)
        self.assertEqual(history.items(), ["d", "c", "b"])
        self.assertNotIn("a", history)

    def test_loaded_items_keep_order(self):
        history = RecentHistory(["x", "y", "z"])
        self.assertEqual(history.items(), ["x", "y", "z"])

    def test_loaded_items_truncated_to_capacity(self):
        history = RecentHistory(["w", "x", "y", "z"])
        self.assertEqual(history.items(), ["w", "x", "y"])

    def test_custom_capacity_and_clear(self):
        history = RecentHistory(capacity=1)
        history.push("a")
        history.push("b")
        self.assertEqual(list(history), ["b"])
        history.clear()
        self.assertEqual(len(history), 0)

    def test_invalid_capacity(self):
        with self.assertRaises(ValueError):
            RecentHistory(capacity=0)


if __name__ == "__main__":
    unittest.main()
