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
Recent on-demand host history for PingBar.
"""

from collections import deque
from typing import Iterable, List

HISTORY_CAPACITY = 3


class RecentHistory:
    """
    Most-recent-first list of distinct host strings with a fixed capacity.

    Pushing a host that is already present moves it to the front.
    """

    def __init__(self, items: Iterable[str] = (), capacity: int = HISTORY_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1.")
        self.capacity = capacity
        self._items: "deque[str]" = deque(maxlen=capacity)
        # Loaded items are already most-recent-first; push oldest first.
        for host in reversed(list(items)):
            self.push(host)

    def push(self, host: str) -> None:
        """Put host at the front, dropping any earlier copy and the oldest overflow."""
        try:
            self._items.remove(host)
        except ValueError:
            pass
        self._items.appendleft(host)

    def items(self) -> List[str]:
        return list(self._items)

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(list(self._items))

    def __contains__(self, host: object) -> bool:
        return host in self._items
