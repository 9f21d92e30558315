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
Persistence collaborators for PingBar.

The core only needs load() and save() for the host list and the recent history;
the storage medium is up to the implementation. The in-memory stores below keep
deep copies so callers cannot mutate saved state behind the core's back.
"""

import copy
from typing import Iterable, List, Protocol

from pingbar.models import HostEntry


class HostStore(Protocol):
    """Loads and saves the monitored host list."""

    def load(self) -> List[HostEntry]: ...

    def save(self, entries: List[HostEntry]) -> None: ...


class HistoryStore(Protocol):
    """Loads and saves the recent on-demand host history."""

    def load(self) -> List[str]: ...

    def save(self, history: List[str]) -> None: ...


class MemoryHostStore:
    """HostStore that keeps entries in memory."""

    def __init__(self, entries: Iterable[HostEntry] = ()) -> None:
        self._entries: List[HostEntry] = copy.deepcopy(list(entries))
        self.save_count = 0

    def load(self) -> List[HostEntry]:
        return copy.deepcopy(self._entries)

    def save(self, entries: List[HostEntry]) -> None:
        self._entries = copy.deepcopy(list(entries))
        self.save_count += 1


class MemoryHistoryStore:
    """HistoryStore that keeps the history in memory."""

    def __init__(self, history: Iterable[str] = ()) -> None:
        self._history: List[str] = list(history)
        self.save_count = 0

    def load(self) -> List[str]:
        return list(self._history)

    def save(self, history: List[str]) -> None:
        self._history = list(history)
        self.save_count += 1
