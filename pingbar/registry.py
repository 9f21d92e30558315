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
Host registry for PingBar.

The registry exclusively owns the monitored HostEntry objects. Nothing here is
thread-safe on its own: the owning coordinator serializes every call under its
lock (see pingbar.monitor).
"""

import copy
import logging
from typing import Any, Dict, Iterable, List, Optional

from pingbar.models import HostEntry, Measurement

logger = logging.getLogger(__name__)


class HostRegistry:
    """Ordered collection of monitored hosts keyed by entry identifier."""

    def __init__(self, entries: Iterable[HostEntry] = ()) -> None:
        self._entries: Dict[str, HostEntry] = {}
        for entry in entries:
            entry.validate()
            self._entries[entry.id] = copy.deepcopy(entry)

    def add(self, host: Any, interval: Any, enabled: bool = True) -> HostEntry:
        """
        Create and store a new entry.

        Raises:
            ValidationError: If host is empty or interval is below one second
        """
        entry = HostEntry.create(host, interval, enabled=enabled)
        self._entries[entry.id] = entry
        logger.info("Added monitored host %s every %gs (id=%s)", entry.host, entry.interval, entry.id)
        return copy.deepcopy(entry)

    def remove(self, entry_id: str) -> bool:
        """Remove an entry. Returns False if no entry has that identifier."""
        entry = self._entries.pop(entry_id, None)
        if entry is None:
            return False
        logger.info("Removed monitored host %s (id=%s)", entry.host, entry_id)
        return True

    def update(self, entry: HostEntry) -> bool:
        """
        Replace the stored entry with the same identifier.

        Returns:
            True if an entry was replaced, False if the identifier is unknown

        Raises:
            ValidationError: If the new host or interval is invalid
        """
        if entry.id not in self._entries:
            return False
        replacement = copy.deepcopy(entry)
        replacement.validate()
        self._entries[entry.id] = replacement
        logger.info(
            "Updated monitored host %s every %gs enabled=%s (id=%s)",
            replacement.host,
            replacement.interval,
            replacement.enabled,
            entry.id,
        )
        return True

    def set_last_result(self, entry_id: str, measurement: Measurement) -> bool:
        """
        Record a probe result on an entry without touching its configuration.

        This is a lightweight write: it is not a structural change and does not
        require a reschedule or a save.

        Returns:
            True if the entry exists and was updated
        """
        entry = self._entries.get(entry_id)
        if entry is None:
            return False
        entry.last_result = measurement
        return True

    def get(self, entry_id: str) -> Optional[HostEntry]:
        """Return a copy of the entry, or None if it does not exist."""
        entry = self._entries.get(entry_id)
        return copy.deepcopy(entry) if entry is not None else None

    def entries(self) -> List[HostEntry]:
        """Return copies of all entries in insertion order."""
        return [copy.deepcopy(entry) for entry in self._entries.values()]

    def enabled_entries(self) -> List[HostEntry]:
        return [entry for entry in self.entries() if entry.enabled]

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._entries
