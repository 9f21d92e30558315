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
Data model for PingBar.

A Measurement is the summarized outcome of one probe round for one host, and a
HostEntry is one monitored target together with its most recent Measurement.
"""

import math
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pingbar.errors import ValidationError

MIN_INTERVAL_SECONDS = 1.0
# Longest wait Event.wait accepts.
MAX_INTERVAL_SECONDS = threading.TIMEOUT_MAX


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Measurement:
    """
    Outcome of one probe round for one host.

    Exactly one of two states holds: reachable with a latency, or unreachable
    without one. Construction enforces this.
    """

    host: str
    latency: Optional[float]
    reachable: bool
    timestamp: datetime = field(default_factory=_utc_now)

    def __post_init__(self) -> None:
        if self.reachable and self.latency is None:
            raise ValueError("A reachable measurement requires a latency.")
        if not self.reachable and self.latency is not None:
            raise ValueError("An unreachable measurement cannot carry a latency.")
        if self.latency is not None and self.latency < 0:
            raise ValueError("latency must be non-negative.")

    @classmethod
    def success(cls, host: str, latency: float, timestamp: Optional[datetime] = None) -> "Measurement":
        """Build a reachable measurement with the given latency in milliseconds."""
        return cls(host=host, latency=float(latency), reachable=True, timestamp=timestamp or _utc_now())

    @classmethod
    def unreachable(cls, host: str, timestamp: Optional[datetime] = None) -> "Measurement":
        """Build an unreachable measurement."""
        return cls(host=host, latency=None, reachable=False, timestamp=timestamp or _utc_now())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "host": self.host,
            "latency_ms": self.latency,
            "reachable": self.reachable,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Measurement":
        return cls(
            host=str(data["host"]),
            latency=data.get("latency_ms"),
            reachable=bool(data["reachable"]),
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )


def validate_host(host: Any) -> str:
    """
    Validate a user-supplied host string.

    Args:
        host: IP literal or DNS name as typed by the user

    Returns:
        The host with surrounding whitespace removed

    Raises:
        ValidationError: If the host is not a string or is empty
    """
    if not isinstance(host, str):
        raise ValidationError(f"host must be a string, got {type(host).__name__}.")
    host = host.strip()
    if not host:
        raise ValidationError("host must not be empty.")
    return host


def validate_interval(interval: Any) -> float:
    """
    Validate a monitoring interval in seconds.

    Raises:
        ValidationError: If the interval is not a finite number between one
            second and the longest wait a timer thread supports
    """
    if isinstance(interval, bool):
        raise ValidationError("interval must be a number of seconds.")
    try:
        value = float(interval)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"interval must be a number of seconds, got {interval!r}.") from exc
    if not math.isfinite(value):
        raise ValidationError(f"interval must be a finite number of seconds, got {interval!r}.")
    if value < MIN_INTERVAL_SECONDS:
        raise ValidationError(f"interval must be at least {MIN_INTERVAL_SECONDS:g} second(s), got {interval!r}.")
    if value > MAX_INTERVAL_SECONDS:
        raise ValidationError(f"interval must be at most {MAX_INTERVAL_SECONDS:g} seconds, got {interval!r}.")
    return value


@dataclass
class HostEntry:
    """One monitored host: its configuration plus the last observed result."""

    host: str
    interval: float
    enabled: bool = True
    last_result: Optional[Measurement] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @classmethod
    def create(cls, host: Any, interval: Any, enabled: bool = True) -> "HostEntry":
        """Validate user input and build a new entry with a fresh identifier."""
        return cls(host=validate_host(host), interval=validate_interval(interval), enabled=bool(enabled))

    def validate(self) -> None:
        """Re-validate an entry handed back by the caller before it replaces a stored one."""
        self.host = validate_host(self.host)
        self.interval = validate_interval(self.interval)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "host": self.host,
            "interval": self.interval,
            "enabled": self.enabled,
            "last_result": self.last_result.to_dict() if self.last_result is not None else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HostEntry":
        last_result = data.get("last_result")
        entry = cls(
            host=validate_host(data["host"]),
            interval=validate_interval(data["interval"]),
            enabled=bool(data.get("enabled", True)),
            last_result=Measurement.from_dict(last_result) if last_result else None,
        )
        if data.get("id"):
            entry.id = str(data["id"])
        return entry
