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
Exception types for PingBar.

Network conditions (resolution and probe failures) are expected outcomes and are
folded into unreachable measurements before they reach application code. Only
ValidationError is raised to callers, as a rejected operation.
"""

from typing import Optional


class PingBarError(Exception):
    """Base class for all PingBar errors."""


class ResolutionFailure(PingBarError):
    """Raised when a host name does not resolve to an IPv4 address."""

    def __init__(self, host: str, reason: Optional[str] = None):
        message = f"Could not resolve '{host}' to an IPv4 address"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.host = host
        self.reason = reason


class ProbeError(PingBarError):
    """Base class for failures of a single probe attempt."""


class ProbeTimeout(ProbeError):
    """Raised by a transport when no reply arrived within the timeout."""


class ProbeTransportError(ProbeError):
    """Raised by a transport on permission, spawn or socket failures."""


class ValidationError(PingBarError, ValueError):
    """Raised when user input is rejected (empty host, interval below minimum)."""
