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
Python wrapper for the privileged ICMP ping_helper.

The ping_helper binary has the cap_net_raw capability set, so non-root users can
send ICMP echo requests without granting privileges to the Python interpreter.

CLI contract of the helper:
  - Usage: ping_helper <address> <timeout_ms>
  - Success (exit 0): prints "rtt_ms=<value> ttl=<value>"
  - Timeout (exit 7): no output, normal timeout behavior (not an error)
  - Errors (exit 1-6, 8): message on stderr
"""

import os
import subprocess
from typing import Optional

HELPER_TIMEOUT_EXIT_CODE = 7
# Extra time granted to the helper process before it is killed.
HELPER_GRACE_SECONDS = 1.0


class PingHelperError(RuntimeError):
    """Raised when ping_helper returns an error."""

    def __init__(self, message, returncode=None, stderr=None):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


def parse_helper_output(stdout: str) -> Optional[float]:
    """
    Extract the RTT in milliseconds from ping_helper output.

    Returns:
        RTT in milliseconds, or None if no parsable rtt_ms token is present
    """
    for line in stdout.splitlines():
        for token in line.split():
            if token.startswith("rtt_ms="):
                try:
                    return float(token.split("=", 1)[1])
                except ValueError:
                    return None
    return None


def ping_with_helper(address: str, timeout_ms: int = 2000, helper_path: str = "./bin/ping_helper") -> Optional[float]:
    """
    Send one echo request through the ping_helper binary.

    Args:
        address: The resolved IPv4 address to probe
        timeout_ms: Reply timeout in milliseconds
        helper_path: Path to the ping_helper binary

    Returns:
        RTT in milliseconds on success; None on timeout (normal behavior, not an error)

    Raises:
        FileNotFoundError: If the ping_helper binary is not found
        PingHelperError: If the helper exits with an error code (1-6, 8)
        ValueError: If timeout_ms is not positive
    """
    if timeout_ms <= 0:
        raise ValueError("timeout_ms must be a positive integer in milliseconds.")

    if not os.path.exists(helper_path):
        raise FileNotFoundError(f"ping_helper binary not found at {helper_path}.")

    try:
        result = subprocess.run(
            [helper_path, address, str(timeout_ms)],
            capture_output=True,
            text=True,
            timeout=(timeout_ms / 1000.0) + HELPER_GRACE_SECONDS,
            check=False,
        )
    except subprocess.TimeoutExpired:
        # subprocess.run kills the helper before raising.
        return None

    if result.returncode == 0:
        return parse_helper_output(result.stdout)

    if result.returncode == HELPER_TIMEOUT_EXIT_CODE:
        return None

    stderr = result.stderr.strip() if result.stderr else ""
    details = f"ping_helper failed with return code {result.returncode}"
    if stderr:
        details = f"{details}: {stderr}"
    raise PingHelperError(details, returncode=result.returncode, stderr=stderr)
