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
Single-probe execution for PingBar.

A Prober sends one reachability probe to an already resolved IPv4 address and
reports success and round-trip time. Three transports are available:

- system: the operating system's ping command, run as a child process
- helper: the cap_net_raw ping_helper binary (see pingbar.ping_wrapper)
- icmp:   raw ICMP echo through scapy (needs raw-socket privileges)

Transports signal failure with ProbeTimeout or ProbeTransportError; Prober.probe
turns those into a failed ProbeOutcome so callers never see an exception for a
network condition.
"""

import logging
import math
import re
import subprocess
import sys
from typing import NamedTuple, Optional

from pingbar.errors import ProbeTimeout, ProbeTransportError
from pingbar.ping_wrapper import PingHelperError, ping_with_helper

logger = logging.getLogger(__name__)

DEFAULT_PROBE_TIMEOUT = 2.0
SYSTEM_PING_TIMEOUT = 5.0
# Time a child ping process may overrun its own wait before it is killed.
SUPERVISOR_GRACE_SECONDS = 1.0

TRANSPORTS = ("system", "helper", "icmp")

_LATENCY_RE = re.compile(r"time[=<]\s*([\d.]+)\s*ms", re.IGNORECASE)


class ProbeOutcome(NamedTuple):
    """Result of a single probe. rtt_ms is set only when success is True."""

    success: bool
    rtt_ms: Optional[float] = None


def parse_ping_latency(output: str) -> Optional[float]:
    """
    Parse the round-trip time from ping command output.

    Matches the first ``time=12.345 ms`` (or ``time<1 ms``) token.

    Returns:
        Latency in milliseconds, or None if no reply line is present
    """
    match = _LATENCY_RE.search(output)
    if not match:
        return None
    try:
        return float(match.group(1))
    except ValueError:
        return None


class Prober:
    """Base class for probe transports."""

    name = "base"

    def __init__(self, timeout: float = DEFAULT_PROBE_TIMEOUT) -> None:
        if timeout <= 0:
            raise ValueError("timeout must be a positive number of seconds.")
        self.timeout = timeout

    def probe(self, address: str, timeout: Optional[float] = None) -> ProbeOutcome:
        """
        Send one probe and wait for the reply.

        Args:
            address: Resolved IPv4 address
            timeout: Reply timeout in seconds (defaults to the prober's timeout)

        Returns:
            ProbeOutcome with success and rtt_ms; failures never raise
        """
        wait = self.timeout if timeout is None else timeout
        try:
            rtt_ms = self._send(address, wait)
        except ProbeTimeout as e:
            logger.debug("No reply from %s via %s: %s", address, self.name, e)
            return ProbeOutcome(False, None)
        except (ProbeTransportError, OSError) as e:
            logger.warning("Probe to %s via %s failed: %s", address, self.name, e)
            return ProbeOutcome(False, None)
        logger.debug("Reply from %s via %s: rtt=%.3fms", address, self.name, rtt_ms)
        return ProbeOutcome(True, max(0.0, rtt_ms))

    def _send(self, address: str, timeout: float) -> float:
        """Send one probe and return the RTT in milliseconds, or raise a ProbeError."""
        raise NotImplementedError


class SystemPingProber(Prober):
    """
    Probe with the operating system's ping command.

    The child process is given ``timeout + SUPERVISOR_GRACE_SECONDS`` to finish;
    after that subprocess.run kills it, so a hung ping can never block the caller.
    """

    name = "system"

    def __init__(
        self,
        timeout: float = SYSTEM_PING_TIMEOUT,
        ping_command: str = "ping",
        platform: Optional[str] = None,
    ) -> None:
        super().__init__(timeout)
        self.ping_command = ping_command
        self.platform = platform or sys.platform

    def build_command(self, address: str, timeout: float) -> list:
        """Build the ping argument vector for the current platform."""
        if self.platform == "darwin":
            # BSD ping takes the reply wait in milliseconds.
            wait = str(max(1, int(timeout * 1000)))
        else:
            # iputils ping takes whole seconds.
            wait = str(max(1, math.ceil(timeout)))
        return [self.ping_command, "-c", "1", "-W", wait, "-n", address]

    def _send(self, address: str, timeout: float) -> float:
        cmd = self.build_command(address, timeout)
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=timeout + SUPERVISOR_GRACE_SECONDS,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            logger.debug("ping process for %s overran its budget, terminated", address)
            raise ProbeTimeout(f"ping process terminated after {e.timeout:.1f}s") from e
        except OSError as e:
            raise ProbeTransportError(f"could not run {self.ping_command}: {e}") from e

        latency = parse_ping_latency(result.stdout or "")
        if latency is not None:
            return latency

        stderr = result.stderr.strip() if result.stderr else ""
        if stderr:
            raise ProbeTransportError(f"{self.ping_command} exited with {result.returncode}: {stderr}")
        raise ProbeTimeout(f"no reply within {timeout:g}s")


class HelperProber(Prober):
    """Probe with the privileged ping_helper binary."""

    name = "helper"

    def __init__(self, timeout: float = DEFAULT_PROBE_TIMEOUT, helper_path: str = "./bin/ping_helper") -> None:
        super().__init__(timeout)
        self.helper_path = helper_path

    def _send(self, address: str, timeout: float) -> float:
        try:
            rtt_ms = ping_with_helper(address, timeout_ms=max(1, int(timeout * 1000)), helper_path=self.helper_path)
        except FileNotFoundError as e:
            raise ProbeTransportError(str(e)) from e
        except PingHelperError as e:
            raise ProbeTransportError(str(e)) from e
        if rtt_ms is None:
            raise ProbeTimeout(f"no reply within {timeout:g}s")
        return rtt_ms


class IcmpProber(Prober):
    """
    Probe with a raw ICMP echo request built by scapy.

    Opening the raw socket requires root or the cap_net_raw capability; without
    it the probe is reported as failed.
    """

    name = "icmp"

    def _send(self, address: str, timeout: float) -> float:
        # scapy is heavy to import; load it on first use.
        from scapy.all import ICMP, IP, Scapy_Exception, sr  # pylint: disable=import-outside-toplevel

        packet = IP(dst=address) / ICMP()
        try:
            answered, _ = sr(packet, timeout=timeout, verbose=0)
        except PermissionError as e:
            raise ProbeTransportError(f"raw ICMP socket not permitted: {e}") from e
        except (OSError, Scapy_Exception) as e:
            raise ProbeTransportError(str(e)) from e

        if not answered:
            raise ProbeTimeout(f"no reply within {timeout:g}s")
        sent, reply = answered[0]
        if not reply.haslayer(ICMP) or reply[ICMP].type != 0:
            raise ProbeTransportError(f"unexpected reply from {address}: {reply.summary()}")
        # scapy stamps the request at send and the reply at capture.
        return max(0.0, (reply.time - sent.sent_time) * 1000.0)


def create_prober(
    transport: str = "system",
    timeout: Optional[float] = None,
    ping_command: str = "ping",
    helper_path: str = "./bin/ping_helper",
) -> Prober:
    """
    Build a prober for the named transport.

    Args:
        transport: One of "system", "helper" or "icmp"
        timeout: Reply timeout in seconds (transport default when None)
        ping_command: ping executable for the system transport
        helper_path: ping_helper path for the helper transport

    Raises:
        ValueError: For an unknown transport name
    """
    if transport == "system":
        return SystemPingProber(timeout=timeout or SYSTEM_PING_TIMEOUT, ping_command=ping_command)
    if transport == "helper":
        return HelperProber(timeout=timeout or DEFAULT_PROBE_TIMEOUT, helper_path=helper_path)
    if transport == "icmp":
        return IcmpProber(timeout=timeout or DEFAULT_PROBE_TIMEOUT)
    raise ValueError(f"Unknown transport '{transport}'. Choose from: {', '.join(TRANSPORTS)}.")
