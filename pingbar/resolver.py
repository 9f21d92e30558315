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
Forward name resolution for PingBar.

Hosts are resolved to IPv4 only. IPv6-only names fail resolution and the host is
reported as unreachable.
"""

import ipaddress
import logging
import socket

from pingbar.errors import ResolutionFailure

logger = logging.getLogger(__name__)


def is_ipv4_literal(host: str) -> bool:
    """Return True if host is a dotted-quad IPv4 address."""
    try:
        ipaddress.IPv4Address(host)
    except ValueError:
        return False
    return True


def resolve(host: str) -> str:
    """
    Resolve a host string to a routable IPv4 address.

    IPv4 literals are returned unchanged without any lookup. Other names go
    through getaddrinfo restricted to AF_INET, and the first address wins.

    Args:
        host: IP literal or DNS name

    Returns:
        IPv4 address as a dotted-quad string

    Raises:
        ResolutionFailure: If the lookup errors or yields no IPv4 address
    """
    if is_ipv4_literal(host):
        return host

    if not host or not host.strip():
        raise ResolutionFailure(host, "empty host")

    try:
        infos = socket.getaddrinfo(
            host,
            None,
            socket.AF_INET,
            socket.SOCK_STREAM,
            socket.IPPROTO_TCP,
            socket.AI_ADDRCONFIG,
        )
    except (socket.gaierror, socket.herror, UnicodeError, OSError) as e:
        logger.debug("Failed to resolve %s: %s", host, e)
        raise ResolutionFailure(host, str(e)) from e

    for family, _type, _proto, _canonname, sockaddr in infos:
        if family == socket.AF_INET and sockaddr:
            address = sockaddr[0]
            logger.debug("Resolved %s to %s", host, address)
            return address

    raise ResolutionFailure(host, "no IPv4 address returned")
