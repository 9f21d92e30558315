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
Unit tests for pingbar.resolver.
"""

import os
import socket
import sys
import unittest
from unittest.mock import patch

# Add parent directory to path to import pingbar
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "../..")))

from pingbar.errors import ResolutionFailure  # noqa: E402
from pingbar.resolver import is_ipv4_literal, resolve  # noqa: E402


def _info(address):
    return (socket.AF_INET, socket.SOCK_STREAM, socket.IPPROTO_TCP, "", (address, 0))


class TestIsIpv4Literal(unittest.TestCase):
    """Test IPv4 literal detection"""

    def test_dotted_quad(self):
        self.assertTrue(is_ipv4_literal("8.8.8.8"))
        self.assertTrue(is_ipv4_literal("0.0.0.0"))

    def test_not_literals(self):
        for value in ("example.com", "256.1.1.1", "::1", "1.2.3", ""):
            self.assertFalse(is_ipv4_literal(value), value)


class TestResolve(unittest.TestCase):
    """Test forward resolution"""

    @patch("pingbar.resolver.socket.getaddrinfo")
    def test_literal_skips_lookup(self, mock_getaddrinfo):
        self.assertEqual(resolve("1.1.1.1"), "1.1.1.1")
        mock_getaddrinfo.assert_not_called()

    @patch("pingbar.resolver.socket.getaddrinfo")
    def test_first_ipv4_address_wins(self, mock_getaddrinfo):
        mock_getaddrinfo.return_value = [_info("93.184.216.34"), _info("93.184.216.35")]

        self.assertEqual(resolve("example.com"), "93.184.216.34")
        args = mock_getaddrinfo.call_args[0]
        self.assertEqual(args[0], "example.com")
        self.assertEqual(args[2], socket.AF_INET)

    @patch("pingbar.resolver.socket.getaddrinfo")
    def test_lookup_error_raises_resolution_failure(self, mock_getaddrinfo):
        mock_getaddrinfo.side_effect = socket.gaierror(-2, "Name or service not known")

        with self.assertRaises(ResolutionFailure) as context:
            resolve("invalid.host.that.does.not.exist.test")
        self.assertEqual(context.exception.host, "invalid.host.that.does.not.exist.test")
        self.assertIn("Name or service not known", str(context.exception))

    @patch("pingbar.resolver.socket.getaddrinfo", return_value=[])
    def test_no_address_raises_resolution_failure(self, _mock_getaddrinfo):
        with self.assertRaises(ResolutionFailure):
            resolve("ipv6-only.example")

    @patch("pingbar.resolver.socket.getaddrinfo")
    def test_empty_host_raises_without_lookup(self, mock_getaddrinfo):
        with self.assertRaises(ResolutionFailure):
            resolve("  ")
        mock_getaddrinfo.assert_not_called()


if __name__ == "__main__":
    unittest.main()
