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
Latency color classification for PingBar results.
"""

import re
from typing import Optional

from pingbar.models import Measurement

ANSI_RESET = "\x1b[0m"
ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;]*m")

# Upper bounds (exclusive, milliseconds) for each latency band.
LATENCY_BANDS = (
    (100.0, "green"),
    (250.0, "yellow"),
    (500.0, "orange"),
    (2500.0, "red"),
)
EXTREME_LATENCY_COLOR = "purple"
UNREACHABLE_COLOR = "gray"

COLOR_CODES = {
    "green": "\x1b[32m",
    "yellow": "\x1b[33m",
    "orange": "\x1b[38;5;208m",
    "red": "\x1b[31m",
    "purple": "\x1b[35m",
    "gray": "\x1b[90m",  # Dark gray (bright black)
}


def latency_color(measurement: Optional[Measurement]) -> str:
    """
    Classify a measurement into a display color name.

    Unreachable or missing results are gray; otherwise the latency band decides.
    """
    if measurement is None or not measurement.reachable or measurement.latency is None:
        return UNREACHABLE_COLOR
    for upper_bound, color in LATENCY_BANDS:
        if measurement.latency < upper_bound:
            return color
    return EXTREME_LATENCY_COLOR


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences from text."""
    return ANSI_ESCAPE_RE.sub("", text)


def colorize_text(text: str, color: Optional[str], use_color: bool) -> str:
    """Apply an ANSI color to text."""
    if not use_color or not color:
        return text
    code = COLOR_CODES.get(color)
    if not code:
        return text
    return f"{code}{text}{ANSI_RESET}"


def format_measurement(measurement: Measurement, use_color: bool = False) -> str:
    """Render a measurement as a one-line, optionally colored, status string."""
    if measurement.reachable and measurement.latency is not None:
        text = f"{measurement.host}: reachable {measurement.latency:.2f} ms"
    else:
        text = f"{measurement.host}: unreachable"
    return colorize_text(text, latency_color(measurement), use_color)
