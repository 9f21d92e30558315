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
Command-line interface for PingBar.

Diagnostic entry points around the monitoring core: a single on-demand ping,
resolve-and-report, a foreground monitor loop and a fixed self-test battery.
"""

import argparse
import json
import logging
import os
import queue
import sys
import time
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pingbar import __version__
from pingbar.aggregator import MeasurementAggregator
from pingbar.colors import format_measurement
from pingbar.config import LOG_LEVELS, load_config
from pingbar.errors import ResolutionFailure, ValidationError
from pingbar.models import MIN_INTERVAL_SECONDS, Measurement, validate_interval
from pingbar.prober import TRANSPORTS, create_prober
from pingbar.resolver import resolve
from pingbar.state import AppState
from pingbar.store import MemoryHistoryStore, MemoryHostStore

logger = logging.getLogger(__name__)

# Fixed battery for `pingbar selftest`: (label, host, count, expect_reachable)
SELFTEST_BATTERY: List[Tuple[str, str, int, bool]] = [
    ("Ping 8.8.8.8", "8.8.8.8", 1, True),
    ("Ping google.com", "google.com", 1, True),
    ("Ping invalid host", "invalid.host.that.does.not.exist.test", 1, False),
    ("Ping 8.8.8.8 (count=3)", "8.8.8.8", 3, True),
    ("Ping 1.1.1.1", "1.1.1.1", 1, True),
]


def _configure_logging(log_level: str, log_file: Optional[str]) -> None:
    """Configure logging handlers for CLI execution."""
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.insert(0, logging.FileHandler(os.path.expanduser(log_file), encoding="utf-8"))
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(message)s",
        handlers=handlers,
        force=True,
    )


# Hardcoded defaults for config-overridable fields.
# Applied after config merging for any field still set to None.
# probe_timeout stays None so that each transport picks its own default.
_HARDCODED_DEFAULTS: Dict[str, Any] = {
    "count": 1,
    "interval": 60.0,
    "transport": "system",
    "ping_command": "ping",
    "ping_helper": "./bin/ping_helper",
    "max_workers": 8,
    "log_level": "INFO",
    "color": False,
}


def _apply_config_to_args(args: argparse.Namespace, config: Dict[str, Any]) -> None:
    """
    Fill options the command line left unset (None) from the config file.

    Config ``hosts`` go to ``args.config_hosts``; ``monitor`` falls back to
    them when no hosts are named on the command line.
    """
    for key, value in config.items():
        if key == "hosts":
            args.config_hosts = value
        elif hasattr(args, key) and getattr(args, key) is None:
            setattr(args, key, value)


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--transport",
        type=str,
        default=None,
        choices=list(TRANSPORTS),
        help="Probe transport: system ping command, ping_helper binary, or raw ICMP (default: system)",
    )
    common.add_argument(
        "-t",
        "--timeout",
        dest="probe_timeout",
        type=float,
        default=None,
        help="Reply timeout in seconds for each probe (default: 5 for system, 2 otherwise)",
    )
    common.add_argument(
        "--ping-command",
        type=str,
        default=None,
        help="ping executable used by the system transport (default: ping)",
    )
    common.add_argument(
        "-H",
        "--ping-helper",
        type=str,
        default=None,
        help="Path to ping_helper binary (default: ./bin/ping_helper)",
    )
    common.add_argument(
        "--max-workers",
        type=int,
        default=None,
        help="Maximum concurrent probes (default: 8)",
    )
    common.add_argument(
        "-C",
        "--color",
        action="store_true",
        default=None,
        help="Enable colored output (green < 100ms, yellow < 250ms, orange < 500ms, red < 2500ms, purple above, gray unreachable)",
    )
    common.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Shortcut for --log-level DEBUG",
    )
    common.add_argument(
        "--log-level",
        type=str.upper,
        default=None,
        choices=list(LOG_LEVELS),
        help="Logging level (default: INFO)",
    )
    common.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Optional log file path for persistent logging",
    )
    common.add_argument(
        "--no-config",
        action="store_true",
        default=False,
        help="Skip loading ~/.pingbar.conf config file",
    )

    parser = argparse.ArgumentParser(
        prog="pingbar",
        description="PingBar - measure reachability and latency of network hosts",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    ping_parser = subparsers.add_parser("ping", parents=[common], help="Measure one host now")
    ping_parser.add_argument("host", help="IP address or hostname")
    ping_parser.add_argument(
        "-c",
        "--count",
        type=int,
        default=None,
        help="Number of probes to average (default: 1)",
    )
    ping_parser.add_argument("--json", action="store_true", help="Print the result as JSON")

    resolve_parser = subparsers.add_parser("resolve", parents=[common], help="Resolve a host to IPv4 and report")
    resolve_parser.add_argument("host", help="IP address or hostname")

    monitor_parser = subparsers.add_parser("monitor", parents=[common], help="Monitor hosts on a schedule")
    monitor_parser.add_argument("hosts", nargs="*", help="Hosts to monitor (default: [hosts] from config)")
    monitor_parser.add_argument(
        "-i",
        "--interval",
        type=float,
        default=None,
        help=f"Seconds between checks of each host (default: 60, minimum: {MIN_INTERVAL_SECONDS:g})",
    )
    monitor_parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help="Stop after this many seconds (default: run until interrupted)",
    )

    subparsers.add_parser("selftest", parents=[common], help="Run the fixed diagnostic battery")
    return parser


def handle_options(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse and validate command-line arguments."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    args.config_hosts = []
    for field in ("count", "interval"):
        if not hasattr(args, field):
            setattr(args, field, None)

    # Load and apply config file unless --no-config was given
    if not args.no_config:
        try:
            config = load_config()
            _apply_config_to_args(args, config)
        except ValueError as exc:
            parser.error(str(exc))

    # Apply hardcoded defaults for any config-overridable field still at None
    for field, default in _HARDCODED_DEFAULTS.items():
        if getattr(args, field, None) is None:
            setattr(args, field, default)

    if args.verbose:
        args.log_level = "DEBUG"
    args.log_level = str(args.log_level).upper()
    if args.log_level not in LOG_LEVELS:
        parser.error(f"log level must be one of: {', '.join(LOG_LEVELS)}.")
    if args.transport not in TRANSPORTS:
        parser.error(f"--transport must be one of: {', '.join(TRANSPORTS)}.")
    if args.probe_timeout is not None and args.probe_timeout <= 0:
        parser.error("--timeout must be a positive number of seconds.")
    if args.count < 1:
        parser.error("--count must be at least 1.")
    try:
        args.interval = validate_interval(args.interval)
    except ValidationError as exc:
        parser.error(f"--interval: {exc}")
    if args.max_workers < 1:
        parser.error("--max-workers must be at least 1.")
    if getattr(args, "duration", None) is not None and args.duration <= 0:
        parser.error("--duration must be positive.")
    return args


def build_aggregator(args: argparse.Namespace) -> MeasurementAggregator:
    """Build the measurement service described by the parsed options."""
    prober = create_prober(
        args.transport,
        timeout=args.probe_timeout,
        ping_command=args.ping_command,
        helper_path=os.path.expanduser(args.ping_helper),
    )
    return MeasurementAggregator(prober)


def run_ping(args: argparse.Namespace, aggregator: MeasurementAggregator) -> int:
    """Measure one host through the on-demand controller."""
    state = AppState(aggregator, history_store=MemoryHistoryStore(), max_workers=1, on_demand_count=args.count)
    try:
        future = state.submit(args.host)
        if future is None:
            print("Error: host must not be empty.", file=sys.stderr)
            return 2
        measurement = future.result()
    finally:
        state.close()

    if args.json:
        print(json.dumps(measurement.to_dict()))
    else:
        print(format_measurement(measurement, use_color=args.color and sys.stdout.isatty()))
    return 0 if measurement.reachable else 1


def run_resolve(args: argparse.Namespace) -> int:
    """Resolve a host and report the IPv4 address."""
    try:
        address = resolve(args.host)
    except ResolutionFailure as exc:
        print(f"FAIL: {exc}")
        return 1
    print(f"PASS: Resolved {args.host} to {address}")
    return 0


def _collect_monitor_hosts(args: argparse.Namespace) -> List[Dict[str, Any]]:
    if args.hosts:
        return [{"host": host, "interval": None, "enabled": True} for host in args.hosts]
    return list(args.config_hosts)


def run_monitor(args: argparse.Namespace, aggregator: MeasurementAggregator) -> int:
    """Schedule hosts and print every result until interrupted or the duration elapses."""
    host_configs = _collect_monitor_hosts(args)
    if not host_configs:
        print("Error: No hosts specified. Provide hosts as arguments or in the [hosts] config section.")
        return 2

    events: "queue.Queue[Dict[str, Any]]" = queue.Queue()
    state = AppState(aggregator, host_store=MemoryHostStore(), event_queue=events, max_workers=args.max_workers)
    try:
        for host_config in host_configs:
            interval = host_config["interval"] if host_config.get("interval") is not None else args.interval
            state.add_monitored_host(host_config["host"], interval, enabled=host_config.get("enabled", True))
    except ValidationError as exc:
        print(f"Error: {exc}")
        state.close()
        return 2

    entries = state.monitored_hosts
    enabled = [entry for entry in entries if entry.enabled]
    print(f"PingBar - Monitoring {len(enabled)} of {len(entries)} host(s) with transport={args.transport}")
    use_color = args.color and sys.stdout.isatty()
    deadline = time.monotonic() + args.duration if args.duration else None

    state.start()
    try:
        while deadline is None or time.monotonic() < deadline:
            try:
                event = events.get(timeout=0.2)
            except queue.Empty:
                continue
            if event["event"] == "result":
                stamp = event["measurement"].timestamp.strftime("%H:%M:%S")
                print(f"[{stamp}] {format_measurement(event['measurement'], use_color=use_color)}")
    except KeyboardInterrupt:
        pass
    finally:
        state.close()

    print("\n" + "=" * 60)
    print("SUMMARY")
    print("=" * 60)
    for entry in state.monitored_hosts:
        if entry.last_result is None:
            status = "no result"
        else:
            status = format_measurement(entry.last_result, use_color=use_color)
        print(f"{entry.host:30} every {entry.interval:g}s  {status}")
    return 0


def _print_selftest_result(label: str, measurement: Measurement, expect_reachable: bool) -> bool:
    passed = measurement.reachable == expect_reachable
    verdict = "PASS" if passed else "FAIL"
    if measurement.reachable:
        print(f"{verdict}: {label}: {measurement.host} is reachable, latency {measurement.latency:.2f}ms")
    else:
        print(f"{verdict}: {label}: {measurement.host} is unreachable")
    return passed


def run_selftest(args: argparse.Namespace, aggregator: MeasurementAggregator) -> int:
    """Run the fixed diagnostic battery and report PASS/FAIL per target."""
    print(f"=== PingBar self-test (transport={args.transport}) ===")
    failures = 0
    for label, host, count, expect_reachable in SELFTEST_BATTERY:
        measurement = aggregator.measure(host, count=count)
        if not _print_selftest_result(label, measurement, expect_reachable):
            failures += 1
    print(f"=== {len(SELFTEST_BATTERY) - failures}/{len(SELFTEST_BATTERY)} passed ===")
    return 0 if failures == 0 else 1


def run(args: argparse.Namespace) -> int:
    """Dispatch the parsed command and return the process exit code."""
    logger.debug("Running %s with transport=%s", args.command, args.transport)
    if args.command == "resolve":
        return run_resolve(args)
    aggregator = build_aggregator(args)
    if args.command == "ping":
        return run_ping(args, aggregator)
    if args.command == "monitor":
        return run_monitor(args, aggregator)
    return run_selftest(args, aggregator)


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main entrypoint for the CLI - parses arguments and runs the application."""
    args = handle_options(argv)
    _configure_logging(args.log_level, args.log_file)
    sys.exit(run(args))
