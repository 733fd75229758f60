"""Command-line entry point for monit.

Usage:
    monit [--config monit.yaml] [--host URL] [--interval 30] [--base app=api] send
    monit [--config monit.yaml] [--host URL] [--interval 30] run

Settings not given on the command line come from MONIT_* environment
variables, then from the ``monit:`` section of the config file.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any

from monit.config import ReportConfig
from monit.errors import ConfigResolutionError
from monit.monitor import Monitor
from monit.observability.logging import setup_logging

logger = logging.getLogger(__name__)

EXIT_DROPPED = 1
EXIT_CONFIG = 2


def _parse_base(pairs: list[str]) -> dict[str, Any] | None:
    """Parse KEY=VALUE pairs; values are decoded as JSON when possible."""
    if not pairs:
        return None
    base: dict[str, Any] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"--base expects KEY=VALUE, got {pair!r}")
        try:
            base[key] = json.loads(raw)
        except json.JSONDecodeError:
            base[key] = raw
    return base


def _load_config(args: argparse.Namespace) -> ReportConfig:
    return ReportConfig.from_yaml(
        args.config,
        host=args.host,
        interval=args.interval,
        base=_parse_base(args.base),
    )


def cmd_send(args: argparse.Namespace, config: ReportConfig) -> int:
    """Send a single report and print it."""
    monitor = Monitor(config)
    try:
        payload = monitor.flush()
    finally:
        monitor.stop()
    if payload is None:
        print("Report was dropped; see log for details.", file=sys.stderr)
        return EXIT_DROPPED
    print(json.dumps(payload, indent=2))
    return 0


def cmd_run(args: argparse.Namespace, config: ReportConfig) -> int:
    """Report in the foreground until interrupted."""
    monitor = Monitor(config)
    monitor.start()
    try:
        monitor.join()
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping")
    finally:
        monitor.stop(wait=True, timeout=config.timeout)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="monit", description="Report process metrics to an HTTP endpoint")
    parser.add_argument("--config", default="monit.yaml", help="YAML config file (default: monit.yaml)")
    parser.add_argument("--host", help="Report endpoint URL (overrides MONIT_HOST)")
    parser.add_argument("--interval", type=int, help="Seconds between reports (overrides MONIT_INTERVAL)")
    parser.add_argument("--base", action="append", default=[], metavar="KEY=VALUE",
                        help="Field to include in every report (repeatable)")
    sub = parser.add_subparsers(dest="command", required=True)

    p_send = sub.add_parser("send", help="Send one report now")
    p_send.set_defaults(func=cmd_send)

    p_run = sub.add_parser("run", help="Report every interval until interrupted")
    p_run.set_defaults(func=cmd_run)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = _load_config(args)
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))
    except ConfigResolutionError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG

    setup_logging(config.log_level)
    return args.func(args, config)
