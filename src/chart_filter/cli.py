"""Command-line entrypoint: index the charts of a checkout and filter them.

Usage:
  chart-filter --root . --subscription subscription.yaml [--config settings.json] [-v]

Prints the filtered index report as JSON on stdout.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

import structlog

from .core import generate_index
from .filtering import MissingRequiredFieldError
from .log import configure_logging
from .parsers.chart_yaml import ChartLoadError
from .parsers.subscription import SubscriptionError, load_subscription
from .report import index_report
from .settings import ConfigError, load_settings

logger = structlog.get_logger()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="chart-filter", description=__doc__.splitlines()[0])
    parser.add_argument("--root", type=Path, default=Path("."), help="Repository checkout root")
    parser.add_argument(
        "--subscription",
        type=Path,
        required=True,
        help="Subscription YAML whose package filter is applied",
    )
    parser.add_argument("--config", type=Path, default=None, help="Settings JSON file")
    parser.add_argument("-v", "--verbose", action="count", default=0)
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(verbose=args.verbose, json_output=args.json_logs)

    try:
        settings = load_settings(args.config)
        policy = load_subscription(
            args.subscription, annotation_key=settings.secondary_version_annotation
        )
        index = generate_index(policy, args.root, settings=settings)
    except (ConfigError, SubscriptionError, ChartLoadError, MissingRequiredFieldError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    report = index_report(index, policy)
    logger.info("filter.done", charts=report["totals"]["charts"])
    print(json.dumps(report, indent=2))
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
