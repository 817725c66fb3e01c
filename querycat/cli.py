"""
Run the bookstore catalog once against MongoDB and print the report.
"""
from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from typing import Sequence

from .catalog import bookstore_catalog
from .config import RunnerConfig, StoreConfig
from .errors import StoreConnectionError
from .report import render_json, render_text
from .runner import CatalogRunner
from .store import MongoStore

EXIT_OK = 0
EXIT_OPERATION_FAILED = 1
EXIT_CONNECTION_ERROR = 2
EXIT_CONFIG_ERROR = 3

logger = logging.getLogger(__name__)


def build_parser(
    store_defaults: StoreConfig, runner_defaults: RunnerConfig
) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="querycat", description="Run the bookstore query catalog against MongoDB"
    )
    parser.add_argument("--uri", type=str, default=store_defaults.uri, help="MongoDB connection URI")
    parser.add_argument("--database", type=str, default=store_defaults.database, help="Database name")
    parser.add_argument(
        "--collection", type=str, default=store_defaults.collection, help="Collection name"
    )
    parser.add_argument(
        "--deadline",
        type=float,
        default=runner_defaults.deadline_s,
        help="Overall deadline in seconds; remaining operations are marked as timed out",
    )
    parser.add_argument(
        "--only",
        action="append",
        metavar="NAME",
        help="Run only the named operation (repeatable)",
    )
    parser.add_argument("--json", action="store_true", help="Print the report as JSON")
    parser.add_argument("--list", action="store_true", help="List catalog operations and exit")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def main(argv: Sequence[str] | None = None) -> int:
    try:
        store_defaults = StoreConfig.from_env()
        runner_defaults = RunnerConfig.from_env()
    except ValueError as exc:
        _configure_logging(verbose=False)
        logger.error("Invalid QUERYCAT_* environment configuration: %s", exc)
        return EXIT_CONFIG_ERROR

    args = build_parser(store_defaults, runner_defaults).parse_args(argv)
    _configure_logging(args.verbose)

    catalog = bookstore_catalog()
    if args.list:
        for spec in catalog:
            print(f"{spec.name}\t{spec.kind.value}")
        return EXIT_OK

    try:
        if args.only:
            catalog = catalog.select(args.only)
        store_config = dataclasses.replace(
            store_defaults, uri=args.uri, database=args.database, collection=args.collection
        )
        runner = CatalogRunner(deadline_s=RunnerConfig(deadline_s=args.deadline).deadline_s)
    except ValueError as exc:
        # CatalogError is a ValueError
        logger.error("%s", exc)
        return EXIT_CONFIG_ERROR

    try:
        report = runner.run(catalog, MongoStore(store_config))
    except StoreConnectionError as exc:
        logger.error("Connection failed: %s", exc)
        return EXIT_CONNECTION_ERROR

    print(render_json(report) if args.json else render_text(report))
    return EXIT_OK if report.all_ok else EXIT_OPERATION_FAILED


if __name__ == "__main__":
    sys.exit(main())
