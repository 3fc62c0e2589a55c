"""Command line interface for running a lead scan."""
from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path

from .config import ConfigurationError, CrawlerSettings, load_configuration
from .export import export_leads
from .factory import build_service
from .orchestrator import ScanQueryError
from .orchestrator.service import DEFAULT_LIMIT


def build_parser(prog: str | None = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=prog,
        description="Discover and enrich business leads for a query such as 'dentists in Austin, TX'",
    )
    parser.add_argument("query", help="Free-text niche and location to scan for")
    parser.add_argument("output", help="Path where the leads should be written (CSV, TSV, or XLSX)")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to the crawler configuration file (YAML or JSON)",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=DEFAULT_LIMIT,
        help="Maximum number of leads to discover",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        default=None,
        help="Number of leads enriched in parallel (overrides the configuration)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (e.g. DEBUG, INFO, WARNING)",
    )
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_configuration(args.config) if args.config else {}
        settings = CrawlerSettings.from_mapping(config)
        if args.concurrency is not None:
            if args.concurrency < 1:
                raise ConfigurationError("--concurrency must be at least 1")
            settings = dataclasses.replace(settings, concurrency=args.concurrency)
        service = build_service(config, settings=settings)
    except ConfigurationError as exc:
        logging.error("%s", exc)
        return 1

    try:
        leads = service.run(args.query, limit=args.limit)
    except ScanQueryError as exc:
        logging.error("%s", exc)
        return 1
    finally:
        service.shutdown()

    output_path = export_leads(leads, args.output)
    logging.info("Scanned '%s' and kept %s leads", args.query, len(leads))
    logging.info("Leads written to %s", Path(output_path).resolve())
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
