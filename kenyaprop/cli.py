# kenyaprop/cli.py
from __future__ import annotations

import argparse
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from kenyaprop.core.config import (
    LISTING_TYPE_FILTERS,
    PROPERTY_TYPE_FILTERS,
    ScrapeConfig,
    load_config,
)
from kenyaprop.core.runner import failure_summary, run_scrape
from kenyaprop.core.schema import SUPPORTED_CURRENCIES
from kenyaprop.sinks.base import Sink
from kenyaprop.sinks.jsonl_sink import JsonlSink
from kenyaprop.sites import SITE_REGISTRY

log = logging.getLogger("kenyaprop")


def safe_filename(run_id: str) -> str:
    # 2026-02-26T10:11:12.123456+00:00 -> 2026-02-26T10_11_12_123456_00_00
    return run_id.replace(":", "_").replace(".", "_").replace("+", "_")


def default_out_path(out_dir: str, run_id: str) -> str:
    return str(Path(out_dir) / f"listings_{safe_filename(run_id)}.jsonl")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="kenyaprop",
        description="Kenya real-estate scraper (BuyRentKenya, Jiji) with normalized output.",
    )
    p.add_argument("--config", default=None,
                   help="JSON input file (sources, listingType, propertyType, location, maxListings, currency).")
    p.add_argument("--sources", nargs="+", default=None,
                   help=f"Sources to scrape. Known: {', '.join(sorted(SITE_REGISTRY))}.")
    p.add_argument("--listing-type", choices=LISTING_TYPE_FILTERS, default=None)
    p.add_argument("--property-type", choices=PROPERTY_TYPE_FILTERS, default=None)
    p.add_argument("--location", default=None, help="Free-text location filter, e.g. 'Westlands'.")
    p.add_argument("--max-listings", type=int, default=None, help="Global listing cap split across sources.")
    p.add_argument("--currency", choices=SUPPORTED_CURRENCIES, default=None)
    p.add_argument("--concurrency", type=int, default=None, help="Requests in flight per source.")
    p.add_argument("--delay", type=float, default=None, help="Seconds to wait before each request.")

    p.add_argument("--out-dir", default="out", help="Output folder (default: out/).")
    p.add_argument("--out", default=None, help="Explicit JSONL output path (overrides --out-dir).")
    p.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return p.parse_args(argv)


def build_config(args: argparse.Namespace) -> ScrapeConfig:
    """Config file first, then command-line flags on top."""
    base: Dict[str, Any] = {}
    if args.config:
        cfg = load_config(args.config)
        base = cfg.model_dump()

    overrides = {
        "sources": args.sources,
        "listing_type": args.listing_type,
        "property_type": args.property_type,
        "location": args.location,
        "max_listings": args.max_listings,
        "currency": args.currency,
        "concurrency": args.concurrency,
        "request_delay": args.delay,
    }
    base.update({k: v for k, v in overrides.items() if v is not None})
    return ScrapeConfig.from_dict(base)


def export(result_listings, summary: Dict[str, Any], sink: Sink) -> None:
    try:
        for listing in result_listings:
            sink.write(listing.to_dict())
        sink.write_summary(summary)
    finally:
        sink.close()


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = build_config(args)

    run_id = datetime.now(timezone.utc).isoformat()
    out_path = args.out or default_out_path(args.out_dir, run_id)
    sink = JsonlSink(out_path)

    try:
        result = run_scrape(config)
    except Exception as e:
        log.exception("Scraper failed")
        sink.write_summary(failure_summary(e, config))
        sink.close()
        raise

    export(result.listings, result.summary, sink)

    print(f"out_path={out_path}")
    print(f"summary_path={sink.summary_path}")
    print({"total_listings": result.summary["total_listings"], "per_source": result.summary["per_source"]})


if __name__ == "__main__":
    main()
