# kenyaprop/core/runner.py
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from kenyaprop.sites import get_site
from .config import ScrapeConfig
from .crawler import CrawlOptions, SourceCrawler
from .fetch import Fetcher, RequestsFetcher
from .normalizer import utc_now_iso
from .schema import NormalizedListing

log = logging.getLogger(__name__)


@dataclass
class ScrapeResult:
    listings: List[NormalizedListing] = field(default_factory=list)
    summary: Dict[str, Any] = field(default_factory=dict)


def per_source_quota(max_listings: int, n_sources: int) -> int:
    # ceiling split, so the sum of caps may exceed max_listings slightly
    return math.ceil(max_listings / max(n_sources, 1))


def build_summary(
    config: ScrapeConfig,
    listings: List[NormalizedListing],
    per_source: Dict[str, int],
) -> Dict[str, Any]:
    return {
        "success": True,
        "total_listings": len(listings),
        "sources": list(config.sources),
        "per_source": per_source,
        "scraped_at": utc_now_iso(),
        "configuration": config.to_summary_dict(),
    }


def failure_summary(error: BaseException, config: Optional[ScrapeConfig] = None) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "success": False,
        "error": f"{type(error).__name__}: {error}",
        "scraped_at": utc_now_iso(),
    }
    if config is not None:
        out["sources"] = list(config.sources)
        out["configuration"] = config.to_summary_dict()
    return out


def run_scrape(config: ScrapeConfig, fetcher: Optional[Fetcher] = None) -> ScrapeResult:
    """
    Split the global quota across sources, crawl each source to completion
    (sequentially) and concatenate listings in source-then-discovery order.

    Unknown sources are skipped with a warning. Anything unexpected
    propagates to the caller.
    """
    own_fetcher: Optional[RequestsFetcher] = None
    if fetcher is None:
        own_fetcher = RequestsFetcher(timeout=config.request_timeout, delay=config.request_delay)
        fetcher = own_fetcher

    quota = per_source_quota(config.max_listings, len(config.sources))
    log.info("Starting scrape: sources=%s quota/source=%d config=%s",
             config.sources, quota, config.to_summary_dict())

    all_listings: List[NormalizedListing] = []
    per_source: Dict[str, int] = {}

    try:
        for source in config.sources:
            site = get_site(source)
            if site is None:
                log.warning("Unknown source: %s. Skipping.", source)
                per_source[source] = 0
                continue

            options = CrawlOptions(
                listing_type=config.listing_type,
                property_type=config.property_type,
                location=config.location,
                max_listings=quota,
                currency=config.currency,
                concurrency=config.concurrency,
            )
            crawler = SourceCrawler(site, options, fetcher)

            log.info("--- Starting scrape for %s: %s ---", site.key, crawler.start_url())
            listings = crawler.run()
            log.info("Scraped %d listings from %s", len(listings), site.key)

            per_source[source] = per_source.get(source, 0) + len(listings)
            all_listings.extend(listings)
    finally:
        if own_fetcher is not None:
            own_fetcher.close()

    log.info("Total listings scraped: %d", len(all_listings))
    return ScrapeResult(listings=all_listings, summary=build_summary(config, all_listings, per_source))
