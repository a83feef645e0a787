"""
Generic two-state crawl engine shared by every source.

    LIST   : search/result page -> enqueue DETAIL links (within quota) + next LIST page
    DETAIL : property page -> raw fields -> normalize_listing -> ListingBuffer

Per-site differences live in a SiteDescriptor (see kenyaprop/sites/*).
"""
from __future__ import annotations

import logging
import threading
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Deque, Dict, List, Mapping, Optional, Sequence, Tuple

from bs4 import BeautifulSoup

from .errors import FetchError
from .extract import Extractor, collect_links, extract_fields
from .fetch import Fetcher
from .normalizer import normalize_listing
from .schema import NormalizedListing

log = logging.getLogger(__name__)

LIST = "LIST"
DETAIL = "DETAIL"

# Extra requests allowed on top of the listing quota (pagination pages).
REQUEST_HEADROOM = 50


@dataclass(frozen=True)
class CrawlRequest:
    url: str
    label: str


@dataclass(frozen=True)
class CrawlOptions:
    listing_type: str = "all"
    property_type: str = "all"
    location: str = ""
    max_listings: int = 100
    currency: str = "KES"
    concurrency: int = 1
    max_requests: Optional[int] = None

    @property
    def request_budget(self) -> int:
        if self.max_requests is not None:
            return self.max_requests
        return self.max_listings + REQUEST_HEADROOM


@dataclass(frozen=True)
class SiteDescriptor:
    key: str
    base_url: str
    build_search_url: Callable[[CrawlOptions], str]
    link_selectors: Tuple[str, ...]
    next_page_selectors: Tuple[str, ...]
    field_extractors: Mapping[str, Sequence[Extractor]]
    link_filter: Optional[Callable[[str], bool]] = None
    listing_id: Optional[Callable[[str], Optional[str]]] = None


class ListingBuffer:
    """
    Append-only result list with its own quota counter. try_append() is the
    only way in and does check-and-append under one lock, so the buffer never
    holds more than `capacity` listings whatever the handler concurrency.
    """

    def __init__(self, capacity: int):
        self.capacity = max(int(capacity), 0)
        self._items: List[NormalizedListing] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._items)

    def is_full(self) -> bool:
        return len(self._items) >= self.capacity

    def try_append(self, listing: NormalizedListing) -> bool:
        with self._lock:
            if len(self._items) >= self.capacity:
                return False
            self._items.append(listing)
            return True

    def items(self) -> List[NormalizedListing]:
        with self._lock:
            return list(self._items)


class SourceCrawler:
    def __init__(
        self,
        site: SiteDescriptor,
        options: CrawlOptions,
        fetcher: Fetcher,
        buffer: Optional[ListingBuffer] = None,
    ):
        self.site = site
        self.options = options
        self.fetcher = fetcher
        self.buffer = buffer if buffer is not None else ListingBuffer(options.max_listings)

        # guards everything below
        self._lock = threading.Lock()
        self._seen_urls: set[str] = set()
        self._pending_details = 0
        self.requests_made = 0
        self.stats: Dict[str, int] = {
            "list_pages": 0,
            "detail_pages": 0,
            "listings": 0,
            "skipped": 0,
            "errors": 0,
        }

    # ------------------------------------------------------------------
    # driver
    # ------------------------------------------------------------------

    def start_url(self) -> str:
        return self.site.build_search_url(self.options)

    def run(self, start_url: Optional[str] = None) -> List[NormalizedListing]:
        seed = CrawlRequest(start_url or self.start_url(), LIST)
        self._seen_urls.add(seed.url)
        queue: Deque[CrawlRequest] = deque([seed])

        workers = max(int(self.options.concurrency or 1), 1)
        budget = self.options.request_budget
        log.info("[%s] Start %s (max_listings=%d, concurrency=%d)",
                 self.site.key, seed.url, self.buffer.capacity, workers)

        with ThreadPoolExecutor(max_workers=workers) as pool:
            while queue:
                batch: List[CrawlRequest] = []
                while queue and len(batch) < workers and self.requests_made < budget:
                    req = queue.popleft()
                    if req.label == DETAIL and self.buffer.is_full():
                        self._detail_done()
                        self._bump("skipped")
                        continue
                    self.requests_made += 1
                    batch.append(req)

                if not batch:
                    if queue and self.requests_made >= budget:
                        log.warning("[%s] Request budget (%d) spent, %d request(s) left unprocessed",
                                    self.site.key, budget, len(queue))
                    break

                for new_requests in pool.map(self.handle, batch):
                    queue.extend(new_requests)

        log.info("[%s] Done: %d listing(s), %d request(s), stats=%s",
                 self.site.key, len(self.buffer), self.requests_made, self.stats)
        return self.buffer.items()

    # ------------------------------------------------------------------
    # request handling
    # ------------------------------------------------------------------

    def handle(self, req: CrawlRequest) -> List[CrawlRequest]:
        """Process one request; returns follow-up requests. Never raises."""
        if req.label == DETAIL and self.buffer.is_full():
            # another handler filled the quota since this request was queued
            self._bump("skipped")
            self._detail_done()
            return []

        try:
            soup = self.fetcher.fetch(req.url, req.label)
            if req.label == LIST:
                return self._handle_list(req, soup)
            self._handle_detail(req, soup)
        except FetchError as e:
            self._bump("errors")
            log.error("[%s] Request failed: %s (%s)", self.site.key, req.url, e.reason)
        except Exception:
            self._bump("errors")
            log.exception("[%s] Failed to process %s page %s", self.site.key, req.label, req.url)
        finally:
            if req.label == DETAIL:
                self._detail_done()
        return []

    def _handle_list(self, req: CrawlRequest, soup: BeautifulSoup) -> List[CrawlRequest]:
        self._bump("list_pages")
        log.info("[%s] Processing listing page: %s", self.site.key, req.url)

        links = collect_links(soup, self.site.base_url, self.site.link_selectors, self.site.link_filter)

        out: List[CrawlRequest] = []
        with self._lock:
            room = self.buffer.capacity - (len(self.buffer) + self._pending_details)
            for url in links:
                if room <= 0:
                    break
                if url in self._seen_urls:
                    continue
                self._seen_urls.add(url)
                out.append(CrawlRequest(url, DETAIL))
                room -= 1
            self._pending_details += len(out)

            # pagination only while the quota still has room
            if room > 0:
                for next_url in collect_links(soup, self.site.base_url, self.site.next_page_selectors):
                    if next_url not in self._seen_urls:
                        self._seen_urls.add(next_url)
                        out.append(CrawlRequest(next_url, LIST))
                        break

        log.info("[%s] %s: %d detail link(s) enqueued (%d found)",
                 self.site.key, req.url, sum(1 for r in out if r.label == DETAIL), len(links))
        return out

    def _handle_detail(self, req: CrawlRequest, soup: BeautifulSoup) -> None:
        self._bump("detail_pages")

        raw = self.extract_raw(req.url, soup)
        listing = normalize_listing(raw, self.site.key, self.options.currency)

        if not self.buffer.try_append(listing):
            self._bump("skipped")
            log.debug("[%s] Quota reached, dropping %s", self.site.key, req.url)
            return

        self._bump("listings")
        log.info("[%s] Scraped listing %d/%d: %s",
                 self.site.key, len(self.buffer), self.buffer.capacity, listing.title or req.url)

    def extract_raw(self, page_url: str, soup: BeautifulSoup) -> Dict[str, Any]:
        raw = extract_fields(soup, page_url, self.site.field_extractors)
        raw["url"] = page_url
        if not raw.get("id") and self.site.listing_id is not None:
            raw["id"] = self.site.listing_id(page_url)
        return raw

    # ------------------------------------------------------------------

    def _detail_done(self) -> None:
        with self._lock:
            self._pending_details = max(self._pending_details - 1, 0)

    def _bump(self, key: str) -> None:
        with self._lock:
            self.stats[key] += 1
