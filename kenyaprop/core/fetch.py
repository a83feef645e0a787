from __future__ import annotations

import logging
import time
from typing import Optional, Protocol

import requests
from bs4 import BeautifulSoup

from .errors import FetchError

log = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) KenyaPropBot/0.1",
    "Accept-Language": "en-KE,en;q=0.9",
}


class Fetcher(Protocol):
    def fetch(self, url: str, label: str) -> BeautifulSoup:
        """Return the parsed page or raise FetchError."""
        ...


class RequestsFetcher:
    """
    Plain requests + BeautifulSoup(lxml) fetcher. One attempt per URL:
    retries, proxies and throttling policies belong to whatever engine
    replaces this in production.
    """

    def __init__(
        self,
        timeout: float = 30,
        delay: float = 0.0,
        session: Optional[requests.Session] = None,
    ):
        self.timeout = timeout
        self.delay = delay
        self.sess = session or requests.Session()
        self.sess.headers.update(DEFAULT_HEADERS)

    def fetch(self, url: str, label: str) -> BeautifulSoup:
        if self.delay:
            time.sleep(self.delay)

        log.debug("GET %s (%s)", url, label)
        try:
            r = self.sess.get(url, timeout=self.timeout)
            r.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(url, f"{type(e).__name__}: {e}") from e

        return BeautifulSoup(r.text, "lxml")

    def close(self) -> None:
        self.sess.close()
