from __future__ import annotations

import threading
from typing import Dict, List, Tuple

import pytest
from bs4 import BeautifulSoup

from kenyaprop.core.errors import FetchError


class FakeFetcher:
    """In-memory fetcher: url -> html. Unknown URLs fail like a 404."""

    def __init__(self, pages: Dict[str, str]):
        self.pages = pages
        self.calls: List[Tuple[str, str]] = []
        self._lock = threading.Lock()

    def fetch(self, url: str, label: str) -> BeautifulSoup:
        with self._lock:
            self.calls.append((url, label))
        if url not in self.pages:
            raise FetchError(url, "HTTPError: 404 Not Found")
        return BeautifulSoup(self.pages[url], "lxml")

    @property
    def urls(self) -> List[str]:
        return [u for u, _ in self.calls]


@pytest.fixture
def fake_fetcher():
    return FakeFetcher


def soup_of(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")
