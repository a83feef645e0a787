from __future__ import annotations


class ScraperError(Exception):
    """Base class for errors raised by kenyaprop."""


class FetchError(ScraperError):
    """A LIST or DETAIL page could not be fetched or parsed."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class ConfigError(ScraperError, ValueError):
    """Scrape configuration failed validation."""
