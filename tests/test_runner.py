from __future__ import annotations

import pytest

import kenyaprop.core.runner as runner
from kenyaprop.core.config import ScrapeConfig
from kenyaprop.core.runner import failure_summary, per_source_quota, run_scrape
from tests.conftest import FakeFetcher

BRK = "https://www.buyrentkenya.com"
JIJI = "https://jiji.co.ke"


def _links(hrefs):
    return "<html><body>" + "".join(f'<a href="{h}">ad</a>' for h in hrefs) + "</body></html>"


def _ad(title):
    return f"<html><body><h1 class='property-title'>{title} for sale</h1></body></html>"


PAGES = {
    f"{BRK}/property": _links(["/property/101", "/property/102", "/property/103"]),
    f"{BRK}/property/101": _ad("BRK 101"),
    f"{BRK}/property/102": _ad("BRK 102"),
    f"{BRK}/property/103": _ad("BRK 103"),
    f"{JIJI}/real-estate": _links(["/item/11.html", "/item/12.html", "/item/13.html"]),
    f"{JIJI}/item/11.html": _ad("Jiji 11"),
    f"{JIJI}/item/12.html": _ad("Jiji 12"),
    f"{JIJI}/item/13.html": _ad("Jiji 13"),
}


def test_per_source_quota_rounds_up():
    assert per_source_quota(100, 3) == 34
    assert per_source_quota(5, 2) == 3
    assert per_source_quota(4, 1) == 4


def test_sources_run_in_order_with_split_quota():
    config = ScrapeConfig(sources=["buyrentkenya", "nope", "jiji"], max_listings=4)
    fetcher = FakeFetcher(PAGES)

    result = run_scrape(config, fetcher=fetcher)

    assert [(l.source, l.id) for l in result.listings] == [
        ("buyrentkenya", "101"),
        ("buyrentkenya", "102"),
        ("jiji", "11"),
        ("jiji", "12"),
    ]
    assert result.summary["per_source"] == {"buyrentkenya": 2, "nope": 0, "jiji": 2}
    assert result.summary["total_listings"] == 4
    assert f"{BRK}/property/103" not in fetcher.urls


def test_summary_fields():
    config = ScrapeConfig(sources=["jiji"], max_listings=1, currency="USD", location="")
    result = run_scrape(config, fetcher=FakeFetcher(PAGES))

    s = result.summary
    assert s["success"] is True
    assert s["sources"] == ["jiji"]
    assert s["total_listings"] == 1
    assert s["scraped_at"]
    assert s["configuration"] == {
        "listing_type": "all",
        "property_type": "all",
        "location": "",
        "max_listings": 1,
        "currency": "USD",
    }
    assert result.listings[0].listing_type == "sale"


def test_unreachable_source_yields_zero():
    config = ScrapeConfig(sources=["jiji"], max_listings=3)
    result = run_scrape(config, fetcher=FakeFetcher({}))
    assert result.listings == []
    assert result.summary["per_source"] == {"jiji": 0}
    assert result.summary["success"] is True


def test_fatal_error_propagates(monkeypatch):
    class Exploding:
        def __init__(self, *a, **kw):
            pass

        def start_url(self):
            return "x"

        def run(self):
            raise RuntimeError("engine crashed")

    monkeypatch.setattr(runner, "SourceCrawler", Exploding)

    with pytest.raises(RuntimeError, match="engine crashed"):
        run_scrape(ScrapeConfig(sources=["jiji"]), fetcher=FakeFetcher({}))


def test_own_fetcher_is_closed(monkeypatch):
    made = []

    class Recording(FakeFetcher):
        def __init__(self, timeout, delay):
            super().__init__({})
            self.closed = False
            made.append(self)

        def close(self):
            self.closed = True

    monkeypatch.setattr(runner, "RequestsFetcher", Recording)
    run_scrape(ScrapeConfig(sources=["jiji"], max_listings=1))

    assert len(made) == 1
    assert made[0].closed


def test_failure_summary():
    config = ScrapeConfig(sources=["jiji"])
    out = failure_summary(RuntimeError("boom"), config)
    assert out["success"] is False
    assert out["error"] == "RuntimeError: boom"
    assert out["sources"] == ["jiji"]
    assert "configuration" in out

    bare = failure_summary(ValueError("x"))
    assert "sources" not in bare
