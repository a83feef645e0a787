from __future__ import annotations

import pytest

from kenyaprop.core.crawler import CrawlOptions, SourceCrawler
from kenyaprop.core.normalizer import normalize_listing
from kenyaprop.sites import SITE_REGISTRY, get_site
from kenyaprop.sites.buyrentkenya import adapter as brk
from kenyaprop.sites.buyrentkenya.detail_page import listing_id_from_url as brk_id
from kenyaprop.sites.jiji import adapter as jiji
from kenyaprop.sites.jiji.detail_page import listing_id_from_url as jiji_id
from kenyaprop.sites.jiji.detail_page import parse_attributes
from tests.conftest import FakeFetcher, soup_of

BRK_DETAIL = """
<html><head>
  <meta property="og:title" content="OG title">
  <meta property="og:image" content="https://img.brk.test/og.jpg">
</head><body>
  <h1 class="property-title"> 4 Bedroom Townhouse For Sale in Runda </h1>
  <div class="property-price">KSh 45,000,000</div>
  <div class="property-location">Runda, Nairobi</div>
  <div class="property-type">Townhouse</div>
  <div class="property-description">Spacious home with a garden.</div>
  <ul>
    <li class="bedrooms">4 Bedrooms</li>
    <li class="bathrooms">5 Bathrooms</li>
    <li class="property-size">500 sqm</li>
  </ul>
  <div class="gallery">
    <img src="https://img.brk.test/property/1-thumb.jpg">
    <img src="https://img.brk.test/logo.png">
    <img data-src="//img.brk.test/property/2.jpg">
  </div>
  <div class="agent-box">
    <span class="agent-name">Jane Agent</span>
    <a class="agent-phone" href="tel:0722123456">0722 123 456</a>
  </div>
  <span class="posted-date">Posted 3 days ago</span>
</body></html>
"""

JIJI_DETAIL = """
<html><head>
  <script type="application/ld+json">
    {"@type": "Product", "image": ["https://pictures.jiji.test/a.jpg", "https://pictures.jiji.test/b.jpg"]}
  </script>
  <script type="application/ld+json">{not json</script>
</head><body>
  <div class="breadcrumbs"><a href="/houses-apartments-for-rent">Houses &amp; Apartments For Rent</a></div>
  <span class="category">Apartments</span>
  <h1 class="qa-advert-title">2bdrm Apartment in Kilimani</h1>
  <div class="qa-advert-price">KSh 85,000</div>
  <div class="qa-advert-location">Kilimani, Nairobi</div>
  <ul class="qa-advert-attributes">
    <li>Bedrooms: 2</li>
    <li>Bathrooms: 3</li>
    <li>Size: 120 sqm</li>
  </ul>
  <div class="qa-advert-description">Bright flat, close to Yaya Centre.</div>
  <img class="qa-advert-image" src="https://pictures.jiji.test/a.jpg">
  <img class="qa-advert-image" src="https://pictures.jiji.test/placeholder.png">
  <div class="qa-seller-name">John Seller</div>
  <a href="tel:+254733000111">Show contact</a>
  <div class="qa-advert-date">2 hours ago</div>
</body></html>
"""


def _opts(**kw):
    return CrawlOptions(**kw)


@pytest.mark.parametrize(
    "kw, expected",
    [
        ({}, "https://www.buyrentkenya.com/property"),
        ({"listing_type": "sale"}, "https://www.buyrentkenya.com/houses-for-sale"),
        ({"listing_type": "rent", "property_type": "apartment"}, "https://www.buyrentkenya.com/apartments-for-rent"),
        ({"listing_type": "sale", "property_type": "land", "location": "Karen Estate"},
         "https://www.buyrentkenya.com/land-for-sale-karen-estate"),
        ({"property_type": "apartment"}, "https://www.buyrentkenya.com/property"),
    ],
)
def test_buyrentkenya_search_url(kw, expected):
    assert brk.build_search_url(_opts(**kw)) == expected


@pytest.mark.parametrize(
    "kw, expected",
    [
        ({}, "https://jiji.co.ke/real-estate"),
        ({"listing_type": "rent"}, "https://jiji.co.ke/houses-apartments-for-rent"),
        ({"listing_type": "sale"}, "https://jiji.co.ke/houses-apartments-for-sale"),
        ({"listing_type": "sale", "property_type": "land"}, "https://jiji.co.ke/land-and-plots-for-sale"),
        ({"listing_type": "rent", "property_type": "land"}, "https://jiji.co.ke/houses-apartments-for-rent"),
        ({"property_type": "commercial"}, "https://jiji.co.ke/commercial-property-for-sale"),
        ({"listing_type": "sale", "location": "Nairobi Central"},
         "https://jiji.co.ke/houses-apartments-for-sale/nairobi-central"),
    ],
)
def test_jiji_search_url(kw, expected):
    assert jiji.build_search_url(_opts(**kw)) == expected


def test_listing_ids():
    assert brk_id("https://www.buyrentkenya.com/property/3456789/") == "3456789"
    assert brk_id("https://www.buyrentkenya.com/listings/nice-house") is None
    assert jiji_id("https://jiji.co.ke/item/98765.html") == "98765"
    assert jiji_id("https://jiji.co.ke/kilimani/houses/2bdrm-flat-AbC12.html") == "2bdrm-flat-AbC12"


def test_registry_lookup_is_case_insensitive():
    assert set(SITE_REGISTRY) == {"buyrentkenya", "jiji"}
    assert get_site(" Jiji ") is jiji.SITE
    assert get_site("olx") is None


def _extract(site, url, html):
    crawler = SourceCrawler(site, CrawlOptions(), FakeFetcher({}))
    return crawler.extract_raw(url, soup_of(html))


def test_buyrentkenya_detail_extraction():
    url = "https://www.buyrentkenya.com/property/3456789"
    raw = _extract(brk.SITE, url, BRK_DETAIL)

    assert raw["title"] == "4 Bedroom Townhouse For Sale in Runda"
    assert raw["listing_type"] == "sale"
    assert raw["bedrooms"] == "4"
    assert raw["id"] == "3456789"

    n = normalize_listing(raw, "buyrentkenya")
    assert n.url == url
    assert n.price.amount == 45_000_000
    assert n.location.city == "Nairobi"
    assert n.property_type == "house"
    assert n.features.bathrooms == 5
    assert n.features.size.unit == "sqm"
    assert n.images == ("https://img.brk.test/property/1.jpg", "https://img.brk.test/property/2.jpg")
    assert n.contact.name == "Jane Agent"
    assert n.contact.phone == ("+254722123456",)
    assert n.posted_at == "Posted 3 days ago"


def test_buyrentkenya_meta_fallbacks():
    html = """<html><head>
      <meta property="og:title" content="Plot in Kitengela">
      <meta property="og:image" content="https://img.brk.test/og.jpg">
    </head><body><p>Plot available</p></body></html>"""
    raw = _extract(brk.SITE, "https://www.buyrentkenya.com/listings/plot-kitengela", html)
    assert raw["title"] == "Plot in Kitengela"
    assert raw["images"] == "https://img.brk.test/og.jpg"
    assert "listing_type" not in raw
    assert raw["property_type"] == "house"
    assert raw.get("id") is None


def test_jiji_attributes():
    attrs = parse_attributes(soup_of(JIJI_DETAIL))
    assert attrs["bedrooms"] == "2"
    assert attrs["bathrooms"] == "3"
    assert "120 sqm" in attrs["size"]


def test_jiji_detail_extraction():
    url = "https://jiji.co.ke/item/98765.html"
    n = normalize_listing(_extract(jiji.SITE, url, JIJI_DETAIL), "jiji")

    assert n.id == "98765"
    assert n.title == "2bdrm Apartment in Kilimani"
    assert n.listing_type == "rent"
    assert n.property_type == "apartment"
    assert n.price.amount == 85_000
    assert n.location.area == "Kilimani"
    assert n.location.region == "Nairobi"
    assert (n.features.bedrooms, n.features.bathrooms) == (2, 3)
    assert n.features.size.value == 120.0
    assert n.images == ("https://pictures.jiji.test/a.jpg", "https://pictures.jiji.test/b.jpg")
    assert n.contact.name == "John Seller"
    assert n.contact.phone == ("+254733000111",)
    assert n.description == "Bright flat, close to Yaya Centre."
    assert n.posted_at == "2 hours ago"


def test_jiji_link_filter():
    assert jiji.is_advert_link("/item/123.html")
    assert not jiji.is_advert_link("/real-estate?page=2")
