from __future__ import annotations

import re
from typing import Dict, Optional, Sequence

from bs4 import BeautifulSoup

from kenyaprop.core.extract import (
    Extractor,
    attr,
    constant,
    contact_block,
    image_sources,
    meta,
    pattern,
    text,
)


def listing_id_from_url(url: str) -> Optional[str]:
    # https://www.buyrentkenya.com/property/3456789/ -> 3456789
    m = re.search(r"/(\d+)/?$", url or "")
    return m.group(1) if m else None


def extract_listing_type(soup: BeautifulSoup, page_url: str) -> Optional[str]:
    """BRK has no dedicated field: use page wording, then the URL path."""
    body = soup.body or soup
    page_text = body.get_text(" ", strip=True).lower()
    url = (page_url or "").lower()

    if "for sale" in page_text or "for-sale" in url:
        return "sale"
    if "for rent" in page_text or "for-rent" in url:
        return "rent"
    return None


FIELD_EXTRACTORS: Dict[str, Sequence[Extractor]] = {
    "title": [
        text("h1.property-title", 'h1[class*="title"]'),
        meta("og:title"),
    ],
    "description": [
        text(".property-description", ".description", '[class*="description"]'),
        meta("og:description"),
    ],
    "price": [
        text(".property-price", ".price", '[class*="price"]'),
        attr('meta[itemprop="price"]', "content"),
    ],
    "location": [
        text(".property-location", ".location", '[class*="location"]'),
        meta("og:locality"),
    ],
    "listing_type": [extract_listing_type],
    "property_type": [
        text(".property-type", '[class*="property-type"]'),
        constant("house"),
    ],
    "bedrooms": [pattern(text(".bedrooms", '[class*="bed"]'), r"\d+")],
    "bathrooms": [pattern(text(".bathrooms", '[class*="bath"]'), r"\d+")],
    "size": [text(".property-size", ".size", '[class*="size"]')],
    "images": [
        image_sources([
            'img[src*="property"]',
            'img[src*="listing"]',
            ".gallery img",
            ".property-images img",
        ]),
        meta("og:image"),
    ],
    "contact": [
        contact_block(
            name_selectors=[".agent-name", ".contact-name", '[class*="agent"]'],
            phone_selectors=[".agent-phone", ".contact-phone", '[class*="phone"]'],
        ),
    ],
    "posted_at": [text(".posted-date", ".date", '[class*="date"]')],
}
