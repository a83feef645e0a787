from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Optional, Sequence

from bs4 import BeautifulSoup

from kenyaprop.core.extract import (
    Extractor,
    constant,
    contact_block,
    image_sources,
    meta,
    text,
)

ATTRIBUTE_SELECTOR = '.qa-advert-attributes li, .attribute-item, [class*="attribute"]'
BREADCRUMB_SELECTOR = ".breadcrumbs, .breadcrumb"

_title = text("h1.qa-advert-title", 'h1[class*="title"]')


def listing_id_from_url(url: str) -> Optional[str]:
    """
    .../3-bedroom-apartment-in-kilimani-Q4k2nW8aZ1.html -> 3-bedroom-apartment-in-kilimani-Q4k2nW8aZ1
    .../item/123456.html -> 123456
    """
    if not url:
        return None
    m = re.search(r"/(\d+)\.html", url)
    if m:
        return m.group(1)
    last = url.rstrip("/").split("/")[-1]
    return last.replace(".html", "") or None


def parse_attributes(soup: BeautifulSoup) -> Dict[str, str]:
    """
    Jiji lists features as label/value rows ("Bedrooms 3", "Size 120 sqm").
    Later rows overwrite earlier ones.
    """
    out: Dict[str, str] = {}
    for el in soup.select(ATTRIBUTE_SELECTOR):
        t = el.get_text(" ", strip=True).lower()
        if "bedroom" in t or "bed" in t:
            m = re.search(r"\d+", t)
            if m:
                out["bedrooms"] = m.group(0)
        elif "bathroom" in t or "bath" in t:
            m = re.search(r"\d+", t)
            if m:
                out["bathrooms"] = m.group(0)
        elif "sqm" in t or "sq ft" in t or "acre" in t:
            out["size"] = t
    return out


def attribute(name: str) -> Extractor:
    def _run(soup: BeautifulSoup, page_url: str) -> Optional[str]:
        return parse_attributes(soup).get(name)
    return _run


def extract_listing_type(soup: BeautifulSoup, page_url: str) -> Optional[str]:
    crumbs = " ".join(
        [el.get_text(" ", strip=True) for el in soup.select(BREADCRUMB_SELECTOR)]
        + [a.get("href") or "" for a in soup.select(".breadcrumbs a[href], .breadcrumb a[href]")]
    ).lower()
    title = (_title(soup, page_url) or "").lower()

    if "for-sale" in crumbs or "for sale" in crumbs or "for sale" in title:
        return "sale"
    if "for-rent" in crumbs or "for rent" in crumbs or "for rent" in title:
        return "rent"
    return None


def extract_category(soup: BeautifulSoup, page_url: str) -> Optional[str]:
    parts = [el.get_text(" ", strip=True) for el in soup.select(".category, .breadcrumb-item")]
    joined = " ".join(p for p in parts if p).lower()
    return joined or None


def _json_ld_images(soup: BeautifulSoup) -> List[str]:
    out: List[str] = []
    for script in soup.select('script[type="application/ld+json"]'):
        try:
            data: Any = json.loads(script.string or "")
        except ValueError:
            continue
        blocks = data if isinstance(data, list) else [data]
        for block in blocks:
            if not isinstance(block, dict) or not block.get("image"):
                continue
            imgs = block["image"] if isinstance(block["image"], list) else [block["image"]]
            out.extend(i for i in imgs if isinstance(i, str))
    return out


_gallery = image_sources(
    ["img.qa-advert-image", ".gallery img", '[class*="gallery"] img', ".advert-image img"],
    exclude=("avatar", "logo", "placeholder"),
)


def extract_images(soup: BeautifulSoup, page_url: str) -> List[str]:
    images = _gallery(soup, page_url)
    for src in _json_ld_images(soup):
        if src not in images:
            images.append(src)
    return images


FIELD_EXTRACTORS: Dict[str, Sequence[Extractor]] = {
    "title": [_title, meta("og:title")],
    "description": [
        text(".qa-advert-description", ".description", '[class*="description"]'),
        meta("og:description"),
    ],
    "price": [text(".qa-advert-price", ".price", '[class*="price"]')],
    "location": [
        text(".qa-advert-location", ".location", '[class*="region"]'),
        meta("og:locality"),
    ],
    "listing_type": [extract_listing_type],
    "property_type": [extract_category, constant("house")],
    "bedrooms": [attribute("bedrooms")],
    "bathrooms": [attribute("bathrooms")],
    "size": [attribute("size")],
    "images": [extract_images, meta("og:image")],
    "contact": [
        contact_block(
            name_selectors=[".qa-seller-name", ".seller-name", '[class*="seller"]'],
            phone_selectors=[".qa-seller-phone", ".seller-phone", '[class*="phone"]'],
        ),
    ],
    "posted_at": [text(".qa-advert-date", ".date-posted", '[class*="date"]')],
}
