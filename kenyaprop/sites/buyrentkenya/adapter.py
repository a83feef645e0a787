from __future__ import annotations

import re

from kenyaprop.core.crawler import CrawlOptions, SiteDescriptor
from .detail_page import FIELD_EXTRACTORS, listing_id_from_url

BASE_URL = "https://www.buyrentkenya.com"

# property_type filter -> path word replacing "houses"
TYPE_SEGMENTS = {
    "house": "houses",
    "apartment": "apartments",
    "land": "land",
    "commercial": "commercial",
}


def slugify_location(location: str) -> str:
    return re.sub(r"\s+", "-", (location or "").strip().lower())


def build_search_url(options: CrawlOptions) -> str:
    """
    /property                     (all)
    /houses-for-sale              (sale)
    /apartments-for-rent          (rent + apartment)
    /houses-for-sale-westlands    (sale + location)
    """
    path = "/property"
    if options.listing_type == "sale":
        path = "/houses-for-sale"
    elif options.listing_type == "rent":
        path = "/houses-for-rent"

    if options.property_type and options.property_type != "all":
        path = path.replace("houses", TYPE_SEGMENTS.get(options.property_type, "houses"), 1)

    slug = slugify_location(options.location)
    if slug:
        path += f"-{slug}"

    return f"{BASE_URL}{path}"


SITE = SiteDescriptor(
    key="buyrentkenya",
    base_url=BASE_URL,
    build_search_url=build_search_url,
    link_selectors=(
        'a[href*="/property/"]',
        'a[href*="/listing/"]',
        ".property-card a",
        ".listing-item a",
    ),
    next_page_selectors=(
        "a.pagination-next",
        'a[rel="next"]',
        '.pagination a:-soup-contains("Next")',
    ),
    field_extractors=FIELD_EXTRACTORS,
    listing_id=listing_id_from_url,
)
