from __future__ import annotations

import re

from kenyaprop.core.crawler import CrawlOptions, SiteDescriptor
from .detail_page import FIELD_EXTRACTORS, listing_id_from_url

BASE_URL = "https://jiji.co.ke"

# property_type filter -> Jiji category path
CATEGORY_PATHS = {
    "house": "houses-apartments-for-sale",
    "apartment": "houses-apartments-for-rent",
    "land": "land-and-plots-for-sale",
    "commercial": "commercial-property-for-sale",
}


def build_search_url(options: CrawlOptions) -> str:
    """
    /real-estate                       (all)
    /houses-apartments-for-rent        (rent, any property type)
    /land-and-plots-for-sale           (sale + land)
    /houses-apartments-for-sale/nairobi
    """
    path = "/real-estate"
    listing_type = options.listing_type
    property_type = options.property_type

    if property_type and property_type != "all":
        if listing_type == "rent":
            path = "/houses-apartments-for-rent"
        elif listing_type == "sale":
            path = "/" + CATEGORY_PATHS.get(property_type, "houses-apartments-for-sale")
        else:
            path = "/" + CATEGORY_PATHS.get(property_type, "real-estate")
    elif listing_type == "rent":
        path = "/houses-apartments-for-rent"
    elif listing_type == "sale":
        path = "/houses-apartments-for-sale"

    slug = re.sub(r"\s+", "-", (options.location or "").strip().lower())
    if slug:
        path += f"/{slug}"

    return f"{BASE_URL}{path}"


def is_advert_link(href: str) -> bool:
    return "/item/" in href


SITE = SiteDescriptor(
    key="jiji",
    base_url=BASE_URL,
    build_search_url=build_search_url,
    link_selectors=(
        'a[href*="/item/"]',
        ".qa-advert-list-item a",
        ".listing-card a",
        '[class*="advert"] a',
    ),
    next_page_selectors=(
        "a.qa-pagination-next",
        'a[rel="next"]',
        '.pagination a:-soup-contains("Next")',
        'a[class*="next"]',
    ),
    field_extractors=FIELD_EXTRACTORS,
    link_filter=is_advert_link,
    listing_id=listing_id_from_url,
)
