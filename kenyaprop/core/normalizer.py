"""
Normalization of raw scraped listing fields (Kenyan / EAC classifieds).

Every normalizer here is total: malformed input degrades the affected field to
None / empty and never raises.
"""
from __future__ import annotations

import math
import re
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from .gazetteer import match_city
from .schema import (
    SUPPORTED_CURRENCIES,
    Contact,
    Features,
    Location,
    NormalizedListing,
    Price,
    RawListing,
    Size,
)

# Fixed exchange rates (approximate, not looked up live)
KES_TO_USD_RATE = 0.0064
USD_TO_KES_RATE = 156.25

_KES_MARKERS_RE = re.compile(r"KSH|KES|SH|/=|SHILLINGS?", re.I)
_USD_MARKERS_RE = re.compile(r"USD|\$", re.I)
_SEPARATORS_RE = re.compile(r"[,\s]")
# leading float, parseFloat style: "1.2.3" -> "1.2", ".5" -> ".5"
_NUMBER_RE = re.compile(r"\d*\.?\d+")

_LOCATION_SPLIT_RE = re.compile(r"[,\-/]")

_PHONE_RE = re.compile(r"(?:\+?254|0)?[17]\d{8}")
_PHONE_JUNK_RE = re.compile(r"[\s\-()]")
_EMAIL_RE = re.compile(r"[\w.-]+@[\w.-]+\.\w+")

_THUMB_RE = re.compile(r"-thumb\.(\w+)$")

_INT_PREFIX_RE = re.compile(r"^\s*([+-]?\d+)")
_SIZE_RE = re.compile(
    r"([\d,.]+)\s*(sqft|sq\.?\s*ft|sqm|sq\.?\s*m|acres?|hectares?)",
    re.I,
)

# Ordered (keywords, result) rules; first rule with a keyword hit wins.
LISTING_TYPE_RULES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("sale", "buy"), "sale"),
    (("rent", "let"), "rent"),
)

PROPERTY_TYPE_RULES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("house", "villa", "bungalow", "townhouse"), "house"),
    (("apartment", "flat", "studio", "bedsitter"), "apartment"),
    (("land", "plot"), "land"),
    (("commercial", "office", "shop", "warehouse"), "commercial"),
)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _clean_text(v: Any) -> Optional[str]:
    if v is None:
        return None
    s = str(v).strip()
    return s or None


def _first(raw: Mapping, *keys: str) -> Any:
    """First truthy value among alias keys."""
    for k in keys:
        v = raw.get(k)
        if v:
            return v
    return None


def _tidy_number(x: float) -> float | int:
    # 5000000.0 -> 5000000 so JSON output stays clean
    if isinstance(x, float) and x.is_integer():
        return int(x)
    return x


# ---------------------------------------------------------------------------
# Price
# ---------------------------------------------------------------------------

def normalize_price(price_input: Any, target_currency: str = "KES") -> Price:
    """
    Parse a free-text price into {amount, currency, original}.

      "KES 5,000,000" -> 5000000 KES
      "2.5M"          -> 2500000 KES
      "$1000" (KES)   -> 156250 KES
    """
    if target_currency not in SUPPORTED_CURRENCIES:
        raise ValueError(f"Unsupported currency: {target_currency!r}")

    original = _clean_text(price_input)
    if original is None or isinstance(price_input, bool):
        return Price(amount=None, currency=target_currency, original=None)

    source_currency = "KES"

    cleaned = _SEPARATORS_RE.sub("", original.upper())
    cleaned = _KES_MARKERS_RE.sub("", cleaned)
    cleaned, n_usd = _USD_MARKERS_RE.subn("", cleaned)
    if n_usd:
        source_currency = "USD"

    amount: Optional[float] = None
    m = _NUMBER_RE.search(cleaned)
    if m:
        amount = float(m.group(0))
        if "M" in cleaned:
            amount *= 1_000_000
        elif "K" in cleaned:
            amount *= 1_000

    if amount is not None and source_currency != target_currency:
        if source_currency == "KES" and target_currency == "USD":
            amount = math.floor(amount * KES_TO_USD_RATE * 100 + 0.5) / 100
        elif source_currency == "USD" and target_currency == "KES":
            amount = math.floor(amount * USD_TO_KES_RATE + 0.5)

    return Price(
        amount=_tidy_number(amount) if amount is not None else None,
        currency=target_currency,
        original=original,
    )


# ---------------------------------------------------------------------------
# Location
# ---------------------------------------------------------------------------

def normalize_location(text: Any) -> Location:
    original = _clean_text(text)
    if original is None:
        return Location()

    parts = [p.strip() for p in _LOCATION_SPLIT_RE.sub(",", original).split(",")]
    parts = [p for p in parts if p]

    city = None
    region = None
    for part in parts:
        hit = match_city(part)
        if hit:
            city, region = hit
            break

    return Location(
        area=parts[0] if parts else None,
        city=city,
        region=region,
        original=original,
    )


# ---------------------------------------------------------------------------
# Contact
# ---------------------------------------------------------------------------

def _canonical_phone(match: str) -> str:
    s = _PHONE_JUNK_RE.sub("", match)
    if s.startswith("0"):
        return "+254" + s[1:]
    if s.startswith("254"):
        return "+" + s
    if not s.startswith("+"):
        return "+254" + s
    return s


def extract_phone_numbers(text: Any) -> List[str]:
    """All Kenyan mobile numbers in text as +254XXXXXXXXX, first-seen order."""
    if not text:
        return []
    out: List[str] = []
    for m in _PHONE_RE.findall(str(text)):
        phone = _canonical_phone(m)
        if phone not in out:
            out.append(phone)
    return out


def extract_email(text: Any) -> Optional[str]:
    if not text:
        return None
    m = _EMAIL_RE.search(str(text))
    return m.group(0).lower() if m else None


def normalize_contact(value: Any) -> Contact:
    if not value:
        return Contact()

    if isinstance(value, str):
        return Contact(
            phone=tuple(extract_phone_numbers(value)),
            email=extract_email(value),
        )

    if not isinstance(value, Mapping):
        return Contact()

    whatsapp = None
    if value.get("whatsapp"):
        numbers = extract_phone_numbers(value["whatsapp"])
        whatsapp = numbers[0] if numbers else None

    return Contact(
        name=_clean_text(_first(value, "name", "agentName", "agent_name")),
        phone=tuple(extract_phone_numbers(_first(value, "phone", "phoneNumber", "phone_number", "mobile"))),
        email=extract_email(_first(value, "email", "mail")),
        whatsapp=whatsapp,
    )


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------

def normalize_images(value: Any) -> Tuple[str, ...]:
    if not value:
        return ()

    if isinstance(value, str):
        candidates: Sequence[Any] = [value]
    elif isinstance(value, (list, tuple)):
        candidates = value
    else:
        return ()

    out: List[str] = []
    for img in candidates:
        if not isinstance(img, str) or not img.strip():
            continue
        url = img.strip()
        if url.startswith("//"):
            url = "https:" + url
        url = _THUMB_RE.sub(r".\1", url)
        if not url.startswith("http"):
            continue
        out.append(url)
    return tuple(out)


# ---------------------------------------------------------------------------
# Features
# ---------------------------------------------------------------------------

def parse_number(val: Any) -> Optional[int]:
    """parseInt semantics: "3 bedrooms" -> 3, 2.7 -> 2, "beds: 3" -> None."""
    if val is None or isinstance(val, bool):
        return None
    if isinstance(val, int):
        return val
    if isinstance(val, float):
        return int(val) if math.isfinite(val) else None
    m = _INT_PREFIX_RE.match(str(val))
    return int(m.group(1)) if m else None


def parse_size(text: Any) -> Size:
    if not text:
        return Size()
    m = _SIZE_RE.search(str(text).lower())
    if not m:
        return Size()

    num = _NUMBER_RE.match(m.group(1).replace(",", ""))
    if not num:
        return Size()

    unit = m.group(2).replace(".", "")
    unit = re.sub(r"\s", "", unit).lower()
    return Size(value=float(num.group(0)), unit=unit)


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def _classify(value: Any, rules: Iterable[Tuple[Tuple[str, ...], str]], fallback: str) -> str:
    text = _clean_text(value)
    if text is None:
        return "unknown"
    low = text.lower()
    for keywords, result in rules:
        if any(k in low for k in keywords):
            return result
    return fallback


def classify_listing_type(value: Any) -> str:
    return _classify(value, LISTING_TYPE_RULES, "unknown")


def classify_property_type(value: Any) -> str:
    return _classify(value, PROPERTY_TYPE_RULES, "other")


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------

def normalize_listing(raw: RawListing, source: str, target_currency: str = "KES") -> NormalizedListing:
    """
    Compose one canonical listing out of a raw extracted record.
    Each field reads the first non-empty alias key on `raw`.
    """
    if not source:
        raise ValueError("source is required")
    raw = raw or {}

    return NormalizedListing(
        id=_clean_text(_first(raw, "id", "listingId", "listing_id")),
        source=source,
        url=_clean_text(raw.get("url")),
        title=_clean_text(raw.get("title")),
        description=_clean_text(raw.get("description")),
        listing_type=classify_listing_type(_first(raw, "listing_type", "listingType", "type")),
        property_type=classify_property_type(_first(raw, "property_type", "propertyType", "category")),
        price=normalize_price(raw.get("price"), target_currency),
        location=normalize_location(_first(raw, "location", "address")),
        contact=normalize_contact(_first(raw, "contact", "agent")),
        images=normalize_images(_first(raw, "images", "photos")),
        features=Features(
            bedrooms=parse_number(_first(raw, "bedrooms", "beds")),
            bathrooms=parse_number(_first(raw, "bathrooms", "baths")),
            size=parse_size(_first(raw, "size", "area")),
            parking=raw.get("parking") or None,
            furnished=raw.get("furnished") or None,
        ),
        posted_at=_clean_text(_first(raw, "posted_at", "postedAt", "datePosted")),
        scraped_at=utc_now_iso(),
    )
