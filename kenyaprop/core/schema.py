from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Optional, Tuple, get_args

# --- Output enums (source of truth) ---
ListingType = Literal["sale", "rent", "unknown"]
PropertyType = Literal["house", "apartment", "land", "commercial", "other", "unknown"]
Currency = Literal["KES", "USD"]

SUPPORTED_CURRENCIES: Tuple[str, ...] = get_args(Currency)
LISTING_TYPES: Tuple[str, ...] = get_args(ListingType)
PROPERTY_TYPES: Tuple[str, ...] = get_args(PropertyType)

# Raw listing is whatever a site extractor managed to pull out of the page.
RawListing = Dict[str, Any]


@dataclass(frozen=True)
class Price:
    amount: Optional[float] = None
    currency: Currency = "KES"
    original: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"amount": self.amount, "currency": self.currency, "original": self.original}


@dataclass(frozen=True)
class Location:
    area: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None
    original: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "area": self.area,
            "city": self.city,
            "region": self.region,
            "original": self.original,
        }


@dataclass(frozen=True)
class Contact:
    name: Optional[str] = None
    phone: Tuple[str, ...] = ()
    email: Optional[str] = None
    whatsapp: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "phone": list(self.phone),
            "email": self.email,
            "whatsapp": self.whatsapp,
        }


@dataclass(frozen=True)
class Size:
    value: Optional[float] = None
    unit: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"value": self.value, "unit": self.unit}


@dataclass(frozen=True)
class Features:
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    size: Size = field(default_factory=Size)
    parking: Any = None
    furnished: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bedrooms": self.bedrooms,
            "bathrooms": self.bathrooms,
            "size": self.size.to_dict(),
            "parking": self.parking,
            "furnished": self.furnished,
        }


@dataclass(frozen=True)
class NormalizedListing:
    """
    Canonical listing record. Built once by normalize_listing() and never
    mutated afterwards; sinks receive to_dict().
    """

    source: str
    scraped_at: str
    id: Optional[str] = None
    url: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    listing_type: ListingType = "unknown"
    property_type: PropertyType = "unknown"
    price: Price = field(default_factory=Price)
    location: Location = field(default_factory=Location)
    contact: Contact = field(default_factory=Contact)
    images: Tuple[str, ...] = ()
    features: Features = field(default_factory=Features)
    posted_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source,
            "url": self.url,
            "title": self.title,
            "description": self.description,
            "listing_type": self.listing_type,
            "property_type": self.property_type,
            "price": self.price.to_dict(),
            "location": self.location.to_dict(),
            "contact": self.contact.to_dict(),
            "images": list(self.images),
            "features": self.features.to_dict(),
            "posted_at": self.posted_at,
            "scraped_at": self.scraped_at,
        }
