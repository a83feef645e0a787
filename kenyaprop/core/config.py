from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Literal, Mapping, get_args

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError
from .schema import Currency

DEFAULT_SOURCES = ["buyrentkenya", "jiji"]

ListingTypeFilter = Literal["all", "sale", "rent"]
PropertyTypeFilter = Literal["all", "house", "apartment", "land", "commercial"]

LISTING_TYPE_FILTERS = get_args(ListingTypeFilter)
PROPERTY_TYPE_FILTERS = get_args(PropertyTypeFilter)


class ScrapeConfig(BaseModel):
    """
    Validated scrape input. Accepts actor-style camelCase keys (listingType,
    maxListings, ...) as well as field names; unknown keys are ignored.
    """

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    sources: List[str] = Field(default_factory=lambda: list(DEFAULT_SOURCES), min_length=1)
    listing_type: ListingTypeFilter = Field(
        "all", validation_alias=AliasChoices("listingType", "listing_type"))
    property_type: PropertyTypeFilter = Field(
        "all", validation_alias=AliasChoices("propertyType", "property_type"))
    location: str = ""
    max_listings: int = Field(
        100, ge=1, validation_alias=AliasChoices("maxListings", "max_listings"))
    currency: Currency = "KES"

    # engine knobs
    concurrency: int = Field(1, ge=1)
    request_timeout: float = Field(
        30, gt=0, validation_alias=AliasChoices("requestTimeout", "request_timeout"))
    request_delay: float = Field(
        0.0, ge=0, validation_alias=AliasChoices("requestDelay", "request_delay"))

    @field_validator("sources", mode="before")
    @classmethod
    def _source_list(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = [v]
        if isinstance(v, (list, tuple)):
            # blank names are dropped; non-strings are left for type validation
            return [s.strip() if isinstance(s, str) else s for s in v
                    if not (isinstance(s, str) and not s.strip())]
        return v

    @field_validator("listing_type", "property_type", mode="before")
    @classmethod
    def _lower_filter(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower() or "all"
        return v

    @field_validator("currency", mode="before")
    @classmethod
    def _upper_currency(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper() or "KES"
        return v

    @field_validator("max_listings", "concurrency", mode="before")
    @classmethod
    def _no_bool(cls, v: Any) -> Any:
        if isinstance(v, bool):
            raise ValueError("must be an integer, not a boolean")
        return v

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "ScrapeConfig":
        """Build from an input mapping; None values fall back to defaults."""
        data = {k: v for k, v in (d or {}).items() if v is not None}
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"invalid configuration: {e}") from e

    def to_summary_dict(self) -> Dict[str, Any]:
        return self.model_dump(include={"listing_type", "property_type", "location", "max_listings", "currency"})


def load_config(path: str | Path) -> ScrapeConfig:
    p = Path(path)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigError(f"config file not found: {p}") from e
    except ValueError as e:
        raise ConfigError(f"config file is not valid JSON: {p}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config file must hold a JSON object: {p}")
    return ScrapeConfig.from_dict(data)
