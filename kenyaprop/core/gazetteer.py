from __future__ import annotations

from typing import Dict, Optional, Tuple

# Scan order matters: the first city found in a location segment wins.
KENYA_CITIES: Tuple[str, ...] = (
    "nairobi", "mombasa", "kisumu", "nakuru", "eldoret",
    "thika", "malindi", "kitale", "machakos", "nyeri",
    "naivasha", "nanyuki", "kiambu", "kajiado", "kilifi",
    "lamu", "garissa", "kakamega", "bungoma", "embu",
)

CITY_REGIONS: Dict[str, str] = {
    "nairobi": "Nairobi",
    "mombasa": "Coast",
    "kisumu": "Nyanza",
    "nakuru": "Rift Valley",
    "eldoret": "Rift Valley",
    "thika": "Central",
    "malindi": "Coast",
    "kitale": "Rift Valley",
    "machakos": "Eastern",
    "nyeri": "Central",
    "naivasha": "Rift Valley",
    "nanyuki": "Central",
    "kiambu": "Central",
    "kajiado": "Rift Valley",
    "kilifi": "Coast",
    "lamu": "Coast",
    "garissa": "North Eastern",
    "kakamega": "Western",
    "bungoma": "Western",
    "embu": "Eastern",
}


def match_city(segment: str) -> Optional[Tuple[str, Optional[str]]]:
    """
    Substring match (case-insensitive) of one location segment against the
    gazetteer. Returns (canonical city, region) or None.
      "Nyali Mombasa" -> ("Mombasa", "Coast")
    """
    low = (segment or "").lower()
    if not low:
        return None
    for city in KENYA_CITIES:
        if city in low:
            return city.capitalize(), CITY_REGIONS.get(city)
    return None
