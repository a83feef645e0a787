from __future__ import annotations

from typing import Dict, Optional

from kenyaprop.core.crawler import SiteDescriptor
from .buyrentkenya.adapter import SITE as BUYRENTKENYA
from .jiji.adapter import SITE as JIJI

# Registry: source name -> site descriptor.
# A new site only needs an adapter module and one entry here.
SITE_REGISTRY: Dict[str, SiteDescriptor] = {
    BUYRENTKENYA.key: BUYRENTKENYA,
    JIJI.key: JIJI,
}


def get_site(name: str) -> Optional[SiteDescriptor]:
    return SITE_REGISTRY.get((name or "").strip().lower())
