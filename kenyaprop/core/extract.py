"""
Selector-fallback extraction.

A field is described by an ordered chain of extractor functions
`(soup, page_url) -> value | None`; the first non-empty value wins. Site
descriptors only declare chains, extract_fields() applies the policy.
"""
from __future__ import annotations

import re
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence
from urllib.parse import urljoin, urldefrag

from bs4 import BeautifulSoup

Extractor = Callable[[BeautifulSoup, str], Any]


def is_empty(v: Any) -> bool:
    if v is None:
        return True
    if isinstance(v, str):
        return not v.strip()
    if isinstance(v, (list, tuple, dict, set)):
        return len(v) == 0
    return False


def extract_first(soup: BeautifulSoup, page_url: str, chain: Sequence[Extractor]) -> Any:
    for fn in chain:
        v = fn(soup, page_url)
        if not is_empty(v):
            return v
    return None


def extract_fields(
    soup: BeautifulSoup,
    page_url: str,
    field_extractors: Mapping[str, Sequence[Extractor]],
) -> Dict[str, Any]:
    """Run every field chain; fields with no hit are left out of the raw record."""
    raw: Dict[str, Any] = {}
    for name, chain in field_extractors.items():
        v = extract_first(soup, page_url, chain)
        if v is not None:
            raw[name] = v
    return raw


# ---------------------------------------------------------------------------
# Extractor factories
# ---------------------------------------------------------------------------

def text(*selectors: str, sep: str = " ") -> Extractor:
    """
    Text of the first element matching each selector, in priority order.
    `sep` joins child nodes; use "" where markup splits one token (a phone
    number) across spans.
    """
    def _run(soup: BeautifulSoup, page_url: str) -> Optional[str]:
        for sel in selectors:
            el = soup.select_one(sel)
            if el is None:
                continue
            t = " ".join(el.get_text(sep).split())
            if t:
                return t
        return None
    return _run


def attr(selector: str, *names: str) -> Extractor:
    def _run(soup: BeautifulSoup, page_url: str) -> Optional[str]:
        el = soup.select_one(selector)
        if el is None:
            return None
        for n in names:
            v = (el.get(n) or "").strip()
            if v:
                return v
        return None
    return _run


def meta(prop: str) -> Extractor:
    """<meta property=...> / <meta name=...> content (page metadata fallback)."""
    def _run(soup: BeautifulSoup, page_url: str) -> Optional[str]:
        el = soup.select_one(f'meta[property="{prop}"]') or soup.select_one(f'meta[name="{prop}"]')
        if el is None:
            return None
        return (el.get("content") or "").strip() or None
    return _run


def pattern(extractor: Extractor, regex: str, group: int = 0) -> Extractor:
    """Apply a regex to another extractor's result: pattern(text(".beds"), r"\\d+")."""
    rx = re.compile(regex, re.I)

    def _run(soup: BeautifulSoup, page_url: str) -> Optional[str]:
        v = extractor(soup, page_url)
        if is_empty(v):
            return None
        m = rx.search(str(v))
        return m.group(group) if m else None
    return _run


def constant(value: Any) -> Extractor:
    """Last-resort default at the end of a chain."""
    def _run(soup: BeautifulSoup, page_url: str) -> Any:
        return value
    return _run


def image_sources(
    selectors: Sequence[str],
    exclude: Sequence[str] = ("avatar", "logo"),
) -> Extractor:
    """All src/data-src values of matching <img>, skipping avatars/logos."""
    def _run(soup: BeautifulSoup, page_url: str) -> List[str]:
        out: List[str] = []
        for sel in selectors:
            for img in soup.select(sel):
                src = (img.get("src") or img.get("data-src") or "").strip()
                if not src or any(x in src for x in exclude):
                    continue
                if src not in out:
                    out.append(src)
        return out
    return _run


def contact_block(name_selectors: Sequence[str], phone_selectors: Sequence[str]) -> Extractor:
    """
    {name, phone, whatsapp} from the agent/seller box. Numbers behind tel:
    links are appended to the phone text: sites often print "0722 123 456"
    with spaces or hide it behind a "show number" button.
    """
    name_fn = text(*name_selectors)
    phone_fn = text(*phone_selectors, sep="")

    def _run(soup: BeautifulSoup, page_url: str) -> Optional[Dict[str, Any]]:
        phones: List[str] = []
        shown = phone_fn(soup, page_url)
        if shown:
            phones.append(shown)
        for a in soup.select('a[href^="tel:"]'):
            num = a["href"].split("tel:", 1)[1].strip()
            if num and num not in phones:
                phones.append(num)

        block = {"name": name_fn(soup, page_url), "phone": " ".join(phones) or None}
        wa = soup.select_one('a[href*="wa.me/"], a[href*="api.whatsapp.com"]')
        if wa is not None:
            block["whatsapp"] = wa.get("href")
        if all(is_empty(v) for v in block.values()):
            return None
        return block
    return _run


# ---------------------------------------------------------------------------
# Links
# ---------------------------------------------------------------------------

def absolute_url(base_url: str, href: str) -> str:
    url, _frag = urldefrag(urljoin(base_url + "/", href.strip()))
    return url


def collect_links(
    soup: BeautifulSoup,
    base_url: str,
    selectors: Sequence[str],
    link_filter: Optional[Callable[[str], bool]] = None,
) -> List[str]:
    """Absolute hrefs for all selectors, deduped, in document/selector order."""
    out: List[str] = []
    for sel in selectors:
        for a in soup.select(sel):
            href = (a.get("href") or "").strip()
            if not href or href.startswith(("#", "javascript:", "mailto:", "tel:")):
                continue
            if link_filter is not None and not link_filter(href):
                continue
            url = absolute_url(base_url, href)
            if url not in out:
                out.append(url)
    return out
