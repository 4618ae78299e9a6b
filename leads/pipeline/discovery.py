"""
Company page classification.

Given a company's home page, work out the company name and canonical
website, and collect same-origin links that look like leadership, contact
or about sections. Location and a short description are lifted from the
page as well so leads can carry city/state and a company size estimate.
"""

from __future__ import annotations

import re
from typing import List, Optional
from urllib.parse import urljoin, urlparse, urlunparse

from selectolax.parser import HTMLParser

from ..schemas import CompanyInfo


NAME_SELECTORS = [
    "h1",
    ".company-name",
    ".brand-name",
    ".logo-text",
    "title",
    'meta[property="og:title"]',
    'meta[name="title"]',
]

LEADERSHIP_KEYWORDS = ["leadership", "team", "management", "executive", "about", "staff", "people"]
CONTACT_KEYWORDS = ["contact", "reach", "connect", "get-in-touch", "location", "office"]
ABOUT_KEYWORDS = ["about", "company", "history", "mission", "values"]

MAX_LEADERSHIP_PAGES = 5
MAX_CONTACT_PAGES = 3
MAX_ABOUT_PAGES = 3

_NAME_CUT_RE = re.compile(r"\s+-\s+.*$|\s*\|.*$|\s*::.*$")
_CITY_STATE_RE = re.compile(r"\b([A-Z][a-zA-Z.]+(?: [A-Z][a-zA-Z.]+)*),\s*([A-Z]{2})\b")
_WS_RE = re.compile(r"\s+")


def _clean_text(s: Optional[str]) -> str:
    return _WS_RE.sub(" ", s or "").strip()


def _origin(url: str) -> str:
    p = urlparse(url)
    if not p.scheme or not p.netloc:
        return ""
    return f"{p.scheme}://{p.netloc.lower()}"


def _host(url: str) -> str:
    host = (urlparse(url).netloc or "").lower()
    return host[4:] if host.startswith("www.") else host


def _normalize_url(u: str) -> str:
    try:
        p = urlparse(u)
        p2 = p._replace(netloc=(p.netloc or "").lower(), fragment="")
        return urlunparse(p2)
    except ValueError:
        return u


def extract_company_name(parser: HTMLParser, url: str) -> str:
    for selector in NAME_SELECTORS:
        node = parser.css_first(selector)
        if node is None:
            continue
        name = _clean_text(node.text()) or _clean_text((node.attributes or {}).get("content"))
        if not name:
            continue
        name = _NAME_CUT_RE.sub("", name).strip()
        if 3 < len(name) < 100:
            return name
    host = (urlparse(url).hostname or "").lower()
    if host.startswith("www."):
        host = host[4:]
    label = host.split(".")[0] if host else ""
    return label.replace("-", " ").replace("_", " ") or "Unknown Company"


def extract_website(parser: HTMLParser, url: str) -> str:
    """Scheme + host from the canonical link, og:url, or the page URL itself."""
    candidates = []
    canonical = parser.css_first('link[rel="canonical"]')
    if canonical is not None:
        candidates.append((canonical.attributes or {}).get("href"))
    og_url = parser.css_first('meta[property="og:url"]')
    if og_url is not None:
        candidates.append((og_url.attributes or {}).get("content"))
    candidates.append(url)
    for cand in candidates:
        if not cand:
            continue
        origin = _origin(urljoin(url, cand))
        if origin:
            return origin
    return url


def find_pages(parser: HTMLParser, base_url: str, keywords: List[str], limit: int) -> List[str]:
    """Same-site links whose href contains one of the keywords, keyword order first."""
    site = _host(base_url)
    anchors = parser.css("a[href]")
    pages: List[str] = []
    for keyword in keywords:
        for a in anchors:
            href = (a.attributes or {}).get("href") or ""
            if keyword not in href.lower():
                continue
            try:
                full = _normalize_url(urljoin(base_url, href))
            except ValueError:
                continue
            if site and _host(full) != site:
                continue
            if full not in pages:
                pages.append(full)
    return pages[:limit]


def extract_location(parser: HTMLParser) -> str:
    locality = parser.css_first('[itemprop="addressLocality"]')
    region = parser.css_first('[itemprop="addressRegion"]')
    if locality is not None and region is not None:
        city = _clean_text(locality.text())
        state = _clean_text(region.text())
        if city and state:
            return f"{city}, {state}"
    for selector in ("address", "footer", '[class*="address"]', '[class*="location"]'):
        for node in parser.css(selector):
            m = _CITY_STATE_RE.search(_clean_text(node.text(separator=" ")))
            if m:
                return f"{m.group(1)}, {m.group(2)}"
    return ""


def extract_description(parser: HTMLParser) -> str:
    parts: List[str] = []
    meta = parser.css_first('meta[name="description"]')
    if meta is not None:
        content = _clean_text((meta.attributes or {}).get("content"))
        if content:
            parts.append(content)
    for node in parser.css('.about-content, .company-info, [class*="about"]'):
        text = _clean_text(node.text(separator=" "))
        if text and text not in parts:
            parts.append(text)
    return " ".join(parts)[:2000]


def classify_company_page(html: str, url: str) -> CompanyInfo:
    parser = HTMLParser(html or "")
    website = extract_website(parser, url)
    return CompanyInfo(
        name=extract_company_name(parser, url),
        website=website,
        leadership_pages=find_pages(parser, url, LEADERSHIP_KEYWORDS, MAX_LEADERSHIP_PAGES),
        contact_pages=find_pages(parser, url, CONTACT_KEYWORDS, MAX_CONTACT_PAGES),
        about_pages=find_pages(parser, url, ABOUT_KEYWORDS, MAX_ABOUT_PAGES),
        location=extract_location(parser),
        description=extract_description(parser),
    )
