"""
Normalization helpers: phones, emails, locations, company size, dedupe keys.

All functions are pure and never raise on bad input; unparsable values
come back as None (or an empty string where a string is expected).
"""
from __future__ import annotations

import re
from typing import Callable, Dict, List, Optional, Tuple

import phonenumbers

from ..schemas import Lead
from .roles import is_valid_title
from .vocab import EMAIL_RE, PHONE_RE, US_STATE_CODES

__all__ = [
    "normalize_phone",
    "normalize_email",
    "is_valid_title",
    "extract_city_state",
    "generate_dedupe_key",
    "extract_phones_from_text",
    "extract_emails_from_text",
    "estimate_company_size",
    "clean_company_name",
]

_PHONE_JUNK_RE = re.compile(r"[^\d+()\s\-.]")


def _digits(s: str) -> str:
    return re.sub(r"\D", "", s or "")


def normalize_phone(raw: Optional[str]) -> Optional[str]:
    """Return an E.164 US phone number (+1XXXXXXXXXX) or None."""
    if not raw:
        return None
    try:
        cleaned = _PHONE_JUNK_RE.sub("", str(raw))
        try:
            parsed = phonenumbers.parse(cleaned, "US")
            if phonenumbers.is_valid_number(parsed):
                return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)
        except phonenumbers.NumberParseException:
            pass
        # Fallback: plain 3-3-4 grammar, no numbering-plan checks
        m = PHONE_RE.search(cleaned)
        if not m:
            return None
        digits = _digits(m.group(0))
        if len(digits) == 10:
            return f"+1{digits}"
        if len(digits) == 11 and digits.startswith("1"):
            return f"+{digits}"
        return None
    except Exception:
        return None


def normalize_email(raw: Optional[str]) -> Optional[str]:
    """Return the first email found in raw, lowercased, or None."""
    if not raw:
        return None
    m = EMAIL_RE.search(str(raw))
    if m:
        return m.group(0).lower().strip()
    return None


# Ordered location patterns: "City, ST", "City, State", "City ST"
_LOCATION_PATTERNS = [
    re.compile(r"^([^,]+),\s*([A-Z]{2})$", re.I),
    re.compile(r"^([^,]+),\s*([A-Za-z\s]+)$", re.I),
    re.compile(r"^([A-Za-z\s]+?)\s+([A-Z]{2})$", re.I),
]
_COMMALESS = _LOCATION_PATTERNS[2]
_TRAILING_STATE_RE = re.compile(r"\b([A-Z]{2})\b$")


def extract_city_state(location: Optional[str]) -> Dict[str, str]:
    """Split a free-text location into {'city': ..., 'state': ...}.

    Without a comma the trailing two letters must be a US state code, so
    "Austin tx" splits but "Santa Fe" stays a city.
    """
    if not location:
        return {"city": "", "state": ""}
    text = location.strip()
    for pat in _LOCATION_PATTERNS:
        m = pat.match(text)
        if not m:
            continue
        state = m.group(2).strip()
        if pat is _COMMALESS and state.upper() not in US_STATE_CODES:
            continue
        return {"city": m.group(1).strip(), "state": state.upper() if len(state) == 2 else state}
    m = _TRAILING_STATE_RE.search(text)
    if m:
        city = _TRAILING_STATE_RE.sub("", text).strip().rstrip(",").strip()
        return {"city": city, "state": m.group(1)}
    return {"city": location, "state": ""}


def generate_dedupe_key(lead: Lead) -> str:
    """Identity key: phone digits, else lowercased email, else name+company."""
    phone = _digits(lead.phone or "")
    if phone:
        return phone
    email = (lead.email or "").lower()
    if email:
        return email
    return f"{(lead.name or '').lower()}{(lead.company or '').lower()}"


def extract_phones_from_text(text: Optional[str]) -> List[str]:
    if not text:
        return []
    return [m.group(0).strip() for m in PHONE_RE.finditer(text)]


def extract_emails_from_text(text: Optional[str]) -> List[str]:
    if not text:
        return []
    return [m.lower().strip() for m in EMAIL_RE.findall(text)]


def _range_employees(m: re.Match) -> str:
    return f"{m.group(1)}-{m.group(2)} employees"


def _count_employees(m: re.Match) -> str:
    return f"{m.group(1)} employees"


# Priority order matters: ranges before single counts
_SIZE_PATTERNS: List[Tuple[re.Pattern[str], Callable[[re.Match], str]]] = [
    (re.compile(r"(\d+)\s*-\s*(\d+)\s*employees", re.I), _range_employees),
    (re.compile(r"(\d+)\s*employees", re.I), _count_employees),
    (re.compile(r"(\d+)\s*-\s*(\d+)\s*people", re.I), _range_employees),
    (re.compile(r"(\d+)\s*people", re.I), _count_employees),
    (re.compile(r"\$(\d+(?:\.\d+)?)\s*million", re.I), lambda m: f"${m.group(1)}M revenue"),
    (re.compile(r"\$(\d+(?:\.\d+)?)\s*billion", re.I), lambda m: f"${m.group(1)}B revenue"),
]


def estimate_company_size(text: Optional[str]) -> str:
    """Return a size/revenue string like '50-200 employees' or '$12M revenue', or ''."""
    if not text:
        return ""
    for pattern, fmt in _SIZE_PATTERNS:
        m = pattern.search(text)
        if m:
            return fmt(m)
    return ""


_COMPANY_SUFFIX_RE = re.compile(r"\b(inc|llc|ltd|corp|corporation|company|co)\b\.?$", re.I)


def clean_company_name(name: Optional[str]) -> str:
    """Drop a trailing legal suffix (Inc, LLC, ...) and collapse whitespace."""
    if not name:
        return ""
    s = _COMPANY_SUFFIX_RE.sub("", name.strip())
    s = re.sub(r"\s+", " ", s).strip()
    return s.rstrip(",").strip()
