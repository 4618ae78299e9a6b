from __future__ import annotations

from typing import List, Optional, Tuple

from ..schemas import LeadType
from .vocab import GENERIC_TITLE_RE, REAL_ESTATE_KEYWORDS, TITLE_RE


def _normalize(s: Optional[str]) -> str:
    if s is None:
        return ""
    return str(s).strip()


def classify_title(title: Optional[str]) -> Tuple[bool, List[str]]:
    """Decide whether a title denotes a decision-maker and return reasons.

    - Generic markers (Agent, Assistant, ...) win over decision-maker titles.
    - Matching is case-insensitive substring matching against the vocabularies.
    - Robust to None/empty inputs.
    """
    reasons: List[str] = []
    t = _normalize(title)
    if not t:
        return False, reasons

    # Negatives first
    m = GENERIC_TITLE_RE.search(t)
    if m:
        reasons.append(f"exclude:{m.group(1).lower()}")
        return False, reasons

    m = TITLE_RE.search(t)
    if m:
        reasons.append(f"title:{m.group(1).lower()}")
        return True, reasons
    return False, reasons


def is_valid_title(title: Optional[str]) -> bool:
    ok, _ = classify_title(title)
    return ok


def is_decision_maker_title(title: Optional[str]) -> bool:
    """Decision-maker vocabulary only, without the generic-title exclusion."""
    t = _normalize(title)
    return bool(t) and TITLE_RE.search(t) is not None


def determine_lead_type(title: Optional[str], company_name: Optional[str]) -> LeadType:
    """Real estate if the title or company mentions a real-estate keyword, else construction."""
    for text in (_normalize(title).lower(), _normalize(company_name).lower()):
        if any(k in text for k in REAL_ESTATE_KEYWORDS):
            return LeadType.REAL_ESTATE
    return LeadType.CONSTRUCTION
