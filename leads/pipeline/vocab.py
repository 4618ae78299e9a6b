"""
Title, phone and email vocabularies.

Static, read-only configuration shared by the normalizer, the title
classifier, the people extractor and the enrichment client. Bump
VOCABULARY_VERSION whenever a list changes so exported leads can be traced
back to the vocabulary that qualified them.
"""
from __future__ import annotations

import re
from typing import Sequence

VOCABULARY_VERSION = "1.2.0"

# Construction decision-maker titles
CONSTRUCTION_TITLES: tuple[str, ...] = (
    "Owner",
    "President",
    "Chief Executive",
    "CEO",
    "COO",
    "Managing Partner",
    "Vice President of Operations",
    "VP Operations",
    "Director of Operations",
    "Head Estimator",
    "Project Manager",
    "Operations Manager",
)

# Real estate broker/leadership titles
REAL_ESTATE_TITLES: tuple[str, ...] = (
    "Real Estate Agent",
    "Realtor",
    "Real Estate Broker",
    "Broker",
    "Managing Broker",
    "Principal Broker",
    "Associate Broker",
    "Owner/Broker",
    "Team Leader",
    "Sales Manager",
    "Listing Agent",
    "Buyer's Agent",
)

DECISION_MAKER_TITLES: tuple[str, ...] = CONSTRUCTION_TITLES + REAL_ESTATE_TITLES

# Junior / non-decision roles; a match here always wins over the list above
GENERIC_TITLES: tuple[str, ...] = (
    "Agent",
    "Representative",
    "Coordinator",
    "Assistant",
    "Clerk",
    "Receptionist",
    "Intern",
)

# Keywords that mark a lead as real estate rather than construction
REAL_ESTATE_KEYWORDS: tuple[str, ...] = (
    "real estate",
    "realtor",
    "broker",
    "agent",
    "realty",
    "property",
)


def build_title_pattern(titles: Sequence[str]) -> re.Pattern[str]:
    """Compile an ordered title list into one case-insensitive substring alternation."""
    return re.compile("(" + "|".join(re.escape(t) for t in titles) + ")", re.IGNORECASE)


TITLE_RE = build_title_pattern(DECISION_MAKER_TITLES)
GENERIC_TITLE_RE = build_title_pattern(GENERIC_TITLES)

# US phone grammar: optional +1, optional parens around the area code, then
# 3-3-4 digits with optional space/dash/dot separators. Not part of a longer
# digit run.
PHONE_RE = re.compile(r"(?<!\d)(?:\+?1[\s\-.]?)?\(?\d{3}\)?[\s\-.]?\d{3}[\s\-.]?\d{4}(?!\d)")

EMAIL_RE = re.compile(r"[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}", re.IGNORECASE)

# USPS codes accepted when a location has no comma before the state
US_STATE_CODES: frozenset[str] = frozenset({
    "AL", "AK", "AZ", "AR", "CA", "CO", "CT", "DE", "FL", "GA", "HI", "ID", "IL", "IN", "IA",
    "KS", "KY", "LA", "ME", "MD", "MA", "MI", "MN", "MS", "MO", "MT", "NE", "NV", "NH", "NJ",
    "NM", "NY", "NC", "ND", "OH", "OK", "OR", "PA", "RI", "SC", "SD", "TN", "TX", "UT", "VT",
    "VA", "WA", "WV", "WI", "WY", "DC", "PR",
})
