"""
Best-effort phone/email enrichment through Apollo and Hunter.

Apollo's people search is tried first and the returned candidates are
reconciled with the extracted person by name similarity. Hunter's domain
search fills in a missing email with the first address whose position is a
decision-maker title. Any HTTP or API failure is logged and yields no
enrichment; the caller's values are kept.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import httpx

from ..ops_logger import OpsLogger, log_error
from ..schemas import EnrichmentResult
from .matching import find_best_match
from .normalize import normalize_email, normalize_phone
from .roles import is_decision_maker_title
from .vocab import CONSTRUCTION_TITLES

APOLLO_PEOPLE_URL = "https://api.apollo.io/v1/people/search"
APOLLO_ORGS_URL = "https://api.apollo.io/v1/organizations/search"
HUNTER_DOMAIN_URL = "https://api.hunter.io/v2/domain-search"


def domain_of(url: Optional[str]) -> Optional[str]:
    """Hostname of a website URL without a leading www., or None."""
    if not url:
        return None
    if "://" not in url:
        url = f"https://{url}"
    host = (urlparse(url).hostname or "").lower()
    if host.startswith("www."):
        host = host[4:]
    return host or None


class PhoneEmailEnricher:
    def __init__(
        self,
        *,
        apollo_api_key: Optional[str] = None,
        hunter_api_key: Optional[str] = None,
        ops_logger: Optional[OpsLogger] = None,
        timeout_s: float = 10.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.apollo_api_key = apollo_api_key or None
        self.hunter_api_key = hunter_api_key or None
        self.ops_logger = ops_logger
        self._client = client or httpx.Client(timeout=timeout_s)

    @property
    def enabled(self) -> bool:
        return bool(self.apollo_api_key or self.hunter_api_key)

    def close(self) -> None:
        self._client.close()

    def _apollo_headers(self) -> Dict[str, str]:
        return {"Cache-Control": "no-cache", "X-Api-Key": self.apollo_api_key or ""}

    def enrich_contact(
        self,
        name: str,
        company: str,
        phone: Optional[str] = None,
        email: Optional[str] = None,
        website: Optional[str] = None,
    ) -> EnrichmentResult:
        """Fill in phone/email for a person; existing values are the fallback.

        Args:
            name: Person's full name
            company: Company name used for the provider lookups
            phone: Phone already known for the person, if any
            email: Email already known for the person, if any
            website: Company website; its domain is used for Hunter when given

        Returns:
            EnrichmentResult with normalized phone/email (or None) and whether
            a provider vouched for the data
        """
        phone_out = phone or None
        email_out = email or None
        verified = False

        if self.apollo_api_key:
            found = self.enrich_with_apollo(name, company)
            if found is not None:
                phone_out = found.phone or phone_out
                email_out = found.email or email_out
                verified = found.verified

        if self.hunter_api_key and not email_out:
            domain = domain_of(website) or self.get_company_domain(company)
            if domain:
                found = self.enrich_with_hunter(domain, company)
                if found is not None:
                    email_out = found.email or email_out
                    verified = verified or found.verified

        return EnrichmentResult(
            phone=normalize_phone(phone_out) or normalize_phone(phone),
            email=normalize_email(email_out) or normalize_email(email),
            verified=verified,
        )

    def enrich_with_apollo(self, name: str, company: str) -> Optional[EnrichmentResult]:
        try:
            resp = self._client.get(
                APOLLO_PEOPLE_URL,
                headers=self._apollo_headers(),
                params={
                    "q_organization_name": company,
                    "person_titles[]": list(CONSTRUCTION_TITLES[:10]),
                    "page": 1,
                    "per_page": 10,
                },
            )
            resp.raise_for_status()
            people: List[Dict[str, Any]] = (resp.json() or {}).get("people") or []
        except (httpx.HTTPError, ValueError) as e:
            log_error(self.ops_logger, "Apollo people search failed", e, event="enrich_error",
                      provider="apollo", company=company, name=name)
            return None

        best = find_best_match(name, people)
        if best is None:
            return None
        numbers = best.get("phone_numbers") or []
        first = numbers[0] if numbers else {}
        return EnrichmentResult(
            phone=first.get("sanitized_number") or first.get("raw_number"),
            email=best.get("email"),
            verified=True,
        )

    def enrich_with_hunter(self, domain: str, company: str = "") -> Optional[EnrichmentResult]:
        try:
            resp = self._client.get(
                HUNTER_DOMAIN_URL,
                params={"domain": domain, "api_key": self.hunter_api_key, "limit": 10},
            )
            resp.raise_for_status()
            emails: List[Dict[str, Any]] = ((resp.json() or {}).get("data") or {}).get("emails") or []
        except (httpx.HTTPError, ValueError) as e:
            log_error(self.ops_logger, "Hunter domain search failed", e, event="enrich_error",
                      provider="hunter", company=company, domain=domain)
            return None

        for entry in emails:
            position = entry.get("position")
            if position and is_decision_maker_title(position):
                status = (entry.get("verification") or {}).get("status")
                return EnrichmentResult(email=entry.get("value"), verified=status == "valid")
        return None

    def get_company_domain(self, company: str) -> Optional[str]:
        """Look the company up in Apollo and return its website's domain."""
        if not self.apollo_api_key or not company:
            return None
        try:
            resp = self._client.get(
                APOLLO_ORGS_URL,
                headers=self._apollo_headers(),
                params={"q_name": company, "page": 1, "per_page": 1},
            )
            resp.raise_for_status()
            orgs = (resp.json() or {}).get("organizations") or []
        except (httpx.HTTPError, ValueError) as e:
            log_error(self.ops_logger, "Apollo organization search failed", e, event="enrich_error",
                      provider="apollo", company=company)
            return None
        if not orgs:
            return None
        return domain_of(orgs[0].get("website_url"))
