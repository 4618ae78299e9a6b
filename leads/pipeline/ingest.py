from __future__ import annotations

import random
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional

import httpx

from ..config import Settings
from ..ops_logger import OpsLogger, log_error
from ..schemas import CompanyInfo, Lead, PersonRecord
from .discovery import classify_company_page
from .enrich import PhoneEmailEnricher
from .extractors import PeopleExtractor
from .fetchers.static import StaticFetcher
from .gate import LeadCollector, qualification_failure
from .normalize import clean_company_name, estimate_company_size, extract_city_state
from .roles import determine_lead_type

# Pause between pages of one company, before scaling to the configured delays
PAGE_DELAY_MIN_MS = 1000
PAGE_DELAY_MAX_MS = 3000


@dataclass
class CompanyResult:
    """Outcome of processing one company URL."""
    url: str
    company: Optional[CompanyInfo] = None
    pages: List[str] = field(default_factory=list)
    people_found: int = 0
    accepted: List[Lead] = field(default_factory=list)
    rejected: Dict[str, int] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None and self.company is not None


class LeadPipeline:
    """Turns company URLs into qualified, deduplicated leads.

    - One unit of work per company: classify home page, fetch up to
      max_pages_per_company candidate pages, extract people, qualify
    - Companies run on a bounded thread pool with randomized pauses
    - Stops picking up work once `limit` leads have been accepted
    - Dedupe is serialized through a LeadCollector seeded with existing leads
    """

    def __init__(
        self,
        *,
        settings: Optional[Settings] = None,
        fetcher: Optional[StaticFetcher] = None,
        extractor: Optional[PeopleExtractor] = None,
        enricher: Optional[PhoneEmailEnricher] = None,
        collector: Optional[LeadCollector] = None,
        ops_logger: Optional[OpsLogger] = None,
        limit: int = 50,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.settings = settings or Settings()
        scraping = self.settings.scraping
        self.fetcher = fetcher or StaticFetcher(
            timeout_s=scraping.timeout_s,
            user_agents=scraping.user_agents,
            respect_robots=scraping.respect_robots,
        )
        self.ops_logger = ops_logger
        self.extractor = extractor or PeopleExtractor(ops_logger=ops_logger)
        self.enricher = enricher
        self.collector = collector or LeadCollector()
        self.limit = int(limit)
        self._sleep = sleep

    def close(self) -> None:
        self.fetcher.close()
        if self.enricher is not None:
            self.enricher.close()

    # -------------------------
    # Timing / cancellation
    # -------------------------
    def limit_reached(self) -> bool:
        return self.limit > 0 and len(self.collector) >= self.limit

    def company_delay_s(self) -> float:
        s = self.settings.scraping
        return random.uniform(s.delay_min_ms, s.delay_max_ms) / 1000.0

    def page_delay_s(self) -> float:
        """1-3 s between pages, shrunk when the configured company delays are shorter."""
        s = self.settings.scraping
        lo = min(PAGE_DELAY_MIN_MS, s.delay_min_ms / 2)
        hi = min(PAGE_DELAY_MAX_MS, s.delay_max_ms / 2)
        return random.uniform(lo, max(lo, hi)) / 1000.0

    def _pause(self, seconds: float) -> None:
        if seconds > 0:
            self._sleep(seconds)

    # -------------------------
    # Units of work
    # -------------------------
    def _reject(self, result: CompanyResult, lead: Lead, reason: str) -> None:
        result.rejected[reason] = result.rejected.get(reason, 0) + 1
        if self.ops_logger is not None:
            self.ops_logger.event("lead_rejected", reason=reason, name=lead.name, title=lead.title,
                                  company=lead.company, source_url=lead.source_url)

    def process_person(self, person: PersonRecord, company: CompanyInfo, result: CompanyResult) -> Optional[Lead]:
        lead = Lead.from_person(person, company, determine_lead_type(person.title, company.name))
        lead.company = clean_company_name(company.name) or company.name

        if self.collector.seen(lead):
            self._reject(result, lead, "duplicate")
            return None

        if self.enricher is not None and self.enricher.enabled:
            try:
                enrichment = self.enricher.enrich_contact(
                    lead.name, lead.company, person.phone, person.email, website=company.website
                )
                if enrichment.phone:
                    lead.phone = enrichment.phone
                if enrichment.email:
                    lead.email = enrichment.email
                if enrichment.verified:
                    lead.verified = True
            except Exception as e:
                log_error(self.ops_logger, "enrichment failed", e, event="enrich_error",
                          company=company.name, name=lead.name)

        location = extract_city_state(company.location)
        lead.city = location["city"]
        lead.state = location["state"]
        lead.company_size = estimate_company_size(company.description)

        failure = qualification_failure(lead)
        if failure:
            self._reject(result, lead, failure)
            return None

        if not self.collector.add(lead):
            self._reject(result, lead, "duplicate")
            return None

        if self.ops_logger is not None:
            self.ops_logger.event("lead_accepted", name=lead.name, title=lead.title, company=lead.company,
                                  lead_type=lead.lead_type.value, verified=lead.verified,
                                  source_url=lead.source_url)
        return lead

    def process_company(self, url: str) -> CompanyResult:
        result = CompanyResult(url=url)
        if self.limit_reached():
            result.error = "limit reached"
            return result

        print(f"➡️  Processing: {url}")
        try:
            home = self.fetcher.fetch(url)
        except httpx.HTTPError as e:
            log_error(self.ops_logger, "company fetch failed", e, event="fetch_error", url=url)
            result.error = f"{type(e).__name__}: {e}"
            return result
        if not home.ok:
            reason = "blocked by robots.txt" if home.blocked_by_robots else f"HTTP {home.status_code}"
            print(f"  ⚠️  Skipped: {url} ({reason})")
            result.error = reason
            return result

        try:
            company = classify_company_page(home.html or "", home.url)
        except Exception as e:
            log_error(self.ops_logger, "company classification failed", e, url=url)
            result.error = f"{type(e).__name__}: {e}"
            return result
        result.company = company
        print(f"  🏢 {company.name} ({company.website})")

        result.pages = company.candidate_pages(self.settings.scraping.max_pages_per_company)
        for i, page_url in enumerate(result.pages):
            if self.limit_reached():
                break
            if i > 0:
                self._pause(self.page_delay_s())
            if page_url == home.url:
                page_html = home.html or ""
            else:
                try:
                    page = self.fetcher.fetch(page_url)
                except httpx.HTTPError as e:
                    log_error(self.ops_logger, "page fetch failed", e, event="fetch_error", url=page_url)
                    continue
                if not page.ok:
                    continue
                page_html = page.html or ""

            people = self.extractor.extract_people(page_html, page_url)
            result.people_found += len(people)
            for person in people:
                if self.limit_reached():
                    break
                lead = self.process_person(person, company, result)
                if lead is not None:
                    result.accepted.append(lead)

        if result.accepted:
            print(f"  ✅ {len(result.accepted)} leads from {company.name}")
        else:
            print(f"  ℹ️  No qualified leads from {company.name}")
        return result

    def run(self, urls: Iterable[str]) -> List[CompanyResult]:
        """Process every URL on the worker pool; results come back in input order."""
        url_list = list(urls)
        results: Dict[int, CompanyResult] = {}

        def _work(url: str) -> CompanyResult:
            try:
                return self.process_company(url)
            except Exception as e:
                log_error(self.ops_logger, "company processing failed", e, url=url)
                return CompanyResult(url=url, error=f"{type(e).__name__}: {e}")
            finally:
                if not self.limit_reached():
                    self._pause(self.company_delay_s())

        workers = max(1, self.settings.scraping.max_concurrent)
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = {pool.submit(_work, url): i for i, url in enumerate(url_list)}
            for fut in as_completed(futures):
                results[futures[fut]] = fut.result()

        return [results[i] for i in range(len(url_list))]

    @property
    def leads(self) -> List[Lead]:
        return self.collector.accepted
