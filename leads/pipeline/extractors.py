"""
People Extraction Logic - Extract Names, Titles, Phones and Emails

Finds decision-makers on company pages (leadership rosters, team grids,
contact blocks, about pages) using structural selectors, and falls back to
a line-by-line scan of every block element when no selector matches.

Key Features:
- Ordered extraction strategies; the first one that finds anybody wins
- Name/title heuristics driven by the title vocabularies
- tel:/mailto: links preferred over free-text phone/email matches
- Phones and emails normalized before records are created
- Strategy failures are logged and skipped, never raised
"""

import re
from typing import List, Optional, Set, Tuple, Union

from selectolax.parser import HTMLParser, Node

from ..ops_logger import OpsLogger, log_error
from ..schemas import PersonRecord
from .normalize import (
    extract_emails_from_text,
    extract_phones_from_text,
    normalize_email,
    normalize_phone,
)
from .roles import is_decision_maker_title, is_valid_title
from .vocab import EMAIL_RE, PHONE_RE, TITLE_RE


# "First Last", "First M. Last", "First Middle Last"
NAME_PATTERNS = [
    re.compile(r'^[A-Z][a-z]+ [A-Z][a-z]+$'),
    re.compile(r'^[A-Z][a-z]+ [A-Z]\. [A-Z][a-z]+$'),
    re.compile(r'^[A-Z][a-z]+ [A-Z][a-z]+ [A-Z][a-z]+$'),
]
NAME_FRAGMENT_RE = re.compile(r'[A-Z][a-z]+ [A-Z][a-z]+')
HONORIFIC_RE = re.compile(r'^(Dr\.|Mr\.|Ms\.|Mrs\.)\s+')
_INLINE_WS_RE = re.compile(r'[ \t\r\f\v\xa0]+')


def looks_like_name(text: Optional[str]) -> bool:
    if not text or len(text) < 2 or len(text) > 50:
        return False
    return any(p.match(text) for p in NAME_PATTERNS)


def looks_like_person_info(text: Optional[str]) -> bool:
    """A capitalized two-word name plus a title, phone or email somewhere in the text."""
    if not text or len(text) < 10:
        return False
    if not NAME_FRAGMENT_RE.search(text):
        return False
    return bool(TITLE_RE.search(text) or PHONE_RE.search(text) or EMAIL_RE.search(text))


def text_lines(text: Optional[str]) -> List[str]:
    lines = []
    for raw in (text or '').split('\n'):
        line = _INLINE_WS_RE.sub(' ', raw).strip()
        if line:
            lines.append(line)
    return lines


class PeopleExtractor:
    """
    Extracts decision-maker PersonRecords from a single HTML page.

    Stateless between calls; one instance can be shared by worker threads.
    """

    def __init__(self, ops_logger: Optional[OpsLogger] = None):
        """
        Initialize People Extractor.

        Args:
            ops_logger: Optional JSONL logger for strategy errors and per-page stats
        """
        self.ops_logger = ops_logger

        # Page archetypes, tried in this order
        self.strategies: List[Tuple[str, str]] = [
            ('leadership', '_extract_from_leadership_page'),
            ('team', '_extract_from_team_page'),
            ('contact', '_extract_from_contact_page'),
            ('about', '_extract_from_about_page'),
            ('generic', '_extract_from_generic_page'),
        ]

        self.leadership_selectors = [
            '.leadership-item',
            '.team-member',
            '.executive',
            '.management',
            '.person',
            '.staff-member',
            '[class*="leadership"]',
            '[class*="team"]',
            '[class*="executive"]',
        ]

        self.team_selectors = [
            '.team-card',
            '.member-card',
            '.person-card',
            '.staff-card',
            '[class*="team"]',
            '[class*="member"]',
        ]

        self.contact_selectors = [
            '.contact-person',
            '.contact-info',
            '.staff-contact',
            '.office-contact',
            '[class*="contact"]',
        ]

        # Blocks scanned as free text on contact pages
        self.contact_block_selectors = '.contact, .office, .location, [class*="contact"]'

        self.about_selectors = [
            '.about-content',
            '.company-info',
            '.history',
            '.mission',
            '[class*="about"]',
        ]

        self.generic_selectors = ['div', 'section', 'article', 'li']

        # Selectors for names within person containers
        self.name_selectors = [
            'h1', 'h2', 'h3', 'h4',
            '.name', '.person-name', '.full-name',
            '[class*="name"]',
            'strong', 'b',
        ]

        # Selectors for job titles/roles
        self.title_selectors = [
            '.title', '.position', '.role', '.job-title',
            '[class*="title"]', '[class*="position"]',
            'em', 'i',
        ]

    def extract_people(self, html: str, source_url: str) -> List[PersonRecord]:
        """
        Extract qualified people from a page.

        Args:
            html: Raw HTML content
            source_url: URL the HTML was fetched from

        Returns:
            PersonRecords with a decision-maker title and a phone or email,
            in document order; empty when nothing qualifies
        """
        _, people = self.extract_people_with_strategy(html, source_url)
        return people

    def extract_people_with_strategy(self, html: str, source_url: str) -> Tuple[Optional[str], List[PersonRecord]]:
        """Same as extract_people, also returning the name of the strategy that was used."""
        try:
            parser = HTMLParser(html or '')
        except Exception as e:
            log_error(self.ops_logger, 'HTML parse failed', e, source_url=source_url)
            return None, []

        people: List[PersonRecord] = []
        used: Optional[str] = None
        for name, method_name in self.strategies:
            try:
                found = getattr(self, method_name)(parser, source_url)
            except Exception as e:
                log_error(self.ops_logger, f'{name} strategy failed', e,
                          event='strategy_error', source_url=source_url, strategy=name)
                continue
            if found:
                people.extend(found)
                used = name
                break

        try:
            valid = self._filter_and_dedup(people)
        except Exception as e:
            log_error(self.ops_logger, 'people filtering failed', e, source_url=source_url)
            return used, []

        if self.ops_logger is not None:
            self.ops_logger.event(
                'page_extracted',
                source_url=source_url,
                strategy=used,
                candidates=len(people),
                people=len(valid),
            )
        return used, valid

    # -------------------------
    # Strategies
    # -------------------------
    def _candidate_nodes(self, parser: HTMLParser, selectors: Union[str, List[str]]) -> List[Node]:
        """Matched containers in document order, skipping wrappers that hold another match."""
        selector = selectors if isinstance(selectors, str) else ', '.join(selectors)
        nodes: List[Node] = []
        for node in parser.css(selector):
            if any(child.css_matches(selector) or child.css_first(selector) is not None
                   for child in node.iter()):
                continue
            nodes.append(node)
        return nodes

    def _extract_with_selectors(self, parser: HTMLParser, selectors: List[str], source_url: str) -> List[PersonRecord]:
        people: List[PersonRecord] = []
        for node in self._candidate_nodes(parser, selectors):
            person = self._extract_person_from_node(node, source_url)
            if person:
                people.append(person)
        return people

    def _extract_from_leadership_page(self, parser: HTMLParser, source_url: str) -> List[PersonRecord]:
        return self._extract_with_selectors(parser, self.leadership_selectors, source_url)

    def _extract_from_team_page(self, parser: HTMLParser, source_url: str) -> List[PersonRecord]:
        return self._extract_with_selectors(parser, self.team_selectors, source_url)

    def _extract_from_contact_page(self, parser: HTMLParser, source_url: str) -> List[PersonRecord]:
        people = self._extract_with_selectors(parser, self.contact_selectors, source_url)
        people.extend(self._extract_structured_contact_data(parser, source_url))
        return people

    def _extract_from_about_page(self, parser: HTMLParser, source_url: str) -> List[PersonRecord]:
        return self._extract_with_selectors(parser, self.about_selectors, source_url)

    def _extract_from_generic_page(self, parser: HTMLParser, source_url: str) -> List[PersonRecord]:
        people: List[PersonRecord] = []
        for node in parser.css(', '.join(self.generic_selectors)):
            person = self._extract_person_from_block(node, source_url)
            if person:
                people.append(person)
        return people

    def _extract_structured_contact_data(self, parser: HTMLParser, source_url: str) -> List[PersonRecord]:
        people: List[PersonRecord] = []
        for node in self._candidate_nodes(parser, self.contact_block_selectors):
            person = self._extract_person_from_block(node, source_url)
            if person:
                people.append(person)
        return people

    # -------------------------
    # Per-element extraction
    # -------------------------
    def _extract_person_from_node(self, node: Node, source_url: str) -> Optional[PersonRecord]:
        """Selector-driven extraction inside one candidate container."""
        try:
            lines = text_lines(node.text(separator='\n'))
            name = self._extract_name(node, lines)
            if not name:
                return None
            title = self._extract_title(node, lines)
            if not title:
                return None
            flat_text = node.text(separator=' ')
            phone = self._extract_phone(node, flat_text)
            email = self._extract_email(node, flat_text)
            if not phone and not email:
                return None
            return PersonRecord(name=name, title=title[:200], phone=phone, email=email, source=source_url)
        except Exception:
            # Malformed fragment: treat as no match
            return None

    def _extract_person_from_block(self, node: Node, source_url: str) -> Optional[PersonRecord]:
        try:
            text = node.text(separator='\n')
            if not looks_like_person_info(text):
                return None
            return self._extract_person_from_text(text, source_url)
        except Exception:
            return None

    def _extract_person_from_text(self, text: str, source_url: str) -> Optional[PersonRecord]:
        """Line-by-line extraction: name line, title line, then phone/email on the remaining lines."""
        name: Optional[str] = None
        title: Optional[str] = None
        phone: Optional[str] = None
        email: Optional[str] = None

        for line in text_lines(text):
            if not name and looks_like_name(line):
                name = line
                continue
            if not title and is_decision_maker_title(line):
                title = line
                continue
            if not phone:
                phones = extract_phones_from_text(line)
                if phones:
                    phone = normalize_phone(phones[0])
            if not email:
                emails = extract_emails_from_text(line)
                if emails:
                    email = normalize_email(emails[0])

        if name and title and (phone or email):
            return PersonRecord(name=name, title=title[:200], phone=phone, email=email, source=source_url)
        return None

    def _extract_name(self, node: Node, lines: List[str]) -> Optional[str]:
        for selector in self.name_selectors:
            for name_node in node.css(selector):
                name = _INLINE_WS_RE.sub(' ', name_node.text(separator=' ') or '').strip()
                name = HONORIFIC_RE.sub('', name)
                if looks_like_name(name):
                    return name
        for line in lines:
            if looks_like_name(line):
                return line
        return None

    def _extract_title(self, node: Node, lines: List[str]) -> Optional[str]:
        for selector in self.title_selectors:
            for title_node in node.css(selector):
                title = _INLINE_WS_RE.sub(' ', title_node.text(separator=' ') or '').strip()
                if title and is_decision_maker_title(title):
                    return title
        for line in lines:
            if is_decision_maker_title(line):
                return line
        return None

    def _extract_phone(self, node: Node, text: str) -> Optional[str]:
        """tel: link first, else the first phone-looking text."""
        link = node.css_first('a[href^="tel:"]')
        if link is not None:
            href = (link.attributes.get('href') or '')[4:]
            return normalize_phone(href)
        phones = extract_phones_from_text(text)
        if phones:
            return normalize_phone(phones[0])
        return None

    def _extract_email(self, node: Node, text: str) -> Optional[str]:
        """mailto: link first, else the first email-looking text."""
        link = node.css_first('a[href^="mailto:"]')
        if link is not None:
            href = (link.attributes.get('href') or '')[7:]
            return normalize_email(href)
        emails = extract_emails_from_text(text)
        if emails:
            return normalize_email(emails[0])
        return None

    # -------------------------
    # Validation & Dedup
    # -------------------------
    def _filter_and_dedup(self, people: List[PersonRecord]) -> List[PersonRecord]:
        """Strict page-level re-check, keeping the first of identical records."""
        out: List[PersonRecord] = []
        seen: Set[tuple] = set()
        for p in people:
            if not p.name or not p.title or not is_valid_title(p.title):
                continue
            if not (p.phone or p.email):
                continue
            key = (p.name, p.title, p.phone, p.email)
            if key in seen:
                continue
            seen.add(key)
            out.append(p)
        return out
