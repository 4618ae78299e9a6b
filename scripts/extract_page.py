#!/usr/bin/env python3
"""
Manual Testing Tool for Decision-Maker Lead Extraction

Runs the people extractor on a single URL (or a saved HTML file) and shows
which strategy fired, every person found, and whether each would qualify
as a lead.

Usage:
    python3 scripts/extract_page.py "https://example.com/our-team"
    python3 scripts/extract_page.py saved_page.html --source-url "https://example.com/team"
    python3 scripts/extract_page.py "https://example.com/about" --json people.json
"""

import argparse
import json
import sys
from pathlib import Path

# Add the repository root to path so the packages import without installing
sys.path.insert(0, str(Path(__file__).parent.parent))

import httpx

from leads.pipeline.extractors import PeopleExtractor
from leads.pipeline.fetchers.static import StaticFetcher
from leads.pipeline.gate import qualification_failure
from leads.pipeline.roles import classify_title
from leads.schemas import CompanyInfo, Lead


def print_header(title):
    print(f"\n{'='*60}")
    print(f" {title}")
    print(f"{'='*60}")


def load_html(target, timeout_s):
    path = Path(target)
    if path.exists():
        return path.read_text(encoding="utf-8", errors="replace"), None
    with StaticFetcher(timeout_s=timeout_s) as fetcher:
        res = fetcher.fetch(target)
    if res.blocked_by_robots:
        print("❌ Blocked by robots.txt")
    elif res.status_code >= 400:
        print(f"❌ HTTP {res.status_code}")
    return res.html or "", res.url


def main():
    parser = argparse.ArgumentParser(description="Extract decision-makers from one page")
    parser.add_argument("target", help="URL or path to a saved HTML file")
    parser.add_argument("--source-url", default=None, help="Source URL to record for a local file")
    parser.add_argument("--timeout", type=float, default=15.0, help="Fetch timeout seconds")
    parser.add_argument("--json", dest="json_out", default=None, help="Write people to this JSON file")
    args = parser.parse_args()

    print_header(f"Extracting: {args.target}")
    try:
        html, fetched_url = load_html(args.target, args.timeout)
    except httpx.HTTPError as e:
        print(f"❌ Fetch failed: {type(e).__name__}: {e}")
        return 1

    source_url = args.source_url or fetched_url or args.target
    strategy, people = PeopleExtractor().extract_people_with_strategy(html, source_url)
    print(f"Strategy: {strategy or '(none)'}")
    print(f"People: {len(people)}")

    company = CompanyInfo(name="", website="")
    for i, person in enumerate(people, 1):
        verdict = qualification_failure(Lead.from_person(person, company))
        _, reasons = classify_title(person.title)
        print(f"\n👤 #{i} {person.name}")
        print(f"   Title: {person.title} ({', '.join(reasons)})")
        print(f"   Phone: {person.phone or '-'}")
        print(f"   Email: {person.email or '-'}")
        print(f"   Lead: {'✅ qualifies' if verdict is None else f'❌ {verdict}'}")

    if args.json_out:
        Path(args.json_out).write_text(
            json.dumps([p.model_dump() for p in people], indent=2, ensure_ascii=False), encoding="utf-8"
        )
        print(f"\n💾 Saved {len(people)} people to {args.json_out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
