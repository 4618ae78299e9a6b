"""
Live end-to-end check against a real company page.

Usage:
    DML_RUN_INTEGRATION=1 pytest tests/integration/test_live_extraction.py -v
    DML_TEST_URL="https://example.com/our-team" DML_RUN_INTEGRATION=1 pytest tests/integration/test_live_extraction.py -v
"""

import os

import pytest

from leads.pipeline.extractors import PeopleExtractor
from leads.pipeline.fetchers.static import StaticFetcher
from leads.pipeline.roles import is_valid_title


@pytest.mark.skipif(
    os.getenv("DML_RUN_INTEGRATION") != "1",
    reason="Integration tests require DML_RUN_INTEGRATION=1"
)
def test_live_page_extraction():
    url = os.getenv("DML_TEST_URL", "https://www.example.com/")
    with StaticFetcher(timeout_s=20.0) as fetcher:
        res = fetcher.fetch(url)

    assert res.status_code < 400 or res.blocked_by_robots
    people = PeopleExtractor().extract_people(res.html or "", res.url)

    print(f"\n{len(people)} people from {res.url}")
    for p in people:
        print(f"  - {p.name} | {p.title} | {p.phone} | {p.email}")
        assert is_valid_title(p.title)
        assert p.phone or p.email
        assert p.source == res.url
