import pytest

from leads.pipeline.normalize import (
    clean_company_name,
    estimate_company_size,
    extract_city_state,
    extract_emails_from_text,
    extract_phones_from_text,
    generate_dedupe_key,
    normalize_email,
    normalize_phone,
)
from leads.schemas import Lead


@pytest.mark.parametrize("raw", [
    "(555) 123-4567",
    "555.123.4567",
    "5551234567",
    "555-123-4567",
    "+1 (555) 123-4567",
    "1-555-123-4567",
])
def test_normalize_phone_us_formats(raw):
    assert normalize_phone(raw) == "+15551234567"


def test_normalize_phone_valid_number_is_e164():
    assert normalize_phone("(202) 456-1111") == "+12024561111"


@pytest.mark.parametrize("raw", [
    None,
    "",
    "123",
    "555-1234",
    "25551234567",          # 11 digits, no leading 1
    "12345678901234",       # too long
    "call us",
])
def test_normalize_phone_rejects(raw):
    assert normalize_phone(raw) is None


def test_normalize_email_first_match_lowercased():
    assert normalize_email("John.Smith@EXAMPLE.com extra text") == "john.smith@example.com"
    assert normalize_email("mailto target: Jane@Acme.io?subject=hi") == "jane@acme.io"


def test_normalize_email_rejects():
    assert normalize_email("not an email") is None
    assert normalize_email(None) is None
    assert normalize_email("") is None


def test_extract_city_state_patterns():
    assert extract_city_state("Austin, TX") == {"city": "Austin", "state": "TX"}
    assert extract_city_state("Boise, id") == {"city": "Boise", "state": "ID"}
    assert extract_city_state("Austin tx") == {"city": "Austin", "state": "TX"}
    assert extract_city_state("Santa Fe NM") == {"city": "Santa Fe", "state": "NM"}
    assert extract_city_state("Salt Lake City, Utah") == {"city": "Salt Lake City", "state": "Utah"}
    assert extract_city_state("Denver CO") == {"city": "Denver", "state": "CO"}


def test_extract_city_state_fallbacks():
    assert extract_city_state("") == {"city": "", "state": ""}
    assert extract_city_state(None) == {"city": "", "state": ""}
    assert extract_city_state("Santa Fe") == {"city": "Santa Fe", "state": ""}
    assert extract_city_state("Kansas City Mo") == {"city": "Kansas City", "state": "MO"}
    assert extract_city_state("Grand Rapids") == {"city": "Grand Rapids", "state": ""}


def test_dedupe_key_prefers_phone_digits():
    lead = Lead(name="John Smith", company="Acme", phone="+1 (555) 123-4567", email="john@acme.com")
    assert generate_dedupe_key(lead) == "15551234567"


def test_dedupe_key_email_then_name_company():
    assert generate_dedupe_key(Lead(name="John Smith", company="Acme", email="John@Acme.com")) == "john@acme.com"
    assert generate_dedupe_key(Lead(name="John Smith", company="Acme")) == "john smithacme"


def test_dedupe_key_is_stable():
    lead = Lead(name="Jane Doe", company="Acme", phone="+15551234567")
    assert generate_dedupe_key(lead) == generate_dedupe_key(lead.model_copy())


def test_extract_phones_and_emails_from_text():
    text = "Call (555) 123-4567 or 555.987.6543, write to Bob@Acme.com or sales@acme.com"
    assert extract_phones_from_text(text) == ["(555) 123-4567", "555.987.6543"]
    assert extract_emails_from_text(text) == ["bob@acme.com", "sales@acme.com"]
    assert extract_phones_from_text("") == []
    assert extract_emails_from_text(None) == []


@pytest.mark.parametrize("text,expected", [
    ("A team of 50-200 employees across Texas", "50-200 employees"),
    ("We employ 75 employees", "75 employees"),
    ("Staff of 10 - 20 people", "10-20 employees"),
    ("Around 40 people strong", "40 employees"),
    ("$12 million in annual revenue", "$12M revenue"),
    ("$1.5 billion portfolio", "$1.5B revenue"),
    ("Family owned since 1985", ""),
    ("", ""),
])
def test_estimate_company_size(text, expected):
    assert estimate_company_size(text) == expected


def test_clean_company_name():
    assert clean_company_name("Acme Builders, LLC") == "Acme Builders"
    assert clean_company_name("  Summit   Homes Inc. ") == "Summit Homes"
    assert clean_company_name("") == ""
