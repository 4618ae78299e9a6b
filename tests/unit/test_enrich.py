import json

import httpx

from leads.ops_logger import OpsLogger
from leads.pipeline.enrich import PhoneEmailEnricher, domain_of


APOLLO_PEOPLE = {
    "people": [
        {"first_name": "Jon", "last_name": "Smith", "email": "jon@other.com",
         "phone_numbers": [{"sanitized_number": "+15550000000"}]},
        {"first_name": "John", "last_name": "Smith", "email": "John.Smith@Acme.com",
         "phone_numbers": [{"sanitized_number": "+15551234567", "raw_number": "(555) 123-4567"}]},
    ]
}

HUNTER_DOMAIN = {
    "data": {
        "emails": [
            {"value": "front@acme.com", "position": "Receptionist"},
            {"value": "Jane@Acme.com", "position": "Chief Executive Officer",
             "verification": {"status": "valid"}},
        ]
    }
}


class Router:
    """Minimal request router for httpx.MockTransport."""

    def __init__(self, routes):
        self.routes = routes
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = f"{request.url.host}{request.url.path}"
        status, payload = self.routes.get(key, (404, {}))
        return httpx.Response(status, json=payload)


def make_enricher(routes, **kwargs):
    router = Router(routes)
    client = httpx.Client(transport=httpx.MockTransport(router))
    return PhoneEmailEnricher(client=client, **kwargs), router


def test_apollo_best_match_wins():
    enricher, router = make_enricher(
        {"api.apollo.io/v1/people/search": (200, APOLLO_PEOPLE)},
        apollo_api_key="apollo-key",
    )
    result = enricher.enrich_contact("John Smith", "Acme Builders")

    assert result.phone == "+15551234567"
    assert result.email == "john.smith@acme.com"
    assert result.verified is True

    req = router.requests[0]
    assert req.headers["X-Api-Key"] == "apollo-key"
    assert req.url.params["q_organization_name"] == "Acme Builders"
    assert "Owner" in req.url.params.get_list("person_titles[]")


def test_hunter_fills_missing_email_from_website_domain():
    enricher, router = make_enricher(
        {"api.hunter.io/v2/domain-search": (200, HUNTER_DOMAIN)},
        hunter_api_key="hunter-key",
    )
    result = enricher.enrich_contact("Jane Doe", "Acme", phone="(555) 123-4567", website="https://www.acme.com")

    assert result.email == "jane@acme.com"
    assert result.phone == "+15551234567"
    assert result.verified is True
    assert router.requests[0].url.params["domain"] == "acme.com"
    assert router.requests[0].url.params["api_key"] == "hunter-key"


def test_hunter_domain_looked_up_in_apollo_when_no_website():
    enricher, router = make_enricher(
        {
            "api.apollo.io/v1/people/search": (200, {"people": []}),
            "api.apollo.io/v1/organizations/search": (200, {"organizations": [{"website_url": "http://www.acme.com"}]}),
            "api.hunter.io/v2/domain-search": (200, HUNTER_DOMAIN),
        },
        apollo_api_key="a",
        hunter_api_key="h",
    )
    result = enricher.enrich_contact("Jane Doe", "Acme")

    assert result.email == "jane@acme.com"
    hunter_req = [r for r in router.requests if r.url.host == "api.hunter.io"][0]
    assert hunter_req.url.params["domain"] == "acme.com"


def test_existing_email_skips_hunter():
    enricher, router = make_enricher({}, hunter_api_key="h")
    result = enricher.enrich_contact("Jane Doe", "Acme", email="Jane@Acme.com", website="acme.com")
    assert result.email == "jane@acme.com"
    assert router.requests == []


def test_api_failure_is_logged_and_keeps_existing_values(tmp_path):
    ops_path = tmp_path / "ops.log"
    enricher, _ = make_enricher(
        {"api.apollo.io/v1/people/search": (500, {"error": "down"})},
        apollo_api_key="a",
        ops_logger=OpsLogger(ops_path),
    )
    result = enricher.enrich_contact("John Smith", "Acme", phone="555.123.4567")

    assert result.phone == "+15551234567"
    assert result.email is None
    assert result.verified is False
    record = json.loads(ops_path.read_text(encoding="utf-8").splitlines()[0])
    assert record["event"] == "enrich_error"
    assert record["provider"] == "apollo"
    assert "HTTPStatusError" in record["error"]


def test_enabled_and_domain_of():
    assert PhoneEmailEnricher(client=httpx.Client()).enabled is False
    assert PhoneEmailEnricher(apollo_api_key="a", client=httpx.Client()).enabled is True
    assert domain_of("https://www.Acme.com/about") == "acme.com"
    assert domain_of("acme.com") == "acme.com"
    assert domain_of("") is None
