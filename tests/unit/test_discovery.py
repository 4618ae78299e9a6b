from leads.pipeline import discovery
from leads.pipeline.discovery import classify_company_page


HOME_HTML = """
<html><head>
  <title>Acme Builders | General Contractor in Austin</title>
  <link rel="canonical" href="https://www.acmebuilders.com/home">
  <meta name="description" content="Acme Builders is a general contractor with 50-200 employees.">
</head><body>
  <nav>
    <a href="/about-us">About</a>
    <a href="/our-team">Team</a>
    <a href="/leadership">Leadership</a>
    <a href="/contact#form">Contact</a>
    <a href="https://facebook.com/acme-team">Facebook</a>
    <a href="/projects">Projects</a>
  </nav>
  <footer><address>1200 Main St, Austin, TX 78701</address></footer>
</body></html>
"""


def test_classify_company_page():
    info = classify_company_page(HOME_HTML, "https://acmebuilders.com/")

    assert info.name == "Acme Builders"
    assert info.website == "https://www.acmebuilders.com"
    assert info.leadership_pages == [
        "https://acmebuilders.com/leadership",
        "https://acmebuilders.com/our-team",
        "https://acmebuilders.com/about-us",
    ]
    assert info.contact_pages == ["https://acmebuilders.com/contact"]
    assert info.about_pages == ["https://acmebuilders.com/about-us"]
    assert info.location == "Austin, TX"
    assert "50-200 employees" in info.description


def test_candidate_pages_limit_and_order():
    info = classify_company_page(HOME_HTML, "https://acmebuilders.com/")
    assert info.candidate_pages(3) == [
        "https://acmebuilders.com/leadership",
        "https://acmebuilders.com/our-team",
        "https://acmebuilders.com/about-us",
    ]


def test_name_from_h1_cut_at_dash():
    html = "<html><body><h1>Summit Homes - Building Dreams</h1></body></html>"
    assert classify_company_page(html, "https://summithomes.com").name == "Summit Homes"


def test_name_from_og_title_when_h1_too_short():
    html = """<html><head><meta property="og:title" content="Peak Realty :: Home"></head>
    <body><h1>Hi</h1></body></html>"""
    assert classify_company_page(html, "https://peakrealty.com").name == "Peak Realty"


def test_name_falls_back_to_host_label():
    info = classify_company_page("<html><body><p>hello</p></body></html>", "https://www.summit-homes.com/")
    assert info.name == "summit homes"
    assert info.website == "https://www.summit-homes.com"
    assert info.candidate_pages() == ["https://www.summit-homes.com"]


def test_location_from_schema_org_address():
    html = """<html><body><div itemscope>
      <span itemprop="addressLocality">Denver</span>
      <span itemprop="addressRegion">CO</span>
    </div></body></html>"""
    assert classify_company_page(html, "https://x.com").location == "Denver, CO"


def test_link_limits():
    links = "".join(f'<a href="/team-{i}">Team {i}</a>' for i in range(10))
    info = classify_company_page(f"<html><body>{links}</body></html>", "https://big.com/")
    assert len(info.leadership_pages) == 5


def test_module_docstring():
    assert discovery.__doc__.strip().startswith("Company page classification.")
