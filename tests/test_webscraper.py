"""Tests for the web scraper, with HTTP served by httpx.MockTransport."""

import httpx
import pytest

from demos.webscraper import (RateLimiter, ScrapingResult, WebScraper, analyze_content,
                              count_keywords, count_words, create_sitemap, detect_page_technology,
                              extract_links, extract_metadata, extract_schema_metadata,
                              extract_text, extract_title)

PAGE = """
<html><head><title>Open Source Example</title>
  <meta name="description" content="All about open source">
  <meta property="og:title" content="OSS">
  <script type="application/ld+json">{"@type": "Organization", "name": "OSI"}</script>
  <script src="/js/jquery.min.js"></script>
</head>
<body>
  <h1>Open source software</h1>
  <p>Free and open web for everyone.</p>
  <a href="https://opensource.org/licenses">licenses</a>
  <a href='http://example.com/about'>about</a>
  <a href="/relative">relative</a>
  <img src="https://example.com/logo.png">
</body></html>
"""


def handler(request: httpx.Request) -> httpx.Response:
    if request.url.host == "broken.test":
        return httpx.Response(500, text="boom")
    if request.url.host == "down.test":
        raise httpx.ConnectError("connection refused", request=request)
    return httpx.Response(200, text=PAGE)


@pytest.fixture
def scraper():
    with WebScraper(client=httpx.Client(transport=httpx.MockTransport(handler))) as s:
        yield s


class TestExtraction:

    def test_title(self):
        assert extract_title(PAGE) == "Open Source Example"
        assert extract_title("<p>none</p>") == "No title found"

    def test_words_exclude_tags(self):
        assert count_words("<p>one two</p><b>three</b>") == 3

    def test_keywords_case_insensitive(self):
        counts = count_keywords(PAGE, ["open", "Free", "missing"])

        assert counts == {"open": 3, "Free": 1, "missing": 0}

    def test_only_absolute_links(self):
        assert extract_links(PAGE) == ["https://opensource.org/licenses", "http://example.com/about"]


class TestWebScraper:

    def test_scrape_url(self, scraper):
        result = scraper.scrape_url("https://ok.test/", ["open"])

        assert result.title == "Open Source Example"
        assert result.keyword_frequency == {"open": 3}
        assert len(result.links) == 2

    def test_scrape_urls_skips_failures(self, scraper):
        urls = ["https://ok.test/a", "https://broken.test/", "https://down.test/", "https://ok.test/b"]

        results = scraper.scrape_urls(urls, ["web"])

        assert [r.url for r in results] == ["https://ok.test/a", "https://ok.test/b"]
        assert all(r.keyword_frequency == {"web": 1} for r in results)

    def test_enhanced_scrape(self, scraper):
        result = scraper.enhanced_scrape("https://ok.test/", ["open"])

        assert result.base.title == "Open Source Example"
        assert result.images == ["https://example.com/logo.png"]
        assert result.metadata["url"] == "https://ok.test/"
        assert "2 links" in result.content_summary

    def test_enhanced_scrape_failure_returns_none(self, scraper):
        assert scraper.enhanced_scrape("https://broken.test/", []) is None


SITE = {
    "/": ["/a", "/b", "/a"],
    "/a": ["/", "/c"],
    "/b": ["http://down.test/"],
    "/c": ["/d"],
    "/d": [],
}


def site_handler(request: httpx.Request) -> httpx.Response:
    if request.url.host == "down.test":
        raise httpx.ConnectError("connection refused", request=request)
    links = "".join(
        f'<a href="{href if href.startswith("http") else "http://site.test" + href}">x</a>'
        for href in SITE[request.url.path]
    )
    return httpx.Response(200, text=f"<title>{request.url.path}</title>{links}")


class FakeClock:

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


class TestPageDetails:

    def test_links_are_distinct_and_absolute(self):
        html = '<a href="http://a.com/x"></a><a href="http://a.com/x"></a><a href="httpfoo"></a>'

        assert extract_links(html) == ["http://a.com/x"]

    def test_text_drops_scripts_and_comments(self):
        html = "<script>var open = 1;</script><!-- open --><p>open&nbsp;door</p>"

        assert extract_text(html) == "open door"
        assert count_words(html) == 2

    def test_meta_tags(self):
        assert extract_metadata(PAGE) == {
            "description": "All about open source",
            "keywords": None,
            "og:title": "OSS",
            "og:description": None,
        }

    def test_technologies(self):
        technologies = detect_page_technology(PAGE)

        assert technologies["jQuery"] is True
        assert technologies["WordPress"] is False

    def test_schema_blocks_skip_invalid_json(self):
        html = PAGE + '<script type="application/ld+json">{not json</script>'

        assert extract_schema_metadata(html) == [{"@type": "Organization", "name": "OSI"}]

    def test_enhanced_result_carries_page_details(self, scraper):
        result = scraper.enhanced_scrape("https://ok.test/", [])

        assert result.metadata["description"] == "All about open source"
        assert result.metadata["og:description"] is None
        assert result.technologies["jQuery"]
        assert result.schema_org == [{"@type": "Organization", "name": "OSI"}]


class TestSiteAnalysis:

    @pytest.fixture
    def site(self):
        with WebScraper(client=httpx.Client(transport=httpx.MockTransport(site_handler))) as s:
            yield s

    def test_follow_links_to_depth(self, site):
        report = site.follow_links("http://site.test/", [], max_depth=3)

        assert [(p.depth, p.result.title) for p in report.pages] == [
            (0, "/"), (1, "/a"), (2, "/c"), (1, "/b"),
        ]
        assert report.visited_count == 5
        assert report.by_depth == {0: 1, 1: 2, 2: 1}

    def test_follow_links_limits_each_level(self, site):
        report = site.follow_links("http://site.test/", [], max_depth=3, max_urls_per_level=1)

        assert [p.result.title for p in report.pages] == ["/", "/a", "/c"]

    def test_zero_depth_visits_nothing(self, site):
        assert site.follow_links("http://site.test/", [], max_depth=0).pages == []

    def test_sitemap(self):
        results = [
            ScrapingResult(url="u1", title="One", word_count=3, keyword_frequency={}, links=["u2", "u3"]),
            ScrapingResult(url="u2", title="Two", word_count=5, keyword_frequency={}, links=[]),
        ]

        sitemap = create_sitemap(results)

        assert sitemap.nodes == 2
        assert sitemap.structure["u1"].link_count == 2
        assert sitemap.adjacency == {"u1": ["u2", "u3"]}

    def test_content_analysis(self):
        results = [
            ScrapingResult(url="u1", title="", word_count=10, keyword_frequency={"web": 2}, links=[]),
            ScrapingResult(url="u2", title="", word_count=20, keyword_frequency={"web": 1, "open": 4}, links=[]),
        ]

        analysis = analyze_content(results, failed_pages=1)

        assert analysis.total_pages == 2
        assert analysis.failed_pages == 1
        assert analysis.avg_word_count == 15.0
        assert analysis.keyword_frequency == {"web": 3, "open": 4}
        assert analyze_content([]).avg_word_count == 0.0


class TestRateLimiter:

    def test_requests_are_spaced(self):
        clock = FakeClock()
        limiter = RateLimiter(60, clock=clock, sleep=clock.sleep)

        limiter.wait()
        limiter.wait()
        clock.now += 0.25
        limiter.wait()

        assert clock.sleeps == [1.0, 0.75]

    def test_scraper_waits_before_each_request(self):
        clock = FakeClock()
        limiter = RateLimiter(120, clock=clock, sleep=clock.sleep)
        client = httpx.Client(transport=httpx.MockTransport(handler))

        with WebScraper(client=client, max_workers=1, rate_limiter=limiter) as s:
            s.scrape_urls(["https://ok.test/a", "https://ok.test/b", "https://ok.test/c"], [])

        assert clock.sleeps == [0.5, 0.5]

    def test_rate_must_be_positive(self):
        with pytest.raises(ValueError):
            RateLimiter(0)
