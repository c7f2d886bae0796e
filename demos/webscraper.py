"""
webscraper.py — Concurrent Web Scraper

Fetches pages with an `httpx.Client` on a thread pool and extracts facts
from each page with regular expressions: title, word count, keyword
frequencies, outgoing absolute links, meta tags, schema.org data and the
technologies a page appears to use. A page that fails to load is logged and
left out of the results.

On top of single pages the scraper can follow links to a fixed depth, build
a sitemap from a set of results and summarise their content. An optional
rate limiter spaces requests out evenly.
"""

import json
import re
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional

import httpx
from pydantic import BaseModel

from order_service.config import Config
from order_service.logging_config import get_logger
from order_service.models import utcnow

log = get_logger(__name__)

TITLE_RE = re.compile(r"<title>(.*?)</title>", re.IGNORECASE | re.DOTALL)
TAG_RE = re.compile(r"<[^>]*>")
SCRIPT_RE = re.compile(r"<script[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL)
STYLE_RE = re.compile(r"<style[^>]*>.*?</style>", re.IGNORECASE | re.DOTALL)
COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)
LINK_RE = re.compile(r"""href=["'](https?://[^"']+)["']""")
IMAGE_RE = re.compile(r"""<img[^>]+src=["']([^"']+)["']""", re.IGNORECASE)
SCHEMA_RE = re.compile(
    r"""<script[^>]*type=["']application/ld\+json["'][^>]*>(.*?)</script>""",
    re.IGNORECASE | re.DOTALL,
)

META_PATTERNS = {
    name: re.compile(
        rf"""<meta[^>]*{attr}=["']{re.escape(name)}["'][^>]*content=["']([^"']*)["']""",
        re.IGNORECASE,
    )
    for attr, name in [
        ("name", "description"),
        ("name", "keywords"),
        ("property", "og:title"),
        ("property", "og:description"),
    ]
}

TECHNOLOGY_PATTERNS = {
    "WordPress": re.compile(r"wp-content|wp-includes"),
    "React": re.compile(r"react|reactjs"),
    "Angular": re.compile(r"ng-|angular"),
    "Vue": re.compile(r"Vue\.js|vue"),
    "jQuery": re.compile(r"jquery"),
    "Bootstrap": re.compile(r"bootstrap"),
    "Tailwind": re.compile(r"tailwindcss|tailwind"),
    "Google Analytics": re.compile(r"gtag|google-analytics|googletagmanager"),
    "Cloudflare": re.compile(r"cloudflare"),
    "Shopify": re.compile(r"shopify"),
    "Wix": re.compile(r"wix\.com"),
    "Squarespace": re.compile(r"squarespace"),
}


class ScrapingResult(BaseModel):
    url: str
    title: str
    word_count: int
    keyword_frequency: Dict[str, int]
    links: List[str]

    def __str__(self):
        return (f"URL: {self.url}\nTitle: {self.title}\nWord Count: {self.word_count}\n"
                f"Keywords: {self.keyword_frequency}\nLinks: {len(self.links)}\n")


class EnhancedScrapingResult(BaseModel):
    """
    A scraping result with everything else the page reveals.

    Attributes:
        metadata (Dict[str, Optional[str]]): url, title, scrape time and the
            description, keywords, og:title and og:description meta tags
            (None where the page has no such tag).
        technologies (Dict[str, bool]): Detected technology per known name.
        schema_org (List[Any]): Parsed JSON-LD blocks; unparseable blocks are skipped.
    """
    base: ScrapingResult
    metadata: Dict[str, Optional[str]]
    images: List[str]
    technologies: Dict[str, bool]
    schema_org: List[Any]
    content_summary: str


class CrawledPage(BaseModel):
    depth: int
    result: ScrapingResult


class CrawlReport(BaseModel):
    pages: List[CrawledPage]
    visited_count: int
    by_depth: Dict[int, int]


class SitemapEntry(BaseModel):
    title: str
    link_count: int
    outbound_links: List[str]


class Sitemap(BaseModel):
    nodes: int
    structure: Dict[str, SitemapEntry]
    adjacency: Dict[str, List[str]]


class ContentAnalysis(BaseModel):
    total_pages: int
    failed_pages: int
    avg_word_count: float
    keyword_frequency: Dict[str, int]


def extract_title(html: str) -> str:
    match = TITLE_RE.search(html)
    return match.group(1).strip() if match else "No title found"


def extract_text(html: str) -> str:
    """Visible text of a page: scripts, styles, comments and tags removed, whitespace collapsed."""
    for pattern in (SCRIPT_RE, STYLE_RE, COMMENT_RE):
        html = pattern.sub("", html)
    text = TAG_RE.sub(" ", html).replace("&nbsp;", " ")
    return " ".join(text.split())


def count_words(html: str) -> int:
    return len(extract_text(html).split())


def count_keywords(html: str, keywords: List[str]) -> Dict[str, int]:
    """Counts non-overlapping, case-insensitive occurrences of each keyword in the page text."""
    text = extract_text(html).lower()
    return {keyword: text.count(keyword.lower()) for keyword in keywords}


def extract_links(html: str) -> List[str]:
    """Absolute http(s) links, each listed once in order of first appearance."""
    return list(dict.fromkeys(LINK_RE.findall(html)))


def extract_images(html: str) -> List[str]:
    return IMAGE_RE.findall(html)


def extract_metadata(html: str) -> Dict[str, Optional[str]]:
    metadata = {}
    for name, pattern in META_PATTERNS.items():
        match = pattern.search(html)
        metadata[name] = match.group(1) if match else None
    return metadata


def detect_page_technology(html: str) -> Dict[str, bool]:
    return {tech: bool(pattern.search(html)) for tech, pattern in TECHNOLOGY_PATTERNS.items()}


def extract_schema_metadata(html: str) -> List[Any]:
    """Parses every JSON-LD block of the page. Blocks that are not valid JSON are skipped."""
    documents = []
    for block in SCHEMA_RE.findall(html):
        try:
            documents.append(json.loads(block))
        except json.JSONDecodeError as e:
            log.debug(f"[Scraper] Skipping invalid JSON-LD block: {e}")
    return documents


def create_sitemap(results: List[ScrapingResult]) -> Sitemap:
    structure = {
        r.url: SitemapEntry(title=r.title, link_count=len(r.links), outbound_links=r.links)
        for r in results
    }
    adjacency: Dict[str, set] = {}
    for r in results:
        adjacency.setdefault(r.url, set()).update(r.links)
    return Sitemap(
        nodes=len(structure),
        structure=structure,
        adjacency={url: sorted(links) for url, links in adjacency.items() if links},
    )


def analyze_content(results: List[ScrapingResult], failed_pages: int = 0) -> ContentAnalysis:
    """Sums keyword frequencies over all pages and averages their word counts."""
    combined: Dict[str, int] = {}
    for result in results:
        for keyword, count in result.keyword_frequency.items():
            combined[keyword] = combined.get(keyword, 0) + count
    avg = sum(r.word_count for r in results) / len(results) if results else 0.0
    return ContentAnalysis(
        total_pages=len(results),
        failed_pages=failed_pages,
        avg_word_count=avg,
        keyword_frequency=combined,
    )


class RateLimiter:
    """
    Spaces calls to `wait()` at least 60 / `requests_per_minute` seconds apart.
    The first call never waits. Safe to share between threads.
    """

    def __init__(self, requests_per_minute: float,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        if requests_per_minute <= 0:
            raise ValueError("requests_per_minute must be positive")
        self.interval = 60.0 / requests_per_minute
        self._clock = clock
        self._sleep = sleep
        self._last = clock() - self.interval
        self._lock = threading.Lock()

    def wait(self):
        with self._lock:
            delay = self.interval - (self._clock() - self._last)
            if delay > 0:
                self._sleep(delay)
            self._last = self._clock()


class WebScraper:
    """
    Scrapes pages concurrently.

    Args:
        client (httpx.Client, optional): HTTP client to use. A client with the
            configured timeout and redirect following is created when omitted.
        max_workers (int): Upper bound of concurrent downloads.
        rate_limiter (RateLimiter, optional): Applied before every request.
    """
    def __init__(self, client: Optional[httpx.Client] = None, max_workers: int = 8,
                 rate_limiter: Optional[RateLimiter] = None):
        self.client = client or httpx.Client(timeout=Config.SCRAPER_TIMEOUT, follow_redirects=True)
        self.max_workers = max_workers
        self.rate_limiter = rate_limiter

    def close(self):
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _fetch(self, url: str) -> str:
        if self.rate_limiter is not None:
            self.rate_limiter.wait()
        response = self.client.get(url)
        response.raise_for_status()
        return response.text

    @staticmethod
    def _analyse(url: str, html: str, keywords: List[str]) -> ScrapingResult:
        return ScrapingResult(
            url=url,
            title=extract_title(html),
            word_count=count_words(html),
            keyword_frequency=count_keywords(html, keywords),
            links=extract_links(html),
        )

    def scrape_url(self, url: str, keywords: List[str]) -> ScrapingResult:
        """
        Raises:
            httpx.HTTPError: If the page cannot be fetched or returns an error status.
        """
        return self._analyse(url, self._fetch(url), keywords)

    def _try_scrape(self, url: str, keywords: List[str]) -> Optional[ScrapingResult]:
        try:
            return self.scrape_url(url, keywords)
        except httpx.HTTPError as e:
            log.error(f"[Scraper] Error scraping {url}: {e}")
            return None

    def scrape_urls(self, urls: List[str], keywords: List[str]) -> List[ScrapingResult]:
        """Scrapes every url concurrently; results keep the order of `urls`, failures are skipped."""
        if not urls:
            return []

        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(urls))) as executor:
            results = list(executor.map(lambda url: self._try_scrape(url, keywords), urls))
        return [r for r in results if r is not None]

    def enhanced_scrape(self, url: str, keywords: List[str]) -> Optional[EnhancedScrapingResult]:
        """Scrapes a page and adds meta tags, technologies, schema.org data and images. Returns None on failure."""
        try:
            html = self._fetch(url)
        except httpx.HTTPError as e:
            log.error(f"[Scraper] Error during enhanced scraping of {url}: {e}")
            return None

        base = self._analyse(url, html, keywords)
        metadata = {"title": base.title, "url": url, "scraped_at": utcnow().isoformat()}
        metadata.update(extract_metadata(html))
        return EnhancedScrapingResult(
            base=base,
            metadata=metadata,
            images=extract_images(html),
            technologies=detect_page_technology(html),
            schema_org=extract_schema_metadata(html),
            content_summary=(f"Content summary for {url} with {base.word_count} words "
                             f"and {len(base.links)} links."),
        )

    def follow_links(self, start_url: str, keywords: List[str], max_depth: int,
                     max_urls_per_level: int = 5) -> CrawlReport:
        """
        Scrapes `start_url` and follows its links depth-first.

        Pages at depth `max_depth - 1` are scraped but their links are not
        followed. At most `max_urls_per_level` unvisited links are followed from
        each page. Every url is visited once; failed pages count as visited
        but are not reported.
        """
        visited = set()
        pages: List[CrawledPage] = []

        def visit(url: str, depth: int):
            if depth >= max_depth or url in visited:
                return
            visited.add(url)
            result = self._try_scrape(url, keywords)
            if result is None:
                return
            pages.append(CrawledPage(depth=depth, result=result))
            if depth < max_depth - 1:
                unvisited = [link for link in result.links if link not in visited]
                for link in unvisited[:max_urls_per_level]:
                    visit(link, depth + 1)

        visit(start_url, 0)

        by_depth: Dict[int, int] = {}
        for page in pages:
            by_depth[page.depth] = by_depth.get(page.depth, 0) + 1
        return CrawlReport(pages=pages, visited_count=len(visited), by_depth=by_depth)


def main(urls: List[str] = None, keywords: List[str] = None):
    urls = Config.SCRAPER_URLS if urls is None else urls
    keywords = Config.SCRAPER_KEYWORDS if keywords is None else keywords
    limiter = RateLimiter(Config.SCRAPER_REQUESTS_PER_MINUTE) if Config.SCRAPER_REQUESTS_PER_MINUTE else None

    print("Starting web scraping demo...")
    with WebScraper(rate_limiter=limiter) as scraper:
        start = time.perf_counter()
        results = scraper.scrape_urls(urls, keywords)
        elapsed_ms = (time.perf_counter() - start) * 1000

        print(f"Scraping completed in {elapsed_ms:.0f}ms")
        print("Scraping Results:")
        for result in results:
            print(result)

        analysis = analyze_content(results, failed_pages=len(urls) - len(results))
        print(f"Content analysis: {analysis.total_pages} pages, {analysis.failed_pages} failed, "
              f"{analysis.avg_word_count:.1f} words on average")
        print(f"Combined keywords: {analysis.keyword_frequency}")
        print(f"Sitemap nodes: {create_sitemap(results).nodes}")

        if urls:
            enhanced = scraper.enhanced_scrape(urls[0], keywords)
            if enhanced is not None:
                print(f"Meta tags of {urls[0]}: {enhanced.metadata}")
                detected = [tech for tech, found in enhanced.technologies.items() if found]
                print(f"Technologies: {', '.join(detected) or 'none detected'}")


if __name__ == '__main__':
    main()
