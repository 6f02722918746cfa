"""
Core crawling logic and data structures.
"""
from __future__ import annotations

import gc
import logging
import re
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Set
from urllib.parse import urlsplit

import requests
from bs4 import BeautifulSoup, SoupStrainer

from linkcrawler.config import CrawlConfiguration
from linkcrawler.errors import (
    ConfigurationConflictError,
    CrawlStateError,
    InvalidInputError,
)

logger = logging.getLogger(__name__)

# SoupStrainer to parse only <a> tags (faster link extraction)
LINK_STRAINER = SoupStrainer("a")

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")
_FORBIDDEN_URL_CHARS: frozenset[str] = frozenset('<>"{}|\\^`')


class LinkType(str, Enum):
    INTERNAL = "internal"
    EXTERNAL = "external"


def is_valid_url(url: str) -> bool:
    """
    Check that a string is a syntactically valid absolute URL.

    Requires a scheme and a host, ASCII only, no whitespace or control
    characters and a well-formed port if one is given.
    """
    if not url or not url.isascii():
        return False
    if any(ch.isspace() or ord(ch) < 0x20 or ord(ch) == 0x7F or ch in _FORBIDDEN_URL_CHARS for ch in url):
        return False
    try:
        parts = urlsplit(url)
        parts.port  # raises ValueError on a malformed port
    except ValueError:
        return False
    return bool(_SCHEME_RE.match(parts.scheme) and parts.hostname)


def resolve_href(href: str, scheme: str, netloc: str) -> str:
    """
    Turn an href into an absolute URL on the seed's origin.

    Anything starting with "http" is taken as absolute. Everything else is
    appended to scheme://netloc, adding a "/" when the href lacks one.
    Dot segments, protocol-relative and query-only hrefs are not resolved.
    """
    if href.startswith("http"):
        return href
    separator = "" if href.startswith("/") else "/"
    return f"{scheme}://{netloc}{separator}{href}"


def extract_links(html: str) -> List[str]:
    """
    Extract the href of every <a> tag using optimized parsing.

    Anchors without an href yield an empty string, which resolves to the
    root of the seed host like any other bare path.
    """
    soup = BeautifulSoup(html, "lxml", parse_only=LINK_STRAINER)
    return [a.get("href", "") for a in soup.find_all("a")]


def fetch_page(
    session: requests.Session,
    url: str,
    timeout_s: float,
    encoding: Optional[str] = None,
) -> Optional[str]:
    """
    Return the HTML body of a page, or None if it cannot be used.

    Transport errors and error statuses give None. So does a response whose
    content-type is set to something other than HTML: only HTML pages are
    parsed for links. A response without a content-type is still parsed.
    """
    try:
        resp = session.get(url, timeout=timeout_s, allow_redirects=True)
        resp.raise_for_status()
    except requests.RequestException as e:
        logger.debug("Fetch failed for %s: %s", url, e)
        return None

    content_type = (resp.headers.get("content-type") or "").lower()
    if content_type and "html" not in content_type:
        logger.debug("Skipping non-HTML %s (%s)", url, content_type)
        return None

    if encoding:
        resp.encoding = encoding
    return resp.text


def probe_url(session: requests.Session, url: str, timeout_s: float) -> bool:
    """HEAD a URL following redirects; True only for a final 200."""
    try:
        resp = session.head(url, timeout=timeout_s, allow_redirects=True)
    except requests.RequestException as e:
        logger.debug("Probe failed for %s: %s", url, e)
        return False
    return resp.status_code == 200


class Crawler:
    """
    Depth-limited link crawler.

    Starting at the seed URL, pages on the seed's host are fetched
    depth-first and every anchor is recorded as an internal or external
    link. A crawler runs once; read the results through the accessors.

        links = Crawler("https://example.com", depth=2).crawl().get_links()
    """

    def __init__(
        self,
        url: str,
        configuration: Optional[CrawlConfiguration] = None,
        **options,
    ) -> None:
        if not isinstance(url, str) or not is_valid_url(url):
            raise InvalidInputError(f"URL is not valid: {url!r}")

        self._config = (configuration or CrawlConfiguration()).with_options(**options)

        parsed = urlsplit(url)
        self._url = url
        self._scheme = parsed.scheme
        # Drop any userinfo; relative hrefs resolve against host[:port]
        self._netloc = parsed.netloc.rpartition("@")[2]
        self._host = parsed.hostname

        # Crawl state; _seen maps url -> largest depth budget it was visited with
        self._seen: Dict[str, int] = {}
        self._page_links: Dict[str, List[str]] = {}
        self._found: Dict[LinkType, List[str]] = {t: [] for t in LinkType}
        self._found_index: Dict[LinkType, Set[str]] = {t: set() for t in LinkType}
        self._probe_cache: Dict[str, bool] = {}
        self._session: Optional[requests.Session] = None
        self._crawled = False

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._url!r}, depth={self.depth})"

    @property
    def configuration(self) -> CrawlConfiguration:
        return self._config

    @property
    def url(self) -> str:
        return self._url

    @property
    def depth(self) -> int:
        return self._config.depth

    @property
    def scheme(self) -> str:
        return self._scheme

    @property
    def host(self) -> str:
        return self._host

    @property
    def visited_urls(self) -> FrozenSet[str]:
        return frozenset(self._seen)

    def crawl(self) -> "Crawler":
        """Run the crawl from the seed URL and return self."""
        if self._crawled:
            raise CrawlStateError("This crawler has already crawled; create a new one.")
        self._crawled = True

        logger.info("Crawling %s (depth %d)", self._url, self.depth)
        with requests.Session() as session:
            session.headers["User-Agent"] = self._config.user_agent
            self._session = session
            try:
                self._visit_page(self._url, self.depth)
            finally:
                self._session = None
                self._probe_cache.clear()
                self._page_links.clear()

        logger.info(
            "Finished %s: %d pages visited, %d internal, %d external links",
            self._url,
            len(self._seen),
            len(self._found[LinkType.INTERNAL]),
            len(self._found[LinkType.EXTERNAL]),
        )
        return self

    def get_links(self) -> List[str]:
        """All recorded links, internal first, each in discovery order."""
        if self._config.only_internal:
            return self.get_internal_links()
        if self._config.only_external:
            return self.get_external_links()
        return self.get_internal_links() + self.get_external_links()

    def get_internal_links(self) -> List[str]:
        """Internal links in discovery order."""
        if self._config.only_external:
            raise ConfigurationConflictError("only_external is enabled; internal links are not collected.")
        return list(self._found[LinkType.INTERNAL])

    def get_external_links(self) -> List[str]:
        """External links in discovery order."""
        if self._config.only_internal:
            raise ConfigurationConflictError("only_internal is enabled; external links are not collected.")
        return list(self._found[LinkType.EXTERNAL])

    def to_dict(self) -> Dict[str, object]:
        """JSON-ready summary of the crawl, omitting filtered-out link types."""
        payload: Dict[str, object] = {"url": self._url, "depth": self.depth}
        if not self._config.only_external:
            payload[LinkType.INTERNAL.value] = self.get_internal_links()
        if not self._config.only_internal:
            payload[LinkType.EXTERNAL.value] = self.get_external_links()
        return payload

    def _trace(self, msg: str, *args: object) -> None:
        if self._config.debug:
            logger.debug(msg, *args)

    def _is_ignored(self, url: str) -> bool:
        return url in self._config.ignore_links

    def _visit_page(self, url: str, depth: int) -> None:
        best = self._seen.get(url)
        if depth == 0 or self._is_ignored(url) or (best is not None and depth <= best):
            self._trace("Already seen %s", url)
            return

        # Mark before fetching so failures and self-links are not retried
        self._seen[url] = depth
        if best is not None:
            # Reached again with more budget: walk the hrefs from the first fetch
            hrefs = self._page_links.get(url)
            if hrefs is None:
                return
        else:
            if self._config.check_url_exists and not self._url_exists(url):
                self._trace("Not exists %s", url)
                return

            html = fetch_page(
                self._session,
                url,
                self._config.timeout_s,
                self._config.document_encoding,
            )
            if html is None:
                return
            hrefs = self._page_links[url] = extract_links(html)

        for href in hrefs:
            self._process_url(href, depth)
            if self._config.gc_collect:
                gc.collect()

    def _process_url(self, href: str, depth: int) -> None:
        url = resolve_href(href, self._scheme, self._netloc)
        if not is_valid_url(url):
            self._trace("Invalid URL %s", url)
            return

        link_type = LinkType.EXTERNAL
        if urlsplit(url).hostname == self._host:
            link_type = LinkType.INTERNAL
            self._visit_page(url, depth - 1)

        self._add_link(url, link_type)

    def _add_link(self, url: str, link_type: LinkType) -> None:
        if (self._config.only_internal and link_type is LinkType.EXTERNAL) or (
            self._config.only_external and link_type is LinkType.INTERNAL
        ):
            return
        if url in self._found_index[link_type] or self._is_ignored(url):
            return
        if self._config.check_url_exists and not self._url_exists(url):
            self._trace("Not exists %s", url)
            return

        self._trace("Found [%s] %s", link_type.value, url)
        self._found[link_type].append(url)
        self._found_index[link_type].add(url)

    def _url_exists(self, url: str) -> bool:
        if url not in self._probe_cache:
            self._probe_cache[url] = probe_url(self._session, url, self._config.timeout_s)
        return self._probe_cache[url]
