"""
Depth-limited web link crawler that collects internal and external links
reachable from a seed URL.
"""
from linkcrawler.config import CrawlConfiguration
from linkcrawler.core import Crawler, LinkType, extract_links, is_valid_url, resolve_href
from linkcrawler.errors import (
    ConfigurationConflictError,
    CrawlerError,
    CrawlStateError,
    InvalidInputError,
)

__version__ = "1.0.0"
__all__ = [
    "Crawler",
    "CrawlConfiguration",
    "LinkType",
    "CrawlerError",
    "InvalidInputError",
    "ConfigurationConflictError",
    "CrawlStateError",
    "extract_links",
    "is_valid_url",
    "resolve_href",
]
