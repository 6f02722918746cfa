"""
Exceptions raised by the crawler.

Only construction and accessor misuse are errors. Unreachable pages, bad
hrefs and failed existence probes are skipped during the crawl instead.
"""
from __future__ import annotations


class CrawlerError(Exception):
    """Base class for crawler errors."""


class InvalidInputError(CrawlerError, ValueError):
    """Seed URL or configuration value is not acceptable."""


class ConfigurationConflictError(CrawlerError, ValueError):
    """Link type filters contradict each other or the requested collection."""


class CrawlStateError(CrawlerError, RuntimeError):
    """Crawler was asked to crawl more than once."""
