"""
Crawler configuration.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import FrozenSet, Iterable, Optional

from linkcrawler.errors import ConfigurationConflictError, InvalidInputError

DEFAULT_DEPTH = 5
DEFAULT_TIMEOUT_S = 15.0
DEFAULT_USER_AGENT = "LinkCrawler/1.0"


@dataclass(frozen=True, slots=True)
class CrawlConfiguration:
    """Options fixed for the lifetime of a crawler."""
    check_url_exists: bool = True
    depth: int = DEFAULT_DEPTH
    only_internal: bool = False
    only_external: bool = False
    ignore_links: FrozenSet[str] = field(default_factory=frozenset)
    debug: bool = False
    timeout_s: float = DEFAULT_TIMEOUT_S
    user_agent: str = DEFAULT_USER_AGENT
    document_encoding: Optional[str] = None
    gc_collect: bool = False

    def __post_init__(self) -> None:
        # Accept a single URL or any iterable of URLs but always store a frozenset
        if isinstance(self.ignore_links, str):
            object.__setattr__(self, "ignore_links", frozenset({self.ignore_links}))
        elif not isinstance(self.ignore_links, frozenset):
            object.__setattr__(self, "ignore_links", frozenset(self.ignore_links))

        if self.only_internal and self.only_external:
            raise ConfigurationConflictError(
                "only_internal and only_external cannot both be enabled."
            )
        if isinstance(self.depth, bool) or not isinstance(self.depth, int) or self.depth < 0:
            raise InvalidInputError(f"depth must be a non-negative integer, got {self.depth!r}")

    @classmethod
    def option_names(cls) -> Iterable[str]:
        """Names accepted as keyword options by Crawler and with_options."""
        return [f.name for f in fields(cls)]

    def with_options(self, **options) -> "CrawlConfiguration":
        """Return a copy with the given options overridden (validated again)."""
        unknown = sorted(set(options) - set(self.option_names()))
        if unknown:
            raise TypeError(f"Unknown crawler option(s): {', '.join(unknown)}")
        return replace(self, **options) if options else self
