"""
Command-line interface for the crawler.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional
from urllib.parse import urlparse

from linkcrawler.config import DEFAULT_DEPTH, DEFAULT_TIMEOUT_S, DEFAULT_USER_AGENT
from linkcrawler.core import Crawler
from linkcrawler.errors import CrawlerError


def print_summary(crawler: Crawler) -> None:
    """Print crawl summary to stderr."""
    payload = crawler.to_dict()

    sys.stderr.write("=" * 50 + "\n")
    sys.stderr.write("CRAWL SUMMARY\n")
    sys.stderr.write("=" * 50 + "\n\n")

    sys.stderr.write(f"Start URL:              {crawler.url}\n")
    sys.stderr.write(f"Depth:                  {crawler.depth}\n")
    sys.stderr.write(f"Pages visited:          {len(crawler.visited_urls)}\n")
    if "internal" in payload:
        sys.stderr.write(f"Internal links:         {len(payload['internal'])}\n")
    if "external" in payload:
        sys.stderr.write(f"External links:         {len(payload['external'])}\n")

    sys.stderr.write("\n")


def generate_output_path(start_url: str) -> Path:
    """Generate output path: crawls/{hostname}_{datetime}.json"""
    parsed = urlparse(start_url)
    hostname = parsed.hostname or "unknown"
    hostname_safe = hostname.replace(".", "_")
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    crawls_dir = Path("crawls")
    crawls_dir.mkdir(exist_ok=True)

    return crawls_dir / f"{hostname_safe}_{timestamp}.json"


def setup_logging(verbose: bool, debug: bool) -> None:
    """Configure root logging on stderr for the chosen verbosity."""
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        stream=sys.stderr,
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the crawler CLI."""
    parser = argparse.ArgumentParser(
        prog="linkcrawler",
        description="Collect internal and external links reachable from a URL and output JSON results.",
    )
    parser.add_argument("start_url", help="Start URL (e.g. https://example.com)")
    parser.add_argument(
        "--depth", type=int, default=DEFAULT_DEPTH,
        help=f"Maximum link-following depth from the start page (default: {DEFAULT_DEPTH})",
    )
    parser.add_argument(
        "--no-check-exists", dest="check_url_exists", action="store_false",
        help="Record links without probing them with a HEAD request",
    )
    only = parser.add_mutually_exclusive_group()
    only.add_argument("--only-internal", action="store_true", help="Collect internal links only")
    only.add_argument("--only-external", action="store_true", help="Collect external links only")
    parser.add_argument(
        "--ignore", action="append", default=[], metavar="URL",
        help="Exact URL to neither follow nor record (repeatable)",
    )
    parser.add_argument(
        "--timeout", type=float, default=DEFAULT_TIMEOUT_S,
        help=f"Request timeout in seconds (default: {DEFAULT_TIMEOUT_S:g})",
    )
    parser.add_argument("--user-agent", default=DEFAULT_USER_AGENT, help="User-Agent header")
    parser.add_argument("--out", help="Output file path, or '-' for stdout (default: auto-generated in crawls/)")
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON")
    parser.add_argument("--verbose", action="store_true", help="Show progress and summary")
    parser.add_argument("--debug", action="store_true", help="Trace every skip/found decision")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the crawler CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose, args.debug)

    try:
        crawler = Crawler(
            args.start_url,
            depth=args.depth,
            check_url_exists=args.check_url_exists,
            only_internal=args.only_internal,
            only_external=args.only_external,
            ignore_links=args.ignore,
            timeout_s=args.timeout,
            user_agent=args.user_agent,
            debug=args.debug,
        )
    except CrawlerError as e:
        parser.error(str(e))

    crawler.crawl()

    if args.verbose:
        print_summary(crawler)

    json_text = json.dumps(crawler.to_dict(), ensure_ascii=False, indent=2 if args.pretty else None)

    if args.out == "-":
        print(json_text)
    else:
        output_path = Path(args.out) if args.out else generate_output_path(args.start_url)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(json_text, encoding="utf-8")
        if args.verbose:
            sys.stderr.write(f"Results written to: {output_path}\n")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
