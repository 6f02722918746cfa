"""Shared fixtures: a fake website served through requests_mock."""

from __future__ import annotations

import pytest

HTML = {"Content-Type": "text/html; charset=utf-8"}


def anchors(*hrefs: str) -> str:
    links = "".join(f'<a href="{href}">link</a>' for href in hrefs)
    return f"<html><head><title>t</title></head><body>{links}</body></html>"


class FakeSite:
    """Registers pages and HEAD responses on a requests_mock Mocker."""

    def __init__(self, mocker):
        self.mocker = mocker

    def page(self, url: str, *hrefs: str, status: int = 200, head_status: int | None = None):
        self.mocker.get(url, text=anchors(*hrefs), headers=HTML, status_code=status)
        self.mocker.head(url, status_code=status if head_status is None else head_status)

    def link(self, url: str, head_status: int = 200):
        """A URL that only answers HEAD (e.g. an external link)."""
        self.mocker.head(url, status_code=head_status)

    def requests(self, method: str, url: str) -> int:
        return sum(
            1 for r in self.mocker.request_history if r.method == method and r.url == url
        )


@pytest.fixture
def site(requests_mock):
    return FakeSite(requests_mock)
