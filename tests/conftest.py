"""Shared fixtures: HTML fixtures, loaded content and mocked HTTP clients."""

from pathlib import Path
from typing import Callable, Dict

import httpx
import pytest
import pytest_asyncio

from scraped import (
    ExtractionConfiguration,
    Fetcher,
    LoadedContent,
    Locator,
    build_tree,
)

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def simple_html() -> str:
    return (FIXTURES / "simple-doc.html").read_text(encoding="utf-8")


@pytest.fixture
def locator() -> Locator:
    return Locator("https://dev.null/docs/index.html")


@pytest.fixture
def make_tree(locator):
    """Build a ParsedTree straight from an HTML string."""

    def _make(html: str, headers: Dict[str, str] = None):
        content = LoadedContent(
            headers=headers or {"Content-Type": "text/html; charset=utf-8"},
            body=html.encode("utf-8"),
            source=locator,
        )
        return build_tree(content)

    return _make


@pytest.fixture
def simple_tree(make_tree, simple_html):
    return make_tree(simple_html)


@pytest.fixture
def config() -> ExtractionConfiguration:
    return ExtractionConfiguration()


@pytest.fixture
def pages(simple_html) -> Dict[str, tuple]:
    """URL -> (status, headers, body) served by the mock transport."""
    html = {"Content-Type": "text/html; charset=utf-8"}
    return {
        "https://dev.null/docs/index.html": (200, html, simple_html.encode("utf-8")),
        "https://dev.null/about": (
            200, html, b"<html><head><title>About</title></head><body><h1>About us</h1></body></html>"
        ),
        "https://other.example.org/page": (200, html, b"<title>Other</title><h1>Elsewhere</h1>"),
        "https://dev.null/missing": (404, html, b"not found"),
        "https://dev.null/busy": (429, html, b"slow down"),
        "https://dev.null/logo.png": (
            200, {"Content-Type": "image/png"}, b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"
        ),
    }


@pytest.fixture
def requests_seen():
    return []


@pytest.fixture
def handler(pages, requests_seen) -> Callable[[httpx.Request], httpx.Response]:
    def _handle(request: httpx.Request) -> httpx.Response:
        requests_seen.append(request)
        url = str(request.url)
        if url == "https://dev.null/timeout":
            raise httpx.ConnectTimeout("timed out", request=request)
        if url == "https://dev.null/refused":
            raise httpx.ConnectError("connection refused", request=request)
        if url not in pages:
            return httpx.Response(404, text="not found")
        status, headers, body = pages[url]
        return httpx.Response(status, headers=headers, content=body)

    return _handle


@pytest_asyncio.fixture
async def client(handler):
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        yield client


@pytest.fixture
def fetcher(client) -> Fetcher:
    return Fetcher(client=client, user_agent="scraped-tests/1.0", timeout=5.0)
