"""
URL validation.

A Locator is the only way a URL enters the pipeline, so every Locator that
exists is an absolute http(s) URL. Nothing here touches the network.
"""

import re
from typing import Optional
from urllib.parse import urljoin, urlsplit, urlunsplit

from .errors import InvalidUrlError

SUPPORTED_SCHEMES = ("http", "https")

_FORBIDDEN_CHARS = re.compile(r"[\s\x00-\x1f\x7f]")


def _normalize(raw: str) -> str:
    if not isinstance(raw, str):
        raise InvalidUrlError(repr(raw), f"expected a string, got {type(raw).__name__}")

    candidate = raw.strip()
    if not candidate:
        raise InvalidUrlError(raw, "empty string")
    if _FORBIDDEN_CHARS.search(candidate):
        raise InvalidUrlError(raw, "contains whitespace or control characters")

    try:
        parts = urlsplit(candidate)
        port = parts.port
    except ValueError as exc:
        raise InvalidUrlError(raw, str(exc)) from exc

    scheme = parts.scheme.lower()
    if not scheme:
        raise InvalidUrlError(raw, "not an absolute URL")
    if scheme not in SUPPORTED_SCHEMES:
        raise InvalidUrlError(raw, f"unsupported scheme '{scheme}'")
    if not parts.hostname:
        raise InvalidUrlError(raw, "missing host")

    host = parts.hostname
    if ":" in host:
        host = f"[{host}]"
    netloc = host if port is None else f"{host}:{port}"
    userinfo = parts.netloc.rpartition("@")[0] if "@" in parts.netloc else ""
    if userinfo:
        netloc = f"{userinfo}@{netloc}"

    return urlunsplit((scheme, netloc, parts.path or "/", parts.query, parts.fragment))


class Locator:
    """A validated absolute URL."""

    __slots__ = ("_url",)

    def __init__(self, raw: str):
        if isinstance(raw, Locator):
            raw = raw.url
        self._url = _normalize(raw)

    @property
    def url(self) -> str:
        return self._url

    @property
    def scheme(self) -> str:
        return urlsplit(self._url).scheme

    @property
    def host(self) -> str:
        return urlsplit(self._url).hostname or ""

    @property
    def domain(self) -> Optional[str]:
        """The host name, or None when the host is an IP address."""
        host = self.host
        if re.fullmatch(r"[\d.]+", host) or ":" in host:
            return None
        return host

    @property
    def origin(self) -> str:
        parts = urlsplit(self._url)
        return f"{parts.scheme}://{parts.netloc}"

    def join(self, href: str) -> "Locator":
        """Resolve `href` against this locator; raises InvalidUrlError."""
        return Locator(urljoin(self._url, href.strip()))

    def __str__(self) -> str:
        return self._url

    def __repr__(self) -> str:
        return f"Locator({self._url!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Locator):
            return self._url == other._url
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._url)


def validate(raw: str) -> Locator:
    """Validate `raw` into a Locator or raise InvalidUrlError."""
    return Locator(raw)
