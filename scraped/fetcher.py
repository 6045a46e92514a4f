"""
Fetcher adapter: one GET per call through httpx.

The fetcher never retries. A connect error, a timeout or an HTTP error
status is surfaced once, as NetworkError; retry policy belongs to the caller.
"""

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

import httpx

from .config import Settings, get_settings
from .errors import NetworkError
from .locator import Locator
from .logger import get_logger

logger = get_logger(__name__)

DEFAULT_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}


@dataclass(frozen=True)
class LoadedContent:
    """Raw response for one locator. Header names are lower case."""
    headers: Mapping[str, str]
    body: bytes
    source: Locator

    def __post_init__(self):
        headers = {str(k).lower(): str(v) for k, v in dict(self.headers).items()}
        object.__setattr__(self, "headers", headers)
        object.__setattr__(self, "body", bytes(self.body))

    @property
    def content_type(self) -> Optional[str]:
        value = self.headers.get("content-type")
        if not value:
            return None
        return value.split(";", 1)[0].strip().lower() or None

    @property
    def charset(self) -> Optional[str]:
        value = self.headers.get("content-type", "")
        for param in value.split(";")[1:]:
            key, _, val = param.partition("=")
            if key.strip().lower() == "charset" and val.strip():
                return val.strip().strip("\"'")
        return None


@dataclass
class BearerTokens:
    """A global bearer token plus tokens scoped to a single domain."""
    global_token: Optional[str] = None
    scoped: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def parse(cls, raw: Optional[str]) -> "BearerTokens":
        """Parse "token" or comma separated "domain|token" entries."""
        tokens = cls()
        if not raw:
            return tokens
        for entry in raw.split(","):
            entry = entry.strip()
            if entry:
                tokens.add(entry)
        return tokens

    def add(self, token: str) -> None:
        domain, sep, value = token.partition("|")
        if sep:
            if not domain.strip() or not value.strip():
                raise ValueError(f"invalid scoped bearer token: {token!r}")
            self.scoped[domain.strip().lower()] = value.strip()
        else:
            if not token.strip():
                raise ValueError("empty bearer token")
            self.global_token = token.strip()

    def get(self, locator: Locator) -> Optional[str]:
        """Token for `locator`'s domain, falling back to the global token."""
        domain = locator.domain
        if domain is None:
            return None
        return self.scoped.get(domain, self.global_token)


class Fetcher:
    """Performs the network GET for a Locator."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        user_agent: Optional[str] = None,
        bearer_tokens: Optional[BearerTokens] = None,
        timeout: Optional[float] = None,
        follow_redirects: Optional[bool] = None,
        settings: Optional[Settings] = None,
    ):
        settings = settings or get_settings()
        self.client = client
        self.user_agent = user_agent or settings.user_agent
        self.bearer_tokens = bearer_tokens or BearerTokens.parse(settings.bearer_token)
        self.timeout = settings.timeout if timeout is None else timeout
        self.follow_redirects = (
            settings.follow_redirects if follow_redirects is None else follow_redirects
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Fetcher":
        return cls(settings=settings)

    def request_headers(self, locator: Locator) -> Dict[str, str]:
        headers = dict(DEFAULT_HEADERS)
        headers["User-Agent"] = self.user_agent
        token = self.bearer_tokens.get(locator)
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def fetch(self, locator: Locator) -> LoadedContent:
        """Fetch `locator` once and return its headers and body."""
        url = str(locator)
        headers = self.request_headers(locator)
        logger.debug("requesting page at %s", url)

        try:
            if self.client is not None:
                response = await self.client.get(
                    url, headers=headers, follow_redirects=self.follow_redirects
                )
            else:
                async with httpx.AsyncClient(
                    timeout=self.timeout,
                    follow_redirects=self.follow_redirects,
                ) as client:
                    response = await client.get(url, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            if status == 429:
                message = f"Rate limited while scraping: {url}"
            else:
                message = f"Problem occurred while scraping: {url} (HTTP {status})"
            logger.warning(message)
            raise NetworkError(message, url, status_code=status) from exc
        except httpx.TimeoutException as exc:
            logger.warning("timed out fetching %s", url)
            raise NetworkError(f"Timed out while scraping: {url}", url) from exc
        except httpx.HTTPError as exc:
            logger.warning("transport error fetching %s: %s", url, exc)
            raise NetworkError(f"Problem occurred while scraping: {url} ({exc})", url) from exc

        logger.info("loaded %s (%d bytes)", url, len(response.content))
        return LoadedContent(
            headers=dict(response.headers),
            body=response.content,
            source=locator,
        )


async def fetch(locator: Locator, fetcher: Optional[Fetcher] = None) -> LoadedContent:
    """Fetch `locator` with `fetcher`, or a default Fetcher built from settings."""
    return await (fetcher or Fetcher()).fetch(locator)
