"""
Document pipeline states.

    Unloaded ──fetch()/provide_response()──▶ Loaded ──parse()──▶ Parsed
    Parsed ──configure(config)──▶ Configured ──extract()──▶ Extracted

Each transition consumes the state it was called on; using a consumed state
again raises StateConsumedError. Only Unloaded can be built directly, every
later state comes out of a transition. A transition that fails leaves its
source state usable so the caller can decide whether to retry.
"""

from contextlib import contextmanager
from typing import List, Mapping, Optional, Union

from .dom import ElementHandle, ParsedTree, build_tree
from .engine import extract
from .errors import StateConsumedError
from .extraction import ExtractionConfiguration
from .fetcher import Fetcher, LoadedContent
from .locator import Locator
from .logger import get_logger
from .results import ParsedResults

logger = get_logger(__name__)

# Passed by transitions to the constructors of later states
_TRANSITION = object()


class _State:
    """Single-use pipeline state."""

    def __init__(self, token: object):
        if token is not _TRANSITION:
            raise TypeError(
                f"{type(self).__name__} can only be produced by a transition from the previous state"
            )
        self._consumed = False

    @property
    def consumed(self) -> bool:
        return self._consumed

    def _check(self) -> None:
        if self._consumed:
            raise StateConsumedError(
                f"This {type(self).__name__} document has already advanced to its next state"
            )

    @contextmanager
    def _transition(self):
        self._check()
        self._consumed = True
        try:
            yield
        except BaseException:
            self._consumed = False
            raise


class Unloaded(_State):
    """A validated locator that has not been fetched yet."""

    def __init__(self, url: Union[str, Locator]):
        super().__init__(_TRANSITION)
        self.locator = url if isinstance(url, Locator) else Locator(url)

    @classmethod
    def new(cls, url: Union[str, Locator]) -> "Unloaded":
        return cls(url)

    async def fetch(self, fetcher: Optional[Fetcher] = None) -> "Loaded":
        """Load the page over the network."""
        with self._transition():
            content = await (fetcher or Fetcher()).fetch(self.locator)
        return Loaded(content, _TRANSITION)

    def provide_response(self, headers: Mapping[str, str], body: Union[bytes, str]) -> "Loaded":
        """Supply the page content directly instead of fetching it."""
        with self._transition():
            if isinstance(body, str):
                body = body.encode("utf-8")
            content = LoadedContent(headers=dict(headers), body=body, source=self.locator)
        return Loaded(content, _TRANSITION)

    async def fetch_and_parse(self, fetcher: Optional[Fetcher] = None) -> "Parsed":
        """Fetch and parse without exposing the intermediate Loaded state."""
        with self._transition():
            content = await (fetcher or Fetcher()).fetch(self.locator)
            tree = build_tree(content)
        return Parsed(tree, _TRANSITION)

    def __repr__(self) -> str:
        return f"Unloaded[ {self.locator} ]"


class Loaded(_State):
    """Raw headers and body for a locator."""

    def __init__(self, content: LoadedContent, token: object = None):
        super().__init__(token)
        self._content = content

    @property
    def content(self) -> LoadedContent:
        return self._content

    @property
    def locator(self) -> Locator:
        return self._content.source

    @property
    def headers(self) -> Mapping[str, str]:
        return self._content.headers

    @property
    def body(self) -> bytes:
        return self._content.body

    def parse(self) -> "Parsed":
        with self._transition():
            tree = build_tree(self._content)
        return Parsed(tree, _TRANSITION)

    def __repr__(self) -> str:
        return f"Loaded[ {self.locator} ]"


class Parsed(_State):
    """A parsed DOM, ready to be given a configuration."""

    def __init__(self, tree: ParsedTree, token: object = None):
        super().__init__(token)
        self._tree = tree

    @property
    def tree(self) -> ParsedTree:
        return self._tree

    @property
    def locator(self) -> Locator:
        return self._tree.source

    def query(self, expression: str) -> List[ElementHandle]:
        self._check()
        return self._tree.query(expression)

    def configure(self, config: ExtractionConfiguration) -> "Configured":
        """Attach `config`; the configuration is frozen from here on."""
        with self._transition():
            config.freeze()
        return Configured(self._tree, config, _TRANSITION)

    def extract(self, config: ExtractionConfiguration) -> "Extracted":
        """configure() and extract() in one step."""
        with self._transition():
            results = extract(self._tree, config)
        return Extracted(results, _TRANSITION)

    def __repr__(self) -> str:
        return f"Parsed[ {self.locator} ]"


class Configured(_State):
    """A parsed DOM with its frozen configuration."""

    def __init__(self, tree: ParsedTree, config: ExtractionConfiguration, token: object = None):
        super().__init__(token)
        self._tree = tree
        self._config = config

    @property
    def tree(self) -> ParsedTree:
        return self._tree

    @property
    def config(self) -> ExtractionConfiguration:
        return self._config

    def extract(self) -> "Extracted":
        with self._transition():
            results = extract(self._tree, self._config)
        return Extracted(results, _TRANSITION)

    def __repr__(self) -> str:
        return f"Configured[ {self._tree.source} ]"


class Extracted(_State):
    """Terminal state holding the immutable results."""

    def __init__(self, results: ParsedResults, token: object = None):
        super().__init__(token)
        self._results = results

    @property
    def results(self) -> ParsedResults:
        return self._results

    def to_json(self, indent: Optional[int] = None) -> str:
        return self._results.to_json(indent=indent)

    def __repr__(self) -> str:
        return f"Extracted[ {self._results.url} ]"


async def scrape(
    url: Union[str, Locator],
    config: ExtractionConfiguration,
    fetcher: Optional[Fetcher] = None,
) -> ParsedResults:
    """Validate, fetch, parse and extract `url` in one call."""
    parsed = await Unloaded(url).fetch_and_parse(fetcher)
    results = parsed.configure(config).extract().results
    logger.info("scraped %s", results.url)
    return results
