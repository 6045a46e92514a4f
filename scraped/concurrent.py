"""
Running many independent pipelines at once.

Each URL gets its own Unloaded -> Extracted pipeline; the only thing shared
is the configuration, which is frozen before any pipeline starts.
"""

import asyncio
from dataclasses import dataclass
from typing import Iterable, List, Optional, Set, Union

from tqdm.asyncio import tqdm

from .config import get_settings
from .document import scrape
from .errors import ScrapedError
from .extraction import ExtractionConfiguration
from .fetcher import Fetcher
from .locator import Locator
from .logger import get_logger
from .results import ParsedResults, ResultsGraph

logger = get_logger(__name__)


@dataclass
class ScrapeOutcome:
    """Result of one URL in a batch: either `results` or `error` is set."""
    url: str
    results: Optional[ParsedResults] = None
    error: Optional[ScrapedError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        if self.error is not None:
            return {"url": self.url, "error": self.error.to_response()}
        return {"url": self.url, "data": self.results.to_dict()}


async def scrape_many(
    urls: Iterable[Union[str, Locator]],
    config: ExtractionConfiguration,
    fetcher: Optional[Fetcher] = None,
    concurrency: Optional[int] = None,
    progress: bool = False,
) -> List[ScrapeOutcome]:
    """
    Scrape every URL with the same configuration.

    Args:
        urls: Raw URL strings or Locators; invalid ones become failed outcomes
        config: Shared configuration (frozen here)
        fetcher: Fetcher to use for every request
        concurrency: Maximum pipelines in flight (default from settings)
        progress: Show a progress bar

    Returns:
        One outcome per input URL, in input order
    """
    config.freeze()
    fetcher = fetcher or Fetcher()
    semaphore = asyncio.Semaphore(concurrency or get_settings().concurrency)
    urls = list(urls)

    async def run_one(url) -> ScrapeOutcome:
        async with semaphore:
            try:
                results = await scrape(url, config, fetcher)
            except ScrapedError as exc:
                logger.warning("failed to scrape %s: %s", url, exc.message)
                return ScrapeOutcome(url=str(url), error=exc)
            return ScrapeOutcome(url=str(url), results=results)

    logger.info("starting concurrent requests for %d urls", len(urls))
    tasks = [run_one(url) for url in urls]
    if progress:
        return await tqdm.gather(*tasks, desc="Scraping", unit="page")
    return await asyncio.gather(*tasks)


async def scrape_graph(
    url: Union[str, Locator],
    config: ExtractionConfiguration,
    fetcher: Optional[Fetcher] = None,
    depth: int = 1,
    concurrency: Optional[int] = None,
) -> ResultsGraph:
    """
    Scrape `url`, then follow its child URLs down to `depth` levels.

    Errors on the root page propagate; failing child pages are logged and
    left out of the graph.
    """
    fetcher = fetcher or Fetcher()
    root = ResultsGraph(await scrape(url, config, fetcher))
    visited: Set[Locator] = {root.url}
    level = [root]

    for _ in range(max(depth, 0)):
        pending = []
        for node in level:
            for child_url in node.results.child_urls:
                if child_url not in visited:
                    visited.add(child_url)
                    pending.append((node, child_url))
        if not pending:
            break

        logger.info("loading and parsing %d child pages", len(pending))
        outcomes = await scrape_many(
            [child_url for _, child_url in pending], config, fetcher, concurrency
        )

        level = []
        for (parent, _), outcome in zip(pending, outcomes):
            if not outcome.ok:
                continue
            child = ResultsGraph(outcome.results)
            parent.children.append(child)
            level.append(child)

    return root
