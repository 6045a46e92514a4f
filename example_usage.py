"""
Example usage of the scraped pipeline.
"""

import asyncio
import json
from scraped import (
    ExtractionConfiguration,
    Kind,
    Multiplicity,
    ScrapedError,
    Unloaded,
    scrape,
    scrape_many,
)


CONFIG = {
    "selectors": [
        {"name": "title", "expression": "title"},
        {"name": "article", "expression": "article"},
        {"name": "headings", "expression": "h2", "scope": "article"},
        {"name": "links", "expression": "a[href]"},
    ],
    "properties": [
        {"name": "title", "selector": "title", "kind": "text", "multiplicity": "single", "required": True},
        {"name": "headings", "selector": "headings", "kind": "text", "multiplicity": "many", "required": False},
        {"name": "link_count", "selector": "links", "kind": "count", "multiplicity": "single", "required": False},
    ],
}


async def example_1_basic_usage():
    """Scrape one page with a configuration document."""
    print("=" * 60)
    print("Example 1: Config document")
    print("=" * 60)

    config = ExtractionConfiguration.load_from_config(CONFIG)

    try:
        results = await scrape("https://example.com/", config)
    except ScrapedError as e:
        print(f"Error: {e.message}")
        return

    print(results.to_json(indent=2))


async def example_2_step_by_step():
    """Drive every pipeline state explicitly, building the configuration in code."""
    print("\n" + "=" * 60)
    print("Example 2: Step by step")
    print("=" * 60)

    config = ExtractionConfiguration()
    config.add_selector("h1", "h1")
    config.add_selector("links", "a")
    config.add_property("heading", "h1", Kind.text())
    config.add_property("hrefs", "links", Kind.attr("href"), Multiplicity.MANY)

    loaded = await Unloaded("https://example.com/").fetch()
    print(f"Content-Type: {loaded.headers.get('content-type')}")

    extracted = loaded.parse().configure(config).extract()
    print(extracted.to_json(indent=2))


async def example_3_many_pages():
    """Scrape several pages concurrently with the generic selectors."""
    print("\n" + "=" * 60)
    print("Example 3: Batch")
    print("=" * 60)

    outcomes = await scrape_many(
        ["https://example.com/", "https://example.org/", "not a url"],
        ExtractionConfiguration.generic(),
        concurrency=2,
    )
    for outcome in outcomes:
        print(json.dumps(outcome.to_dict(), indent=2))


if __name__ == "__main__":
    asyncio.run(example_1_basic_usage())
    asyncio.run(example_2_step_by_step())
    asyncio.run(example_3_many_pages())
