import asyncio
import json
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.json import JSON
from rich.markup import escape
from rich.table import Table

from .concurrent import scrape_graph, scrape_many
from .config import get_settings
from .document import scrape
from .errors import ScrapedError
from .extraction import ExtractionConfiguration
from .fetcher import Fetcher
from .logger import set_level
from .results import ParsedResults, flat_dicts, flatten as flatten_graph
from .values import to_python


app = typer.Typer(help="Extract structured data from HTML pages with configured CSS selectors")
console = Console()


@app.command()
def run(
    url: str = typer.Argument(..., help="The URL to inspect"),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="JSON configuration file with your own selectors and properties"
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="File where JSON results will be saved"
    ),
    show: Optional[str] = typer.Option(
        None,
        "--show",
        "-s",
        help="Comma separated properties to print; 'all' prints every property"
    ),
    follow: bool = typer.Option(False, "--follow", "-f", help="Follow the document into child links"),
    depth: int = typer.Option(1, "--depth", help="How many levels of child links to follow"),
    flatten: bool = typer.Option(False, "--flatten", help="With --follow, write a flat JSON array of pages"),
):
    """Scrape a page and extract its configured properties."""

    _configure_logging()
    config = _load_config(config_file)
    fetcher = Fetcher.from_settings(get_settings())

    try:
        if follow:
            graph = asyncio.run(scrape_graph(url, config, fetcher, depth=depth))
            results = graph.results
            payload = flat_dicts(graph) if flatten else graph.to_dict()
            console.print(f"[green]Parsed {url} and {len(flatten_graph(graph)) - 1} child pages[/green]")
        else:
            results = asyncio.run(scrape(url, config, fetcher))
            payload = results.to_dict()
            console.print(f"[green]Parsed {url}[/green]")
    except ScrapedError as exc:
        _fail(exc)

    if show:
        _show(results, show)

    if output:
        output.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        console.print(f"[green]Saved to {output}[/green]")
    elif not show:
        console.print(JSON(json.dumps(payload, ensure_ascii=False)))


@app.command()
def batch(
    urls: List[str] = typer.Argument(..., help="URLs to scrape"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c"),
    output: Optional[Path] = typer.Option(None, "--output", "-o"),
    concurrency: Optional[int] = typer.Option(None, "--concurrency", "-n", help="Pages scraped at once"),
):
    """Scrape several pages concurrently with the same configuration."""

    _configure_logging()
    config = _load_config(config_file)
    fetcher = Fetcher.from_settings(get_settings())

    outcomes = asyncio.run(
        scrape_many(urls, config, fetcher, concurrency=concurrency, progress=True)
    )
    failures = [o for o in outcomes if not o.ok]
    console.print(f"\n[green]Scraped {len(outcomes) - len(failures)} of {len(outcomes)} pages[/green]")
    for outcome in failures:
        console.print(f"[red]  {escape(outcome.url)}: {escape(outcome.error.message)}[/red]")

    payload = [o.to_dict() for o in outcomes]
    if output:
        output.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        console.print(f"[green]Saved to {output}[/green]")
    else:
        console.print(JSON(json.dumps(payload, ensure_ascii=False)))

    if failures and len(failures) == len(outcomes):
        raise typer.Exit(1)


@app.command("check-config")
def check_config(
    config_file: Path = typer.Argument(..., help="JSON configuration file to validate"),
):
    """Validate a configuration file and list what it extracts."""

    try:
        config = ExtractionConfiguration.load_from_file(config_file)
    except ScrapedError as exc:
        _fail(exc)

    table = Table(title=f"{config_file}")
    table.add_column("Property", style="cyan")
    table.add_column("Selector")
    table.add_column("Kind")
    table.add_column("Multiplicity")
    table.add_column("Required")
    for prop in config.properties:
        selector = prop.selector
        expression = selector.expression if not selector.scope else f"{selector.scope} » {selector.expression}"
        table.add_row(
            prop.name,
            expression,
            str(prop.kind),
            prop.multiplicity.value,
            "yes" if prop.required else "no",
        )
    console.print(table)
    console.print(f"[green]{len(config.selectors)} selectors, {len(config.properties)} properties[/green]")


def _load_config(config_file: Optional[Path]) -> ExtractionConfiguration:
    """Load the configuration file, or fall back to the generic selectors."""
    if config_file is None:
        return ExtractionConfiguration.generic()
    try:
        return ExtractionConfiguration.load_from_file(config_file)
    except ScrapedError as exc:
        _fail(exc)


def _show(results: ParsedResults, show: str) -> None:
    names = list(results.keys()) if show.strip() == "all" else [
        name.strip() for name in show.split(",") if name.strip()
    ]
    for name in names:
        if name in results:
            console.print(f"- {escape(name)}: {escape(json.dumps(to_python(results[name]), ensure_ascii=False))}")
        else:
            console.print(f"- {escape(name)}: [yellow]undefined[/yellow]")


def _configure_logging() -> None:
    set_level(get_settings().log_level)


def _fail(exc: ScrapedError):
    console.print(f"[red]Error: {escape(exc.message)}[/red]")
    raise typer.Exit(1)


if __name__ == "__main__":
    app()
