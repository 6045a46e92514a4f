"""
Configurable HTML extraction: URL -> fetch -> parse -> configure -> results.
"""

from .values import NULL, Array, Bool, Null, Number, Object, String, Value
from .locator import Locator, validate
from .errors import (
    ConfigParseError,
    ConfigurationError,
    ConfigurationLockedError,
    DuplicatePropertyError,
    DuplicateSelectorError,
    ExtractionError,
    HtmlParseError,
    InvalidUrlError,
    MissingElementError,
    NetworkError,
    ScrapedError,
    SelectorCompileError,
    StateConsumedError,
    UnknownSelectorError,
)
from .fetcher import BearerTokens, Fetcher, LoadedContent, fetch
from .dom import ElementHandle, ParsedTree, build_tree, compile_selector
from .models import ChildScope, Kind, KindTag, Multiplicity, Property, Selector
from .extraction import ExtractionConfiguration
from .engine import extract
from .results import ParsedResults, ResultsGraph, flatten
from .document import Configured, Extracted, Loaded, Parsed, Unloaded, scrape
from .concurrent import ScrapeOutcome, scrape_graph, scrape_many

__version__ = "0.1.0"

__all__ = [
    "NULL",
    "Array",
    "Bool",
    "Null",
    "Number",
    "Object",
    "String",
    "Value",
    "Locator",
    "validate",
    "ConfigParseError",
    "ConfigurationError",
    "ConfigurationLockedError",
    "DuplicatePropertyError",
    "DuplicateSelectorError",
    "ExtractionError",
    "HtmlParseError",
    "InvalidUrlError",
    "MissingElementError",
    "NetworkError",
    "ScrapedError",
    "SelectorCompileError",
    "StateConsumedError",
    "UnknownSelectorError",
    "BearerTokens",
    "Fetcher",
    "LoadedContent",
    "fetch",
    "ElementHandle",
    "ParsedTree",
    "build_tree",
    "compile_selector",
    "ChildScope",
    "Kind",
    "KindTag",
    "Multiplicity",
    "Property",
    "Selector",
    "ExtractionConfiguration",
    "extract",
    "ParsedResults",
    "ResultsGraph",
    "flatten",
    "Configured",
    "Extracted",
    "Loaded",
    "Parsed",
    "Unloaded",
    "scrape",
    "ScrapeOutcome",
    "scrape_graph",
    "scrape_many",
]
