"""
Extraction engine.

Walks the configuration's properties in order, queries the tree and coerces
the matched elements into Values. Pure given (tree, configuration): the same
inputs always give equal results.
"""

from typing import Dict, List
from urllib.parse import urldefrag, urlsplit

from selectolax.lexbor import SelectolaxError

from .dom import ElementHandle, ParsedTree
from .errors import ExtractionError, InvalidUrlError, MissingElementError
from .extraction import ExtractionConfiguration
from .locator import Locator
from .logger import get_logger
from .models import ChildScope, KindTag, Multiplicity, Property, Selector
from .results import ParsedResults
from .values import NULL, Array, Bool, Number, String, Value

logger = get_logger(__name__)


def extract(tree: ParsedTree, config: ExtractionConfiguration) -> ParsedResults:
    """
    Produce ParsedResults for `tree` using `config`.

    Raises MissingElementError when a required property matches nothing; no
    partial results are returned in that case.
    """
    config.freeze()
    values: Dict[str, Value] = {}

    for prop in config.properties:
        values[prop.name] = _extract_property(tree, config, prop)

    child_urls = _collect_child_urls(tree, config)
    logger.debug("extracted %d properties from %s", len(values), tree.source)
    return ParsedResults(tree.source, values, child_urls)


def resolve(tree: ParsedTree, config: ExtractionConfiguration, selector: Selector) -> List[ElementHandle]:
    """Matches for `selector`, evaluated inside its scope's first match if scoped."""
    try:
        if selector.scope is None:
            return tree.query(selector.expression)

        scope_matches = resolve(tree, config, config.selector(selector.scope))
        if not scope_matches:
            return []
        return tree.query(selector.expression, scope=scope_matches[0])
    except SelectolaxError as exc:
        raise ExtractionError(
            f"Selector '{selector.name}' failed while querying {tree.source}: {exc}",
            {"selector": selector.name, "expression": selector.expression},
        ) from exc


def _extract_property(tree: ParsedTree, config: ExtractionConfiguration, prop: Property) -> Value:
    matches = resolve(tree, config, prop.selector)

    if not matches:
        if prop.required:
            raise MissingElementError(prop.name, prop.selector.expression)
        if prop.multiplicity is Multiplicity.MANY:
            return Array(())
        return NULL

    if prop.kind.tag is KindTag.COUNT:
        return Number(len(matches))

    if prop.multiplicity is Multiplicity.SINGLE:
        return _coerce(matches[0], prop)
    return Array(tuple(_coerce(element, prop) for element in matches))


def _coerce(element: ElementHandle, prop: Property) -> Value:
    tag = prop.kind.tag
    if tag is KindTag.TEXT:
        return String(element.text())
    if tag is KindTag.HTML:
        return String(element.html())
    if tag is KindTag.ATTRIBUTE:
        value = element.attr(prop.kind.attribute)
        return NULL if value is None else String(value)
    if tag is KindTag.EXISTS:
        return Bool(True)
    raise ExtractionError(
        f"Property '{prop.name}' has unsupported kind '{prop.kind}'",
        {"property": prop.name},
    )


def _collect_child_urls(tree: ParsedTree, config: ExtractionConfiguration) -> List[Locator]:
    seen = set()
    urls: List[Locator] = []
    for selector, scope in config.children:
        for element in resolve(tree, config, selector):
            href = urldefrag((element.attr("href") or "").strip())[0]
            if not href or not _in_scope(href, scope):
                continue
            try:
                url = tree.source.join(href)
            except InvalidUrlError:
                # javascript:, mailto: and other non-page links
                continue
            if url not in seen:
                seen.add(url)
                urls.append(url)
    return urls


def _in_scope(href: str, scope: ChildScope) -> bool:
    if scope is ChildScope.ALL:
        return True
    try:
        parts = urlsplit(href)
    except ValueError:
        return False
    if scope is ChildScope.RELATIVE:
        return not parts.scheme and not parts.netloc
    if scope is ChildScope.ABSOLUTE:
        return bool(parts.netloc)
    return parts.scheme.lower() in ("http", "https")
