"""
DOM adapter over selectolax's lexbor backend.

build_tree() turns LoadedContent into a read-only ParsedTree; queries return
ElementHandles in document order. compile_selector() is the eager grammar
check used when selectors are added to a configuration.
"""

from typing import Dict, List, Mapping, Optional

from selectolax.lexbor import LexborHTMLParser, LexborNode, SelectolaxError

from .errors import HtmlParseError, SelectorCompileError
from .fetcher import LoadedContent
from .locator import Locator
from .logger import get_logger

logger = get_logger(__name__)

BINARY_MEDIA_PREFIXES = ("image/", "audio/", "video/", "font/")
BINARY_MEDIA_TYPES = {
    "application/octet-stream",
    "application/pdf",
    "application/zip",
    "application/gzip",
    "application/x-gzip",
}

# Elements whose text never renders
HIDDEN_TEXT_TAGS = {"script", "style", "template", "noscript"}

# Parsed once; only used to ask lexbor whether an expression compiles
_PROBE = LexborHTMLParser("<html><body></body></html>")


def compile_selector(expression: str) -> str:
    """Check `expression` against the CSS grammar; returns it unchanged."""
    if not isinstance(expression, str) or not expression.strip():
        raise SelectorCompileError(str(expression), "selector is empty")
    try:
        _PROBE.css(expression)
    except SelectolaxError as exc:
        raise SelectorCompileError(expression, str(exc)) from exc
    return expression


def _select(node: LexborNode, expression: str, include_self: bool) -> List[LexborNode]:
    """css() matches in document order, without duplicates."""
    own = node.mem_id
    seen = set()
    matches = []
    for match in node.css(expression):
        if match.mem_id in seen or (match.mem_id == own and not include_self):
            continue
        seen.add(match.mem_id)
        matches.append(match)
    # selector groups must not reorder matches
    if "," in expression and len(matches) > 1:
        order = {n.mem_id: index for index, n in enumerate(node.traverse())}
        matches.sort(key=lambda n: order.get(n.mem_id, -1))
    return matches


def _visible_text(node: LexborNode, parts: List[str]) -> None:
    for child in node.iter(include_text=True):
        if child.is_text_node:
            parts.append(child.text_content or "")
        elif child.tag not in HIDDEN_TEXT_TAGS:
            _visible_text(child, parts)


class ElementHandle:
    """A matched element with text, markup and attribute accessors."""

    __slots__ = ("_node",)

    def __init__(self, node: LexborNode):
        self._node = node

    @property
    def tag(self) -> str:
        return self._node.tag

    @property
    def attributes(self) -> Dict[str, Optional[str]]:
        return dict(self._node.attributes)

    def text(self) -> str:
        """
        Visible text of the element and its descendants, trimmed.

        Script, style and template contents are left out, unless the element
        itself is one of those.
        """
        if self._node.tag in HIDDEN_TEXT_TAGS:
            return (self._node.text(deep=True) or "").strip()
        parts: List[str] = []
        _visible_text(self._node, parts)
        return "".join(parts).strip()

    def html(self) -> str:
        """Inner markup: the serialized children, without the element's own tag."""
        return self._node.inner_html or ""

    def outer_html(self) -> str:
        return self._node.html or ""

    def attr(self, name: str) -> Optional[str]:
        """Attribute value; "" for a bare attribute, None when absent."""
        attributes = self._node.attributes
        if name not in attributes:
            return None
        value = attributes[name]
        return "" if value is None else value

    def query(self, expression: str) -> List["ElementHandle"]:
        """Descendants matching `expression`; the element itself is never included."""
        return [ElementHandle(node) for node in _select(self._node, expression, include_self=False)]

    def __repr__(self) -> str:
        return f"<ElementHandle {self.tag}>"


class ParsedTree:
    """Read-only DOM for one document."""

    def __init__(self, parser: LexborHTMLParser, source: Locator, headers: Mapping[str, str]):
        self._parser = parser
        self.source = source
        self.headers = dict(headers)

    def query(
        self,
        expression: str,
        scope: Optional[ElementHandle] = None,
    ) -> List[ElementHandle]:
        """Elements matching `expression`, inside `scope` if given."""
        if scope is not None:
            return scope.query(expression)
        root = self._parser.root
        if root is None:
            return []
        return [ElementHandle(node) for node in _select(root, expression, include_self=True)]

    def __repr__(self) -> str:
        return f"<ParsedTree {self.source}>"


def decode_body(content: LoadedContent) -> str:
    """Decode the body using the declared charset, else UTF-8, else cp1252."""
    media_type = content.content_type
    if media_type and (
        media_type.startswith(BINARY_MEDIA_PREFIXES) or media_type in BINARY_MEDIA_TYPES
    ):
        raise HtmlParseError(
            f"Content from {content.source} is '{media_type}', not a markup document",
            {"url": str(content.source), "content_type": media_type},
        )

    charset = content.charset
    text = None
    if charset:
        try:
            text = content.body.decode(charset, errors="replace")
        except LookupError:
            logger.warning("unknown charset '%s' declared by %s", charset, content.source)
    if text is None:
        try:
            text = content.body.decode("utf-8")
        except UnicodeDecodeError:
            text = content.body.decode("cp1252", errors="replace")

    if "\x00" in text:
        raise HtmlParseError(
            f"Content from {content.source} is a binary payload, not a markup document",
            {"url": str(content.source)},
        )
    return text


def build_tree(content: LoadedContent) -> ParsedTree:
    """Parse loaded content into a queryable tree; raises HtmlParseError."""
    text = decode_body(content)
    try:
        parser = LexborHTMLParser(text)
    except SelectolaxError as exc:
        raise HtmlParseError(
            f"Content from {content.source} could not be parsed: {exc}",
            {"url": str(content.source)},
        ) from exc
    tree = ParsedTree(parser, content.source, content.headers)
    logger.debug("parsed %s (%d characters)", content.source, len(text))
    return tree
