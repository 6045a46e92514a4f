"""
Extraction configuration: named selectors and the properties built on them.

Selectors are compiled as they are added, so a configuration that exists is
one the engine can run. The first time a configuration is attached to a
tree it is frozen; after that the add_* methods raise.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from .dom import compile_selector
from .errors import (
    ConfigParseError,
    ConfigurationError,
    ConfigurationLockedError,
    DuplicatePropertyError,
    DuplicateSelectorError,
    UnknownSelectorError,
)
from .logger import get_logger
from .models import ChildScope, ConfigDocument, Kind, Multiplicity, Property, Selector

logger = get_logger(__name__)


class ExtractionConfiguration:
    """Ordered collection of Selectors and Properties."""

    def __init__(self):
        self._selectors: Dict[str, Selector] = {}
        self._properties: Dict[str, Property] = {}
        self._child_selectors: Dict[str, ChildScope] = {}
        self._frozen = False

    # --- authoring ---

    def add_selector(
        self,
        name: str,
        expression: str,
        scope: Optional[str] = None,
    ) -> "ExtractionConfiguration":
        self._check_unlocked()
        if name in self._selectors:
            raise DuplicateSelectorError(name)
        if scope is not None and scope not in self._selectors:
            raise UnknownSelectorError(scope, list(self._selectors))
        compile_selector(expression)

        self._selectors[name] = Selector(name=name, expression=expression, scope=scope)
        return self

    def add_property(
        self,
        name: str,
        selector_name: str,
        kind: Union[Kind, str] = "text",
        multiplicity: Union[Multiplicity, str] = Multiplicity.SINGLE,
        required: bool = False,
    ) -> "ExtractionConfiguration":
        self._check_unlocked()
        if name in self._properties:
            raise DuplicatePropertyError(name)
        selector = self._selectors.get(selector_name)
        if selector is None:
            raise UnknownSelectorError(selector_name, list(self._selectors))
        try:
            kind = Kind.parse(kind)
            multiplicity = Multiplicity(
                multiplicity.lower() if isinstance(multiplicity, str) else multiplicity
            )
        except ValueError as exc:
            raise ConfigurationError(
                f"Invalid definition for property '{name}': {exc}", {"property": name}
            ) from exc

        self._properties[name] = Property(
            name=name,
            selector=selector,
            kind=kind,
            multiplicity=multiplicity,
            required=bool(required),
        )
        return self

    def add_child_selector(
        self,
        selector_name: str,
        scope: Union[ChildScope, str] = ChildScope.ALL,
    ) -> "ExtractionConfiguration":
        """
        Mark a selector whose elements' href values are child pages.

        `scope` limits which hrefs are followed: all, relative, absolute or
        http. Marking the same selector again replaces its scope.
        """
        self._check_unlocked()
        if selector_name not in self._selectors:
            raise UnknownSelectorError(selector_name, list(self._selectors))
        try:
            scope = ChildScope(scope.lower() if isinstance(scope, str) else scope)
        except ValueError as exc:
            raise ConfigurationError(
                f"Invalid child scope for selector '{selector_name}': {exc}",
                {"selector": selector_name},
            ) from exc
        self._child_selectors[selector_name] = scope
        return self

    def freeze(self) -> "ExtractionConfiguration":
        if not self._frozen:
            logger.debug(
                "configuration frozen with %d selectors and %d properties",
                len(self._selectors),
                len(self._properties),
            )
        self._frozen = True
        return self

    def _check_unlocked(self) -> None:
        if self._frozen:
            raise ConfigurationLockedError(
                "The configuration is attached to a document and can no longer change"
            )

    # --- accessors ---

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def selectors(self) -> List[Selector]:
        return list(self._selectors.values())

    @property
    def properties(self) -> List[Property]:
        return list(self._properties.values())

    @property
    def child_selectors(self) -> List[Selector]:
        return [self._selectors[name] for name in self._child_selectors]

    @property
    def children(self) -> List[Tuple[Selector, ChildScope]]:
        """Child selectors paired with the scope of hrefs they follow."""
        return [(self._selectors[name], scope) for name, scope in self._child_selectors.items()]

    def selector(self, name: str) -> Selector:
        try:
            return self._selectors[name]
        except KeyError:
            raise UnknownSelectorError(name, list(self._selectors)) from None

    def __len__(self) -> int:
        return len(self._properties)

    def __repr__(self) -> str:
        return (
            f"<ExtractionConfiguration selectors={len(self._selectors)} "
            f"properties={len(self._properties)} frozen={self._frozen}>"
        )

    # --- documents ---

    @classmethod
    def load_from_config(
        cls,
        doc: Union[Mapping[str, Any], str, bytes, ConfigDocument],
    ) -> "ExtractionConfiguration":
        """
        Build a configuration from a config document.

        The same validation as the incremental API runs for each entry; the
        first failing entry fails the whole load with ConfigParseError.

        Args:
            doc: Parsed mapping, JSON text/bytes, or a ConfigDocument

        Returns:
            A new, unfrozen configuration
        """
        if isinstance(doc, (str, bytes)):
            try:
                doc = json.loads(doc)
            except json.JSONDecodeError as exc:
                raise ConfigParseError(f"Invalid JSON: {exc}", reason=exc) from exc

        if not isinstance(doc, ConfigDocument):
            try:
                doc = ConfigDocument.model_validate(doc)
            except ValidationError as exc:
                error = exc.errors()[0]
                raise ConfigParseError(
                    error["msg"], entry=_entry_name(error["loc"]), reason=exc
                ) from exc

        config = cls()
        for index, entry in enumerate(doc.selectors):
            try:
                config.add_selector(entry.name, entry.expression, entry.scope)
            except ConfigurationError as exc:
                raise ConfigParseError(
                    exc.message, entry=f"selectors[{index}]", reason=exc
                ) from exc
        for index, entry in enumerate(doc.properties):
            try:
                config.add_property(
                    entry.name,
                    entry.selector,
                    entry.kind,
                    entry.multiplicity,
                    entry.required,
                )
            except ConfigurationError as exc:
                raise ConfigParseError(
                    exc.message, entry=f"properties[{index}]", reason=exc
                ) from exc
        for index, entry in enumerate(doc.children):
            try:
                config.add_child_selector(entry.name, entry.scope)
            except ConfigurationError as exc:
                raise ConfigParseError(
                    exc.message, entry=f"children[{index}]", reason=exc
                ) from exc

        return config

    @classmethod
    def load_from_file(cls, path: Union[str, Path]) -> "ExtractionConfiguration":
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigParseError(f"Cannot read {path}: {exc}", reason=exc) from exc
        return cls.load_from_config(text)

    def to_document(self) -> Dict[str, Any]:
        doc: Dict[str, Any] = {
            "selectors": [
                {"name": s.name, "expression": s.expression, **({"scope": s.scope} if s.scope else {})}
                for s in self._selectors.values()
            ],
            "properties": [
                {
                    "name": p.name,
                    "selector": p.selector.name,
                    "kind": str(p.kind),
                    "multiplicity": p.multiplicity.value,
                    "required": p.required,
                }
                for p in self._properties.values()
            ],
        }
        if self._child_selectors:
            doc["children"] = [
                name if scope is ChildScope.ALL else {"name": name, "scope": scope.value}
                for name, scope in self._child_selectors.items()
            ]
        return doc

    # --- presets ---

    @classmethod
    def generic(cls) -> "ExtractionConfiguration":
        """Headings, title, links, images, scripts, stylesheets and meta tags."""
        config = cls()
        config.add_selector("h1", "h1").add_property("h1", "h1", Kind.text())
        config.add_selector("title", "title").add_property("title", "title", Kind.text())
        config.add_selector("h2", "h2").add_property("h2", "h2", Kind.text(), Multiplicity.MANY)
        config.add_selector("h3", "h3").add_property("h3", "h3", Kind.text(), Multiplicity.MANY)
        config.add_selector("links", "[href]").add_property(
            "links", "links", Kind.attr("href"), Multiplicity.MANY
        )
        config.add_selector("images", "img").add_property(
            "images", "images", Kind.attr("src"), Multiplicity.MANY
        )
        config.add_selector("scripts", "script[src]").add_property(
            "scripts", "scripts", Kind.attr("src"), Multiplicity.MANY
        )
        config.add_selector("styles", "link[rel='stylesheet']").add_property(
            "styles", "styles", Kind.attr("href"), Multiplicity.MANY
        )
        config.add_selector("meta", "meta[name]").add_property(
            "meta", "meta", Kind.attr("content"), Multiplicity.MANY
        )
        config.add_child_selector("links")
        return config


def _entry_name(loc) -> Optional[str]:
    """("properties", 2, "kind") -> "properties[2]"."""
    if not loc:
        return None
    if len(loc) >= 2 and isinstance(loc[1], int):
        return f"{loc[0]}[{loc[1]}]"
    return str(loc[0])
