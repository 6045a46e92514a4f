"""
Extraction results.

ParsedResults is the terminal artifact of a pipeline: property name ->
Value, serialized as a JSON object with one key per property.
"""

import json
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Union

from .locator import Locator
from .values import Object, Value, from_python, to_python


class ParsedResults:
    """Immutable mapping of property names to extracted Values."""

    __slots__ = ("_url", "_values", "_child_urls")

    def __init__(
        self,
        url: Locator,
        values: Mapping[str, Value],
        child_urls: Iterable[Locator] = (),
    ):
        self._url = url
        self._values: Dict[str, Value] = {name: from_python(v) for name, v in values.items()}
        self._child_urls = tuple(child_urls)

    @property
    def url(self) -> Locator:
        return self._url

    @property
    def child_urls(self) -> List[Locator]:
        """Absolute URLs found by the configuration's child selectors."""
        return list(self._child_urls)

    def get(self, name: str) -> Value:
        """Value of the property `name`; raises KeyError if it was never configured."""
        try:
            return self._values[name]
        except KeyError:
            raise KeyError(f"Couldn't find the property called '{name}'") from None

    def __getitem__(self, name: str) -> Value:
        return self.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def keys(self):
        return self._values.keys()

    def items(self):
        return self._values.items()

    def to_value(self) -> Object:
        return Object(self._values)

    def to_dict(self) -> Dict[str, Any]:
        return {name: to_python(value) for name, value in self._values.items()}

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False, allow_nan=False)

    @classmethod
    def from_json(cls, text: Union[str, bytes], url: Union[Locator, str]) -> "ParsedResults":
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("results must serialize to a JSON object")
        return cls(Locator(url), {name: from_python(value) for name, value in data.items()})

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParsedResults):
            return NotImplemented
        return (
            self._url == other._url
            and list(self._values.items()) == list(other._values.items())
        )

    def __repr__(self) -> str:
        return f"<ParsedResults {self._url} properties={list(self._values)}>"


class ResultsGraph:
    """Results for a page plus the results of the child pages it linked to."""

    def __init__(self, results: ParsedResults, children: Optional[List["ResultsGraph"]] = None):
        self.results = results
        self.children = list(children or [])

    @property
    def url(self) -> Locator:
        return self.results.url

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": str(self.url),
            "data": self.results.to_dict(),
            "children": [child.to_dict() for child in self.children],
        }

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


def flatten(graph: ResultsGraph) -> List[ParsedResults]:
    """Depth-first list of every page's results, parents before children."""
    flat = [graph.results]
    for child in graph.children:
        flat.extend(flatten(child))
    return flat


def flat_dicts(graph: ResultsGraph) -> List[Dict[str, Any]]:
    return [{"url": str(r.url), "data": r.to_dict()} for r in flatten(graph)]
