"""
Generic value model for extracted data.

A Value is one of six immutable variants. Values are built bottom-up from
text and attribute data, so they never contain cycles, and every variant
maps onto a JSON primitive:

    Null   -> null        Bool   -> true/false     Number -> number
    String -> string      Array  -> array          Object -> object
"""

import json
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Tuple, Union

# Integers up to 2**53 are exact in a float64.
_MAX_EXACT_INT = 2 ** 53


@dataclass(frozen=True)
class Null:

    def __repr__(self) -> str:
        return "Null()"


@dataclass(frozen=True)
class Bool:
    value: bool

    def __post_init__(self):
        if not isinstance(self.value, bool):
            raise TypeError(f"Bool expects a bool, got {type(self.value).__name__}")


@dataclass(frozen=True)
class Number:
    value: float

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, (int, float)):
            raise TypeError(f"Number expects an int or float, got {type(self.value).__name__}")
        number = float(self.value)
        if not math.isfinite(number):
            raise ValueError(f"Number must be finite, got {self.value!r}")
        object.__setattr__(self, "value", number)


@dataclass(frozen=True)
class String:
    value: str

    def __post_init__(self):
        if not isinstance(self.value, str):
            raise TypeError(f"String expects a str, got {type(self.value).__name__}")


@dataclass(frozen=True)
class Array:
    items: Tuple["Value", ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "items", tuple(self.items))

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def __getitem__(self, index: int) -> "Value":
        return self.items[index]


@dataclass(frozen=True)
class Object:
    """Name -> Value mapping; insertion order is kept for serialization."""
    fields: Dict[str, "Value"] = field(default_factory=dict)

    def __post_init__(self):
        fields = dict(self.fields)
        for key in fields:
            if not isinstance(key, str):
                raise TypeError(f"Object keys must be str, got {type(key).__name__}")
        object.__setattr__(self, "fields", fields)

    def __len__(self) -> int:
        return len(self.fields)

    def __iter__(self):
        return iter(self.fields)

    def __getitem__(self, key: str) -> "Value":
        return self.fields[key]

    def __contains__(self, key: object) -> bool:
        return key in self.fields

    def items(self) -> Iterable[Tuple[str, "Value"]]:
        return self.fields.items()


Value = Union[Null, Bool, Number, String, Array, Object]

NULL = Null()


def from_python(obj: Any) -> Value:
    """Convert a JSON-compatible Python object into a Value."""
    if obj is None:
        return NULL
    if isinstance(obj, (Null, Bool, Number, String, Array, Object)):
        return obj
    # bool before int: True is an int in Python but a boolean here
    if isinstance(obj, bool):
        return Bool(obj)
    if isinstance(obj, (int, float)):
        return Number(obj)
    if isinstance(obj, str):
        return String(obj)
    if isinstance(obj, (list, tuple)):
        return Array(tuple(from_python(item) for item in obj))
    if isinstance(obj, dict):
        return Object({key: from_python(value) for key, value in obj.items()})
    raise TypeError(f"Cannot convert {type(obj).__name__} to a Value")


def to_python(value: Value) -> Any:
    """Convert a Value into plain Python objects suitable for `json.dumps`."""
    if isinstance(value, Null):
        return None
    if isinstance(value, Bool):
        return value.value
    if isinstance(value, Number):
        number = value.value
        if number.is_integer() and abs(number) <= _MAX_EXACT_INT:
            return int(number)
        return number
    if isinstance(value, String):
        return value.value
    if isinstance(value, Array):
        return [to_python(item) for item in value.items]
    if isinstance(value, Object):
        return {key: to_python(item) for key, item in value.fields.items()}
    raise TypeError(f"Not a Value: {value!r}")


def dumps(value: Value, indent: Union[int, None] = None) -> str:
    return json.dumps(to_python(value), indent=indent, ensure_ascii=False, allow_nan=False)


def loads(text: Union[str, bytes]) -> Value:
    return from_python(json.loads(text))
