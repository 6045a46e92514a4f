from enum import Enum
from typing import List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictStr,
    field_validator,
    model_validator,
)


class KindTag(str, Enum):
    TEXT = "text"
    HTML = "html"
    ATTRIBUTE = "attr"
    EXISTS = "exists"
    COUNT = "count"


class Multiplicity(str, Enum):
    SINGLE = "single"
    MANY = "many"


class ChildScope(str, Enum):
    """Which href values of a child selector are followed."""
    ALL = "all"
    # no scheme and no host: "page.html", "/about", "../up"
    RELATIVE = "relative"
    # a host is given: "https://example.org/", "//cdn.example.org/x"
    ABSOLUTE = "absolute"
    # written with an explicit http or https scheme
    HTTP = "http"


class Kind(BaseModel):
    """How a matched element becomes a Value."""
    model_config = ConfigDict(frozen=True)

    tag: KindTag
    attribute: Optional[str] = None

    @model_validator(mode="after")
    def check_attribute(self):
        if self.tag is KindTag.ATTRIBUTE:
            if not self.attribute or not self.attribute.strip():
                raise ValueError("attr kind needs an attribute name, e.g. 'attr:href'")
        elif self.attribute is not None:
            raise ValueError(f"'{self.tag.value}' kind does not take an attribute")
        return self

    @classmethod
    def parse(cls, literal: str) -> "Kind":
        """Parse a literal tag: text, html, attr:<name>, exists or count."""
        if isinstance(literal, Kind):
            return literal
        if not isinstance(literal, str):
            raise ValueError(f"kind must be a string, got {type(literal).__name__}")
        tag, sep, attribute = literal.strip().partition(":")
        tag = tag.strip().lower()
        try:
            kind_tag = KindTag(tag)
        except ValueError:
            raise ValueError(
                f"unknown kind '{literal}', expected one of text, html, attr:<name>, exists, count"
            ) from None
        if kind_tag is KindTag.ATTRIBUTE:
            if not attribute.strip():
                raise ValueError("attr kind needs an attribute name, e.g. 'attr:href'")
            return cls(tag=kind_tag, attribute=attribute.strip())
        if sep:
            raise ValueError(f"'{kind_tag.value}' kind does not take an attribute")
        return cls(tag=kind_tag)

    @classmethod
    def text(cls) -> "Kind":
        return cls(tag=KindTag.TEXT)

    @classmethod
    def html(cls) -> "Kind":
        return cls(tag=KindTag.HTML)

    @classmethod
    def attr(cls, name: str) -> "Kind":
        return cls(tag=KindTag.ATTRIBUTE, attribute=name)

    @classmethod
    def exists(cls) -> "Kind":
        return cls(tag=KindTag.EXISTS)

    @classmethod
    def count(cls) -> "Kind":
        return cls(tag=KindTag.COUNT)

    def __str__(self) -> str:
        if self.tag is KindTag.ATTRIBUTE:
            return f"attr:{self.attribute}"
        return self.tag.value


class Selector(BaseModel):
    """A named CSS expression, optionally evaluated inside another selector's first match."""
    model_config = ConfigDict(frozen=True)

    name: str
    expression: str
    scope: Optional[str] = None


class Property(BaseModel):
    """A named extraction rule."""
    model_config = ConfigDict(frozen=True)

    name: str
    selector: Selector
    kind: Kind
    multiplicity: Multiplicity = Multiplicity.SINGLE
    required: bool = False


# --- Configuration document (JSON) ---

class SelectorEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: StrictStr = Field(..., min_length=1)
    expression: StrictStr
    scope: Optional[StrictStr] = None


class PropertyEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: StrictStr = Field(..., min_length=1)
    selector: StrictStr
    kind: StrictStr = "text"
    multiplicity: Multiplicity = Multiplicity.SINGLE
    required: StrictBool = False

    @field_validator("kind")
    @classmethod
    def validate_kind(cls, v):
        return str(Kind.parse(v))

    @field_validator("multiplicity", mode="before")
    @classmethod
    def lower_multiplicity(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v


class ChildEntry(BaseModel):
    """A child selector; a bare string in the document means scope "all"."""
    model_config = ConfigDict(extra="forbid")

    name: StrictStr = Field(..., min_length=1)
    scope: ChildScope = ChildScope.ALL

    @model_validator(mode="before")
    @classmethod
    def from_name(cls, data):
        if isinstance(data, str):
            return {"name": data}
        return data

    @field_validator("scope", mode="before")
    @classmethod
    def lower_scope(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v


class ConfigDocument(BaseModel):
    """Selectors, properties and child selectors as read from a settings file."""
    model_config = ConfigDict(extra="forbid")

    selectors: List[SelectorEntry] = Field(default_factory=list)
    properties: List[PropertyEntry] = Field(default_factory=list)
    children: List[ChildEntry] = Field(default_factory=list)
