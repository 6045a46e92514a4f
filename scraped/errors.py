"""
Exceptions raised by the scraped pipeline.

Every stage returns its failure to the immediate caller; nothing here is
retried or swallowed inside the library.

  InvalidUrlError     → the input string is not an absolute http(s) URL.
  NetworkError        → the transport failed (connect error, timeout, HTTP status).
  HtmlParseError      → the payload cannot be read as a markup document at all.
  ConfigurationError  → a selector/property definition was rejected while authoring.
  ExtractionError     → the engine could not produce results (MissingElementError).
  StateConsumedError  → a pipeline state was reused after it advanced.
"""

from typing import Optional


class ScrapedError(Exception):
    """Base exception for all scraped errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_response(self) -> dict:
        return {
            "error": type(self).__name__,
            "message": self.message,
            "details": self.details,
        }


class InvalidUrlError(ScrapedError):
    """Raised when a string cannot be turned into a Locator."""

    def __init__(self, url: str, reason: str):
        super().__init__(
            f"Failed to parse the URL string received: {url!r} ({reason})",
            {"url": url, "reason": reason},
        )
        self.url = url
        self.reason = reason


class NetworkError(ScrapedError):
    """Raised when the single fetch attempt for a page fails."""

    def __init__(
        self,
        message: str,
        url: str,
        status_code: Optional[int] = None,
    ):
        super().__init__(message, {"url": url, "status_code": status_code})
        self.url = url
        self.status_code = status_code  # None for connect errors and timeouts


class HtmlParseError(ScrapedError):
    """Raised when loaded content is not interpretable as a document."""
    pass


# --- Configuration authoring: detected before any extraction runs ---

class ConfigurationError(ScrapedError):
    """Base for errors raised while building an ExtractionConfiguration."""
    pass


class SelectorCompileError(ConfigurationError):

    def __init__(self, expression: str, reason: str):
        super().__init__(
            f"'{expression}' is an invalid selector: {reason}",
            {"expression": expression, "reason": reason},
        )
        self.expression = expression


class UnknownSelectorError(ConfigurationError):

    def __init__(self, name: str, known: Optional[list] = None):
        super().__init__(
            f"Reference to unknown selector '{name}'",
            {"selector": name, "known": list(known or [])},
        )
        self.name = name


class DuplicateSelectorError(ConfigurationError):

    def __init__(self, name: str):
        super().__init__(f"A selector named '{name}' already exists", {"selector": name})
        self.name = name


class DuplicatePropertyError(ConfigurationError):

    def __init__(self, name: str):
        super().__init__(f"A property named '{name}' already exists", {"property": name})
        self.name = name


class ConfigurationLockedError(ConfigurationError):
    """Raised when a configuration is changed after it was attached to a tree."""
    pass


class ConfigParseError(ConfigurationError):
    """
    Raised when a configuration document cannot be loaded.

    `entry` names the offending entry (e.g. "properties[2]") when one can
    be identified; `reason` is the underlying error, also chained as
    __cause__.
    """

    def __init__(
        self,
        message: str,
        entry: Optional[str] = None,
        reason: Optional[Exception] = None,
    ):
        prefix = f"{entry}: " if entry else ""
        super().__init__(f"{prefix}{message}", {"entry": entry})
        self.entry = entry
        self.reason = reason


# --- Extraction ---

class ExtractionError(ScrapedError):
    """Raised when the engine cannot produce results for a tree."""
    pass


class MissingElementError(ExtractionError):
    """A required property matched zero elements."""

    def __init__(self, property_name: str, expression: str):
        super().__init__(
            f"Required property '{property_name}' matched no elements for selector '{expression}'",
            {"property": property_name, "expression": expression},
        )
        self.property_name = property_name


class StateConsumedError(ScrapedError):
    """A document state was used again after it advanced to the next state."""
    pass
