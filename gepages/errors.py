"""Exceptions raised while building the item pages."""
from __future__ import annotations


class GePagesError(RuntimeError):
    """Base class for generator failures."""


class TransportError(GePagesError):
    """Raised when the price API cannot be reached."""

    def __init__(self, url: str, cause: BaseException) -> None:
        super().__init__(f"Request to {url} failed: {cause}")
        self.url = url
        self.cause = cause


class ParseError(GePagesError):
    """Raised when the price API answers with something that is not JSON."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(f"JSON parse error for {url}: {message}")
        self.url = url


class RenderError(GePagesError):
    """Raised when a single item page cannot be rendered or written."""

    def __init__(self, item_name: str, message: str) -> None:
        super().__init__(message)
        self.item_name = item_name
