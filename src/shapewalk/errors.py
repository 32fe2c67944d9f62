from __future__ import annotations


class ShapewalkError(Exception):
    """Base class for errors raised by shapewalk."""


class RDFParseError(ShapewalkError):
    """A document could not be parsed with the codec chosen for it."""

    def __init__(self, fmt: str, message: str, source: str | None = None) -> None:
        self.format = fmt
        self.source = source
        where = f" ({source})" if source else ""
        super().__init__(f"cannot parse {fmt} document{where}: {message}")


class FetchError(ShapewalkError):
    """An imported document could not be retrieved."""

    def __init__(self, url: str, message: str) -> None:
        self.url = url
        super().__init__(f"failed fetching {url}: {message}")


class MissingParameterError(ShapewalkError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Missing required unique parameter '{name}'")


class ValidatorClientError(ShapewalkError):
    def __init__(self, status: int, body: str) -> None:
        self.status = status
        self.body = body
        super().__init__(f"validator responded with status {status}: '{body}'")
