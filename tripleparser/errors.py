"""Exception taxonomy for the extraction pipeline.

Every failure is scoped to at most one page: sub-document errors
(:class:`ParseError`) are recovered where they occur, page-level errors are
captured into that page's :class:`~tripleparser.items.ExtractionRecord`.
"""

from __future__ import annotations


class TripleParserError(RuntimeError):
    """Base class for all errors raised by tripleparser."""


class ParseError(TripleParserError):
    """A single JSON-LD block could not be decoded.

    Attributes:
        snippet -- the first characters of the offending block
    """

    def __init__(self, message: str, snippet: str = "") -> None:
        super().__init__(message)
        self.snippet = snippet


class EmptyContentError(TripleParserError):
    """The page has neither visible text nor headings."""

    def __init__(self, message: str = "No meaningful content found") -> None:
        super().__init__(message)


class ExternalServiceError(TripleParserError):
    """The model provider could not be reached or returned a non-2xx status.

    Attributes:
        status -- HTTP status code (0 if no response was received)
        body   -- raw response body, when one was read
    """

    def __init__(self, message: str, status: int = 0, body: str | None = None) -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class ResponseFormatError(TripleParserError):
    """The model reply did not contain the expected JSON array of triples."""


class FetchError(TripleParserError):
    """Raised when a URL cannot be fetched.

    Attributes:
        url    -- the URL that failed
        status -- HTTP status code (0 if no response was received)
    """

    def __init__(self, message: str, url: str = "", status: int = 0) -> None:
        super().__init__(message)
        self.url = url
        self.status = status
