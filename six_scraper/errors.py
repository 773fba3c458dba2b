class ScraperError(Exception):
    """Base exception for all scraper-related errors."""
    pass


class ValidationError(ScraperError):
    """Raised when a caller's input is unusable (e.g. a missing student_id or semester)."""
    pass


class MissingSessionTokenError(ScraperError):
    """Raised when one of the required session cookies was not supplied."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"missing required cookie: {name}")


class UpstreamError(ScraperError):
    """Base for every way a single fetch from the portal can fail."""
    pass


class NetworkError(UpstreamError):
    """Raised for connectivity and timeout issues when making HTTP requests."""
    pass


class HTTPStatusError(UpstreamError):
    """Raised when an HTTP request returns an unexpected status code."""

    def __init__(self, status_code: int | None, url: str, message: str | None = None):
        self.status_code = status_code
        self.url = url
        super().__init__(message or f"upstream returned HTTP {status_code} for URL: {url}")


class ParseError(UpstreamError):
    """Raised when a portal page cannot be parsed into a document tree."""
    pass


class NotFoundError(ScraperError):
    """Raised when the portal answered but the expected data is not in the page."""
    pass
