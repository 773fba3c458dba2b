import re

_WHITESPACE = re.compile(r"\s+")


def normalize(text: str) -> str:
    """Collapse every run of whitespace into a single space and trim both ends."""
    return _WHITESPACE.sub(" ", text).strip()
