import logging

from rich.logging import RichHandler


def setup_logging(level: int | str = logging.INFO) -> None:
    root = logging.getLogger()

    if getattr(root, "_six_scraper_logging_configured", False):
        root.setLevel(level)
        return

    root.setLevel(level)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = RichHandler(rich_tracebacks=True, show_path=False)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root.addHandler(handler)
    setattr(root, "_six_scraper_logging_configured", True)
