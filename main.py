from six_scraper.api import create_app
from six_scraper.cache import ScheduleCache
from six_scraper.config import load_settings
from six_scraper.engine import ScheduleResult, ScheduleService, export_schedule
from six_scraper.errors import (
    ScraperError,
    ValidationError,
    MissingSessionTokenError,
    NotFoundError,
    NetworkError,
    HTTPStatusError,
    ParseError
)
from six_scraper.log import setup_logging
from six_scraper.portal import REQUIRED_COOKIES, PortalClient
import questionary
import uvicorn
from rich.console import Console
from rich.table import Table

# Use console for later extensability if needed
console = Console()

option_map = {
    "Start API server": "serve",
    "Look up my schedule": "lookup",
    "Exit": "exit"
}


def render_schedule(result: ScheduleResult) -> Table:
    source = "cache" if result.cached else "SIX"
    table = Table(title=f"Schedule ({source}, fetched {result.fetched_at:%Y-%m-%d %H:%M:%S})")
    for column in ("Code", "Name", "SKS", "Class", "Quota", "Lecturers", "Schedule"):
        table.add_column(column)

    for course in result.classes:
        slots = "\n".join(f"{s.day} {s.time} {s.room} ({s.activity}, {s.method})" for s in course.slots)
        table.add_row(
            course.code,
            course.name,
            str(course.credit_units),
            course.class_number,
            str(course.quota),
            "\n".join(course.lecturers),
            slots,
        )
    return table


def lookup(service: ScheduleService) -> None:
    # The cookies come from an already logged in browser session, we never log in ourselves
    cookies = {}
    for name in REQUIRED_COOKIES:
        value = questionary.password(f"Value of the '{name}' cookie:").ask()
        if value:
            cookies[name] = value.strip()

    refresh = questionary.confirm("Skip the cache and fetch fresh data?", default=False).ask()

    identity = service.resolve_user(cookies)
    console.print(f"Student {identity.student_id}, semester {identity.semester}", style="bold green")

    result = service.resolve_schedule(identity.student_id, identity.semester, cookies, refresh=bool(refresh))
    console.print(render_schedule(result))

    output_path = export_schedule(identity, result)
    console.print(f"Wrote {len(result.classes)} classes to {output_path}")


def main() -> None:
    settings = load_settings()
    setup_logging(settings.log_level)

    # One service and one cache for the whole process, lookups made here share it
    service = ScheduleService(PortalClient(base_url=settings.base_url, timeout=settings.timeout), ScheduleCache())

    while True:
        choice = questionary.select(
            "What do you want to do?",
            choices=list(option_map.keys()),
        ).ask()

        # Ctrl-C on the prompt gives None
        action = option_map.get(choice, "exit")

        if action == "exit":
            print("Exiting...")
            raise SystemExit()

        if action == "serve":
            console.print(f"Server starting on {settings.host}:{settings.port}...", style="bold")
            uvicorn.run(create_app(service, settings), host=settings.host, port=settings.port, log_config=None)
            continue

        try:
            lookup(service)
        # The user typed something we cannot use
        except ValidationError as error:
            console.print(f"Validation error: {error}", style="bold red")
            continue
        # One of the session cookies was left empty
        except MissingSessionTokenError as error:
            console.print(f"Session error: {error}", style="bold red")
            continue
        # We got a page from SIX but the student id or semester is not on it
        except NotFoundError as error:
            console.print(f"Not found: {error}", style="yellow")
            continue
        # SIX answered with something we could not read
        except ParseError as error:
            console.print(f"Parse error: {error}", style="bold red")
            continue
        # Either Timeout or Connection error or HTTP error
        except (NetworkError, HTTPStatusError) as error:
            console.print(f"Network/HTTP error: {error}", style="bold yellow")
            continue
        # Catch all other scraper related errors
        except ScraperError as error:
            console.print(f"Scraper error: {error}", style="bold red")
            continue


if __name__ == "__main__":
    main()
