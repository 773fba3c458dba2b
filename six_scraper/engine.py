# The ScheduleService is the main orchestrator of the scraping process.
# It strings the portal client, the parser and the cache together for the API and the console.
import datetime
import logging
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlencode

import orjson

from six_scraper.cache import ScheduleCache
from six_scraper.config import DEFAULT_BASE_URL
from six_scraper.errors import NotFoundError, ValidationError
from six_scraper.models import CourseClass, UserIdentity
from six_scraper.portal import PortalClient, parse_classes, parse_semester, parse_student_id

logger = logging.getLogger(__name__)

# Only these query parameters are forwarded to the portal, anything else is dropped
SCHEDULE_FILTERS: tuple[str, ...] = ("fakultas", "prodi", "pekan", "kegiatan")

DEFAULT_OUTPUT_DIR = Path(os.path.dirname(__file__)).parent / "data"


def build_schedule_url(
    student_id: str,
    semester: str,
    filters: Mapping[str, str] | None = None,
    base_url: str = DEFAULT_BASE_URL,
) -> str:
    """
    Builds the portal URL for one student's schedule. It doubles as the cache key,
    so the same inputs must always give the same string: empty filters are left
    out and the rest are sorted by name.
    """
    url = f"{base_url}/app/mahasiswa:{student_id}+{semester}/kelas/jadwal/kuliah"

    filters = filters or {}
    params = sorted((name, filters[name]) for name in SCHEDULE_FILTERS if filters.get(name))
    if params:
        url += "?" + urlencode(params)
    return url


@dataclass(frozen=True)
class ScheduleResult:
    classes: Sequence[CourseClass]
    fetched_at: datetime.datetime
    cached: bool


class ScheduleService:
    """
    Answers the two questions clients ask: who am I, and what is my schedule.
    Holds the process wide cache, which is created once at start-up and passed in.
    """

    def __init__(self, client: PortalClient, cache: ScheduleCache) -> None:
        self.client = client
        self.cache = cache

    def resolve_user(self, cookies: Mapping[str, str]) -> UserIdentity:
        """
        1. Reads the student id from the first student link on the home page.
        2. Asks for the student's class page and reads the semester from where the portal redirects to.
        """
        home = self.client.fetch_document(f"{self.client.base_url}/home", cookies)
        student_id = parse_student_id(home)
        if student_id is None:
            raise NotFoundError("Could not find student ID on /home")

        final_url = self.client.resolve_final_url(f"{self.client.base_url}/app/mahasiswa:{student_id}/kelas", cookies)
        semester = parse_semester(final_url)
        if semester is None:
            raise NotFoundError(f"Could not infer semester from redirect URL: {final_url}")

        return UserIdentity(student_id=student_id, semester=semester)

    def resolve_schedule(
        self,
        student_id: str,
        semester: str,
        cookies: Mapping[str, str],
        filters: Mapping[str, str] | None = None,
        refresh: bool = False,
    ) -> ScheduleResult:
        """
        Serves the schedule from the cache when it is fresh, otherwise from the portal.
        refresh skips the cache read, a successful fetch is still written back.
        A failed fetch is raised as is, stale data is never returned in its place.
        """
        if not student_id or not semester:
            raise ValidationError("Missing student_id or semester query parameters")

        target_url = build_schedule_url(student_id, semester, filters, base_url=self.client.base_url)

        if not refresh:
            entry = self.cache.get(target_url)
            if entry is not None:
                logger.info("cache hit student_id=%s semester=%s", student_id, semester)
                return ScheduleResult(classes=entry.data, fetched_at=entry.fetched_at, cached=True)
        logger.info("cache miss student_id=%s semester=%s refresh=%s", student_id, semester, refresh)

        soup = self.client.fetch_document(target_url, cookies)
        fetched_at = datetime.datetime.now(datetime.timezone.utc)
        classes = parse_classes(soup)
        logger.info("parsed classes=%d student_id=%s semester=%s", len(classes), student_id, semester)

        entry = self.cache.set(target_url, classes, fetched_at)
        return ScheduleResult(classes=entry.data, fetched_at=fetched_at, cached=False)


def export_schedule(identity: UserIdentity, result: ScheduleResult, output_dir: Path = DEFAULT_OUTPUT_DIR) -> Path:
    """Writes a schedule to <output_dir>/<student_id>_<semester>_<date>_schedule.json and returns the path."""
    os.makedirs(output_dir, exist_ok=True)

    today = datetime.date.today().isoformat()
    output_path = Path(output_dir) / f"{identity.student_id}_{identity.semester}_{today}_schedule.json"

    serializable = {
        "student_id": identity.student_id,
        "semester": identity.semester,
        "fetched_at": result.fetched_at,
        "classes": [c.model_dump(by_alias=True) for c in result.classes],
    }
    with open(output_path, "wb") as fh:
        fh.write(orjson.dumps(serializable, option=orjson.OPT_INDENT_2))

    logger.info("wrote %d classes to %s", len(result.classes), output_path)
    return output_path
