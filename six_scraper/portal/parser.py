"""
Turns SIX portal pages into models.

The schedule table is read by position, so every index the portal layout
decides lives in the constants below. If SIX moves a column, fix it here.
"""
import logging
import re

from bs4 import BeautifulSoup, Tag

from six_scraper.models import CourseClass, ScheduleSlot
from six_scraper.text import normalize

logger = logging.getLogger(__name__)

SCHEDULE_ROWS_SELECTOR = "table.table tbody tr"

# Cell positions inside one schedule row
CELL_CODE = 2
CELL_NAME = 3
CELL_CREDIT_UNITS = 4
CELL_CLASS_NUMBER = 5
CELL_QUOTA = 6
CELL_LECTURERS = 7
CELL_NOTES = 8
CELL_SLOTS = 9
MIN_CELLS = 10

# Part positions inside one "Senin / 2024-01-08 / 07:00-09:00 / 7602 / Kuliah / Offline" line
# ! Part 1 is the date of one occurrence, it is dropped on purpose so weekly repeats collapse into one slot
PART_DAY = 0
PART_TIME = 2
PART_ROOM = 3
PART_ACTIVITY = 4
PART_METHOD = 5
MIN_SLOT_PARTS = 6

# The "show all schedules" toggle the portal renders as a list item
SHOW_ALL_MARKER = "Tampilkan semua"

STUDENT_ID_PATTERN = re.compile(r"mahasiswa:(\d+)")
SEMESTER_PATTERN = re.compile(r"\+(\d{4}-\d)")
_INTEGER = re.compile(r"[+-]?\d+")


def parse_classes(soup: BeautifulSoup) -> list[CourseClass]:
    """
    Reads every row of the schedule table into a CourseClass, in page order.
    Rows that are too short or have no course code are skipped rather than failing the page.
    """
    classes: list[CourseClass] = []

    for row in soup.select(SCHEDULE_ROWS_SELECTOR):
        cells = row.find_all(["td", "th"])
        if len(cells) < MIN_CELLS:
            continue

        code = normalize(cells[CELL_CODE].get_text())
        if not code:
            continue

        classes.append(CourseClass(
            code=code,
            name=normalize(cells[CELL_NAME].get_text()),
            credit_units=_parse_int(cells[CELL_CREDIT_UNITS].get_text()),
            class_number=normalize(cells[CELL_CLASS_NUMBER].get_text()),
            quota=_parse_int(cells[CELL_QUOTA].get_text()),
            lecturers=parse_lecturers(cells[CELL_LECTURERS]),
            notes=normalize(cells[CELL_NOTES].get_text()),
            slots=parse_schedules(cells[CELL_SLOTS]),
        ))

    return classes


def parse_lecturers(cell: Tag) -> list[str]:
    lecturers: list[str] = []
    for item in cell.select("ul li"):
        name = normalize(item.get_text())
        if name:
            lecturers.append(name)
    return lecturers


def parse_schedules(cell: Tag) -> list[ScheduleSlot]:
    """
    Reads the slot list of one row, skipping the show-all toggle and lines that
    do not split into enough parts. Repeats of the same weekly slot are kept once,
    at the position they first appeared.
    """
    slots: list[ScheduleSlot] = []
    seen: set[tuple[str, str, str, str, str]] = set()

    for item in cell.find_all("li"):
        text = normalize(item.get_text())
        if not text or SHOW_ALL_MARKER in text:
            continue

        parts = text.split("/")
        if len(parts) < MIN_SLOT_PARTS:
            continue

        slot = ScheduleSlot(
            day=parts[PART_DAY].strip(),
            time=parts[PART_TIME].strip(),
            room=parts[PART_ROOM].strip(),
            activity=parts[PART_ACTIVITY].strip(),
            method=parts[PART_METHOD].strip(),
        )
        if slot.identity in seen:
            continue
        seen.add(slot.identity)
        slots.append(slot)

    return slots


def parse_student_id(soup: BeautifulSoup) -> str | None:
    """Returns the numeric id from the first link pointing at a student page, in document order."""
    for anchor in soup.select("a[href*='mahasiswa:']"):
        match = STUDENT_ID_PATTERN.search(anchor.get("href", ""))
        if match:
            return match.group(1)
    return None


def parse_semester(url: str) -> str | None:
    match = SEMESTER_PATTERN.search(url)
    return match.group(1) if match else None


def _parse_int(text: str) -> int:
    # ? An unreadable number becomes 0 instead of dropping the row, kept as the portal clients expect
    value = normalize(text)
    if not _INTEGER.fullmatch(value):
        logger.debug("could not read %r as an integer, using 0", value)
        return 0
    return int(value)
