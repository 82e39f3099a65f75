"""Interprets a timetable sheet as grades, subjects and hours.

Sheet layout (0-based rows/columns):

            col 0        col 1       col 2     ...
  row 0     "שלישי"      ["" when a title row follows]
  header    hour/time    "יא3 ..."   "יב1 ..." ...
  header+1  ...          cell        cell              <- hour 0
  header+2  ...          cell        cell              <- hour 1

A cell reads "<subject>[\\n...]\\n<teacher>, <teacher>"; the first line is
the subject, the last line the teachers. Column 0 is never a grade.
"""

from typing import NamedTuple

from src.timetable.constants import (
    DAYS,
    GRADE_PREFIXES,
    LINE_BREAK_RE,
    TEACHER_SPLIT_RE,
    TRIMMERS,
)
from src.timetable.logging import get_logger
from src.timetable.models import Grade, Subject
from src.timetable.workbook import Sheet

log = get_logger(__name__)


class Geometry(NamedTuple):
    """Where the grade columns and hour rows of a sheet are."""

    header_row: int
    columns: range
    rows: range

    @property
    def first_row(self) -> int:
        return self.header_row + 1


def detect_geometry(sheet: Sheet) -> Geometry:
    """Locate the header row and the bounds of the grade grid.

    When B1 is empty the sheet opens with a two-row title and the header
    is row 1; otherwise the header is row 0.
    """
    header_row = 1 if not sheet.cell_text(0, 1) else 0
    geometry = Geometry(
        header_row=header_row,
        columns=range(1, sheet.last_column(header_row) + 1),
        rows=range(header_row + 1, sheet.last_row + 1),
    )
    log.debug(
        "geometry_detected",
        header_row=header_row,
        columns=len(geometry.columns),
        rows=len(geometry.rows),
    )
    return geometry


def trim_subject(name: str) -> str:
    """Shorten a subject name for display. Replacements apply one after another."""
    for old, new in TRIMMERS:
        name = name.replace(old, new)
    return name


def parse_level(name: str) -> int:
    """Grade level (7-12) from the Hebrew letters a grade name starts with, 0 if unknown."""
    for prefix, level in GRADE_PREFIXES:
        if name.startswith(prefix):
            return level
    return 0


def parse_subject(text: str) -> Subject:
    """Build a Subject from a non-empty cell's text."""
    lines = LINE_BREAK_RE.split(text)
    teachers: list[str] = []
    if len(lines) > 1:
        teachers = [t for t in TEACHER_SPLIT_RE.split(lines[-1].strip()) if t]
    return Subject(name=trim_subject(lines[0]), teachers=teachers)


def extract_grades(sheet: Sheet, geometry: Geometry) -> list[Grade]:
    """Read one Grade per column of the grid, left to right.

    Empty cells are skipped, so ``subjects`` only has keys for taught hours.
    """
    grades: list[Grade] = []
    for column in geometry.columns:
        words = sheet.cell_text(geometry.header_row, column).split(maxsplit=1)
        name = words[0] if words else ""

        subjects: dict[int, Subject] = {}
        for row in geometry.rows:
            text = sheet.cell_text(row, column)
            if text:
                subjects[row - geometry.first_row] = parse_subject(text)

        grades.append(Grade(name=name, level=parse_level(name), subjects=subjects))

    log.info(
        "grades_extracted",
        grades=len(grades),
        subjects=sum(len(g.subjects) for g in grades),
    )
    return grades


def parse_day(sheet: Sheet) -> int:
    """Weekday named in cell A1: 1 (Sunday) to 7 (Saturday), 0 if not an exact match."""
    text = sheet.cell_text(0, 0)
    if text in DAYS:
        return DAYS.index(text) + 1
    log.debug("day_unrecognised", text=text)
    return 0


def extract_messages(sheet: Sheet) -> list[str]:
    """Announcements typed into the sheet's text boxes.

    Raises:
        MessagesError: If the shapes cannot be enumerated.
    """
    messages = sheet.messages()
    log.info("messages_read", count=len(messages))
    return messages
