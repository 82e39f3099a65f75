"""Pydantic models for the timetable document.

All data structures use Pydantic v2 for validation, serialization, and type safety.
Field aliases are the JSON keys the scheduling front-end reads.
"""

import json

from pydantic import BaseModel, Field


class Subject(BaseModel):
    """One non-empty timetable cell."""

    name: str  # First line of the cell, trimmed, e.g. "מתמט' · פיזיקה"
    teachers: tuple[str, ...] = ()  # Last line split on commas

    model_config = {"frozen": True}


class Grade(BaseModel):
    """One spreadsheet column: a class and what it studies each hour.

    ``subjects`` is sparse: hours whose cell is empty have no key at all.
    Hour 0 is the first row under the header, whatever its sheet row is.
    """

    name: str  # First word of the header cell, e.g. "יא3"
    level: int = Field(default=0, alias="grade")  # 7-12, 0 if unrecognised
    subjects: dict[int, Subject] = Field(default_factory=dict)

    model_config = {"populate_by_name": True, "frozen": True}


class Teacher(BaseModel):
    """A teacher identity merged from every spelling found in the sheet.

    ``name`` is the longest spelling seen and ``schedule`` maps hour -> grade
    name. The teacher index replaces a record with an updated copy on every merge.
    """

    name: str
    schedule: dict[int, str] = Field(default_factory=dict, alias="subjects")

    model_config = {"populate_by_name": True, "frozen": True}


class ScheduleDocument(BaseModel):
    """The complete result of one extraction run.

    Only ``bell_times`` and ``errors`` are always present. The other fields
    stay None when sheet loading failed, and are then left out of the JSON.
    """

    bell_times: tuple[int, ...] = Field(alias="schedule")
    messages: tuple[str, ...] | None = None
    day: int | None = None  # 1-7 = Sunday-Saturday, 0 = unknown
    grades: tuple[Grade, ...] | None = None
    teachers: tuple[Teacher, ...] | None = None
    errors: tuple[str, ...] = ()

    model_config = {"populate_by_name": True, "frozen": True}

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict:
        """Convert to a JSON-ready dict using the front-end's key names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self, indent: int | None = None) -> str:
        """Serialize to JSON, keeping Hebrew text unescaped."""
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=indent)
