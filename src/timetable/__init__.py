"""Timetable extraction for the school's scheduling front-end.

Finds the daily timetable spreadsheet on the school's web page and turns it
into a ScheduleDocument (grades, subjects, teachers, announcements).
"""

from src.timetable.models import Grade, ScheduleDocument, Subject, Teacher
from src.timetable.pages.schedule import SchedulePage
from src.timetable.pipeline import SchedulePipeline

__all__ = [
    "SchedulePipeline",
    "SchedulePage",
    "ScheduleDocument",
    "Grade",
    "Subject",
    "Teacher",
]
