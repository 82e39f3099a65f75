"""Reverse index: which grade each teacher is with at each hour.

Cells spell the same teacher differently ("Cohen", "Cohen J", "Cohen J."),
so tokens are merged by prefix rather than equality. A token joins every
existing teacher whose name it is a prefix of, or that is a prefix of it;
it only starts a new teacher when it joins none.

The result depends on encounter order (grade, then hour, then token):
earlier teachers are never re-merged with each other, and a short token
like "C" updates every teacher starting with "C".
"""

from collections.abc import Iterable

from src.timetable.logging import get_logger
from src.timetable.models import Grade, Teacher

log = get_logger(__name__)


def names_match(token: str, name: str) -> bool:
    """Symmetric, case-sensitive prefix relation between two spellings."""
    return name.startswith(token) or token.startswith(name)


class TeacherIndex:
    """Accumulates Teacher records while grades are scanned."""

    def __init__(self) -> None:
        self.teachers: list[Teacher] = []

    def add(self, token: str, hour: int, grade_name: str) -> None:
        """Merge one teacher token seen at ``hour`` in ``grade_name``."""
        matched = False
        for position, teacher in enumerate(self.teachers):
            if not names_match(token, teacher.name):
                continue
            matched = True
            self.teachers[position] = teacher.model_copy(
                update={
                    "name": max(teacher.name, token, key=len),
                    "schedule": {**teacher.schedule, hour: grade_name},
                }
            )

        if not matched:
            self.teachers.append(Teacher(name=token, schedule={hour: grade_name}))

    def add_grade(self, grade: Grade) -> None:
        for hour, subject in grade.subjects.items():
            for token in subject.teachers:
                self.add(token, hour, grade.name)


def build_teacher_index(grades: Iterable[Grade]) -> list[Teacher]:
    """Build the merged teacher list from every grade's subjects."""
    index = TeacherIndex()
    for grade in grades:
        index.add_grade(grade)
    log.info("teachers_indexed", teachers=len(index.teachers))
    return index.teachers
