"""SchedulePipeline - runs every extraction stage for one schedule page.

Stages, each feeding the next:
  1. SchedulePage.resolve      page URL -> spreadsheet link
  2. WorkbookLoader.load       link -> timetable sheet
  3. extract_messages          text boxes (failure recorded, run continues)
  4. parse_day                 A1 -> weekday
  5. detect_geometry + extract_grades
  6. build_teacher_index

A StageError in 1-2 ends the run: the document then carries only the bell
schedule and the error reason.
"""

import requests
import structlog

from src.timetable.config import ScheduleConfig, get_config
from src.timetable.constants import BELL_TIMES
from src.timetable.errors import MessagesError, StageError
from src.timetable.extract import detect_geometry, extract_grades, extract_messages, parse_day
from src.timetable.logging import get_logger
from src.timetable.models import Grade, ScheduleDocument, Teacher
from src.timetable.pages.schedule import SchedulePage
from src.timetable.teachers import build_teacher_index
from src.timetable.utils import build_session, resolve_url
from src.timetable.workbook import Sheet, WorkbookLoader

log = get_logger(__name__)


class DocumentBuilder:
    """Collects stage results and errors, then freezes them into a ScheduleDocument."""

    def __init__(self) -> None:
        self.messages: list[str] | None = None
        self.day: int | None = None
        self.grades: list[Grade] | None = None
        self.teachers: list[Teacher] | None = None
        self.errors: list[str] = []

    def add_error(self, reason: str) -> None:
        self.errors.append(reason)

    def build(self) -> ScheduleDocument:
        return ScheduleDocument(
            bell_times=BELL_TIMES,
            messages=None if self.messages is None else tuple(self.messages),
            day=self.day,
            grades=None if self.grades is None else tuple(self.grades),
            teachers=None if self.teachers is None else tuple(self.teachers),
            errors=tuple(self.errors),
        )


class SchedulePipeline:
    """Turns the school's schedule page into a ScheduleDocument.

    Never raises for bad input: network and parsing failures end up in
    the document's ``errors``.
    """

    def __init__(
        self,
        config: ScheduleConfig | None = None,
        *,
        session: requests.Session | None = None,
    ) -> None:
        self.config = config or get_config()
        self._session = session

    def load_sheet(self, page_url: str, session: requests.Session) -> Sheet:
        """Resolve the spreadsheet link on ``page_url`` and load its timetable sheet.

        Raises:
            StageError: If the link or the sheet cannot be obtained.
        """
        page = SchedulePage(
            session,
            secure=self.config.secure_links,
            timeout=self.config.page_timeout,
        )
        link = resolve_url(page_url, page.resolve(page_url))
        loader = WorkbookLoader(session, timeout=self.config.sheet_timeout)
        return loader.load(link)

    def extract(self, sheet: Sheet, builder: DocumentBuilder) -> None:
        """Run the sheet-reading stages into ``builder``."""
        try:
            builder.messages = extract_messages(sheet)
        except MessagesError as e:
            log.warning("messages_read_failed", error=str(e))
            builder.add_error(e.reason)
            builder.messages = []

        builder.day = parse_day(sheet)
        builder.grades = extract_grades(sheet, detect_geometry(sheet))
        builder.teachers = build_teacher_index(builder.grades)

    def run(self, page_url: str) -> ScheduleDocument:
        """Extract the timetable linked from ``page_url``."""
        builder = DocumentBuilder()
        session = self._session or build_session(self.config.user_agent)

        with structlog.contextvars.bound_contextvars(page_url=page_url):
            try:
                sheet = self.load_sheet(page_url, session)
            except StageError as e:
                log.warning("schedule_stage_failed", reason=e.reason, error=str(e))
                builder.add_error(e.reason)
            else:
                self.extract(sheet, builder)
            finally:
                if self._session is None:
                    session.close()

            document = builder.build()
            log.info("schedule_extracted", day=document.day, errors=len(document.errors))
        return document
