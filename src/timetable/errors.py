"""Error hierarchy for timetable extraction.

Every error carries the human-readable ``reason`` that ends up in the
document's ``errors`` list. The pipeline classifies them into two tiers:

    StageError  -> stops the run, the document only holds errors
    MessagesError -> recorded, the remaining stages still run

Example:
    try:
        sheet = loader.load(url)
    except StageError as e:
        builder.add_error(e.reason)
"""


class ScheduleError(Exception):
    """Base exception for all timetable extraction errors."""

    reason = "Schedule extraction failed"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.reason)
        self.detail = detail


class StageError(ScheduleError):
    """A pipeline stage produced nothing usable; downstream stages cannot run."""

    pass


class LinkNotFoundError(StageError):
    """No anchor on the schedule page passed the filters, or the page failed to load."""

    reason = "Schedule link not found"


class EmptyResponseError(StageError):
    """The spreadsheet response had no body, or the link is not a known Excel format."""

    reason = "Null Excel response body"


class WorkbookError(StageError):
    """The spreadsheet could not be downloaded or decoded.

    Examples: connection reset, HTTP 404, corrupt OLE2 container, bad zip.
    """

    reason = "Failed loading Excel file"


class NoUsableSheetError(StageError):
    """Every sheet in the workbook has fewer than three rows."""

    reason = "No usable sheet found"


class MessagesError(ScheduleError):
    """Drawing shapes could not be enumerated.

    Local failure: the grid itself is still readable.
    """

    reason = "Failed reading messages"
