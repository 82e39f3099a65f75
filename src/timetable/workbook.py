"""Spreadsheet download and the uniform sheet interface.

The timetable is published either as a legacy binary workbook (.xls, read
with xlrd) or as an Office Open XML workbook (.xlsx, read with openpyxl).
Both are exposed through ``Sheet`` so the extractors never see which one
they are reading. All coordinates are 0-based (row, column).
"""

import abc
import io
import struct
from xml.etree.ElementTree import ParseError
from zipfile import BadZipFile, ZipFile

import openpyxl
import requests
import xlrd
from openpyxl.packaging.relationship import get_dependents, get_rels_path
from openpyxl.reader.workbook import WorkbookParser
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.xml.constants import ARC_WORKBOOK, DRAWING_NS, SHEET_DRAWING_NS
from openpyxl.xml.functions import fromstring
from xlrd import XLRDError, compdoc

from src.timetable.biff import BIFF_ERRORS, textbox_texts, workbook_stream
from src.timetable.constants import SHEET_TIMEOUT
from src.timetable.errors import (
    EmptyResponseError,
    MessagesError,
    NoUsableSheetError,
    WorkbookError,
)
from src.timetable.logging import get_logger
from src.timetable.utils import url_path

log = get_logger(__name__)

DRAWING_REL = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/drawing"

# Errors xlrd / openpyxl raise on files they cannot decode.
# openpyxl parses with lxml when it is installed; lxml's XMLSyntaxError and
# ElementTree's ParseError share SyntaxError as their base.
DECODE_ERRORS = (
    XLRDError,
    compdoc.CompDocError,
    BadZipFile,
    InvalidFileException,
    ParseError,
    SyntaxError,
    struct.error,
    IndexError,
    KeyError,
    ValueError,
    OSError,
)
DRAWING_ERRORS = (BadZipFile, KeyError, ValueError, TypeError, ParseError, SyntaxError)


class Sheet(abc.ABC):
    """A worksheet reduced to what the timetable extractors need."""

    title: str

    @property
    @abc.abstractmethod
    def last_row(self) -> int:
        """Index of the highest populated row, -1 if the sheet is empty."""

    @property
    @abc.abstractmethod
    def column_count(self) -> int:
        """Number of columns spanned by the sheet's content."""

    @abc.abstractmethod
    def cell_text(self, row: int, column: int) -> str:
        """Text of a cell: strings verbatim, numbers as integers, anything else ""."""

    @abc.abstractmethod
    def messages(self) -> list[str]:
        """Non-empty text of the sheet's text box shapes, in enumeration order.

        Raises:
            MessagesError: If the drawing layer cannot be read.
        """

    def last_column(self, row: int) -> int:
        """Index of the last non-empty cell in ``row``, -1 if the row is blank."""
        for column in range(self.column_count - 1, -1, -1):
            if self.cell_text(row, column):
                return column
        return -1


def _number_text(value: float) -> str:
    return str(int(value))


class XlsSheet(Sheet):
    """Sheet of a legacy .xls workbook."""

    def __init__(self, sheet: xlrd.sheet.Sheet, index: int, data: bytes) -> None:
        self.sheet = sheet
        self.index = index
        self.title = sheet.name
        self._data = data

    @property
    def last_row(self) -> int:
        return self.sheet.nrows - 1

    @property
    def column_count(self) -> int:
        return self.sheet.ncols

    def cell_text(self, row: int, column: int) -> str:
        if not 0 <= row < self.sheet.nrows or not 0 <= column < self.sheet.row_len(row):
            return ""
        cell = self.sheet.cell(row, column)
        if cell.ctype == xlrd.XL_CELL_TEXT:
            return cell.value
        if cell.ctype == xlrd.XL_CELL_NUMBER:
            return _number_text(cell.value)
        return ""

    def messages(self) -> list[str]:
        try:
            return textbox_texts(workbook_stream(self._data), self.index)
        except BIFF_ERRORS as e:
            raise MessagesError(f"Text boxes of {self.title!r}: {e}") from e


def drawing_texts(xml: bytes) -> list[str]:
    """Text of every shape in a DrawingML part, paragraphs joined by newlines."""
    tree = fromstring(xml)
    texts: list[str] = []
    for shape in tree.iter(f"{{{SHEET_DRAWING_NS}}}sp"):
        paragraphs = [
            "".join(run.text or "" for run in paragraph.iter(f"{{{DRAWING_NS}}}t"))
            for paragraph in shape.iter(f"{{{DRAWING_NS}}}p")
        ]
        text = "\n".join(paragraphs)
        if text:
            texts.append(text)
    return texts


class XlsxSheet(Sheet):
    """Sheet of an .xlsx workbook.

    openpyxl does not keep shapes when loading, so ``messages`` reads the
    sheet's drawing parts straight from the archive.
    """

    def __init__(self, worksheet, data: bytes) -> None:
        self.worksheet = worksheet
        self.title = worksheet.title
        self._data = data

    @property
    def last_row(self) -> int:
        return self.worksheet.max_row - 1

    @property
    def column_count(self) -> int:
        return self.worksheet.max_column

    def cell_text(self, row: int, column: int) -> str:
        # ws.cell() creates missing cells, which would grow the sheet
        if not 0 <= row <= self.last_row or not 0 <= column < self.column_count:
            return ""
        value = self.worksheet.cell(row=row + 1, column=column + 1).value
        if isinstance(value, str):
            return value
        if isinstance(value, bool):
            return ""
        if isinstance(value, (int, float)):
            return _number_text(value)
        return ""

    def _drawing_paths(self, archive: ZipFile) -> list[str]:
        parser = WorkbookParser(archive, ARC_WORKBOOK)
        parser.parse()
        for sheet, rel in parser.find_sheets():
            if sheet.name != self.title:
                continue
            rels_path = get_rels_path(rel.target)
            if rels_path not in archive.namelist():
                return []
            return [r.target for r in get_dependents(archive, rels_path).find(DRAWING_REL)]
        return []

    def messages(self) -> list[str]:
        try:
            with ZipFile(io.BytesIO(self._data)) as archive:
                texts: list[str] = []
                for path in self._drawing_paths(archive):
                    texts.extend(drawing_texts(archive.read(path)))
                return texts
        except DRAWING_ERRORS as e:
            raise MessagesError(f"Drawings of {self.title!r}: {e}") from e


def open_workbook(url: str, data: bytes) -> list[Sheet]:
    """Decode a downloaded workbook, picking the reader from the URL's extension.

    Returns:
        The worksheets in workbook order.

    Raises:
        EmptyResponseError: If the extension is neither .xls nor .xlsx.
        WorkbookError: If the reader rejects the file.
    """
    path = url_path(url)
    try:
        if path.endswith(".xls"):
            book = xlrd.open_workbook(file_contents=data, logfile=io.StringIO())
            return [XlsSheet(book.sheet_by_index(i), i, data) for i in range(book.nsheets)]
        if path.endswith(".xlsx"):
            book = openpyxl.load_workbook(io.BytesIO(data), data_only=True)
            return [XlsxSheet(ws, data) for ws in book.worksheets]
    except DECODE_ERRORS as e:
        raise WorkbookError(f"Cannot decode {url}: {e}") from e
    raise EmptyResponseError(f"Unsupported spreadsheet format: {url}")


def select_sheet(sheets: list[Sheet]) -> Sheet:
    """Return the first sheet with at least three rows.

    Cover and instruction sheets that precede the timetable are skipped.

    Raises:
        NoUsableSheetError: If no sheet qualifies.
    """
    for sheet in sheets:
        if sheet.last_row > 1:
            log.info("sheet_selected", title=sheet.title, last_row=sheet.last_row)
            return sheet
        log.debug("sheet_skipped", title=sheet.title, last_row=sheet.last_row)
    raise NoUsableSheetError(f"None of {len(sheets)} sheets has more than two rows")


class WorkbookLoader:
    """Downloads the timetable workbook and picks the sheet to read."""

    EXTENSIONS = (".xls", ".xlsx")

    def __init__(self, session: requests.Session, *, timeout: float = SHEET_TIMEOUT) -> None:
        self.session = session
        self.timeout = timeout

    def download(self, url: str) -> bytes:
        """Fetch the workbook bytes.

        Raises:
            WorkbookError: On connection errors, timeouts and HTTP errors.
            EmptyResponseError: If the response has no body.
        """
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            log.warning("workbook_download_failed", url=url, error=str(e))
            raise WorkbookError(f"Failed to download {url}: {e}") from e

        if not response.content:
            raise EmptyResponseError(f"Empty body from {url}")
        log.debug("workbook_downloaded", url=url, bytes=len(response.content))
        return response.content

    def load(self, url: str) -> Sheet:
        """Download the workbook at ``url`` and return its timetable sheet."""
        if not url_path(url).endswith(self.EXTENSIONS):
            raise EmptyResponseError(f"Unsupported spreadsheet format: {url}")
        return select_sheet(open_workbook(url, self.download(url)))
