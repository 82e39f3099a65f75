import io
from unittest.mock import MagicMock
from zipfile import ZipFile

import pytest
import requests
import xlwt
from openpyxl import Workbook

PAGE_URL = "https://school.example/schedule"
SHEET_URL = "https://school.example/files/ab-cd.xlsx"
XLS_URL = "https://school.example/files/today.xls"

# A1 holds the day, B1 is empty so the header is row 1
TIMETABLE_ROWS = [
    ["שלישי"],
    ["שעה", "ז1 מחנך", "יא2", "יב3"],
    [1, "מתמטיקה\nCohen, Levi", None, "ספרות\nCohen J"],
    [2, None, "מעבדה, פיזיקה\nLevi", None],
    [3, "אנגלית", None, "היסטוריה\nCohn"],
]

SHEET_RELS = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">
  <Relationship Id="rId1"
    Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/drawing"
    Target="../drawings/drawing1.xml"/>
</Relationships>"""

# Two text boxes as Excel saves them: the first has two paragraphs
TEXT_BOX_DRAWING = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<xdr:wsDr
    xmlns:xdr="http://schemas.openxmlformats.org/drawingml/2006/spreadsheetDrawing"
    xmlns:a="http://schemas.openxmlformats.org/drawingml/2006/main">
  <xdr:twoCellAnchor>
    <xdr:from><xdr:col>5</xdr:col><xdr:colOff>0</xdr:colOff><xdr:row>1</xdr:row><xdr:rowOff>0</xdr:rowOff></xdr:from>
    <xdr:to><xdr:col>8</xdr:col><xdr:colOff>0</xdr:colOff><xdr:row>4</xdr:row><xdr:rowOff>0</xdr:rowOff></xdr:to>
    <xdr:sp macro="" textlink="">
      <xdr:nvSpPr><xdr:cNvPr id="2" name="TextBox 1"/><xdr:cNvSpPr txBox="1"/></xdr:nvSpPr>
      <xdr:spPr>
        <a:xfrm><a:off x="0" y="0"/><a:ext cx="1828800" cy="548640"/></a:xfrm>
        <a:prstGeom prst="rect"><a:avLst/></a:prstGeom>
      </xdr:spPr>
      <xdr:txBody>
        <a:bodyPr/><a:lstStyle/>
        <a:p><a:r><a:t>מבחן</a:t></a:r><a:r><a:t> במתמטיקה</a:t></a:r></a:p>
        <a:p><a:r><a:t>מחר</a:t></a:r></a:p>
      </xdr:txBody>
    </xdr:sp>
    <xdr:clientData/>
  </xdr:twoCellAnchor>
  <xdr:twoCellAnchor>
    <xdr:from><xdr:col>5</xdr:col><xdr:colOff>0</xdr:colOff><xdr:row>6</xdr:row><xdr:rowOff>0</xdr:rowOff></xdr:from>
    <xdr:to><xdr:col>8</xdr:col><xdr:colOff>0</xdr:colOff><xdr:row>8</xdr:row><xdr:rowOff>0</xdr:rowOff></xdr:to>
    <xdr:sp macro="" textlink="">
      <xdr:nvSpPr><xdr:cNvPr id="3" name="TextBox 2"/><xdr:cNvSpPr txBox="1"/></xdr:nvSpPr>
      <xdr:spPr>
        <a:xfrm><a:off x="0" y="0"/><a:ext cx="1828800" cy="365760"/></a:xfrm>
        <a:prstGeom prst="rect"><a:avLst/></a:prstGeom>
      </xdr:spPr>
      <xdr:txBody>
        <a:bodyPr/><a:lstStyle/>
        <a:p><a:r><a:t>Second</a:t></a:r></a:p>
      </xdr:txBody>
    </xdr:sp>
    <xdr:clientData/>
  </xdr:twoCellAnchor>
</xdr:wsDr>"""


def build_xlsx(*sheets: list[list]) -> bytes:
    """Build an .xlsx in memory, one sheet per list of rows (None = empty cell)."""
    workbook = Workbook()
    workbook.remove(workbook.active)
    for number, rows in enumerate(sheets, start=1):
        worksheet = workbook.create_sheet(f"Sheet{number}")
        for r, row in enumerate(rows, start=1):
            for c, value in enumerate(row, start=1):
                if value is not None:
                    worksheet.cell(row=r, column=c, value=value)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def build_xls(*sheets: list[list]) -> bytes:
    """Build a legacy .xls in memory, same row format as build_xlsx."""
    workbook = xlwt.Workbook(encoding="utf-8")
    for number, rows in enumerate(sheets, start=1):
        worksheet = workbook.add_sheet(f"Sheet{number}")
        for r, row in enumerate(rows):
            for c, value in enumerate(row):
                if value is not None:
                    worksheet.write(r, c, value)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def rewrite_archive(data: bytes, parts: dict[str, bytes]) -> bytes:
    """Copy an .xlsx archive, replacing or adding the given parts."""
    buffer = io.BytesIO()
    with ZipFile(io.BytesIO(data)) as source, ZipFile(buffer, "w") as target:
        for name in source.namelist():
            if name not in parts:
                target.writestr(name, source.read(name))
        for name, content in parts.items():
            target.writestr(name, content)
    return buffer.getvalue()


def with_text_boxes(data: bytes) -> bytes:
    """Attach TEXT_BOX_DRAWING to the first sheet of an openpyxl-built .xlsx."""
    return rewrite_archive(
        data,
        {
            "xl/worksheets/_rels/sheet1.xml.rels": SHEET_RELS.encode("utf-8"),
            "xl/drawings/drawing1.xml": TEXT_BOX_DRAWING.encode("utf-8"),
        },
    )


def make_response(*, text: str = "", content: bytes | None = None, status: int = 200):
    response = MagicMock(name="MockResponse")
    response.status_code = status
    response.text = text
    response.content = text.encode("utf-8") if content is None else content
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status} Error")
    else:
        response.raise_for_status.return_value = None
    return response


def page_html(*anchors: tuple[str, str]) -> str:
    links = "\n".join(f'<a href="{href}">{text}</a>' for href, text in anchors)
    return f"<html><body><div class='files'>{links}</div></body></html>"


@pytest.fixture
def timetable_xlsx() -> bytes:
    return build_xlsx(TIMETABLE_ROWS)


@pytest.fixture
def timetable_xls() -> bytes:
    return build_xls(TIMETABLE_ROWS)


@pytest.fixture
def mock_session():
    """Session whose GET answers from a url -> response dict (``session.routes``)."""
    session = MagicMock(name="MockSession")
    session.routes = {}

    def _get(url, timeout=None):
        if url not in session.routes:
            raise requests.ConnectionError(f"No route to {url}")
        return session.routes[url]

    session.get.side_effect = _get
    return session
