"""Text boxes of legacy (.xls) worksheets.

xlrd reads cells but drops drawing objects, so announcements typed into
text boxes are recovered from the BIFF8 record stream directly:

  globals substream
    BOUNDSHEET (0x85)  -> stream offset of each sheet's BOF, sheet type
  sheet substream (BOF .. EOF, may nest chart BOF/EOF pairs)
    MSODRAWING ...
    OBJ (0x5D)         -> first sub-record ftCmo holds the object type
    MSODRAWING ...
    TXO (0x1B6)        -> character count at offset 10
    CONTINUE (0x3C)    -> text: 1 flag byte (bit 0 = UTF-16LE) + characters
    CONTINUE (0x3C)    -> formatting runs (ignored)

Only OBJ records of type "text box" are read; cell comments use TXO too.
"""

import io
import struct
from collections.abc import Iterator

from xlrd import XLRDError, compdoc

from src.timetable.logging import get_logger

log = get_logger(__name__)

XL_BOF = 0x0809
XL_EOF = 0x000A
XL_BOUNDSHEET = 0x0085
XL_OBJ = 0x005D
XL_TXO = 0x01B6
XL_CONTINUE = 0x003C

OBJ_TEXT_BOX = 0x0006
SHEET_TYPE_WORKSHEET = 0x00

# Errors raised while walking a malformed stream
BIFF_ERRORS = (XLRDError, compdoc.CompDocError, struct.error, IndexError, UnicodeDecodeError)

Record = tuple[int, bytes]


def workbook_stream(data: bytes) -> bytes:
    """Extract the BIFF workbook stream from an OLE2 compound document.

    Raises:
        XLRDError: If the container holds no workbook stream.
    """
    doc = compdoc.CompDoc(data, logfile=io.StringIO())
    for name in ("Workbook", "Book"):
        mem, base, size = doc.locate_named_stream(name)
        if mem:
            return bytes(mem[base : base + size])
    raise XLRDError("Can't find workbook in OLE2 compound document")


def iter_records(stream: bytes, offset: int = 0) -> Iterator[Record]:
    """Yield (record type, payload) pairs starting at ``offset``."""
    end = len(stream)
    while offset + 4 <= end:
        rtype, length = struct.unpack_from("<HH", stream, offset)
        offset += 4
        yield rtype, stream[offset : offset + length]
        offset += length


def worksheet_offsets(stream: bytes) -> list[int]:
    """BOF offsets of the worksheets, in workbook order.

    Chart and macro sheets are skipped so indexes line up with xlrd's sheet list.
    """
    offsets: list[int] = []
    for rtype, data in iter_records(stream):
        if rtype == XL_EOF:
            break
        if rtype == XL_BOUNDSHEET and data[5] == SHEET_TYPE_WORKSHEET:
            offsets.append(struct.unpack_from("<I", data, 0)[0])
    return offsets


def _object_type(data: bytes) -> int | None:
    if len(data) < 6:
        return None
    return struct.unpack_from("<H", data, 4)[0]


def _continued_text(records: Iterator[Record], length: int) -> str:
    """Read ``length`` characters from the CONTINUE records following a TXO."""
    chunks: list[str] = []
    remaining = length
    while remaining > 0:
        record = next(records, None)
        if record is None or record[0] != XL_CONTINUE:
            raise XLRDError("Text box characters missing")
        data = record[1]
        wide = data[0] & 0x01
        body = data[1:]
        if wide:
            count = min(remaining, len(body) // 2)
            chunks.append(body[: count * 2].decode("utf-16-le"))
        else:
            count = min(remaining, len(body))
            chunks.append(body[:count].decode("latin-1"))
        if count == 0:
            break
        remaining -= count
    return "".join(chunks)


def textbox_texts(stream: bytes, sheet_index: int) -> list[str]:
    """Return the non-empty text box strings of one worksheet, in stream order.

    Args:
        stream: The BIFF workbook stream (see workbook_stream).
        sheet_index: Worksheet position in workbook order.
    """
    records = iter_records(stream, worksheet_offsets(stream)[sheet_index])
    texts: list[str] = []
    depth = 0
    text_box = False

    for rtype, data in records:
        if rtype == XL_BOF:
            depth += 1
        elif rtype == XL_EOF:
            depth -= 1
            if depth <= 0:
                break
        elif rtype == XL_OBJ:
            text_box = _object_type(data) == OBJ_TEXT_BOX
        elif rtype == XL_TXO and text_box:
            text_box = False
            text = _continued_text(records, struct.unpack_from("<H", data, 10)[0])
            if text:
                texts.append(text)

    log.debug("textboxes_read", sheet_index=sheet_index, count=len(texts))
    return texts
