"""Fixed tables used when interpreting the school's timetable spreadsheet."""

import re

# Header cell A1 holds one of these, in week order (Sunday first)
DAYS: tuple[str, ...] = (
    "ראשון",
    "שני",
    "שלישי",
    "רביעי",
    "חמישי",
    "שישי",
    "שבת",
)

# Applied in order, each one to the output of the previous
TRIMMERS: tuple[tuple[str, str], ...] = (
    (", ", " · "),
    (",", " · "),
    ("מתמטיקה", "מתמט'"),
    ("טכניונית", "טכ'"),
    ("מעבדה", "מע'"),
    ("היסטוריה", "היסט'"),
)

# Two-letter prefixes first: "י" alone is a prefix of both
GRADE_PREFIXES: tuple[tuple[str, int], ...] = (
    ("יב", 12),
    ("יא", 11),
    ("ז", 7),
    ("ח", 8),
    ("ט", 9),
    ("י", 10),
)

# Period boundaries, minutes from midnight (07:45 .. 17:45)
BELL_TIMES: tuple[int, ...] = (
    465, 510, 555, 615, 660, 730, 775, 830, 875, 930, 975, 1020, 1065,
)

# Daily timetable files are named like "ab-cd.xlsx"
XLSX_NAME_RE = re.compile(r"^[^/]{1,2}-[^/]{1,2}\.[^/]+$")
HOST_RE = re.compile(r"https?://[a-z.]+")
LINE_BREAK_RE = re.compile(r"\r?\n")
TEACHER_SPLIT_RE = re.compile(r"\s*,\s*")

DOWNLOAD_MARKER = "download"

PAGE_TIMEOUT = 7.5
SHEET_TIMEOUT = 30.0
