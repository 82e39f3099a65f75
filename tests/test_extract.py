import pytest

from src.timetable.constants import DAYS
from src.timetable.extract import (
    detect_geometry,
    extract_grades,
    parse_day,
    parse_level,
    parse_subject,
    trim_subject,
)
from src.timetable.workbook import open_workbook
from tests.conftest import SHEET_URL, TIMETABLE_ROWS, build_xlsx


def _sheet(rows):
    return open_workbook(SHEET_URL, build_xlsx(rows))[0]


@pytest.mark.parametrize("position, day", list(enumerate(DAYS, start=1)))
def test_parse_day_known_names(position, day):
    assert parse_day(_sheet([[day, "ז1"], [None, "x"], [None, "y"]])) == position


@pytest.mark.parametrize("text", ["יום שלישי", "שלישי.", "Tuesday", "", 3])
def test_parse_day_requires_exact_match(text):
    assert parse_day(_sheet([[text, "ז1"], [None, "x"], [None, "y"]])) == 0


@pytest.mark.parametrize(
    "name, level",
    [
        ("ז", 7),
        ("ח2", 8),
        ("ט", 9),
        ("י", 10),
        ("י4", 10),
        ("יא", 11),
        ("יא3", 11),
        ("יב", 12),
        ("יב1", 12),
        ("", 0),
        ("מורים", 0),
        ("7", 0),
    ],
)
def test_parse_level(name, level):
    assert parse_level(name) == level


def test_two_letter_grades_win_over_single_letter():
    # The grade name is the first word of the header cell
    header = "יא כיתה"
    assert parse_level(header.split()[0]) == 11
    assert parse_level("יב מגמה") == 12


@pytest.mark.parametrize(
    "name",
    ["מתמטיקה, פיזיקה", "מעבדה,טכניונית", "היסטוריה", "ספורט", "a, b,c , d"],
)
def test_trim_subject_is_idempotent(name):
    once = trim_subject(name)
    assert trim_subject(once) == once


def test_trim_subject_compacts_commas_in_order():
    assert trim_subject("מתמטיקה, מעבדה,טכניונית") == "מתמט' · מע' · טכ'"


def test_parse_subject_with_teachers():
    subject = parse_subject("מתמטיקה\nCohen, Levi")
    assert "מתמט'" in subject.name
    assert subject.teachers == ("Cohen", "Levi")


def test_parse_subject_uses_last_line_for_teachers():
    subject = parse_subject("ביולוגיה\r\nחדר 12\r\nCohen ,Levi ,  Mizrahi")
    assert subject.name == "ביולוגיה"
    assert subject.teachers == ("Cohen", "Levi", "Mizrahi")


def test_parse_subject_without_teachers():
    subject = parse_subject("אנגלית")
    assert subject.name == "אנגלית"
    assert subject.teachers == ()


def test_geometry_with_title_row():
    geometry = detect_geometry(_sheet(TIMETABLE_ROWS))
    assert geometry.header_row == 1
    assert geometry.columns == range(1, 4)
    assert geometry.rows == range(2, 5)


def test_geometry_without_title_row():
    rows = [
        ["רביעי", "ח1", "ט2"],
        [1, "תנ\"ך", None],
        [2, None, "ספרות"],
    ]
    geometry = detect_geometry(_sheet(rows))
    assert geometry.header_row == 0
    assert geometry.columns == range(1, 3)
    assert geometry.rows == range(1, 3)


def test_extract_grades():
    sheet = _sheet(TIMETABLE_ROWS)
    grades = extract_grades(sheet, detect_geometry(sheet))

    assert [(g.name, g.level) for g in grades] == [("ז1", 7), ("יא2", 11), ("יב3", 12)]

    first = grades[0]
    assert sorted(first.subjects) == [0, 2]
    assert first.subjects[0].name == "מתמט'"
    assert first.subjects[0].teachers == ("Cohen", "Levi")
    assert first.subjects[2].teachers == ()

    assert grades[1].subjects[1].name == "מע' · פיזיקה"
    assert grades[2].subjects[2].name == "היסט'"


def test_empty_cells_leave_no_subject_key():
    sheet = _sheet(TIMETABLE_ROWS)
    grades = extract_grades(sheet, detect_geometry(sheet))
    assert 1 not in grades[0].subjects
    assert list(grades[1].subjects) == [1]


def test_hours_are_relative_to_first_data_row():
    with_title = _sheet([["שני"], [None, "ז1"], [1, "אנגלית"], [2, "ספרות"]])
    without_title = _sheet([["שני", "ז1"], [1, "אנגלית"], [2, "ספרות"]])

    for sheet in (with_title, without_title):
        (grade,) = extract_grades(sheet, detect_geometry(sheet))
        assert grade.subjects[0].name == "אנגלית"
        assert grade.subjects[1].name == "ספרות"


def test_last_row_is_read():
    rows = [["שני", "ז1"], [1, None], [2, None], [3, "מחשבים"]]
    sheet = _sheet(rows)
    (grade,) = extract_grades(sheet, detect_geometry(sheet))
    assert list(grade.subjects) == [2]


def test_numeric_cells_are_read_as_integers():
    sheet = _sheet([["שני", "ז1"], [1, 5.7], [2, "x"]])
    (grade,) = extract_grades(sheet, detect_geometry(sheet))
    assert grade.subjects[0].name == "5"
