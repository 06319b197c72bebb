import pytest

from roster.extract import (
    is_bad_cell,
    make_student,
    normalize_lines,
    parse_delimited_table,
    parse_text_roster,
    parse_vertical_cell_table,
)


def _names(students):
    return [s["name"] for s in students]


def test_tab_table_with_date_on_course_line():
    text = "Intro to Widgets  3/4/2024\nFirst Name\tLast Name\nJane\tDoe\nJohn\tSmith"
    assert parse_text_roster(text) == [
        {"name": "Jane Doe", "course_name": "Intro to Widgets", "date": "2024-03-04"},
        {"name": "John Smith", "course_name": "Intro to Widgets", "date": "2024-03-04"},
    ]


def test_month_name_course_line():
    text = "Safety Training January 5th, 2024\nFirst Name\tLast Name\nAda\tLovelace"
    assert parse_text_roster(text) == [
        {"name": "Ada Lovelace", "course_name": "Safety Training", "date": "2024-01-05"},
    ]


def test_space_separated_table():
    text = "\n".join([
        "Workshop",
        "03/04/24",
        "No.   First Name   Last Name   Signature",
        "1   Jane   Doe   ",
        "2   Mary Ann   Smith   M. Smith",
    ])
    students = parse_text_roster(text)
    assert _names(students) == ["Jane Doe", "Mary Ann Smith"]
    assert {s["date"] for s in students} == {"2024-03-04"}
    assert {s["course_name"] for s in students} == {"Workshop"}


def test_vertical_layout():
    lines = ["First Name", "Last Name", "Location", "Jane", "Doe", "HQ", "John", "Smith", "Remote"]
    students = parse_vertical_cell_table(lines, "Course", "2024-01-05")
    assert students == [
        {"name": "Jane Doe", "course_name": "Course", "date": "2024-01-05"},
        {"name": "John Smith", "course_name": "Course", "date": "2024-01-05"},
    ]


def test_vertical_layout_through_parser():
    text = "\n".join([
        "Forklift Safety",
        "Monday, March 4, 2024 8:00am - 12:00pm",
        "",
        "Signature",
        "First Name",
        "Last Name",
        "Attended Class",
        "or Reason for Absence",
        "Jane Doe sig",
        "Jane",
        "Doe",
        "Yes",
        "",
        "J. Smith",
        "John",
        "Smith",
        "Sick",
    ])
    students = parse_text_roster(text)
    assert _names(students) == ["Jane Doe", "John Smith"]
    assert students[0]["course_name"] == "Forklift Safety"
    assert students[0]["date"] == "2024-03-04"


def test_first_and_last_name_too_far_apart():
    filler = [f"Row {i}" for i in range(10)]
    text = "\n".join(["Course", "1/1/2024", "First Name"] + filler + ["Last Name", "Jane", "Doe"])
    assert parse_text_roster(text) == []


def test_yes_last_name_rejected():
    text = "Course\n1/1/2024\nFirst Name\tLast Name\nJane\tYes\nJohn\tSmith"
    assert _names(parse_text_roster(text)) == ["John Smith"]


def test_long_first_name_rejected():
    long_first = "A" * 45
    text = f"Course\n1/1/2024\nFirst Name\tLast Name\n{long_first}\tDoe\nJohn\tSmith"
    assert _names(parse_text_roster(text)) == ["John Smith"]


def test_boilerplate_rows_dropped():
    text = "\n".join([
        "Course",
        "1/1/2024",
        "First Name\tLast Name\tConsent",
        "I attest that I attended\tthe whole class\tyes",
        "No\tSmith\t",
        "First Name\tLast Name\t",
        "Jane\tDoe\tyes",
    ])
    assert _names(parse_text_roster(text)) == ["Jane Doe"]


def test_delimited_takes_precedence_over_vertical():
    text = "\n".join([
        "Course",
        "2024-01-01",
        "First Name\tLast Name",
        "Jane\tDoe",
        "First Name",
        "Last Name",
        "Bob",
        "Ray",
    ])
    assert _names(parse_text_roster(text)) == ["Jane Doe"]


def test_vertical_used_when_delimited_rows_all_invalid():
    # junk rows keep the delimited header out of the vertical anchor window
    lines = ["Course", "First Name\tLast Name"] + ["yes\tno"] * 10 + ["First Name", "Last Name", "Bob", "Ray"]
    assert parse_delimited_table(lines, "Course", "Unknown") == []
    assert _names(parse_text_roster("\n".join(lines))) == ["Bob Ray"]


def test_vertical_header_cells_past_span_limit_become_data():
    # header block stops 30 lines below "First Name"; the extra "Email" cell opens the first row
    text = "\n".join(
        ["Course", "2024-01-05", "First Name", "Last Name"]
        + ["Email"] * 30
        + ["Jane", "Doe"]
        + ["x"] * 28
    )
    assert parse_text_roster(text) == [
        {"name": "Email Jane", "course_name": "Course", "date": "2024-01-05"},
    ]


def test_no_header_means_no_strategy_result():
    lines = ["Course", "2024-01-01", "Jane Doe", "John Smith"]
    assert parse_delimited_table(lines, "Course", "2024-01-01") is None
    assert parse_vertical_cell_table(lines, "Course", "2024-01-01") is None
    assert parse_text_roster("\n".join(lines)) == []


def test_unknown_date():
    text = "Course\nFirst Name\tLast Name\nJane\tDoe"
    assert parse_text_roster(text)[0]["date"] == "Unknown"


def test_non_ascii_digit_date_line_is_unknown():
    text = "c\n٣/٤/2024\nFirstName\tLastName\nA\tB"
    assert parse_text_roster(text) == [{"name": "A B", "course_name": "c", "date": "Unknown"}]


@pytest.mark.parametrize("text", ["", "   ", "Only one line", "\n\n  \nOnly one line\n\n", None])
def test_fewer_than_two_lines(text):
    assert parse_text_roster(text) == []


def test_garbage_text_does_not_raise():
    text = "\x00\x01 first name\t\t\nlast name ((( \t\n\n\r\n|||  ---  yes\nno"
    assert isinstance(parse_text_roster(text), list)


def test_parse_is_idempotent():
    text = "Intro to Widgets  3/4/2024\nFirst Name\tLast Name\nJane\tDoe\nJohn\tSmith"
    assert parse_text_roster(text) == parse_text_roster(text)


def test_normalize_lines():
    assert normalize_lines("a  \r\n\r\n  \n b\t\n") == ["a", " b"]


@pytest.mark.parametrize("value", ["", "   ", "Yes", "NO", "First Name", "signature", "I agree", "Attested"])
def test_bad_cells(value):
    assert is_bad_cell(value)


@pytest.mark.parametrize("value", ["Jane", "Nora", "Yesenia", "O'Brien"])
def test_good_cells(value):
    assert not is_bad_cell(value)


def test_make_student_collapses_whitespace():
    s = make_student("  Mary   Ann ", "\tSmith ", "Course", "2024-01-01")
    assert s == {"name": "Mary Ann Smith", "course_name": "Course", "date": "2024-01-01"}
    assert "  " not in s["name"]


def test_make_student_length_limits():
    assert make_student("A" * 40, "B" * 60, "C", "D") is not None
    assert make_student("A" * 41, "Doe", "C", "D") is None
    assert make_student("Jane", "B" * 61, "C", "D") is None
