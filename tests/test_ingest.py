from datetime import date, datetime
from io import BytesIO

import pytest
from docx import Document
from openpyxl import Workbook

from roster import ingest
from roster.errors import DocumentDecodeError, UnsupportedFileType
from roster.ingest import (
    extract_docx_text,
    extract_pdf_text,
    import_document,
    map_spreadsheet_rows,
    read_spreadsheet_rows,
)


def _xlsx_bytes(rows):
    wb = Workbook()
    ws = wb.active
    for r in rows:
        ws.append(r)
    bio = BytesIO()
    wb.save(bio)
    return bio.getvalue()


def _docx_bytes():
    doc = Document()
    doc.add_paragraph("Safety Training")
    doc.add_paragraph("January 5, 2024")
    table = doc.add_table(rows=3, cols=3)
    cells = [
        ["First Name", "Last Name", "Location"],
        ["Jane", "Doe", "HQ"],
        ["John", "Smith", "Remote"],
    ]
    for i, row in enumerate(cells):
        for j, value in enumerate(row):
            table.cell(i, j).text = value
    bio = BytesIO()
    doc.save(bio)
    return bio.getvalue()


class _FakePage:
    def __init__(self, text):
        self.text = text

    def extract_text(self):
        return self.text


class _FakePdf:
    def __init__(self, pages):
        self.pages = [_FakePage(t) for t in pages]

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


def test_map_spreadsheet_rows_first_last_columns():
    rows = [
        {"First Name": "Jane", "Last Name": "Doe", "Course": "CPR", "Date": datetime(2024, 3, 4)},
        {"FirstName": " John ", "LastName": "Smith", "Course Name": "CPR", "Date": "2024-03-05"},
    ]
    assert map_spreadsheet_rows(rows) == [
        {"name": "Jane Doe", "course_name": "CPR", "date": "2024-03-04"},
        {"name": "John Smith", "course_name": "CPR", "date": "2024-03-05"},
    ]


def test_map_spreadsheet_rows_name_column_and_defaults():
    rows = [
        {"Student Name": " Ann   Lee ", "Class": "First Aid"},
        {"Name": None, "Class": "First Aid"},
        {"name": float("nan")},
    ]
    assert map_spreadsheet_rows(rows, today=date(2024, 1, 2)) == [
        {"name": "Ann Lee", "course_name": "First Aid", "date": "2024-01-02"},
    ]


def test_read_xlsx_rows():
    data = _xlsx_bytes([
        ["First Name", "Last Name", "Course"],
        ["Jane", "Doe", "CPR"],
        [None, None, None],
        ["John", "Smith", "CPR"],
    ])
    rows = read_spreadsheet_rows(data, "roster.xlsx")
    assert [r["First Name"] for r in rows] == ["Jane", "John"]


def test_read_csv_rows():
    data = b"First Name,Last Name,Course\nJane,Doe,CPR\nJohn,Smith,CPR\n"
    rows = read_spreadsheet_rows(data, "roster.csv")
    assert [(r["First Name"], r["Last Name"]) for r in rows] == [("Jane", "Doe"), ("John", "Smith")]


def test_import_xlsx():
    data = _xlsx_bytes([
        ["First Name", "Last Name", "Course", "Date"],
        ["Jane", "Doe", "CPR", datetime(2024, 3, 4)],
    ])
    assert import_document("Roster.XLSX", data) == [
        {"name": "Jane Doe", "course_name": "CPR", "date": "2024-03-04"},
    ]


def test_broken_spreadsheet():
    with pytest.raises(DocumentDecodeError):
        import_document("roster.xlsx", b"not a workbook")


def test_docx_cells_become_lines():
    lines = [ln for ln in extract_docx_text(_docx_bytes()).splitlines() if ln.strip()]
    assert lines[:5] == ["Safety Training", "January 5, 2024", "First Name", "Last Name", "Location"]


def test_import_docx():
    students = import_document("sign-in.docx", _docx_bytes())
    assert students == [
        {"name": "Jane Doe", "course_name": "Safety Training", "date": "2024-01-05"},
        {"name": "John Smith", "course_name": "Safety Training", "date": "2024-01-05"},
    ]


def test_broken_docx():
    with pytest.raises(DocumentDecodeError):
        import_document("sign-in.docx", b"garbage")


def test_pdf_pages_joined(monkeypatch):
    pages = ["Course\n2024-01-05\nFirst Name\tLast Name\nJane\tDoe", "John\tSmith", None]
    monkeypatch.setattr(ingest.pdfplumber, "open", lambda fp: _FakePdf(pages))
    assert extract_pdf_text(b"%PDF") == "Course\n2024-01-05\nFirst Name\tLast Name\nJane\tDoe\nJohn\tSmith\n"
    assert [s["name"] for s in import_document("roster.pdf", b"%PDF")] == ["Jane Doe", "John Smith"]


def test_broken_pdf(monkeypatch):
    def boom(fp):
        raise ValueError("no xref")

    monkeypatch.setattr(ingest.pdfplumber, "open", boom)
    with pytest.raises(DocumentDecodeError):
        import_document("roster.pdf", b"%PDF")


def test_import_txt():
    data = "Course\n2024-01-05\nFirst Name\tLast Name\nJane\tDoe\n".encode("utf-8-sig")
    assert import_document("roster.txt", data) == [
        {"name": "Jane Doe", "course_name": "Course", "date": "2024-01-05"},
    ]


def test_text_without_students_is_empty_not_error():
    assert import_document("notes.txt", b"Meeting notes\nnothing here") == []


def test_binary_doc_goes_to_word_path_and_fails_to_decode():
    # legacy binary Word file (OLE header), not an OOXML package
    data = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1" + b"\x00" * 64
    with pytest.raises(DocumentDecodeError):
        import_document("old.doc", data)


@pytest.mark.parametrize("name", ["photo.png", "noext", "slides.pptx"])
def test_unsupported_extension(name):
    with pytest.raises(UnsupportedFileType):
        import_document(name, b"")
    with pytest.raises(ValueError):
        import_document(name, b"")
