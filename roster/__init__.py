"""
This package contains:
- date / course title extraction from roster headings
- header detection for text tables (delimited and one-cell-per-line)
- the text roster parser (student records from PDF/Word text)
- file ingest (Word, PDF, spreadsheets, plain text)
- JSON storage of students and upload history
- roster statistics
- Excel export
"""
from .dates import extract_start_date, compute_course_name
from .extract import parse_text_roster, make_student
from .ingest import import_document, map_spreadsheet_rows
from .storage import add_students, add_upload, get_students, get_uploads, clear_all_data
from .stats import summary_stats, students_by_course, students_by_date
from .export import export_to_excel_bytes, export_file_name
from .errors import RosterImportError, UnsupportedFileType, DocumentDecodeError

__all__ = [
    "extract_start_date",
    "compute_course_name",
    "parse_text_roster",
    "make_student",
    "import_document",
    "map_spreadsheet_rows",
    "add_students",
    "add_upload",
    "get_students",
    "get_uploads",
    "clear_all_data",
    "summary_stats",
    "students_by_course",
    "students_by_date",
    "export_to_excel_bytes",
    "export_file_name",
    "RosterImportError",
    "UnsupportedFileType",
    "DocumentDecodeError",
]
