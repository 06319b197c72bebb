from __future__ import annotations
import re
import logging
from typing import Any, Callable, Dict, List, Optional
from .dates import compute_course_name, resolve_course_date
from .header_detect import (
    find_delimited_header,
    find_vertical_header,
    iter_delimited_rows,
    iter_vertical_rows,
)
from .utils import collapse_ws

logger = logging.getLogger(__name__)

MAX_FIRST_NAME_LEN = 40
MAX_LAST_NAME_LEN = 60

# consent checkboxes
BANNED_TOKENS = {"yes", "no"}
# sign-in sheet boilerplate ("I attest that...", "I agree", "Signature")
BOILERPLATE_KWS = ("attest", "agree", "signature")

_LINE_SPLIT_RE = re.compile(r"\r?\n")
# =========================

# Row validation
# =========================
def is_bad_cell(value: str) -> bool:
    v = (value or "").strip()
    if not v:
        return True
    low = v.lower()
    if "first name" in low or "last name" in low:
        return True
    if low in BANNED_TOKENS:
        return True
    if any(k in low for k in BOILERPLATE_KWS):
        return True
    return False


def make_student(first_name: str, last_name: str, course_name: str, course_date: str) -> Optional[Dict[str, Any]]:
    """
    Student record from a (first, last) cell pair, or None if the pair
    looks like header leakage, a checkbox answer, boilerplate or a mis-split row.
    """
    first = (first_name or "").strip()
    last = (last_name or "").strip()

    if is_bad_cell(first) or is_bad_cell(last):
        return None
    if len(first) > MAX_FIRST_NAME_LEN or len(last) > MAX_LAST_NAME_LEN:
        return None

    name = collapse_ws(f"{first} {last}")
    if not name:
        return None
    return {"name": name, "course_name": course_name, "date": course_date}
# =========================

# Strategies
# =========================
def _rows_to_students(rows, header: Dict[str, Any], course_name: str, course_date: str) -> List[Dict[str, Any]]:
    students: List[Dict[str, Any]] = []
    rejected = 0
    for row in rows:
        student = make_student(row[header["first_name"]], row[header["last_name"]], course_name, course_date)
        if student is None:
            rejected += 1
            continue
        students.append(student)
    if rejected:
        logger.debug("rejected %d candidate rows", rejected)
    return students


def parse_delimited_table(lines: List[str], course_name: str, course_date: str) -> Optional[List[Dict[str, Any]]]:
    # None: no "First Name ... Last Name" header line
    header = find_delimited_header(lines)
    if header is None:
        return None
    return _rows_to_students(iter_delimited_rows(lines, header), header, course_name, course_date)


def parse_vertical_cell_table(lines: List[str], course_name: str, course_date: str) -> Optional[List[Dict[str, Any]]]:
    # PDF/Word fallback: "First Name" and "Last Name" on separate lines
    header = find_vertical_header(lines)
    if header is None:
        return None
    return _rows_to_students(iter_vertical_rows(lines, header), header, course_name, course_date)


Strategy = Callable[[List[str], str, str], Optional[List[Dict[str, Any]]]]

# priority order: a delimited header wins even if leftover lines look vertical
STRATEGIES: List[tuple[str, Strategy]] = [
    ("delimited", parse_delimited_table),
    ("vertical", parse_vertical_cell_table),
]
# =========================

# Main: text -> students
# =========================
def normalize_lines(text: str) -> List[str]:
    lines = [ln.rstrip() for ln in _LINE_SPLIT_RE.split(text or "")]
    return [ln for ln in lines if ln.strip()]


def parse_text_roster(text: str) -> List[Dict[str, Any]]:
    """
    Students from text converted from a PDF/Word sign-in sheet.

    Layout expected:
      - line 1: course title (may carry the date / time range)
      - line 2: date line (only the start date is kept)
      - somewhere below: a table with "First Name" and "Last Name" columns

    Every record gets the same course name and date. Returns [] when no
    header is found or no row survives validation.
    """
    lines = normalize_lines(text)
    if len(lines) < 2:
        return []

    course_name = compute_course_name(lines[0])
    course_date = resolve_course_date(lines)

    for label, strategy in STRATEGIES:
        students = strategy(lines, course_name, course_date)
        if students:
            logger.info("parsed %s table rows: %d", label, len(students))
            return students

    logger.info("no students parsed (headers not found or no valid rows)")
    return []
