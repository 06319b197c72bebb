from __future__ import annotations
import re
from typing import Any, Dict, Iterator, List, Optional

DELIM_TAB = "tab"
DELIM_SPACES = "spaces"

# how far "Last Name" may sit below "First Name" when every cell is its own line
VERTICAL_LAST_NAME_WINDOW = 10
# header block limits, counted from the "First Name" line
VERTICAL_MAX_BACK = 8
VERTICAL_MAX_SPAN = 30

FIRST_NAME_MARKERS = ("first name", "firstname")
LAST_NAME_MARKERS = ("last name", "lastname")

# Words typical for sign-in sheet headers
HEADER_KWS = [
    "first name", "firstname",
    "last name", "lastname",
    "location",
    "phone",
    "email",
    "signature",
    "attended", "attendedclass", "attended class",
    "reason for absence",
]

# semantic role -> substrings (whitespace removed) that identify the column
ROLE_KWS = {
    "first_name": ["firstname"],
    "last_name": ["lastname"],
    "location": ["location"],
    "phone": ["phone"],
    "email": ["email", "e-mail"],
    "signature": ["signature"],
    "attended": ["attended"],
    "reason_for_absence": ["reasonforabsence"],
}

_SPACE_RUN_RE = re.compile(r"\s{2,}")


def _squash(s: str) -> str:
    return re.sub(r"\s+", "", s.lower())

def has_first_name_marker(line: str) -> bool:
    low = line.lower()
    return any(k in low for k in FIRST_NAME_MARKERS)

def has_last_name_marker(line: str) -> bool:
    low = line.lower()
    return any(k in low for k in LAST_NAME_MARKERS)

def is_header_token(line: str) -> bool:
    low = line.strip().lower()
    if not low:
        return False
    return any(k in low for k in HEADER_KWS)

def is_header_continuation(line: str) -> bool:
    # second physical line of a wrapped label: "(print)", "or reason ...", etc.
    low = line.strip().lower()
    return low.startswith("(") or low.startswith("or ") or "reason for absence" in low

def split_row(row: str, delimiter: str) -> List[str]:
    if delimiter == DELIM_TAB:
        return row.split("\t")
    return _SPACE_RUN_RE.split(row)

def resolve_roles(headers: List[str]) -> Dict[str, int]:
    # role -> position of the first header that carries it
    roles: Dict[str, int] = {}
    for pos, h in enumerate(headers):
        sq = _squash(h)
        if not sq:
            continue
        for role, kws in ROLE_KWS.items():
            if role not in roles and any(k in sq for k in kws):
                roles[role] = pos
    return roles
# =========================

# Delimited: one header line with all columns
# =========================
def _delimited_name_indices(columns: List[str]) -> tuple[int, int]:
    first_idx = -1
    last_idx = -1
    for j, col in enumerate(columns):
        normalized = re.sub(r"\s+", "", col)
        if normalized == "firstname" or "first name" in col:
            first_idx = j
        if normalized == "lastname" or "last name" in col:
            last_idx = j
    return first_idx, last_idx


def find_delimited_header(lines: List[str]) -> Optional[Dict[str, Any]]:
    """
    Looks for the first line holding both "first name" and "last name" whose
    fields resolve to two column indices.

    Returns:
      {
        "header_row": line index,
        "delimiter": "tab" | "spaces",
        "first_name": column index,
        "last_name": column index,
        "columns": {role: column index},
      }
    or None.
    """
    for i, line in enumerate(lines):
        if not (has_first_name_marker(line) and has_last_name_marker(line)):
            continue

        delimiter = DELIM_TAB if "\t" in line else DELIM_SPACES
        columns = [c.strip().lower() for c in split_row(line, delimiter)]
        first_idx, last_idx = _delimited_name_indices(columns)
        if first_idx == -1 or last_idx == -1:
            continue

        roles = resolve_roles(columns)
        roles["first_name"] = first_idx
        roles["last_name"] = last_idx
        return {
            "header_row": i,
            "delimiter": delimiter,
            "first_name": first_idx,
            "last_name": last_idx,
            "columns": roles,
        }

    return None

def iter_delimited_rows(lines: List[str], header: Dict[str, Any]) -> Iterator[List[str]]:
    # rows below the header, split with the header's delimiter; short rows skipped
    min_fields = max(header["first_name"], header["last_name"]) + 1
    for line in lines[header["header_row"] + 1:]:
        cols = [c.strip() for c in split_row(line, header["delimiter"])]
        if len(cols) < min_fields:
            continue
        yield cols
# =========================

# Vertical: every table cell is its own line (PDF/Word text layers)
# =========================
def find_name_anchor(lines: List[str], window: int = VERTICAL_LAST_NAME_WINDOW) -> Optional[tuple[int, int]]:
    # (first name line, last name line) with last name at most `window` lines below
    for i, line in enumerate(lines):
        if not has_first_name_marker(line):
            continue
        for j in range(i + 1, min(i + 1 + window, len(lines))):
            if has_last_name_marker(lines[j]):
                return i, j
    return None

def expand_header_block(lines: List[str], first_line: int, last_line: int,
                        max_back: int = VERTICAL_MAX_BACK, max_span: int = VERTICAL_MAX_SPAN) -> tuple[int, int]:
    start = first_line
    while start > 0 and is_header_token(lines[start - 1]) and first_line - (start - 1) <= max_back:
        start -= 1

    end = last_line
    while end + 1 < len(lines) and is_header_token(lines[end + 1]) and end + 1 - first_line <= max_span:
        end += 1

    return start, end

def merge_header_labels(raw: List[str]) -> List[str]:
    headers: List[str] = []
    for h in raw:
        if headers and is_header_continuation(h):
            headers[-1] = re.sub(r"\s+", " ", f"{headers[-1]} {h}").strip()
            continue
        headers.append(h.strip())
    return headers


def find_vertical_header(lines: List[str]) -> Optional[Dict[str, Any]]:
    """
    Header for tables where each cell landed on its own line.

    Returns:
      {
        "header_start", "header_end": inclusive line range of the header block,
        "headers": merged header labels,
        "row_size": cells per data row,
        "first_name", "last_name": slot inside a row,
        "columns": {role: slot},
      }
    or None.
    """
    anchor = find_name_anchor(lines)
    if anchor is None:
        return None

    start, end = expand_header_block(lines, anchor[0], anchor[1])
    headers = merge_header_labels(lines[start:end + 1])

    row_size = len(headers)
    if row_size < 2:
        return None

    roles = resolve_roles(headers)
    if "first_name" not in roles or "last_name" not in roles:
        return None

    return {
        "header_start": start,
        "header_end": end,
        "headers": headers,
        "row_size": row_size,
        "first_name": roles["first_name"],
        "last_name": roles["last_name"],
        "columns": roles,
    }

def _looks_like_header_again(row: List[str]) -> bool:
    for c in row:
        low = c.lower()
        if "first name" in low or "last name" in low:
            return True
    return False

def iter_vertical_rows(lines: List[str], header: Dict[str, Any]) -> Iterator[List[str]]:
    # cells after the header in groups of row_size; repeated page headers skipped
    row_size = header["row_size"]
    cells = [c.strip() for c in lines[header["header_end"] + 1:]]
    cells = [c for c in cells if c]

    for i in range(0, len(cells) - row_size + 1, row_size):
        row = cells[i:i + row_size]
        if _looks_like_header_again(row):
            continue
        yield row
