from __future__ import annotations
import csv
import logging
from datetime import date
from io import BytesIO, StringIO
from pathlib import PurePath
from typing import Any, Dict, List, Optional
import pandas as pd
import pdfplumber
from docx import Document
from docx.table import Table
from openpyxl import load_workbook
from .errors import DocumentDecodeError, UnsupportedFileType
from .extract import parse_text_roster
from .utils import collapse_ws, date_like_to_ymd, norm_text

logger = logging.getLogger(__name__)

SPREADSHEET_EXTS = {".xlsx", ".xls", ".csv"}
WORD_EXTS = {".docx", ".doc"}
PDF_EXTS = {".pdf"}
TEXT_EXTS = {".txt"}
UPLOAD_TYPES = sorted(e.lstrip(".") for e in SPREADSHEET_EXTS | WORD_EXTS | PDF_EXTS | TEXT_EXTS)

# spreadsheet column aliases, compared after norm_text ("First Name" == "first name")
FIRST_NAME_KEYS = ["first name", "firstname"]
LAST_NAME_KEYS = ["last name", "lastname"]
NAME_KEYS = ["student name", "name", "student"]
COURSE_KEYS = ["course name", "course", "class"]
DATE_KEYS = ["date"]


def _cell_text(v) -> str:
    if v is None:
        return ""
    s = str(v)
    if not s or s.lower() in ("nan", "nat", "none"):
        return ""
    return s.strip()
# =========================

# Excel: first sheet as a matrix, merged cells expanded
# =========================
def _sheet_to_matrix_with_merged(wb_bytes: bytes, sheet_name: Optional[str] = None) -> List[List[Any]]:
    wb = load_workbook(BytesIO(wb_bytes), read_only=False, data_only=True)
    ws = wb[sheet_name] if sheet_name else wb.worksheets[0]
    merged_map = {}
    for r in ws.merged_cells.ranges:
        min_col, min_row, max_col, max_row = r.bounds
        top_val = ws.cell(min_row, min_col).value
        for rr in range(min_row, max_row + 1):
            for cc in range(min_col, max_col + 1):
                merged_map[(rr, cc)] = top_val

    rows = []
    for r in range(1, ws.max_row + 1):
        row_vals = []
        for c in range(1, ws.max_column + 1):
            v = ws.cell(r, c).value
            if (r, c) in merged_map and (v is None or str(v).strip() == ""):
                v = merged_map[(r, c)]
            row_vals.append(v)
        rows.append(row_vals)

    return rows
# =========================

# CSV: tolerant read from bytes
# =========================
def _decode_sample(data: bytes, enc: str, limit: int = 65536) -> str:
    try:
        return data[:limit].decode(enc, errors="replace")
    except LookupError:
        return data[:limit].decode("utf-8", errors="replace")


def _guess_delimiter(sample_text: str) -> str:
    try:
        dialect = csv.Sniffer().sniff(sample_text, delimiters=";,\t|")
        if dialect.delimiter:
            return dialect.delimiter
    except csv.Error:
        pass

    # fallback: average count per line over the first lines
    candidates = [",", ";", "\t", "|"]
    lines = [ln for ln in sample_text.splitlines() if ln.strip()][:20]
    if not lines:
        return ","

    scores = {}
    for d in candidates:
        cnts = [ln.count(d) for ln in lines]
        scores[d] = sum(cnts) / max(1, len(cnts))

    best = max(scores.items(), key=lambda x: x[1])[0]
    return best if scores.get(best, 0) > 0 else ","


def _read_csv_bytes(data: bytes) -> pd.DataFrame:
    # header=None: the header row stays in the matrix like any other row
    encodings = ["utf-8-sig", "utf-8", "cp1252"]
    last_err: Exception | None = None

    for enc in encodings:
        try:
            delim = _guess_delimiter(_decode_sample(data, enc))
            return pd.read_csv(
                BytesIO(data),
                header=None,
                sep=delim,
                engine="python",
                encoding=enc,
                dtype=str,
                skip_blank_lines=True,
            )
        except (UnicodeDecodeError, pd.errors.ParserError) as e:
            last_err = e
            continue

    # last resort: decode with replacement
    sample = data.decode("utf-8", errors="replace")
    try:
        return pd.read_csv(
            StringIO(sample),
            header=None,
            sep=_guess_delimiter(sample),
            engine="python",
            dtype=str,
            skip_blank_lines=True,
        )
    except pd.errors.ParserError as e:
        raise last_err or e
# =========================

# Spreadsheets -> keyed rows -> students
# =========================
def _matrix_to_rows(matrix: List[List[Any]]) -> List[Dict[str, Any]]:
    # first non-empty row is the header; blank rows skipped
    matrix = [r for r in matrix if any(_cell_text(v) for v in r)]
    if not matrix:
        return []

    header = [_cell_text(v) for v in matrix[0]]
    rows: List[Dict[str, Any]] = []
    for raw in matrix[1:]:
        row = {}
        for key, v in zip(header, raw):
            if key and key not in row:
                row[key] = v
        rows.append(row)
    return rows


def read_spreadsheet_rows(data: bytes, file_name: str) -> List[Dict[str, Any]]:
    """First sheet of an .xlsx/.xls/.csv file as dicts keyed by the header row."""
    ext = PurePath(file_name).suffix.lower()
    try:
        if ext == ".csv":
            matrix = _read_csv_bytes(data).values.tolist()
        elif ext == ".xls":
            matrix = pd.read_excel(BytesIO(data), sheet_name=0, header=None).values.tolist()
        else:
            matrix = _sheet_to_matrix_with_merged(data)
    except Exception as e:
        logger.exception("%s: failed to read spreadsheet", file_name)
        raise DocumentDecodeError(f"Could not read spreadsheet {file_name}: {e}") from e
    return _matrix_to_rows(matrix)


def _lookup(row_norm: Dict[str, Any], keys: List[str]) -> str:
    for k in keys:
        v = _cell_text(row_norm.get(k))
        if v:
            return v
    return ""


def map_spreadsheet_rows(rows: List[Dict[str, Any]], today: Optional[date] = None) -> List[Dict[str, Any]]:
    # Spreadsheets already have columns, so no header inference: plain key lookups
    today_s = (today or date.today()).isoformat()
    students: List[Dict[str, Any]] = []

    for row in rows:
        row_norm: Dict[str, Any] = {}
        for k, v in row.items():
            nk = norm_text(k)
            if nk and nk not in row_norm:
                row_norm[nk] = v

        combined = collapse_ws(f"{_lookup(row_norm, FIRST_NAME_KEYS)} {_lookup(row_norm, LAST_NAME_KEYS)}")
        name = collapse_ws(_lookup(row_norm, NAME_KEYS) or combined)
        if not name:
            continue

        raw_date = None
        for k in DATE_KEYS:
            if _cell_text(row_norm.get(k)):
                raw_date = row_norm[k]
                break
        course_date = date_like_to_ymd(raw_date) or _cell_text(raw_date) or today_s

        students.append({
            "name": name,
            "course_name": _lookup(row_norm, COURSE_KEYS),
            "date": course_date,
        })

    return students
# =========================

# Word / PDF -> text
# =========================
def extract_docx_text(data: bytes) -> str:
    # paragraphs in document order; each table cell paragraph becomes its own line
    try:
        doc = Document(BytesIO(data))
    except Exception as e:
        raise DocumentDecodeError(f"Could not read Word document: {e}") from e

    out: List[str] = []
    for block in doc.iter_inner_content():
        if isinstance(block, Table):
            for row in block.rows:
                seen = set()
                for cell in row.cells:
                    # merged cells show up once per spanned column
                    if cell._tc in seen:
                        continue
                    seen.add(cell._tc)
                    out.extend(p.text for p in cell.paragraphs)
        else:
            out.append(block.text)
    return "\n".join(out)


def extract_pdf_text(data: bytes) -> str:
    # page texts joined with newlines; the parser never sees page boundaries
    try:
        pages: List[str] = []
        with pdfplumber.open(BytesIO(data)) as pdf:
            for page in pdf.pages:
                pages.append(page.extract_text() or "")
    except Exception as e:
        raise DocumentDecodeError(f"Could not read PDF: {e}") from e
    return "\n".join(pages)


def _decode_text(data: bytes) -> str:
    for enc in ("utf-8-sig", "cp1252"):
        try:
            return data.decode(enc)
        except UnicodeDecodeError:
            continue
    return data.decode("utf-8", errors="replace")
# =========================

# Main: upload -> students
# =========================
def import_document(file_name: str, data: bytes) -> List[Dict[str, Any]]:
    """
    Routes an uploaded file by extension:
      - .xlsx / .xls / .csv -> keyed spreadsheet rows
      - .docx / .doc -> Word text -> text roster parser (python-docx reads
        OOXML only, so a legacy binary .doc fails as DocumentDecodeError)
      - .pdf -> PDF text layer -> text roster parser
      - .txt -> text roster parser
    Anything else raises UnsupportedFileType. Decode failures raise
    DocumentDecodeError before the parser runs.
    """
    ext = PurePath(file_name).suffix.lower()
    logger.info("%s: importing as %s", file_name, ext or "(no extension)")

    if ext in SPREADSHEET_EXTS:
        return map_spreadsheet_rows(read_spreadsheet_rows(data, file_name))
    if ext in WORD_EXTS:
        return parse_text_roster(extract_docx_text(data))
    if ext in PDF_EXTS:
        return parse_text_roster(extract_pdf_text(data))
    if ext in TEXT_EXTS:
        return parse_text_roster(_decode_text(data))

    raise UnsupportedFileType(f"Unsupported file type: {ext.lstrip('.') or file_name}")
