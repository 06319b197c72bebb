from __future__ import annotations
from datetime import date
from io import BytesIO
from typing import Any, Dict, List, Optional
import pandas as pd

SHEET_NAME = "Roster Data"
COLUMN_WIDTHS = {
    "Student Name": 25,
    "Course Name": 30,
    "Date": 15,
    "Uploaded At": 15,
}


def export_file_name(today: Optional[date] = None) -> str:
    return f"roster_export_{(today or date.today()).isoformat()}.xlsx"

def _export_frame(students: List[Dict[str, Any]]) -> pd.DataFrame:
    rows = []
    for s in students:
        uploaded = str(s.get("uploaded_at", "") or "")
        rows.append({
            "Student Name": s.get("name", ""),
            "Course Name": s.get("course_name", ""),
            "Date": s.get("date", ""),
            # ISO timestamp -> date part
            "Uploaded At": uploaded[:10],
        })
    return pd.DataFrame(rows, columns=list(COLUMN_WIDTHS))

def export_to_excel_bytes(students: List[Dict[str, Any]]) -> bytes:
    if not students:
        raise ValueError("No data to export")

    df = _export_frame(students)
    bio = BytesIO()

    with pd.ExcelWriter(bio, engine="xlsxwriter") as writer:
        df.to_excel(writer, index=False, sheet_name=SHEET_NAME)

        wb = writer.book
        ws = writer.sheets[SHEET_NAME]
        fmt_header = wb.add_format({"bold": True, "bg_color": "#F2F2F2", "border": 1, "valign": "vcenter"})

        ws.freeze_panes(1, 0)
        ws.autofilter(0, 0, max(1, len(df)), len(df.columns) - 1)
        for col, name in enumerate(df.columns):
            ws.write(0, col, name, fmt_header)
            ws.set_column(col, col, COLUMN_WIDTHS[name])

    return bio.getvalue()
