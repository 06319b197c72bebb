from __future__ import annotations
import time
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List
from .utils import load_json, save_json, students_path, uploads_path

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()

def _now_ms() -> int:
    return int(time.time() * 1000)

def _normalize_student(e: Dict[str, Any]) -> Dict[str, Any]:
    # Brings a stored record to the expected shape
    if not isinstance(e, dict):
        return {}
    out = dict(e)  # keep any extra fields
    out.update({
        "id": str(e.get("id", "") or "").strip(),
        "name": str(e.get("name", "") or "").strip(),
        "course_name": str(e.get("course_name", e.get("courseName", "")) or "").strip(),
        "date": str(e.get("date", "") or "").strip(),
        "uploaded_at": str(e.get("uploaded_at", e.get("uploadedAt", "")) or "").strip(),
    })
    # camelCase spellings from older files are not written back
    out.pop("courseName", None)
    out.pop("uploadedAt", None)
    return out

def get_students() -> List[Dict[str, Any]]:
    obj = load_json(students_path(), [])
    if not isinstance(obj, list):
        return []

    out: List[Dict[str, Any]] = []
    for item in obj:
        norm = _normalize_student(item)
        if not norm or not norm.get("name"):
            continue
        out.append(norm)
    return out

def save_students(students: List[Dict[str, Any]]) -> None:
    save_json(students_path(), [_normalize_student(s) for s in students if isinstance(s, dict)])

def add_students(new_students: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Appends freshly parsed records and returns the whole collection.
    Each new record gets id "<epoch ms>-<index>" and a shared upload timestamp;
    the parsed dicts themselves are not modified.
    """
    existing = get_students()
    stamp = _now_ms()
    now = _now_iso()
    added = []
    for i, s in enumerate(new_students):
        rec = dict(s)
        rec["id"] = f"{stamp}-{i}"
        rec["uploaded_at"] = now
        added.append(rec)

    updated = existing + added
    save_students(updated)
    logger.info("stored %d students (total %d)", len(added), len(updated))
    return updated

def get_uploads() -> List[Dict[str, Any]]:
    obj = load_json(uploads_path(), [])
    if not isinstance(obj, list):
        return []
    return [u for u in obj if isinstance(u, dict)]

def add_upload(file_name: str, student_count: int) -> Dict[str, Any]:
    upload = {
        "id": str(_now_ms()),
        "file_name": file_name,
        "uploaded_at": _now_iso(),
        "student_count": int(student_count),
    }
    save_json(uploads_path(), get_uploads() + [upload])
    return upload

def clear_all_data() -> None:
    for path in (students_path(), uploads_path()):
        if path.exists():
            path.unlink()
    logger.info("roster data cleared")
