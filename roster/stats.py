from __future__ import annotations
from typing import Any, Dict, List
import pandas as pd

UNKNOWN = "Unknown"
COURSE_LABEL_MAX = 20


def _students_df(students: List[Dict[str, Any]]) -> pd.DataFrame:
    df = pd.DataFrame(students, columns=["name", "course_name", "date"])
    df["course_name"] = df["course_name"].fillna("").astype(str)
    df["date"] = df["date"].fillna("").astype(str)
    return df

def summary_stats(students: List[Dict[str, Any]]) -> Dict[str, int]:
    df = _students_df(students)
    n_courses = int(df["course_name"].nunique())
    return {
        "total_students": int(len(df)),
        "courses": n_courses,
        "session_dates": int(df["date"].nunique()),
        "avg_per_course": int(round(len(df) / n_courses)) if n_courses else 0,
    }

def _short_label(name: str) -> str:
    return name[:COURSE_LABEL_MAX] + "..." if len(name) > COURSE_LABEL_MAX else name

def students_by_course(students: List[Dict[str, Any]], top: int = 8) -> pd.DataFrame:
    df = _students_df(students)
    if df.empty:
        return pd.DataFrame(columns=["course", "count"])

    course = df["course_name"].where(df["course_name"] != "", UNKNOWN)
    counts = course.value_counts(sort=False).reset_index()
    counts.columns = ["course", "count"]
    # stable: ties keep first-seen order
    counts = counts.sort_values("count", ascending=False, kind="mergesort").head(top)
    counts["course"] = counts["course"].map(_short_label)
    return counts.reset_index(drop=True)

def students_by_date(students: List[Dict[str, Any]], last: int = 10) -> pd.DataFrame:
    """Students per session date, oldest first; unparseable dates ("Unknown") go last."""
    df = _students_df(students)
    if df.empty:
        return pd.DataFrame(columns=["date", "count"])

    dates = df["date"].where(df["date"] != "", UNKNOWN)
    counts = dates.value_counts(sort=False).reset_index()
    counts.columns = ["date", "count"]
    counts["_ts"] = pd.to_datetime(counts["date"], errors="coerce", format="%Y-%m-%d")
    counts = counts.sort_values("_ts", na_position="last", kind="mergesort").tail(last)
    return counts.drop(columns=["_ts"]).reset_index(drop=True)
