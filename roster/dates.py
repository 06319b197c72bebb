from __future__ import annotations
import re
from typing import List, Optional
from dateutil import parser as dtparser
from .utils import format_ymd

UNKNOWN_DATE = "Unknown"

ISO_DATE_RE = re.compile(r"\b(\d{4})-(\d{1,2})-(\d{1,2})\b", re.ASCII)
# 1/5/2024, 1-5-24
US_DATE_RE = re.compile(r"\b(\d{1,2})[/\-](\d{1,2})[/\-](\d{2,4})\b", re.ASCII)
# January 5, 2024 / Jan 5th 2024 / Sept 12, 2024
MONTH_DATE_RE = re.compile(
    r"\b(?:jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|jun(?:e)?|jul(?:y)?|aug(?:ust)?"
    r"|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)"
    r"\s+\d{1,2}(?:st|nd|rd|th)?,?\s+\d{4}\b",
    re.I | re.ASCII,
)
ANY_DATE_RE = re.compile(
    "|".join([ISO_DATE_RE.pattern, US_DATE_RE.pattern, MONTH_DATE_RE.pattern]), re.I | re.ASCII
)
# 9:00am - 4:30 pm
TIME_RANGE_RE = re.compile(
    r"\b\d{1,2}:\d{2}(?:\s*[ap]m)?\s*[-–—]\s*\d{1,2}:\d{2}(?:\s*[ap]m)?\b", re.I | re.ASCII
)
ORDINAL_RE = re.compile(r"(\d)(st|nd|rd|th)", re.I | re.ASCII)
TRAILING_SEP_RE = re.compile(r"[\s\-–—|]+$")


def extract_start_date(text: str) -> Optional[str]:
    """
    First date found in a line, as YYYY-MM-DD.
    Order: ISO -> US month/day/year -> month name.
    """
    if not text:
        return None

    m = ISO_DATE_RE.search(text)
    if m:
        return format_ymd(m.group(1), m.group(2), m.group(3))

    m = US_DATE_RE.search(text)
    if m:
        year = int(m.group(3))
        if year < 100:
            year += 2000
        return format_ymd(year, m.group(1), m.group(2))

    m = MONTH_DATE_RE.search(text)
    if m:
        cleaned = ORDINAL_RE.sub(r"\1", m.group(0))
        try:
            dt = dtparser.parse(cleaned)
        except (ValueError, OverflowError):
            return None
        return format_ymd(dt.year, dt.month, dt.day)

    return None

def resolve_course_date(lines: List[str]) -> str:
    # date line (2nd) first, then the course line, else Unknown
    for line in lines[1:2] + lines[0:1]:
        found = extract_start_date(line)
        if found:
            return found
    return UNKNOWN_DATE

def _strip_trailing_separators(s: str) -> str:
    return TRAILING_SEP_RE.sub("", s).strip()

def compute_course_name(raw_course_line: str) -> str:
    """
    Course title from the first line of a roster:
    - text before an embedded date, if the date is not at the very start
    - else the whole line with dates and time ranges cut out
    """
    line = (raw_course_line or "").strip()

    m = ANY_DATE_RE.search(line)
    if m and m.start() > 0:
        cleaned = _strip_trailing_separators(line[: m.start()])
        if cleaned:
            return cleaned

    s = ANY_DATE_RE.sub("", line)
    s = TIME_RANGE_RE.sub("", s)
    s = re.sub(r" {2,}", " ", s)
    return _strip_trailing_separators(s)
