"""
umich_overview_aggregate.py

Roll scraped sections up into the per-course overview the dashboard reads,
and flatten the raw sections into the per-run stub table.

Only lecture-like sections (LEC, SEM, REC, IND) count toward a course's open
seats and wait list; discussions and labs would double count students.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

import pandas as pd

from umich_course_cache import safe_int
from umich_section_scraper import SectionRecord
from umich_tracker_config import (
    COUNTABLE_MARKERS,
    STUDY_ABROAD_MARKER,
    UNDERGRAD_CUTOFF,
    WAITLIST_SENTINEL,
)

OVERVIEW_COLUMNS = [
    "department",
    "number",
    "title",
    "capacity",
    "available",
    "percent_available",
    "waitlist",
    "undergrad",
    "studyAbroad",
]

STUB_COLUMNS = [
    "Course",
    "Time",
    "Section",
    "Mode",
    "Number",
    "Status",
    "Open Seats",
    "Wait List",
]


@dataclass(frozen=True)
class CourseSummary:
    department: str
    number: Optional[int]
    title: str
    capacity: int
    available: int
    percent_available: float
    waitlist: int
    undergrad: bool
    study_abroad: bool


# ---------- FIELD RULES ----------

def is_countable_section(label: Optional[str]) -> bool:
    """
    Substring test, not an exact type match: "LEC001" counts, and so would an
    odd label like "PREC" (contains REC).
    """
    if not label:
        return False
    return any(marker in label for marker in COUNTABLE_MARKERS)


def normalize_waitlist(value: Any) -> int:
    """'-' (no wait list), blanks and junk become 0; never negative."""
    if value is None or str(value).strip() == WAITLIST_SENTINEL:
        return 0
    n = safe_int(value)
    if n is None:
        return 0
    return max(n, 0)


def open_seat_count(value: Any) -> int:
    n = safe_int(value)
    return 0 if n is None else n


def split_course_id(course_id: str) -> tuple[str, Optional[int]]:
    """'EECS485' -> ('EECS', 485)."""
    return course_id[:-3], safe_int(course_id[-3:])


def resolve_capacity(available: int, hint: Optional[int]) -> int:
    """A previous capacity can only raise what is currently observed."""
    if hint is not None and hint > available:
        return hint
    return available


def percent_of(available: int, capacity: int) -> float:
    if capacity == 0:
        return 0.0
    return available / capacity


# ---------- AGGREGATION ----------

def sections_frame(sections: Iterable[SectionRecord]) -> pd.DataFrame:
    records = [
        {
            "course": s.course_id,
            "title": s.title,
            "section": s.section_label,
            "open_seats": s.open_seats,
            "wait_list": s.wait_list,
        }
        for s in sections
    ]
    return pd.DataFrame.from_records(
        records, columns=["course", "title", "section", "open_seats", "wait_list"]
    )


def aggregate_sections(
    sections: Iterable[SectionRecord],
    hints: Optional[Mapping[str, int]] = None,
) -> List[CourseSummary]:
    """
    One CourseSummary per course with at least one countable section, in order
    of first appearance.
    """
    hints = hints or {}
    df = sections_frame(sections)
    if df.empty:
        return []

    df = df[df["section"].apply(is_countable_section)].copy()
    if df.empty:
        return []

    df["open_seats"] = df["open_seats"].apply(open_seat_count)
    df["wait_list"] = df["wait_list"].apply(normalize_waitlist)

    summaries: List[CourseSummary] = []
    for course_id, group in df.groupby("course", sort=False):
        department, number = split_course_id(course_id)
        available = int(group["open_seats"].sum())
        capacity = resolve_capacity(available, hints.get(course_id))

        summaries.append(
            CourseSummary(
                department=department,
                number=number,
                title=group["title"].iloc[0],
                capacity=capacity,
                available=available,
                percent_available=percent_of(available, capacity),
                waitlist=int(group["wait_list"].sum()),
                undergrad=number is not None and number < UNDERGRAD_CUTOFF,
                study_abroad=STUDY_ABROAD_MARKER in course_id,
            )
        )

    return summaries


# ---------- OUTPUT TABLES ----------

def _js_bool(value: bool) -> str:
    return "true" if value else "false"


def overview_frame(summaries: Iterable[CourseSummary]) -> pd.DataFrame:
    rows: List[Dict[str, Any]] = [
        {
            "department": s.department,
            "number": s.number,
            "title": s.title,
            "capacity": s.capacity,
            "available": s.available,
            "percent_available": s.percent_available,
            "waitlist": s.waitlist,
            "undergrad": _js_bool(s.undergrad),
            "studyAbroad": _js_bool(s.study_abroad),
        }
        for s in summaries
    ]
    df = pd.DataFrame.from_records(rows, columns=OVERVIEW_COLUMNS)
    # Keep integer columns integral even when a course number is missing.
    df["number"] = df["number"].astype("Int64")
    return df


def stub_frame(sections: Iterable[SectionRecord]) -> pd.DataFrame:
    """Every scraped section, countable or not, with the wait list as a number."""
    rows = [
        {
            "Course": s.course_id,
            "Time": s.timestamp,
            "Section": s.section_label,
            "Mode": s.instruction_mode,
            "Number": s.class_number,
            "Status": s.enroll_stat,
            "Open Seats": s.open_seats,
            "Wait List": normalize_waitlist(s.wait_list),
        }
        for s in sections
    ]
    return pd.DataFrame.from_records(rows, columns=STUB_COLUMNS)
