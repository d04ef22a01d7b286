"""
umich_section_scraper.py

Fetch the LSA course guide detail page for every known course and pull the
section rows out of it.

A detail page for EECS 485 in Winter 2023 lives at

    https://www.lsa.umich.edu/cg/cg_detail.aspx?content=2420EECS485001&termArray=w_23_2420

where "2420" is the last component of the term slug and "001" is the course's
suffix from the catalog. Each section is a `.row.clsschedulerow` block whose
`.col-md-1` columns read like "Open Seats: 5". The labels are whatever the
page prints, so they are kept as a free-form mapping.
"""

from __future__ import annotations

import datetime as dt
import itertools
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional

import requests
from bs4 import BeautifulSoup

from umich_course_cache import CourseRef, make_session
from umich_tracker_config import DETAIL_URL, MAX_CONCURRENT_FETCHES, REQUEST_TIMEOUT

logger = logging.getLogger(__name__)

Clock = Callable[[], dt.datetime]

SECTION_ROW_SELECTOR = ".row.clsschedulerow"
SECTION_COLUMN_SELECTOR = ".col-md-1"


# ---------- TIME ----------

def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def rounded_hour_iso(now: dt.datetime) -> str:
    """
    Round to the nearest hour (half past rounds up) and format as UTC ISO-8601
    with milliseconds, e.g. 2023-01-15T14:00:00.000Z.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=dt.timezone.utc)
    now = now.astimezone(dt.timezone.utc)
    hour = now.replace(minute=0, second=0, microsecond=0)
    if now - hour >= dt.timedelta(minutes=30):
        hour += dt.timedelta(hours=1)
    return hour.strftime("%Y-%m-%dT%H:%M:%S.000Z")


# ---------- RECORDS ----------

@dataclass(frozen=True)
class SectionRecord:
    """One section row scraped from a course detail page."""

    course_id: str
    timestamp: str
    title: str
    fields: Mapping[str, str] = field(default_factory=dict)

    def get(self, label: str, default: str = "") -> str:
        return self.fields.get(label, default)

    @property
    def section_label(self) -> str:
        return self.get("Section")

    @property
    def instruction_mode(self) -> str:
        return self.get("Instruction Mode")

    @property
    def class_number(self) -> str:
        return self.get("Class No")

    @property
    def enroll_stat(self) -> str:
        return self.get("Enroll Stat")

    @property
    def open_seats(self) -> str:
        return self.get("Open Seats")

    @property
    def wait_list(self) -> str:
        return self.get("Wait List")


# ---------- REQUEST ----------

def term_content_prefix(term: str) -> str:
    """'w_23_2420' -> '2420'."""
    return term.split("_")[-1]


def build_detail_params(term: str, course_id: str, suffix: str) -> Dict[str, str]:
    return {
        "content": f"{term_content_prefix(term)}{course_id}{suffix}",
        "termArray": term,
    }


# ---------- PARSING ----------

def parse_section_rows(html: str) -> List[Dict[str, str]]:
    """
    Turn a detail page into one {label: value} dict per section row.

    Columns without a "Label: value" shape are skipped. Only the first colon
    splits, so values such as "10:00AM" survive intact.
    """
    soup = BeautifulSoup(html, "html.parser")
    rows: List[Dict[str, str]] = []

    for row in soup.select(SECTION_ROW_SELECTOR):
        section: Dict[str, str] = {}
        for column in row.select(SECTION_COLUMN_SELECTOR):
            key, sep, value = column.get_text().strip().partition(":")
            key = key.strip()
            if not sep or not key:
                continue
            section[key] = value.strip()
        rows.append(section)

    return rows


# ---------- FETCH ----------

def fetch_course_sections(
    session: requests.Session,
    course: CourseRef,
    term: str,
    clock: Clock = utc_now,
) -> List[SectionRecord]:
    """
    Fetch and parse one course's detail page.

    A non-success status means "no sections this run". Connection errors and
    timeouts are not caught.
    """
    params = build_detail_params(term, course.id, course.suffix)
    resp = session.get(DETAIL_URL, params=params, timeout=REQUEST_TIMEOUT)
    if not resp.ok:
        logger.warning(
            "Skipping %s: detail page returned status=%s (content=%s)",
            course.id, resp.status_code, params["content"],
        )
        return []

    rows = parse_section_rows(resp.text)
    timestamp = rounded_hour_iso(clock())
    logger.debug("%s: %d section rows", course.id, len(rows))

    return [
        SectionRecord(course_id=course.id, timestamp=timestamp, title=course.title, fields=row)
        for row in rows
    ]


def fetch_all_sections(
    catalog: Mapping[str, CourseRef],
    term: str,
    session: Optional[requests.Session] = None,
    clock: Clock = utc_now,
    max_workers: int = MAX_CONCURRENT_FETCHES,
) -> List[SectionRecord]:
    """
    Fetch every course in the catalog with at most `max_workers` requests in
    flight, then flatten the per-course lists in catalog order.
    """
    if session is None:
        session = make_session(max_workers)

    courses = list(catalog.values())
    logger.info("Fetching detail pages for %d courses (%d workers)", len(courses), max_workers)

    def _fetch(course: CourseRef) -> List[SectionRecord]:
        return fetch_course_sections(session, course, term, clock)

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        per_course = list(executor.map(_fetch, courses))

    sections = list(itertools.chain.from_iterable(per_course))
    empty = sum(1 for s in per_course if not s)
    logger.info("Fetched %d sections (%d courses contributed none)", len(sections), empty)
    return sections
