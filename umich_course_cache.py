"""
umich_course_cache.py

Read side of the course tracker's cached tables.

Both tables live next to the published overview in the stash bucket and are
fetched over plain HTTPS:

  - cache-courses.csv  (course, suffix, title)  -> the course catalog
  - overview.csv       (previous run's output)  -> capacity hints

The catalog is required; the job cannot enumerate courses without it. The
previous overview is optional and only ever raises a course's capacity.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import pandas as pd
import requests
from requests.adapters import HTTPAdapter

from umich_tracker_config import (
    CACHE_BASE_URL,
    CATALOG_FILE,
    MAX_CONCURRENT_FETCHES,
    OVERVIEW_FILE,
    REQUEST_TIMEOUT,
    USER_AGENT,
)

logger = logging.getLogger(__name__)


class TrackerError(RuntimeError):
    """Base error for the course tracker job."""


class CatalogUnavailableError(TrackerError):
    """The cached course catalog could not be read; nothing to fetch."""


@dataclass(frozen=True)
class CourseRef:
    id: str
    suffix: str
    title: str


# ---------- HTTP HELPERS ----------

def make_session(pool_size: int = MAX_CONCURRENT_FETCHES) -> requests.Session:
    """Session whose connection pool is large enough for every fetch worker."""
    session = requests.Session()
    adapter = HTTPAdapter(pool_connections=pool_size, pool_maxsize=pool_size)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    session.headers.update({"User-Agent": USER_AGENT})
    return session


def fetch_cached_table(session: requests.Session, name: str) -> Optional[str]:
    """Return the CSV text of a cached table, or None on a non-success status."""
    url = f"{CACHE_BASE_URL}/{name}"
    resp = session.get(url, timeout=REQUEST_TIMEOUT)
    if not resp.ok:
        logger.info("Cached table %s unavailable (status=%s)", name, resp.status_code)
        return None
    return resp.text


# ---------- PARSING ----------

def safe_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        s = str(value).strip()
        if not s:
            return None
        return int(float(s))
    except (TypeError, ValueError, OverflowError):
        return None


def parse_catalog(text: str) -> Dict[str, CourseRef]:
    """
    Parse cache-courses.csv into {course id: CourseRef}.

    Every column is read as text: suffixes such as "001" must keep their
    leading zeros, and an empty title stays an empty string.
    """
    df = pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False)
    missing = {"course", "suffix", "title"} - set(df.columns)
    if missing:
        raise TrackerError(f"Course catalog is missing columns: {sorted(missing)}")

    catalog: Dict[str, CourseRef] = {}
    for rec in df.to_dict("records"):
        course_id = rec["course"].strip()
        if not course_id:
            continue
        catalog[course_id] = CourseRef(
            id=course_id,
            suffix=rec["suffix"].strip(),
            title=rec["title"].strip(),
        )
    return catalog


def parse_capacity_hints(text: str) -> Dict[str, int]:
    """
    Parse a previous overview.csv into {course id: capacity}.

    The overview stores the course number as an integer (98, not "098"), so
    the id is rebuilt with the number padded back to three digits.
    """
    try:
        df = pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False)
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as e:
        logger.warning("Previous overview is unreadable (%s); ignoring hints", e)
        return {}

    if not {"department", "number", "capacity"} <= set(df.columns):
        logger.warning("Previous overview has unexpected columns %s; ignoring hints", list(df.columns))
        return {}

    hints: Dict[str, int] = {}
    for rec in df.to_dict("records"):
        number = safe_int(rec["number"])
        capacity = safe_int(rec["capacity"])
        if number is None or capacity is None:
            continue
        hints[f"{rec['department']}{number:03d}"] = capacity
    return hints


# ---------- LOADERS ----------

def load_catalog(session: requests.Session) -> Optional[Dict[str, CourseRef]]:
    """Known courses for the term, or None when the cache is unreachable."""
    text = fetch_cached_table(session, CATALOG_FILE)
    if text is None:
        return None
    catalog = parse_catalog(text)
    logger.info("Loaded %d courses from %s", len(catalog), CATALOG_FILE)
    return catalog


def load_capacity_hints(session: requests.Session) -> Optional[Dict[str, int]]:
    """Capacities from the previous overview, or None when there is none."""
    text = fetch_cached_table(session, OVERVIEW_FILE)
    if text is None:
        return None
    hints = parse_capacity_hints(text)
    logger.info("Loaded %d capacity hints from %s", len(hints), OVERVIEW_FILE)
    return hints
