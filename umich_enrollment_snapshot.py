"""
umich_enrollment_snapshot.py

Hourly LSA course tracker snapshot.

Steps:
  1. Load the cached course catalog (abort if it is unavailable).
  2. Fetch every course's detail page, 25 at a time, and extract sections.
  3. Load the previous overview for capacity hints (optional).
  4. Aggregate sections into one overview row per course.
  5. Publish overview.csv, then stubs/stub-<hour>.csv.

Nothing is published unless every step before it succeeded.

Run with:
    python umich_enrollment_snapshot.py
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import requests

from umich_course_cache import (
    CatalogUnavailableError,
    load_capacity_hints,
    load_catalog,
    make_session,
)
from umich_overview_aggregate import aggregate_sections, overview_frame, stub_frame
from umich_section_scraper import Clock, fetch_all_sections, rounded_hour_iso, utc_now
from umich_snapshot_store import LocalSnapshotStore, S3SnapshotStore, publish_snapshot
from umich_tracker_config import (
    BUCKET,
    MAX_CONCURRENT_FETCHES,
    OUTPUT_DIR,
    PREFIX,
    REGION,
    TERM,
)
from umich_tracker_logging import setup_logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SnapshotResult:
    courses: int
    sections: int
    summaries: int
    overview_key: str
    stub_key: str


def default_store():
    if OUTPUT_DIR is not None:
        return LocalSnapshotStore(OUTPUT_DIR, PREFIX)
    return S3SnapshotStore(BUCKET, PREFIX, REGION)


def run_snapshot(
    term: str = TERM,
    session: Optional[requests.Session] = None,
    store=None,
    clock: Clock = utc_now,
) -> SnapshotResult:
    if session is None:
        session = make_session(MAX_CONCURRENT_FETCHES)

    catalog = load_catalog(session)
    if catalog is None:
        raise CatalogUnavailableError(
            "Course catalog cache is unavailable; aborting before any detail fetch."
        )

    sections = fetch_all_sections(catalog, term, session=session, clock=clock)

    hints = load_capacity_hints(session)
    if hints is None:
        logger.info("No previous overview; capacity falls back to open seats.")
        hints = {}

    summaries = aggregate_sections(sections, hints)
    fetched = len({s.course_id for s in sections})
    logger.info(
        "Aggregated %d courses (%d with no countable section, %d with no sections at all)",
        len(summaries), fetched - len(summaries), len(catalog) - fetched,
    )

    if store is None:
        store = default_store()
    overview_key, stub_key = publish_snapshot(
        store,
        overview_frame(summaries),
        stub_frame(sections),
        stamp=rounded_hour_iso(clock()),
    )

    return SnapshotResult(
        courses=len(catalog),
        sections=len(sections),
        summaries=len(summaries),
        overview_key=overview_key,
        stub_key=stub_key,
    )


# ---------- MAIN ----------

def main() -> None:
    setup_logging()
    logger.info("Starting course tracker snapshot for term %s", TERM)
    result = run_snapshot()
    logger.info(
        "Done: %d courses, %d sections, %d overview rows -> %s, %s",
        result.courses, result.sections, result.summaries,
        result.overview_key, result.stub_key,
    )


if __name__ == "__main__":
    main()
