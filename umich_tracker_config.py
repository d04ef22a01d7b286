"""
umich_tracker_config.py

Settings for the LSA course tracker snapshot job.

Everything here is a plain module constant. The handful that differ between
deployments (term, bucket, output location) can be overridden with
COURSE_TRACKER_* environment variables so the scheduler never needs flags.
"""

import os
import pathlib
from typing import Optional


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


# ---------- TERM ----------

# Term slug used by the LSA course guide. The last "_" component (2420) is the
# numeric prefix of the detail page's `content` query parameter.
TERM = os.getenv("COURSE_TRACKER_TERM", "w_23_2420")

# ---------- STORAGE ----------

BUCKET = os.getenv("COURSE_TRACKER_BUCKET", "stash.michigandaily.com")
PREFIX = os.getenv("COURSE_TRACKER_PREFIX", "course-tracker/winter-2023")
REGION = os.getenv("COURSE_TRACKER_REGION", "us-east-2")

# Public read location of the cached catalog and the previous overview.
CACHE_BASE_URL = f"https://{BUCKET}/{PREFIX}"

CATALOG_FILE = "cache-courses.csv"
OVERVIEW_FILE = "overview.csv"
STUB_DIR = "stubs"

# The dashboard fetches the overview through a CDN; stubs are never cached.
OVERVIEW_CACHE_CONTROL = "s-maxage=3500"
CSV_CONTENT_TYPE = "text/csv"

# When set, publish into this directory instead of S3 (local runs).
_output_dir = os.getenv("COURSE_TRACKER_OUTPUT_DIR")
OUTPUT_DIR: Optional[pathlib.Path] = pathlib.Path(_output_dir) if _output_dir else None

# ---------- HTTP ----------

DETAIL_URL = "https://www.lsa.umich.edu/cg/cg_detail.aspx"

MAX_CONCURRENT_FETCHES = 25
REQUEST_TIMEOUT = _env_int("COURSE_TRACKER_TIMEOUT", 60)

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/605.1.15 (KHTML, like Gecko) "
    "Version/17.1 Safari/605.1.15"
)

# ---------- AGGREGATION ----------

# A section counts toward availability if its label contains one of these.
COUNTABLE_MARKERS = ("LEC", "SEM", "REC", "IND")

# The course guide prints "-" when a section has no wait list.
WAITLIST_SENTINEL = "-"

STUDY_ABROAD_MARKER = "STDABRD"

UNDERGRAD_CUTOFF = 500

# ---------- LOGGING ----------

LOG_LEVEL = os.getenv("COURSE_TRACKER_LOG_LEVEL", "INFO")
