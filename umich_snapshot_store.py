"""
umich_snapshot_store.py

Write the two CSV tables a run produces:

  {prefix}/overview.csv               overwritten every run, CDN-cacheable
  {prefix}/stubs/stub-{hour}.csv      new object per run, never cached

S3SnapshotStore is what the scheduled job uses. LocalSnapshotStore mirrors
the same key layout under a directory for local runs.
"""

from __future__ import annotations

import logging
import pathlib
from typing import Any, Optional, Tuple

import boto3
import pandas as pd

from umich_tracker_config import (
    CSV_CONTENT_TYPE,
    OVERVIEW_CACHE_CONTROL,
    OVERVIEW_FILE,
    STUB_DIR,
)

logger = logging.getLogger(__name__)


def to_csv_text(frame: pd.DataFrame) -> str:
    return frame.to_csv(index=False, lineterminator="\n")


class S3SnapshotStore:
    def __init__(self, bucket: str, prefix: str, region: str, client: Any = None) -> None:
        self.bucket = bucket
        self.prefix = prefix.strip("/")
        self.client = client if client is not None else boto3.client("s3", region_name=region)

    def key_for(self, name: str) -> str:
        return f"{self.prefix}/{name}"

    def put_csv(self, name: str, frame: pd.DataFrame, cache_control: Optional[str] = None) -> str:
        key = self.key_for(name)
        params = {
            "Bucket": self.bucket,
            "Key": key,
            "Body": to_csv_text(frame).encode("utf-8"),
            "ContentType": CSV_CONTENT_TYPE,
        }
        if cache_control:
            params["CacheControl"] = cache_control
        self.client.put_object(**params)
        logger.info("Wrote s3://%s/%s (%d rows)", self.bucket, key, len(frame))
        return key


class LocalSnapshotStore:
    """
    Same key layout as S3, under a directory. Stub names carry the ISO hour
    (stub-2023-01-15T14:00:00.000Z.csv); the colons are fine on Linux and
    macOS but not valid in Windows filenames.
    """

    def __init__(self, root: pathlib.Path, prefix: str) -> None:
        self.root = pathlib.Path(root)
        self.prefix = prefix.strip("/")

    def key_for(self, name: str) -> str:
        return f"{self.prefix}/{name}"

    def put_csv(self, name: str, frame: pd.DataFrame, cache_control: Optional[str] = None) -> str:
        # No HTTP layer in front of a directory, so cache_control has nowhere to go.
        key = self.key_for(name)
        path = self.root / key
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(to_csv_text(frame), encoding="utf-8")
        logger.info("Wrote %s (%d rows)", path, len(frame))
        return key


def stub_name(stamp: str) -> str:
    return f"{STUB_DIR}/stub-{stamp}.csv"


def publish_snapshot(store, overview: pd.DataFrame, stub: pd.DataFrame, stamp: str) -> Tuple[str, str]:
    """Overview first, then the run's stub. Returns the two keys written."""
    overview_key = store.put_csv(OVERVIEW_FILE, overview, cache_control=OVERVIEW_CACHE_CONTROL)
    stub_key = store.put_csv(stub_name(stamp), stub)
    return overview_key, stub_key
