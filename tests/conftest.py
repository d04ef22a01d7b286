from __future__ import annotations

import datetime as dt
import threading
import time
from typing import Callable, Dict, List, Optional

import pytest
import requests

from umich_tracker_config import CACHE_BASE_URL, DETAIL_URL


class FakeResponse:
    def __init__(self, status_code: int = 200, text: str = "", url: str = "") -> None:
        self.status_code = status_code
        self.text = text
        self.url = url

    @property
    def ok(self) -> bool:
        return self.status_code < 400


class FakeSession:
    """
    Stand-in for requests.Session.

    Cached tables are served from `tables`, detail pages from `pages` keyed by
    the `content` query parameter. Unknown detail pages answer 404. A content
    key listed in `explode` raises a ConnectionError instead.
    """

    def __init__(
        self,
        tables: Optional[Dict[str, FakeResponse]] = None,
        pages: Optional[Dict[str, str]] = None,
        explode: Optional[set] = None,
        delay: float = 0.0,
    ) -> None:
        self.tables = tables or {}
        self.pages = pages or {}
        self.explode = explode or set()
        self.delay = delay
        self.calls: List[tuple] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def get(self, url, params=None, timeout=None):
        with self._lock:
            self.calls.append((url, dict(params or {}), timeout))
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                time.sleep(self.delay)
            return self._respond(url, params or {})
        finally:
            with self._lock:
                self.in_flight -= 1

    def _respond(self, url, params):
        if url == DETAIL_URL:
            content = params.get("content")
            if content in self.explode:
                raise requests.ConnectionError(f"connection reset for {content}")
            if content in self.pages:
                return FakeResponse(200, self.pages[content], url)
            return FakeResponse(404, "Not Found", url)

        name = url[len(CACHE_BASE_URL) + 1:] if url.startswith(CACHE_BASE_URL) else url
        return self.tables.get(name, FakeResponse(403, "AccessDenied", url))

    def detail_calls(self) -> List[dict]:
        return [params for url, params, _ in self.calls if url == DETAIL_URL]


def section_row(**columns: str) -> str:
    cols = "".join(
        f'<div class="col-md-1">{label.replace("_", " ")}: {value}</div>'
        for label, value in columns.items()
    )
    return f'<div class="row clsschedulerow"><div class="row">{cols}</div></div>'


def detail_page(*rows: str) -> str:
    return f"<html><body><div class='container'>{''.join(rows)}</div></body></html>"


FIXED_NOW = dt.datetime(2023, 1, 15, 14, 20, tzinfo=dt.timezone.utc)


@pytest.fixture
def fixed_clock() -> Callable[[], dt.datetime]:
    return lambda: FIXED_NOW


@pytest.fixture
def eecs485_page() -> str:
    return detail_page(
        section_row(Section="LEC001", Instruction_Mode="In Person", Class_No="12345",
                    Enroll_Stat="Open", Open_Seats="5", Wait_List="3"),
        section_row(Section="DIS201", Instruction_Mode="In Person", Class_No="12346",
                    Enroll_Stat="Open", Open_Seats="10", Wait_List="4"),
        section_row(Section="IND401", Instruction_Mode="Online", Class_No="12347",
                    Enroll_Stat="Open", Open_Seats="2", Wait_List="-"),
    )
