"""chart_fetcher.py

Fetch an IMDb chart page and enrich every ranked row with details from its
title page.

Design notes
- The chart page is fetched once and split into row fragments.
- Each row gets two workers: one reads title/year and waits for the title
  page crawl, the other reads the rating. Both write into the same
  pre-allocated `ChartRecord`, but never the same attribute, so the batch
  needs no lock and keeps chart order whatever finishes first.
- Title page crawls run on their own pool, and "read more" summary fetches on
  a third one. A task only ever waits on a task of a lower pool, so bounding
  the pools (`max_workers`) cannot deadlock the batch.
- Per-row failures are soft: they are logged, collected as warnings and leave
  the affected fields zero-valued. Only a failed chart page, a page without a
  chart table, or unserialisable output is fatal (`ChartError`).
"""

from __future__ import annotations

import concurrent.futures
import json
import logging
import math
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
from urllib.parse import urljoin

import requests

from chart_markup import IMDB_LAYOUT, ChartLayout, html_to_text

logger = logging.getLogger("imdb-chart-fetcher")

IMDB_BASE_URL = "https://www.imdb.com"
CHART_URL_INDIAN = "https://www.imdb.com/india/top-rated-indian-movies"
CHART_URL_TAMIL = "https://www.imdb.com/india/top-rated-tamil-movies"
CHART_URL_TELUGU = "https://www.imdb.com/india/top-rated-telugu-movies"
CHART_URLS = (CHART_URL_INDIAN, CHART_URL_TAMIL, CHART_URL_TELUGU)

USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
REQUEST_TIMEOUT = 10.0  # seconds per GET; None waits forever


class ChartError(Exception):
    """A failure that prevents producing the chart at all."""


class ChartFetchError(ChartError):
    pass


class ChartLayoutError(ChartError):
    pass


class ChartSerializationError(ChartError):
    pass


@dataclass
class MovieDetail:
    summary: str = ""
    duration: str = ""
    genre: str = ""


@dataclass
class ChartRecord:
    """One ranked movie.

    title/release_year come from the chart row, rating from the rating cell,
    summary/duration/genre from the title page. Any of them stays zero-valued
    when its own extraction failed.
    """
    title: str = ""
    release_year: int = 0
    summary: str = ""
    duration: str = ""
    genre: str = ""
    rating: float = 0.0

    def to_dict(self) -> Dict:
        return {
            "title": self.title,
            "movie_release_year": self.release_year,
            "summary": self.summary,
            "duration": self.duration,
            "genre": self.genre,
            "imdb_rating": self.rating,
        }


@dataclass
class ChartBatch:
    url: str
    requested: int
    available: int
    records: List[ChartRecord] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_json(self) -> str:
        try:
            return json.dumps(
                [r.to_dict() for r in self.records],
                ensure_ascii=False,
                allow_nan=False,
                separators=(",", ":"),
            )
        except (TypeError, ValueError) as e:
            raise ChartSerializationError(f"Unable to serialise chart records: {e}") from e


@dataclass
class PageResult:
    url: str
    status: Optional[int] = None
    body: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def build_session() -> requests.Session:
    session = requests.Session()
    session.headers.update({"User-Agent": USER_AGENT})
    return session


def parse_release_year(text: str) -> Optional[int]:
    """Unsigned integer year, or None for anything else ("", "-1", "20X0")."""
    text = text.strip()
    if not re.fullmatch(r"[0-9]+", text):
        return None
    return int(text)


def parse_rating(text: str) -> Optional[float]:
    try:
        value = float(text.strip())
    except ValueError:
        return None
    # JSON has no NaN/Infinity
    if not math.isfinite(value):
        return None
    return value


def _warn(warnings: List[str], message: str) -> None:
    logger.warning(message)
    warnings.append(message)


class ChartFetcher:
    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = REQUEST_TIMEOUT,
        max_workers: Optional[int] = None,
        layout: ChartLayout = IMDB_LAYOUT,
        base_url: str = IMDB_BASE_URL,
    ):
        self.session = session or build_session()
        self.timeout = timeout
        self.max_workers = max_workers
        self.layout = layout
        self.base_url = base_url

    def get_page(self, url: str) -> PageResult:
        """GET `url`; transport errors and non-2xx statuses are reported, not raised."""
        logger.debug("GET %s", url)
        try:
            resp = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            return PageResult(url, error=f"GET {url} failed: {e}")
        if not 200 <= resp.status_code < 300:
            return PageResult(
                url, resp.status_code, resp.text,
                f"GET {url} returned HTTP {resp.status_code}",
            )
        return PageResult(url, resp.status_code, resp.text)

    # ---- title page crawl ----
    def fetch_full_summary(self, url: str) -> Tuple[str, List[str]]:
        warnings: List[str] = []
        page = self.get_page(url)
        if not page.ok:
            _warn(warnings, f"Full summary unavailable: {page.error}")
        # as with the title page, a non-2xx body is still parsed
        return self.layout.full_summary(page.body), warnings

    def _crawl_details(
        self, url: str, summary_pool: concurrent.futures.Executor
    ) -> Tuple[MovieDetail, List[str]]:
        warnings: List[str] = []
        page = self.get_page(url)
        if not page.ok:
            _warn(warnings, f"Title page unavailable: {page.error}")
        # a non-2xx body is still parsed; whatever is missing stays ""
        body = page.body

        detail = MovieDetail(duration=self.layout.duration(body))
        summary = self.layout.summary(body)
        more = self.layout.read_more_href(summary)
        pending = None
        if more:
            # truncated summary; its full text lives on a separate page
            pending = summary_pool.submit(self.fetch_full_summary, urljoin(self.base_url, more))

        detail.genre = self.layout.genre(body)

        if pending is not None:
            detail.summary, extra = pending.result()
            warnings.extend(extra)
        else:
            detail.summary = html_to_text(summary)
        return detail, warnings

    def crawl_details(self, url: str) -> Tuple[MovieDetail, List[str]]:
        """Crawl a single title page outside of a batch."""
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as summary_pool:
            return self._crawl_details(url, summary_pool)

    # ---- per-row workers ----
    def process_row(
        self,
        position: int,
        row: str,
        record: ChartRecord,
        crawl_pool: concurrent.futures.Executor,
        summary_pool: concurrent.futures.Executor,
    ) -> List[str]:
        """Fill title, release year and title-page details of `record`."""
        warnings: List[str] = []
        cell = self.layout.title_cell(row)
        if not cell:
            _warn(warnings, f"Row {position}: no title cell")
            return warnings

        pending = None
        href = self.layout.detail_href(cell)
        if href:
            pending = crawl_pool.submit(
                self._crawl_details, urljoin(self.base_url, href), summary_pool
            )
        else:
            _warn(warnings, f"Row {position}: no title page link")

        record.title = self.layout.title(cell)

        year = parse_release_year(self.layout.release_year(cell))
        if year is None:
            _warn(warnings, f"Row {position}: could not obtain release year for {record.title!r}")
            year = 0
        record.release_year = year

        if pending is not None:
            detail, extra = pending.result()
            record.summary = detail.summary
            record.duration = detail.duration
            record.genre = detail.genre
            warnings.extend(extra)
        return warnings

    def process_rating(self, position: int, row: str, record: ChartRecord) -> List[str]:
        warnings: List[str] = []
        rating = parse_rating(self.layout.rating(row))
        if rating is None:
            _warn(warnings, f"Row {position}: could not obtain rating")
            rating = 0.0
        record.rating = rating
        return warnings

    # ---- batch ----
    def _pool(self, tasks: int, name: str) -> concurrent.futures.ThreadPoolExecutor:
        return concurrent.futures.ThreadPoolExecutor(
            max_workers=self.max_workers or tasks, thread_name_prefix=name
        )

    def process_rows(self, rows: List[str]) -> Tuple[List[ChartRecord], List[str]]:
        """Enrich every row concurrently; records come back in row order."""
        records = [ChartRecord() for _ in rows]
        if not rows:
            return records, []

        n = len(rows)
        units = []
        with self._pool(2 * n, "chart-row") as row_pool, \
                self._pool(n, "chart-crawl") as crawl_pool, \
                self._pool(n, "chart-summary") as summary_pool:
            for i, (row, record) in enumerate(zip(rows, records)):
                position = i + 1
                units.append((position, row_pool.submit(
                    self.process_row, position, row, record, crawl_pool, summary_pool)))
                units.append((position, row_pool.submit(
                    self.process_rating, position, row, record)))
            concurrent.futures.wait([f for _, f in units])

        warnings: List[str] = []
        for position, future in units:
            exc = future.exception()
            if exc is not None:
                message = f"Row {position}: worker failed: {exc!r}"
                logger.error(message, exc_info=exc)
                warnings.append(message)
                continue
            warnings.extend(future.result())
        return records, warnings

    def fetch(self, url: str, items_count: int) -> ChartBatch:
        if items_count < 1:
            raise ValueError(f"items_count must be positive, got {items_count}")
        page = self.get_page(url)
        if not page.ok:
            raise ChartFetchError(page.error)

        table = self.layout.chart_table(page.body)
        if not table:
            raise ChartLayoutError(f"No chart table found on {url}")
        rows = self.layout.row_fragments(table)

        count = items_count
        if count > len(rows):
            logger.warning("Only %d records available (requested %d)", len(rows), items_count)
            count = len(rows)

        batch = ChartBatch(url=url, requested=items_count, available=len(rows))
        batch.records, batch.warnings = self.process_rows(rows[:count])
        logger.info(
            "Fetched %d chart records from %s (%d warnings)",
            len(batch.records), url, len(batch.warnings),
        )
        return batch

    def fetch_json(self, url: str, items_count: int) -> str:
        return self.fetch(url, items_count).to_json()
