"""imdb_chart_fetcher.py

Print one IMDb chart as a JSON array of movies: title, release year, rating,
and the summary, duration and genre read from each title's own page.

Run:
  python imdb_chart_fetcher.py 'https://www.imdb.com/india/top-rated-indian-movies' 10

Only the charts in `CHART_URLS` are accepted. Logs go to stderr, the JSON line
to stdout.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from chart_fetcher import CHART_URLS, REQUEST_TIMEOUT, ChartError, ChartFetcher

logger = logging.getLogger("imdb-chart-fetcher")


def positive_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}")
    if n < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer: {value!r}")
    return n


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="imdb-chart-fetcher",
        description="Fetch an IMDb chart and print its movies as JSON",
    )
    p.add_argument("chart_url", choices=CHART_URLS, metavar="chart_url",
                   help="One of: " + ", ".join(CHART_URLS))
    p.add_argument("items_count", type=positive_int, help="How many movies to fetch")
    p.add_argument(
        "--timeout",
        type=float,
        default=REQUEST_TIMEOUT,
        help=f"Seconds to wait for each page, 0 waits forever (default {REQUEST_TIMEOUT:g})",
    )
    p.add_argument(
        "--workers",
        type=positive_int,
        default=None,
        help="Cap on parallel workers per stage (default: one per task)",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    fetcher = ChartFetcher(timeout=args.timeout or None, max_workers=args.workers)
    try:
        out = fetcher.fetch_json(args.chart_url, args.items_count)
    except ChartError as e:
        logger.error("%s", e)
        return 1

    print(out)
    return 0


if __name__ == "__main__":
    sys.exit(main())
