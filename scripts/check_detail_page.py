#!/usr/bin/env python3
"""Crawl a few live title pages and print what the extractor finds.

Handy for spotting markup drift on imdb.com; not part of the test suite.
Needs the project installed (pip install -e .).

  python scripts/check_detail_page.py [title_url ...]
"""
import logging
import sys

from chart_fetcher import ChartFetcher

URLS = [
    "https://www.imdb.com/title/tt0111161/",  # The Shawshank Redemption
    "https://www.imdb.com/title/tt7838252/",  # K.G.F: Chapter 1
    "https://www.imdb.com/title/tt8108198/",  # Andhadhun
]

def show(fetcher, url):
    detail, warnings = fetcher.crawl_details(url)
    print(url)
    print("  duration:", detail.duration or "-")
    print("  genre:   ", detail.genre or "-")
    print("  summary: ", (detail.summary[:100] + "...") if len(detail.summary) > 100 else detail.summary or "-")
    for w in warnings:
        print("  warning: ", w)

if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    fetcher = ChartFetcher()
    for u in sys.argv[1:] or URLS:
        show(fetcher, u)
