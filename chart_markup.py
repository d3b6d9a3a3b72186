"""chart_markup.py

Marker-based field extraction for the IMDb chart and title pages.

The chart fetcher does not parse the documents into a tree. It slices the raw
markup between fixed markers, which is fast and good enough for the one
markup shape it targets. Every marker lives on `ChartLayout`, so a change on
the site means a new layout instance rather than edits across the crawler.

All helpers here are pure: a missing marker yields "" (or an empty list),
never an exception. Callers treat "" as "field unavailable".
"""

from __future__ import annotations

import re
import warnings
from dataclasses import dataclass
from typing import List

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning

# extracted titles can look like URLs or file names
warnings.filterwarnings("ignore", category=MarkupResemblesLocatorWarning)


def between(doc: str, start: str, end: str) -> str:
    """Text between the first `start` and the first `end` after it."""
    i = doc.find(start)
    if i == -1:
        return ""
    i += len(start)
    j = doc.find(end, i)
    if j == -1:
        return ""
    return doc[i:j].strip()


def between_last(doc: str, start: str, end: str) -> str:
    """Text between the first `start` and the last `end` after it."""
    i = doc.find(start)
    if i == -1:
        return ""
    i += len(start)
    j = doc.rfind(end, i)
    if j == -1:
        return ""
    return doc[i:j].strip()


def after_last(doc: str, marker: str) -> str:
    i = doc.rfind(marker)
    if i == -1:
        return ""
    return doc[i + len(marker):]


def split_labels(region: str, delimiter: str) -> List[str]:
    """Split `region` on `delimiter` and keep the label closing each segment.

    A segment like '\\n<a href="/search/title?genres=drama">Drama' yields
    "Drama". Segments without a '>' (trailing whitespace, commas) and empty
    labels are dropped.
    """
    labels: List[str] = []
    for segment in region.split(delimiter):
        if ">" not in segment:
            continue
        label = after_last(segment, ">").strip()
        if label:
            labels.append(label)
    return labels


def html_to_text(fragment: str) -> str:
    """Decode entities, drop inline tags and collapse whitespace."""
    if not fragment:
        return ""
    if "<" not in fragment and "&" not in fragment:
        return " ".join(fragment.split())
    text = BeautifulSoup(fragment, "html.parser").get_text()
    return " ".join(text.split())


@dataclass(frozen=True)
class ChartLayout:
    """Markers describing the chart table and the title detail page."""

    table_open: str = "<table"
    table_close: str = "</table>"
    row_boundary: str = r"<tr>*"
    header_fragments: int = 2

    title_cell_open: str = '<td class="titleColumn">'
    rating_cell_open: str = '<td class="ratingColumn imdbRating">'
    cell_close: str = "</td>"
    link_open: str = '<a href="'
    link_close: str = "</a>"
    year_open: str = '<span class="secondaryInfo">'
    year_close: str = "</span>"
    rating_close: str = "</strong>"

    summary_open: str = '<div class="summary_text">'
    summary_close: str = "</div>"
    duration_close: str = "</time>"
    field_separator: str = '<span class="ghost">|</span>'
    paragraph_open: str = "<p>"
    paragraph_close: str = "</p>"

    genre_separator: str = ", "

    # ---- chart page ----
    def chart_table(self, page: str) -> str:
        """The chart table including its closing tag, or "" when absent."""
        i = page.find(self.table_open)
        if i == -1:
            return ""
        j = page.find(self.table_close, i)
        if j == -1:
            return ""
        return page[i:j + len(self.table_close)]

    def row_fragments(self, table: str) -> List[str]:
        fragments = re.split(self.row_boundary, table)
        return fragments[self.header_fragments:]

    def title_cell(self, row: str) -> str:
        return between(row, self.title_cell_open, self.cell_close)

    def detail_href(self, cell: str) -> str:
        return between(cell, self.link_open, '"')

    def title(self, cell: str) -> str:
        # the first '>' closes the title anchor's opening tag
        return html_to_text(between_last(cell, ">", self.link_close))

    def release_year(self, cell: str) -> str:
        text = between_last(cell, self.year_open, self.year_close)
        if len(text) >= 2 and text[0] == "(" and text[-1] == ")":
            text = text[1:-1]
        return text

    def rating(self, row: str) -> str:
        cell = between(row, self.rating_cell_open, self.cell_close)
        return between_last(cell, ">", self.rating_close)

    # ---- title detail page ----
    def duration(self, page: str) -> str:
        end = page.find(self.duration_close)
        if end == -1:
            return ""
        return html_to_text(after_last(page[:end], ">"))

    def summary(self, page: str) -> str:
        """Raw summary markup; may still hold a "read more" anchor."""
        return between(page, self.summary_open, self.summary_close)

    def read_more_href(self, summary: str) -> str:
        return between(summary, self.link_open, '"')

    def full_summary(self, page: str) -> str:
        return html_to_text(between(page, self.paragraph_open, self.paragraph_close))

    def genre(self, page: str) -> str:
        end = page.find(self.duration_close)
        if end == -1:
            return ""
        region = between(page[end:], self.field_separator, self.field_separator)
        return self.genre_separator.join(split_labels(region, self.link_close))


IMDB_LAYOUT = ChartLayout()
