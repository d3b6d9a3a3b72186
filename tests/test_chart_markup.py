"""Tests for the marker-based extractors in chart_markup."""

import warnings

from chart_markup import (
    IMDB_LAYOUT,
    between,
    between_last,
    after_last,
    html_to_text,
    split_labels,
)
from tests.pages import chart_page, chart_row, detail_page, plot_page, truncated_summary


class TestPrimitives:
    def test_between_trims(self):
        assert between("<b>  bold </b>", "<b>", "</b>") == "bold"

    def test_between_uses_first_end_after_start(self):
        assert between("x</b><b>one</b>two</b>", "<b>", "</b>") == "one"

    def test_between_missing_markers(self):
        assert between("<b>open", "<b>", "</b>") == ""
        assert between("close</b>", "<b>", "</b>") == ""
        assert between("", "<b>", "</b>") == ""

    def test_between_last(self):
        assert between_last("<i>a</i>b</i>", "<i>", "</i>") == "a</i>b"
        assert between_last("no markers", "<i>", "</i>") == ""

    def test_after_last(self):
        assert after_last('<a href="x">Drama', ">") == "Drama"
        assert after_last("plain", ">") == ""

    def test_split_labels_drops_empty_segments(self):
        region = '\n<a href="/g?drama">Drama</a>,\n<a href="/g?war">War</a>\n<a href="/g"></a>\n'
        assert split_labels(region, "</a>") == ["Drama", "War"]

    def test_html_to_text(self):
        assert html_to_text("  Tom &amp; Jerry <i>meet</i>\n again ") == "Tom & Jerry meet again"
        assert html_to_text("") == ""

    def test_html_to_text_url_like_fragment_is_quiet(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            assert html_to_text(" http://x.y ") == "http://x.y"
            assert html_to_text("index.html") == "index.html"

    def test_extraction_is_repeatable(self):
        page = detail_page("Same input, same output.")
        first = (IMDB_LAYOUT.summary(page), IMDB_LAYOUT.duration(page), IMDB_LAYOUT.genre(page))
        second = (IMDB_LAYOUT.summary(page), IMDB_LAYOUT.duration(page), IMDB_LAYOUT.genre(page))
        assert first == second


class TestChartPage:
    def setup_method(self):
        self.rows = [
            chart_row(1, "tt0000001", "Movie A", "2010", "8.5"),
            chart_row(2, "tt0000002", "Tom &amp; Jerry", "1999", "9.1"),
        ]
        self.page = chart_page(self.rows)

    def test_chart_table_keeps_closing_tag(self):
        table = IMDB_LAYOUT.chart_table(self.page)
        assert table.startswith("<table")
        assert table.endswith("</table>")

    def test_chart_table_missing(self):
        assert IMDB_LAYOUT.chart_table("<html><body>nothing</body></html>") == ""

    def test_row_fragments_skip_header(self):
        rows = IMDB_LAYOUT.row_fragments(IMDB_LAYOUT.chart_table(self.page))
        assert len(rows) == 2
        assert "Movie A" in rows[0]
        assert "Tom &amp; Jerry" in rows[1]

    def test_row_fields(self):
        row = IMDB_LAYOUT.row_fragments(IMDB_LAYOUT.chart_table(self.page))[1]
        cell = IMDB_LAYOUT.title_cell(row)
        assert IMDB_LAYOUT.detail_href(cell) == "/title/tt0000002/"
        assert IMDB_LAYOUT.title(cell) == "Tom & Jerry"
        assert IMDB_LAYOUT.release_year(cell) == "1999"
        assert IMDB_LAYOUT.rating(row) == "9.1"

    def test_malformed_year_text_is_returned_as_is(self):
        cell = IMDB_LAYOUT.title_cell(chart_row(1, "tt1", "X", "20X0", "7.0"))
        assert IMDB_LAYOUT.release_year(cell) == "20X0"

    def test_row_without_cells(self):
        row = "<tr><td>spacer</td></tr>"
        assert IMDB_LAYOUT.title_cell(row) == ""
        assert IMDB_LAYOUT.rating(row) == ""


class TestDetailPage:
    def test_duration_and_genre(self):
        page = detail_page("Plot.", duration="2h 28min", genres=("Action", "Adventure", "Sci-Fi"))
        assert IMDB_LAYOUT.duration(page) == "2h 28min"
        assert IMDB_LAYOUT.genre(page) == "Action, Adventure, Sci-Fi"

    def test_single_genre(self):
        assert IMDB_LAYOUT.genre(detail_page("Plot.", genres=("Drama",))) == "Drama"

    def test_summary_without_read_more(self):
        page = detail_page("A thief who steals secrets.")
        summary = IMDB_LAYOUT.summary(page)
        assert summary == "A thief who steals secrets."
        assert IMDB_LAYOUT.read_more_href(summary) == ""

    def test_truncated_summary_link(self):
        page = detail_page(truncated_summary("tt0000002", "A hacker learns"))
        summary = IMDB_LAYOUT.summary(page)
        assert IMDB_LAYOUT.read_more_href(summary) == "/title/tt0000002/plotsummary?ref_=tt_ov_pl"

    def test_full_summary_paragraph(self):
        page = plot_page("The whole story &amp; more.")
        assert IMDB_LAYOUT.full_summary(page) == "The whole story & more."

    def test_missing_markers_give_empty_fields(self):
        page = "<html><body><h1>404 Not Found</h1></body></html>"
        assert IMDB_LAYOUT.duration(page) == ""
        assert IMDB_LAYOUT.genre(page) == ""
        assert IMDB_LAYOUT.summary(page) == ""
        assert IMDB_LAYOUT.full_summary(page) == ""
