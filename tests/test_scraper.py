"""Tests for the scraper: fetch, node selection and content extraction.

Mocking strategy:
- ``respx`` patches ``httpx`` at the transport layer so no real network calls
  are made during ``fetch_document`` tests.
- Selector and extractor tests run against ``parse_document`` on inline HTML.
"""

from __future__ import annotations

import httpx
import pytest
import respx

from tidyscrape.scraper.errors import (
    FetchError,
    MissingColumnError,
    ParseError,
    SelectorSyntaxError,
)
from tidyscrape.scraper.extractor import extract_table, extract_text, rendered_text
from tidyscrape.scraper.fetcher import fetch_document, parse_document
from tidyscrape.scraper.models import NormalizationRules, RawDocument, css, xpath
from tidyscrape.scraper.pipeline import scrape_table, scrape_text
from tidyscrape.scraper.selector import select


# ---------------------------------------------------------------------------
# Fixtures / constants
# ---------------------------------------------------------------------------

_DUNK_HTML = """\
<!DOCTYPE html>
<html>
<head><title>Slam Dunk Contest Winners</title></head>
<body>
  <p>Subscribe to our newsletter</p>
  <h3>Winners</h3>
  <p>Every champion, year by year.</p>
  <p>1985|Larry Bird (Celtics)|Indianapolis</p>
  <p>1986|Larry Bird (Celtics)|Dallas</p>
  <div id="stats">
    <table>
      <tr><th>Athlete</th><th>PTS/G</th></tr>
      <tr><td>D. Booker</td><td>27.1</td></tr>
    </table>
  </div>
  <footer><p>Copyright</p></footer>
</body>
</html>
"""


def _doc(html: str = _DUNK_HTML) -> RawDocument:
    return parse_document(html, url="https://example.com/dunks")


# ---------------------------------------------------------------------------
# fetch_document tests
# ---------------------------------------------------------------------------

class TestFetchDocument:
    def test_successful_fetch_returns_raw_document(self) -> None:
        with respx.mock:
            respx.get("https://example.com/dunks").mock(
                return_value=httpx.Response(200, text=_DUNK_HTML)
            )
            doc = fetch_document("https://example.com/dunks")

        assert isinstance(doc, RawDocument)
        assert doc.url == "https://example.com/dunks"
        assert "<title>Slam Dunk Contest Winners</title>" in doc.html
        assert doc.soup.title.get_text() == "Slam Dunk Contest Winners"

    def test_http_error_raises_fetch_error(self) -> None:
        with respx.mock:
            respx.get("https://example.com/missing").mock(
                return_value=httpx.Response(404, text="Not Found")
            )
            with pytest.raises(FetchError) as exc_info:
                fetch_document("https://example.com/missing")

        assert exc_info.value.status_code == 404
        assert exc_info.value.url == "https://example.com/missing"

    def test_transport_error_raises_fetch_error(self) -> None:
        with respx.mock:
            respx.get("https://example.com/down").mock(
                side_effect=httpx.ConnectError("connection refused")
            )
            with pytest.raises(FetchError) as exc_info:
                fetch_document("https://example.com/down")

        assert exc_info.value.status_code is None
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    def test_non_markup_content_type_raises_parse_error(self) -> None:
        with respx.mock:
            respx.get("https://example.com/logo.png").mock(
                return_value=httpx.Response(
                    200, content=b"\x89PNG\r\n", headers={"Content-Type": "image/png"}
                )
            )
            with pytest.raises(ParseError):
                fetch_document("https://example.com/logo.png")

    def test_office_xml_type_is_not_markup(self) -> None:
        xlsx = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        with respx.mock:
            respx.get("https://example.com/stats.xlsx").mock(
                return_value=httpx.Response(200, content=b"PK\x03\x04", headers={"Content-Type": xlsx})
            )
            with pytest.raises(ParseError):
                fetch_document("https://example.com/stats.xlsx")

    def test_xhtml_type_is_markup(self) -> None:
        with respx.mock:
            respx.get("https://example.com/page.xhtml").mock(
                return_value=httpx.Response(
                    200,
                    text=_DUNK_HTML,
                    headers={"Content-Type": "application/xhtml+xml; charset=utf-8"},
                )
            )
            doc = fetch_document("https://example.com/page.xhtml")
        assert len(select(doc, "p")) == 5

    def test_blank_body_raises_parse_error(self) -> None:
        with respx.mock:
            respx.get("https://example.com/blank").mock(
                return_value=httpx.Response(200, text="   \n ")
            )
            with pytest.raises(ParseError):
                fetch_document("https://example.com/blank")

    def test_sends_configured_user_agent(self, monkeypatch) -> None:
        monkeypatch.setattr("tidyscrape.config.settings.user_agent", "TestAgent/1.0")
        with respx.mock:
            route = respx.get("https://example.com/").mock(
                return_value=httpx.Response(200, text=_DUNK_HTML)
            )
            fetch_document("https://example.com/")

        assert route.calls.last.request.headers["User-Agent"] == "TestAgent/1.0"

    def test_uses_caller_client(self) -> None:
        with respx.mock:
            route = respx.get("https://example.com/").mock(
                return_value=httpx.Response(200, text=_DUNK_HTML)
            )
            with httpx.Client(headers={"User-Agent": "Custom/2.0"}) as client:
                fetch_document("https://example.com/", client=client)

        assert route.calls.last.request.headers["User-Agent"] == "Custom/2.0"


class TestParseDocument:
    def test_empty_markup_raises(self) -> None:
        with pytest.raises(ParseError):
            parse_document("")

    def test_xml_declaration_is_accepted(self) -> None:
        html = '<?xml version="1.0" encoding="utf-8"?><html><body><p>Hi</p></body></html>'
        doc = parse_document(html)
        assert len(select(doc, xpath("//p"))) == 1


# ---------------------------------------------------------------------------
# Selector tests
# ---------------------------------------------------------------------------

class TestSelectCss:
    def test_plain_tag_over_matches(self) -> None:
        assert len(select(_doc(), "p")) == 5

    def test_sibling_combinators_narrow_to_content(self) -> None:
        nodes = select(_doc(), css("h3~ p+ p"))
        assert [n.get_text() for n in nodes] == [
            "1985|Larry Bird (Celtics)|Indianapolis",
            "1986|Larry Bird (Celtics)|Dallas",
        ]

    def test_child_and_descendant_combinators(self) -> None:
        assert len(select(_doc(), "body > p")) == 4
        assert len(select(_doc(), "footer p")) == 1

    def test_no_match_returns_empty(self) -> None:
        assert select(_doc(), css("table.nope")) == ()

    def test_malformed_selector_raises(self) -> None:
        with pytest.raises(SelectorSyntaxError) as exc_info:
            select(_doc(), css("p["))
        assert exc_info.value.selector == "p["

    def test_empty_selector_raises(self) -> None:
        with pytest.raises(SelectorSyntaxError):
            select(_doc(), "  ")


class TestSelectPath:
    def test_selects_table_container(self) -> None:
        nodes = select(_doc(), xpath('//*[@id="stats"]/table'))
        assert len(nodes) == 1
        assert nodes[0].name == "table"

    def test_document_order_matches_css(self) -> None:
        by_path = extract_text(select(_doc(), xpath("//p")))
        by_css = extract_text(select(_doc(), css("p")))
        assert by_path == by_css

    def test_no_match_returns_empty(self) -> None:
        assert select(_doc(), xpath("//table[@class='nope']")) == ()

    def test_malformed_path_raises(self) -> None:
        with pytest.raises(SelectorSyntaxError):
            select(_doc(), xpath("//table["))

    def test_non_element_result_raises(self) -> None:
        with pytest.raises(SelectorSyntaxError):
            select(_doc(), xpath("//p/text()"))

    def test_scalar_result_raises(self) -> None:
        with pytest.raises(SelectorSyntaxError):
            select(_doc(), xpath("count(//p)"))


# ---------------------------------------------------------------------------
# Text extraction tests
# ---------------------------------------------------------------------------

class TestExtractText:
    def test_one_string_per_node_in_order(self) -> None:
        nodes = select(_doc(), "p")
        texts = extract_text(nodes)
        assert len(texts) == len(nodes)
        assert texts[0] == "Subscribe to our newsletter"
        assert texts[-1] == "Copyright"

    def test_block_children_become_line_breaks(self) -> None:
        doc = parse_document("<div>Line one<br>Line two<p>Para</p>tail</div>")
        assert extract_text(select(doc, "div")) == ["Line one\nLine two\nPara\ntail"]

    def test_whitespace_collapses(self) -> None:
        doc = parse_document("<p>  Hello\n   <b>big</b>   world </p>")
        assert rendered_text(select(doc, "p")[0]) == "Hello big world"

    def test_scripts_and_comments_ignored(self) -> None:
        doc = parse_document(
            "<div><script>var x = 1;</script><!-- note -->Text<style>.a{}</style></div>"
        )
        assert extract_text(select(doc, "div")) == ["Text"]

    def test_empty_node_gives_empty_string(self) -> None:
        doc = parse_document("<div><p></p><p>x</p></div>")
        assert extract_text(select(doc, "p")) == ["", "x"]

    def test_empty_node_set(self) -> None:
        assert extract_text(()) == []


# ---------------------------------------------------------------------------
# Table extraction tests
# ---------------------------------------------------------------------------

class TestExtractTable:
    def test_header_row_names_columns(self) -> None:
        records = extract_table(select(_doc(), xpath('//*[@id="stats"]/table')))
        assert [dict(r) for r in records] == [{"Athlete": "D. Booker", "PTS/G": "27.1"}]

    def test_container_node_yields_its_tables(self) -> None:
        records = extract_table(select(_doc(), "#stats"))
        assert [dict(r) for r in records] == [{"Athlete": "D. Booker", "PTS/G": "27.1"}]

    def test_no_header_uses_positional_names(self) -> None:
        doc = parse_document("<table><tr><td>a</td><td>b</td></tr><tr><td>c</td></tr></table>")
        records = extract_table(select(doc, "table"))
        assert [dict(r) for r in records] == [
            {"X1": "a", "X2": "b"},
            {"X1": "c", "X2": ""},
        ]

    def test_thead_with_td_cells_is_header(self) -> None:
        doc = parse_document(
            "<table><thead><tr><td>Team</td><td>Wins</td></tr></thead>"
            "<tbody><tr><td>Suns</td><td>64</td></tr></tbody></table>"
        )
        assert [dict(r) for r in extract_table(select(doc, "table"))] == [
            {"Team": "Suns", "Wins": "64"}
        ]

    def test_blank_and_duplicate_header_names(self) -> None:
        doc = parse_document(
            "<table><tr><th>Name</th><th></th><th>Name</th></tr>"
            "<tr><td>a</td><td>b</td><td>c</td></tr></table>"
        )
        assert list(extract_table(select(doc, "table"))[0]) == ["Name", "X2", "Name_2"]

    def test_rowspan_and_colspan_repeat_values(self) -> None:
        doc = parse_document(
            "<table>"
            "<tr><th>Team</th><th>Year</th><th>Pts</th></tr>"
            '<tr><td rowspan="2">Celtics</td><td>1985</td><td>10</td></tr>'
            "<tr><td>1986</td><td>12</td></tr>"
            '<tr><td colspan="2">Total</td><td>22</td></tr>'
            "</table>"
        )
        assert [dict(r) for r in extract_table(select(doc, "table"))] == [
            {"Team": "Celtics", "Year": "1985", "Pts": "10"},
            {"Team": "Celtics", "Year": "1986", "Pts": "12"},
            {"Team": "Total", "Year": "Total", "Pts": "22"},
        ]

    def test_multiple_tables_concatenate_in_order(self) -> None:
        doc = parse_document(
            "<div class='tables'>"
            "<table><tr><th>A</th></tr><tr><td>1</td></tr><tr><td>2</td></tr></table>"
            "<table><tr><th>B</th><th>C</th></tr><tr><td>3</td><td>4</td></tr></table>"
            "</div>"
        )
        records = extract_table(select(doc, "div.tables"))
        assert [dict(r) for r in records] == [{"A": "1"}, {"A": "2"}, {"B": "3", "C": "4"}]

    def test_nested_table_rows_excluded(self) -> None:
        doc = parse_document(
            "<div><table>"
            "<tr><th>Outer</th></tr>"
            "<tr><td><table><tr><td>inner</td></tr></table></td></tr>"
            "</table></div>"
        )
        records = extract_table(select(doc, "div"))
        assert len(records) == 1
        assert list(records[0]) == ["Outer"]

    def test_records_are_read_only(self) -> None:
        record = extract_table(select(_doc(), "table"))[0]
        with pytest.raises(TypeError):
            record["Athlete"] = "someone else"  # type: ignore[index]

    def test_node_without_table_contributes_nothing(self) -> None:
        assert extract_table(select(_doc(), "footer")) == []

    def test_rowspan_over_short_row_stays_in_its_column(self) -> None:
        doc = parse_document(
            "<table>"
            "<tr><th>A</th><th>B</th><th>C</th></tr>"
            '<tr><td>a</td><td>b</td><td rowspan="2">c</td></tr>'
            "<tr><td>x</td></tr>"
            "<tr><td>p</td><td>q</td><td>r</td></tr>"
            "</table>"
        )
        assert [dict(r) for r in extract_table(select(doc, "table"))] == [
            {"A": "a", "B": "b", "C": "c"},
            {"A": "x", "B": "", "C": "c"},
            {"A": "p", "B": "q", "C": "r"},
        ]

    def test_huge_spans_are_clamped(self) -> None:
        doc = parse_document(
            '<table><tr><td colspan="100000000">wide</td></tr></table>'
        )
        records = extract_table(select(doc, "table"))
        assert len(records[0]) == 1000


# ---------------------------------------------------------------------------
# Pipeline tests
# ---------------------------------------------------------------------------

class TestPipeline:
    def test_scrape_text_end_to_end(self) -> None:
        rules = NormalizationRules(
            strip_chars=[")"],
            split_on=[
                ("value", "|", ["year", "athlete", "city"]),
                ("athlete", "(", ["athlete", "team"]),
            ],
        )
        with respx.mock:
            respx.get("https://example.com/dunks").mock(
                return_value=httpx.Response(200, text=_DUNK_HTML)
            )
            records = scrape_text("https://example.com/dunks", css("h3 ~ p + p"), rules)

        assert [r["city"] for r in records] == ["Indianapolis", "Dallas"]
        assert {r["team"] for r in records} == {"Celtics"}

    def test_scrape_table_required_columns(self) -> None:
        rules = NormalizationRules(required_columns=["Athlete", "REB"])
        with respx.mock:
            respx.get("https://example.com/dunks").mock(
                return_value=httpx.Response(200, text=_DUNK_HTML)
            )
            with pytest.raises(MissingColumnError):
                scrape_table("https://example.com/dunks", xpath("//table"), rules)

    def test_empty_selection_gives_no_records(self) -> None:
        with respx.mock:
            respx.get("https://example.com/dunks").mock(
                return_value=httpx.Response(200, text=_DUNK_HTML)
            )
            assert scrape_text("https://example.com/dunks", "article p") == []
