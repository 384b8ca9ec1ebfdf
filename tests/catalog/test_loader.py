"""Tests for CSV parsing, sheet URL resolution and the sheet repository."""

from __future__ import annotations

from unittest.mock import MagicMock
from urllib.parse import parse_qs, urlsplit

import pytest
import requests

from staging_prompt.catalog.loader import (
    SheetClient,
    SheetRepository,
    load_csv_file,
    normalize_header,
    parse_csv_records,
    resolve_sheet_csv_url,
)
from staging_prompt.catalog.room_furniture import SAMPLE_ROOM_MAP
from staging_prompt.catalog.sheet_config import DEFAULT_PRESET, DEFAULT_RULES
from staging_prompt.common.config import SheetSettings, Settings
from staging_prompt.common.errors import CatalogFetchError

BASE_URL = "https://docs.google.com/spreadsheets/d/abc123/gviz/tq?tqx=out:csv"


# ===================================================================
# Helpers
# ===================================================================


def _make_response(text: str = "", status_code: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.ok = 200 <= status_code < 300
    resp.status_code = status_code
    resp.encoding = "utf-8"
    resp.text = text
    return resp


def _query(url: str) -> dict[str, list[str]]:
    return parse_qs(urlsplit(url).query)


# ===================================================================
# CSV parsing
# ===================================================================


class TestNormalizeHeader:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("Prompt Style Tags", "prompt_style_tags"),
            ("  In   Stock ", "in_stock"),
            ("handle", "handle"),
            ("", ""),
        ],
    )
    def test_header(self, raw, expected):
        assert normalize_header(raw) == expected


class TestParseCsvRecords:
    def test_quoted_cells_and_padding(self):
        text = 'Title,Product Type,,Notes\n"Sofa, big",sofa,x\n\n,,,\nLamp\n'
        headers, records = parse_csv_records(text)
        assert headers == ["title", "product_type", "", "notes"]
        assert records == [
            {"title": "Sofa, big", "product_type": "sofa", "notes": ""},
            {"title": "Lamp", "product_type": "", "notes": ""},
        ]

    def test_escaped_quotes_and_newlines_in_cells(self):
        text = 'title,hero_descriptor\nChair,"curved ""barrel"" back\nsecond line"\n'
        _, records = parse_csv_records(text)
        assert records == [{"title": "Chair", "hero_descriptor": 'curved "barrel" back\nsecond line'}]

    def test_cells_trimmed(self):
        _, records = parse_csv_records("a , b\n 1 ,  2 \n")
        assert records == [{"a": "1", "b": "2"}]

    @pytest.mark.parametrize("text", ["", "\n\n", None])
    def test_empty(self, text):
        assert parse_csv_records(text) == ([], [])

    def test_header_only(self):
        assert parse_csv_records("title,type\n") == (["title", "type"], [])


class TestLoadCsvFile:
    def test_reads_with_bom(self, tmp_path):
        path = tmp_path / "products.csv"
        path.write_text("\ufeffTitle,Product Type\nSofa,sofa\n", encoding="utf-8")
        headers, records = load_csv_file(path)
        assert headers == ["title", "product_type"]
        assert records == [{"title": "Sofa", "product_type": "sofa"}]


# ===================================================================
# URL resolution
# ===================================================================


class TestResolveSheetCsvUrl:
    def test_adds_sheet_and_output(self):
        url = resolve_sheet_csv_url("products", base_url=BASE_URL)
        query = _query(url)
        assert url.startswith("https://docs.google.com/spreadsheets/d/abc123/gviz/tq?")
        assert query["sheet"] == ["products"]
        assert query["output"] == ["csv"]
        assert query["tqx"] == ["out:csv"]

    def test_explicit_url_wins(self):
        url = resolve_sheet_csv_url("rules", "https://example.com/rules?sheet=old", BASE_URL)
        assert urlsplit(url).netloc == "example.com"
        assert _query(url)["sheet"] == ["rules"]

    def test_blank_explicit_uses_base(self):
        url = resolve_sheet_csv_url("master", "   ", BASE_URL)
        assert _query(url)["sheet"] == ["master"]

    def test_nothing_configured(self):
        assert resolve_sheet_csv_url("products") == ""

    def test_malformed_url(self):
        assert resolve_sheet_csv_url("products", "not a url") == ""


# ===================================================================
# SheetClient
# ===================================================================


class TestSheetClient:
    def test_fetch_records(self):
        session = MagicMock()
        session.get.return_value = _make_response("Title,Type\nSofa,sofa\n")
        client = SheetClient(timeout=5, session=session)

        headers, records = client.fetch_records("https://example.com/x.csv")

        assert headers == ["title", "type"]
        assert records == [{"title": "Sofa", "type": "sofa"}]
        _, kwargs = session.get.call_args
        assert kwargs["timeout"] == 5

    def test_http_error(self):
        session = MagicMock()
        session.get.return_value = _make_response(status_code=404)
        client = SheetClient(session=session)

        with pytest.raises(CatalogFetchError) as exc_info:
            client.fetch_records("https://example.com/x.csv")

        assert exc_info.value.status_code == 404
        assert str(exc_info.value) == "Failed to fetch CSV (404): https://example.com/x.csv"

    def test_connection_error(self):
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("refused")
        client = SheetClient(session=session)

        with pytest.raises(CatalogFetchError, match="refused"):
            client.fetch_records("https://example.com/x.csv")

    def test_context_manager_closes_session(self):
        session = MagicMock()
        with SheetClient(session=session):
            pass
        session.close.assert_called_once()


# ===================================================================
# SheetRepository
# ===================================================================


class TestSheetRepository:
    def _repo(self, client: MagicMock | None = None, **sheet_fields) -> SheetRepository:
        settings = Settings(sheets=SheetSettings(**sheet_fields))
        return SheetRepository(settings=settings, client=client or MagicMock(spec=SheetClient))

    def test_products_require_a_source(self):
        with pytest.raises(CatalogFetchError, match="Missing product catalog source"):
            self._repo().products()

    def test_defaults_without_urls(self):
        repo = self._repo()
        assert repo.presets() == [DEFAULT_PRESET]
        assert repo.rules() == DEFAULT_RULES
        assert repo.master_rows() == []
        assert [o.room_type for o in repo.room_options()] == list(SAMPLE_ROOM_MAP)
        repo.client.fetch_records.assert_not_called()

    def test_products_from_base_url(self):
        client = MagicMock(spec=SheetClient)
        client.fetch_records.return_value = (
            ["title", "product_type"],
            [{"title": "Sofa", "product_type": "sofa"}, {"title": "", "product_type": "bed"}],
        )
        repo = self._repo(client, base_csv_url=BASE_URL)

        products = repo.products()

        assert [p.title for p in products] == ["Sofa"]
        url = client.fetch_records.call_args.args[0]
        assert _query(url)["sheet"] == ["products"]

    def test_tab_url_overrides_base(self):
        client = MagicMock(spec=SheetClient)
        client.fetch_records.return_value = (["rule_key", "weight_int"], [{"rule_key": "image", "weight_int": "4"}])
        repo = self._repo(client, base_csv_url=BASE_URL, rules_csv_url="https://example.com/rules")

        assert repo.rules() == [{"rule_key": "image", "weight_int": 4}]
        url = client.fetch_records.call_args.args[0]
        assert urlsplit(url).netloc == "example.com"

    def test_room_options_merge_master_rows(self):
        client = MagicMock(spec=SheetClient)
        client.fetch_records.side_effect = [
            (["room", "lighting"], [{"room": "Office", "lighting": "Cool"}]),
        ]
        repo = self._repo(client, master_csv_url="https://example.com/master")

        options = repo.room_options()

        assert [o.room_type for o in options] == ["Office"]
        assert options[0].furniture_types == SAMPLE_ROOM_MAP["office"]

    def test_fetch_errors_propagate(self):
        client = MagicMock(spec=SheetClient)
        client.fetch_records.side_effect = CatalogFetchError("https://example.com/p", status_code=500)
        repo = self._repo(client, products_csv_url="https://example.com/p")

        with pytest.raises(CatalogFetchError, match="500"):
            repo.products()
