"""Google Sheets CSV loading.

Sheets are published as CSV; each tab (products, presets, rules, master,
room_to_furniture) is addressed by ``sheet=<tab>`` on a shared base URL or
by its own URL. Rows come back as dicts keyed by normalized header.
"""

from __future__ import annotations

import csv
import io
import logging
import re
from pathlib import Path
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import requests

from ..common.config import Settings, settings as default_settings
from ..common.errors import CatalogFetchError
from ..selector.models import Product
from ..selector.normalize import first_non_empty, normalize
from .records import normalize_products, normalize_shopify_product
from .room_furniture import (
    RoomOption,
    merge_master_rooms,
    parse_room_to_furniture_records,
    sample_room_options,
)
from .sheet_config import (
    DEFAULT_PRESET,
    DEFAULT_RULES,
    MasterRow,
    Preset,
    parse_master_rows,
    parse_presets,
    parse_rules,
)
from .shopify import ShopifyClient

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")

CsvTable = tuple[list[str], list[dict[str, str]]]


def normalize_header(header: str) -> str:
    """Header key form: "Prompt Style Tags" → "prompt_style_tags"."""
    return _WHITESPACE_RE.sub("_", normalize(header))


def parse_csv_records(text: str) -> CsvTable:
    """Parse CSV text into (headers, records).

    Blank rows are skipped, cells are trimmed, short rows are padded with
    empty strings and columns with a blank header are dropped.
    """
    rows = [
        [cell.strip() for cell in row]
        for row in csv.reader(io.StringIO(text or ""))
    ]
    rows = [row for row in rows if any(cell for cell in row)]
    if not rows:
        return [], []

    headers = [normalize_header(h) for h in rows[0]]
    records: list[dict[str, str]] = []
    for row in rows[1:]:
        record = {}
        for i, header in enumerate(headers):
            if not header:
                continue
            record[header] = row[i] if i < len(row) else ""
        records.append(record)

    return headers, records


def load_csv_file(path: str | Path) -> CsvTable:
    """Read and parse a local CSV file (UTF-8, BOM tolerated)."""
    with open(path, encoding="utf-8-sig", newline="") as f:
        return parse_csv_records(f.read())


def resolve_sheet_csv_url(sheet_name: str, explicit_url: str = "", base_url: str = "") -> str:
    """Build the CSV export URL for one sheet tab.

    Sets ``output=csv`` and ``sheet=<sheet_name>`` on the first non-blank of
    ``explicit_url`` / ``base_url``. Returns ``""`` when neither is usable.
    """
    url = first_non_empty(explicit_url, base_url)
    if not url:
        return ""

    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        logger.warning("Ignoring malformed sheet URL: %s", url)
        return ""

    query = dict(parse_qsl(parts.query, keep_blank_values=True))
    query["output"] = "csv"
    query["sheet"] = sheet_name
    return urlunsplit(parts._replace(query=urlencode(query)))


class SheetClient:
    """Fetches published sheet tabs as CSV records.

    Usage:
        with SheetClient() as client:
            headers, records = client.fetch_records(url)
    """

    def __init__(self, timeout: int = 30, session: requests.Session | None = None) -> None:
        self.timeout = timeout
        self._session = session or requests.Session()

    def fetch_records(self, url: str) -> CsvTable:
        """GET a CSV export and parse it.

        Raises:
            CatalogFetchError: On a connection error or non-2xx response.
        """
        try:
            resp = self._session.get(url, timeout=self.timeout, headers={"Cache-Control": "no-store"})
        except requests.RequestException as exc:
            raise CatalogFetchError(url, message=str(exc)) from exc

        if not resp.ok:
            raise CatalogFetchError(url, status_code=resp.status_code)

        resp.encoding = resp.encoding or "utf-8"
        headers, records = parse_csv_records(resp.text)
        logger.debug("Fetched %d records from %s", len(records), url)
        return headers, records

    def close(self) -> None:
        """Close the underlying session."""
        self._session.close()

    def __enter__(self) -> SheetClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


class SheetRepository:
    """Loads catalog and configuration tabs, with built-in defaults.

    Tabs without a configured URL fall back to the defaults (default preset,
    default rules, sample room map, no master rows). Products have no
    default: a missing products URL is an error. With
    ``catalog_source: shopify`` products come from the Shopify Admin API
    instead; the other tabs still come from sheets.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: SheetClient | None = None,
        shopify_client: ShopifyClient | None = None,
    ) -> None:
        self.settings = settings or default_settings
        self.client = client or SheetClient(timeout=self.settings.sheets.request_timeout)
        self._shopify_client = shopify_client

    @property
    def shopify_client(self) -> ShopifyClient:
        if self._shopify_client is None:
            self._shopify_client = ShopifyClient.from_settings(
                self.settings.shopify, timeout=self.settings.sheets.request_timeout,
            )
        return self._shopify_client

    def _url(self, sheet_name: str, explicit_url: str) -> str:
        return resolve_sheet_csv_url(sheet_name, explicit_url, self.settings.sheets.base_csv_url)

    def _records(self, url: str) -> list[dict[str, Any]]:
        _, records = self.client.fetch_records(url)
        return records

    def products(self) -> list[Product]:
        if self.settings.uses_shopify:
            nodes = self.shopify_client.fetch_all_active_products()
            return normalize_products(nodes, normalize_shopify_product)

        url = self._url("products", self.settings.sheets.products_csv_url)
        if not url:
            raise CatalogFetchError(
                "",
                message=(
                    'Missing product catalog source. Set GOOGLE_SHEETS_CSV_URL '
                    '(with a "products" tab) or PRODUCTS_CSV_URL'
                ),
            )
        return normalize_products(self._records(url))

    def presets(self) -> list[Preset]:
        url = self._url("presets", self.settings.sheets.presets_csv_url)
        if not url:
            return [DEFAULT_PRESET]
        return parse_presets(self._records(url))

    def rules(self) -> list[dict[str, Any]]:
        url = self._url("rules", self.settings.sheets.rules_csv_url)
        if not url:
            return [dict(rule) for rule in DEFAULT_RULES]
        return parse_rules(self._records(url))

    def master_rows(self) -> list[MasterRow]:
        url = self._url("master", self.settings.sheets.master_csv_url)
        if not url:
            return []
        return parse_master_rows(self._records(url))

    def room_options(self, master_rows: list[MasterRow] | None = None) -> list[RoomOption]:
        url = self._url("room_to_furniture", self.settings.sheets.room_to_furniture_csv_url)
        if url:
            headers, records = self.client.fetch_records(url)
            base = parse_room_to_furniture_records(records, headers)
        else:
            base = sample_room_options()

        if master_rows is None:
            master_rows = self.master_rows()
        return merge_master_rooms(master_rows, base)
