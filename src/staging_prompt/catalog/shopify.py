"""Shopify Admin GraphQL client for the product catalog.

Used when ``PRODUCT_CATALOG_SOURCE=shopify``. Pulls every active product
with its prompt metafields, 100 per page, following ``pageInfo`` cursors.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from ..common.config import ShopifySettings
from ..common.errors import CatalogFetchError

logger = logging.getLogger(__name__)

DEFAULT_API_VERSION = "2025-10"
PAGE_SIZE = 100

PRODUCTS_QUERY = """
query Products($after: String) {
  products(first: %d, after: $after, query: "status:active") {
    edges {
      node {
        id
        title
        handle
        productType
        status
        tags
        totalInventory
        featuredImage { url }
        images(first: 20) { edges { node { url altText } } }
        promptCategory: metafield(namespace: "prompt", key: "category") { value }
        promptSubcategory: metafield(namespace: "prompt", key: "subcategory") { value }
        promptHeroDescriptor: metafield(namespace: "prompt", key: "hero_descriptor") { value }
        promptStyleTags: metafield(namespace: "prompt", key: "style_tags") { value }
      }
    }
    pageInfo { hasNextPage endCursor }
  }
}
""" % PAGE_SIZE


class ShopifyClient:
    """Client for the Shopify Admin GraphQL API.

    Usage:
        with ShopifyClient.from_settings(settings.shopify) as client:
            nodes = client.fetch_all_active_products()
    """

    def __init__(
        self,
        shop: str,
        admin_token: str,
        api_version: str = DEFAULT_API_VERSION,
        timeout: int = 30,
        session: requests.Session | None = None,
    ) -> None:
        self.shop = (shop or "").strip()
        self._admin_token = (admin_token or "").strip()
        self.api_version = (api_version or "").strip() or DEFAULT_API_VERSION
        self.timeout = timeout
        self._session = session or requests.Session()

    @classmethod
    def from_settings(
        cls,
        shopify: ShopifySettings,
        timeout: int = 30,
        session: requests.Session | None = None,
    ) -> ShopifyClient:
        return cls(shopify.shop, shopify.admin_token, shopify.api_version, timeout, session)

    @property
    def endpoint(self) -> str:
        return f"https://{self.shop}/admin/api/{self.api_version}/graphql.json"

    def graphql(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """POST a GraphQL query and return its ``data`` object.

        Raises:
            CatalogFetchError: On missing credentials, a connection error,
                a non-2xx response or a GraphQL ``errors`` payload.
        """
        if not self.shop:
            raise CatalogFetchError("", message="Missing SHOPIFY_SHOP")
        if not self._admin_token:
            raise CatalogFetchError("", message="Missing SHOPIFY_ADMIN_TOKEN")

        url = self.endpoint
        headers = {
            "Content-Type": "application/json",
            "X-Shopify-Access-Token": self._admin_token,
        }
        try:
            resp = self._session.post(
                url,
                json={"query": query, "variables": variables or {}},
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise CatalogFetchError(url, message=str(exc)) from exc

        if not resp.ok:
            body = (resp.text or "")[:500]
            logger.warning("Shopify API %s: %s", resp.status_code, body)
            raise CatalogFetchError(
                url,
                status_code=resp.status_code,
                message=f"Shopify request failed ({resp.status_code})",
            )

        payload = resp.json() or {}
        if payload.get("errors"):
            messages = "; ".join(
                str(err.get("message", err)) if isinstance(err, dict) else str(err)
                for err in payload["errors"]
            )
            raise CatalogFetchError(url, message=f"Shopify GraphQL errors: {messages}")

        return payload.get("data") or {}

    def fetch_all_active_products(self) -> list[dict[str, Any]]:
        """Fetch every active product node, page by page."""
        nodes: list[dict[str, Any]] = []
        after: str | None = None

        while True:
            data = self.graphql(PRODUCTS_QUERY, {"after": after})
            connection = data.get("products") or {}
            for edge in connection.get("edges") or []:
                node = (edge or {}).get("node")
                if node:
                    nodes.append(node)

            page_info = connection.get("pageInfo") or {}
            after = page_info.get("endCursor")
            if not page_info.get("hasNextPage") or not after:
                break

        logger.debug("Fetched %d active Shopify products", len(nodes))
        return nodes

    def close(self) -> None:
        """Close the underlying session."""
        self._session.close()

    def __enter__(self) -> ShopifyClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
