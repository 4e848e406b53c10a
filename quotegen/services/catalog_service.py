"""Catalogue Search Service for QuoteGen.

Provides integration with the merchant's product search endpoint
(``GET <base>/search-products?q=<query>``).

Architecture:
- One combined query, or one GET per keyword merged and deduplicated
- Individual lookup failures are logged and skipped, never raised
- Optional natural-stone post filter on the merged results
- Grouping of products by cleaned title for the plan prompt
"""

import asyncio
import time
from typing import Any, Dict, Iterable, List, Optional, Sequence

import httpx
import structlog

from quotegen.models.quote import CatalogProduct
from quotegen.utils.text import clean_title

logger = structlog.get_logger(__name__)

SEARCH_PATH = "/search-products"


def _records_from_payload(payload: Any) -> List[Dict[str, Any]]:
    """Accept a bare JSON array or an object wrapping one."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in ("products", "results", "items", "data"):
            if isinstance(payload.get(key), list):
                return payload[key]
    return []


def merge_products(*product_lists: Iterable[CatalogProduct]) -> List[CatalogProduct]:
    """Merge lists keeping first occurrence order, deduplicated by URL/id."""
    merged: Dict[str, CatalogProduct] = {}
    for products in product_lists:
        for product in products:
            merged.setdefault(product.dedupe_key, product)
    return list(merged.values())


def group_products(products: Iterable[CatalogProduct]) -> Dict[str, List[CatalogProduct]]:
    """Group products into categories keyed by cleaned title.

    e.g. "Sandstone Paving Slabs (22mm)" and "Sandstone Paving Slabs - Buff"
    both land under "Sandstone Paving Slabs".
    """
    groups: Dict[str, List[CatalogProduct]] = {}
    for product in products:
        groups.setdefault(clean_title(product.name), []).append(product)
    return groups


def filter_natural_stone(
    products: Sequence[CatalogProduct],
    job_description: str,
    triggers: Sequence[str],
    disqualifiers: Sequence[str],
    qualifiers: Sequence[str],
) -> List[CatalogProduct]:
    """Drop man-made lookalikes when natural stone is explicitly requested.

    Only applies when the description contains one of *triggers*. A product
    whose text matches a disqualifying term survives only if it also matches
    a qualifying term.
    """
    description = (job_description or "").lower()
    if not any(trigger in description for trigger in triggers):
        return list(products)

    kept = []
    for product in products:
        text = f"{product.name} {product.description}".lower()
        if any(term in text for term in disqualifiers) and not any(term in text for term in qualifiers):
            continue
        kept.append(product)

    if len(kept) != len(products):
        logger.info(
            "natural_stone_filter_applied",
            before=len(products),
            after=len(kept)
        )
    return kept


class CatalogSearchClient:
    """Client for the merchant product search API.

    Callers always get a list back: HTTP errors, timeouts and malformed
    bodies yield an empty result for that lookup.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        max_keywords: int = 8,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize CatalogSearchClient.

        Args:
            base_url: API base, e.g. https://example.com/wp-json/atp/v1
            timeout: Per-request timeout in seconds
            max_keywords: Cap on lookups issued in per-keyword mode
            transport: Optional httpx transport (tests use MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_keywords = max_keywords
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def _fetch(self, client: httpx.AsyncClient, query: str) -> List[CatalogProduct]:
        """Run one lookup; failures are logged and produce no products."""
        url = f"{self.base_url}{SEARCH_PATH}"
        start_time = time.time()

        try:
            response = await client.get(url, params={"q": query})
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("catalog_search_failed", query=query[:50], error=str(e))
            return []

        if not response.is_success:
            logger.warning(
                "catalog_search_http_error",
                query=query[:50],
                status_code=response.status_code,
                body=response.text[:200]
            )
            return []

        try:
            payload = response.json()
        except ValueError as e:
            logger.warning("catalog_search_invalid_json", query=query[:50], error=str(e))
            return []

        products = [
            product
            for product in (CatalogProduct.from_record(r) for r in _records_from_payload(payload))
            if product is not None
        ]

        logger.info(
            "catalog_search_complete",
            query=query[:50],
            results_count=len(products),
            search_time_ms=round((time.time() - start_time) * 1000, 2)
        )
        return products

    async def search(self, query: str) -> List[CatalogProduct]:
        """Single combined query."""
        query = (query or "").strip()
        if not query:
            return []
        async with self._client() as client:
            return merge_products(await self._fetch(client, query))

    async def search_keywords(self, keywords: Sequence[str]) -> List[CatalogProduct]:
        """One lookup per keyword (capped), merged and deduplicated.

        Returns an empty list when every lookup fails.
        """
        queries = [k for k in keywords if k and k.strip()][:self.max_keywords]
        if not queries:
            return []

        async with self._client() as client:
            results = await asyncio.gather(
                *(self._fetch(client, q) for q in queries),
                return_exceptions=True
            )

        product_lists = []
        for query, result in zip(queries, results):
            if isinstance(result, BaseException):
                logger.warning("catalog_keyword_skipped", query=query[:50], error=str(result))
                continue
            product_lists.append(result)

        merged = merge_products(*product_lists)
        logger.info(
            "catalog_keyword_search_complete",
            keywords=len(queries),
            succeeded=len(product_lists),
            products=len(merged)
        )
        return merged
