"""Quote assembly for QuoteGen.

Resolves options for every plan material, stamps quote metadata and
computes the labour cost.
"""

import asyncio
import threading
import time
from datetime import datetime
from typing import Callable, List, Optional, Sequence

import structlog

from quotegen.models.quote import (
    CatalogProduct,
    CustomerQuote,
    GenerationPlan,
    MaterialRequirement,
    Quote,
    ResolvedMaterial,
)
from quotegen.services.catalog_service import CatalogSearchClient, merge_products
from quotegen.services.matching_service import RelevanceMatcher, strip_quote_marker
from quotegen.utils.pipeline_logger import log_material_resolved

logger = structlog.get_logger(__name__)

DATE_FORMAT = "%d/%m/%Y"

CandidateFilter = Callable[[List[CatalogProduct]], List[CatalogProduct]]

_quote_number_lock = threading.Lock()
_last_quote_millis = 0


def next_quote_number() -> str:
    """Return ``Q-<epoch ms>``, strictly increasing within the process."""
    global _last_quote_millis
    with _quote_number_lock:
        millis = max(int(time.time() * 1000), _last_quote_millis + 1)
        _last_quote_millis = millis
    return f"Q-{millis}"


def labour_cost(hours: float, rate: float) -> float:
    return hours * rate


class QuoteAssembler:
    """Combines a plan with matched catalogue options into a Quote."""

    def __init__(
        self,
        matcher: RelevanceMatcher,
        labour_rate: float = 35.0,
        catalog_client: Optional[CatalogSearchClient] = None,
        search_per_material: bool = True,
        concurrency: int = 4,
    ):
        """Initialize QuoteAssembler.

        Args:
            matcher: Scores catalogue candidates for each material.
            labour_rate: Hourly rate used when the plan does not suggest one.
            catalog_client: Optional client for one extra search per material.
            search_per_material: Whether to run that extra search.
            concurrency: Maximum materials resolved at the same time.
        """
        self.matcher = matcher
        self.labour_rate = labour_rate
        self.catalog_client = catalog_client
        self.search_per_material = search_per_material and catalog_client is not None
        self.concurrency = max(1, concurrency)

    async def _candidates(
        self,
        material: MaterialRequirement,
        catalog: Sequence[CatalogProduct]
    ) -> List[CatalogProduct]:
        if not self.search_per_material:
            return list(catalog)
        extra = await self.catalog_client.search(strip_quote_marker(material.name))
        return merge_products(catalog, extra)

    async def resolve_material(
        self,
        material: MaterialRequirement,
        catalog: Sequence[CatalogProduct],
        request_id: str = "",
        candidate_filter: Optional[CandidateFilter] = None
    ) -> ResolvedMaterial:
        candidates = await self._candidates(material, catalog)
        if candidate_filter is not None:
            candidates = candidate_filter(candidates)
        result = await self.matcher.resolve(material.name, candidates)

        log_material_resolved(
            request_id,
            material.name,
            result.strategy,
            [option.name for option in result.options]
        )
        return ResolvedMaterial(
            name=material.name,
            quantity=material.quantity,
            unit=material.unit,
            options=result.options,
        )

    async def assemble(
        self,
        plan: GenerationPlan,
        catalog: Sequence[CatalogProduct],
        job_description: str = "",
        request_id: str = "",
        candidate_filter: Optional[CandidateFilter] = None
    ) -> Quote:
        """Build the final Quote.

        Materials with an empty name are skipped; every other material gets
        at least one option. Order follows the plan. *candidate_filter*, when
        given, is applied to each material's merged candidates.
        """
        named = []
        for material in plan.materials:
            if not material.name.strip():
                logger.warning("material_without_name_skipped", request_id=request_id, unit=material.unit)
                continue
            named.append(material)

        semaphore = asyncio.Semaphore(self.concurrency)

        async def _bounded(material: MaterialRequirement) -> ResolvedMaterial:
            async with semaphore:
                return await self.resolve_material(material, catalog, request_id, candidate_filter)

        resolved = await asyncio.gather(*(_bounded(m) for m in named))

        rate = plan.labour_rate if plan.labour_rate is not None else self.labour_rate
        customer_quote = CustomerQuote(
            quote_number=next_quote_number(),
            date=datetime.now().strftime(DATE_FORMAT),
            project_description=job_description,
            rewritten_project_summary=plan.rewritten_project_summary,
            project_type=plan.project_type,
            labour_hours=plan.labour_hours,
            labour_rate=rate,
            labour_cost=labour_cost(plan.labour_hours, rate),
        )

        logger.info(
            "quote_assembled",
            request_id=request_id,
            quote_number=customer_quote.quote_number,
            materials=len(resolved),
            skipped=len(plan.materials) - len(named),
            labour_cost=customer_quote.labour_cost
        )
        return Quote(
            materials=list(resolved),
            method=plan.method,
            customer_quote=customer_quote,
        )
