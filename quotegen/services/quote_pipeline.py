"""Quote Pipeline for QuoteGen.

Runs one job description through the material-resolution pipeline:

1. KeywordExtractor - search terms from the description
2. CatalogSearchClient - products for those terms (plus natural-stone filter)
3. PlanGenerator - optional project classification, then the plan
4. QuoteAssembler - options per material, labour cost and quote metadata

Every request builds its own state; nothing is shared between quotes.
"""

import functools
import time
import uuid
from typing import Callable, List, Optional

import structlog

from quotegen.config.settings import Settings
from quotegen.models.quote import CatalogProduct, Quote
from quotegen.services.catalog_service import CatalogSearchClient, filter_natural_stone
from quotegen.services.keyword_service import KeywordExtractor
from quotegen.services.llm_service import LLMService
from quotegen.services.matching_service import RelevanceMatcher
from quotegen.services.plan_service import DEFAULT_PROJECT_TYPE, PlanGenerator
from quotegen.services.quote_service import QuoteAssembler
from quotegen.utils.pipeline_logger import (
    log_pipeline_complete,
    log_pipeline_failed,
    log_pipeline_start,
    log_stage_output,
)

logger = structlog.get_logger(__name__)


class QuotePipeline:
    """Wires the pipeline components from one Settings instance."""

    def __init__(
        self,
        settings: Settings,
        llm_service: Optional[LLMService] = None,
        catalog_client: Optional[CatalogSearchClient] = None,
    ):
        """Initialize QuotePipeline.

        Args:
            settings: Validated application settings.
            llm_service: Optional LLM service (tests inject fakes).
            catalog_client: Optional catalogue client (tests inject a mock transport).
        """
        self.settings = settings
        self.llm = llm_service or LLMService(settings)
        self.catalog_client = catalog_client or CatalogSearchClient(
            base_url=settings.catalog_base_url,
            timeout=settings.catalog_timeout_seconds,
            max_keywords=settings.catalog_max_keywords,
        )

        self.keyword_extractor = KeywordExtractor(
            stop_words=settings.stop_words,
            synonyms=settings.synonyms,
            llm=self.llm,
            use_ai=settings.use_ai_keywords,
        )
        self.plan_generator = PlanGenerator(self.llm)
        self.matcher = RelevanceMatcher(
            threshold=settings.match_threshold,
            top_n=settings.match_top_n,
            excluded_modifiers=settings.excluded_modifiers,
            llm=self.llm,
            use_ai=settings.use_ai_disambiguation,
            always_offer_manual=settings.always_offer_manual_option,
        )
        self.assembler = QuoteAssembler(
            matcher=self.matcher,
            labour_rate=settings.labour_rate,
            catalog_client=self.catalog_client,
            search_per_material=settings.search_per_material,
            concurrency=settings.material_concurrency,
        )

    def natural_stone_filter(self, job_description: str) -> Callable[[List[CatalogProduct]], List[CatalogProduct]]:
        """Candidate filter bound to one job description."""
        return functools.partial(
            filter_natural_stone,
            job_description=job_description,
            triggers=self.settings.natural_stone_triggers,
            disqualifiers=self.settings.natural_stone_disqualifiers,
            qualifiers=self.settings.natural_stone_qualifiers,
        )

    async def search_catalog(self, job_description: str, keywords: List[str]) -> List[CatalogProduct]:
        """Search in the configured mode and apply the natural-stone filter."""
        if self.settings.catalog_search_mode == "combined":
            products = await self.catalog_client.search(" ".join(keywords))
        else:
            products = await self.catalog_client.search_keywords(keywords)

        return self.natural_stone_filter(job_description)(products)

    async def generate_quote(self, job_description: str, request_id: Optional[str] = None) -> Quote:
        """Generate a complete quote for *job_description*.

        Raises:
            PlanParseError: If the plan reply has no parseable JSON object.
            LLMError: If the text-generation service keeps failing.
        """
        request_id = request_id or uuid.uuid4().hex[:12]
        start_time = time.time()
        stage = "keywords"
        log_pipeline_start(request_id, job_description)

        try:
            keywords = await self.keyword_extractor.extract(job_description)
            log_stage_output(request_id, stage, {"keywords": keywords})

            stage = "catalog"
            catalog = await self.search_catalog(job_description, keywords)
            log_stage_output(request_id, stage, {
                "mode": self.settings.catalog_search_mode,
                "products": len(catalog),
            })

            project_type = None
            if self.settings.classify_project:
                stage = "classification"
                project_type = await self.plan_generator.classify_project(job_description)
                log_stage_output(request_id, stage, {"project_type": project_type})

            stage = "plan"
            plan = await self.plan_generator.generate(
                job_description,
                catalog=catalog,
                project_type=project_type or DEFAULT_PROJECT_TYPE,
            )
            log_stage_output(request_id, stage, {
                "materials": [m.name for m in plan.materials],
                "labour_hours": plan.labour_hours,
            })

            stage = "assembly"
            quote = await self.assembler.assemble(
                plan,
                catalog,
                job_description=job_description,
                request_id=request_id,
                candidate_filter=self.natural_stone_filter(job_description),
            )
        except Exception as e:
            log_pipeline_failed(request_id, stage, str(e))
            raise

        manual_count = sum(
            1 for material in quote.materials
            if all(option.is_manual for option in material.options)
        )
        log_pipeline_complete(
            request_id,
            quote.customer_quote.quote_number,
            material_count=len(quote.materials),
            manual_count=manual_count,
            duration_ms=int((time.time() - start_time) * 1000),
        )
        return quote
