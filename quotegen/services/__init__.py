"""QuoteGen services."""

from quotegen.services.catalog_service import CatalogSearchClient
from quotegen.services.keyword_service import KeywordExtractor
from quotegen.services.llm_service import LLMService
from quotegen.services.matching_service import RelevanceMatcher
from quotegen.services.plan_service import PlanGenerator
from quotegen.services.quote_pipeline import QuotePipeline
from quotegen.services.quote_service import QuoteAssembler

__all__ = [
    "CatalogSearchClient",
    "KeywordExtractor",
    "LLMService",
    "RelevanceMatcher",
    "PlanGenerator",
    "QuotePipeline",
    "QuoteAssembler",
]
