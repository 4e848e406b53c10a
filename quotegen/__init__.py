"""QuoteGen - AI material and quote generator.

This package turns a free-text construction job description into a
structured quote for a builder's merchant:

Architecture:
- KeywordExtractor: search terms from the description (heuristic + LLM)
- CatalogSearchClient: product lookups against the merchant search API
- PlanGenerator: LLM-generated materials, method and labour estimate
- RelevanceMatcher: fuzzy matching of materials to catalogue products
- QuoteAssembler: options per material, labour cost and quote metadata
"""

__version__ = "1.0.0"
