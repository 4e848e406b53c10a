"""QuoteGen data models."""

from quotegen.models.quote import (
    CatalogProduct,
    ConstructionMethod,
    CustomerQuote,
    GenerationPlan,
    MaterialOption,
    MaterialRequirement,
    Quote,
    ResolvedMaterial,
    MANUAL_OPTION_PREFIX,
)

__all__ = [
    "CatalogProduct",
    "ConstructionMethod",
    "CustomerQuote",
    "GenerationPlan",
    "MaterialOption",
    "MaterialRequirement",
    "Quote",
    "ResolvedMaterial",
    "MANUAL_OPTION_PREFIX",
]
