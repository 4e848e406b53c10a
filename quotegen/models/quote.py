"""Quote Pydantic models for QuoteGen.

This module defines the request-scoped data the pipeline produces: catalogue
products, material requirements from the plan, the options offered for each
material, and the final quote returned to the front end. Field aliases are
camelCase to match the JSON the single-page app consumes.
"""

import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

_RE_HTML_TAG = re.compile(r"<[^>]+>")
_RE_WHITESPACE = re.compile(r"\s+")

MANUAL_OPTION_PREFIX = "manual-"


def _strip_html(text: Any) -> str:
    if not text:
        return ""
    return _RE_WHITESPACE.sub(" ", _RE_HTML_TAG.sub(" ", str(text))).strip()


# =============================================================================
# CATALOGUE MODELS
# =============================================================================


class CatalogProduct(BaseModel):
    """Read-only product record returned by the merchant search API."""

    id: str = Field(..., description="Catalogue identifier")
    name: str = Field(..., description="Display title")
    description: str = Field(default="", description="Plain-text description")
    image: Optional[str] = Field(default=None, description="Image URL")
    link: Optional[str] = Field(default=None, description="Canonical product URL")

    class Config:
        frozen = True

    @property
    def dedupe_key(self) -> str:
        """Key used to merge results across several searches."""
        return self.link or f"id:{self.id}"

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> Optional["CatalogProduct"]:
        """Build a product from an arbitrary API record.

        Returns None when the record has no usable identifier or name.
        """
        if not isinstance(record, dict):
            return None

        name = record.get("name") or record.get("title")
        if isinstance(name, dict):
            # WordPress style {"rendered": "..."}
            name = name.get("rendered")
        name = _strip_html(name)

        link = record.get("link") or record.get("url") or record.get("permalink")
        identifier = next(
            (value for value in (record.get("id"), record.get("sku"), link) if value not in (None, "")),
            None
        )
        if not name or identifier is None:
            return None

        image = record.get("image") or record.get("image_url") or record.get("thumbnail")
        if isinstance(image, dict):
            image = image.get("src") or image.get("url")

        return cls(
            id=str(identifier),
            name=name,
            description=_strip_html(record.get("description") or record.get("short_description")),
            image=str(image) if image else None,
            link=str(link) if link else None,
        )


# =============================================================================
# PLAN MODELS
# =============================================================================


class MaterialRequirement(BaseModel):
    """A single material line produced by the plan."""

    name: str = Field(..., description="Material name as written by the plan")
    quantity: float = Field(default=0.0, ge=0, description="Required quantity")
    unit: str = Field(default="item", description="Short unit token, e.g. m² or bags")


class ConstructionMethod(BaseModel):
    """Ordered construction steps plus free-text considerations."""

    steps: List[str] = Field(default_factory=list)
    considerations: List[str] = Field(default_factory=list)


class GenerationPlan(BaseModel):
    """Normalized output of the plan generator."""

    materials: List[MaterialRequirement] = Field(default_factory=list)
    method: ConstructionMethod = Field(default_factory=ConstructionMethod)
    labour_hours: float = Field(default=0.0, ge=0)
    labour_rate: Optional[float] = Field(
        default=None, description="Labour rate suggested by the plan, if any"
    )
    rewritten_project_summary: str = Field(default="")
    project_type: Optional[str] = Field(default=None)


# =============================================================================
# QUOTE MODELS
# =============================================================================


class MaterialOption(BaseModel):
    """A product (or manual placeholder) offered for a material."""

    id: str
    name: str
    image: Optional[str] = None
    description: str = ""
    link: Optional[str] = None

    @property
    def is_manual(self) -> bool:
        return self.id.startswith(MANUAL_OPTION_PREFIX)

    @classmethod
    def from_product(cls, product: CatalogProduct) -> "MaterialOption":
        return cls(
            id=product.id,
            name=product.name,
            image=product.image,
            description=product.description,
            link=product.link,
        )


class ResolvedMaterial(MaterialRequirement):
    """A material requirement with its non-empty list of options."""

    options: List[MaterialOption] = Field(..., min_length=1)


class CustomerQuote(BaseModel):
    """Quote metadata and labour figures."""

    quote_number: str = Field(alias="quoteNumber")
    date: str = Field(description="Calendar date, dd/mm/yyyy")
    project_description: str = Field(default="", alias="projectDescription")
    rewritten_project_summary: str = Field(default="", alias="rewrittenProjectSummary")
    project_type: Optional[str] = Field(default=None, alias="projectType")
    labour_hours: float = Field(default=0.0, ge=0, alias="labourHours")
    labour_rate: float = Field(default=0.0, ge=0, alias="labourRate")
    labour_cost: float = Field(default=0.0, ge=0, alias="labourCost")

    class Config:
        populate_by_name = True


class Quote(BaseModel):
    """Complete quote returned to the caller."""

    materials: List[ResolvedMaterial] = Field(default_factory=list)
    method: ConstructionMethod = Field(default_factory=ConstructionMethod)
    customer_quote: CustomerQuote = Field(alias="customerQuote")

    class Config:
        populate_by_name = True

    def to_response(self) -> Dict[str, Any]:
        """Convert to the camelCase JSON body sent to the front end."""
        return self.model_dump(by_alias=True)
