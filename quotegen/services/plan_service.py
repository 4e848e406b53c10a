"""Plan generation for QuoteGen.

Asks the text-generation service for the materials, construction method and
labour estimate of a job, optionally classifying the project type first and
embedding the grouped catalogue so the plan can use real category names.
The model reply is parsed as best-effort JSON and normalized into a
GenerationPlan; a reply without a parseable object is a hard failure.
"""

import math
from typing import Any, Dict, List, Optional, Sequence

import structlog

from quotegen.models.quote import (
    CatalogProduct,
    ConstructionMethod,
    GenerationPlan,
    MaterialRequirement,
)
from quotegen.services.catalog_service import group_products
from quotegen.services.llm_service import LLMService
from quotegen.utils.json_extract import extract_json_object

logger = structlog.get_logger(__name__)

DEFAULT_PROJECT_TYPE = "general"
MAX_PROJECT_TYPE_LENGTH = 40
DEFAULT_UNIT = "item"


# =============================================================================
# PROMPTS
# =============================================================================

PROJECT_TYPE_PROMPT = """You classify construction jobs for a UK builder's merchant.

Project description:
"{job_description}"

Respond ONLY with a short lowercase project type of one to three words,
for example: patio, fencing, garden wall, driveway, decking, extension.
"""

PLAN_PROMPT = """You are a UK-based quantity surveyor for a builder's merchant. Your task is to analyze a customer's project description and generate a detailed material list and construction method.

## Project Description:
"{job_description}"

## Project Type:
{project_type}

## Available Material Categories and Their Variants:
{catalog_listing}

## Instructions:
1. Rewrite the project description into a professional summary for the customer.
2. {material_instructions}
3. Estimate the quantity and unit for each material using UK trade conventions (m², m³, tonnes, bags, lengths, items) and allow 10% for waste and cutting.
4. If a required material is not in the list above, still include it and append "(to be quoted)" to its name. Never omit a material.
5. Estimate the total labour hours required.
6. Provide a step-by-step construction method based on UK building best practice.
7. List any important considerations or potential issues.

## Response Format:
You MUST respond with a single valid JSON object only. No markdown, no explanation.

{{
    "materials": [
        {{"name": "string", "quantity": 0, "unit": "string"}}
    ],
    "method": {{
        "steps": ["string"],
        "considerations": ["string"]
    }},
    "customerQuote": {{
        "rewrittenProjectSummary": "string",
        "labourHours": 0
    }}
}}
"""

CATALOG_MATERIAL_INSTRUCTIONS = (
    'Create a material list. For each material available in the list above you MUST use '
    'the exact "Category" name (e.g. "Paving Slabs"). Do not invent new names for them.'
)
GENERIC_MATERIAL_INSTRUCTIONS = (
    "Create a GENERIC material list based on the project description as no specific "
    "products were found. The user will select specific products later."
)
NO_CATALOG_LISTING = "None found. Please generate a generic list."


def format_catalog_listing(products: Sequence[CatalogProduct]) -> str:
    """Render grouped products as prompt text, one category per block."""
    blocks = []
    for category, variants in group_products(products).items():
        variant_lines = "\n".join(f"- {v.name} (ID: {v.id})" for v in variants)
        blocks.append(f'Category: "{category}"\nVariants:\n{variant_lines}')
    return "\n\n".join(blocks)


def _to_number(value: Any) -> float:
    """Coerce a model-supplied number, with 0 for anything unusable."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        value = value.strip().replace(",", "")
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number) or number < 0:
        return 0.0
    return number


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if item is not None and str(item).strip()]


def _parse_materials(raw_materials: Any) -> List[MaterialRequirement]:
    if not isinstance(raw_materials, list):
        if raw_materials is not None:
            logger.warning("plan_materials_not_a_list", type=type(raw_materials).__name__)
        return []

    materials = []
    for item in raw_materials:
        if isinstance(item, str):
            item = {"name": item}
        if not isinstance(item, dict):
            continue

        name = str(item.get("name") or "").replace('"', "").strip()
        unit = str(item.get("unit") or "").strip() or DEFAULT_UNIT
        materials.append(MaterialRequirement(
            name=name,
            quantity=_to_number(item.get("quantity")),
            unit=unit,
        ))
    return materials


def _parse_method(raw_method: Any) -> ConstructionMethod:
    if not isinstance(raw_method, dict):
        return ConstructionMethod()
    return ConstructionMethod(
        steps=_string_list(raw_method.get("steps")),
        considerations=_string_list(raw_method.get("considerations")),
    )


def normalize_plan(payload: Dict[str, Any], project_type: Optional[str] = None) -> GenerationPlan:
    """Fill defaults for any missing or malformed part of a parsed plan.

    Labour hours are read from ``customerQuote.labourHours`` or a top-level
    ``labourHours``; a positive ``customerQuote.labourRate`` is kept as the
    plan's suggested rate.
    """
    customer_quote = payload.get("customerQuote")
    if not isinstance(customer_quote, dict):
        customer_quote = {}

    hours_value = customer_quote.get("labourHours", payload.get("labourHours"))
    rate = _to_number(customer_quote.get("labourRate"))

    return GenerationPlan(
        materials=_parse_materials(payload.get("materials")),
        method=_parse_method(payload.get("method")),
        labour_hours=_to_number(hours_value),
        labour_rate=rate if rate > 0 else None,
        rewritten_project_summary=str(customer_quote.get("rewrittenProjectSummary") or "").strip(),
        project_type=project_type,
    )


class PlanGenerator:
    """Builds plan prompts and parses the model's reply."""

    def __init__(
        self,
        llm: LLMService,
        prompt_template: str = PLAN_PROMPT,
        project_type_prompt: str = PROJECT_TYPE_PROMPT,
    ):
        self.llm = llm
        self.prompt_template = prompt_template
        self.project_type_prompt = project_type_prompt

    async def classify_project(self, job_description: str) -> str:
        """Return a short project-type label, or "general" if unusable."""
        raw = await self.llm.complete(
            self.project_type_prompt.format(job_description=job_description),
            purpose="project_type"
        )
        label = " ".join((raw or "").strip().strip('."\'`').lower().split())
        if not label or len(label) > MAX_PROJECT_TYPE_LENGTH or "\n" in (raw or "").strip():
            logger.warning("project_type_unusable", raw=(raw or "")[:100])
            return DEFAULT_PROJECT_TYPE
        return label

    def build_prompt(
        self,
        job_description: str,
        catalog: Optional[Sequence[CatalogProduct]] = None,
        project_type: Optional[str] = None
    ) -> str:
        listing = format_catalog_listing(catalog or [])
        return self.prompt_template.format(
            job_description=job_description,
            project_type=project_type or DEFAULT_PROJECT_TYPE,
            catalog_listing=listing or NO_CATALOG_LISTING,
            material_instructions=(
                CATALOG_MATERIAL_INSTRUCTIONS if listing else GENERIC_MATERIAL_INSTRUCTIONS
            ),
        )

    async def generate(
        self,
        job_description: str,
        catalog: Optional[Sequence[CatalogProduct]] = None,
        project_type: Optional[str] = None
    ) -> GenerationPlan:
        """Generate and normalize a plan.

        Raises:
            PlanParseError: If the reply holds no parseable JSON object.
            LLMError: If the text-generation service keeps failing.
        """
        prompt = self.build_prompt(job_description, catalog, project_type)
        raw = await self.llm.complete(prompt, purpose="plan")

        plan = normalize_plan(extract_json_object(raw), project_type=project_type)

        logger.info(
            "plan_generated",
            materials=len(plan.materials),
            steps=len(plan.method.steps),
            labour_hours=plan.labour_hours,
            catalog_products=len(catalog or [])
        )
        return plan
