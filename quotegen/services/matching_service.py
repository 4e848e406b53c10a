"""Relevance matching of plan materials against catalogue products.

Scores candidates with a bigram Dice coefficient over cleaned titles,
keeps those above a tunable threshold, and asks the text-generation service
to disambiguate when scoring alone is inconclusive. A manual placeholder
option is produced whenever nothing can be offered with confidence.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import structlog

from quotegen.config.vocabulary import TO_BE_QUOTED_MARKER
from quotegen.models.quote import CatalogProduct, MaterialOption, MANUAL_OPTION_PREFIX
from quotegen.services.llm_service import LLMService
from quotegen.utils.json_extract import extract_json_array
from quotegen.utils.text import dice_coefficient, matching_key, slugify

logger = structlog.get_logger(__name__)

NOT_FOUND_DESCRIPTION = (
    "No matching products found in the catalogue (to be quoted). "
    "Please select or price a product manually."
)
NO_CONFIDENT_MATCH_DESCRIPTION = (
    "No confident catalogue match (to be quoted). "
    "Please select or price a product manually."
)
MANUAL_CHOICE_DESCRIPTION = "Generic item, please select a specific product."

DISAMBIGUATION_PROMPT = """You are a product specialist at a UK builder's merchant.

A quote needs the material: "{material_name}"

Candidate catalogue products (id: name - description):
{candidates}

Which candidates genuinely are "{material_name}" (same kind of product, any size or colour)?
Respond ONLY with a JSON array of the matching ids, best match first, e.g. ["123", "456"].
Respond with [] if none of them match.
"""


class MatchStrategy:
    """How the options for a material were chosen."""

    SCORED = "scored"
    AI_SELECTED = "ai_selected"
    AI_FALLBACK = "ai_fallback"
    NO_CONFIDENT_MATCH = "no_confident_match"
    NOT_FOUND = "not_found"


@dataclass
class MatchResult:
    """Ordered options for one material plus how they were chosen."""

    options: List[MaterialOption]
    strategy: str
    scores: List[Tuple[str, float]] = field(default_factory=list)


def strip_quote_marker(name: str) -> str:
    """Remove the "(to be quoted)" marker and stray quotes from a plan name."""
    cleaned = (name or "").replace('"', "")
    index = cleaned.lower().find(TO_BE_QUOTED_MARKER)
    if index != -1:
        cleaned = cleaned[:index] + cleaned[index + len(TO_BE_QUOTED_MARKER):]
    return " ".join(cleaned.split())


def manual_option(material_name: str, description: str = MANUAL_CHOICE_DESCRIPTION) -> MaterialOption:
    """Placeholder option for a material with no catalogue product."""
    name = strip_quote_marker(material_name) or material_name
    return MaterialOption(
        id=f"{MANUAL_OPTION_PREFIX}{slugify(name)}",
        name=name,
        image=None,
        description=description,
        link=None,
    )


class RelevanceMatcher:
    """Matches a material name against candidate catalogue products."""

    def __init__(
        self,
        threshold: float = 0.4,
        top_n: int = 5,
        excluded_modifiers: Sequence[str] = (),
        llm: Optional[LLMService] = None,
        use_ai: bool = True,
        always_offer_manual: bool = False,
        prompt_template: str = DISAMBIGUATION_PROMPT,
    ):
        self.threshold = threshold
        self.top_n = top_n
        self.excluded_modifiers = tuple(m.lower() for m in excluded_modifiers)
        self.llm = llm
        self.use_ai = use_ai and llm is not None
        self.always_offer_manual = always_offer_manual
        self.prompt_template = prompt_template

    def _is_excluded(self, product: CatalogProduct, query: str) -> bool:
        name = product.name.lower()
        return any(m in name and m not in query for m in self.excluded_modifiers)

    def score(self, material_name: str, product: CatalogProduct) -> float:
        """Similarity between a material name and a product title."""
        return dice_coefficient(matching_key(strip_quote_marker(material_name)), matching_key(product.name))

    def rank(
        self,
        material_name: str,
        candidates: Sequence[CatalogProduct]
    ) -> List[Tuple[CatalogProduct, float]]:
        """Score every candidate, best first. Excluded modifiers are dropped."""
        query = strip_quote_marker(material_name).lower()
        scored = [
            (product, self.score(material_name, product))
            for product in candidates
            if not self._is_excluded(product, query)
        ]
        scored.sort(key=lambda pair: pair[1], reverse=True)
        return scored

    async def _ask_ai(
        self,
        material_name: str,
        pool: Sequence[Tuple[CatalogProduct, float]]
    ) -> List[CatalogProduct]:
        """Ask the model which pool entries match; raises ValueError on a bad reply."""
        listing = "\n".join(
            f"{product.id}: {product.name}"
            + (f" - {product.description[:120]}" if product.description else "")
            for product, _ in pool
        )
        raw = await self.llm.complete(
            self.prompt_template.format(material_name=material_name, candidates=listing),
            purpose="disambiguation"
        )
        chosen_ids = {str(item) for item in extract_json_array(raw)}
        return [product for product, _ in pool if product.id in chosen_ids]

    def _with_manual(self, material_name: str, options: List[MaterialOption], force: bool) -> List[MaterialOption]:
        if force or self.always_offer_manual:
            return [manual_option(material_name)] + options
        return options

    async def resolve(self, material_name: str, candidates: Sequence[CatalogProduct]) -> MatchResult:
        """Return ordered options for *material_name*.

        Options are never empty. A manual placeholder comes first whenever it
        is present; catalogue products follow best score first.
        """
        display_name = strip_quote_marker(material_name) or material_name
        ranked = self.rank(material_name, candidates)
        scores = [(product.id, round(value, 4)) for product, value in ranked]

        if not ranked:
            return MatchResult(
                options=[manual_option(display_name, NOT_FOUND_DESCRIPTION)],
                strategy=MatchStrategy.NOT_FOUND,
                scores=scores,
            )

        accepted = [(p, s) for p, s in ranked if s >= self.threshold]

        if len(accepted) == 1 or (accepted and not self.use_ai):
            options = [MaterialOption.from_product(p) for p, _ in accepted[:self.top_n]]
            return MatchResult(
                options=self._with_manual(display_name, options, force=False),
                strategy=MatchStrategy.SCORED,
                scores=scores,
            )

        if self.use_ai:
            pool = accepted[:self.top_n] if accepted else ranked[:self.top_n]
            try:
                picked = await self._ask_ai(display_name, pool)
            except Exception as e:
                logger.warning(
                    "disambiguation_failed_using_scores",
                    material=display_name,
                    error=str(e)
                )
                options = [MaterialOption.from_product(p) for p, _ in pool]
                return MatchResult(
                    options=self._with_manual(display_name, options, force=not accepted),
                    strategy=MatchStrategy.AI_FALLBACK,
                    scores=scores,
                )
            else:
                if picked:
                    options = [MaterialOption.from_product(p) for p in picked]
                    return MatchResult(
                        options=self._with_manual(display_name, options, force=True),
                        strategy=MatchStrategy.AI_SELECTED,
                        scores=scores,
                    )

        return MatchResult(
            options=[manual_option(display_name, NO_CONFIDENT_MATCH_DESCRIPTION)],
            strategy=MatchStrategy.NO_CONFIDENT_MATCH,
            scores=scores,
        )
