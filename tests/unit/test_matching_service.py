"""
Unit Tests for RelevanceMatcher.

Test Coverage:
- Manual placeholder when the catalogue has nothing
- Threshold filtering and best-first ordering
- AI disambiguation: picked ids, empty answer, unparseable answer
- Excluded colour-dye modifiers
- Options are never empty
"""

import pytest

from quotegen.config.vocabulary import EXCLUDED_MODIFIERS
from quotegen.models.quote import CatalogProduct
from quotegen.services.llm_service import LLMService
from quotegen.services.matching_service import (
    MatchStrategy,
    RelevanceMatcher,
    manual_option,
    strip_quote_marker,
)
from tests.fixtures.fakes import FakeLLMFactory, make_settings
from tests.fixtures.mock_catalog_data import (
    BUFF_RECORD,
    PIGMENT_RECORD,
    RAJ_GREEN_RECORD,
    SHARP_SAND_RECORD,
)

RAJ_GREEN = CatalogProduct.from_record(RAJ_GREEN_RECORD)
BUFF = CatalogProduct.from_record(BUFF_RECORD)
SHARP_SAND = CatalogProduct.from_record(SHARP_SAND_RECORD)
PIGMENT = CatalogProduct.from_record(PIGMENT_RECORD)


def scoring_matcher(**kwargs) -> RelevanceMatcher:
    return RelevanceMatcher(threshold=0.4, top_n=5, excluded_modifiers=EXCLUDED_MODIFIERS, use_ai=False, **kwargs)


def ai_matcher(reply):
    factory = FakeLLMFactory(lambda prompt: reply)
    llm = LLMService(make_settings(), client_factory=factory)
    matcher = RelevanceMatcher(threshold=0.4, top_n=5, excluded_modifiers=EXCLUDED_MODIFIERS, llm=llm)
    return matcher, factory


# =============================================================================
# Helpers
# =============================================================================


class TestManualOption:
    """Tests for manual placeholder construction."""

    def test_strip_quote_marker(self):
        assert strip_quote_marker('"Cement" (To Be Quoted)') == "Cement"
        assert strip_quote_marker("Sharp Sand") == "Sharp Sand"

    def test_manual_option_shape(self):
        option = manual_option("Cement (to be quoted)")

        assert option.id == "manual-cement"
        assert option.name == "Cement"
        assert option.image is None
        assert option.is_manual


# =============================================================================
# Scoring only
# =============================================================================


class TestScoring:
    """Tests for threshold scoring without AI."""

    @pytest.mark.asyncio
    async def test_no_candidates_gives_single_manual_option(self):
        result = await scoring_matcher().resolve("Cement (to be quoted)", [])

        assert result.strategy == MatchStrategy.NOT_FOUND
        assert len(result.options) == 1
        assert result.options[0].id.startswith("manual-")
        assert "No matching products found" in result.options[0].description

    @pytest.mark.asyncio
    async def test_accepted_candidates_best_first(self):
        result = await scoring_matcher().resolve("Sandstone Paving Slabs", [RAJ_GREEN, SHARP_SAND, BUFF])

        assert result.strategy == MatchStrategy.SCORED
        assert [o.id for o in result.options] == ["102", "101"]
        assert result.scores[0] == ("102", 1.0)

    @pytest.mark.asyncio
    async def test_nothing_above_threshold_gives_manual_only(self):
        result = await scoring_matcher().resolve("Cement (to be quoted)", [RAJ_GREEN, BUFF])

        assert result.strategy == MatchStrategy.NO_CONFIDENT_MATCH
        assert [o.id for o in result.options] == ["manual-cement"]
        assert "(to be quoted)" in result.options[0].description

    @pytest.mark.asyncio
    async def test_top_n_limits_options(self):
        matcher = scoring_matcher()
        matcher.top_n = 1

        result = await matcher.resolve("Sandstone Paving Slabs", [RAJ_GREEN, BUFF])

        assert [o.id for o in result.options] == ["102"]

    @pytest.mark.asyncio
    async def test_always_offer_manual_option_puts_placeholder_first(self):
        result = await scoring_matcher(always_offer_manual=True).resolve(
            "Sandstone Paving Slabs", [RAJ_GREEN, BUFF]
        )

        assert [o.id for o in result.options] == ["manual-sandstone-paving-slabs", "102", "101"]

    @pytest.mark.asyncio
    async def test_excluded_modifier_is_dropped(self):
        result = await scoring_matcher().resolve("Sandstone Paving Slabs", [PIGMENT])

        assert result.strategy == MatchStrategy.NOT_FOUND
        assert result.options[0].is_manual

    @pytest.mark.asyncio
    async def test_excluded_modifier_kept_when_requested(self):
        result = await scoring_matcher().resolve("Paving Pigment Dye", [PIGMENT])
        assert [o.id for o in result.options] == ["104"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["Sandstone Paving Slabs", "Cement", "Sharp Sand", "x", ""])
    @pytest.mark.parametrize("candidates", [[], [SHARP_SAND], [RAJ_GREEN, BUFF, SHARP_SAND, PIGMENT]])
    async def test_options_never_empty(self, name, candidates):
        result = await scoring_matcher().resolve(name, candidates)
        assert len(result.options) >= 1


# =============================================================================
# AI disambiguation
# =============================================================================


class TestDisambiguation:
    """Tests for AI-assisted selection."""

    @pytest.mark.asyncio
    async def test_single_accepted_candidate_skips_ai(self):
        matcher, factory = ai_matcher('["201"]')

        result = await matcher.resolve("Sandstone Paving Slabs", [BUFF, SHARP_SAND])

        assert [o.id for o in result.options] == ["102"]
        assert factory.prompts == []

    @pytest.mark.asyncio
    async def test_ambiguous_candidates_use_ai_pick(self):
        matcher, factory = ai_matcher('Matches: ["101"]')

        result = await matcher.resolve("Sandstone Paving Slabs", [RAJ_GREEN, BUFF])

        assert result.strategy == MatchStrategy.AI_SELECTED
        assert [o.id for o in result.options] == ["manual-sandstone-paving-slabs", "101"]
        assert "101: Indian Sandstone Paving Slabs" in factory.prompts[0]

    @pytest.mark.asyncio
    async def test_ai_picks_keep_score_order(self):
        matcher, _ = ai_matcher('["101", "102"]')

        result = await matcher.resolve("Sandstone Paving Slabs", [RAJ_GREEN, BUFF])

        assert [o.id for o in result.options][1:] == ["102", "101"]

    @pytest.mark.asyncio
    async def test_ai_can_rescue_low_scores(self):
        matcher, _ = ai_matcher('["102"]')

        result = await matcher.resolve("Patio Flags", [RAJ_GREEN, BUFF])

        assert [o.id for o in result.options] == ["manual-patio-flags", "102"]

    @pytest.mark.asyncio
    async def test_empty_ai_answer_gives_manual_only(self):
        matcher, _ = ai_matcher("[]")

        result = await matcher.resolve("Sandstone Paving Slabs", [RAJ_GREEN, BUFF])

        assert result.strategy == MatchStrategy.NO_CONFIDENT_MATCH
        assert [o.id for o in result.options] == ["manual-sandstone-paving-slabs"]

    @pytest.mark.asyncio
    async def test_unknown_ids_are_ignored(self):
        matcher, _ = ai_matcher('["999"]')

        result = await matcher.resolve("Sandstone Paving Slabs", [RAJ_GREEN, BUFF])

        assert len(result.options) == 1
        assert result.options[0].is_manual

    @pytest.mark.asyncio
    async def test_unparseable_answer_falls_back_to_scores(self):
        matcher, _ = ai_matcher("I think the first one is best.")

        result = await matcher.resolve("Sandstone Paving Slabs", [RAJ_GREEN, BUFF])

        assert result.strategy == MatchStrategy.AI_FALLBACK
        assert [o.id for o in result.options] == ["102", "101"]

    @pytest.mark.asyncio
    async def test_unparseable_answer_without_accepted_offers_ranked_candidates(self):
        matcher, _ = ai_matcher("no idea")

        result = await matcher.resolve("Patio Flags", [RAJ_GREEN, BUFF])

        assert result.strategy == MatchStrategy.AI_FALLBACK
        assert [o.id for o in result.options] == ["manual-patio-flags", "102", "101"]
        assert [pid for pid, _ in result.scores] == ["102", "101"]

    @pytest.mark.asyncio
    async def test_llm_failure_without_accepted_offers_ranked_candidates(self):
        matcher, _ = ai_matcher(ValueError("invalid api key"))

        result = await matcher.resolve("Patio Flags", [RAJ_GREEN, BUFF])

        assert [o.id for o in result.options][0] == "manual-patio-flags"
        assert len(result.options) == 3

    @pytest.mark.asyncio
    async def test_llm_failure_falls_back_to_scores(self):
        matcher, _ = ai_matcher(ValueError("invalid api key"))

        result = await matcher.resolve("Sandstone Paving Slabs", [RAJ_GREEN, BUFF])

        assert [o.id for o in result.options] == ["102", "101"]
