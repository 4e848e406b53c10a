"""Keyword extraction for catalogue search.

Turns a job description into an ordered list of unique lowercase search
terms. The heuristic path filters stop words and expands a small synonym
table; the AI path asks the text-generation service for material nouns and
always merges in the heuristic result, so extraction never fails.
"""

import re
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

import structlog

from quotegen.services.llm_service import LLMService

logger = structlog.get_logger(__name__)

MIN_KEYWORD_LENGTH = 3

_RE_PUNCTUATION = re.compile(r"[^\w\s-]")
_RE_SPLIT_WORDS = re.compile(r"[\s]+")
_RE_SPLIT_LIST = re.compile(r"[,;\n]+")
_RE_LIST_NOISE = re.compile(r"^[\s\-*•\d.)\"'`]+|[\s\"'`.]+$")
# Bare numbers and dimensions such as "12", "4.5", "4x3", "600x600mm", "10m2"
_RE_NUMERIC_TOKEN = re.compile(
    r"^\d+(?:\.\d+)?(?:\s*x\s*\d+(?:\.\d+)?)*\s*(?:mm|cm|m|m2|m²|sqm|kg|t|ft)?$",
    re.IGNORECASE,
)

KEYWORD_PROMPT = """You are helping a UK builder's merchant search its online product catalogue.

List the construction materials, products and accessories needed for the project below.
Respond ONLY with a comma-separated list of short lowercase nouns (one to three words each).
No quantities, no sizes, no numbering, no explanations.

Project description:
"{job_description}"
"""


class KeywordExtractor:
    """Extracts catalogue search terms from a job description."""

    def __init__(
        self,
        stop_words: FrozenSet[str],
        synonyms: Dict[str, Tuple[str, ...]],
        llm: Optional[LLMService] = None,
        use_ai: bool = True,
        prompt_template: str = KEYWORD_PROMPT,
    ):
        self.stop_words = frozenset(w.lower() for w in stop_words)
        self.synonyms = synonyms
        self.llm = llm
        self.use_ai = use_ai and llm is not None
        self.prompt_template = prompt_template

    def is_valid_keyword(self, term: str) -> bool:
        """Long enough, not a stop word, not just a number or dimension."""
        return (
            len(term) >= MIN_KEYWORD_LENGTH
            and term not in self.stop_words
            and not _RE_NUMERIC_TOKEN.match(term)
        )

    def _unique_valid(self, terms: Iterable[str]) -> List[str]:
        seen = set()
        result = []
        for term in terms:
            term = term.strip().lower()
            if term in seen or not self.is_valid_keyword(term):
                continue
            seen.add(term)
            result.append(term)
        return result

    def extract_heuristic(self, job_description: str) -> List[str]:
        """Stop-word filtering plus additive synonym expansion."""
        text = _RE_PUNCTUATION.sub(" ", (job_description or "").lower())
        words = self._unique_valid(w.strip("-") for w in _RE_SPLIT_WORDS.split(text))

        expanded = list(words)
        for word in words:
            expanded.extend(self.synonyms.get(word, ()))
        return self._unique_valid(expanded)

    def parse_ai_keywords(self, raw_text: str) -> List[str]:
        """Split a delimited model reply into filtered keywords."""
        terms = []
        for item in _RE_SPLIT_LIST.split(raw_text or ""):
            item = _RE_LIST_NOISE.sub("", item.strip().lower())
            item = _RE_SPLIT_WORDS.sub(" ", item)
            if item:
                terms.append(item)
        return self._unique_valid(terms)

    async def extract(self, job_description: str) -> List[str]:
        """Extract keywords, preferring the AI list when it is available.

        The heuristic keywords are always included, so a failed or empty AI
        reply degrades to the heuristic result instead of raising.
        """
        heuristic = self.extract_heuristic(job_description)
        if not self.use_ai:
            return heuristic

        try:
            raw = await self.llm.complete(
                self.prompt_template.format(job_description=job_description),
                purpose="keywords"
            )
            ai_terms = self.parse_ai_keywords(raw)
        except Exception as e:
            logger.warning("ai_keyword_extraction_failed", error=str(e))
            return heuristic

        if not ai_terms:
            logger.warning("ai_keyword_extraction_empty")
            return heuristic

        merged = self._unique_valid(ai_terms + heuristic)
        logger.info(
            "keywords_extracted",
            ai_count=len(ai_terms),
            heuristic_count=len(heuristic),
            total=len(merged)
        )
        return merged
