"""QuoteGen configuration settings.

Loads configuration from environment variables with sensible defaults.
A Settings instance is built once at start-up, validated, and passed down
to the pipeline explicitly.
"""

import os
from typing import Dict, FrozenSet, List, Optional, Tuple
from dataclasses import dataclass, field
from dotenv import load_dotenv

from quotegen.config import vocabulary
from quotegen.config.errors import ConfigurationError

# Load .env file for local development
load_dotenv()

SEARCH_MODES = ("per_keyword", "combined")


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    # Text-generation service
    openai_api_key: Optional[str] = field(
        default_factory=lambda: (os.getenv("OPENAI_API_KEY") or "").strip() or None,
        repr=False
    )
    llm_model: str = field(default_factory=lambda: os.getenv("LLM_MODEL", "gpt-4o-mini"))
    llm_fallback_model: Optional[str] = field(
        default_factory=lambda: os.getenv("LLM_FALLBACK_MODEL", "gpt-4o").strip() or None
    )
    llm_temperature: float = field(default_factory=lambda: float(os.getenv("LLM_TEMPERATURE", "0.2")))
    llm_timeout_seconds: float = field(default_factory=lambda: float(os.getenv("LLM_TIMEOUT_SECONDS", "60")))
    llm_max_attempts: int = field(default_factory=lambda: int(os.getenv("LLM_MAX_ATTEMPTS", "3")))
    llm_backoff_initial_seconds: float = field(
        default_factory=lambda: float(os.getenv("LLM_BACKOFF_INITIAL_SECONDS", "1.0"))
    )
    llm_backoff_max_seconds: float = field(
        default_factory=lambda: float(os.getenv("LLM_BACKOFF_MAX_SECONDS", "8.0"))
    )

    # Product catalogue
    catalog_base_url: str = field(
        default_factory=lambda: os.getenv(
            "CATALOG_BASE_URL", "https://attradeprice.co.uk/wp-json/atp/v1"
        ).rstrip("/")
    )
    catalog_timeout_seconds: float = field(
        default_factory=lambda: float(os.getenv("CATALOG_TIMEOUT_SECONDS", "15"))
    )
    catalog_max_keywords: int = field(default_factory=lambda: int(os.getenv("CATALOG_MAX_KEYWORDS", "8")))
    catalog_search_mode: str = field(
        default_factory=lambda: os.getenv("CATALOG_SEARCH_MODE", "per_keyword").strip().lower()
    )
    search_per_material: bool = field(default_factory=lambda: _env_bool("SEARCH_PER_MATERIAL", "true"))

    # Matching
    match_threshold: float = field(default_factory=lambda: float(os.getenv("MATCH_THRESHOLD", "0.4")))
    match_top_n: int = field(default_factory=lambda: int(os.getenv("MATCH_TOP_N", "5")))
    always_offer_manual_option: bool = field(
        default_factory=lambda: _env_bool("ALWAYS_OFFER_MANUAL_OPTION", "false")
    )

    # Pipeline features
    use_ai_keywords: bool = field(default_factory=lambda: _env_bool("USE_AI_KEYWORDS", "true"))
    use_ai_disambiguation: bool = field(default_factory=lambda: _env_bool("USE_AI_DISAMBIGUATION", "true"))
    classify_project: bool = field(default_factory=lambda: _env_bool("CLASSIFY_PROJECT", "true"))
    material_concurrency: int = field(default_factory=lambda: int(os.getenv("MATERIAL_CONCURRENCY", "4")))

    # Quote
    labour_rate: float = field(default_factory=lambda: float(os.getenv("LABOUR_RATE", "35")))

    # Vocabulary tables
    stop_words: FrozenSet[str] = field(default_factory=lambda: vocabulary.STOP_WORDS)
    synonyms: Dict[str, Tuple[str, ...]] = field(default_factory=lambda: dict(vocabulary.SYNONYMS))
    natural_stone_triggers: Tuple[str, ...] = vocabulary.NATURAL_STONE_TRIGGERS
    natural_stone_disqualifiers: Tuple[str, ...] = vocabulary.NATURAL_STONE_DISQUALIFIERS
    natural_stone_qualifiers: Tuple[str, ...] = vocabulary.NATURAL_STONE_QUALIFIERS
    excluded_modifiers: Tuple[str, ...] = vocabulary.EXCLUDED_MODIFIERS

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    def problems(self) -> List[str]:
        """Collect every configuration problem instead of stopping at the first."""
        found = []
        if not self.openai_api_key:
            found.append("OPENAI_API_KEY is required")
        if not 0.0 <= self.match_threshold <= 1.0:
            found.append(f"MATCH_THRESHOLD must be between 0 and 1, got {self.match_threshold}")
        if self.match_top_n < 1:
            found.append("MATCH_TOP_N must be at least 1")
        if self.labour_rate < 0:
            found.append("LABOUR_RATE must not be negative")
        if self.llm_max_attempts < 1:
            found.append("LLM_MAX_ATTEMPTS must be at least 1")
        if self.catalog_max_keywords < 1:
            found.append("CATALOG_MAX_KEYWORDS must be at least 1")
        if self.material_concurrency < 1:
            found.append("MATERIAL_CONCURRENCY must be at least 1")
        if self.catalog_search_mode not in SEARCH_MODES:
            found.append(
                f"CATALOG_SEARCH_MODE must be one of {', '.join(SEARCH_MODES)}, "
                f"got {self.catalog_search_mode!r}"
            )
        if not self.catalog_base_url:
            found.append("CATALOG_BASE_URL is required")
        return found

    def validate(self) -> None:
        """Validate required settings are present.

        Raises:
            ConfigurationError: If any setting is missing or out of range.
        """
        found = self.problems()
        if found:
            raise ConfigurationError(found)
