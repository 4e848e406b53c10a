"""Fake collaborators for QuoteGen tests.

The LLM is replaced through ``LLMService(client_factory=...)`` and the
catalogue through ``httpx.MockTransport``; nothing here touches the network.
"""

import json
from typing import Any, Callable, Dict, List, Union
from unittest.mock import MagicMock
from urllib.parse import parse_qs, urlparse

import httpx

from quotegen.config.settings import Settings
from quotegen.services.catalog_service import CatalogSearchClient
from quotegen.services.llm_service import LLMService

CATALOG_BASE_URL = "https://catalog.test/wp-json/atp/v1"

Responder = Callable[[str], Union[str, Exception]]


def make_settings(**overrides: Any) -> Settings:
    """Deterministic settings: no AI keywords/disambiguation/classification, no backoff."""
    values = dict(
        openai_api_key="test-api-key",
        llm_model="primary-model",
        llm_fallback_model=None,
        llm_backoff_initial_seconds=0.0,
        llm_backoff_max_seconds=0.0,
        catalog_base_url=CATALOG_BASE_URL,
        catalog_search_mode="per_keyword",
        use_ai_keywords=False,
        use_ai_disambiguation=False,
        classify_project=False,
        always_offer_manual_option=False,
        labour_rate=35.0,
        match_threshold=0.4,
    )
    values.update(overrides)
    return Settings(**values)


# ============================================================================
# LLM
# ============================================================================


class FakeChatModel:
    """Stands in for ChatOpenAI: records prompts, answers through *responder*."""

    def __init__(self, model: str, responder: Responder):
        self.model = model
        self.responder = responder
        self.prompts: List[str] = []

    async def ainvoke(self, messages):
        prompt = messages[-1].content
        self.prompts.append(prompt)
        reply = self.responder(prompt)
        if isinstance(reply, Exception):
            raise reply
        return MagicMock(content=reply)


class FakeLLMFactory:
    """client_factory for LLMService; keeps every fake it builds by model."""

    def __init__(self, responder: Responder):
        self.responder = responder
        self.models: Dict[str, FakeChatModel] = {}

    def __call__(self, model: str) -> FakeChatModel:
        self.models[model] = FakeChatModel(model, self.responder)
        return self.models[model]

    @property
    def prompts(self) -> List[str]:
        return [p for fake in self.models.values() for p in fake.prompts]


def make_llm(settings: Settings, responder: Responder) -> LLMService:
    return LLMService(settings, client_factory=FakeLLMFactory(responder))


def plan_reply(plan: Dict[str, Any]) -> str:
    """Wrap a plan the way models tend to: commentary plus a fenced block."""
    return "Here is the plan:\n```json\n" + json.dumps(plan) + "\n```\nLet me know if you need changes."


# ============================================================================
# Catalogue
# ============================================================================


class CatalogRecorder:
    """httpx.MockTransport handler answering from a query -> payload function."""

    def __init__(self, answer: Callable[[str], Any] = lambda query: [], status_code: int = 200):
        self.answer = answer
        self.status_code = status_code
        self.queries: List[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        query = parse_qs(urlparse(str(request.url)).query).get("q", [""])[0]
        self.queries.append(query)
        if self.status_code >= 400:
            return httpx.Response(self.status_code, text="Internal Server Error")
        return httpx.Response(self.status_code, json=self.answer(query))


def make_catalog_client(recorder: CatalogRecorder, max_keywords: int = 8) -> CatalogSearchClient:
    return CatalogSearchClient(
        base_url=CATALOG_BASE_URL,
        max_keywords=max_keywords,
        transport=httpx.MockTransport(recorder),
    )
