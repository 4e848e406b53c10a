"""LLM service for QuoteGen.

Provides LangChain/OpenAI access for keyword extraction, project
classification, plan generation and candidate disambiguation.
"""

from typing import Any, Callable, Dict, List, Optional
import structlog
from langchain_openai import ChatOpenAI
from langchain_core.messages import HumanMessage

from quotegen.config.settings import Settings
from quotegen.config.errors import LLMError
from quotegen.utils.retry import RetryPolicy, is_transient_error, with_retry_and_fallback

logger = structlog.get_logger(__name__)


class LLMService:
    """Service for text completions using LangChain.

    Wraps one ChatOpenAI client per model identifier, retries transient
    failures with backoff and falls back to a second model when the primary
    stays overloaded.
    """

    def __init__(
        self,
        settings: Settings,
        client_factory: Optional[Callable[[str], Any]] = None
    ):
        """Initialize LLMService.

        Args:
            settings: Validated application settings.
            client_factory: Optional callable building a chat client for a
                model name. Anything exposing ``ainvoke(messages)`` works.
        """
        self.model = settings.llm_model
        self.fallback_model = settings.llm_fallback_model
        self.temperature = settings.llm_temperature
        self.timeout = settings.llm_timeout_seconds
        self.api_key = settings.openai_api_key
        self.retry_policy = RetryPolicy(
            max_attempts=settings.llm_max_attempts,
            initial_wait=settings.llm_backoff_initial_seconds,
            max_wait=settings.llm_backoff_max_seconds,
        )

        self._client_factory = client_factory or self._create_chat_model
        self._clients: Dict[str, Any] = {}
        self._calls = 0
        self.last_model: Optional[str] = None

    @property
    def calls(self) -> int:
        """Number of completed completions."""
        return self._calls

    def _create_chat_model(self, model: str) -> ChatOpenAI:
        return ChatOpenAI(
            model=model,
            temperature=self.temperature,
            api_key=self.api_key,
            timeout=self.timeout,
            max_retries=0
        )

    def client(self, model: str) -> Any:
        """Get the chat client for *model* (lazy initialization)."""
        if model not in self._clients:
            self._clients[model] = self._client_factory(model)
        return self._clients[model]

    async def _invoke(self, model: str, prompt: str) -> str:
        response = await self.client(model).ainvoke([HumanMessage(content=prompt)])
        content = getattr(response, "content", response)
        if isinstance(content, list):
            # Content blocks
            content = "".join(
                block.get("text", "") if isinstance(block, dict) else str(block)
                for block in content
            )
        return str(content or "")

    async def complete(self, prompt: str, purpose: str = "completion") -> str:
        """Send *prompt* and return the raw text reply.

        Args:
            prompt: Full prompt text.
            purpose: Short label used in logs (e.g. "plan", "keywords").

        Returns:
            The model's text response.

        Raises:
            LLMError: If the call still fails after retries and fallback.
        """
        tried: List[str] = []

        async def _call(model: str) -> str:
            tried.append(model)
            return await self._invoke(model, prompt)

        fallback = None
        if self.fallback_model and self.fallback_model != self.model:
            fallback = lambda: _call(self.fallback_model)  # noqa: E731

        try:
            text = await with_retry_and_fallback(
                lambda: _call(self.model),
                self.retry_policy,
                fallback=fallback,
            )
        except Exception as e:
            self.last_model = tried[-1] if tried else self.model
            transient = is_transient_error(e)
            logger.error(
                "llm_call_failed",
                purpose=purpose,
                model=self.last_model,
                fallback_model=self.fallback_model,
                transient=transient,
                error=str(e)
            )
            raise LLMError(
                message=(
                    "Text-generation service is overloaded, please try again later"
                    if transient else f"LLM generation failed: {e}"
                ),
                model=self.last_model,
                transient=transient,
                details={"original_error": str(e), "purpose": purpose}
            ) from e

        self._calls += 1
        self.last_model = tried[-1]
        logger.info(
            "llm_generated",
            purpose=purpose,
            model=self.last_model,
            prompt_length=len(prompt),
            content_length=len(text)
        )
        return text
