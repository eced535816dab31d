"""AI sub-task suggestions backed by an OpenAI chat model."""

import asyncio
import json
import logging
from typing import Any, List, Optional

import openai
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from ..config import Settings
from ..exceptions import (
    ConfigurationError,
    ProviderError,
    UpstreamThrottledError,
    ValidationError,
)
from ..utils.logging import TimedOperation

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a productivity assistant that breaks tasks into smaller steps.
Respond with a JSON array of strings only, like ["Subtask 1", "Subtask 2"].
Do not include any other text or formatting outside the JSON array."""

USER_PROMPT = (
    'Given the main task "{title}", suggest 3-8 short, concrete sub-tasks '
    "or action items."
)


def parse_suggestions(text: str) -> List[str]:
    """Turn a model reply into a list of suggestion strings.

    Markdown code fences around the reply are stripped before parsing as a
    JSON array. If that fails, every non-empty line of the raw reply becomes
    one suggestion.
    """
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = cleaned.split("\n")
        lines = lines[1:]  # Remove first line (```json)
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]  # Remove last line (```)
        cleaned = "\n".join(lines).strip()

    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        parsed = None

    if isinstance(parsed, list):
        return [str(item).strip() for item in parsed if item is not None and str(item).strip()]

    logger.warning("AI response was not a JSON array, falling back to line splitting")
    return [line.strip() for line in text.split("\n") if line.strip()]


class SuggestionService:
    """Gateway to the language model with bounded retry on throttling."""

    def __init__(self, settings: Settings, llm: Optional[Any] = None):
        """Initialize the suggestion service.

        Args:
            settings: Application settings
            llm: Chat model to use instead of building one from settings
        """
        self.settings = settings
        self._llm = llm
        self.max_retries = settings.suggestion_max_retries
        self.initial_delay = settings.suggestion_initial_delay
        logger.info(
            f"Suggestion service initialized (model={settings.model_name}, "
            f"configured={self.is_configured})"
        )

    @property
    def is_configured(self) -> bool:
        return self._llm is not None or bool(self.settings.openai_api_key)

    def get_llm(self) -> Any:
        """Return the chat model, building it on first use.

        Raises:
            ConfigurationError: If no OpenAI API key is configured
        """
        if self._llm is None:
            if not self.settings.openai_api_key:
                logger.error("OPENAI_API_KEY is not set")
                raise ConfigurationError()
            self._llm = ChatOpenAI(
                model=self.settings.model_name,
                api_key=self.settings.openai_api_key,
                temperature=self.settings.suggestion_temperature,
                timeout=self.settings.suggestion_timeout,
                max_retries=0,  # retries are handled by suggest()
            )
        return self._llm

    async def suggest(self, title: Optional[str]) -> List[str]:
        """Ask the model for sub-tasks of ``title``.

        Throttled calls are retried after 2, 4, 8... seconds, at most
        ``max_retries`` times.

        Raises:
            ValidationError: If the title is empty
            ConfigurationError: If the provider is not configured
            UpstreamThrottledError: If every attempt was throttled
            ProviderError: On any other provider failure
        """
        if not title or not title.strip():
            raise ValidationError("Please provide a main task title for suggestions.")

        llm = self.get_llm()
        messages = [
            SystemMessage(content=SYSTEM_PROMPT),
            HumanMessage(content=USER_PROMPT.format(title=title.strip())),
        ]

        delay = self.initial_delay
        attempt = 0
        while True:
            try:
                with TimedOperation("suggestion request", __name__):
                    response = await llm.ainvoke(messages)
                break
            except openai.RateLimitError:
                if attempt >= self.max_retries:
                    logger.error(f"AI provider still throttling after {attempt} retries")
                    raise UpstreamThrottledError()
                attempt += 1
                logger.warning(f"AI provider throttled, retry {attempt}/{self.max_retries} in {delay}s")
                await asyncio.sleep(delay)
                delay *= 2
            except Exception as e:
                logger.error(f"AI provider error: {str(e)}")
                raise ProviderError() from e

        content = response.content if isinstance(response.content, str) else str(response.content)
        suggestions = parse_suggestions(content)
        logger.info(f"Generated {len(suggestions)} suggestions")
        return suggestions


# Global suggestion service instance - will be initialized during app startup
_suggestion_service: Optional[SuggestionService] = None


def get_suggestion_service() -> Optional[SuggestionService]:
    """Get the global suggestion service instance."""
    return _suggestion_service


def initialize_suggestion_service(settings: Settings) -> SuggestionService:
    """Initialize the global suggestion service instance."""
    global _suggestion_service
    _suggestion_service = SuggestionService(settings)
    return _suggestion_service
