"""Question source backed by pydantic-ai with a static-bank fallback.

Provides:
- async generate_ai_questions(...) -> list[tuple[str, str]]
- QuestionSource.generate(...) -> list[GeneratedCard] (always exactly ``count``)

Upstream calls are bounded by a per-attempt timeout and a fixed number of
attempts. When they fail the source falls back to the static bank, so callers
only see ``UpstreamGenerationError`` when no content exists at all.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional

from pydantic import BaseModel, Field
from pydantic_ai import Agent

from app.core.config import GenerationSettings, settings
from app.core.errors import UpstreamGenerationError, ValidationError
from app.core.logging import get_logger
from app.modules.study import question_bank
from app.modules.study.models import Difficulty, GeneratedCard

logger = get_logger(__name__)

QA = tuple[str, str]
UpstreamGenerator = Callable[..., Awaitable[list[QA]]]

# Only this much document text is sent to the model
MAX_CONTENT_CHARS = 3000


class GeneratedQuestion(BaseModel):
    question: str
    answer: str


class GeneratedQuestionSet(BaseModel):
    """Structured output for flashcard generation."""

    flashcards: list[GeneratedQuestion] = Field(default_factory=list)


def _build_google_model(config: GenerationSettings):
    """Build Google Gemini model for pydantic-ai (lazy import)."""
    from pydantic_ai.models.google import GoogleModel
    from pydantic_ai.providers.google import GoogleProvider

    provider = GoogleProvider(api_key=config.gemini_api_key)
    return GoogleModel(config.gemini_model, provider=provider)


def _build_openrouter_model(config: GenerationSettings):
    """Build OpenRouter model via OpenAI-compatible provider (lazy import)."""
    from pydantic_ai.models.openai import OpenAIChatModel
    from pydantic_ai.providers.openai import OpenAIProvider

    if not config.openrouter_api_key:
        raise RuntimeError(
            "OpenRouter API key not configured. Set OPENROUTER_API_KEY in your environment."
        )

    provider = OpenAIProvider(
        api_key=config.openrouter_api_key,
        base_url="https://openrouter.ai/api/v1",
    )
    return OpenAIChatModel(config.openrouter_model, provider=provider)


def _build_model_by_settings(config: GenerationSettings):
    provider = (config.model_provider or "google").lower()
    if provider == "openrouter":
        return _build_openrouter_model(config)
    return _build_google_model(config)


SYSTEM_PROMPT = (
    "You are an expert educational content creator who makes effective flashcards "
    "for students. Return a JSON object that validates as GeneratedQuestionSet: "
    "{flashcards}. Each flashcard has {question, answer}. Rules: "
    "- Create exactly N flashcards (provided in the instruction). "
    "- Questions are clear and concise; answers give complete information. "
    "- Match the requested grade level and difficulty. "
    "- Plain text only; do not include markdown or code fences."
)


def _build_instruction(
    subject: str,
    class_level: str,
    difficulty: Difficulty,
    count: int,
    content: Optional[str] = None,
) -> str:
    instruction = (
        f"Generate N flashcards for {subject} at class level {class_level} "
        f"with {difficulty.value} difficulty.\n"
        f"N: {int(count)}\n"
    )
    if content:
        instruction += (
            "Base the questions on the following content:\n"
            f"{content[:MAX_CONTENT_CHARS]}\n"
        )
    return instruction


async def generate_ai_questions(
    subject: str,
    class_level: str,
    difficulty: Difficulty,
    count: int,
    content: Optional[str] = None,
    *,
    config: Optional[GenerationSettings] = None,
) -> list[QA]:
    """Generate question/answer pairs using the configured model provider."""
    config = config or settings.generation
    model = _build_model_by_settings(config)
    agent: Agent[None, GeneratedQuestionSet] = Agent[None, GeneratedQuestionSet](
        model=model,
        output_type=GeneratedQuestionSet,
        system_prompt=SYSTEM_PROMPT,
        retries=2,
    )
    res = await agent.run(
        _build_instruction(subject, class_level, difficulty, count, content)
    )
    return [(c.question, c.answer) for c in res.output.flashcards]


def _normalize(pairs: list[QA]) -> list[QA]:
    out: list[QA] = []
    for question, answer in pairs or []:
        q = (question or "").strip()
        a = (answer or "").strip()
        if q and a:
            out.append((q, a))
    return out


class QuestionSource:
    """Produces exactly ``count`` question/answer pairs for a study session.

    ``generator`` is the upstream coroutine (the LLM by default). Pass
    ``generator=None`` with ``use_upstream=False`` to serve only static content.
    """

    def __init__(
        self,
        *,
        config: Optional[GenerationSettings] = None,
        generator: Optional[UpstreamGenerator] = None,
        use_upstream: Optional[bool] = None,
    ) -> None:
        self.config = config or settings.generation
        if use_upstream is None:
            use_upstream = generator is not None or bool(self.config.is_configured)
        if use_upstream and generator is None:
            generator = self._default_generator
        self._generator: Optional[UpstreamGenerator] = generator if use_upstream else None
        self.timeout = max(0.1, float(self.config.timeout_seconds))
        self.attempts = max(1, int(self.config.attempts))

    async def _default_generator(self, *args, **kwargs) -> list[QA]:
        return await generate_ai_questions(*args, config=self.config, **kwargs)

    @property
    def uses_upstream(self) -> bool:
        return self._generator is not None

    async def generate(
        self,
        subject: str,
        class_level: str,
        difficulty: Difficulty,
        count: int,
        content: Optional[str] = None,
        *,
        topic: Optional[str] = None,
    ) -> list[GeneratedCard]:
        if count <= 0:
            raise ValidationError("count must be a positive integer")

        pairs: list[QA] = []
        generator = self._generator
        if generator is not None:
            try:
                pairs = await self._generate_upstream(
                    generator,
                    subject, class_level, difficulty, count, content
                )
            except UpstreamGenerationError as e:
                logger.warning(
                    "Question generation failed for %s/%s, using static questions: %s",
                    subject,
                    difficulty.value,
                    e,
                )

        if not pairs:
            pairs = self.fallback(subject, difficulty, count, content, topic=topic)
        if not pairs:
            raise UpstreamGenerationError(
                f"No questions available for {subject} ({difficulty.value})"
            )

        return [
            GeneratedCard(
                question=q,
                answer=a,
                subject=subject,
                class_level=class_level,
                difficulty=difficulty,
            )
            for q, a in pairs
        ]

    async def _generate_upstream(
        self,
        generator: UpstreamGenerator,
        subject: str,
        class_level: str,
        difficulty: Difficulty,
        count: int,
        content: Optional[str],
    ) -> list[QA]:
        last_error: Optional[BaseException] = None
        for attempt in range(1, self.attempts + 1):
            try:
                raw = await asyncio.wait_for(
                    generator(subject, class_level, difficulty, count, content),
                    timeout=self.timeout,
                )
            except asyncio.TimeoutError as e:
                last_error = e
                logger.info(
                    "Generation attempt %d/%d timed out after %.1fs",
                    attempt,
                    self.attempts,
                    self.timeout,
                )
                continue
            except Exception as e:  # noqa: BLE001
                last_error = e
                logger.info(
                    "Generation attempt %d/%d failed: %s", attempt, self.attempts, e
                )
                continue

            cleaned = _normalize(raw)
            if cleaned:
                return question_bank.cycle(cleaned, count)
            last_error = ValueError("generator returned no usable flashcards")

        raise UpstreamGenerationError(
            f"Failed to generate questions after {self.attempts} attempts: {last_error}"
        ) from last_error

    @staticmethod
    def fallback(
        subject: str,
        difficulty: Difficulty,
        count: int,
        content: Optional[str] = None,
        *,
        topic: Optional[str] = None,
    ) -> list[QA]:
        """Deterministic static content for the given parameters."""
        if content is not None or topic is not None:
            return question_bank.document_questions(
                question_bank.document_topic(topic), count
            )
        return question_bank.bank_questions(subject, difficulty, count)
