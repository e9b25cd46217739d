"""Themed question generation with a built-in fallback set."""

from __future__ import annotations

import json
import logging
from typing import Any, List, Optional

from trivia.models import OPTION_LABELS, Option, Question

from .fallback import fallback_questions
from .prompts import QUIZ_PROMPT
from .provider import OpenAIProvider

logger = logging.getLogger(__name__)


class GenerationFailure(Exception):
    """The provider failed or returned something that is not a question set."""


def _strip_fences(content: str) -> str:
    cleaned = content.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


def _parse_question(item: Any) -> Question:
    if not isinstance(item, dict):
        raise GenerationFailure("question entry is not an object")
    text = str(item.get("question") or "").strip()
    options = item.get("options")
    answer = str(item.get("answer") or "").strip().upper()
    if not text:
        raise GenerationFailure("question text is empty")
    if isinstance(options, list) and len(options) == len(OPTION_LABELS):
        options = dict(zip(OPTION_LABELS, options))
    if not isinstance(options, dict):
        raise GenerationFailure("options must be an object keyed A-D")
    parsed = []
    for label in OPTION_LABELS:
        value = str(options.get(label) or "").strip()
        if not value:
            raise GenerationFailure(f"option {label} is missing")
        parsed.append(Option(label, value))
    if answer not in OPTION_LABELS:
        raise GenerationFailure(f"answer {answer!r} is not one of A-D")
    return Question(text=text, options=tuple(parsed), correct_label=answer)


def parse_questions(content: Optional[str], count: int) -> List[Question]:
    """Parse the provider's JSON reply into exactly ``count`` questions."""

    if not content:
        raise GenerationFailure("empty response")
    try:
        data = json.loads(_strip_fences(content))
    except json.JSONDecodeError as exc:
        raise GenerationFailure(f"invalid JSON: {exc}") from exc
    if isinstance(data, dict):
        data = data.get("questions")
    if not isinstance(data, list) or len(data) < count:
        raise GenerationFailure(f"expected {count} questions")
    return [_parse_question(item) for item in data[:count]]


class QuestionService:
    """Question-generation collaborator: ``generate(theme_label)`` never fails.

    Any provider error, timeout or malformed reply is logged and replaced by
    the built-in set so a game can always proceed.
    """

    def __init__(
        self,
        provider: Optional[OpenAIProvider] = None,
        model: str = "gpt-4o-mini",
        temperature: float = 0.8,
        count: int = 10,
    ) -> None:
        self._provider = provider
        self._model = model
        self._temperature = temperature
        self._count = count

    @classmethod
    def from_config(cls, config) -> "QuestionService":
        return cls(
            provider=OpenAIProvider(
                api_key=config.get("OPENAI_API_KEY"),
                timeout=float(config.get("OPENAI_TIMEOUT_SEC", 20)),
            ),
            model=config.get("OPENAI_MODEL", "gpt-4o-mini"),
            temperature=float(config.get("OPENAI_TEMPERATURE", 0.8)),
            count=int(config.get("QUESTIONS_PER_GAME", 10)),
        )

    def fallback(self) -> List[Question]:
        return fallback_questions()[: self._count]

    def _request(self, theme_label: str) -> List[Question]:
        client = self._provider.get_client()
        response = client.chat.completions.create(
            model=self._model,
            messages=[
                {"role": "user", "content": QUIZ_PROMPT.format(count=self._count, theme=theme_label)}
            ],
            temperature=self._temperature,
        )
        return parse_questions(response.choices[0].message.content, self._count)

    def generate(self, theme_label: str) -> List[Question]:
        if self._provider is None or not self._provider.configured:
            logger.info("[quiz-fallback] theme=%s reason=provider_not_configured", theme_label)
            return self.fallback()

        logger.info("[quiz-generate] theme=%s model=%s", theme_label, self._model)
        try:
            questions = self._request(theme_label)
        except Exception as exc:
            logger.warning("[quiz-fallback] theme=%s reason=%s", theme_label, exc)
            return self.fallback()
        logger.info("[quiz-generated] theme=%s count=%d", theme_label, len(questions))
        return questions
