"""
Turn a raw diagnosis answer into a 0..5 maturity score.

Two strategies are provided: ``DirectScoreStrategy`` for the per-axis slider and
``KeywordScoreStrategy`` for free-text answers to individual questions. Both
return a ``ScoreResult`` whose level is always derived from the score.
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Protocol

from ..infrastructure.exceptions import ValidationError
from .models import MaturityLevel, derive_maturity_level

MIN_SCORE = 0.0
MAX_SCORE = 5.0
SLIDER_STEP = Decimal("0.1")
NEUTRAL_SCORE = 3.0


@dataclass(frozen=True, slots=True)
class ScoreResult:
    score: float
    level: MaturityLevel


class ScoringStrategy(Protocol):
    def score(self, raw: Any) -> float: ...


@dataclass(frozen=True, slots=True)
class KeywordRule:
    category: str
    score: float
    keywords: tuple[str, ...]


# Checked in order; the first category with a whole-word match decides the score.
DEFAULT_KEYWORD_POLICY: tuple[KeywordRule, ...] = (
    KeywordRule(
        "negation",
        1.0,
        (
            "nao",
            "nenhum",
            "nenhuma",
            "nunca",
            "sem",
            "inexistente",
            "desconheco",
            "ainda nao",
        ),
    ),
    KeywordRule(
        "partial",
        2.5,
        (
            "parcial",
            "parcialmente",
            "as vezes",
            "basico",
            "basica",
            "em andamento",
            "comecando",
            "iniciando",
            "pouco",
            "informal",
            "informalmente",
            "planejamos",
        ),
    ),
    KeywordRule(
        "affirmative",
        4.0,
        (
            "sim",
            "possui",
            "possuimos",
            "temos",
            "tenho",
            "realizamos",
            "existe",
            "utilizamos",
            "sempre",
            "estruturado",
            "formalizado",
            "mensalmente",
            "semanalmente",
        ),
    ),
)


def normalize_text(text: str) -> str:
    """Lower-case and strip accents so 'Não' and 'nao' compare equal."""
    decomposed = unicodedata.normalize("NFKD", text.lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def snap_to_step(value: float) -> float:
    return float(Decimal(str(value)).quantize(SLIDER_STEP, rounding=ROUND_HALF_UP))


class DirectScoreStrategy:
    """Accept a numeric slider value in [0, 5]."""

    def score(self, raw: Any) -> float:
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            raise ValidationError("score", "no maturity level chosen", raw)
        if isinstance(raw, bool):
            raise ValidationError("score", "must be a number between 0 and 5", raw)
        try:
            value = float(Decimal(str(raw).strip()))
        except (InvalidOperation, ValueError) as e:
            raise ValidationError("score", "must be a number between 0 and 5", raw) from e
        if value != value or not (MIN_SCORE <= value <= MAX_SCORE):
            raise ValidationError("score", "must be a number between 0 and 5", raw)
        return snap_to_step(value)


class KeywordScoreStrategy:
    """
    Score free text by the first keyword category that appears in it.

    Args:
        policy: Ordered keyword rules. Defaults to negation, partial, affirmative.
        neutral_score: Score used when no keyword matches.
    """

    def __init__(
        self,
        policy: tuple[KeywordRule, ...] = DEFAULT_KEYWORD_POLICY,
        neutral_score: float = NEUTRAL_SCORE,
    ):
        self.policy = policy
        self.neutral_score = neutral_score
        self._patterns = [
            (
                rule,
                re.compile(
                    r"\b(?:"
                    + "|".join(re.escape(normalize_text(k)) for k in rule.keywords)
                    + r")\b"
                ),
            )
            for rule in policy
        ]

    def matched_rule(self, text: str) -> KeywordRule | None:
        normalized = normalize_text(text)
        for rule, pattern in self._patterns:
            if pattern.search(normalized):
                return rule
        return None

    def score(self, raw: Any) -> float:
        if raw is None or not str(raw).strip():
            raise ValidationError("response", "an answer is required")
        rule = self.matched_rule(str(raw))
        return rule.score if rule else self.neutral_score


def score_from_input(raw: Any, scorer: ScoringStrategy) -> ScoreResult:
    """
    Score a raw answer with the given strategy.

    Example:
        >>> score_from_input("Não possui nenhum controle", KeywordScoreStrategy())
        ScoreResult(score=1.0, level=<MaturityLevel.RED: 'red'>)
    """
    value = scorer.score(raw)
    return ScoreResult(score=value, level=derive_maturity_level(value))
