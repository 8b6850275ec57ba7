import pytest

from growup.domain.models import MaturityLevel, derive_maturity_level
from growup.domain.scoring import (
    DirectScoreStrategy,
    KeywordRule,
    KeywordScoreStrategy,
    normalize_text,
    score_from_input,
    snap_to_step,
)
from growup.infrastructure.exceptions import ValidationError


@pytest.mark.parametrize(
    "score, level",
    [
        (0.0, MaturityLevel.RED),
        (1.999, MaturityLevel.RED),
        (2.0, MaturityLevel.YELLOW),
        (2.999, MaturityLevel.YELLOW),
        (3.0, MaturityLevel.BLUE),
        (3.999, MaturityLevel.BLUE),
        (4.0, MaturityLevel.GREEN),
        (5.0, MaturityLevel.GREEN),
    ],
)
def test_maturity_thresholds(score, level):
    assert derive_maturity_level(score) is level


def test_maturity_level_is_monotonic():
    order = list(MaturityLevel)
    previous = 0
    for tenth in range(0, 51):
        rank = order.index(derive_maturity_level(tenth / 10))
        assert rank >= previous
        previous = rank


def test_negation_wins_over_affirmative():
    result = score_from_input("Não possui nenhum controle", KeywordScoreStrategy())
    assert result.score == 1.0
    assert result.level is MaturityLevel.RED


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Fazemos parcialmente, ainda de forma básica", 2.5),
        ("Sim, temos um processo formalizado", 4.0),
        ("Realizamos mensalmente", 4.0),
        ("Depende do mês", 3.0),
        ("Às vezes, quando sobra tempo", 2.5),
    ],
)
def test_keyword_categories(text, expected):
    assert KeywordScoreStrategy().score(text) == expected


def test_keywords_match_whole_words_only():
    # "semanal" must not be read as the negation "sem"
    scorer = KeywordScoreStrategy()
    assert scorer.matched_rule("Reunião semanalmente com os sócios").category == "affirmative"
    assert scorer.matched_rule("Controle simples") is None


def test_keyword_policy_is_pluggable():
    scorer = KeywordScoreStrategy(
        policy=(KeywordRule("affirmative", 4.5, ("sim",)), KeywordRule("negation", 0.5, ("nao",))),
        neutral_score=2.0,
    )
    assert scorer.score("Sim, mas não sempre") == 4.5
    assert scorer.score("Talvez") == 2.0


def test_keyword_rejects_blank_answer():
    with pytest.raises(ValidationError) as exc:
        KeywordScoreStrategy().score("   ")
    assert exc.value.field == "response"


def test_direct_score_snaps_to_slider_step():
    scorer = DirectScoreStrategy()
    assert scorer.score(3.45) == 3.5
    assert scorer.score("2.04") == 2.0
    assert scorer.score(0) == 0.0
    assert scorer.score(5) == 5.0


@pytest.mark.parametrize("raw", [None, "", "  "])
def test_direct_score_requires_a_value(raw):
    with pytest.raises(ValidationError) as exc:
        DirectScoreStrategy().score(raw)
    assert "no maturity level chosen" in exc.value.message


@pytest.mark.parametrize("raw", [-0.1, 5.1, "abc", float("nan"), True])
def test_direct_score_rejects_out_of_range(raw):
    with pytest.raises(ValidationError):
        DirectScoreStrategy().score(raw)


def test_normalize_text_strips_accents():
    assert normalize_text("Não Possuímos") == "nao possuimos"


def test_snap_to_step_rounds_half_up():
    assert snap_to_step(2.25) == 2.3
    assert snap_to_step(2.249) == 2.2
