import pytest

from growup.domain.catalog import DIAGNOSIS_AXES
from growup.domain.models import MaturityLevel
from growup.domain.scoring import DirectScoreStrategy
from growup.domain.wizard import (
    DiagnosisWizard,
    WizardMode,
    WizardState,
    create_wizard,
)
from growup.infrastructure.exceptions import (
    PersistenceError,
    ValidationError,
    WizardStateError,
)


def started_wizard(mode=WizardMode.AXIS, **kwargs):
    wizard = create_wizard(mode, **kwargs)
    wizard.submit_name("Ana Souza")
    wizard.submit_program("prog-exclusive")
    return wizard


def test_full_axis_diagnosis_levels():
    received = []
    wizard = started_wizard(on_complete=received.append)

    for score in [1, 2, 3, 4, 1, 2, 3, 4]:
        wizard.submit_answer(score)

    assert wizard.state is WizardState.COMPLETE
    assert len(received) == 1
    result = received[0]
    assert result.mentee_name == "Ana Souza"
    assert result.program_id == "prog-exclusive"
    assert [a.axis_name for a in result.assessments] == [a.name for a in DIAGNOSIS_AXES]
    assert [a.maturity_level for a in result.assessments] == [
        MaturityLevel.RED,
        MaturityLevel.YELLOW,
        MaturityLevel.BLUE,
        MaturityLevel.GREEN,
    ] * 2


def test_back_restores_previous_answer():
    received = []
    wizard = started_wizard(on_complete=received.append)
    wizard.submit_answer(1.5, notes="sem acordo formal")
    wizard.submit_answer(2.5)
    assert wizard.position == (2, 0)

    wizard.back()

    assert wizard.position == (1, 0)
    assert wizard.current_input == 2.5
    assert len(wizard.assessments) == 1

    wizard.submit_answer(3.2)
    for score in [1, 2, 3, 4, 5, 0]:
        wizard.submit_answer(score)

    assessments = received[0].assessments
    assert len(assessments) == 8
    assert len({a.axis_name for a in assessments}) == 8
    assert assessments[0].notes == "sem acordo formal"
    assert assessments[1].score == 3.2


def test_back_restores_notes():
    wizard = started_wizard()
    wizard.submit_answer(2.0, notes="  fluxo de caixa em planilha ")
    wizard.back()
    assert wizard.current_input == 2.0
    assert wizard.current_notes == "fluxo de caixa em planilha"


def test_back_unavailable_on_first_step():
    wizard = started_wizard()
    assert wizard.can_go_back is False
    with pytest.raises(WizardStateError):
        wizard.back()
    assert wizard.position == (0, 0)


def test_name_is_required():
    wizard = create_wizard()
    with pytest.raises(ValidationError):
        wizard.submit_name("   ")
    assert wizard.state is WizardState.COLLECTING_NAME
    wizard.submit_name("  Bruno ")
    assert wizard.mentee_name == "Bruno"
    assert wizard.state is WizardState.SELECTING_PROGRAM


@pytest.mark.parametrize("name", ["A" * 300, "<b>", "<i></i>  "])
def test_name_must_be_storable(name):
    wizard = create_wizard()
    with pytest.raises(ValidationError) as exc:
        wizard.submit_name(name)
    assert exc.value.field == "name"
    assert wizard.state is WizardState.COLLECTING_NAME

    wizard.submit_name("Ana")
    assert wizard.state is WizardState.SELECTING_PROGRAM


def test_name_is_stored_sanitized():
    received = []
    wizard = create_wizard(on_complete=received.append)
    wizard.submit_name("<b>Ana</b> Souza")
    wizard.submit_program()
    for _ in range(8):
        wizard.submit_answer(3.0)
    assert received[0].mentee_name == "Ana Souza"


def test_program_defaults_and_rejects_unknown():
    wizard = create_wizard(default_program_id="prog-hibrido")
    wizard.submit_name("Carla")
    with pytest.raises(ValidationError):
        wizard.select_program("prog-gold")
    assert wizard.program_id == "prog-hibrido"
    wizard.submit_program()
    assert wizard.state is WizardState.ASSESSING
    assert wizard.position == (0, 0)


def test_invalid_answer_keeps_state():
    wizard = started_wizard()
    with pytest.raises(ValidationError):
        wizard.submit_answer(None)
    with pytest.raises(ValidationError):
        wizard.submit_answer(7)
    assert wizard.position == (0, 0)
    assert wizard.assessments == ()


def test_set_input_is_used_on_submit():
    wizard = started_wizard()
    wizard.set_input(4.4, notes="CRM em uso")
    wizard.submit_answer()
    assert wizard.assessments[0].score == 4.4
    assert wizard.assessments[0].notes == "CRM em uso"
    assert wizard.current_input is None


def test_failed_handoff_keeps_last_answer_for_retry():
    attempts = []

    def flaky(result):
        attempts.append(result)
        if len(attempts) == 1:
            raise PersistenceError("database is locked", "create mentee")
        return "stored"

    wizard = started_wizard(on_complete=flaky)
    for score in [3] * 7:
        wizard.submit_answer(score)

    with pytest.raises(PersistenceError):
        wizard.submit_answer(4.1, notes="última")

    assert wizard.state is WizardState.ASSESSING
    assert wizard.position == (7, 0)
    assert len(wizard.assessments) == 7
    assert wizard.current_input == 4.1
    assert wizard.current_notes == "última"

    wizard.submit_answer()

    assert wizard.state is WizardState.COMPLETE
    assert wizard.outcome == "stored"
    assert len(attempts[1].assessments) == 8
    assert attempts[1].assessments[-1].score == 4.1


def test_actions_after_complete_are_rejected():
    wizard = started_wizard()
    for score in [2] * 8:
        wizard.submit_answer(score)
    assert wizard.progress == 1.0
    with pytest.raises(WizardStateError):
        wizard.submit_answer(3)
    with pytest.raises(WizardStateError):
        wizard.back()


def test_question_mode_walks_every_question_in_order():
    received = []
    wizard = started_wizard(WizardMode.QUESTION, on_complete=received.append)
    assert wizard.total_steps == 40

    wizard.submit_answer("Sim, temos acordo formalizado")
    assert wizard.position == (0, 1)
    for _ in range(3):
        wizard.submit_answer("Parcialmente")
    wizard.submit_answer("Não")
    assert wizard.position == (1, 0)

    wizard.back()
    assert wizard.position == (0, 4)
    assert wizard.current_input == "Não"
    wizard.submit_answer()

    while wizard.state is WizardState.ASSESSING:
        wizard.submit_answer("Depende")

    assessments = received[0].assessments
    assert len(assessments) == 40
    assert [(a.axis_name, a.question_id) for a in assessments[:6]] == [
        ("Sócios", "q1"),
        ("Sócios", "q2"),
        ("Sócios", "q3"),
        ("Sócios", "q4"),
        ("Sócios", "q5"),
        ("Finanças", "q1"),
    ]
    assert assessments[0].score == 4.0
    assert assessments[4].score == 1.0
    assert assessments[5].score == 3.0
    assert assessments[0].question_text == DIAGNOSIS_AXES[0].questions[0].text


def test_snapshot_reports_progress():
    wizard = DiagnosisWizard(DirectScoreStrategy())
    snapshot = wizard.snapshot()
    assert snapshot["state"] == "collecting_name"
    assert snapshot["progress"] == 0.0
    assert snapshot["axis_name"] is None

    wizard.submit_name("Ana")
    wizard.submit_program()
    wizard.submit_answer(3)
    snapshot = wizard.snapshot()
    assert snapshot["axis_name"] == "Finanças"
    assert snapshot["step_index"] == 1
    assert snapshot["answered"] == 1
    assert snapshot["can_go_back"] is True
    assert snapshot["progress"] == pytest.approx(2 / 8)
