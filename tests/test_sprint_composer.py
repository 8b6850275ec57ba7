from datetime import date

import pytest

from growup.domain.models import TaskPriority
from growup.domain.sprint import SprintComposer, default_sprint_name
from growup.infrastructure.exceptions import MultipleValidationError, PersistenceError


def test_submit_requires_tasks_then_succeeds_with_one():
    composer = SprintComposer("Finanças")
    composer.sprint_goal = "Organizar o fluxo de caixa"
    submitted = []

    with pytest.raises(MultipleValidationError) as exc:
        composer.submit(submitted.append)
    assert exc.value.fields == ["tasks"]
    assert submitted == []

    composer.add_task("Mapear contas a pagar", TaskPriority.HIGH, date(2026, 11, 30))
    sprint = composer.submit(submitted.append)

    assert submitted == [sprint]
    assert len(sprint.tasks) == 1
    assert sprint.tasks[0].priority is TaskPriority.HIGH
    assert sprint.pillar_name == "Finanças"
    assert sprint.sprint_name == "Sprint de Foco em Finanças"


def test_blank_fields_are_reported_together():
    composer = SprintComposer("Vendas")
    composer.sprint_name = "  "
    with pytest.raises(MultipleValidationError) as exc:
        composer.validate()
    assert exc.value.fields == ["sprint_name", "sprint_goal", "tasks"]
    assert "objetivo" in exc.value.user_message


def test_blank_title_is_ignored():
    composer = SprintComposer("Clientes")
    assert composer.add_task("   ") is None
    assert composer.add_task(None) is None
    assert composer.tasks == ()


def test_add_task_clears_draft_and_ids_are_unique():
    composer = SprintComposer("Clientes")
    composer.draft.title = "Criar pesquisa NPS"
    composer.draft.priority = TaskPriority.LOW
    first = composer.add_draft_task()
    second = composer.add_task("Revisar cadastro", "high")

    assert first.title == "Criar pesquisa NPS"
    assert first.priority is TaskPriority.LOW
    assert second.priority is TaskPriority.HIGH
    assert first.id != second.id
    assert composer.draft.title == ""
    assert composer.draft.priority is TaskPriority.MEDIUM


def test_remove_task_removes_only_that_task():
    composer = SprintComposer("Folha")
    keep = composer.add_task("Atualizar contratos")
    drop = composer.add_task("Revisar ponto")
    composer.remove_task(drop.id)
    composer.remove_task("missing-id")
    assert composer.tasks == (keep,)


def test_failed_submit_keeps_draft():
    composer = SprintComposer("Estratégia")
    composer.sprint_goal = "Definir OKRs"
    composer.add_task("Workshop de planejamento")

    def failing(sprint):
        raise PersistenceError("disk I/O error", "create sprint")

    with pytest.raises(PersistenceError):
        composer.submit(failing)

    assert composer.sprint_goal == "Definir OKRs"
    assert len(composer.tasks) == 1

    composer.submit(lambda sprint: None)
    assert composer.tasks == ()
    assert composer.sprint_goal == ""
    assert composer.sprint_name == default_sprint_name("Estratégia")
