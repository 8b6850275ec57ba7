"""Static reference data: diagnosis axes and questions, programs, sprint stages."""

from __future__ import annotations

from .models import Axis, Program, Question, SprintStage


def _axis(axis_id: str, name: str, *texts: str) -> Axis:
    return Axis(
        id=axis_id,
        name=name,
        questions=tuple(Question(id=f"q{i}", text=text) for i, text in enumerate(texts, 1)),
    )


DIAGNOSIS_AXES: tuple[Axis, ...] = (
    _axis(
        "socios",
        "Sócios",
        "Possui acordo de sócios ou quotistas formalmente estabelecido?",
        "Como são tomadas as decisões estratégicas entre os sócios?",
        "Existe clareza na divisão de responsabilidades e papéis de cada sócio?",
        "Como é feita a remuneração dos sócios (pró-labore, distribuição de lucros)?",
        "Há reuniões periódicas entre os sócios para alinhamento?",
    ),
    _axis(
        "financas",
        "Finanças",
        "Possui controle de fluxo de caixa atualizado?",
        "Como é feito o controle de contas a pagar e a receber?",
        "Tem clareza sobre a margem de contribuição de cada serviço/produto?",
        "Realiza conciliação bancária regularmente?",
        "Possui relatórios financeiros (DRE, Balanço) atualizados?",
    ),
    _axis(
        "folha",
        "Folha",
        "Como é feito o controle de ponto dos funcionários?",
        "Possui organização da documentação trabalhista (contratos, admissões, demissões)?",
        "Como são calculados e controlados os encargos trabalhistas?",
        "Tem clareza sobre o custo total de cada colaborador?",
        "Possui política clara de benefícios e remuneração?",
    ),
    _axis(
        "clientes",
        "Clientes",
        "Possui cadastro organizado de todos os clientes?",
        "Como é feito o acompanhamento do histórico de atendimento?",
        "Realiza pesquisas de satisfação regularmente?",
        "Tem processo definido para tratamento de reclamações?",
        "Como é feita a segmentação e análise do perfil dos clientes?",
    ),
    _axis(
        "vendas",
        "Vendas",
        "Possui funil de vendas estruturado?",
        "Como é feito o controle de propostas enviadas?",
        "Tem metas de vendas definidas por período?",
        "Como é feito o follow-up de oportunidades?",
        "Possui indicadores de performance de vendas (taxa de conversão, ticket médio)?",
    ),
    _axis(
        "ia_automacao",
        "IA & Automação",
        "Utiliza alguma ferramenta de automação de processos?",
        "Como é feita a comunicação com clientes (manual ou automatizada)?",
        "Possui integração entre os sistemas utilizados?",
        "Utiliza ou planeja utilizar IA em algum processo?",
        "Tem processos repetitivos que poderiam ser automatizados?",
    ),
    _axis(
        "reforma_tributaria",
        "Reforma Tributária",
        "Está acompanhando as mudanças da reforma tributária?",
        "Sabe como a reforma pode impactar seu negócio?",
        "Possui planejamento tributário estruturado?",
        "Tem assessoria especializada em questões tributárias?",
        "Realiza análise periódica de regime tributário (Simples, Lucro Presumido, Real)?",
    ),
    _axis(
        "estrategia",
        "Estratégia",
        "Possui planejamento estratégico formalizado?",
        "Tem metas e objetivos claros para os próximos 12 meses?",
        "Como é feito o acompanhamento das metas?",
        "Possui indicadores-chave de performance (KPIs) definidos?",
        "Realiza análise de concorrência e mercado regularmente?",
    ),
)

AXES_BY_ID: dict[str, Axis] = {axis.id: axis for axis in DIAGNOSIS_AXES}
AXES_BY_NAME: dict[str, Axis] = {axis.name: axis for axis in DIAGNOSIS_AXES}
PILLAR_NAMES: tuple[str, ...] = tuple(axis.name for axis in DIAGNOSIS_AXES)

PROGRAMS: tuple[Program, ...] = (
    Program(id="prog-start", name="START"),
    Program(id="prog-exclusive", name="EXCLUSIVE"),
    Program(id="prog-hibrido", name="HÍBRIDO"),
)
PROGRAM_IDS: frozenset[str] = frozenset(program.id for program in PROGRAMS)
DEFAULT_PROGRAM_ID = "prog-start"

SPRINT_STAGES: tuple[SprintStage, ...] = (
    SprintStage(
        "1. Sprint Planning (Planejamento)",
        "Definir o que será feito na sprint",
        "Backlog priorizado + metas da sprint",
    ),
    SprintStage(
        "2. Daily Standup (Reuniões diárias)",
        "Acompanhar progresso e remover bloqueios",
        "Status diário + plano ajustado",
    ),
    SprintStage("3. Execução", "Realizar as tarefas planejadas", "Entregas em andamento"),
    SprintStage(
        "4. Sprint Review (Revisão)",
        "Apresentar o que foi entregue",
        "Demonstração do incremento do produto",
    ),
    SprintStage(
        "5. Sprint Retrospective (Retro)",
        "Analisar e melhorar o processo",
        "Plano de melhorias internas",
    ),
)


def get_program(program_id: str) -> Program | None:
    return next((p for p in PROGRAMS if p.id == program_id), None)


def axis_position(axis_name: str) -> int:
    """Catalog index of a pillar name; unknown names sort last."""
    for index, axis in enumerate(DIAGNOSIS_AXES):
        if axis.name == axis_name:
            return index
    return len(DIAGNOSIS_AXES)
