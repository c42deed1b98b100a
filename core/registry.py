from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from core import data
from core.data import Record


class ReportType(str, Enum):
    STUDENTS = "students"
    GUARDIANS = "guardians"
    PASTORAL_CARE = "pastoralCare"
    ACADEMIC_PERFORMANCE = "academicPerformance"
    STUDENT_ENTRIES = "studentEntries"
    PEDAGOGICAL_OCCURRENCES = "pedagogicalOccurrences"


class UnknownReportError(KeyError):
    pass


MONTHS: Tuple[str, ...] = (
    "Janeiro",
    "Fevereiro",
    "Março",
    "Abril",
    "Maio",
    "Junho",
    "Julho",
    "Agosto",
    "Setembro",
    "Outubro",
    "Novembro",
    "Dezembro",
)

TITLE_PREFIX = "Relatório de "


@dataclass(frozen=True)
class CustomFilter:
    options: Tuple[str, ...]
    type: str = "select"
    label: Optional[str] = None


@dataclass(frozen=True)
class ReportConfig:
    key: ReportType
    title: str

    # Returns the full record list for this report
    fetcher: Callable[[], List[Record]]

    icon: str

    # Columns hidden from the filter bar (still shown in the table)
    exclude_filters: Tuple[str, ...] = ()

    custom_filters: Dict[str, CustomFilter] = field(default_factory=dict)
    header_note: Optional[str] = None


def short_title(report: ReportConfig) -> str:
    return report.title.replace(TITLE_PREFIX, "")


REPORT_CONFIG: Dict[ReportType, ReportConfig] = {
    ReportType.STUDENTS: ReportConfig(
        key=ReportType.STUDENTS,
        title="Relatório de Alunos",
        fetcher=data.fetch_students,
        icon="👥",
    ),
    ReportType.GUARDIANS: ReportConfig(
        key=ReportType.GUARDIANS,
        title="Relatório de Responsáveis",
        fetcher=data.fetch_guardians,
        icon="👥",
        exclude_filters=("E-mail do responsável", "Telefone", "Termo LGPD", "Responsável legal"),
    ),
    ReportType.PASTORAL_CARE: ReportConfig(
        key=ReportType.PASTORAL_CARE,
        title="Relatório de Atendimentos da Pastoral",
        fetcher=data.fetch_pastoral_care,
        icon="❤️",
        exclude_filters=("Ação", "Observação", "Participação em Atividades"),
        custom_filters={"Mês": CustomFilter(options=MONTHS)},
    ),
    ReportType.ACADEMIC_PERFORMANCE: ReportConfig(
        key=ReportType.ACADEMIC_PERFORMANCE,
        title="Relatório de Desempenho Acadêmico",
        fetcher=data.fetch_academic_performance,
        icon="🎓",
        exclude_filters=("Desempenho", "Observação", "Habilidades socioemocionais"),
        custom_filters={"Mês": CustomFilter(options=MONTHS)},
    ),
    ReportType.STUDENT_ENTRIES: ReportConfig(
        key=ReportType.STUDENT_ENTRIES,
        title="Relatório de Entradas e Saídas",
        fetcher=data.fetch_student_entries,
        icon="📋",
        exclude_filters=("Entrada", "Saída", "Data"),
        custom_filters={"Falta/presença": CustomFilter(options=("presença", "falta"))},
        header_note="Horário de entrada padrão: 07:00. Horário de saída padrão: 12:00.",
    ),
    ReportType.PEDAGOGICAL_OCCURRENCES: ReportConfig(
        key=ReportType.PEDAGOGICAL_OCCURRENCES,
        title="Relatório de Ocorrências Pedagógicas",
        fetcher=data.fetch_pedagogical_occurrences,
        icon="⚠️",
    ),
}


def get_reports() -> List[ReportConfig]:
    """
    Ordered list used for navigation.
    The order here defines how reports appear in the UI.
    """
    return [REPORT_CONFIG[t] for t in ReportType]


def get_report_map() -> Dict[str, ReportConfig]:
    return {r.key.value: r for r in get_reports()}


def get_default_report_key() -> str:
    """
    First report is the default landing view.
    """
    reports = get_reports()
    return reports[0].key.value if reports else ReportType.STUDENTS.value


def get_report(report_key: str | ReportType) -> ReportConfig:
    key = report_key.value if isinstance(report_key, ReportType) else str(report_key)
    report = get_report_map().get(key)
    if report is None:
        raise UnknownReportError(report_key)
    return report
