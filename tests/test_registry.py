import pytest

from core.registry import (
    MONTHS,
    ReportType,
    UnknownReportError,
    get_default_report_key,
    get_report,
    get_report_map,
    get_reports,
    short_title,
)


def test_reports_are_ordered_for_navigation():
    keys = [r.key.value for r in get_reports()]
    assert keys == [
        "students",
        "guardians",
        "pastoralCare",
        "academicPerformance",
        "studentEntries",
        "pedagogicalOccurrences",
    ]
    assert get_default_report_key() == "students"
    assert set(get_report_map()) == set(keys)


def test_short_titles():
    assert [short_title(r) for r in get_reports()] == [
        "Alunos",
        "Responsáveis",
        "Atendimentos da Pastoral",
        "Desempenho Acadêmico",
        "Entradas e Saídas",
        "Ocorrências Pedagógicas",
    ]


def test_get_report_accepts_enum_and_string():
    assert get_report(ReportType.STUDENT_ENTRIES) is get_report("studentEntries")


def test_unknown_report():
    with pytest.raises(UnknownReportError):
        get_report("finance")
    with pytest.raises(KeyError):
        get_report("")


def test_month_select_filters():
    for key in (ReportType.PASTORAL_CARE, ReportType.ACADEMIC_PERFORMANCE):
        custom = get_report(key).custom_filters["Mês"]
        assert custom.type == "select"
        assert custom.options == MONTHS
    assert len(MONTHS) == 12
    assert MONTHS[2] == "Março"


def test_student_entries_settings():
    report = get_report(ReportType.STUDENT_ENTRIES)
    assert report.exclude_filters == ("Entrada", "Saída", "Data")
    assert report.custom_filters["Falta/presença"].options == ("presença", "falta")
    assert report.header_note.startswith("Horário de entrada padrão: 07:00.")
