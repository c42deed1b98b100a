import json
import os
import sys
from typing import Dict, List

import pytest

# Insert project root to sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from core import config  # noqa: E402
from core import data as data_module  # noqa: E402


def make_students(n: int) -> List[Dict[str, str]]:
    return [{"Nome": f"Aluno {i}", "Turma": f"{6 + i % 3}º Ano", "Responsável Legal": f"Responsável {i}"} for i in range(1, n + 1)]


def make_entries(n: int, faltas: int) -> List[Dict[str, str]]:
    """``n`` entry/exit rows, the first ``faltas`` of them absences."""
    rows = []
    for i in range(n):
        rows.append(
            {
                "Data": f"2024-{(i % 12) + 1:02d}-{(i % 28) + 1:02d}",
                "Dia da semana": "Segunda-feira",
                "Entrada": "07:00",
                "Saída": "12:00",
                "Nome do estudante": f"Estudante {i}",
                "Turma": "6º Ano A",
                "Falta/presença": "falta" if i < faltas else "presença",
            }
        )
    return rows


@pytest.fixture
def write_report(tmp_path, monkeypatch):
    """Point the loader at a temp data dir and return a writer for report files."""
    monkeypatch.setattr(config, "REPORTS_DATA_DIR", tmp_path)
    monkeypatch.setattr(config, "REPORTS_DATA_URL", None)
    monkeypatch.setattr(config, "REPORTS_SIMULATED_LATENCY_MS", 0)
    data_module._load_file_cached.cache_clear()

    def _write(file_name: str, payload) -> None:
        path = tmp_path / file_name
        if isinstance(payload, str):
            path.write_text(payload, encoding="utf-8")
        else:
            path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")

    yield _write
    data_module._load_file_cached.cache_clear()
