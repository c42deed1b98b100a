from __future__ import annotations

import json
import logging
import time
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Tuple

import pandas as pd
import requests

from core import config

logger = logging.getLogger(__name__)

Record = Dict[str, Any]

STUDENTS_FILE = "alunos.json"
GUARDIANS_FILE = "responsaveis_alunos.json"
PASTORAL_CARE_FILE = "atendimentos_pastoral.json"
ACADEMIC_PERFORMANCE_FILE = "desempenho_academico.json"
STUDENT_ENTRIES_FILE = "entradas_estudantes.json"
PEDAGOGICAL_OCCURRENCES_FILE = "ocorrencias_pedagogicas.json"


class ReportLoadError(RuntimeError):
    """Report data could not be fetched or decoded."""


def _validate_records(payload: object, source: str) -> List[Record]:
    if not isinstance(payload, list):
        raise ReportLoadError(f"Expected a JSON array in {source}, got {type(payload).__name__}")
    for idx, item in enumerate(payload):
        if not isinstance(item, dict):
            raise ReportLoadError(f"Record {idx} in {source} is not an object")
    return payload


def file_signature(path: Path) -> Tuple[str, float]:
    return str(path), path.stat().st_mtime


@lru_cache(maxsize=16)
def _load_file_cached(signature: Tuple[str, float]) -> Tuple[Record, ...]:
    path_str, _ = signature
    with open(path_str, "r", encoding="utf-8") as f:
        payload = json.load(f)
    return tuple(_validate_records(payload, path_str))


def _load_local(file_name: str) -> List[Record]:
    path = config.REPORTS_DATA_DIR / file_name
    try:
        records = _load_file_cached(file_signature(path))
    except ReportLoadError:
        raise
    except (OSError, ValueError, RecursionError) as exc:
        raise ReportLoadError(f"Failed to read {path}: {exc}") from exc
    return [dict(r) for r in records]


def _load_remote(file_name: str) -> List[Record]:
    url = f"{config.REPORTS_DATA_URL.rstrip('/')}/{file_name}"
    try:
        response = requests.get(url, timeout=config.REPORTS_HTTP_TIMEOUT)
    except requests.RequestException as exc:
        raise ReportLoadError(f"Failed to fetch {url}: {exc}") from exc
    if not response.ok:
        raise ReportLoadError(f"Failed to fetch {url}: {response.status_code} {response.reason}")
    try:
        payload = response.json()
    except (ValueError, RecursionError) as exc:
        raise ReportLoadError(f"Invalid JSON from {url}") from exc
    return _validate_records(payload, url)


def fetch_records(file_name: str) -> List[Record]:
    if config.REPORTS_DATA_URL:
        records = _load_remote(file_name)
    else:
        records = _load_local(file_name)
    if config.REPORTS_SIMULATED_LATENCY_MS > 0:
        time.sleep(config.REPORTS_SIMULATED_LATENCY_MS / 1000.0)
    logger.debug("Loaded %d records from %s", len(records), file_name)
    return records


def fetch_students() -> List[Record]:
    return fetch_records(STUDENTS_FILE)


def fetch_guardians() -> List[Record]:
    return fetch_records(GUARDIANS_FILE)


def fetch_pastoral_care() -> List[Record]:
    return fetch_records(PASTORAL_CARE_FILE)


def fetch_academic_performance() -> List[Record]:
    return fetch_records(ACADEMIC_PERFORMANCE_FILE)


def fetch_student_entries() -> List[Record]:
    return fetch_records(STUDENT_ENTRIES_FILE)


def fetch_pedagogical_occurrences() -> List[Record]:
    return fetch_records(PEDAGOGICAL_OCCURRENCES_FILE)


def records_to_frame(records: List[Record]) -> pd.DataFrame:
    """Build a DataFrame whose columns follow the key order of the first record."""
    if not records:
        return pd.DataFrame()
    columns = list(records[0].keys())
    df = pd.DataFrame.from_records(records, columns=columns)
    return df.astype(object).where(df.notna(), None)
