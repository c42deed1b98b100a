import pytest
import requests

from conftest import make_students
from core import config
from core import data
from core.data import ReportLoadError, fetch_records, records_to_frame


class _FakeResponse:
    def __init__(self, status_code=200, payload=None, reason="OK", bad_json=False):
        self.status_code = status_code
        self.reason = reason
        self._payload = payload
        self._bad_json = bad_json

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._bad_json:
            raise ValueError("Expecting value")
        return self._payload


def test_fetch_local_file(write_report):
    write_report(data.STUDENTS_FILE, make_students(3))
    records = data.fetch_students()
    assert len(records) == 3
    assert list(records[0].keys()) == ["Nome", "Turma", "Responsável Legal"]


def test_fetch_returns_independent_copies(write_report):
    write_report(data.STUDENTS_FILE, make_students(2))
    first = data.fetch_students()
    first[0]["Nome"] = "alterado"
    assert data.fetch_students()[0]["Nome"] == "Aluno 1"


def test_missing_file_raises_load_error(write_report):
    with pytest.raises(ReportLoadError):
        fetch_records("nao_existe.json")


def test_invalid_json_raises_load_error(write_report):
    write_report(data.GUARDIANS_FILE, "{not json")
    with pytest.raises(ReportLoadError):
        data.fetch_guardians()


def test_deeply_nested_json_raises_load_error(write_report):
    write_report(data.STUDENTS_FILE, "[" * 200000 + "]" * 200000)
    with pytest.raises(ReportLoadError):
        data.fetch_students()


@pytest.mark.parametrize("payload", [{"Nome": "x"}, ["x", "y"], [{"Nome": "x"}, 3]])
def test_wrong_shape_raises_load_error(write_report, payload):
    write_report(data.PASTORAL_CARE_FILE, payload)
    with pytest.raises(ReportLoadError):
        data.fetch_pastoral_care()


def test_fetch_over_http(monkeypatch):
    calls = []

    def fake_get(url, timeout):
        calls.append((url, timeout))
        return _FakeResponse(payload=[{"Data": "2024-03-15", "Hora": "09:40"}])

    monkeypatch.setattr(config, "REPORTS_DATA_URL", "http://reports.local/data/")
    monkeypatch.setattr(config, "REPORTS_HTTP_TIMEOUT", 3.0)
    monkeypatch.setattr(requests, "get", fake_get)

    records = data.fetch_pedagogical_occurrences()
    assert records == [{"Data": "2024-03-15", "Hora": "09:40"}]
    assert calls == [("http://reports.local/data/ocorrencias_pedagogicas.json", 3.0)]


@pytest.mark.parametrize(
    "response",
    [
        _FakeResponse(status_code=404, reason="Not Found"),
        _FakeResponse(bad_json=True),
        _FakeResponse(payload={"not": "a list"}),
    ],
)
def test_http_failures_raise_load_error(monkeypatch, response):
    monkeypatch.setattr(config, "REPORTS_DATA_URL", "http://reports.local/data")
    monkeypatch.setattr(requests, "get", lambda url, timeout: response)
    with pytest.raises(ReportLoadError):
        data.fetch_student_entries()


def test_http_connection_error_raises_load_error(monkeypatch):
    def boom(url, timeout):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(config, "REPORTS_DATA_URL", "http://reports.local/data")
    monkeypatch.setattr(requests, "get", boom)
    with pytest.raises(ReportLoadError) as excinfo:
        data.fetch_academic_performance()
    assert isinstance(excinfo.value.__cause__, requests.ConnectionError)


def test_records_to_frame_uses_first_record_keys():
    df = records_to_frame([{"b": "1", "a": "2"}, {"a": "3", "b": "4", "c": "5"}, {"b": "6"}])
    assert list(df.columns) == ["b", "a"]
    assert df["a"].tolist() == ["2", "3", None]
    assert records_to_frame([]).empty
