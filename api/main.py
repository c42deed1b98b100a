from __future__ import annotations

from dataclasses import asdict
import logging
import math
from typing import Any, Dict

import numpy as np
import pandas as pd
from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.responses import Response

from api.schemas import CustomFilterModel, ReportListResponse, ReportMetaModel, TableStateModel
from core.config import configure_logging
from core.controller import LOAD_ERROR_MESSAGE
from core.data import ReportLoadError, records_to_frame
from core.filters import TableState, normalize_table_state
from core.registry import ReportConfig, UnknownReportError, get_default_report_key, get_report, get_reports, short_title
from core.table import TableView, build_table_view, export_csv


configure_logging()
app = FastAPI(title="School Reports API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _state_from_model(model: TableStateModel) -> TableState:
    return normalize_table_state(model.model_dump())


def _json(data: object, status_code: int = 200) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
            },
        ),
    )


def _error(exc: Exception, status_code: int, message: str | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message or str(exc), "type": type(exc).__name__})


def _report_meta(report: ReportConfig) -> ReportMetaModel:
    return ReportMetaModel(
        key=report.key.value,
        title=report.title,
        short_title=short_title(report),
        icon=report.icon,
        exclude_filters=list(report.exclude_filters),
        custom_filters={
            col: CustomFilterModel(type=cf.type, options=list(cf.options), label=cf.label) for col, cf in report.custom_filters.items()
        },
        header_note=report.header_note,
    )


def _view_payload(view: TableView) -> Dict[str, Any]:
    payload = asdict(view)
    payload["pagination"] = {"show": view.show_pagination, "has_prev": view.has_prev, "has_next": view.has_next}
    return payload


def _load_frame(report: ReportConfig) -> pd.DataFrame:
    return records_to_frame(report.fetcher())


@app.get("/reports")
def list_reports():
    return _json(ReportListResponse(reports=[_report_meta(r) for r in get_reports()], default=get_default_report_key()))


@app.get("/reports/{report_key}/records")
def report_records(report_key: str):
    try:
        report = get_report(report_key)
        return _json(report.fetcher())
    except UnknownReportError as exc:
        return _error(exc, 404, f"Unknown report: {report_key}")
    except ReportLoadError as exc:
        logger.exception("report_records failed for %s", report_key)
        return _error(exc, 502, LOAD_ERROR_MESSAGE)
    except Exception as exc:
        logger.exception("report_records failed")
        return _error(exc, 500)


@app.post("/reports/{report_key}/table")
def report_table(report_key: str, state: TableStateModel):
    try:
        report = get_report(report_key)
        view = build_table_view(_load_frame(report), report, _state_from_model(state))
        return _json(_view_payload(view))
    except UnknownReportError as exc:
        return _error(exc, 404, f"Unknown report: {report_key}")
    except ReportLoadError as exc:
        logger.exception("report_table failed for %s", report_key)
        return _error(exc, 502, LOAD_ERROR_MESSAGE)
    except Exception as exc:
        logger.exception("report_table failed")
        return _error(exc, 500)


@app.post("/export/{report_key}")
def export_report(report_key: str, state: TableStateModel):
    try:
        report = get_report(report_key)
        csv_bytes = export_csv(_load_frame(report), report, _state_from_model(state))
    except UnknownReportError as exc:
        return _error(exc, 404, f"Unknown report: {report_key}")
    except ReportLoadError as exc:
        logger.exception("export failed for %s", report_key)
        return _error(exc, 502, LOAD_ERROR_MESSAGE)
    except Exception as exc:
        logger.exception("export failed")
        return _error(exc, 500)
    filename = f"{report.key.value}.csv"
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={filename}"})
