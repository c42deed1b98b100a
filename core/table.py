from __future__ import annotations

import math
import re
import unicodedata
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pandas as pd

from core.config import PAGE_SIZE
from core.filters import ASCENDING, SortConfig, TableState
from core.registry import CustomFilter, ReportConfig

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
DATE_RE = re.compile(DATE_PATTERN)

# Select filters on this column match by month of a YYYY-MM-DD value.
DATE_COLUMN = "Data"

NO_DATA_MESSAGE = "Nenhum dado disponível para este relatório."
NO_RESULTS_MESSAGE = "Nenhum resultado encontrado com os filtros aplicados."
ALL_OPTION_LABEL = "Todos"

_DIGITS_RE = re.compile(r"(\d+)")


@dataclass(frozen=True)
class FilterControl:
    column: str
    kind: str
    label: str
    value: str = ""
    options: Tuple[str, ...] = ()
    placeholder: Optional[str] = None
    all_label: Optional[str] = None


@dataclass(frozen=True)
class TableView:
    title: str
    header_note: Optional[str]
    headers: List[str]
    filter_controls: List[FilterControl]
    has_active_filters: bool
    sort: Optional[SortConfig]
    rows: List[Dict[str, str]]
    page: int
    total_pages: int
    total_rows: int
    empty_message: Optional[str] = None
    show_table: bool = True

    @property
    def show_pagination(self) -> bool:
        return self.total_pages > 1

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def is_missing(value: object) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def cell_text(value: object) -> str:
    return "" if is_missing(value) else str(value)


def text_series(series: pd.Series) -> pd.Series:
    return series.map(cell_text).astype(str)


# ---------------- Display formatting ----------------
def format_date_string(value: object) -> str:
    """Render YYYY-MM-DD as DD/MM/YYYY; everything else as plain text."""
    s = cell_text(value)
    if DATE_RE.match(s):
        year, month, day = s.split("-")
        return f"{day}/{month}/{year}"
    return s


def format_display_frame(df: pd.DataFrame) -> pd.DataFrame:
    formatted = df.copy()
    for c in formatted.columns:
        formatted[c] = formatted[c].map(format_date_string)
    return formatted


# ---------------- Columns ----------------
def derive_headers(df: pd.DataFrame) -> List[str]:
    return [str(c) for c in df.columns]


def filterable_headers(headers: Iterable[str], exclude_filters: Iterable[str]) -> List[str]:
    excluded = set(exclude_filters)
    return [h for h in headers if h not in excluded]


def build_filter_controls(headers: List[str], report: ReportConfig, state: TableState) -> List[FilterControl]:
    controls: List[FilterControl] = []
    for header in filterable_headers(headers, report.exclude_filters):
        custom = report.custom_filters.get(header)
        value = state.filters.get(header, "")
        if custom is not None and custom.type == "select":
            controls.append(
                FilterControl(
                    column=header,
                    kind="select",
                    label=custom.label or header,
                    value=value,
                    options=tuple(custom.options),
                    all_label=ALL_OPTION_LABEL,
                )
            )
        else:
            controls.append(
                FilterControl(column=header, kind="text", label=header, value=value, placeholder=f"Filtrar por {header}...")
            )
    return controls


# ---------------- Filters ----------------
def _month_mask(series: pd.Series, custom: CustomFilter, value: str) -> Optional[pd.Series]:
    if value not in custom.options:
        return None
    month = f"{custom.options.index(value) + 1:02d}"
    text = text_series(series)
    return text.str.match(DATE_PATTERN) & (text.str[5:7] == month)


def apply_filters(df: pd.DataFrame, filters: Dict[str, str], custom_filters: Dict[str, CustomFilter]) -> pd.DataFrame:
    filtered = df
    for key, value in filters.items():
        if not value or key not in filtered.columns:
            continue
        series = filtered[key]
        custom = custom_filters.get(key)
        if custom is not None and custom.type == "select":
            if key == DATE_COLUMN:
                mask = _month_mask(series, custom, value)
                if mask is None:
                    continue
            else:
                mask = text_series(series) == value
        else:
            mask = text_series(series).str.lower().str.contains(value.lower(), regex=False)
        filtered = filtered[mask.astype(bool)]
    return filtered


# ---------------- Sort ----------------
def is_finite_number(value: object) -> bool:
    if isinstance(value, bool):
        return False
    s = str(value).strip()
    if not s or "_" in s:
        return False
    try:
        return math.isfinite(float(s))
    except ValueError:
        return False


def _strip_accents(s: str) -> str:
    return "".join(ch for ch in unicodedata.normalize("NFKD", s) if not unicodedata.combining(ch))


def locale_sort_key(value: object) -> Tuple[Any, ...]:
    """Accent/case-insensitive key that compares digit runs as numbers ("2" < "10")."""
    s = str(value)
    chunks = []
    for part in _DIGITS_RE.split(_strip_accents(s).casefold()):
        if not part:
            continue
        if part.isdigit():
            chunks.append((0, int(part), ""))
        else:
            chunks.append((1, 0, part))
    return tuple(chunks), s


def apply_sort(df: pd.DataFrame, sort: Optional[SortConfig]) -> pd.DataFrame:
    if sort is None or sort.key not in df.columns or df.empty:
        return df
    values = df[sort.key].tolist()
    defined = [i for i, v in enumerate(values) if not is_missing(v)]
    missing = [i for i, v in enumerate(values) if is_missing(v)]

    def sort_key(i: int) -> Tuple[Any, ...]:
        # Numbers compare numerically with each other and order before text.
        value = values[i]
        if is_finite_number(value):
            return (0, float(str(value).strip()), ())
        return (1, 0.0, locale_sort_key(value))

    # list.sort stays stable with reverse=True; missing values always go last.
    defined.sort(key=sort_key, reverse=sort.direction != ASCENDING)
    return df.iloc[defined + missing]


# ---------------- Pagination ----------------
def count_pages(total_rows: int) -> int:
    return math.ceil(total_rows / PAGE_SIZE)


def clamp_page(page: int, total_pages: int) -> int:
    return min(max(int(page), 1), max(total_pages, 1))


def paginate(df: pd.DataFrame, page: int) -> pd.DataFrame:
    start = (page - 1) * PAGE_SIZE
    return df.iloc[start : start + PAGE_SIZE]


# ---------------- View ----------------
def filter_and_sort(df: pd.DataFrame, report: ReportConfig, state: TableState) -> pd.DataFrame:
    filtered = apply_filters(df, state.filters, report.custom_filters)
    return apply_sort(filtered, state.sort)


def build_table_view(df: pd.DataFrame, report: ReportConfig, state: TableState) -> TableView:
    if df.empty:
        return TableView(
            title=report.title,
            header_note=report.header_note,
            headers=[],
            filter_controls=[],
            has_active_filters=False,
            sort=None,
            rows=[],
            page=1,
            total_pages=0,
            total_rows=0,
            empty_message=NO_DATA_MESSAGE,
            show_table=False,
        )

    headers = derive_headers(df)
    result = filter_and_sort(df, report, state)
    total_pages = count_pages(len(result))
    page = clamp_page(state.page, total_pages)
    page_df = format_display_frame(paginate(result, page))
    return TableView(
        title=report.title,
        header_note=report.header_note,
        headers=headers,
        filter_controls=build_filter_controls(headers, report, state),
        has_active_filters=state.has_active_filters,
        sort=state.sort,
        rows=page_df.to_dict(orient="records"),
        page=page,
        total_pages=total_pages,
        total_rows=int(len(result)),
        empty_message=None if len(result) else NO_RESULTS_MESSAGE,
    )


def export_csv(df: pd.DataFrame, report: ReportConfig, state: TableState) -> bytes:
    if df.empty:
        return b""
    result = filter_and_sort(df, report, state)
    return result.to_csv(index=False).encode("utf-8")
