from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Optional

ASCENDING = "ascending"
DESCENDING = "descending"
SORT_DIRECTIONS = (ASCENDING, DESCENDING)


@dataclass(frozen=True)
class SortConfig:
    key: str
    direction: str = ASCENDING


@dataclass(frozen=True)
class TableState:
    filters: Dict[str, str] = field(default_factory=dict)
    sort: Optional[SortConfig] = None
    page: int = 1

    @property
    def has_active_filters(self) -> bool:
        return any(v != "" for v in self.filters.values())


def _as_page(value: object) -> int:
    try:
        page = int(value)  # type: ignore[arg-type]
    except Exception:
        return 1
    return max(1, page)


def normalize_table_state(raw: dict) -> TableState:
    filters: Dict[str, str] = {}
    for key, value in (raw.get("filters") or {}).items():
        if value is None:
            continue
        value = str(value)
        if value:
            filters[str(key)] = value

    sort = None
    sort_key = raw.get("sort_key")
    sort_direction = str(raw.get("sort_direction") or ASCENDING).lower()
    if sort_key:
        if sort_direction not in SORT_DIRECTIONS:
            sort_direction = ASCENDING
        sort = SortConfig(key=str(sort_key), direction=sort_direction)

    return TableState(filters=filters, sort=sort, page=_as_page(raw.get("page", 1)))


# State transitions. Any change to filters or sort sends the view back to page 1.

def set_filter(state: TableState, key: str, value: Optional[str]) -> TableState:
    filters = dict(state.filters)
    filters[key] = value or ""
    return replace(state, filters=filters, page=1)


def clear_filters(state: TableState) -> TableState:
    return replace(state, filters={}, page=1)


def request_sort(state: TableState, key: str) -> TableState:
    direction = ASCENDING
    if state.sort is not None and state.sort.key == key and state.sort.direction == ASCENDING:
        direction = DESCENDING
    return replace(state, sort=SortConfig(key=key, direction=direction), page=1)


def go_to_page(state: TableState, page: int, total_pages: int) -> TableState:
    return replace(state, page=min(max(page, 1), max(total_pages, 1)))
