"""Report view controller.

Owns the selected report, its loaded records and the table state, and moves
through ``idle -> loading -> ready | error``. Every load is tagged with a
``LoadTicket``; results for a ticket that is no longer current (a newer load
started, or the user moved to another report) are dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

import pandas as pd

from core import filters as table_filters
from core.data import Record, records_to_frame
from core.filters import TableState
from core.registry import ReportConfig, get_default_report_key, get_report
from core.table import TableView, build_table_view, count_pages, filter_and_sort

logger = logging.getLogger(__name__)

IDLE = "idle"
LOADING = "loading"
READY = "ready"
ERROR = "error"

LOAD_ERROR_MESSAGE = "Falha ao carregar os dados do relatório."


@dataclass(frozen=True)
class LoadTicket:
    report_key: str
    seq: int


class ReportController:
    def __init__(self, report_key: Optional[str] = None):
        self.report_key: str = get_report(report_key or get_default_report_key()).key.value
        self.status: str = IDLE
        self.error: Optional[str] = None
        self.data: pd.DataFrame = pd.DataFrame()
        self.table_state = TableState()
        self._seq = 0
        self._pending: Optional[LoadTicket] = None

    @property
    def report(self) -> ReportConfig:
        return get_report(self.report_key)

    @property
    def loading(self) -> bool:
        return self.status == LOADING

    # ---------------- Loading ----------------
    def begin_load(self, report_key: Optional[str] = None) -> LoadTicket:
        if report_key is not None:
            new_key = get_report(report_key).key.value
            if new_key != self.report_key:
                self.report_key = new_key
                self.data = pd.DataFrame()
            self.table_state = TableState()
        self._seq += 1
        ticket = LoadTicket(report_key=self.report_key, seq=self._seq)
        self._pending = ticket
        self.status = LOADING
        self.error = None
        return ticket

    def _is_current(self, ticket: LoadTicket) -> bool:
        return ticket == self._pending and ticket.report_key == self.report_key

    def finish_load(self, ticket: LoadTicket, records: List[Record]) -> bool:
        if not self._is_current(ticket):
            logger.info("Discarding stale result for %s (load #%d)", ticket.report_key, ticket.seq)
            return False
        self.data = records_to_frame(records)
        self.table_state = TableState(filters=self.table_state.filters, sort=self.table_state.sort)
        self.status = READY
        self.error = None
        self._pending = None
        logger.info("Loaded report %s: %d records", ticket.report_key, len(self.data))
        return True

    def fail_load(self, ticket: LoadTicket, exc: BaseException) -> bool:
        if not self._is_current(ticket):
            logger.info("Discarding stale failure for %s (load #%d): %s", ticket.report_key, ticket.seq, exc)
            return False
        logger.error("Failed to load report %s", ticket.report_key, exc_info=exc)
        self.data = pd.DataFrame()
        self.status = ERROR
        self.error = LOAD_ERROR_MESSAGE
        self._pending = None
        return True

    def _run(self, ticket: LoadTicket) -> None:
        try:
            records = get_report(ticket.report_key).fetcher()
            self.finish_load(ticket, records)
        except Exception as exc:  # any fetch or decode failure becomes the generic error
            self.fail_load(ticket, exc)

    def select(self, report_key: str) -> None:
        """Switch to ``report_key`` (or re-select it) and fetch its records."""
        self._run(self.begin_load(report_key))

    def reload(self) -> None:
        self._run(self.begin_load())

    # ---------------- Table ----------------
    def set_filter(self, key: str, value: Optional[str]) -> None:
        self.table_state = table_filters.set_filter(self.table_state, key, value)

    def clear_filters(self) -> None:
        self.table_state = table_filters.clear_filters(self.table_state)

    def request_sort(self, key: str) -> None:
        self.table_state = table_filters.request_sort(self.table_state, key)

    def _total_pages(self) -> int:
        if self.data.empty:
            return 0
        return count_pages(len(filter_and_sort(self.data, self.report, self.table_state)))

    def go_to_page(self, page: int) -> None:
        self.table_state = table_filters.go_to_page(self.table_state, page, self._total_pages())

    def next_page(self) -> None:
        self.go_to_page(self.table_state.page + 1)

    def prev_page(self) -> None:
        self.go_to_page(self.table_state.page - 1)

    def view(self) -> TableView:
        return build_table_view(self.data, self.report, self.table_state)
