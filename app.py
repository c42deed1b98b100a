from contextlib import contextmanager
from typing import Dict

import pandas as pd
import streamlit as st

from core.config import configure_logging
from core.controller import ERROR, IDLE, LOADING, ReportController
from core.filters import ASCENDING
from core.registry import get_default_report_key, get_reports, short_title
from core.table import TableView, export_csv

configure_logging()


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .brand {font-size: 1.3rem;font-weight: 700;color: #2563eb;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-header {display: flex;justify-content: space-between;align-items: center;margin-bottom: 8px;}
        .card-title {font-weight: 700;font-size: 1.4rem;color: #374151;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(
        f"""
        <div class="card">
          <div class="card-header">
            <div class="card-title">{title}</div>
          </div>
        """,
        unsafe_allow_html=True,
    )
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def get_controller() -> ReportController:
    if "controller" not in st.session_state:
        st.session_state["controller"] = ReportController(get_default_report_key())
        st.session_state["filter_generation"] = 0
    return st.session_state["controller"]


def select_report(controller: ReportController, report_key: str):
    st.session_state["filter_generation"] = st.session_state.get("filter_generation", 0) + 1
    with st.spinner("Carregando relatório..."):
        controller.select(report_key)


# ---------- Navigation ----------
def render_navigation(controller: ReportController):
    reports = get_reports()
    brand_col, *nav_cols = st.columns([2] + [1] * len(reports))
    with brand_col:
        st.markdown("<div class='app-top-bar'><div class='brand'>Gestão Escolar</div></div>", unsafe_allow_html=True)
    for col, report in zip(nav_cols, reports):
        key = report.key.value
        is_active = key == controller.report_key
        label = short_title(report)
        if col.button(
            f"{report.icon} {label}",
            key=f"nav:{key}",
            help=label,
            type="primary" if is_active else "secondary",
            use_container_width=True,
        ):
            select_report(controller, key)
            st.rerun()


# ---------- Table ----------
def _filter_widget_key(controller: ReportController, column: str) -> str:
    return f"filter:{controller.report_key}:{st.session_state.get('filter_generation', 0)}:{column}"


def render_filters(controller: ReportController, view: TableView):
    if not view.filter_controls:
        return
    values: Dict[str, str] = {}
    cols = st.columns(min(5, len(view.filter_controls)))
    for i, control in enumerate(view.filter_controls):
        with cols[i % len(cols)]:
            widget_key = _filter_widget_key(controller, control.column)
            if control.kind == "select":
                options = [""] + list(control.options)
                index = options.index(control.value) if control.value in options else 0
                values[control.column] = st.selectbox(
                    control.label,
                    options=options,
                    index=index,
                    format_func=lambda v, all_label=control.all_label: v or all_label,
                    key=widget_key,
                )
            else:
                values[control.column] = st.text_input(
                    control.label, value=control.value, placeholder=control.placeholder, key=widget_key
                )

    changed = False
    for column, value in values.items():
        if (value or "") != controller.table_state.filters.get(column, ""):
            controller.set_filter(column, value)
            changed = True
    if changed:
        st.rerun()


def render_sort_headers(controller: ReportController, view: TableView):
    cols = st.columns(len(view.headers))
    for col, header in zip(cols, view.headers):
        marker = ""
        if view.sort is not None and view.sort.key == header:
            marker = " ▲" if view.sort.direction == ASCENDING else " ▼"
        if col.button(f"{header}{marker}", key=f"sort:{controller.report_key}:{header}", use_container_width=True):
            controller.request_sort(header)
            st.rerun()


def render_pagination(controller: ReportController, view: TableView):
    if not view.show_pagination:
        return
    info_col, prev_col, next_col = st.columns([6, 1, 1])
    info_col.markdown(f"Página **{view.page}** de **{view.total_pages}**")
    if prev_col.button("Anterior", disabled=not view.has_prev, key="page:prev", use_container_width=True):
        controller.prev_page()
        st.rerun()
    if next_col.button("Próxima", disabled=not view.has_next, key="page:next", use_container_width=True):
        controller.next_page()
        st.rerun()


def render_report_table(controller: ReportController):
    view = controller.view()
    if not view.show_table:
        st.info(view.empty_message)
        return

    with card(view.title):
        title_cols = st.columns([6, 2, 2])
        with title_cols[1]:
            if view.has_active_filters and st.button("Limpar Filtros", type="primary", use_container_width=True):
                controller.clear_filters()
                st.session_state["filter_generation"] = st.session_state.get("filter_generation", 0) + 1
                st.rerun()
        with title_cols[2]:
            st.download_button(
                "Exportar CSV",
                data=export_csv(controller.data, controller.report, controller.table_state),
                file_name=f"{controller.report_key}.csv",
                mime="text/csv",
                use_container_width=True,
            )

        if view.header_note:
            st.info(view.header_note)

        render_filters(controller, view)
        render_sort_headers(controller, view)
        if view.rows:
            st.dataframe(pd.DataFrame(view.rows, columns=view.headers), hide_index=True, use_container_width=True)
        else:
            st.info(view.empty_message)
        render_pagination(controller, view)


def render_main(controller: ReportController):
    if controller.status == LOADING:
        with st.spinner("Carregando relatório..."):
            st.empty()
        return
    if controller.status == ERROR:
        st.error(controller.error)
        return
    render_report_table(controller)


# ---------- UI setup ----------
st.set_page_config(page_title="Gestão Escolar", layout="wide")
inject_base_styles()

controller = get_controller()
if controller.status == IDLE:
    select_report(controller, controller.report_key)

render_navigation(controller)
render_main(controller)
