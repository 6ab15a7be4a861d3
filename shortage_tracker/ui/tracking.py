"""
결품 추적 화면

사이드바 필터 → 요약 지표/상태 차트 → 모델별 카드(작업지시 × 공정)
→ 상세 테이블 순서로 렌더링합니다. 편집 가능한 항목은 역할 권한에
따라 달라집니다.

- Scheduler: 공정별 자재 준비 여부, OQC/출하일, 모델 보관
- Purchaser: 구매 회신일, 비고
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Sequence

import pandas as pd
import streamlit as st

from shortage_tracker.core.config import CONFIG, STAGES, STATUS_PENDING, STATUSES
from shortage_tracker.data_sources.excel import export_tracking
from shortage_tracker.domain.filters import (
    ALL,
    STAGE_LATE,
    STAGE_OK,
    STAGE_PENDING,
    TrackingFilter,
    filter_options,
    filter_rows,
    group_by_model,
    is_stage_ready,
    real_shortages,
    rows_for_stage,
    rows_to_frame,
    stage_status,
)
from shortage_tracker.domain.models import TrackingRow, UserRole
from shortage_tracker.domain.normalization import clean_text, format_short_date
from shortage_tracker.domain.permissions import Capability, has_capability
from shortage_tracker.domain.results import OperationResult
from shortage_tracker.service import SheetService

from .adapters import handle_domain_errors, show_result
from .charts import render_status_chart

logger = logging.getLogger(__name__)

_STAGE_BADGES = {STAGE_OK: "🟢", STAGE_LATE: "🔴", STAGE_PENDING: "🟡"}
_VIEW_LABELS = {"active": "진행 중", "archived": "보관됨"}
_REPLY_COLUMNS = ("purchaserReplyDate", "purchaserRemark")


def _apply(result: OperationResult) -> None:
    """성공하면 화면을 다시 그리고, 실패하면 사유를 표시합니다."""
    if result:
        st.rerun()
    show_result(result)


def _sidebar_filters(rows: Sequence[TrackingRow]) -> TrackingFilter:
    options = filter_options(rows)
    with st.sidebar:
        st.header("필터")
        view_mode = st.radio(
            "보기", list(_VIEW_LABELS), format_func=_VIEW_LABELS.get, horizontal=True
        )
        month = st.selectbox("OQC 월", [ALL] + options.months)
        search = st.text_input("검색 (工單 / 料號 / 機種)")
        status = st.selectbox("상태", [ALL, *STATUSES])
        vendor = st.selectbox("외주처", [ALL] + options.vendors)
        supplier = st.selectbox("공급사", [ALL] + options.suppliers)

    return TrackingFilter(
        view_mode=view_mode,
        month=month,
        search=search,
        status=status,
        vendor=vendor,
        supplier=supplier,
    )


def _by_work_order(rows: Sequence[TrackingRow]) -> dict[str, list[TrackingRow]]:
    groups: dict[str, list[TrackingRow]] = {}
    for row in rows:
        groups.setdefault(row.work_order, []).append(row)
    return groups


def _render_summary(rows: Sequence[TrackingRow]) -> None:
    shortages = real_shortages(rows)
    col1, col2, col3 = st.columns(3)
    col1.metric("모델", len(group_by_model(rows)))
    col2.metric("결품 건수", len(shortages))
    col3.metric("회신 대기", sum(1 for row in shortages if row.status == STATUS_PENDING))


def _render_stage_card(
    service: SheetService,
    role: UserRole,
    model: str,
    work_order: str,
    stage: str,
    rows: Sequence[TrackingRow],
) -> None:
    if not rows:
        st.caption(f"{stage} · -")
        return

    badge = _STAGE_BADGES[stage_status(rows)]
    shortages = real_shortages(rows)
    st.markdown(f"**{badge} {stage}**")
    st.caption(f"결품 {len(shortages)}건 · OQC {format_short_date(rows[0].oqc_date)}")

    if not has_capability(role, Capability.SCHEDULE):
        st.caption("✅ 자재 준비 완료" if is_stage_ready(rows) else "⏳ 자재 준비 중")
        return

    ready = is_stage_ready(rows)
    new_ready = st.checkbox("자재 준비 완료", value=ready, key=f"ready-{model}-{work_order}-{stage}")
    if new_ready != ready:
        _apply(service.update_stage_ready(work_order, stage, new_ready, role=role))

    current = rows[0].oqc_date
    new_date = st.text_input(
        "OQC/출하일",
        value=current,
        placeholder="YYYY-MM-DD",
        key=f"oqc-{model}-{work_order}-{stage}",
    )
    if clean_text(new_date) != current:
        _apply(service.update_stage_date(work_order, stage, new_date, role=role))


def _save_reply_edits(
    service: SheetService,
    role: UserRole,
    original: pd.DataFrame,
    edited: pd.DataFrame,
) -> None:
    failures: list[OperationResult] = []
    changed = 0

    for row_id in original.index:
        before = original.loc[row_id]
        after = edited.loc[row_id]

        new_date = clean_text(after["purchaserReplyDate"])
        if new_date != clean_text(before["purchaserReplyDate"]):
            result = service.update_delivery_date(row_id, new_date, role=role)
            changed += 1
            if not result:
                failures.append(result)

        new_remark = clean_text(after["purchaserRemark"])
        if new_remark != clean_text(before["purchaserRemark"]):
            result = service.update_purchaser_remark(row_id, new_remark, role=role)
            changed += 1
            if not result:
                failures.append(result)

    logger.info("Saved %s purchaser edits (%s failed)", changed, len(failures))
    if not failures:
        st.rerun()
    for result in failures:
        show_result(result)


def _render_detail_table(
    service: SheetService,
    role: UserRole,
    model: str,
    rows: Sequence[TrackingRow],
) -> None:
    shortages = real_shortages(rows)
    if not shortages:
        st.caption("결품이 없습니다.")
        return

    frame = rows_to_frame(shortages).set_index("id")
    can_reply = has_capability(role, Capability.REPLY)
    editable = set(_REPLY_COLUMNS) if can_reply else set()

    edited = st.data_editor(
        frame,
        disabled=[col for col in frame.columns if col not in editable],
        use_container_width=True,
        height=min(CONFIG.ui.detail_table_height, 38 + 35 * len(frame)),
        key=f"detail-{model}",
    )

    if can_reply and st.button("구매 회신 저장", key=f"save-reply-{model}"):
        with handle_domain_errors():
            _save_reply_edits(service, role, frame, edited)


def _render_model(
    service: SheetService,
    role: UserRole,
    model: str,
    rows: Sequence[TrackingRow],
    view_mode: str,
) -> None:
    statuses = [stage_status(rows_for_stage(rows, stage)) for stage in STAGES]
    header_badge = _STAGE_BADGES[
        STAGE_LATE if STAGE_LATE in statuses else STAGE_PENDING if STAGE_PENDING in statuses else STAGE_OK
    ]

    with st.expander(f"{header_badge} {model}", expanded=view_mode == "active"):
        if has_capability(role, Capability.ARCHIVE):
            archive = view_mode == "active"
            label = "📦 보관" if archive else "↩️ 보관 해제"
            if st.button(label, key=f"archive-{model}"):
                _apply(service.archive_model(model, archive, role=role))

        for work_order, wo_rows in _by_work_order(rows).items():
            first = wo_rows[0]
            st.markdown(
                f"**{work_order}** · {first.vendor or '-'} · 品號 {first.product_part_number or '-'}"
                f" · 생산 {format_short_date(first.production_date)}"
            )
            columns = st.columns(CONFIG.ui.stage_columns)
            for index, stage in enumerate(STAGES):
                with columns[index % len(columns)]:
                    _render_stage_card(
                        service, role, model, work_order, stage, rows_for_stage(wo_rows, stage)
                    )

        _render_detail_table(service, role, model, rows)


def render_tracking(service: SheetService, role: UserRole) -> None:
    """추적 화면 전체를 렌더링합니다."""
    st.header("📋 결품 추적")

    with handle_domain_errors():
        all_rows = service.search_tracking()

        criteria = _sidebar_filters(all_rows)
        rows = filter_rows(all_rows, criteria)

        _render_summary(rows)

        chart_col, export_col = st.columns([4, 1])
        with chart_col:
            render_status_chart(rows)
        with export_col:
            st.download_button(
                "📥 엑셀 다운로드",
                data=export_tracking(rows),
                file_name=f"shortage_report_{date.today():%Y%m%d}.xlsx",
                mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
                disabled=not rows,
                use_container_width=True,
            )

        if not rows:
            st.info("조건에 맞는 행이 없습니다.")
            return

        for model, model_rows in group_by_model(rows).items():
            _render_model(service, role, model, model_rows, criteria.view_mode)
