"""
업로드 화면

작업지시 메타데이터와 결품 리스트 파일을 읽어 가져오기를 실행합니다.
결품 리스트는 전체 교체(replace) 또는 병합(merge) 정책을 선택할 수 있습니다.
"""

from __future__ import annotations

import logging

import pandas as pd
import streamlit as st

from shortage_tracker.data_sources.excel import parse_shortages, parse_wo_details, read_table
from shortage_tracker.domain.models import UserRole, rows_to_dicts
from shortage_tracker.reconcile import ImportPolicy
from shortage_tracker.service import SheetService

from .adapters import handle_domain_errors, show_result

logger = logging.getLogger(__name__)

_POLICY_LABELS = {
    ImportPolicy.REPLACE: "전체 교체 (기존 행 삭제 후 재생성, 구매 입력 초기화)",
    ImportPolicy.MERGE: "병합 (수량만 갱신, 구매 입력 유지)",
}


def _preview(records: list[dict]) -> None:
    if records:
        st.dataframe(pd.DataFrame(records).head(20), use_container_width=True, hide_index=True)


def render_upload(service: SheetService, role: UserRole) -> None:
    st.header("📤 데이터 업로드")

    wo_tab, shortage_tab, history_tab = st.tabs(["작업지시 정보", "결품 리스트", "업로드 이력"])

    # ========================================
    # 작업지시 메타데이터
    # ========================================
    with wo_tab:
        st.caption("컬럼: 工單, 機種, 外包, 製程, 品號, 生產日期")
        wo_file = st.file_uploader("작업지시 파일 (.xlsx / .csv)", type=["xlsx", "csv"], key="wo_upload")
        if wo_file is not None:
            with handle_domain_errors():
                records = parse_wo_details(read_table(wo_file.getvalue(), wo_file.name))
                st.write(f"읽은 작업지시: **{len(records)}건**")
                _preview(records)
                if st.button("작업지시 가져오기", key="wo_import", type="primary"):
                    show_result(service.import_wo_details(records, role=role))

    # ========================================
    # 결품 리스트
    # ========================================
    with shortage_tab:
        st.caption("컬럼: 工單, 料號, 品名, 規格, 供應商, 欠料數 (機種 선택)")
        policy = st.radio(
            "가져오기 방식",
            list(ImportPolicy),
            format_func=lambda p: _POLICY_LABELS[p],
            key="shortage_policy",
        )
        shortage_file = st.file_uploader(
            "결품 파일 (.xlsx / .csv)", type=["xlsx", "csv"], key="shortage_upload"
        )
        if shortage_file is not None:
            with handle_domain_errors():
                records = parse_shortages(read_table(shortage_file.getvalue(), shortage_file.name))
                st.write(f"읽은 결품: **{len(records)}건**")
                _preview(records)
                if st.button("결품 가져오기", key="shortage_import", type="primary"):
                    show_result(service.import_shortages(records, policy, role=role))

    # ========================================
    # ERP 원본 이력
    # ========================================
    with history_tab:
        erp_rows = service.get_all_erp()
        if not erp_rows:
            st.caption("업로드 이력이 없습니다.")
        else:
            history = pd.DataFrame(rows_to_dicts(erp_rows))
            batches = sorted(history["uploadBatch"].unique(), reverse=True)
            batch = st.selectbox("업로드 배치", batches)
            st.dataframe(
                history[history["uploadBatch"] == batch],
                use_container_width=True,
                hide_index=True,
            )
