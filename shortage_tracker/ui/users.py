"""사용자 관리 화면 (관리자 전용)"""

from __future__ import annotations

import pandas as pd
import streamlit as st

from shortage_tracker.core.config import BUILTIN_ADMIN
from shortage_tracker.domain.models import UserRole, rows_to_dicts
from shortage_tracker.domain.permissions import role_display_name
from shortage_tracker.service import SheetService

from .adapters import handle_domain_errors, show_result


def render_users(service: SheetService, role: UserRole) -> None:
    st.header("👥 사용자 관리")

    users = service.get_users()
    frame = pd.DataFrame(rows_to_dicts(users))
    if not frame.empty:
        frame["역할"] = frame["role"].map(role_display_name)
    st.dataframe(frame, use_container_width=True, hide_index=True)

    add_col, delete_col = st.columns(2)

    with add_col:
        with st.form("add_user_form", clear_on_submit=True):
            st.subheader("사용자 추가")
            username = st.text_input("사용자명")
            new_role = st.selectbox("역할", [r.value for r in UserRole])
            if st.form_submit_button("추가"):
                with handle_domain_errors():
                    show_result(
                        service.add_user({"username": username, "role": new_role}, role=role),
                        "사용자를 추가했습니다.",
                    )

    with delete_col:
        st.subheader("사용자 삭제")
        candidates = [u.username for u in users if u.username.casefold() != BUILTIN_ADMIN]
        target = st.selectbox("삭제할 사용자", candidates, key="delete_user_target")
        if st.button("삭제", disabled=not candidates):
            with handle_domain_errors():
                show_result(service.delete_user(target, role=role), "사용자를 삭제했습니다.")

    st.divider()
    with st.expander("⚠️ 데이터베이스 초기화"):
        st.caption("모든 추적/업로드 데이터를 삭제하고 기본 사용자만 남깁니다.")
        confirmed = st.checkbox("초기화에 동의합니다.")
        if st.button("초기화", disabled=not confirmed, type="primary"):
            with handle_domain_errors():
                show_result(service.reset(role=role), "데이터베이스를 초기화했습니다.")
