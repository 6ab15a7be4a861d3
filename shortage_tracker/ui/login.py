"""로그인 화면 (사용자명 조회만 수행, 비밀번호 없음)"""

from __future__ import annotations

import streamlit as st

from shortage_tracker.service import SheetService

from .session import remember_login


def render_login(service: SheetService) -> None:
    st.title("🔐 로그인")
    st.caption("등록된 사용자명을 입력하세요. 예: admin, scheduler, purchaser, business")

    with st.form("login_form"):
        username = st.text_input("사용자명")
        submitted = st.form_submit_button("로그인", use_container_width=True)

    if not submitted:
        return

    login = service.login(username)
    if login is None:
        st.error("❌ 등록되지 않은 사용자입니다.")
        return

    remember_login(login)
    st.rerun()
