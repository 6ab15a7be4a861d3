"""
생산 결품 추적 대시보드 메인 엔트리 포인트

실행:
    streamlit run tracker_app.py

저장소 백엔드는 환경 변수로 선택합니다.
- TRACKER_STORAGE: json (기본) / gsheet / memory
- TRACKER_DB_PATH: JSON 파일 경로 (기본 tracker_db.json)
- TRACKER_GSHEET_ID: Google Sheets 문서 ID (gsheet 전용, 인증 정보는 secrets의 [google_sheets])
"""

from __future__ import annotations

import logging

import streamlit as st

# 로깅 설정
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

from shortage_tracker.core.config import CONFIG
from shortage_tracker.domain.permissions import Capability, has_capability, role_display_name
from shortage_tracker.ui import (
    current_login,
    get_service,
    handle_domain_errors,
    logout,
    render_login,
    render_tracking,
    render_upload,
    render_users,
)

PAGE_TRACKING = "📋 결품 추적"
PAGE_UPLOAD = "📤 데이터 업로드"
PAGE_USERS = "👥 사용자 관리"


def main() -> None:
    st.set_page_config(page_title=CONFIG.ui.page_title, layout="wide")

    service = None
    with handle_domain_errors():
        service = get_service()
    if service is None:
        st.stop()

    login = current_login()
    if login is None:
        render_login(service)
        return

    role = login.role

    # 사이드바: 사용자 정보 + 페이지 선택
    with st.sidebar:
        st.markdown(f"**{login.user.username}** · {role_display_name(role)}")
        if st.button("로그아웃", use_container_width=True):
            logout()
            st.rerun()
        if st.button("🔄 새로고침", use_container_width=True):
            st.rerun()
        st.divider()

        pages = [PAGE_TRACKING]
        if has_capability(role, Capability.IMPORT):
            pages.append(PAGE_UPLOAD)
        if has_capability(role, Capability.MANAGE_USERS):
            pages.append(PAGE_USERS)
        page = st.radio("메뉴", pages, label_visibility="collapsed")
        st.divider()

    st.title(CONFIG.ui.page_title)

    if page == PAGE_UPLOAD:
        render_upload(service, role)
    elif page == PAGE_USERS:
        render_users(service, role)
    else:
        render_tracking(service, role)


if __name__ == "__main__":
    main()
