"""
세션 상태 관리

서비스 객체는 프로세스 단위로 캐시하고(st.cache_resource),
로그인 사용자는 브라우저 세션(st.session_state)에 보관합니다.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

import streamlit as st

from shortage_tracker.core.config import CONFIG
from shortage_tracker.domain.exceptions import StorageError
from shortage_tracker.service import LoginResult, SheetService
from shortage_tracker.storage import TrackingRepository, build_storage

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "tracker_login"


def _credentials_from_secrets() -> dict[str, Any]:
    """
    secrets의 [google_sheets] 섹션에서 서비스 계정 정보를 읽습니다.

    [google_sheets.credentials] 테이블 또는 credentials_json 문자열을 지원합니다.
    """
    try:
        gs = st.secrets["google_sheets"]
    except (KeyError, FileNotFoundError) as exc:
        raise StorageError("secrets에 [google_sheets] 섹션이 없습니다.") from exc

    creds_obj = gs.get("credentials", None)
    creds_json = gs.get("credentials_json", None)

    if creds_obj is not None:
        return {k: creds_obj[k] for k in creds_obj.keys()}
    if creds_json:
        return json.loads(str(creds_json))
    raise StorageError("secrets에 credentials(또는 credentials_json)가 없습니다.")


@st.cache_resource
def get_service() -> SheetService:
    """설정된 저장소 백엔드로 서비스를 생성합니다 (프로세스당 1회)."""
    credentials: Optional[dict[str, Any]] = None
    if CONFIG.storage.backend == "gsheet":
        credentials = _credentials_from_secrets()

    storage = build_storage(CONFIG.storage, credentials_info=credentials)
    logger.info("Tracker service initialised")
    return SheetService(TrackingRepository(storage))


def current_login() -> Optional[LoginResult]:
    return st.session_state.get(SESSION_USER_KEY)


def remember_login(login: LoginResult) -> None:
    st.session_state[SESSION_USER_KEY] = login


def logout() -> None:
    st.session_state.pop(SESSION_USER_KEY, None)
