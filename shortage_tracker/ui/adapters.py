"""
도메인 예외 / 연산 결과 → UI 메시지 어댑터

도메인 계층에서 발생하는 예외와 서비스가 반환하는 OperationResult를
Streamlit 메시지로 변환합니다. 도메인 계층은 Streamlit에 의존하지
않으면서도 화면에서 적절한 메시지를 표시할 수 있습니다.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Generator

import streamlit as st

from shortage_tracker.domain.exceptions import (
    DataLoadError,
    StorageError,
    ValidationError,
)
from shortage_tracker.domain.results import OperationResult, Outcome

logger = logging.getLogger(__name__)


@contextmanager
def handle_domain_errors() -> Generator[None, None, None]:
    """
    도메인 예외를 잡아서 Streamlit 에러 메시지로 변환하는 컨텍스트 매니저.

    Examples:
        >>> with handle_domain_errors():
        ...     frame = read_table(uploaded)

    Notes:
        - ValidationError: 저장 문서 형식 오류
        - DataLoadError: 업로드 파일 읽기 실패
        - StorageError: 저장소 읽기/쓰기 실패
    """
    try:
        yield

    except ValidationError as e:
        st.error(f"❌ 데이터 검증 실패: {str(e)}")

    except DataLoadError as e:
        st.error(f"❌ 파일 읽기 실패: {str(e)}")

    except StorageError as e:
        # 저장 실패 시 메모리 상태는 이미 복원됨
        logger.error(f"Storage failure surfaced to UI: {e}")
        st.error(f"❌ 저장소 오류: {str(e)}")

    except Exception as e:
        st.error(f"❌ 예상치 못한 오류가 발생했습니다: {type(e).__name__}: {str(e)}")
        st.exception(e)


def show_result(result: OperationResult, success_message: str = "저장되었습니다.") -> None:
    """연산 결과를 구분별 메시지로 표시합니다."""
    if result:
        st.success(f"✅ {result.message or success_message}")
    elif result.outcome is Outcome.NO_CHANGE:
        st.info(f"ℹ️ {result.message or '변경 사항이 없습니다.'}")
    elif result.outcome is Outcome.FORBIDDEN:
        st.warning(f"🔒 {result.message}")
    else:
        st.error(f"❌ {result.message or result.outcome.value}")
