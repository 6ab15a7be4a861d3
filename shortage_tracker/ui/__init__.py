"""
UI 계층 (Streamlit)

화면 렌더링 함수와 도메인 예외 어댑터를 제공합니다.
"""

from .adapters import handle_domain_errors, show_result
from .charts import render_status_chart
from .login import render_login
from .session import current_login, get_service, logout, remember_login
from .tracking import render_tracking
from .upload import render_upload
from .users import render_users

__all__ = [
    "handle_domain_errors",
    "show_result",
    "render_status_chart",
    "render_login",
    "render_tracking",
    "render_upload",
    "render_users",
    "get_service",
    "current_login",
    "remember_login",
    "logout",
]
