"""
역할별 권한

- Scheduler(생산관리): 가져오기, 공정 일정/준비 상태, 모델 보관
- Purchaser(구매): 납기 회신일, 비고
- Business(영업관리): 조회 전용
- Admin: 전체 + 사용자 관리
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from .models import UserRole


class Capability(str, Enum):
    IMPORT = "import"
    SCHEDULE = "schedule"
    ARCHIVE = "archive"
    REPLY = "reply"
    MANAGE_USERS = "manage_users"


ROLE_CAPABILITIES: dict[UserRole, frozenset[Capability]] = {
    UserRole.ADMIN: frozenset(Capability),
    UserRole.SCHEDULER: frozenset(
        {Capability.IMPORT, Capability.SCHEDULE, Capability.ARCHIVE}
    ),
    UserRole.PURCHASER: frozenset({Capability.REPLY}),
    UserRole.BUSINESS: frozenset(),
}

# 화면 헤더에 표시할 역할명
ROLE_DISPLAY_NAMES: dict[UserRole, str] = {
    UserRole.PURCHASER: "採購人員",
    UserRole.SCHEDULER: "排程人員",
    UserRole.BUSINESS: "業管 Team",
    UserRole.ADMIN: "系統管理員",
}


def has_capability(role: Any, capability: Capability) -> bool:
    """역할이 해당 권한을 가지고 있는지 확인합니다. 알 수 없는 역할은 권한 없음."""
    parsed = role if isinstance(role, UserRole) else UserRole.parse(role)
    if parsed is None:
        return False
    return capability in ROLE_CAPABILITIES[parsed]


def role_display_name(role: Any) -> str:
    parsed = role if isinstance(role, UserRole) else UserRole.parse(role)
    if parsed is None:
        return str(role)
    return ROLE_DISPLAY_NAMES[parsed]
