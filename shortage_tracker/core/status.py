"""
추적 행 상태 계산

상태는 자재 준비 여부와 구매 회신일로부터 파생됩니다.

- 자재 준비 완료 → Ready
- 구매 회신일 없음 → Pending
- 그 외 → Confirmed

Late는 유효한 상태 값이지만 기본 규칙으로는 만들어지지 않습니다.
지연 판정 규칙이 필요하면 호출자가 late_policy를 주입합니다.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Optional

from .config import STATUS_CONFIRMED, STATUS_LATE, STATUS_PENDING, STATUS_READY

if TYPE_CHECKING:
    from shortage_tracker.domain.models import TrackingRow

LatePolicy = Callable[["TrackingRow"], bool]


def compute_status(row: "TrackingRow", late_policy: Optional[LatePolicy] = None) -> str:
    """
    추적 행의 상태를 계산합니다.

    Args:
        row: 추적 행
        late_policy: 준비되지 않은 행에 대해 지연 여부를 판정하는 함수 (선택)

    Returns:
        "Ready" / "Late" / "Pending" / "Confirmed"
    """
    if row.is_material_ready:
        return STATUS_READY
    if late_policy is not None and late_policy(row):
        return STATUS_LATE
    if not row.purchaser_reply_date:
        return STATUS_PENDING
    return STATUS_CONFIRMED


def refresh_status(row: "TrackingRow", late_policy: Optional[LatePolicy] = None) -> str:
    """행의 status 필드를 다시 계산하여 저장하고 새 값을 반환합니다."""
    row.status = compute_status(row, late_policy)
    return row.status
