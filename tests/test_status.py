"""
상태 계산 테스트

자재 준비 여부와 구매 회신일로부터 상태가 파생되는지 확인합니다.
"""
from __future__ import annotations

from shortage_tracker.core.status import compute_status, refresh_status
from shortage_tracker.domain.models import TrackingRow


def test_material_ready_is_ready_even_with_reply_date():
    """자재 준비 완료 → 회신일과 무관하게 Ready"""
    row = TrackingRow(is_material_ready=True, purchaser_reply_date="2024-03-01")
    assert compute_status(row) == "Ready"


def test_no_reply_date_is_pending():
    """회신일 없음 → Pending"""
    assert compute_status(TrackingRow()) == "Pending"


def test_reply_date_is_confirmed():
    """회신일 있음 → Confirmed"""
    assert compute_status(TrackingRow(purchaser_reply_date="2024-03-01")) == "Confirmed"


def test_late_is_never_derived_without_policy():
    """지연 판정 함수가 없으면 Late는 나오지 않음"""
    rows = [
        TrackingRow(),
        TrackingRow(purchaser_reply_date="1999-01-01", oqc_date="1998-01-01"),
    ]
    assert all(compute_status(row) != "Late" for row in rows)


def test_late_policy_applies_to_rows_not_ready():
    """지연 판정 함수가 True → Late (자재 준비 완료 행 제외)"""
    always_late = lambda row: True  # noqa: E731

    assert compute_status(TrackingRow(), always_late) == "Late"
    assert compute_status(TrackingRow(purchaser_reply_date="2024-03-01"), always_late) == "Late"
    assert compute_status(TrackingRow(is_material_ready=True), always_late) == "Ready"


def test_late_policy_false_falls_back_to_reply_rule():
    """지연 판정 함수가 False → 기본 규칙"""
    never_late = lambda row: False  # noqa: E731
    assert compute_status(TrackingRow(purchaser_reply_date="2024-03-01"), never_late) == "Confirmed"


def test_refresh_status_writes_field():
    """refresh_status는 status 필드를 갱신하고 새 값을 반환"""
    row = TrackingRow(status="Ready", purchaser_reply_date="2024-03-01")
    assert refresh_status(row) == "Confirmed"
    assert row.status == "Confirmed"
