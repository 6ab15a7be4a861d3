"""
추적 행 변경 연산

각 함수는 문서(SheetDatabase)를 직접 수정하고 OperationResult를
반환합니다. 저장은 호출자(SheetService)의 트랜잭션이 담당합니다.
자재 준비 여부나 구매 회신일이 바뀌는 연산은 상태를 다시 계산합니다.
"""

from __future__ import annotations

from typing import Any, Optional

from shortage_tracker.core.status import LatePolicy, refresh_status
from shortage_tracker.domain.models import SheetDatabase, TrackingRow
from shortage_tracker.domain.normalization import (
    clean_text,
    is_known_stage,
    model_key,
    normalize_date_input,
)
from shortage_tracker.domain.results import OperationResult, Outcome


def _find_row(db: SheetDatabase, row_id: str) -> Optional[TrackingRow]:
    return next((row for row in db.tracking_schedule if row.id == row_id), None)


def _stage_rows(db: SheetDatabase, work_order: str, stage: str) -> list[TrackingRow]:
    return [
        row
        for row in db.tracking_schedule
        if row.work_order == work_order and row.stage == stage
    ]


def _parse_date(value: Any) -> Optional[str]:
    """빈 값은 ""(지우기), 해석 불가능한 값은 None"""
    text = clean_text(value)
    if not text:
        return ""
    return normalize_date_input(text) or None


def set_delivery_date(
    db: SheetDatabase,
    row_id: str,
    value: Any,
    late_policy: Optional[LatePolicy] = None,
) -> OperationResult:
    """구매 납기 회신일을 설정하고 상태를 다시 계산합니다."""
    new_date = _parse_date(value)
    if new_date is None:
        return OperationResult.fail(Outcome.INVALID_INPUT, f"날짜 형식이 올바르지 않습니다: {value}")

    row = _find_row(db, row_id)
    if row is None:
        return OperationResult.fail(Outcome.NOT_FOUND, f"행을 찾을 수 없습니다: {row_id}")

    row.purchaser_reply_date = new_date
    refresh_status(row, late_policy)
    return OperationResult.ok(1)


def set_purchaser_remark(db: SheetDatabase, row_id: str, remark: Any) -> OperationResult:
    """구매 비고를 설정합니다. 비고는 상태에 영향을 주지 않습니다."""
    row = _find_row(db, row_id)
    if row is None:
        return OperationResult.fail(Outcome.NOT_FOUND, f"행을 찾을 수 없습니다: {row_id}")

    row.purchaser_remark = "" if remark is None else str(remark)
    return OperationResult.ok(1)


def set_stage_date(
    db: SheetDatabase,
    work_order: str,
    stage: str,
    value: Any,
    late_policy: Optional[LatePolicy] = None,
) -> OperationResult:
    """(작업지시, 공정)의 모든 행에 OQC/출하일을 설정합니다."""
    if not is_known_stage(stage):
        return OperationResult.fail(Outcome.INVALID_INPUT, f"알 수 없는 공정입니다: {stage}")
    new_date = _parse_date(value)
    if new_date is None:
        return OperationResult.fail(Outcome.INVALID_INPUT, f"날짜 형식이 올바르지 않습니다: {value}")

    rows = _stage_rows(db, work_order, stage)
    if not rows:
        return OperationResult.fail(
            Outcome.NOT_FOUND, f"{work_order} / {stage} 행이 없습니다."
        )

    for row in rows:
        row.oqc_date = new_date
        refresh_status(row, late_policy)
    return OperationResult.ok(len(rows))


def set_stage_ready(
    db: SheetDatabase,
    work_order: str,
    stage: str,
    is_ready: bool,
    late_policy: Optional[LatePolicy] = None,
) -> OperationResult:
    """(작업지시, 공정)의 모든 행(스켈레톤 포함)의 자재 준비 여부를 설정합니다."""
    if not is_known_stage(stage):
        return OperationResult.fail(Outcome.INVALID_INPUT, f"알 수 없는 공정입니다: {stage}")

    rows = _stage_rows(db, work_order, stage)
    if not rows:
        return OperationResult.fail(
            Outcome.NOT_FOUND, f"{work_order} / {stage} 행이 없습니다."
        )

    for row in rows:
        row.is_material_ready = bool(is_ready)
        refresh_status(row, late_policy)
    return OperationResult.ok(len(rows))


def set_model_archived(db: SheetDatabase, model: str, archived: bool) -> OperationResult:
    """
    모델명이 일치하는 모든 행의 보관 여부를 설정합니다.

    모델명은 공백 제거 + 대소문자 무시로 비교하며,
    일치하는 행이 없어도 성공으로 처리합니다.
    """
    target = model_key(model)
    count = 0
    for row in db.tracking_schedule:
        if model_key(row.model) == target:
            row.is_archived = bool(archived)
            count += 1
    return OperationResult.ok(count)
