"""
작업지시(工單) 메타데이터 가져오기

처음 보는 작업지시는 결품 없이 메타데이터만 담은 스켈레톤 행 1개를
만들고, 이미 있는 작업지시는 모든 행의 메타데이터를 갱신합니다.
갱신 시 비어 있는 입력값은 기존 값을 지우지 않습니다.
"""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from shortage_tracker.core.config import SKELETON_PART_NUMBER, STATUS_READY
from shortage_tracker.domain.models import SheetDatabase, TrackingRow
from shortage_tracker.domain.normalization import lookup_stage, normalize_stage

from .records import WorkOrderRecord

logger = logging.getLogger(__name__)


def build_skeleton_row(record: WorkOrderRecord, row_id: str) -> TrackingRow:
    return TrackingRow(
        id=row_id,
        model=record.model,
        work_order=record.work_order,
        stage=normalize_stage(record.stage),
        vendor=record.vendor,
        product_part_number=record.product_part_number,
        production_date=record.production_date,
        part_number=SKELETON_PART_NUMBER,
        shortage_qty=0,
        status=STATUS_READY,
        is_archived=False,
    )


def apply_metadata(row: TrackingRow, record: WorkOrderRecord) -> None:
    """비어 있지 않은 입력 필드만 행에 반영합니다."""
    if record.model:
        row.model = record.model
    if record.vendor:
        row.vendor = record.vendor
    if record.product_part_number:
        row.product_part_number = record.product_part_number
    if record.production_date:
        row.production_date = record.production_date
    if record.stage:
        stage = lookup_stage(record.stage)
        if stage is None:
            logger.warning(
                f"Ignoring unknown stage {record.stage!r} for work order {record.work_order}"
            )
        else:
            row.stage = stage


def import_work_orders(
    db: SheetDatabase,
    records: Sequence[WorkOrderRecord],
    new_id: Callable[[str], str],
) -> tuple[int, int]:
    """
    작업지시 메타데이터를 문서에 반영합니다.

    Args:
        db: 수정할 문서
        records: 작업지시 레코드 (작업지시가 빈 레코드는 호출 전에 제외)
        new_id: 새 행 ID 생성 함수

    Returns:
        (생성된 스켈레톤 행 수, 메타데이터가 갱신된 행 수)
    """
    created = 0
    updated = 0

    # 작업지시 → 행 목록 (공정 무관)
    rows_by_wo: dict[str, list[TrackingRow]] = {}
    for row in db.tracking_schedule:
        rows_by_wo.setdefault(row.work_order, []).append(row)

    for record in records:
        existing = rows_by_wo.get(record.work_order)

        if not existing:
            skeleton = build_skeleton_row(record, new_id("skel"))
            db.tracking_schedule.append(skeleton)
            rows_by_wo[record.work_order] = [skeleton]
            created += 1
            continue

        for row in existing:
            apply_metadata(row, record)
            updated += 1

    logger.debug("Work order import: %s skeletons created, %s rows updated", created, updated)
    return created, updated
