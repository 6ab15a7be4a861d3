"""
결품 리스트 가져오기

두 가지 정책을 지원합니다.

1. REPLACE (전체 교체)
   가져오는 배치에 포함된 작업지시의 기존 행(스켈레톤 포함)을 모두 삭제하고
   배치 레코드로 새로 만듭니다. 모델/외주처/공정 등 메타데이터는 삭제 전에
   작업지시별로 캡처해 새 행에 이어 붙입니다. 구매 회신일, 비고,
   자재 준비 여부는 모두 초기화됩니다.

2. MERGE (병합)
   (작업지시, 부품번호) 키로 기존 행을 찾아 수량만 갱신하고 구매 입력은
   유지합니다. 배치에 없는 기존 결품은 해소된 것으로 보고
   수량 0 / Ready 처리합니다.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Sequence

from shortage_tracker.core.config import STATUS_PENDING, STATUS_READY
from shortage_tracker.domain.models import (
    ERPRawRow,
    MetadataSnapshot,
    RowKey,
    SheetDatabase,
    TrackingRow,
)

from .metadata import MetadataIndex
from .records import ShortageRecord

logger = logging.getLogger(__name__)


class ImportPolicy(str, Enum):
    REPLACE = "replace"
    MERGE = "merge"

    @classmethod
    def parse(cls, value: "ImportPolicy | str") -> "ImportPolicy":
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


@dataclass
class ImportSummary:
    """가져오기 결과 집계"""

    policy: ImportPolicy
    work_orders: int = 0
    created: int = 0
    updated: int = 0
    removed: int = 0
    resolved: int = 0


def _affected_work_orders(
    records: Sequence[ShortageRecord], extra: Iterable[str] = ()
) -> list[str]:
    # 등장 순서 유지
    ordered = dict.fromkeys(record.work_order for record in records)
    ordered.update(dict.fromkeys(wo for wo in extra if wo))
    return list(ordered)


def _new_row(
    record: ShortageRecord,
    meta: MetadataSnapshot,
    row_id: str,
    model: str,
) -> TrackingRow:
    return TrackingRow(
        id=row_id,
        model=model,
        work_order=record.work_order,
        stage=meta.stage,
        vendor=meta.vendor,
        product_part_number=meta.product_part_number,
        production_date=meta.production_date,
        part_number=record.part_number,
        part_name=record.part_name,
        specification=record.specification,
        supplier=record.supplier,
        shortage_qty=record.shortage_qty,
        oqc_date="",
        is_material_ready=False,
        purchaser_reply_date="",
        purchaser_remark="",
        status=STATUS_PENDING,
        purchaser_username="",
        is_archived=False,
    )


def replace_shortages(
    db: SheetDatabase,
    records: Sequence[ShortageRecord],
    new_id: Callable[[str], str],
    *,
    work_orders: Iterable[str] = (),
) -> ImportSummary:
    """
    REPLACE 정책으로 결품을 가져옵니다.

    Args:
        db: 수정할 문서
        records: 가져올 결품 레코드
        new_id: 새 행 ID 생성 함수
        work_orders: 레코드가 없어도 교체 대상에 포함할 작업지시

    Returns:
        ImportSummary (created: 새로 만든 행 수, removed: 삭제한 기존 행 수)
    """
    targets = _affected_work_orders(records, work_orders)
    target_set = set(targets)
    summary = ImportSummary(ImportPolicy.REPLACE, work_orders=len(targets))

    # ========================================
    # 1단계: 삭제 전에 작업지시별 메타데이터 캡처
    # ========================================
    index = MetadataIndex.build(db.tracking_schedule, target_set)

    # ========================================
    # 2단계: 대상 작업지시의 기존 행 전부 삭제
    # ========================================
    kept = [row for row in db.tracking_schedule if row.work_order not in target_set]
    summary.removed = len(db.tracking_schedule) - len(kept)
    db.tracking_schedule = kept

    # ========================================
    # 3단계: 캡처한 메타데이터로 새 행 생성
    # ========================================
    for record in records:
        meta = index.get(record.work_order)
        # 결품 리스트에 모델이 있으면 우선 사용
        model = record.model or meta.model
        db.tracking_schedule.append(_new_row(record, meta, new_id("track"), model))
        summary.created += 1

    logger.debug(
        "Replace import: %s work orders, %s rows removed, %s rows created",
        summary.work_orders,
        summary.removed,
        summary.created,
    )
    return summary


def merge_shortages(
    db: SheetDatabase,
    records: Sequence[ShortageRecord],
    new_id: Callable[[str], str],
    *,
    work_orders: Iterable[str] = (),
) -> ImportSummary:
    """
    MERGE 정책으로 결품을 가져옵니다.

    처리 순서:
    1. 키가 있는 행은 수량만 갱신 (수량 0이면 Ready, 아니면 상태 유지)
    2. 키가 없으면 같은 작업지시의 첫 행에서 메타데이터를 상속해 새 행 생성
    3. 대상 작업지시의 결품 행 중 배치에 키가 없는 행은 수량 0 / Ready

    Args:
        work_orders: 레코드가 없어도 해소 처리 대상에 포함할 작업지시.
                     빈 배치로 특정 작업지시의 결품을 모두 해소할 때 사용합니다.

    Returns:
        ImportSummary (created / updated / resolved)
    """
    targets = _affected_work_orders(records, work_orders)
    target_set = set(targets)
    summary = ImportSummary(ImportPolicy.MERGE, work_orders=len(targets))

    # 기존 키 → 행 (키가 중복되면 뒤의 행)
    by_key: dict[RowKey, TrackingRow] = {row.key: row for row in db.tracking_schedule}
    index = MetadataIndex.build(db.tracking_schedule)

    # ========================================
    # 1~2단계: 갱신 또는 추가
    # ========================================
    for record in records:
        key = RowKey(record.work_order, record.part_number)
        existing = by_key.get(key)

        if existing is not None:
            existing.shortage_qty = record.shortage_qty
            if existing.shortage_qty == 0:
                existing.status = STATUS_READY
            summary.updated += 1
            continue

        meta = index.get(record.work_order)
        row = _new_row(record, meta, new_id("track-merge"), meta.model)
        db.tracking_schedule.append(row)
        by_key[key] = row
        index.remember(row)
        summary.created += 1

    # ========================================
    # 3단계: 배치에 없는 결품은 해소 처리
    # ========================================
    incoming_keys = {RowKey(r.work_order, r.part_number) for r in records}
    for row in db.tracking_schedule:
        if row.work_order not in target_set or row.is_skeleton:
            continue
        if row.key in incoming_keys:
            continue
        row.shortage_qty = 0
        row.status = STATUS_READY
        summary.resolved += 1

    logger.debug(
        "Merge import: %s work orders, %s updated, %s created, %s resolved",
        summary.work_orders,
        summary.updated,
        summary.created,
        summary.resolved,
    )
    return summary


def record_raw_batch(
    db: SheetDatabase,
    records: Sequence[ShortageRecord],
    new_id: Callable[[str], str],
    batch_label: str,
) -> int:
    """가져온 결품 레코드를 ERP 원본 이력 컬렉션에 추가합니다."""
    for record in records:
        db.erp_raw_data.append(
            ERPRawRow(
                id=new_id("erp"),
                model=record.model,
                work_order=record.work_order,
                part_number=record.part_number,
                part_name=record.part_name,
                specification=record.specification,
                supplier=record.supplier,
                shortage_qty=record.shortage_qty,
                required_date=record.required_date,
                upload_batch=batch_label,
            )
        )
    return len(records)


def import_shortages(
    db: SheetDatabase,
    records: Sequence[ShortageRecord],
    new_id: Callable[[str], str],
    policy: ImportPolicy | str = ImportPolicy.REPLACE,
    *,
    work_orders: Iterable[str] = (),
) -> ImportSummary:
    """정책에 따라 replace_shortages / merge_shortages 중 하나를 실행합니다."""
    policy = ImportPolicy.parse(policy)
    if policy is ImportPolicy.MERGE:
        return merge_shortages(db, records, new_id, work_orders=work_orders)
    return replace_shortages(db, records, new_id, work_orders=work_orders)
