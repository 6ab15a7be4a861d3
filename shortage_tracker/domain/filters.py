"""
추적 화면 필터 및 집계

이 모듈은 추적 행 목록에 화면 필터(보관 여부, 월, 검색어, 상태,
외주처, 공급사)를 적용하고, 모델/공정 단위로 묶어 공정 카드의
상태를 계산합니다. Streamlit 의존성이 없는 순수 함수로 구성됩니다.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

import pandas as pd

from shortage_tracker.core.config import STATUS_LATE, STATUS_READY

from .models import TrackingRow

ALL = "All"

# 테이블 표시용 컬럼 순서
FRAME_COLUMNS = [
    "id",
    "model",
    "workOrder",
    "stage",
    "vendor",
    "productionDate",
    "productPartNumber",
    "partNumber",
    "partName",
    "specification",
    "supplier",
    "shortageQty",
    "oqcDate",
    "purchaserReplyDate",
    "purchaserRemark",
    "status",
    "isMaterialReady",
    "isArchived",
]

STAGE_OK = "ok"
STAGE_LATE = "late"
STAGE_PENDING = "pending"


@dataclass(frozen=True)
class TrackingFilter:
    """
    추적 화면 필터 조건.

    Attributes:
        view_mode: "active"(진행 중) 또는 "archived"(보관)
        month: OQC 날짜 기준 "YYYY-MM" 또는 "All"
        search: 작업지시/부품번호/모델 부분 일치 검색어 (대소문자 무시)
        status, vendor, supplier: 정확히 일치하는 값 또는 "All"
    """

    view_mode: str = "active"
    month: str = ALL
    search: str = ""
    status: str = ALL
    vendor: str = ALL
    supplier: str = ALL

    def matches(self, row: TrackingRow) -> bool:
        if self.view_mode == "active" and row.is_archived:
            return False
        if self.view_mode == "archived" and not row.is_archived:
            return False

        if self.month != ALL:
            if not row.oqc_date or not row.oqc_date.startswith(self.month):
                return False

        term = self.search.strip().casefold()
        if term and not any(
            term in value.casefold()
            for value in (row.work_order, row.part_number, row.model)
        ):
            return False

        if self.status != ALL and row.status != self.status:
            return False
        if self.vendor != ALL and row.vendor != self.vendor:
            return False
        if self.supplier != ALL and row.supplier != self.supplier:
            return False
        return True


def filter_rows(rows: Iterable[TrackingRow], criteria: TrackingFilter) -> list[TrackingRow]:
    return [row for row in rows if criteria.matches(row)]


@dataclass(frozen=True)
class FilterOptions:
    vendors: list[str]
    suppliers: list[str]
    months: list[str]


def filter_options(rows: Sequence[TrackingRow]) -> FilterOptions:
    """
    필터 선택 상자에 표시할 옵션을 추출합니다.

    Returns:
        정렬된 외주처/공급사 목록과 OQC 날짜에서 추출한 "YYYY-MM" 목록
    """
    vendors = sorted({row.vendor for row in rows if row.vendor})
    suppliers = sorted({row.supplier for row in rows if row.supplier})
    months = sorted({row.oqc_date[:7] for row in rows if len(row.oqc_date or "") >= 7})
    return FilterOptions(vendors=vendors, suppliers=suppliers, months=months)


def group_by_model(rows: Iterable[TrackingRow]) -> dict[str, list[TrackingRow]]:
    """모델별로 행을 묶습니다. 모델 순서는 처음 등장한 순서를 따릅니다."""
    groups: dict[str, list[TrackingRow]] = {}
    for row in rows:
        groups.setdefault(row.model, []).append(row)
    return groups


def rows_for_stage(rows: Iterable[TrackingRow], stage: str) -> list[TrackingRow]:
    return [row for row in rows if row.stage == stage]


def real_shortages(rows: Iterable[TrackingRow]) -> list[TrackingRow]:
    """수량이 남아 있는 실제 결품 행만 반환합니다 (스켈레톤 제외)."""
    return [row for row in rows if row.shortage_qty > 0 and not row.is_skeleton]


def stage_status(rows: Sequence[TrackingRow]) -> str:
    """
    공정 카드 상태를 계산합니다.

    - ok: 실제 결품이 없거나 모두 Ready/자재 준비 완료
    - late: 실제 결품 중 Late 상태가 있음
    - pending: 그 외
    """
    shortages = real_shortages(rows)
    if not shortages:
        return STAGE_OK
    if all(row.status == STATUS_READY or row.is_material_ready for row in shortages):
        return STAGE_OK
    if any(row.status == STATUS_LATE for row in shortages):
        return STAGE_LATE
    return STAGE_PENDING


def is_stage_ready(rows: Sequence[TrackingRow]) -> bool:
    """공정의 모든 행이 자재 준비 완료인지 여부 (행이 없으면 False)"""
    return bool(rows) and all(row.is_material_ready for row in rows)


def rows_to_frame(rows: Sequence[TrackingRow]) -> pd.DataFrame:
    """
    추적 행 목록을 테이블 표시용 데이터프레임으로 변환합니다.

    행이 없으면 FRAME_COLUMNS 컬럼을 가진 빈 데이터프레임을 반환합니다.
    """
    if not rows:
        return pd.DataFrame(columns=FRAME_COLUMNS)
    frame = pd.DataFrame([row.to_dict() for row in rows])
    return frame[FRAME_COLUMNS]


def status_counts(rows: Iterable[TrackingRow]) -> pd.DataFrame:
    """
    공정별/상태별 실제 결품 건수를 집계합니다.

    Returns:
        stage, status, count 컬럼의 데이터프레임
    """
    frame = rows_to_frame(real_shortages(rows))
    if frame.empty:
        return pd.DataFrame(columns=["stage", "status", "count"])
    return (
        frame.groupby(["stage", "status"], sort=True)
        .size()
        .reset_index(name="count")
    )
