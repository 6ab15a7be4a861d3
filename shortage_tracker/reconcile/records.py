"""
가져오기 입력 레코드

스프레드시트 파싱 결과(느슨한 딕셔너리)를 필드가 보장된 레코드로
변환합니다. 키는 camelCase(workOrder)와 snake_case(work_order)를
모두 허용하며, 누락/NaN 값은 빈 문자열 또는 0으로 채웁니다.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from shortage_tracker.domain.normalization import clean_text, coerce_quantity, normalize_date_input


def _pick(record: Mapping[str, Any], camel: str) -> Any:
    if camel in record:
        return record[camel]
    snake = "".join(f"_{ch.lower()}" if ch.isupper() else ch for ch in camel)
    return record.get(snake)


def _date_or_text(value: Any) -> str:
    # 날짜로 해석되면 ISO, 아니면 원문 유지
    return normalize_date_input(value) or clean_text(value)


@dataclass(frozen=True)
class WorkOrderRecord:
    """작업지시 메타데이터 한 건. stage가 빈 문자열이면 공정 미지정."""

    work_order: str
    model: str = ""
    vendor: str = ""
    stage: str = ""
    product_part_number: str = ""
    production_date: str = ""

    @classmethod
    def from_mapping(cls, record: Mapping[str, Any]) -> "WorkOrderRecord":
        return cls(
            work_order=clean_text(_pick(record, "workOrder")),
            model=clean_text(_pick(record, "model")),
            vendor=clean_text(_pick(record, "vendor")),
            stage=clean_text(_pick(record, "stage")),
            product_part_number=clean_text(_pick(record, "productPartNumber")),
            production_date=_date_or_text(_pick(record, "productionDate")),
        )


@dataclass(frozen=True)
class ShortageRecord:
    """결품 한 건"""

    work_order: str
    part_number: str
    part_name: str = ""
    specification: str = ""
    supplier: str = ""
    shortage_qty: int = 0
    model: str = ""
    required_date: str = ""

    @classmethod
    def from_mapping(cls, record: Mapping[str, Any]) -> "ShortageRecord":
        return cls(
            work_order=clean_text(_pick(record, "workOrder")),
            part_number=clean_text(_pick(record, "partNumber")),
            part_name=clean_text(_pick(record, "partName")),
            specification=clean_text(_pick(record, "specification")),
            supplier=clean_text(_pick(record, "supplier")),
            shortage_qty=coerce_quantity(_pick(record, "shortageQty")),
            model=clean_text(_pick(record, "model")),
            required_date=_date_or_text(_pick(record, "requiredDate")),
        )
