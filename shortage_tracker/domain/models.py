"""
도메인 모델: 결품 추적 시스템의 핵심 데이터 구조

저장 문서는 네 개의 컬렉션(usersRoles, erpRawData, trackingSchedule,
referenceData)을 가진 하나의 JSON 문서입니다. 각 레코드는 데이터클래스로
표현되며, 직렬화 시 기존 문서와 동일한 camelCase 키를 사용합니다.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Iterable, Mapping, NamedTuple, Optional

from shortage_tracker.core.config import (
    DEFAULT_STAGE,
    SKELETON_PART_NUMBER,
    STATUS_PENDING,
    UNKNOWN_MODEL,
)

from .exceptions import ValidationError


class UserRole(str, Enum):
    """사용자 역할"""

    ADMIN = "Admin"
    SCHEDULER = "Scheduler"
    PURCHASER = "Purchaser"
    BUSINESS = "Business"

    @classmethod
    def parse(cls, value: Any) -> Optional["UserRole"]:
        """문자열을 역할로 변환합니다. 알 수 없는 값이면 None."""
        text = str(value or "").strip().casefold()
        for role in cls:
            if role.value.casefold() == text:
                return role
        return None


class RowKey(NamedTuple):
    """(작업지시, 부품번호) 복합 키"""

    work_order: str
    part_number: str


def _to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _as_int(value: Any) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().casefold() in {"true", "1", "yes", "y"}
    return bool(value)


_COERCERS = {"str": _as_text, "int": _as_int, "bool": _as_bool}


class _Record:
    """camelCase 딕셔너리 ↔ 데이터클래스 변환 믹스인"""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]):
        if not isinstance(data, Mapping):
            raise ValidationError(
                f"{cls.__name__} 레코드가 딕셔너리 형식이 아닙니다: {type(data).__name__}"
            )
        kwargs = {}
        for f in fields(cls):  # type: ignore[arg-type]
            key = _to_camel(f.name)
            if key in data:
                kwargs[f.name] = _COERCERS[f.type](data[key])
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        return {_to_camel(f.name): getattr(self, f.name) for f in fields(self)}  # type: ignore[arg-type]


@dataclass
class UserRoleRow(_Record):
    username: str = ""
    role: str = UserRole.BUSINESS.value


@dataclass
class ERPRawRow(_Record):
    """가져오기 전 ERP 결품 원본 레코드 (이력 보관용)"""

    id: str = ""
    model: str = ""
    work_order: str = ""
    part_number: str = ""
    part_name: str = ""
    specification: str = ""
    supplier: str = ""
    shortage_qty: int = 0
    required_date: str = ""
    upload_batch: str = ""


@dataclass
class TrackingRow(_Record):
    """
    (작업지시, 부품번호) 한 쌍의 결품 추적 행.

    part_number가 SKELETON_PART_NUMBER인 행은 결품이 아직 없는
    작업지시를 나타내는 스켈레톤 행입니다.

    Attributes:
        id: 생성 시 부여되는 고유 ID (변경/재사용 없음)
        model, work_order, stage: 그룹 키
        vendor, product_part_number, production_date: 작업지시 메타데이터
        part_number ~ shortage_qty: 결품 내용
        oqc_date, is_material_ready: 생산관리 입력
        purchaser_reply_date, purchaser_remark: 구매 입력
        status: 파생 상태 (Pending/Confirmed/Late/Ready)
        is_archived: 보관 여부
    """

    id: str = ""
    model: str = ""
    work_order: str = ""
    stage: str = DEFAULT_STAGE
    vendor: str = ""
    product_part_number: str = ""
    production_date: str = ""
    part_number: str = ""
    part_name: str = ""
    specification: str = ""
    supplier: str = ""
    shortage_qty: int = 0
    oqc_date: str = ""
    is_material_ready: bool = False
    purchaser_reply_date: str = ""
    purchaser_remark: str = ""
    status: str = STATUS_PENDING
    purchaser_username: str = ""
    is_archived: bool = False

    @property
    def key(self) -> RowKey:
        return RowKey(self.work_order, self.part_number)

    @property
    def is_skeleton(self) -> bool:
        return self.part_number == SKELETON_PART_NUMBER


@dataclass
class ReferenceRow(_Record):
    type: str = ""
    value: str = ""


@dataclass(frozen=True)
class MetadataSnapshot:
    """
    작업지시 단위 메타데이터 스냅샷.

    가져오기 시 기존 행에서 상속할 메타데이터를 담습니다.
    상속할 행이 없으면 DEFAULT_METADATA를 사용합니다.
    """

    model: str = UNKNOWN_MODEL
    vendor: str = ""
    stage: str = DEFAULT_STAGE
    production_date: str = ""
    product_part_number: str = ""

    @classmethod
    def of(cls, row: TrackingRow) -> "MetadataSnapshot":
        return cls(
            model=row.model,
            vendor=row.vendor,
            stage=row.stage,
            production_date=row.production_date or "",
            product_part_number=row.product_part_number or "",
        )


DEFAULT_METADATA = MetadataSnapshot()


_COLLECTIONS = {
    "usersRoles": UserRoleRow,
    "erpRawData": ERPRawRow,
    "trackingSchedule": TrackingRow,
    "referenceData": ReferenceRow,
}


@dataclass
class SheetDatabase:
    """
    저장 문서 전체.

    Examples:
        >>> db = SheetDatabase.from_dict(json.loads(text))
        >>> db.tracking_schedule[0].work_order
        'WO-1'
    """

    users_roles: list[UserRoleRow] = field(default_factory=list)
    erp_raw_data: list[ERPRawRow] = field(default_factory=list)
    tracking_schedule: list[TrackingRow] = field(default_factory=list)
    reference_data: list[ReferenceRow] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SheetDatabase":
        """
        저장 문서(dict)를 SheetDatabase로 변환합니다.

        누락된 컬렉션은 빈 리스트로 처리합니다.

        Raises:
            ValidationError: 문서나 컬렉션의 형식이 잘못된 경우
        """
        if not isinstance(data, Mapping):
            raise ValidationError("저장 문서가 JSON 객체 형식이 아닙니다.")

        kwargs = {}
        for f in fields(cls):
            key = _to_camel(f.name)
            items = data.get(key) or []
            if not isinstance(items, list):
                raise ValidationError(f"'{key}' 컬렉션이 리스트 형식이 아닙니다.")
            record_cls = _COLLECTIONS[key]
            kwargs[f.name] = [record_cls.from_dict(item) for item in items]
        return cls(**kwargs)

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {
            _to_camel(f.name): [item.to_dict() for item in getattr(self, f.name)]
            for f in fields(self)
        }


def rows_to_dicts(rows: Iterable[_Record]) -> list[dict[str, Any]]:
    return [row.to_dict() for row in rows]
