"""
도메인 계층 퍼블릭 API

이 모듈은 도메인 계층의 주요 클래스와 함수를 재수출하여
일관된 퍼블릭 API를 제공합니다.
"""
from __future__ import annotations

from .exceptions import DataLoadError, DomainError, StorageError, ValidationError
from .filters import (
    TrackingFilter,
    filter_options,
    filter_rows,
    group_by_model,
    is_stage_ready,
    real_shortages,
    rows_for_stage,
    rows_to_frame,
    stage_status,
    status_counts,
)
from .models import (
    DEFAULT_METADATA,
    ERPRawRow,
    MetadataSnapshot,
    ReferenceRow,
    RowKey,
    SheetDatabase,
    TrackingRow,
    UserRole,
    UserRoleRow,
)
from .normalization import (
    clean_text,
    coerce_quantity,
    format_short_date,
    model_key,
    normalize_date_input,
    normalize_stage,
)
from .permissions import Capability, has_capability, role_display_name
from .results import OperationResult, Outcome

__all__ = [
    # 예외
    "DomainError",
    "ValidationError",
    "DataLoadError",
    "StorageError",
    # 모델
    "TrackingRow",
    "UserRoleRow",
    "ERPRawRow",
    "ReferenceRow",
    "SheetDatabase",
    "RowKey",
    "MetadataSnapshot",
    "DEFAULT_METADATA",
    "UserRole",
    # 결과
    "OperationResult",
    "Outcome",
    # 정규화
    "clean_text",
    "coerce_quantity",
    "normalize_stage",
    "normalize_date_input",
    "format_short_date",
    "model_key",
    # 권한
    "Capability",
    "has_capability",
    "role_display_name",
    # 필터 / 집계
    "TrackingFilter",
    "filter_rows",
    "filter_options",
    "group_by_model",
    "rows_for_stage",
    "real_shortages",
    "stage_status",
    "is_stage_ready",
    "rows_to_frame",
    "status_counts",
]
