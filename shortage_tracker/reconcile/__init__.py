"""
가져오기 병합 및 행 변경 로직

SheetDatabase를 직접 수정하는 순수 로직 계층입니다.
저장과 권한 검사는 SheetService가 담당합니다.
"""

from .metadata import MetadataIndex
from .mutators import (
    set_delivery_date,
    set_model_archived,
    set_purchaser_remark,
    set_stage_date,
    set_stage_ready,
)
from .records import ShortageRecord, WorkOrderRecord
from .shortages import (
    ImportPolicy,
    ImportSummary,
    import_shortages,
    merge_shortages,
    record_raw_batch,
    replace_shortages,
)
from .work_orders import import_work_orders

__all__ = [
    "MetadataIndex",
    "WorkOrderRecord",
    "ShortageRecord",
    "ImportPolicy",
    "ImportSummary",
    "import_work_orders",
    "import_shortages",
    "replace_shortages",
    "merge_shortages",
    "record_raw_batch",
    "set_delivery_date",
    "set_purchaser_remark",
    "set_stage_date",
    "set_stage_ready",
    "set_model_archived",
]
