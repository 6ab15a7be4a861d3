"""
엑셀/CSV 업로드 파서 및 내보내기

업로드된 파일을 데이터프레임으로 읽고, 현장 엑셀의 다양한 헤더명을
표준 필드명(camelCase)으로 바꾼 뒤 가져오기용 레코드 목록으로
변환합니다. 필드 존재 여부는 보장되지 않으므로 모든 값을 정리합니다.
"""
from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

import pandas as pd

from shortage_tracker.domain.exceptions import DataLoadError
from shortage_tracker.domain.models import TrackingRow
from shortage_tracker.domain.normalization import (
    clean_text,
    coerce_quantity,
    normalize_date_input,
)

logger = logging.getLogger(__name__)


# 표준 필드명 → 허용 헤더 (소문자, 공백 제거 후 비교)
WORK_ORDER_ALIASES: tuple[str, ...] = (
    "workorder",
    "work_order",
    "work order",
    "wo",
    "工單",
    "工單號碼",
    "工单",
)

WO_DETAIL_COLUMN_ALIASES: dict[str, Sequence[str]] = {
    "workOrder": WORK_ORDER_ALIASES,
    "model": ("model", "機種", "机种", "model name"),
    "vendor": ("vendor", "外包", "外包廠", "外包厂"),
    "stage": ("stage", "製程", "制程", "process"),
    "productPartNumber": (
        "productpartnumber",
        "product_part_number",
        "product part number",
        "品號",
        "品号",
    ),
    "productionDate": (
        "productiondate",
        "production_date",
        "production date",
        "生產日期",
        "生产日期",
    ),
}

SHORTAGE_COLUMN_ALIASES: dict[str, Sequence[str]] = {
    "workOrder": WORK_ORDER_ALIASES,
    "model": ("model", "機種", "机种"),
    "partNumber": ("partnumber", "part_number", "part number", "part no", "料號", "料号"),
    "partName": ("partname", "part_name", "part name", "品名"),
    "specification": ("specification", "spec", "規格", "规格"),
    "supplier": ("supplier", "供應商", "供应商"),
    "shortageQty": (
        "shortageqty",
        "shortage_qty",
        "shortage qty",
        "qty",
        "quantity",
        "欠料數",
        "欠料数",
        "數量",
        "数量",
    ),
    "requiredDate": ("requireddate", "required_date", "需求日期"),
}

# 내보내기 헤더 (현장 보고서 컬럼 순서)
EXPORT_COLUMNS: dict[str, str] = {
    "model": "機種",
    "workOrder": "工單",
    "stage": "製程",
    "vendor": "外包",
    "productionDate": "生產日期",
    "productPartNumber": "品號",
    "partNumber": "料號",
    "partName": "品名",
    "specification": "規格",
    "supplier": "供應商",
    "shortageQty": "欠料數",
    "oqcDate": "客驗/出貨日",
    "purchaserReplyDate": "採購回覆",
    "purchaserRemark": "備註",
    "status": "狀態",
}

EXPORT_SHEET_NAME = "Report"


def read_table(file: Any, filename: Optional[str] = None) -> pd.DataFrame:
    """
    업로드 파일(.xlsx/.csv)을 데이터프레임으로 읽습니다.

    Args:
        file: 바이트, 파일 객체(Streamlit UploadedFile 포함) 또는 경로
        filename: 확장자 판별용 파일명. 없으면 file.name 또는 경로에서 추출

    Returns:
        첫 번째 시트(또는 CSV)의 데이터프레임

    Raises:
        DataLoadError: 파일을 읽을 수 없거나 비어 있는 경우
    """
    if isinstance(file, (str, Path)):
        path = Path(file)
        filename = filename or path.name
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise DataLoadError(f"파일을 열 수 없습니다: {path}") from exc
    else:
        filename = filename or getattr(file, "name", "") or ""
        data = file.read() if hasattr(file, "read") else file

    if not isinstance(data, (bytes, bytearray)) or not data:
        raise DataLoadError("업로드된 파일이 비어 있습니다.")

    bio = BytesIO(data)
    is_csv = str(filename).lower().endswith(".csv")
    try:
        if is_csv:
            frame = pd.read_csv(bio, dtype=str, encoding="utf-8-sig")
        else:
            frame = pd.read_excel(bio, engine="openpyxl")
    except Exception as exc:
        logger.error(f"Failed to parse uploaded file {filename!r}: {exc}")
        raise DataLoadError(f"파일 형식을 읽을 수 없습니다: {exc}") from exc

    logger.debug("Read %s rows from %s", len(frame), filename or "upload")
    return frame


def _rename_columns(frame: pd.DataFrame, aliases: Mapping[str, Sequence[str]]) -> pd.DataFrame:
    lookup = {str(col).strip().lower(): col for col in frame.columns}
    rename: dict[Any, str] = {}
    for canonical, candidates in aliases.items():
        for candidate in candidates:
            source = lookup.get(candidate.lower())
            if source is not None and source not in rename:
                rename[source] = canonical
                break
    return frame.rename(columns=rename)


def _require_work_order(frame: pd.DataFrame, kind: str) -> None:
    if "workOrder" not in frame.columns:
        raise DataLoadError(
            f"{kind} 파일에 작업지시(工單 / workOrder) 컬럼이 필요합니다."
        )


def _column(frame: pd.DataFrame, name: str) -> pd.Series:
    if name in frame.columns:
        return frame[name]
    return pd.Series([None] * len(frame), index=frame.index, dtype=object)


def parse_wo_details(frame: pd.DataFrame) -> list[dict[str, Any]]:
    """
    작업지시 메타데이터 시트를 레코드 목록으로 변환합니다.

    Returns:
        workOrder, model, vendor, stage, productPartNumber, productionDate
        키를 가진 딕셔너리 목록 (작업지시가 빈 행 제외)

    Raises:
        DataLoadError: 작업지시 컬럼이 없는 경우
    """
    if frame.empty:
        return []
    frame = _rename_columns(frame, WO_DETAIL_COLUMN_ALIASES)
    _require_work_order(frame, "작업지시")

    records = []
    for values in zip(
        _column(frame, "workOrder"),
        _column(frame, "model"),
        _column(frame, "vendor"),
        _column(frame, "stage"),
        _column(frame, "productPartNumber"),
        _column(frame, "productionDate"),
    ):
        work_order, model, vendor, stage, product_pn, production_date = values
        record = {
            "workOrder": clean_text(work_order),
            "model": clean_text(model),
            "vendor": clean_text(vendor),
            "stage": clean_text(stage),
            "productPartNumber": clean_text(product_pn),
            "productionDate": normalize_date_input(production_date) or clean_text(production_date),
        }
        if record["workOrder"]:
            records.append(record)

    logger.info("Parsed %s work order records", len(records))
    return records


def parse_shortages(frame: pd.DataFrame) -> list[dict[str, Any]]:
    """
    결품 리스트 시트를 레코드 목록으로 변환합니다.

    수량은 천 단위 콤마를 제거한 0 이상의 정수로 변환합니다.

    Raises:
        DataLoadError: 작업지시 컬럼이 없는 경우
    """
    if frame.empty:
        return []
    frame = _rename_columns(frame, SHORTAGE_COLUMN_ALIASES)
    _require_work_order(frame, "결품")

    records = []
    for values in zip(
        _column(frame, "workOrder"),
        _column(frame, "model"),
        _column(frame, "partNumber"),
        _column(frame, "partName"),
        _column(frame, "specification"),
        _column(frame, "supplier"),
        _column(frame, "shortageQty"),
        _column(frame, "requiredDate"),
    ):
        work_order, model, part_number, part_name, spec, supplier, qty, required = values
        record = {
            "workOrder": clean_text(work_order),
            "model": clean_text(model),
            "partNumber": clean_text(part_number),
            "partName": clean_text(part_name),
            "specification": clean_text(spec),
            "supplier": clean_text(supplier),
            "shortageQty": coerce_quantity(qty),
            "requiredDate": normalize_date_input(required) or clean_text(required),
        }
        if record["workOrder"]:
            records.append(record)

    logger.info("Parsed %s shortage records", len(records))
    return records


def export_tracking(rows: Sequence[TrackingRow]) -> bytes:
    """
    추적 행을 엑셀(.xlsx) 바이트로 내보냅니다.

    시트 이름은 "Report", 헤더는 현장에서 쓰는 표기를 사용합니다.
    """
    frame = pd.DataFrame(
        [{key: data[key] for key in EXPORT_COLUMNS} for data in (row.to_dict() for row in rows)],
        columns=list(EXPORT_COLUMNS),
    ).rename(columns=EXPORT_COLUMNS)

    bio = BytesIO()
    with pd.ExcelWriter(bio, engine="openpyxl") as writer:
        frame.to_excel(writer, sheet_name=EXPORT_SHEET_NAME, index=False)
    return bio.getvalue()
