"""
엑셀/CSV 업로드 파서 및 내보내기 테스트
"""
from __future__ import annotations

from io import BytesIO

import pandas as pd
import pytest

from shortage_tracker.data_sources.excel import (
    export_tracking,
    parse_shortages,
    parse_wo_details,
    read_table,
)
from shortage_tracker.domain.exceptions import DataLoadError


def _xlsx_bytes(frame: pd.DataFrame) -> bytes:
    bio = BytesIO()
    frame.to_excel(bio, index=False, engine="openpyxl")
    return bio.getvalue()


# ============================================================
# read_table
# ============================================================

def test_read_table_xlsx_bytes():
    """xlsx 바이트 읽기 (파일명 없으면 엑셀로 간주)"""
    frame = read_table(_xlsx_bytes(pd.DataFrame({"工單": ["WO-1"], "欠料數": [3]})))
    assert list(frame.columns) == ["工單", "欠料數"]
    assert frame.iloc[0]["工單"] == "WO-1"


def test_read_table_csv_keeps_leading_zeros(tmp_path):
    """CSV 파일은 문자열로 읽어 선행 0 유지 (BOM 허용)"""
    path = tmp_path / "shortage.csv"
    path.write_bytes("﻿workOrder,partNumber,shortageQty\n00123,PN-1,3\n".encode("utf-8"))

    frame = read_table(path)

    assert frame.iloc[0]["workOrder"] == "00123"
    assert parse_shortages(frame)[0]["shortageQty"] == 3


def test_read_table_file_like_uses_name():
    """파일 객체의 name 속성으로 형식 판별"""
    bio = BytesIO(b"workOrder,model\nWO-1,ModelA\n")
    bio.name = "wo.CSV"
    assert read_table(bio).iloc[0]["model"] == "ModelA"


@pytest.mark.parametrize("payload", [b"", b"definitely not a spreadsheet"])
def test_read_table_rejects_unreadable_content(payload):
    """비어 있거나 읽을 수 없는 파일 → DataLoadError"""
    with pytest.raises(DataLoadError):
        read_table(payload, "upload.xlsx")


def test_read_table_missing_path(tmp_path):
    """없는 경로 → DataLoadError"""
    with pytest.raises(DataLoadError):
        read_table(tmp_path / "missing.xlsx")


# ============================================================
# parse_wo_details / parse_shortages
# ============================================================

def test_parse_wo_details_localized_headers():
    """현장 헤더(工單/機種/外包廠/製程/品號/生產日期) 인식, 작업지시 없는 행 제외"""
    frame = pd.DataFrame(
        {
            " 工單 ": ["WO-1", "WO-2", None],
            "機種": ["ModelA", "ModelB", "ModelC"],
            "外包廠": ["VendorX", None, "VendorZ"],
            "製程": ["打件", "組裝", "包裝"],
            "品號": ["PP-1", "PP-2", "PP-3"],
            "生產日期": [45292, "2024/1/5", None],
        }
    )

    records = parse_wo_details(frame)

    assert records == [
        {"workOrder": "WO-1", "model": "ModelA", "vendor": "VendorX", "stage": "打件",
         "productPartNumber": "PP-1", "productionDate": "2024-01-01"},
        {"workOrder": "WO-2", "model": "ModelB", "vendor": "", "stage": "組裝",
         "productPartNumber": "PP-2", "productionDate": "2024-01-05"},
    ]


def test_parse_shortages_coerces_fields():
    """수량 정리(콤마/음수/빈 값), 숫자형 작업지시 문자열화"""
    frame = pd.DataFrame(
        {
            "工單": [1001.0, "WO-2", "WO-3"],
            "料號": ["PN-1", "PN-2", "PN-3"],
            "品名": ["Resistor", None, "IC"],
            "規格": ["0402", "0603", ""],
            "供應商": ["SupA", "SupB", "SupC"],
            "數量": ["1,200", -5, None],
        }
    )

    records = parse_shortages(frame)

    assert [r["workOrder"] for r in records] == ["1001", "WO-2", "WO-3"]
    assert [r["shortageQty"] for r in records] == [1200, 0, 0]
    assert records[1]["partName"] == ""
    assert records[0]["model"] == ""


def test_parse_shortages_english_headers():
    """camelCase / snake_case 헤더도 인식"""
    frame = pd.DataFrame({"work_order": ["WO-1"], "partNumber": ["PN-1"], "shortage_qty": [4]})
    assert parse_shortages(frame) == [
        {"workOrder": "WO-1", "model": "", "partNumber": "PN-1", "partName": "",
         "specification": "", "supplier": "", "shortageQty": 4, "requiredDate": ""}
    ]


def test_parse_requires_work_order_column():
    """작업지시 컬럼이 없으면 DataLoadError"""
    with pytest.raises(DataLoadError):
        parse_shortages(pd.DataFrame({"料號": ["PN-1"]}))
    with pytest.raises(DataLoadError):
        parse_wo_details(pd.DataFrame({"機種": ["ModelA"]}))


def test_parse_empty_frame():
    """빈 데이터프레임 → 빈 목록"""
    assert parse_shortages(pd.DataFrame()) == []
    assert parse_wo_details(pd.DataFrame()) == []


def test_uploaded_workbook_imports_end_to_end(service):
    """엑셀 업로드 → 파싱 → 가져오기"""
    wo_file = _xlsx_bytes(pd.DataFrame({"工單": ["WO-1"], "機種": ["ModelA"], "製程": ["組裝"]}))
    shortage_file = _xlsx_bytes(
        pd.DataFrame({"工單": ["WO-1", "WO-1"], "料號": ["PN-1", "PN-2"], "欠料數": [10, 0]})
    )

    assert service.import_wo_details(parse_wo_details(read_table(wo_file)))
    assert service.import_shortages(parse_shortages(read_table(shortage_file)), "replace")

    rows = service.search_tracking()
    assert [(row.part_number, row.model, row.stage, row.shortage_qty) for row in rows] == [
        ("PN-1", "ModelA", "Assembly", 10),
        ("PN-2", "ModelA", "Assembly", 0),
    ]


# ============================================================
# export_tracking
# ============================================================

def test_export_tracking_layout(seeded_service):
    """내보내기: Report 시트, 현장 헤더 순서"""
    rows = seeded_service.search_tracking()

    exported = pd.read_excel(BytesIO(export_tracking(rows)), sheet_name="Report", engine="openpyxl")

    assert list(exported.columns) == [
        "機種", "工單", "製程", "外包", "生產日期", "品號", "料號", "品名",
        "規格", "供應商", "欠料數", "客驗/出貨日", "採購回覆", "備註", "狀態",
    ]
    assert len(exported) == len(rows)
    pn1 = exported[exported["料號"] == "PN-1"].iloc[0]
    assert pn1["機種"] == "ModelA"
    assert pn1["欠料數"] == 10
    assert pn1["狀態"] == "Pending"


def test_export_empty_rows_keeps_headers():
    """행이 없어도 헤더는 유지"""
    exported = pd.read_excel(BytesIO(export_tracking([])), sheet_name="Report", engine="openpyxl")
    assert exported.empty
    assert "工單" in exported.columns
