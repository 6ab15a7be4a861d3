"""
도메인 모델 / 권한 / 결과 타입 테스트
"""
from __future__ import annotations

import pytest

from shortage_tracker.domain.exceptions import ValidationError
from shortage_tracker.domain.models import RowKey, SheetDatabase, TrackingRow, UserRole
from shortage_tracker.domain.permissions import Capability, has_capability, role_display_name
from shortage_tracker.domain.results import OperationResult, Outcome


# ============================================================
# SheetDatabase 직렬화
# ============================================================

def test_from_dict_fills_missing_collections():
    """누락된 컬렉션은 빈 리스트"""
    db = SheetDatabase.from_dict({"usersRoles": [{"username": "admin", "role": "Admin"}]})
    assert [u.username for u in db.users_roles] == ["admin"]
    assert db.tracking_schedule == []
    assert db.erp_raw_data == []
    assert db.reference_data == []


def test_from_dict_coerces_sheet_strings():
    """시트에서 문자열로 읽힌 수량/불리언 복원"""
    db = SheetDatabase.from_dict(
        {
            "trackingSchedule": [
                {"id": "t1", "workOrder": "WO-1", "partNumber": "PN-1", "shortageQty": "5",
                 "isMaterialReady": "TRUE", "isArchived": "FALSE", "oqcDate": None}
            ]
        }
    )
    row = db.tracking_schedule[0]
    assert row.shortage_qty == 5
    assert row.is_material_ready is True
    assert row.is_archived is False
    assert row.oqc_date == ""
    assert row.stage == "SMT"
    assert row.key == RowKey("WO-1", "PN-1")


def test_to_dict_uses_camel_case_keys():
    """직렬화 키는 camelCase"""
    document = SheetDatabase(tracking_schedule=[TrackingRow(id="t1")]).to_dict()
    assert set(document) == {"usersRoles", "erpRawData", "trackingSchedule", "referenceData"}
    row = document["trackingSchedule"][0]
    assert {"workOrder", "productPartNumber", "purchaserReplyDate", "isMaterialReady"} <= set(row)


@pytest.mark.parametrize("document", [[], {"trackingSchedule": "oops"}, {"usersRoles": ["admin"]}])
def test_malformed_documents(document):
    """형식이 잘못된 문서 → ValidationError"""
    with pytest.raises(ValidationError):
        SheetDatabase.from_dict(document)


def test_skeleton_flag():
    """WO_INFO_ONLY 부품번호 → 스켈레톤"""
    assert TrackingRow(part_number="WO_INFO_ONLY").is_skeleton
    assert not TrackingRow(part_number="PN-1").is_skeleton


# ============================================================
# 권한
# ============================================================

@pytest.mark.parametrize(
    "role, allowed",
    [
        ("Admin", set(Capability)),
        ("Scheduler", {Capability.IMPORT, Capability.SCHEDULE, Capability.ARCHIVE}),
        ("Purchaser", {Capability.REPLY}),
        ("Business", set()),
        ("Owner", set()),
    ],
)
def test_role_capabilities(role, allowed):
    """역할별 권한"""
    assert {cap for cap in Capability if has_capability(role, cap)} == allowed


def test_role_parse_and_display():
    """역할 문자열 해석 및 표시명"""
    assert UserRole.parse(" purchaser ") is UserRole.PURCHASER
    assert UserRole.parse("owner") is None
    assert role_display_name(UserRole.PURCHASER) == "採購人員"
    assert role_display_name("Owner") == "Owner"


# ============================================================
# OperationResult
# ============================================================

def test_operation_result_truthiness():
    """OK일 때만 참"""
    assert OperationResult.ok(2)
    assert not OperationResult.fail(Outcome.NO_CHANGE)
    assert not OperationResult.fail(Outcome.NOT_FOUND, "missing")
    assert OperationResult.fail(Outcome.DUPLICATE).affected == 0
