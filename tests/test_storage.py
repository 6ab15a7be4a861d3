"""
저장소 테스트

- TrackingRepository 트랜잭션 (커밋 / 예외 / discard)
- JsonFileStorage (tmp_path)
- GSheetStorage (gspread 인터페이스를 흉내 낸 가짜 스프레드시트)
- build_storage 백엔드 선택
"""
from __future__ import annotations

import json
import threading

import gspread
import pytest

from shortage_tracker.core.config import StorageConfig
from shortage_tracker.domain.exceptions import StorageError, ValidationError
from shortage_tracker.domain.models import SheetDatabase, TrackingRow
from shortage_tracker.service import SheetService
from shortage_tracker.storage import (
    GSheetStorage,
    JsonFileStorage,
    MemoryStorage,
    TrackingRepository,
    build_storage,
)


# ============================================================
# TrackingRepository
# ============================================================

class TestRepository:
    def test_empty_storage_starts_from_seed(self, repository, storage):
        """저장된 문서가 없으면 초기 문서로 시작 (저장하지 않음)"""
        assert len(repository.db.users_roles) == 4
        assert repository.db.tracking_schedule == []
        assert storage.save_count == 0

    def test_commit_saves_document(self, repository, storage):
        """블록 정상 종료 → 저장"""
        with repository.transaction() as tx:
            tx.db.tracking_schedule.append(TrackingRow(id=tx.new_id("track")))

        assert storage.save_count == 1
        assert storage.load()["trackingSchedule"][0]["id"] == "track-1"

    def test_exception_rolls_back(self, repository, storage):
        """블록 내부 예외 → 복원 후 전파, 저장 안 함"""
        with pytest.raises(RuntimeError):
            with repository.transaction() as tx:
                tx.db.tracking_schedule.append(TrackingRow(id="x"))
                raise RuntimeError("boom")

        assert repository.db.tracking_schedule == []
        assert storage.save_count == 0

    def test_discard_rolls_back(self, repository, storage):
        """discard() → 복원, 저장 안 함"""
        with repository.transaction() as tx:
            tx.db.tracking_schedule.append(TrackingRow(id="x"))
            tx.discard()

        assert repository.db.tracking_schedule == []
        assert storage.save_count == 0

    def test_snapshot_is_detached(self, repository):
        """snapshot()은 깊은 복사본"""
        snapshot = repository.snapshot()
        snapshot.users_roles.clear()
        assert len(repository.db.users_roles) == 4

    def test_reload_inside_transaction_keeps_change(self, repository, storage):
        """블록 안에서 reload()가 호출돼도 블록의 변경이 저장됨"""
        with repository.transaction() as tx:
            tx.db.tracking_schedule.append(TrackingRow(id=tx.new_id("track")))
            repository.reload()

        assert [row["id"] for row in storage.load()["trackingSchedule"]] == ["track-1"]
        assert [row.id for row in repository.db.tracking_schedule] == ["track-1"]

    def test_reload_from_other_thread_waits_for_commit(self, repository, storage):
        """다른 스레드의 reload()는 트랜잭션이 끝날 때까지 대기"""
        reloaded = threading.Event()

        def reload_in_background():
            repository.reload()
            reloaded.set()

        with repository.transaction() as tx:
            tx.db.tracking_schedule.append(TrackingRow(id=tx.new_id("track")))
            worker = threading.Thread(target=reload_in_background)
            worker.start()
            assert not reloaded.wait(timeout=0.2)

        worker.join(timeout=5)
        assert reloaded.is_set()
        assert [row.id for row in repository.db.tracking_schedule] == ["track-1"]
        assert storage.save_count == 1

    def test_concurrent_transactions_keep_every_change(self, repository, storage):
        """여러 스레드의 트랜잭션이 서로의 변경을 덮어쓰지 않음"""

        def add_row(index):
            with repository.transaction() as tx:
                tx.db.tracking_schedule.append(TrackingRow(id=f"row-{index}"))
            repository.reload()

        workers = [threading.Thread(target=add_row, args=(i,)) for i in range(8)]
        for worker in workers:
            worker.start()
        for worker in workers:
            worker.join(timeout=5)

        stored = {row["id"] for row in storage.load()["trackingSchedule"]}
        assert stored == {f"row-{i}" for i in range(8)}


    def test_malformed_document_raises_validation_error(self):
        """컬렉션이 리스트가 아니면 ValidationError"""
        with pytest.raises(ValidationError):
            TrackingRepository(MemoryStorage({"trackingSchedule": {"id": "x"}}))


# ============================================================
# JsonFileStorage
# ============================================================

class TestJsonFileStorage:
    def test_missing_file_loads_none(self, tmp_path):
        """파일이 없으면 None"""
        assert JsonFileStorage(tmp_path / "db.json").load() is None

    def test_save_then_load(self, tmp_path):
        """저장 후 같은 문서를 읽음, 임시 파일은 남지 않음"""
        path = tmp_path / "nested" / "db.json"
        storage = JsonFileStorage(path)
        document = {"usersRoles": [{"username": "陳", "role": "Admin"}]}

        storage.save(document)

        assert storage.load() == document
        assert [p.name for p in path.parent.iterdir()] == ["db.json"]
        assert "陳" in path.read_text(encoding="utf-8")

    def test_corrupt_file_raises_storage_error(self, tmp_path):
        """JSON이 아니거나 객체가 아니면 StorageError"""
        path = tmp_path / "db.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(StorageError):
            JsonFileStorage(path).load()

        path.write_text(json.dumps([1, 2]), encoding="utf-8")
        with pytest.raises(StorageError):
            JsonFileStorage(path).load()

    def test_service_state_survives_restart(self, tmp_path):
        """서비스 재시작 후에도 데이터 유지"""
        path = tmp_path / "tracker_db.json"
        first = SheetService(TrackingRepository(JsonFileStorage(path)))
        first.import_wo_details([{"workOrder": "WO-1", "model": "ModelA"}])

        second = SheetService(TrackingRepository(JsonFileStorage(path)))
        rows = second.search_tracking()
        assert [(row.work_order, row.part_number) for row in rows] == [("WO-1", "WO_INFO_ONLY")]


# ============================================================
# GSheetStorage
# ============================================================

class FakeWorksheet:
    def __init__(self, title, rows=100, cols=26):
        self.title = title
        self.row_count = rows
        self.col_count = cols
        self.values = []

    def get_all_records(self, numericise_ignore=None):
        if not self.values:
            return []
        header, *rows = self.values
        return [dict(zip(header, [str(v) for v in row])) for row in rows]

    def add_rows(self, rows):
        self.row_count += rows

    def add_cols(self, cols):
        self.col_count += cols


class FakeSpreadsheet:
    def __init__(self):
        self.sheets = {}
        self.batch_requests = 0

    def worksheet(self, title):
        if title not in self.sheets:
            raise gspread.exceptions.WorksheetNotFound(title)
        return self.sheets[title]

    def add_worksheet(self, title, rows, cols):
        self.sheets[title] = FakeWorksheet(title, rows, cols)
        return self.sheets[title]

    def values_batch_update(self, body):
        self.batch_requests += 1
        assert body["valueInputOption"] == "RAW"
        for entry in body["data"]:
            title, cell = entry["range"].rsplit("!", 1)
            assert cell == "A1"
            ws = self.sheets[title.strip("'")]
            assert len(entry["values"]) <= ws.row_count
            values = [list(row) for row in entry["values"]]
            # 시트 API는 끝의 빈 행을 돌려주지 않음
            while values and not any(values[-1]):
                values.pop()
            ws.values = values


class _FakeResponse:
    status_code = 500
    text = "backend error"

    def json(self):
        return {"error": {"code": 500, "message": "backend error", "status": "INTERNAL"}}


class BrokenSpreadsheet(FakeSpreadsheet):
    def worksheet(self, title):
        raise gspread.exceptions.APIError(_FakeResponse())


class FailingWriteSpreadsheet(FakeSpreadsheet):
    def values_batch_update(self, body):
        raise gspread.exceptions.APIError(_FakeResponse())


class TestGSheetStorage:
    def test_empty_spreadsheet_loads_none(self):
        """트래커 시트가 하나도 없으면 None"""
        assert GSheetStorage(FakeSpreadsheet()).load() is None

    def test_save_creates_worksheets_with_headers(self, seeded_service):
        """저장 시 컬렉션별 워크시트 생성, 첫 행은 camelCase 헤더"""
        spreadsheet = FakeSpreadsheet()
        GSheetStorage(spreadsheet).save(seeded_service.repository.db.to_dict())

        assert set(spreadsheet.sheets) == {
            "Users_Roles",
            "ERP_Raw_Data",
            "Tracking_Schedule",
            "Reference_Data",
        }
        header = spreadsheet.sheets["Tracking_Schedule"].values[0]
        assert header[:3] == ["id", "model", "workOrder"]
        assert "shortageQty" in header and "isMaterialReady" in header
        assert len(spreadsheet.sheets["Tracking_Schedule"].values) == 5

    def test_round_trip_restores_types(self, seeded_service):
        """문자열로 읽힌 값도 원래 타입(수량/불리언)으로 복원"""
        seeded_service.update_stage_ready("WO-2", "Assembly", True)
        db = seeded_service.repository.db
        storage = GSheetStorage(FakeSpreadsheet())

        storage.save(db.to_dict())
        loaded = SheetDatabase.from_dict(storage.load())

        assert loaded.to_dict() == db.to_dict()

    def test_save_writes_all_sheets_in_one_request(self, seeded_service):
        """네 워크시트를 한 번의 batch 요청으로 기록"""
        spreadsheet = FakeSpreadsheet()
        GSheetStorage(spreadsheet).save(seeded_service.repository.db.to_dict())
        assert spreadsheet.batch_requests == 1

    def test_shorter_save_clears_stale_rows(self, seeded_service):
        """행이 줄어든 저장 → 남은 행은 빈 값으로 지워짐"""
        spreadsheet = FakeSpreadsheet()
        storage = GSheetStorage(spreadsheet)
        storage.save(seeded_service.repository.db.to_dict())

        seeded_service.import_shortages([], "replace", work_orders=["WO-1"])
        storage.save(seeded_service.repository.db.to_dict())

        rows = storage.load()["trackingSchedule"]
        assert [row["workOrder"] for row in rows] == ["WO-2"]

    def test_grows_worksheet_for_large_documents(self, seeded_service):
        """행 수가 시트 크기를 넘으면 시트를 먼저 늘림"""
        spreadsheet = FakeSpreadsheet()
        seeded_service.import_shortages(
            [{"workOrder": "WO-3", "partNumber": f"PN-{i}", "shortageQty": 1} for i in range(150)],
            "replace",
        )
        GSheetStorage(spreadsheet).save(seeded_service.repository.db.to_dict())

        ws = spreadsheet.sheets["Tracking_Schedule"]
        assert ws.row_count >= len(ws.values) == 1 + len(seeded_service.search_tracking())

    def test_failed_write_leaves_every_sheet_untouched(self, seeded_service):
        """쓰기 요청 실패 → StorageError, 기존 시트 값은 그대로"""
        spreadsheet = FailingWriteSpreadsheet()
        first = FakeSpreadsheet()
        GSheetStorage(first).save(seeded_service.repository.db.to_dict())
        spreadsheet.sheets = first.sheets
        before = {title: [list(row) for row in ws.values] for title, ws in spreadsheet.sheets.items()}

        seeded_service.archive_model("ModelA", True)
        with pytest.raises(StorageError):
            GSheetStorage(spreadsheet).save(seeded_service.repository.db.to_dict())

        assert {title: ws.values for title, ws in spreadsheet.sheets.items()} == before


    def test_api_error_becomes_storage_error(self):
        """gspread APIError → StorageError"""
        with pytest.raises(StorageError):
            GSheetStorage(BrokenSpreadsheet()).load()

    def test_repository_over_gsheet(self, id_factory):
        """스프레드시트 백엔드로 가져오기 후 다른 인스턴스에서 조회"""
        spreadsheet = FakeSpreadsheet()
        writer = SheetService(TrackingRepository(GSheetStorage(spreadsheet), id_factory=id_factory))
        writer.import_shortages([{"workOrder": "WO-1", "partNumber": "PN-1", "shortageQty": "12"}])

        reader = SheetService(TrackingRepository(GSheetStorage(spreadsheet)))
        rows = reader.search_tracking()
        assert [(row.part_number, row.shortage_qty, row.is_archived) for row in rows] == [("PN-1", 12, False)]


# ============================================================
# build_storage
# ============================================================

def test_build_storage_selects_backend(tmp_path):
    """설정값에 맞는 백엔드 생성"""
    assert isinstance(build_storage(StorageConfig(backend="memory")), MemoryStorage)

    storage = build_storage(StorageConfig(backend="json", db_path=str(tmp_path / "db.json")))
    assert isinstance(storage, JsonFileStorage)
    assert storage.path == tmp_path / "db.json"


def test_build_storage_rejects_bad_config():
    """gsheet 인증 정보 누락 / 알 수 없는 백엔드 → StorageError"""
    with pytest.raises(StorageError):
        build_storage(StorageConfig(backend="gsheet", gsheet_id="abc"))
    with pytest.raises(StorageError):
        build_storage(StorageConfig(backend="sqlite"))
