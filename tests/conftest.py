import itertools
import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def pytest_configure(config):
    """pytest 초기화 시점에 실행되어 테스트 수집 전에 환경을 준비합니다.

    이 훅은 테스트 모듈이 import되기 전에 실행되므로,
    config.py가 로드될 때 저장소 백엔드가 이미 memory로 설정되어 있습니다.
    """
    os.environ.setdefault("TRACKER_STORAGE", "memory")


@pytest.fixture
def id_factory():
    """접두어별 순번 ID 생성기 (예: track-1, skel-2)"""
    counter = itertools.count(1)
    return lambda prefix: f"{prefix}-{next(counter)}"


@pytest.fixture
def storage():
    from shortage_tracker.storage import MemoryStorage

    return MemoryStorage()


@pytest.fixture
def repository(storage, id_factory):
    from shortage_tracker.storage import TrackingRepository

    return TrackingRepository(storage, id_factory=id_factory)


@pytest.fixture
def service(repository):
    from shortage_tracker.service import SheetService

    return SheetService(repository)


@pytest.fixture
def seeded_service(service):
    """WO-1(ModelA, 3개 결품)과 WO-2(ModelB, 스켈레톤)가 있는 서비스"""
    service.import_wo_details(
        [
            {"workOrder": "WO-1", "model": "ModelA", "vendor": "VendorX", "stage": "打件",
             "productPartNumber": "PP-100", "productionDate": "2024/3/1"},
            {"workOrder": "WO-2", "model": "ModelB", "vendor": "VendorY", "stage": "組裝"},
        ]
    )
    service.import_shortages(
        [
            {"workOrder": "WO-1", "partNumber": "PN-1", "partName": "Resistor",
             "supplier": "SupA", "shortageQty": 10},
            {"workOrder": "WO-1", "partNumber": "PN-2", "partName": "Capacitor",
             "supplier": "SupB", "shortageQty": 5},
            {"workOrder": "WO-1", "partNumber": "PN-3", "partName": "IC",
             "supplier": "SupA", "shortageQty": 1},
        ],
        "replace",
    )
    return service
