"""Configuration and constants for the shortage tracker.

공정 이름 매핑, 스켈레톤 행 식별자, 저장소 설정 등 전역 설정을 제공합니다.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

# ============================================================
# 추적 행 상수
# ============================================================

# 결품 정보 없이 작업지시 메타데이터만 담는 행의 부품번호
SKELETON_PART_NUMBER = "WO_INFO_ONLY"

# 공정 순서 (첫 번째 값이 기본 공정)
STAGES = ("SMT", "Assembly", "Packing")
DEFAULT_STAGE = STAGES[0]

# 현장 엑셀에서 사용하는 공정 표기 → 표준 공정명
STAGE_ALIAS: dict[str, str] = {
    "打件": "SMT",
    "組裝": "Assembly",
    "包裝": "Packing",
}

# 상태 값
STATUS_PENDING = "Pending"
STATUS_CONFIRMED = "Confirmed"
STATUS_LATE = "Late"
STATUS_READY = "Ready"
STATUSES = (STATUS_PENDING, STATUS_CONFIRMED, STATUS_LATE, STATUS_READY)

# 메타데이터를 찾을 수 없을 때 사용하는 기본값
UNKNOWN_MODEL = "Unknown"

# 삭제할 수 없는 기본 관리자 계정
BUILTIN_ADMIN = "admin"


# ============================================================
# 초기 데이터베이스
# ============================================================

SEED_USERS = (
    {"username": "admin", "role": "Admin"},
    {"username": "scheduler", "role": "Scheduler"},
    {"username": "purchaser", "role": "Purchaser"},
    {"username": "business", "role": "Business"},
)


# ============================================================
# 설정 데이터클래스
# ============================================================


@dataclass(frozen=True)
class StorageConfig:
    """저장소 백엔드 설정"""

    # json / gsheet / memory
    backend: str = "json"

    # JSON 파일 경로
    db_path: str = "tracker_db.json"

    # Google Sheets 문서 ID (gsheet 백엔드 전용)
    gsheet_id: str = ""

    @classmethod
    def from_env(cls) -> "StorageConfig":
        return cls(
            backend=os.getenv("TRACKER_STORAGE", "json").strip().lower() or "json",
            db_path=os.getenv("TRACKER_DB_PATH", "tracker_db.json"),
            gsheet_id=os.getenv("TRACKER_GSHEET_ID", ""),
        )


@dataclass(frozen=True)
class ImportConfig:
    """가져오기 관련 설정"""

    # 엑셀 날짜 일련번호로 간주할 최소값
    excel_serial_threshold: int = 20000

    # 업로드 배치 라벨 접두어 (ERP 원본 이력)
    upload_batch_prefix: str = "batch"


@dataclass(frozen=True)
class UIConfig:
    """UI 표시 관련 설정"""

    page_title: str = "생산 결품 추적"

    # 상세 테이블 높이 (픽셀)
    detail_table_height: int = 420

    # 한 줄에 표시할 공정 카드 수
    stage_columns: int = 3


@dataclass(frozen=True)
class TrackerConfig:
    """전역 설정"""

    storage: StorageConfig = field(default_factory=StorageConfig.from_env)
    imports: ImportConfig = field(default_factory=ImportConfig)
    ui: UIConfig = field(default_factory=UIConfig)


# 전역 설정 객체 (불변)
CONFIG = TrackerConfig()
