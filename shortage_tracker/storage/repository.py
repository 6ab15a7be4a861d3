"""
추적 데이터 저장소 (Repository)

SheetDatabase 문서를 단독으로 소유하며, 모든 변경은 transaction()
블록 안에서 읽기-수정-저장 순서로 끝까지 실행됩니다.

- 블록이 정상 종료되면 문서 전체를 저장소에 저장합니다.
- 블록 안에서 예외가 발생하거나 discard()가 호출되면
  메모리 상태를 블록 시작 시점으로 되돌리고 저장하지 않습니다.
- 다른 세션(탭)에서 변경한 내용은 reload() 호출 시점에 반영됩니다.
- 한 인스턴스를 여러 스레드가 공유하므로 transaction()과 reload()는
  같은 잠금 아래에서 실행됩니다.
"""

from __future__ import annotations

import copy
import logging
import threading
import uuid
from contextlib import contextmanager
from typing import Callable, Generator, Optional

from shortage_tracker.core.config import SEED_USERS
from shortage_tracker.domain.models import SheetDatabase

from .base import Document, Storage

logger = logging.getLogger(__name__)


def seed_document() -> Document:
    """저장된 문서가 없을 때 사용하는 초기 문서"""
    return {
        "usersRoles": [dict(user) for user in SEED_USERS],
        "erpRawData": [],
        "trackingSchedule": [],
        "referenceData": [],
    }


def _default_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex}"


class Transaction:
    """transaction() 블록에서 사용하는 작업 단위"""

    def __init__(self, db: SheetDatabase, new_id: Callable[[str], str]) -> None:
        self.db = db
        self.new_id = new_id
        self.committed = True

    def discard(self) -> None:
        """변경 사항을 저장하지 않고 되돌립니다."""
        self.committed = False


class TrackingRepository:
    """
    SheetDatabase를 소유하는 저장소.

    Args:
        storage: load()/save()를 제공하는 저장소 백엔드
        id_factory: 접두어를 받아 새 행 ID를 만드는 함수 (기본: uuid4)

    Examples:
        >>> repo = TrackingRepository(MemoryStorage())
        >>> with repo.transaction() as tx:
        ...     tx.db.tracking_schedule.append(row)
        >>> repo.snapshot().tracking_schedule
        [TrackingRow(...)]
    """

    def __init__(
        self,
        storage: Storage,
        *,
        id_factory: Optional[Callable[[str], str]] = None,
    ) -> None:
        self.storage = storage
        self._new_id = id_factory or _default_id
        # Streamlit 세션(스레드)들이 같은 인스턴스를 공유
        self._lock = threading.RLock()
        self._db = self._read()

    def _read(self) -> SheetDatabase:
        document = self.storage.load()
        if document is None:
            logger.info("No stored database found, using seed document")
            document = seed_document()
        return SheetDatabase.from_dict(document)

    @property
    def db(self) -> SheetDatabase:
        return self._db

    def reload(self) -> SheetDatabase:
        """
        저장소에서 문서를 다시 읽어 외부 변경을 반영합니다.

        진행 중인 transaction()이 있으면 그 블록이 끝날 때까지 기다립니다.
        """
        with self._lock:
            self._db = self._read()
            return self._db

    def snapshot(self) -> SheetDatabase:
        """현재 문서의 깊은 복사본 (호출자가 수정해도 저장소에 영향 없음)"""
        with self._lock:
            return copy.deepcopy(self._db)

    def reset(self) -> None:
        """문서를 초기 상태로 되돌리고 저장합니다."""
        with self._lock:
            self._db = SheetDatabase.from_dict(seed_document())
            self.storage.save(self._db.to_dict())
        logger.warning("Database reset to seed document")

    @contextmanager
    def transaction(self) -> Generator[Transaction, None, None]:
        """
        읽기-수정-저장 작업 단위.

        블록 실행과 저장이 끝날 때까지 저장소 잠금을 유지하므로
        다른 스레드의 transaction()/reload()는 그동안 대기합니다.
        저장되는 문서는 블록이 수정한 tx.db 입니다.

        Yields:
            Transaction: db(수정 대상 문서), new_id(ID 생성), discard()

        Raises:
            블록 내부 예외와 저장소 예외는 그대로 전파됩니다.
            두 경우 모두 메모리 상태는 블록 시작 시점으로 복원됩니다.
        """
        with self._lock:
            backup = copy.deepcopy(self._db)
            tx = Transaction(self._db, self._new_id)
            try:
                yield tx
                if tx.committed:
                    self.storage.save(tx.db.to_dict())
            except BaseException:
                self._db = backup
                raise
            self._db = tx.db if tx.committed else backup
