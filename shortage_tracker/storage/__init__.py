"""
저장소 추상화 계층

문서 저장 백엔드(JSON 파일, Google Sheets, 메모리)와
문서를 소유하는 TrackingRepository를 제공합니다.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from shortage_tracker.core.config import StorageConfig
from shortage_tracker.domain.exceptions import StorageError

from .base import Document, MemoryStorage, Storage
from .gsheet import GSheetStorage
from .json_file import JsonFileStorage
from .repository import TrackingRepository, Transaction, seed_document

logger = logging.getLogger(__name__)


def build_storage(
    config: StorageConfig,
    *,
    credentials_info: Optional[Mapping[str, Any] | str] = None,
) -> Storage:
    """
    설정에 맞는 저장소 백엔드를 생성합니다.

    Args:
        config: 저장소 설정
        credentials_info: gsheet 백엔드에서 사용할 서비스 계정 정보

    Raises:
        StorageError: 알 수 없는 백엔드이거나 gsheet 인증 정보가 없는 경우
    """
    backend = config.backend
    logger.info("Using %s storage backend", backend)

    if backend == "json":
        return JsonFileStorage(config.db_path)
    if backend == "memory":
        return MemoryStorage()
    if backend == "gsheet":
        if credentials_info is None:
            raise StorageError("Google Sheets 서비스 계정 정보가 없습니다.")
        return GSheetStorage.from_service_account(config.gsheet_id, credentials_info)

    raise StorageError(f"알 수 없는 저장소 백엔드입니다: {backend}")


__all__ = [
    "Document",
    "Storage",
    "MemoryStorage",
    "JsonFileStorage",
    "GSheetStorage",
    "TrackingRepository",
    "Transaction",
    "seed_document",
    "build_storage",
]
