"""
JSON 파일 저장소

문서 전체를 하나의 JSON 파일로 저장합니다. 쓰기는 임시 파일에 기록한 뒤
교체하는 방식이라 저장 도중 실패해도 기존 파일이 손상되지 않습니다.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from shortage_tracker.domain.exceptions import StorageError

from .base import Document

logger = logging.getLogger(__name__)


class JsonFileStorage:
    """
    JSON 파일 기반 저장소.

    Examples:
        >>> storage = JsonFileStorage("tracker_db.json")
        >>> storage.save({"usersRoles": [], ...})
        >>> storage.load()["usersRoles"]
        []
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def load(self) -> Optional[Document]:
        if not self.path.exists():
            logger.debug("No database file at %s", self.path)
            return None
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                document = json.load(fh)
        except (OSError, json.JSONDecodeError) as exc:
            logger.error(f"Failed to read database file {self.path}: {exc}")
            raise StorageError(f"저장 파일을 읽을 수 없습니다: {self.path}") from exc

        if not isinstance(document, dict):
            raise StorageError(f"저장 파일 형식이 올바르지 않습니다: {self.path}")
        return document

    def save(self, document: Document) -> None:
        directory = self.path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=str(directory)
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(document, fh, ensure_ascii=False, indent=2)
                os.replace(tmp_name, self.path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except (OSError, TypeError, ValueError) as exc:
            logger.error(f"Failed to write database file {self.path}: {exc}")
            raise StorageError(f"저장 파일을 쓸 수 없습니다: {self.path}") from exc
        logger.debug("Database saved to %s", self.path)
