"""
실행 시간 측정 유틸리티

가져오기, 저장소 I/O처럼 데이터 양에 따라 느려질 수 있는 작업의
소요 시간을 로깅합니다.
"""

from __future__ import annotations

import logging
import time
from typing import Any

logger = logging.getLogger(__name__)

# 경고/오류 로그 기준 (초)
WARN_THRESHOLD = 1.0
ERROR_THRESHOLD = 10.0


def measure_time_context(operation_name: str) -> "PerformanceContext":
    """
    코드 블록 실행 시간을 측정하는 컨텍스트 매니저를 반환합니다.

    Examples:
        >>> with measure_time_context("shortage import"):
        ...     reconcile(...)
        INFO - shortage import completed in 0.02s
    """
    return PerformanceContext(operation_name)


class PerformanceContext:
    """
    코드 블록의 실행 시간을 측정하는 컨텍스트 매니저.

    Attributes:
        operation_name: 측정할 작업의 이름
        elapsed: 경과 시간 (초), 블록 종료 후 채워짐
    """

    def __init__(self, operation_name: str) -> None:
        self.operation_name = operation_name
        self.start_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "PerformanceContext":
        self.start_time = time.perf_counter()
        logger.debug(f"Starting: {self.operation_name}")
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.elapsed = time.perf_counter() - self.start_time

        if exc_type is not None:
            logger.error(f"❌ {self.operation_name} failed after {self.elapsed:.2f}s")
        elif self.elapsed >= ERROR_THRESHOLD:
            logger.error(f"⚠️  SLOW: {self.operation_name} took {self.elapsed:.2f}s")
        elif self.elapsed >= WARN_THRESHOLD:
            logger.warning(f"⏱️  {self.operation_name} took {self.elapsed:.2f}s")
        else:
            logger.info(f"✓ {self.operation_name} completed in {self.elapsed:.2f}s")
