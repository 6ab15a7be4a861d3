"""공통 유틸리티 모듈."""

from .performance import PerformanceContext, measure_time_context

__all__ = [
    "PerformanceContext",
    "measure_time_context",
]
