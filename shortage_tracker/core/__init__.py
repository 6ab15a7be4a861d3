"""설정과 상태 계산 규칙"""

from .config import CONFIG, TrackerConfig
from .status import LatePolicy, compute_status, refresh_status

__all__ = [
    "CONFIG",
    "TrackerConfig",
    "LatePolicy",
    "compute_status",
    "refresh_status",
]
