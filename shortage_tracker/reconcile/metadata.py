"""Work order → metadata snapshot index used while reconciling imports."""

from __future__ import annotations

from typing import Container, Iterable, Optional

from shortage_tracker.domain.models import DEFAULT_METADATA, MetadataSnapshot, TrackingRow


class MetadataIndex:
    """
    작업지시별 메타데이터 조회 인덱스.

    같은 작업지시의 행이 여러 개면 목록에서 먼저 나온 행의 값을 사용합니다.
    """

    def __init__(self) -> None:
        self._by_work_order: dict[str, MetadataSnapshot] = {}

    @classmethod
    def build(
        cls,
        rows: Iterable[TrackingRow],
        work_orders: Optional[Container[str]] = None,
    ) -> "MetadataIndex":
        """
        Args:
            rows: 현재 추적 행
            work_orders: 지정하면 해당 작업지시만 색인
        """
        index = cls()
        for row in rows:
            if work_orders is not None and row.work_order not in work_orders:
                continue
            index.remember(row)
        return index

    def remember(self, row: TrackingRow) -> None:
        self._by_work_order.setdefault(row.work_order, MetadataSnapshot.of(row))

    def get(self, work_order: str) -> MetadataSnapshot:
        return self._by_work_order.get(work_order, DEFAULT_METADATA)

    def __contains__(self, work_order: object) -> bool:
        return work_order in self._by_work_order

    def __len__(self) -> int:
        return len(self._by_work_order)
