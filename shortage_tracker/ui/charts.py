"""공정별 결품 상태 차트"""

from __future__ import annotations

from typing import Sequence

import plotly.express as px
import streamlit as st

from shortage_tracker.core.config import (
    STAGES,
    STATUS_CONFIRMED,
    STATUS_LATE,
    STATUS_PENDING,
    STATUS_READY,
    STATUSES,
)
from shortage_tracker.domain.filters import status_counts
from shortage_tracker.domain.models import TrackingRow

STATUS_COLORS = {
    STATUS_PENDING: "#F28E2B",
    STATUS_CONFIRMED: "#4E79A7",
    STATUS_LATE: "#E15759",
    STATUS_READY: "#59A14F",
}


def render_status_chart(rows: Sequence[TrackingRow]) -> None:
    """
    공정별/상태별 실제 결품 건수를 누적 막대 차트로 표시합니다.

    결품이 없으면 안내 문구만 표시합니다.
    """
    counts = status_counts(rows)
    if counts.empty:
        st.caption("표시할 결품이 없습니다.")
        return

    fig = px.bar(
        counts,
        x="stage",
        y="count",
        color="status",
        barmode="stack",
        category_orders={"stage": list(STAGES), "status": list(STATUSES)},
        color_discrete_map=STATUS_COLORS,
        labels={"stage": "공정", "count": "결품 건수", "status": "상태"},
    )
    fig.update_layout(height=280, margin=dict(l=10, r=10, t=30, b=10), legend_title_text="")
    st.plotly_chart(fig, use_container_width=True)
