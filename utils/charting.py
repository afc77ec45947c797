from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from domain.aggregation import percentage_shares

PALETTE = (
    "#009688",  # teal
    "#2196F3",  # blue
    "#FF9800",  # orange
    "#E91E63",  # pink
    "#3F51B5",  # indigo
    "#4CAF50",  # green
    "#00BCD4",  # cyan
    "#FFC107",  # amber
    "#9C27B0",  # purple
    "#795548",  # brown
)


@dataclass(frozen=True)
class PieSection:
    label: str
    value: float
    percent: int
    color: str


def color_for(index: int) -> str:
    return PALETTE[index % len(PALETTE)]


def pie_sections(group_sums: Mapping[str, float]) -> list[PieSection]:
    """Chart slices in legend order; empty when there is nothing to draw."""
    total = sum(group_sums.values(), 0.0)
    if total <= 0:
        return []
    shares = percentage_shares(group_sums)
    return [
        PieSection(label=label, value=value, percent=shares[label], color=color_for(index))
        for index, (label, value) in enumerate(group_sums.items())
    ]
