"""Y-axis planning with "nice" tick steps."""

import math
from dataclasses import dataclass
from typing import Dict, List

import numpy as np


def nice_step(value_range: float, target_ticks: int = 4) -> float:
    """Pick a step from {1, 2, 5, 10} x 10^k giving roughly target_ticks ticks."""
    if value_range <= 0:
        return 1.0
    rough = value_range / target_ticks
    magnitude = 10 ** math.floor(math.log10(rough))
    normalized = rough / magnitude
    if normalized < 1.5:
        step = 1
    elif normalized < 3:
        step = 2
    elif normalized < 7:
        step = 5
    else:
        step = 10
    return step * magnitude


@dataclass
class AxisPlan:
    """Value range and tick positions for one chart."""
    min_value: float
    max_value: float
    step: float
    tick_min: float
    tick_max: float

    @classmethod
    def for_values(cls, values: np.ndarray) -> "AxisPlan":
        min_value = float(np.min(values))
        max_value = float(np.max(values))
        if min_value == max_value:
            max_value = min_value + 1
        step = nice_step(max_value - min_value)
        return cls(
            min_value=min_value,
            max_value=max_value,
            step=step,
            tick_min=math.floor(min_value / step) * step,
            tick_max=math.ceil(max_value / step) * step,
        )

    @property
    def ticks(self) -> List[float]:
        count = int(round((self.tick_max - self.tick_min) / self.step))
        return [self.tick_min + i * self.step for i in range(count + 1)]

    def fraction(self, value: float) -> float:
        return (value - self.min_value) / (self.max_value - self.min_value)

    def row_for(self, value: float, rows: int) -> int:
        """0-based row for a value on a grid of the given height, top row highest."""
        row = rows - 1 - math.floor(self.fraction(value) * (rows - 1) + 0.5)
        return max(0, min(rows - 1, row))

    def grid_rows(self, rows: int) -> Dict[int, float]:
        """Map character rows to the tick value drawn on them."""
        grid = {}
        for tick in self.ticks:
            grid[self.row_for(tick, rows)] = tick
        return grid
