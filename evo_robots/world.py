"""
Grid module: the square maze a robot is evaluated in.

Cell codes:
  0 empty, 1 battery, 2 wall, 9 robot

The outer ring is always wall, so every interior cell has four in-bounds
neighbours. Batteries are scattered once at construction and never regrow.
"""
from enum import IntEnum
from typing import Optional, Tuple

import numpy as np

from .exceptions import ConfigError


class Cell(IntEnum):
    EMPTY = 0
    BATTERY = 1
    WALL = 2
    ROBOT = 9


# N, E, S, W as (dy, dx)
NEIGHBOUR_OFFSETS = ((-1, 0), (0, 1), (1, 0), (0, -1))


class Grid:
    def __init__(self, size: int = 22, battery_density: float = 0.4,
                 rng: Optional[np.random.Generator] = None):
        if size < 3:
            raise ConfigError(f"grid size must be >= 3, got {size}")
        if not 0.0 <= battery_density < 1.0:
            # density >= 1 would never finish placing batteries
            raise ConfigError(f"battery_density must be in [0, 1), got {battery_density}")
        self.size = size
        self.battery_density = battery_density
        self.rng = rng if rng is not None else np.random.default_rng()

        self.cells = np.zeros((size, size), dtype=np.int8)
        self.cells[0, :] = Cell.WALL
        self.cells[-1, :] = Cell.WALL
        self.cells[:, 0] = Cell.WALL
        self.cells[:, -1] = Cell.WALL

        self._seed_batteries()

    # ---------- construction ----------
    @property
    def interior_cells(self) -> int:
        return (self.size - 2) ** 2

    @property
    def battery_target(self) -> int:
        return int(np.floor(self.battery_density * self.interior_cells))

    def _seed_batteries(self) -> None:
        placed = 0
        target = self.battery_target
        while placed < target:
            y = 1 + int(self.rng.integers(0, self.size - 2))
            x = 1 + int(self.rng.integers(0, self.size - 2))
            if self.cells[y, x] == Cell.EMPTY:
                self.cells[y, x] = Cell.BATTERY
                placed += 1

    def clone(self) -> "Grid":
        """Independent copy of the layout; shares only the random source."""
        other = Grid.__new__(Grid)
        other.size = self.size
        other.battery_density = self.battery_density
        other.rng = self.rng
        other.cells = self.cells.copy()
        return other

    # ---------- queries ----------
    def count(self, cell: int) -> int:
        return int(np.count_nonzero(self.cells == cell))

    def neighbours(self, pos: Tuple[int, int]) -> np.ndarray:
        y, x = pos
        return np.array([self.cells[y + dy, x + dx] for dy, dx in NEIGHBOUR_OFFSETS], dtype=np.int8)
