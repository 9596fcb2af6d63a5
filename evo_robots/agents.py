"""
Robots driven by a fixed-length rule table.

Each rule maps a sensed (N, E, S, W) pattern of cell codes to an action.
The first matching rule wins; the last rule is the catch-all default, so a
robot always has something to do.
"""
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional, Tuple

import numpy as np

from .exceptions import SimulationError
from .world import Cell, Grid, NEIGHBOUR_OFFSETS

INITIAL_ENERGY = 5
BATTERY_ENERGY = 5
BATTERY_REWARD = 5

# robots start somewhere in rows/cols 1..START_REGION
START_REGION = 10

# sensed pattern values: empty, battery, wall
SENSE_VALUES = 3
PATTERN_WIDTH = 4


class Action(IntEnum):
    NORTH = 0
    EAST = 1
    SOUTH = 2
    WEST = 3
    RANDOM = 4


DIRECTIONS = {
    Action.NORTH: NEIGHBOUR_OFFSETS[0],
    Action.EAST: NEIGHBOUR_OFFSETS[1],
    Action.SOUTH: NEIGHBOUR_OFFSETS[2],
    Action.WEST: NEIGHBOUR_OFFSETS[3],
}


@dataclass
class Genome:
    patterns: np.ndarray  # (n_rules, 4) int8, values in {0, 1, 2}
    actions: np.ndarray   # (n_rules,) int8, values in 0..4

    def __len__(self) -> int:
        return len(self.actions)

    def copy(self) -> "Genome":
        return Genome(patterns=self.patterns.copy(), actions=self.actions.copy())

    def rule(self, i: int) -> Tuple[Tuple[int, ...], int]:
        return tuple(int(v) for v in self.patterns[i]), int(self.actions[i])

    def match(self, sensed: np.ndarray) -> int:
        hits = np.all(self.patterns == np.asarray(sensed), axis=1)
        if hits.any():
            return int(np.argmax(hits))
        return len(self) - 1

    def __eq__(self, other) -> bool:
        if not isinstance(other, Genome):
            return NotImplemented
        return np.array_equal(self.patterns, other.patterns) and np.array_equal(self.actions, other.actions)


def random_genome(n_rules: int, rng: np.random.Generator) -> Genome:
    patterns = rng.integers(0, SENSE_VALUES, size=(n_rules, PATTERN_WIDTH)).astype(np.int8)
    actions = rng.integers(0, len(Action), size=(n_rules,)).astype(np.int8)
    return Genome(patterns=patterns, actions=actions)


@dataclass(eq=False)
class Robot:
    genome: Genome
    pos: Optional[Tuple[int, int]] = None
    energy: int = INITIAL_ENERGY
    fitness: int = 0
    turns_alive: int = 0
    path: List[Tuple[int, int]] = field(default_factory=list)
    senses: np.ndarray = field(default_factory=lambda: np.zeros(PATTERN_WIDTH, dtype=np.int8))

    # ---------- lifecycle ----------
    def reset(self) -> None:
        self.pos = None
        self.energy = INITIAL_ENERGY
        self.fitness = 0
        self.turns_alive = 0
        self.path = []
        self.senses = np.zeros(PATTERN_WIDTH, dtype=np.int8)

    def offspring(self) -> "Robot":
        """Fresh robot carrying an independent copy of this genome."""
        return Robot(genome=self.genome.copy())

    def snapshot(self) -> "Robot":
        """Deep copy including trial state, for archiving."""
        return Robot(
            genome=self.genome.copy(),
            pos=self.pos,
            energy=self.energy,
            fitness=self.fitness,
            turns_alive=self.turns_alive,
            path=list(self.path),
            senses=self.senses.copy(),
        )

    # ---------- simulation ----------
    def place_randomly(self, grid: Grid, rng: np.random.Generator) -> None:
        if self.pos is not None:
            raise SimulationError(f"robot already placed at {self.pos}")
        y = 1 + int(rng.integers(0, START_REGION))
        x = 1 + int(rng.integers(0, START_REGION))
        self.pos = (y, x)
        self.path = [(y, x)]
        grid.cells[y, x] = Cell.ROBOT
        self.sense(grid)

    def sense(self, grid: Grid) -> np.ndarray:
        if self.pos is None:
            raise SimulationError("robot must be placed before sensing")
        self.senses = grid.neighbours(self.pos)
        return self.senses

    def select_action(self) -> int:
        """Index of the rule that fires for the current senses."""
        return self.genome.match(self.senses)

    def choose_direction(self, rng: np.random.Generator) -> int:
        action = int(self.genome.actions[self.select_action()])
        if action == Action.RANDOM:
            action = int(rng.integers(0, len(DIRECTIONS)))
        return action

    def act(self, grid: Grid, direction: int) -> bool:
        """Spend one turn trying to move; returns True if the robot moved."""
        if self.pos is None:
            raise SimulationError("robot must be placed before acting")
        self.energy -= 1
        self.turns_alive += 1

        y, x = self.pos
        dy, dx = DIRECTIONS[Action(direction)]
        # read the grid itself; cached senses may be stale
        target = int(grid.cells[y + dy, x + dx])
        moved = False
        if target != Cell.WALL:
            if target == Cell.BATTERY:
                self.energy += BATTERY_ENERGY
                self.fitness += BATTERY_REWARD
            grid.cells[y, x] = Cell.EMPTY
            self.pos = (y + dy, x + dx)
            self.path.append(self.pos)
            grid.cells[self.pos] = Cell.ROBOT
            moved = True

        self.sense(grid)
        return moved

    def step(self, grid: Grid, rng: np.random.Generator) -> bool:
        return self.act(grid, self.choose_direction(rng))

    @property
    def alive(self) -> bool:
        return self.energy > 0
