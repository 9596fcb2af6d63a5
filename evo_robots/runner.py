"""
Runner: single-robot trials and the generation loop.

The loop is cooperative: `Simulation.generations()` yields a snapshot after
every generation so a host (viewer, notebook, CLI) can draw the archive and
issue pause / reset / start between generations. Nothing is interrupted
mid-generation.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Optional

import numpy as np
from loguru import logger
from tqdm import trange

from .agents import Robot, random_genome
from .config import EvolutionConfig
from .evo import Archive, evolve_generation, rank_by_fitness
from .world import Cell, Grid


def run_trial(robot: Robot, grid: Grid, rng: np.random.Generator) -> Dict[str, int]:
    """Place the robot and step it until its energy runs out."""
    batteries_before = grid.count(Cell.BATTERY)
    robot.place_randomly(grid, rng)
    while robot.alive:
        robot.step(grid, rng)
    return {
        "fitness": robot.fitness,
        "turns_alive": robot.turns_alive,
        "batteries": batteries_before - grid.count(Cell.BATTERY),
    }


class SimState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


@dataclass(frozen=True)
class Snapshot:
    generation: int
    total_generations: int
    avg_fitness: int
    best_fitness: int
    best_generation: int
    turns_alive: int
    running: bool
    state: SimState
    max_possible_fitness: int


class Simulation:
    def __init__(self, cfg: Optional[EvolutionConfig] = None):
        self.cfg = cfg or EvolutionConfig()
        self.rng = np.random.default_rng(self.cfg.seed)
        self.state = SimState.IDLE
        self.robots: List[Robot] = []
        self.grids: List[Grid] = []
        self.archive = Archive()
        self.generation = 0
        self._init_population()

    def _init_population(self) -> None:
        self.robots = [
            Robot(genome=random_genome(self.cfg.genome_length, self.rng))
            for _ in range(self.cfg.population_size)
        ]
        self.grids = []
        self.archive = Archive()
        self.generation = 0

    # ---------- controls ----------
    def start(self) -> None:
        if self.state in (SimState.RUNNING, SimState.PAUSED):
            logger.warning("[Simulation] already {}", self.state.value)
            return
        if self.state is SimState.COMPLETED:
            self._init_population()
        self.state = SimState.RUNNING
        logger.info(
            "[Simulation] starting: {} robots x {} generations",
            self.cfg.population_size, self.cfg.generations,
        )

    def toggle_pause(self) -> None:
        if self.state is SimState.RUNNING:
            self.state = SimState.PAUSED
            logger.info("[Simulation] paused at generation {}", self.generation)
        elif self.state is SimState.PAUSED:
            self.state = SimState.RUNNING
            logger.info("[Simulation] resumed at generation {}", self.generation)
        else:
            logger.warning("[Simulation] cannot pause while {}", self.state.value)

    def reset(self) -> None:
        self.state = SimState.IDLE
        self._init_population()
        logger.info("[Simulation] reset")

    # ---------- generation ----------
    def _evaluate(self) -> int:
        self.grids = []
        total = 0
        for robot in self.robots:
            grid = Grid(self.cfg.grid_size, self.cfg.battery_density, self.rng)
            self.grids.append(grid)
            robot.reset()
            run_trial(robot, grid, self.rng)
            total += robot.fitness
        return total

    def run_generation(self) -> None:
        total = self._evaluate()
        avg = total // self.cfg.population_size

        self.robots, self.grids = rank_by_fitness(self.robots, self.grids)

        if self.generation == 0:
            self.archive.record_first(self.robots[0], self.grids[0])
        if self.archive.consider(self.robots[0], self.grids[0], self.generation):
            logger.info(
                "[Simulation] new best fitness {} at generation {}",
                self.archive.best_fitness, self.generation + 1,
            )
        self.archive.record_generation(avg)
        logger.debug("[Simulation] generation {} avg fitness {}", self.generation + 1, avg)

        self.generation += 1
        if self.generation < self.cfg.generations:
            self.robots = evolve_generation(self.robots, self.cfg, self.rng)
        else:
            self.state = SimState.COMPLETED
            logger.info(
                "[Simulation] completed {} generations, best fitness {}",
                self.generation, self.archive.best_fitness,
            )

    def step(self) -> Snapshot:
        if self.state is SimState.RUNNING:
            self.run_generation()
        return self.snapshot()

    def generations(self) -> Iterator[Snapshot]:
        """Yield after every generation; controls are honoured between yields."""
        while self.state in (SimState.RUNNING, SimState.PAUSED):
            yield self.step()

    def run(self) -> Snapshot:
        self.start()
        for _ in self.generations():
            pass
        return self.snapshot()

    # ---------- reporting ----------
    def snapshot(self) -> Snapshot:
        arc = self.archive
        return Snapshot(
            generation=self.generation,
            total_generations=self.cfg.generations,
            avg_fitness=arc.avg_fitness[-1] if arc.avg_fitness else 0,
            best_fitness=arc.best_fitness,
            best_generation=arc.best_generation + 1,
            turns_alive=arc.best_robot.turns_alive if arc.best_robot else 0,
            running=self.state is SimState.RUNNING,
            state=self.state,
            max_possible_fitness=self.cfg.max_possible_fitness,
        )


def evolve(cfg: Optional[EvolutionConfig] = None) -> Simulation:
    """Headless run to completion with a progress bar."""
    sim = Simulation(cfg)
    sim.start()
    for _ in trange(sim.cfg.generations, desc="evolve"):
        sim.step()
    return sim
