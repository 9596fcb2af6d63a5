"""
Evolution helpers: ranking, elitism, tournament selection, per-slot crossover
with sensed-pattern mutation, and a best-ever archive.
"""
from typing import List, Optional, Sequence, Tuple

import numpy as np
from loguru import logger

from .agents import Genome, Robot, SENSE_VALUES
from .config import EvolutionConfig
from .exceptions import SimulationError
from .world import Grid


def rank_by_fitness(
    robots: Sequence[Robot], grids: Optional[Sequence[Grid]] = None
) -> Tuple[List[Robot], Optional[List[Grid]]]:
    """Stable descending sort; grids (if given) follow their robots."""
    order = sorted(range(len(robots)), key=lambda i: -robots[i].fitness)
    ranked = [robots[i] for i in order]
    if grids is None:
        return ranked, None
    if len(grids) != len(robots):
        raise SimulationError(f"{len(robots)} robots but {len(grids)} grids")
    return ranked, [grids[i] for i in order]


def select_elite(ranked: Sequence[Robot], fraction: float) -> List[Robot]:
    count = int(len(ranked) * fraction)
    return [r.offspring() for r in ranked[:count]]


def tournament_select(population: Sequence[Robot], k: int, rng: np.random.Generator) -> Robot:
    """Fittest of k uniform draws (with replacement); earliest draw wins ties."""
    idxs = rng.integers(0, len(population), k)
    fits = np.array([population[i].fitness for i in idxs])
    return population[int(idxs[np.argmax(fits)])]


def crossover_and_mutate(
    a: Robot, b: Robot, mutation_rate: float, rng: np.random.Generator
) -> Tuple[Robot, Robot]:
    ga, gb = a.genome, b.genome
    if len(ga) != len(gb):
        raise SimulationError(f"genome length mismatch: {len(ga)} vs {len(gb)}")

    # one coin per rule slot decides which parent feeds which child
    take_a = rng.random(len(ga)) < 0.5
    p1 = np.where(take_a[:, None], ga.patterns, gb.patterns)
    p2 = np.where(take_a[:, None], gb.patterns, ga.patterns)
    m1 = np.where(take_a, ga.actions, gb.actions)
    m2 = np.where(take_a, gb.actions, ga.actions)

    # only sensed-pattern values mutate; a hit resamples both children there
    mask = rng.random(p1.shape) < mutation_rate
    hits = int(mask.sum())
    if hits:
        p1[mask] = rng.integers(0, SENSE_VALUES, size=hits)
        p2[mask] = rng.integers(0, SENSE_VALUES, size=hits)

    return Robot(Genome(p1, m1)), Robot(Genome(p2, m2))


def evolve_generation(
    ranked: Sequence[Robot], cfg: EvolutionConfig, rng: np.random.Generator
) -> List[Robot]:
    next_gen = select_elite(ranked, cfg.elite_fraction)[: cfg.population_size]
    n_elite = len(next_gen)
    while len(next_gen) < cfg.population_size:
        parent1 = tournament_select(ranked, cfg.tournament_size, rng)
        parent2 = tournament_select(ranked, cfg.tournament_size, rng)
        child1, child2 = crossover_and_mutate(parent1, parent2, cfg.mutation_rate, rng)
        next_gen.append(child1)
        if len(next_gen) < cfg.population_size:
            next_gen.append(child2)
    logger.debug("[Evolve] elites={} offspring={}", n_elite, len(next_gen) - n_elite)
    return next_gen


class Archive:
    """
    Best trial ever seen plus per-generation history. Holds deep copies, never
    references into the live population.
    """
    def __init__(self):
        self.best_robot: Optional[Robot] = None
        self.best_grid: Optional[Grid] = None
        self.best_generation: int = 0
        self.best_fitness: int = 0

        # generation-0 representative for before/after comparison
        self.first_robot: Optional[Robot] = None
        self.first_grid: Optional[Grid] = None

        self.avg_fitness: List[int] = []
        self.best_history: List[int] = []

    def consider(self, robot: Robot, grid: Grid, generation: int) -> bool:
        if robot.fitness > self.best_fitness:
            self.best_fitness = robot.fitness
            self.best_robot = robot.snapshot()
            self.best_grid = grid.clone()
            self.best_generation = generation
            return True
        return False

    def record_first(self, robot: Robot, grid: Grid) -> None:
        self.first_robot = robot.snapshot()
        self.first_grid = grid.clone()

    def record_generation(self, avg_fitness: int) -> None:
        self.avg_fitness.append(avg_fitness)
        self.best_history.append(self.best_fitness)
