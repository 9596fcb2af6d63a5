"""
Run configuration: one immutable value passed into the generation loop.
Defaults reproduce the reference setup (200 robots, 100 generations, 22x22 maze).
"""
from dataclasses import dataclass
from typing import Optional

from .agents import START_REGION
from .exceptions import ConfigError


@dataclass(frozen=True)
class EvolutionConfig:
    population_size: int = 200
    generations: int = 100
    elite_fraction: float = 0.5
    tournament_size: int = 10
    mutation_rate: float = 0.03
    grid_size: int = 22
    battery_density: float = 0.4
    genome_length: int = 16
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.population_size < 1:
            raise ConfigError(f"population_size must be >= 1, got {self.population_size}")
        if self.generations < 1:
            raise ConfigError(f"generations must be >= 1, got {self.generations}")
        if not 0.0 <= self.elite_fraction <= 1.0:
            raise ConfigError(f"elite_fraction must be in [0, 1], got {self.elite_fraction}")
        if not 1 <= self.tournament_size <= self.population_size:
            raise ConfigError(
                f"tournament_size must be in [1, {self.population_size}], got {self.tournament_size}"
            )
        if not 0.0 <= self.mutation_rate <= 1.0:
            raise ConfigError(f"mutation_rate must be in [0, 1], got {self.mutation_rate}")
        # robots start in rows/cols 1..START_REGION, which must stay inside the border
        if self.grid_size < START_REGION + 2:
            raise ConfigError(f"grid_size must be >= {START_REGION + 2}, got {self.grid_size}")
        if not 0.0 <= self.battery_density < 1.0:
            raise ConfigError(f"battery_density must be in [0, 1), got {self.battery_density}")
        if self.genome_length < 1:
            raise ConfigError(f"genome_length must be >= 1, got {self.genome_length}")

    @property
    def max_possible_fitness(self) -> int:
        # display ceiling: every interior cell worth two battery pickups
        return (self.grid_size - 2) ** 2 * 2
