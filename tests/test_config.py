"""Tests for run configuration validation."""

import dataclasses

import pytest

from evo_robots.config import EvolutionConfig
from evo_robots.exceptions import ConfigError, EvoRobotsError


def test_defaults_match_reference_setup() -> None:
    cfg = EvolutionConfig()
    assert (cfg.population_size, cfg.generations, cfg.tournament_size) == (200, 100, 10)
    assert cfg.max_possible_fitness == 800


@pytest.mark.parametrize(
    "overrides",
    [
        {"population_size": 0},
        {"population_size": -3, "tournament_size": 1},
        {"generations": 0},
        {"tournament_size": 201},
        {"tournament_size": 0},
        {"battery_density": 1.0},
        {"battery_density": -0.5},
        {"mutation_rate": 1.5},
        {"elite_fraction": 2.0},
        {"grid_size": 8},
        {"genome_length": 0},
    ],
)
def test_invalid_config_rejected(overrides) -> None:
    with pytest.raises(ConfigError):
        EvolutionConfig(**overrides)


def test_config_error_is_library_error() -> None:
    with pytest.raises(EvoRobotsError):
        EvolutionConfig(generations=0)


def test_config_is_immutable() -> None:
    cfg = EvolutionConfig()
    with pytest.raises(dataclasses.FrozenInstanceError):
        cfg.population_size = 5
