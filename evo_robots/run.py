"""
CLI entry: run a headless evolution and print a short report.
"""
import argparse

from evo_robots.config import EvolutionConfig
from evo_robots.runner import evolve


def main(argv=None):
    ap = argparse.ArgumentParser(description="Evolve maze-collecting robots.")
    ap.add_argument("--population", type=int, default=200)
    ap.add_argument("--generations", type=int, default=100)
    ap.add_argument("--tournament", type=int, default=10)
    ap.add_argument("--seed", type=int, default=None)
    args = ap.parse_args(argv)

    cfg = EvolutionConfig(
        population_size=args.population,
        generations=args.generations,
        tournament_size=args.tournament,
        seed=args.seed,
    )
    sim = evolve(cfg)
    snap = sim.snapshot()
    print(f"Best fitness: {snap.best_fitness} (generation {snap.best_generation}, {snap.turns_alive} turns)")
    print("Average fitness per generation:", sim.archive.avg_fitness)
    return snap


if __name__ == "__main__":
    main()
