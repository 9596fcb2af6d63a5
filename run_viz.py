from evo_robots.config import EvolutionConfig
from evo_robots.viewer import run_live

if __name__ == "__main__":
    # Watch the best-ever path improve; space pauses, r resets, s restarts.
    run_live(EvolutionConfig(seed=21), fps=10)
