"""
Viewer: draws the archived best maze + path and the fitness history, and
drives a Simulation one generation per frame.

Controls:
  space = pause / resume  |  r = reset  |  s = start (from idle or completed)
  f = toggle first-generation comparison panel
"""
import time
from typing import List, Optional, Tuple

import matplotlib.pyplot as plt
from matplotlib import colors
from matplotlib.ticker import NullLocator

from .config import EvolutionConfig
from .evo import Archive
from .runner import Simulation, Snapshot
from .world import Cell, Grid

# colour per cell code (0 empty, 1 battery, 2 wall, 9 robot)
CELL_COLORS = {
    Cell.EMPTY: "#1e293b",
    Cell.BATTERY: "#22c55e",
    Cell.WALL: "#475569",
    Cell.ROBOT: "#1e293b",
}
PATH_COLOR = "#3b82f6"
END_COLOR = "#f59e0b"


def _make_cmap():
    codes = sorted(CELL_COLORS)
    cmap = colors.ListedColormap([CELL_COLORS[c] for c in codes])
    bounds = [int(c) - 0.5 for c in codes] + [int(codes[-1]) + 0.5]
    norm = colors.BoundaryNorm(bounds, cmap.N)
    return cmap, norm


def draw_grid(ax, grid: Grid, path: Optional[List[Tuple[int, int]]] = None, title: str = ""):
    """Raster the maze and overlay a robot path (list of (y, x))."""
    cmap, norm = _make_cmap()
    ax.clear()
    ax.imshow(grid.cells, cmap=cmap, norm=norm, interpolation="nearest", origin="upper")
    ax.xaxis.set_major_locator(NullLocator()); ax.yaxis.set_major_locator(NullLocator())
    if path:
        ys = [p[0] for p in path]; xs = [p[1] for p in path]
        ax.plot(xs, ys, color=PATH_COLOR, linewidth=2)
        ax.scatter([xs[-1]], [ys[-1]], s=60, c=END_COLOR, zorder=3)
    if title:
        ax.set_title(title, fontsize=9)
    return ax


def plot_history(ax, archive: Archive):
    ax.clear()
    gens = list(range(1, len(archive.avg_fitness) + 1))
    ax.plot(gens, archive.avg_fitness, label="avg fitness")
    ax.plot(gens, archive.best_history, label="best ever")
    ax.set_xlabel("generation")
    ax.set_ylabel("fitness")
    if gens:
        ax.legend(loc="lower right", fontsize=7)
    return ax


def format_hud(snap: Snapshot) -> str:
    return (
        f"gen {snap.generation}/{snap.total_generations} | avg {snap.avg_fitness} "
        f"| best {snap.best_fitness}/{snap.max_possible_fitness} (gen {snap.best_generation}) "
        f"| turns {snap.turns_alive} | {snap.state.value}"
    )


def render(fig, axes, sim: Simulation, show_first: bool = False) -> None:
    maze_ax, first_ax, hist_ax = axes
    arc = sim.archive
    if arc.best_grid is not None:
        draw_grid(maze_ax, arc.best_grid, arc.best_robot.path, title="best ever")
    else:
        maze_ax.clear(); maze_ax.set_title("best ever (none yet)", fontsize=9)
    if show_first and arc.first_grid is not None:
        draw_grid(first_ax, arc.first_grid, arc.first_robot.path, title="generation 1")
    else:
        first_ax.clear(); first_ax.set_axis_off()
    plot_history(hist_ax, arc)
    fig.suptitle(format_hud(sim.snapshot()), fontsize=9)


def run_live(cfg: Optional[EvolutionConfig] = None, fps: int = 10) -> Simulation:
    sim = Simulation(cfg)
    fig, axes = plt.subplots(1, 3, figsize=(13, 4.5))
    try: fig.canvas.manager.set_window_title("Evo Robots - Maze Evolution")
    except AttributeError: pass

    show_first = True

    def on_key(ev):
        nonlocal show_first
        if ev.key in (" ", "space"): sim.toggle_pause()
        elif ev.key in ("r", "R"): sim.reset()
        elif ev.key in ("s", "S"): sim.start()
        elif ev.key in ("f", "F"): show_first = not show_first

    fig.canvas.mpl_connect("key_press_event", on_key)

    delay = 1.0 / max(1, fps)
    sim.start()
    while plt.fignum_exists(fig.number):
        # one generation per frame while running; idle/paused/completed just redraw
        sim.step()
        render(fig, axes, sim, show_first)
        plt.pause(0.001); time.sleep(delay)

    plt.close(fig)
    return sim
