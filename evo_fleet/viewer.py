"""
Viewer: live top-down view of the arena.

Controls:
  SPACE = pull (every awake abled vessel)  |  S = stop  |  C = continue
  H = HUD toggle
"""
import time
import numpy as np
import matplotlib.pyplot as plt
from matplotlib.ticker import NullLocator

from .config import SimConfig
from .runner import GenerationManager

TAG_COLORS = {
    "box": "#8d6e63",
    "boat": "#26c6da",
    "pirate": "#ec407a",
    "speed": "#ffab00",
    "pull": "#7e57c2",
    "multiplier": "#2e7d32",
}
TAG_SIZES = {"box": 12, "boat": 40, "pirate": 40}
POWERUP_SIZE = 24

HUD_PERIOD = 5


def _snapshot(gm: GenerationManager):
    ents = gm.world.alive()
    if not ents:
        return np.zeros((0, 2)), [], []
    xy = np.array([[e.pos[0], e.pos[2]] for e in ents])
    colors = [TAG_COLORS.get(e.tag, "#ffffff") for e in ents]
    sizes = [TAG_SIZES.get(e.tag, POWERUP_SIZE) for e in ents]
    return xy, colors, sizes


def run_live(cfg: SimConfig = None, fps: int = 30) -> None:
    cfg = cfg or SimConfig.default()
    gm = GenerationManager(cfg)
    gm.start_simulation()

    fig, ax = plt.subplots(figsize=(7, 7))
    try: fig.canvas.manager.set_window_title("Evo Fleet: Boats & Pirates")
    except AttributeError: pass

    ax.set_facecolor("#1e2a38")
    ax.set_xlim(0, cfg.world.width); ax.set_ylim(0, cfg.world.depth)
    ax.set_aspect("equal")
    ax.xaxis.set_major_locator(NullLocator()); ax.yaxis.set_major_locator(NullLocator())

    xy, colors, sizes = _snapshot(gm)
    scat = ax.scatter(xy[:, 0], xy[:, 1], s=sizes, c=colors)
    hud = ax.text(2, cfg.world.depth - 2, "", color="white", fontsize=8, va="top", family="monospace")
    hud_on = True

    def on_key(ev):
        nonlocal hud_on
        if ev.key == " ": gm.activate_pull()
        elif ev.key in ("s", "S"): gm.stop_simulation()
        elif ev.key in ("c", "C"): gm.continue_simulation()
        elif ev.key in ("h", "H"): hud_on = not hud_on

    fig.canvas.mpl_connect("key_press_event", on_key)
    plt.tight_layout(); plt.pause(0.001)

    delay = 1.0 / max(1, fps)
    while plt.fignum_exists(fig.number):
        gm.tick()

        xy, colors, sizes = _snapshot(gm)
        scat.set_offsets(xy); scat.set_color(colors); scat.set_sizes(sizes)

        if hud_on and gm.world.tick % HUD_PERIOD == 0:
            lines = [f"gen {gm.generation} | t {gm.simulation_count:5.1f}/{cfg.generation.simulation_timer:.0f}s"
                     f" | {'running' if gm.running else 'stopped'}"]
            for name, sub in gm.subpopulations.items():
                live = sub.live(gm.world)
                best = max((a.points for a in live), default=0.0)
                lines.append(f"{name:>13} alive {len(live):>3} best {best:6.2f} last {sub.last_winner_points:6.2f}")
            hud.set_text("\n".join(lines))
        elif not hud_on:
            hud.set_text("")

        plt.pause(0.001); time.sleep(delay)

    plt.close(fig)
