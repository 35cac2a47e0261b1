"""
Evolution helpers: the heritable genome of a vessel, single-parent birth and
bounded per-gene mutation.

Genes:
  senses      sector_count, sight, moving_speed (fixed unless mutate_senses)
  exploration exploration_range = (low, high), the fallback utility interval
  base        box / boat / enemy   -> (weight, distance_factor)
  powerups    speed / pull / multiplier -> (weight, distance_factor, environment_factor)
"""
from dataclasses import dataclass, asdict, fields, replace
from typing import Dict, Any, Tuple
import numpy as np

BASE_CATEGORIES = ("box", "boat", "enemy")
POWERUP_CATEGORIES = ("speed", "pull", "multiplier")

# floors from the sensory mutation policy
MIN_SECTORS = 1
MIN_SIGHT = 0.1
MIN_MOVING_SPEED = 1.0
SPEED_INFLUENCE_IN_SIGHT = 0.125
SIGHT_INFLUENCE_IN_SPEED = 0.0625


@dataclass
class Genome:
    sector_count: int = 16
    sight: float = 10.0
    moving_speed: float = 5.0
    exploration_range: Tuple[float, float] = (0.0, 1.0)

    box_weight: float = 1.0
    box_distance_factor: float = 1.0
    boat_weight: float = 0.0
    boat_distance_factor: float = 0.0
    enemy_weight: float = 0.0
    enemy_distance_factor: float = 0.0

    speed_weight: float = 0.0
    speed_distance_factor: float = 0.0
    speed_environment_factor: float = 0.0
    pull_weight: float = 0.0
    pull_distance_factor: float = 0.0
    pull_environment_factor: float = 0.0
    multiplier_weight: float = 0.0
    multiplier_distance_factor: float = 0.0
    multiplier_environment_factor: float = 0.0

    def __post_init__(self):
        if int(self.sector_count) <= 0:
            raise ValueError(f"sector_count must be positive, got {self.sector_count}")
        self.sector_count = int(self.sector_count)
        self.exploration_range = (float(self.exploration_range[0]), float(self.exploration_range[1]))

    @property
    def angular_step(self) -> float:
        """Degrees between two neighbouring sensor rays."""
        return 360.0 / self.sector_count

    def weights(self, category: str) -> Tuple[float, float]:
        return getattr(self, f"{category}_weight"), getattr(self, f"{category}_distance_factor")

    def environment_factor(self, category: str) -> float:
        return getattr(self, f"{category}_environment_factor")

    def clear_powerups(self) -> None:
        for name in powerup_genes():
            setattr(self, name, 0.0)

    def copy(self) -> "Genome":
        return replace(self)

    # ---------- serialization ----------
    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["exploration_range"] = list(self.exploration_range)
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Genome":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"unknown genome fields: {sorted(unknown)}")
        return cls(**data)


def base_genes() -> Tuple[str, ...]:
    return tuple(f"{c}_{k}" for c in BASE_CATEGORIES for k in ("weight", "distance_factor"))


def powerup_genes() -> Tuple[str, ...]:
    return tuple(f"{c}_{k}" for c in POWERUP_CATEGORIES
                 for k in ("weight", "distance_factor", "environment_factor"))


def birth(child: Genome, parent: Genome, abled: bool) -> Genome:
    """Overwrite `child` with the parent's genes. Powerup genes are only
    inherited by abled agents; everyone else keeps them at zero."""
    for f in fields(Genome):
        if f.name in powerup_genes():
            continue
        setattr(child, f.name, getattr(parent, f.name))
    if abled:
        for name in powerup_genes():
            setattr(child, name, getattr(parent, name))
    else:
        child.clear_powerups()
    return child


def _roll(rng: np.random.Generator, chance: float) -> bool:
    return float(rng.uniform(0.0, 100.0)) <= chance


def _mutate_senses(g: Genome, rng: np.random.Generator, factor: float, chance: float) -> None:
    if _roll(rng, chance):
        g.sector_count = max(int(g.sector_count + int(rng.uniform(-factor, factor))), MIN_SECTORS)
    if _roll(rng, chance):
        inc = float(rng.uniform(-factor, factor))
        g.sight = max(g.sight + inc, MIN_SIGHT)
        if inc > 0.0:
            g.moving_speed = max(g.moving_speed - inc * SIGHT_INFLUENCE_IN_SPEED, MIN_MOVING_SPEED)
    if _roll(rng, chance):
        inc = float(rng.uniform(-factor, factor))
        g.moving_speed = max(g.moving_speed + inc, MIN_MOVING_SPEED)
        if inc > 0.0:
            g.sight = max(g.sight - inc * SPEED_INFLUENCE_IN_SIGHT, MIN_SIGHT)


def mutate(g: Genome, rng: np.random.Generator, factor: float, chance: float,
           abled: bool = True, mutate_senses: bool = False) -> Genome:
    """
    In-place mutation. Each gene has a `chance` percent ([0, 100]) of moving by
    uniform(-factor, +factor); environment factors move by a tenth of that.
    Powerup genes never go below zero and are left alone for disabled agents.
    """
    if mutate_senses:
        _mutate_senses(g, rng, factor, chance)

    low, high = g.exploration_range
    if _roll(rng, chance):
        low += float(rng.uniform(-factor, factor))
    if _roll(rng, chance):
        high += float(rng.uniform(-factor, factor))
    g.exploration_range = (low, high)

    for name in base_genes():
        if _roll(rng, chance):
            setattr(g, name, getattr(g, name) + float(rng.uniform(-factor, factor)))

    if not abled:
        return g

    for name in powerup_genes():
        value = getattr(g, name)
        if _roll(rng, chance):
            delta = float(rng.uniform(-factor, factor))
            if name.endswith("environment_factor"):
                delta /= 10.0
            value += delta
        setattr(g, name, max(0.0, value))
    return g
