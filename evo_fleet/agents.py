"""
Vessels (boats and pirates) steering by a radial sensor sweep.

Every tick an awake vessel casts a fan of rays around its heading plus one
long frontal probe, scores each direction by what the ray hit (or by a random
exploration value when it hit nothing), and sails along the best one.

Abled vessels also value and collect powerups:
- speed:      moving speed x speed_multiplier_power, no stacking
- multiplier: points x points_multiplier_power, no stacking
- pull:       drags every remembered object of non-negative utility toward
              the vessel; can be triggered again and again
"""
from dataclasses import dataclass, field
from typing import Tuple, Dict, Any, List
import logging
import numpy as np

from .evo import Genome, POWERUP_CATEGORIES, birth, mutate
from .world import World, Entity

logger = logging.getLogger(__name__)

CACHE_CLEAR_TICKS = 60
LONG_SIGHT_FACTOR = 1.5
MAX_UTILITY_CHOICE_CHANCE = 0.85
TURN_RATE = 0.1

# body tag -> genome category used to score a ray hit
TAG_CATEGORY = {"box": "box", "boat": "boat", "pirate": "enemy"}


@dataclass
class PowerupConfig:
    speed_multiplier_power: float = 2.0
    pull_power: float = 4.0
    points_multiplier_power: float = 2.0


@dataclass(frozen=True)
class Species:
    """What a vessel earns by touching a body of a given tag. The body is consumed."""
    name: str
    tag: str
    rewards: Tuple[Tuple[str, float], ...]

    def reward(self, tag: str) -> float:
        return dict(self.rewards).get(tag, 0.0)


BOAT = Species(name="boat", tag="boat", rewards=(("box", 2.0),))
PIRATE = Species(name="pirate", tag="pirate", rewards=(("box", 0.1), ("boat", 5.0)))
SPECIES = {s.name: s for s in (BOAT, PIRATE)}


# ---------- geometry ----------
def flatten(v: np.ndarray) -> np.ndarray:
    """Drop the vertical component and renormalize."""
    out = np.array([v[0], 0.0, v[2]], dtype=float)
    n = np.linalg.norm(out)
    return out / n if n > 1e-12 else np.array([0.0, 0.0, 1.0])


def rotate_y(v: np.ndarray, degrees: float) -> np.ndarray:
    a = np.radians(degrees)
    c, s = np.cos(a), np.sin(a)
    return np.array([v[0] * c + v[2] * s, v[1], -v[0] * s + v[2] * c])


def slerp(a: np.ndarray, b: np.ndarray, t: float) -> np.ndarray:
    dot = float(np.clip(np.dot(a, b), -1.0, 1.0))
    if dot > 0.9995:
        return flatten(a + t * (b - a))
    if dot < -0.9995:
        return rotate_y(a, 180.0 * t)
    omega = np.arccos(dot)
    so = np.sin(omega)
    return flatten((np.sin((1 - t) * omega) / so) * a + (np.sin(t * omega) / so) * b)


@dataclass(eq=False)
class Agent:
    entity: Entity
    genome: Genome
    species: Species = BOAT
    abled: bool = False
    powerups: PowerupConfig = field(default_factory=PowerupConfig)

    points: float = 0.0
    points_multiplier: float = 1.0
    speed_multiplier: float = 1.0

    # attraction to powerups grows with how busy the surroundings are
    environment_weights: Dict[str, float] = field(default_factory=lambda: {c: 1.0 for c in POWERUP_CATEGORIES})
    # 0 once a powerup is active; pull is re-triggerable and has none
    active_factors: Dict[str, float] = field(default_factory=lambda: {"speed": 1.0, "multiplier": 1.0})

    awake: bool = False
    visible: Dict[int, float] = field(default_factory=dict)
    act_iteration: int = 0

    def __post_init__(self):
        if not self.abled:
            self.genome.clear_powerups()

    @property
    def id(self) -> int:
        return self.entity.id

    @property
    def velocity(self) -> np.ndarray:
        return self.entity.velocity

    # ---------- lifecycle ----------
    def birth(self, parent: Genome) -> None:
        birth(self.genome, parent, self.abled)

    def mutate(self, rng: np.random.Generator, factor: float, chance: float, mutate_senses: bool = False) -> None:
        mutate(self.genome, rng, factor, chance, abled=self.abled, mutate_senses=mutate_senses)

    def awake_up(self) -> None:
        self.awake = True

    def sleep(self) -> None:
        self.awake = False
        self.entity.velocity = np.zeros(3)

    def data(self) -> Genome:
        """Value snapshot of the genome."""
        return self.genome.copy()

    def get_points(self) -> float:
        return self.points

    # higher points sort first
    def compare(self, other: Any) -> int:
        if not isinstance(other, Agent):
            raise TypeError(f"cannot compare Agent with {type(other).__name__}")
        if self.points > other.points:
            return -1
        if self.points < other.points:
            return 1
        return 0

    def __lt__(self, other: Any) -> bool:
        return self.compare(other) < 0

    # ---------------------------------------------------------------------

    def decide(self, world: World, rng: np.random.Generator) -> Dict[str, Any]:
        if self.act_iteration >= CACHE_CLEAR_TICKS:
            self.visible.clear()
            self.act_iteration = 0
            for c in self.environment_weights:
                self.environment_weights[c] = 1.0

        forward = flatten(self.entity.forward)
        pos = self.entity.pos

        candidates: List[Tuple[float, int, np.ndarray]] = []
        for i, direction in enumerate(self.fan(forward)):
            candidates.append((self._evaluate(world, rng, pos, direction), i, direction))
        candidates.append((self._evaluate(world, rng, pos, forward, LONG_SIGHT_FACTOR), len(candidates), forward))

        ranked = sorted(candidates, key=lambda c: -c[0])
        rank = 0 if rng.random() < MAX_UTILITY_CHOICE_CHANCE else 1
        utility, index, direction = ranked[rank]

        heading = slerp(forward, direction, TURN_RATE)
        velocity = direction * self.genome.moving_speed * self.speed_multiplier
        self.entity.forward = heading
        self.entity.velocity = velocity
        self.act_iteration += 1

        return {"direction": direction, "heading": heading, "velocity": velocity,
                "utility": utility, "index": index, "rank": rank}

    def fan(self, forward: np.ndarray) -> List[np.ndarray]:
        """sector_count + 1 directions, angular_step apart, centred on forward."""
        step = self.genome.angular_step
        ray = rotate_y(forward, -step * self.genome.sector_count / 2.0)
        out = []
        for _ in range(self.genome.sector_count + 1):
            out.append(flatten(ray))
            ray = rotate_y(ray, step)
        return out

    def _evaluate(self, world: World, rng: np.random.Generator, pos: np.ndarray,
                  direction: np.ndarray, sight_factor: float = 1.0) -> float:
        low, high = self.genome.exploration_range
        utility = float(rng.uniform(min(low, high), max(low, high)))

        length = self.genome.sight * sight_factor
        hit = world.cast(pos, direction, length, ignore=self.entity.id)
        if hit is None:
            return utility

        # closer bodies score higher
        distance_index = 1.0 - hit.distance / length
        utility = self.utility(hit.tag, distance_index, utility)

        if hit.object_id not in self.visible:
            for c in POWERUP_CATEGORIES:
                self.environment_weights[c] += self.genome.environment_factor(c)
        self.visible[hit.object_id] = utility
        return utility

    def utility(self, tag: str, distance_index: float, fallback: float) -> float:
        if tag in TAG_CATEGORY:
            weight, distance_factor = self.genome.weights(TAG_CATEGORY[tag])
            return distance_index * distance_factor + weight
        if tag in POWERUP_CATEGORIES and self.abled:
            weight, distance_factor = self.genome.weights(tag)
            return distance_index * distance_factor + \
                weight * self.environment_weights[tag] * self.active_factors.get(tag, 1.0)
        return fallback

    # ---------------------------------------------------------------------

    def on_contact(self, world: World, other: Entity) -> None:
        if other.tag in POWERUP_CATEGORIES:
            if not self.abled:
                return
            world.destroy(other.id)
            if other.tag == "speed":
                self.activate_speed()
            elif other.tag == "multiplier":
                self.activate_multiplier()
            else:
                self.activate_pull(world)
            return

        gained = self.species.reward(other.tag)
        if gained > 0:
            self.points += gained * self.points_multiplier
            world.destroy(other.id)

    def activate_speed(self) -> None:
        if not self.abled:
            return
        self.speed_multiplier = self.powerups.speed_multiplier_power
        self.active_factors["speed"] = 0.0

    def activate_multiplier(self) -> None:
        if not self.abled:
            return
        self.points_multiplier = self.powerups.points_multiplier_power
        self.active_factors["multiplier"] = 0.0

    def activate_pull(self, world: World) -> int:
        """Pull every still-existing remembered object we are interested in. Returns how many."""
        if not self.abled:
            return 0
        n = 0
        for oid, utility in self.visible.items():
            if utility < 0 or not world.is_alive(oid):
                continue
            world.attach_pull(oid, self.entity.id, self.powerups.pull_power)
            n += 1
        logger.debug("vessel %d pulled %d objects", self.entity.id, n)
        return n
