"""
World: a flat arena (x/z plane, y up) of circular bodies.

Provides what the vessels need from their surroundings:
  - an entity registry with stable integer ids (dead ids resolve to None)
  - ray casts returning the nearest body hit
  - rectangular spawn regions that can be regenerated as a whole
  - Euler motion, contact detection and the transient "pull" behaviour

Tags:
  box, boat, pirate, speed, pull, multiplier
"""
from dataclasses import dataclass, field
from typing import Tuple, Dict, Any, List, Optional, Callable
import numpy as np


@dataclass
class WorldConfig:
    width: float = 120.0
    depth: float = 120.0
    seed: int = 7


@dataclass
class Region:
    name: str
    tag: str
    count: int
    bounds: Tuple[float, float, float, float]    # x_min, x_max, z_min, z_max
    radius: float = 0.5


@dataclass
class Entity:
    id: int
    tag: str
    pos: np.ndarray
    radius: float = 0.5
    velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))
    forward: np.ndarray = field(default_factory=lambda: np.array([0.0, 0.0, 1.0]))
    alive: bool = True
    region: Optional[str] = None
    component: Any = None


@dataclass
class RayHit:
    distance: float
    point: np.ndarray
    object_id: int
    tag: str


@dataclass
class Pull:
    object_id: int
    target_id: int
    speed: float


class World:
    def __init__(self, cfg: WorldConfig, rng: Optional[np.random.Generator] = None):
        self.cfg = cfg
        self.rng = rng if rng is not None else np.random.default_rng(cfg.seed)
        self.tick = 0

        self.entities: Dict[int, Entity] = {}
        self.next_id: int = 1
        self.pulls: List[Pull] = []

        # region name -> ids spawned by the last regenerate()
        self.region_members: Dict[str, List[int]] = {}

    # ---------- registry ----------
    def spawn(self, tag: str, pos, radius: float = 0.5, region: Optional[str] = None,
              forward=None) -> Entity:
        ent = Entity(id=self.next_id, tag=tag, pos=np.asarray(pos, dtype=float).copy(),
                     radius=float(radius), region=region)
        if forward is not None:
            ent.forward = np.asarray(forward, dtype=float).copy()
        self.entities[ent.id] = ent
        self.next_id += 1
        return ent

    def destroy(self, eid: int) -> None:
        ent = self.entities.pop(eid, None)
        if ent is not None:
            ent.alive = False
            ent.velocity = np.zeros(3)

    def get(self, eid: int) -> Optional[Entity]:
        ent = self.entities.get(eid)
        return ent if ent is not None and ent.alive else None

    def is_alive(self, eid: int) -> bool:
        return self.get(eid) is not None

    def alive(self, tag: Optional[str] = None) -> List[Entity]:
        return [e for e in self.entities.values() if tag is None or e.tag == tag]

    # ---------- regions ----------
    def regenerate(self, region: Region, factory: Optional[Callable[[Entity], Any]] = None) -> List[Entity]:
        """Replace everything the region spawned before with `region.count` fresh bodies."""
        for eid in self.region_members.get(region.name, []):
            self.destroy(eid)

        x0, x1, z0, z1 = region.bounds
        spawned: List[Entity] = []
        for _ in range(region.count):
            pos = (float(self.rng.uniform(x0, x1)), 0.0, float(self.rng.uniform(z0, z1)))
            yaw = float(self.rng.uniform(0.0, 2 * np.pi))
            ent = self.spawn(region.tag, pos, radius=region.radius, region=region.name,
                             forward=(np.sin(yaw), 0.0, np.cos(yaw)))
            if factory is not None:
                ent.component = factory(ent)
            spawned.append(ent)
        self.region_members[region.name] = [e.id for e in spawned]
        return spawned

    # ---------- sensing ----------
    def cast(self, origin, direction, max_distance: float, ignore: Optional[int] = None) -> Optional[RayHit]:
        """Nearest ray/circle intersection in the x/z plane, or None."""
        bodies = [e for e in self.entities.values() if e.id != ignore]
        if not bodies or max_distance <= 0:
            return None

        o = np.array([origin[0], origin[2]], dtype=float)
        d = np.array([direction[0], direction[2]], dtype=float)
        n = np.linalg.norm(d)
        if n < 1e-12:
            return None
        d /= n

        centers = np.array([[e.pos[0], e.pos[2]] for e in bodies])
        radii = np.array([e.radius for e in bodies])
        oc = centers - o
        t_mid = oc @ d
        dist2 = np.einsum("ij,ij->i", oc, oc) - t_mid ** 2
        half = np.sqrt(np.maximum(radii ** 2 - dist2, 0.0))
        t = np.where(t_mid - half >= 0.0, t_mid - half, t_mid + half)
        ok = (dist2 <= radii ** 2) & (t >= 0.0) & (t <= max_distance)
        if not ok.any():
            return None

        idx = int(np.argmin(np.where(ok, t, np.inf)))
        hit = bodies[idx]
        dist = float(t[idx])
        point = np.asarray(origin, dtype=float) + dist * np.array([d[0], 0.0, d[1]])
        return RayHit(distance=dist, point=point, object_id=hit.id, tag=hit.tag)

    # ---------- dynamics ----------
    def step(self, dt: float) -> None:
        self.tick += 1
        for ent in list(self.entities.values()):
            if not ent.velocity.any():
                continue
            ent.pos = ent.pos + ent.velocity * dt
            ent.pos[1] = 0.0
            self._clamp(ent)
        self._advance_pulls(dt)

    def _clamp(self, ent: Entity) -> None:
        ent.pos[0] = float(np.clip(ent.pos[0], 0.0, self.cfg.width))
        ent.pos[2] = float(np.clip(ent.pos[2], 0.0, self.cfg.depth))

    def contacts(self) -> List[Tuple[int, int]]:
        """(agent id, other id) for every overlapping pair where the first body hosts an agent."""
        ents = list(self.entities.values())
        if len(ents) < 2:
            return []
        xz = np.array([[e.pos[0], e.pos[2]] for e in ents])
        radii = np.array([e.radius for e in ents])
        out: List[Tuple[int, int]] = []
        for i, a in enumerate(ents):
            if a.component is None:
                continue
            dist = np.linalg.norm(xz - xz[i], axis=1)
            near = np.where(dist <= radii + radii[i])[0]
            out.extend((a.id, ents[j].id) for j in near if j != i)
        return out

    # ---------- pull ----------
    def attach_pull(self, object_id: int, target_id: int, speed: float) -> None:
        self.pulls.append(Pull(object_id=object_id, target_id=target_id, speed=float(speed)))

    def _advance_pulls(self, dt: float) -> None:
        keep: List[Pull] = []
        for p in self.pulls:
            obj, target = self.get(p.object_id), self.get(p.target_id)
            if obj is None or target is None:
                continue
            delta = target.pos - obj.pos
            dist = float(np.linalg.norm(delta))
            step = p.speed * dt
            if dist <= step:
                obj.pos = target.pos.copy()
                continue
            obj.pos = obj.pos + delta / dist * step
            keep.append(p)
        self.pulls = keep
