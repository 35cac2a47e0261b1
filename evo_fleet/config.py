"""
Simulation configuration: defaults for a playable arena and a JSON loader.

A config file only needs the values it changes:

  {
    "generation": {"simulation_timer": 30.0, "mutation_chance": 15},
    "genomes": {"pirate": {"boat_weight": 4.0}},
    "regions": {"agents": {"boat": {"count": 12}}}
  }
"""
from dataclasses import dataclass, field, fields, replace
from typing import Dict, Any, List, Optional
import json

from .world import WorldConfig, Region
from .agents import PowerupConfig
from .evo import Genome

SUBPOPULATIONS = ("boat", "abled_boat", "pirate", "abled_pirate")


@dataclass
class GenerationConfig:
    mutation_factor: float = 0.5
    mutation_chance: float = 10.0      # percent, per gene
    boat_parent_size: int = 3
    pirate_parent_size: int = 3
    simulation_timer: float = 20.0     # seconds per generation
    dt: float = 0.05                   # seconds per tick
    generation_count: int = 0
    save_dir: Optional[str] = None
    mutate_senses: bool = False


def _boat_genome(abled: bool) -> Genome:
    g = Genome(sector_count=16, sight=10.0, moving_speed=5.0, exploration_range=(0.0, 1.0),
               box_weight=1.0, box_distance_factor=2.0,
               boat_weight=-0.2, boat_distance_factor=0.0,
               enemy_weight=-3.0, enemy_distance_factor=-2.0)
    if abled:
        g.speed_weight, g.speed_distance_factor, g.speed_environment_factor = 0.8, 1.0, 0.05
        g.pull_weight, g.pull_distance_factor, g.pull_environment_factor = 0.8, 1.0, 0.05
        g.multiplier_weight, g.multiplier_distance_factor, g.multiplier_environment_factor = 0.8, 1.0, 0.05
    return g


def _pirate_genome(abled: bool) -> Genome:
    g = Genome(sector_count=16, sight=12.0, moving_speed=4.5, exploration_range=(0.0, 1.0),
               box_weight=0.2, box_distance_factor=0.5,
               boat_weight=3.0, boat_distance_factor=3.0,
               enemy_weight=-0.2, enemy_distance_factor=0.0)
    if abled:
        g.speed_weight, g.speed_distance_factor, g.speed_environment_factor = 1.0, 1.0, 0.05
        g.pull_weight, g.pull_distance_factor, g.pull_environment_factor = 0.5, 1.0, 0.05
        g.multiplier_weight, g.multiplier_distance_factor, g.multiplier_environment_factor = 1.0, 1.0, 0.05
    return g


def default_genomes() -> Dict[str, Genome]:
    return {
        "boat": _boat_genome(False),
        "abled_boat": _boat_genome(True),
        "pirate": _pirate_genome(False),
        "abled_pirate": _pirate_genome(True),
    }


def default_resource_regions() -> List[Region]:
    return [
        Region("boxes_west", "box", 40, (5.0, 60.0, 5.0, 115.0)),
        Region("boxes_east", "box", 40, (60.0, 115.0, 5.0, 115.0)),
        Region("powerups_speed", "speed", 4, (10.0, 110.0, 10.0, 110.0)),
        Region("powerups_pull", "pull", 4, (10.0, 110.0, 10.0, 110.0)),
        Region("powerups_multiplier", "multiplier", 4, (10.0, 110.0, 10.0, 110.0)),
    ]


def default_agent_regions() -> Dict[str, Region]:
    return {
        "boat": Region("boat", "boat", 10, (5.0, 25.0, 5.0, 115.0), radius=1.0),
        "abled_boat": Region("abled_boat", "boat", 10, (5.0, 25.0, 5.0, 115.0), radius=1.0),
        "pirate": Region("pirate", "pirate", 6, (95.0, 115.0, 5.0, 115.0), radius=1.0),
        "abled_pirate": Region("abled_pirate", "pirate", 6, (95.0, 115.0, 5.0, 115.0), radius=1.0),
    }


@dataclass
class SimConfig:
    world: WorldConfig = field(default_factory=WorldConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)
    powerups: PowerupConfig = field(default_factory=PowerupConfig)
    genomes: Dict[str, Genome] = field(default_factory=default_genomes)
    resource_regions: List[Region] = field(default_factory=default_resource_regions)
    agent_regions: Dict[str, Region] = field(default_factory=default_agent_regions)

    @classmethod
    def default(cls) -> "SimConfig":
        return cls()

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "SimConfig":
        cfg = cls.default()
        unknown = set(raw) - {"world", "generation", "powerups", "genomes", "regions"}
        if unknown:
            raise ValueError(f"unknown config sections: {sorted(unknown)}")

        cfg.world = _override(cfg.world, raw.get("world", {}))
        cfg.generation = _override(cfg.generation, raw.get("generation", {}))
        cfg.powerups = _override(cfg.powerups, raw.get("powerups", {}))

        for name, genes in raw.get("genomes", {}).items():
            if name not in cfg.genomes:
                raise ValueError(f"unknown subpopulation: {name}")
            cfg.genomes[name] = Genome.from_dict({**cfg.genomes[name].to_dict(), **genes})

        regions = raw.get("regions", {})
        if "resources" in regions:
            cfg.resource_regions = [_region(r) for r in regions["resources"]]
        for name, values in regions.get("agents", {}).items():
            if name not in cfg.agent_regions:
                raise ValueError(f"unknown subpopulation: {name}")
            cfg.agent_regions[name] = _override(cfg.agent_regions[name], values)
        return cfg


def _override(obj, values: Dict[str, Any]):
    known = {f.name for f in fields(obj)}
    for key in values:
        if key not in known:
            raise ValueError(f"unknown {type(obj).__name__} key: {key}")
    if "bounds" in values:
        values = {**values, "bounds": tuple(values["bounds"])}
    return replace(obj, **values)


def _region(values: Dict[str, Any]) -> Region:
    return Region(name=values["name"], tag=values["tag"], count=int(values["count"]),
                  bounds=tuple(values["bounds"]), radius=float(values.get("radius", 0.5)))


def load_config(path: str) -> SimConfig:
    with open(path, encoding="utf-8") as fh:
        return SimConfig.from_dict(json.load(fh))
