from dataclasses import replace

import numpy as np
import pytest

from evo_fleet.agents import Agent, BOAT, PIRATE
from evo_fleet.config import SimConfig
from evo_fleet.evo import Genome
from evo_fleet.world import World, WorldConfig, Region


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)


@pytest.fixture
def world(rng) -> World:
    return World(WorldConfig(width=100.0, depth=100.0, seed=5), rng=rng)


@pytest.fixture
def make_agent(world):
    """Spawn a vessel body at `pos` facing +z and attach an Agent to it."""
    def _make(genome=None, pos=(50.0, 0.0, 50.0), species=BOAT, abled=False, **kw):
        ent = world.spawn(species.tag, pos, radius=1.0, forward=(0.0, 0.0, 1.0))
        agent = Agent(entity=ent, genome=genome or Genome(), species=species, abled=abled, **kw)
        ent.component = agent
        return agent
    return _make


@pytest.fixture
def pirate(make_agent):
    return make_agent(species=PIRATE)


@pytest.fixture
def small_cfg() -> SimConfig:
    """Small arena, three vessels per subpopulation, short generations."""
    cfg = SimConfig.default()
    cfg.world = WorldConfig(width=40.0, depth=40.0, seed=3)
    cfg.resource_regions = [Region("boxes", "box", 5, (0.0, 40.0, 0.0, 40.0))]
    cfg.agent_regions = {name: replace(r, count=3, bounds=(0.0, 40.0, 0.0, 40.0))
                         for name, r in cfg.agent_regions.items()}
    cfg.generation.boat_parent_size = 2
    cfg.generation.pirate_parent_size = 2
    cfg.generation.simulation_timer = 0.5
    cfg.generation.dt = 0.1
    return cfg
