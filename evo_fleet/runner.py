"""
Runner: the generation manager and a headless evolution loop.

Four subpopulations (boat, abled_boat, pirate, abled_pirate) share one arena
and one generation timer but never breed with each other. When the timer
elapses each subpopulation is ranked by points, its top K genomes become the
parent pool, and it is respawned from those parents with mutation.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Iterator
import logging
import numpy as np
from tqdm import trange

from .world import World, Region
from .agents import Agent, Species, SPECIES, PIRATE
from .evo import Genome
from .config import SimConfig, SUBPOPULATIONS
from .store import WinnerStore

logger = logging.getLogger(__name__)


@dataclass
class Subpopulation:
    name: str
    species: Species
    abled: bool
    region: Region
    template: Genome
    parent_size: int
    agents: List[Agent] = field(default_factory=list)
    parents: List[Genome] = field(default_factory=list)
    last_winner: Optional[Genome] = None
    last_winner_points: float = 0.0
    state: str = "uninitialized"

    def live(self, world: World) -> List[Agent]:
        return [a for a in self.agents if world.is_alive(a.id)]

    def ranked(self, world: World) -> List[Agent]:
        """Survivors, highest points first; ties keep spawn order."""
        return sorted(self.live(world))


class GenerationManager:
    def __init__(self, cfg: SimConfig, world: Optional[World] = None,
                 rng: Optional[np.random.Generator] = None, store: Optional[WinnerStore] = None):
        self.cfg = cfg
        self.rng = rng if rng is not None else np.random.default_rng(cfg.world.seed)
        self.world = world if world is not None else World(cfg.world, rng=self.rng)
        self.store = store if store is not None else WinnerStore(cfg.generation.save_dir)

        self.generation = cfg.generation.generation_count
        self.simulation_count = 0.0
        self.running = False

        gen = cfg.generation
        self.subpopulations: Dict[str, Subpopulation] = {}
        for name in SUBPOPULATIONS:
            species = SPECIES[name.replace("abled_", "")]
            self.subpopulations[name] = Subpopulation(
                name=name, species=species, abled=name.startswith("abled"),
                region=cfg.agent_regions[name], template=cfg.genomes[name],
                parent_size=gen.pirate_parent_size if species is PIRATE else gen.boat_parent_size,
            )

    # ---------- spawning ----------
    def generate_resources(self) -> None:
        """Boxes and powerups, shared by every subpopulation."""
        for region in self.cfg.resource_regions:
            self.world.regenerate(region)

    def _spawn(self, sub: Subpopulation) -> None:
        def factory(ent):
            return Agent(entity=ent, genome=sub.template.copy(), species=sub.species,
                         abled=sub.abled, powerups=self.cfg.powerups)

        gen = self.cfg.generation
        sub.agents = []
        for ent in self.world.regenerate(sub.region, factory=factory):
            agent: Agent = ent.component
            sub.agents.append(agent)
            if sub.parents:
                agent.birth(sub.parents[int(self.rng.integers(len(sub.parents)))])
            agent.mutate(self.rng, gen.mutation_factor, gen.mutation_chance, gen.mutate_senses)
            agent.awake_up()
        sub.state = "populated"
        logger.debug("spawned %d %s (parents: %d)", len(sub.agents), sub.name, len(sub.parents))

    def generate_objects(self) -> None:
        for sub in self.subpopulations.values():
            self._spawn(sub)

    # ---------- generations ----------
    def make_new_generation(self) -> None:
        """Rank, select parents, save winners and respawn every subpopulation."""
        self.generation += 1
        self.generate_resources()
        for sub in self.subpopulations.values():
            self._turnover(sub)

    def _turnover(self, sub: Subpopulation) -> None:
        ranked = sub.ranked(self.world)
        if not ranked:
            logger.warning("generation %d: no %s survived, reusing %d previous parents",
                           self.generation, sub.name, len(sub.parents))
            self._spawn(sub)
            return

        sub.state = "ranked"
        sub.parents = [a.data() for a in ranked[:sub.parent_size]]
        best = ranked[0]
        sub.last_winner = best.data()
        sub.last_winner_points = best.points
        self.store.save(sub.last_winner, f"{sub.name}-Gen-{self.generation}")
        logger.info("generation %d: last winner %s had %.2f points",
                    self.generation, sub.name, best.points)
        self._spawn(sub)

    # ---------- controls ----------
    def start_simulation(self) -> None:
        self.generate_resources()
        for sub in self.subpopulations.values():
            sub.parents = []
        self.generate_objects()
        self.simulation_count = 0.0
        self.running = True
        logger.info("simulation started at generation %d", self.generation)

    def continue_simulation(self) -> None:
        self.make_new_generation()
        self.simulation_count = 0.0
        self.running = True
        logger.info("simulation continued at generation %d", self.generation)

    def stop_simulation(self) -> None:
        self.running = False
        for sub in self.subpopulations.values():
            sub.agents = sub.live(self.world)
            for agent in sub.agents:
                agent.sleep()
        logger.info("simulation stopped at generation %d", self.generation)

    def activate_pull(self, agent_id: Optional[int] = None) -> int:
        """External pull trigger for one vessel, or every awake abled vessel."""
        pulled = 0
        for agent in self.agents():
            if agent.awake and agent.abled and (agent_id is None or agent.id == agent_id):
                pulled += agent.activate_pull(self.world)
        return pulled

    # ---------- loop ----------
    def agents(self) -> Iterator[Agent]:
        for sub in self.subpopulations.values():
            yield from sub.live(self.world)

    def tick(self, dt: Optional[float] = None) -> None:
        dt = self.cfg.generation.dt if dt is None else dt
        for agent in list(self.agents()):
            if agent.awake:
                agent.decide(self.world, self.rng)
        self.world.step(dt)
        self._dispatch_contacts()

        if self.running:
            if self.simulation_count >= self.cfg.generation.simulation_timer:
                self.make_new_generation()
                self.simulation_count = -dt
            self.simulation_count += dt

    def _dispatch_contacts(self) -> None:
        for agent_id, other_id in self.world.contacts():
            host, other = self.world.get(agent_id), self.world.get(other_id)
            if host is None or other is None:
                continue
            host.component.on_contact(self.world, other)


def evolve(cfg: SimConfig, generations: int = 10, rng: Optional[np.random.Generator] = None,
           store: Optional[WinnerStore] = None) -> GenerationManager:
    gm = GenerationManager(cfg, rng=rng, store=store)
    gm.start_simulation()
    for _ in trange(generations, desc="evolve"):
        start = gm.generation
        while gm.generation == start:
            gm.tick()
    gm.stop_simulation()
    return gm
