import numpy as np
import pytest

from evo_fleet.world import Region


def test_cast_returns_nearest_hit(world):
    near = world.spawn("box", (10.0, 0.0, 14.0), radius=1.0)
    world.spawn("boat", (10.0, 0.0, 20.0), radius=1.0)
    hit = world.cast((10.0, 0.0, 10.0), (0.0, 0.0, 1.0), 15.0)
    assert hit.object_id == near.id
    assert hit.tag == "box"
    assert hit.distance == pytest.approx(3.0)
    assert np.allclose(hit.point, [10.0, 0.0, 13.0])


def test_cast_respects_range_and_ignore(world):
    me = world.spawn("boat", (10.0, 0.0, 10.0), radius=1.0)
    world.spawn("box", (10.0, 0.0, 30.0), radius=1.0)
    assert world.cast(me.pos, (0.0, 0.0, 1.0), 15.0, ignore=me.id) is None
    assert world.cast(me.pos, (0.0, 0.0, -1.0), 50.0, ignore=me.id) is None
    assert world.cast(me.pos, (0.0, 0.0, 1.0), 50.0, ignore=me.id).distance == pytest.approx(19.0)


def test_cast_ignores_vertical_component(world):
    world.spawn("box", (10.0, 0.0, 14.0), radius=1.0)
    hit = world.cast((10.0, 0.0, 10.0), (0.0, 5.0, 1.0), 15.0)
    assert hit is not None


def test_destroyed_ids_resolve_to_none(world):
    box = world.spawn("box", (1.0, 0.0, 1.0))
    world.destroy(box.id)
    world.destroy(box.id)
    assert world.get(box.id) is None
    assert not box.alive
    assert world.cast((1.0, 0.0, 0.0), (0.0, 0.0, 1.0), 5.0) is None


def test_regenerate_replaces_previous_bodies(world):
    region = Region("boxes", "box", 5, (10.0, 20.0, 30.0, 40.0))
    first = world.regenerate(region)
    second = world.regenerate(region)
    assert len(world.alive("box")) == 5
    assert all(not world.is_alive(e.id) for e in first)
    for e in second:
        assert 10.0 <= e.pos[0] <= 20.0 and 30.0 <= e.pos[2] <= 40.0
        assert e.pos[1] == 0.0


def test_regenerate_attaches_components(world):
    region = Region("boats", "boat", 3, (0.0, 10.0, 0.0, 10.0), radius=1.0)
    spawned = world.regenerate(region, factory=lambda ent: ("vessel", ent.id))
    assert [e.component for e in spawned] == [("vessel", e.id) for e in spawned]


def test_step_moves_and_clamps(world):
    ent = world.spawn("boat", (99.0, 0.0, 50.0))
    ent.velocity = np.array([4.0, 0.0, 2.0])
    world.step(0.5)
    assert np.allclose(ent.pos, [100.0, 0.0, 51.0])
    assert world.tick == 1


def test_contacts_only_from_hosts(world):
    host = world.spawn("boat", (10.0, 0.0, 10.0), radius=1.0)
    host.component = object()
    box = world.spawn("box", (11.0, 0.0, 10.0), radius=0.5)
    world.spawn("box", (30.0, 0.0, 10.0), radius=0.5)
    assert world.contacts() == [(host.id, box.id)]


def test_pull_stops_when_target_is_gone(world):
    target = world.spawn("boat", (10.0, 0.0, 10.0))
    obj = world.spawn("box", (10.0, 0.0, 30.0))
    world.attach_pull(obj.id, target.id, 4.0)
    world.step(1.0)
    assert np.allclose(obj.pos, [10.0, 0.0, 26.0])
    world.destroy(target.id)
    world.step(1.0)
    assert np.allclose(obj.pos, [10.0, 0.0, 26.0])
    assert world.pulls == []


def test_pull_ends_on_arrival(world):
    target = world.spawn("boat", (10.0, 0.0, 10.0))
    obj = world.spawn("box", (10.0, 0.0, 12.0))
    world.attach_pull(obj.id, target.id, 4.0)
    world.step(1.0)
    assert np.allclose(obj.pos, target.pos)
    assert world.pulls == []
