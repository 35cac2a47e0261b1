import numpy as np
import pytest

from evo_fleet.evo import Genome, birth, mutate, powerup_genes, base_genes


def _powered(value: float) -> Genome:
    g = Genome()
    for name in powerup_genes():
        setattr(g, name, value)
    return g


def test_angular_step_follows_sector_count():
    g = Genome(sector_count=8)
    assert g.angular_step == 45.0
    g.sector_count = 12
    assert g.angular_step == 30.0


def test_sector_count_must_be_positive():
    with pytest.raises(ValueError):
        Genome(sector_count=0)


@pytest.mark.parametrize("factor", [0.1, 1.0, 50.0, 1e6])
def test_powerup_genes_never_negative(factor):
    rng = np.random.default_rng(0)
    for _ in range(200):
        g = mutate(_powered(0.01), rng, factor=factor, chance=100.0)
        assert all(getattr(g, name) >= 0.0 for name in powerup_genes())


def test_negative_powerup_gene_is_clamped_even_without_mutation():
    g = _powered(-2.0)
    mutate(g, np.random.default_rng(0), factor=1.0, chance=-1.0)
    assert all(getattr(g, name) == 0.0 for name in powerup_genes())


def test_base_genes_are_not_clamped():
    rng = np.random.default_rng(1)
    values = []
    for _ in range(50):
        g = mutate(Genome(box_weight=0.0), rng, factor=10.0, chance=100.0)
        values.append(g.box_weight)
    assert min(values) < 0.0


def test_disabled_mutation_leaves_powerups_alone():
    g = _powered(0.0)
    mutate(g, np.random.default_rng(2), factor=5.0, chance=100.0, abled=False)
    assert all(getattr(g, name) == 0.0 for name in powerup_genes())


def test_environment_factor_moves_a_tenth():
    rng = np.random.default_rng(3)
    for _ in range(100):
        g = mutate(_powered(5.0), rng, factor=1.0, chance=100.0)
        for cat in ("speed", "pull", "multiplier"):
            assert abs(g.environment_factor(cat) - 5.0) <= 0.1 + 1e-9
            assert abs(getattr(g, f"{cat}_weight") - 5.0) <= 1.0 + 1e-9


def test_senses_fixed_by_default():
    g = Genome(sector_count=16, sight=10.0, moving_speed=5.0)
    mutate(g, np.random.default_rng(4), factor=3.0, chance=100.0)
    assert (g.sector_count, g.sight, g.moving_speed) == (16, 10.0, 5.0)


def test_sense_mutation_keeps_fan_closed():
    rng = np.random.default_rng(5)
    g = Genome(sector_count=3)
    for _ in range(300):
        mutate(g, rng, factor=4.0, chance=100.0, mutate_senses=True)
        assert g.sector_count >= 1
        assert g.sight >= 0.1
        assert g.moving_speed >= 1.0
        assert g.angular_step * g.sector_count == pytest.approx(360.0)


def test_chance_controls_which_genes_move():
    g = Genome()
    before = g.to_dict()
    mutate(g, np.random.default_rng(6), factor=1.0, chance=-1.0)
    assert g.to_dict() == before


def test_birth_copies_by_value():
    parent = _powered(0.7)
    parent.box_weight = 3.5
    parent.exploration_range = (1.0, 2.0)
    child = birth(Genome(), parent, abled=True)
    parent.box_weight = -1.0
    assert child.box_weight == 3.5
    assert child.exploration_range == (1.0, 2.0)
    assert child.speed_weight == 0.7


def test_birth_disabled_never_inherits_powerups():
    child = birth(_powered(0.3), _powered(9.0), abled=False)
    assert all(getattr(child, name) == 0.0 for name in powerup_genes())
    assert all(getattr(child, name) == getattr(Genome(), name) for name in base_genes())


def test_from_dict_rejects_unknown_fields():
    with pytest.raises(ValueError):
        Genome.from_dict({"wings": 2})
