from evo_fleet.evo import Genome
from evo_fleet.store import WinnerStore


def test_save_and_load(tmp_path):
    store = WinnerStore(tmp_path / "winners")
    g = Genome(sector_count=12, exploration_range=(-1.0, 2.5), box_weight=0.25, pull_weight=1.5)
    assert store.save(g, "boat-Gen-3")
    assert (tmp_path / "winners" / "boat-Gen-3.json").exists()
    assert store.load("boat-Gen-3") == g


def test_store_without_directory_skips_saving():
    assert WinnerStore().save(Genome(), "boat-Gen-1") is False
