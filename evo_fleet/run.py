"""
CLI entry: evolve the fleets headless and print the last winners.
"""
import argparse
import logging

from evo_fleet.config import SimConfig, load_config
from evo_fleet.runner import evolve


def main(argv=None) -> None:
    ap = argparse.ArgumentParser(description="Evolve boats and pirates.")
    ap.add_argument("--generations", type=int, default=10)
    ap.add_argument("--config", default=None, help="JSON file overriding the defaults")
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--save-dir", default=None, help="where winner genomes are written")
    ap.add_argument("--log-level", default="INFO")
    args = ap.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    cfg = load_config(args.config) if args.config else SimConfig.default()
    if args.seed is not None:
        cfg.world.seed = args.seed
    if args.save_dir is not None:
        cfg.generation.save_dir = args.save_dir

    gm = evolve(cfg, generations=args.generations)
    for name, sub in gm.subpopulations.items():
        print(f"{name:>13}: last winner {sub.last_winner_points:.2f} points")


if __name__ == "__main__":
    main()
