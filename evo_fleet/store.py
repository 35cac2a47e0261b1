"""
Winner store: one JSON file per (subpopulation, generation) champion genome.
"""
from pathlib import Path
from typing import Optional, Union
import json
import logging

from .evo import Genome

logger = logging.getLogger(__name__)


class WinnerStore:
    def __init__(self, directory: Optional[Union[str, Path]] = None):
        self.directory = Path(directory) if directory is not None else None

    def path(self, name: str) -> Path:
        if self.directory is None:
            raise ValueError("winner store has no directory")
        return self.directory / f"{name}.json"

    def save(self, genome: Genome, name: str) -> bool:
        """Write the genome; a failure is logged and reported, never raised."""
        if self.directory is None:
            return False
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with open(self.path(name), "w", encoding="utf-8") as fh:
                json.dump({"name": name, "genome": genome.to_dict()}, fh, indent=2)
        except OSError as exc:
            logger.warning("could not save winner %s: %s", name, exc)
            return False
        return True

    def load(self, name: str) -> Genome:
        with open(self.path(name), encoding="utf-8") as fh:
            return Genome.from_dict(json.load(fh)["genome"])
