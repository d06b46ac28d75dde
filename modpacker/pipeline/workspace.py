from __future__ import annotations

import shutil
from pathlib import Path

from modpacker.core.errors import PathTypeError
from modpacker.core.logger import setup_logger
from modpacker.core.paths import relative_to_root

logger = setup_logger(__name__)


def reset_destination(destination: Path) -> None:
    """Delete a previous run's output so every run starts from an empty folder.

    Only a directory is ever removed; a file in its place is an error.
    """
    if destination.is_symlink() or destination.is_file():
        raise PathTypeError(f"Destination is not a directory: {destination}", destination)
    if destination.is_dir():
        logger.info("Clearing destination: %s", destination)
        shutil.rmtree(destination)


def copy_into(path: Path, source_root: Path, destination_root: Path) -> Path:
    """Copy one walked file to the same relative location under ``destination_root``."""
    target = destination_root / relative_to_root(path, source_root)
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(str(path), str(target))
    return target
