"""Build-unit discovery: every directory holding a ``pbo.json`` becomes one archive."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, Iterable, List, Tuple

from modpacker.core.errors import BuildUnitError
from modpacker.core.layout import BUILD_MANIFEST_NAME, ModTree
from modpacker.core.logger import setup_logger

from .walk import files_named

logger = setup_logger(__name__)


@dataclass(frozen=True)
class UnitDiscovery:
    units: FrozenSet[Path]
    nested_manifests: Tuple[Path, ...] = ()

    def sorted_units(self) -> List[Path]:
        return sorted(self.units)


def _has_claimed_ancestor(directory: Path, claimed: Iterable[Path]) -> bool:
    return any(directory != other and other in directory.parents for other in claimed)


def discover_build_units(mod_root: Path) -> UnitDiscovery:
    """Find build units under ``mod_root``.

    A manifest inside a directory that already holds a manifest does not start
    a unit of its own; it is reported in ``nested_manifests`` instead. The
    result does not depend on traversal order.
    """
    manifest_dirs = {manifest.parent for manifest in files_named(mod_root, BUILD_MANIFEST_NAME)}

    units = set()
    nested = []
    for directory in sorted(manifest_dirs):
        if _has_claimed_ancestor(directory, manifest_dirs):
            nested.append(directory / BUILD_MANIFEST_NAME)
            logger.debug("Ignoring nested build manifest: %s", directory / BUILD_MANIFEST_NAME)
        else:
            units.add(directory)

    logger.info("Found %d build unit(s) in %s", len(units), mod_root)
    return UnitDiscovery(units=frozenset(units), nested_manifests=tuple(nested))


def validate_build_units(units: Iterable[Path], tree: ModTree) -> None:
    """Reject unit sets that cannot be packed into distinct archives.

    Raises:
        BuildUnitError: If a unit is the mod root or one of its output folders,
            or if two units would produce the same archive name
    """
    units = list(units)
    reserved = {tree.root, tree.addons, tree.keys}
    for unit in units:
        if unit in reserved:
            raise BuildUnitError(f"Build manifest not allowed directly in {unit}")

    counts = Counter(unit.name for unit in units)
    duplicates = sorted(name for name, count in counts.items() if count > 1)
    if duplicates:
        raise BuildUnitError(
            f"Several build units share a folder name and would overwrite each other: {', '.join(duplicates)}"
        )
