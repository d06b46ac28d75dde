"""Depth-first file traversal of mod trees.

Both walkers are lazy and only ever yield files. Entries are visited in name
order so repeated runs see the tree the same way. Listing errors propagate and
end the walk.

Symlinked directories are not descended into.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from .ignore import IgnoreManifest, is_ignored

PathPredicate = Callable[[Path], bool]


def sorted_entries(directory: Path) -> List[os.DirEntry]:
    with os.scandir(directory) as it:
        return sorted(it, key=lambda entry: entry.name)


def walk_ignoring(root: Path, manifest_names: Sequence[str]) -> Iterator[Path]:
    """Yield files under ``root`` that no ignore manifest excludes.

    Manifest files named in ``manifest_names`` are read from every directory on
    the way down and are never yielded themselves.
    """
    yield from _walk_ignoring(Path(root), tuple(manifest_names), ())


def _walk_ignoring(
    directory: Path,
    manifest_names: Tuple[str, ...],
    inherited: Tuple[IgnoreManifest, ...],
) -> Iterator[Path]:
    manifests = list(inherited)
    for name in manifest_names:
        candidate = directory / name
        if candidate.is_file():
            manifests.append(IgnoreManifest.load(candidate))
    active = tuple(manifests)

    for entry in sorted_entries(directory):
        path = Path(entry.path)
        if entry.is_dir(follow_symlinks=False):
            if not is_ignored(active, path, is_dir=True):
                yield from _walk_ignoring(path, manifest_names, active)
        elif entry.is_file():
            if entry.name in manifest_names or is_ignored(active, path, is_dir=False):
                continue
            yield path


def walk_matching(
    root: Path,
    accept: PathPredicate,
    descend: Optional[PathPredicate] = None,
) -> Iterator[Path]:
    """Yield files for which ``accept`` is true.

    Directories are always entered unless ``descend`` is given and rejects them.
    """
    for entry in sorted_entries(Path(root)):
        path = Path(entry.path)
        if entry.is_dir(follow_symlinks=False):
            if descend is None or descend(path):
                yield from walk_matching(path, accept, descend)
        elif entry.is_file() and accept(path):
            yield path


def files_named(root: Path, name: str) -> List[Path]:
    return list(walk_matching(root, lambda path: path.name == name))


def files_with_suffix(root: Path, suffix: str) -> List[Path]:
    suffix = suffix.lower()
    return list(walk_matching(root, lambda path: path.suffix.lower() == suffix))
