"""Cleanup of intermediate files once a pack run no longer needs them."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, List

from modpacker.core.layout import PRIVATE_KEY_SUFFIX, PUBLIC_KEY_SUFFIX, KEY_DESCRIPTOR_NAME
from modpacker.core.logger import setup_logger

from .walk import files_named, files_with_suffix

logger = setup_logger(__name__)


def _delete_all(paths: Iterable[Path], kind: str) -> List[Path]:
    deleted = []
    for path in paths:
        path.unlink()
        logger.debug("Deleted %s: %s", kind, path)
        deleted.append(path)
    return deleted


def delete_files_named(root: Path, name: str) -> List[Path]:
    if not root.is_dir():
        return []
    return _delete_all(files_named(root, name), name)


def delete_private_keys(keys_dir: Path) -> List[Path]:
    if not keys_dir.is_dir():
        return []
    return _delete_all(files_with_suffix(keys_dir, PRIVATE_KEY_SUFFIX), "private key")


def delete_unused_public_keys(keys_dir: Path, used_public_keys: Iterable[str]) -> List[Path]:
    """Delete every public key no signed archive refers to."""
    if not keys_dir.is_dir():
        return []
    used = set(used_public_keys)
    unused = [path for path in files_with_suffix(keys_dir, PUBLIC_KEY_SUFFIX) if path.name not in used]
    return _delete_all(unused, "unused public key")


def delete_staged_key_descriptors(addons_dir: Path, staged: Iterable[Path] = ()) -> List[Path]:
    """Delete the descriptors staged for signing plus a plain ``key.json`` in the addons folder.

    Other files in the addons folder are left alone, even when their names end
    in ``key.json``.
    """
    if not addons_dir.is_dir():
        return []
    candidates = sorted(set(staged) | {addons_dir / KEY_DESCRIPTOR_NAME})
    return _delete_all([path for path in candidates if path.is_file()], "key descriptor")


def prune_empty_directories(root: Path) -> List[Path]:
    """Remove empty directories below ``root`` bottom-up; ``root`` itself is kept."""
    removed = []
    for dirpath, _, _ in os.walk(root, topdown=False):
        directory = Path(dirpath)
        if directory == Path(root):
            continue
        if not any(directory.iterdir()):
            directory.rmdir()
            removed.append(directory)
    if removed:
        logger.debug("Removed %d empty folder(s) under %s", len(removed), root)
    return removed
