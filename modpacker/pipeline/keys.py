"""Key descriptors: stage them next to the archives, then sign with them.

Staging copies ``<unit>/key.json`` to ``addons/<unit>_key.json`` before the
unit folder is archived and deleted. After packing, each archive's staged
descriptor names the authority whose private key signs it. Archives without a
descriptor are shipped unsigned.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from threading import Event, Lock
from typing import Iterable, List, Optional, Set

from modpacker.core.layout import (
    ARCHIVE_SUFFIX,
    KEY_DESCRIPTOR_NAME,
    ModTree,
)
from modpacker.core.logger import setup_logger
from modpacker.core.manifests import read_key_descriptor
from modpacker.tools import Signer

from .types import SigningJob
from .walk import files_named, sorted_entries
from .workers import run_for_each

logger = setup_logger(__name__)


def stage_key_descriptors(units: Iterable[Path], tree: ModTree) -> List[Path]:
    """Copy each unit's ``key.json`` into the addons folder as ``<unit>_key.json``."""
    staged = []
    for unit in sorted(units):
        descriptor = unit / KEY_DESCRIPTOR_NAME
        if not descriptor.is_file():
            logger.debug("No key descriptor in %s, archive will be unsigned", unit.name)
            continue

        tree.addons.mkdir(parents=True, exist_ok=True)
        target = tree.staged_key_path(unit.name)
        shutil.copy2(str(descriptor), str(target))
        logger.debug("Staged key descriptor: %s -> %s", descriptor, target)
        staged.append(target)
    return staged


def purge_stray_key_descriptors(tree: ModTree) -> List[Path]:
    """Delete every ``key.json`` that is not directly inside the addons folder."""
    stray = [path for path in files_named(tree.root, KEY_DESCRIPTOR_NAME) if path.parent != tree.addons]
    for path in stray:
        path.unlink()
        logger.debug("Deleted key descriptor: %s", path)
    return stray


def resolve_signing_jobs(tree: ModTree) -> List[SigningJob]:
    """Pair every archive in the addons folder with the authority that signs it."""
    if not tree.addons.is_dir():
        return []

    jobs = []
    for entry in sorted_entries(tree.addons):
        archive = Path(entry.path)
        if not entry.is_file() or archive.suffix.lower() != ARCHIVE_SUFFIX:
            continue

        descriptor_path = tree.staged_key_path(archive.stem)
        if not descriptor_path.is_file():
            logger.info("No key descriptor for %s, shipping unsigned", archive.name)
            continue

        descriptor = read_key_descriptor(descriptor_path)
        jobs.append(SigningJob(archive_path=archive, authority_name=descriptor.authority_name))
    return jobs


def sign_archives(
    jobs: List[SigningJob],
    signer: Signer,
    tree: ModTree,
    max_workers: int = 1,
    cancel_flag: Optional[Event] = None,
    show_progress: bool = False,
) -> Set[str]:
    """Sign every job and return the public key names the signatures rely on."""
    used_public_keys: Set[str] = set()
    lock = Lock()

    def sign(job: SigningJob) -> None:
        signer.sign(job.archive_path, tree.private_key_path(job.authority_name), tree.addons)
        with lock:
            used_public_keys.add(job.public_key_name)

    run_for_each(
        jobs,
        sign,
        label=lambda job: f"signing {job.archive_path.name}",
        max_workers=max_workers,
        cancel_flag=cancel_flag,
        desc="Signing",
        show_progress=show_progress,
    )
    return used_public_keys
