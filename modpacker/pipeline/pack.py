"""Pack pipeline: editable mod source in, distributable mod out.

Stages run strictly in order and the first failure ends the run. The
destination is reset at the start of every run, so a failed run leaves a
partial tree that the next run discards.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from threading import Event
from typing import List, Optional

from modpacker.core.errors import NestedBuildUnitError
from modpacker.core.layout import CONVERT_IGNORE_NAME, MOD_IGNORE_NAME, ModTree
from modpacker.core.logger import setup_logger
from modpacker.core.paths import check_source_and_destination, ensure_disjoint
from modpacker.tools import Toolchain

from .convert import ConversionDispatcher, convert_raw_files
from .keys import purge_stray_key_descriptors, resolve_signing_jobs, sign_archives, stage_key_descriptors
from .prune import (
    delete_files_named,
    delete_private_keys,
    delete_staged_key_descriptors,
    delete_unused_public_keys,
    prune_empty_directories,
)
from .steps import log_plan_steps, record_step
from .types import PackResult
from .units import discover_build_units, validate_build_units
from .walk import walk_ignoring
from .workers import check_cancelled, run_for_each
from .workspace import copy_into, reset_destination

logger = setup_logger(__name__)


class ModPackPipeline:
    """Builds a distributable mod from a source tree.

    Args:
        toolchain: External tools used for conversion, packing and signing
        max_workers: Build units packed and archives signed concurrently
        cancel_flag: Checked between stages and before each build unit
        allow_nested_units: Log and ignore build manifests nested inside
            another unit instead of failing
        show_progress: Show progress bars while packing and signing
    """

    def __init__(
        self,
        toolchain: Toolchain,
        max_workers: int = 1,
        cancel_flag: Optional[Event] = None,
        allow_nested_units: bool = False,
        show_progress: bool = False,
    ):
        self.toolchain = toolchain
        self.dispatcher = ConversionDispatcher.from_toolchain(toolchain)
        self.max_workers = max(1, max_workers)
        self.cancel_flag = cancel_flag
        self.allow_nested_units = allow_nested_units
        self.show_progress = show_progress

    def pack(self, source: Path, destination: Path) -> PackResult:
        source = Path(source).resolve()
        destination = Path(destination).resolve()
        tree = ModTree(destination)
        result = PackResult(destination=destination)
        steps = result.steps

        logger.info("Packing mod %s into %s", source, destination)

        ensure_disjoint(source, destination)
        reset_destination(destination)
        record_step(steps, "reset_destination", path=str(destination))

        check_source_and_destination(source, destination)
        record_step(steps, "validate_paths", source=str(source), destination=str(destination))
        self._checkpoint("validating paths")

        copied = self.copy_raw_files(source, destination)
        record_step(steps, "copy_raw_files", count=len(copied))
        self._checkpoint("copying files")

        delete_files_named(destination, MOD_IGNORE_NAME)
        record_step(steps, "delete_mod_ignore_files")

        result.converted_files = convert_raw_files(destination, self.dispatcher)
        record_step(steps, "convert_raw_files", count=len(result.converted_files))
        self._checkpoint("converting files")

        delete_files_named(destination, CONVERT_IGNORE_NAME)
        record_step(steps, "delete_convert_ignore_files")

        units = self.discover_units(tree)
        record_step(steps, "discover_build_units", units=[unit.name for unit in units])

        staged_descriptors = stage_key_descriptors(units, tree)
        record_step(steps, "stage_key_descriptors")
        purge_stray_key_descriptors(tree)
        record_step(steps, "purge_stray_key_descriptors")
        self._checkpoint("staging key descriptors")

        result.archives = self.pack_units(units, tree)
        record_step(steps, "pack_units", archives=[archive.name for archive in result.archives])

        for unit in units:
            shutil.rmtree(unit)
        record_step(steps, "delete_unit_sources")
        self._checkpoint("packing build units")

        jobs = resolve_signing_jobs(tree)
        used_keys = sign_archives(
            jobs,
            self.toolchain.signer,
            tree,
            max_workers=self.max_workers,
            cancel_flag=self.cancel_flag,
            show_progress=self.show_progress,
        )
        result.signed_archives = [job.archive_path for job in jobs]
        result.used_public_keys = sorted(used_keys)
        record_step(steps, "sign_archives", signed=len(jobs))

        delete_private_keys(tree.keys)
        record_step(steps, "delete_private_keys")
        delete_unused_public_keys(tree.keys, used_keys)
        record_step(steps, "delete_unused_public_keys", kept=result.used_public_keys)
        delete_staged_key_descriptors(tree.addons, staged_descriptors)
        record_step(steps, "delete_staged_key_descriptors")
        prune_empty_directories(destination)
        record_step(steps, "prune_empty_directories")

        log_plan_steps(f"pack {source.name}", steps)
        logger.info(
            "Packed %d archive(s), %d signed, into %s",
            len(result.archives),
            len(result.signed_archives),
            destination,
        )
        return result

    def copy_raw_files(self, source: Path, destination: Path) -> List[Path]:
        """Copy every file ``.modignore`` does not exclude, keeping relative paths."""
        copied = [copy_into(path, source, destination) for path in walk_ignoring(source, (MOD_IGNORE_NAME,))]
        logger.info("Copied %d file(s) from %s", len(copied), source)
        return copied

    def discover_units(self, tree: ModTree) -> List[Path]:
        discovery = discover_build_units(tree.root)
        if discovery.nested_manifests:
            nested = ", ".join(str(path) for path in discovery.nested_manifests)
            if not self.allow_nested_units:
                raise NestedBuildUnitError(f"Build manifests nested inside another build unit: {nested}")
            logger.warning("Ignoring nested build manifests: %s", nested)

        units = discovery.sorted_units()
        validate_build_units(units, tree)
        return units

    def pack_units(self, units: List[Path], tree: ModTree) -> List[Path]:
        if not units:
            return []

        tree.addons.mkdir(parents=True, exist_ok=True)
        archiver = self.toolchain.archiver
        run_for_each(
            units,
            lambda unit: archiver.pack(unit, tree.archive_path(unit)),
            label=lambda unit: f"packing {unit.name}",
            max_workers=self.max_workers,
            cancel_flag=self.cancel_flag,
            desc="Packing",
            show_progress=self.show_progress,
        )
        return [tree.archive_path(unit) for unit in units]

    def _checkpoint(self, stage: str) -> None:
        check_cancelled(self.cancel_flag, f"after {stage}")
