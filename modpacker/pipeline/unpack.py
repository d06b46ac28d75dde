"""Unpack pipeline: distributable mod in, editable mod source out.

Everything up to and including archive expansion is fatal on failure.
Converting built files back to editable form is best-effort: failures are
logged and the file is left as shipped.
"""

from __future__ import annotations

from pathlib import Path
from threading import Event
from typing import List, Optional

from modpacker.core.layout import ARCHIVE_SUFFIX, SIGNATURE_SUFFIX, ModTree
from modpacker.core.logger import setup_logger
from modpacker.core.paths import check_source_and_destination, ensure_disjoint, relative_to_root
from modpacker.tools import ArchiveTool, Toolchain

from .convert import ConversionDispatcher, convert_built_files
from .steps import log_plan_steps, record_step
from .types import UnpackResult
from .walk import sorted_entries
from .workers import check_cancelled
from .workspace import copy_into, reset_destination

logger = setup_logger(__name__)

SKIPPED_COPY_SUFFIXES = (ARCHIVE_SUFFIX, SIGNATURE_SUFFIX)


class ModUnpackPipeline:
    def __init__(
        self,
        toolchain: Toolchain,
        cancel_flag: Optional[Event] = None,
    ):
        self.toolchain = toolchain
        self.dispatcher = ConversionDispatcher.from_toolchain(toolchain)
        self.cancel_flag = cancel_flag

    def unpack(self, source: Path, destination: Path) -> UnpackResult:
        source = Path(source).resolve()
        destination = Path(destination).resolve()
        tree = ModTree(destination)
        result = UnpackResult(destination=destination)
        steps = result.steps

        logger.info("Unpacking mod %s into %s", source, destination)

        ensure_disjoint(source, destination)
        reset_destination(destination)
        record_step(steps, "reset_destination", path=str(destination))

        check_source_and_destination(source, destination)
        record_step(steps, "validate_paths", source=str(source), destination=str(destination))

        tree.addons.mkdir(parents=True, exist_ok=True)
        tree.keys.mkdir(parents=True, exist_ok=True)
        record_step(steps, "create_output_folders")
        check_cancelled(self.cancel_flag, "after creating output folders")

        copy_non_archive_files(source, source, destination, result.copied_files)
        record_step(steps, "copy_non_archive_files", count=len(result.copied_files))
        check_cancelled(self.cancel_flag, "after copying files")

        expand_archives(
            source,
            source,
            destination,
            self.toolchain.archiver,
            result.unpacked_units,
            self.cancel_flag,
        )
        record_step(steps, "expand_archives", units=[unit.name for unit in result.unpacked_units])
        check_cancelled(self.cancel_flag, "after expanding archives")

        result.conversion = convert_built_files(destination, self.dispatcher)
        record_step(
            steps,
            "convert_built_files",
            converted=len(result.conversion.converted),
            failed=len(result.conversion.failed),
        )

        log_plan_steps(f"unpack {source.name}", steps)
        logger.info(
            "Unpacked %d archive(s) into %s (%d file(s) converted, %d left as-is)",
            len(result.unpacked_units),
            destination,
            len(result.conversion.converted),
            len(result.conversion.failed),
        )
        return result


def copy_non_archive_files(directory: Path, source_root: Path, destination_root: Path, copied: List[Path]) -> None:
    """Mirror every file except archives and signatures into ``destination_root``."""
    for entry in sorted_entries(directory):
        path = Path(entry.path)
        if entry.is_dir(follow_symlinks=False):
            copy_non_archive_files(path, source_root, destination_root, copied)
        elif entry.is_file():
            if path.suffix.lower() in SKIPPED_COPY_SUFFIXES:
                continue
            copied.append(copy_into(path, source_root, destination_root))


def expand_archives(
    directory: Path,
    source_root: Path,
    destination_root: Path,
    archiver: ArchiveTool,
    unpacked: List[Path],
    cancel_flag: Optional[Event] = None,
) -> None:
    """Unpack every ``X.pbo`` into folder ``X`` at the mirrored location."""
    for entry in sorted_entries(directory):
        path = Path(entry.path)
        if entry.is_dir(follow_symlinks=False):
            expand_archives(path, source_root, destination_root, archiver, unpacked, cancel_flag)
        elif entry.is_file() and path.suffix.lower() == ARCHIVE_SUFFIX:
            check_cancelled(cancel_flag, f"before unpacking {path.name}")
            mirrored_dir = destination_root / relative_to_root(directory, source_root)
            unpacked.append(archiver.unpack(path, mirrored_dir / path.stem))
