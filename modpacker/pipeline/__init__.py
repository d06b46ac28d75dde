"""Mod pack/unpack pipelines.

This package is the public API surface for turning mod trees into shipped
mods and back.

Implementation lives in submodules:

- `types`: dataclasses shared across the pipelines
- `ignore` / `walk`: ignore manifests and the tree walkers
- `convert`: extension-based dispatch to the format converters
- `units`: build-unit discovery and validation
- `keys`: key descriptor staging and archive signing
- `prune`: cleanup of intermediate files
- `workers`: per-unit execution and cancellation
- `pack` / `unpack`: the two pipelines
"""

from __future__ import annotations

from .convert import ConversionDispatcher, convert_built_files, convert_raw_files
from .ignore import IgnoreManifest, IgnoreRule, is_ignored
from .keys import purge_stray_key_descriptors, resolve_signing_jobs, sign_archives, stage_key_descriptors
from .pack import ModPackPipeline
from .prune import (
    delete_files_named,
    delete_private_keys,
    delete_staged_key_descriptors,
    delete_unused_public_keys,
    prune_empty_directories,
)
from .steps import log_plan_steps, record_step
from .types import ConversionReport, PackResult, PlanStep, SigningJob, UnpackResult
from .units import UnitDiscovery, discover_build_units, validate_build_units
from .unpack import ModUnpackPipeline
from .walk import walk_ignoring, walk_matching

__all__ = [
    "ConversionDispatcher",
    "ConversionReport",
    "IgnoreManifest",
    "IgnoreRule",
    "ModPackPipeline",
    "ModUnpackPipeline",
    "PackResult",
    "PlanStep",
    "SigningJob",
    "UnitDiscovery",
    "UnpackResult",
    "convert_built_files",
    "convert_raw_files",
    "delete_files_named",
    "delete_private_keys",
    "delete_staged_key_descriptors",
    "delete_unused_public_keys",
    "discover_build_units",
    "is_ignored",
    "log_plan_steps",
    "prune_empty_directories",
    "purge_stray_key_descriptors",
    "record_step",
    "resolve_signing_jobs",
    "sign_archives",
    "stage_key_descriptors",
    "validate_build_units",
    "walk_ignoring",
    "walk_matching",
]
