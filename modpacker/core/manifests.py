"""Reading and writing the JSON manifests found in mod trees."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from modpacker.core.errors import ManifestError
from modpacker.core.logger import setup_logger
from modpacker.core.models import BuildManifest, KeyDescriptor

logger = setup_logger(__name__)


def _load_json(path: Path) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise ManifestError(f"invalid JSON ({e})") from e
        except UnicodeDecodeError as e:
            raise ManifestError(f"not valid UTF-8 ({e})") from e


def _dump_json(path: Path, data: Any) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def read_build_manifest(path: Path) -> BuildManifest:
    try:
        return BuildManifest.from_dict(_load_json(path))
    except ManifestError as e:
        raise ManifestError(f"{path}: {e}") from e


def write_build_manifest(path: Path, manifest: BuildManifest) -> None:
    _dump_json(path, manifest.to_dict())


def read_key_descriptor(path: Path) -> KeyDescriptor:
    try:
        return KeyDescriptor.from_dict(_load_json(path))
    except ManifestError as e:
        raise ManifestError(f"{path}: {e}") from e


def set_manifest_header(path: Path, name: str, value: str) -> BuildManifest:
    """Upsert a header in the manifest at ``path``, creating the manifest if absent."""
    manifest = read_build_manifest(path) if path.exists() else BuildManifest()
    manifest.upsert_header(name, value)
    write_build_manifest(path, manifest)
    logger.debug("Set header %s=%s in %s", name, value, path)
    return manifest
