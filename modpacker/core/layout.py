"""File names and folder shapes of a mod tree."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

ADDONS_DIR_NAME = "addons"
KEYS_DIR_NAME = "keys"

MOD_IGNORE_NAME = ".modignore"
CONVERT_IGNORE_NAME = ".convertignore"
BUILD_MANIFEST_NAME = "pbo.json"
KEY_DESCRIPTOR_NAME = "key.json"
STAGED_KEY_SUFFIX = "_key.json"

ARCHIVE_SUFFIX = ".pbo"
SIGNATURE_SUFFIX = ".bisign"
PUBLIC_KEY_SUFFIX = ".bikey"
PRIVATE_KEY_SUFFIX = ".biprivatekey"

# Files the pipeline itself reads; they are never handed to a converter.
CONTROL_FILE_NAMES = frozenset({MOD_IGNORE_NAME, CONVERT_IGNORE_NAME, BUILD_MANIFEST_NAME, KEY_DESCRIPTOR_NAME})
CONTROL_FILE_SUFFIXES = frozenset({PUBLIC_KEY_SUFFIX, PRIVATE_KEY_SUFFIX})


@dataclass(frozen=True)
class ModTree:
    """Root of a mod project plus its derived ``addons/`` and ``keys/`` folders."""

    root: Path

    @property
    def addons(self) -> Path:
        return self.root / ADDONS_DIR_NAME

    @property
    def keys(self) -> Path:
        return self.root / KEYS_DIR_NAME

    def archive_path(self, unit_dir: Path) -> Path:
        return self.addons / f"{unit_dir.name}{ARCHIVE_SUFFIX}"

    def staged_key_path(self, unit_name: str) -> Path:
        return self.addons / f"{unit_name}{STAGED_KEY_SUFFIX}"

    def private_key_path(self, authority: str) -> Path:
        return self.keys / f"{authority}{PRIVATE_KEY_SUFFIX}"


def is_control_file(path: Path) -> bool:
    return path.name in CONTROL_FILE_NAMES or path.suffix.lower() in CONTROL_FILE_SUFFIXES
