"""Extension-based dispatch to the format converters.

Pack direction is strict: every file reaching the dispatcher must have a
registered converter, otherwise the run aborts rather than ship an
unconverted asset. Unpack direction is best-effort: failures are logged and
the file is left as it was.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from modpacker.core.errors import ModPackerError, UnknownFileTypeError
from modpacker.core.layout import CONVERT_IGNORE_NAME, is_control_file
from modpacker.core.logger import setup_logger
from modpacker.tools import FileConverter, Toolchain

from .types import ConversionReport
from .walk import sorted_entries, walk_ignoring

logger = setup_logger(__name__)

IMAGE_SOURCE_SUFFIXES = (".pac", ".tga", ".jpg", ".png")

# Stem of the texture index the game writes next to packed textures; never a config.
TEXTURE_HEADERS_STEM = "texheaders"


@dataclass(frozen=True)
class ConversionRule:
    converter: FileConverter
    target_suffix: str


class ConversionDispatcher:
    def __init__(
        self,
        image_converter: FileConverter,
        config_converter: FileConverter,
        material_converter: FileConverter,
    ):
        self.binarize_rules: Dict[str, ConversionRule] = {
            suffix: ConversionRule(image_converter, ".paa") for suffix in IMAGE_SOURCE_SUFFIXES
        }
        self.binarize_rules[".cpp"] = ConversionRule(config_converter, ".bin")
        self.binarize_rules[".rvmat"] = ConversionRule(material_converter, ".rvmat")

        self.debinarize_rules: Dict[str, ConversionRule] = {
            ".paa": ConversionRule(image_converter, ".png"),
            ".bin": ConversionRule(config_converter, ".cpp"),
            ".rvmat": ConversionRule(material_converter, ".rvmat"),
        }

    @classmethod
    def from_toolchain(cls, toolchain: Toolchain) -> "ConversionDispatcher":
        return cls(toolchain.image_converter, toolchain.config_converter, toolchain.material_converter)

    def binarize_file(self, path: Path) -> Path:
        """Convert one source file to its binary form and delete the original.

        Raises:
            UnknownFileTypeError: If no converter is registered for the extension
            ToolExecutionError: If the converter fails
        """
        suffix = path.suffix.lower()
        rule = self.binarize_rules.get(suffix)
        if rule is None:
            raise UnknownFileTypeError(path, path.suffix)

        target = _target_path(path, rule)
        rule.converter.binarize(path, target)
        if target != path:
            path.unlink()
        return target

    def debinarize_file(self, path: Path) -> Optional[Path]:
        """Convert one built file back to its editable form.

        Returns the converted path, or None when the file is not convertible.
        """
        suffix = path.suffix.lower()
        if suffix == ".bin" and path.stem.lower() == TEXTURE_HEADERS_STEM:
            return None
        rule = self.debinarize_rules.get(suffix)
        if rule is None:
            return None

        target = _target_path(path, rule)
        rule.converter.debinarize(path, target)
        if target != path:
            path.unlink()
        return target


def _target_path(path: Path, rule: ConversionRule) -> Path:
    if path.suffix.lower() == rule.target_suffix:
        return path
    return path.with_suffix(rule.target_suffix)


def convert_raw_files(mod_root: Path, dispatcher: ConversionDispatcher) -> List[Path]:
    """Binarize every file under ``mod_root`` not excluded by a ``.convertignore``."""
    files = [
        path
        for path in walk_ignoring(mod_root, (CONVERT_IGNORE_NAME,))
        if not is_control_file(path)
    ]
    logger.info("Converting %d file(s) in %s", len(files), mod_root)

    converted = []
    for path in files:
        logger.debug("Converting: %s", path)
        converted.append(dispatcher.binarize_file(path))
    return converted


def convert_built_files(directory: Path, dispatcher: ConversionDispatcher) -> ConversionReport:
    """Debinarize every convertible file under ``directory``, logging failures."""
    report = ConversionReport()
    _convert_directory(directory, dispatcher, report)
    if report.failed:
        logger.warning("%d file(s) could not be converted and were left as-is", len(report.failed))
    return report


def _convert_directory(directory: Path, dispatcher: ConversionDispatcher, report: ConversionReport) -> None:
    for entry in sorted_entries(directory):
        path = Path(entry.path)
        if entry.is_dir(follow_symlinks=False):
            _convert_directory(path, dispatcher, report)
            continue

        try:
            converted = dispatcher.debinarize_file(path)
        except (ModPackerError, OSError) as e:
            logger.error("Error converting %s: %s", path, e)
            report.failed.append(path)
            report.errors.append(f"{path}: {e}")
            continue

        if converted is not None:
            report.converted.append(converted)
