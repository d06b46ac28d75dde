"""Wrappers around the external tools a mod build depends on.

- `runner`: subprocess invocation with timeouts and captured output
- `converters`: image codec and config compiler behind one interface
- `archiver`: archive packer/unpacker
- `signer`: detached-signature generator
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from modpacker.config.settings import ToolPaths

from .archiver import ArchiveTool
from .converters import ConfigConverter, FileConverter, ImageConverter, SharedExtensionConverter
from .runner import run_tool
from .signer import Signer


@dataclass(frozen=True)
class Toolchain:
    image_converter: FileConverter
    config_converter: FileConverter
    material_converter: FileConverter
    archiver: ArchiveTool
    signer: Signer

    @classmethod
    def from_settings(
        cls,
        paths: ToolPaths,
        prefix: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> "Toolchain":
        return cls(
            image_converter=ImageConverter(paths.paa_converter_path, timeout=timeout),
            config_converter=ConfigConverter(paths.config_converter_path, timeout=timeout),
            material_converter=SharedExtensionConverter(
                ConfigConverter(paths.rvmat_converter_path, timeout=timeout)
            ),
            archiver=ArchiveTool(paths.pbo_packer_path, prefix=prefix, timeout=timeout),
            signer=Signer(paths.pbo_signer_path, timeout=timeout),
        )


__all__ = [
    "ArchiveTool",
    "ConfigConverter",
    "FileConverter",
    "ImageConverter",
    "SharedExtensionConverter",
    "Signer",
    "Toolchain",
    "run_tool",
]
