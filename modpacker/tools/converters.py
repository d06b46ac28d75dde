"""Format converters: anything that can binarize and debinarize a file.

Every converter shells out to an external tool; the dispatcher in
``modpacker.pipeline.convert`` only depends on the ``FileConverter``
interface.
"""

from __future__ import annotations

import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from modpacker.core.errors import ToolExecutionError
from modpacker.core.logger import setup_logger
from modpacker.core.paths import validate_path

from .runner import run_tool

logger = setup_logger(__name__)


class FileConverter(ABC):
    """Converts a file between its editable and its binary representation."""

    @abstractmethod
    def binarize(self, source: Path, destination: Path) -> None:
        pass

    @abstractmethod
    def debinarize(self, source: Path, destination: Path) -> None:
        pass


class ImageConverter(FileConverter):
    """Texture codec: ``<tool> <source> <destination>`` in both directions."""

    def __init__(self, tool_path: str, timeout: Optional[float] = None):
        self.tool_path = tool_path
        self.timeout = timeout

    def binarize(self, source: Path, destination: Path) -> None:
        self._convert(source, destination)

    def debinarize(self, source: Path, destination: Path) -> None:
        self._convert(source, destination)

    def _convert(self, source: Path, destination: Path) -> None:
        validate_path(source, must_be_file=True, must_exist=True)
        placeholder = not destination.exists()
        # The codec expects its output file to exist already.
        validate_path(destination, must_be_file=True, create_if_missing=True)

        logger.info("Converting image %s to %s", source, destination)
        try:
            run_tool(
                self.tool_path,
                [source.resolve(), destination.resolve()],
                label=f"Image conversion of {source.name}",
                timeout=self.timeout,
            )
        except ToolExecutionError:
            if placeholder:
                destination.unlink(missing_ok=True)
            raise


class ConfigConverter(FileConverter):
    """Config compiler: ``-bin`` to binarize, ``-txt`` to debinarize."""

    def __init__(self, tool_path: str, timeout: Optional[float] = None):
        self.tool_path = tool_path
        self.timeout = timeout

    def binarize(self, source: Path, destination: Path) -> None:
        logger.info("Binarizing %s to %s", source, destination)
        run_tool(
            self.tool_path,
            ["-bin", "-dst", destination.resolve(), source.resolve()],
            label=f"Config binarization of {source.name}",
            timeout=self.timeout,
        )

    def debinarize(self, source: Path, destination: Path) -> None:
        logger.info("Debinarizing %s to %s", source, destination)
        run_tool(
            self.tool_path,
            ["-txt", "-dst", destination.resolve(), source.resolve()],
            label=f"Config debinarization of {source.name}",
            timeout=self.timeout,
        )


class SharedExtensionConverter(FileConverter):
    """Config compiler for formats whose text and binary forms share an extension.

    The compiler cannot write onto its own input, so conversion goes through a
    temporary extension: convert ``X.rvmat`` into ``X.brvmat``, delete the
    original, copy the temporary back onto ``X.rvmat`` and delete the temporary.
    """

    BINARIZE_SUFFIX = ".brvmat"
    DEBINARIZE_SUFFIX = ".dbrvmat"

    def __init__(self, inner: ConfigConverter):
        self.inner = inner

    def binarize(self, source: Path, destination: Path) -> None:
        self._two_phase(source, destination, self.BINARIZE_SUFFIX, self.inner.binarize)

    def debinarize(self, source: Path, destination: Path) -> None:
        self._two_phase(source, destination, self.DEBINARIZE_SUFFIX, self.inner.debinarize)

    def _two_phase(self, source: Path, destination: Path, temp_suffix: str, convert) -> None:
        temp_path = source.with_suffix(temp_suffix)
        try:
            convert(source, temp_path)
            source.unlink()
            shutil.copyfile(temp_path, destination)
        finally:
            temp_path.unlink(missing_ok=True)
