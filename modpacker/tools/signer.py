"""Detached-signature tool wrapper."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from modpacker.core.errors import SigningError
from modpacker.core.logger import setup_logger

from .runner import run_tool

logger = setup_logger(__name__)


class Signer:
    """Runs ``<tool> <private_key> <archive>`` inside the output folder."""

    def __init__(self, tool_path: str, timeout: Optional[float] = None):
        self.tool_path = tool_path
        self.timeout = timeout

    def sign(self, archive_path: Path, private_key_path: Path, output_dir: Path) -> None:
        if not private_key_path.is_file():
            raise SigningError(f"Cannot sign {archive_path.name}: private key not found: {private_key_path}")

        logger.info("Signing %s with %s", archive_path.name, private_key_path.name)
        run_tool(
            self.tool_path,
            [private_key_path.resolve(), archive_path.resolve()],
            label=f"Signing {archive_path.name}",
            cwd=output_dir,
            timeout=self.timeout,
            error_cls=SigningError,
        )
