"""Archive tool wrapper: one build unit in, one ``.pbo`` out (and back)."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from modpacker.core.errors import ToolExecutionError
from modpacker.core.layout import BUILD_MANIFEST_NAME
from modpacker.core.logger import setup_logger
from modpacker.core.manifests import set_manifest_header
from modpacker.core.models import PREFIX_HEADER

from .runner import run_tool

logger = setup_logger(__name__)


class ArchiveTool:
    """Builds and extracts archives with the external packer.

    When ``prefix`` is set, every unit packed or unpacked gets its build
    manifest's ``prefix`` header set to it, so a round-tripped unit keeps the
    prefix it was shipped with.
    """

    def __init__(self, tool_path: str, prefix: Optional[str] = None, timeout: Optional[float] = None):
        self.tool_path = tool_path
        self.prefix = prefix
        self.timeout = timeout

    def pack(self, unit_dir: Path, archive_path: Path) -> Path:
        unit_dir = unit_dir.resolve()
        self.set_manifest_prefix(unit_dir)

        logger.info("Packing %s into %s", unit_dir.name, archive_path.name)
        run_tool(
            self.tool_path,
            ["pack", unit_dir],
            label=f"Packing {unit_dir.name}",
            cwd=archive_path.parent,
            timeout=self.timeout,
        )

        if not archive_path.exists():
            raise ToolExecutionError(f"Packing {unit_dir.name} did not produce {archive_path}")
        return archive_path

    def unpack(self, archive_path: Path, dest_dir: Path) -> Path:
        archive_path = archive_path.resolve()
        working_dir = dest_dir.parent
        working_dir.mkdir(parents=True, exist_ok=True)

        logger.info("Unpacking %s into %s", archive_path.name, dest_dir)
        run_tool(
            self.tool_path,
            ["unpack", archive_path],
            label=f"Unpacking {archive_path.name}",
            cwd=working_dir,
            timeout=self.timeout,
        )

        self.set_manifest_prefix(dest_dir)
        return dest_dir

    def set_manifest_prefix(self, unit_dir: Path) -> None:
        if not self.prefix:
            return
        set_manifest_header(unit_dir / BUILD_MANIFEST_NAME, PREFIX_HEADER, self.prefix)
