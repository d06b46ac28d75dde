"""Subprocess invocation for the external tools."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import List, Optional, Sequence, Type

from modpacker.config import env
from modpacker.core.errors import ToolExecutionError, ToolTimeoutError
from modpacker.core.logger import setup_logger

logger = setup_logger(__name__)


def run_tool(
    tool: str,
    args: Sequence[str],
    label: str,
    cwd: Optional[Path] = None,
    timeout: Optional[float] = None,
    error_cls: Type[ToolExecutionError] = ToolExecutionError,
) -> subprocess.CompletedProcess:
    """Run an external tool and fail loudly on anything but a clean exit.

    Args:
        tool: Executable path or name
        args: Arguments passed after the executable
        label: Human-readable action used in log and error messages
        cwd: Working directory for the process
        timeout: Seconds before the process is killed (defaults to ``TOOL_TIMEOUT``)
        error_cls: Error raised on non-zero exit

    Returns:
        The completed process (stdout/stderr captured as text)

    Raises:
        ToolTimeoutError: If the tool exceeds its timeout
        ToolExecutionError: If the tool cannot be started or exits non-zero
    """
    command: List[str] = [str(tool), *[str(a) for a in args]]
    timeout = env.TOOL_TIMEOUT if timeout is None else timeout

    logger.debug("Running %s: %s (cwd=%s)", label, " ".join(command), cwd)

    try:
        result = subprocess.run(
            command,
            cwd=str(cwd) if cwd is not None else None,
            timeout=timeout,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except FileNotFoundError as e:
        raise error_cls(f"{label} failed: tool not found: {tool}", command=command) from e
    except PermissionError as e:
        raise error_cls(f"{label} failed: tool not executable: {tool}", command=command) from e
    except subprocess.TimeoutExpired as e:
        raise ToolTimeoutError(
            f"{label} timed out after {timeout}s",
            command=command,
            stdout=_as_text(e.stdout),
            stderr=_as_text(e.stderr),
        ) from e

    if result.stdout:
        logger.debug("%s stdout: %s", label, result.stdout.strip())

    if result.returncode != 0:
        logger.error("%s failed (exit code %s): %s", label, result.returncode, " ".join(command))
        raise error_cls(
            f"{label} failed",
            command=command,
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )

    return result


def _as_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value
