"""Path checks run before any destructive step of a pipeline."""

from __future__ import annotations

from pathlib import Path

from modpacker.core.errors import InvariantViolation, PathNotFoundError, PathTypeError
from modpacker.core.logger import setup_logger

logger = setup_logger(__name__)


def validate_path(
    path: Path,
    must_be_dir: bool = False,
    must_be_file: bool = False,
    must_exist: bool = False,
    create_if_missing: bool = False,
) -> None:
    """Check that ``path`` exists with the right kind, creating it on request.

    Args:
        path: Path to check
        must_be_dir: The path must be a directory
        must_be_file: The path must be a regular file
        must_exist: Fail if the path does not exist
        create_if_missing: Create the directory, or the parent directories plus
            an empty file, when the path does not exist

    Raises:
        PathNotFoundError: If ``must_exist`` and the path is absent
        PathTypeError: If an existing path is the wrong kind
    """
    path = Path(path)

    if not path.exists():
        if must_exist:
            raise PathNotFoundError(f"Path doesn't exist: {path}", path)
        if create_if_missing:
            if must_be_dir:
                path.mkdir(parents=True, exist_ok=True)
            else:
                path.parent.mkdir(parents=True, exist_ok=True)
                if must_be_file:
                    path.touch()
            logger.debug("Created missing path: %s", path)
        return

    if must_be_dir and not path.is_dir():
        raise PathTypeError(f"Path is not a directory: {path}", path)
    if must_be_file and not path.is_file():
        raise PathTypeError(f"Path is not a file: {path}", path)


def check_source_and_destination(
    source: Path,
    destination: Path,
    source_is_dir: bool = True,
    destination_is_dir: bool = True,
) -> None:
    """Source must already exist; destination is created if it does not."""
    validate_path(source, must_be_dir=source_is_dir, must_be_file=not source_is_dir, must_exist=True)
    validate_path(
        destination,
        must_be_dir=destination_is_dir,
        must_be_file=not destination_is_dir,
        create_if_missing=True,
    )


def is_within(path: Path, root: Path) -> bool:
    """True if ``path`` is ``root`` or lies beneath it (after resolving)."""
    try:
        Path(path).resolve().relative_to(Path(root).resolve())
        return True
    except (OSError, ValueError):
        return False


def ensure_disjoint(source: Path, destination: Path) -> None:
    """Refuse source/destination pairs where resetting one would touch the other."""
    if is_within(destination, source) or is_within(source, destination):
        raise InvariantViolation(
            f"Source {source} and destination {destination} must not contain each other"
        )


def relative_to_root(path: Path, root: Path) -> Path:
    """Relative path of a walked entry; entries outside their root are a pipeline bug."""
    try:
        return Path(path).relative_to(root)
    except ValueError:
        raise InvariantViolation(f"File path {path} is not inside root path {root}") from None
