"""Exception hierarchy for pack/unpack runs.

Filesystem failures surface as plain ``OSError``; everything the pipeline
itself decides is wrong derives from ``ModPackerError``.
"""

from typing import Optional, Sequence


class ModPackerError(Exception):
    """Base class for all modpacker errors."""

    pass


class PathValidationError(ModPackerError):
    """Raised when a path does not meet the requirements of a run."""

    def __init__(self, message: str, path=None):
        super().__init__(message)
        self.path = path


class PathNotFoundError(PathValidationError):
    """Raised when a required path does not exist."""

    pass


class PathTypeError(PathValidationError):
    """Raised when a path exists but is a file where a directory is required, or vice versa."""

    pass


class ToolExecutionError(ModPackerError):
    """Raised when an external tool cannot be started or exits non-zero."""

    def __init__(
        self,
        message: str,
        command: Optional[Sequence[str]] = None,
        returncode: Optional[int] = None,
        stdout: str = "",
        stderr: str = "",
    ):
        self.command = list(command) if command else []
        self.returncode = returncode
        self.stdout = stdout or ""
        self.stderr = stderr or ""
        super().__init__(self._compose(message))

    def _compose(self, message: str) -> str:
        parts = [message]
        if self.returncode is not None:
            parts.append(f"exit code: {self.returncode}")
        if self.stdout.strip():
            parts.append(f"stdout: {self.stdout.strip()}")
        if self.stderr.strip():
            parts.append(f"stderr: {self.stderr.strip()}")
        return "; ".join(parts)


class ToolTimeoutError(ToolExecutionError):
    """Raised when an external tool runs past its timeout and is killed."""

    pass


class SigningError(ToolExecutionError):
    """Raised when an archive cannot be signed."""

    pass


class UnknownFileTypeError(ModPackerError):
    """Raised when a file has no registered converter during pack."""

    def __init__(self, path, extension: str):
        self.path = path
        self.extension = extension
        label = extension or "<none>"
        super().__init__(
            f"Cannot convert {path}: extension {label} is not registered for conversion. "
            "Add the file to a .convertignore or remove it from the mod."
        )


class ManifestError(ModPackerError):
    """Raised when a build manifest or key descriptor cannot be read."""

    pass


class BuildUnitError(ModPackerError):
    """Raised when the set of build units is not well formed."""

    pass


class NestedBuildUnitError(BuildUnitError):
    """Raised when a build manifest sits inside another build unit."""

    pass


class InvariantViolation(ModPackerError):
    """Raised when an assumption of the pipeline itself does not hold.

    Distinct from environment problems: this indicates a bug or a source and
    destination combination the pipeline must never operate on.
    """

    pass


class PipelineCancelled(ModPackerError):
    """Raised when a run is cancelled between stages or build units."""

    pass


class SettingsError(ModPackerError):
    """Raised when the tool settings file is missing or malformed."""

    pass
