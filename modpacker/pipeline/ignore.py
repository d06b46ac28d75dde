"""Ignore manifests (``.modignore``, ``.convertignore``).

Rules follow gitignore conventions:

- blank lines and lines starting with ``#`` are skipped
- ``!`` re-includes what an earlier rule excluded
- a trailing ``/`` only matches directories
- a pattern containing ``/`` is anchored to the manifest's directory,
  otherwise it matches an entry name at any depth below it
- ``*``, ``?`` and ``[...]`` match within one path segment, ``**`` spans segments

A manifest only affects the subtree rooted at its own directory. When several
manifests apply, deeper manifests and later rules win.
"""

from __future__ import annotations

from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from modpacker.core.errors import ManifestError


@dataclass(frozen=True)
class IgnoreRule:
    segments: Tuple[str, ...]
    negated: bool = False
    dir_only: bool = False
    anchored: bool = False

    @classmethod
    def parse(cls, line: str) -> Optional["IgnoreRule"]:
        line = line.rstrip()
        if not line or line.startswith("#"):
            return None

        negated = line.startswith("!")
        if negated:
            line = line[1:]
        if line.startswith("\\"):
            line = line[1:]

        dir_only = line.endswith("/")
        line = line.rstrip("/")
        anchored = "/" in line
        line = line.lstrip("/")
        if not line:
            return None

        return cls(segments=tuple(line.split("/")), negated=negated, dir_only=dir_only, anchored=anchored)

    def matches(self, parts: Sequence[str], is_dir: bool) -> bool:
        if self.dir_only and not is_dir:
            return False
        if not parts:
            return False
        if self.anchored:
            return _match_segments(self.segments, tuple(parts))
        return fnmatchcase(parts[-1], self.segments[0])


def _match_segments(pattern: Tuple[str, ...], parts: Tuple[str, ...]) -> bool:
    if not pattern:
        return not parts
    head = pattern[0]
    if head == "**":
        return any(_match_segments(pattern[1:], parts[i:]) for i in range(len(parts) + 1))
    if not parts:
        return False
    return fnmatchcase(parts[0], head) and _match_segments(pattern[1:], parts[1:])


def parse_rules(lines: Iterable[str]) -> List[IgnoreRule]:
    rules = []
    for line in lines:
        rule = IgnoreRule.parse(line)
        if rule is not None:
            rules.append(rule)
    return rules


@dataclass(frozen=True)
class IgnoreManifest:
    base_dir: Path
    rules: Tuple[IgnoreRule, ...]

    @classmethod
    def load(cls, manifest_path: Path) -> "IgnoreManifest":
        try:
            with open(manifest_path, "r", encoding="utf-8") as f:
                rules = parse_rules(f)
        except UnicodeDecodeError as e:
            raise ManifestError(f"{manifest_path}: not valid UTF-8 ({e})") from e
        return cls(base_dir=manifest_path.parent, rules=tuple(rules))

    def verdict(self, path: Path, is_dir: bool) -> Optional[bool]:
        """True if ignored, False if re-included, None if no rule matches."""
        try:
            parts = path.relative_to(self.base_dir).parts
        except ValueError:
            return None

        result = None
        for rule in self.rules:
            if rule.matches(parts, is_dir):
                result = not rule.negated
        return result


def is_ignored(manifests: Sequence[IgnoreManifest], path: Path, is_dir: bool) -> bool:
    """Apply manifests from the outermost to the innermost; the last verdict wins."""
    ignored = False
    for manifest in manifests:
        verdict = manifest.verdict(path, is_dir)
        if verdict is not None:
            ignored = verdict
    return ignored
