from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

from modpacker.core.layout import PUBLIC_KEY_SUFFIX


@dataclass(frozen=True)
class PlanStep:
    name: str
    details: Dict[str, Any]


@dataclass(frozen=True)
class SigningJob:
    archive_path: Path
    authority_name: str

    @property
    def public_key_name(self) -> str:
        return f"{self.authority_name}{PUBLIC_KEY_SUFFIX}"


@dataclass
class ConversionReport:
    converted: List[Path] = field(default_factory=list)
    failed: List[Path] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


@dataclass
class PackResult:
    destination: Path
    archives: List[Path] = field(default_factory=list)
    signed_archives: List[Path] = field(default_factory=list)
    used_public_keys: List[str] = field(default_factory=list)
    converted_files: List[Path] = field(default_factory=list)
    steps: List[PlanStep] = field(default_factory=list)


@dataclass
class UnpackResult:
    destination: Path
    copied_files: List[Path] = field(default_factory=list)
    unpacked_units: List[Path] = field(default_factory=list)
    conversion: ConversionReport = field(default_factory=ConversionReport)
    steps: List[PlanStep] = field(default_factory=list)
