"""Data models for the JSON files that live inside a mod source tree."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from modpacker.core.errors import ManifestError

PREFIX_HEADER = "prefix"


def _reject_unknown(data: Dict[str, Any], allowed: set, label: str) -> None:
    unknown = sorted(set(data) - allowed)
    if unknown:
        raise ManifestError(f"Unknown field(s) in {label}: {', '.join(unknown)}")


def _require_mapping(data: Any, label: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ManifestError(f"{label} must be a JSON object, got {type(data).__name__}")
    return data


def _string_list(data: Dict[str, Any], key: str, label: str) -> List[str]:
    values = data.get(key, [])
    if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
        raise ManifestError(f"{label}.{key} must be a list of strings")
    return list(values)


@dataclass
class BuildHeader:
    name: str
    value: str

    @classmethod
    def from_dict(cls, data: Any) -> "BuildHeader":
        data = _require_mapping(data, "header")
        _reject_unknown(data, {"name", "value"}, "header")
        name, value = data.get("name"), data.get("value")
        if not isinstance(name, str) or not isinstance(value, str):
            raise ManifestError("header requires string 'name' and 'value'")
        return cls(name=name, value=value)

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "value": self.value}


@dataclass
class CompressRules:
    include: List[str] = field(default_factory=list)
    exclude: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "CompressRules":
        data = _require_mapping(data, "compress")
        _reject_unknown(data, {"include", "exclude"}, "compress")
        return cls(
            include=_string_list(data, "include", "compress"),
            exclude=_string_list(data, "exclude", "compress"),
        )

    def to_dict(self) -> Dict[str, List[str]]:
        return {"include": list(self.include), "exclude": list(self.exclude)}


@dataclass
class BuildManifest:
    """Contents of a ``pbo.json`` build manifest."""

    headers: List[BuildHeader] = field(default_factory=list)
    compress: Optional[CompressRules] = None

    @classmethod
    def from_dict(cls, data: Any) -> "BuildManifest":
        data = _require_mapping(data, "build manifest")
        _reject_unknown(data, {"headers", "compress"}, "build manifest")

        raw_headers = data.get("headers", [])
        if not isinstance(raw_headers, list):
            raise ManifestError("build manifest 'headers' must be a list")

        raw_compress = data.get("compress")
        return cls(
            headers=[BuildHeader.from_dict(h) for h in raw_headers],
            compress=CompressRules.from_dict(raw_compress) if raw_compress is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "headers": [h.to_dict() for h in self.headers],
            "compress": self.compress.to_dict() if self.compress else None,
        }

    def get_header(self, name: str) -> Optional[str]:
        for header in self.headers:
            if header.name == name:
                return header.value
        return None

    def upsert_header(self, name: str, value: str) -> None:
        """Set every header called ``name`` to ``value``, appending one if none exists."""
        found = False
        for header in self.headers:
            if header.name == name:
                header.value = value
                found = True
        if not found:
            self.headers.append(BuildHeader(name=name, value=value))

    @property
    def prefix(self) -> Optional[str]:
        return self.get_header(PREFIX_HEADER)


@dataclass(frozen=True)
class KeyDescriptor:
    """Contents of a ``key.json`` naming the authority that signs a build unit."""

    authority_name: str

    @classmethod
    def from_dict(cls, data: Any) -> "KeyDescriptor":
        data = _require_mapping(data, "key descriptor")
        _reject_unknown(data, {"authority_name"}, "key descriptor")
        authority = data.get("authority_name")
        if not isinstance(authority, str) or not authority:
            raise ManifestError("key descriptor requires a non-empty string 'authority_name'")
        return cls(authority_name=authority)
