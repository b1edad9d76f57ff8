"""Data models for target selection, status records and probe results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from constants import Constants


class LinkageMode(Enum):
    """How the native libraries are linked."""
    STATIC = "static"
    DYNAMIC = "dynamic"


class OsFamily(Enum):
    """Operating system families with distinct library naming rules."""
    WINDOWS = "windows"
    MINGW = "mingw"
    LINUX = "linux"
    OSX = "osx"
    IOS = "ios"
    FREEBSD = "freebsd"
    EMSCRIPTEN = "emscripten"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Triplet:
    """A vcpkg triplet such as ``x64-windows-static``."""
    name: str

    @property
    def os_family(self) -> OsFamily:
        parts = self.name.split("-")
        if len(parts) < 2:
            return OsFamily.UNKNOWN
        if parts[0] == "wasm32":
            return OsFamily.EMSCRIPTEN
        try:
            return OsFamily(parts[1])
        except ValueError:
            # uwp triplets use the windows naming rules
            if parts[1] == "uwp":
                return OsFamily.WINDOWS
            return OsFamily.UNKNOWN

    @property
    def implied_linkage(self) -> LinkageMode:
        """Linkage a triplet name implies when nothing else decides."""
        suffixes = self.name.split("-")[2:]
        if "static" in suffixes:
            return LinkageMode.STATIC
        if "dynamic" in suffixes:
            return LinkageMode.DYNAMIC
        if self.os_family is OsFamily.WINDOWS:
            return LinkageMode.DYNAMIC
        return LinkageMode.STATIC

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Target:
    """Build target triple plus enabled target features."""
    triple: str
    features: frozenset = frozenset()

    @classmethod
    def parse(cls, triple: str, features: str = "") -> "Target":
        enabled = frozenset(f.strip() for f in features.split(",") if f.strip())
        return cls(triple=triple.strip(), features=enabled)

    @property
    def crt_static(self) -> bool:
        return Constants.CRT_STATIC_FEATURE in self.features


@dataclass(frozen=True)
class Dependency:
    """One token of a Depends field."""
    name: str
    feature: str = ""  # empty = core package
    triplet: Optional[str] = None  # explicit ``:triplet`` qualifier

    def __str__(self) -> str:
        text = f"{self.name}[{self.feature}]" if self.feature else self.name
        return f"{text}:{self.triplet}" if self.triplet else text


@dataclass
class PackageRecord:
    """One paragraph of the status database."""
    name: str
    architecture: str
    version: str = ""
    port_version: str = ""
    feature: str = ""
    depends: List[Dependency] = field(default_factory=list)
    default_features: List[str] = field(default_factory=list)
    status: str = ""
    owned_files: List[str] = field(default_factory=list)
    list_file: Optional[Path] = None  # info/*.list the owned files came from
    fields: Dict[str, str] = field(default_factory=dict)

    @property
    def key(self) -> "PackageKey":
        return (self.name, self.feature)

    @property
    def is_installed(self) -> bool:
        # "install ok installed"; an empty Status is treated as installed
        if not self.status:
            return True
        return self.status.split()[-1] == "installed"

    @property
    def label(self) -> str:
        return f"{self.name}[{self.feature}]" if self.feature else self.name


@dataclass
class ResolvedPackage:
    """A record plus the concrete artifacts found for it."""
    record: PackageRecord
    link_artifacts: List[Path] = field(default_factory=list)
    runtime_artifacts: List[Path] = field(default_factory=list)
    link_names: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ProbeRequest:
    """Caller input for one probe."""
    name: str
    features: Tuple[str, ...] = ()
    linkage: Optional[LinkageMode] = None
    triplet: Optional[str] = None
    # (link-time stem, run-time stem) pairs replacing derived names of the root
    lib_names: Tuple[Tuple[str, str], ...] = ()


@dataclass
class ProbeResult:
    """Everything a build needs to link the requested package."""
    triplet: Triplet
    linkage: LinkageMode
    packages: List[ResolvedPackage] = field(default_factory=list)
    link_paths: List[Path] = field(default_factory=list)
    link_libs: List[str] = field(default_factory=list)
    include_paths: List[Path] = field(default_factory=list)
    dll_paths: List[Path] = field(default_factory=list)
    found_libs: List[Path] = field(default_factory=list)
    found_dlls: List[Path] = field(default_factory=list)
    cargo_metadata: List[str] = field(default_factory=list)

    @property
    def is_static(self) -> bool:
        return self.linkage is LinkageMode.STATIC

    @property
    def staged_artifacts(self) -> List[Path]:
        """Run-time files to copy next to the produced binary."""
        if self.linkage is LinkageMode.DYNAMIC:
            return list(self.found_dlls)
        return []


# Stable map key for status lookups: (package name, feature or "").
PackageKey = Tuple[str, str]
