"""Per-platform rules mapping owned file paths to library artifacts.

Each platform family gets one rules class; adding a platform means adding a
class here and an entry in ``naming_for``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Type

from .models import LinkageMode, OsFamily, Triplet


class ArtifactKind(Enum):
    """What a library file can be used for."""
    ARCHIVE = "archive"  # static archive only
    IMPORT = "import"    # import library for a DLL only
    LIB = "lib"          # MSVC .lib: archive or import stub, decided by the triplet
    SHARED = "shared"    # shared object: linked against and loaded at run time
    RUNTIME = "runtime"  # DLL: loaded at run time only

    def is_link_time(self, linkage: LinkageMode) -> bool:
        if linkage is LinkageMode.STATIC:
            return self in (ArtifactKind.ARCHIVE, ArtifactKind.LIB)
        return self in (ArtifactKind.IMPORT, ArtifactKind.LIB, ArtifactKind.SHARED)

    def is_run_time(self, linkage: LinkageMode) -> bool:
        if linkage is LinkageMode.STATIC:
            return False
        return self in (ArtifactKind.SHARED, ArtifactKind.RUNTIME)


@dataclass(frozen=True)
class Artifact:
    """A library file owned by a package, relative to the triplet directory."""
    path: str
    name: str
    kind: ArtifactKind


def _strip_prefix(stem: str, prefix: str = "lib") -> str:
    if stem.startswith(prefix) and len(stem) > len(prefix):
        return stem[len(prefix):]
    return stem


class NamingRules:
    """Base rules: only files directly inside ``lib/`` or ``bin/`` are considered.

    Subdirectories such as ``lib/manual-link``, ``lib/pkgconfig`` and the
    whole ``debug/`` tree are never linked automatically.
    """

    def classify(self, path: str) -> Optional[Artifact]:
        parts = path.replace("\\", "/").split("/")
        if len(parts) != 2:
            return None
        directory, filename = parts
        if directory == "lib":
            return self.classify_lib(path, filename)
        if directory == "bin":
            return self.classify_bin(path, filename)
        return None

    def classify_lib(self, path: str, filename: str) -> Optional[Artifact]:
        raise NotImplementedError

    def classify_bin(self, path: str, filename: str) -> Optional[Artifact]:
        return None


class MsvcNaming(NamingRules):
    """``lib/foo.lib`` and ``bin/foo.dll``."""

    def classify_lib(self, path, filename):
        if filename.lower().endswith(".lib"):
            return Artifact(path, filename[:-4], ArtifactKind.LIB)
        return None

    def classify_bin(self, path, filename):
        if filename.lower().endswith(".dll"):
            return Artifact(path, filename[:-4], ArtifactKind.RUNTIME)
        return None


class MingwNaming(NamingRules):
    """``lib/libfoo.a``, ``lib/libfoo.dll.a`` and ``bin/libfoo.dll``."""

    def classify_lib(self, path, filename):
        if filename.endswith(".dll.a"):
            return Artifact(path, _strip_prefix(filename[:-6]), ArtifactKind.IMPORT)
        if filename.endswith(".a"):
            return Artifact(path, _strip_prefix(filename[:-2]), ArtifactKind.ARCHIVE)
        return None

    def classify_bin(self, path, filename):
        if filename.lower().endswith(".dll"):
            return Artifact(path, _strip_prefix(filename[:-4]), ArtifactKind.RUNTIME)
        return None


_SO_RE = re.compile(r"^lib(.+?)\.so(\.[0-9][0-9.]*)?$")
_DYLIB_RE = re.compile(r"^lib(.+?)(\.[0-9][0-9.]*)?\.dylib$")


class ElfNaming(NamingRules):
    """``lib/libfoo.a`` and ``lib/libfoo.so[.1.2.3]``."""

    def classify_lib(self, path, filename):
        if filename.startswith("lib") and filename.endswith(".a"):
            return Artifact(path, _strip_prefix(filename[:-2]), ArtifactKind.ARCHIVE)
        match = _SO_RE.match(filename)
        if match:
            return Artifact(path, match.group(1), ArtifactKind.SHARED)
        return None


class MachONaming(NamingRules):
    """``lib/libfoo.a`` and ``lib/libfoo[.1].dylib``."""

    def classify_lib(self, path, filename):
        if filename.startswith("lib") and filename.endswith(".a"):
            return Artifact(path, _strip_prefix(filename[:-2]), ArtifactKind.ARCHIVE)
        match = _DYLIB_RE.match(filename)
        if match:
            return Artifact(path, match.group(1), ArtifactKind.SHARED)
        return None


_RULES: Dict[OsFamily, Type[NamingRules]] = {
    OsFamily.WINDOWS: MsvcNaming,
    OsFamily.MINGW: MingwNaming,
    OsFamily.LINUX: ElfNaming,
    OsFamily.FREEBSD: ElfNaming,
    OsFamily.EMSCRIPTEN: ElfNaming,
    OsFamily.OSX: MachONaming,
    OsFamily.IOS: MachONaming,
}


def naming_for(triplet: Triplet) -> NamingRules:
    """Naming rules for ``triplet``; unknown OS families use the ELF rules."""
    return _RULES.get(triplet.os_family, ElfNaming)()
