"""Locate libraries installed by vcpkg and produce linker directives.

Public API:
- probe_package(): resolve a package and return a ProbeResult
- find_package(): probe, print cargo metadata and optionally stage DLLs
- Config: fluent builder over the same calls
"""

from __future__ import annotations

import sys
from dataclasses import replace
from pathlib import Path
from typing import IO, Iterable, List, Optional, Tuple

from common.errors import ProbeError
from .config import ProbeConfig
from .emitter import stage_runtime_artifacts
from .models import LinkageMode, ProbeRequest, ProbeResult, Triplet
from .service import ProbeService


def probe_package(
    name: str,
    features: Optional[Iterable[str]] = (),
    linkage: Optional[LinkageMode] = None,
    triplet: Optional[str] = None,
    config: Optional[ProbeConfig] = None,
    lib_names: Optional[Iterable[Tuple[str, str]]] = (),
    emit_includes: bool = False,
) -> ProbeResult:
    """Resolve ``name`` and everything it depends on.

    Raises:
        ProbeError: any failure; nothing is printed.
    """
    request = ProbeRequest(
        name=name,
        features=tuple(features or ()),
        linkage=linkage,
        triplet=triplet,
        lib_names=tuple(lib_names or ()),
    )
    return ProbeService(config).probe(request, emit_includes=emit_includes)


def write_metadata(result: ProbeResult, stream: IO[str]) -> None:
    for line in result.cargo_metadata:
        stream.write(line + "\n")


def find_package(
    name: str,
    features: Optional[Iterable[str]] = (),
    linkage: Optional[LinkageMode] = None,
    triplet: Optional[str] = None,
    config: Optional[ProbeConfig] = None,
    stream: Optional[IO[str]] = None,
    copy_dlls: bool = False,
    emit_includes: bool = False,
    lib_names: Optional[Iterable[Tuple[str, str]]] = (),
) -> ProbeResult:
    """Probe ``name`` and write its cargo metadata to ``stream`` (stdout).

    With ``copy_dlls`` the run-time artifacts of a dynamic result are copied
    into the configured OUT_DIR. Failures are re-raised to the caller.
    """
    config = config if config is not None else ProbeConfig.from_env()
    result = probe_package(
        name, features, linkage, triplet, config,
        lib_names=lib_names, emit_includes=emit_includes,
    )
    write_metadata(result, stream if stream is not None else sys.stdout)
    if copy_dlls and config.out_dir is not None:
        stage_runtime_artifacts(result, config.out_dir)
    return result


class Config:
    """Fluent builder for a probe, mirroring the usual build-script usage::

        lib = Config().statik(True).find_package("zlib")
    """

    def __init__(self, config: Optional[ProbeConfig] = None):
        self._config = config
        self._linkage: Optional[LinkageMode] = None
        self._triplet: Optional[str] = None
        self._root: Optional[Path] = None
        self._lib_names: List[Tuple[str, str]] = []
        self._features: List[str] = []
        self._cargo_metadata = True
        self._emit_includes = False
        self._copy_dlls = True

    def statik(self, statik: bool) -> "Config":
        self._linkage = LinkageMode.STATIC if statik else LinkageMode.DYNAMIC
        return self

    def target_triplet(self, triplet: str) -> "Config":
        self._triplet = str(triplet)
        return self

    def vcpkg_root(self, root: Path) -> "Config":
        self._root = Path(root)
        return self

    def feature(self, feature: str) -> "Config":
        self._features.append(feature)
        return self

    def lib_name(self, lib_stem: str) -> "Config":
        """Look for ``<lib_stem>`` instead of the names derived from the package."""
        self._lib_names.append((lib_stem, lib_stem))
        return self

    def lib_names(self, lib_stem: str, dll_stem: str) -> "Config":
        self._lib_names.append((lib_stem, dll_stem))
        return self

    def cargo_metadata(self, enabled: bool) -> "Config":
        self._cargo_metadata = enabled
        return self

    def emit_includes(self, enabled: bool) -> "Config":
        self._emit_includes = enabled
        return self

    def copy_dlls(self, enabled: bool) -> "Config":
        self._copy_dlls = enabled
        return self

    def _probe_config(self) -> ProbeConfig:
        config = self._config if self._config is not None else ProbeConfig.from_env()
        if self._root is not None:
            config = replace(config, root=self._root)
        return config

    def find_package(self, name: str, stream: Optional[IO[str]] = None) -> ProbeResult:
        """Probe ``name`` with the accumulated settings."""
        config = self._probe_config()
        result = probe_package(
            name,
            features=self._features,
            linkage=self._linkage,
            triplet=self._triplet,
            config=config,
            lib_names=self._lib_names,
            emit_includes=self._emit_includes,
        )
        if self._cargo_metadata:
            write_metadata(result, stream if stream is not None else sys.stdout)
        if self._copy_dlls and config.out_dir is not None:
            stage_runtime_artifacts(result, config.out_dir)
        return result


__all__ = [
    "Config",
    "LinkageMode",
    "ProbeConfig",
    "ProbeError",
    "ProbeRequest",
    "ProbeResult",
    "ProbeService",
    "Triplet",
    "find_package",
    "probe_package",
    "stage_runtime_artifacts",
    "write_metadata",
]
