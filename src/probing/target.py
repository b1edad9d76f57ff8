"""Map a build target and override signals to a (triplet, linkage) pair."""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from common.errors import ConfigurationError, UnsupportedTargetError
from .config import ProbeConfig, envify
from .models import LinkageMode, OsFamily, Target, Triplet

logger = logging.getLogger(__name__)

_ARCHES = (
    ("x86_64", "x64"),
    ("i686", "x86"),
    ("i586", "x86"),
    ("i386", "x86"),
    ("aarch64", "arm64"),
    ("armv7", "arm"),
    ("thumbv7", "arm"),
    ("wasm32", "wasm32"),
)


def _target_arch(triple: str) -> Optional[str]:
    arch = triple.split("-", 1)[0]
    for prefix, vcpkg_arch in _ARCHES:
        if arch.startswith(prefix):
            return vcpkg_arch
    return None


def _target_os(triple: str) -> Optional[OsFamily]:
    if triple.endswith("-windows-msvc"):
        return OsFamily.WINDOWS
    if triple.endswith("-windows-gnu"):
        return OsFamily.MINGW
    if "-apple-darwin" in triple:
        return OsFamily.OSX
    if "-apple-ios" in triple:
        return OsFamily.IOS
    if "-linux-" in triple or triple.endswith("-linux"):
        return OsFamily.LINUX
    if triple.endswith("-freebsd"):
        return OsFamily.FREEBSD
    if triple.endswith("-emscripten"):
        return OsFamily.EMSCRIPTEN
    return None


def derive_triplet(target: Target, linkage: LinkageMode) -> Triplet:
    """Build the vcpkg triplet name for ``target`` linked with ``linkage``."""
    arch = _target_arch(target.triple)
    os_family = _target_os(target.triple)
    if arch is None or os_family is None:
        raise UnsupportedTargetError(target.triple)

    if os_family is OsFamily.EMSCRIPTEN:
        return Triplet(f"{arch}-emscripten")
    if os_family is OsFamily.WINDOWS:
        if linkage is LinkageMode.DYNAMIC:
            return Triplet(f"{arch}-windows")
        if target.crt_static:
            return Triplet(f"{arch}-windows-static")
        return Triplet(f"{arch}-windows-static-md")
    if os_family is OsFamily.MINGW:
        return Triplet(f"{arch}-mingw-{linkage.value}")
    if linkage is LinkageMode.DYNAMIC:
        return Triplet(f"{arch}-{os_family.value}-dynamic")
    return Triplet(f"{arch}-{os_family.value}")


def _default_linkage(target: Target) -> LinkageMode:
    if target.crt_static:
        return LinkageMode.STATIC
    if _target_os(target.triple) is OsFamily.WINDOWS:
        return LinkageMode.DYNAMIC
    return LinkageMode.STATIC


def resolve_linkage(
    package: str,
    config: ProbeConfig,
    target: Target,
    explicit: Optional[LinkageMode] = None,
    triplet: Optional[Triplet] = None,
) -> LinkageMode:
    """Pick the linkage mode for ``package``.

    Precedence: per-call override, per-package override, global override,
    the linkage implied by an explicit triplet, the crt-static target
    feature, and finally the platform default. Conflicting overrides are an
    error even when a narrower override would decide.
    """
    stem = envify(package)
    pkg_static = stem in config.static_packages
    pkg_dynamic = stem in config.dynamic_packages
    if pkg_static and pkg_dynamic:
        raise ConfigurationError(
            f"both {stem}_STATIC and {stem}_DYNAMIC are set", package=package
        )
    if config.all_static and config.all_dynamic:
        raise ConfigurationError(
            "both VCPKG_ALL_STATIC and VCPKG_ALL_DYNAMIC are set", package=package
        )

    if explicit is not None:
        return explicit
    if pkg_static:
        return LinkageMode.STATIC
    if pkg_dynamic:
        return LinkageMode.DYNAMIC
    if config.all_static:
        return LinkageMode.STATIC
    if config.all_dynamic:
        return LinkageMode.DYNAMIC

    if triplet is not None:
        return triplet.implied_linkage
    return _default_linkage(target)


def resolve_target(
    package: str,
    config: ProbeConfig,
    linkage: Optional[LinkageMode] = None,
    triplet: Optional[str] = None,
) -> Tuple[Triplet, LinkageMode]:
    """Resolve the (triplet, linkage) pair for one probe."""
    target = Target.parse(config.target, config.target_features)
    explicit_name = triplet or config.triplet
    if explicit_name:
        chosen = Triplet(explicit_name)
        mode = resolve_linkage(package, config, target, explicit=linkage, triplet=chosen)
        logger.debug("Using explicit triplet %s (%s linkage)", chosen, mode.value)
        return chosen, mode

    mode = resolve_linkage(package, config, target, explicit=linkage)
    chosen = derive_triplet(target, mode)
    logger.debug("Target %s maps to triplet %s (%s linkage)", target.triple, chosen, mode.value)
    return chosen, mode
