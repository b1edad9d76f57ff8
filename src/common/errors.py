"""Diagnostics raised by every stage of a probe.

All failures derive from :class:`ProbeError` and carry the triplet in effect,
the package involved and the filesystem paths inspected, so the caller can
tell a missing installation from a wrong triplet from a corrupt database.
"""
from __future__ import annotations

from typing import Optional, Sequence, Tuple


class ProbeError(Exception):
    """Base class for every probe failure."""

    kind = "probe"

    def __init__(
        self,
        message: str,
        *,
        triplet: Optional[str] = None,
        package: Optional[str] = None,
        paths: Sequence[str] = (),
    ):
        super().__init__(message)
        self.message = message
        self.triplet = triplet
        self.package = package
        self.paths: Tuple[str, ...] = tuple(str(p) for p in paths)

    def __str__(self) -> str:
        parts = [self.message]
        if self.package:
            parts.append(f"package: {self.package}")
        if self.triplet:
            parts.append(f"triplet: {self.triplet}")
        if self.paths:
            parts.append("searched: " + ", ".join(self.paths))
        return "; ".join(parts)


class ConfigurationError(ProbeError):
    """Conflicting override signals."""

    kind = "configuration"


class UnsupportedTargetError(ConfigurationError):
    """Build target maps to no known triplet and no override was given."""

    kind = "unsupported_target"

    def __init__(self, target: str, **kwargs):
        super().__init__(
            f"target '{target}' does not map to a known vcpkg triplet; "
            "set VCPKGRS_TRIPLET to choose one explicitly",
            **kwargs,
        )
        self.target = target


class DisabledByEnvError(ProbeError):
    """Probing was switched off by an environment variable."""

    kind = "disabled"

    def __init__(self, variable: str, **kwargs):
        super().__init__(f"aborted because {variable} is set", **kwargs)
        self.variable = variable


class RootNotFoundError(ProbeError):
    """No vcpkg installation at the expected location."""

    kind = "root_not_found"


class TripletNotInstalledError(ProbeError):
    """The vcpkg root exists but nothing was installed for this triplet."""

    kind = "triplet_not_installed"

    def __init__(self, triplet: str, installed: Sequence[str] = (), **kwargs):
        message = f"no packages installed for triplet '{triplet}'"
        if installed:
            message += " (installed triplets: " + ", ".join(installed) + ")"
        super().__init__(message, triplet=triplet, **kwargs)
        self.installed = tuple(installed)


class StatusDatabaseError(ProbeError):
    """Status database missing or unreadable."""

    kind = "status_database"


class MalformedRecordError(StatusDatabaseError):
    """A status paragraph could not be parsed."""

    kind = "malformed_record"

    def __init__(self, reason: str, *, index: int, line: int, **kwargs):
        super().__init__(
            f"malformed status record #{index} at line {line}: {reason}", **kwargs
        )
        self.index = index
        self.line = line


class PackageNotFoundError(ProbeError):
    """A requested or transitively referenced package/feature is not installed."""

    kind = "package_not_found"

    def __init__(
        self,
        name: str,
        feature: str = "",
        *,
        requested_by: Optional[str] = None,
        **kwargs,
    ):
        label = f"{name}[{feature}]" if feature else name
        message = f"package '{label}' is not installed"
        if requested_by:
            message += f" (required by '{requested_by}')"
        super().__init__(message, package=label, **kwargs)
        self.name = name
        self.feature = feature
        self.requested_by = requested_by


class LibraryNotFoundError(ProbeError):
    """Package found but no library usable under the active linkage mode."""

    kind = "library_not_found"
