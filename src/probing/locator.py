"""Find the vcpkg root and the triplet-specific installed subtree."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from common.errors import RootNotFoundError, TripletNotInstalledError
from constants import Constants
from .config import ProbeConfig
from .models import Triplet

logger = logging.getLogger(__name__)

_PROJECT_RE = re.compile(r'Project="([^"]+)"')


@dataclass(frozen=True)
class InstalledTree:
    """Absolute paths of one triplet's installation."""
    root: Path
    installed: Path
    triplet: Triplet
    include_dir: Path
    lib_dir: Path
    bin_dir: Path
    status_file: Path
    updates_dir: Path
    info_dir: Path

    @property
    def triplet_dir(self) -> Path:
        return self.installed / self.triplet.name


def find_vcpkg_root(config: ProbeConfig) -> Path:
    """Return the configured root, or the one registered by ``vcpkg integrate install``."""
    if config.root is not None:
        return config.root

    if config.local_app_data is None:
        raise RootNotFoundError(
            "no vcpkg root: set VCPKG_ROOT or run 'vcpkg integrate install'"
        )
    targets = config.local_app_data / Constants.VCPKG_DIR / Constants.USER_TARGETS_FILE
    try:
        text = targets.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise RootNotFoundError(
            "no vcpkg.user.targets found; run 'vcpkg integrate install' or set VCPKG_ROOT",
            paths=[str(targets)],
        ) from e

    match = _PROJECT_RE.search(text)
    if match is None:
        raise RootNotFoundError(
            "project location not found in vcpkg.user.targets", paths=[str(targets)]
        )
    # Project points at <root>/scripts/buildsystems/msbuild/vcpkg.targets
    project = Path(match.group(1).replace("\\", "/"))
    parents = project.parents
    if len(parents) < 4:
        raise RootNotFoundError(
            f"could not find vcpkg root above {project}", paths=[str(targets)]
        )
    return parents[3]


def installed_root(root: Path, config: ProbeConfig) -> Path:
    if config.installed_dir:
        custom = Path(config.installed_dir)
        return custom if custom.is_absolute() else root / custom
    return root / Constants.INSTALLED_DIR


def list_installed_triplets(installed: Path) -> List[str]:
    """Names of triplet directories under ``installed`` (excluding the vcpkg metadata dir)."""
    try:
        return sorted(
            p.name for p in installed.iterdir()
            if p.is_dir() and p.name != Constants.VCPKG_DIR
        )
    except OSError:
        return []


def locate(config: ProbeConfig, triplet: Triplet, root: Optional[Path] = None) -> InstalledTree:
    """Locate the installed subtree for ``triplet``.

    Raises RootNotFoundError when the root or its layout marker is missing and
    TripletNotInstalledError when only the triplet subtree is missing.
    """
    root = root if root is not None else find_vcpkg_root(config)
    root = root.absolute()
    installed = installed_root(root, config)
    metadata_dir = installed / Constants.VCPKG_DIR
    status_file = metadata_dir / Constants.STATUS_FILE

    if not root.is_dir():
        raise RootNotFoundError(
            f"vcpkg root {root} does not exist", triplet=triplet.name, paths=[str(root)]
        )
    marker = root / Constants.ROOT_MARKER
    if not marker.exists() and not status_file.is_file():
        raise RootNotFoundError(
            f"{root} is not a vcpkg root (no {Constants.ROOT_MARKER} and no installed status)",
            triplet=triplet.name,
            paths=[str(marker), str(status_file)],
        )

    triplet_dir = installed / triplet.name
    if not triplet_dir.is_dir():
        raise TripletNotInstalledError(
            triplet.name,
            installed=list_installed_triplets(installed),
            paths=[str(triplet_dir)],
        )

    logger.debug("Using installed tree %s", triplet_dir)
    return InstalledTree(
        root=root,
        installed=installed,
        triplet=triplet,
        include_dir=triplet_dir / "include",
        lib_dir=triplet_dir / "lib",
        bin_dir=triplet_dir / "bin",
        status_file=status_file,
        updates_dir=metadata_dir / Constants.UPDATES_DIR,
        info_dir=metadata_dir / Constants.INFO_DIR,
    )
