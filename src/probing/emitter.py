"""Turn a dependency closure into library artifacts and build metadata."""

from __future__ import annotations

import filecmp
import logging
import shutil
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, TypeVar

from common.errors import LibraryNotFoundError, StatusDatabaseError
from .locator import InstalledTree
from .models import LinkageMode, PackageRecord, ProbeRequest, ProbeResult, ResolvedPackage
from .naming import Artifact, NamingRules, naming_for

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _append_unique(items: List[T], values: Iterable[T]) -> None:
    for value in values:
        if value not in items:
            items.append(value)


def _existing(tree: InstalledTree, artifacts: Iterable[Artifact]) -> List[Artifact]:
    found = []
    for artifact in artifacts:
        if (tree.triplet_dir / artifact.path).is_file():
            found.append(artifact)
        else:
            logger.debug("Owned file %s is missing on disk", artifact.path)
    return found


def _select_named(
    record: PackageRecord,
    tree: InstalledTree,
    artifacts: Sequence[Artifact],
    linkage: LinkageMode,
    lib_names: Sequence[Tuple[str, str]],
) -> Tuple[List[Artifact], List[Artifact]]:
    """Pick the artifacts named explicitly by the caller; every one must exist."""
    link: List[Artifact] = []
    run: List[Artifact] = []
    for lib_stem, dll_stem in lib_names:
        match = next(
            (a for a in artifacts
             if a.name.lower() == lib_stem.lower() and a.kind.is_link_time(linkage)),
            None,
        )
        if match is None:
            raise LibraryNotFoundError(
                f"library '{lib_stem}' not found for {linkage.value} linkage",
                triplet=tree.triplet.name,
                package=record.name,
                paths=[str(tree.lib_dir)],
            )
        link.append(match)
        if linkage is LinkageMode.DYNAMIC:
            runtime = next(
                (a for a in artifacts
                 if a.name.lower() == dll_stem.lower() and a.kind.is_run_time(linkage)),
                None,
            )
            if runtime is None:
                raise LibraryNotFoundError(
                    f"runtime library '{dll_stem}' not found",
                    triplet=tree.triplet.name,
                    package=record.name,
                    paths=[str(tree.bin_dir)],
                )
            run.append(runtime)
    return link, run


def resolve_package(
    record: PackageRecord,
    tree: InstalledTree,
    linkage: LinkageMode,
    rules: NamingRules,
    lib_names: Sequence[Tuple[str, str]] = (),
) -> ResolvedPackage:
    """Classify the files ``record`` owns into link-time and run-time artifacts.

    A package owning no library at all (header-only, or a feature record) is
    returned empty. One that owns libraries, none usable under ``linkage``,
    raises LibraryNotFoundError, as does one whose usable libraries are
    listed but missing on disk. A core record with no file list raises
    StatusDatabaseError.
    """
    if not record.feature and record.list_file is None:
        raise StatusDatabaseError(
            "no file list for installed package; the installed tree is incomplete",
            triplet=tree.triplet.name,
            package=record.name,
            paths=[str(tree.info_dir)],
        )
    classified = [a for a in (rules.classify(p) for p in record.owned_files) if a is not None]
    artifacts = _existing(tree, classified)

    if lib_names:
        link, run = _select_named(record, tree, artifacts, linkage, lib_names)
    else:
        link = [a for a in artifacts if a.kind.is_link_time(linkage)]
        run = [a for a in artifacts if a.kind.is_run_time(linkage)]
        if classified and not link:
            missing = [
                a for a in classified
                if a.kind.is_link_time(linkage) and a not in artifacts
            ]
            if missing:
                raise LibraryNotFoundError(
                    f"libraries listed for {linkage.value} linkage are missing on disk",
                    triplet=tree.triplet.name,
                    package=record.name,
                    paths=[str(tree.triplet_dir / a.path) for a in missing],
                )
            raise LibraryNotFoundError(
                f"no library usable for {linkage.value} linkage "
                f"(found: {', '.join(a.path for a in classified)}); "
                "the port was probably built with a different linkage",
                triplet=tree.triplet.name,
                package=record.name,
                paths=[str(tree.lib_dir), str(tree.bin_dir)],
            )

    names: List[str] = []
    _append_unique(names, (a.name for a in link))
    return ResolvedPackage(
        record=record,
        link_artifacts=[tree.triplet_dir / a.path for a in link],
        runtime_artifacts=[tree.triplet_dir / a.path for a in run],
        link_names=names,
    )


def cargo_metadata_lines(result: ProbeResult, emit_includes: bool = False) -> List[str]:
    """Render ``result`` as cargo build-script directives."""
    lines = [f"cargo:rustc-link-search=native={path}" for path in result.link_paths]
    for name in result.link_libs:
        if result.is_static:
            lines.append(f"cargo:rustc-link-lib=static={name}")
        else:
            lines.append(f"cargo:rustc-link-lib={name}")
    if emit_includes:
        lines.extend(f"cargo:include={path}" for path in result.include_paths)
    return lines


def emit(
    closure: Sequence[PackageRecord],
    tree: InstalledTree,
    linkage: LinkageMode,
    request: Optional[ProbeRequest] = None,
    emit_includes: bool = False,
) -> ProbeResult:
    """Build the ProbeResult for ``closure``, preserving discovery order."""
    rules = naming_for(tree.triplet)
    result = ProbeResult(triplet=tree.triplet, linkage=linkage)
    result.include_paths.append(tree.include_dir)

    for record in closure:
        lib_names: Sequence[Tuple[str, str]] = ()
        if request is not None and record.name == request.name and not record.feature:
            lib_names = request.lib_names
        package = resolve_package(record, tree, linkage, rules, lib_names)
        result.packages.append(package)

        _append_unique(result.link_paths, (p.parent for p in package.link_artifacts))
        _append_unique(result.link_libs, package.link_names)
        _append_unique(result.found_libs, package.link_artifacts)
        _append_unique(result.found_dlls, package.runtime_artifacts)
        _append_unique(result.dll_paths, (p.parent for p in package.runtime_artifacts))

    result.cargo_metadata = cargo_metadata_lines(result, emit_includes)
    return result


def stage_runtime_artifacts(result: ProbeResult, out_dir: Path) -> List[Path]:
    """Copy the run-time artifacts of a dynamic result into ``out_dir``.

    Re-copying an identical file is a no-op.
    """
    staged: List[Path] = []
    artifacts = result.staged_artifacts
    if not artifacts:
        return staged
    out_dir = Path(out_dir)
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
        for source in artifacts:
            dest = out_dir / source.name
            if not (dest.is_file() and filecmp.cmp(source, dest, shallow=False)):
                shutil.copy2(source, dest)
                logger.info("Copied %s to %s", source, dest)
            staged.append(dest)
    except OSError as e:
        raise LibraryNotFoundError(
            f"cannot stage runtime library: {e}",
            triplet=result.triplet.name,
            paths=[str(out_dir)],
        ) from e
    return staged
