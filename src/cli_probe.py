"""CLI 'probe' command: run one probe and render the result."""

from __future__ import annotations

import logging
import sys
from typing import IO, List, Optional, Tuple

from common.errors import ProbeError
from constants import ExitCodes, LinkageChoices
from probing import probe_package, stage_runtime_artifacts
from probing.config import ProbeConfig
from probing.models import LinkageMode, ProbeResult

logger = logging.getLogger(__name__)


def _linkage(value: Optional[str]) -> Optional[LinkageMode]:
    if value == LinkageChoices.STATIC.value:
        return LinkageMode.STATIC
    if value == LinkageChoices.DLL.value:
        return LinkageMode.DYNAMIC
    return None


def parse_lib_names(tokens: List[str]) -> List[Tuple[str, str]]:
    """``ssleay32`` -> (ssleay32, ssleay32); ``libcurl_imp:curl`` -> (libcurl_imp, curl)."""
    pairs = []
    for token in tokens:
        lib_stem, _, dll_stem = token.partition(":")
        pairs.append((lib_stem, dll_stem or lib_stem))
    return pairs


def _section(out: IO[str], title: str, lines) -> None:
    lines = list(lines)
    if not lines:
        return
    out.write(f"{title}:\n")
    for line in lines:
        out.write(f"  {line}\n")


def render_result(name: str, result: ProbeResult, out: IO[str]) -> None:
    """Human-readable report of a successful probe."""
    out.write(f"Found library {name}\n")
    out.write(f"Triplet: {result.triplet} ({result.linkage.value})\n")
    _section(out, "Include paths", result.include_paths)
    _section(out, "Library paths", result.link_paths)
    _section(out, "Runtime Library paths", result.dll_paths)
    _section(out, "Cargo metadata", result.cargo_metadata)
    _section(out, "Found DLLs", result.found_dlls)
    _section(out, "Found libs", result.found_libs)


def run_probe(args, config: ProbeConfig, out: Optional[IO[str]] = None) -> int:
    """Probe ``args.PACKAGE`` and return the process exit code.

    A failure is always logged. It is a hard failure (PROBE_FAILED) when
    panicking is enabled; otherwise a cargo warning is written and the exit
    code is SUCCESS so the calling build can decide what to do.
    """
    out = out if out is not None else sys.stdout
    name = args.PACKAGE
    try:
        result = probe_package(
            name,
            features=getattr(args, "FEATURES", []) or [],
            linkage=_linkage(getattr(args, "LINKAGE", None)),
            triplet=getattr(args, "TRIPLET", None),
            config=config,
            lib_names=parse_lib_names(getattr(args, "LIB_NAMES", []) or []),
            emit_includes=getattr(args, "EMIT_INCLUDES", False),
        )
        if config.out_dir is not None and getattr(args, "COPY_DLLS", None):
            for staged in stage_runtime_artifacts(result, config.out_dir):
                logger.info("Staged %s", staged)
    except ProbeError as e:
        logger.error("Failed: %s", e)
        if config.panic:
            return ExitCodes.PROBE_FAILED.value
        out.write(f"cargo:warning=vcpkg probe for {name} failed: {e}\n")
        return ExitCodes.SUCCESS.value

    if getattr(args, "METADATA_ONLY", False):
        for line in result.cargo_metadata:
            out.write(line + "\n")
    else:
        render_result(name, result, out)
    return ExitCodes.SUCCESS.value
