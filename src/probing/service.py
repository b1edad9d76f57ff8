"""Probe pipeline: target -> tree -> status -> closure -> artifacts."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from common.errors import DisabledByEnvError, ProbeError
from common.logging_utils import Timer, extra_context, is_debug_enabled
from .config import ProbeConfig
from .database import load_database
from .emitter import emit
from .graph import RecordIndex, resolve_closure
from .locator import InstalledTree, locate
from .models import LinkageMode, PackageRecord, ProbeRequest, ProbeResult
from .target import resolve_target

logger = logging.getLogger(__name__)


def resolve_records(
    request: ProbeRequest,
    records: Sequence[PackageRecord],
    tree: InstalledTree,
    linkage: LinkageMode,
    emit_includes: bool = False,
) -> ProbeResult:
    """Resolve already-parsed ``records``; parsing does not depend on linkage."""
    index = RecordIndex(records, tree.triplet)
    closure = resolve_closure(request, index)
    return emit(closure, tree, linkage, request, emit_includes=emit_includes)


class ProbeService:
    """Runs probes against one configuration.

    Holds no state between probes, so one instance may serve several
    threads.
    """

    def __init__(self, config: Optional[ProbeConfig] = None):
        self.config = config if config is not None else ProbeConfig.from_env()

    def probe(self, request: ProbeRequest, emit_includes: bool = False) -> ProbeResult:
        """Probe ``request.name``; raises a ProbeError subclass on any failure."""
        variable = self.config.is_disabled(request.name)
        if variable:
            raise DisabledByEnvError(variable, package=request.name)

        with Timer() as timer:
            triplet, linkage = resolve_target(
                request.name, self.config, linkage=request.linkage, triplet=request.triplet
            )
            try:
                tree = locate(self.config, triplet)
                records: List[PackageRecord] = load_database(tree)
                result = resolve_records(request, records, tree, linkage, emit_includes)
            except ProbeError as e:
                if e.triplet is None:
                    e.triplet = triplet.name
                if e.package is None:
                    e.package = request.name
                raise

        if is_debug_enabled(logger):
            logger.debug(
                "Probe finished",
                extra=extra_context(
                    event="probe_finished",
                    package=request.name,
                    triplet=triplet.name,
                    linkage=linkage.value,
                    libs=len(result.link_libs),
                    duration_ms=timer.duration_ms(),
                ),
            )
        return result
