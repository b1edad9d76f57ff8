"""Breadth-first dependency closure over installed status records."""

from __future__ import annotations

import logging
from collections import deque
from typing import Deque, Dict, Iterable, List, Optional, Set, Tuple

from common.errors import PackageNotFoundError
from constants import Constants
from .models import PackageKey, PackageRecord, ProbeRequest, Triplet

logger = logging.getLogger(__name__)


class RecordIndex:
    """Installed records of one triplet keyed by (name, feature).

    Records of other triplets are ignored. When a key appears more than once
    (the status file followed by update files) the last record wins, and a
    key whose last record is not installed is absent.
    """

    def __init__(self, records: Iterable[PackageRecord], triplet: Triplet):
        self.triplet = triplet
        latest: Dict[PackageKey, PackageRecord] = {}
        ignored = 0
        for record in records:
            if record.architecture != triplet.name:
                ignored += 1
                continue
            latest[record.key] = record
        self._records = {key: rec for key, rec in latest.items() if rec.is_installed}
        logger.debug(
            "Indexed %d installed records for %s (%d foreign ignored)",
            len(self._records), triplet, ignored,
        )

    def get(self, key: PackageKey) -> Optional[PackageRecord]:
        return self._records.get(key)

    def __contains__(self, key: PackageKey) -> bool:
        return key in self._records


def _root_keys(request: ProbeRequest, index: RecordIndex) -> List[PackageKey]:
    keys: List[PackageKey] = [(request.name, "")]
    if request.features:
        for feature in request.features:
            if feature and feature != Constants.CORE_FEATURE:
                keys.append((request.name, feature))
        return keys
    core = index.get((request.name, ""))
    if core is not None:
        for feature in core.default_features:
            if (request.name, feature) in index:
                keys.append((request.name, feature))
    return keys


def resolve_closure(request: ProbeRequest, index: RecordIndex) -> List[PackageRecord]:
    """Collect every record the requested package needs, in discovery order.

    Each (name, feature) key appears once, so diamonds and cycles terminate.
    Raises PackageNotFoundError for the first key with no installed record.
    """
    frontier: Deque[Tuple[PackageKey, Optional[str]]] = deque(
        (key, None) for key in _root_keys(request, index)
    )
    visited: Set[PackageKey] = set()
    closure: List[PackageRecord] = []

    while frontier:
        key, requester = frontier.popleft()
        if key in visited:
            continue
        visited.add(key)

        record = index.get(key)
        if record is None:
            name, feature = key
            raise PackageNotFoundError(
                name,
                feature,
                requested_by=requester,
                triplet=index.triplet.name,
            )
        closure.append(record)

        for dep in record.depends:
            if dep.triplet and dep.triplet != index.triplet.name:
                # host tools (vcpkg-cmake:x64-linux) are never linked
                continue
            wanted = [(dep.name, "")]
            if dep.feature:
                wanted.append((dep.name, dep.feature))
            for dep_key in wanted:
                if dep_key not in visited:
                    frontier.append((dep_key, record.label))

    logger.debug(
        "Closure of %s: %s", request.name, ", ".join(r.label for r in closure)
    )
    return closure
