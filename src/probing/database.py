"""Load the status database and owned-file lists of an installed tree."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from common.errors import MalformedRecordError, StatusDatabaseError
from common.logging_utils import extra_context, is_debug_enabled
from .locator import InstalledTree
from .models import PackageRecord
from .status_parser import parse_status

logger = logging.getLogger(__name__)


def _read(path: Path, tree: InstalledTree) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise StatusDatabaseError(
            f"cannot read status database: {e}",
            triplet=tree.triplet.name,
            paths=[str(path)],
        ) from e


def status_files(tree: InstalledTree) -> List[Path]:
    """Base status file followed by incremental updates in name order."""
    files = [tree.status_file]
    if tree.updates_dir.is_dir():
        files.extend(sorted(p for p in tree.updates_dir.iterdir() if p.is_file()))
    return files


def load_records(tree: InstalledTree) -> List[PackageRecord]:
    """Parse every status file of ``tree`` in order.

    Raises StatusDatabaseError when the base status file is missing and
    MalformedRecordError (annotated with the offending file) on bad paragraphs.
    """
    if not tree.status_file.is_file():
        raise StatusDatabaseError(
            "status database not found",
            triplet=tree.triplet.name,
            paths=[str(tree.status_file)],
        )
    records: List[PackageRecord] = []
    for path in status_files(tree):
        try:
            records.extend(parse_status(_read(path, tree)))
        except MalformedRecordError as e:
            e.triplet = tree.triplet.name
            e.paths = (str(path),)
            raise
    if is_debug_enabled(logger):
        logger.debug(
            "Loaded status database",
            extra=extra_context(
                event="status_loaded",
                triplet=tree.triplet.name,
                records=len(records),
            ),
        )
    return records


def list_file_for(record: PackageRecord, info_dir: Path) -> Optional[Path]:
    """Find the ``.list`` file describing the files a core record owns."""
    stems = [f"{record.name}_{record.version}_{record.architecture}"]
    if record.port_version and record.port_version != "0":
        stems.insert(0, f"{record.name}_{record.version}#{record.port_version}_{record.architecture}")
        stems.append(f"{record.name}_{record.version}-{record.port_version}_{record.architecture}")
    for stem in stems:
        candidate = info_dir / f"{stem}.list"
        if candidate.is_file():
            return candidate
    if info_dir.is_dir():
        matches = sorted(info_dir.glob(f"{record.name}_*_{record.architecture}.list"))
        if matches:
            return matches[-1]
    return None


def read_owned_files(list_file: Path, triplet: str) -> List[str]:
    """Return owned file paths relative to the triplet directory; directories are dropped."""
    prefix = triplet + "/"
    owned: List[str] = []
    with open(list_file, "r", encoding="utf-8") as fh:
        for raw in fh:
            entry = raw.strip().replace("\\", "/")
            if not entry or entry.endswith("/"):
                continue
            if entry.startswith(prefix):
                entry = entry[len(prefix):]
            owned.append(entry)
    return owned


def attach_owned_files(records: List[PackageRecord], tree: InstalledTree) -> None:
    """Fill ``owned_files`` of the core records installed for ``tree``'s triplet.

    A record with no list file keeps ``list_file`` None; the emitter reports
    it if the record is ever needed.
    """
    for record in records:
        if record.feature or record.architecture != tree.triplet.name or record.owned_files:
            continue
        list_file = list_file_for(record, tree.info_dir)
        if list_file is None:
            logger.debug("No file list for %s:%s", record.name, record.architecture)
            continue
        record.list_file = list_file
        try:
            record.owned_files = read_owned_files(list_file, tree.triplet.name)
        except OSError as e:
            raise StatusDatabaseError(
                f"cannot read file list: {e}",
                triplet=tree.triplet.name,
                package=record.name,
                paths=[str(list_file)],
            ) from e


def load_database(tree: InstalledTree) -> List[PackageRecord]:
    """Records of every status file, with owned files attached."""
    records = load_records(tree)
    attach_owned_files(records, tree)
    return records
