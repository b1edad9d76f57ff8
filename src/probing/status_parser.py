"""Parser for the vcpkg status database.

The database is a sequence of paragraphs separated by blank lines. Each
paragraph is a set of ``Field: value`` lines; a line starting with whitespace
continues the previous field::

    Package: libpng
    Version: 1.6.43
    Depends: zlib, vcpkg-cmake:x64-linux
    Architecture: x64-linux
    Multi-Arch: same
    Description: libpng is a library implementing an interface for reading
      and writing PNG format files
    Status: install ok installed

Every field is kept in ``PackageRecord.fields``; the fields the engine uses
are also lifted onto the record.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, Iterator, List, Optional, Tuple

from common.errors import MalformedRecordError
from constants import Constants
from .models import Dependency, PackageRecord

logger = logging.getLogger(__name__)

_FIELD_RE = re.compile(r"^([A-Za-z0-9][A-Za-z0-9_-]*):(.*)$")
_PLATFORM_RE = re.compile(r"\s*\([^)]*\)\s*$")

# (paragraph index, first line number, [(field, value)])
Paragraph = Tuple[int, int, List[Tuple[str, str]]]


def iter_paragraphs(text: str) -> Iterator[Paragraph]:
    """Split ``text`` into paragraphs of (field, value) pairs.

    Continuation lines are appended to the previous value with a newline.
    """
    fields: List[Tuple[str, str]] = []
    start = 0
    index = 0
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.rstrip("\r")
        if not line.strip():
            if fields:
                yield index, start, fields
                index += 1
                fields = []
            continue
        if line[0] in " \t":
            if not fields:
                raise MalformedRecordError(
                    "continuation line without a field", index=index, line=lineno
                )
            name, value = fields[-1]
            fields[-1] = (name, value + "\n" + line.strip())
            continue
        match = _FIELD_RE.match(line)
        if match is None:
            raise MalformedRecordError(
                f"expected 'Field: value', got {line!r}", index=index, line=lineno
            )
        if not fields:
            start = lineno
        fields.append((match.group(1), match.group(2).strip()))
    if fields:
        yield index, start, fields


def _split_top_level(value: str) -> List[str]:
    """Split on commas that are not inside brackets or parentheses."""
    tokens: List[str] = []
    depth = 0
    current = []
    for ch in value:
        if ch in "[(":
            depth += 1
        elif ch in "])":
            depth = max(depth - 1, 0)
        if ch == "," and depth == 0:
            tokens.append("".join(current))
            current = []
            continue
        current.append(ch)
    tokens.append("".join(current))
    return [t.strip() for t in tokens if t.strip()]


def parse_dependency(token: str) -> List[Dependency]:
    """Parse one Depends token.

    ``zlib`` -> core of zlib; ``curl[ssl,http2]`` -> one entry per feature;
    ``curl[core]`` -> core of curl; ``vcpkg-cmake:x64-linux`` keeps the
    triplet qualifier; a trailing ``(platform)`` expression is dropped.
    """
    token = _PLATFORM_RE.sub("", token.strip())
    triplet: Optional[str] = None
    head, sep, tail = token.rpartition(":")
    if sep and "]" not in tail:
        token, triplet = head, tail.strip() or None

    if "[" in token:
        name, _, rest = token.partition("[")
        features = [f.strip() for f in rest.rstrip("]").split(",") if f.strip()]
        name = name.strip()
        deps = []
        for feature in features or [""]:
            if feature == Constants.CORE_FEATURE:
                feature = ""
            deps.append(Dependency(name=name, feature=feature, triplet=triplet))
        return deps
    return [Dependency(name=token.strip(), triplet=triplet)]


def parse_depends(value: str) -> List[Dependency]:
    """Parse a Depends field into ordered dependencies."""
    deps: List[Dependency] = []
    for token in _split_top_level(value.replace("\n", " ")):
        deps.extend(parse_dependency(token))
    return deps


def _record_from_fields(index: int, line: int, pairs: List[Tuple[str, str]]) -> PackageRecord:
    fields: Dict[str, str] = {}
    for name, value in pairs:
        fields[name] = value

    name = fields.get("Package", "").strip()
    if not name:
        raise MalformedRecordError("missing 'Package' field", index=index, line=line)
    architecture = fields.get("Architecture", "").strip()
    if not architecture:
        raise MalformedRecordError(
            "missing 'Architecture' field", index=index, line=line, package=name
        )

    default_features = [
        f.strip() for f in fields.get("Default-Features", "").split(",") if f.strip()
    ]
    return PackageRecord(
        name=name,
        architecture=architecture,
        version=fields.get("Version", ""),
        port_version=fields.get("Port-Version", ""),
        feature=fields.get("Feature", "").strip(),
        depends=parse_depends(fields.get("Depends", "")),
        default_features=default_features,
        status=fields.get("Status", ""),
        fields=fields,
    )


def parse_status(text: str) -> List[PackageRecord]:
    """Parse status database text into records, in file order.

    Duplicates are preserved; deciding which record wins is left to the
    dependency resolver.
    """
    records = [
        _record_from_fields(index, line, pairs)
        for index, line, pairs in iter_paragraphs(text)
    ]
    logger.debug("Parsed %d status records", len(records))
    return records
