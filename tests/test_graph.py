"""Tests for the dependency closure."""

import pytest

from common.errors import PackageNotFoundError
from probing.graph import RecordIndex, resolve_closure
from probing.models import ProbeRequest, Triplet
from probing.status_parser import parse_status

TRIPLET = Triplet("x64-linux")


def _status(*paragraphs):
    return parse_status("\n".join(p.strip() + "\n" for p in paragraphs))


def _pkg(name, depends="", arch="x64-linux", feature=None, status="install ok installed",
         default_features=None):
    lines = [f"Package: {name}"]
    if feature:
        lines.append(f"Feature: {feature}")
    lines += [f"Depends: {depends}", f"Architecture: {arch}", f"Status: {status}"]
    if default_features:
        lines.append(f"Default-Features: {default_features}")
    return "\n".join(lines)


def _closure(records, name, features=()):
    index = RecordIndex(records, TRIPLET)
    return [r.label for r in resolve_closure(ProbeRequest(name, features=tuple(features)), index)]


class TestClosure:
    """Transitive resolution."""

    def test_single_package(self):
        records = _status(_pkg("zlib"), _pkg("bzip2"))
        assert _closure(records, "zlib") == ["zlib"]

    def test_diamond_includes_shared_dependency_once(self):
        records = _status(
            _pkg("a", "b, c"), _pkg("b", "d"), _pkg("c", "d"), _pkg("d"),
        )
        closure = _closure(records, "a")
        assert sorted(closure) == ["a", "b", "c", "d"]
        assert closure.count("d") == 1

    def test_cycle_terminates(self):
        records = _status(_pkg("a", "b"), _pkg("b", "a"))
        assert _closure(records, "a") == ["a", "b"]

    def test_self_dependency(self):
        records = _status(_pkg("a", "a"))
        assert _closure(records, "a") == ["a"]

    def test_unrelated_packages_excluded(self):
        records = _status(_pkg("libpng", "zlib"), _pkg("zlib"), _pkg("openssl"))
        assert _closure(records, "libpng") == ["libpng", "zlib"]

    def test_foreign_triplet_records_ignored(self):
        records = _status(_pkg("zlib", arch="x64-windows"))
        with pytest.raises(PackageNotFoundError):
            _closure(records, "zlib")

    def test_host_dependencies_skipped(self):
        records = _status(_pkg("zlib", "vcpkg-cmake:x64-windows, vcpkg-cmake-config:x64-windows"))
        assert _closure(records, "zlib") == ["zlib"]

    def test_same_triplet_qualifier_followed(self):
        records = _status(_pkg("libpng", "zlib:x64-linux"), _pkg("zlib"))
        assert _closure(records, "libpng") == ["libpng", "zlib"]


class TestFeatures:
    """Feature records."""

    def test_feature_dependency_pulls_core_and_feature(self):
        records = _status(
            _pkg("app", "curl[ssl]"),
            _pkg("curl"),
            _pkg("curl", "openssl", feature="ssl"),
            _pkg("openssl"),
        )
        assert _closure(records, "app") == ["app", "curl", "curl[ssl]", "openssl"]

    def test_explicit_features(self):
        records = _status(
            _pkg("curl"),
            _pkg("curl", "openssl", feature="ssl"),
            _pkg("curl", "nghttp2", feature="http2"),
            _pkg("openssl"),
            _pkg("nghttp2"),
        )
        assert _closure(records, "curl", ["http2"]) == ["curl", "curl[http2]", "nghttp2"]

    def test_installed_default_features_when_none_requested(self):
        records = _status(
            _pkg("curl", default_features="ssl, brotli"),
            _pkg("curl", "openssl", feature="ssl"),
            _pkg("openssl"),
        )
        assert _closure(records, "curl") == ["curl", "curl[ssl]", "openssl"]

    def test_missing_feature(self):
        records = _status(_pkg("curl"))
        with pytest.raises(PackageNotFoundError) as info:
            _closure(records, "curl", ["ssl"])
        assert info.value.package == "curl[ssl]"


class TestDuplicatesAndStatus:
    """Deduplication of repeated status records."""

    def test_last_record_wins(self):
        records = _status(_pkg("libpng", "zlib"), _pkg("zlib"), _pkg("libpng"))
        assert _closure(records, "libpng") == ["libpng"]

    def test_removed_package_is_absent(self):
        records = _status(
            _pkg("zlib"), _pkg("zlib", status="purge ok not-installed"),
        )
        with pytest.raises(PackageNotFoundError):
            _closure(records, "zlib")


class TestMissing:
    """Missing packages are reported with their requester."""

    def test_missing_root(self):
        records = _status(_pkg("zlib"))
        with pytest.raises(PackageNotFoundError) as info:
            _closure(records, "missingpkg")
        assert info.value.package == "missingpkg"
        assert info.value.triplet == "x64-linux"
        assert info.value.requested_by is None

    def test_missing_transitive_dependency_names_requester(self):
        records = _status(_pkg("libpng", "zlibb"))
        with pytest.raises(PackageNotFoundError) as info:
            _closure(records, "libpng")
        assert info.value.name == "zlibb"
        assert info.value.requested_by == "libpng"
        assert "required by 'libpng'" in str(info.value)
