"""Tests for loading the status database and file lists."""

from probing.database import (
    list_file_for,
    load_database,
    read_owned_files,
    status_files,
)
from probing.locator import locate
from probing.models import PackageRecord, Triplet


def _record(name="zlib", version="1.3.1", port_version="", arch="x64-linux"):
    return PackageRecord(name=name, architecture=arch, version=version, port_version=port_version)


class TestStatusFiles:
    def test_updates_follow_status_in_name_order(self, vcpkg_tree):
        vcpkg_tree.add("zlib", "x64-linux", files=["lib/libz.a"]).write()
        updates = vcpkg_tree.installed / "vcpkg" / "updates"
        updates.mkdir()
        for name in ("000002", "000001"):
            (updates / name).write_text("", encoding="utf-8")
        tree = locate(vcpkg_tree.config(), Triplet("x64-linux"))
        assert [p.name for p in status_files(tree)] == ["status", "000001", "000002"]


class TestListFiles:
    """Locating and reading ``info/*.list``."""

    def test_port_version_naming(self, tmp_path):
        (tmp_path / "zlib_1.3.1#2_x64-linux.list").write_text("", encoding="utf-8")
        found = list_file_for(_record(port_version="2"), tmp_path)
        assert found.name == "zlib_1.3.1#2_x64-linux.list"

    def test_plain_naming(self, tmp_path):
        (tmp_path / "zlib_1.3.1_x64-linux.list").write_text("", encoding="utf-8")
        assert list_file_for(_record(), tmp_path).name == "zlib_1.3.1_x64-linux.list"

    def test_falls_back_to_glob(self, tmp_path):
        (tmp_path / "zlib_1.2.13_x64-linux.list").write_text("", encoding="utf-8")
        (tmp_path / "zlib_1.2.13_x64-windows.list").write_text("", encoding="utf-8")
        assert list_file_for(_record(), tmp_path).name == "zlib_1.2.13_x64-linux.list"

    def test_missing(self, tmp_path):
        assert list_file_for(_record(), tmp_path) is None

    def test_read_owned_files_strips_triplet_and_directories(self, tmp_path):
        list_file = tmp_path / "zlib.list"
        list_file.write_text(
            "x64-linux/\nx64-linux/lib/\nx64-linux/lib/libz.a\n\nx64-linux/include/zlib.h\n",
            encoding="utf-8",
        )
        assert read_owned_files(list_file, "x64-linux") == ["lib/libz.a", "include/zlib.h"]


class TestLoadDatabase:
    def test_owned_files_attached_to_active_triplet_only(self, vcpkg_tree):
        (vcpkg_tree
         .add("zlib", "x64-linux", files=["lib/libz.a"])
         .add("zlib", "x64-windows", files=["lib/zlib.lib"])
         .add("curl", "x64-linux", feature="ssl", depends="openssl")
         .write())
        tree = locate(vcpkg_tree.config(), Triplet("x64-linux"))
        records = {(r.name, r.architecture, r.feature): r for r in load_database(tree)}
        assert records[("zlib", "x64-linux", "")].owned_files == ["lib/libz.a"]
        assert records[("zlib", "x64-windows", "")].owned_files == []
        assert records[("curl", "x64-linux", "ssl")].owned_files == []

    def test_record_without_list_file(self, vcpkg_tree):
        vcpkg_tree.add("zlib", "x64-linux", files=["lib/libz.a"]).write()
        for list_file in (vcpkg_tree.installed / "vcpkg" / "info").iterdir():
            list_file.unlink()
        tree = locate(vcpkg_tree.config(), Triplet("x64-linux"))
        record = load_database(tree)[0]
        assert record.owned_files == []
        assert record.list_file is None

    def test_list_file_recorded(self, vcpkg_tree):
        vcpkg_tree.add("zlib", "x64-linux", files=["lib/libz.a"]).write()
        tree = locate(vcpkg_tree.config(), Triplet("x64-linux"))
        record = load_database(tree)[0]
        assert record.list_file == tree.info_dir / "zlib_1.0_x64-linux.list"
