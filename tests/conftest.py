"""Shared fixtures: build small vcpkg installed trees on disk."""

from pathlib import Path

import pytest

from probing.config import ProbeConfig


class FakeVcpkgTree:
    """Writes a vcpkg root with a status database, file lists and library files."""

    def __init__(self, root: Path):
        self.root = root
        self.installed = root / "installed"
        self.paragraphs = []
        (root / ".vcpkg-root").parent.mkdir(parents=True, exist_ok=True)
        (root / ".vcpkg-root").write_text("", encoding="utf-8")
        (self.installed / "vcpkg" / "info").mkdir(parents=True, exist_ok=True)

    def add(self, name, triplet, depends="", files=(), version="1.0", feature=None,
            default_features=None, status="install ok installed", extra=None):
        lines = [f"Package: {name}"]
        if feature:
            lines.append(f"Feature: {feature}")
        else:
            lines.append(f"Version: {version}")
        lines.append(f"Depends: {depends}")
        lines.append(f"Architecture: {triplet}")
        if default_features is not None:
            lines.append(f"Default-Features: {default_features}")
        for key, value in (extra or {}).items():
            lines.append(f"{key}: {value}")
        lines.append(f"Status: {status}")
        self.paragraphs.append("\n".join(lines) + "\n")

        (self.installed / triplet / "include").mkdir(parents=True, exist_ok=True)
        if feature:
            return self
        entries = [f"{triplet}/"]
        for rel in files:
            target = self.installed / triplet / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(f"{name}:{rel}".encode("utf-8"))
            entries.append(f"{triplet}/{rel}")
        list_file = self.installed / "vcpkg" / "info" / f"{name}_{version}_{triplet}.list"
        list_file.write_text("\n".join(entries) + "\n", encoding="utf-8")
        return self

    def write(self):
        status = self.installed / "vcpkg" / "status"
        status.write_text("\n".join(self.paragraphs), encoding="utf-8")
        return self

    def config(self, **kwargs) -> ProbeConfig:
        kwargs.setdefault("root", self.root)
        return ProbeConfig(**kwargs)


@pytest.fixture
def vcpkg_tree(tmp_path):
    return FakeVcpkgTree(tmp_path / "vcpkg")
