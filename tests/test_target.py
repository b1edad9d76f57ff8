"""Tests for triplet and linkage selection."""

import pytest

from common.errors import ConfigurationError, UnsupportedTargetError
from probing.config import ProbeConfig
from probing.models import LinkageMode, OsFamily, Target, Triplet
from probing.target import derive_triplet, resolve_target


def _config(target="x86_64-pc-windows-msvc", features="", **kwargs):
    return ProbeConfig(target=target, target_features=features, **kwargs)


class TestDeriveTriplet:
    """Target triple to triplet mapping."""

    @pytest.mark.parametrize("triple,linkage,expected", [
        ("x86_64-pc-windows-msvc", LinkageMode.DYNAMIC, "x64-windows"),
        ("i686-pc-windows-msvc", LinkageMode.DYNAMIC, "x86-windows"),
        ("aarch64-pc-windows-msvc", LinkageMode.DYNAMIC, "arm64-windows"),
        ("x86_64-pc-windows-msvc", LinkageMode.STATIC, "x64-windows-static-md"),
        ("x86_64-pc-windows-gnu", LinkageMode.DYNAMIC, "x64-mingw-dynamic"),
        ("x86_64-pc-windows-gnu", LinkageMode.STATIC, "x64-mingw-static"),
        ("x86_64-unknown-linux-gnu", LinkageMode.STATIC, "x64-linux"),
        ("x86_64-unknown-linux-gnu", LinkageMode.DYNAMIC, "x64-linux-dynamic"),
        ("aarch64-apple-darwin", LinkageMode.STATIC, "arm64-osx"),
        ("x86_64-apple-darwin", LinkageMode.STATIC, "x64-osx"),
        ("wasm32-unknown-emscripten", LinkageMode.STATIC, "wasm32-emscripten"),
    ])
    def test_known_targets(self, triple, linkage, expected):
        assert derive_triplet(Target.parse(triple), linkage) == Triplet(expected)

    def test_crt_static_selects_static_windows_triplet(self):
        target = Target.parse("x86_64-pc-windows-msvc", "crt-static,sse2")
        assert derive_triplet(target, LinkageMode.STATIC) == Triplet("x64-windows-static")

    def test_unknown_target(self):
        with pytest.raises(UnsupportedTargetError) as info:
            derive_triplet(Target.parse("riscv64gc-unknown-none-elf"), LinkageMode.STATIC)
        assert "riscv64gc-unknown-none-elf" in str(info.value)


class TestTripletModel:
    """Properties derived from triplet names."""

    def test_os_family(self):
        assert Triplet("x64-windows-static").os_family is OsFamily.WINDOWS
        assert Triplet("x64-mingw-dynamic").os_family is OsFamily.MINGW
        assert Triplet("arm64-osx").os_family is OsFamily.OSX
        assert Triplet("wasm32-emscripten").os_family is OsFamily.EMSCRIPTEN
        assert Triplet("x64-uwp").os_family is OsFamily.WINDOWS

    def test_implied_linkage(self):
        assert Triplet("x64-windows").implied_linkage is LinkageMode.DYNAMIC
        assert Triplet("x64-windows-static").implied_linkage is LinkageMode.STATIC
        assert Triplet("x64-windows-static-md").implied_linkage is LinkageMode.STATIC
        assert Triplet("x64-linux").implied_linkage is LinkageMode.STATIC
        assert Triplet("x64-linux-dynamic").implied_linkage is LinkageMode.DYNAMIC


class TestResolveTarget:
    """Override precedence."""

    def test_windows_default_is_dynamic(self):
        assert resolve_target("zlib", _config()) == (Triplet("x64-windows"), LinkageMode.DYNAMIC)

    def test_crt_static_implies_static(self):
        triplet, linkage = resolve_target("zlib", _config(features="crt-static"))
        assert linkage is LinkageMode.STATIC
        assert triplet == Triplet("x64-windows-static")

    def test_linux_default_is_static(self):
        triplet, linkage = resolve_target("zlib", _config(target="x86_64-unknown-linux-gnu"))
        assert (triplet.name, linkage) == ("x64-linux", LinkageMode.STATIC)

    def test_global_override_beats_crt_static(self):
        config = _config(features="crt-static", all_dynamic=True)
        assert resolve_target("zlib", config)[1] is LinkageMode.DYNAMIC

    def test_per_package_override_beats_global(self):
        config = _config(all_dynamic=True, static_packages=frozenset({"LIBPNG"}))
        assert resolve_target("libpng", config)[1] is LinkageMode.STATIC
        assert resolve_target("zlib", config)[1] is LinkageMode.DYNAMIC

    def test_per_package_name_is_envified(self):
        config = _config(static_packages=frozenset({"LIBJPEG_TURBO"}))
        assert resolve_target("libjpeg-turbo", config)[1] is LinkageMode.STATIC

    def test_per_call_override_beats_everything(self):
        config = _config(all_static=True, static_packages=frozenset({"ZLIB"}))
        assert resolve_target("zlib", config, linkage=LinkageMode.DYNAMIC)[1] is LinkageMode.DYNAMIC

    def test_conflicting_global_overrides(self):
        with pytest.raises(ConfigurationError):
            resolve_target("zlib", _config(all_static=True, all_dynamic=True))

    def test_conflicting_package_overrides(self):
        config = _config(
            static_packages=frozenset({"ZLIB"}), dynamic_packages=frozenset({"ZLIB"})
        )
        with pytest.raises(ConfigurationError) as info:
            resolve_target("zlib", config)
        assert info.value.package == "zlib"

    def test_conflicting_globals_with_package_override(self):
        config = ProbeConfig.from_env({
            "VCPKG_ALL_STATIC": "1", "VCPKG_ALL_DYNAMIC": "1", "ZLIB_STATIC": "1",
        })
        with pytest.raises(ConfigurationError):
            resolve_target("zlib", config)

    def test_conflicting_globals_with_per_call_override(self):
        config = _config(all_static=True, all_dynamic=True)
        with pytest.raises(ConfigurationError):
            resolve_target("zlib", config, linkage=LinkageMode.DYNAMIC)

    def test_conflicting_package_overrides_with_per_call_override(self):
        config = _config(
            static_packages=frozenset({"ZLIB"}), dynamic_packages=frozenset({"ZLIB"})
        )
        with pytest.raises(ConfigurationError):
            resolve_target("zlib", config, linkage=LinkageMode.STATIC)

    def test_explicit_triplet_bypasses_derivation(self):
        config = _config(target="riscv64gc-unknown-none-elf", triplet="x64-windows-static")
        assert resolve_target("zlib", config) == (
            Triplet("x64-windows-static"), LinkageMode.STATIC
        )

    def test_per_call_triplet_beats_config_triplet(self):
        config = _config(triplet="x64-windows")
        triplet, linkage = resolve_target("zlib", config, triplet="x64-linux")
        assert triplet == Triplet("x64-linux")
        assert linkage is LinkageMode.STATIC

    def test_unsupported_target_without_override(self):
        with pytest.raises(UnsupportedTargetError):
            resolve_target("zlib", _config(target="riscv64gc-unknown-none-elf"))
