"""Probe configuration built from environment signals and config files.

Overrides are carried in an explicit :class:`ProbeConfig` value instead of
being read from ``os.environ`` inside the engine, so concurrent probes with
different settings do not interfere.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, FrozenSet, Mapping, Optional

import yaml

from common.errors import ConfigurationError
from constants import Constants

logger = logging.getLogger(__name__)

_GLOBAL_VARS = frozenset({Constants.ENV_ALL_STATIC, Constants.ENV_ALL_DYNAMIC})


def envify(name: str) -> str:
    """Map a package name to its environment-variable stem (``foo-bar`` -> ``FOO_BAR``)."""
    return name.upper().replace("-", "_")


@dataclass(frozen=True)
class ProbeConfig:
    """Every override signal a probe honors."""

    root: Optional[Path] = None
    triplet: Optional[str] = None
    all_static: bool = False
    all_dynamic: bool = False
    static_packages: FrozenSet[str] = frozenset()
    dynamic_packages: FrozenSet[str] = frozenset()
    disabled_packages: FrozenSet[str] = frozenset()
    disable_all: bool = False
    panic: bool = False
    installed_dir: Optional[str] = None
    target: str = Constants.DEFAULT_TARGET
    target_features: str = ""
    out_dir: Optional[Path] = None
    local_app_data: Optional[Path] = None
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ProbeConfig":
        """Snapshot the recognized variables of ``environ`` (default: os.environ)."""
        env = dict(os.environ if environ is None else environ)

        static_packages = set()
        dynamic_packages = set()
        disabled_packages = set()
        for var in env:
            if var in _GLOBAL_VARS:
                continue
            if var.endswith(Constants.PKG_STATIC_SUFFIX):
                static_packages.add(var[: -len(Constants.PKG_STATIC_SUFFIX)])
            elif var.endswith(Constants.PKG_DYNAMIC_SUFFIX):
                dynamic_packages.add(var[: -len(Constants.PKG_DYNAMIC_SUFFIX)])
            elif var.endswith(Constants.PKG_NO_VCPKG_SUFFIX):
                disabled_packages.add(var[: -len(Constants.PKG_NO_VCPKG_SUFFIX)])
            if var.startswith(Constants.PKG_DISABLE_PREFIX):
                disabled_packages.add(var[len(Constants.PKG_DISABLE_PREFIX):])

        def _path(var: str) -> Optional[Path]:
            value = env.get(var)
            return Path(value) if value else None

        return cls(
            root=_path(Constants.ENV_ROOT),
            triplet=env.get(Constants.ENV_TRIPLET) or None,
            all_static=Constants.ENV_ALL_STATIC in env,
            all_dynamic=Constants.ENV_ALL_DYNAMIC in env,
            static_packages=frozenset(static_packages),
            dynamic_packages=frozenset(dynamic_packages),
            disabled_packages=frozenset(disabled_packages),
            disable_all=Constants.ENV_NO_VCPKG in env,
            panic=Constants.ENV_PANIC in env,
            installed_dir=env.get(Constants.ENV_INSTALLED_DIR) or None,
            target=env.get(Constants.ENV_TARGET) or Constants.DEFAULT_TARGET,
            target_features=env.get(Constants.ENV_TARGET_FEATURES, ""),
            out_dir=_path(Constants.ENV_OUT_DIR),
            local_app_data=_path(Constants.ENV_LOCALAPPDATA),
        )

    def merged(self, data: Mapping[str, Any]) -> "ProbeConfig":
        """Return a copy overlaid with values from a config-file mapping.

        Recognized keys: root, triplet, linkage (static|dynamic), panic,
        installed_dir, target, target_features, packages (name -> static|dynamic).
        Unknown keys are kept in ``extra``.
        """
        known = {
            "root", "triplet", "linkage", "panic", "installed_dir",
            "target", "target_features", "packages",
        }
        changes: Dict[str, Any] = {}
        if data.get("root"):
            changes["root"] = Path(str(data["root"]))
        if data.get("triplet"):
            changes["triplet"] = str(data["triplet"])
        if data.get("installed_dir"):
            changes["installed_dir"] = str(data["installed_dir"])
        if data.get("target"):
            changes["target"] = str(data["target"])
        if data.get("target_features") is not None:
            features = data["target_features"]
            if isinstance(features, (list, tuple)):
                features = ",".join(str(f) for f in features)
            changes["target_features"] = str(features)
        if "panic" in data:
            changes["panic"] = bool(data["panic"])

        linkage = data.get("linkage")
        if linkage is not None:
            linkage = str(linkage).lower()
            if linkage not in ("static", "dynamic"):
                raise ConfigurationError(f"invalid linkage '{linkage}' in config file")
            changes["all_static"] = linkage == "static"
            changes["all_dynamic"] = linkage == "dynamic"

        packages = data.get("packages") or {}
        if not isinstance(packages, Mapping):
            raise ConfigurationError("'packages' in config file must be a mapping")
        static_packages = set(self.static_packages)
        dynamic_packages = set(self.dynamic_packages)
        for name, mode in packages.items():
            stem = envify(str(name))
            mode = str(mode).lower()
            static_packages.discard(stem)
            dynamic_packages.discard(stem)
            if mode == "static":
                static_packages.add(stem)
            elif mode == "dynamic":
                dynamic_packages.add(stem)
            else:
                raise ConfigurationError(
                    f"invalid linkage '{mode}' for package '{name}' in config file",
                    package=str(name),
                )
        changes["static_packages"] = frozenset(static_packages)
        changes["dynamic_packages"] = frozenset(dynamic_packages)

        extra = {k: v for k, v in data.items() if k not in known}
        if extra:
            logger.debug("Ignoring unknown config keys: %s", ", ".join(sorted(extra)))
            changes["extra"] = {**self.extra, **extra}
        return replace(self, **changes)

    def is_disabled(self, package: str) -> Optional[str]:
        """Return the variable that disables probing ``package``, if any."""
        if self.disable_all:
            return Constants.ENV_NO_VCPKG
        stem = envify(package)
        if stem in self.disabled_packages:
            return f"{Constants.PKG_DISABLE_PREFIX}{stem}"
        return None


def load_config_file(path: str) -> Dict[str, Any]:
    """Load the ``vcpkg`` section of a YAML (or JSON) config file.

    A file without a ``vcpkg`` section is used as a whole.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"cannot read config file: {e}", paths=[path]) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"invalid config file: {e}", paths=[path]) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError("config file must contain a mapping", paths=[path])
    section = data.get(Constants.CONFIG_SECTION, data)
    if not isinstance(section, dict):
        raise ConfigurationError(
            f"'{Constants.CONFIG_SECTION}' section must be a mapping", paths=[path]
        )
    return section
