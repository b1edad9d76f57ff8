"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    PROBE_FAILED = 2
    CONFIG_ERROR = 3


class LinkageChoices(Enum):
    """Linkage values accepted on the command line.

    Args:
        Enum (string): Linkage names as spelled by the user.
    """

    DLL = "dll"
    STATIC = "static"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    # Environment signals
    ENV_ROOT = "VCPKG_ROOT"
    ENV_TRIPLET = "VCPKGRS_TRIPLET"
    ENV_ALL_STATIC = "VCPKG_ALL_STATIC"
    ENV_ALL_DYNAMIC = "VCPKG_ALL_DYNAMIC"
    ENV_PANIC = "VCPKGRS_PANIC"
    ENV_INSTALLED_DIR = "VCPKGRS_INSTALLED_DIR"
    ENV_NO_VCPKG = "NO_VCPKG"
    ENV_LOG_LEVEL = "VCPKGRS_LOG_LEVEL"
    ENV_TARGET = "TARGET"
    ENV_TARGET_FEATURES = "CARGO_CFG_TARGET_FEATURE"
    ENV_OUT_DIR = "OUT_DIR"
    ENV_LOCALAPPDATA = "LOCALAPPDATA"

    # Per-package suffixes/prefixes, applied to the envified package name
    PKG_STATIC_SUFFIX = "_STATIC"
    PKG_DYNAMIC_SUFFIX = "_DYNAMIC"
    PKG_NO_VCPKG_SUFFIX = "_NO_VCPKG"
    PKG_DISABLE_PREFIX = "VCPKGRS_NO_"

    # On-disk layout
    ROOT_MARKER = ".vcpkg-root"
    INSTALLED_DIR = "installed"
    VCPKG_DIR = "vcpkg"
    STATUS_FILE = "status"
    UPDATES_DIR = "updates"
    INFO_DIR = "info"
    USER_TARGETS_FILE = "vcpkg.user.targets"

    DEFAULT_TARGET = "x86_64-pc-windows-msvc"
    CRT_STATIC_FEATURE = "crt-static"
    CORE_FEATURE = "core"

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
    CONFIG_SECTION = "vcpkg"
