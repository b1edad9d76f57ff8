"""Argument parsing functionality for vcpkg-probe."""

import argparse
from constants import Constants, LinkageChoices


def build_parser():
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="vcpkg-probe",
        description=(
            "vcpkg library finder - examine what a build script would link"
        ),
        add_help=True,
    )
    parser.add_argument("-t", "--target",
                        dest="TARGET",
                        help="Build target triple to find libraries for "
                             f"(default: $TARGET or {Constants.DEFAULT_TARGET})",
                        action="store",
                        type=str)
    parser.add_argument("--root",
                        dest="ROOT",
                        help="vcpkg root directory (default: $VCPKG_ROOT)",
                        action="store",
                        type=str)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store",
                        type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'])
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)

    subparsers = parser.add_subparsers(dest="COMMAND", metavar="COMMAND")
    subparsers.required = True

    probe = subparsers.add_parser("probe", help="try to find a package")
    probe.add_argument("PACKAGE",
                       help="probe for a library and display paths and cargo metadata")
    probe.add_argument("-l", "--linkage",
                       dest="LINKAGE",
                       help="Linkage to look for",
                       action="store",
                       type=str.lower,
                       choices=[c.value for c in LinkageChoices])
    probe.add_argument("--triplet",
                       dest="TRIPLET",
                       help="Explicit vcpkg triplet (bypasses target mapping)",
                       action="store",
                       type=str)
    probe.add_argument("-f", "--feature",
                       dest="FEATURES",
                       help="Feature of the package to include (repeatable)",
                       action="append",
                       type=str,
                       default=[])
    probe.add_argument("--lib-name",
                       dest="LIB_NAMES",
                       help="Library name to look for instead of the derived names "
                            "(LIB or LIB:DLL, repeatable)",
                       action="append",
                       type=str,
                       default=[])
    probe.add_argument("--metadata",
                       dest="METADATA_ONLY",
                       help="Only print the cargo metadata lines",
                       action="store_true")
    probe.add_argument("--include",
                       dest="EMIT_INCLUDES",
                       help="Add cargo:include lines to the metadata",
                       action="store_true")
    probe.add_argument("--copy-dlls",
                       dest="COPY_DLLS",
                       help="Copy runtime libraries of a dynamic probe into this directory",
                       action="store",
                       type=str)
    probe.add_argument("--panic",
                       dest="PANIC",
                       help="Exit with a non-zero status when the probe fails",
                       action="store_true")
    return parser


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    return build_parser().parse_args(argv)
