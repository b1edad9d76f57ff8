"""CLI configuration overrides for the probe settings.

Precedence, lowest first: environment, config file, command-line flags.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path

from constants import Constants
from probing.config import ProbeConfig, load_config_file

logger = logging.getLogger(__name__)


def build_config(args, environ=None) -> ProbeConfig:
    """Build the ProbeConfig for a CLI invocation.

    Raises ConfigurationError when the config file cannot be used.
    """
    config = ProbeConfig.from_env(environ)
    config_path = getattr(args, "CONFIG", None)
    if config_path:
        config = config.merged(load_config_file(config_path))
        logger.info("Loaded configuration from: %s", config_path)
    return apply_cli_overrides(config, args)


def apply_cli_overrides(config: ProbeConfig, args) -> ProbeConfig:
    """Apply command-line flags with highest precedence."""
    changes = {}
    if getattr(args, "ROOT", None):
        changes["root"] = Path(args.ROOT)
    if getattr(args, "TARGET", None):
        changes["target"] = args.TARGET
    if getattr(args, "PANIC", False):
        changes["panic"] = True
    if getattr(args, "COPY_DLLS", None):
        changes["out_dir"] = Path(args.COPY_DLLS)
    linkage = getattr(args, "LINKAGE", None)
    if linkage == "static":
        # as if cargo were building with the static CRT
        features = {f for f in config.target_features.split(",") if f}
        features.add(Constants.CRT_STATIC_FEATURE)
        changes["target_features"] = ",".join(sorted(features))
    return replace(config, **changes) if changes else config
