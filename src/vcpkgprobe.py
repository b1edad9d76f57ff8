"""vcpkg-probe - find vcpkg-installed native libraries for a build.

    Returns:
        int: Exit code
"""
import logging
import sys

from args import parse_args
from cli_config import build_config
from cli_probe import run_probe
from common.errors import ConfigurationError
from common.logging_utils import add_file_handler, configure_logging
from constants import ExitCodes


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)

    configure_logging(args.LOG_LEVEL)
    if args.LOG_FILE:
        try:
            add_file_handler(args.LOG_FILE)
        except OSError as e:
            logging.error("Cannot open log file %s: %s", args.LOG_FILE, e)
            return ExitCodes.FILE_ERROR.value
        logging.info("Logging to file: %s", args.LOG_FILE)

    try:
        config = build_config(args)
    except ConfigurationError as e:
        logging.error("Configuration error: %s", e)
        return ExitCodes.CONFIG_ERROR.value

    if args.COMMAND == "probe":
        return run_probe(args, config)
    logging.error("Unknown command: %s", args.COMMAND)
    return ExitCodes.CONFIG_ERROR.value


if __name__ == "__main__":
    sys.exit(main())
