"""Argument parsing functionality for autopub."""

import argparse
from constants import Constants

def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="autopub",
        description=(
            "Publish the rustc crate closure of a root package to crates.io "
            "under a common name prefix"
        ),
        add_help=True,
    )

    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store",
                        type=str)
    parser.add_argument("--prefix",
                        dest="PREFIX",
                        help=f"Name prefix of the published crates (default: {Constants.PREFIX})",
                        action="store",
                        type=str)
    parser.add_argument("--root",
                        dest="ROOT_PACKAGE",
                        help=f"Root package whose closure is published (default: {Constants.ROOT_PACKAGE})",
                        action="store",
                        type=str)
    parser.add_argument("--toolchain",
                        dest="TOOLCHAIN",
                        help=f"rustup toolchain used for rustc and cargo (default: {Constants.TOOLCHAIN})",
                        action="store",
                        type=str)
    parser.add_argument("--commit",
                        dest="COMMIT",
                        help="Upstream commit to publish; skips asking rustc for its commit hash",
                        action="store",
                        type=str)
    parser.add_argument("--workdir",
                        dest="WORKDIR",
                        help="Directory to unpack sources into (kept after the run). "
                             "Defaults to a temporary directory.",
                        action="store",
                        type=str)
    parser.add_argument("--dry-run",
                        dest="DRY_RUN",
                        help="Pass --dry-run to cargo publish.",
                        action="store_true")
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='INFO')
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)

    return parser.parse_args(argv)
