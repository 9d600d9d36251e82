"""autopub - publish the rustc crate closure of a root package to crates.io.

Steps, in fixed order:

1. learn the upstream commit (``rustc -vV``) unless one is given,
2. fetch and unpack the source tree of that commit,
3. load ``cargo metadata`` for the root crate and resolve its local closure,
4. ask crates.io for the next major version of the sentinel crate,
5. rewrite, patch and publish every crate of the closure in order.

Exits with an ``ExitCodes`` value; the first error ends the run.
"""
import logging
import sys
import tempfile
from contextlib import contextmanager
from pathlib import Path

from args import parse_args
from cli_config import configure
from constants import Constants, ExitCodes
from common.errors import AutopubError
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from metadata.models import load_metadata
from metadata.resolver import resolve_named
from publisher import publish_all
from registry.crates_io import next_version
from toolchain.cargo import cargo_metadata, toolchain_commit
from toolchain.source import ensure_source

logger = logging.getLogger(__name__)


@contextmanager
def _workdir(path):
    """Yield ``path`` as-is, or a temporary directory removed afterwards."""
    if path:
        yield Path(path)
        return
    with tempfile.TemporaryDirectory(prefix="autopub-") as tmp:
        yield Path(tmp)


def root_crate_dir(source_root, root_package):
    """In-tree directory of the root crate, e.g. ``src/libsyntax``."""
    return Path(source_root) / "src" / f"lib{root_package}"


def run(args):
    """Run one publication. Any AutopubError aborts it.

    Args:
        args (argparse.Namespace): Parsed arguments, with config already applied.

    Returns:
        list: Names of the published crates, in publish order.
    """
    toolchain = Constants.TOOLCHAIN
    commit = args.COMMIT or toolchain_commit(toolchain)
    logger.info("Using upstream commit %s", commit)

    with _workdir(args.WORKDIR) as workdir:
        source_root = ensure_source(workdir, commit)
        metadata = load_metadata(
            cargo_metadata(root_crate_dir(source_root, Constants.ROOT_PACKAGE), toolchain)
        )
        crates = resolve_named(metadata, Constants.ROOT_PACKAGE)
        if is_debug_enabled(logger):
            logger.debug(
                "Resolved closure",
                extra=extra_context(
                    event="decision",
                    component="cli",
                    action="resolve",
                    count=len(crates),
                    order=[p.name for p in crates]
                )
            )

        version = next_version(Constants.sentinel_crate())
        logger.info("Going to publish %s", version)

        return publish_all(
            crates,
            commit,
            version,
            prefix=Constants.PREFIX,
            toolchain=toolchain,
            dry_run=args.DRY_RUN,
        )


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    configure_logging(args.LOG_LEVEL, args.LOG_FILE)
    logging.info("Arguments parsed.")

    try:
        configure(args)
        published = run(args)
    except AutopubError as exc:
        logging.error("%s", exc)
        sys.exit(exc.exit_code.value)

    logging.info("Published: %s", ", ".join(published) if published else "nothing")
    sys.exit(ExitCodes.SUCCESS.value)

if __name__ == "__main__":
    main()
