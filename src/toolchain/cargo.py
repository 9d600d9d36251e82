"""Invocation of the rustc/cargo binaries."""
from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence

from constants import Constants
from common.errors import CommandError
from common.logging_utils import extra_context, is_debug_enabled, Timer

logger = logging.getLogger(__name__)


def run_command(argv: Sequence[str], cwd: Optional[str | Path] = None, capture: bool = True) -> str:
    """Run ``argv`` and return its stdout (empty when not captured).

    Raises:
        CommandError: If the process cannot be spawned or exits non-zero.
    """
    argv = list(argv)
    with Timer() as t:
        try:
            result = subprocess.run(
                argv,
                cwd=str(cwd) if cwd is not None else None,
                capture_output=capture,
                text=True,
                check=False,
            )
        except OSError as exc:
            raise CommandError(argv, detail=str(exc)) from exc

    if is_debug_enabled(logger):
        logger.debug(
            "Command finished",
            extra=extra_context(
                event="subprocess",
                component="cargo",
                action=argv[0],
                returncode=result.returncode,
                duration_ms=t.duration_ms(),
                cwd=str(cwd) if cwd is not None else None
            )
        )
    if result.returncode != 0:
        detail = (result.stderr or "").strip() if capture else ""
        raise CommandError(argv, returncode=result.returncode, detail=detail)
    return result.stdout if capture else ""


def _toolchain_arg(toolchain: Optional[str]) -> List[str]:
    toolchain = toolchain or Constants.TOOLCHAIN
    return [f"+{toolchain}"] if toolchain else []


def parse_commit_hash(version_output: str) -> str:
    """Extract the ``commit-hash`` value from ``rustc -vV`` output.

    Raises:
        CommandError: If the output carries no commit hash.
    """
    for line in version_output.splitlines():
        if line.startswith("commit-hash"):
            parts = line.split()
            if len(parts) >= 2 and parts[1] != "unknown":
                return parts[1]
    raise CommandError(["rustc", "-vV"], detail="failed to find commit hash in output")


def toolchain_commit(toolchain: Optional[str] = None) -> str:
    """Commit of the rust-lang/rust tree the toolchain was built from."""
    logger.info("Learning rustc's version")
    output = run_command(["rustc", *_toolchain_arg(toolchain), "-vV"])
    return parse_commit_hash(output)


def cargo_metadata(crate_dir: str | Path, toolchain: Optional[str] = None) -> str:
    """Raw ``cargo metadata --format-version=1`` JSON for the crate at ``crate_dir``."""
    logger.info("Learning about the dependency graph")
    return run_command(
        ["cargo", *_toolchain_arg(toolchain), "metadata", "--format-version=1"],
        cwd=crate_dir,
    )


def cargo_publish(crate_dir: str | Path, toolchain: Optional[str] = None, dry_run: bool = False) -> None:
    """Publish the crate at ``crate_dir``; output streams to the console."""
    argv = ["cargo", *_toolchain_arg(toolchain), "publish", "--allow-dirty", "--no-verify"]
    if dry_run:
        argv.append("--dry-run")
    run_command(argv, cwd=crate_dir, capture=False)
