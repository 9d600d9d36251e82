"""Exception hierarchy for fatal publication-run conditions.

Every condition aborts the whole run; nothing here is retried. The entry point
maps each class to an exit code through ``exit_code``.
"""
from __future__ import annotations

from constants import ExitCodes


class AutopubError(Exception):
    """Base class for all fatal run errors."""

    exit_code = ExitCodes.FILE_ERROR


class MalformedMetadata(AutopubError):
    """The dependency metadata document is unparsable or missing required fields."""

    exit_code = ExitCodes.SNAPSHOT_ERROR


class SnapshotError(AutopubError):
    """The metadata snapshot is internally inconsistent."""

    exit_code = ExitCodes.SNAPSHOT_ERROR


class MissingResolveNode(SnapshotError):
    """A package has no node in the resolve graph."""

    def __init__(self, package_id: str):
        super().__init__(f"failed to find resolve node for package {package_id}")
        self.package_id = package_id


class DanglingDependency(SnapshotError):
    """A referenced package id or name does not exist in the snapshot."""

    def __init__(self, reference: str):
        super().__init__(f"no package in metadata matches {reference}")
        self.reference = reference


class RegistryError(AutopubError):
    """The registry (or archive host) answered with an unexpected status or body."""

    exit_code = ExitCodes.CONNECTION_ERROR

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ManifestError(AutopubError):
    """A manifest document is unparsable or lacks a table a rewrite needs."""

    exit_code = ExitCodes.FILE_ERROR


class CommandError(AutopubError):
    """An external command failed to launch or exited non-zero."""

    exit_code = ExitCodes.COMMAND_ERROR

    def __init__(self, argv, returncode: int | None = None, detail: str = ""):
        cmd = " ".join(argv)
        if returncode is None:
            message = f"failed to spawn `{cmd}`: {detail}"
        else:
            message = f"`{cmd}` exited with status {returncode}"
            if detail:
                message = f"{message}: {detail}"
        super().__init__(message)
        self.argv = list(argv)
        self.returncode = returncode
