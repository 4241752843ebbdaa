"""Data models for CLI operations."""

from dataclasses import dataclass
from enum import IntEnum

from src.sync.ledger import Status, SyncReport


class ExitCode(IntEnum):
    """Exit codes of the mounter commands.

    - SUCCESS (0): Operation completed successfully
    - GENERAL_ERROR (1): General error (configuration, local files)
    - RESOURCE_ERRORS (2): Completed, but some resources failed or were blocked
    - AUTH_ERROR (3): Authentication failure
    - NETWORK_ERROR (4): Engine unreachable or failing
    - VALIDATION_ERROR (5): Remote site cannot receive the local site (locales)

    Example:
        >>> sys.exit(ExitCode.SUCCESS)
    """
    SUCCESS = 0
    GENERAL_ERROR = 1
    RESOURCE_ERRORS = 2
    AUTH_ERROR = 3
    NETWORK_ERROR = 4
    VALIDATION_ERROR = 5


@dataclass
class PushSummary:
    """Counts of a push run, for display.

    Attributes:
        created_count: Resources created remotely
        updated_count: Resources updated remotely
        skipped_count: Resources skipped (untranslated, already uploaded)
        error_count: Resources the engine rejected
        blocked_count: Pages not attempted because their parent failed
        unsynced_count: Pages left out of the walk (layout cycle)
    """
    created_count: int = 0
    updated_count: int = 0
    skipped_count: int = 0
    error_count: int = 0
    blocked_count: int = 0
    unsynced_count: int = 0

    @classmethod
    def from_report(cls, report: SyncReport) -> 'PushSummary':
        summary = cls()
        for resource_status in report.statuses:
            if resource_status.status is Status.SUCCESS:
                if resource_status.operation == 'create':
                    summary.created_count += 1
                else:
                    summary.updated_count += 1
            elif resource_status.status is Status.SKIPPED:
                summary.skipped_count += 1
            elif resource_status.status is Status.ERROR:
                summary.error_count += 1
            elif resource_status.status is Status.BLOCKED:
                summary.blocked_count += 1
        summary.unsynced_count = sum(len(fullpaths) for fullpaths in report.unsynced.values())
        return summary

    @property
    def has_failures(self) -> bool:
        return bool(self.error_count or self.blocked_count or self.unsynced_count)
