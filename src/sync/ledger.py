"""Per-run bookkeeping of a sync: page ledger and resource status report."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterator, List, Optional

logger = logging.getLogger(__name__)


class LedgerState(str, Enum):
    """What happened to a page during the walk of one locale."""
    DONE = 'done'
    SKIPPED_UNTRANSLATED = 'skipped-untranslated'
    FAILED = 'failed'
    BLOCKED = 'blocked'


class SyncLedger:
    """Fullpath -> LedgerState for one locale of one push run.

    A page present in the ledger has been processed and is never visited
    again in that locale. A new ledger is created for every locale.
    """

    def __init__(self, locale: str):
        self.locale = locale
        self._states: Dict[str, LedgerState] = {}

    def __contains__(self, fullpath: str) -> bool:
        return fullpath in self._states

    def __len__(self) -> int:
        return len(self._states)

    def __iter__(self) -> Iterator[str]:
        return iter(self._states)

    def mark(self, fullpath: str, state: LedgerState) -> None:
        self._states[fullpath] = state

    def state_of(self, fullpath: str) -> Optional[LedgerState]:
        return self._states.get(fullpath)

    def with_state(self, state: LedgerState) -> List[str]:
        return [fullpath for fullpath, value in self._states.items() if value is state]


class Status(str, Enum):
    SUCCESS = 'success'
    ERROR = 'error'
    SKIPPED = 'skipped'
    BLOCKED = 'blocked'


@dataclass
class ResourceStatus:
    """Outcome of one operation on one resource.

    Attributes:
        kind: Resource kind (page, snippet, site, ...)
        identifier: Fullpath, slug or key of the resource
        locale: Locale of the operation, None for unlocalized resources
        status: Outcome
        operation: create, update, upload, fetch...
        message: Error or skip reason
    """
    kind: str
    identifier: str
    locale: Optional[str]
    status: Status
    operation: Optional[str] = None
    message: Optional[str] = None


@dataclass
class SyncReport:
    """Status trail of a sync run.

    Attributes:
        statuses: Every recorded status, in order
        unsynced: Locale -> fullpaths of pages left out of the walk
        listener: Called with each status as it is recorded (console output)
    """
    statuses: List[ResourceStatus] = field(default_factory=list)
    unsynced: Dict[str, List[str]] = field(default_factory=dict)
    listener: Optional[Callable[[ResourceStatus], None]] = field(default=None, repr=False)

    def record(
        self,
        kind: str,
        identifier: str,
        locale: Optional[str],
        status: Status,
        operation: Optional[str] = None,
        message: Optional[str] = None
    ) -> ResourceStatus:
        resource_status = ResourceStatus(kind, identifier, locale, status, operation, message)
        self.statuses.append(resource_status)
        if self.listener is not None:
            self.listener(resource_status)
        return resource_status

    def add_unsynced(self, locale: str, fullpaths: List[str]) -> None:
        if fullpaths:
            self.unsynced.setdefault(locale, []).extend(fullpaths)

    def count(self, status: Status) -> int:
        return sum(1 for resource_status in self.statuses if resource_status.status is status)

    @property
    def errors(self) -> List[ResourceStatus]:
        return [
            resource_status for resource_status in self.statuses
            if resource_status.status in (Status.ERROR, Status.BLOCKED)
        ]

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def for_resource(self, kind: str, identifier: str) -> List[ResourceStatus]:
        return [
            resource_status for resource_status in self.statuses
            if resource_status.kind == kind and resource_status.identifier == identifier
        ]
