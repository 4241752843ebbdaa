"""Push and pull of a site between a local directory and the engine."""

from .content_assets import ContentAssetsLocalizer, ContentAssetsPusher
from .content_pusher import ContentEntriesPusher, DeferredRelationships
from .errors import LocaleMismatchError, PreconditionError, PushError
from .ledger import LedgerState, ResourceStatus, Status, SyncLedger, SyncReport
from .pages_pusher import PagesPusher
from .pull_engine import PullEngine
from .push_engine import WRITERS, PushEngine, PushOptions
from .push_order import PushOrder, build_push_order
from .resource_pushers import ContentTypesPusher, SitePusher, SnippetsPusher, TranslationsPusher

__all__ = [
    'ContentAssetsLocalizer',
    'ContentAssetsPusher',
    'ContentEntriesPusher',
    'DeferredRelationships',
    'LocaleMismatchError',
    'PreconditionError',
    'PushError',
    'LedgerState',
    'ResourceStatus',
    'Status',
    'SyncLedger',
    'SyncReport',
    'PagesPusher',
    'PullEngine',
    'WRITERS',
    'PushEngine',
    'PushOptions',
    'PushOrder',
    'build_push_order',
    'ContentTypesPusher',
    'SitePusher',
    'SnippetsPusher',
    'TranslationsPusher',
]
