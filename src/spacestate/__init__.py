"""
Hierarchical immutable state container for front-end applications.

A tree of spaces, each owning a slice of a larger application state. Spaces
spawn child spaces over nested attributes or list items, hand out frozen
snapshots with every descendant's state composed in, and notify subscribers
whenever their own state or any descendant's state changes.

Quick Start:
    >>> from spacestate import Space
    >>>
    >>> app = Space({"title": "Todos", "todos": [{"id": "1", "done": False}]})
    >>> unsubscribe = app.subscribe(print)
    initialized
    >>>
    >>> todos = app.sub_space("todos")
    >>> item = todos.sub_space("1")
    >>> toggle = item.set_state(lambda space, event: {"done": not space.state["done"]})
    >>> toggle(None)
    1#<lambda>
    >>> app.state["todos"][0]["done"]
    True

Architecture:
    Space (space.py)
        Public surface: state, set_state, sub_space, subscribe, parent_space.
        Runs propagation: invalidate self and ancestors, notify innermost first.
    Snapshot builder (snapshot.py)
        freeze / thaw / compose_snapshot. dicts → MappingProxyType, lists → tuple.
    SnapshotCache (snapshot_cache.py)
        Memoized snapshot per space, invalidated by token.
    SubscriptionRegistry (subscriptions.py)
        Ordered callbacks with per-callback failure isolation.
    List identity (list_identity.py)
        Locates list items by their id field for attachment and removal.

Modules:
    - space: Space, BoundHandler, AttachmentKind, AttachmentKey
    - snapshot: freeze, thaw, compose_snapshot
    - snapshot_cache: SnapshotCache
    - subscriptions: SubscriptionRegistry, Subscription
    - list_identity: find_item_index, locate_item, remove_item
    - config: SpaceConfig
    - errors: SpaceError and subclasses
"""

# Space
from spacestate.space import (
    Space,
    BoundHandler,
    AttachmentKind,
    AttachmentKey,
    DEFAULT_ROOT_NAME,
)

# Snapshots
from spacestate.snapshot import freeze, thaw, compose_snapshot
from spacestate.snapshot_cache import SnapshotCache

# Subscriptions
from spacestate.subscriptions import Subscription, SubscriptionRegistry

# List identity
from spacestate.list_identity import find_item_index, locate_item, remove_item

# Configuration
from spacestate.config import SpaceConfig, DEFAULT_CONFIG

# Errors
from spacestate.errors import (
    SpaceError,
    InvalidRemoval,
    MissingListIdentity,
    DuplicateListIdentity,
    ListIdentityChange,
    SubscriberFailure,
)

__all__ = [
    # Space
    'Space',
    'BoundHandler',
    'AttachmentKind',
    'AttachmentKey',
    'DEFAULT_ROOT_NAME',
    # Snapshots
    'freeze',
    'thaw',
    'compose_snapshot',
    'SnapshotCache',
    # Subscriptions
    'Subscription',
    'SubscriptionRegistry',
    # List identity
    'find_item_index',
    'locate_item',
    'remove_item',
    # Configuration
    'SpaceConfig',
    'DEFAULT_CONFIG',
    # Errors
    'SpaceError',
    'InvalidRemoval',
    'MissingListIdentity',
    'DuplicateListIdentity',
    'ListIdentityChange',
    'SubscriberFailure',
]

__version__ = '1.0.0'
__description__ = 'Hierarchical immutable state container with subscriptions'
