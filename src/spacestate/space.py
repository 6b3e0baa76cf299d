"""
Space: one node of a hierarchical, immutable state tree.

A Space owns a slice of application state. It can attach child spaces over
nested attributes or list items, hands out frozen snapshots of its state with
every child's state composed in, and notifies subscribers whenever its own
state or any descendant's state changes.

Ownership:
- parent → child: the sole owning edge, stored in the parent's children dict
- child → parent: weakref only, used for traversal

Mutation path (all synchronous, nothing batched):
    set_state(value)          → apply to backing state
    set_state(fn)(event)      → apply fn(space, event)
        → invalidate this space and every ancestor
        → notify this space, then each ancestor (innermost to outermost)

A list item whose mutation returns None is removed from the owning list; the
parent performs that removal and propagation starts from the parent.

Thread safety: Not thread-safe (all operations expected on one thread).
"""
from dataclasses import dataclass
from enum import Enum
import logging
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple
import weakref

from spacestate.config import DEFAULT_CONFIG, SpaceConfig
from spacestate.errors import InvalidRemoval, ListIdentityChange, SubscriberFailure
from spacestate.list_identity import find_item_index, locate_item, remove_item
from spacestate.snapshot import compose_snapshot, thaw
from spacestate.snapshot_cache import SnapshotCache
from spacestate.subscriptions import SubscriberCallback, Subscription, SubscriptionRegistry

logger = logging.getLogger(__name__)

DEFAULT_ROOT_NAME = "root"

Reducer = Callable[['Space', Any], Any]


class AttachmentKind(Enum):
    """How a child Space is bound to its parent's backing state."""
    ATTRIBUTE = "attribute"  # mapping key
    INDEX = "index"          # list position
    ID = "id"                # list element carrying a matching id field


@dataclass(frozen=True)
class AttachmentKey:
    kind: AttachmentKind
    value: Any


def _is_index(key: Any) -> bool:
    return isinstance(key, int) and not isinstance(key, bool)


class BoundHandler:
    """Event handler produced by set_state(callback).

    Calling the handler with an event runs callback(space, event) and applies
    the result to the space exactly like set_state(result). The space is bound
    here, so the callback can use space.state / space.set_state /
    space.sub_space without any outside binding.
    """

    __slots__ = ('space', 'callback', 'label')

    def __init__(self, space: 'Space', callback: Reducer, label: Optional[str] = None):
        self.space = space
        self.callback = callback
        self.label = label

    def __call__(self, event: Any = None) -> None:
        result = self.callback(self.space, event)
        self.space._dispatch(result, self.space._cause(self.label, self.callback))

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, BoundHandler):
            return NotImplemented
        return self.space is other.space and self.callback == other.callback and self.label == other.label

    def __hash__(self) -> int:
        return hash((id(self.space), self.callback, self.label))

    def __repr__(self) -> str:
        name = getattr(self.callback, '__name__', repr(self.callback))
        return f"BoundHandler({self.space.name}#{self.label or name})"


class Space:
    """
    A node of the state tree.

    Core attributes:
    - name: Identifier used in cause labels and parent_space() lookups
    - _backing: Mutable raw state, never exposed
    - _parent_ref: weakref to the parent (None for the root)
    - _key: AttachmentKey binding this space into its parent
    - _children: AttachmentKey → child Space
    - _subscribers: SubscriptionRegistry
    - _snapshot: SnapshotCache holding the composed frozen state

    Public surface: state, set_state(), sub_space(), subscribe(), parent_space().
    """

    def __init__(
        self,
        initial_state: Any = None,
        name: str = DEFAULT_ROOT_NAME,
        config: Optional[SpaceConfig] = None,
    ):
        """
        Create a root Space.

        Args:
            initial_state: Initial backing state (dict, list, or scalar). It is
                           copied, so later changes to the passed object are not seen.
            name: Space name, "root" unless overridden.
            config: Tree-wide settings, SpaceConfig() by default.
        """
        self.name = name
        self._config = config if config is not None else DEFAULT_CONFIG
        self._backing: Any = thaw(initial_state)
        self._parent_ref: Optional[weakref.ReferenceType] = None
        self._key: Optional[AttachmentKey] = None
        self._children: Dict[AttachmentKey, 'Space'] = {}
        self._subscribers = SubscriptionRegistry()
        self._snapshot: SnapshotCache = SnapshotCache()
        self._detached = False

    @classmethod
    def _create_child(cls, parent: 'Space', key: AttachmentKey, raw_value: Any, name: str) -> 'Space':
        child = cls(raw_value, name=name, config=parent._config)
        child._parent_ref = weakref.ref(parent)
        child._key = key
        return child

    def __repr__(self) -> str:
        return f"Space(name={self.name!r}, path={self.path!r}, subscribers={len(self._subscribers)})"

    # === Tree navigation ===

    @property
    def config(self) -> SpaceConfig:
        return self._config

    @property
    def parent(self) -> Optional['Space']:
        """Immediate parent, or None for the root (and for detached spaces)."""
        return self._parent_ref() if self._parent_ref is not None else None

    @property
    def key(self) -> Any:
        """Attachment key in the parent (attribute, index, or item id). None for the root."""
        return self._key.value if self._key is not None else None

    @property
    def is_list_item(self) -> bool:
        """True if attached to a list element by its id field."""
        return self._key is not None and self._key.kind is AttachmentKind.ID and not self._detached

    @property
    def is_detached(self) -> bool:
        """True once the space was removed from its parent."""
        return self._detached

    @property
    def children(self) -> MappingProxyType:
        """Read-only view of attached children keyed by attachment key."""
        return MappingProxyType({key.value: child for key, child in self._children.items()})

    @property
    def root_space(self) -> 'Space':
        space = self
        while space.parent is not None:
            space = space.parent
        return space

    @property
    def path(self) -> Tuple[Any, ...]:
        """Attachment keys from the root down to this space."""
        keys: List[Any] = []
        space: Optional[Space] = self
        while space is not None and space._key is not None:
            keys.append(space._key.value)
            space = space.parent
        return tuple(reversed(keys))

    @property
    def version(self) -> int:
        """Advances every time this space's snapshot is invalidated."""
        return self._snapshot.token

    def _ancestors(self) -> Iterator['Space']:
        space = self.parent
        while space is not None:
            yield space
            space = space.parent

    def parent_space(self, name: str) -> Optional['Space']:
        """Find the nearest ancestor (self excluded) named name.

        Returns:
            The matching ancestor, or None if there is no such ancestor.
        """
        for space in self._ancestors():
            if space.name == name:
                return space
        return None

    # === State access ===

    @property
    def state(self) -> Any:
        """Frozen snapshot of this space's state with all child states composed in.

        Consecutive reads without an intervening mutation return the same object.
        """
        return self._snapshot.get_or_compute(self._compose)

    def _compose(self) -> Any:
        splices = []
        for key, child in self._children.items():
            position = self._locate(key)
            if position is not None:
                splices.append((position, child.state))
        return compose_snapshot(self._backing, splices)

    def _locate(self, key: AttachmentKey) -> Any:
        """Current position of an attachment point in the backing state, or None if gone."""
        backing = self._backing
        if key.kind is AttachmentKind.ATTRIBUTE:
            return key.value if isinstance(backing, dict) and key.value in backing else None
        if not isinstance(backing, list):
            return None
        if key.kind is AttachmentKind.INDEX:
            return key.value if key.value < len(backing) else None
        return locate_item(backing, key.value, self._config.id_field)

    # === Child attachment ===

    def sub_space(self, key: Any, name: Optional[str] = None, *, by_id: Optional[bool] = None) -> 'Space':
        """Attach (or return the already attached) child space at key.

        Args:
            key: Mapping key for dict state. For list state, an int is a
                 position and anything else is an item id.
            name: Child name, str(key) (or the item id) by default.
            by_id: Force (True) or forbid (False) reading an int key as an id
                   on list state, e.g. for lists whose ids are ints. A position
                   that lands on an element with an id attaches by that id.

        Raises:
            KeyError: key is missing from dict state.
            IndexError: Position is out of range.
            MissingListIdentity: No list element carries the id.
            DuplicateListIdentity: Several list elements carry the id.
            TypeError: The space holds a scalar.
        """
        attachment = self._attachment_key(key, by_id)
        existing = self._children.get(attachment)
        if existing is not None:
            return existing

        raw_value = self._raw_value(attachment)
        if name is None:
            name = str(attachment.value if attachment.kind is AttachmentKind.ID else key)
        child = self._create_child(self, attachment, raw_value, name)
        self._children[attachment] = child
        logger.debug(f"Attached space '{child.name}' to '{self.name}' ({attachment.kind.value}={key!r})")
        return child

    def _attachment_key(self, key: Any, by_id: Optional[bool]) -> AttachmentKey:
        backing = self._backing
        if isinstance(backing, dict):
            if by_id:
                raise TypeError(f"Space '{self.name}' holds a mapping; by_id needs list state")
            return AttachmentKey(AttachmentKind.ATTRIBUTE, key)

        if isinstance(backing, list):
            if by_id or (by_id is None and not _is_index(key)):
                return AttachmentKey(AttachmentKind.ID, key)
            if not _is_index(key):
                raise TypeError(f"List index must be an int, got {type(key).__name__}")
            if not -len(backing) <= key < len(backing):
                raise IndexError(f"Index {key} out of range for space '{self.name}' ({len(backing)} items)")
            item = backing[key]
            # Elements with an id are always attached by id, so one element never gets two spaces
            if isinstance(item, dict) and self._config.id_field in item:
                return AttachmentKey(AttachmentKind.ID, item[self._config.id_field])
            return AttachmentKey(AttachmentKind.INDEX, key % len(backing))

        raise TypeError(
            f"Space '{self.name}' holds a {type(backing).__name__}; nothing to attach at {key!r}"
        )

    def _raw_value(self, key: AttachmentKey) -> Any:
        if key.kind is AttachmentKind.ATTRIBUTE:
            return self._backing[key.value]
        if key.kind is AttachmentKind.INDEX:
            return self._backing[key.value]
        return self._backing[find_item_index(self._backing, key.value, self._config.id_field)]

    def _prune_orphans(self, positions_shifted: bool = False) -> None:
        """Detach children whose attachment point vanished from the backing state.

        Args:
            positions_shifted: The backing list was replaced or lost an element,
                               so index-attached children no longer point at
                               their element and are detached as well.
        """
        for key, child in list(self._children.items()):
            shifted = positions_shifted and key.kind is AttachmentKind.INDEX
            if shifted or self._locate(key) is None:
                del self._children[key]
                child._destroy()
                logger.debug(f"Detached orphaned space '{child.name}' from '{self.name}'")

    def _destroy(self) -> None:
        for child in self._children.values():
            child._destroy()
        self._children.clear()
        self._subscribers.clear()
        self._parent_ref = None
        self._detached = True

    # === Mutation ===

    def set_state(self, update: Any, label: Optional[str] = None) -> Optional[BoundHandler]:
        """Merge a value into this space, or bind a reducer as an event handler.

        Args:
            update: A plain value, merged into dict state key by key or
                    replacing list/scalar state wholesale; None removes a list
                    item. A callable instead returns a BoundHandler that later
                    applies callable(space, event).
            label: Names the operation in the cause label ("<name>#<label>").
                   Defaults to the callable's __name__.

        Returns:
            BoundHandler for a callable update, otherwise None.

        Raises:
            InvalidRemoval: None was applied to a space that is not a list item.
            ListIdentityChange: The update would change a list item's own id.
            SubscriberFailure: A subscriber raised (after all were notified).
        """
        if callable(update):
            return BoundHandler(self, update, label)
        self._dispatch(update, self._cause(label))
        return None

    def _cause(self, label: Optional[str], callback: Optional[Callable] = None) -> str:
        operation = label or (getattr(callback, '__name__', None) if callback is not None else None)
        return f"{self.name}#{operation or self._config.unknown_label}"

    def _dispatch(self, value: Any, cause: str) -> None:
        if value is None:
            self._remove_from_parent(cause)
            return
        self._apply(value)
        logger.debug(f"Applied {cause!r} to space '{self.name}'")
        self._propagate(cause)

    def _apply(self, value: Any) -> None:
        value = thaw(value)
        self._check_identity(value)
        if isinstance(self._backing, dict) and isinstance(value, dict):
            shadowed = [k for k in value if AttachmentKey(AttachmentKind.ATTRIBUTE, k) in self._children]
            if shadowed:
                logger.debug(f"Space '{self.name}': merged keys {shadowed} are shadowed by attached children")
            self._backing.update(value)
            self._prune_orphans()
        else:
            self._backing = value
            self._prune_orphans(positions_shifted=True)

    def _check_identity(self, value: Any) -> None:
        """Reject updates that would change or drop a list item's own id."""
        if not self.is_list_item:
            return
        id_field = self._config.id_field
        if isinstance(self._backing, dict) and isinstance(value, dict):
            new_id = value.get(id_field, self._key.value)
        elif isinstance(value, dict):
            new_id = value.get(id_field)
        else:
            new_id = None
        if new_id != self._key.value:
            raise ListIdentityChange(self.name, self._key.value, new_id, id_field)

    def _remove_from_parent(self, cause: str) -> None:
        parent = self.parent
        if parent is None or not self.is_list_item:
            raise InvalidRemoval(self.name)

        remove_item(parent._backing, self._key.value, self._config.id_field)
        del parent._children[self._key]
        self._destroy()
        logger.debug(f"Removed list item '{self.name}' from space '{parent.name}'")
        parent._prune_orphans(positions_shifted=True)
        parent._propagate(cause)

    def _propagate(self, cause: str) -> None:
        """Invalidate this space and its ancestors, then notify innermost to outermost."""
        chain = [self, *self._ancestors()]
        for space in chain:
            space._snapshot.invalidate()

        errors: List[Exception] = []
        for space in chain:
            errors.extend(space._subscribers.notify(cause))
        logger.debug(f"Propagated {cause!r} through {len(chain)} space(s)")
        self._raise_subscriber_errors(cause, errors)

    def _raise_subscriber_errors(self, cause: str, errors: List[Exception]) -> None:
        if errors and self._config.raise_subscriber_errors:
            raise SubscriberFailure(cause, errors) from errors[0]

    # === Subscription ===

    def subscribe(self, callback: SubscriberCallback) -> Subscription:
        """Register callback and call it once right away with "initialized".

        The callback is later called with a cause label after every change to
        this space or any descendant.

        Returns:
            Subscription; call it (or its cancel()) to unsubscribe.
        """
        subscription = self._subscribers.add(callback)
        cause = self._config.initialized_cause
        self._raise_subscriber_errors(cause, self._subscribers.notify(cause, [subscription]))
        return subscription

    def unsubscribe(self, callback: SubscriberCallback) -> bool:
        """Remove the first registration of callback. Returns True if one was found."""
        return self._subscribers.remove(callback)
