"""
Immutable snapshot builder.

Snapshots are the only view of state that a Space hands out. They are built
from plain Python containers:

    dict / Mapping      → types.MappingProxyType (read-only view of a private dict)
    list / tuple        → tuple
    set / frozenset     → frozenset
    str, bytes, numbers → unchanged (already immutable)
    anything else       → deep copy

compose_snapshot() builds a Space's snapshot from its backing state plus the
already-frozen states of its children, spliced in at their attachment points.
thaw() goes the other way and produces a mutable deep copy, which is how values
coming back from reducers become backing state again.
"""
import copy
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Dict, Hashable, Iterable, Tuple

_IMMUTABLE_SCALARS = (str, bytes, int, float, complex, bool, type(None))


def freeze(value: Any) -> Any:
    """Return a recursively read-only copy of value."""
    if isinstance(value, _IMMUTABLE_SCALARS):
        return value
    if isinstance(value, Mapping):
        return MappingProxyType({k: freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    if isinstance(value, (set, frozenset)):
        return frozenset(freeze(v) for v in value)
    return copy.deepcopy(value)


def thaw(value: Any) -> Any:
    """Return a mutable deep copy of value (the inverse of freeze).

    Useful in reducers that build a new value from space.state:

        space.set_state(lambda s, e: thaw(s.state) + [new_item])
    """
    if isinstance(value, _IMMUTABLE_SCALARS):
        return value
    if isinstance(value, Mapping):
        return {k: thaw(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [thaw(v) for v in value]
    if isinstance(value, (set, frozenset)):
        return set(value)
    return copy.deepcopy(value)


def compose_snapshot(backing: Any, splices: Iterable[Tuple[Hashable, Any]]) -> Any:
    """Freeze backing with child snapshots spliced in.

    Args:
        backing: The raw state of a Space (dict, list, or scalar).
        splices: (position, frozen_child_state) pairs. position is a mapping
                 key for dict backing state or an index for list backing state.
                 The child state replaces whatever raw value sits there.

    Returns:
        The frozen composition. Splices are ignored for scalar backing state.
    """
    overrides: Dict[Hashable, Any] = dict(splices)

    if isinstance(backing, Mapping):
        return MappingProxyType({
            k: overrides[k] if k in overrides else freeze(v)
            for k, v in backing.items()
        })

    if isinstance(backing, list):
        return tuple(
            overrides[i] if i in overrides else freeze(v)
            for i, v in enumerate(backing)
        )

    return freeze(backing)
