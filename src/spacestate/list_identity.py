"""
List identity resolution.

List items are matched by an id field rather than by position, so a Space
attached to a list item keeps pointing at the same element when the list is
reordered or grown. Elements that are not mappings, or that have no id field,
never match.
"""
from collections.abc import Mapping
from typing import Any, List, Optional, Sequence

from spacestate.errors import DuplicateListIdentity, MissingListIdentity


def _matching_indices(items: Sequence[Any], item_id: Any, id_field: str) -> List[int]:
    return [
        index for index, item in enumerate(items)
        if isinstance(item, Mapping) and id_field in item and item[id_field] == item_id
    ]


def find_item_index(items: Sequence[Any], item_id: Any, id_field: str = "id") -> int:
    """Return the index of the only element whose id field equals item_id.

    Raises:
        MissingListIdentity: No element carries item_id.
        DuplicateListIdentity: More than one element carries item_id.
    """
    matches = _matching_indices(items, item_id, id_field)
    if not matches:
        raise MissingListIdentity(item_id, id_field)
    if len(matches) > 1:
        raise DuplicateListIdentity(item_id, len(matches), id_field)
    return matches[0]


def locate_item(items: Sequence[Any], item_id: Any, id_field: str = "id") -> Optional[int]:
    """Lenient lookup: index of the first element carrying item_id, or None."""
    matches = _matching_indices(items, item_id, id_field)
    return matches[0] if matches else None


def remove_item(items: List[Any], item_id: Any, id_field: str = "id") -> Any:
    """Remove the element carrying item_id from items in place and return it."""
    return items.pop(find_item_index(items, item_id, id_field))
