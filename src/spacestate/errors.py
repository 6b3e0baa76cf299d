"""
Error taxonomy for the space tree.

Every error raised by spacestate derives from SpaceError so callers can catch
the whole family at once. Lookup failures also derive from LookupError so code
that already handles missing keys keeps working.
"""
from typing import Any, List, Optional


class SpaceError(Exception):
    """Base class for all space tree errors."""


class InvalidRemoval(SpaceError):
    """A space that is not a list item returned None from a mutation.

    Only list items have a containing collection to be removed from.
    """

    def __init__(self, space_name: str):
        self.space_name = space_name
        super().__init__(
            f"Space '{space_name}' is not attached as a list item and cannot be removed"
        )


class MissingListIdentity(SpaceError, LookupError):
    """No element of the list carries the requested id."""

    def __init__(self, item_id: Any, id_field: str = "id"):
        self.item_id = item_id
        self.id_field = id_field
        super().__init__(f"No list element with {id_field}={item_id!r}")


class DuplicateListIdentity(SpaceError, LookupError):
    """Several elements of the list share the requested id."""

    def __init__(self, item_id: Any, count: int, id_field: str = "id"):
        self.item_id = item_id
        self.count = count
        self.id_field = id_field
        super().__init__(f"{count} list elements share {id_field}={item_id!r}")


class SubscriberFailure(SpaceError):
    """One or more subscriber callbacks raised during a notification pass.

    The mutation that triggered the pass has already been applied.
    """

    def __init__(self, cause: str, errors: List[BaseException]):
        self.cause = cause
        self.errors = list(errors)
        super().__init__(f"{len(self.errors)} subscriber(s) failed for '{cause}'")

    @property
    def first_error(self) -> Optional[BaseException]:
        return self.errors[0] if self.errors else None


class ListIdentityChange(SpaceError, ValueError):
    """A list item's mutation would change or drop its own id.

    The id is what ties the item's Space to its element in the owning list.
    """

    def __init__(self, space_name: str, item_id: Any, new_id: Any, id_field: str = "id"):
        self.space_name = space_name
        self.item_id = item_id
        self.new_id = new_id
        self.id_field = id_field
        super().__init__(
            f"Space '{space_name}' is attached by {id_field}={item_id!r} and cannot change it to {new_id!r}"
        )
