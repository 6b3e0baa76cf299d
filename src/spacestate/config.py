"""
Configuration for space trees.

Configuration is an immutable dataclass handed to the root Space at
construction and inherited by every child. There is no module-level mutable
configuration: two trees built with different configs never see each other's
settings.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class SpaceConfig:
    """Settings shared by every Space in one tree.

    Attributes:
        id_field: Field that identifies list items for sub_space() and removal.
        unknown_label: Placeholder used in cause labels when neither a label
            nor a callback name is available ("root#unknown").
        initialized_cause: Cause passed to a subscriber on registration.
        raise_subscriber_errors: If True, subscriber failures are re-raised as
            SubscriberFailure once the whole notification pass completes.
            If False they are only logged.
    """
    id_field: str = "id"
    unknown_label: str = "unknown"
    initialized_cause: str = "initialized"
    raise_subscriber_errors: bool = True


DEFAULT_CONFIG = SpaceConfig()
