"""
Per-space subscriber registry.

Subscribers are plain callables taking a single cause string. Delivery is
best-effort per subscriber: a callback that raises is logged and collected,
and delivery continues with the next one. The caller decides what to do with
the collected failures once the whole notification pass is over.
"""
import logging
from typing import Any, Callable, Iterable, List, Optional

logger = logging.getLogger(__name__)

SubscriberCallback = Callable[[str], Any]


class Subscription:
    """One registration of a callback on a registry.

    Calling the subscription (or cancel()) unregisters it. Cancelling twice
    is a no-op.
    """

    def __init__(self, registry: 'SubscriptionRegistry', callback: SubscriberCallback):
        self.callback = callback
        self._registry: Optional['SubscriptionRegistry'] = registry

    @property
    def active(self) -> bool:
        return self._registry is not None

    def cancel(self) -> None:
        if self._registry is not None:
            self._registry._discard(self)
            self._registry = None

    __call__ = cancel

    def __repr__(self) -> str:
        name = getattr(self.callback, '__name__', repr(self.callback))
        return f"Subscription({name}, active={self.active})"


class SubscriptionRegistry:
    """Ordered list of subscriptions for one Space.

    The same callback may be registered more than once; each registration is
    notified separately, in insertion order.
    """

    def __init__(self):
        self._subscriptions: List[Subscription] = []

    def __len__(self) -> int:
        return len(self._subscriptions)

    def add(self, callback: SubscriberCallback) -> Subscription:
        if not callable(callback):
            raise TypeError(f"Subscriber must be callable, got {type(callback).__name__}")
        subscription = Subscription(self, callback)
        self._subscriptions.append(subscription)
        return subscription

    def remove(self, callback: SubscriberCallback) -> bool:
        """Cancel the first registration of callback. Returns True if one was found."""
        for subscription in self._subscriptions:
            if subscription.callback == callback:
                subscription.cancel()
                return True
        return False

    def clear(self) -> None:
        """Cancel every registration."""
        for subscription in list(self._subscriptions):
            subscription.cancel()

    def _discard(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def notify(self, cause: str, subscriptions: Optional[Iterable[Subscription]] = None) -> List[Exception]:
        """Call each subscription with cause, isolating failures.

        Args:
            cause: Cause label passed to every callback.
            subscriptions: Restrict delivery to these registrations
                           (default: every current registration).

        Returns:
            Exceptions raised by callbacks, in delivery order. Empty on success.
        """
        targets = list(self._subscriptions if subscriptions is None else subscriptions)
        errors: List[Exception] = []
        for subscription in targets:
            # A callback earlier in this pass may have cancelled this one
            if not subscription.active:
                continue
            try:
                subscription.callback(cause)
            except Exception as e:
                logger.warning(f"Error in subscriber callback for {cause!r}: {e}")
                errors.append(e)
        return errors
