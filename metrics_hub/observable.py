# metrics_hub/observable.py
"""
Traffic Metrics Hub - Observable State Slices

A StateSlice holds one piece of dashboard state and pushes every change
to its subscribers, in subscription order. Writes equal to the current
value (by the slice's equality) are not published.
"""

from __future__ import annotations

import logging
import operator
from typing import Callable, Generic, Iterable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Subscription:
    """Handle returned by subscribe(); call unsubscribe() to detach."""

    def __init__(self, detach: Callable[[], None]):
        self._detach: Optional[Callable[[], None]] = detach

    @property
    def closed(self) -> bool:
        return self._detach is None

    def unsubscribe(self) -> None:
        if self._detach is not None:
            detach, self._detach = self._detach, None
            detach()


class CompositeSubscription(Subscription):
    """Several subscriptions released together."""

    def __init__(self, subscriptions: Iterable[Subscription] = ()):
        self._children = list(subscriptions)
        super().__init__(self._release_all)

    def add(self, subscription: Subscription) -> None:
        if self.closed:
            subscription.unsubscribe()
        else:
            self._children.append(subscription)

    def _release_all(self) -> None:
        for child in self._children:
            child.unsubscribe()
        self._children.clear()


class StateSlice(Generic[T]):
    """
    Equality-gated publish/subscribe channel for one state value.

    Usage:
        day = StateSlice("selected_day", "2025-02-28")
        sub = day.subscribe(lambda value: print(value))   # prints current
        day.set("2025-02-27")                             # prints new value
        day.set("2025-02-27")                             # no-op, not published
        sub.unsubscribe()
    """

    def __init__(self, name: str, initial: T, equals: Callable[[T, T], bool] = operator.eq):
        self.name = name
        self._value = initial
        self._equals = equals
        self._subscribers: list[Callable[[T], None]] = []

    @property
    def value(self) -> T:
        return self._value

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def set(self, value: T) -> bool:
        """Replace and publish. Returns False when nothing changed."""
        if not self.replace(value):
            return False
        self.publish()
        return True

    def replace(self, value: T) -> bool:
        """
        Replace without publishing.

        Used by the store to apply several slices before notifying any
        subscriber, so combined readers never see a half-applied change.
        """
        if self._equals(self._value, value):
            return False
        self._value = value
        return True

    def publish(self) -> None:
        for callback in list(self._subscribers):
            try:
                callback(self._value)
            except Exception:
                logger.exception(f"Subscriber of '{self.name}' failed")

    def subscribe(self, callback: Callable[[T], None], emit_current: bool = True) -> Subscription:
        self._subscribers.append(callback)
        if emit_current:
            callback(self._value)

        def detach() -> None:
            try:
                self._subscribers.remove(callback)
            except ValueError:
                pass

        return Subscription(detach)
