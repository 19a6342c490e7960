"""Observable value cell used to publish response snapshots.

Hides how observers are registered and notified, so the protocol core
never depends on a particular rendering technology.
"""

from collections.abc import Callable
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class StateCell(Generic[T]):
    """A subscribable holder of the latest value.

    Subscribers are called synchronously, in subscription order, every time
    a new value is set.

    Usage:
        cell = StateCell(ResponseState())
        unsubscribe = cell.subscribe(lambda state: render(state))
        cell.set(new_state)
        unsubscribe()
    """

    def __init__(self, initial: T, debug_callback: Any | None = None):
        self._value = initial
        self._subscribers: list[Callable[[T], None]] = []
        self._debug_callback = debug_callback

    @property
    def value(self) -> T:
        """The most recently published value."""
        return self._value

    def set(self, value: T) -> None:
        """Publish a new value to every subscriber."""
        self._value = value
        for callback in list(self._subscribers):
            self._notify(callback, value)

    def _notify(self, callback: Callable[[T], None], value: T) -> None:
        try:
            callback(value)
        except Exception as e:
            # A broken observer must not stall the stream
            if self._debug_callback:
                self._debug_callback("error", "State", f"Subscriber failed: {e}")

    def subscribe(
        self,
        callback: Callable[[T], None],
        replay: bool = True
    ) -> Callable[[], None]:
        """Register a subscriber.

        Args:
            callback: Called with each published value
            replay: Immediately call back with the current value

        Returns:
            A function that removes the subscription
        """
        self._subscribers.append(callback)
        if replay:
            self._notify(callback, self._value)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)
