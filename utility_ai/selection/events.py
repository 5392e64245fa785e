"""
Selector event surface.

Listeners subscribe per event and are invoked synchronously, in the order
they subscribed, at well-defined points of a decision cycle.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Dict, List

logger = logging.getLogger(__name__)


class SelectorEvent(str, Enum):
    """Observable selector events and their listener arguments."""

    ACTION_SPAWNED = "action_spawned"          # (action)
    ACTION_SELECTED = "action_selected"        # (action)
    ACTION_SWITCHED = "action_switched"        # (new_action | None, old_action | None)
    ACTION_UNAVAILABLE = "action_unavailable"  # ()
    ACTION_TICKED = "action_ticked"            # (action)
    INITIALISED = "initialised"                # ()
    PRE_SCORING = "pre_scoring"                # ()


Listener = Callable[..., None]


class EventBus:
    """
    Per-selector observer lists keyed by SelectorEvent.

    Example:
        >>> bus = EventBus()
        >>> unsubscribe = bus.subscribe(SelectorEvent.ACTION_TICKED, print)
        >>> bus.emit(SelectorEvent.ACTION_TICKED, action)
        >>> unsubscribe()
    """

    def __init__(self):
        self._listeners: Dict[SelectorEvent, List[Listener]] = {}

    def subscribe(
        self,
        event: SelectorEvent,
        callback: Listener,
    ) -> Callable[[], None]:
        """
        Subscribe to an event.

        Args:
            event: Event to listen for
            callback: Called with the event's arguments each time it fires

        Returns:
            Unsubscribe function
        """
        event = SelectorEvent(event)
        self._listeners.setdefault(event, []).append(callback)

        def unsubscribe():
            listeners = self._listeners.get(event, [])
            if callback in listeners:
                listeners.remove(callback)

        return unsubscribe

    def emit(self, event: SelectorEvent, *args) -> None:
        """Invoke every listener of `event` in registration order."""
        # Copy so listeners may unsubscribe while being notified
        for callback in list(self._listeners.get(event, ())):
            try:
                callback(*args)
            except Exception as e:
                logger.warning(f"Listener for {event.value} failed: {e}")

    def listener_count(self, event: SelectorEvent) -> int:
        return len(self._listeners.get(SelectorEvent(event), ()))

    def clear(self) -> None:
        """Drop all listeners."""
        self._listeners.clear()
