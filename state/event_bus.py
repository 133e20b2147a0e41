"""Simple publish/subscribe event bus used by grids and layer generators."""
from __future__ import annotations

from collections import defaultdict
from types import MethodType
from typing import Any, Callable, Dict, List, Union
from weakref import WeakMethod

EventCallback = Callable[..., None]
Subscriber = Union[EventCallback, WeakMethod]


class EventBus:
    """Minimalistic event dispatcher.

    Subscribers register callbacks for string based event identifiers.  When an
    event is published all callbacks for that name are invoked with the supplied
    positional and keyword arguments.  The implementation is intentionally
    lightweight – no error handling is performed and callbacks are executed
    synchronously.  Bound methods are held weakly so a dependent layer that is
    discarded does not keep receiving notifications.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[Subscriber]] = defaultdict(list)

    def subscribe(self, event: str, callback: EventCallback) -> None:
        """Register ``callback`` to be invoked when ``event`` is published."""

        if isinstance(callback, MethodType):
            self._subscribers[event].append(WeakMethod(callback))
        else:
            self._subscribers[event].append(callback)

    def unsubscribe(self, event: str, callback: EventCallback) -> None:
        """Remove ``callback`` from ``event`` if it is registered."""

        subs = self._subscribers.get(event, [])
        for cb in list(subs):
            target = cb() if isinstance(cb, WeakMethod) else cb
            if target is None or target == callback:
                subs.remove(cb)

    def publish(self, event: str, *args: Any, **kwargs: Any) -> None:
        """Invoke all callbacks subscribed to ``event``."""

        subs = self._subscribers.get(event, [])
        for cb in list(subs):
            if isinstance(cb, WeakMethod):
                func = cb()
                if func is None:
                    subs.remove(cb)
                    continue
                func(*args, **kwargs)
            else:
                cb(*args, **kwargs)

    def subscriber_count(self, event: str) -> int:
        return len(self._subscribers.get(event, []))

    def reset(self) -> None:
        """Drop every subscription."""

        self._subscribers.clear()


# Global bus instance used for world level notifications ---------------------
EVENT_BUS = EventBus()

# Event name constants ---------------------------------------------------
ON_TILE_CHANGED = "on_tile_changed"
ON_GRID_INITIALIZED = "on_grid_initialized"
ON_WORLD_GENERATED = "on_world_generated"
