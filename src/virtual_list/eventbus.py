"""Synchronous listener registry used for scroll and range notifications."""

from __future__ import annotations

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class Listener[EventT](Protocol):
    """Protocol describing callbacks invoked for published events."""

    def __call__(self, event: EventT, /) -> None:  # pragma: no cover - protocol signature
        """Consume a single event dispatched by the registry."""

        ...


class ListenerRegistry[EventT]:
    """Ordered set of listeners notified serially on the caller's thread."""

    def __init__(self, name: str = "listeners") -> None:
        """Initialise the registry without subscribers."""

        self._name = name
        self._listeners: list[Listener[EventT]] = []

    def subscribe(self, listener: Listener[EventT]) -> None:
        """Register *listener*; registering the same callback twice is a no-op."""

        if listener in self._listeners:
            return
        self._listeners.append(listener)
        logger.debug("Subscribed listener to %s (%d total)", self._name, len(self._listeners))

    def unsubscribe(self, listener: Listener[EventT]) -> None:
        """Remove *listener* if present."""

        try:
            self._listeners.remove(listener)
        except ValueError:
            return
        logger.debug("Unsubscribed listener from %s (%d left)", self._name, len(self._listeners))

    def publish(self, event: EventT) -> None:
        """Dispatch *event* to every listener in subscription order."""

        # Snapshot so listeners may detach while being notified.
        for listener in tuple(self._listeners):
            listener(event)

    def __contains__(self, listener: object) -> bool:
        return listener in self._listeners

    def __len__(self) -> int:
        return len(self._listeners)
