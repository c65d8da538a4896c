from __future__ import annotations

import logging
from concurrent.futures import Future
from typing import Any, Callable, Dict, List, Protocol

from .entities import PipelineOutcome


logger = logging.getLogger(__name__)

Listener = Callable[[Any], "Future[PipelineOutcome]"]


class BridgeEvents(Protocol):
    """The two triggers a host can deliver to the bridge."""

    def on_ready(self) -> "Future[PipelineOutcome]":
        ...

    def on_refresh_requested(self, payload: Any = None) -> "Future[PipelineOutcome]":
        ...


class EventDispatcher:
    """Listener table keyed by host event name."""

    READY = "ready"
    APP_MESSAGE = "appmessage"

    def __init__(self) -> None:
        self._listeners: Dict[str, List[Listener]] = {}

    def add_listener(self, event: str, listener: Listener) -> None:
        self._listeners.setdefault(event, []).append(listener)

    def bind(self, events: BridgeEvents) -> "EventDispatcher":
        self.add_listener(self.READY, lambda payload: events.on_ready())
        self.add_listener(self.APP_MESSAGE, events.on_refresh_requested)
        return self

    def dispatch(self, event: str, payload: Any = None) -> List["Future[PipelineOutcome]"]:
        listeners = self._listeners.get(event)
        if not listeners:
            logger.warning("No listener for event %s", event)
            return []
        return [listener(payload) for listener in listeners]


__all__ = ["BridgeEvents", "EventDispatcher", "Listener"]
