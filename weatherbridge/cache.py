from __future__ import annotations

import threading
import time
from typing import Optional

from .entities import Coordinates, LocationFix


class LocationFixCache:
    """Holds the most recent position fix and hands it out while it is young enough."""

    def __init__(self, time_func=time.monotonic) -> None:
        self._time_func = time_func
        self._fix: Optional[LocationFix] = None
        self._lock = threading.Lock()

    def get(self, maximum_age: float) -> Optional[Coordinates]:
        with self._lock:
            fix = self._fix
        if fix is None:
            return None
        if self._time_func() - fix.acquired_at > maximum_age:
            return None
        return fix.coordinates

    def set(self, coordinates: Coordinates) -> LocationFix:
        fix = LocationFix(coordinates=coordinates, acquired_at=self._time_func())
        with self._lock:
            self._fix = fix
        return fix

    def clear(self) -> None:
        with self._lock:
            self._fix = None


__all__ = ["LocationFixCache"]
