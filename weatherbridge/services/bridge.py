"""The location -> weather -> relay pipeline behind the device triggers."""
from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any, Optional

from ..entities import LOCATION_UNAVAILABLE_MESSAGE, MessageLayout, PipelineOutcome, RequestContext
from ..errors import BridgeError, LocationError
from ..location import LocationProvider
from ..providers.base import WeatherProvider
from ..relay import MessageRelay, build_message
from ..schemas import RefreshPayload, decode_trigger_payload


class WeatherBridge:
    """Run the full pipeline once per trigger.

    Runs are independent: a trigger arriving while another run is in flight
    starts a second run. The device-supplied key is remembered as the
    last-known credential, and each run captures it by value when it starts.
    """

    READY = "ready"
    REFRESH = "refresh"

    def __init__(
        self,
        *,
        location_provider: LocationProvider,
        weather_provider: WeatherProvider,
        relay: MessageRelay,
        layout: Optional[MessageLayout] = None,
        executor: Optional[Executor] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.location_provider = location_provider
        self.weather_provider = weather_provider
        self.relay = relay
        self.layout = layout or weather_provider.default_layout
        self.executor = executor or ThreadPoolExecutor(max_workers=4, thread_name_prefix="weather-bridge")
        self._credential: Optional[str] = None
        self._credential_lock = threading.Lock()
        self._log = logger or logging.getLogger(self.__class__.__name__)

    # Public API ---------------------------------------------------------
    @property
    def credential(self) -> Optional[str]:
        with self._credential_lock:
            return self._credential

    def on_ready(self) -> "Future[PipelineOutcome]":
        """The host is ready to exchange messages."""
        return self._start(RequestContext(trigger=self.READY, api_key=self.credential))

    def on_refresh_requested(self, payload: Any = None) -> "Future[PipelineOutcome]":
        """The device wants new data; its payload may carry a provider key.

        A body that cannot be decoded still triggers a run, without a new key.
        """
        if not isinstance(payload, RefreshPayload):
            try:
                payload = decode_trigger_payload(payload)
            except ValueError as exc:
                self._log.warning("Refresh payload ignored: %s", exc)
                payload = RefreshPayload()
        with self._credential_lock:
            if payload.api_key:
                self._credential = payload.api_key
            context = RequestContext(trigger=self.REFRESH, api_key=self._credential)
        return self._start(context)

    def run(self, context: RequestContext) -> PipelineOutcome:
        """Execute one pipeline run synchronously."""
        try:
            coordinates = self.location_provider.get_location().result()
        except LocationError as exc:
            self._log.warning("location error (%s): %s", exc.code, exc.message)
            self.relay.send(dict(LOCATION_UNAVAILABLE_MESSAGE))
            return PipelineOutcome.DEGRADED

        try:
            sample = self.weather_provider.fetch_weather(coordinates, api_key=context.api_key)
        except BridgeError as exc:
            self._log.error(
                "Weather fetch for %s trigger failed (%s): %s", context.trigger, exc.__class__.__name__, exc
            )
            return PipelineOutcome.ABORTED

        self.relay.send(build_message(sample, self.layout))
        return PipelineOutcome.RELAYED

    def shutdown(self, wait: bool = True) -> None:
        self.executor.shutdown(wait=wait)

    # Helpers ------------------------------------------------------------
    def _start(self, context: RequestContext) -> "Future[PipelineOutcome]":
        self._log.info("Pipeline run started by %s trigger", context.trigger)
        return self.executor.submit(self._run_guarded, context)

    def _run_guarded(self, context: RequestContext) -> PipelineOutcome:
        try:
            return self.run(context)
        except Exception:  # noqa: BLE001 - a run must never take down the host loop
            self._log.exception("Pipeline run for %s trigger crashed", context.trigger)
            return PipelineOutcome.ABORTED


__all__ = ["WeatherBridge"]
