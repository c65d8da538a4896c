"""Map weather samples onto the device key contract and send them."""
from __future__ import annotations

import logging
from concurrent.futures import Future
from typing import Optional

from .channel import DeviceChannel
from .entities import FORECAST_LAYOUT, MessageLayout, OutboundMessage, WeatherSample
from .errors import RelayError


logger = logging.getLogger(__name__)


def build_message(sample: WeatherSample, layout: MessageLayout = FORECAST_LAYOUT) -> OutboundMessage:
    """Build the numeric-keyed record for ``sample``; absent fields are left out."""
    message: OutboundMessage = {}
    for key, field in enumerate(layout.fields):
        value = getattr(sample, field)
        if value is None:
            logger.debug("Layout %s: %s missing, key %s not sent", layout.name, field, key)
            continue
        message[key] = value
    return message


class MessageRelay:
    """Fire-and-forget delivery: failures are logged, never retried or raised."""

    def __init__(self, channel: DeviceChannel, logger: Optional[logging.Logger] = None) -> None:
        self.channel = channel
        self._log = logger or logging.getLogger(self.__class__.__name__)

    def send(self, message: OutboundMessage) -> "Future[bool]":
        """Hand ``message`` to the channel; the future resolves to ``True`` on delivery."""
        outcome: "Future[bool]" = Future()
        try:
            delivery = self.channel.send(message)
        except Exception as exc:  # noqa: BLE001 - channel failures must not reach the pipeline
            self._report_failure(RelayError(str(exc)))
            outcome.set_result(False)
            return outcome

        def _settle(done: "Future[None]") -> None:
            if done.cancelled():
                self._report_failure(RelayError("send cancelled"))
                outcome.set_result(False)
                return
            error = done.exception()
            if error is not None:
                self._report_failure(error)
                outcome.set_result(False)
                return
            self._log.info("success")
            outcome.set_result(True)

        delivery.add_done_callback(_settle)
        return outcome

    def _report_failure(self, error: BaseException) -> None:
        self._log.warning("fail: %s", error)


__all__ = ["MessageRelay", "build_message"]
