"""Cancellation flag shared between the SIGINT handler and polling loops."""

from __future__ import annotations

import logging
import signal
import threading

logger = logging.getLogger(__name__)


class CancelToken:
    """A set-once flag; the handler sets it, polling loops read it."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    def is_cancelled(self) -> bool:
        return self._event.is_set()


def install_interrupt_handler(token: CancelToken):
    """Route SIGINT to ``token.cancel()``; returns the previous handler."""

    def _handler(signum, frame):
        if token.is_cancelled():
            logger.warning("Interrupt received again, still shutting down")
        else:
            logger.warning("Interrupt received, stopping after the current step")
        token.cancel()

    return signal.signal(signal.SIGINT, _handler)


def restore_interrupt_handler(previous) -> None:
    signal.signal(signal.SIGINT, previous if previous is not None else signal.default_int_handler)
