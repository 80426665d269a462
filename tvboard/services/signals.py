import logging
import os
import threading

logger = logging.getLogger(__name__)

RELOAD_PULSE_SEC = float(os.getenv("SIGNAGE_RELOAD_PULSE_SEC", "5"))


class ViewerSignals:
    """Process-local flags that viewers poll alongside the screen list.

    ``trigger_reload`` is a one-shot pulse: setting it true arms a timer that
    flips it back to false after ``pulse_sec``. Arming again replaces the
    pending timer; setting false disarms it.
    """

    def __init__(self, pulse_sec: float | None = None) -> None:
        self._lock = threading.Lock()
        self._pulse_sec = pulse_sec
        self._show_tv_numbers = False
        self._trigger_reload = False
        self._reload_timer: threading.Timer | None = None
        self._generation = 0

    @property
    def show_tv_numbers(self) -> bool:
        return self._show_tv_numbers

    @property
    def trigger_reload(self) -> bool:
        return self._trigger_reload

    def set_show_tv_numbers(self, show: bool) -> bool:
        with self._lock:
            self._show_tv_numbers = bool(show)
            return self._show_tv_numbers

    def set_trigger_reload(self, trigger: bool) -> bool:
        with self._lock:
            self._cancel_timer()
            self._trigger_reload = bool(trigger)
            if self._trigger_reload:
                delay = self._pulse_sec if self._pulse_sec is not None else RELOAD_PULSE_SEC
                self._generation += 1
                timer = threading.Timer(delay, self._expire, args=(self._generation,))
                timer.daemon = True
                self._reload_timer = timer
                timer.start()
                logger.info("Reload pulse armed for %.1fs", delay)
            return self._trigger_reload

    def _expire(self, generation: int) -> None:
        with self._lock:
            # A replaced timer that fired late must not clear the newer pulse.
            if generation != self._generation or self._reload_timer is None:
                return
            self._trigger_reload = False
            self._reload_timer = None

    def _cancel_timer(self) -> None:
        if self._reload_timer is not None:
            self._reload_timer.cancel()
            self._reload_timer = None

    def shutdown(self) -> None:
        with self._lock:
            self._cancel_timer()
            self._trigger_reload = False


signals = ViewerSignals()


def get_signals() -> ViewerSignals:
    return signals
