"""Wall-clock ticker that refreshes the header clock once a second."""

from __future__ import annotations

import datetime as dt
import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


def clock_display(moment: dt.datetime) -> dict[str, str]:
    """Header strings: ``19 Oct 2026`` and ``02:05 PM``."""

    return {
        "date": moment.strftime("%d %b %Y"),
        "time": moment.strftime("%I:%M %p"),
    }


class ClockTicker:
    """Calls ``on_tick`` from a daemon thread until :meth:`stop` is called."""

    def __init__(
        self,
        on_tick: Callable[[dt.datetime], None],
        *,
        clock: Callable[[], dt.datetime] | None = None,
        interval: float = 1.0,
    ) -> None:
        self.on_tick = on_tick
        self.clock = clock or (lambda: dt.datetime.now().astimezone())
        self.interval = interval
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="clock-ticker", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout if timeout is not None else self.interval * 2)
            self._thread = None

    def _loop(self) -> None:
        while not self._stop.is_set():
            try:
                self.on_tick(self.clock())
            except Exception:
                logger.exception("Clock tick callback failed")
            self._stop.wait(self.interval)
