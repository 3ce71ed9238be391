"""Process table and reaper for background children."""

from __future__ import annotations

import logging
import subprocess
import threading

logger = logging.getLogger(__name__)


class ProcessReaper:
    """Track background processes and reclaim them once they terminate."""

    def __init__(self, interval: float = 1.0) -> None:
        self.interval = interval
        self._processes: dict[int, subprocess.Popen] = {}
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def track(self, process: subprocess.Popen) -> None:
        """Register a background process."""
        with self._lock:
            self._processes[process.pid] = process
        logger.info("Tracking background pid %d", process.pid)

    @property
    def active(self) -> list[int]:
        with self._lock:
            return sorted(self._processes)

    def reap(self) -> list[tuple[int, int]]:
        """Collect every terminated process. Returns ``(pid, exit_code)`` pairs."""
        finished: list[tuple[int, int]] = []
        with self._lock:
            for pid, process in list(self._processes.items()):
                exit_code = process.poll()
                if exit_code is None:
                    continue
                del self._processes[pid]
                finished.append((pid, exit_code))
        for pid, exit_code in finished:
            logger.info("Reaped background pid %d (status %d)", pid, exit_code)
        return finished

    def start(self) -> None:
        """Reap periodically on a daemon thread."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="myshell-reaper", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=self.interval + 1)
            self._thread = None
        self.reap()

    def _loop(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                self.reap()
            except Exception:
                logger.exception("Background reap failed")
