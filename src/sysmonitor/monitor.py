"""Continuous monitoring engine for sysmonitor."""

import logging
import threading
from dataclasses import dataclass, field
from queue import Queue

from sysmonitor.census import DEFAULT_TOP_N, ProcessCensus
from sysmonitor.cpu import CpuSampler
from sysmonitor.errors import SamplerError
from sysmonitor.memory import MemorySampler
from sysmonitor.models import CensusResult, CpuReading, MemorySample
from sysmonitor.procfs import ProcFS

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SystemSnapshot:
    """
    One round of all three samplers.

    A sampler that failed leaves its field as None and adds a message to
    ``errors``.
    """

    cpu: CpuReading | None
    memory: MemorySample | None
    census: CensusResult | None
    errors: list[str] = field(default_factory=list)

    def summaries(self) -> list[str]:
        """Single-line summaries of every sampler that succeeded."""
        lines = []
        for result in (self.cpu, self.memory, self.census):
            if result is not None:
                lines.append(result.summary())
        return lines


class SystemMonitor:
    """
    System monitor that samples /proc on a background thread.

    Runs in a separate daemon thread and pushes updates to a thread-safe Queue.
    A failing sampler is reported in the snapshot and the loop keeps going.
    """

    def __init__(
        self,
        update_queue: Queue[SystemSnapshot],
        poll_rate: float = 2.0,
        procfs: ProcFS | None = None,
        top_n: int = DEFAULT_TOP_N,
    ) -> None:
        """
        Initialize the SystemMonitor.

        Args:
            update_queue: Thread-safe queue to push updates to.
            poll_rate: How often to poll the system (in seconds). Default 2.0s.
            procfs: /proc reader shared by the samplers.
            top_n: Number of processes kept by each census.
        """
        self._queue = update_queue
        self._poll_rate = max(0.1, poll_rate)
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

        procfs = procfs or ProcFS()
        self._cpu = CpuSampler(procfs)
        self._memory = MemorySampler(procfs)
        self._census = ProcessCensus(procfs, limit=top_n)

    @property
    def poll_rate(self) -> float:
        """Get the current poll rate."""
        return self._poll_rate

    @poll_rate.setter
    def poll_rate(self, value: float) -> None:
        """Set the poll rate."""
        self._poll_rate = max(0.1, value)  # Minimum 0.1 seconds

    @property
    def is_running(self) -> bool:
        """Check if the monitor thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the monitoring thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._poll_loop,
            daemon=True,
            name="SystemMonitor",
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the monitoring thread.

        Args:
            timeout: How long to wait for thread to stop (seconds).
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def _poll_loop(self) -> None:
        """Main polling loop running in the background thread."""
        while not self._stop_event.is_set():
            try:
                snapshot = self.collect_snapshot()
                self._queue.put(snapshot)
            except Exception:
                logger.exception("Unexpected error while sampling, continuing")

            # Wait for poll_rate seconds or until stop is requested
            self._stop_event.wait(timeout=self._poll_rate)

    def collect_snapshot(self) -> SystemSnapshot:
        """Run every sampler once and gather the results."""
        errors: list[str] = []

        cpu = None
        try:
            cpu = self._cpu.sample()
        except SamplerError as exc:
            errors.append(f"CPU: {exc}")

        memory = None
        try:
            memory = self._memory.sample()
        except SamplerError as exc:
            errors.append(f"Memory: {exc}")

        census = None
        try:
            census = self._census.take()
        except SamplerError as exc:
            errors.append(f"Processes: {exc}")

        for message in errors:
            logger.warning("%s", message)

        return SystemSnapshot(cpu=cpu, memory=memory, census=census, errors=errors)
