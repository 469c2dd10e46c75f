"""CPU utilization from the aggregate /proc/stat counters."""

import logging
import threading

from sysmonitor.errors import MalformedRecord
from sysmonitor.models import CpuReading, CpuSnapshot
from sysmonitor.procfs import ProcFS

logger = logging.getLogger(__name__)

CPU_FIELDS = ("user", "nice", "system", "idle", "iowait", "irq", "softirq")


def parse_cpu_line(text: str) -> CpuSnapshot:
    """
    Parse the aggregate cpu record out of /proc/stat text.

    Per-core records (``cpu0``, ``cpu1``...) are ignored. Only the first seven
    counters are read; steal and guest fields that follow are not used.

    Raises:
        MalformedRecord: If the aggregate line is absent or holds fewer than
            seven unsigned integers.
    """
    for line in text.splitlines():
        parts = line.split()
        if not parts or parts[0] != "cpu":
            continue

        values: list[int] = []
        for token in parts[1 : len(CPU_FIELDS) + 1]:
            if not (token.isascii() and token.isdigit()):
                break
            values.append(int(token))

        if len(values) < len(CPU_FIELDS):
            raise MalformedRecord(
                f"aggregate cpu line has {len(values)} counters, expected {len(CPU_FIELDS)}"
            )
        return CpuSnapshot(*values)

    raise MalformedRecord("aggregate cpu line not found")


def compute_usage(
    previous: CpuSnapshot | None, current: CpuSnapshot
) -> tuple[CpuReading, CpuSnapshot]:
    """
    Derive CPU usage from two cumulative snapshots.

    Returns the reading and the snapshot the caller should pass as
    ``previous`` next time, which is always ``current``.

    With no previous snapshot the reading is a warmup signal. When no tick
    has elapsed between the snapshots the usage is exactly 0.0.
    """
    if previous is None:
        return CpuReading(percent=None), current

    deltas = {
        name: getattr(current, name) - getattr(previous, name) for name in CPU_FIELDS
    }
    if any(delta < 0 for delta in deltas.values()):
        # Counters went backwards, so the old reference point is meaningless
        logger.warning("CPU counters decreased between samples, restarting warmup")
        return CpuReading(percent=None), current

    total_delta = sum(deltas.values())
    if total_delta == 0:
        return CpuReading(percent=0.0), current

    usage = 100.0 * (1.0 - deltas["idle"] / total_delta)
    return CpuReading(percent=usage), current


class CpuSampler:
    """
    Holds the previous CPU snapshot between samples.

    The snapshot is guarded by a lock so a background monitor thread and a
    foreground caller can share one sampler.
    """

    def __init__(self, procfs: ProcFS | None = None) -> None:
        self._procfs = procfs or ProcFS()
        self._previous: CpuSnapshot | None = None
        self._lock = threading.Lock()

    @property
    def previous(self) -> CpuSnapshot | None:
        """The reference snapshot the next sample is compared against."""
        return self._previous

    def update(self, current: CpuSnapshot) -> CpuReading:
        """Compare ``current`` with the held snapshot and advance it."""
        with self._lock:
            reading, self._previous = compute_usage(self._previous, current)
        return reading

    def sample(self) -> CpuReading:
        """
        Read /proc/stat now and return the derived reading.

        Raises:
            SourceUnavailable: If /proc/stat cannot be read.
            MalformedRecord: If the aggregate cpu line is missing or short.
        """
        current = parse_cpu_line(self._procfs.read_stat())
        return self.update(current)

    def reset(self) -> None:
        """Forget the held snapshot so the next sample warms up again."""
        with self._lock:
            self._previous = None
