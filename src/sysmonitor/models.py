"""Data models for sysmonitor."""

from dataclasses import dataclass, field


@dataclass(slots=True, frozen=True)
class CpuSnapshot:
    """Cumulative jiffie counters from the aggregate cpu line of /proc/stat."""

    user: int
    nice: int
    system: int
    idle: int
    iowait: int
    irq: int
    softirq: int

    @property
    def total(self) -> int:
        """Sum of all seven counters."""
        return (
            self.user
            + self.nice
            + self.system
            + self.idle
            + self.iowait
            + self.irq
            + self.softirq
        )


@dataclass(slots=True, frozen=True)
class CpuReading:
    """
    Result of one CPU usage derivation.

    ``percent`` is None while warming up: only one snapshot has been seen
    and no rate can be derived yet.
    """

    percent: float | None

    @property
    def needs_warmup(self) -> bool:
        return self.percent is None

    def summary(self) -> str:
        if self.percent is None:
            return "CPU monitoring initialized"
        return f"CPU Usage: {self.percent:.1f}%"


@dataclass(slots=True, frozen=True)
class MemorySample:
    """Memory usage in whole megabytes."""

    total_mb: int
    used_mb: int
    free_mb: int
    percentage: float

    def summary(self) -> str:
        return (
            f"Memory - Total: {self.total_mb}MB, Used: {self.used_mb}MB, "
            f"Free: {self.free_mb}MB ({self.percentage:.1f}%)"
        )


@dataclass(slots=True, frozen=True)
class ProcessRecord:
    """CPU ticks of one process, captured during a single census pass."""

    pid: int
    name: str
    utime: int  # Clock ticks in user mode
    stime: int  # Clock ticks in kernel mode

    @property
    def total_time(self) -> int:
        return self.utime + self.stime


@dataclass(slots=True, frozen=True)
class RankedProcess:
    """A census record with its share relative to the top process."""

    record: ProcessRecord
    relative_percent: float  # 100.0 for the top process, not a CPU share

    @property
    def pid(self) -> int:
        return self.record.pid

    @property
    def name(self) -> str:
        return self.record.name

    @property
    def total_time(self) -> int:
        return self.record.total_time


@dataclass(slots=True, frozen=True)
class CensusResult:
    """Ranked top-N processes from one census pass."""

    processes: list[RankedProcess] = field(default_factory=list)
    scanned: int = 0  # Process entries enumerated
    skipped: int = 0  # Entries dropped because their stat could not be read

    @property
    def is_empty(self) -> bool:
        return not self.processes

    def summary(self) -> str:
        if self.is_empty:
            return "No processes found"
        top = self.processes[0]
        return (
            f"Top {len(self.processes)} processes displayed: "
            f"Top process PID={top.pid} ({top.name}) with {top.total_time} CPU time"
        )
