"""Process census: enumerate /proc, read CPU ticks, rank the top consumers."""

import logging
from collections.abc import Iterable

from sysmonitor.errors import MalformedStat, SamplerError
from sysmonitor.models import CensusResult, ProcessRecord, RankedProcess
from sysmonitor.procfs import ProcFS

logger = logging.getLogger(__name__)

DEFAULT_TOP_N = 5
UNKNOWN_NAME = "[unknown]"

# After the closing parenthesis of the name, utime and stime are the 12th and
# 13th fields (fields 14 and 15 of the whole record).
UTIME_INDEX = 11
STIME_INDEX = 12


def parse_stat(line: str) -> tuple[int, int]:
    """
    Extract (utime, stime) from a /proc/<pid>/stat record.

    The second field is the process name in parentheses and may itself hold
    spaces and parentheses, so counting starts after the *last* ``)``.

    Raises:
        MalformedStat: If there is no ``)``, the record ends before field 15,
            or either tick field is not an unsigned integer.
    """
    anchor = line.rfind(")")
    if anchor == -1:
        raise MalformedStat(f"no closing parenthesis in stat record: {line[:80]!r}")

    fields = line[anchor + 1 :].split()
    if len(fields) <= STIME_INDEX:
        raise MalformedStat(
            f"stat record has {len(fields) + 2} fields, expected at least {STIME_INDEX + 3}"
        )

    utime, stime = fields[UTIME_INDEX], fields[STIME_INDEX]
    for value in (utime, stime):
        if not (value.isascii() and value.isdigit()):
            raise MalformedStat(f"non-numeric tick field {value!r} in stat record")
    return int(utime), int(stime)


def rank_processes(
    records: Iterable[ProcessRecord], limit: int = DEFAULT_TOP_N
) -> list[RankedProcess]:
    """
    Rank records by total CPU time and keep the top ``limit``.

    Ties are broken by pid ascending. Percentages are relative to the top
    record, which is always 100.0 unless its total is 0, in which case every
    record reports 0.0. An empty input gives an empty list.
    """
    ordered = sorted(records, key=lambda r: (-r.total_time, r.pid))
    if not ordered:
        return []

    top_time = ordered[0].total_time
    ranked = []
    for record in ordered[: max(0, limit)]:
        relative = 100.0 * record.total_time / top_time if top_time > 0 else 0.0
        ranked.append(RankedProcess(record=record, relative_percent=relative))
    return ranked


class ProcessCensus:
    """
    Point-in-time ranking of processes by cumulative CPU ticks.

    The process table changes while it is being read. A process that exits,
    denies access, or returns a malformed stat record is left out of the
    result; only a failure to list the root itself is raised.
    """

    def __init__(self, procfs: ProcFS | None = None, limit: int = DEFAULT_TOP_N) -> None:
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")
        self._procfs = procfs or ProcFS()
        self._limit = limit

    @property
    def limit(self) -> int:
        return self._limit

    def read_process(self, pid: int) -> ProcessRecord:
        """
        Read one process's record.

        Raises:
            SamplerError: If the stat record cannot be read or parsed. A name
                that cannot be read is replaced with ``[unknown]`` instead.
        """
        utime, stime = parse_stat(self._procfs.read_pid_stat(pid))

        try:
            name = self._procfs.read_comm(pid)
        except SamplerError as exc:
            logger.debug("Name of pid %d unavailable: %s", pid, exc)
            name = UNKNOWN_NAME

        return ProcessRecord(pid=pid, name=name, utime=utime, stime=stime)

    def collect(self) -> tuple[list[ProcessRecord], int, int]:
        """
        Read every process currently listed.

        Returns:
            The surviving records, the number of entries enumerated and the
            number skipped.

        Raises:
            SourceUnavailable: If the process root cannot be listed.
        """
        records: list[ProcessRecord] = []
        scanned = 0
        skipped = 0

        for pid in self._procfs.iter_pids():
            scanned += 1
            try:
                records.append(self.read_process(pid))
            except SamplerError as exc:
                # Exited mid-scan, permission denied or malformed record
                logger.debug("Skipping pid %d: %s", pid, exc)
                skipped += 1

        return records, scanned, skipped

    def take(self) -> CensusResult:
        """Run one census pass and return the ranked top processes."""
        records, scanned, skipped = self.collect()
        return CensusResult(
            processes=rank_processes(records, self._limit),
            scanned=scanned,
            skipped=skipped,
        )
