"""Memory usage from /proc/meminfo."""

import logging

from sysmonitor.errors import MalformedRecord
from sysmonitor.models import MemorySample
from sysmonitor.procfs import ProcFS

logger = logging.getLogger(__name__)

MEMINFO_FIELDS = ("MemTotal", "MemFree")


def parse_meminfo(text: str) -> dict[str, int]:
    """
    Extract MemTotal and MemFree (in KiB) from meminfo text.

    Lines may come in any order and unrecognized labels are ignored. A field
    that is missing reads as 0.

    Raises:
        MalformedRecord: If a wanted label is present but its value is not an
            unsigned integer.
    """
    values = dict.fromkeys(MEMINFO_FIELDS, 0)
    seen: set[str] = set()

    for line in text.splitlines():
        label, sep, rest = line.partition(":")
        label = label.strip()
        if not sep or label not in values or label in seen:
            continue
        tokens = rest.split()
        if not tokens or not (tokens[0].isascii() and tokens[0].isdigit()):
            raise MalformedRecord(f"{label} has no numeric value: {line.strip()!r}")
        values[label] = int(tokens[0])
        seen.add(label)

    for label in MEMINFO_FIELDS:
        if label not in seen:
            logger.warning("%s missing from meminfo, reporting 0", label)

    return values


def derive_memory(total_kb: int, free_kb: int) -> MemorySample:
    """
    Convert KiB counters to a MemorySample.

    Megabytes are whole: sub-MB remainders are truncated. The percentage is
    0.0 when the total is 0.
    """
    total_mb = total_kb // 1024
    free_mb = free_kb // 1024
    used_mb = total_mb - free_mb

    percentage = 0.0
    if total_mb > 0:
        percentage = 100.0 * used_mb / total_mb

    return MemorySample(
        total_mb=total_mb,
        used_mb=used_mb,
        free_mb=free_mb,
        percentage=percentage,
    )


class MemorySampler:
    """Stateless sampler over /proc/meminfo."""

    def __init__(self, procfs: ProcFS | None = None) -> None:
        self._procfs = procfs or ProcFS()

    def sample(self) -> MemorySample:
        """
        Read /proc/meminfo now and derive usage.

        Raises:
            SourceUnavailable: If /proc/meminfo cannot be read.
            MalformedRecord: If a wanted field has a non-numeric value.
        """
        fields = parse_meminfo(self._procfs.read_meminfo())
        return derive_memory(fields["MemTotal"], fields["MemFree"])
