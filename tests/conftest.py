"""Shared fixtures: a fake /proc tree built under tmp_path."""

from pathlib import Path

import pytest

from sysmonitor.procfs import ProcFS

MEMINFO = """MemTotal:       16777216 kB
MemFree:         8388608 kB
MemAvailable:   12000000 kB
Buffers:          204800 kB
Cached:          3145728 kB
"""


def stat_line(pid: int, name: str, utime: int, stime: int) -> str:
    """Build a /proc/<pid>/stat record with the given name and ticks."""
    return (
        f"{pid} ({name}) S 1 {pid} {pid} 0 -1 4194560 1200 0 0 0 "
        f"{utime} {stime} 0 0 20 0 1 0 4242 10485760 512 18446744073709551615\n"
    )


def cpu_stat(user, nice, system, idle, iowait=0, irq=0, softirq=0) -> str:
    """Build /proc/stat text with an aggregate line and two per-core lines."""
    return (
        f"cpu  {user} {nice} {system} {idle} {iowait} {irq} {softirq} 0 0 0\n"
        f"cpu0 {user // 2} {nice} {system // 2} {idle // 2} 0 0 0 0 0 0\n"
        f"cpu1 {user // 2} {nice} {system // 2} {idle // 2} 0 0 0 0 0 0\n"
        "intr 1000 0 0\n"
        "ctxt 123456\n"
        "btime 1700000000\n"
        "processes 4321\n"
    )


class FakeProc:
    """Writes a minimal /proc layout that ProcFS can read."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)
        self.procfs = ProcFS(root)

    def set_stat(self, text: str) -> None:
        (self.root / "stat").write_text(text)

    def set_meminfo(self, text: str) -> None:
        (self.root / "meminfo").write_text(text)

    def add_process(
        self,
        pid: int,
        name: str,
        utime: int,
        stime: int,
        comm: str | None = None,
        stat: str | None = None,
    ) -> Path:
        """
        Add a process directory.

        ``comm`` defaults to the name plus a newline; ``stat`` overrides the
        generated stat record.
        """
        proc_dir = self.root / str(pid)
        proc_dir.mkdir()
        (proc_dir / "stat").write_text(stat if stat is not None else stat_line(pid, name, utime, stime))
        (proc_dir / "comm").write_text(comm if comm is not None else f"{name}\n")
        return proc_dir


@pytest.fixture
def fake_proc(tmp_path: Path) -> FakeProc:
    """An empty fake /proc tree with metadata entries that are not processes."""
    proc = FakeProc(tmp_path / "proc")
    (proc.root / "self").mkdir()
    (proc.root / "sys").mkdir()
    (proc.root / "uptime").write_text("12345.67 54321.00\n")
    proc.set_meminfo(MEMINFO)
    proc.set_stat(cpu_stat(1000, 10, 500, 8000))
    return proc
