"""Tests for the /proc reader."""

import pytest

from sysmonitor.errors import SourceUnavailable
from sysmonitor.procfs import MAX_NAME_BYTES, ProcFS


def test_iter_pids_only_digit_entries(fake_proc):
    """Test only digit-named entries are reported as pids."""
    fake_proc.add_process(1, "init", 10, 5)
    fake_proc.add_process(4321, "bash", 1, 1)
    (fake_proc.root / "12abc").mkdir()

    assert sorted(fake_proc.procfs.iter_pids()) == [1, 4321]


def test_iter_pids_rejects_non_ascii_digits(fake_proc):
    """Test unicode digits are not mistaken for pids."""
    (fake_proc.root / "²³").mkdir()
    assert list(fake_proc.procfs.iter_pids()) == []


def test_iter_pids_missing_root(tmp_path):
    """Test a missing process root raises SourceUnavailable."""
    procfs = ProcFS(tmp_path / "nowhere")
    with pytest.raises(SourceUnavailable):
        list(procfs.iter_pids())


def test_read_comm_strips_single_newline(fake_proc):
    """Test one trailing newline is stripped from the name."""
    fake_proc.add_process(10, "kworker", 0, 0, comm="kworker\n")
    assert fake_proc.procfs.read_comm(10) == "kworker"


def test_read_comm_without_newline(fake_proc):
    """Test a name without a trailing newline is returned as is."""
    fake_proc.add_process(10, "sshd", 0, 0, comm="sshd")
    assert fake_proc.procfs.read_comm(10) == "sshd"


def test_read_comm_empty_is_unavailable(fake_proc):
    """Test an empty name record counts as unavailable."""
    fake_proc.add_process(10, "x", 0, 0, comm="")
    with pytest.raises(SourceUnavailable):
        fake_proc.procfs.read_comm(10)


def test_read_comm_truncates_long_names(fake_proc):
    """Test names are truncated to the maximum byte length."""
    fake_proc.add_process(10, "x", 0, 0, comm="a" * 400 + "\n")
    assert len(fake_proc.procfs.read_comm(10)) == MAX_NAME_BYTES


def test_read_vanished_process(fake_proc):
    """Test reading a process that no longer exists raises SourceUnavailable."""
    with pytest.raises(SourceUnavailable) as exc_info:
        fake_proc.procfs.read_pid_stat(999)
    assert exc_info.value.path.endswith("999/stat")


def test_read_pid_stat_trims_trailing_newline(fake_proc):
    """Test the stat record is returned without its newline."""
    fake_proc.add_process(5, "init", 3, 4)
    line = fake_proc.procfs.read_pid_stat(5)
    assert line.startswith("5 (init) S")
    assert not line.endswith("\n")


def test_read_stat_and_meminfo(fake_proc):
    """Test the system-wide records are read as text."""
    assert fake_proc.procfs.read_stat().startswith("cpu ")
    assert "MemTotal" in fake_proc.procfs.read_meminfo()


def test_missing_meminfo(fake_proc):
    """Test a missing meminfo raises SourceUnavailable."""
    (fake_proc.root / "meminfo").unlink()
    with pytest.raises(SourceUnavailable):
        fake_proc.procfs.read_meminfo()


class _FailingListing:
    """Directory listing that fails after its first entry."""

    def __init__(self, first):
        self._first = first

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def __iter__(self):
        yield self._first
        raise OSError(5, "Input/output error")


def test_iter_pids_failure_mid_listing(fake_proc, monkeypatch):
    """Test a read error partway through the listing raises SourceUnavailable."""
    fake_proc.add_process(1, "init", 10, 5)
    entry = type("Entry", (), {"name": "1"})()
    monkeypatch.setattr("sysmonitor.procfs.os.scandir", lambda path: _FailingListing(entry))

    with pytest.raises(SourceUnavailable) as exc_info:
        list(fake_proc.procfs.iter_pids())
    assert "Input/output error" in str(exc_info.value)
