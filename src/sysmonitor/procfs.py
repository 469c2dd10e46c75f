"""Read-only access to the /proc pseudo-filesystem."""

import os
from collections.abc import Iterator
from pathlib import Path

from sysmonitor.errors import SourceUnavailable

DEFAULT_PROC_ROOT = "/proc"

# Display names longer than this are truncated
MAX_NAME_BYTES = 255


class ProcFS:
    """
    Thin reader over a /proc tree.

    Every filesystem access made by the samplers goes through this class,
    so pointing ``root`` at a directory built in a test gives a fully fake
    kernel. Any OSError is raised as SourceUnavailable.
    """

    def __init__(self, root: str | os.PathLike[str] = DEFAULT_PROC_ROOT) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def _read_text(self, path: Path) -> str:
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise SourceUnavailable(str(path), exc.strerror or str(exc)) from exc
        return data.decode("utf-8", errors="replace")

    def read_stat(self) -> str:
        """Return the system-wide stat text."""
        return self._read_text(self._root / "stat")

    def read_meminfo(self) -> str:
        """Return the memory-info text."""
        return self._read_text(self._root / "meminfo")

    def iter_pids(self) -> Iterator[int]:
        """
        Yield the pid of every process entry under the root.

        Only entries whose name is made entirely of ASCII digits qualify, which
        rejects ``self``, ``thread-self`` and the metadata files. Order is
        whatever the directory traversal yields.
        """
        try:
            with os.scandir(self._root) as entries:
                names = [entry.name for entry in entries]
        except OSError as exc:
            raise SourceUnavailable(str(self._root), exc.strerror or str(exc)) from exc

        for name in names:
            if name.isascii() and name.isdigit():
                pid = int(name)
                if pid > 0:
                    yield pid

    def read_comm(self, pid: int) -> str:
        """
        Return the display name of a process.

        A single trailing newline is stripped. An empty record is treated as
        unavailable.
        """
        path = self._root / str(pid) / "comm"
        name = self._read_text(path)
        if name.endswith("\n"):
            name = name[:-1]
        if not name:
            raise SourceUnavailable(str(path), "empty record")
        encoded = name.encode("utf-8")
        if len(encoded) > MAX_NAME_BYTES:
            name = encoded[:MAX_NAME_BYTES].decode("utf-8", errors="ignore")
        return name

    def read_pid_stat(self, pid: int) -> str:
        """Return a process's stat record without its trailing newline."""
        path = self._root / str(pid) / "stat"
        # The comm field may itself hold a newline, so only the end is trimmed
        return self._read_text(path).rstrip("\n")
