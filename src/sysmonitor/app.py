"""sysmonitor - Continuous monitoring Textual application."""

import logging
from queue import Empty, Queue

from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal
from textual.css.query import NoMatches
from textual.logging import TextualHandler
from textual.widgets import DataTable, Footer, Static

from sysmonitor.census import DEFAULT_TOP_N
from sysmonitor.logsink import replace_console_handler
from sysmonitor.models import CensusResult, CpuReading, MemorySample
from sysmonitor.monitor import SystemMonitor, SystemSnapshot
from sysmonitor.procfs import ProcFS

logger = logging.getLogger(__name__)

BAR_WIDTH = 20


def usage_bar(percent: float, color: str) -> str:
    """Render a percentage as a fixed-width markup bar."""
    bar_len = min(max(int(percent / (100 / BAR_WIDTH)), 0), BAR_WIDTH)
    return f"[{color}]█[/{color}]" * bar_len + "[dim]░[/dim]" * (BAR_WIDTH - bar_len)


class HeaderStats(Static):
    """Header widget showing CPU and memory statistics."""

    DEFAULT_CSS = """
    HeaderStats {
        height: auto;
        min-height: 4;
        padding: 1;
        background: $surface;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize HeaderStats."""
        super().__init__(*args, **kwargs)
        self._cpu: CpuReading | None = None
        self._memory: MemorySample | None = None
        self._errors: list[str] = []

    def compose(self) -> ComposeResult:
        """Compose the header stats layout."""
        yield Horizontal(
            Static(self._get_cpu_info(), id="cpu-info"),
            Static(self._get_mem_info(), id="mem-info"),
        )

    def update_stats(self, snapshot: SystemSnapshot) -> None:
        """Update the statistics from a system snapshot."""
        self._cpu = snapshot.cpu
        self._memory = snapshot.memory
        self._errors = snapshot.errors
        self._refresh_display()

    def _refresh_display(self) -> None:
        """Refresh the display with current data."""
        try:
            cpu_info = self.query_one("#cpu-info", Static)
            mem_info = self.query_one("#mem-info", Static)
        except NoMatches:
            return  # Widget not mounted yet
        cpu_info.update(self._get_cpu_info())
        mem_info.update(self._get_mem_info())

    def _get_cpu_info(self) -> str:
        """Get CPU info display."""
        if self._cpu is None:
            if any(e.startswith("CPU") for e in self._errors):
                return "CPU: unavailable"
            return "Loading CPU info..."
        if self._cpu.needs_warmup:
            return "CPU: initializing..."
        percent = self._cpu.percent
        return f"CPU \\[{usage_bar(percent, 'green')}] {percent:5.1f}%"

    def _get_mem_info(self) -> str:
        """Get memory info display."""
        if self._memory is None:
            if any(e.startswith("Memory") for e in self._errors):
                return "Memory: unavailable"
            return "Loading memory info..."
        mem = self._memory
        return (
            f"Mem \\[{usage_bar(mem.percentage, 'cyan')}] {mem.percentage:5.1f}%\n"
            f"{mem.used_mb}MB used / {mem.total_mb}MB total, {mem.free_mb}MB free"
        )


class ProcessTable(Container):
    """Container for the top processes table."""

    DEFAULT_CSS = """
    ProcessTable {
        height: 1fr;
        border: solid $primary;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize ProcessTable."""
        super().__init__(*args, **kwargs)
        self._current_pids: list[int] = []

    @property
    def current_pids(self) -> list[int]:
        """Pids currently shown, in rank order."""
        return list(self._current_pids)

    def compose(self) -> ComposeResult:
        """Compose the process table."""
        yield DataTable(id="process-table")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        table = self.query_one("#process-table", DataTable)
        table.cursor_type = "row"

        table.add_column("PID", key="pid", width=8)
        table.add_column("Process Name", key="name", width=30)
        table.add_column("CPU Time", key="ticks", width=15)
        table.add_column("Relative %", key="relative")

    def update_processes(self, census: CensusResult) -> None:
        """
        Replace the table rows with a new census.

        Rank order changes between passes, so rows are rebuilt rather than
        updated in place.
        """
        table = self.query_one("#process-table", DataTable)
        table.clear()

        for proc in census.processes:
            table.add_row(
                str(proc.pid),
                proc.name[:30],
                str(proc.total_time),
                f"{proc.relative_percent:.2f}%",
                key=str(proc.pid),
            )

        self._current_pids = [proc.pid for proc in census.processes]


class SysMonitorApp(App):
    """Continuous monitoring application."""

    TITLE = "sysmonitor"
    SUB_TITLE = "Continuous Monitoring"

    CSS = """
    Screen {
        layout: vertical;
    }

    #header-stats {
        dock: top;
        height: auto;
        min-height: 5;
    }

    Horizontal {
        height: auto;
    }

    #cpu-info {
        width: 1fr;
        padding-right: 2;
    }

    #mem-info {
        width: 1fr;
        padding-left: 2;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        poll_rate: float = 2.0,
        procfs: ProcFS | None = None,
        top_n: int = DEFAULT_TOP_N,
        session_log: logging.Logger | None = None,
    ) -> None:
        """Initialize the SysMonitorApp."""
        super().__init__()
        self._update_queue: Queue[SystemSnapshot] = Queue()
        self._monitor = SystemMonitor(
            self._update_queue, poll_rate=poll_rate, procfs=procfs, top_n=top_n
        )
        self._session_log = session_log or logging.getLogger("sysmonitor.session")
        self._top_n = top_n
        self._saved_console: logging.Handler | None = None

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield HeaderStats(id="header-stats")
        yield ProcessTable()
        yield Footer()

    def on_mount(self) -> None:
        """Start the system monitor when the app is mounted."""
        self.sub_title = f"Top {self._top_n} processes, every {self._monitor.poll_rate:g}s"
        # A stream handler would draw over the screen, so diagnostics go to the Textual log
        self._saved_console = replace_console_handler(TextualHandler())
        self._session_log.info("Continuous monitoring started")
        self._monitor.start()
        # Set up a timer to poll the queue for updates
        self.set_interval(0.5, self._check_for_updates)

    def _check_for_updates(self) -> None:
        """Check the queue for system updates and refresh the UI."""
        # Every snapshot is logged, only the most recent one is rendered
        snapshot = None
        while True:
            try:
                snapshot = self._update_queue.get_nowait()
            except Empty:
                break
            self.record_snapshot(snapshot)

        if snapshot is not None:
            self.render_snapshot(snapshot)

    def apply_snapshot(self, snapshot: SystemSnapshot) -> None:
        """Record a snapshot in the session log and render it."""
        self.record_snapshot(snapshot)
        self.render_snapshot(snapshot)

    def record_snapshot(self, snapshot: SystemSnapshot) -> None:
        """Write the snapshot's summaries to the session log."""
        for line in snapshot.summaries():
            self._session_log.info(line)

    def render_snapshot(self, snapshot: SystemSnapshot) -> None:
        """Show a snapshot in the header and process table."""
        for message in snapshot.errors:
            self.notify(message, severity="warning")

        try:
            self.query_one("#header-stats", HeaderStats).update_stats(snapshot)
            if snapshot.census is not None:
                self.query_one(ProcessTable).update_processes(snapshot.census)
        except NoMatches:
            logger.debug("Snapshot arrived before widgets were mounted")

    def action_quit(self) -> None:
        """Handle quit action with graceful cleanup."""
        self._monitor.stop()
        self._session_log.info("Continuous monitoring stopped")
        replace_console_handler(self._saved_console)
        self._saved_console = None
        self.exit()
