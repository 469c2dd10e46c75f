"""sysmonitor command line: one-shot modes, interactive menu, continuous mode."""

import argparse
import logging
import sys
import time
from pathlib import Path

from sysmonitor.census import DEFAULT_TOP_N, ProcessCensus
from sysmonitor.cpu import CpuSampler
from sysmonitor.errors import SamplerError
from sysmonitor.logsink import DEFAULT_LOG_FILE, setup_logging, shutdown_logging
from sysmonitor.memory import MemorySampler
from sysmonitor.procfs import DEFAULT_PROC_ROOT, ProcFS

MENU = """
=== SysMonitor++ Main Menu ===
1. CPU Usage
2. Memory Usage
3. Top {top_n} Processes
4. Continuous Monitoring
5. Exit"""

MENU_INTERVAL = 2.0


def positive_interval(value: str) -> float:
    """argparse type for the continuous-mode interval."""
    try:
        interval = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid interval: {value!r}") from None
    if interval <= 0:
        raise argparse.ArgumentTypeError("interval must be a positive number")
    return interval


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sysmonitor",
        description="SysMonitor++ - System Monitoring Tool",
        epilog=(
            "examples:\n"
            "  sysmonitor -c 2         Monitor every 2 seconds\n"
            "  sysmonitor -m cpu       Show CPU usage once"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "-m",
        dest="mode",
        choices=("cpu", "mem", "proc"),
        help="display CPU usage, memory usage or the top active processes once",
    )
    mode.add_argument(
        "-c",
        dest="interval",
        type=positive_interval,
        metavar="SECONDS",
        help="continuous monitoring mode with the given refresh interval",
    )
    parser.add_argument(
        "-n",
        "--top",
        dest="top_n",
        type=int,
        default=DEFAULT_TOP_N,
        help="number of processes to list (default: %(default)s)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=DEFAULT_LOG_FILE,
        help="session log file (default: %(default)s)",
    )
    parser.add_argument("--no-log", action="store_true", help="do not write a session log")
    parser.add_argument(
        "--proc-root",
        default=DEFAULT_PROC_ROOT,
        help="root of the proc filesystem (default: %(default)s)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug output on stderr")
    return parser


class Console:
    """Prints sampler results and mirrors their summaries to the session log."""

    def __init__(
        self,
        procfs: ProcFS,
        session_log: logging.Logger,
        top_n: int = DEFAULT_TOP_N,
        out=None,
    ) -> None:
        self._session_log = session_log
        self._top_n = top_n
        self._out = out or sys.stdout
        self.cpu = CpuSampler(procfs)
        self.memory = MemorySampler(procfs)
        self.census = ProcessCensus(procfs, limit=top_n)

    def _print(self, text: str = "") -> None:
        print(text, file=self._out)

    def show_cpu(self) -> bool:
        """Print CPU usage. Returns False if the sample failed."""
        try:
            reading = self.cpu.sample()
        except SamplerError as exc:
            print(f"Error: CPU usage unavailable: {exc}", file=sys.stderr)
            return False

        self._print("\n=== CPU Usage ===")
        if reading.needs_warmup:
            self._print("Initializing CPU monitoring...")
            self._print("Run again to see CPU usage.\n")
        else:
            self._print(f"CPU Usage: {reading.percent:.1f}%\n")
        self._session_log.info(reading.summary())
        return True

    def show_memory(self) -> bool:
        """Print memory usage. Returns False if the sample failed."""
        try:
            mem = self.memory.sample()
        except SamplerError as exc:
            print(f"Error: memory usage unavailable: {exc}", file=sys.stderr)
            return False

        self._print("\n=== Memory Usage ===")
        self._print(f"Total Memory:  {mem.total_mb} MB")
        self._print(f"Used Memory:   {mem.used_mb} MB")
        self._print(f"Free Memory:   {mem.free_mb} MB")
        self._print(f"Usage:         {mem.percentage:.1f}%")
        self._print("====================")
        self._session_log.info(mem.summary())
        return True

    def show_processes(self) -> bool:
        """Print the top processes table. Returns False if the census failed."""
        self._print(f"\n=== Top {self._top_n} Active Processes ===")
        try:
            result = self.census.take()
        except SamplerError as exc:
            print(f"Error: process list unavailable: {exc}", file=sys.stderr)
            self._session_log.info(f"Error: {exc}")
            return False

        if result.is_empty:
            self._print("No processes found.\n")
        else:
            self._print(f"{'PID':<10} {'Process Name':<30} {'CPU Time':<15} {'Relative %':<10}")
            self._print("=" * 71)
            for proc in result.processes:
                self._print(
                    f"{proc.pid:<10} {proc.name:<30} {proc.total_time:<15} "
                    f"{proc.relative_percent:.2f}%"
                )
            self._print()
        self._session_log.info(result.summary())
        return True


def run_continuous(
    interval: float, procfs: ProcFS, top_n: int, session_log: logging.Logger
) -> None:
    """Run the continuous monitoring dashboard until the user quits."""
    # Imported here so one-shot modes do not pay for loading Textual
    from sysmonitor.app import SysMonitorApp

    app = SysMonitorApp(
        poll_rate=interval, procfs=procfs, top_n=top_n, session_log=session_log
    )
    app.run()


def run_menu(console: Console, procfs: ProcFS, top_n: int, session_log: logging.Logger) -> None:
    """Interactive menu loop; returns when the user exits or stdin closes."""
    while True:
        print(MENU.format(top_n=top_n))
        try:
            raw = input("Enter your choice: ")
        except EOFError:
            session_log.info("User exited from menu")
            print()
            return

        try:
            choice = int(raw.strip())
        except ValueError:
            print("Invalid input. Please enter a number.")
            continue

        if choice == 1:
            console.show_cpu()
        elif choice == 2:
            console.show_memory()
        elif choice == 3:
            console.show_processes()
        elif choice == 4:
            run_continuous(MENU_INTERVAL, procfs, top_n, session_log)
        elif choice == 5:
            session_log.info("User exited from menu")
            print("Exiting...")
            return
        else:
            print("Invalid choice. Please select 1-5.")


def run(args: argparse.Namespace, session_log: logging.Logger) -> None:
    procfs = ProcFS(args.proc_root)
    console = Console(procfs, session_log, top_n=args.top_n)

    if args.mode == "cpu":
        # One sample only warms up, so take a second one a second later
        if console.show_cpu():
            time.sleep(1)
            console.show_cpu()
    elif args.mode == "mem":
        console.show_memory()
    elif args.mode == "proc":
        console.show_processes()
    elif args.interval is not None:
        run_continuous(args.interval, procfs, args.top_n, session_log)
    else:
        run_menu(console, procfs, args.top_n, session_log)


def main(argv: list[str] | None = None) -> int:
    """Entry point for the sysmonitor command."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.top_n < 1:
        parser.error("--top must be at least 1")

    level = logging.DEBUG if args.verbose else logging.WARNING
    log_file = None if args.no_log else args.log_file
    try:
        session_log = setup_logging(level=level, log_file=log_file)
    except OSError as exc:
        print(f"Warning: Could not open {log_file}: {exc}", file=sys.stderr)
        session_log = setup_logging(level=level, log_file=None)

    session_log.info("Session started")
    try:
        run(args, session_log)
    except KeyboardInterrupt:
        print("\n\nExiting... Saving log.")
        session_log.info("SIGINT received")
    finally:
        session_log.info("Session ended")
        shutdown_logging()
    return 0


if __name__ == "__main__":
    sys.exit(main())
