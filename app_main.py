"""
Cosmic Pinger – tray availability monitor. Entry point.
- Tray mode (default), --config (target editor) or --headless
- Single-instance for tray mode (lock file / named mutex)
"""
import argparse
import asyncio
import dataclasses
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent))

from core.actions import ProcessActionSink
from core.config import MonitorSettings, ensure_config_dir, get_config_dir
from core.logging_setup import setup_logging
from core.monitor import MonitorState, run_monitor, start_monitor_thread


def single_instance_lock():
    """
    Cross-platform single-instance guard.

    On Windows: use a named mutex via Win32 API, which avoids stale lock files.
    On POSIX: use an advisory file lock in the config directory.

    Returns a handle that must be kept alive; if another instance already holds
    the lock, returns None.
    """
    if sys.platform == "win32":
        import ctypes
        from ctypes import wintypes

        kernel32 = ctypes.WinDLL("kernel32", use_last_error=True)
        CreateMutexW = kernel32.CreateMutexW
        CreateMutexW.argtypes = (wintypes.LPVOID, wintypes.BOOL, wintypes.LPCWSTR)
        CreateMutexW.restype = wintypes.HANDLE

        handle = CreateMutexW(None, False, "Global\\CosmicPingerSingleInstanceMutex")
        if not handle:
            return None
        ERROR_ALREADY_EXISTS = 183
        if ctypes.get_last_error() == ERROR_ALREADY_EXISTS:
            kernel32.CloseHandle(handle)
            return None
        # Keep handle open for the lifetime of the process
        return handle

    import fcntl
    import os

    ensure_config_dir()
    fd = open(get_config_dir() / "pinger.lock", "w")
    try:
        fcntl.flock(fd.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
    except OSError:
        fd.close()
        return None
    fd.write(str(os.getpid()))
    fd.flush()
    return fd


def settings_from_args(args: argparse.Namespace) -> MonitorSettings:
    overrides = {}
    if args.interval is not None:
        overrides["interval_s"] = args.interval
    if args.threshold is not None:
        overrides["fail_threshold"] = args.threshold
    return dataclasses.replace(MonitorSettings(), **overrides)


def run_headless(settings: MonitorSettings) -> None:
    logger = setup_logging()
    logger.info("Cosmic Pinger started (headless)")
    try:
        asyncio.run(run_monitor(MonitorState(), settings))
    except KeyboardInterrupt:
        pass
    logger.info("Cosmic Pinger stopped (headless)")


def run_gui(settings: MonitorSettings) -> int:
    from gui.tray import run_tray

    setup_logging()
    logger = logging.getLogger("pinger")
    lock = single_instance_lock()
    if lock is None:
        print("Another instance of Cosmic Pinger is already running.", file=sys.stderr)
        return 1

    logger.info("Cosmic Pinger started (tray)")
    state = MonitorState()
    start_monitor_thread(state, settings)
    entry_point = Path(__file__).resolve()
    return run_tray(state, lambda app: ProcessActionSink(entry_point, on_quit=app.quit))


def run_config() -> int:
    from gui.editor import run_editor

    setup_logging()
    logging.getLogger("pinger").info("Configuration editor opened")
    return run_editor()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Cosmic Pinger – tray availability monitor")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--config", action="store_true", help="Open the target list editor")
    mode.add_argument("--headless", action="store_true", help="Run monitoring without tray")
    parser.add_argument("--interval", type=float, help="Seconds between checks (default 180)")
    parser.add_argument("--threshold", type=int, help="Consecutive failures before a target is DOWN (default 2)")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        settings = settings_from_args(args)
    except ValueError as e:
        parser.error(str(e))
    if args.config:
        return run_config()
    if args.headless:
        run_headless(settings)
        return 0
    return run_gui(settings)


if __name__ == "__main__":
    sys.exit(main())
