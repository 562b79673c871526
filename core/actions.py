"""
Side effects triggered from the tray menu: open the target editor in a
separate process, quit the application.
"""
import logging
import os
import subprocess
import sys
from pathlib import Path
from typing import Callable, Optional, Protocol

logger = logging.getLogger("pinger.actions")


class ActionSink(Protocol):
    def open_editor(self) -> None:
        ...

    def quit(self) -> None:
        ...


def editor_command(entry_point: Path) -> list[str]:
    if getattr(sys, "frozen", False):
        return [sys.executable, "--config"]
    return [sys.executable, str(entry_point), "--config"]


class ProcessActionSink:
    """Editor runs as a child process; quit ends this process."""

    def __init__(self, entry_point: Path, on_quit: Optional[Callable[[], None]] = None):
        self.entry_point = entry_point
        self._on_quit = on_quit
        self._children: list[subprocess.Popen] = []

    def open_editor(self) -> Optional[subprocess.Popen]:
        cmd = editor_command(self.entry_point)
        try:
            proc = subprocess.Popen(cmd)
        except OSError as e:
            logger.error("Could not start editor (%s): %s", " ".join(cmd), e)
            return None
        # Reap finished editors so they don't linger as zombies
        self._children = [c for c in self._children if c.poll() is None]
        self._children.append(proc)
        logger.info("Editor started (pid %d)", proc.pid)
        return proc

    def quit(self) -> None:
        logger.info("Quit requested")
        if self._on_quit is not None:
            self._on_quit()
            return
        logging.shutdown()
        os._exit(0)
