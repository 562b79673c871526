"""Tray icon: colored status dot, tooltip, per-target menu, Configure/Quit actions."""
import logging
import sys

from PySide6.QtWidgets import QApplication, QMenu, QSystemTrayIcon
from PySide6.QtCore import QObject, QTimer, Signal
from PySide6.QtGui import QColor, QIcon, QPixmap

from core import notify
from core.actions import ActionSink
from core.monitor import MonitorState
from core.notify import Urgency
from core.presentation import last_check_label, menu_lines, status_color, tooltip, tray_title

logger = logging.getLogger("pinger.gui")

ICON_SIZE = 32
REFRESH_MS = 1000


def solid_icon(rgb: tuple[int, int, int]) -> QIcon:
    pixmap = QPixmap(ICON_SIZE, ICON_SIZE)
    pixmap.fill(QColor(*rgb))
    return QIcon(pixmap)


class TrayController(QObject):
    # (summary, body, icon_hint, urgency value, timeout_ms); emitted from the monitor thread
    notification_requested = Signal(str, str, str, str, int)

    def __init__(self, state: MonitorState, actions: ActionSink, parent=None):
        super().__init__(parent)
        self.state = state
        self.actions = actions
        self._color = None
        self._cycle = -1

        self.tray_icon = QSystemTrayIcon(self)
        self.menu = QMenu()
        self.menu.aboutToShow.connect(self._rebuild_menu)
        self.tray_icon.setContextMenu(self.menu)

        self.notification_requested.connect(self._show_notification)
        if QSystemTrayIcon.isSystemTrayAvailable():
            notify.set_notify_callback(self._notify_from_any_thread)
        else:
            logger.warning("System tray not available; notifications will only be logged")

        self.refresh()
        self.tray_icon.show()

        self._timer = QTimer(self)
        self._timer.timeout.connect(self.refresh)
        self._timer.start(REFRESH_MS)

    def refresh(self):
        snap = self.state.snapshot()
        color = status_color(snap)
        if color != self._color:
            self.tray_icon.setIcon(solid_icon(color))
            self._color = color
        tip_title, tip_status = tooltip(snap)
        self.menu.setTitle(tip_title)
        self.tray_icon.setToolTip(f"{tray_title(snap)}\n{tip_status}")
        if snap.cycle_number != self._cycle:
            self._cycle = snap.cycle_number
            self._rebuild_menu()

    def _rebuild_menu(self):
        snap = self.state.snapshot()
        self.menu.clear()
        header = self.menu.addAction(last_check_label(snap))
        header.setEnabled(False)
        self.menu.addSeparator()
        for line in menu_lines(snap):
            self.menu.addAction(line)
        self.menu.addSeparator()
        configure = self.menu.addAction("⚙️ Configure Sites")
        configure.triggered.connect(self.actions.open_editor)
        quit_action = self.menu.addAction("Quit")
        quit_action.triggered.connect(self.actions.quit)

    def _notify_from_any_thread(self, summary: str, body: str, icon_hint: str, urgency: Urgency, timeout_ms: int):
        self.notification_requested.emit(summary, body, icon_hint, urgency.value, timeout_ms)

    def _show_notification(self, summary: str, body: str, icon_hint: str, urgency: str, timeout_ms: int):
        icon = QIcon.fromTheme(icon_hint)
        if not icon.isNull():
            self.tray_icon.showMessage(summary, body, icon, timeout_ms)
            return
        if urgency == Urgency.CRITICAL.value:
            message_icon = QSystemTrayIcon.MessageIcon.Critical
        else:
            message_icon = QSystemTrayIcon.MessageIcon.Information
        self.tray_icon.showMessage(summary, body, message_icon, timeout_ms)


def run_tray(state: MonitorState, actions_factory) -> int:
    """Create the Qt app and tray; `actions_factory(app)` builds the ActionSink. Returns the exit code."""
    app = QApplication(sys.argv)
    app.setQuitOnLastWindowClosed(False)
    controller = TrayController(state, actions_factory(app))
    try:
        return app.exec()
    finally:
        notify.set_notify_callback(None)
        controller.tray_icon.hide()
