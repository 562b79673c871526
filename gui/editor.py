"""Target editor window: add/remove monitored sites; every change is saved."""
import logging
import sys

from PySide6.QtWidgets import (
    QApplication,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QLineEdit,
    QMessageBox,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)
from PySide6.QtCore import Qt

from core.config import load_targets, save_targets
from core.targets import normalize_target

logger = logging.getLogger("pinger.editor")


class ConfigWindow(QWidget):
    def __init__(self, targets: list[str] | None = None, save=save_targets):
        super().__init__()
        self.setWindowTitle("Configuration")
        self.resize(400, 500)
        self.targets = list(targets) if targets is not None else load_targets()
        self._save = save
        self._build_ui()
        self.refresh_table()

    def _build_ui(self):
        layout = QVBoxLayout(self)
        title = QLabel("<b>Monitoring</b>")
        title.setStyleSheet("font-size: 20px;")
        layout.addWidget(title)

        input_layout = QHBoxLayout()
        self.input = QLineEdit()
        self.input.setPlaceholderText("e.g. google.com")
        self.input.returnPressed.connect(self.add_site)
        add_btn = QPushButton(" + Add ")
        add_btn.clicked.connect(self.add_site)
        input_layout.addWidget(self.input)
        input_layout.addWidget(add_btn)
        layout.addLayout(input_layout)

        self.count_label = QLabel()
        layout.addWidget(self.count_label)

        self.table = QTableWidget(0, 2)
        self.table.setHorizontalHeaderLabels(["Site", ""])
        self.table.horizontalHeader().setSectionResizeMode(0, QHeaderView.ResizeMode.Stretch)
        self.table.horizontalHeader().setSectionResizeMode(1, QHeaderView.ResizeMode.ResizeToContents)
        self.table.verticalHeader().setVisible(False)
        layout.addWidget(self.table)

        close_btn = QPushButton("Save and close")
        close_btn.clicked.connect(self.save_and_close)
        layout.addWidget(close_btn)

    def refresh_table(self):
        self.count_label.setText(f"Monitored sites: {len(self.targets)}")
        self.table.setRowCount(len(self.targets))
        for i, site in enumerate(self.targets):
            item = QTableWidgetItem(site)
            item.setFlags(item.flags() & ~Qt.ItemFlag.ItemIsEditable)
            self.table.setItem(i, 0, item)
            remove_btn = QPushButton("Remove")
            remove_btn.clicked.connect(lambda _checked=False, idx=i: self.remove_site(idx))
            self.table.setCellWidget(i, 1, remove_btn)

    def add_site(self):
        cleaned = normalize_target(self.input.text())
        if cleaned is None:
            logger.debug("Empty input ignored")
            return
        self.targets.append(cleaned)
        self.input.clear()
        self.refresh_table()
        self._persist()
        logger.info("Added site %s (total %d)", cleaned, len(self.targets))

    def remove_site(self, idx: int):
        if 0 <= idx < len(self.targets):
            removed = self.targets.pop(idx)
            self.refresh_table()
            self._persist()
            logger.info("Removed site %s", removed)

    def save_and_close(self):
        if self._persist():
            self.close()

    def _persist(self) -> bool:
        try:
            self._save(self.targets)
        except OSError as e:
            logger.error("Could not save configuration: %s", e)
            QMessageBox.warning(self, "Save error", str(e))
            return False
        return True


def run_editor() -> int:
    app = QApplication(sys.argv)
    win = ConfigWindow()
    win.show()
    return app.exec()
