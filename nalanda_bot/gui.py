"""
PySide6 GUI for the Nalanda validation bot.

This module provides a graphical interface for entering credentials,
running a validation pass and following its log and progress live.
"""

import sys
from typing import Optional

from PySide6.QtWidgets import (
    QApplication,
    QMainWindow,
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QFormLayout,
    QPushButton,
    QLineEdit,
    QLabel,
    QMessageBox,
    QSpinBox,
    QComboBox,
    QCheckBox,
    QProgressBar,
    QPlainTextEdit,
)
from PySide6.QtCore import Signal, QThread
from PySide6.QtGui import QFont

from .config import Config, BROWSER_MODES
from .errors import RunAborted
from .logging_utils import AutomationCallbacks
from .models import LogEntry, RunSummary
from .network_utils import check_site_connectivity, format_connectivity_error, is_vpn_proxy_error
from .orchestrator import RunOrchestrator


LEVEL_PREFIX = {
    'info': '→',
    'success': '✓',
    'warning': '⚠',
    'error': '✗',
}


def format_log_entry(entry: LogEntry) -> str:
    """
    Render a log entry as one line of the log view, e.g. "09:30:00 ✓ Login completed".
    """
    return f"{entry.timestamp.strftime('%H:%M:%S')} {LEVEL_PREFIX[entry.level]} {entry.message}"


class AutomationWorker(QThread):
    """
    Worker thread for running one validation pass in the background.

    Log entries and progress are re-emitted as Qt signals so the window
    only touches its widgets from the GUI thread.
    """
    log_entry = Signal(object)
    progress = Signal(int)
    finished = Signal(object)
    error = Signal(str, object)

    def __init__(self, config: Config, username: str, password: str):
        super().__init__()
        self.config = config
        self.username = username
        self.password = password

    def run(self):
        """Execute the run."""
        callbacks = AutomationCallbacks(
            on_log=self.log_entry.emit,
            on_progress=self.progress.emit,
        )
        try:
            summary = RunOrchestrator(self.config).run(
                self.username,
                self.password,
                self.config.months_back,
                callbacks
            )
            self.finished.emit(summary)
        except RunAborted as e:
            self.error.emit(str(e), e.summary)
        except Exception as e:
            self.error.emit(str(e), None)
        finally:
            self.password = ""


class NalandaGUI(QMainWindow):
    """
    Main GUI window for the Nalanda validation bot.
    """

    def __init__(self):
        super().__init__()
        self.worker: Optional[AutomationWorker] = None

        self.initUI()

    def initUI(self):
        """Initialize the user interface."""
        self.setWindowTitle("Nalanda Validation")
        self.setGeometry(100, 100, 900, 650)

        central_widget = QWidget()
        self.setCentralWidget(central_widget)

        layout = QVBoxLayout()
        central_widget.setLayout(layout)

        title = QLabel("Validate pending working days")
        title.setStyleSheet("font-size: 14px; font-weight: bold;")
        layout.addWidget(title)

        # Credentials and run options
        form = QFormLayout()

        self.username_input = QLineEdit()
        self.username_input.setPlaceholderText("Nalanda user name")
        form.addRow("User:", self.username_input)

        self.password_input = QLineEdit()
        self.password_input.setEchoMode(QLineEdit.Password)
        form.addRow("Password:", self.password_input)

        self.months_input = QSpinBox()
        self.months_input.setRange(1, 24)
        self.months_input.setValue(Config.months_back)
        self.months_input.setMaximumWidth(100)
        form.addRow("Months back:", self.months_input)

        self.browser_mode_input = QComboBox()
        self.browser_mode_input.addItems(list(BROWSER_MODES))
        self.browser_mode_input.setMaximumWidth(150)
        form.addRow("Browser:", self.browser_mode_input)

        self.headless_input = QCheckBox("Run browser headless")
        self.headless_input.setChecked(True)
        form.addRow("", self.headless_input)

        layout.addLayout(form)

        # Buttons section
        button_layout = QHBoxLayout()

        self.check_button = QPushButton("Check connection")
        self.check_button.clicked.connect(self.checkConnection)
        button_layout.addWidget(self.check_button)

        self.run_button = QPushButton("Run")
        self.run_button.clicked.connect(self.runAutomation)
        button_layout.addWidget(self.run_button)

        button_layout.addStretch()

        layout.addLayout(button_layout)

        self.progress_bar = QProgressBar()
        self.progress_bar.setRange(0, 100)
        self.progress_bar.setValue(0)
        layout.addWidget(self.progress_bar)

        # Live log view
        self.log_view = QPlainTextEdit()
        self.log_view.setReadOnly(True)
        self.log_view.setFont(QFont("Monospace"))
        layout.addWidget(self.log_view)

    def buildConfig(self) -> Config:
        return Config(
            months_back=self.months_input.value(),
            browser_mode=self.browser_mode_input.currentText(),
            headless=self.headless_input.isChecked(),
        )

    def checkConnection(self):
        """Probe Nalanda before starting a run."""
        config = self.buildConfig()
        success, error_msg = check_site_connectivity(config.base_url, timeout=10)

        if not success:
            QMessageBox.critical(
                self,
                "Network Error",
                format_connectivity_error(config.base_url, error_msg, is_vpn_proxy_error(error_msg))
            )
            return

        QMessageBox.information(
            self,
            "Connection OK",
            f"Nalanda is reachable ✓\n\n{config.base_url}"
        )

    def runAutomation(self):
        """
        Start a validation run in the worker thread.
        """
        username = self.username_input.text().strip()
        password = self.password_input.text()
        if not username or not password:
            QMessageBox.warning(
                self,
                "Missing Credentials",
                "Please enter your Nalanda user name and password."
            )
            return

        config = self.buildConfig()
        try:
            config.validate()
        except ValueError as e:
            QMessageBox.critical(
                self,
                "Configuration Error",
                f"Configuration is invalid:\n\n{str(e)}"
            )
            return

        reply = QMessageBox.question(
            self,
            "Confirm Run",
            f"Validate every pending working day of the current month\n"
            f"and the previous {config.months_back} month(s) for {username}?",
            QMessageBox.Yes | QMessageBox.No,
            QMessageBox.No
        )

        if reply != QMessageBox.Yes:
            return

        self.log_view.clear()
        self.progress_bar.setValue(0)

        self.worker = AutomationWorker(config, username, password)
        self.worker.log_entry.connect(self.appendLogEntry)
        self.worker.progress.connect(self.progress_bar.setValue)
        self.worker.finished.connect(self.onAutomationFinished)
        self.worker.error.connect(self.onAutomationError)

        # Disable inputs during run
        self.setInputsEnabled(False)

        self.worker.start()

    def setInputsEnabled(self, enabled: bool):
        for widget in (self.username_input, self.password_input, self.months_input,
                       self.browser_mode_input, self.headless_input,
                       self.check_button, self.run_button):
            widget.setEnabled(enabled)

    def appendLogEntry(self, entry: LogEntry):
        self.log_view.appendPlainText(format_log_entry(entry))

    def onAutomationFinished(self, summary: RunSummary):
        """
        Handle run completion.

        Args:
            summary: Run summary
        """
        self.setInputsEnabled(True)
        self.progress_bar.setValue(100)

        message = f"Validated: {summary.total_validated}\n"
        message += f"Days processed: {len(summary.days_by_date)}\n"
        message += f"Days with validations: {len(summary.days_with_work())}\n"

        if summary.months_reviewed:
            message += "\nMonths reviewed:\n"
            for month in summary.months_reviewed:
                status = "pending found" if month.pending_found else "nothing pending"
                message += f"  {month.month}: {status}\n"

        failed = summary.failed_days()
        if failed:
            message += "\nFailed days:\n"
            for day in failed[:5]:
                message += f"  - {day.error}\n"
            if len(failed) > 5:
                message += f"  ... and {len(failed) - 5} more\n"

            QMessageBox.warning(self, "Completed with Failed Days", message)
        else:
            QMessageBox.information(self, "Success", message)

    def onAutomationError(self, error_message: str, summary: Optional[RunSummary]):
        """
        Handle a fatal run error.

        Args:
            error_message: Error message
            summary: Partial summary, if the run got that far
        """
        self.setInputsEnabled(True)

        message = f"The run was aborted:\n\n{error_message}"
        if summary is not None and summary.total_validated:
            message += f"\n\n{summary.total_validated} entr(ies) were validated before the abort."

        if is_vpn_proxy_error(error_message) or 'net::' in error_message:
            message += "\n\nCheck that your network (and VPN/proxy, if any) can reach Nalanda."

        QMessageBox.critical(
            self,
            "Run Failed",
            message
        )


def main() -> int:
    """
    Main entry point for the GUI application.

    Returns:
        Exit code of the Qt event loop
    """
    app = QApplication.instance() or QApplication(sys.argv)
    window = NalandaGUI()
    window.show()
    return app.exec()


if __name__ == '__main__':
    sys.exit(main())
