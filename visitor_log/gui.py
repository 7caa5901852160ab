"""
gui.py

PyQt6 GUI for Visitor Log.

This module wires together:
- the session (session.py), which owns the database and the current selection,
- the file picker for the visitor CSV,
- the clipboard (pyperclip),

into the front-desk window:
- search box with live results, exact full-name hits open the profile directly
- "did you mean" suggestions when nobody matches
- profile panel with BANNED / CLEARED status and the scanned ID picture
- ban with notes, unban behind a password
- general notes saved to the store and exported back to the CSV
"""

import os

import pyperclip
from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction, QPixmap
from PyQt6.QtWidgets import (
    QDialog,
    QFileDialog,
    QGroupBox,
    QHBoxLayout,
    QInputDialog,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QMessageBox,
    QPlainTextEdit,
    QPushButton,
    QStatusBar,
    QToolBar,
    QVBoxLayout,
    QWidget,
)

from visitor_log.config import IMAGE_FOLDER
from visitor_log.session import Session

MESSAGE_TIMEOUT_MS = 3000

STATUS_STYLES = {
    True: "color:white; background-color:#b33a3a; font-weight:bold; padding:4px;",
    False: "color:white; background-color:#2e8b57; font-weight:bold; padding:4px;",
}


class RejectedRowsDialog(QDialog):
    """Simple dialog to show which CSV rows were skipped during import."""

    def __init__(self, rejected, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Rows skipped")
        self.resize(400, 300)
        layout = QVBoxLayout(self)
        layout.addWidget(QLabel(f"Skipped {len(rejected)} row(s):"))
        box = QPlainTextEdit()
        box.setReadOnly(True)
        box.setPlainText("\n".join(rejected))
        layout.addWidget(box)
        ok = QPushButton("OK")
        ok.clicked.connect(self.accept)
        layout.addWidget(ok)


class VisitorLogWindow(QMainWindow):
    """
    Main PyQt6 window for Visitor Log.

    Purpose:
    - build the layout (search + results on the left, profile + notes on the right)
    - forward UI events to the session and show its messages
    - keep the status bar counts up to date
    """

    def __init__(self, session: Session):
        super().__init__()
        self.setWindowTitle("Visitor Log")
        self.resize(900, 600)

        self.session = session

        self._init_ui()
        self._show_profile(None)
        self._update_status()

        # the desk always starts from the current CSV
        self._open_csv_from_dialog()

    # UI construction

    def _init_ui(self):
        """Create all widgets and lay them out."""
        toolbar = QToolBar()
        self.addToolBar(toolbar)

        open_action = QAction("Open CSV", self)
        open_action.triggered.connect(self._open_csv_from_dialog)
        toolbar.addAction(open_action)

        export_action = QAction("Export Visitor", self)
        export_action.triggered.connect(self._export_selected)
        toolbar.addAction(export_action)

        copy_action = QAction("Copy Details", self)
        copy_action.triggered.connect(self._copy_details)
        toolbar.addAction(copy_action)

        central = QWidget()
        self.setCentralWidget(central)
        root_layout = QHBoxLayout(central)

        # LEFT: search + results
        left_col = QVBoxLayout()
        self.search_box = QLineEdit(placeholderText="Search visitors by name...")
        self.search_box.textChanged.connect(self._on_search)
        left_col.addWidget(self.search_box)

        self.results_hint = QLabel("")
        left_col.addWidget(self.results_hint)

        self.results = QListWidget()
        self.results.itemClicked.connect(self._on_result_clicked)
        left_col.addWidget(self.results)
        root_layout.addLayout(left_col, 2)

        # RIGHT: profile + general notes
        right_col = QVBoxLayout()
        self.profile_group = QGroupBox("Visitor")
        profile_layout = QVBoxLayout(self.profile_group)

        self.profile_status = QLabel("", alignment=Qt.AlignmentFlag.AlignCenter)
        self.profile_name = QLabel("")
        self.profile_flat = QLabel("")
        self.profile_phone = QLabel("")
        self.profile_dob = QLabel("")
        self.profile_notes = QLabel("")
        self.profile_notes.setWordWrap(True)
        self.profile_image = QLabel("No ID", alignment=Qt.AlignmentFlag.AlignCenter)
        self.profile_image.setFixedHeight(200)
        for w in [
            self.profile_status, self.profile_name, self.profile_flat,
            self.profile_phone, self.profile_dob, self.profile_notes, self.profile_image,
        ]:
            profile_layout.addWidget(w)

        buttons = QHBoxLayout()
        self.ban_btn = QPushButton("Ban")
        self.ban_btn.clicked.connect(self._ban_selected)
        buttons.addWidget(self.ban_btn)
        self.unban_btn = QPushButton("Unban")
        self.unban_btn.clicked.connect(self._unban_selected)
        buttons.addWidget(self.unban_btn)
        profile_layout.addLayout(buttons)
        right_col.addWidget(self.profile_group)

        self.notes_group = QGroupBox("General Notes")
        notes_layout = QVBoxLayout(self.notes_group)
        self.notes_box = QPlainTextEdit()
        notes_layout.addWidget(self.notes_box)
        save_notes_btn = QPushButton("Save Notes")
        save_notes_btn.clicked.connect(self._save_general_notes)
        notes_layout.addWidget(save_notes_btn)
        right_col.addWidget(self.notes_group)
        right_col.addStretch()

        root_layout.addLayout(right_col, 3)

        self.status = QStatusBar()
        self.setStatusBar(self.status)
        self.counts_label = QLabel("")
        self.status.addPermanentWidget(self.counts_label)

    # Feedback

    def _notify(self, result):
        """Show an OperationResult: status bar on success, dialog on failure."""
        if result.success:
            self.status.showMessage(result.message, MESSAGE_TIMEOUT_MS)
        else:
            QMessageBox.warning(self, "Visitor Log", result.message)

    def _update_status(self):
        """Update status bar with banned/total counts."""
        banned, total = self.session.db.stats()
        target = os.path.basename(self.session.target_path) if self.session.target_path else "no file"
        self.counts_label.setText(f"{total} visitors, {banned} banned ({target})")

    # CSV import

    def _open_csv_from_dialog(self):
        """Open a file dialog to pick the visitor CSV and import it."""
        path, _ = QFileDialog.getOpenFileName(
            self,
            "Open Visitor CSV",
            os.path.expanduser("~"),
            "CSV Files (*.csv)"
        )
        if not path:
            self.status.showMessage("CSV import canceled.", MESSAGE_TIMEOUT_MS)
            return

        result = self.session.open_csv(path)
        self._notify(result)
        if result.details:
            RejectedRowsDialog(result.details, self).exec()
        self._on_search()
        self._update_status()

    # Search

    def _on_search(self):
        """Refresh results for the current search text."""
        text = self.search_box.text()
        result = self.session.search(text)
        self.results.clear()
        self.results_hint.setText("")

        if result.exact is not None:
            self._show_profile(result.exact)
            return
        self._show_profile(None)
        if not text.strip():
            return

        visitors = result.candidates
        if result.empty:
            visitors = self.session.suggestions(text)
            self.results_hint.setText("No visitors found. Did you mean:" if visitors else "No visitors found.")

        for v in visitors:
            item = QListWidgetItem(f"{v.full_name} (Flat: {v.flatNumber or 'N/A'})")
            item.setData(Qt.ItemDataRole.UserRole, v.id)
            self.results.addItem(item)

    def _on_result_clicked(self, item):
        result = self.session.select(item.data(Qt.ItemDataRole.UserRole))
        if not result.success:
            self._notify(result)
            return
        self._show_profile(result.visitor)

    # Profile

    def _show_profile(self, visitor):
        """Fill the profile panel, or hide it when visitor is None."""
        self.profile_group.setVisible(visitor is not None)
        self.notes_group.setVisible(visitor is not None)
        if visitor is None:
            return

        self.profile_status.setText("BANNED" if visitor.isBanned else "CLEARED")
        self.profile_status.setStyleSheet(STATUS_STYLES[visitor.isBanned])
        self.profile_name.setText(visitor.full_name)
        self.profile_flat.setText(f"Flat: {visitor.flatNumber or 'N/A'}")
        self.profile_phone.setText(f"Phone: {visitor.phoneNumber or 'N/A'}")
        self.profile_dob.setText(f"Date of Birth: {visitor.dateOfBirth or 'N/A'}")
        self.profile_notes.setText(visitor.notes or "Notes: N/A")
        self.notes_box.setPlainText(visitor.generalNotes)
        self._show_picture(visitor.scannedIdPicUrl)

    def _show_picture(self, filename):
        pixmap = QPixmap()
        if filename and self.session.target_path:
            folder = os.path.join(os.path.dirname(self.session.target_path), IMAGE_FOLDER)
            pixmap.load(os.path.join(folder, filename))
        if pixmap.isNull():
            self.profile_image.setPixmap(QPixmap())
            self.profile_image.setText("No ID")
        else:
            self.profile_image.setPixmap(
                pixmap.scaledToHeight(200, Qt.TransformationMode.SmoothTransformation)
            )

    def _refresh_selected(self, result):
        self._notify(result)
        if result.visitor is not None:
            self._show_profile(result.visitor)
        self._update_status()

    # Actions

    def _ban_selected(self):
        """Ask for ban notes and ban the selected visitor."""
        visitor = self.session.selected
        if visitor is None:
            return
        notes, ok = QInputDialog.getMultiLineText(
            self, "Ban Visitor", f"Reason for banning {visitor.full_name}:", visitor.notes
        )
        if ok:
            self._refresh_selected(self.session.ban(notes))

    def _unban_selected(self):
        """Ask for the unban password and lift the ban."""
        if self.session.selected is None:
            return
        password, ok = QInputDialog.getText(
            self, "Unban Visitor", "Password:", QLineEdit.EchoMode.Password
        )
        if ok:
            self._refresh_selected(self.session.unban(password))

    def _save_general_notes(self):
        self._refresh_selected(self.session.save_general_notes(self.notes_box.toPlainText()))

    def _export_selected(self):
        """Write the selected visitor, with the notes as typed, into the CSV."""
        self._refresh_selected(self.session.export_selected(self.notes_box.toPlainText()))

    def _copy_details(self):
        """Copy the selected visitor's details to the clipboard."""
        text = self.session.clipboard_summary()
        if not text:
            return
        pyperclip.copy(text)
        self.status.showMessage("Visitor details copied.", MESSAGE_TIMEOUT_MS)
