import sys
from PySide6.QtCore import Qt
from PySide6.QtGui import QAction, QIcon, QTextOption
from PySide6.QtWidgets import (
    QApplication, QMainWindow, QTextEdit, QVBoxLayout, QWidget,
    QTableView, QHeaderView, QSplitter, QGroupBox, QDockWidget, QFileDialog, QToolBar
)
from PySide6.QtGui import QStandardItemModel, QStandardItem

import common
import assembler

class LabelTableModel(QStandardItemModel):
    def __init__(self):
        super().__init__(0, 2)
        self.setHorizontalHeaderLabels(["Label", "Address"])

    def update(self, table):
        self.removeRows(0, self.rowCount())
        if table is None:
            return
        for e in table.entries():
            self.appendRow([QStandardItem(e.label), QStandardItem(f"0x{e.address:08X}")])

class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("MIPS Assembler")
        self.setGeometry(100, 100, 1200, 800)

        main_splitter = QSplitter(Qt.Orientation.Horizontal)
        self.setCentralWidget(main_splitter)

        # Source editor (left pane)
        self.code_editor = QTextEdit()
        self.code_editor.setWordWrapMode(QTextOption.NoWrap)
        self.code_dock = QDockWidget("Source", self)
        self.code_dock.setWidget(self.code_editor)
        main_splitter.addWidget(self.code_dock)

        # Right side: binary output, label table, diagnostics
        right_splitter = QSplitter(Qt.Orientation.Vertical)
        main_splitter.addWidget(right_splitter)

        obj_group = QGroupBox("Machine code")
        obj_layout = QVBoxLayout(obj_group)
        self.object_view = QTextEdit()
        self.object_view.setReadOnly(True)
        self.object_view.setWordWrapMode(QTextOption.NoWrap)
        obj_layout.addWidget(self.object_view)
        right_splitter.addWidget(obj_group)

        label_group = QGroupBox("Labels")
        label_layout = QVBoxLayout(label_group)
        self.label_view = QTableView()
        self.label_model = LabelTableModel()
        self.label_view.setModel(self.label_model)
        self.label_view.horizontalHeader().setSectionResizeMode(QHeaderView.Stretch)
        label_layout.addWidget(self.label_view)
        right_splitter.addWidget(label_group)

        log_group = QGroupBox("Messages")
        log_layout = QVBoxLayout(log_group)
        self.io_log = QTextEdit()
        self.io_log.setReadOnly(True)
        log_layout.addWidget(self.io_log)
        right_splitter.addWidget(log_group)

        right_splitter.setStretchFactor(0, 3)
        right_splitter.setStretchFactor(1, 1)
        right_splitter.setStretchFactor(2, 1)
        main_splitter.setStretchFactor(0, 1)
        main_splitter.setStretchFactor(1, 1)

        self.toolbar = QToolBar("Main Toolbar")
        self.addToolBar(self.toolbar)

        self.assemble_action = QAction(QIcon.fromTheme("system-run"), "Assemble", self)
        self.assemble_action.triggered.connect(self.assemble_source)
        self.toolbar.addAction(self.assemble_action)

        file_menu = self.menuBar().addMenu("&File")

        open_action = QAction(QIcon.fromTheme("document-open"), "Open...", self)
        open_action.triggered.connect(self.open_file)
        file_menu.addAction(open_action)

        save_action = QAction(QIcon.fromTheme("document-save"), "Save", self)
        save_action.triggered.connect(self.save_file)
        file_menu.addAction(save_action)

        save_as_action = QAction(QIcon.fromTheme("document-save-as"), "Save As...", self)
        save_as_action.triggered.connect(self.save_file_as)
        file_menu.addAction(save_as_action)

        self.toolbar.addAction(open_action)
        self.toolbar.addAction(save_action)

        self.last_asm_info = None
        self.current_file = None

    def assemble_source(self):
        self.io_log.clear()
        ai = assembler.assembler(self.code_editor.toPlainText())
        self.last_asm_info = ai
        self.object_view.setPlainText(ai.object_text)
        self.label_model.update(ai.label_table)
        for err in ai.diagnostics:
            self.io_log.append(str(err))
        if ai.fatal is not None:
            self.io_log.append(str(ai.fatal))
        elif ai.n_asm_errors > 0:
            self.io_log.append(f"Assembly completed with {ai.n_asm_errors} errors.")
        else:
            self.io_log.append(f"Assembly successful: {len(ai.object_code)} instructions.")
        common.mode.devlog(ai.show_short())
        return ai

    def open_file(self):
        file_name, _ = QFileDialog.getOpenFileName(self, "Open Assembly File", ".", "Assembly Files (*.s *.asm);;All Files (*)")
        if file_name:
            try:
                with open(file_name, 'r') as f:
                    self.code_editor.setPlainText(f.read())
                self.current_file = file_name
                self.setWindowTitle(f"MIPS Assembler - {file_name}")
                self.io_log.append(f"File loaded: {self.current_file}")
            except OSError as e:
                self.io_log.append(f"Error opening file: {e}")

    def save_file(self):
        if self.current_file:
            try:
                with open(self.current_file, 'w') as f:
                    f.write(self.code_editor.toPlainText())
                self.io_log.append(f"File saved: {self.current_file}")
            except OSError as e:
                self.io_log.append(f"Error saving file: {e}")
        else:
            self.save_file_as()

    def save_file_as(self):
        file_name, _ = QFileDialog.getSaveFileName(self, "Save Assembly File As", ".", "Assembly Files (*.s *.asm);;All Files (*)")
        if file_name:
            self.current_file = file_name
            self.setWindowTitle(f"MIPS Assembler - {file_name}")
            self.save_file()

def start_gui():
    app = QApplication.instance() or QApplication(sys.argv)
    app.setStyleSheet("""
    QTextEdit {
        font-family: "Consolas", "Monaco", "Courier New", monospace;
        font-size: 10pt;
    }
    QGroupBox::title {
        subcontrol-origin: margin;
        subcontrol-position: top left;
        padding: 0 3px;
        font-weight: bold;
    }
    """)
    window = MainWindow()
    window.show()
    return app.exec()
