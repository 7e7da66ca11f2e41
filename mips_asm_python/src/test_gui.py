import os
import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
QtWidgets = pytest.importorskip("PySide6.QtWidgets")

import gui

@pytest.fixture(scope="module")
def app():
    return QtWidgets.QApplication.instance() or QtWidgets.QApplication([])

def test_assemble_in_window(app):
    w = gui.MainWindow()
    w.code_editor.setPlainText("add $t1, $t1, $t1\nA_LABEL: slt $t0, $t1, $t2\nbne $t0, $zero, A_LABEL\n")
    ai = w.assemble_source()
    assert ai.ok
    assert w.object_view.toPlainText().split("\n") == ai.object_code
    assert w.label_model.rowCount() == 1
    assert w.label_model.item(0, 0).text() == "A_LABEL"
    assert w.label_model.item(0, 1).text() == "0x00000004"

def test_errors_shown_in_log(app):
    w = gui.MainWindow()
    w.code_editor.setPlainText("frob $t0\n")
    ai = w.assemble_source()
    assert ai.n_asm_errors == 1
    assert "frob" in w.io_log.toPlainText()
