# common.py

# Copyright (C) 2026 The MipsAsm authors. License: GNU GPL Version 3

# This file is part of MipsAsm. MipsAsm is free software: you can
# redistribute it and/or modify it under the terms of the GNU General
# Public License as published by the Free Software Foundation, either
# version 3 of the License, or (at your option) any later version.
# MipsAsm is distributed in the hope that it will be useful, but
# WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the GNU
# General Public License for more details. You should have received
# a copy of the GNU General Public License along with MipsAsm. If
# not, see <https://www.gnu.org/licenses/>.

# ----------------------------------------------------------------------
# common.py defines the debug and diagnostic message facility shared
# by all the other modules
# ----------------------------------------------------------------------

import sys

def stacktrace():
    import traceback
    traceback.print_stack()

# ----------------------------------------------------------------------
# Mode
# ----------------------------------------------------------------------

# trace controls debugging messages (devlog), show_err controls
# diagnostics (errlog). Both are written to stderr.

# An override pins the trace setting: once override_trace has been
# called, set_trace, clear_trace and restore_trace have no effect.
# The command line uses this for its 0|1 debugging choice.

class Mode:
    def __init__(self):
        self.trace = False
        self.show_err = True
        self.saved_trace = False
        self.override = None

    def set_trace(self):
        self._change_trace(True)

    def clear_trace(self):
        self._change_trace(False)

    def restore_trace(self):
        if self.override is None:
            self.trace = self.saved_trace

    def override_trace(self, b):
        self.override = bool(b)
        self.trace = self.override

    def release_override(self):
        self.override = None

    def _change_trace(self, b):
        if self.override is None:
            self.saved_trace = self.trace
            self.trace = b

    def devlog(self, xs):
        if self.trace:
            print(xs, file=sys.stderr)

    def errlog(self, xs):
        if self.show_err:
            print(xs, file=sys.stderr)

mode = Mode()

# ----------------------------------------------------------------------
# Logging error message
# ----------------------------------------------------------------------

def indicate_error(xs):
    print(f"\033[91m\033[1m{xs}\033[0m", file=sys.stderr) # ANSI escape codes for red and bold
    if mode.trace:
        stacktrace()
