# state.py

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

# -------------------------------------------------------------------------
# state.py defines the state of an assembly session, including the
# label table and the error conditions the assembler can report.
# -------------------------------------------------------------------------

from collections import namedtuple

import common

# -------------------------------------------------------------------------
# Error conditions
# -------------------------------------------------------------------------

# Recoverable: the statement is reported and produces no code, and
# assembly continues with the next line.

UnknownMnemonic = "UnknownMnemonic"
UnknownRegister = "UnknownRegister"
UnresolvedLabel = "UnresolvedLabel"
OutOfRange = "OutOfRange"
DuplicateLabel = "DuplicateLabel"
BadOperands = "BadOperands"

# Fatal: the session stops.

NoTable = "NoTable"
Allocation = "Allocation"

ErrNoTable = "no label table exists"
ErrDuplicate = "a duplicate label was found"
ErrAllocation = "cannot allocate space in memory"

class AsmError(Exception):
    """A recoverable error in one source statement."""

    def __init__(self, kind, msg, line=None):
        super().__init__(msg)
        self.kind = kind
        self.msg = msg
        self.line = line

    def __str__(self):
        if self.line is None:
            return f"Error: {self.msg}"
        return f"Error (line {self.line}): {self.msg}"

class FatalAsmError(Exception):
    """An error that ends the assembly session."""

    def __init__(self, kind, msg):
        super().__init__(msg)
        self.kind = kind
        self.msg = msg

    def __str__(self):
        return f"Fatal error: {self.msg}"

# -------------------------------------------------------------------------
# Label table
# -------------------------------------------------------------------------

# Results of LabelTable.add

LabelAdded = "LabelAdded"
LabelDuplicate = "LabelDuplicate"

LabelEntry = namedtuple("LabelEntry", ["label", "address"])

class LabelTable:
    """Labels and the addresses of the instructions they annotate.

    Entries are kept in insertion order in a backing list of
    ``capacity`` slots, the first ``count`` of which are in use. Label
    names are unique; lookup is a linear scan by exact name.
    """

    def __init__(self, capacity=0):
        self._entries = []
        self._count = 0
        self.resize(capacity)

    @property
    def count(self):
        return self._count

    @property
    def capacity(self):
        return len(self._entries)

    def __len__(self):
        return self._count

    def __contains__(self, name):
        return self.find(name) is not None

    def entries(self):
        return self._entries[:self._count]

    def find(self, name):
        """Return the address of label name, or None if it is not in
        the table."""
        for i in range(self._count):
            if self._entries[i].label == name:
                return self._entries[i].address
        return None

    def add(self, name, address):
        """Add name at address and return LabelAdded; if name is already
        in the table leave the table unchanged and return
        LabelDuplicate."""
        if self.find(name) is not None:
            common.mode.devlog(f"LabelTable.add duplicate {name}")
            return LabelDuplicate
        if self._count >= self.capacity:
            self.resize(2 * (self._count + 1))
        self._entries[self._count] = LabelEntry(str(name), address)
        self._count += 1
        common.mode.devlog(f"LabelTable.add {name} => {address} count={self._count}")
        return LabelAdded

    def resize(self, new_capacity):
        """Give the table room for new_capacity entries. Shrinking below
        count drops the entries after the first new_capacity."""
        if new_capacity < 0:
            raise FatalAsmError(Allocation, ErrAllocation)
        try:
            new_entries = [None] * new_capacity
        except MemoryError as e:
            raise FatalAsmError(Allocation, ErrAllocation) from e
        smaller = min(self._count, new_capacity)
        new_entries[:smaller] = self._entries[:smaller]
        self._entries = new_entries
        self._count = smaller
        common.mode.devlog(f"LabelTable.resize capacity={new_capacity} count={self._count}")

    def to_string(self):
        xs = [f"There are {self._count} labels in the table:"]
        for e in self.entries():
            xs.append(f"  {e.label.ljust(20)} Address: {e.address}")
        return "\n".join(xs)

# The functions below take a table that may be missing (None), which
# is checked before anything else.

def verify_table_exists(table):
    if table is None:
        common.mode.errlog(f"Error: {ErrNoTable}")
        return False
    return True

def find_label(table, name):
    if not verify_table_exists(table):
        return None
    return table.find(name)

def add_label(table, name, pc):
    if not verify_table_exists(table):
        raise FatalAsmError(NoTable, ErrNoTable)
    return table.add(name, pc)

def resize_table(table, new_capacity):
    if not verify_table_exists(table):
        raise FatalAsmError(NoTable, ErrNoTable)
    table.resize(new_capacity)

def display_label_table(table, file=None):
    if table is None:
        print("Label Table is a NULL pointer.", file=file)
    else:
        print(table.to_string(), file=file)

# ----------------------------------------------------------------------
# Assembler information record
# ----------------------------------------------------------------------

class AsmInfo:
    def __init__(self):
        self.asm_src_lines = []
        self.label_table = None
        self.asm_stmt = []
        self.object_code = []
        self.object_text = ""
        self.listing = []
        self.diagnostics = []
        self.n_asm_errors = 0
        self.fatal = None

    @property
    def ok(self):
        return self.fatal is None and self.n_asm_errors == 0

    def show_short(self):
        xs = "AsmInfo\n"
        xs += "\n".join(self.asm_src_lines[:4]) + "\n"
        xs += "\n".join(self.object_code[:4]) + "\n"
        xs += f" errors={self.n_asm_errors} fatal={self.fatal}\n"
        return xs

# ----------------------------------------------------------------------
# Assembly language statement
# ----------------------------------------------------------------------

def mk_asm_stmt(line_number, address, src_line):
    return {
        "lineNumber": line_number,
        "address": address,
        "srcLine": src_line,
        "fieldLabel": None,
        "fieldOperation": None,
        "operands": [],
        "operation": None,
        "codeWord": None,
        "errors": []
    }
