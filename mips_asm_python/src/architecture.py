# architecture.py

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

# --------------------------------------------------------------------
# architecture.py defines global constants and tables specifying
# formats, opcodes, mnemonics, and register names
# --------------------------------------------------------------------

import re
import common
import state as st

# --------------------------------------------------------------------
# Architecture constants
# --------------------------------------------------------------------

instr_width = 4     # bytes per instruction
word_bits = 32      # bits per instruction word
initial_pc = 0      # address of the first instruction

# Instruction formats

iR = "R"
iI = "I"
iJ = "J"

# Field layouts, most significant field first (widths in bits)
#   R: opcode 6 | rs 5 | rt 5 | rd 5 | shamt 5 | funct 6
#   I: opcode 6 | rs 5 | rt 5 | immediate 16
#   J: opcode 6 | address 26
# The packing itself is in arithmetic.py.

shamt_bits = 5
imm_bits = 16
target_bits = 26

# --------------------------------------------------------------------
# Assembly language statement formats
# --------------------------------------------------------------------

# The operand format gives the syntax of the operands and the fields
# they go into. R is a register, k a small constant (shift amount),
# I an immediate constant, X an offset(base) address and K a branch
# target.

a0 = ""        # syscall
aRRR = "RRR"   # add      $t0,$t1,$t2
aRRk = "RRk"   # sll      $t0,$t1,4
aRR = "RR"     # mult     $t0,$t1
aRs = "Rs"     # jr       $ra
aRd = "Rd"     # mfhi     $t0
aRRI = "RRI"   # addi     $t0,$t1,-5
aRI = "RI"     # lui      $t0,0x1001
aRX = "RX"     # lw       $t0,8($sp)
aRRK = "RRK"   # beq      $t0,$t1,loop
aRK = "RK"     # blez     $t0,done
aJ = "J"       # j        loop

branch_formats = (aRRK, aRK)

# --------------------------------------------------------------------
# Instruction mnemonics
# --------------------------------------------------------------------

# For R format the opcode field is always 0 and the code is the
# function field. For I and J formats the code is the opcode field.
# unsigned marks the immediates that are zero extended by the
# machine (logical operations and lui).

statement_spec = {}

def def_instr(mnemonic, ifmt, afmt, code, unsigned=False):
    statement_spec[mnemonic] = {
        "mnemonic": mnemonic,
        "ifmt": ifmt,
        "afmt": afmt,
        "opcode": code,
        "unsigned": unsigned,
    }

# R format

def_instr("add", iR, aRRR, 0x20)
def_instr("addu", iR, aRRR, 0x21)
def_instr("sub", iR, aRRR, 0x22)
def_instr("subu", iR, aRRR, 0x23)
def_instr("and", iR, aRRR, 0x24)
def_instr("or", iR, aRRR, 0x25)
def_instr("xor", iR, aRRR, 0x26)
def_instr("nor", iR, aRRR, 0x27)
def_instr("slt", iR, aRRR, 0x2a)
def_instr("sltu", iR, aRRR, 0x2b)
def_instr("sll", iR, aRRk, 0x00)
def_instr("srl", iR, aRRk, 0x02)
def_instr("sra", iR, aRRk, 0x03)
def_instr("jr", iR, aRs, 0x08)
def_instr("syscall", iR, a0, 0x0c)
def_instr("mfhi", iR, aRd, 0x10)
def_instr("mflo", iR, aRd, 0x12)
def_instr("mult", iR, aRR, 0x18)
def_instr("multu", iR, aRR, 0x19)
def_instr("div", iR, aRR, 0x1a)
def_instr("divu", iR, aRR, 0x1b)

# I format

def_instr("beq", iI, aRRK, 0x04)
def_instr("bne", iI, aRRK, 0x05)
def_instr("blez", iI, aRK, 0x06)
def_instr("bgtz", iI, aRK, 0x07)
def_instr("addi", iI, aRRI, 0x08)
def_instr("addiu", iI, aRRI, 0x09)
def_instr("slti", iI, aRRI, 0x0a)
def_instr("sltiu", iI, aRRI, 0x0b)
def_instr("andi", iI, aRRI, 0x0c, unsigned=True)
def_instr("ori", iI, aRRI, 0x0d, unsigned=True)
def_instr("xori", iI, aRRI, 0x0e, unsigned=True)
def_instr("lui", iI, aRI, 0x0f, unsigned=True)
def_instr("lb", iI, aRX, 0x20)
def_instr("lh", iI, aRX, 0x21)
def_instr("lw", iI, aRX, 0x23)
def_instr("lbu", iI, aRX, 0x24)
def_instr("lhu", iI, aRX, 0x25)
def_instr("sb", iI, aRX, 0x28)
def_instr("sh", iI, aRX, 0x29)
def_instr("sw", iI, aRX, 0x2b)

# J format

def_instr("j", iJ, aJ, 0x02)
def_instr("jal", iJ, aJ, 0x03)

def is_branch(op):
    return op["afmt"] in branch_formats

def resolve_format(mnemonic, line):
    """Return the statement spec for mnemonic, whose ifmt and opcode
    give the format and the opcode or function code."""
    op = statement_spec.get(mnemonic)
    if op is None:
        raise st.AsmError(st.UnknownMnemonic,
                          f"{mnemonic} is not a valid operation", line)
    common.mode.devlog(f"resolve_format {mnemonic} => {op['ifmt']} {op['opcode']:#04x}")
    return op

# --------------------------------------------------------------------
# Register names
# --------------------------------------------------------------------

# The names are indexed by register number

register_names = [
    "$zero", "$at", "$v0", "$v1",             # 0-3
    "$a0", "$a1", "$a2", "$a3",               # 4-7
    "$t0", "$t1", "$t2", "$t3",               # 8-11
    "$t4", "$t5", "$t6", "$t7",               # 12-15
    "$s0", "$s1", "$s2", "$s3",               # 16-19
    "$s4", "$s5", "$s6", "$s7",               # 20-23
    "$t8", "$t9", "$k0", "$k1",               # 24-27
    "$gp", "$sp", "$fp", "$ra"                # 28-31
]

register_number = {name: i for i, name in enumerate(register_names)}

numeric_reg_parser = re.compile(r"^\$([0-9]|[12][0-9]|3[01])$")

def resolve_register(token, line):
    n = register_number.get(token)
    if n is None:
        m = numeric_reg_parser.search(token)
        if m:
            n = int(m.group(1))
        else:
            raise st.AsmError(st.UnknownRegister,
                              f"{token} is not a valid register", line)
    common.mode.devlog(f"resolve_register {token} => {n}")
    return n
