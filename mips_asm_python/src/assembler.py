# assembler.py

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

# ---------------------------------------------------------------------
# assembler.py translates assembly language to machine language
# ---------------------------------------------------------------------

import io
import re
import common
import state as st
import architecture as arch
import arithmetic as arith

# ----------------------------------------------------------------------
# Regular expressions for the parser
# ----------------------------------------------------------------------

token_separator = re.compile(r"[\s,]+")
label_def_parser = re.compile(r"^([^:]*):(.*)$")
name_parser = re.compile(r"^[a-zA-Z_.][a-zA-Z0-9_.]*$")
int_parser = re.compile(r"^[+-]?[0-9]+$")
hex_parser = re.compile(r"^[+-]?0[xX][0-9a-fA-F]+$")

# offset(base), e.g. 8($sp) or ($sp)
x_parser = re.compile(r"^([^(]*)\(([^)]*)\)$")

# ----------------------------------------------------------------------
# Tokenizer
# ----------------------------------------------------------------------

def tokenize(line):
    """Split a source line into tokens, dropping any # comment. Blank
    and comment-only lines give an empty list."""
    comment_start = line.find('#')
    if comment_start != -1:
        line = line[:comment_start]
    return [x for x in token_separator.split(line.strip()) if x]

def split_label(tokens):
    """Return (label, rest) where label is None unless the first token
    ends with a colon. A label written against its instruction, as in
    loop:add, is separated from it."""
    if not tokens:
        return None, []
    m = label_def_parser.search(tokens[0])
    if not m:
        return None, tokens
    rest = tokens[1:]
    if m.group(2):
        rest = [m.group(2)] + rest
    return m.group(1), rest

# ----------------------------------------------------------------------
# Error messages
# ----------------------------------------------------------------------

def mk_err_msg(ai, s, err):
    common.mode.devlog(str(err))
    if s is not None:
        s["errors"].append(err)
    ai.diagnostics.append(err)
    ai.n_asm_errors += 1

# ----------------------------------------------------------------------
# Operands
# ----------------------------------------------------------------------

def parse_int(x):
    if int_parser.search(x):
        return int(x, 10)
    elif hex_parser.search(x):
        return int(x, 16)
    return None

def require_n_operands(operands, n, line):
    k = len(operands)
    if k != n:
        raise st.AsmError(st.BadOperands,
                          f"There are {k} operands but {n} are required", line)

def require_reg(x, line):
    return arch.resolve_register(x, line)

def require_label(table, x, line):
    if not name_parser.search(x):
        raise st.AsmError(st.BadOperands, f"{x} is not a valid label or constant", line)
    if not st.verify_table_exists(table):
        raise st.FatalAsmError(st.NoTable, st.ErrNoTable)
    a = st.find_label(table, x)
    if a is None:
        raise st.AsmError(st.UnresolvedLabel, f"label {x} is not defined", line)
    common.mode.devlog(f"require_label {x} => {a}")
    return a

def require_shamt(x, line):
    k = parse_int(x)
    if k is None:
        raise st.AsmError(st.BadOperands, f"shift amount {x} is not a constant", line)
    if not arith.fits_unsigned(k, arch.shamt_bits):
        raise st.AsmError(st.OutOfRange, f"shift amount {k} must be between 0 and 31", line)
    return k

def require_imm(op, x, line, table):
    """A 16-bit immediate given as a constant or as a label, whose
    address is used."""
    v = parse_int(x)
    if v is None:
        v = require_label(table, x, line)
    if op["unsigned"]:
        if not arith.fits_unsigned(v, arch.imm_bits):
            raise st.AsmError(st.OutOfRange,
                              f"immediate {v} must be between 0 and 65535", line)
    elif not arith.fits_signed(v, arch.imm_bits):
        raise st.AsmError(st.OutOfRange,
                          f"immediate {v} must be between -32768 and 32767", line)
    return v

def require_displacement(x, line, table, pc):
    """Branch offset in words, relative to the instruction after the
    branch. A constant operand is taken as the offset itself."""
    k = parse_int(x)
    if k is None:
        target = require_label(table, x, line)
        k = (target - (pc + arch.instr_width)) // arch.instr_width
        common.mode.devlog(f"pc relative offset pc={pc} target={target} offset={k}")
    if not arith.fits_signed(k, arch.imm_bits):
        raise st.AsmError(st.OutOfRange, f"branch offset {k} does not fit in 16 bits", line)
    return k

def require_x(op, x, line, table):
    """Split an offset(base) operand into (base register, offset)."""
    m = x_parser.search(x)
    if not m:
        raise st.AsmError(st.BadOperands, f"{x} must be an address such as 8($sp)", line)
    base = require_reg(m.group(2).strip(), line)
    disp = m.group(1).strip() or "0"
    return base, require_imm(op, disp, line, table)

# ----------------------------------------------------------------------
# Instruction encoder
# ----------------------------------------------------------------------

def encode_r(op, operands, line):
    afmt = op["afmt"]
    rs = rt = rd = shamt = 0
    if afmt == arch.aRRR:
        if len(operands) not in (3, 4):
            raise st.AsmError(st.BadOperands,
                              f"There are {len(operands)} operands but 3 are required", line)
        rd = require_reg(operands[0], line)
        rs = require_reg(operands[1], line)
        rt = require_reg(operands[2], line)
        if len(operands) == 4:
            shamt = require_shamt(operands[3], line)
    elif afmt == arch.aRRk:
        require_n_operands(operands, 3, line)
        rd = require_reg(operands[0], line)
        rt = require_reg(operands[1], line)
        shamt = require_shamt(operands[2], line)
    elif afmt == arch.aRR:
        require_n_operands(operands, 2, line)
        rs = require_reg(operands[0], line)
        rt = require_reg(operands[1], line)
    elif afmt == arch.aRs:
        require_n_operands(operands, 1, line)
        rs = require_reg(operands[0], line)
    elif afmt == arch.aRd:
        require_n_operands(operands, 1, line)
        rd = require_reg(operands[0], line)
    else:
        require_n_operands(operands, 0, line)
    common.mode.devlog(f"encode_r rs={rs} rt={rt} rd={rd} shamt={shamt} funct={op['opcode']}")
    return arith.mk_word_r(0, rs, rt, rd, shamt, op["opcode"])

def encode_branch(op, operands, line, table, pc):
    rt = 0
    if op["afmt"] == arch.aRRK:
        require_n_operands(operands, 3, line)
        rs = require_reg(operands[0], line)
        rt = require_reg(operands[1], line)
    else:
        require_n_operands(operands, 2, line)
        rs = require_reg(operands[0], line)
    k = require_displacement(operands[-1], line, table, pc)
    common.mode.devlog(f"encode_branch opcode={op['opcode']} rs={rs} rt={rt} offset={k}")
    return arith.mk_word_i(op["opcode"], rs, rt, arith.to_twos(k, arch.imm_bits))

def encode_i(op, operands, line, table, pc):
    if arch.is_branch(op):
        return encode_branch(op, operands, line, table, pc)
    afmt = op["afmt"]
    rs = rt = 0
    if afmt == arch.aRRI:
        require_n_operands(operands, 3, line)
        rt = require_reg(operands[0], line)
        rs = require_reg(operands[1], line)
        imm = require_imm(op, operands[2], line, table)
    elif afmt == arch.aRI:
        require_n_operands(operands, 2, line)
        rt = require_reg(operands[0], line)
        imm = require_imm(op, operands[1], line, table)
    elif len(operands) == 2:  # aRX, offset(base)
        rt = require_reg(operands[0], line)
        rs, imm = require_x(op, operands[1], line, table)
    else:
        require_n_operands(operands, 3, line)
        rt = require_reg(operands[0], line)
        rs = require_reg(operands[1], line)
        imm = require_imm(op, operands[2], line, table)
    common.mode.devlog(f"encode_i opcode={op['opcode']} rs={rs} rt={rt} imm={imm}")
    return arith.mk_word_i(op["opcode"], rs, rt, arith.to_twos(imm, arch.imm_bits))

def encode_j(op, operands, line, table):
    require_n_operands(operands, 1, line)
    x = operands[0]
    a = parse_int(x)
    if a is None:
        a = require_label(table, x, line)
    if a < 0 or a % arch.instr_width != 0:
        raise st.AsmError(st.OutOfRange, f"jump target {a} is not a word address", line)
    target = a >> 2
    if not arith.fits_unsigned(target, arch.target_bits):
        raise st.AsmError(st.OutOfRange, f"jump target {a} does not fit in 26 bits", line)
    common.mode.devlog(f"encode_j opcode={op['opcode']} address={a} field={target}")
    return arith.mk_word_j(op["opcode"], target)

def encode_instruction(s, table):
    line = s["lineNumber"]
    op = arch.resolve_format(s["fieldOperation"].lower(), line)
    s["operation"] = op
    if op["ifmt"] == arch.iR:
        return encode_r(op, s["operands"], line)
    elif op["ifmt"] == arch.iI:
        return encode_i(op, s["operands"], line, table, s["address"])
    else:
        return encode_j(op, s["operands"], line, table)

# ----------------------------------------------------------------------
# Assembler
# ----------------------------------------------------------------------

def assembler(src_text, out=None):
    """Assemble src_text, writing one binary word per line to out if it
    is given. Returns the AsmInfo for the session."""
    lines = src_text.split("\n")
    ai = st.AsmInfo()
    try:
        table = asm_pass1(ai, lines)
        asm_pass2(ai, lines, table, out)
    except st.FatalAsmError as e:
        abort_session(ai, e)
    ai.object_text = "\n".join(ai.object_code)
    return ai

def assemble_stream(fp, out=None):
    """Assemble an open input stream. The stream is rewound between the
    passes; one that cannot seek is read into memory first."""
    if not fp.seekable():
        fp = io.StringIO(fp.read())
    ai = st.AsmInfo()
    try:
        table = asm_pass1(ai, fp)
        fp.seek(0)
        asm_pass2(ai, fp, table, out)
    except st.FatalAsmError as e:
        abort_session(ai, e)
    ai.object_text = "\n".join(ai.object_code)
    return ai

def abort_session(ai, e):
    common.mode.devlog(f"abort_session {e}")
    ai.fatal = e

# ----------------------------------------------------------------------
# Assembler Pass 1
# ----------------------------------------------------------------------

def asm_pass1(ai, lines):
    common.mode.devlog("Assembler Pass 1")
    table = st.LabelTable()
    ai.label_table = table
    pc = arch.initial_pc
    for i, line in enumerate(lines):
        line = line.rstrip("\r\n")
        ai.asm_src_lines.append(line)
        tokens = tokenize(line)
        if not tokens:
            continue
        label, rest = split_label(tokens)
        if label is not None:
            handle_label(ai, table, label, pc, i + 1)
        if rest:
            pc += arch.instr_width
        common.mode.devlog(f"Pass 1 line {i + 1} /{line}/ pc={pc}")
    return table

def handle_label(ai, table, label, pc, line_number):
    if not label:
        mk_err_msg(ai, None, st.AsmError(st.BadOperands, "empty label", line_number))
    elif not name_parser.search(label):
        mk_err_msg(ai, None, st.AsmError(st.BadOperands,
                                         f"{label} is not a valid label", line_number))
    elif st.add_label(table, label, pc) == st.LabelDuplicate:
        mk_err_msg(ai, None, st.AsmError(st.DuplicateLabel,
                                         f"{label}: {st.ErrDuplicate}", line_number))

# ----------------------------------------------------------------------
# Assembler Pass 2
# ----------------------------------------------------------------------

def asm_pass2(ai, lines, table, out=None):
    common.mode.devlog("Assembler Pass 2")
    if not st.verify_table_exists(table):
        raise st.FatalAsmError(st.NoTable, st.ErrNoTable)
    pc = arch.initial_pc
    for i, line in enumerate(lines):
        line = line.rstrip("\r\n")
        tokens = tokenize(line)
        label, rest = split_label(tokens)
        if not rest:
            ai.listing.append(listing_line(i + 1, None, None, line))
            continue
        s = st.mk_asm_stmt(i + 1, pc, line)
        s["fieldLabel"] = label
        s["fieldOperation"] = rest[0]
        s["operands"] = rest[1:]
        ai.asm_stmt.append(s)
        common.mode.devlog(f"Pass2 line {i + 1} op={rest[0]} operands={rest[1:]}")
        try:
            s["codeWord"] = encode_instruction(s, table)
        except st.AsmError as e:
            mk_err_msg(ai, s, e)
        else:
            generate_object_word(ai, s, out)
        ai.listing.append(listing_line(i + 1, pc, s["codeWord"], line))
        for err in s["errors"]:
            ai.listing.append(f"Error: {err.msg}")
        pc += arch.instr_width

def generate_object_word(ai, s, out):
    x = arith.format_binary(s["codeWord"], arch.word_bits)
    ai.object_code.append(x)
    if out is not None:
        out.write(x + "\n")

def listing_line(line_number, address, code, src):
    return (str(line_number).rjust(4) +
            ' ' + (arith.word_to_hex8(address) if address is not None else ' ' * 8) +
            ' ' + (arith.word_to_hex8(code) if code is not None else ' ' * 8) +
            ' ' + src)
