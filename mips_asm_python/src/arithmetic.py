# arithmetic.py

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

# ------------------------------------------------------------------------
# arithmetic.py defines word representation and bit manipulation for
# the instruction encoder: two's complement conversion, packing and
# unpacking instruction fields, and rendering words as text.
# ------------------------------------------------------------------------

import common

word32mask = 0xFFFFFFFF

def mask(width):
    return (1 << width) - 1

def limit32(x):
    return x & word32mask

def assert32(x):
    if 0 <= x < 2**32:
        return x
    else:
        common.indicate_error(f"assert32 fail: {x}")
        return x & word32mask

# ------------------------------------------------------------------------
# Converting between binary words and two's complement integers
# ------------------------------------------------------------------------

# A k-bit field holds either a natural number 0 <= x < 2^k or a two's
# complement integer -2^(k-1) <= x < 2^(k-1). Fields are always stored
# as the natural number with the same bit pattern.

def fits_signed(x, width):
    return -(1 << (width - 1)) <= x < (1 << (width - 1))

def fits_unsigned(x, width):
    return 0 <= x < (1 << width)

def to_twos(x, width):
    result = x & mask(width)
    common.mode.devlog(f"to_twos {x} width={width} returning {result}")
    return result

def from_twos(x, width):
    y = x & mask(width)
    return y - (1 << width) if y & (1 << (width - 1)) else y

# ------------------------------------------------------------------------
# Operating on fields of a word
# ------------------------------------------------------------------------

# Each value is masked to its field width before it is shifted into
# place.

def mk_word_r(opcode, rs, rt, rd, shamt, funct):
    return ((opcode & mask(6)) << 26) | ((rs & mask(5)) << 21) \
        | ((rt & mask(5)) << 16) | ((rd & mask(5)) << 11) \
        | ((shamt & mask(5)) << 6) | (funct & mask(6))

def mk_word_i(opcode, rs, rt, imm):
    return ((opcode & mask(6)) << 26) | ((rs & mask(5)) << 21) \
        | ((rt & mask(5)) << 16) | (imm & mask(16))

def mk_word_j(opcode, address):
    return ((opcode & mask(6)) << 26) | (address & mask(26))

def split_word_r(w):
    y = assert32(w)
    return {
        "opcode": (y >> 26) & mask(6),
        "rs": (y >> 21) & mask(5),
        "rt": (y >> 16) & mask(5),
        "rd": (y >> 11) & mask(5),
        "shamt": (y >> 6) & mask(5),
        "funct": y & mask(6),
    }

def split_word_i(w):
    y = assert32(w)
    return {
        "opcode": (y >> 26) & mask(6),
        "rs": (y >> 21) & mask(5),
        "rt": (y >> 16) & mask(5),
        "imm": y & mask(16),
    }

def split_word_j(w):
    y = assert32(w)
    return {
        "opcode": (y >> 26) & mask(6),
        "address": y & mask(26),
    }

# ------------------------------------------------------------------------
# Binary and hexadecimal notation
# ------------------------------------------------------------------------

def format_binary(value, width):
    """Render the low width bits of value, most significant bit first.

    Negative values must already be reduced to their two's complement
    pattern; the result never carries a sign.
    """
    y = value & mask(width)
    return "".join("1" if (y >> i) & 1 else "0" for i in range(width - 1, -1, -1))

hex_digit = ['0', '1', '2', '3', '4', '5', '6', '7', '8', '9', 'a', 'b', 'c', 'd', 'e', 'f']

def word_to_hex8(x):
    y = limit32(x)
    ds = []
    for _ in range(8):
        ds.append(hex_digit[y & 0x000F])
        y = y >> 4
    return "".join(reversed(ds))
