import arithmetic as arith

def test_format_binary():
    assert arith.format_binary(3, 5) == "00011"
    assert arith.format_binary(0, 6) == "000000"
    assert arith.format_binary(0x20, 6) == "100000"
    assert arith.format_binary(0xFFFFFFFF, 32) == "1" * 32

def test_format_binary_keeps_low_bits():
    assert arith.format_binary(0b101101, 4) == "1101"
    assert arith.format_binary(arith.to_twos(-2, 16), 16) == "1111111111111110"

def test_twos_complement():
    assert arith.to_twos(-1, 16) == 0xFFFF
    assert arith.to_twos(5, 16) == 5
    assert arith.from_twos(0xFFFE, 16) == -2
    assert arith.from_twos(0x7FFF, 16) == 32767
    assert arith.from_twos(0x8000, 16) == -32768

def test_ranges():
    assert arith.fits_signed(32767, 16)
    assert arith.fits_signed(-32768, 16)
    assert not arith.fits_signed(32768, 16)
    assert not arith.fits_signed(-32769, 16)
    assert arith.fits_unsigned(31, 5)
    assert not arith.fits_unsigned(32, 5)
    assert not arith.fits_unsigned(-1, 5)

def test_pack_and_split_r():
    w = arith.mk_word_r(0, 9, 10, 8, 0, 0x20)
    assert w == 0x012A4020
    assert arith.split_word_r(w) == {
        "opcode": 0, "rs": 9, "rt": 10, "rd": 8, "shamt": 0, "funct": 0x20
    }

def test_pack_and_split_i():
    w = arith.mk_word_i(0x08, 0, 8, arith.to_twos(-1, 16))
    assert w == 0x2008FFFF
    fields = arith.split_word_i(w)
    assert fields["opcode"] == 0x08
    assert fields["rt"] == 8
    assert arith.from_twos(fields["imm"], 16) == -1

def test_pack_and_split_j():
    w = arith.mk_word_j(0x03, 0x100000)
    assert w == 0x0C100000
    assert arith.split_word_j(w) == {"opcode": 0x03, "address": 0x100000}

def test_word_to_hex8():
    assert arith.word_to_hex8(0x8FA80008) == "8fa80008"
    assert arith.word_to_hex8(0) == "00000000"
