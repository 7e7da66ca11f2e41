import io
import pytest
import state as st
import arithmetic as arith
import assembler as asm

SCENARIO_A = """add $t1, $t1, $t1
A_LABEL: slt $t0, $t1, $t2
bne $t0, $zero, A_LABEL
"""

def words(ai):
    return [int(x, 2) for x in ai.object_code]

# ----------------------------------------------------------------------
# Tokenizer
# ----------------------------------------------------------------------

def test_tokenize():
    assert asm.tokenize("  add $t0, $t1,$t2   # sum") == ["add", "$t0", "$t1", "$t2"]
    assert asm.tokenize("lw $t0, 8($sp)") == ["lw", "$t0", "8($sp)"]
    assert asm.tokenize("") == []
    assert asm.tokenize("   # only a comment") == []

def test_split_label():
    assert asm.split_label(["loop:", "add", "$t0"]) == ("loop", ["add", "$t0"])
    assert asm.split_label(["loop:"]) == ("loop", [])
    assert asm.split_label(["loop:add", "$t0"]) == ("loop", ["add", "$t0"])
    assert asm.split_label(["beq", "$t0", "$t1", "loop"]) == (None, ["beq", "$t0", "$t1", "loop"])

# ----------------------------------------------------------------------
# Pass 1
# ----------------------------------------------------------------------

def test_scenario_a_label_table():
    ai = st.AsmInfo()
    table = asm.asm_pass1(ai, SCENARIO_A.split("\n"))
    assert table.count == 1
    assert table.entries() == [st.LabelEntry("A_LABEL", 4)]
    assert ai.n_asm_errors == 0

def test_pass1_program_counter():
    src = """# header comment

first: add $t0, $t0, $t0
second:
       sub $t0, $t0, $t0   # label above binds here

third: and $t0, $t0, $t0
       or $t0, $t0, $t0
fourth: jr $ra
"""
    ai = st.AsmInfo()
    table = asm.asm_pass1(ai, src.split("\n"))
    assert table.find("first") == 0
    assert table.find("second") == 4
    assert table.find("third") == 8
    assert table.find("fourth") == 16

def test_pass1_duplicate_label():
    src = "a: add $t0, $t0, $t0\na: sub $t0, $t0, $t0\n"
    ai = st.AsmInfo()
    table = asm.asm_pass1(ai, src.split("\n"))
    assert table.count == 1
    assert table.find("a") == 0
    assert [e.kind for e in ai.diagnostics] == [st.DuplicateLabel]
    assert ai.diagnostics[0].line == 2

@pytest.mark.parametrize("label", ["1abc", "$t0", "a-b"])
def test_pass1_rejects_malformed_label(label):
    src = f"{label}: add $t0, $t0, $t0\nsub $t0, $t0, $t0\n"
    ai = st.AsmInfo()
    table = asm.asm_pass1(ai, src.split("\n"))
    assert table.count == 0
    assert [e.kind for e in ai.diagnostics] == [st.BadOperands]
    assert ai.diagnostics[0].line == 1

def test_labels_elsewhere_are_not_definitions():
    ai = st.AsmInfo()
    table = asm.asm_pass1(ai, ["j target:", "add $t0, $t0, $t0"])
    assert table.count == 0

# ----------------------------------------------------------------------
# Encoding
# ----------------------------------------------------------------------

def test_scenario_b_register_format():
    ai = asm.assembler("add $t0, $t1, $t2")
    assert ai.object_code == ["00000001001010100100000000100000"]

def test_scenario_c_branch_displacement():
    src = """add $t0, $t0, $t0
add $t0, $t0, $t0
beq $t0, $t1, target
add $t0, $t0, $t0
add $t0, $t0, $t0
target: add $t0, $t0, $t0
"""
    table = asm.asm_pass1(st.AsmInfo(), src.split("\n"))
    assert table.find("target") == 20
    ai = asm.assembler(src)
    fields = arith.split_word_i(words(ai)[2])
    assert fields["opcode"] == 0x04
    assert fields["rs"] == 8
    assert fields["rt"] == 9
    assert fields["imm"] == 2

def test_backward_branch():
    ai = asm.assembler(SCENARIO_A)
    assert ai.ok
    fields = arith.split_word_i(words(ai)[2])
    assert fields["opcode"] == 0x05
    assert arith.from_twos(fields["imm"], 16) == -2
    assert ai.object_code[2].endswith("1111111111111110")

def test_scenario_d_unknown_mnemonic():
    src = "add $t0, $t1, $t2\nfrob $t0, $t1\nsub $t0, $t1, $t2\n"
    ai = asm.assembler(src)
    assert len(ai.object_code) == 2
    assert words(ai)[1] == arith.mk_word_r(0, 9, 10, 8, 0, 0x22)
    assert len(ai.diagnostics) == 1
    assert ai.diagnostics[0].kind == st.UnknownMnemonic
    assert ai.diagnostics[0].line == 2
    assert ai.fatal is None

def test_forward_jump():
    src = "j end\nadd $t0, $t0, $t0\nend: jal end\n"
    ai = asm.assembler(src)
    assert words(ai)[0] == arith.mk_word_j(0x02, 2)
    assert words(ai)[2] == arith.mk_word_j(0x03, 2)

def test_jump_to_literal_address():
    ai = asm.assembler("j 0x400000")
    assert arith.split_word_j(words(ai)[0])["address"] == 0x100000

def test_immediate_forms():
    src = """addi $t0, $zero, -1
ori $t0, $t0, 0xffff
lui $at, 4097
slti $t1, $t2, 100
"""
    ai = asm.assembler(src)
    assert ai.ok
    assert words(ai) == [
        0x2008FFFF,
        arith.mk_word_i(0x0d, 8, 8, 0xFFFF),
        arith.mk_word_i(0x0f, 0, 1, 4097),
        arith.mk_word_i(0x0a, 10, 9, 100),
    ]

def test_load_store():
    src = "lw $t0, 8($sp)\nsw $ra, -4($sp)\nlb $t1, ($a0)\nlw $t0, $sp, 12\n"
    ai = asm.assembler(src)
    assert ai.ok
    assert words(ai)[0] == 0x8FA80008
    assert words(ai)[1] == arith.mk_word_i(0x2b, 29, 31, 0xFFFC)
    assert words(ai)[2] == arith.mk_word_i(0x20, 4, 9, 0)
    assert words(ai)[3] == arith.mk_word_i(0x23, 29, 8, 12)

def test_other_register_forms():
    src = "sll $t0, $t1, 4\njr $ra\nmult $t0, $t1\nmflo $v0\nsyscall\nadd $t0, $t1, $t2, 3\n"
    ai = asm.assembler(src)
    assert ai.ok
    assert words(ai) == [
        0x00094100,
        0x03E00008,
        arith.mk_word_r(0, 8, 9, 0, 0, 0x18),
        arith.mk_word_r(0, 0, 0, 2, 0, 0x12),
        0x0000000C,
        arith.mk_word_r(0, 9, 10, 8, 3, 0x20),
    ]

def test_round_trip_fields():
    src = "sub $s1, $s2, $s3\nbne $a0, $a1, -7\njal 0x3fffffc\n"
    ai = asm.assembler(src)
    r, i, j = words(ai)
    assert arith.split_word_r(r) == {"opcode": 0, "rs": 18, "rt": 19, "rd": 17, "shamt": 0, "funct": 0x22}
    fi = arith.split_word_i(i)
    assert (fi["opcode"], fi["rs"], fi["rt"], arith.from_twos(fi["imm"], 16)) == (0x05, 4, 5, -7)
    assert arith.split_word_j(j) == {"opcode": 0x03, "address": 0xFFFFFF}

def test_mnemonic_case():
    ai = asm.assembler("ADD $t0, $t1, $t2")
    assert ai.object_code == ["00000001001010100100000000100000"]

# ----------------------------------------------------------------------
# Recoverable errors
# ----------------------------------------------------------------------

@pytest.mark.parametrize("line, kind", [
    ("add $t0, $t1, $q2", st.UnknownRegister),
    ("beq $t0, $t1, nowhere", st.UnresolvedLabel),
    ("j nowhere", st.UnresolvedLabel),
    ("addi $t0, $t0, 32768", st.OutOfRange),
    ("addi $t0, $t0, -32769", st.OutOfRange),
    ("andi $t0, $t0, -1", st.OutOfRange),
    ("sll $t0, $t0, 32", st.OutOfRange),
    ("j 6", st.OutOfRange),
    ("add $t0, $t1", st.BadOperands),
    ("lw $t0, 8[$sp]", st.BadOperands),
    ("beq $t0, $t1, 4bad", st.BadOperands),
])
def test_recoverable_errors(line, kind):
    src = f"add $t0, $t0, $t0\n{line}\nadd $t0, $t0, $t0\n"
    ai = asm.assembler(src)
    assert len(ai.object_code) == 2
    assert [e.kind for e in ai.diagnostics] == [kind]
    assert ai.diagnostics[0].line == 2
    assert ai.fatal is None
    assert not ai.ok

def test_branch_out_of_range():
    src = "beq $t0, $t1, far\n" + "add $t0, $t0, $t0\n" * 32768 + "far: add $t0, $t0, $t0\n"
    ai = asm.assembler(src)
    assert ai.diagnostics[0].kind == st.OutOfRange
    assert ai.diagnostics[0].line == 1
    assert len(ai.object_code) == 32769

def test_duplicate_label_still_encodes():
    ai = asm.assembler("a: add $t0, $t0, $t0\na: add $t0, $t0, $t0\n")
    assert len(ai.object_code) == 2
    assert [e.kind for e in ai.diagnostics] == [st.DuplicateLabel]

# ----------------------------------------------------------------------
# Fatal errors
# ----------------------------------------------------------------------

def test_pass2_without_table_is_fatal():
    ai = st.AsmInfo()
    with pytest.raises(st.FatalAsmError) as e:
        asm.asm_pass2(ai, ["add $t0, $t0, $t0"], None)
    assert e.value.kind == st.NoTable

def test_encode_without_table_is_fatal():
    op = asm.arch.statement_spec["j"]
    with pytest.raises(st.FatalAsmError):
        asm.encode_j(op, ["somewhere"], 1, None)

def test_fatal_error_stops_session(monkeypatch):
    def failing_resize(self, n):
        raise st.FatalAsmError(st.Allocation, st.ErrAllocation)
    monkeypatch.setattr(st.LabelTable, "resize", failing_resize)
    ai = asm.assembler("add $t0, $t0, $t0\n")
    assert ai.fatal is not None
    assert ai.fatal.kind == st.Allocation
    assert ai.object_code == []

# ----------------------------------------------------------------------
# Streams and output
# ----------------------------------------------------------------------

def test_assemble_stream_writes_output():
    fp = io.StringIO(SCENARIO_A)
    out = io.StringIO()
    ai = asm.assemble_stream(fp, out)
    assert ai.ok
    lines = out.getvalue().split("\n")
    assert lines[:3] == ai.object_code
    assert lines[3] == ""
    assert all(len(x) == 32 and set(x) <= {"0", "1"} for x in ai.object_code)

class UnseekableReader(io.StringIO):
    def seekable(self):
        return False

def test_assemble_unseekable_stream():
    ai = asm.assemble_stream(UnseekableReader(SCENARIO_A))
    assert len(ai.object_code) == 3
    assert ai.label_table.find("A_LABEL") == 4

def test_listing():
    ai = asm.assembler("start:\n  add $t0, $t1, $t2\n  frob\n")
    assert ai.listing[0].startswith("   1")
    assert "012a4020" in ai.listing[1]
    assert "00000000" in ai.listing[1]
    assert ai.listing[3].startswith("Error:")
