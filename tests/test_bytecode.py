import pytest

from bytecode import BytecodeProgram
from label_map import LabelMap


def test_add_const_reuses_first_occurrence():
    bc = BytecodeProgram()
    assert bc.add_const(10) == 0
    assert bc.add_const(-3) == 1
    assert bc.add_const(10) == 0
    assert bc.consts == [10, -3]
    assert bc.const_at(1) == -3


def test_emit_keeps_lines_aligned():
    bc = BytecodeProgram()
    assert bc.emit("PUSH", 0, line=1) == 0
    assert bc.emit("END", line=4) == 1
    assert len(bc) == 2
    assert bc.lines == [1, 4]
    assert bc.line_at(1) == 4
    assert bc.instruction_at(0) == ("PUSH", 0)


def test_emit_rejects_unknown_opcode():
    bc = BytecodeProgram()
    with pytest.raises(ValueError):
        bc.emit("NOPE")


def test_patch_keeps_opcode():
    bc = BytecodeProgram()
    i = bc.emit("JUMP_IF_NEG", None, line=1)
    bc.patch(i, 7)
    assert bc.instruction_at(i) == ("JUMP_IF_NEG", 7)


def test_sub_labels():
    bc = BytecodeProgram()
    bc.add_sub_label(3, 12)
    assert bc.label_at(3) == 12
    assert bc.label_at(4) is None


def test_label_map_last_declaration_wins():
    labels = LabelMap()
    labels.add_label(5, 0)
    labels.add_label(5, 9)
    assert labels.get_pc(5) == 9
    assert labels.get_pc(6) is None


def test_label_map_jumps_in_emission_order():
    labels = LabelMap()
    labels.add_jump(4, 1)
    labels.add_jump(0, 2)
    labels.add_jump(2, 1)
    assert list(labels.iter_jumps()) == [(0, 2), (2, 1), (4, 1)]
    assert len(labels) == 3
