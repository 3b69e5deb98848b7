import pytest

from pimsim.pim_cmd import (
    InvalidCommandError,
    PIMCmd,
    PIMCmdType,
    PIMOpdType,
    cmd_to_str,
    opd_to_str,
)

SAMPLE_CMDS = [
    PIMCmd(PIMCmdType.EXIT),
    PIMCmd(PIMCmdType.NOP, loop_counter=7),
    PIMCmd(PIMCmdType.JUMP, loop_counter=100, loop_offset=3),
    PIMCmd(PIMCmdType.FILL, PIMOpdType.GRF_A, PIMOpdType.EVEN_BANK, dst_idx=2, is_relu=1),
    PIMCmd(PIMCmdType.MOV, PIMOpdType.GRF_B, PIMOpdType.ODD_BANK, dst_idx=5, src0_idx=1),
    PIMCmd(PIMCmdType.ADD, PIMOpdType.GRF_A, PIMOpdType.GRF_B, PIMOpdType.EVEN_BANK,
           is_auto=1, dst_idx=3, src0_idx=4, src1_idx=6),
    PIMCmd(PIMCmdType.MUL, PIMOpdType.GRF_B, PIMOpdType.GRF_A, PIMOpdType.ODD_BANK),
    PIMCmd(PIMCmdType.MAC, PIMOpdType.GRF_B, PIMOpdType.GRF_A, PIMOpdType.EVEN_BANK,
           is_auto=1),
    PIMCmd(PIMCmdType.MAD, PIMOpdType.GRF_A, PIMOpdType.GRF_A, PIMOpdType.EVEN_BANK,
           PIMOpdType.GRF_B, dst_idx=1, src0_idx=2, src1_idx=3),
    PIMCmd(PIMCmdType.PART, PIMOpdType.SRAM, PIMOpdType.BANK, round=2, is_auto=1),
    PIMCmd(PIMCmdType.STB, PIMOpdType.BANK, PIMOpdType.SRAM, round=1, is_auto=1,
           dst_idx=9, src0_idx=12, src1_idx=200),
    PIMCmd(PIMCmdType.STS, PIMOpdType.SRAM, PIMOpdType.SRAM, is_auto=1, dst_idx=7,
           dst_idx1=40, src0_idx=11, src1_idx=63),
]


@pytest.mark.parametrize("cmd", SAMPLE_CMDS, ids=lambda c: c.type.name)
def test_round_trip_preserves_encoding(cmd):
    decoded = PIMCmd.from_int(cmd.to_int())
    assert decoded.to_int() == cmd.to_int()
    assert decoded == cmd
    assert decoded.to_str() == cmd.to_str()


@pytest.mark.parametrize("cmd", SAMPLE_CMDS, ids=lambda c: c.type.name)
def test_round_trip_preserves_fields(cmd):
    decoded = PIMCmd.from_int(cmd.to_int())
    assert decoded.type is cmd.type
    if cmd.type not in (PIMCmdType.EXIT, PIMCmdType.NOP, PIMCmdType.JUMP):
        assert decoded.dst is cmd.dst
        assert decoded.src0 is cmd.src0
    if cmd.type is PIMCmdType.STS:
        assert decoded.dst_idx1 == cmd.dst_idx1
        assert decoded.src1_idx == cmd.src1_idx
    if cmd.type is PIMCmdType.STB:
        assert decoded.src1_idx == cmd.src1_idx
        assert decoded.round == cmd.round
    if cmd.type is PIMCmdType.MAD:
        assert decoded.src2 is cmd.src2


def test_opcode_lives_in_top_four_bits():
    for cmd_type in PIMCmdType:
        word = PIMCmd(cmd_type).to_int()
        assert word >> 28 == cmd_type.value
        assert PIMCmd.from_int(word).type is cmd_type


def test_exit_encoding():
    assert PIMCmd(PIMCmdType.EXIT).to_int() == 0xF0000000


def test_to_int_fits_in_32_bits():
    for cmd in SAMPLE_CMDS:
        assert 0 <= cmd.to_int() < 1 << 32


def test_equality_ignores_unencoded_fields():
    a = PIMCmd(PIMCmdType.NOP, dst=PIMOpdType.GRF_A, loop_counter=3)
    b = PIMCmd(PIMCmdType.NOP, dst=PIMOpdType.BANK, loop_counter=3)
    c = PIMCmd(PIMCmdType.NOP, loop_counter=4)
    assert a == b
    assert hash(a) == hash(b)
    assert not (a == c)


def test_equality_with_other_type_is_false():
    assert (PIMCmd() == 0) is False


def test_str_matches_to_str():
    for cmd in SAMPLE_CMDS:
        assert str(cmd) == cmd.to_str()


def test_to_str_exit_and_jump():
    assert PIMCmd(PIMCmdType.EXIT).to_str() == "EXIT "
    jump = PIMCmd(PIMCmdType.JUMP, loop_counter=5, loop_offset=2)
    assert jump.to_str() == "JUMP 5x [PC - 2]"


def test_to_str_mov_relu():
    cmd = PIMCmd(PIMCmdType.MOV, PIMOpdType.GRF_A, PIMOpdType.EVEN_BANK, dst_idx=3, is_relu=1)
    assert cmd.to_str() == "MOV GRF_A[3], EVEN_BANK, relu"


def test_to_str_mac_auto():
    cmd = PIMCmd(PIMCmdType.MAC, PIMOpdType.GRF_B, PIMOpdType.GRF_A, PIMOpdType.EVEN_BANK,
                 is_auto=1, dst_idx=0, src0_idx=1)
    assert cmd.to_str() == "MAC GRF_B[0], GRF_A[1], EVEN_BANK, auto"


def test_to_str_mad_uses_src1_index_for_src2():
    cmd = PIMCmd(PIMCmdType.MAD, PIMOpdType.GRF_A, PIMOpdType.GRF_A, PIMOpdType.GRF_B,
                 PIMOpdType.GRF_B, dst_idx=1, src0_idx=2, src1_idx=6)
    assert cmd.to_str() == "MAD GRF_A[1], GRF_A[2], GRF_B[6], GRF_B[6]"


def test_to_str_part_has_only_auto_suffix():
    cmd = PIMCmd(PIMCmdType.PART, PIMOpdType.SRAM, PIMOpdType.BANK, is_auto=1)
    assert cmd.to_str() == "PART , auto"


def test_opd_to_str():
    assert opd_to_str(PIMOpdType.GRF_B, 7) == "GRF_B[7]"
    assert opd_to_str(PIMOpdType.SRAM) == "SRAM"
    assert opd_to_str(PIMOpdType.A_OUT, 5) == "A_OUT"


def test_cmd_to_str():
    assert cmd_to_str(PIMCmdType.STS) == "STS"
    assert cmd_to_str(PIMCmdType.HASH) == "NOT_DEFINED"
    assert cmd_to_str(PIMCmdType.REV4) == "NOT_DEFINED"


@pytest.mark.parametrize("cmd_type", [PIMCmdType.MOV, PIMCmdType.FILL])
@pytest.mark.parametrize("dst", [PIMOpdType.EVEN_BANK, PIMOpdType.ODD_BANK])
def test_grf_to_bank_move_is_invalid(cmd_type, dst):
    cmd = PIMCmd(cmd_type, dst, PIMOpdType.GRF_A)
    with pytest.raises(InvalidCommandError, match="Invalid in ISA 1.0"):
        cmd.validation_check()
    with pytest.raises(InvalidCommandError):
        cmd.to_int()


def test_bank_to_grf_move_is_valid():
    cmd = PIMCmd(PIMCmdType.MOV, PIMOpdType.GRF_A, PIMOpdType.EVEN_BANK)
    assert PIMCmd.from_int(cmd.to_int()).dst is PIMOpdType.GRF_A


def test_field_values_are_masked():
    cmd = PIMCmd(PIMCmdType.NOP, loop_counter=(1 << 11) + 5)
    assert cmd.to_int() == PIMCmd(PIMCmdType.NOP, loop_counter=5).to_int()


def test_from_int_leaves_undecoded_fields_default():
    cmd = PIMCmd.from_int(PIMCmd(PIMCmdType.NOP, loop_counter=9).to_int())
    assert cmd.dst is PIMOpdType.A_OUT
    assert cmd.is_auto == 0
    assert cmd.loop_counter == 9