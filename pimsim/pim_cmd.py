"""PIM micro-instructions and their 32-bit encoding."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class PIMCmdType(IntEnum):
    """Instruction opcodes, held in the top four bits of a command word."""

    NOP = 0
    ADD = 1
    MUL = 2
    MAC = 3
    MAD = 4
    PART = 5
    STB = 6
    STS = 7
    MOV = 8
    FILL = 9
    HASH = 10
    REV4 = 11
    REV5 = 12
    REV6 = 13
    JUMP = 14
    EXIT = 15


class PIMOpdType(IntEnum):
    """Operand kinds, encoded in three bits."""

    A_OUT = 0
    M_OUT = 1
    EVEN_BANK = 2
    ODD_BANK = 3
    GRF_A = 4
    GRF_B = 5
    SRAM = 6
    BANK = 7


class InvalidCommandError(ValueError):
    """Raised when a command is not valid in the instruction set."""


_CMD_NAMES = {
    PIMCmdType.EXIT: "EXIT",
    PIMCmdType.NOP: "NOP",
    PIMCmdType.JUMP: "JUMP",
    PIMCmdType.FILL: "FILL",
    PIMCmdType.MOV: "MOV",
    PIMCmdType.ADD: "ADD",
    PIMCmdType.MUL: "MUL",
    PIMCmdType.MAC: "MAC",
    PIMCmdType.MAD: "MAD",
    PIMCmdType.PART: "PART",
    PIMCmdType.STB: "STB",
    PIMCmdType.STS: "STS",
}

_GRF_TYPES = (PIMOpdType.GRF_A, PIMOpdType.GRF_B)
_BANK_TYPES = (PIMOpdType.EVEN_BANK, PIMOpdType.ODD_BANK)
_ARITH_TYPES = (PIMCmdType.ADD, PIMCmdType.MUL, PIMCmdType.MAC, PIMCmdType.MAD)


def _to_bit(val: int, bit_len: int, bit_pos: int) -> int:
    return (int(val) & ((1 << bit_len) - 1)) << bit_pos


def _from_bit(val: int, bit_len: int, bit_pos: int) -> int:
    return (val >> bit_pos) & ((1 << bit_len) - 1)


def opd_to_str(opd: PIMOpdType, idx: int = 0) -> str:
    """Return the assembly text of an operand."""
    if opd in _GRF_TYPES:
        return f"{opd.name}[{idx}]"
    try:
        return PIMOpdType(opd).name
    except ValueError:
        return "NOT_DEFINED"


def cmd_to_str(cmd_type: PIMCmdType) -> str:
    """Return the mnemonic of an opcode, or ``NOT_DEFINED``."""
    return _CMD_NAMES.get(cmd_type, "NOT_DEFINED")


@dataclass(eq=False)
class PIMCmd:
    """One PIM instruction with all of its operand fields."""

    type: PIMCmdType = PIMCmdType.NOP
    dst: PIMOpdType = PIMOpdType.A_OUT
    src0: PIMOpdType = PIMOpdType.A_OUT
    src1: PIMOpdType = PIMOpdType.A_OUT
    src2: PIMOpdType = PIMOpdType.A_OUT
    loop_counter: int = 0
    loop_offset: int = 0
    is_auto: int = 0
    dst_idx: int = 0
    src0_idx: int = 0
    src1_idx: int = 0
    is_relu: int = 0
    round: int = 0
    dst_idx1: int = 0

    @classmethod
    def from_int(cls, val: int) -> PIMCmd:
        """Decode a 32-bit command word."""
        cmd = cls(type=PIMCmdType(_from_bit(val, 4, 28)))
        t = cmd.type
        if t is PIMCmdType.NOP:
            cmd.loop_counter = _from_bit(val, 11, 0)
        elif t is PIMCmdType.JUMP:
            cmd.loop_counter = _from_bit(val, 17, 11)
            cmd.loop_offset = _from_bit(val, 11, 0)
        elif t in (PIMCmdType.FILL, PIMCmdType.MOV):
            cmd.dst = PIMOpdType(_from_bit(val, 3, 25))
            cmd.src0 = PIMOpdType(_from_bit(val, 3, 22))
            cmd.is_relu = _from_bit(val, 1, 12)
            cmd.dst_idx = _from_bit(val, 4, 8)
            cmd.src0_idx = _from_bit(val, 4, 4)
            cmd.src1_idx = _from_bit(val, 4, 0)
        elif t in _ARITH_TYPES:
            if t is PIMCmdType.MAD:
                cmd.src2 = PIMOpdType(_from_bit(val, 3, 16))
            cmd.dst = PIMOpdType(_from_bit(val, 3, 25))
            cmd.src0 = PIMOpdType(_from_bit(val, 3, 22))
            cmd.src1 = PIMOpdType(_from_bit(val, 3, 19))
            cmd.is_auto = _from_bit(val, 1, 15)
            cmd.dst_idx = _from_bit(val, 4, 8)
            cmd.src0_idx = _from_bit(val, 4, 4)
            cmd.src1_idx = _from_bit(val, 4, 0)
        elif t is PIMCmdType.PART:
            cmd.dst = PIMOpdType(_from_bit(val, 3, 25))
            cmd.src0 = PIMOpdType(_from_bit(val, 3, 22))
            cmd.round = _from_bit(val, 3, 19)
            cmd.is_auto = _from_bit(val, 1, 18)
        elif t is PIMCmdType.STB:
            cmd.dst = PIMOpdType(_from_bit(val, 3, 25))
            cmd.src0 = PIMOpdType(_from_bit(val, 3, 22))
            cmd.round = _from_bit(val, 3, 19)
            cmd.is_auto = _from_bit(val, 1, 18)
            cmd.dst_idx = _from_bit(val, 4, 14)
            cmd.src0_idx = _from_bit(val, 4, 10)
            cmd.src1_idx = _from_bit(val, 8, 2)
        elif t is PIMCmdType.STS:
            cmd.dst = PIMOpdType(_from_bit(val, 3, 25))
            cmd.src0 = PIMOpdType(_from_bit(val, 3, 22))
            cmd.is_auto = _from_bit(val, 1, 21)
            cmd.dst_idx = _from_bit(val, 4, 17)
            cmd.dst_idx1 = _from_bit(val, 6, 11)
            cmd.src0_idx = _from_bit(val, 4, 6)
            cmd.src1_idx = _from_bit(val, 6, 0)
        return cmd

    def validation_check(self) -> None:
        """Raise if a MOV or FILL moves a register file straight into a bank."""
        if self.type in (PIMCmdType.MOV, PIMCmdType.FILL) and self.dst in _BANK_TYPES:
            if any(src in _GRF_TYPES for src in (self.src0, self.src1, self.src2)):
                raise InvalidCommandError(f"Invalid in ISA 1.0 {self.to_str()}")

    def to_int(self) -> int:
        """Encode the command as a 32-bit word."""
        self.validation_check()
        t = self.type
        val = _to_bit(t, 4, 28)
        if t is PIMCmdType.NOP:
            val |= _to_bit(self.loop_counter, 11, 0)
        elif t is PIMCmdType.JUMP:
            val |= _to_bit(self.loop_counter, 17, 11)
            val |= _to_bit(self.loop_offset, 11, 0)
        elif t in (PIMCmdType.FILL, PIMCmdType.MOV):
            val |= _to_bit(self.dst, 3, 25)
            val |= _to_bit(self.src0, 3, 22)
            val |= _to_bit(self.dst_idx, 4, 8)
            val |= _to_bit(self.src0_idx, 4, 4)
            val |= _to_bit(self.src1_idx, 4, 0)
            val |= _to_bit(self.is_relu, 1, 12)
        elif t in _ARITH_TYPES:
            if t is PIMCmdType.MAD:
                val |= _to_bit(self.src2, 3, 16)
            val |= _to_bit(self.dst, 3, 25)
            val |= _to_bit(self.src0, 3, 22)
            val |= _to_bit(self.src1, 3, 19)
            val |= _to_bit(self.is_auto, 1, 15)
            val |= _to_bit(self.dst_idx, 4, 8)
            val |= _to_bit(self.src0_idx, 4, 4)
            val |= _to_bit(self.src1_idx, 4, 0)
        elif t is PIMCmdType.PART:
            val |= _to_bit(self.dst, 3, 25)
            val |= _to_bit(self.src0, 3, 22)
            val |= _to_bit(self.round, 3, 19)
            val |= _to_bit(self.is_auto, 1, 18)
        elif t is PIMCmdType.STB:
            val |= _to_bit(self.dst, 3, 25)
            val |= _to_bit(self.src0, 3, 22)
            val |= _to_bit(self.round, 3, 19)
            val |= _to_bit(self.is_auto, 1, 18)
            val |= _to_bit(self.dst_idx, 4, 14)
            val |= _to_bit(self.src0_idx, 4, 10)
            val |= _to_bit(self.src1_idx, 8, 2)
        elif t is PIMCmdType.STS:
            val |= _to_bit(self.dst, 3, 25)
            val |= _to_bit(self.src0, 3, 22)
            val |= _to_bit(self.is_auto, 1, 21)
            val |= _to_bit(self.dst_idx, 4, 17)
            val |= _to_bit(self.dst_idx1, 6, 11)
            val |= _to_bit(self.src0_idx, 4, 6)
            val |= _to_bit(self.src1_idx, 6, 0)
        return val

    def to_str(self) -> str:
        """Return the assembly text of the command."""
        t = self.type
        parts = [cmd_to_str(t) + " "]
        if t is PIMCmdType.NOP:
            parts.append(f"{self.loop_counter + 1}x")
        elif t is PIMCmdType.JUMP:
            parts.append(f"{self.loop_counter}x [PC - {self.loop_offset}]")
        elif t in (PIMCmdType.FILL, PIMCmdType.MOV):
            parts.append(opd_to_str(self.dst, self.dst_idx) + ", ")
            parts.append(opd_to_str(self.src0, self.src0_idx))
            if self.is_relu:
                parts.append(", relu")
        elif t in (PIMCmdType.ADD, PIMCmdType.MUL, PIMCmdType.MAC):
            parts.append(
                ", ".join(
                    (
                        opd_to_str(self.dst, self.dst_idx),
                        opd_to_str(self.src0, self.src0_idx),
                        opd_to_str(self.src1, self.src1_idx),
                    )
                )
            )
        elif t is PIMCmdType.MAD:
            parts.append(
                ", ".join(
                    (
                        opd_to_str(self.dst, self.dst_idx),
                        opd_to_str(self.src0, self.src0_idx),
                        opd_to_str(self.src1, self.src1_idx),
                        opd_to_str(self.src2, self.src1_idx),
                    )
                )
            )
        if self.is_auto:
            parts.append(", auto")
        return "".join(parts)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PIMCmd):
            return NotImplemented
        return self.to_int() == other.to_int()

    def __hash__(self) -> int:
        return hash(self.to_int())

    def __str__(self) -> str:
        return self.to_str()