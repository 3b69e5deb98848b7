"""32-byte memory bursts and loading them from ``.npy`` arrays."""

from __future__ import annotations

import math
import random as _random
import struct
from dataclasses import dataclass, field
from itertools import zip_longest
from numbers import Number
from typing import Iterable, Iterator, Sequence

from .npy import load_array

BURST_SIZE = 32

_FMT = {
    "u8": "<32B",
    "u16": "<16H",
    "u32": "<8I",
    "u64": "<4Q",
    "fp32": "<8f",
    "fp16": "<16e",
}


def _round_half(value: float) -> float:
    """Round a float to the nearest IEEE half-precision value."""
    return struct.unpack("<e", _half_bytes(value))[0]


def _half_bytes(value: float) -> bytes:
    try:
        return struct.pack("<e", value)
    except OverflowError:
        return struct.pack("<e", math.copysign(math.inf, value))


def _float32_bytes(value: float) -> bytes:
    try:
        return struct.pack("<f", value)
    except OverflowError:
        return struct.pack("<f", math.copysign(math.inf, value))


def _round_float32(value: float) -> float:
    return struct.unpack("<f", _float32_bytes(value))[0]


def _expand(values, count: int, kind: str) -> list:
    """Broadcast a scalar to ``count`` items, or check a sequence's length."""
    if isinstance(values, Number):
        return [values] * count
    items = list(values)
    if len(items) != count:
        raise ValueError(f"a burst holds {count} {kind} values, got {len(items)}")
    return items


def _ratio(num: float, den: float) -> float:
    """Divide as IEEE floats do, giving inf or nan instead of raising."""
    if den == 0:
        if num == 0 or math.isnan(num):
            return math.nan
        sign = math.copysign(1.0, num) * math.copysign(1.0, den)
        return math.copysign(math.inf, sign)
    return num / den


def _chunks(values: Sequence, size: int, fill=0) -> Iterator[tuple]:
    """Yield fixed-size chunks, padding the last one with ``fill``."""
    return zip_longest(*[iter(values)] * size, fillvalue=fill)


@dataclass(frozen=True)
class KVPair:
    """A key/value pair of two unsigned 32-bit integers."""

    key: int = 0
    value: int = 0


class BurstType:
    """Thirty-two bytes of data viewed as fp16, fp32 or integer lanes."""

    __slots__ = ("raw",)

    def __init__(self, raw: bytes | bytearray | None = None) -> None:
        if raw is None:
            self.raw = bytearray(BURST_SIZE)
        else:
            if len(raw) != BURST_SIZE:
                raise ValueError(f"a burst is {BURST_SIZE} bytes, got {len(raw)}")
            self.raw = bytearray(raw)

    @classmethod
    def from_fp32(cls, values) -> BurstType:
        """Build a burst from eight single-precision floats (or one, repeated)."""
        items = _expand(values, 8, "fp32")
        return cls(b"".join(_float32_bytes(float(v)) for v in items))

    @classmethod
    def from_fp16(cls, values) -> BurstType:
        """Build a burst from sixteen half-precision values (or one, repeated)."""
        items = _expand(values, 16, "fp16")
        return cls(b"".join(_half_bytes(float(v)) for v in items))

    @classmethod
    def from_u16(cls, values) -> BurstType:
        """Build a burst from sixteen unsigned 16-bit integers."""
        items = _expand(values, 16, "u16")
        return cls(struct.pack(_FMT["u16"], *(int(v) & 0xFFFF for v in items)))

    @classmethod
    def from_u32(cls, values) -> BurstType:
        """Build a burst from eight unsigned 32-bit integers."""
        items = _expand(values, 8, "u32")
        return cls(struct.pack(_FMT["u32"], *(int(v) & 0xFFFFFFFF for v in items)))

    @classmethod
    def from_u64(cls, values) -> BurstType:
        """Build a burst from four unsigned 64-bit integers."""
        items = _expand(values, 4, "u64")
        return cls(struct.pack(_FMT["u64"], *(int(v) & 0xFFFFFFFFFFFFFFFF for v in items)))

    @classmethod
    def from_pairs(cls, pairs: Iterable[KVPair]) -> BurstType:
        """Build a burst from four key/value pairs."""
        items = list(pairs)
        if len(items) != 4:
            raise ValueError(f"a burst holds 4 pairs, got {len(items)}")
        words = [w for p in items for w in (p.key, p.value)]
        return cls.from_u32(words)

    @classmethod
    def random(cls, rng: _random.Random | None = None) -> BurstType:
        """Return a burst of sixteen fp16 values drawn uniformly from [-10, 10]."""
        rng = rng or _random.Random()
        return cls.from_fp16([rng.uniform(-10.0, 10.0) for _ in range(16)])

    def copy(self) -> BurstType:
        return BurstType(self.raw)

    @property
    def u8(self) -> tuple[int, ...]:
        return tuple(self.raw)

    @property
    def u16(self) -> tuple[int, ...]:
        return struct.unpack(_FMT["u16"], self.raw)

    @property
    def u32(self) -> tuple[int, ...]:
        return struct.unpack(_FMT["u32"], self.raw)

    @property
    def u64(self) -> tuple[int, ...]:
        return struct.unpack(_FMT["u64"], self.raw)

    @property
    def fp32(self) -> tuple[float, ...]:
        return struct.unpack(_FMT["fp32"], self.raw)

    @property
    def fp16(self) -> tuple[float, ...]:
        return struct.unpack(_FMT["fp16"], self.raw)

    @property
    def pairs(self) -> tuple[KVPair, ...]:
        words = self.u32
        return tuple(KVPair(k, v) for k, v in zip(words[0::2], words[1::2]))

    def bin_to_str(self) -> str:
        return "[" + "".join(f"{v:016b}" for v in self.u16) + "]"

    def hex_to_str(self) -> str:
        return "".join(f"{v:04x}" for v in self.u16)

    def hex_to_str_u8(self) -> str:
        return "".join(f"{v:02x}" for v in self.raw)

    def hex_to_str2(self) -> str:
        return "".join(f"{v:04x}" for v in reversed(self.u16))

    def hex_to_str_reverse(self, start: int, end: int) -> str:
        """Hex text of the 16-bit lanes ``start`` through ``end`` inclusive."""
        return "".join(f"{v:04x}" for v in self.u16[start : end + 1])

    def hex_to_str_reverse_u8(self, start: int, end: int) -> str:
        """Hex text of the bytes ``start`` through ``end`` inclusive."""
        return "".join(f"{v:02x}" for v in self.raw[start : end + 1])

    def fp32_to_str(self) -> str:
        return "[ " + "".join(f"{v:g} " for v in self.fp32) + "]"

    def fp16_to_str(self) -> str:
        return "[ " + "".join(f"{v:g} " for v in self.fp16) + "]"

    def fp16_similar(self, other: BurstType, epsilon: float) -> bool:
        """True unless some lane's relative excess over ``other`` exceeds epsilon."""
        return not any(
            _ratio(a - b, a) > epsilon for a, b in zip(self.fp16, other.fp16)
        )

    def fp16_reduce_sum(self) -> float:
        """Sum the fp16 lanes in order, rounding to fp16 after each addition."""
        total = 0.0
        for v in self.fp16:
            total = _round_half(total + v)
        return total

    def fp16_adder_tree(self) -> float:
        """Sum the fp16 lanes pairwise in a four-level tree."""
        level = list(self.fp16)
        while len(level) > 1:
            level = [_round_half(a + b) for a, b in zip(level[0::2], level[1::2])]
        return level[0]

    def fp32_reduce_sum(self) -> float:
        """Sum the fp32 lanes in order with single-precision rounding."""
        total = 0.0
        for v in self.fp32:
            total = _round_float32(total + v)
        return total

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BurstType):
            return NotImplemented
        return self.raw == other.raw

    __hash__ = None  # type: ignore[assignment]

    def __add__(self, other: BurstType) -> BurstType:
        return BurstType.from_fp16([a + b for a, b in zip(self.fp16, other.fp16)])

    def __mul__(self, other: BurstType) -> BurstType:
        return BurstType.from_fp16([a * b for a, b in zip(self.fp16, other.fp16)])

    def __repr__(self) -> str:
        return f"BurstType({self.hex_to_str_u8()})"


@dataclass
class NumpyBurst:
    """An array loaded from a ``.npy`` file and cut into bursts."""

    shape: list[int] = field(default_factory=list)
    u32_data: list[int] = field(default_factory=list)
    u64_data: list[int] = field(default_factory=list)
    data: list[float] = field(default_factory=list)
    u16_data: list[int] = field(default_factory=list)
    bshape: list[int] = field(default_factory=list)
    bdata: list[BurstType] = field(default_factory=list)

    def get_burst(self, x: int, y: int | None = None) -> BurstType:
        """Return burst ``x``, or burst ``(x, y)`` of a two-dimensional layout."""
        if y is None:
            return self.bdata[x]
        return self.bdata[y * self.bshape[1] + x]

    def load_to_bshape(self, divisor: float) -> None:
        """Append the burst shape: the last dimension divided by ``divisor``, rounded up."""
        *outer, last = self.shape
        self.bshape.extend(outer)
        self.bshape.append(math.ceil(last / divisor))

    def load_pairs(self, filename) -> None:
        """Load an unsigned 32-bit array as key/value pairs, four per burst."""
        self.shape, self.u32_data = load_array(filename, "uint32")
        self.bshape.append(self.shape[0] // 4)
        for chunk in _chunks(self.u32_data, 8):
            self.bdata.append(BurstType.from_u32(chunk))

    def load_int64(self, filename) -> None:
        self.shape, self.u64_data = load_array(filename, "uint64")
        self.load_to_bshape(4)
        for chunk in _chunks(self.u64_data, 4):
            self.bdata.append(BurstType.from_u64(chunk))

    def load_int32(self, filename) -> None:
        self.shape, self.u32_data = load_array(filename, "uint32")
        self.load_to_bshape(8)
        for chunk in _chunks(self.u32_data, 8):
            self.bdata.append(BurstType.from_u32(chunk))

    def load_fp32(self, filename) -> None:
        self.shape, self.data = load_array(filename, "float32")
        self.load_to_bshape(8)
        for chunk in _chunks(self.data, 8, 0.0):
            self.bdata.append(BurstType.from_fp32(chunk))

    def load_fp16(self, filename) -> None:
        """Load raw fp16 bit patterns stored as 16-bit elements."""
        self.shape, self.u16_data = load_array(filename, "uint16")
        self.load_to_bshape(16)
        for chunk in _chunks(self.u16_data, 16):
            self.bdata.append(BurstType.from_u16(chunk))

    def load_fp16_from_fp32(self, filename) -> None:
        """Load a float32 array and convert each element to fp16."""
        self.shape, self.data = load_array(filename, "float32")
        self.load_to_bshape(16)
        for chunk in _chunks(self.data, 16, 0.0):
            self.bdata.append(BurstType.from_fp16(chunk))

    def dump_fp16(self, filename) -> None:
        """Write every 16-bit lane as decimal text, each followed by a space."""
        with open(filename, "w") as out:
            for burst in self.bdata:
                out.write("".join(f"{v} " for v in burst.u16))

    def dump_int8(self, filename) -> None:
        """Write the raw bytes of every burst."""
        with open(filename, "wb") as out:
            for burst in self.bdata:
                out.write(burst.raw)

    def copy_bursts(self, bursts: Sequence[BurstType]) -> None:
        """Append copies of the given bursts as a new one-dimensional block."""
        self.bshape.append(len(bursts))
        self.bdata.extend(b.copy() for b in bursts)

    def total_dim(self) -> int:
        return math.prod(self.bshape)