"""Reading and writing arrays in the NumPy ``.npy`` file format."""

from __future__ import annotations

import itertools
import math
import re
import struct
import sys
from dataclasses import dataclass
from typing import BinaryIO, Iterable, Sequence

MAGIC_STRING = b"\x93NUMPY"
MAGIC_STRING_LENGTH = len(MAGIC_STRING)

LITTLE_ENDIAN_CHAR = "<"
BIG_ENDIAN_CHAR = ">"
NO_ENDIAN_CHAR = "|"

HOST_ENDIAN_CHAR = BIG_ENDIAN_CHAR if sys.byteorder == "big" else LITTLE_ENDIAN_CHAR

_WHITESPACE = " \t"
_TYPESTRING_RE = re.compile(r"'([<>|])([ifuc])(\d+)'")

_BOOL_LITERALS = {True: "True", False: "False"}
_LITERAL_BOOLS = {text: flag for flag, text in _BOOL_LITERALS.items()}


class NpyFormatError(ValueError):
    """Raised when data does not follow the ``.npy`` format."""


@dataclass(frozen=True)
class Typestring:
    """A NumPy array-protocol type string such as ``<f4``."""

    endian: str
    kind: str
    size: int

    def __str__(self) -> str:
        return f"{self.endian}{self.kind}{self.size}"


@dataclass(frozen=True)
class _DType:
    kind: str
    size: int
    code: str
    single_byte: bool = False
    is_complex: bool = False


# 16-bit unsigned data is written with a float kind: it carries raw fp16 bits.
_DTYPES = {
    "float16": _DType("f", 2, "e"),
    "float32": _DType("f", 4, "f"),
    "float64": _DType("f", 8, "d"),
    "int8": _DType("i", 1, "b", single_byte=True),
    "int16": _DType("i", 2, "h"),
    "int32": _DType("i", 4, "i"),
    "int64": _DType("i", 8, "q"),
    "uint8": _DType("u", 1, "B", single_byte=True),
    "uint16": _DType("f", 2, "H"),
    "uint32": _DType("u", 4, "I"),
    "uint64": _DType("u", 8, "Q"),
    "complex64": _DType("c", 8, "f", is_complex=True),
    "complex128": _DType("c", 16, "d", is_complex=True),
}


@dataclass(frozen=True)
class NpyHeader:
    """The parsed contents of a ``.npy`` header dictionary."""

    descr: str
    fortran_order: bool
    shape: tuple[int, ...]


def _lookup_dtype(dtype: str) -> _DType:
    try:
        return _DTYPES[dtype]
    except KeyError:
        raise ValueError(f"unsupported dtype: {dtype!r}") from None


def typestring_for(dtype: str) -> Typestring:
    """Return the type string written for elements of the named dtype."""
    info = _lookup_dtype(dtype)
    endian = NO_ENDIAN_CHAR if info.single_byte else HOST_ENDIAN_CHAR
    return Typestring(endian, info.kind, info.size)


def write_magic(stream: BinaryIO, major: int = 1, minor: int = 0) -> None:
    """Write the magic string followed by the format version."""
    stream.write(MAGIC_STRING + bytes([major, minor]))


def read_magic(stream: BinaryIO) -> tuple[int, int]:
    """Read and check the magic string; return ``(major, minor)``."""
    buf = stream.read(MAGIC_STRING_LENGTH + 2)
    if len(buf) < MAGIC_STRING_LENGTH + 2:
        raise NpyFormatError("io error: failed reading file")
    if buf[:MAGIC_STRING_LENGTH] != MAGIC_STRING:
        raise NpyFormatError("this file does not have a valid npy format.")
    return buf[MAGIC_STRING_LENGTH], buf[MAGIC_STRING_LENGTH + 1]


def parse_typestring(typestring: str) -> Typestring:
    """Check a quoted type string such as ``'<f4'`` and return its parts."""
    match = _TYPESTRING_RE.fullmatch(typestring)
    if match is None:
        raise NpyFormatError("invalid typestring")
    endian, kind, size = match.groups()
    return Typestring(endian, kind, int(size))


def trim(text: str) -> str:
    """Remove leading and trailing spaces and tabs."""
    return text.strip(_WHITESPACE)


def get_value_from_map(mapstr: str) -> str:
    """Return the trimmed text after the first colon, or ``""`` if none."""
    _, sep, rest = mapstr.partition(":")
    if not sep:
        return ""
    return trim(rest)


def parse_dict(text: str, keys: Iterable[str]) -> dict[str, str]:
    """Parse the text of a Python dict literal whose keys are known in advance.

    The keys may not appear anywhere else in the text.
    """
    keys = list(keys)
    if not keys:
        return {}

    text = trim(text)
    if len(text) >= 2 and text[0] == "{" and text[-1] == "}":
        text = text[1:-1]
    else:
        raise NpyFormatError("Not a Python dictionary.")

    positions = []
    for key in keys:
        pos = text.find(f"'{key}'")
        if pos < 0:
            raise NpyFormatError(f"Missing '{key}' key.")
        positions.append((pos, key))
    positions.sort()

    result = {}
    ends = [pos for pos, _ in positions[1:]] + [len(text)]
    for (begin, key), end in zip(positions, ends):
        raw_value = trim(text[begin:end])
        if raw_value.endswith(","):
            raw_value = raw_value[:-1]
        result[key] = get_value_from_map(raw_value)
    return result


def parse_bool(text: str) -> bool:
    """Parse a Python boolean literal."""
    try:
        return _LITERAL_BOOLS[text]
    except KeyError:
        raise NpyFormatError("Invalid python boolean.") from None


def parse_str(text: str) -> str:
    """Parse a single-quoted Python string literal."""
    if text and text[0] == "'" and text[-1] == "'":
        return text[1:-1]
    raise NpyFormatError("Invalid python string.")


def parse_tuple(text: str) -> list[str]:
    """Split the text of a Python tuple literal into its raw items."""
    text = trim(text)
    if len(text) >= 2 and text[0] == "(" and text[-1] == ")":
        text = text[1:-1]
    else:
        raise NpyFormatError("Invalid Python tuple.")
    items = text.split(",")
    if items[-1] == "":
        items.pop()
    return items


def write_tuple(values: Sequence) -> str:
    """Format values as a Python tuple literal; empty input gives ``""``."""
    if not values:
        return ""
    if len(values) == 1:
        return f"({values[0]},)"
    return "(" + ", ".join(str(v) for v in values) + ")"


def write_boolean(value: bool) -> str:
    """Format a boolean as a Python literal."""
    literal = _BOOL_LITERALS[bool(value)]
    return literal


def parse_header(header: str) -> NpyHeader:
    """Parse the header text that follows the magic string and length."""
    if not header.endswith("\n"):
        raise NpyFormatError("invalid header")
    header = header[:-1]

    fields = parse_dict(header, ["descr", "fortran_order", "shape"])
    if not fields:
        raise NpyFormatError("invalid dictionary in header")

    descr_s = fields["descr"]
    parse_typestring(descr_s)
    descr = parse_str(descr_s)
    fortran_order = parse_bool(fields["fortran_order"])

    items = parse_tuple(fields["shape"])
    if not items:
        raise NpyFormatError("invalid shape tuple in header")
    try:
        shape = tuple(int(item) for item in items)
    except ValueError:
        raise NpyFormatError("invalid shape tuple in header") from None
    if any(dim < 0 for dim in shape):
        raise NpyFormatError("invalid shape tuple in header")
    return NpyHeader(descr, fortran_order, shape)


def write_header_dict(descr: str, fortran_order: bool, shape: Sequence[int]) -> str:
    """Return the header dictionary text for the given array description."""
    return (
        "{'descr': '" + descr + "', 'fortran_order': " + write_boolean(fortran_order)
        + ", 'shape': " + write_tuple(shape) + ", }"
    )


def write_header(out: BinaryIO, descr: str, fortran_order: bool, shape: Sequence[int]) -> None:
    """Write the magic string, version, header length and padded header."""
    header_dict = write_header_dict(descr, fortran_order, shape)

    length = MAGIC_STRING_LENGTH + 2 + 2 + len(header_dict) + 1
    major, minor = 1, 0
    if length >= 255 * 255:
        length = MAGIC_STRING_LENGTH + 2 + 4 + len(header_dict) + 1
        major, minor = 2, 0
    padding = " " * (16 - length % 16)

    write_magic(out, major, minor)
    header_len = len(header_dict) + len(padding) + 1
    if major == 1:
        out.write(struct.pack("<H", header_len & 0xFFFF))
    else:
        out.write(struct.pack("<I", header_len & 0xFFFFFFFF))
    out.write((header_dict + padding + "\n").encode("latin-1"))


def read_header(stream: BinaryIO) -> str:
    """Read the magic string and return the raw header text."""
    major, minor = read_magic(stream)
    if (major, minor) == (1, 0):
        raw = stream.read(2)
        fmt = "<H"
    elif (major, minor) == (2, 0):
        raw = stream.read(4)
        fmt = "<I"
    else:
        raise NpyFormatError("unsupported file format version")
    if len(raw) < struct.calcsize(fmt):
        raise NpyFormatError("io error: failed reading file")
    (header_length,) = struct.unpack(fmt, raw)

    header = stream.read(header_length)
    if len(header) < header_length:
        raise NpyFormatError("io error: failed reading file")
    return header.decode("latin-1")


def comp_size(shape: Iterable[int]) -> int:
    """Return the number of elements of an array with this shape."""
    return math.prod(shape)


def _struct_format(info: _DType, count: int) -> str:
    order = ">" if HOST_ENDIAN_CHAR == BIG_ENDIAN_CHAR else "<"
    n = count * 2 if info.is_complex else count
    return f"{order}{n}{info.code}"


def save_array(
    filename,
    dtype: str,
    shape: Sequence[int],
    data: Iterable,
    fortran_order: bool = False,
) -> None:
    """Write ``data`` as an array of the named dtype and shape to ``filename``."""
    info = _lookup_dtype(dtype)
    typestring = str(typestring_for(dtype))
    size = comp_size(shape)
    values = list(itertools.islice(data, size))
    if len(values) < size:
        raise ValueError(f"expected {size} elements, got {len(values)}")
    if info.is_complex:
        values = [part for z in values for part in (complex(z).real, complex(z).imag)]
    payload = struct.pack(_struct_format(info, size), *values)

    with open(filename, "wb") as stream:
        write_header(stream, typestring, fortran_order, list(shape))
        stream.write(payload)


def load_array(filename, dtype: str) -> tuple[list[int], list]:
    """Read an array of the named dtype; return ``(shape, flat_data)``."""
    info = _lookup_dtype(dtype)
    with open(filename, "rb") as stream:
        header = parse_header(read_header(stream))
        if header.descr != str(typestring_for(dtype)):
            raise NpyFormatError("formatting error: typestrings not matching")
        size = comp_size(header.shape)
        fmt = _struct_format(info, size)
        raw = stream.read(struct.calcsize(fmt))
    if len(raw) < struct.calcsize(fmt):
        raise NpyFormatError("io error: failed reading file")
    values = list(struct.unpack(fmt, raw))
    if info.is_complex:
        values = [complex(re_, im) for re_, im in zip(values[0::2], values[1::2])]
    return list(header.shape), values