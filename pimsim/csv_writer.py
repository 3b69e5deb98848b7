"""A CSV writer that collects column names from the first row it is given."""

from __future__ import annotations

import sys
from numbers import Integral, Real
from typing import TextIO

MAX_TMP_STR = 64
SINGLE_INDEX_LEN = 4


class NameTooLongError(ValueError):
    """Raised when an indexed statistic name would be too long."""


class IndexedName:
    """A field name followed by one to three bracketed indices, e.g. ``bw[0][1]``."""

    __slots__ = ("str",)

    def __init__(self, base_name: str, *indices: int) -> None:
        if not 1 <= len(indices) <= 3:
            raise ValueError("an indexed name takes one to three indices")
        if self.is_name_too_long(base_name, len(indices)):
            raise NameTooLongError(
                f"Your string {base_name} is too long for the max stats size "
                f"({MAX_TMP_STR}, increase MAX_TMP_STR"
            )
        text = base_name + "".join(f"[{int(i)}]" for i in indices)
        self.str = text[: MAX_TMP_STR - 1]

    @staticmethod
    def is_name_too_long(base_name: str, num_indices: int) -> bool:
        return len(base_name) + num_indices * SINGLE_INDEX_LEN > MAX_TMP_STR

    def __str__(self) -> str:
        return self.str

    def __repr__(self) -> str:
        return f"IndexedName({self.str!r})"


class CSVWriter:
    """Writes a header of field names, then one line of values per ``finalize``.

    Before the first ``finalize`` names are recorded and values ignored; after
    it names are ignored and values are written, each followed by a comma.
    """

    def __init__(self, output: TextIO) -> None:
        self.output = output
        self.field_names: list[str] = []
        self.finalized = False
        self.idx = 0

    @property
    def is_finalized(self) -> bool:
        return self.finalized

    def __lshift__(self, item) -> CSVWriter:
        if isinstance(item, (str, IndexedName)):
            if not self.finalized:
                self.field_names.append(str(item))
            return self
        if isinstance(item, Integral):
            text = str(int(item))
        elif isinstance(item, Real):
            text = f"{float(item):g}"
        else:
            raise TypeError(f"cannot write a value of type {type(item).__name__}")
        if self.finalized:
            self.output.write(text + ",")
            self.idx += 1
        return self

    def finalize(self) -> None:
        """Write the header the first time, then end the current line of values."""
        if not self.finalized:
            self.output.write("".join(f"{name}," for name in self.field_names))
            self.output.write("\n")
            self.output.flush()
            self.finalized = True
            return
        if self.idx < len(self.field_names):
            sys.stdout.write(
                f" Number of fields doesn't match values (fields={self.idx}, "
                f"values={len(self.field_names)}), "
                "check each value has a field name before it\n"
            )
        self.idx = 0
        self.output.write("\n")