"""Reading ``key = value`` parameter files with ``;`` comments."""

from __future__ import annotations

import os

_COMMENT = ";"
_EQUAL = "="
_BLANKS = (" ", "\t")


class ParameterReaderError(Exception):
    """Raised when a parameter file cannot be opened or parsed."""

    def __init__(self, message: str, line: int = 0) -> None:
        self.message = message
        self.line = line
        suffix = f", line: {line}" if line else ""
        super().__init__(message + suffix)


class ParameterReader:
    """Reads the ``key=value`` pairs of a parameter file.

    Spaces and tabs are ignored anywhere on a line; a line starting with
    ``;`` is a comment, and ``;`` ends the value of a parameter line.
    """

    def __init__(self, filename: str | os.PathLike, is_system_param: bool = False) -> None:
        self.filename = os.fspath(filename)
        self.is_system_param = is_system_param
        try:
            with open(self.filename, encoding="utf-8", newline="") as stream:
                self._lines = stream.read().split("\n")
        except OSError as exc:
            raise ParameterReaderError(f"Failed to open {self.filename}") from exc
        except UnicodeDecodeError as exc:
            raise ParameterReaderError(f"Failed to read {self.filename}") from exc

    def get_parameter(self) -> list[tuple[str, str]]:
        """Return the ``(key, value)`` pairs in file order."""
        params: list[tuple[str, str]] = []
        for number, line in enumerate(self._lines):
            if not line:
                continue
            for blank in _BLANKS:
                line = line.replace(blank, "")
            if line.startswith(_COMMENT):
                continue
            if line.count(_EQUAL) != 1:
                raise ParameterReaderError(f"{self.filename} has invalid parameter", number)
            key, _, rest = line.partition(_EQUAL)
            value = rest.split(_COMMENT, 1)[0]
            if not key or not value:
                raise ParameterReaderError("Cannot parse parameter", number)
            params.append((key, value))
        return params


def read_parameters(filename: str | os.PathLike) -> list[tuple[str, str]]:
    """Read every ``(key, value)`` pair from a parameter file."""
    return ParameterReader(filename).get_parameter()