"""An in-memory store of named configuration parameters."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from enum import IntEnum
from itertools import takewhile
from typing import Iterable, TextIO

from .parameter_reader import ParameterReader


class VarType(IntEnum):
    """The type a parameter's text value is read as."""

    STRING = 0
    UINT = 1
    UINT64 = 2
    FLOAT = 3
    BOOL = 4


class ParamType(IntEnum):
    """Whether a parameter describes the system or the device."""

    SYS_PARAM = 0
    DEV_PARAM = 1


@dataclass(frozen=True)
class ConfigurationData:
    """One named parameter with its type, kind and text value."""

    name: str
    var_type: VarType
    param_type: ParamType
    value: str


class ConfigurationDB:
    """Parameters keyed by name."""

    def __init__(self) -> None:
        self._entries: dict[str, ConfigurationData] = {}

    def clear(self) -> None:
        self._entries.clear()

    def initialize(self, config: Iterable[ConfigurationData] | None = None) -> None:
        """Replace the contents with ``config``, stopping at an entry with no name."""
        self.clear()
        if config is None:
            return
        for entry in takewhile(lambda e: e.name, config):
            self.update(entry)

    def find(self, key: str) -> ConfigurationData | None:
        return self._entries.get(key)

    def update(self, config: ConfigurationData) -> None:
        """Insert the parameter, or replace the one of the same name."""
        self._entries[config.name] = config

    def update_values(self, params: Iterable[tuple[str, str]] | None) -> None:
        """Set the values of parameters that are already known; others are ignored."""
        if params is None:
            return
        for key, value in params:
            entry = self._entries.get(key)
            if entry is not None:
                self._entries[key] = replace(entry, value=value)

    def update_from_file(self, filename: str | os.PathLike) -> None:
        self.update_values(ParameterReader(filename).get_parameter())

    def dump(self, out: TextIO) -> None:
        """Write the system values, then the device values, as section blocks."""
        out.write("!!SYSTEM INI PARAMETER\n")
        for entry in self._entries.values():
            if entry.param_type == ParamType.SYS_PARAM:
                out.write(f"{entry.value}\n")
        out.write("!!DEVICE INI PARAMETER\n")
        for entry in self._entries.values():
            if entry.param_type == ParamType.DEV_PARAM:
                out.write(f"{entry.value}\n")
        out.write("!!EPOCH_DATA\n")

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries


_SHARED_DB = ConfigurationDB()


def get_db() -> ConfigurationDB:
    """Return the process-wide configuration store."""
    return _SHARED_DB