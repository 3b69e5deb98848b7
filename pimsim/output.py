"""Simulator console and log output controlled by configuration flags."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import TextIO

from .config_db import ConfigurationDB, VarType, get_db
from .system_config import get_config_param


class Color(str, Enum):
    """ANSI colour escape sequences used to tag trace lines."""

    L_BLUE = "\x1b[94m"
    GREEN = "\x1b[32m"
    RED = "\x1b[31m"
    BLUE = "\x1b[0;34m"
    MAGENTA = "\x1b[0;35m"
    CYAN = "\x1b[0;36m"
    GRAY = "\x1b[90m"
    END = "\x1b[0m"


_BOOL_FLAGS = {
    "show_sim_output": "SHOW_SIM_OUTPUT",
    "log_output": "LOG_OUTPUT",
    "debug_trans_q": "DEBUG_TRANS_Q",
    "debug_cmd_q": "DEBUG_CMD_Q",
    "debug_addr_map": "DEBUG_ADDR_MAP",
    "debug_bankstate": "DEBUG_BANKSTATE",
    "debug_bus": "DEBUG_BUS",
    "debug_banks": "DEBUG_BANKS",
    "debug_power": "DEBUG_POWER",
    "debug_cmd_trace": "DEBUG_CMD_TRACE",
    "debug_pim_time": "DEBUG_PIM_TIME",
    "debug_pim_block": "DEBUG_PIM_BLOCK",
    "use_low_power": "USE_LOW_POWER",
    "vis_file_output": "VIS_FILE_OUTPUT",
    "print_chan_stat": "PRINT_CHAN_STAT",
    "verification_output": "VERIFICATION_OUTPUT",
}


@dataclass
class OutputSettings:
    """Output and debug flags, and the streams that messages go to.

    Messages are shown only when ``show_sim_output`` is set; they go to
    ``log`` when ``log_output`` is set and to ``stdout`` otherwise.
    """

    show_sim_output: bool = False
    log_output: bool = False
    debug_trans_q: bool = False
    debug_cmd_q: bool = False
    debug_addr_map: bool = False
    debug_bankstate: bool = False
    debug_bus: bool = False
    debug_banks: bool = False
    debug_power: bool = False
    debug_cmd_trace: bool = False
    debug_pim_time: bool = False
    debug_pim_block: bool = False
    use_low_power: bool = False
    vis_file_output: bool = False
    print_chan_stat: bool = False
    verification_output: bool = False
    sim_trace_file: str = ""
    log: TextIO | None = field(default=None, repr=False, compare=False)
    stdout: TextIO | None = field(default=None, repr=False, compare=False)

    @classmethod
    def from_db(cls, db: ConfigurationDB | None = None) -> OutputSettings:
        """Read the flags from the store (the shared one by default).

        The ``log`` and ``stdout`` streams are left unset; assign them afterwards.
        """
        db = db if db is not None else get_db()
        flags = {attr: get_config_param(VarType.BOOL, key, db) for attr, key in _BOOL_FLAGS.items()}
        entry = db.find("SIM_TRACE_FILE")
        trace_file = entry.value if entry is not None else ""
        return cls(**flags, sim_trace_file=trace_file)

    def _stream(self) -> TextIO:
        if self.log_output:
            if self.log is None:
                raise ValueError("log output is enabled but no log stream is set")
            return self.log
        return self.stdout if self.stdout is not None else sys.stdout

    def emit(self, message: object, color: Color | None = None, newline: bool = True) -> None:
        """Write a message if simulator output is enabled.

        ``color`` names the trace category; the text itself is written plain.
        """
        if not self.show_sim_output:
            return
        self._stream().write(f"{message}\n" if newline else f"{message}")

    def emit_if(self, cond: bool, message: object, newline: bool = True) -> None:
        """Write a message only if ``cond`` holds and output is enabled."""
        if cond:
            self.emit(message, newline=newline)