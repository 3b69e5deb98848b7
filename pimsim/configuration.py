"""The device and system parameters a simulation runs with."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar

from .config_db import ConfigurationDB, VarType
from .system_config import (
    AddressMappingScheme,
    PIMMode,
    PIMPrecision,
    QueuingStructure,
    RowBufferPolicy,
    SchedulingPolicy,
    get_address_mapping_scheme,
    get_config_param,
    get_pim_mode,
    get_pim_precision,
    get_queueing_structure,
    get_row_buffer_policy,
    get_scheduling_policy,
)

_UINT_MASK = 0xFFFFFFFF

_UINT_PARAMS = {
    "al": "AL",
    "bl": "BL",
    "cmd_queue_depth": "CMD_QUEUE_DEPTH",
    "device_width": "DEVICE_WIDTH",
    "epoch_length": "EPOCH_LENGTH",
    "histogram_bin_size": "HISTOGRAM_BIN_SIZE",
    "jedec_data_bus_bits": "JEDEC_DATA_BUS_BITS",
    "num_banks": "NUM_BANKS",
    "num_cols": "NUM_COLS",
    "num_chans": "NUM_CHANS",
    "num_pim_blocks": "NUM_PIM_BLOCKS",
    "num_ranks": "NUM_RANKS",
    "num_rows": "NUM_ROWS",
    "rl": "RL",
    "t_ccdl": "tCCDL",
    "t_ccds": "tCCDS",
    "t_cmd": "tCMD",
    "t_cke": "tCKE",
    "t_ras": "tRAS",
    "t_rc": "tRC",
    "t_rcdrd": "tRCDRD",
    "t_rcdwr": "tRCDWR",
    "t_refi": "tREFI",
    "t_refisb": "tREFISB",
    "t_rfc": "tRFC",
    "t_rp": "tRP",
    "t_rrdl": "tRRDL",
    "t_rrds": "tRRDS",
    "t_rtp": "tRTP",
    "t_rtpl": "tRTPL",
    "t_rtps": "tRTPS",
    "t_rtrs": "tRTRS",
    "t_wr": "tWR",
    "t_wtrl": "tWTRL",
    "t_wtrs": "tWTRS",
    "t_xp": "tXP",
    "total_row_accesses": "TOTAL_ROW_ACCESSES",
    "trans_queue_depth": "TRANS_QUEUE_DEPTH",
    "wl": "WL",
    "xaw": "XAW",
}

_BOOL_PARAMS = {
    "debug_pim_block": "DEBUG_PIM_BLOCK",
    "debug_trans_q": "DEBUG_TRANS_Q",
    "debug_cmd_q": "DEBUG_CMD_Q",
    "debug_addr_map": "DEBUG_ADDR_MAP",
    "debug_bankstate": "DEBUG_BANKSTATE",
    "debug_bus": "DEBUG_BUS",
    "debug_banks": "DEBUG_BANKS",
    "debug_power": "DEBUG_POWER",
    "debug_cmd_trace": "DEBUG_CMD_TRACE",
    "debug_pim_time": "DEBUG_PIM_TIME",
    "print_chan_stat": "PRINT_CHAN_STAT",
    "vis_file_output": "VIS_FILE_OUTPUT",
    "verification_output": "VERIFICATION_OUTPUT",
    "show_sim_output": "SHOW_SIM_OUTPUT",
    "log_output": "LOG_OUTPUT",
}


def _u32(value: int) -> int:
    return value & _UINT_MASK


@dataclass(kw_only=True)
class Configuration:
    """Timing, geometry, policy and output settings of one memory system."""

    PIM_REG_RA: ClassVar[int] = 0x3FFF
    PIM_ABMR_RA: ClassVar[int] = 0x27FF
    PIM_SBMR_RA: ClassVar[int] = 0x2FFF

    addr_mapping: Any

    al: int
    bl: int
    cmd_queue_depth: int
    device_width: int
    epoch_length: int
    histogram_bin_size: int
    jedec_data_bus_bits: int
    num_banks: int
    num_cols: int
    num_chans: int
    num_pim_blocks: int
    num_ranks: int
    num_rows: int
    rl: int
    t_ccdl: int
    t_ccds: int
    t_ck: float
    t_cmd: int
    t_cke: int
    t_ras: int
    t_rc: int
    t_rcdrd: int
    t_rcdwr: int
    t_refi: int
    t_refisb: int
    t_rfc: int
    t_rp: int
    t_rrdl: int
    t_rrds: int
    t_rtp: int
    t_rtpl: int
    t_rtps: int
    t_rtrs: int
    t_wr: int
    t_wtrl: int
    t_wtrs: int
    t_xp: int
    total_row_accesses: int
    trans_queue_depth: int
    wl: int
    xaw: int

    pim_mode: PIMMode
    pim_precision: PIMPrecision
    row_buffer_policy: RowBufferPolicy
    scheduling_policy: SchedulingPolicy
    queuing_structure: QueuingStructure
    address_mapping_scheme: AddressMappingScheme

    debug_pim_block: bool = False
    debug_trans_q: bool = False
    debug_cmd_q: bool = False
    debug_addr_map: bool = False
    debug_bankstate: bool = False
    debug_bus: bool = False
    debug_banks: bool = False
    debug_power: bool = False
    debug_cmd_trace: bool = False
    debug_pim_time: bool = False

    print_chan_stat: bool = False
    vis_file_output: bool = False
    verification_output: bool = False
    show_sim_output: bool = False
    log_output: bool = False
    sim_trace_file: str = ""

    def __post_init__(self) -> None:
        if self.num_chans == 0:
            raise ValueError("Not allowed zero channel")

    @property
    def pim_reg_ra(self) -> int:
        return self.PIM_REG_RA

    @property
    def pim_abmr_ra(self) -> int:
        return self.PIM_ABMR_RA

    @property
    def pim_sbmr_ra(self) -> int:
        return self.PIM_SBMR_RA

    @classmethod
    def from_db(cls, db: ConfigurationDB | None = None, addr_mapping: Any = None) -> Configuration:
        """Read every parameter from the store (the shared one by default)."""
        values: dict[str, Any] = {
            attr: get_config_param(VarType.UINT, key, db) for attr, key in _UINT_PARAMS.items()
        }
        values.update(
            {attr: get_config_param(VarType.BOOL, key, db) for attr, key in _BOOL_PARAMS.items()}
        )
        values["t_ck"] = get_config_param(VarType.FLOAT, "tCK", db)
        values["pim_mode"] = get_pim_mode(db)
        values["pim_precision"] = get_pim_precision(db)
        values["row_buffer_policy"] = get_row_buffer_policy(db)
        values["scheduling_policy"] = get_scheduling_policy(db)
        values["queuing_structure"] = get_queueing_structure(db)
        values["address_mapping_scheme"] = get_address_mapping_scheme(db)
        values["sim_trace_file"] = get_config_param(VarType.STRING, "SIM_TRACE_FILE", db)
        return cls(addr_mapping=addr_mapping, **values)

    @property
    def read_to_pre_delay(self) -> int:
        return _u32(self.al + self.bl // 2 + max(self.t_rtpl, self.t_ccdl) - self.t_ccdl)

    @property
    def read_to_pre_delay_long(self) -> int:
        return self.read_to_pre_delay

    @property
    def read_to_pre_delay_short(self) -> int:
        return _u32(self.al + self.bl // 2 + max(self.t_rtps, self.t_ccds) - self.t_ccds)

    @property
    def write_to_pre_delay(self) -> int:
        return _u32(self.wl + self.bl // 2 + self.t_wr)

    @property
    def read_to_write_delay(self) -> int:
        return _u32(self.rl + self.bl // 2 + self.t_rtrs - self.wl)

    @property
    def read_autopre_delay(self) -> int:
        return _u32(self.al + self.t_rtp + self.t_rp)

    @property
    def write_autopre_delay(self) -> int:
        return _u32(self.wl + self.bl // 2 + self.t_wr + self.t_rp)

    @property
    def write_to_read_delay_b_long(self) -> int:
        """Write-to-read delay between banks of the same bank group."""
        return _u32(self.wl + self.bl // 2 + self.t_wtrl)

    @property
    def write_to_read_delay_b_short(self) -> int:
        """Write-to-read delay between banks of different bank groups."""
        return _u32(self.wl + self.bl // 2 + self.t_wtrs)

    @property
    def write_to_read_delay_r(self) -> int:
        """Write-to-read delay between ranks, never below zero."""
        return max(self.wl + self.bl // 2 + self.t_rtrs - self.rl, 0)