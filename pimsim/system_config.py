"""Typed access to configuration parameters and the policies they select."""

from __future__ import annotations

import re
from enum import IntEnum

from .config_db import ConfigurationData, ConfigurationDB, ParamType, VarType, get_db

_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(
    r"\s*([+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan))",
    re.IGNORECASE,
)

_UINT_MASK = 0xFFFFFFFF
_UINT64_MASK = 0xFFFFFFFFFFFFFFFF


class TraceType(IntEnum):
    K6 = 0
    MASE = 1
    MISC = 2


class AddressMappingScheme(IntEnum):
    SCHEME1 = 1
    SCHEME2 = 2
    SCHEME3 = 3
    SCHEME4 = 4
    SCHEME5 = 5
    SCHEME6 = 6
    SCHEME7 = 7
    SCHEME8 = 8


class RowBufferPolicy(IntEnum):
    OPEN_PAGE = 0
    CLOSE_PAGE = 1


class QueuingStructure(IntEnum):
    PER_RANK = 0
    PER_RANK_PER_BANK = 1


class SchedulingPolicy(IntEnum):
    RANK_THEN_BANK_ROUND_ROBIN = 0
    BANK_THEN_RANK_ROUND_ROBIN = 1


class PIMMode(IntEnum):
    MAC_IN_BANKGROUP = 0
    MAC_IN_BANK = 1


class PIMPrecision(IntEnum):
    FP16 = 0
    INT8 = 1
    FP32 = 2


class DramMode(IntEnum):
    SB = 0
    HAB = 1
    HAB_PIM = 2


class PimBankType(IntEnum):
    EVEN_BANK = 0
    ODD_BANK = 1
    ALL_BANK = 2


def _parse_int(text: str, mask: int) -> int:
    match = _INT_PREFIX.match(text)
    if match is None:
        raise ValueError(f"not an integer: {text!r}")
    return int(match.group(1)) & mask


def _parse_float(text: str) -> float:
    match = _FLOAT_PREFIX.match(text)
    if match is None:
        raise ValueError(f"not a number: {text!r}")
    return float(match.group(1))


def get_config_param(var_type: VarType, key: str, db: ConfigurationDB | None = None):
    """Return the parameter's value read as ``var_type``.

    A missing numeric parameter reads as zero and a missing boolean as false;
    a missing string parameter raises ``KeyError``.
    """
    db = db if db is not None else get_db()
    entry = db.find(key)
    var_type = VarType(var_type)
    if var_type is VarType.STRING:
        if entry is None:
            raise KeyError(key)
        return entry.value
    if var_type is VarType.UINT:
        return _parse_int(entry.value, _UINT_MASK) if entry is not None else 0
    if var_type is VarType.UINT64:
        return _parse_int(entry.value, _UINT64_MASK) if entry is not None else 0
    if var_type is VarType.FLOAT:
        return _parse_float(entry.value) if entry is not None else 0.0
    return entry is not None and entry.value == "true"


def _format_value(var_type: VarType, value) -> str:
    if var_type is VarType.STRING:
        return str(value)
    if var_type is VarType.UINT:
        return str(int(value) & _UINT_MASK)
    if var_type is VarType.UINT64:
        return str(int(value) & _UINT64_MASK)
    if var_type is VarType.FLOAT:
        return f"{float(value):f}"
    return "true" if value else "false"


def set_config_param(
    var_type: VarType,
    key: str,
    value,
    param_type: ParamType,
    db: ConfigurationDB | None = None,
) -> None:
    """Store ``value`` under ``key`` as text of the given type."""
    db = db if db is not None else get_db()
    var_type = VarType(var_type)
    db.update(ConfigurationData(key, var_type, ParamType(param_type), _format_value(var_type, value)))


def _choose(db: ConfigurationDB | None, key: str, choices: dict, what: str):
    param = get_config_param(VarType.STRING, key, db)
    try:
        return choices[param]
    except KeyError:
        raise ValueError(f"Invalid {what}") from None


def get_row_buffer_policy(db: ConfigurationDB | None = None) -> RowBufferPolicy:
    return _choose(
        db,
        "ROW_BUFFER_POLICY",
        {"open_page": RowBufferPolicy.OPEN_PAGE, "close_page": RowBufferPolicy.CLOSE_PAGE},
        "row buffer policy",
    )


def get_scheduling_policy(db: ConfigurationDB | None = None) -> SchedulingPolicy:
    return _choose(
        db,
        "SCHEDULING_POLICY",
        {
            "rank_then_bank_round_robin": SchedulingPolicy.RANK_THEN_BANK_ROUND_ROBIN,
            "bank_then_rank_round_robin": SchedulingPolicy.BANK_THEN_RANK_ROUND_ROBIN,
        },
        "scheduling policy",
    )


def get_address_mapping_scheme(db: ConfigurationDB | None = None) -> AddressMappingScheme:
    """Match ``scheme1`` to ``scheme8``, ignoring case."""
    param = get_config_param(VarType.STRING, "ADDRESS_MAPPING_SCHEME", db).lower()
    for scheme in AddressMappingScheme:
        if param == f"scheme{scheme.value}":
            return scheme
    raise ValueError("Invalid address mapping scheme")


def get_queueing_structure(db: ConfigurationDB | None = None) -> QueuingStructure:
    return _choose(
        db,
        "QUEUING_STRUCTURE",
        {
            "per_rank_per_bank": QueuingStructure.PER_RANK_PER_BANK,
            "per_rank": QueuingStructure.PER_RANK,
        },
        "queueing structure",
    )


def get_pim_mode(db: ConfigurationDB | None = None) -> PIMMode:
    return _choose(
        db,
        "PIM_MODE",
        {"mac_in_bankgroup": PIMMode.MAC_IN_BANKGROUP, "mac_in_bank": PIMMode.MAC_IN_BANK},
        "PIM mode",
    )


def get_pim_precision(db: ConfigurationDB | None = None) -> PIMPrecision:
    return _choose(
        db,
        "PIM_PRECISION",
        {"FP16": PIMPrecision.FP16, "INT8": PIMPrecision.INT8, "FP32": PIMPrecision.FP32},
        "PIM precision",
    )


def get_pim_data_length(db: ConfigurationDB | None = None) -> int:
    """Return the size in bytes of one PIM data element."""
    return _choose(db, "PIM_PRECISION", {"FP16": 2, "INT8": 1, "FP32": 4}, "PIM data length")