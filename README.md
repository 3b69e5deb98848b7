# pimsim

Building blocks for simulating a DRAM device with processing-in-memory (PIM)
units. The package has no dependencies beyond the standard library.

## Modules

- `pimsim.npy`: the `.npy` array file format. `save_array(filename, dtype,
  shape, data, fortran_order=False)` writes a flat sequence of values and
  `load_array(filename, dtype)` returns `(shape, flat_data)`, raising
  `NpyFormatError` when the file is malformed or its type string does not match
  the requested dtype. Supported dtype names are `float16`, `float32`,
  `float64`, `int8`, `int16`, `int32`, `int64`, `uint8`, `uint16`, `uint32`,
  `uint64`, `complex64` and `complex128`. Note that `uint16` data is written
  with a float type string (`<f2` on little-endian hosts), since it is used to
  carry raw fp16 bit patterns. The header helpers (`write_header`,
  `read_header`, `parse_header`, `parse_dict`, `parse_tuple`, ...) are public
  too.
- `pimsim.pim_cmd`: the 32-bit PIM instruction set. `PIMCmd` holds one
  instruction (`PIMCmdType` opcode, `PIMOpdType` operands, indices, flags),
  encodes it with `to_int`, decodes it with `PIMCmd.from_int`, and renders
  assembly text with `to_str` (also `str()`). Encoding a `MOV` or `FILL` from a
  register file straight into a bank raises `InvalidCommandError`. Two commands
  compare equal when they encode to the same word.
- `pimsim.burst`: `BurstType`, 32 bytes viewable through the `u8`, `u16`,
  `u32`, `u64`, `fp16`, `fp32` and `pairs` properties and built with
  `from_fp16`, `from_fp32`, `from_u16`, `from_u32`, `from_u64`, `from_pairs`
  or `random`. It offers fp16 lane-wise `+` and `*`, reductions
  (`fp16_reduce_sum`, `fp16_adder_tree`, `fp32_reduce_sum`) and hex/binary
  text views. `KVPair` is a key/value pair of 32-bit integers. `NumpyBurst`
  loads `.npy` files into lists of bursts (`load_fp16`, `load_fp16_from_fp32`,
  `load_fp32`, `load_int32`, `load_int64`, `load_pairs`) and dumps them with
  `dump_fp16` and `dump_int8`.
- `pimsim.parameter_reader`: `ParameterReader` and `read_parameters` read
  `KEY=value` files, ignoring spaces and tabs, treating `;` as a comment
  marker, and raising `ParameterReaderError` on malformed lines.
- `pimsim.config_db`: `ConfigurationDB`, a store of `ConfigurationData`
  entries by name, and `get_db()`, which returns the process-wide store.
  `update_from_file` and `update_values` only change parameters the store
  already knows; new parameters are added with `update` or `initialize`.
- `pimsim.system_config`: `get_config_param` and `set_config_param` read and
  write typed values (`VarType`), and `get_row_buffer_policy`,
  `get_scheduling_policy`, `get_address_mapping_scheme`,
  `get_queueing_structure`, `get_pim_mode`, `get_pim_precision` and
  `get_pim_data_length` turn string parameters into enums, raising
  `ValueError` on unknown values. Each takes an optional store and falls back
  to the shared one.
- `pimsim.configuration`: `Configuration.from_db` builds a typed set of timing,
  geometry, policy and debug settings, with derived delays such as
  `read_to_pre_delay` and `write_to_read_delay_r`. Zero channels is rejected.
- `pimsim.transaction`: `Transaction`, with `bus_packet_type()` mapping reads
  and writes to `BusPacketType` under the open-page policy.
- `pimsim.simulator`: `SimulatorObject`, an abstract clocked object with
  `step()` and `update()`.
- `pimsim.output`: `OutputSettings`, the output and debug flags, with `emit`
  and `emit_if` writing to standard output or to a log stream.
- `pimsim.csv_writer`: `CSVWriter`, which takes field names from the first row
  given with `<<` and writes one line of values per `finalize()`, and
  `IndexedName` for names such as `bandwidth[0][1]`.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Example

```python
from pimsim.pim_cmd import PIMCmd, PIMCmdType, PIMOpdType
from pimsim.burst import BurstType

cmd = PIMCmd(PIMCmdType.MAC, dst=PIMOpdType.GRF_B, src0=PIMOpdType.EVEN_BANK,
             src1=PIMOpdType.GRF_A, is_auto=1)
word = cmd.to_int()
assert PIMCmd.from_int(word) == cmd
print(cmd.to_str())  # MAC GRF_B[0], EVEN_BANK, GRF_A[0], auto

burst = BurstType.from_fp32([1.0] * 8)
print(burst.fp32_reduce_sum())  # 8.0
```

Configuration values are declared in a store and can then be overridden from a
file of `KEY=value` lines:

```python
from pimsim.config_db import ConfigurationDB, ParamType, VarType
from pimsim.system_config import get_config_param, set_config_param

db = ConfigurationDB()
set_config_param(VarType.UINT, "NUM_BANKS", 16, ParamType.DEV_PARAM, db)
db.update_from_file("device.ini")  # changes NUM_BANKS if the file sets it
print(get_config_param(VarType.UINT, "NUM_BANKS", db))
```

## What it does not do

The package provides the pieces listed above, not a running simulator. It has
no memory controller, no bank, rank or PIM-block models that execute PIM
commands cycle by cycle, no address mapping, no trace-driven runner and no
command-line program. `Configuration` accepts an `addr_mapping` object but
does not use it.