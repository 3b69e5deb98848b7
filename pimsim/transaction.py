"""Memory transactions as issued to a memory system."""

from __future__ import annotations

from dataclasses import InitVar, dataclass
from enum import Enum, IntEnum, auto

from .burst import BurstType
from .config_db import ConfigurationDB
from .system_config import RowBufferPolicy, get_row_buffer_policy


class TransactionType(IntEnum):
    DATA_READ = 0
    DATA_WRITE = 1
    RETURN_DATA = 2


class BusPacketType(Enum):
    """Commands that travel on the command and data buses."""

    READ = auto()
    WRITE = auto()
    ACTIVATE = auto()
    PRECHARGE = auto()
    REF = auto()
    DATA = auto()


@dataclass
class Transaction:
    """A read, write or returned-data request at one address."""

    transaction_type: TransactionType
    address: int
    data: BurstType | None = None
    tag: str = ""
    time_added: int = 0
    time_returned: int = 0
    row_buffer_policy: RowBufferPolicy | None = None
    db: InitVar[ConfigurationDB | None] = None

    def __post_init__(self, db: ConfigurationDB | None) -> None:
        if self.row_buffer_policy is None:
            self.row_buffer_policy = get_row_buffer_policy(db)

    def bus_packet_type(self) -> BusPacketType:
        """Return the bus command this transaction turns into."""
        if self.row_buffer_policy is not RowBufferPolicy.OPEN_PAGE:
            raise ValueError("Unknown row buffer policy")
        if self.transaction_type is TransactionType.DATA_READ:
            return BusPacketType.READ
        if self.transaction_type is TransactionType.DATA_WRITE:
            return BusPacketType.WRITE
        raise ValueError("This transaction type doesn't have a corresponding bus packet type")

    def __str__(self) -> str:
        if self.transaction_type is TransactionType.DATA_READ:
            return f"T [Read] [0x{self.address:x}]\n"
        label = "Write" if self.transaction_type is TransactionType.DATA_WRITE else "Data"
        payload = self.data.fp16_to_str() if self.data is not None else ""
        return f"T [{label}] [0x{self.address:x}] [{payload}]\n"