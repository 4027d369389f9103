"""Domain models for sm_ledger: pure dataclasses."""

from dataclasses import dataclass


@dataclass(frozen=True)
class TransferRecord:
    transfer_type: str   # TransferType value
    from_address: str
    to_address: str
    amount: int          # base units, always positive
