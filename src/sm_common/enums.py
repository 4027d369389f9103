"""Global enums: values double as DB CHECK constraint literals."""

from enum import Enum


class SubmissionStatus(str, Enum):
    PENDING = "PENDING"
    WHITELISTED = "WHITELISTED"
    BANNED = "BANNED"


class MarketEventType(str, Enum):
    SUBMITTED = "SUBMITTED"
    STAKED = "STAKED"
    WHITELISTED = "WHITELISTED"
    BANNED = "BANNED"
    WINNER_PICKED = "WINNER_PICKED"
    CLAIMED = "CLAIMED"
    RESCUE_TRIGGERED = "RESCUE_TRIGGERED"
    RESCUE_WITHDRAWN = "RESCUE_WITHDRAWN"
    ADMIN_TRANSFERRED = "ADMIN_TRANSFERRED"


class TransferType(str, Enum):
    """Direction of a token movement relative to the engine custody account."""
    PULL = "PULL"
    PUSH = "PUSH"


class LedgerBackend(str, Enum):
    MEMORY = "memory"
    SQL = "sql"
