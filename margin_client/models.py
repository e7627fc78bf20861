"""Immutable data models shared by the client and the Margin facade."""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, TypedDict

# Transport options merged into the caller context of a write.
ContractCallOptions = TypedDict(
    "ContractCallOptions",
    {
        "from": str,
        "gas": int,
        "gasPrice": int,
        "value": int,
        "nonce": int,
        "maxFeePerGas": int,
        "maxPriorityFeePerGas": int,
    },
    total=False,
)


@dataclass(frozen=True)
class LoanOffering:
    """A lender's terms, authorized by ``signature`` once signed."""

    owed_token: str
    held_token: str
    payer: str
    owner: str
    taker: str
    position_owner: str
    fee_recipient: str
    lender_fee_token_address: str
    taker_fee_token_address: str
    max_amount: int
    min_amount: int
    min_held_token: int
    lender_fee: int
    taker_fee: int
    expiration_timestamp: int
    salt: int
    call_time_limit: int
    max_duration: int
    interest_rate: Decimal
    interest_period: int
    signature: str = ""

    @property
    def is_signed(self) -> bool:
        return self.signature not in ("", "0x")


@dataclass(frozen=True)
class Position:
    """On-chain position state, with the interest rate in human units."""

    id: str
    owed_token: str
    held_token: str
    lender: str
    owner: str
    principal: int
    required_deposit: int
    call_time_limit: int
    start_timestamp: int
    call_timestamp: int
    max_duration: int
    interest_rate: int
    interest_period: int


@dataclass(frozen=True)
class TransactionReceipt:
    """Mined transaction; ``id`` is set for operations that open a position."""

    transaction_hash: str
    block_number: int
    status: int
    gas_used: int
    logs: tuple[dict[str, Any], ...] = ()
    id: str | None = None


@dataclass(frozen=True)
class EventLog:
    """A decoded contract event."""

    event: str
    block_number: int
    transaction_hash: str
    args: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PositionClosedEvent:
    """A PositionClosed event joined with its block timestamp."""

    timestamp: int
    args: dict[str, Any] = field(default_factory=dict)
