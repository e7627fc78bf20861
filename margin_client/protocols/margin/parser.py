"""Pure marshaling and decoding for the Margin contract. No I/O.

Each operation that takes grouped arguments has a frozen dataclass whose
fields are declared in wire order and tagged with their group.
``to_groups()`` serializes them into the fixed-size addresses / uint256 /
uint32 arrays the contract expects.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Sequence

from ...exceptions import DecodingError
from ...helpers import (
    convert_interest_rate_from_protocol,
    convert_interest_rate_to_protocol,
)
from ...models import EventLog, LoanOffering, Position, PositionClosedEvent

ADDRESSES = "addresses"
VALUES256 = "values256"
VALUES32 = "values32"


def _address() -> Any:
    return field(metadata={"group": ADDRESSES})


def _uint256() -> Any:
    return field(metadata={"group": VALUES256})


def _uint32() -> Any:
    return field(metadata={"group": VALUES32})


@dataclass(frozen=True)
class ArgumentGroups:
    addresses: tuple[str, ...]
    values256: tuple[int, ...]
    values32: tuple[int, ...]


@dataclass(frozen=True)
class GroupedArguments:
    """Base class for group-tagged argument records."""

    def to_groups(self) -> ArgumentGroups:
        groups: dict[str, list[Any]] = {ADDRESSES: [], VALUES256: [], VALUES32: []}
        for f in fields(self):
            groups[f.metadata["group"]].append(getattr(self, f.name))
        return ArgumentGroups(
            addresses=tuple(groups[ADDRESSES]),
            values256=tuple(groups[VALUES256]),
            values32=tuple(groups[VALUES32]),
        )


@dataclass(frozen=True)
class OpenPositionArguments(GroupedArguments):
    owner: str = _address()
    owed_token: str = _address()
    held_token: str = _address()
    payer: str = _address()
    loan_owner: str = _address()
    taker: str = _address()
    position_owner: str = _address()
    fee_recipient: str = _address()
    lender_fee_token: str = _address()
    taker_fee_token: str = _address()
    exchange_wrapper: str = _address()
    max_amount: int = _uint256()
    min_amount: int = _uint256()
    min_held_token: int = _uint256()
    lender_fee: int = _uint256()
    taker_fee: int = _uint256()
    expiration_timestamp: int = _uint256()
    salt: int = _uint256()
    principal: int = _uint256()
    deposit_amount: int = _uint256()
    nonce: int = _uint256()
    call_time_limit: int = _uint32()
    max_duration: int = _uint32()
    interest_rate: int = _uint32()
    interest_period: int = _uint32()


@dataclass(frozen=True)
class OpenWithoutCounterpartyArguments(GroupedArguments):
    position_owner: str = _address()
    owed_token: str = _address()
    held_token: str = _address()
    loan_owner: str = _address()
    principal: int = _uint256()
    deposit: int = _uint256()
    nonce: int = _uint256()
    call_time_limit: int = _uint32()
    max_duration: int = _uint32()
    interest_rate: int = _uint32()
    interest_period: int = _uint32()


@dataclass(frozen=True)
class IncreasePositionArguments(GroupedArguments):
    payer: str = _address()
    taker: str = _address()
    position_owner: str = _address()
    fee_recipient: str = _address()
    lender_fee_token: str = _address()
    taker_fee_token: str = _address()
    exchange_wrapper: str = _address()
    max_amount: int = _uint256()
    min_amount: int = _uint256()
    min_held_token: int = _uint256()
    lender_fee: int = _uint256()
    taker_fee: int = _uint256()
    expiration_timestamp: int = _uint256()
    salt: int = _uint256()
    principal: int = _uint256()
    call_time_limit: int = _uint32()
    max_duration: int = _uint32()


@dataclass(frozen=True)
class LoanOfferingArguments(GroupedArguments):
    owed_token: str = _address()
    held_token: str = _address()
    payer: str = _address()
    owner: str = _address()
    taker: str = _address()
    position_owner: str = _address()
    fee_recipient: str = _address()
    lender_fee_token: str = _address()
    taker_fee_token: str = _address()
    max_amount: int = _uint256()
    min_amount: int = _uint256()
    min_held_token: int = _uint256()
    lender_fee: int = _uint256()
    taker_fee: int = _uint256()
    expiration_timestamp: int = _uint256()
    salt: int = _uint256()
    call_time_limit: int = _uint32()
    max_duration: int = _uint32()
    interest_rate: int = _uint32()
    interest_period: int = _uint32()


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def format_open_position(
    loan_offering: LoanOffering,
    owner: str,
    principal: int,
    deposit_amount: int,
    nonce: int,
    exchange_wrapper: str,
) -> OpenPositionArguments:
    return OpenPositionArguments(
        owner=owner,
        owed_token=loan_offering.owed_token,
        held_token=loan_offering.held_token,
        payer=loan_offering.payer,
        loan_owner=loan_offering.owner,
        taker=loan_offering.taker,
        position_owner=loan_offering.position_owner,
        fee_recipient=loan_offering.fee_recipient,
        lender_fee_token=loan_offering.lender_fee_token_address,
        taker_fee_token=loan_offering.taker_fee_token_address,
        exchange_wrapper=exchange_wrapper,
        max_amount=loan_offering.max_amount,
        min_amount=loan_offering.min_amount,
        min_held_token=loan_offering.min_held_token,
        lender_fee=loan_offering.lender_fee,
        taker_fee=loan_offering.taker_fee,
        expiration_timestamp=loan_offering.expiration_timestamp,
        salt=loan_offering.salt,
        principal=principal,
        deposit_amount=deposit_amount,
        nonce=nonce,
        call_time_limit=loan_offering.call_time_limit,
        max_duration=loan_offering.max_duration,
        interest_rate=convert_interest_rate_to_protocol(loan_offering.interest_rate),
        interest_period=loan_offering.interest_period,
    )


def format_increase_position(
    loan_offering: LoanOffering, principal: int, exchange_wrapper: str
) -> IncreasePositionArguments:
    return IncreasePositionArguments(
        payer=loan_offering.payer,
        taker=loan_offering.taker,
        position_owner=loan_offering.position_owner,
        fee_recipient=loan_offering.fee_recipient,
        lender_fee_token=loan_offering.lender_fee_token_address,
        taker_fee_token=loan_offering.taker_fee_token_address,
        exchange_wrapper=exchange_wrapper,
        max_amount=loan_offering.max_amount,
        min_amount=loan_offering.min_amount,
        min_held_token=loan_offering.min_held_token,
        lender_fee=loan_offering.lender_fee,
        taker_fee=loan_offering.taker_fee,
        expiration_timestamp=loan_offering.expiration_timestamp,
        salt=loan_offering.salt,
        principal=principal,
        call_time_limit=loan_offering.call_time_limit,
        max_duration=loan_offering.max_duration,
    )


def format_loan_offering(loan_offering: LoanOffering) -> LoanOfferingArguments:
    return LoanOfferingArguments(
        owed_token=loan_offering.owed_token,
        held_token=loan_offering.held_token,
        payer=loan_offering.payer,
        owner=loan_offering.owner,
        taker=loan_offering.taker,
        position_owner=loan_offering.position_owner,
        fee_recipient=loan_offering.fee_recipient,
        lender_fee_token=loan_offering.lender_fee_token_address,
        taker_fee_token=loan_offering.taker_fee_token_address,
        max_amount=loan_offering.max_amount,
        min_amount=loan_offering.min_amount,
        min_held_token=loan_offering.min_held_token,
        lender_fee=loan_offering.lender_fee,
        taker_fee=loan_offering.taker_fee,
        expiration_timestamp=loan_offering.expiration_timestamp,
        salt=loan_offering.salt,
        call_time_limit=loan_offering.call_time_limit,
        max_duration=loan_offering.max_duration,
        interest_rate=convert_interest_rate_to_protocol(loan_offering.interest_rate),
        interest_period=loan_offering.interest_period,
    )


# ---------------------------------------------------------------------------
# Decoders
# ---------------------------------------------------------------------------


def _group(raw: Sequence[Any], index: int, size: int, label: str) -> Sequence[Any]:
    group = raw[index]
    if not isinstance(group, (list, tuple)) or len(group) != size:
        raise DecodingError(f"Expected {size} {label} in position tuple, got {group!r}")
    return group


def parse_position(raw: Sequence[Any], position_id: str) -> Position:
    """Decode the (addresses, amounts, timing) tuple returned by getPosition."""
    if not isinstance(raw, (list, tuple)) or len(raw) != 3:
        raise DecodingError(f"Expected a 3-tuple for position {position_id}, got {raw!r}")

    owed_token, held_token, lender, owner = _group(raw, 0, 4, "addresses")
    principal, required_deposit = _group(raw, 1, 2, "amounts")
    (
        call_time_limit,
        start_timestamp,
        call_timestamp,
        max_duration,
        interest_rate,
        interest_period,
    ) = _group(raw, 2, 6, "timing values")

    return Position(
        id=position_id,
        owed_token=owed_token,
        held_token=held_token,
        lender=lender,
        owner=owner,
        principal=int(principal),
        required_deposit=int(required_deposit),
        call_time_limit=int(call_time_limit),
        start_timestamp=int(start_timestamp),
        call_timestamp=int(call_timestamp),
        max_duration=int(max_duration),
        interest_rate=convert_interest_rate_from_protocol(interest_rate),
        interest_period=int(interest_period),
    )


def join_block_timestamps(
    events: Sequence[EventLog], timestamps: Sequence[int]
) -> list[PositionClosedEvent]:
    """Pair each event with the timestamp of its block, in order."""
    if len(events) != len(timestamps):
        raise DecodingError(
            f"Got {len(timestamps)} block timestamps for {len(events)} events"
        )
    return [
        PositionClosedEvent(timestamp=timestamp, args=event.args)
        for event, timestamp in zip(events, timestamps)
    ]
