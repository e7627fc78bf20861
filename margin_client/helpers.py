"""Position identifiers and interest-rate unit conversion. No I/O."""
from __future__ import annotations

from decimal import ROUND_DOWN, Decimal
from typing import Union

from eth_abi.packed import encode_packed
from eth_utils import encode_hex, keccak, to_checksum_address

# Interest rates travel on-chain as fixed-point integers with this scale.
INTEREST_RATE_SCALE = 10_000_000

Number = Union[Decimal, int, float, str]


def _to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() first so 0.1 stays 0.1 instead of its binary expansion
    return Decimal(str(value))


def get_position_id(trader: str, nonce: int) -> str:
    """Derive a position id the same way the contract does.

    keccak256(abi.encodePacked(address trader, uint256 nonce))
    """
    packed = encode_packed(
        ["address", "uint256"], [to_checksum_address(trader), int(nonce)]
    )
    return encode_hex(keccak(packed))


def convert_interest_rate_to_protocol(interest_rate: Number) -> int:
    """Scale a human interest rate up and truncate toward zero."""
    scaled = _to_decimal(interest_rate) * INTEREST_RATE_SCALE
    return int(scaled.to_integral_value(rounding=ROUND_DOWN))


def convert_interest_rate_from_protocol(interest_rate: Number) -> int:
    """Scale an on-chain interest rate down and truncate toward zero."""
    scaled = _to_decimal(interest_rate) / INTEREST_RATE_SCALE
    return int(scaled.to_integral_value(rounding=ROUND_DOWN))
