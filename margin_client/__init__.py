"""Client for an on-chain margin trading protocol."""
from .exceptions import DecodingError, MarginClientError, RemoteRejectionError
from .helpers import (
    INTEREST_RATE_SCALE,
    convert_interest_rate_from_protocol,
    convert_interest_rate_to_protocol,
    get_position_id,
)
from .models import (
    ContractCallOptions,
    EventLog,
    LoanOffering,
    Position,
    PositionClosedEvent,
    TransactionReceipt,
)
from .protocols.margin import Margin

__all__ = [
    "INTEREST_RATE_SCALE",
    "ContractCallOptions",
    "DecodingError",
    "EventLog",
    "LoanOffering",
    "Margin",
    "MarginClientError",
    "Position",
    "PositionClosedEvent",
    "RemoteRejectionError",
    "TransactionReceipt",
    "convert_interest_rate_from_protocol",
    "convert_interest_rate_to_protocol",
    "get_position_id",
]
