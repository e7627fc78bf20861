"""Margin contract facade with one coroutine per contract operation."""
from __future__ import annotations

import asyncio
import dataclasses
import logging
from typing import Any

from ...chains.evm.client import EvmClient
from ...chains.evm.contract import Contract
from ...config import AppConfig
from ...helpers import Number, convert_interest_rate_to_protocol
from ...helpers import get_position_id as _get_position_id
from ...models import (
    ContractCallOptions,
    EventLog,
    LoanOffering,
    Position,
    PositionClosedEvent,
    TransactionReceipt,
)
from . import parser
from .abi import MARGIN_EVENTS, MARGIN_FUNCTIONS

logger = logging.getLogger(__name__)


class Margin:
    """Encode and submit Margin contract calls and decode its state.

    Business rules are enforced by the contract; nothing is validated here
    and every rejection from the node is raised to the caller as-is.
    """

    def __init__(self, contract: Contract) -> None:
        self._contract = contract

    @classmethod
    def from_config(cls, config: AppConfig) -> Margin:
        """Bind a Margin facade to the contract and chain named in ``config``."""
        client = EvmClient(config.margin_chain)
        contract = Contract(
            client,
            config.margin.address,
            MARGIN_FUNCTIONS,
            MARGIN_EVENTS,
            default_options=config.margin.default_options(),
        )
        return cls(contract)

    @staticmethod
    def _caller(options: ContractCallOptions | None, sender: str) -> dict[str, Any]:
        options = dict(options or {})
        supplied = options.get("from")
        if supplied is not None and supplied != sender:
            logger.debug("Ignoring 'from' option %s; sending from %s", supplied, sender)
        return {**options, "from": sender}

    # ------------------------------------------------------------------
    # State changing
    # ------------------------------------------------------------------

    async def open_position(
        self,
        loan_offering: LoanOffering,
        trader: str,
        owner: str,
        principal: int,
        deposit_amount: int,
        nonce: int,
        deposit_in_held_token: bool,
        exchange_wrapper: str,
        order_data: str,
        options: ContractCallOptions | None = None,
    ) -> TransactionReceipt:
        position_id = self.get_position_id(trader, nonce)
        groups = parser.format_open_position(
            loan_offering, owner, principal, deposit_amount, nonce, exchange_wrapper
        ).to_groups()

        if not loan_offering.is_signed:
            logger.debug("Opening %s against an unsigned loan offering", position_id)

        receipt = await self._contract.transact(
            "openPosition",
            self._caller(options, trader),
            groups.addresses,
            groups.values256,
            groups.values32,
            loan_offering.signature,
            deposit_in_held_token,
            order_data,
        )
        logger.info("Opened position %s", position_id)
        return dataclasses.replace(receipt, id=position_id)

    async def open_without_counterparty(
        self,
        trader: str,
        position_owner: str,
        loan_owner: str,
        owed_token: str,
        held_token: str,
        nonce: int,
        deposit: int,
        principal: int,
        call_time_limit: int,
        max_duration: int,
        interest_rate: Number,
        interest_period: int,
        options: ContractCallOptions | None = None,
    ) -> TransactionReceipt:
        position_id = self.get_position_id(trader, nonce)
        groups = parser.OpenWithoutCounterpartyArguments(
            position_owner=position_owner,
            owed_token=owed_token,
            held_token=held_token,
            loan_owner=loan_owner,
            principal=principal,
            deposit=deposit,
            nonce=nonce,
            call_time_limit=call_time_limit,
            max_duration=max_duration,
            interest_rate=convert_interest_rate_to_protocol(interest_rate),
            interest_period=interest_period,
        ).to_groups()

        receipt = await self._contract.transact(
            "openWithoutCounterparty",
            self._caller(options, trader),
            groups.addresses,
            groups.values256,
            groups.values32,
        )
        logger.info("Opened position %s without counterparty", position_id)
        return dataclasses.replace(receipt, id=position_id)

    async def increase_position(
        self,
        position_id: str,
        loan_offering: LoanOffering,
        trader: str,
        principal: int,
        deposit_in_held_token: bool,
        exchange_wrapper: str,
        order_data: str,
        options: ContractCallOptions | None = None,
    ) -> TransactionReceipt:
        groups = parser.format_increase_position(
            loan_offering, principal, exchange_wrapper
        ).to_groups()

        if not loan_offering.is_signed:
            logger.debug("Increasing %s against an unsigned loan offering", position_id)

        return await self._contract.transact(
            "increasePosition",
            self._caller(options, trader),
            position_id,
            groups.addresses,
            groups.values256,
            groups.values32,
            deposit_in_held_token,
            loan_offering.signature,
            order_data,
        )

    async def increase_without_counterparty(
        self,
        position_id: str,
        principal_to_add: int,
        sender: str,
        options: ContractCallOptions | None = None,
    ) -> TransactionReceipt:
        return await self._contract.transact(
            "increaseWithoutCounterparty",
            self._caller(options, sender),
            position_id,
            principal_to_add,
        )

    async def close_position(
        self,
        position_id: str,
        closer: str,
        payout_recipient: str,
        close_amount: int,
        payout_in_held_token: bool,
        exchange_wrapper: str,
        order_data: str,
        options: ContractCallOptions | None = None,
    ) -> TransactionReceipt:
        return await self._contract.transact(
            "closePosition",
            self._caller(options, closer),
            position_id,
            close_amount,
            payout_recipient,
            exchange_wrapper,
            payout_in_held_token,
            order_data,
        )

    async def close_position_directly(
        self,
        position_id: str,
        closer: str,
        payout_recipient: str,
        close_amount: int,
        options: ContractCallOptions | None = None,
    ) -> TransactionReceipt:
        return await self._contract.transact(
            "closePositionDirectly",
            self._caller(options, closer),
            position_id,
            close_amount,
            payout_recipient,
        )

    async def close_position_without_counterparty(
        self,
        position_id: str,
        closer: str,
        payout_recipient: str,
        close_amount: int,
        options: ContractCallOptions | None = None,
    ) -> TransactionReceipt:
        return await self._contract.transact(
            "closeWithoutCounterparty",
            self._caller(options, closer),
            position_id,
            close_amount,
            payout_recipient,
        )

    async def cancel_loan_offer(
        self,
        loan_offering: LoanOffering,
        cancel_amount: int,
        sender: str,
        options: ContractCallOptions | None = None,
    ) -> TransactionReceipt:
        groups = parser.format_loan_offering(loan_offering).to_groups()

        return await self._contract.transact(
            "cancelLoanOffering",
            self._caller(options, sender),
            groups.addresses,
            groups.values256,
            groups.values32,
            cancel_amount,
        )

    async def margin_call(
        self,
        position_id: str,
        required_deposit: int,
        sender: str,
        options: ContractCallOptions | None = None,
    ) -> TransactionReceipt:
        return await self._contract.transact(
            "marginCall", self._caller(options, sender), position_id, required_deposit
        )

    async def cancel_margin_call(
        self,
        position_id: str,
        sender: str,
        options: ContractCallOptions | None = None,
    ) -> TransactionReceipt:
        return await self._contract.transact(
            "cancelMarginCall", self._caller(options, sender), position_id
        )

    async def force_recover_collateral(
        self,
        position_id: str,
        collateral_recipient: str,
        sender: str,
        options: ContractCallOptions | None = None,
    ) -> TransactionReceipt:
        return await self._contract.transact(
            "forceRecoverCollateral",
            self._caller(options, sender),
            position_id,
            collateral_recipient,
        )

    async def deposit_collateral(
        self,
        position_id: str,
        deposit_amount: int,
        sender: str,
        options: ContractCallOptions | None = None,
    ) -> TransactionReceipt:
        return await self._contract.transact(
            "depositCollateral",
            self._caller(options, sender),
            position_id,
            deposit_amount,
        )

    async def transfer_loan(
        self,
        position_id: str,
        to: str,
        sender: str,
        options: ContractCallOptions | None = None,
    ) -> TransactionReceipt:
        return await self._contract.transact(
            "transferLoan", self._caller(options, sender), position_id, to
        )

    async def transfer_position(
        self,
        position_id: str,
        to: str,
        sender: str,
        options: ContractCallOptions | None = None,
    ) -> TransactionReceipt:
        return await self._contract.transact(
            "transferPosition", self._caller(options, sender), position_id, to
        )

    # ------------------------------------------------------------------
    # Constant
    # ------------------------------------------------------------------

    async def get_position(self, position_id: str) -> Position:
        raw = await self._contract.call("getPosition", position_id)
        return parser.parse_position(raw, position_id)

    async def contains_position(self, position_id: str) -> bool:
        return await self._contract.call("containsPosition", position_id)

    async def is_position_called(self, position_id: str) -> bool:
        return await self._contract.call("isPositionCalled", position_id)

    async def is_position_closed(self, position_id: str) -> bool:
        return await self._contract.call("isPositionClosed", position_id)

    async def get_total_owed_token_repaid_to_lender(self, position_id: str) -> int:
        return await self._contract.call("getTotalOwedTokenRepaidToLender", position_id)

    async def get_position_balance(self, position_id: str) -> int:
        return await self._contract.call("getPositionBalance", position_id)

    async def get_time_until_interest_increase(self, position_id: str) -> int:
        return await self._contract.call("getTimeUntilInterestIncrease", position_id)

    async def get_position_owed_amount(self, position_id: str) -> int:
        return await self._contract.call("getPositionOwedAmount", position_id)

    async def get_position_owed_amount_at_time(
        self, position_id: str, principal_to_close: int, timestamp: int
    ) -> int:
        """Amount owed to close ``principal_to_close`` at ``timestamp`` (seconds)."""
        return await self._contract.call(
            "getPositionOwedAmountAtTime", position_id, principal_to_close, timestamp
        )

    async def get_lender_amount_for_increase_position_at_time(
        self, position_id: str, principal_to_add: int, timestamp: int
    ) -> int:
        """Owed-token amount the lender must supply to add ``principal_to_add``."""
        return await self._contract.call(
            "getLenderAmountForIncreasePositionAtTime",
            position_id,
            principal_to_add,
            timestamp,
        )

    async def get_loan_unavailable_amount(self, loan_hash: str) -> int:
        return await self._contract.call("getLoanUnavailableAmount", loan_hash)

    async def get_loan_filled_amount(self, loan_hash: str) -> int:
        return await self._contract.call("getLoanFilledAmount", loan_hash)

    async def get_loan_canceled_amount(self, loan_hash: str) -> int:
        return await self._contract.call("getLoanCanceledAmount", loan_hash)

    async def get_loan_number(self, loan_hash: str) -> int:
        return await self._contract.call("getLoanNumber", loan_hash)

    async def is_loan_approved(self, loan_hash: str) -> bool:
        return await self._contract.call("isLoanApproved", loan_hash)

    async def get_all_position_opened_events(self, position_id: str) -> list[EventLog]:
        """All PositionOpened events for ``position_id`` from block 0 to latest."""
        return await self._contract.get_events(
            "PositionOpened", {"positionId": position_id}, 0, "latest"
        )

    async def get_all_position_closed_events(
        self, position_id: str
    ) -> list[PositionClosedEvent]:
        """All PositionClosed events for ``position_id``, with block timestamps."""
        events = await self._contract.get_events(
            "PositionClosed", {"positionId": position_id}, 0, "latest"
        )
        timestamps = await asyncio.gather(
            *(self._contract.get_block_timestamp(e.block_number) for e in events)
        )
        return parser.join_block_timestamps(events, timestamps)

    # ------------------------------------------------------------------
    # Utility
    # ------------------------------------------------------------------

    def get_address(self) -> str:
        return self._contract.address

    def get_position_id(self, trader: str, nonce: int) -> str:
        return _get_position_id(trader, nonce)
