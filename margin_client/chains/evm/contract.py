"""Contract handle binding an address and its ABI signatures to a chain client."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError as AbiDecodingError
from eth_utils import (
    decode_hex,
    encode_hex,
    function_signature_to_4byte_selector,
    keccak,
    to_checksum_address,
    to_hex,
    to_int,
)

from ...exceptions import DecodingError, RemoteRejectionError
from ...interfaces.chain import ChainClient
from ...models import ContractCallOptions, EventLog, TransactionReceipt

logger = logging.getLogger(__name__)

# Option keys that JSON-RPC expects as hex quantities.
_QUANTITY_OPTIONS = frozenset(
    {"gas", "gasPrice", "value", "nonce", "maxFeePerGas", "maxPriorityFeePerGas"}
)


@dataclass(frozen=True)
class FunctionSpec:
    """A contract function: name, positional input types and output types."""

    name: str
    inputs: tuple[str, ...]
    outputs: tuple[str, ...] = ()

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.inputs)})"

    @property
    def selector(self) -> bytes:
        return function_signature_to_4byte_selector(self.signature)


@dataclass(frozen=True)
class EventInput:
    name: str
    type: str
    indexed: bool = False


@dataclass(frozen=True)
class EventSpec:
    """A contract event and its inputs in declaration order."""

    name: str
    inputs: tuple[EventInput, ...]

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(i.type for i in self.inputs)})"

    @property
    def topic(self) -> str:
        return encode_hex(keccak(text=self.signature))

    @property
    def indexed_inputs(self) -> tuple[EventInput, ...]:
        return tuple(i for i in self.inputs if i.indexed)

    @property
    def data_inputs(self) -> tuple[EventInput, ...]:
        return tuple(i for i in self.inputs if not i.indexed)


def coerce_argument(abi_type: str, value: Any) -> Any:
    """Convert a Python value into what eth_abi expects for ``abi_type``.

    Hex strings become bytes for ``bytes``/``bytesN`` and addresses are
    checksummed. Array types are handled element-wise.
    """
    if abi_type.endswith("]"):
        base = abi_type[: abi_type.rindex("[")]
        return [coerce_argument(base, item) for item in value]
    if abi_type == "address":
        return to_checksum_address(value)
    if abi_type.startswith("bytes"):
        if isinstance(value, str):
            return decode_hex(value) if value else b""
        return bytes(value)
    if abi_type.startswith(("uint", "int")):
        return int(value)
    if abi_type == "bool":
        return bool(value)
    return value


def normalize_output(abi_type: str, value: Any) -> Any:
    """Checksum decoded addresses and render bytes as hex strings."""
    if abi_type.endswith("]"):
        base = abi_type[: abi_type.rindex("[")]
        return tuple(normalize_output(base, item) for item in value)
    if abi_type == "address":
        return to_checksum_address(value)
    if isinstance(value, bytes):
        return encode_hex(value)
    return value


def _quantity(value: Any) -> int:
    if isinstance(value, str):
        return to_int(hexstr=value)
    return int(value)


def _to_topic(abi_type: str, value: Any) -> str:
    return encode_hex(encode([abi_type], [coerce_argument(abi_type, value)]))


class Contract:
    """A deployed contract reachable through a chain client."""

    def __init__(
        self,
        client: ChainClient,
        address: str,
        functions: Mapping[str, FunctionSpec],
        events: Mapping[str, EventSpec] | None = None,
        default_options: ContractCallOptions | Mapping[str, Any] | None = None,
    ) -> None:
        self._client = client
        self._address = to_checksum_address(address)
        self._functions = dict(functions)
        self._events = dict(events or {})
        self._default_options = dict(default_options or {})

    @property
    def address(self) -> str:
        return self._address

    def function(self, name: str) -> FunctionSpec:
        try:
            return self._functions[name]
        except KeyError:
            raise ValueError(f"Unknown contract function '{name}'") from None

    def event(self, name: str) -> EventSpec:
        try:
            return self._events[name]
        except KeyError:
            raise ValueError(f"Unknown contract event '{name}'") from None

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------

    def encode_call(self, name: str, *args: Any) -> str:
        """Return the calldata for ``name(*args)`` as a hex string."""
        spec = self.function(name)
        if len(args) != len(spec.inputs):
            raise ValueError(
                f"{spec.signature} takes {len(spec.inputs)} arguments, got {len(args)}"
            )
        values = [coerce_argument(t, v) for t, v in zip(spec.inputs, args)]
        return encode_hex(spec.selector + encode(list(spec.inputs), values))

    def decode_result(self, name: str, data: str) -> Any:
        """Decode the return data of ``name``; a single output is unwrapped."""
        spec = self.function(name)
        try:
            values = decode(list(spec.outputs), decode_hex(data or "0x"))
        except AbiDecodingError as e:
            raise DecodingError(f"Cannot decode {spec.signature} result: {e}") from e
        values = tuple(normalize_output(t, v) for t, v in zip(spec.outputs, values))
        if len(values) == 1:
            return values[0]
        return values

    def build_transaction(
        self, name: str, options: Mapping[str, Any], *args: Any
    ) -> dict[str, Any]:
        """Merge default and caller options into a JSON-RPC transaction object."""
        merged = {**self._default_options, **options}
        transaction: dict[str, Any] = {}
        for key, value in merged.items():
            if value is None:
                continue
            if key in _QUANTITY_OPTIONS and isinstance(value, int):
                value = to_hex(value)
            transaction[key] = value
        transaction["to"] = self._address
        transaction["data"] = self.encode_call(name, *args)
        return transaction

    # ------------------------------------------------------------------
    # Remote calls
    # ------------------------------------------------------------------

    async def call(self, name: str, *args: Any) -> Any:
        """Invoke ``name`` in side-effect-free mode and decode the result."""
        data = await self._client.call(
            {"to": self._address, "data": self.encode_call(name, *args)}
        )
        return self.decode_result(name, data)

    async def transact(
        self, name: str, options: Mapping[str, Any], *args: Any
    ) -> TransactionReceipt:
        """Send ``name(*args)`` as a transaction and wait for it to be mined."""
        transaction = self.build_transaction(name, options, *args)
        logger.info("Sending %s from %s", name, transaction.get("from"))

        raw = await self._client.send_transaction(transaction)
        receipt = TransactionReceipt(
            transaction_hash=raw.get("transactionHash", ""),
            block_number=_quantity(raw.get("blockNumber", 0)),
            status=_quantity(raw.get("status", 1)),
            gas_used=_quantity(raw.get("gasUsed", 0)),
            logs=tuple(raw.get("logs", [])),
        )
        if receipt.status == 0:
            raise RemoteRejectionError(
                f"Transaction {receipt.transaction_hash} reverted",
                transaction_hash=receipt.transaction_hash,
            )
        return receipt

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def build_log_filter(
        self,
        name: str,
        argument_filters: Mapping[str, Any] | None = None,
        from_block: int | str = 0,
        to_block: int | str = "latest",
    ) -> dict[str, Any]:
        """Build an eth_getLogs filter on indexed event arguments."""
        spec = self.event(name)
        argument_filters = dict(argument_filters or {})

        topics: list[str | None] = [spec.topic]
        for item in spec.indexed_inputs:
            value = argument_filters.pop(item.name, None)
            topics.append(None if value is None else _to_topic(item.type, value))
        if argument_filters:
            raise ValueError(
                f"{spec.name} has no indexed arguments {sorted(argument_filters)}"
            )
        while topics[-1] is None:
            topics.pop()

        return {
            "address": self._address,
            "fromBlock": hex(from_block) if isinstance(from_block, int) else from_block,
            "toBlock": hex(to_block) if isinstance(to_block, int) else to_block,
            "topics": topics,
        }

    def decode_log(self, name: str, log: Mapping[str, Any]) -> EventLog:
        """Decode a raw log of event ``name``."""
        spec = self.event(name)
        topics = list(log.get("topics", []))[1:]
        indexed = spec.indexed_inputs
        if len(topics) != len(indexed):
            raise DecodingError(
                f"{spec.name} log has {len(topics)} indexed topics, "
                f"expected {len(indexed)}"
            )

        args: dict[str, Any] = {}
        try:
            for item, topic in zip(indexed, topics):
                (value,) = decode([item.type], decode_hex(topic))
                args[item.name] = normalize_output(item.type, value)
            data_values = decode(
                [i.type for i in spec.data_inputs], decode_hex(log.get("data", "0x"))
            )
        except AbiDecodingError as e:
            raise DecodingError(f"Cannot decode {spec.name} log: {e}") from e
        for item, value in zip(spec.data_inputs, data_values):
            args[item.name] = normalize_output(item.type, value)

        return EventLog(
            event=spec.name,
            block_number=_quantity(log.get("blockNumber", 0)),
            transaction_hash=log.get("transactionHash", ""),
            args=args,
        )

    async def get_events(
        self,
        name: str,
        argument_filters: Mapping[str, Any] | None = None,
        from_block: int | str = 0,
        to_block: int | str = "latest",
    ) -> list[EventLog]:
        """Fetch and decode every matching event in the block range."""
        log_filter = self.build_log_filter(name, argument_filters, from_block, to_block)
        logs = await self._client.get_logs(log_filter)
        logger.debug("Fetched %d %s logs", len(logs), name)
        return [self.decode_log(name, log) for log in logs]

    async def get_block_timestamp(self, block_number: int) -> int:
        block = await self._client.get_block(block_number)
        if "timestamp" not in block:
            raise DecodingError(f"Block {block_number} has no timestamp")
        return _quantity(block["timestamp"])
