"""EVM JSON-RPC client with read failover."""
import asyncio
import logging
import ssl
from typing import Any

import aiohttp
import certifi

from ...config import ChainConfig
from ...exceptions import RemoteRejectionError

logger = logging.getLogger(__name__)

TRANSPORT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError)


class EvmClient:
    """EVM node client.

    Read-only methods fail over to the next endpoint on transport errors.
    Transactions are only ever sent to the current endpoint.
    """

    def __init__(self, config: ChainConfig) -> None:
        if not config.rpc_endpoints:
            raise ValueError("At least one RPC endpoint is required")
        self.endpoints = list(config.rpc_endpoints)
        self.timeout = config.rpc_timeout
        self.receipt_poll_interval = config.receipt_poll_interval
        self.current_rpc_index = 0

    async def _post(self, rpc_url: str, method: str, params: list[Any]) -> Any:
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)
        async with aiohttp.ClientSession(connector=connector) as session:
            async with session.post(
                rpc_url,
                json=payload,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                result = await response.json()

        if "error" in result:
            raise RemoteRejectionError.from_rpc_error(result["error"])
        return result.get("result")

    async def rpc_call(self, method: str, params: list[Any]) -> Any:
        """Make a read-only RPC call with fallback to alternative endpoints."""
        last_error: BaseException | None = None
        for attempt in range(len(self.endpoints)):
            rpc_index = (self.current_rpc_index + attempt) % len(self.endpoints)
            rpc_url = self.endpoints[rpc_index]

            try:
                result = await self._post(rpc_url, method, params)
            except TRANSPORT_ERRORS as e:
                last_error = e
                logger.warning("RPC endpoint %s failed: %s", rpc_url, e)
                if attempt < len(self.endpoints) - 1:
                    logger.info("Trying next endpoint...")
                continue

            if rpc_index != self.current_rpc_index:
                logger.info("Switched to RPC endpoint: %s", rpc_url)
                self.current_rpc_index = rpc_index
            return result

        raise last_error

    async def rpc_send(self, method: str, params: list[Any]) -> Any:
        """Make a state-changing RPC call against the current endpoint only."""
        return await self._post(self.endpoints[self.current_rpc_index], method, params)

    async def call(self, transaction: dict[str, Any], block: str = "latest") -> str:
        """Execute a call without creating a transaction."""
        return await self.rpc_call("eth_call", [transaction, block])

    async def send_transaction(self, transaction: dict[str, Any]) -> dict[str, Any]:
        """Submit a transaction from a node-managed account and wait until mined."""
        tx_hash = await self.rpc_send("eth_sendTransaction", [transaction])
        logger.info("Submitted transaction %s", tx_hash)
        return await self.wait_for_receipt(tx_hash)

    async def wait_for_receipt(self, tx_hash: str) -> dict[str, Any]:
        """Poll until the transaction receipt is available."""
        while True:
            receipt = await self.rpc_call("eth_getTransactionReceipt", [tx_hash])
            if receipt:
                return receipt
            logger.debug("Transaction %s not mined yet", tx_hash)
            await asyncio.sleep(self.receipt_poll_interval)

    async def get_logs(self, log_filter: dict[str, Any]) -> list[dict[str, Any]]:
        """Get all logs matching a single filter."""
        return await self.rpc_call("eth_getLogs", [log_filter]) or []

    async def get_block(self, block_number: int) -> dict[str, Any]:
        """Get a block header by number."""
        return await self.rpc_call(
            "eth_getBlockByNumber", [hex(block_number), False]
        ) or {}
