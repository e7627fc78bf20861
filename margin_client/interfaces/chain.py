"""Chain client protocol: the JSON-RPC surface a contract handle needs."""
from typing import Any, Protocol


class ChainClient(Protocol):
    """Abstract interface for EVM node interactions."""

    async def call(self, transaction: dict[str, Any], block: str = "latest") -> str: ...

    async def send_transaction(self, transaction: dict[str, Any]) -> dict[str, Any]: ...

    async def get_logs(self, log_filter: dict[str, Any]) -> list[dict[str, Any]]: ...

    async def get_block(self, block_number: int) -> dict[str, Any]: ...
