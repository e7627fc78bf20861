"""Exceptions raised by the margin client."""
from __future__ import annotations

from typing import Any


class MarginClientError(Exception):
    """Base exception for all margin client errors."""


class RemoteRejectionError(MarginClientError):
    """The node or the contract rejected the request.

    The message is the node's own message, unchanged.
    """

    def __init__(
        self,
        message: str,
        code: int | None = None,
        data: Any = None,
        transaction_hash: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.data = data
        self.transaction_hash = transaction_hash

    @classmethod
    def from_rpc_error(cls, error: Any) -> RemoteRejectionError:
        """Build from the ``error`` member of a JSON-RPC response."""
        if not isinstance(error, dict):
            return cls(str(error))
        return cls(
            str(error.get("message", error)),
            code=error.get("code"),
            data=error.get("data"),
        )


class DecodingError(MarginClientError):
    """A response did not match the expected ABI or tuple shape."""
