"""EVM chain access."""
from .client import EvmClient
from .contract import Contract, EventSpec, FunctionSpec

__all__ = ["Contract", "EventSpec", "EvmClient", "FunctionSpec"]
